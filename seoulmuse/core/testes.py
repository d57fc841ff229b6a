# seoulmuse/core/testes.py

import threading
import unittest
from decimal import Decimal
from unittest.mock import MagicMock, Mock

# Importamos as classes que queremos testar
from seoulmuse.core.catalogo import consultar_catalogo
from seoulmuse.core.entities import (
    Carrinho, Cliente, Cupom, DadosCliente, FiltrosCatalogo, ItemCarrinho, Pedido, PoliticaExclusao,
    Produto, StatusCliente, StatusCupom, StatusPedido, StatusProduto, TipoDesconto,
)
from seoulmuse.core.exceptions import (
    CarrinhoVazioError,
    ChamadoNaoEncontradoError,
    DadosInvalidosError,
    EstoqueInsuficienteError,
    ItemNaoEncontradoError,
    PersistenciaError,
    ProdutoNaoEncontradoError,
    SkuDuplicadoError,
    StatusInvalidoError,
)
from seoulmuse.core.formatadores import exportar_csv, gerar_fatura_texto, nome_arquivo_exportacao
from seoulmuse.core.precificacao import calcular_precos
from seoulmuse.core.use_cases import (
    CriarPedidoUseCase,
    EstatisticasPainelUseCase,
    FinalizarCheckoutUseCase,
    GerarConteudoIAUseCase,
    GerenciarCarrinhoUseCase,
    GerenciarCatalogoUseCase,
    GerenciarChamadosUseCase,
    GerenciarClientesUseCase,
    GerenciarCuponsUseCase,
    GerenciarPedidosAdminUseCase,
    chave_cache,
)
from seoulmuse.infrastructure.armazenamento import (
    ArmazenamentoMemoria,
    AuditoriaRepositoryLocal,
    CarrinhoRepositoryLocal,
    ChamadoRepositoryLocal,
    ClienteRepositoryLocal,
    ColecoesLocais,
    CupomRepositoryLocal,
    PedidoRepositoryLocal,
    ProdutoRepositoryLocal,
)

TAXA = Decimal('0.10')
METODOS_ENVIO = {'standard': Decimal('10.00'), 'express': Decimal('25.00'), 'pickup': Decimal('0.00')}


def montar_loja(semear=False):
    """Monta todos os repositórios da variante local sobre um armazenamento em memória."""
    armazenamento = ArmazenamentoMemoria()
    colecoes = ColecoesLocais(armazenamento, semear=semear, limite_auditoria=500)
    repos = {
        'produto': ProdutoRepositoryLocal(colecoes),
        'pedido': PedidoRepositoryLocal(colecoes),
        'cupom': CupomRepositoryLocal(colecoes),
        'cliente': ClienteRepositoryLocal(colecoes),
        'carrinho': CarrinhoRepositoryLocal(colecoes),
        'auditoria': AuditoriaRepositoryLocal(colecoes),
        'chamado': ChamadoRepositoryLocal(colecoes),
    }
    return armazenamento, repos


def novo_produto(sku='SM-001', nome='Petal Ribbon Silk Blouse', preco='42.00', estoque=5,
                 categoria='Tops', status=StatusProduto.ATIVO, **extras):
    return Produto(sku=sku, nome=nome, preco=Decimal(preco), estoque=estoque,
                   categoria=categoria, status=status, **extras)


def carrinho_com(produto, quantidade, chave='sessao-1'):
    return Carrinho(chave=chave, itens=[
        ItemCarrinho(produto_id=produto.id, nome=produto.nome,
                     preco_unitario=produto.preco, quantidade=quantidade)
    ])


# ====================================================================
# CALCULADORA DE PREÇOS
# ====================================================================

class TestCalculadoraPrecos(unittest.TestCase):

    def test_cupom_percentual_com_frete_e_imposto(self):
        """
        Cenário: carrinho de 42.00 + 35.00, cupom de 20%, frete 10 e imposto de 10%.
        """
        # ARRANGE
        itens = [
            ItemCarrinho(produto_id='g1', nome='Blouse', preco_unitario=Decimal('42.00')),
            ItemCarrinho(produto_id='g2', nome='Skirt', preco_unitario=Decimal('35.00')),
        ]
        cupom = Cupom(codigo='SEOUL20', tipo_desconto=TipoDesconto.PERCENTUAL, valor=Decimal('20'))

        # ACT
        precos = calcular_precos(itens, cupom, Decimal('10'), TAXA)

        # ASSERT
        self.assertEqual(precos.subtotal, Decimal('77.00'))
        self.assertEqual(precos.desconto, Decimal('15.40'))
        self.assertEqual(precos.imposto, Decimal('6.16'))
        self.assertEqual(precos.frete, Decimal('10.00'))
        self.assertEqual(precos.total, Decimal('77.76'))

    def test_desconto_fixo_limitado_ao_subtotal(self):
        """
        Cenário: cupom fixo maior que o subtotal nunca gera total negativo.
        """
        itens = [ItemCarrinho(produto_id='g1', nome='Meia', preco_unitario=Decimal('5.00'))]
        cupom = Cupom(codigo='FIRSTMUSE', tipo_desconto=TipoDesconto.FIXO, valor=Decimal('10'))

        precos = calcular_precos(itens, cupom, Decimal('0'), TAXA)

        self.assertEqual(precos.desconto, Decimal('5.00'))
        self.assertEqual(precos.imposto, Decimal('0.00'))
        self.assertEqual(precos.total, Decimal('0.00'))

    def test_sem_cupom_e_quantidade_multiplicada(self):
        itens = [ItemCarrinho(produto_id='g1', nome='Blouse', preco_unitario=Decimal('42.00'), quantidade=3)]

        precos = calcular_precos(itens, None, Decimal('0'), Decimal('0'))

        self.assertEqual(precos.subtotal, Decimal('126.00'))
        self.assertEqual(precos.desconto, Decimal('0.00'))
        self.assertEqual(precos.total, Decimal('126.00'))

    def test_arredondamento_meio_para_cima(self):
        """
        Cenário: 10% de imposto sobre 0.05 arredonda 0.005 para 0.01.
        """
        itens = [ItemCarrinho(produto_id='g1', nome='Laço', preco_unitario=Decimal('0.05'))]

        precos = calcular_precos(itens, None, Decimal('0'), TAXA)

        self.assertEqual(precos.imposto, Decimal('0.01'))

    def test_frete_negativo_rejeitado(self):
        with self.assertRaises(DadosInvalidosError):
            calcular_precos([], None, Decimal('-1'), TAXA)


# ====================================================================
# CATÁLOGO
# ====================================================================

class TestGerenciarCatalogo(unittest.TestCase):

    def setUp(self):
        """
        Cada teste usa a variante local sem sementes, sobre um dicionário em memória.
        """
        self.armazenamento, self.repos = montar_loja()
        self.use_case = GerenciarCatalogoUseCase(self.repos['produto'], self.repos['auditoria'])
        self.produto = self.use_case.salvar(novo_produto(), autor='admin@seoulmuse.com')

    def test_sku_duplicado_ignora_maiusculas_e_espacos(self):
        """
        Cenário: gravar um novo produto com 'sm-001' quando 'SM-001' já existe.
        """
        # ACT e ASSERT
        with self.assertRaises(SkuDuplicadoError):
            self.use_case.salvar(novo_produto(sku=' sm-001 ', nome='Outro'))

        self.assertEqual(len(self.use_case.listar(FiltrosCatalogo(status='All'))), 1)

    def test_atualizar_o_proprio_produto_mantem_o_sku(self):
        """
        Cenário: gravar duas vezes o mesmo produto não muda nada além da data de atualização.
        """
        # ACT
        primeiro = self.use_case.salvar(self.use_case.detalhar(self.produto.id))
        segundo = self.use_case.salvar(self.use_case.detalhar(self.produto.id))

        # ASSERT
        self.assertEqual(primeiro.sku, segundo.sku)
        self.assertEqual(primeiro.estoque, segundo.estoque)
        self.assertEqual(primeiro.preco, segundo.preco)
        self.assertEqual(primeiro.data_criacao, segundo.data_criacao)
        self.assertIsNotNone(segundo.data_atualizacao)

    def test_validacao_de_campos_obrigatorios(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.salvar(novo_produto(sku='  '))
        with self.assertRaises(DadosInvalidosError):
            self.use_case.salvar(novo_produto(sku='SM-009', preco='-1.00'))
        with self.assertRaises(DadosInvalidosError):
            self.use_case.salvar(novo_produto(sku='SM-009', estoque=-3))

    def test_ajuste_zero_nao_altera_o_armazenamento(self):
        """
        Cenário: ajustar o estoque em 0 é idempotente e não gera auditoria.
        """
        # ARRANGE
        antes = dict(self.armazenamento.dados)

        # ACT
        self.use_case.ajustar_estoque(self.produto.id, 0)

        # ASSERT
        self.assertEqual(self.armazenamento.dados, antes)

    def test_ajuste_negativo_limita_em_zero_e_audita(self):
        # ACT
        self.use_case.ajustar_estoque(self.produto.id, -20, autor='admin@seoulmuse.com')

        # ASSERT
        self.assertEqual(self.use_case.detalhar(self.produto.id).estoque, 0)
        registro = self.repos['auditoria'].listar(self.produto.id)[0]
        self.assertEqual(registro.acao, 'STOCK_ADJUST')
        self.assertEqual(registro.mensagem, 'Stock adjusted by -20 (From 5 to 0)')

    def test_ajuste_em_produto_inexistente_e_ignorado(self):
        antes = dict(self.armazenamento.dados)

        self.use_case.ajustar_estoque('prod-inexistente', 5)

        self.assertEqual(self.armazenamento.dados, antes)

    def test_ajuste_nao_inteiro_rejeitado(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.ajustar_estoque(self.produto.id, 1.5)
        with self.assertRaises(DadosInvalidosError):
            self.use_case.ajustar_estoque(self.produto.id, True)

    def test_arquivar_mantem_o_sku_ocupado(self):
        """
        Cenário: o produto arquivado some da listagem padrão, mas o SKU continua reservado.
        """
        # ACT
        self.use_case.deletar(self.produto.id, PoliticaExclusao.ARQUIVAR)

        # ASSERT
        self.assertEqual(self.use_case.listar(), [])
        self.assertEqual(self.use_case.detalhar(self.produto.id).status, StatusProduto.ARQUIVADO)
        with self.assertRaises(SkuDuplicadoError):
            self.use_case.salvar(novo_produto(sku='SM-001'))

    def test_remocao_fisica_libera_o_sku_e_audita(self):
        # ACT
        self.use_case.deletar(self.produto.id, PoliticaExclusao.REMOVER)

        # ASSERT
        with self.assertRaises(ProdutoNaoEncontradoError):
            self.use_case.detalhar(self.produto.id)
        self.assertIsNotNone(self.use_case.salvar(novo_produto(sku='sm-001')).id)
        acoes = [r.acao for r in self.repos['auditoria'].listar(self.produto.id)]
        self.assertEqual(acoes, ['DELETE', 'CREATE'])

    def test_deletar_produto_inexistente(self):
        with self.assertRaises(ProdutoNaoEncontradoError):
            self.use_case.deletar('prod-inexistente', PoliticaExclusao.REMOVER)


class TestConsultaCatalogo(unittest.TestCase):
    """Filtros e ordenação aplicados em memória (mesmas regras da variante relacional)."""

    def setUp(self):
        self.produtos = [
            novo_produto(id='b', sku='SM-B', nome='Knit', preco='50.00', estoque=9),
            novo_produto(id='a', sku='SM-A', nome='Skirt', preco='50.00', estoque=0, categoria='Skirts'),
            novo_produto(id='c', sku='SM-C', nome='Slip Dress', preco='65.00', estoque=10, colecao='Moonlight'),
            novo_produto(id='d', sku='SM-D', nome='Old Blouse', preco='10.00', estoque=3,
                         status=StatusProduto.ARQUIVADO),
        ]

    def test_empate_de_preco_desfeito_pelo_id_nas_duas_ordens(self):
        asc = consultar_catalogo(self.produtos, FiltrosCatalogo(ordenar_por='price', ordem='asc'))
        desc = consultar_catalogo(self.produtos, FiltrosCatalogo(ordenar_por='price', ordem='desc'))

        self.assertEqual([p.id for p in asc], ['a', 'b', 'c'])
        self.assertEqual([p.id for p in desc], ['c', 'a', 'b'])

    def test_estoque_baixo_e_esgotado(self):
        baixo = consultar_catalogo(self.produtos, FiltrosCatalogo(nivel_estoque='Low'))
        esgotado = consultar_catalogo(self.produtos, FiltrosCatalogo(nivel_estoque='Out'))

        # 10 unidades já não contam como estoque baixo
        self.assertEqual([p.id for p in baixo], ['b'])
        self.assertEqual([p.id for p in esgotado], ['a'])

    def test_busca_por_nome_sku_ou_colecao(self):
        por_colecao = consultar_catalogo(self.produtos, FiltrosCatalogo(busca='moon'))
        por_sku = consultar_catalogo(self.produtos, FiltrosCatalogo(busca='sm-a'))

        self.assertEqual([p.id for p in por_colecao], ['c'])
        self.assertEqual([p.id for p in por_sku], ['a'])

    def test_status_all_inclui_arquivados(self):
        todos = consultar_catalogo(self.produtos, FiltrosCatalogo(status='All', ordenar_por='name', ordem='asc'))

        self.assertEqual([p.id for p in todos], ['b', 'd', 'a', 'c'])

    def test_criterio_de_ordenacao_invalido(self):
        with self.assertRaises(DadosInvalidosError):
            consultar_catalogo(self.produtos, FiltrosCatalogo(ordenar_por='color'))


class TestFormatadores(unittest.TestCase):

    def test_csv_escapa_delimitador_e_aspas(self):
        """
        Cenário: nomes com vírgula e aspas ficam entre aspas, com as aspas internas duplicadas.
        """
        produto = novo_produto(nome='Satin "Moon", Slip', colecao='Night')

        conteudo = exportar_csv([produto])

        linhas = conteudo.splitlines()
        self.assertEqual(linhas[0], 'SKU,Name,Category,Collection,Stock,Price,Status')
        self.assertEqual(linhas[1], 'SM-001,"Satin ""Moon"", Slip",Tops,Night,5,42.00,Active')

    def test_nome_do_arquivo_de_exportacao(self):
        from datetime import date
        self.assertEqual(nome_arquivo_exportacao(date(2024, 3, 9)), 'inventario-2024-03-09.csv')

    def test_fatura_lista_itens_e_totais(self):
        pedido = Pedido(
            id='ORD-ABCD1234', nome_cliente='Min-ji Kim', email_cliente='minji@kpop.kr',
            itens=[], subtotal=Decimal('77.00'), imposto=Decimal('6.16'), desconto=Decimal('15.40'),
            frete=Decimal('10.00'), total=Decimal('77.76'), status=StatusPedido.PAGO,
            codigo_rastreio='SM-TRK-000123',
        )

        fatura = gerar_fatura_texto(pedido)

        self.assertIn('INVOICE ORD-ABCD1234', fatura)
        self.assertIn('Total: $77.76', fatura)
        self.assertIn('Tracking: SM-TRK-000123', fatura)


# ====================================================================
# CARRINHO
# ====================================================================

class TestGerenciarCarrinho(unittest.TestCase):

    def setUp(self):
        self.carrinho_repo_mock = Mock()
        self.produto_repo_mock = Mock()
        self.use_case = GerenciarCarrinhoUseCase(self.carrinho_repo_mock, self.produto_repo_mock)
        self.produto = novo_produto(id='g1')

    def test_adicionar_item_congela_o_preco(self):
        """
        Cenário: a linha do carrinho guarda o preço do produto no momento da adição.
        """
        # ARRANGE
        self.produto_repo_mock.buscar_por_id.return_value = self.produto

        # ACT
        self.use_case.adicionar_item('sessao-1', 'g1', 2)

        # ASSERT
        chave, item = self.carrinho_repo_mock.adicionar_item.call_args[0]
        self.assertEqual(chave, 'sessao-1')
        self.assertEqual(item.preco_unitario, Decimal('42.00'))
        self.assertEqual(item.quantidade, 2)
        self.assertTrue(item.id_linha.startswith('linha-'))

    def test_adicionar_mais_que_o_estoque_falha(self):
        self.produto_repo_mock.buscar_por_id.return_value = self.produto

        with self.assertRaises(EstoqueInsuficienteError):
            self.use_case.adicionar_item('sessao-1', 'g1', 6)

        self.carrinho_repo_mock.adicionar_item.assert_not_called()

    def test_produto_em_rascunho_nao_entra_no_carrinho(self):
        self.produto_repo_mock.buscar_por_id.return_value = novo_produto(status=StatusProduto.RASCUNHO)

        with self.assertRaises(ProdutoNaoEncontradoError):
            self.use_case.adicionar_item('sessao-1', 'g1')

    def test_quantidade_nao_positiva(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.adicionar_item('sessao-1', 'g1', 0)

    def test_remover_linha_inexistente(self):
        self.carrinho_repo_mock.buscar.return_value = Carrinho(chave='sessao-1')

        with self.assertRaises(ItemNaoEncontradoError):
            self.use_case.remover_item('sessao-1', 'linha-x')


# ====================================================================
# MOTOR DE PEDIDOS
# ====================================================================

class TestCriarPedido(unittest.TestCase):

    def setUp(self):
        _, self.repos = montar_loja()
        self.catalogo = GerenciarCatalogoUseCase(self.repos['produto'], self.repos['auditoria'])
        self.produto = self.catalogo.salvar(novo_produto(estoque=5))
        self.use_case = CriarPedidoUseCase(self.repos['produto'], self.repos['pedido'], self.repos['auditoria'])
        self.dados = DadosCliente(nome='Soo-young Park', email=' S.Park@Example.com ')

    def _precos(self, carrinho):
        return calcular_precos(carrinho.itens, None, Decimal('0'), TAXA)

    def test_pedido_que_esgota_o_estoque_e_o_seguinte_falha(self):
        """
        Cenário: estoque 5, pedido de 5 deixa 0; um novo pedido de 1 falha e o estoque continua 0.
        """
        # ARRANGE
        carrinho = carrinho_com(self.produto, 5)

        # ACT
        pedido = self.use_case.executar(carrinho, self.dados, self._precos(carrinho))

        # ASSERT
        self.assertEqual(self.catalogo.detalhar(self.produto.id).estoque, 0)
        self.assertEqual(pedido.status, StatusPedido.PAGO)
        self.assertRegex(pedido.id, r'^ORD-[0-9A-F]{8}$')
        self.assertRegex(pedido.codigo_rastreio, r'^SM-TRK-\d{6}$')
        self.assertEqual(pedido.email_cliente, 's.park@example.com')

        outro = carrinho_com(self.produto, 1)
        with self.assertRaises(EstoqueInsuficienteError):
            self.use_case.executar(outro, self.dados, self._precos(outro))
        self.assertEqual(self.catalogo.detalhar(self.produto.id).estoque, 0)
        self.assertEqual(len(self.repos['pedido'].listar()), 1)

    def test_linhas_repetidas_somam_quantidade(self):
        """
        Cenário: duas linhas de 3 unidades do mesmo produto com estoque 5 são rejeitadas.
        """
        carrinho = carrinho_com(self.produto, 3)
        carrinho.itens += carrinho_com(self.produto, 3).itens

        with self.assertRaises(EstoqueInsuficienteError):
            self.use_case.executar(carrinho, self.dados, self._precos(carrinho))

        self.assertEqual(self.catalogo.detalhar(self.produto.id).estoque, 5)

    def test_falha_em_uma_linha_nao_baixa_nenhuma(self):
        """
        Cenário: o segundo produto não tem estoque; o primeiro também não pode ser baixado.
        """
        escasso = self.catalogo.salvar(novo_produto(sku='SM-002', nome='Skirt', estoque=1))
        carrinho = carrinho_com(self.produto, 2)
        carrinho.itens += carrinho_com(escasso, 2).itens

        with self.assertRaises(EstoqueInsuficienteError):
            self.use_case.executar(carrinho, self.dados, self._precos(carrinho))

        self.assertEqual(self.catalogo.detalhar(self.produto.id).estoque, 5)
        self.assertEqual(self.catalogo.detalhar(escasso.id).estoque, 1)

    def test_produto_removido_do_catalogo(self):
        carrinho = Carrinho(chave='s', itens=[
            ItemCarrinho(produto_id='prod-fantasma', nome='Fantasma', preco_unitario=Decimal('1.00'))
        ])

        with self.assertRaises(ProdutoNaoEncontradoError):
            self.use_case.executar(carrinho, self.dados, self._precos(carrinho))

    def test_carrinho_vazio(self):
        with self.assertRaises(CarrinhoVazioError):
            self.use_case.executar(Carrinho(chave='s'), self.dados, self._precos(Carrinho(chave='s')))

    def test_pedidos_concorrentes_pela_ultima_unidade(self):
        """
        Cenário: dois pedidos simultâneos de 1 unidade para um produto com estoque 1.
        Exatamente um deve ser aceito.
        """
        # ARRANGE
        ultimo = self.catalogo.salvar(novo_produto(sku='SM-LAST', nome='Last One', estoque=1))
        largada = threading.Barrier(2)
        sucessos, falhas = [], []

        def comprar():
            carrinho = carrinho_com(ultimo, 1)
            largada.wait()
            try:
                sucessos.append(self.use_case.executar(carrinho, self.dados, self._precos(carrinho)))
            except EstoqueInsuficienteError as e:
                falhas.append(e)

        # ACT
        threads = [threading.Thread(target=comprar) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # ASSERT
        self.assertEqual(len(sucessos), 1)
        self.assertEqual(len(falhas), 1)
        self.assertEqual(self.catalogo.detalhar(ultimo.id).estoque, 0)


class TestFinalizarCheckout(unittest.TestCase):

    def setUp(self):
        _, self.repos = montar_loja(semear=True)
        criar_pedido = CriarPedidoUseCase(self.repos['produto'], self.repos['pedido'], self.repos['auditoria'])
        self.use_case = FinalizarCheckoutUseCase(
            carrinho_repo=self.repos['carrinho'],
            cupom_repo=self.repos['cupom'],
            cliente_repo=self.repos['cliente'],
            criar_pedido=criar_pedido,
            taxa_imposto=TAXA,
            metodos_envio=METODOS_ENVIO,
        )
        self.carrinho = GerenciarCarrinhoUseCase(self.repos['carrinho'], self.repos['produto'])
        self.carrinho.adicionar_item('sessao-1', 'g1')
        self.carrinho.adicionar_item('sessao-1', 'g2')
        self.dados = DadosCliente(nome='Min-ji Kim', email='minji@kpop.kr', forma_pagamento='KakaoPay')

    def test_checkout_completo_com_cupom(self):
        """
        Cenário: checkout com SEOUL20 e frete padrão grava o pedido com os valores cotados,
        conta o uso do cupom, atualiza o cliente e esvazia o carrinho.
        """
        # ARRANGE
        precos, cupom = self.use_case.cotar('sessao-1', 'seoul20', 'standard')

        # ACT
        pedido = self.use_case.executar('sessao-1', self.dados, codigo_cupom=' seoul20 ', metodo_envio='standard')

        # ASSERT
        self.assertEqual(cupom.codigo, 'SEOUL20')
        self.assertEqual(pedido.total, precos.total)
        self.assertEqual(pedido.total, Decimal('77.76'))
        self.assertEqual(pedido.codigo_cupom, 'SEOUL20')
        self.assertEqual(self.repos['cupom'].buscar_por_codigo('SEOUL20').quantidade_usos, 146)

        cliente = self.repos['cliente'].buscar_por_email('minji@kpop.kr')
        self.assertEqual(cliente.total_pedidos, 46)
        self.assertEqual(cliente.total_gasto, Decimal('5277.76'))

        self.assertEqual(self.repos['carrinho'].buscar('sessao-1').itens, [])
        self.assertEqual(self.repos['produto'].buscar_por_id('g1').estoque, 44)

    def test_falha_na_contabilidade_nao_deixa_o_carrinho_cheio(self):
        """
        Cenário: o pedido foi gravado mas a contagem de uso do cupom falha;
        o carrinho já está vazio, então repetir o checkout não duplica a compra.
        """
        # ARRANGE
        self.repos['cupom'].registrar_uso = Mock(side_effect=PersistenciaError("cache indisponível"))

        # ACT
        with self.assertRaises(PersistenciaError):
            self.use_case.executar('sessao-1', self.dados, codigo_cupom='SEOUL20')

        # ASSERT
        self.assertEqual(self.repos['carrinho'].buscar('sessao-1').itens, [])
        with self.assertRaises(CarrinhoVazioError):
            self.use_case.executar('sessao-1', self.dados, codigo_cupom='SEOUL20')

    def test_sequencia_roda_dentro_da_unidade_de_trabalho(self):
        # ARRANGE
        eventos = []
        unidade = MagicMock()
        unidade.return_value.__enter__.side_effect = lambda: eventos.append('inicio')
        unidade.return_value.__exit__.side_effect = lambda *args: eventos.append('fim')
        self.use_case.unidade_de_trabalho = unidade
        limpar_original = self.repos['carrinho'].limpar
        self.repos['carrinho'].limpar = Mock(side_effect=lambda chave: eventos.append('limpar') or limpar_original(chave))
        registrar_compra_original = self.repos['cliente'].registrar_compra
        self.repos['cliente'].registrar_compra = Mock(
            side_effect=lambda *args: eventos.append('cliente') or registrar_compra_original(*args)
        )

        # ACT
        self.use_case.executar('sessao-1', self.dados)

        # ASSERT
        self.assertEqual(eventos, ['inicio', 'limpar', 'cliente', 'fim'])

    def test_cupom_invalido_interrompe_o_checkout(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.executar('sessao-1', self.dados, codigo_cupom='NOPE')

        self.assertEqual(len(self.repos['carrinho'].buscar('sessao-1').itens), 2)
        self.assertEqual(self.repos['produto'].buscar_por_id('g1').estoque, 45)

    def test_metodo_de_envio_desconhecido(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.cotar('sessao-1', metodo_envio='drone')

    def test_cliente_bloqueado_nao_compra(self):
        cliente = self.repos['cliente'].buscar_por_email('minji@kpop.kr')
        cliente.status = StatusCliente.BLOQUEADO
        self.repos['cliente'].salvar(cliente)

        with self.assertRaises(DadosInvalidosError):
            self.use_case.executar('sessao-1', self.dados)

    def test_carrinho_vazio(self):
        with self.assertRaises(CarrinhoVazioError):
            self.use_case.executar('sessao-vazia', self.dados)


# ====================================================================
# ADMINISTRAÇÃO DE PEDIDOS
# ====================================================================

class TestGerenciarPedidosAdmin(unittest.TestCase):

    def setUp(self):
        _, self.repos = montar_loja(semear=True)
        self.use_case = GerenciarPedidosAdminUseCase(self.repos['pedido'], self.repos['auditoria'])

    def test_fluxo_de_entrega_e_devolucao(self):
        """
        Cenário: Paid -> Shipped -> Delivered e, depois de entregue, devolução solicitada.
        """
        # ACT
        self.use_case.atualizar_status('ORD-9901', StatusPedido.ENVIADO)
        self.use_case.atualizar_status('ORD-9901', 'Delivered')
        pedido = self.use_case.solicitar_devolucao('ORD-9901', autor='s.park@example.com')

        # ASSERT
        self.assertEqual(pedido.status, StatusPedido.DEVOLUCAO_SOLICITADA)
        self.assertEqual(self.use_case.detalhar_pedido('ORD-9901').status, StatusPedido.DEVOLUCAO_SOLICITADA)
        mensagens = [r.mensagem for r in self.repos['auditoria'].listar('ORD-9901')]
        self.assertEqual(mensagens[0], 'Status changed from Delivered to ReturnRequested')
        self.assertEqual(len(mensagens), 3)

    def test_devolucao_antes_da_entrega_rejeitada_no_modo_estrito(self):
        with self.assertRaises(StatusInvalidoError):
            self.use_case.solicitar_devolucao('ORD-9901')

        self.assertEqual(self.use_case.detalhar_pedido('ORD-9901').status, StatusPedido.PAGO)

    def test_modo_permissivo_aceita_qualquer_transicao(self):
        """
        Cenário: com transições livres, um pedido pago pode ir direto para devolução.
        """
        permissivo = GerenciarPedidosAdminUseCase(
            self.repos['pedido'], self.repos['auditoria'], transicoes_estritas=False
        )

        pedido = permissivo.solicitar_devolucao('ORD-9901')

        self.assertEqual(pedido.status, StatusPedido.DEVOLUCAO_SOLICITADA)

    def test_estado_terminal_nao_tem_saida(self):
        self.use_case.atualizar_status('ORD-9901', StatusPedido.REEMBOLSADO)

        with self.assertRaises(StatusInvalidoError):
            self.use_case.atualizar_status('ORD-9901', StatusPedido.PAGO)

    def test_mesmo_status_nao_audita(self):
        self.use_case.atualizar_status('ORD-9901', StatusPedido.PAGO)

        self.assertEqual(self.repos['auditoria'].listar('ORD-9901'), [])

    def test_pedido_desconhecido_e_ignorado(self):
        self.assertIsNone(self.use_case.atualizar_status('ORD-0000', StatusPedido.ENVIADO))

    def test_status_desconhecido(self):
        with self.assertRaises(StatusInvalidoError):
            self.use_case.atualizar_status('ORD-9901', 'Lost')

    def test_listagem_mais_recente_primeiro_e_filtro(self):
        self.assertEqual([p.id for p in self.use_case.listar_todos()], ['ORD-9902', 'ORD-9901'])
        self.assertEqual([p.id for p in self.use_case.listar_todos('Shipped')], ['ORD-9902'])

    def test_atualizar_rastreio(self):
        self.use_case.atualizar_rastreio('ORD-9902', ' SM-TRK-424242 ')

        self.assertEqual(self.use_case.detalhar_pedido('ORD-9902').codigo_rastreio, 'SM-TRK-424242')
        with self.assertRaises(DadosInvalidosError):
            self.use_case.atualizar_rastreio('ORD-9902', '   ')

    def test_concorrencia_detectada_pela_atualizacao_condicional(self):
        """
        Cenário: o repositório recusa a gravação porque o status mudou desde a leitura.
        """
        pedido_repo_mock = Mock()
        pedido_repo_mock.buscar_por_id.return_value = self.repos['pedido'].buscar_por_id('ORD-9901')
        pedido_repo_mock.atualizar_status.return_value = False
        use_case = GerenciarPedidosAdminUseCase(pedido_repo_mock, Mock())

        with self.assertRaises(StatusInvalidoError):
            use_case.atualizar_status('ORD-9901', StatusPedido.ENVIADO)

        pedido_repo_mock.atualizar_status.assert_called_once_with(
            'ORD-9901', StatusPedido.ENVIADO, status_esperado=StatusPedido.PAGO
        )


# ====================================================================
# CUPONS, CLIENTES E SUPORTE
# ====================================================================

class TestGerenciarCupons(unittest.TestCase):

    def setUp(self):
        _, self.repos = montar_loja(semear=True)
        self.use_case = GerenciarCuponsUseCase(self.repos['cupom'], self.repos['auditoria'])

    def test_busca_sem_diferenciar_maiusculas(self):
        self.assertEqual(self.use_case.buscar_aplicavel('  seoul20 ').id, 'cp1')
        self.assertIsNone(self.use_case.buscar_aplicavel('NOPE'))
        self.assertIsNone(self.use_case.buscar_aplicavel(''))

    def test_cupom_expirado_nao_se_aplica(self):
        cupom = self.repos['cupom'].buscar_por_codigo('FIRSTMUSE')
        cupom.status = StatusCupom.EXPIRADO
        self.use_case.salvar(cupom)

        self.assertIsNone(self.use_case.buscar_aplicavel('FIRSTMUSE'))

    def test_criar_cupom_normaliza_codigo_e_audita(self):
        cupom = self.use_case.salvar(Cupom(codigo=' spring10 ', tipo_desconto=TipoDesconto.FIXO, valor=Decimal('10')))

        self.assertEqual(cupom.codigo, 'SPRING10')
        self.assertEqual(self.repos['auditoria'].listar(cupom.id)[0].acao, 'COUPON_CREATE')

    def test_validacoes(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.salvar(Cupom(codigo='MAX', tipo_desconto=TipoDesconto.PERCENTUAL, valor=Decimal('120')))
        with self.assertRaises(DadosInvalidosError):
            self.use_case.salvar(Cupom(codigo='seoul20', tipo_desconto=TipoDesconto.FIXO, valor=Decimal('5')))

    def test_deletar(self):
        self.use_case.deletar('cp2')

        self.assertIsNone(self.use_case.buscar_aplicavel('FIRSTMUSE'))
        self.assertEqual([c.codigo for c in self.use_case.listar()], ['SEOUL20'])


class TestGerenciarClientes(unittest.TestCase):

    def setUp(self):
        _, self.repos = montar_loja(semear=True)
        self.use_case = GerenciarClientesUseCase(
            self.repos['cliente'], self.repos['produto'],
            gerar_hash=lambda senha: f"hash:{senha}",
            verificar_hash=lambda senha, hash_: hash_ == f"hash:{senha}",
        )

    def test_registrar_e_autenticar(self):
        cliente = self.use_case.registrar('Ha-eun Lee', ' HaEun@Example.com ', 'segredo123')

        self.assertEqual(cliente.email, 'haeun@example.com')
        self.assertTrue(cliente.id.startswith('cust-'))
        self.assertEqual(self.use_case.autenticar('haeun@example.com', 'segredo123').id, cliente.id)
        self.assertIsNone(self.use_case.autenticar('haeun@example.com', 'errada'))

    def test_email_duplicado(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.registrar('Outra', 'MINJI@kpop.kr', 'segredo123')

    def test_cliente_bloqueado_nao_autentica(self):
        cliente = self.use_case.registrar('Ha-eun Lee', 'haeun@example.com', 'segredo123')
        self.use_case.atualizar_status(cliente.id, 'Blocked')

        self.assertIsNone(self.use_case.autenticar('haeun@example.com', 'segredo123'))

    def test_alternar_desejo(self):
        self.assertEqual(self.use_case.alternar_desejo('c1', 'g3'), ['g3'])
        self.assertEqual(self.use_case.alternar_desejo('c1', 'g3'), [])
        with self.assertRaises(ProdutoNaoEncontradoError):
            self.use_case.alternar_desejo('c1', 'prod-fantasma')


class TestRemocaoFisicaEmCascata(unittest.TestCase):

    def test_remocao_limpa_carrinhos_e_listas_de_desejos(self):
        """
        Cenário: a remoção física do produto tira o id de todo carrinho e lista de desejos.
        """
        # ARRANGE
        _, repos = montar_loja(semear=True)
        carrinho = GerenciarCarrinhoUseCase(repos['carrinho'], repos['produto'])
        carrinho.adicionar_item('sessao-1', 'g6')
        carrinho.adicionar_item('sessao-1', 'g1')
        repos['cliente'].alternar_desejo('c2', 'g6')
        catalogo = GerenciarCatalogoUseCase(repos['produto'], repos['auditoria'])

        # ACT
        catalogo.deletar('g6', PoliticaExclusao.REMOVER)

        # ASSERT
        self.assertEqual([i.produto_id for i in repos['carrinho'].buscar('sessao-1').itens], ['g1'])
        self.assertEqual(repos['cliente'].buscar_por_id('c2').lista_desejos, [])


class TestGerenciarChamados(unittest.TestCase):

    def setUp(self):
        _, self.repos = montar_loja()
        self.use_case = GerenciarChamadosUseCase(self.repos['chamado'])

    def test_abrir_responder_e_resolver(self):
        chamado = self.use_case.abrir('c1', 'Soo-young Park', 'Sizing', 'Does the skirt run small?',
                                      pedido_id='ORD-9901', prioridade='High')

        self.use_case.responder(chamado.id, 'admin@seoulmuse.com', 'It runs true to size.', admin=True)
        self.use_case.adicionar_nota(chamado.id, 'Customer is a VIP.')
        atualizado = self.use_case.atualizar_status(chamado.id, 'Resolved')

        self.assertRegex(chamado.id, r'^TKT-[0-9A-F]{8}$')
        self.assertEqual(atualizado.status.value, 'Resolved')
        self.assertEqual(len(atualizado.respostas), 1)
        self.assertTrue(atualizado.respostas[0].admin)
        self.assertTrue(atualizado.notas_internas[0].endswith('Customer is a VIP.'))

    def test_mensagem_vazia_e_chamado_inexistente(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.abrir('c1', 'Park', 'Sizing', '   ')
        with self.assertRaises(ChamadoNaoEncontradoError):
            self.use_case.responder('TKT-00000000', 'admin', 'Olá')


# ====================================================================
# PAINEL E IA
# ====================================================================

class TestPainel(unittest.TestCase):

    def test_estatisticas_sobre_os_dados_iniciais(self):
        _, repos = montar_loja(semear=True)

        estatisticas = EstatisticasPainelUseCase(repos['pedido'], repos['produto']).executar()

        self.assertEqual(estatisticas['receita_total'], Decimal('202.00'))
        self.assertEqual(estatisticas['total_pedidos'], 2)
        self.assertEqual(estatisticas['envios_pendentes'], 1)
        self.assertEqual(estatisticas['itens_estoque_baixo'], 0)

    def test_descricao_usa_chave_deterministica_e_fallback(self):
        gerador_mock = Mock()
        gerador_mock.gerar.return_value = 'Texto gerado'
        produto = novo_produto(categoria='Dresses', nome='Moonlight Satin Slip')

        texto = GerarConteudoIAUseCase(gerador_mock).descricao_produto(produto)

        self.assertEqual(texto, 'Texto gerado')
        chave, prompt = gerador_mock.gerar.call_args[0]
        self.assertEqual(chave, chave_cache('descricao', 'Moonlight Satin Slip', 'Dresses'))
        self.assertIn('Moonlight Satin Slip', prompt)
        self.assertTrue(gerador_mock.gerar.call_args[1]['fallback'])


if __name__ == '__main__':
    unittest.main()
