import json
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest.mock import Mock, patch

import requests
from django.contrib.auth import get_user_model
from django.core.cache import caches
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase

# Importamos as classes que queremos testar
from seoulmuse.carrinho.models import ItemCarrinho as ItemCarrinhoModel
from seoulmuse.catalog.models import Produto as ProdutoModel
from seoulmuse.core.entities import (
    Chamado, Cliente, Cupom, FiltrosCatalogo, ItemCarrinho, ItemPedido, Pedido, Produto, RegistroAuditoria,
    StatusPedido, StatusProduto, TipoDesconto,
)
from seoulmuse.core.exceptions import (
    DadosInvalidosError,
    EstoqueInsuficienteError,
    PersistenciaError,
    ProdutoNaoEncontradoError,
    SkuDuplicadoError,
)
from seoulmuse.infrastructure.armazenamento import (
    ArmazenamentoCache,
    ArmazenamentoMemoria,
    AuditoriaRepositoryLocal,
    ColecoesLocais,
    ProdutoRepositoryLocal,
)
from seoulmuse.infrastructure.gateways import ServicoTextoIA
from seoulmuse.infrastructure.repositories import (
    AuditoriaRepositoryDjango,
    CarrinhoRepositoryDjango,
    ChamadoRepositoryDjango,
    ClienteRepositoryDjango,
    CupomRepositoryDjango,
    PedidoRepositoryDjango,
    ProdutoRepositoryDjango,
)
from seoulmuse.suporte.models import RegistroAuditoria as RegistroAuditoriaModel
from seoulmuse.vendas.models import Cliente as ClienteModel, Cupom as CupomModel, Pedido as PedidoModel


def criar_produto_model(id, sku, estoque=10, preco='50.00', **extras):
    return ProdutoModel.objects.create(
        id=id, sku=sku, nome=extras.pop('nome', f'Produto {sku}'), preco=Decimal(preco), estoque=estoque,
        categoria=extras.pop('categoria', 'Tops'), status=extras.pop('status', StatusProduto.ATIVO.value),
        **extras
    )


def novo_pedido(pedido_id, itens, status=StatusPedido.PAGO):
    return Pedido(
        id=pedido_id,
        nome_cliente='Min-ji Kim',
        email_cliente='minji@kpop.kr',
        itens=itens,
        subtotal=Decimal('100.00'),
        imposto=Decimal('10.00'),
        desconto=Decimal('0.00'),
        frete=Decimal('10.00'),
        total=Decimal('120.00'),
        status=status,
        endereco_entrega={'rua': '12 Seongsu-ro', 'cidade': 'Seoul'},
    )


# ====================================================================
# REPOSITÓRIOS DO DJANGO ORM
# ====================================================================

class ProdutoRepositoryDjangoTestCase(TestCase):

    def setUp(self):
        """
        Configura o ambiente para cada teste, criando uma instância do repositório
        e um produto real no banco de dados.
        """
        self.repository = ProdutoRepositoryDjango()
        self.produto_model = criar_produto_model('g1', 'SM-001', estoque=5)

    def test_buscar_por_id_com_sucesso(self):
        """
        Cenário: Verificar se o repositório consegue encontrar um produto existente.
        """
        # ACT
        produto = self.repository.buscar_por_id('g1')

        # ASSERT
        self.assertIsInstance(produto, Produto)
        self.assertEqual(produto.sku, 'SM-001')
        self.assertEqual(produto.status, StatusProduto.ATIVO)

    def test_buscar_por_id_nao_encontrado(self):
        self.assertIsNone(self.repository.buscar_por_id('id-nao-existente'))

    def test_salvar_novo_gera_id_e_data(self):
        produto = self.repository.salvar(Produto(sku='SM-002', nome='Skirt', preco=Decimal('35.00'),
                                                 estoque=3, categoria='Skirts'))

        self.assertTrue(produto.id.startswith('prod-'))
        self.assertIsNotNone(produto.data_criacao)
        self.assertEqual(ProdutoModel.objects.get(pk=produto.id).sku_normalizado, 'sm-002')

    def test_sku_duplicado_com_outra_caixa(self):
        """
        Cenário: a coluna única do SKU normalizado rejeita 'sm-001' quando 'SM-001' já existe,
        e o erro aponta o SKU gravado e o produto que o detém.
        """
        with self.assertRaises(SkuDuplicadoError) as contexto:
            self.repository.salvar(Produto(sku=' sm-001', nome='Outro', preco=Decimal('1.00'),
                                           estoque=1, categoria='Tops'))

        self.assertEqual(ProdutoModel.objects.count(), 1)
        self.assertIn("'SM-001'", contexto.exception.message)
        self.assertEqual(contexto.exception.produto_id, 'g1')

    def test_atualizacao_nao_sobrescreve_o_estoque(self):
        """
        Cenário: uma venda baixa o estoque depois que o painel leu o produto;
        a gravação feita com a leitura antiga não devolve as unidades vendidas.
        """
        # ARRANGE
        leitura_antiga = self.repository.buscar_por_id('g1')
        self.repository.ajustar_estoque('g1', -2)
        leitura_antiga.preco = Decimal('45.00')

        # ACT
        atualizado = self.repository.salvar(leitura_antiga)

        # ASSERT
        self.assertEqual(atualizado.estoque, 3)
        self.assertEqual(atualizado.preco, Decimal('45.00'))
        self.assertEqual(ProdutoModel.objects.get(pk='g1').estoque, 3)

    def test_atualizar_preserva_data_de_criacao(self):
        produto = self.repository.buscar_por_id('g1')
        produto.preco = Decimal('45.00')

        atualizado = self.repository.salvar(produto)

        self.assertEqual(atualizado.preco, Decimal('45.00'))
        self.assertEqual(atualizado.data_criacao, self.produto_model.data_criacao)
        self.assertIsNotNone(atualizado.data_atualizacao)

    def test_listar_desempata_pelo_id(self):
        """
        Cenário: produtos com o mesmo preço saem em ordem crescente de id, nas duas direções.
        """
        criar_produto_model('a', 'SM-A', preco='50.00')
        criar_produto_model('b', 'SM-B', preco='50.00')
        ProdutoModel.objects.filter(pk='g1').update(preco=Decimal('99.00'))

        asc = self.repository.listar(FiltrosCatalogo(ordenar_por='price', ordem='asc'))
        desc = self.repository.listar(FiltrosCatalogo(ordenar_por='price', ordem='desc'))

        self.assertEqual([p.id for p in asc], ['a', 'b', 'g1'])
        self.assertEqual([p.id for p in desc], ['g1', 'a', 'b'])

    def test_listar_estoque_baixo_ignora_arquivados(self):
        criar_produto_model('x', 'SM-X', estoque=9)
        criar_produto_model('y', 'SM-Y', estoque=10)
        criar_produto_model('z', 'SM-Z', estoque=2, status=StatusProduto.ARQUIVADO.value)

        baixo = self.repository.listar(FiltrosCatalogo(nivel_estoque='Low', ordenar_por='stock', ordem='asc'))

        self.assertEqual([p.id for p in baixo], ['g1', 'x'])

    def test_ordenacao_por_avaliacao_com_valores_ausentes(self):
        criar_produto_model('r', 'SM-R', avaliacao=Decimal('4.5'))

        produtos = self.repository.listar(FiltrosCatalogo(ordenar_por='rating', ordem='desc'))

        self.assertEqual([p.id for p in produtos], ['r', 'g1'])

    def test_ajustar_estoque_limita_em_zero(self):
        self.assertEqual(self.repository.ajustar_estoque('g1', -8), (5, 0))
        self.assertEqual(self.repository.ajustar_estoque('g1', 3), (0, 3))
        self.assertIsNone(self.repository.ajustar_estoque('nao-existe', 3))

    def test_remover_apaga_linhas_de_carrinho_e_desejos(self):
        """
        Cenário: a remoção física do produto some com ele dos carrinhos e listas de desejos.
        """
        # ARRANGE
        ItemCarrinhoModel.objects.create(id_linha='linha-1', chave_carrinho='sessao', produto_id='g1',
                                         nome='Blouse', preco_unitario=Decimal('42.00'))
        cliente = ClienteModel.objects.create(id='c1', nome='Park', email='s.park@example.com')
        cliente.lista_desejos.add('g1')

        # ACT
        removido = self.repository.remover('g1')

        # ASSERT
        self.assertTrue(removido)
        self.assertFalse(ItemCarrinhoModel.objects.exists())
        self.assertEqual(cliente.lista_desejos.count(), 0)
        self.assertFalse(self.repository.remover('g1'))

    def test_arquivar(self):
        self.assertTrue(self.repository.arquivar('g1'))
        self.assertEqual(ProdutoModel.objects.get(pk='g1').status, StatusProduto.ARQUIVADO.value)
        self.assertFalse(self.repository.arquivar('nao-existe'))


class PedidoRepositoryDjangoTestCase(TestCase):

    def setUp(self):
        self.repository = PedidoRepositoryDjango()
        criar_produto_model('a', 'SM-A', estoque=5)
        criar_produto_model('b', 'SM-B', estoque=1)

    def test_criar_pedido_baixa_o_estoque(self):
        # ARRANGE
        pedido = novo_pedido('ORD-AAAA0001', [
            ItemPedido(produto_id='a', nome='Produto A', quantidade=5, preco_unitario=Decimal('20.00')),
        ])

        # ACT
        salvo = self.repository.criar_pedido(pedido, {'a': 5})

        # ASSERT
        self.assertEqual(ProdutoModel.objects.get(pk='a').estoque, 0)
        self.assertEqual(salvo.id, 'ORD-AAAA0001')
        self.assertEqual(len(salvo.itens), 1)
        self.assertEqual(salvo.endereco_entrega['cidade'], 'Seoul')

        with self.assertRaises(EstoqueInsuficienteError):
            self.repository.criar_pedido(novo_pedido('ORD-AAAA0002', []), {'a': 1})
        self.assertEqual(ProdutoModel.objects.get(pk='a').estoque, 0)

    def test_falha_numa_linha_desfaz_todas_as_baixas(self):
        """
        Cenário: 'a' tem estoque e 'b' não; nenhuma baixa nem pedido permanece gravado.
        """
        pedido = novo_pedido('ORD-AAAA0003', [])

        with self.assertRaises(EstoqueInsuficienteError) as contexto:
            self.repository.criar_pedido(pedido, {'a': 2, 'b': 2})

        self.assertEqual(contexto.exception.estoque_atual, 1)
        self.assertEqual(ProdutoModel.objects.get(pk='a').estoque, 5)
        self.assertEqual(ProdutoModel.objects.get(pk='b').estoque, 1)
        self.assertFalse(PedidoModel.objects.filter(pk='ORD-AAAA0003').exists())

    def test_produto_inexistente(self):
        with self.assertRaises(ProdutoNaoEncontradoError):
            self.repository.criar_pedido(novo_pedido('ORD-AAAA0004', []), {'fantasma': 1})

    def test_atualizacao_condicional_de_status(self):
        self.repository.criar_pedido(novo_pedido('ORD-AAAA0005', []), {})

        self.assertFalse(self.repository.atualizar_status(
            'ORD-AAAA0005', StatusPedido.ENTREGUE, status_esperado=StatusPedido.ENVIADO))
        self.assertTrue(self.repository.atualizar_status(
            'ORD-AAAA0005', StatusPedido.ENVIADO, status_esperado=StatusPedido.PAGO))
        self.assertEqual(self.repository.buscar_por_id('ORD-AAAA0005').status, StatusPedido.ENVIADO)
        self.assertFalse(self.repository.atualizar_status('ORD-0000', StatusPedido.ENVIADO))

    def test_listar_do_mais_recente_e_filtrar(self):
        antigo = novo_pedido('ORD-AAAA0006', [])
        antigo.data_pedido = antigo.data_pedido.replace(year=2023)
        self.repository.criar_pedido(antigo, {})
        self.repository.criar_pedido(novo_pedido('ORD-AAAA0007', [], status=StatusPedido.ENVIADO), {})

        self.assertEqual([p.id for p in self.repository.listar()], ['ORD-AAAA0007', 'ORD-AAAA0006'])
        self.assertEqual([p.id for p in self.repository.listar(StatusPedido.PAGO)], ['ORD-AAAA0006'])

    def test_atualizar_rastreio(self):
        self.repository.criar_pedido(novo_pedido('ORD-AAAA0008', []), {})

        self.assertTrue(self.repository.atualizar_rastreio('ORD-AAAA0008', 'SM-TRK-000001'))
        self.assertEqual(self.repository.buscar_por_id('ORD-AAAA0008').codigo_rastreio, 'SM-TRK-000001')


class CupomEClienteRepositoryDjangoTestCase(TestCase):

    def setUp(self):
        self.cupom_repo = CupomRepositoryDjango()
        self.cliente_repo = ClienteRepositoryDjango()
        self.cupom = self.cupom_repo.salvar(Cupom(codigo='SEOUL20', tipo_desconto=TipoDesconto.PERCENTUAL,
                                                  valor=Decimal('20'), data_expiracao='2024-12-31'))

    def test_codigo_duplicado(self):
        with self.assertRaises(DadosInvalidosError):
            self.cupom_repo.salvar(Cupom(codigo='SEOUL20', tipo_desconto=TipoDesconto.FIXO, valor=Decimal('5')))

    def test_registrar_uso(self):
        self.cupom_repo.registrar_uso(self.cupom.id)
        self.cupom_repo.registrar_uso(self.cupom.id)

        cupom = self.cupom_repo.buscar_por_codigo(' seoul20 ')
        self.assertEqual(cupom.quantidade_usos, 2)
        self.assertEqual(cupom.data_expiracao, '2024-12-31')

    def test_deletar(self):
        self.cupom_repo.deletar(self.cupom.id)
        self.assertFalse(CupomModel.objects.exists())

    def test_registrar_compra_e_desejos(self):
        # ARRANGE
        criar_produto_model('g1', 'SM-001')
        cliente = self.cliente_repo.salvar(Cliente(nome='Min-ji Kim', email='minji@kpop.kr'))

        # ACT
        self.assertTrue(self.cliente_repo.registrar_compra('MINJI@kpop.kr', Decimal('77.76')))
        self.assertFalse(self.cliente_repo.registrar_compra('ninguem@example.com', Decimal('1.00')))
        desejos = self.cliente_repo.alternar_desejo(cliente.id, 'g1')

        # ASSERT
        atualizado = self.cliente_repo.buscar_por_id(cliente.id)
        self.assertEqual(atualizado.total_pedidos, 1)
        self.assertEqual(atualizado.total_gasto, Decimal('77.76'))
        self.assertEqual(desejos, ['g1'])
        self.assertEqual(atualizado.lista_desejos, ['g1'])
        self.assertEqual(self.cliente_repo.alternar_desejo(cliente.id, 'g1'), [])
        self.assertIsNone(self.cliente_repo.alternar_desejo('nao-existe', 'g1'))

    def test_email_duplicado(self):
        self.cliente_repo.salvar(Cliente(nome='A', email='a@example.com'))
        with self.assertRaises(DadosInvalidosError):
            self.cliente_repo.salvar(Cliente(nome='B', email='a@example.com'))


class CarrinhoAuditoriaChamadoDjangoTestCase(TestCase):

    def setUp(self):
        criar_produto_model('g1', 'SM-001')

    def test_carrinho_por_chave(self):
        repository = CarrinhoRepositoryDjango()
        item = ItemCarrinho(produto_id='g1', nome='Blouse', preco_unitario=Decimal('42.00'), quantidade=2)

        carrinho = repository.adicionar_item('sessao-1', item)
        self.assertEqual(carrinho.total, Decimal('84.00'))
        self.assertEqual(repository.buscar('sessao-2').itens, [])

        self.assertEqual(repository.remover_item('sessao-1', item.id_linha).itens, [])
        repository.adicionar_item('sessao-1', ItemCarrinho(produto_id='g1', nome='Blouse',
                                                           preco_unitario=Decimal('42.00')))
        repository.limpar('sessao-1')
        self.assertEqual(repository.buscar('sessao-1').itens, [])

    def test_auditoria_mais_recente_primeiro(self):
        repository = AuditoriaRepositoryDjango()
        primeiro = RegistroAuditoria(acao='CREATE', alvo_id='g1', mensagem='criado', autor='admin')
        segundo = RegistroAuditoria(acao='UPDATE', alvo_id='g1', mensagem='editado', autor='admin')
        segundo.data = primeiro.data + timedelta(seconds=5)
        repository.registrar(primeiro)
        repository.registrar(segundo)
        repository.registrar(RegistroAuditoria(acao='CREATE', alvo_id='g2', mensagem='x', autor='admin'))

        self.assertEqual([r.acao for r in repository.listar('g1')], ['UPDATE', 'CREATE'])
        self.assertEqual(RegistroAuditoriaModel.objects.count(), 3)

    def test_chamado_salvar_e_listar(self):
        repository = ChamadoRepositoryDjango()
        chamado = repository.salvar(Chamado(cliente_id='c1', nome_cliente='Park', assunto='Sizing',
                                            mensagem='Does it run small?'))

        self.assertTrue(chamado.id.startswith('TKT-'))
        self.assertEqual([c.id for c in repository.listar()], [chamado.id])
        self.assertEqual(repository.listar('Closed'), [])


# ====================================================================
# VARIANTE LOCAL (COLEÇÕES SERIALIZADAS)
# ====================================================================

class ArmazenamentoFalho(ArmazenamentoMemoria):
    """Falha ao gravar uma chave específica."""

    def __init__(self, chave_falha):
        super().__init__()
        self.chave_falha = chave_falha

    def put(self, chave, valor):
        if chave == self.chave_falha:
            raise PersistenciaError("disco cheio")
        super().put(chave, valor)


class ColecoesLocaisTestCase(SimpleTestCase):

    def test_colecao_ausente_e_semeada_uma_unica_vez(self):
        """
        Cenário: uma coleção gravada vazia continua vazia; só a ausência provoca a semeadura.
        """
        # ARRANGE
        armazenamento = ArmazenamentoMemoria()
        colecoes = ColecoesLocais(armazenamento)

        # ACT
        produtos = colecoes.ler('produtos')
        colecoes.gravar('produtos', [])

        # ASSERT
        self.assertEqual(len(produtos), 6)
        self.assertEqual(colecoes.ler('produtos'), [])
        self.assertEqual(json.loads(armazenamento.get('seoul_muse:produtos:v2')), [])

    def test_gravacao_multipla_restaura_colecoes_em_falha(self):
        """
        Cenário: a segunda coleção falha ao gravar; a primeira volta ao conteúdo anterior.
        """
        armazenamento = ArmazenamentoFalho(chave_falha='seoul_muse:clientes:v2')
        colecoes = ColecoesLocais(armazenamento, semear=False)
        colecoes.gravar('produtos', [{'id': 'g1'}])

        with self.assertRaises(PersistenciaError):
            colecoes.gravar_varias({'produtos': [], 'clientes': []})

        self.assertEqual(colecoes.ler('produtos'), [{'id': 'g1'}])

    def test_colecao_corrompida(self):
        colecoes = ColecoesLocais(ArmazenamentoMemoria({'seoul_muse:produtos:v2': '{nao e json'}))

        with self.assertRaises(PersistenciaError):
            colecoes.ler('produtos')

    def test_auditoria_guarda_somente_os_mais_recentes(self):
        colecoes = ColecoesLocais(ArmazenamentoMemoria(), limite_auditoria=3)
        repository = AuditoriaRepositoryLocal(colecoes)

        for i in range(5):
            repository.registrar(RegistroAuditoria(acao='UPDATE', alvo_id=f'g{i}', mensagem='m', autor='admin'))

        self.assertEqual([r.alvo_id for r in repository.listar()], ['g4', 'g3', 'g2'])

    def test_decimais_e_datas_sobrevivem_a_serializacao(self):
        repository = ProdutoRepositoryLocal(ColecoesLocais(ArmazenamentoMemoria(), semear=False))
        salvo = repository.salvar(Produto(sku='SM-9', nome='Slip', preco=Decimal('65.50'), estoque=2,
                                          categoria='Dresses', avaliacao=Decimal('4.8')))

        self.assertEqual(salvo.preco, Decimal('65.50'))
        self.assertEqual(salvo.avaliacao, Decimal('4.8'))
        self.assertIsNotNone(salvo.data_criacao.tzinfo)

    def test_sku_duplicado_aponta_o_registro_gravado(self):
        repository = ProdutoRepositoryLocal(ColecoesLocais(ArmazenamentoMemoria(), semear=True))

        with self.assertRaises(SkuDuplicadoError) as contexto:
            repository.salvar(Produto(sku='sm-003 ', nome='Copy', preco=Decimal('1.00'), estoque=1,
                                      categoria='Tops'))

        self.assertIn("'SM-003'", contexto.exception.message)
        self.assertEqual(contexto.exception.produto_id, 'g3')

    def test_atualizacao_mantem_o_estoque_gravado(self):
        repository = ProdutoRepositoryLocal(ColecoesLocais(ArmazenamentoMemoria(), semear=True))
        leitura_antiga = repository.buscar_por_id('g3')
        repository.ajustar_estoque('g3', -8)

        atualizado = repository.salvar(replace(leitura_antiga, nome='Moonlight Slip'))

        self.assertEqual(atualizado.estoque, 10)
        self.assertEqual(atualizado.nome, 'Moonlight Slip')


class ArmazenamentoCacheTestCase(SimpleTestCase):

    def setUp(self):
        caches['default'].clear()

    def test_grava_e_le_sem_expiracao(self):
        armazenamento = ArmazenamentoCache()
        armazenamento.put('seoul_muse:teste:v2', '[]')
        self.assertEqual(armazenamento.get('seoul_muse:teste:v2'), '[]')

    def test_falha_do_backend_vira_erro_de_persistencia(self):
        armazenamento = ArmazenamentoCache()
        with patch.object(ArmazenamentoCache, 'cache') as cache_mock:
            cache_mock.set.side_effect = ConnectionError('redis fora do ar')
            with self.assertRaises(PersistenciaError):
                armazenamento.put('seoul_muse:teste:v2', '[]')


# ====================================================================
# GATEWAY DE IA
# ====================================================================

def resposta_gemini(texto, status_code=200):
    resposta = Mock()
    resposta.status_code = status_code
    resposta.json.return_value = {'candidates': [{'content': {'parts': [{'text': f'  {texto}  '}]}}]}
    resposta.raise_for_status.return_value = None
    return resposta


class ServicoTextoIATestCase(SimpleTestCase):

    def setUp(self):
        caches['default'].clear()
        self.servico = ServicoTextoIA(api_key='chave-teste', modelo='gemini-teste', timeout=2,
                                      cache_segundos=60, pausa_segundos=60)

    @patch('seoulmuse.infrastructure.gateways.requests.post')
    def test_resposta_fica_em_cache(self, post_mock):
        post_mock.return_value = resposta_gemini('Silk and light.')

        primeiro = self.servico.gerar('ia:descricao', 'prompt', fallback='fallback')
        segundo = self.servico.gerar('ia:descricao', 'prompt', fallback='fallback')

        self.assertEqual(primeiro, 'Silk and light.')
        self.assertEqual(segundo, 'Silk and light.')
        post_mock.assert_called_once()
        self.assertEqual(post_mock.call_args[1]['params'], {'key': 'chave-teste'})

    @patch('seoulmuse.infrastructure.gateways.requests.post')
    def test_cota_excedida_abre_pausa(self, post_mock):
        """
        Cenário: HTTP 429 devolve o fallback e suspende novas chamadas durante a pausa.
        """
        post_mock.return_value = resposta_gemini('', status_code=429)

        texto = self.servico.gerar('ia:um', 'prompt', fallback='fallback')
        outro = self.servico.gerar('ia:dois', 'prompt', fallback='outro fallback')

        self.assertEqual(texto, 'fallback')
        self.assertEqual(outro, 'outro fallback')
        self.assertTrue(self.servico.em_pausa())
        post_mock.assert_called_once()

    @patch('seoulmuse.infrastructure.gateways.requests.post')
    def test_erro_de_rede_usa_fallback(self, post_mock):
        post_mock.side_effect = requests.exceptions.ConnectionError('sem rede')

        self.assertEqual(self.servico.gerar('ia:tres', 'prompt', fallback='fallback'), 'fallback')
        self.assertTrue(self.servico.em_pausa())

    @patch('seoulmuse.infrastructure.gateways.requests.post')
    def test_sem_chave_nao_chama_a_api(self, post_mock):
        servico = ServicoTextoIA(api_key='')

        self.assertEqual(servico.gerar('ia:quatro', 'prompt', fallback='fallback'), 'fallback')
        post_mock.assert_not_called()


# ====================================================================
# COMANDO DE CARGA INICIAL
# ====================================================================

class CarregarDadosIniciaisTestCase(TestCase):

    def test_carga_idempotente(self):
        # ACT
        call_command('carregar_dados_iniciais', stdout=StringIO())
        call_command('carregar_dados_iniciais', admin_senha='senha-forte-123', stdout=StringIO())

        # ASSERT
        self.assertEqual(ProdutoModel.objects.count(), 6)
        self.assertEqual(PedidoModel.objects.count(), 2)
        self.assertEqual(PedidoModel.objects.get(pk='ORD-9902').itens.count(), 2)
        self.assertEqual(CupomModel.objects.count(), 2)
        self.assertEqual(ClienteModel.objects.count(), 3)

        admin = get_user_model().objects.get(username='admin@seoulmuse.com')
        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.check_password('senha-forte-123'))
