from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.core.cache import caches
from django.core.management import call_command
from django.test import RequestFactory, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from seoulmuse.catalog.models import Produto as ProdutoModel
from seoulmuse.core.exceptions import PersistenciaError
from seoulmuse.presentation.admin import ProdutoAdmin
from seoulmuse.suporte.models import RegistroAuditoria as RegistroAuditoriaModel
from seoulmuse.vendas.models import Cliente as ClienteModel, Cupom as CupomModel, Pedido as PedidoModel


class SeoulMuseAPITestCase(APITestCase):
    """Base: carrega o catálogo inicial e prepara um administrador e um cliente comum."""

    CHAVE_CARRINHO = 'carrinho-teste'

    def setUp(self):
        caches['default'].clear()
        call_command('carregar_dados_iniciais', stdout=StringIO())

        User = get_user_model()
        self.admin = User.objects.create_user(
            username='admin@seoulmuse.com', email='admin@seoulmuse.com', password='senha-admin', is_staff=True
        )
        self.usuario_comum = User.objects.create_user(username='visitante', password='senha-comum')

    def como_admin(self):
        self.client.force_authenticate(user=self.admin)

    def usar_carrinho(self):
        self.client.credentials(HTTP_X_CARRINHO_CHAVE=self.CHAVE_CARRINHO)

    def adicionar_ao_carrinho(self, produto_id, quantidade=1):
        return self.client.post(reverse('api_carrinho'), {'produto_id': produto_id, 'quantidade': quantidade},
                                format='json')


# ====================================================================
# CATÁLOGO
# ====================================================================

class CatalogoAPITestCase(SeoulMuseAPITestCase):

    def setUp(self):
        super().setUp()
        ProdutoModel.objects.create(id='rascunho', sku='SM-900', nome='Draft Jacket', preco=Decimal('99.00'),
                                    estoque=3, categoria='Outer', status='Draft')

    def test_vitrine_publica_mostra_somente_ativos(self):
        """
        Cenário: visitante anônimo lista o catálogo e não enxerga o rascunho.
        """
        # ACT
        response = self.client.get(reverse('api_produtos'), {'status': 'All'})

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [p['id'] for p in response.data]
        self.assertEqual(len(ids), 6)
        self.assertNotIn('rascunho', ids)

    def test_admin_lista_tudo(self):
        self.como_admin()

        response = self.client.get(reverse('api_produtos'), {'status': 'All', 'ordenar_por': 'name', 'ordem': 'asc'})

        self.assertEqual(len(response.data), 7)
        self.assertEqual(response.data[0]['nome'], 'Draft Jacket')

    def test_detalhe_de_rascunho_e_404_para_visitante(self):
        response = self.client.get(reverse('api_produto', args=['rascunho']))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('message', response.data)

    def test_filtro_invalido_retorna_400(self):
        response = self.client.get(reverse('api_produtos'), {'ordenar_por': 'cor'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cadastro_exige_administrador(self):
        dados = {'sku': 'SM-100', 'nome': 'Knit Vest', 'preco': '30.00', 'estoque': 5, 'categoria': 'Tops'}

        anonimo = self.client.post(reverse('api_produtos'), dados, format='json')
        self.client.force_authenticate(user=self.usuario_comum)
        comum = self.client.post(reverse('api_produtos'), dados, format='json')

        self.assertEqual(anonimo.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(comum.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(ProdutoModel.objects.filter(sku='SM-100').exists())

    def test_cadastro_e_conflito_de_sku(self):
        """
        Cenário: o segundo cadastro com o mesmo SKU (outra caixa) recebe 409.
        """
        # ARRANGE
        self.como_admin()
        dados = {'sku': 'SM-100', 'nome': 'Knit Vest', 'preco': '30.00', 'estoque': 5, 'categoria': 'Tops',
                 'status': 'Active'}

        # ACT
        criado = self.client.post(reverse('api_produtos'), dados, format='json')
        conflito = self.client.post(reverse('api_produtos'), dict(dados, sku='sm-100 '), format='json')

        # ASSERT
        self.assertEqual(criado.status_code, status.HTTP_201_CREATED)
        self.assertEqual(criado.data['status'], 'Active')
        self.assertEqual(conflito.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('SM-100', conflito.data['message'])
        self.assertTrue(RegistroAuditoriaModel.objects.filter(acao='CREATE', autor='admin@seoulmuse.com').exists())

    def test_edicao_de_produto_inexistente(self):
        self.como_admin()
        dados = {'sku': 'SM-100', 'nome': 'Knit Vest', 'preco': '30.00', 'estoque': 5, 'categoria': 'Tops'}

        response = self.client.put(reverse('api_produto', args=['fantasma']), dados, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_edicao_ignora_o_estoque_do_corpo(self):
        """
        Cenário: o formulário do painel foi carregado com estoque 45, uma venda baixou
        para 44 e o PUT chega com o valor antigo; o estoque gravado continua 44.
        """
        # ARRANGE
        self.como_admin()
        ProdutoModel.objects.filter(pk='g1').update(estoque=44)
        dados = {'sku': 'SM-001', 'nome': 'Petal Ribbon Silk Blouse', 'preco': '39.00', 'estoque': 45,
                 'categoria': 'Tops', 'status': 'Active'}

        # ACT
        response = self.client.put(reverse('api_produto', args=['g1']), dados, format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['estoque'], 44)
        self.assertEqual(ProdutoModel.objects.get(pk='g1').estoque, 44)
        self.assertEqual(ProdutoModel.objects.get(pk='g1').preco, Decimal('39.00'))

    def test_ajuste_de_estoque(self):
        self.como_admin()

        response = self.client.patch(reverse('api_ajuste_estoque', args=['g1']), {'delta': -50}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['estoque'], 0)
        registro = RegistroAuditoriaModel.objects.get(acao='STOCK_ADJUST')
        self.assertEqual(registro.mensagem, 'Stock adjusted by -50 (From 45 to 0)')

    def test_exclusao_arquiva_por_padrao(self):
        self.como_admin()

        response = self.client.delete(reverse('api_produto', args=['g2']))
        removido = self.client.delete(reverse('api_produto', args=['g3']) + '?politica=hard')

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(ProdutoModel.objects.get(pk='g2').status, 'Archived')
        self.assertEqual(removido.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ProdutoModel.objects.filter(pk='g3').exists())

    def test_exportacao_csv(self):
        self.como_admin()

        response = self.client.get(reverse('api_exportar_produtos'), {'categoria': 'Dresses', 'ordenar_por': 'price',
                                                                       'ordem': 'asc'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Type'].startswith('text/csv'))
        self.assertIn('attachment; filename="inventario-', response['Content-Disposition'])
        linhas = response.content.decode('utf-8').splitlines()
        self.assertEqual(linhas[0], 'SKU,Name,Category,Collection,Stock,Price,Status')
        self.assertEqual([linha.split(',')[0] for linha in linhas[1:]], ['SM-006', 'SM-004'])

    def test_descricao_ia_sem_chave_usa_fallback(self):
        self.como_admin()

        with self.settings(GEMINI_API_KEY=''):
            response = self.client.get(reverse('api_descricao_ia', args=['g1']))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['descricao'].startswith('Refined silhouettes'))


# ====================================================================
# CARRINHO E CHECKOUT
# ====================================================================

class CheckoutAPITestCase(SeoulMuseAPITestCase):

    def setUp(self):
        super().setUp()
        self.usar_carrinho()

    def test_carrinho_por_cabecalho(self):
        adicionado = self.adicionar_ao_carrinho('g1', 2)
        id_linha = adicionado.data['itens'][0]['id_linha']

        self.assertEqual(adicionado.status_code, status.HTTP_201_CREATED)
        self.assertEqual(adicionado.data['chave'], self.CHAVE_CARRINHO)
        self.assertEqual(Decimal(adicionado.data['total']), Decimal('84.00'))

        removido = self.client.delete(reverse('api_item_carrinho', args=[id_linha]))
        self.assertEqual(removido.data['itens'], [])

        inexistente = self.client.delete(reverse('api_item_carrinho', args=[id_linha]))
        self.assertEqual(inexistente.status_code, status.HTTP_404_NOT_FOUND)

    def test_carrinho_pela_sessao(self):
        self.client.credentials()

        self.adicionar_ao_carrinho('g2')
        response = self.client.get(reverse('api_carrinho'))

        self.assertEqual(len(response.data['itens']), 1)

    def test_adicionar_acima_do_estoque(self):
        response = self.adicionar_ao_carrinho('g6', 13)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('SM-006', response.data['message'])

    def test_cotacao(self):
        self.adicionar_ao_carrinho('g1')
        self.adicionar_ao_carrinho('g2')

        response = self.client.post(reverse('api_cotacao'), {'codigo_cupom': 'seoul20', 'metodo_envio': 'standard'},
                                    format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['precos'], {
            'subtotal': '77.00', 'desconto': '15.40', 'imposto': '6.16', 'frete': '10.00', 'total': '77.76',
        })
        self.assertEqual(response.data['cupom']['codigo'], 'SEOUL20')

    def test_checkout_completo(self):
        """
        Cenário: carrinho com g1 e g2, cupom SEOUL20 e envio padrão gera o pedido,
        baixa o estoque, conta o uso do cupom e esvazia o carrinho.
        """
        # ARRANGE
        self.adicionar_ao_carrinho('g1')
        self.adicionar_ao_carrinho('g2')
        dados = {
            'nome': 'Min-ji Kim',
            'email': 'MINJI@kpop.kr',
            'forma_pagamento': 'KakaoPay',
            'endereco_entrega': {'rua': '12 Seongsu-ro', 'cidade': 'Seoul'},
            'codigo_cupom': 'SEOUL20',
            'metodo_envio': 'standard',
        }

        # ACT
        response = self.client.post(reverse('api_checkout'), dados, format='json')

        # ASSERT
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['id'].startswith('ORD-'))
        self.assertEqual(response.data['status'], 'Paid')
        self.assertEqual(response.data['total'], '77.76')
        self.assertEqual(response.data['email_cliente'], 'minji@kpop.kr')
        self.assertEqual(ProdutoModel.objects.get(pk='g1').estoque, 44)
        self.assertEqual(ProdutoModel.objects.get(pk='g2').estoque, 119)
        self.assertEqual(CupomModel.objects.get(codigo='SEOUL20').quantidade_usos, 146)
        cliente = ClienteModel.objects.get(email='minji@kpop.kr')
        self.assertEqual(cliente.total_pedidos, 46)
        self.assertEqual(cliente.total_gasto, Decimal('5277.76'))
        self.assertEqual(self.client.get(reverse('api_carrinho')).data['itens'], [])

    def test_falha_apos_o_pedido_desfaz_o_checkout(self):
        """
        Cenário: a contagem de uso do cupom falha depois do pedido gravado; a transação
        inteira volta atrás e a nova tentativa gera um único pedido.
        """
        # ARRANGE
        self.adicionar_ao_carrinho('g1')
        dados = {'nome': 'Min-ji Kim', 'email': 'minji@kpop.kr', 'codigo_cupom': 'SEOUL20'}

        # ACT
        with patch('seoulmuse.infrastructure.repositories.CupomRepositoryDjango.registrar_uso',
                   side_effect=PersistenciaError("Falha ao acessar o banco de dados")):
            falha = self.client.post(reverse('api_checkout'), dados, format='json')
        nova_tentativa = self.client.post(reverse('api_checkout'), dados, format='json')

        # ASSERT
        self.assertEqual(falha.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(nova_tentativa.status_code, status.HTTP_201_CREATED)
        self.assertEqual(PedidoModel.objects.count(), 3)
        self.assertEqual(ProdutoModel.objects.get(pk='g1').estoque, 44)
        self.assertEqual(RegistroAuditoriaModel.objects.filter(acao='ORDER_PLACED').count(), 1)
        self.assertEqual(CupomModel.objects.get(codigo='SEOUL20').quantidade_usos, 146)

    def test_checkout_sem_estoque_suficiente(self):
        """
        Cenário: o estoque cai depois que o item entrou no carrinho; o checkout recebe 409
        e nada é gravado.
        """
        self.adicionar_ao_carrinho('g6', 10)
        ProdutoModel.objects.filter(pk='g6').update(estoque=5)

        response = self.client.post(reverse('api_checkout'), {'nome': 'Park', 'email': 's.park@example.com'},
                                    format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(ProdutoModel.objects.get(pk='g6').estoque, 5)
        self.assertEqual(PedidoModel.objects.count(), 2)
        self.assertEqual(len(self.client.get(reverse('api_carrinho')).data['itens']), 1)

    def test_checkout_com_carrinho_vazio(self):
        response = self.client.post(reverse('api_checkout'), {'nome': 'Park', 'email': 's.park@example.com'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_checkout_com_cupom_invalido(self):
        self.adicionar_ao_carrinho('g1')

        response = self.client.post(reverse('api_checkout'),
                                    {'nome': 'Park', 'email': 's.park@example.com', 'codigo_cupom': 'NOPE'},
                                    format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(ProdutoModel.objects.get(pk='g1').estoque, 45)

    def test_validar_cupom(self):
        valido = self.client.post(reverse('api_validar_cupom'), {'codigo': ' firstmuse '}, format='json')
        invalido = self.client.post(reverse('api_validar_cupom'), {'codigo': 'NOPE'}, format='json')

        self.assertEqual(valido.status_code, status.HTTP_200_OK)
        self.assertEqual(valido.data['tipo_desconto'], 'Fixed')
        self.assertEqual(invalido.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(invalido.data['message'], 'Cupom inválido ou expirado.')


# ====================================================================
# PAINEL ADMINISTRATIVO
# ====================================================================

class PainelAdminAPITestCase(SeoulMuseAPITestCase):

    def setUp(self):
        super().setUp()
        self.como_admin()

    def test_listagem_exige_staff(self):
        self.client.force_authenticate(user=None)
        self.assertEqual(self.client.get(reverse('api_pedidos')).status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.force_authenticate(user=self.usuario_comum)
        self.assertEqual(self.client.get(reverse('api_pedidos')).status_code, status.HTTP_403_FORBIDDEN)

    def test_listagem_de_pedidos(self):
        response = self.client.get(reverse('api_pedidos'))
        pagos = self.client.get(reverse('api_pedidos'), {'status': 'Paid'})

        self.assertEqual([p['id'] for p in response.data], ['ORD-9902', 'ORD-9901'])
        self.assertEqual([p['id'] for p in pagos.data], ['ORD-9901'])

    def test_transicao_valida_e_auditada(self):
        response = self.client.patch(reverse('api_status_pedido', args=['ORD-9901']), {'status': 'Shipped'},
                                     format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'Shipped')
        registro = RegistroAuditoriaModel.objects.get(acao='ORDER_STATUS', alvo_id='ORD-9901')
        self.assertEqual(registro.mensagem, 'Status changed from Paid to Shipped')
        self.assertEqual(registro.autor, 'admin@seoulmuse.com')

    def test_transicao_invalida(self):
        response = self.client.patch(reverse('api_status_pedido', args=['ORD-9902']), {'status': 'Pending'},
                                     format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(PedidoModel.objects.get(pk='ORD-9902').status, 'Shipped')

    def test_status_desconhecido(self):
        response = self.client.patch(reverse('api_status_pedido', args=['ORD-9901']), {'status': 'Lost'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pedido_inexistente(self):
        detalhe = self.client.get(reverse('api_pedido', args=['ORD-0000']))
        status_response = self.client.patch(reverse('api_status_pedido', args=['ORD-0000']), {'status': 'Paid'},
                                            format='json')

        self.assertEqual(detalhe.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(status_response.status_code, status.HTTP_404_NOT_FOUND)

    def test_rastreio_e_fatura(self):
        rastreio = self.client.patch(reverse('api_rastreio_pedido', args=['ORD-9902']),
                                     {'codigo_rastreio': 'SM-TRK-123456'}, format='json')
        fatura = self.client.get(reverse('api_fatura_pedido', args=['ORD-9902']))

        self.assertEqual(rastreio.data['codigo_rastreio'], 'SM-TRK-123456')
        self.assertEqual(fatura.status_code, status.HTTP_200_OK)
        self.assertIn('ORD-9902', fatura.content.decode('utf-8'))
        self.assertIn('fatura-ORD-9902.txt', fatura['Content-Disposition'])

    def test_devolucao_pelo_cliente(self):
        """
        Cenário: só o e-mail da compra pode pedir a devolução de um pedido entregue.
        """
        self.client.patch(reverse('api_status_pedido', args=['ORD-9902']), {'status': 'Delivered'}, format='json')
        self.client.force_authenticate(user=None)

        errado = self.client.post(reverse('api_devolucao', args=['ORD-9902']), {'email': 'outra@example.com'},
                                  format='json')
        certo = self.client.post(reverse('api_devolucao', args=['ORD-9902']), {'email': 'chloe.b@example.com'},
                                 format='json')

        self.assertEqual(errado.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(certo.status_code, status.HTTP_200_OK)
        self.assertEqual(certo.data['status'], 'ReturnRequested')

    def test_cupons(self):
        criado = self.client.post(reverse('api_cupons'), {
            'codigo': 'SPRING5', 'tipo_desconto': 'Fixed', 'valor': '5.00', 'data_expiracao': '2025-04-30',
        }, format='json')
        data_invalida = self.client.post(reverse('api_cupons'), {
            'codigo': 'X', 'tipo_desconto': 'Fixed', 'valor': '5.00', 'data_expiracao': '30/04/2025',
        }, format='json')

        self.assertEqual(criado.status_code, status.HTTP_201_CREATED)
        self.assertEqual(data_invalida.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(len(self.client.get(reverse('api_cupons')).data), 3)

        removido = self.client.delete(reverse('api_cupom', args=[criado.data['id']]))
        self.assertEqual(removido.status_code, status.HTTP_204_NO_CONTENT)

    def test_bloqueio_de_cliente(self):
        response = self.client.patch(reverse('api_status_cliente', args=['c3']), {'status': 'Blocked'},
                                     format='json')
        inexistente = self.client.patch(reverse('api_status_cliente', args=['c99']), {'status': 'Blocked'},
                                        format='json')

        self.assertEqual(response.data['status'], 'Blocked')
        self.assertNotIn('senha_hash', response.data)
        self.assertEqual(inexistente.status_code, status.HTTP_404_NOT_FOUND)

    def test_auditoria_mais_recente_primeiro(self):
        self.client.patch(reverse('api_ajuste_estoque', args=['g1']), {'delta': 5}, format='json')
        self.client.patch(reverse('api_ajuste_estoque', args=['g2']), {'delta': 5}, format='json')

        todos = self.client.get(reverse('api_auditoria'))
        filtrados = self.client.get(reverse('api_auditoria'), {'alvo_id': 'g1'})

        self.assertEqual([r['alvo_id'] for r in todos.data], ['g2', 'g1'])
        self.assertEqual(len(filtrados.data), 1)

    def test_estatisticas(self):
        response = self.client.get(reverse('api_estatisticas'))

        self.assertEqual(response.data['receita_total'], '202.00')
        self.assertEqual(response.data['total_pedidos'], 2)
        self.assertEqual(response.data['envios_pendentes'], 1)
        self.assertEqual(response.data['itens_estoque_baixo'], 0)

    def test_insight_sem_chave_usa_fallback(self):
        with self.settings(GEMINI_API_KEY=''):
            response = self.client.get(reverse('api_insight'))
        self.assertIn('Seongsu-dong', response.data['insight'])


# ====================================================================
# CONTA DO CLIENTE E SUPORTE
# ====================================================================

class ClienteESuporteAPITestCase(SeoulMuseAPITestCase):

    def test_registro_e_login(self):
        registro = self.client.post(reverse('api_registro_cliente'),
                                    {'nome': 'Ha-eun', 'email': 'HAEUN@example.com', 'senha': 'segredo1'},
                                    format='json')
        duplicado = self.client.post(reverse('api_registro_cliente'),
                                     {'nome': 'Ha-eun', 'email': 'haeun@example.com', 'senha': 'segredo1'},
                                     format='json')
        login = self.client.post(reverse('api_login_cliente'), {'email': 'haeun@example.com', 'senha': 'segredo1'},
                                 format='json')
        senha_errada = self.client.post(reverse('api_login_cliente'),
                                        {'email': 'haeun@example.com', 'senha': 'errada'}, format='json')

        self.assertEqual(registro.status_code, status.HTTP_201_CREATED)
        self.assertEqual(registro.data['email'], 'haeun@example.com')
        self.assertNotIn('senha', registro.data)
        self.assertEqual(duplicado.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(login.status_code, status.HTTP_200_OK)
        self.assertEqual(login.data['id'], registro.data['id'])
        self.assertTrue(login.data['token'])
        self.assertEqual(senha_errada.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(senha_errada.data['message'], 'E-mail ou senha inválidos.')
        self.assertNotEqual(ClienteModel.objects.get(email='haeun@example.com').senha_hash, 'segredo1')

    def entrar_como_cliente(self, nome='Ha-eun', email='haeun@example.com', senha='segredo1'):
        """Cadastra e autentica um cliente; devolve (id, token)."""
        self.client.post(reverse('api_registro_cliente'), {'nome': nome, 'email': email, 'senha': senha},
                         format='json')
        login = self.client.post(reverse('api_login_cliente'), {'email': email, 'senha': senha}, format='json')
        return login.data['id'], login.data['token']

    def test_lista_de_desejos_e_endereco(self):
        """
        Cenário: o cliente autenticado altera a própria conta com o token recebido no login.
        """
        # ARRANGE
        cliente_id, token = self.entrar_como_cliente()

        # ACT
        desejo = self.client.post(reverse('api_desejos', args=[cliente_id]), {'produto_id': 'g4'},
                                  format='json', HTTP_X_CLIENTE_TOKEN=token)
        endereco = self.client.post(reverse('api_enderecos', args=[cliente_id]),
                                    {'nome_completo': 'Ha-eun Lee', 'rua': '123 Gangnam-daero', 'cidade': 'Seoul'},
                                    format='json', HTTP_X_CLIENTE_TOKEN=token)

        # ASSERT
        self.assertEqual(desejo.status_code, status.HTTP_200_OK)
        self.assertEqual(desejo.data['lista_desejos'], ['g4'])
        self.assertEqual(endereco.status_code, status.HTTP_201_CREATED)
        self.assertEqual(endereco.data['enderecos'][-1]['pais'], 'South Korea')

    def test_conta_sem_token_retorna_401(self):
        """
        Cenário: visitante anônimo tenta mexer na conta de c1, com e sem um token forjado.
        """
        # ACT
        desejo = self.client.post(reverse('api_desejos', args=['c1']), {'produto_id': 'g4'}, format='json')
        endereco = self.client.post(reverse('api_enderecos', args=['c1']),
                                    {'nome_completo': 'Intruso', 'rua': 'Rua do Atacante', 'cidade': 'Seoul'},
                                    format='json')
        forjado = self.client.post(reverse('api_desejos', args=['c1']), {'produto_id': 'g4'},
                                   format='json', HTTP_X_CLIENTE_TOKEN='nao-e-um-token')

        # ASSERT
        self.assertEqual(desejo.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(endereco.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(forjado.status_code, status.HTTP_401_UNAUTHORIZED)
        c1 = ClienteModel.objects.get(pk='c1')
        self.assertEqual(c1.enderecos, [])
        self.assertFalse(c1.lista_desejos.exists())

    def test_token_de_outro_cliente_retorna_403(self):
        """
        Cenário: Ha-eun usa o próprio token, válido, para alterar a conta de c1.
        """
        # ARRANGE
        _, token = self.entrar_como_cliente()

        # ACT
        desejo = self.client.post(reverse('api_desejos', args=['c1']), {'produto_id': 'g4'},
                                  format='json', HTTP_X_CLIENTE_TOKEN=token)
        endereco = self.client.post(reverse('api_enderecos', args=['c1']),
                                    {'nome_completo': 'Intruso', 'rua': 'Rua do Atacante', 'cidade': 'Seoul'},
                                    format='json', HTTP_X_CLIENTE_TOKEN=token)

        # ASSERT
        self.assertEqual(desejo.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(endereco.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(ClienteModel.objects.get(pk='c1').enderecos, [])

    def test_abertura_e_atendimento_de_chamado(self):
        """
        Cenário: visitante abre o chamado; o administrador responde, anota e resolve.
        """
        # ACT: abertura pública
        aberto = self.client.post(reverse('api_chamados'),
                                  {'mensagem': 'Where is my order?', 'pedido_id': 'ORD-9902'}, format='json')
        chamado_id = aberto.data['id']
        listagem_anonima = self.client.get(reverse('api_chamados'))

        self.como_admin()
        resposta = self.client.post(reverse('api_responder_chamado', args=[chamado_id]),
                                    {'mensagem': 'It ships tomorrow.'}, format='json')
        nota = self.client.post(reverse('api_nota_chamado', args=[chamado_id]), {'nota': 'VIP'}, format='json')
        resolvido = self.client.patch(reverse('api_status_chamado', args=[chamado_id]), {'status': 'Resolved'},
                                      format='json')
        fila = self.client.get(reverse('api_chamados'), {'status': 'Resolved'})

        # ASSERT
        self.assertEqual(aberto.status_code, status.HTTP_201_CREATED)
        self.assertEqual(aberto.data['cliente_id'], 'anon')
        self.assertEqual(aberto.data['status'], 'Open')
        self.assertEqual(listagem_anonima.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resposta.status_code, status.HTTP_201_CREATED)
        self.assertTrue(resposta.data['respostas'][0]['admin'])
        self.assertTrue(nota.data['notas_internas'][0].endswith(': VIP'))
        self.assertEqual(resolvido.data['status'], 'Resolved')
        self.assertEqual([c['id'] for c in fila.data], [chamado_id])

    def test_chamado_sem_mensagem(self):
        response = self.client.post(reverse('api_chamados'), {'assunto': 'Oi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


# ====================================================================
# ADMIN DO DJANGO
# ====================================================================

class ProdutoAdminTestCase(TestCase):

    def setUp(self):
        call_command('carregar_dados_iniciais', stdout=StringIO())
        self.model_admin = ProdutoAdmin(ProdutoModel, admin.site)
        self.request = RequestFactory().post('/admin/catalog/produto/g1/change/')
        self.request.user = get_user_model().objects.create_user(
            username='staff', email='staff@seoulmuse.com', password='senha-staff', is_staff=True
        )

    def test_sku_e_estoque_somente_leitura(self):
        produto = ProdutoModel.objects.get(pk='g1')

        somente_leitura = self.model_admin.get_readonly_fields(self.request, produto)

        self.assertIn('sku', somente_leitura)
        self.assertIn('estoque', somente_leitura)
        self.assertFalse(self.model_admin.has_add_permission(self.request))

    def test_edicao_pelo_admin_gera_auditoria(self):
        """
        Cenário: a equipe muda o preço pelo admin; a gravação passa pelo catálogo,
        entra na trilha com o autor e não mexe no estoque.
        """
        # ARRANGE
        produto = ProdutoModel.objects.get(pk='g1')
        ProdutoModel.objects.filter(pk='g1').update(estoque=40)
        produto.preco = Decimal('44.00')

        # ACT
        self.model_admin.save_model(self.request, produto, form=None, change=True)

        # ASSERT
        gravado = ProdutoModel.objects.get(pk='g1')
        self.assertEqual(gravado.preco, Decimal('44.00'))
        self.assertEqual(gravado.estoque, 40)
        registro = RegistroAuditoriaModel.objects.get(acao='UPDATE', alvo_id='g1')
        self.assertEqual(registro.autor, 'staff@seoulmuse.com')
