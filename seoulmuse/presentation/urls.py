"""
Define as rotas da API REST da loja e do painel administrativo.
"""
from django.urls import path

from . import views, views_admin, views_auth


urlpatterns = [
    # ====================================================================
    # 1. ROTAS DE CATÁLOGO
    # ====================================================================
    path('produtos/', views.ProdutoListaAPIView.as_view(), name='api_produtos'),
    path('produtos/exportar/', views.ExportarCatalogoAPIView.as_view(), name='api_exportar_produtos'),
    path('produtos/<str:produto_id>/', views.ProdutoDetalheAPIView.as_view(), name='api_produto'),
    path('produtos/<str:produto_id>/estoque/', views.AjusteEstoqueAPIView.as_view(), name='api_ajuste_estoque'),
    path('produtos/<str:produto_id>/descricao-ia/', views.DescricaoProdutoIAAPIView.as_view(), name='api_descricao_ia'),

    # ====================================================================
    # 2. ROTAS DE COMPRA (CARRINHO E CHECKOUT)
    # ====================================================================
    path('carrinho/', views.CarrinhoAPIView.as_view(), name='api_carrinho'),
    path('carrinho/itens/<str:id_linha>/', views.ItemCarrinhoAPIView.as_view(), name='api_item_carrinho'),
    path('checkout/cotacao/', views.CotacaoAPIView.as_view(), name='api_cotacao'),
    path('checkout/', views.CheckoutAPIView.as_view(), name='api_checkout'),
    path('pedidos/<str:pedido_id>/devolucao/', views.SolicitarDevolucaoAPIView.as_view(), name='api_devolucao'),
    path('cupons/validar/', views_admin.ValidarCupomAPIView.as_view(), name='api_validar_cupom'),

    # ====================================================================
    # 3. ROTAS DA CONTA DO CLIENTE
    # ====================================================================
    path('clientes/registro/', views_auth.RegistroClienteAPIView.as_view(), name='api_registro_cliente'),
    path('clientes/login/', views_auth.LoginClienteAPIView.as_view(), name='api_login_cliente'),
    path('clientes/<str:cliente_id>/desejos/', views_auth.ListaDesejosAPIView.as_view(), name='api_desejos'),
    path('clientes/<str:cliente_id>/enderecos/', views_auth.EnderecoClienteAPIView.as_view(), name='api_enderecos'),

    # ====================================================================
    # 4. ROTAS ADMINISTRATIVAS
    # ====================================================================
    # Pedidos
    path('pedidos/', views_admin.PedidoListaAPIView.as_view(), name='api_pedidos'),
    path('pedidos/<str:pedido_id>/', views_admin.PedidoDetalheAPIView.as_view(), name='api_pedido'),
    path('pedidos/<str:pedido_id>/status/', views_admin.AtualizarStatusPedidoAPIView.as_view(), name='api_status_pedido'),
    path('pedidos/<str:pedido_id>/rastreio/', views_admin.AtualizarRastreioAPIView.as_view(), name='api_rastreio_pedido'),
    path('pedidos/<str:pedido_id>/fatura/', views_admin.FaturaPedidoAPIView.as_view(), name='api_fatura_pedido'),

    # Cupons
    path('cupons/', views_admin.CupomListaAPIView.as_view(), name='api_cupons'),
    path('cupons/<str:cupom_id>/', views_admin.CupomDetalheAPIView.as_view(), name='api_cupom'),

    # Clientes
    path('clientes/', views_admin.ClienteListaAPIView.as_view(), name='api_clientes'),
    path('clientes/<str:cliente_id>/status/', views_admin.StatusClienteAPIView.as_view(), name='api_status_cliente'),

    # Suporte
    path('chamados/', views.ChamadosAPIView.as_view(), name='api_chamados'),
    path('chamados/<str:chamado_id>/', views_admin.ChamadoDetalheAPIView.as_view(), name='api_chamado'),
    path('chamados/<str:chamado_id>/respostas/', views_admin.ResponderChamadoAPIView.as_view(), name='api_responder_chamado'),
    path('chamados/<str:chamado_id>/notas/', views_admin.NotaChamadoAPIView.as_view(), name='api_nota_chamado'),
    path('chamados/<str:chamado_id>/status/', views_admin.StatusChamadoAPIView.as_view(), name='api_status_chamado'),

    # Auditoria e painel
    path('auditoria/', views_admin.AuditoriaAPIView.as_view(), name='api_auditoria'),
    path('painel/estatisticas/', views_admin.EstatisticasPainelAPIView.as_view(), name='api_estatisticas'),
    path('painel/insight/', views_admin.InsightPainelAPIView.as_view(), name='api_insight'),
]
