import logging

from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from seoulmuse.core.dependency_injection import (
    get_carrinho_use_case,
    get_catalogo_use_case,
    get_chamados_use_case,
    get_checkout_use_case,
    get_conteudo_ia_use_case,
    get_pedidos_admin_use_case,
)
from seoulmuse.core.entities import StatusProduto
from seoulmuse.core.exceptions import (
    BaseErroCore,
    EstoqueInsuficienteError,
    ItemNaoEncontradoError,
    PedidoNaoEncontradoError,
    PersistenciaError,
    ProdutoNaoEncontradoError,
    SkuDuplicadoError,
)
from seoulmuse.core.formatadores import nome_arquivo_exportacao
from seoulmuse.core.use_cases import AUTOR_SISTEMA
from .serializers import (
    AdicionarItemCarrinhoSerializer,
    AjusteEstoqueSerializer,
    CarrinhoSerializer,
    ChamadoSerializer,
    CheckoutSerializer,
    CotacaoSerializer,
    CupomSerializer,
    ExclusaoProdutoSerializer,
    FiltrosCatalogoSerializer,
    PedidoSerializer,
    ProdutoSerializer,
    ResumoPrecosSerializer,
    SolicitarDevolucaoSerializer,
)

logger = logging.getLogger(__name__)


# ====================================================================
# BASE: tradução das exceções do Core para respostas HTTP
# ====================================================================

class CoreAPIView(APIView):
    """
    APIView que converte as exceções da camada de negócio em respostas
    {'message': ...} com o status HTTP correspondente.
    A ordem importa: subclasses antes das classes base.
    """
    STATUS_POR_ERRO = (
        (SkuDuplicadoError, status.HTTP_409_CONFLICT),
        (EstoqueInsuficienteError, status.HTTP_409_CONFLICT),
        (ItemNaoEncontradoError, status.HTTP_404_NOT_FOUND),
        (PersistenciaError, status.HTTP_503_SERVICE_UNAVAILABLE),
        (BaseErroCore, status.HTTP_400_BAD_REQUEST),
    )

    # Métodos liberados sem autenticação; os demais exigem usuário administrativo
    metodos_publicos = ()

    def get_permissions(self):
        if self.request.method in self.metodos_publicos:
            return [AllowAny()]
        return [IsAdminUser()]

    def handle_exception(self, exc):
        if isinstance(exc, BaseErroCore):
            for tipo, codigo in self.STATUS_POR_ERRO:
                if isinstance(exc, tipo):
                    if codigo >= 500:
                        logger.error("Falha de armazenamento em %s: %s", self.request.path, exc.message)
                    return Response({'message': exc.message}, status=codigo)
        return super().handle_exception(exc)


def autor_da_requisicao(request) -> str:
    """Identificação gravada na trilha de auditoria."""
    usuario = request.user
    if usuario and usuario.is_authenticated:
        return usuario.email or usuario.get_username()
    return AUTOR_SISTEMA


def chave_carrinho(request) -> str:
    """
    O carrinho é identificado pelo cabeçalho X-Carrinho-Chave (clientes da API)
    ou, na falta dele, pela chave da sessão do Django.
    """
    chave = request.headers.get('X-Carrinho-Chave')
    if chave:
        return chave
    if not request.session.session_key:
        request.session.save()
    return request.session.session_key


# ====================================================================
# CATÁLOGO
# ====================================================================

class ProdutoListaAPIView(CoreAPIView):
    """
    GET: vitrine pública (somente produtos ativos) ou listagem completa para o painel.
    POST: cadastro de produto (admin).
    """
    metodos_publicos = ('GET',)

    def get(self, request):
        filtros_serializer = FiltrosCatalogoSerializer(data=request.query_params)
        if not filtros_serializer.is_valid():
            return Response(filtros_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        filtros = filtros_serializer.to_filtros()
        if not request.user.is_staff:
            filtros.status = StatusProduto.ATIVO.value

        produtos = get_catalogo_use_case().listar(filtros)
        return Response(ProdutoSerializer(produtos, many=True).data)

    def post(self, request):
        serializer = ProdutoSerializer(data=request.data)
        if serializer.is_valid():
            produto = get_catalogo_use_case().salvar(serializer.to_entity(), autor=autor_da_requisicao(request))
            return Response(ProdutoSerializer(produto).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class ProdutoDetalheAPIView(CoreAPIView):
    metodos_publicos = ('GET',)

    def get(self, request, produto_id):
        produto = get_catalogo_use_case().detalhar(produto_id)
        if produto.status != StatusProduto.ATIVO and not request.user.is_staff:
            raise ProdutoNaoEncontradoError(produto_id)
        return Response(ProdutoSerializer(produto).data)

    def put(self, request, produto_id):
        catalogo_uc = get_catalogo_use_case()
        catalogo_uc.detalhar(produto_id)

        serializer = ProdutoSerializer(data=request.data)
        if serializer.is_valid():
            produto = catalogo_uc.salvar(serializer.to_entity(produto_id), autor=autor_da_requisicao(request))
            return Response(ProdutoSerializer(produto).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    def delete(self, request, produto_id):
        """?politica=soft (padrão, arquiva) ou ?politica=hard (remove e libera o SKU)."""
        serializer = ExclusaoProdutoSerializer(data=request.query_params)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        get_catalogo_use_case().deletar(
            produto_id, serializer.validated_data['politica'], autor=autor_da_requisicao(request)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class AjusteEstoqueAPIView(CoreAPIView):

    def patch(self, request, produto_id):
        serializer = AjusteEstoqueSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        catalogo_uc = get_catalogo_use_case()
        catalogo_uc.ajustar_estoque(produto_id, serializer.validated_data['delta'], autor=autor_da_requisicao(request))
        return Response(ProdutoSerializer(catalogo_uc.detalhar(produto_id)).data)


class ExportarCatalogoAPIView(CoreAPIView):
    """Baixa a listagem atual (mesmos filtros da listagem) em CSV."""

    def get(self, request):
        filtros_serializer = FiltrosCatalogoSerializer(data=request.query_params)
        if not filtros_serializer.is_valid():
            return Response(filtros_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        conteudo = get_catalogo_use_case().exportar_csv(filtros_serializer.to_filtros())
        response = HttpResponse(conteudo, content_type='text/csv; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="{nome_arquivo_exportacao()}"'
        return response


class DescricaoProdutoIAAPIView(CoreAPIView):
    """Texto de vitrine gerado por IA (com cache e fallback)."""

    def get(self, request, produto_id):
        produto = get_catalogo_use_case().detalhar(produto_id)
        descricao = get_conteudo_ia_use_case().descricao_produto(produto)
        return Response({'produto_id': produto.id, 'descricao': descricao})


# ====================================================================
# CARRINHO E CHECKOUT
# ====================================================================

class CarrinhoAPIView(CoreAPIView):
    """
    API View para gerenciar o carrinho da sessão atual.
    """
    metodos_publicos = ('GET', 'POST', 'DELETE')

    def get(self, request):
        carrinho = get_carrinho_use_case().obter_carrinho(chave_carrinho(request))
        return Response(CarrinhoSerializer(carrinho).data)

    def post(self, request):
        """
        Adiciona um item ao carrinho.
        """
        serializer = AdicionarItemCarrinhoSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        carrinho = get_carrinho_use_case().adicionar_item(
            chave_carrinho(request),
            produto_id=serializer.validated_data['produto_id'],
            quantidade=serializer.validated_data['quantidade'],
        )
        return Response(CarrinhoSerializer(carrinho).data, status=status.HTTP_201_CREATED)

    def delete(self, request):
        """
        Esvazia o carrinho.
        """
        get_carrinho_use_case().limpar(chave_carrinho(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class ItemCarrinhoAPIView(CoreAPIView):
    metodos_publicos = ('DELETE',)

    def delete(self, request, id_linha):
        carrinho = get_carrinho_use_case().remover_item(chave_carrinho(request), id_linha)
        return Response(CarrinhoSerializer(carrinho).data, status=status.HTTP_200_OK)


class CotacaoAPIView(CoreAPIView):
    """Resumo de preços do carrinho atual, sem criar pedido."""
    metodos_publicos = ('POST',)

    def post(self, request):
        serializer = CotacaoSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        precos, cupom = get_checkout_use_case().cotar(
            chave_carrinho(request),
            codigo_cupom=serializer.validated_data['codigo_cupom'],
            metodo_envio=serializer.validated_data['metodo_envio'],
        )
        return Response({
            'precos': ResumoPrecosSerializer(precos).data,
            'cupom': CupomSerializer(cupom).data if cupom else None,
        })


class CheckoutAPIView(CoreAPIView):
    """
    API View para processar o checkout do carrinho da sessão.
    """
    metodos_publicos = ('POST',)

    def post(self, request):
        serializer = CheckoutSerializer(data=request.data)
        if serializer.is_valid():
            pedido = get_checkout_use_case().executar(
                chave_carrinho(request),
                serializer.to_dados_cliente(),
                codigo_cupom=serializer.validated_data['codigo_cupom'],
                metodo_envio=serializer.validated_data['metodo_envio'],
            )
            return Response(PedidoSerializer(pedido).data, status=status.HTTP_201_CREATED)

        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class SolicitarDevolucaoAPIView(CoreAPIView):
    """
    O cliente confirma o e-mail da compra para pedir a devolução de um pedido entregue.
    """
    metodos_publicos = ('POST',)

    def post(self, request, pedido_id):
        serializer = SolicitarDevolucaoSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        pedidos_uc = get_pedidos_admin_use_case()
        pedido = pedidos_uc.detalhar_pedido(pedido_id)
        email = serializer.validated_data['email'].strip().lower()
        if pedido.email_cliente != email:
            raise PedidoNaoEncontradoError(f"Pedido {pedido_id} não encontrado.")

        pedido = pedidos_uc.solicitar_devolucao(pedido_id, autor=email)
        return Response(PedidoSerializer(pedido).data)


# ====================================================================
# SUPORTE
# ====================================================================

class ChamadosAPIView(CoreAPIView):
    """POST: abertura pública de chamado. GET: fila de atendimento (admin)."""
    metodos_publicos = ('POST',)

    def get(self, request):
        chamados = get_chamados_use_case().listar(request.query_params.get('status'))
        return Response(ChamadoSerializer(chamados, many=True).data)

    def post(self, request):
        serializer = ChamadoSerializer(data=request.data)
        if serializer.is_valid():
            chamado = get_chamados_use_case().abrir(**serializer.validated_data)
            return Response(ChamadoSerializer(chamado).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
