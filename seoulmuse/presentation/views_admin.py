"""
Endpoints do painel administrativo: pedidos, cupons, clientes, suporte,
auditoria e indicadores. Todos exigem usuário staff, exceto onde indicado.
"""
from django.http import HttpResponse
from rest_framework import status
from rest_framework.response import Response

from seoulmuse.core.dependency_injection import (
    get_auditoria_use_case,
    get_chamados_use_case,
    get_clientes_use_case,
    get_conteudo_ia_use_case,
    get_cupons_use_case,
    get_estatisticas_use_case,
    get_pedidos_admin_use_case,
)
from seoulmuse.core.exceptions import ClienteNaoEncontradoError, PedidoNaoEncontradoError
from .serializers import (
    AtualizarRastreioSerializer,
    AtualizarStatusPedidoSerializer,
    ChamadoSerializer,
    ClienteSerializer,
    CupomSerializer,
    NotaChamadoSerializer,
    PedidoSerializer,
    RegistroAuditoriaSerializer,
    RespostaChamadoSerializer,
    StatusChamadoSerializer,
    StatusClienteSerializer,
    ValidarCupomSerializer,
)
from .views import CoreAPIView, autor_da_requisicao


# ====================================================================
# PEDIDOS
# ====================================================================

class PedidoListaAPIView(CoreAPIView):

    def get(self, request):
        pedidos = get_pedidos_admin_use_case().listar_todos(request.query_params.get('status'))
        return Response(PedidoSerializer(pedidos, many=True).data)


class PedidoDetalheAPIView(CoreAPIView):

    def get(self, request, pedido_id):
        pedido = get_pedidos_admin_use_case().detalhar_pedido(pedido_id)
        return Response(PedidoSerializer(pedido).data)


class AtualizarStatusPedidoAPIView(CoreAPIView):
    """
    Aplica uma transição da máquina de estados do pedido.
    Transições inválidas retornam 400.
    """

    def patch(self, request, pedido_id):
        serializer = AtualizarStatusPedidoSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        pedido = get_pedidos_admin_use_case().atualizar_status(
            pedido_id, serializer.validated_data['status'], autor=autor_da_requisicao(request)
        )
        if pedido is None:
            raise PedidoNaoEncontradoError(f"Pedido {pedido_id} não encontrado.")
        return Response(PedidoSerializer(pedido).data)


class AtualizarRastreioAPIView(CoreAPIView):

    def patch(self, request, pedido_id):
        serializer = AtualizarRastreioSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        pedidos_uc = get_pedidos_admin_use_case()
        pedidos_uc.atualizar_rastreio(pedido_id, serializer.validated_data['codigo_rastreio'])
        return Response(PedidoSerializer(pedidos_uc.detalhar_pedido(pedido_id)).data)


class FaturaPedidoAPIView(CoreAPIView):

    def get(self, request, pedido_id):
        fatura = get_pedidos_admin_use_case().gerar_fatura(pedido_id)
        response = HttpResponse(fatura, content_type='text/plain; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="fatura-{pedido_id}.txt"'
        return response


# ====================================================================
# CUPONS
# ====================================================================

class CupomListaAPIView(CoreAPIView):

    def get(self, request):
        return Response(CupomSerializer(get_cupons_use_case().listar(), many=True).data)

    def post(self, request):
        serializer = CupomSerializer(data=request.data)
        if serializer.is_valid():
            cupom = get_cupons_use_case().salvar(serializer.to_entity(), autor=autor_da_requisicao(request))
            return Response(CupomSerializer(cupom).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class CupomDetalheAPIView(CoreAPIView):

    def delete(self, request, cupom_id):
        get_cupons_use_case().deletar(cupom_id, autor=autor_da_requisicao(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class ValidarCupomAPIView(CoreAPIView):
    """Consulta pública usada pela tela de checkout."""
    metodos_publicos = ('POST',)

    def post(self, request):
        serializer = ValidarCupomSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        cupom = get_cupons_use_case().buscar_aplicavel(serializer.validated_data['codigo'])
        if cupom is None:
            return Response({'message': 'Cupom inválido ou expirado.'}, status=status.HTTP_404_NOT_FOUND)
        return Response(CupomSerializer(cupom).data)


# ====================================================================
# CLIENTES
# ====================================================================

class ClienteListaAPIView(CoreAPIView):

    def get(self, request):
        return Response(ClienteSerializer(get_clientes_use_case().listar(), many=True).data)


class StatusClienteAPIView(CoreAPIView):
    """Bloqueia ou reativa a conta de um cliente."""

    def patch(self, request, cliente_id):
        serializer = StatusClienteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        cliente = get_clientes_use_case().atualizar_status(cliente_id, serializer.validated_data['status'])
        if cliente is None:
            raise ClienteNaoEncontradoError(f"Cliente {cliente_id} não encontrado.")
        return Response(ClienteSerializer(cliente).data)


# ====================================================================
# SUPORTE
# ====================================================================

class ChamadoDetalheAPIView(CoreAPIView):

    def get(self, request, chamado_id):
        return Response(ChamadoSerializer(get_chamados_use_case().detalhar(chamado_id)).data)


class ResponderChamadoAPIView(CoreAPIView):

    def post(self, request, chamado_id):
        serializer = RespostaChamadoSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        chamado = get_chamados_use_case().responder(
            chamado_id,
            autor=autor_da_requisicao(request),
            mensagem=serializer.validated_data['mensagem'],
            admin=True,
        )
        return Response(ChamadoSerializer(chamado).data, status=status.HTTP_201_CREATED)


class NotaChamadoAPIView(CoreAPIView):

    def post(self, request, chamado_id):
        serializer = NotaChamadoSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        chamado = get_chamados_use_case().adicionar_nota(chamado_id, serializer.validated_data['nota'])
        return Response(ChamadoSerializer(chamado).data, status=status.HTTP_201_CREATED)


class StatusChamadoAPIView(CoreAPIView):

    def patch(self, request, chamado_id):
        serializer = StatusChamadoSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        chamado = get_chamados_use_case().atualizar_status(chamado_id, serializer.validated_data['status'])
        return Response(ChamadoSerializer(chamado).data)


# ====================================================================
# AUDITORIA E PAINEL
# ====================================================================

class AuditoriaAPIView(CoreAPIView):
    """Trilha de auditoria, mais recente primeiro. Filtro opcional ?alvo_id=."""

    def get(self, request):
        registros = get_auditoria_use_case().executar(request.query_params.get('alvo_id'))
        return Response(RegistroAuditoriaSerializer(registros, many=True).data)


class EstatisticasPainelAPIView(CoreAPIView):

    def get(self, request):
        estatisticas = get_estatisticas_use_case().executar()
        return Response({
            'receita_total': f"{estatisticas['receita_total']:.2f}",
            'total_pedidos': estatisticas['total_pedidos'],
            'envios_pendentes': estatisticas['envios_pendentes'],
            'itens_estoque_baixo': estatisticas['itens_estoque_baixo'],
            'limite_estoque_baixo': estatisticas['limite_estoque_baixo'],
        })


class InsightPainelAPIView(CoreAPIView):
    """Análise de tendências gerada por IA a partir dos indicadores do painel."""

    def get(self, request):
        estatisticas = get_estatisticas_use_case().executar()
        return Response({'insight': get_conteudo_ia_use_case().insight_painel(estatisticas)})
