"""
Conta do cliente da loja: cadastro, login, lista de desejos e endereços.
As senhas são gravadas com o hasher padrão do Django (make_password).

O login devolve um token de acesso do simplejwt com a claim `cliente_id`.
As rotas da conta exigem esse token no cabeçalho X-Cliente-Token; o
cabeçalho Authorization continua reservado ao JWT do painel administrativo.
"""
from typing import Optional

from rest_framework import status
from rest_framework.exceptions import NotAuthenticated, PermissionDenied
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from seoulmuse.core.dependency_injection import get_clientes_use_case
from .serializers import (
    ClienteSerializer,
    DesejoSerializer,
    EnderecoSerializer,
    LoginClienteSerializer,
    RegistroClienteSerializer,
)
from .views import CoreAPIView

CABECALHO_TOKEN_CLIENTE = 'X-Cliente-Token'


def emitir_token_cliente(cliente) -> str:
    token = AccessToken()
    token['cliente_id'] = cliente.id
    return str(token)


def cliente_do_token(request) -> Optional[str]:
    """Id do cliente no token do cabeçalho, ou None se ausente, expirado ou adulterado."""
    bruto = request.headers.get(CABECALHO_TOKEN_CLIENTE)
    if not bruto:
        return None
    try:
        return AccessToken(bruto).get('cliente_id')
    except TokenError:
        return None


class ContaClienteAPIView(CoreAPIView):
    """Base das rotas da conta: só o dono do token altera os próprios dados."""
    metodos_publicos = ('POST',)

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        dono = cliente_do_token(request)
        if dono is None:
            raise NotAuthenticated(f"Informe um token de cliente válido no cabeçalho {CABECALHO_TOKEN_CLIENTE}.")
        if dono != kwargs.get('cliente_id'):
            raise PermissionDenied("O token informado pertence a outra conta.")


class RegistroClienteAPIView(CoreAPIView):
    metodos_publicos = ('POST',)

    def post(self, request):
        serializer = RegistroClienteSerializer(data=request.data)
        if serializer.is_valid():
            cliente = get_clientes_use_case().registrar(**serializer.validated_data)
            return Response(ClienteSerializer(cliente).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class LoginClienteAPIView(CoreAPIView):
    metodos_publicos = ('POST',)

    def post(self, request):
        serializer = LoginClienteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        cliente = get_clientes_use_case().autenticar(
            serializer.validated_data['email'], serializer.validated_data['senha']
        )
        if cliente is None:
            # Mesma mensagem para senha errada, conta inexistente ou bloqueada
            return Response({'message': 'E-mail ou senha inválidos.'}, status=status.HTTP_401_UNAUTHORIZED)
        dados = dict(ClienteSerializer(cliente).data)
        dados['token'] = emitir_token_cliente(cliente)
        return Response(dados)


class ListaDesejosAPIView(ContaClienteAPIView):

    def post(self, request, cliente_id):
        """Alterna o produto na lista de desejos."""
        serializer = DesejoSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        lista = get_clientes_use_case().alternar_desejo(cliente_id, serializer.validated_data['produto_id'])
        return Response({'lista_desejos': lista})


class EnderecoClienteAPIView(ContaClienteAPIView):

    def post(self, request, cliente_id):
        serializer = EnderecoSerializer(data=request.data)
        if serializer.is_valid():
            cliente = get_clientes_use_case().adicionar_endereco(cliente_id, serializer.to_entity())
            return Response(ClienteSerializer(cliente).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
