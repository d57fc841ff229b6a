from rest_framework import serializers

from seoulmuse.core.entities import (
    Cupom, DadosCliente, Endereco, FiltrosCatalogo, PoliticaExclusao, PrioridadeChamado, Produto,
    StatusChamado, StatusCliente, StatusCupom, StatusPedido, StatusProduto, TipoDesconto,
)


class EnumField(serializers.ChoiceField):
    """ChoiceField que devolve o membro do Enum e serializa pelo valor."""

    def __init__(self, enum, **kwargs):
        self.enum = enum
        super().__init__(choices=[(membro.value, membro.value) for membro in enum], **kwargs)

    def to_internal_value(self, data):
        return self.enum(super().to_internal_value(data))

    def to_representation(self, value):
        return self.enum(value).value


# ====================================================================
# SERIALIZERS DO CATÁLOGO
# ====================================================================

class ProdutoSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    sku = serializers.CharField(max_length=64)
    nome = serializers.CharField(max_length=255)
    preco = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    estoque = serializers.IntegerField(min_value=0)
    categoria = serializers.CharField(max_length=100)
    status = EnumField(StatusProduto, default=StatusProduto.RASCUNHO)
    colecao = serializers.CharField(max_length=100, required=False, allow_null=True, allow_blank=True)
    imagem = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    calor_social = serializers.IntegerField(required=False, allow_null=True)
    avaliacao = serializers.DecimalField(max_digits=3, decimal_places=1, required=False, allow_null=True)
    data_criacao = serializers.DateTimeField(read_only=True)
    data_atualizacao = serializers.DateTimeField(read_only=True, allow_null=True)

    def to_entity(self, produto_id=None) -> Produto:
        return Produto(id=produto_id, **self.validated_data)


class FiltrosCatalogoSerializer(serializers.Serializer):
    """Parâmetros de consulta da listagem do catálogo."""
    busca = serializers.CharField(required=False, allow_blank=True, default='')
    categoria = serializers.CharField(required=False, default='All')
    status = serializers.CharField(required=False, allow_null=True, default=None)
    estoque = serializers.CharField(required=False, default='All')
    ordenar_por = serializers.CharField(required=False, default='createdAt')
    ordem = serializers.CharField(required=False, default='desc')
    preco_min = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True, default=None)
    preco_max = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True, default=None)

    def to_filtros(self) -> FiltrosCatalogo:
        dados = dict(self.validated_data)
        dados['nivel_estoque'] = dados.pop('estoque')
        return FiltrosCatalogo(**dados)


class AjusteEstoqueSerializer(serializers.Serializer):
    delta = serializers.IntegerField()


class ExclusaoProdutoSerializer(serializers.Serializer):
    politica = EnumField(PoliticaExclusao, required=False, default=PoliticaExclusao.ARQUIVAR)


# ====================================================================
# SERIALIZERS PARA O CARRINHO E CHECKOUT
# ====================================================================

class ItemCarrinhoSerializer(serializers.Serializer):
    id_linha = serializers.CharField(read_only=True)
    produto_id = serializers.CharField(read_only=True)
    nome = serializers.CharField(read_only=True)
    preco_unitario = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    quantidade = serializers.IntegerField(read_only=True)


class CarrinhoSerializer(serializers.Serializer):
    chave = serializers.CharField(read_only=True)
    itens = ItemCarrinhoSerializer(many=True, read_only=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class AdicionarItemCarrinhoSerializer(serializers.Serializer):
    produto_id = serializers.CharField()
    quantidade = serializers.IntegerField(required=False, default=1)


class CotacaoSerializer(serializers.Serializer):
    codigo_cupom = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    metodo_envio = serializers.CharField(required=False, allow_null=True, default=None)


class CheckoutSerializer(CotacaoSerializer):
    """
    Serializer para a validação dos dados de checkout.
    """
    nome = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    forma_pagamento = serializers.CharField(max_length=50, required=False, default='Credit Card')
    endereco_entrega = serializers.JSONField(required=False, default='N/A')

    def to_dados_cliente(self) -> DadosCliente:
        return DadosCliente(
            nome=self.validated_data['nome'],
            email=self.validated_data['email'],
            forma_pagamento=self.validated_data['forma_pagamento'],
            endereco_entrega=self.validated_data['endereco_entrega'],
        )


class ResumoPrecosSerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    desconto = serializers.DecimalField(max_digits=12, decimal_places=2)
    imposto = serializers.DecimalField(max_digits=12, decimal_places=2)
    frete = serializers.DecimalField(max_digits=12, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)


# ====================================================================
# SERIALIZERS DE PEDIDOS
# ====================================================================

class ItemPedidoSerializer(serializers.Serializer):
    produto_id = serializers.CharField()
    nome = serializers.CharField()
    quantidade = serializers.IntegerField()
    preco_unitario = serializers.DecimalField(max_digits=10, decimal_places=2)


class PedidoSerializer(serializers.Serializer):
    id = serializers.CharField()
    nome_cliente = serializers.CharField()
    email_cliente = serializers.CharField()
    itens = ItemPedidoSerializer(many=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    desconto = serializers.DecimalField(max_digits=12, decimal_places=2)
    imposto = serializers.DecimalField(max_digits=12, decimal_places=2)
    frete = serializers.DecimalField(max_digits=12, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    status = EnumField(StatusPedido)
    forma_pagamento = serializers.CharField()
    endereco_entrega = serializers.JSONField()
    codigo_rastreio = serializers.CharField(allow_null=True)
    codigo_cupom = serializers.CharField(allow_null=True)
    data_pedido = serializers.DateTimeField()


class AtualizarStatusPedidoSerializer(serializers.Serializer):
    # Validado no caso de uso (StatusInvalidoError para valores desconhecidos)
    status = serializers.CharField()


class AtualizarRastreioSerializer(serializers.Serializer):
    codigo_rastreio = serializers.CharField(max_length=50)


class SolicitarDevolucaoSerializer(serializers.Serializer):
    email = serializers.EmailField()


# ====================================================================
# SERIALIZERS DE CUPONS E CLIENTES
# ====================================================================

class CupomSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    codigo = serializers.CharField(max_length=50)
    tipo_desconto = EnumField(TipoDesconto)
    valor = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    data_expiracao = serializers.CharField(required=False, allow_null=True, default=None)
    quantidade_usos = serializers.IntegerField(read_only=True)
    status = EnumField(StatusCupom, required=False, default=StatusCupom.ATIVO)

    def validate_data_expiracao(self, value):
        if value:
            serializers.DateField().to_internal_value(value)
        return value

    def to_entity(self) -> Cupom:
        return Cupom(**self.validated_data)


class ValidarCupomSerializer(serializers.Serializer):
    codigo = serializers.CharField()


class EnderecoSerializer(serializers.Serializer):
    nome_completo = serializers.CharField(max_length=255)
    rua = serializers.CharField(max_length=255)
    cidade = serializers.CharField(max_length=100)
    estado = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    cep = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    pais = serializers.CharField(max_length=100, required=False, default='South Korea')

    def to_entity(self) -> Endereco:
        return Endereco(**self.validated_data)


class ClienteSerializer(serializers.Serializer):
    """Representação pública do cliente (sem o hash da senha)."""
    id = serializers.CharField()
    nome = serializers.CharField()
    email = serializers.CharField()
    total_pedidos = serializers.IntegerField()
    total_gasto = serializers.DecimalField(max_digits=12, decimal_places=2)
    status = EnumField(StatusCliente)
    lista_desejos = serializers.ListField(child=serializers.CharField())
    enderecos = EnderecoSerializer(many=True)
    data_cadastro = serializers.CharField(allow_null=True)


class RegistroClienteSerializer(serializers.Serializer):
    nome = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    email = serializers.EmailField()
    senha = serializers.CharField(min_length=6, write_only=True)


class LoginClienteSerializer(serializers.Serializer):
    email = serializers.EmailField()
    senha = serializers.CharField(write_only=True)


class StatusClienteSerializer(serializers.Serializer):
    status = EnumField(StatusCliente)


class DesejoSerializer(serializers.Serializer):
    produto_id = serializers.CharField()


# ====================================================================
# SERIALIZERS DE SUPORTE E AUDITORIA
# ====================================================================

class RespostaChamadoSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    autor = serializers.CharField(read_only=True)
    mensagem = serializers.CharField()
    admin = serializers.BooleanField(read_only=True)
    data = serializers.DateTimeField(read_only=True)


class ChamadoSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    cliente_id = serializers.CharField(required=False, default='anon')
    nome_cliente = serializers.CharField(max_length=255, required=False, default='Anonymous')
    assunto = serializers.CharField(max_length=255, required=False, default='General Inquiry')
    mensagem = serializers.CharField()
    pedido_id = serializers.CharField(required=False, allow_null=True, default=None)
    status = EnumField(StatusChamado, read_only=True)
    prioridade = EnumField(PrioridadeChamado, required=False, default=PrioridadeChamado.MEDIA)
    notas_internas = serializers.ListField(child=serializers.CharField(), read_only=True)
    respostas = RespostaChamadoSerializer(many=True, read_only=True)
    data_criacao = serializers.DateTimeField(read_only=True)
    data_atualizacao = serializers.DateTimeField(read_only=True)


class NotaChamadoSerializer(serializers.Serializer):
    nota = serializers.CharField()


class StatusChamadoSerializer(serializers.Serializer):
    status = EnumField(StatusChamado)


class RegistroAuditoriaSerializer(serializers.Serializer):
    id = serializers.CharField()
    acao = serializers.CharField()
    alvo_id = serializers.CharField()
    mensagem = serializers.CharField()
    autor = serializers.CharField()
    data = serializers.DateTimeField()
