# Configuração da interface administrativa do Django para os modelos da Seoul Muse.
# Mudanças de status de pedido e de estoque passam pela API, que valida as
# transições e grava a auditoria; aqui esses campos são somente leitura.

from django import forms
from django.contrib import admin

from seoulmuse.catalog.models import Produto
from seoulmuse.core.use_cases import GerenciarCatalogoUseCase
from seoulmuse.infrastructure.mappers import ProdutoMapper
from seoulmuse.infrastructure.repositories import AuditoriaRepositoryDjango, ProdutoRepositoryDjango
from seoulmuse.suporte.models import Chamado, RegistroAuditoria
from seoulmuse.vendas.models import Cliente, Cupom, ItemPedido, Pedido

from .views import autor_da_requisicao


# ====================================================================
# 1. ADMIN PARA PRODUTOS
# ====================================================================

class ProdutoAdminForm(forms.ModelForm):

    class Meta:
        model = Produto
        fields = '__all__'

    def clean_preco(self):
        preco = self.cleaned_data['preco']
        if preco < 0:
            raise forms.ValidationError("O preço deve ser maior ou igual a zero.")
        return preco


@admin.register(Produto)
class ProdutoAdmin(admin.ModelAdmin):
    """
    Edição de produtos existentes. O cadastro e a troca de SKU ficam na API;
    cada gravação daqui passa pelo caso de uso e entra na trilha de auditoria.
    """
    form = ProdutoAdminForm
    list_display = ('nome', 'sku', 'preco', 'estoque', 'categoria', 'status', 'data_criacao')
    list_filter = ('status', 'categoria', 'colecao')
    search_fields = ('nome', 'sku', 'id')
    ordering = ('-data_criacao', 'id')
    readonly_fields = ('sku', 'estoque', 'data_criacao', 'data_atualizacao')

    def has_add_permission(self, request):
        return False

    def save_model(self, request, obj, form, change):
        catalogo_uc = GerenciarCatalogoUseCase(ProdutoRepositoryDjango(), AuditoriaRepositoryDjango())
        catalogo_uc.salvar(ProdutoMapper.to_entity(obj), autor=autor_da_requisicao(request))


# ====================================================================
# 2. ADMIN PARA PEDIDOS
# ====================================================================

class ItemPedidoInline(admin.TabularInline):
    """Exibe os itens comprados dentro do detalhe do Pedido."""
    model = ItemPedido
    readonly_fields = ('produto_id', 'nome_produto', 'preco_unitario', 'quantidade')
    extra = 0
    can_delete = False


@admin.register(Pedido)
class PedidoAdmin(admin.ModelAdmin):
    list_display = ('id', 'email_cliente', 'data_pedido', 'total', 'status', 'forma_pagamento')
    list_filter = ('status', 'forma_pagamento', 'data_pedido')
    search_fields = ('id', 'email_cliente', 'nome_cliente', 'codigo_rastreio')
    date_hierarchy = 'data_pedido'
    inlines = [ItemPedidoInline]
    readonly_fields = (
        'status', 'data_pedido', 'subtotal', 'desconto', 'imposto', 'frete', 'total', 'codigo_cupom'
    )

    def has_add_permission(self, request):
        """Pedidos só nascem pelo checkout."""
        return False


# ====================================================================
# 3. CUPONS, CLIENTES E SUPORTE
# ====================================================================

@admin.register(Cupom)
class CupomAdmin(admin.ModelAdmin):
    list_display = ('codigo', 'tipo_desconto', 'valor', 'status', 'quantidade_usos', 'data_expiracao')
    list_filter = ('status', 'tipo_desconto')
    search_fields = ('codigo',)


@admin.register(Cliente)
class ClienteAdmin(admin.ModelAdmin):
    list_display = ('email', 'nome', 'status', 'total_pedidos', 'total_gasto', 'data_cadastro')
    list_filter = ('status',)
    search_fields = ('email', 'nome')
    exclude = ('senha_hash',)


@admin.register(Chamado)
class ChamadoAdmin(admin.ModelAdmin):
    list_display = ('id', 'assunto', 'nome_cliente', 'status', 'prioridade', 'data_atualizacao')
    list_filter = ('status', 'prioridade')
    search_fields = ('id', 'assunto', 'nome_cliente', 'pedido_id')


@admin.register(RegistroAuditoria)
class RegistroAuditoriaAdmin(admin.ModelAdmin):
    list_display = ('data', 'acao', 'alvo_id', 'autor')
    list_filter = ('acao',)
    search_fields = ('alvo_id', 'mensagem', 'autor')

    # Trilha somente de inclusão
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
