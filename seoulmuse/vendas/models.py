from datetime import date
from decimal import Decimal

from django.db import models
from django.utils import timezone

from seoulmuse.core.entities import StatusCliente, StatusCupom, StatusPedido, TipoDesconto


class Pedido(models.Model):
    """
    Modelo que representa um pedido/venda no sistema.
    Os valores são o snapshot da Calculadora de Preços no momento do checkout.
    """
    STATUS_CHOICES = [(s.value, s.value) for s in StatusPedido]

    id = models.CharField(primary_key=True, max_length=20)  # ORD-XXXXXXXX

    # Cliente (referenciado pelo e-mail, sem FK)
    nome_cliente = models.CharField(max_length=255)
    email_cliente = models.CharField(max_length=254, db_index=True, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=StatusPedido.PENDENTE.value)
    data_pedido = models.DateTimeField(default=timezone.now)

    # Valores
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    desconto = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    imposto = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    frete = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    forma_pagamento = models.CharField(max_length=50, default='Credit Card')
    endereco_entrega = models.JSONField(default=dict, blank=True)
    codigo_rastreio = models.CharField(max_length=50, blank=True, null=True)
    codigo_cupom = models.CharField(max_length=50, blank=True, null=True)

    class Meta:
        verbose_name = 'Pedido'
        verbose_name_plural = 'Pedidos'
        db_table = 'vendas_pedido'
        ordering = ['-data_pedido']

    def __str__(self):
        return f"Pedido {self.id} - {self.email_cliente}"


class ItemPedido(models.Model):
    """
    Modelo que representa um item dentro de um pedido.
    Mantém um snapshot dos dados do produto no momento da compra, por isso
    não há FK para o catálogo: remover um produto não altera pedidos antigos.
    """
    pedido = models.ForeignKey(Pedido, related_name='itens', on_delete=models.CASCADE)
    produto_id = models.CharField(max_length=64)

    nome_produto = models.CharField(max_length=255)
    preco_unitario = models.DecimalField(max_digits=10, decimal_places=2)
    quantidade = models.PositiveIntegerField()

    class Meta:
        verbose_name = 'Item do Pedido'
        verbose_name_plural = 'Itens do Pedido'
        db_table = 'vendas_item_pedido'
        ordering = ['id']

    def __str__(self):
        return f"{self.quantidade}x {self.nome_produto} em Pedido {self.pedido_id}"


class Cupom(models.Model):
    TIPO_CHOICES = [(t.value, t.value) for t in TipoDesconto]
    STATUS_CHOICES = [(s.value, s.value) for s in StatusCupom]

    id = models.CharField(primary_key=True, max_length=64)
    codigo = models.CharField(max_length=50, unique=True)  # gravado em maiúsculas
    tipo_desconto = models.CharField(max_length=20, choices=TIPO_CHOICES)
    valor = models.DecimalField(max_digits=10, decimal_places=2)
    data_expiracao = models.DateField(blank=True, null=True)
    quantidade_usos = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=StatusCupom.ATIVO.value)

    class Meta:
        verbose_name = 'Cupom'
        verbose_name_plural = 'Cupons'
        db_table = 'vendas_cupom'
        ordering = ['codigo']

    def __str__(self):
        return self.codigo


class Cliente(models.Model):
    """Cliente da loja. Os pedidos o referenciam pelo e-mail."""
    STATUS_CHOICES = [(s.value, s.value) for s in StatusCliente]

    id = models.CharField(primary_key=True, max_length=64)
    nome = models.CharField(max_length=255)
    email = models.CharField(max_length=254, unique=True)
    senha_hash = models.CharField(max_length=255, blank=True)
    total_pedidos = models.PositiveIntegerField(default=0)
    total_gasto = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=StatusCliente.ATIVO.value)
    # Remover um produto do catálogo limpa automaticamente as listas de desejos
    lista_desejos = models.ManyToManyField('catalog.Produto', blank=True, related_name='desejado_por')
    enderecos = models.JSONField(default=list, blank=True)
    data_cadastro = models.DateField(default=date.today)

    class Meta:
        verbose_name = 'Cliente'
        verbose_name_plural = 'Clientes'
        db_table = 'vendas_cliente'
        ordering = ['id']

    def __str__(self):
        return f"{self.nome} <{self.email}>"
