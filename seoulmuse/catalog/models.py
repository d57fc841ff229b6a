from django.db import models
from django.utils import timezone

from seoulmuse.core.entities import StatusProduto, normalizar_sku

# ====================================================================
# Produto
# ====================================================================

class Produto(models.Model):
    """Modelo para representar um produto no catálogo."""

    STATUS_CHOICES = [(s.value, s.value) for s in StatusProduto]

    # Identificador opaco gerado pela aplicação (compartilhado com a variante local)
    id = models.CharField(primary_key=True, max_length=64)

    sku = models.CharField(max_length=64, verbose_name="SKU")
    # Unicidade do SKU garantida pelo banco, sem diferenciar maiúsculas/espaços
    sku_normalizado = models.CharField(max_length=64, unique=True, editable=False)

    nome = models.CharField(max_length=255, verbose_name="Nome do Produto")
    preco = models.DecimalField(max_digits=10, decimal_places=2)
    estoque = models.PositiveIntegerField(default=0)
    categoria = models.CharField(max_length=100, db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=StatusProduto.RASCUNHO.value)
    colecao = models.CharField(max_length=100, blank=True, null=True, verbose_name="Coleção")
    imagem = models.CharField(max_length=500, blank=True)
    calor_social = models.IntegerField(blank=True, null=True)
    avaliacao = models.DecimalField(max_digits=3, decimal_places=1, blank=True, null=True)

    data_criacao = models.DateTimeField(default=timezone.now)
    data_atualizacao = models.DateTimeField(blank=True, null=True)

    class Meta:
        verbose_name = "Produto"
        verbose_name_plural = "Produtos"
        db_table = 'catalogo_produto'

    def __str__(self):
        return f"{self.nome} ({self.sku})"

    def save(self, *args, **kwargs):
        self.sku_normalizado = normalizar_sku(self.sku)
        super().save(*args, **kwargs)
