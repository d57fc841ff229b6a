# Define os modelos para o domínio de Carrinho.

from django.db import models


class ItemCarrinho(models.Model):
    """
    Linha do carrinho identificada pela chave da sessão do cliente.
    O preço unitário é congelado no momento da adição.
    """
    id_linha = models.CharField(primary_key=True, max_length=64)
    chave_carrinho = models.CharField(max_length=64, db_index=True)
    # Remoção física do produto apaga as linhas de todos os carrinhos
    produto = models.ForeignKey('catalog.Produto', on_delete=models.CASCADE, related_name='linhas_carrinho')
    nome = models.CharField(max_length=255)
    preco_unitario = models.DecimalField(max_digits=10, decimal_places=2)
    quantidade = models.PositiveIntegerField(default=1)
    data_adicao = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Item do Carrinho"
        verbose_name_plural = "Itens do Carrinho"
        db_table = 'carrinho_item'
        ordering = ['data_adicao', 'id_linha']

    def __str__(self):
        return f"{self.quantidade}x {self.nome} (carrinho {self.chave_carrinho})"
