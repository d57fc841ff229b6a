from django.apps import AppConfig

class VendasConfig(AppConfig):
    # Pedidos, cupons e clientes da loja.
    name = 'seoulmuse.vendas'
    label = 'vendas'
    verbose_name = 'Vendas e Pedidos'
    default_auto_field = 'django.db.models.BigAutoField'
