from django.apps import AppConfig


class CarrinhoConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'seoulmuse.carrinho'
    label = 'carrinho'
    verbose_name = 'Carrinho de Compras'
