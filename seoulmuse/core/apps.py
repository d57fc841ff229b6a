# seoulmuse/core/apps.py

from django.apps import AppConfig

class CoreConfig(AppConfig):
    name = 'seoulmuse.core'
    label = 'core'
    verbose_name = 'Camada de Entidades e Lógica (Core)'

    # Sem modelos: a persistência fica nas apps catalog, vendas, carrinho e suporte.
    default_auto_field = 'django.db.models.BigAutoField'
