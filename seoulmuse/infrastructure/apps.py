from django.apps import AppConfig


class InfrastructureConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'seoulmuse.infrastructure'
    label = 'infrastructure' # Registra os comandos de gerenciamento (carregar_dados_iniciais)
