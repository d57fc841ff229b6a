from django.apps import AppConfig


class SuporteConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'seoulmuse.suporte'
    label = 'suporte'
    verbose_name = 'Suporte e Auditoria'
