from django.apps import AppConfig


class ContasConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'quitanda.contas'
    label = 'contas'
    verbose_name = 'Contas e Perfis'
