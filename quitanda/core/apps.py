# quitanda/core/apps.py

from django.apps import AppConfig

class CoreConfig(AppConfig):
    # O nome completo do path da aplicação
    name = 'quitanda.core'
    label = 'core'
    verbose_name = 'Camada de Entidades e Lógica (Core)'

    # Esta camada não possui modelos de banco de dados (a Infraestrutura cuida disso).
    default_auto_field = 'django.db.models.BigAutoField'
