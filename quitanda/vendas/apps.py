from django.apps import AppConfig

class VendasConfig(AppConfig):
    # Caminho Python completo do app; o label curto é usado nas migrações.
    name = 'quitanda.vendas'
    label = 'vendas'
    verbose_name = 'Vendas e Pedidos'
    default_auto_field = 'django.db.models.BigAutoField'
