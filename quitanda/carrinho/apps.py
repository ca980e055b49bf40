from django.apps import AppConfig


class CarrinhoConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'quitanda.carrinho'
    label = 'carrinho'
    verbose_name = 'Carrinhos Salvos'
