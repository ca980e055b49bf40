# Define o modelo de persistência do Carrinho de usuários autenticados.

from django.db import models


class SavedCart(models.Model):
    """
    Carrinho serializado de um usuário autenticado. O conteúdo é opaco para o
    banco: o motor do carrinho grava e lê os bytes pela chave.
    """
    key = models.CharField(max_length=150, unique=True)
    payload = models.BinaryField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Carrinho Salvo"
        verbose_name_plural = "Carrinhos Salvos"
        db_table = 'carrinho_salvo'

    def __str__(self):
        return f"Carrinho {self.key}"
