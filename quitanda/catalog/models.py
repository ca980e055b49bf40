import uuid

from django.core.validators import MinValueValidator
from decimal import Decimal
from django.db import models

# ====================================================================
# Produto
# ====================================================================

class Product(models.Model):
    """Modelo para representar um produto no catálogo."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, verbose_name="Nome")
    price = models.DecimalField(
        max_digits=10, decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name="Preço",
    )
    category = models.CharField(max_length=100, db_index=True, verbose_name="Categoria")
    unit = models.CharField(max_length=50, verbose_name="Unidade", help_text="Ex: kg, unidade, dúzia")

    # Estoque e Disponibilidade
    quantity = models.PositiveIntegerField(default=0, verbose_name="Estoque Atual")
    in_stock = models.BooleanField(default=False, verbose_name="Em Estoque")

    description = models.TextField(blank=True, default='', verbose_name="Descrição")
    image = models.CharField(max_length=500, blank=True, default='', verbose_name="Imagem (URL)")

    # Datas
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Produto"
        verbose_name_plural = "Produtos"
        ordering = ['-created_at']
        db_table = 'catalogo_produto'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        # O indicador de estoque acompanha sempre a quantidade disponível
        self.in_stock = self.quantity > 0
        super().save(*args, **kwargs)

    @property
    def preco_formatado(self):
        """Retorna o preço formatado em Real Brasileiro."""
        return f"R$ {self.price:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
