import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models


class Order(models.Model):
    """
    Modelo que representa um pedido/venda no sistema.
    """
    STATUS_CHOICES = [
        ('pending', 'Pendente'),
        ('confirmed', 'Confirmado'),
        ('delivered', 'Entregue'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='pedidos')

    # Contato (snapshot no momento do pedido)
    customer_name = models.CharField(max_length=255)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=30)

    # Status e Data
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(null=True, blank=True)

    # Valores
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    class Meta:
        verbose_name = 'Pedido'
        verbose_name_plural = 'Pedidos'
        db_table = 'vendas_pedido'
        ordering = ['-created_at']

    def __str__(self):
        return f"Pedido #{self.pk} - {self.customer_email}"


class OrderItem(models.Model):
    """
    Modelo que representa um item dentro de um pedido.
    Mantém um snapshot dos dados do produto no momento da compra.
    """
    order = models.ForeignKey(Order, related_name='items', on_delete=models.CASCADE)
    # O produto pode ser removido do catálogo; o snapshot continua válido
    product = models.ForeignKey(
        'catalog.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='itens_venda'
    )
    product_ref = models.CharField(max_length=64)

    # Snapshot dos dados do produto
    product_name = models.CharField(max_length=255)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField()
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        verbose_name = 'Item do Pedido'
        verbose_name_plural = 'Itens do Pedido'
        db_table = 'vendas_item_pedido'
        ordering = ['id']

    def __str__(self):
        return f"{self.quantity}x {self.product_name} em Pedido #{self.order_id}"

    def save(self, *args, **kwargs):
        """Calcula o subtotal antes de salvar."""
        self.subtotal = self.unit_price * self.quantity
        super().save(*args, **kwargs)
