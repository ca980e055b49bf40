"""
Camada de Infraestrutura: Implementação dos Repositórios com o Django ORM.

Esta camada traduz as operações abstratas definidas nas Portas do Core
em chamadas concretas ao framework.
"""
import functools
import logging
import uuid
from typing import List, Optional

from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from quitanda.core.entities import Order, OrderStatus, Product, ProductUpdate, UserProfile
from quitanda.core.exceptions import (
    InsufficientStockError,
    OrderNotFoundError,
    PersistenceError,
    ProductNotFoundError,
)
from quitanda.core.ports import IOrderRepository, IProductRepository, IProfileRepository

from .mappers import OrderLineMapper, OrderMapper, ProductMapper, ProfileMapper, get_model

logger = logging.getLogger(__name__)


def persistence_errors(func):
    """Converte falhas do banco de dados em PersistenceError do Core."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as e:
            logger.exception("Erro de banco de dados em %s", func.__qualname__)
            raise PersistenceError() from e
    return wrapper


def _as_uuid(value) -> Optional[uuid.UUID]:
    """IDs mal formados são tratados como inexistentes."""
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


# ====================================================================
# 1. PRODUTOS
# ====================================================================

class ProductRepositoryDjango(IProductRepository):
    """Implementação do ProductRepository usando o Django ORM."""

    @property
    def ProductModel(self):
        return get_model('catalog', 'Product')

    @persistence_errors
    def list_products(self) -> List[Product]:
        return [ProductMapper.to_entity(m) for m in self.ProductModel.objects.order_by('-created_at')]

    @persistence_errors
    def get_by_id(self, product_id: str) -> Optional[Product]:
        pk = _as_uuid(product_id)
        if pk is None:
            return None
        return ProductMapper.to_entity(self.ProductModel.objects.filter(pk=pk).first())

    @persistence_errors
    def create_product(self, product: Product) -> Product:
        model = ProductMapper.to_model(product)
        model.save()
        return ProductMapper.to_entity(model)

    @persistence_errors
    @transaction.atomic
    def update_product(self, product_id: str, update: ProductUpdate) -> Product:
        pk = _as_uuid(product_id)
        model = self.ProductModel.objects.select_for_update().filter(pk=pk).first() if pk else None
        if model is None:
            raise ProductNotFoundError(product_id)

        for campo, valor in update.changes().items():
            setattr(model, campo, valor.strip() if isinstance(valor, str) else valor)
        model.save()  # save() recalcula o indicador in_stock
        return ProductMapper.to_entity(model)

    @persistence_errors
    def delete_product(self, product_id: str) -> None:
        pk = _as_uuid(product_id)
        deleted = self.ProductModel.objects.filter(pk=pk).delete()[0] if pk else 0
        if not deleted:
            raise ProductNotFoundError(product_id)

    @persistence_errors
    def get_product_stock(self, product_id: str) -> int:
        pk = _as_uuid(product_id)
        quantity = (
            self.ProductModel.objects.filter(pk=pk).values_list('quantity', flat=True).first()
            if pk else None
        )
        if quantity is None:
            raise ProductNotFoundError(product_id)
        return quantity

    @persistence_errors
    @transaction.atomic
    def decrement_stock(self, product_id: str, amount: int) -> bool:
        """
        Baixa condicional: o UPDATE só acontece se ainda houver estoque suficiente,
        o que serializa pedidos concorrentes para o mesmo produto.
        """
        pk = _as_uuid(product_id)
        if pk is None:
            raise ProductNotFoundError(product_id)

        updated = self.ProductModel.objects.filter(pk=pk, quantity__gte=amount).update(
            quantity=F('quantity') - amount,
            updated_at=timezone.now(),
        )
        if not updated:
            if not self.ProductModel.objects.filter(pk=pk).exists():
                raise ProductNotFoundError(product_id)
            return False

        self.ProductModel.objects.filter(pk=pk, quantity=0).update(in_stock=False)
        return True


# ====================================================================
# 2. PEDIDOS
# ====================================================================

class OrderRepositoryDjango(IOrderRepository):
    """Implementação do OrderRepository usando o Django ORM."""

    def __init__(self, product_repo: Optional[ProductRepositoryDjango] = None):
        self.product_repo = product_repo or ProductRepositoryDjango()

    @property
    def OrderModel(self):
        return get_model('vendas', 'Order')

    @property
    def OrderItemModel(self):
        return get_model('vendas', 'OrderItem')

    def _queryset(self):
        return self.OrderModel.objects.prefetch_related('items')

    @persistence_errors
    @transaction.atomic
    def create_order(self, order: Order) -> Order:
        """
        Cria o pedido, os itens (snapshot) e baixa o estoque em uma única transação.
        Qualquer exceção desfaz tudo.
        """
        model = OrderMapper.to_model(order)
        model.save()

        self.OrderItemModel.objects.bulk_create([
            OrderLineMapper.to_model(line, order_id=model.pk) for line in order.lines
        ])

        for line in order.lines:
            if not self.product_repo.decrement_stock(line.product_id, line.quantity):
                disponivel = self.product_repo.get_product_stock(line.product_id)
                raise InsufficientStockError(
                    line.product_id, disponivel, line.quantity, product_name=line.product_name
                )

        return OrderMapper.to_entity(self._queryset().get(pk=model.pk))

    @persistence_errors
    def get_by_id(self, order_id: str) -> Optional[Order]:
        pk = _as_uuid(order_id)
        if pk is None:
            return None
        return OrderMapper.to_entity(self._queryset().filter(pk=pk).first())

    @persistence_errors
    def update_order_status(self, order_id: str, status: OrderStatus) -> Order:
        pk = _as_uuid(order_id)
        updated = (
            self.OrderModel.objects.filter(pk=pk).update(status=status.value, updated_at=timezone.now())
            if pk else 0
        )
        if not updated:
            raise OrderNotFoundError(order_id)
        return self.get_by_id(order_id)

    @persistence_errors
    def list_orders(self, status: Optional[OrderStatus] = None,
                    user_id: Optional[str] = None) -> List[Order]:
        qs = self._queryset()
        if status:
            qs = qs.filter(status=status.value)
        if user_id:
            qs = qs.filter(user_id=user_id)
        return [OrderMapper.to_entity(model) for model in qs.order_by('-created_at')]


# ====================================================================
# 3. PERFIS
# ====================================================================

class ProfileRepositoryDjango(IProfileRepository):
    """Implementação do ProfileRepository usando o Django ORM."""

    @property
    def ProfileModel(self):
        return get_model('contas', 'UserProfile')

    @persistence_errors
    def get_by_user(self, user_id: str) -> Optional[UserProfile]:
        return ProfileMapper.to_entity(self.ProfileModel.objects.filter(user_id=user_id).first())

    @persistence_errors
    @transaction.atomic
    def save(self, profile: UserProfile) -> UserProfile:
        model = self.ProfileModel.objects.select_for_update().filter(user_id=profile.user_id).first()
        model = ProfileMapper.to_model(profile, model)
        model.save()
        return ProfileMapper.to_entity(model)
