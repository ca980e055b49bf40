"""
Mapeadores (Mappers) para converter entre:
1. Modelos do Django ORM
2. Entidades de Domínio (quitanda.core.entities)
"""
from typing import Any, Optional, Type

from django.apps import apps
from django.db import models

from quitanda.core.entities import (
    CustomerInfo,
    Order as OrderEntity,
    OrderLine as OrderLineEntity,
    OrderStatus,
    Product as ProductEntity,
    UserProfile as UserProfileEntity,
    PLACEHOLDER_IMAGE,
)


def get_model(app_label: str, model_name: str):
    """Retorna um modelo do Django de forma segura (lazy loading)."""
    return apps.get_model(app_label, model_name)


# ====================================================================
# MAPPERS DO CATÁLOGO
# ====================================================================

class ProductMapper:
    """Mapeador para Produto."""

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('catalog', 'Product')

    @staticmethod
    def to_entity(model: Any) -> Optional[ProductEntity]:
        """Converte Product Model para Product Entity."""
        if not model: return None
        return ProductEntity(
            id=str(model.pk),
            name=model.name,
            price=model.price,
            category=model.category,
            unit=model.unit,
            quantity=model.quantity,
            description=model.description or '',
            image=model.image or PLACEHOLDER_IMAGE,
            created_at=model.created_at,
        )

    @classmethod
    def to_model(cls, entity: ProductEntity, model: Optional[Any] = None) -> Any:
        """Converte Product Entity para Product Model (novo registro se model for None)."""
        if not model:
            model = cls.model_class()()

        model.name = entity.name.strip()
        model.price = entity.price
        model.category = entity.category.strip()
        model.unit = entity.unit.strip()
        model.quantity = entity.quantity
        model.in_stock = entity.quantity > 0
        model.description = entity.description or ''
        model.image = entity.image or ''
        return model


# ====================================================================
# MAPPERS DE PEDIDO
# ====================================================================

class OrderLineMapper:
    """Mapeador para os itens (snapshot) do pedido."""

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('vendas', 'OrderItem')

    @staticmethod
    def to_entity(model: Any) -> OrderLineEntity:
        return OrderLineEntity(
            product_id=model.product_ref,
            product_name=model.product_name,
            unit_price=model.unit_price,
            quantity=model.quantity,
        )

    @classmethod
    def to_model(cls, entity: OrderLineEntity, order_id: Any) -> Any:
        # Snapshot dos dados; o FK para o produto é apenas uma conveniência
        return cls.model_class()(
            order_id=order_id,
            product_id=entity.product_id,
            product_ref=entity.product_id,
            product_name=entity.product_name,
            unit_price=entity.unit_price,
            quantity=entity.quantity,
            subtotal=entity.subtotal,
        )


class OrderMapper:
    """Mapeador para Pedido."""

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('vendas', 'Order')

    @staticmethod
    def to_entity(model: Any) -> Optional[OrderEntity]:
        """Converte Order Model para Order Entity, incluindo os itens."""
        if not model: return None
        return OrderEntity(
            id=str(model.pk),
            user_id=str(model.user_id),
            customer=CustomerInfo(
                name=model.customer_name,
                email=model.customer_email,
                phone=model.customer_phone,
            ),
            lines=tuple(OrderLineMapper.to_entity(item) for item in model.items.all()),
            subtotal=model.subtotal,
            delivery_fee=model.delivery_fee,
            total=model.total,
            status=OrderStatus(model.status),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @classmethod
    def to_model(cls, entity: OrderEntity) -> Any:
        """Converte Order Entity para um novo Order Model (pedidos não são reescritos)."""
        return cls.model_class()(
            user_id=entity.user_id,
            customer_name=entity.customer.name.strip(),
            customer_email=entity.customer.email.strip(),
            customer_phone=entity.customer.phone.strip(),
            status=entity.status.value,
            subtotal=entity.subtotal,
            delivery_fee=entity.delivery_fee,
            total=entity.total,
        )


# ====================================================================
# MAPPER DE PERFIL
# ====================================================================

class ProfileMapper:
    """Mapeador para o perfil de entrega."""

    CAMPOS = (
        'full_name', 'phone', 'address_line1', 'address_line2', 'city',
        'state', 'postal_code', 'country', 'use_current_location', 'latitude', 'longitude',
    )

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('contas', 'UserProfile')

    @classmethod
    def to_entity(cls, model: Any) -> Optional[UserProfileEntity]:
        if not model: return None
        return UserProfileEntity(
            user_id=str(model.user_id),
            updated_at=model.updated_at,
            **{campo: getattr(model, campo) for campo in cls.CAMPOS},
        )

    @classmethod
    def to_model(cls, entity: UserProfileEntity, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()(user_id=entity.user_id)
        for campo in cls.CAMPOS:
            valor = getattr(entity, campo)
            setattr(model, campo, valor.strip() if isinstance(valor, str) else valor)
        return model
