"""
Implementações em memória das Portas do Core.

NOTA: Estes repositórios não usam o Django ORM e servem para testes unitários
e simulações onde o banco de dados não é necessário.
"""
import copy
import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from quitanda.core.entities import (
    Order, OrderStatus, Product, ProductUpdate, UserIdentity, UserProfile
)
from quitanda.core.exceptions import (
    InsufficientStockError,
    OrderNotFoundError,
    PersistenceError,
    ProductNotFoundError,
    StockShortage,
)
from quitanda.core.ports import (
    IAuthService, ICartStorage, IOrderRepository, IProductRepository, IProfileRepository
)


class InMemoryProductRepository(IProductRepository):
    """Catálogo em memória. Devolve cópias para que o chamador não altere o estado interno."""

    def __init__(self, products: Optional[List[Product]] = None):
        self._lock = threading.RLock()
        self._products: Dict[str, Product] = {}
        for product in products or []:
            self.create_product(product)

    def list_products(self) -> List[Product]:
        with self._lock:
            ordenados = sorted(
                self._products.values(), key=lambda p: p.created_at or datetime.min, reverse=True
            )
            return [copy.copy(p) for p in ordenados]

    def get_by_id(self, product_id: str) -> Optional[Product]:
        with self._lock:
            product = self._products.get(product_id)
            return copy.copy(product) if product else None

    def create_product(self, product: Product) -> Product:
        with self._lock:
            novo = replace(
                product,
                id=product.id or str(uuid.uuid4()),
                created_at=product.created_at or datetime.now(),
            )
            self._products[novo.id] = novo
            return copy.copy(novo)

    def update_product(self, product_id: str, update: ProductUpdate) -> Product:
        with self._lock:
            if product_id not in self._products:
                raise ProductNotFoundError(product_id)
            self._products[product_id] = replace(self._products[product_id], **update.changes())
            return copy.copy(self._products[product_id])

    def delete_product(self, product_id: str) -> None:
        with self._lock:
            if self._products.pop(product_id, None) is None:
                raise ProductNotFoundError(product_id)

    def get_product_stock(self, product_id: str) -> int:
        with self._lock:
            if product_id not in self._products:
                raise ProductNotFoundError(product_id)
            return self._products[product_id].quantity

    def decrement_stock(self, product_id: str, amount: int) -> bool:
        with self._lock:
            atual = self.get_product_stock(product_id)
            if atual < amount:
                return False
            self._products[product_id].quantity = atual - amount
            return True

    def set_price(self, product_id: str, price) -> None:
        """Atalho usado nas simulações para mudar o preço de um produto."""
        self.update_product(product_id, ProductUpdate(price=price))


class InMemoryOrderRepository(IOrderRepository):
    """Pedidos em memória; a criação valida todo o estoque antes de baixar qualquer item."""

    def __init__(self, product_repo: InMemoryProductRepository):
        self.product_repo = product_repo
        self._orders: Dict[str, Order] = {}

    def create_order(self, order: Order) -> Order:
        with self.product_repo._lock:
            shortages = []
            for line in order.lines:
                disponivel = self.product_repo.get_product_stock(line.product_id)
                if disponivel < line.quantity:
                    shortages.append(StockShortage(
                        line.product_id, disponivel, line.quantity, line.product_name
                    ))
            if shortages:
                raise InsufficientStockError.from_shortages(shortages)

            for line in order.lines:
                self.product_repo.decrement_stock(line.product_id, line.quantity)

            novo = replace(order, id=str(uuid.uuid4()), created_at=datetime.now())
            self._orders[novo.id] = novo
            return novo

    def get_by_id(self, order_id: str) -> Optional[Order]:
        return self._orders.get(order_id)

    def update_order_status(self, order_id: str, status: OrderStatus) -> Order:
        if order_id not in self._orders:
            raise OrderNotFoundError(order_id)
        self._orders[order_id] = replace(
            self._orders[order_id], status=status, updated_at=datetime.now()
        )
        return self._orders[order_id]

    def list_orders(self, status: Optional[OrderStatus] = None,
                    user_id: Optional[str] = None) -> List[Order]:
        pedidos = [
            o for o in self._orders.values()
            if (status is None or o.status == status) and (user_id is None or o.user_id == user_id)
        ]
        return sorted(pedidos, key=lambda o: o.created_at, reverse=True)


class InMemoryProfileRepository(IProfileRepository):
    """Perfis em memória, indexados pelo usuário."""

    def __init__(self):
        self._profiles: Dict[str, UserProfile] = {}

    def get_by_user(self, user_id: str) -> Optional[UserProfile]:
        profile = self._profiles.get(user_id)
        return copy.copy(profile) if profile else None

    def save(self, profile: UserProfile) -> UserProfile:
        self._profiles[profile.user_id] = replace(profile, updated_at=datetime.now())
        return copy.copy(self._profiles[profile.user_id])


class InMemoryCartStorage(ICartStorage):
    """Armazenamento local simulado. Com fail=True toda gravação falha."""

    def __init__(self, fail: bool = False):
        self.data: Dict[str, bytes] = {}
        self.fail = fail

    def load(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def save(self, key: str, data: bytes) -> None:
        if self.fail:
            raise PersistenceError("Armazenamento local indisponível.")
        self.data[key] = data


class StaticAuthService(IAuthService):
    """Serviço de autenticação fixo: um usuário (ou nenhum) e a lista de administradores."""

    def __init__(self, user: Optional[UserIdentity] = None, admin_ids=()):
        self.user = user
        self.admin_ids = set(admin_ids)

    def get_current_user(self) -> Optional[UserIdentity]:
        return self.user

    def is_admin(self, identity: UserIdentity) -> bool:
        return identity.id in self.admin_ids
