# quitanda/core/ports.py
"""
Definição das Portas (Interfaces/Protocolos) da Arquitetura Limpa.

Estes protocolos definem o contrato que a camada de Infraestrutura (Repositórios,
Gateways, Armazenamentos) DEVE seguir para se conectar à camada Core.
"""

from typing import Protocol, List, Optional
from abc import abstractmethod

from quitanda.core.entities import (
    Product, ProductUpdate, Order, OrderStatus, UserIdentity, UserProfile
)


# ====================================================================
# 1. REPOSITÓRIOS (Portas de Persistência)
# ====================================================================

class IProductRepository(Protocol):
    """Protocolo para a persistência e busca de Produtos."""

    @abstractmethod
    def list_products(self) -> List[Product]: ...

    @abstractmethod
    def get_by_id(self, product_id: str) -> Optional[Product]: ...

    @abstractmethod
    def create_product(self, product: Product) -> Product:
        """Persiste um novo produto e atribui o seu identificador."""
        ...

    @abstractmethod
    def update_product(self, product_id: str, update: ProductUpdate) -> Product: ...

    @abstractmethod
    def delete_product(self, product_id: str) -> None: ...

    @abstractmethod
    def get_product_stock(self, product_id: str) -> int: ...

    @abstractmethod
    def decrement_stock(self, product_id: str, amount: int) -> bool:
        """
        Reduz o estoque de forma atômica em relação a outros chamadores.
        Retorna False (sem alterar nada) se o estoque ficaria negativo.
        """
        ...


class IOrderRepository(Protocol):
    """Protocolo para a persistência e gestão de Pedidos."""

    @abstractmethod
    def create_order(self, order: Order) -> Order:
        """
        Cria o pedido, grava um snapshot por item e reduz o estoque dos produtos
        em uma única operação atômica. Levanta InsufficientStockError sem gravar
        nada se algum estoque não for suficiente.
        """
        ...

    @abstractmethod
    def get_by_id(self, order_id: str) -> Optional[Order]: ...

    @abstractmethod
    def update_order_status(self, order_id: str, status: OrderStatus) -> Order: ...

    @abstractmethod
    def list_orders(self, status: Optional[OrderStatus] = None,
                    user_id: Optional[str] = None) -> List[Order]: ...


class IProfileRepository(Protocol):
    """Protocolo para a persistência do perfil de entrega (um por usuário)."""

    @abstractmethod
    def get_by_user(self, user_id: str) -> Optional[UserProfile]: ...

    @abstractmethod
    def save(self, profile: UserProfile) -> UserProfile:
        """Cria ou substitui o perfil do usuário."""
        ...


# ====================================================================
# 2. GATEWAYS (Portas de Serviços Externos)
# ====================================================================

class IAuthService(Protocol):
    """Protocolo para o serviço de autenticação (tratado como serviço opaco)."""

    @abstractmethod
    def get_current_user(self) -> Optional[UserIdentity]: ...

    @abstractmethod
    def is_admin(self, identity: UserIdentity) -> bool: ...


class ICartStorage(Protocol):
    """Armazenamento durável local, usado apenas para o carrinho."""

    @abstractmethod
    def load(self, key: str) -> Optional[bytes]: ...

    @abstractmethod
    def save(self, key: str, data: bytes) -> None: ...
