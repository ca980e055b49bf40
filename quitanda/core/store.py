# quitanda/core/store.py
"""
Loja da sessão: objeto construído explicitamente que liga Catálogo, Carrinho e
Pedidos aos seus colaboradores. É aberto no início da sessão (restaurando o
carrinho) e encerrado ao final; os consumidores recebem a instância por injeção.
"""
from decimal import Decimal
from typing import Any, Dict, Optional

from quitanda.core.cart import CartEngine
from quitanda.core.catalog import CatalogStore
from quitanda.core.orders import OrderEngine
from quitanda.core.profiles import ProfileService
from quitanda.core.entities import CustomerInfo, Order
from quitanda.core.ports import (
    IAuthService, ICartStorage, IOrderRepository, IProductRepository, IProfileRepository
)


class Store:

    def __init__(self,
                 product_repo: IProductRepository,
                 order_repo: IOrderRepository,
                 auth: IAuthService,
                 cart_storage: ICartStorage,
                 cart_key: str = CartEngine.DEFAULT_KEY,
                 delivery_fee: Decimal = Decimal('0.00'),
                 enforce_status_order: bool = True,
                 profile_repo: Optional[IProfileRepository] = None):
        self.auth = auth
        self._cart = CartEngine(product_repo, cart_storage, cart_key)
        self._catalog = CatalogStore(product_repo, auth, cart=self._cart)
        self._orders = OrderEngine(
            product_repo, order_repo, auth,
            delivery_fee=delivery_fee,
            enforce_status_order=enforce_status_order,
        )
        self._profiles = ProfileService(profile_repo, auth) if profile_repo is not None else None
        self._open = False

    # --- Ciclo de vida ---

    def open(self) -> 'Store':
        self._cart.restore()
        self._open = True
        return self

    def close(self) -> None:
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def __enter__(self) -> 'Store':
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _check_open(self) -> None:
        if not self._open:
            raise RuntimeError("A loja da sessão não está aberta.")

    # --- Componentes ---

    @property
    def cart(self) -> CartEngine:
        self._check_open()
        return self._cart

    @property
    def catalog(self) -> CatalogStore:
        self._check_open()
        return self._catalog

    @property
    def orders(self) -> OrderEngine:
        self._check_open()
        return self._orders

    @property
    def profiles(self) -> ProfileService:
        self._check_open()
        if self._profiles is None:
            raise RuntimeError("A loja da sessão foi aberta sem repositório de perfis.")
        return self._profiles

    # --- Atalhos ---

    def checkout(self, customer_info: CustomerInfo) -> Order:
        return self.orders.place_order(customer_info, self.cart)

    def dashboard(self) -> Dict[str, Any]:
        return self.orders.dashboard(product_count=len(self.catalog.list_products()))
