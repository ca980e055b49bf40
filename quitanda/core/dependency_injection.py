# quitanda/core/dependency_injection.py
"""
Módulo de Injeção de Dependência (DI).
Responsável por montar a Loja da sessão com os Repositórios, Gateways e
Armazenamentos concretos da camada de Infraestrutura.
"""
import logging
from decimal import Decimal

from django.conf import settings

from quitanda.core.cart import CartEngine
from quitanda.core.store import Store
from quitanda.infrastructure.gateways import DjangoAuthService
from quitanda.infrastructure.repositories import (
    OrderRepositoryDjango,
    ProductRepositoryDjango,
    ProfileRepositoryDjango,
)
from quitanda.infrastructure.storage import DatabaseCartStorage, SessionCartStorage

logger = logging.getLogger(__name__)


def get_product_repository() -> ProductRepositoryDjango:
    return ProductRepositoryDjango()


def _is_authenticated(request) -> bool:
    user = getattr(request, 'user', None)
    return user is not None and user.is_authenticated


def get_cart_storage(request):
    """
    Usuários autenticados guardam o carrinho no banco (vale para sessão e JWT);
    visitantes usam a sessão do Django.
    """
    if _is_authenticated(request):
        return DatabaseCartStorage(), f"{settings.QUITANDA_CART_KEY}:user:{request.user.pk}"
    return SessionCartStorage(request.session), settings.QUITANDA_CART_KEY


def merge_visitor_cart(request, store: Store) -> None:
    """
    Após o login, as linhas do carrinho montado como visitante passam para o
    carrinho salvo do usuário, e a chave da sessão é apagada.
    """
    session = getattr(request, 'session', None)
    if session is None or settings.QUITANDA_CART_KEY not in session:
        return

    visitante = CartEngine(
        store.cart.product_repo, SessionCartStorage(session), settings.QUITANDA_CART_KEY
    )
    linhas = visitante.restore().lines
    if linhas:
        store.cart.merge_lines(linhas)
        logger.info("Carrinho do visitante incorporado ao do usuário %s.", request.user.pk)

    session.pop(settings.QUITANDA_CART_KEY, None)
    session.modified = True


def build_store(request) -> Store:
    """Cria (e abre) a Loja para a requisição atual."""
    product_repo = get_product_repository()
    cart_storage, cart_key = get_cart_storage(request)
    store = Store(
        product_repo=product_repo,
        order_repo=OrderRepositoryDjango(product_repo=product_repo),
        auth=DjangoAuthService(request),
        cart_storage=cart_storage,
        cart_key=cart_key,
        delivery_fee=Decimal(str(settings.QUITANDA_DELIVERY_FEE)),
        enforce_status_order=settings.QUITANDA_ENFORCE_STATUS_ORDER,
        profile_repo=ProfileRepositoryDjango(),
    )
    store.open()
    if _is_authenticated(request):
        merge_visitor_cart(request, store)
    return store
