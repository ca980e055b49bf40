# quitanda/core/catalog.py
"""
Catálogo de Produtos: leitura para a vitrine e CRUD para o painel administrativo.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from quitanda.core.cart import CartEngine
from quitanda.core.entities import Product, ProductUpdate
from quitanda.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ProductNotFoundError,
    ValidationError,
)
from quitanda.core.ports import IAuthService, IProductRepository

logger = logging.getLogger(__name__)


def require_admin(auth: IAuthService):
    """Garante que há um usuário autenticado e que ele é administrador."""
    usuario = auth.get_current_user()
    if usuario is None:
        raise AuthenticationError()
    if not auth.is_admin(usuario):
        raise AuthorizationError()
    return usuario


def _validate_fields(name=None, price=None, category=None, unit=None, quantity=None,
                     required=()):
    invalidos = []
    for nome, valor in (('name', name), ('category', category), ('unit', unit)):
        if (valor is None and nome in required) or (valor is not None and not str(valor).strip()):
            invalidos.append(nome)

    if price is None:
        if 'price' in required:
            invalidos.append('price')
    else:
        try:
            preco = Decimal(str(price))
            # Preços são gravados com duas casas; mais que isso seria arredondado em silêncio
            if not preco.is_finite() or preco <= 0 or preco.as_tuple().exponent < -2:
                invalidos.append('price')
        except InvalidOperation:
            invalidos.append('price')

    if quantity is not None and int(quantity) < 0:
        invalidos.append('quantity')

    if invalidos:
        raise ValidationError(fields=invalidos)


class CatalogStore:
    """Caso de Uso que centraliza a lógica do catálogo (listar, buscar, criar, editar, remover)."""

    def __init__(self, product_repo: IProductRepository, auth: IAuthService,
                 cart: Optional[CartEngine] = None):
        self.product_repo = product_repo
        self.auth = auth
        self.cart = cart

    # --- Leitura (vitrine) ---

    def list_products(self, search: Optional[str] = None,
                      category: Optional[str] = None) -> List[Product]:
        """Retorna os produtos, filtrados por busca no nome e/ou categoria."""
        produtos = self.product_repo.list_products()
        if search:
            termo = search.strip().lower()
            produtos = [p for p in produtos if termo in p.name.lower()]
        if category:
            produtos = [p for p in produtos if p.category == category]
        return produtos

    def list_categories(self) -> List[str]:
        return sorted({p.category for p in self.product_repo.list_products()})

    def get_product(self, product_id: str) -> Product:
        product = self.product_repo.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    # --- Escrita (administração) ---

    def create_product(self, product: Product) -> Product:
        require_admin(self.auth)
        _validate_fields(
            name=product.name, price=product.price, category=product.category,
            unit=product.unit, quantity=product.quantity,
            required=('name', 'price', 'category', 'unit'),
        )
        criado = self.product_repo.create_product(product)
        logger.info("Produto %s (%s) criado.", criado.id, criado.name)
        return criado

    def update_product(self, product_id: str, update: ProductUpdate) -> Product:
        require_admin(self.auth)
        _validate_fields(**{
            k: v for k, v in update.changes().items()
            if k in ('name', 'price', 'category', 'unit', 'quantity')
        })
        if update.is_empty():
            return self.get_product(product_id)
        atualizado = self.product_repo.update_product(product_id, update)
        logger.info("Produto %s atualizado: %s", product_id, sorted(update.changes()))
        return atualizado

    def delete_product(self, product_id: str) -> None:
        """Remove o produto e também a linha correspondente do carrinho da sessão."""
        require_admin(self.auth)
        self.product_repo.delete_product(product_id)
        if self.cart is not None:
            self.cart.remove_from_cart(product_id)
        logger.info("Produto %s removido do catálogo.", product_id)
