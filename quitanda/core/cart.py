# quitanda/core/cart.py
# Motor do Carrinho de Compras: mutações, totais derivados e persistência após cada mudança.

import json
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from quitanda.core.entities import Cart, CartLine, Product
from quitanda.core.exceptions import (
    InsufficientStockError,
    PersistenceError,
    ProductNotFoundError,
)
from quitanda.core.ports import ICartStorage, IProductRepository

logger = logging.getLogger(__name__)


class CartEngine:
    """
    Gerencia o carrinho de uma sessão. O estado em memória é a fonte da verdade;
    o armazenamento só garante que o carrinho sobreviva a um recarregamento.
    """

    DEFAULT_KEY = 'quitanda_cart'

    def __init__(self, product_repo: IProductRepository, storage: ICartStorage,
                 storage_key: str = DEFAULT_KEY):
        self.product_repo = product_repo
        self.storage = storage
        self.storage_key = storage_key
        self.cart = Cart()

    # --- Métodos de Persistência ---

    def restore(self) -> Cart:
        """
        Carrega o carrinho salvo. Linhas de produtos que não existem mais
        no catálogo são descartadas.
        """
        try:
            raw = self.storage.load(self.storage_key)
        except PersistenceError as e:
            logger.warning("Não foi possível carregar o carrinho '%s': %s", self.storage_key, e)
            raw = None

        self.cart = Cart(lines=self._decode(raw))

        dangling = [
            line.product_id for line in self.cart.lines
            if self.product_repo.get_by_id(line.product_id) is None
        ]
        if dangling:
            self.cart.lines = [l for l in self.cart.lines if l.product_id not in dangling]
            self._persist()
        return self.cart

    def _decode(self, raw: Optional[bytes]) -> List[CartLine]:
        if not raw:
            return []
        try:
            data = json.loads(raw.decode('utf-8'))
        except (ValueError, UnicodeDecodeError):
            logger.warning("Carrinho salvo em '%s' está corrompido; iniciando vazio.", self.storage_key)
            return []

        try:
            items = list(data.get('lines', []))
        except (AttributeError, TypeError):
            logger.warning("Carrinho salvo em '%s' tem formato inesperado; iniciando vazio.", self.storage_key)
            return []

        lines: List[CartLine] = []
        vistos = set()
        for item in items:
            try:
                product_id = str(item.get('product_id', ''))
                quantity = int(item.get('quantity', 0))
            except (AttributeError, TypeError, ValueError):
                logger.warning("Item inválido ignorado no carrinho '%s': %r", self.storage_key, item)
                continue
            if product_id and quantity > 0 and product_id not in vistos:
                vistos.add(product_id)
                lines.append(CartLine(product_id=product_id, quantity=quantity))
        return lines

    def _encode(self) -> bytes:
        payload = {
            'lines': [
                {'product_id': line.product_id, 'quantity': line.quantity}
                for line in self.cart.lines
            ]
        }
        return json.dumps(payload).encode('utf-8')

    def _persist(self) -> None:
        try:
            self.storage.save(self.storage_key, self._encode())
        except PersistenceError as e:
            logger.warning("Falha ao salvar o carrinho '%s': %s", self.storage_key, e)

    # --- Métodos de Manipulação ---

    def add_to_cart(self, product: Product) -> bool:
        """
        Adiciona uma unidade do produto. Retorna False, sem alterar o carrinho,
        se o produto estiver esgotado ou se o incremento exceder o estoque.
        """
        existing = self.cart.get_line(product.id)
        nova_quantidade = (existing.quantity if existing else 0) + 1

        if not product.in_stock or nova_quantidade > product.quantity:
            logger.info("Produto %s sem estoque suficiente para adicionar ao carrinho.", product.id)
            return False

        if existing:
            self._replace_line(CartLine(product.id, nova_quantidade))
        else:
            self.cart.lines.append(CartLine(product.id, 1))

        self._persist()
        return True

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """
        Define a quantidade de um item. Quantidades <= 0 removem o item.
        Quantidades acima do estoque atual são rejeitadas, não truncadas.
        """
        if quantity <= 0:
            self.remove_from_cart(product_id)
            return

        existing = self.cart.get_line(product_id)
        if existing is None:
            return

        product = self.product_repo.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        if quantity > product.quantity:
            raise InsufficientStockError(
                product_id, product.quantity, quantity, product_name=product.name
            )

        self._replace_line(CartLine(product_id, quantity))
        self._persist()

    def merge_lines(self, lines) -> None:
        """
        Incorpora linhas de outro carrinho (o do visitante, ao fazer login).
        Quantidades de um mesmo produto são somadas, limitadas ao estoque atual;
        produtos esgotados ou removidos do catálogo ficam de fora.
        """
        alterado = False
        for line in lines:
            product = self.product_repo.get_by_id(line.product_id)
            if product is None or not product.in_stock:
                continue
            existing = self.cart.get_line(line.product_id)
            atual = existing.quantity if existing else 0
            nova_quantidade = min(atual + line.quantity, product.quantity)
            if nova_quantidade <= atual:
                continue
            if existing:
                self._replace_line(CartLine(line.product_id, nova_quantidade))
            else:
                self.cart.lines.append(CartLine(line.product_id, nova_quantidade))
            alterado = True

        if alterado:
            self._persist()

    def remove_from_cart(self, product_id: str) -> None:
        """Remove completamente um item do carrinho (idempotente)."""
        self.cart.lines = [line for line in self.cart.lines if line.product_id != product_id]
        self._persist()

    def clear_cart(self) -> None:
        """Esvazia o carrinho (usado após o checkout)."""
        self.cart.lines = []
        self._persist()

    def _replace_line(self, new_line: CartLine) -> None:
        self.cart.lines = [
            new_line if line.product_id == new_line.product_id else line
            for line in self.cart.lines
        ]

    # --- Métodos de Consulta ---

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self.cart.lines)

    def get_line(self, product_id: str) -> Optional[CartLine]:
        return self.cart.get_line(product_id)

    def is_empty(self) -> bool:
        return self.cart.is_empty()

    def snapshot(self) -> Tuple[CartLine, ...]:
        """Cópia imutável das linhas atuais, entregue ao motor de pedidos."""
        return tuple(self.cart.lines)

    def get_total(self) -> Decimal:
        """Soma de quantidade * preço ATUAL de cada produto enquanto o carrinho está aberto."""
        total = Decimal('0.00')
        for line, product in self._lines_with_products():
            total += product.price * line.quantity
        return total

    def get_item_count(self) -> int:
        """Retorna a contagem total de unidades no carrinho."""
        return sum(line.quantity for line in self.cart.lines)

    def detailed_lines(self) -> List[Dict[str, Any]]:
        """Linhas com o produto atual e o subtotal, para exibição."""
        return [
            {
                'product': product,
                'quantity': line.quantity,
                'subtotal': product.price * line.quantity,
            }
            for line, product in self._lines_with_products()
        ]

    def _lines_with_products(self):
        for line in self.cart.lines:
            product = self.product_repo.get_by_id(line.product_id)
            if product is not None:
                yield line, product
