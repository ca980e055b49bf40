# quitanda/core/orders.py
"""
Implementação dos Casos de Uso de Pedido: checkout a partir do carrinho,
consulta de pedidos e transições de status.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from quitanda.core.cart import CartEngine
from quitanda.core.catalog import require_admin
from quitanda.core.entities import CustomerInfo, Order, OrderLine, OrderStatus
from quitanda.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    EmptyCartError,
    InsufficientStockError,
    InvalidStatusError,
    OrderNotFoundError,
    ProductNotFoundError,
    StockShortage,
    ValidationError,
)
from quitanda.core.ports import IAuthService, IOrderRepository, IProductRepository

logger = logging.getLogger(__name__)


def parse_status(status: Union[OrderStatus, str]) -> OrderStatus:
    """Converte o texto recebido em um OrderStatus válido."""
    if isinstance(status, OrderStatus):
        return status
    try:
        return OrderStatus(str(status).strip().lower())
    except ValueError:
        raise InvalidStatusError(f"O status '{status}' não é um status de pedido válido.")


class OrderEngine:
    """
    Caso de Uso que coordena a finalização do checkout (validação, snapshot,
    baixa de estoque) e a gestão dos pedidos.
    """

    def __init__(self,
                 product_repo: IProductRepository,
                 order_repo: IOrderRepository,
                 auth: IAuthService,
                 delivery_fee: Decimal = Decimal('0.00'),
                 enforce_status_order: bool = True):
        self.product_repo = product_repo
        self.order_repo = order_repo
        self.auth = auth
        self.delivery_fee = Decimal(delivery_fee)
        self.enforce_status_order = enforce_status_order

    # ====================================================================
    # CHECKOUT
    # ====================================================================

    def place_order(self, customer_info: CustomerInfo, cart: CartEngine) -> Order:
        """Processa o checkout. Em caso de falha, carrinho e estoque não são alterados."""
        snapshot = cart.snapshot()

        # 1. Pré-condições
        if not snapshot:
            raise EmptyCartError("Não é possível finalizar o pedido com o carrinho vazio.")
        faltando = customer_info.missing_fields()
        if faltando:
            raise ValidationError(fields=faltando)

        # 2. Usuário autenticado
        usuario = self.auth.get_current_user()
        if usuario is None:
            raise AuthenticationError("Entre na sua conta para finalizar o pedido.")

        # 3. Checagem de estoque final e snapshot dos preços
        shortages = []
        lines = []
        for cart_line in snapshot:
            product = self.product_repo.get_by_id(cart_line.product_id)
            if product is None:
                raise ProductNotFoundError(cart_line.product_id)

            disponivel = self.product_repo.get_product_stock(cart_line.product_id)
            if cart_line.quantity > disponivel:
                shortages.append(StockShortage(
                    product.id, disponivel, cart_line.quantity, product.name
                ))
                continue

            lines.append(OrderLine(
                product_id=product.id,
                product_name=product.name,
                unit_price=product.price,  # Preço atual no momento do checkout
                quantity=cart_line.quantity,
            ))

        if shortages:
            raise InsufficientStockError.from_shortages(shortages)

        # 4. Persistência atômica (pedido + itens + baixa de estoque)
        subtotal = sum((line.subtotal for line in lines), Decimal('0.00'))
        pedido = Order(
            customer=customer_info,
            lines=tuple(lines),
            subtotal=subtotal,
            delivery_fee=self.delivery_fee,
            total=subtotal + self.delivery_fee,
            status=OrderStatus.PENDING,
            user_id=usuario.id,
        )
        pedido_final = self.order_repo.create_order(pedido)

        # 5. Só limpa o carrinho depois que o pedido foi gravado
        cart.clear_cart()
        logger.info(
            "Pedido %s criado para o usuário %s: %d item(ns), total %s.",
            pedido_final.id, usuario.id, pedido_final.item_count, pedido_final.total,
        )
        return pedido_final

    # ====================================================================
    # CONSULTAS
    # ====================================================================

    def list_orders(self, status: Optional[Union[OrderStatus, str]] = None) -> List[Order]:
        """Lista todos os pedidos (acesso administrativo), com filtro opcional por status."""
        require_admin(self.auth)
        return self.order_repo.list_orders(status=parse_status(status) if status else None)

    def list_my_orders(self) -> List[Order]:
        """Histórico de pedidos do usuário autenticado."""
        usuario = self.auth.get_current_user()
        if usuario is None:
            raise AuthenticationError()
        return self.order_repo.list_orders(user_id=usuario.id)

    def get_order(self, order_id: str) -> Order:
        """Detalhe de um pedido; somente o dono ou um administrador podem vê-lo."""
        usuario = self.auth.get_current_user()
        if usuario is None:
            raise AuthenticationError()

        pedido = self.order_repo.get_by_id(order_id)
        if pedido is None:
            raise OrderNotFoundError(order_id)
        if pedido.user_id != usuario.id and not self.auth.is_admin(usuario):
            raise AuthorizationError("Você não tem permissão para visualizar este pedido.")
        return pedido

    def dashboard(self, product_count: int) -> Dict[str, Any]:
        """Indicadores do painel administrativo."""
        require_admin(self.auth)
        pedidos = self.order_repo.list_orders()
        return {
            'total_products': product_count,
            'total_orders': len(pedidos),
            'pending_orders': sum(1 for p in pedidos if p.status == OrderStatus.PENDING),
            'revenue': sum((p.total for p in pedidos), Decimal('0.00')),
        }

    # ====================================================================
    # STATUS
    # ====================================================================

    def update_order_status(self, order_id: str, new_status: Union[OrderStatus, str]) -> Order:
        """Atualiza o status de um pedido manualmente (por um administrador)."""
        require_admin(self.auth)
        novo_status = parse_status(new_status)

        pedido = self.order_repo.get_by_id(order_id)
        if pedido is None:
            raise OrderNotFoundError(order_id)

        if self.enforce_status_order and not pedido.status.can_transition_to(novo_status):
            raise InvalidStatusError(
                f"Não é possível voltar o pedido de '{pedido.status.value}' para '{novo_status.value}'."
            )

        pedido_final = self.order_repo.update_order_status(order_id, novo_status)
        logger.info("Pedido %s: status %s -> %s.", order_id, pedido.status.value, novo_status.value)
        return pedido_final
