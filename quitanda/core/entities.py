from dataclasses import dataclass, field, fields
from decimal import Decimal
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# ====================================================================
# ENTIDADES CORE
# Representam os objetos de negócio puros (sem dependência do Django).
# ====================================================================

PLACEHOLDER_IMAGE = '/placeholder.svg'


@dataclass(frozen=True)
class UserIdentity:
    """Identidade opaca do usuário autenticado, fornecida pelo serviço de autenticação."""
    id: str
    email: str = ''


@dataclass
class Product:
    """Entidade do Produto vendido na loja."""
    name: str
    price: Decimal
    category: str
    unit: str
    quantity: int = 0
    description: str = ''
    image: str = PLACEHOLDER_IMAGE
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def in_stock(self) -> bool:
        """O indicador de estoque é sempre derivado da quantidade disponível."""
        return self.quantity > 0


@dataclass
class ProductUpdate:
    """
    Atualização parcial de um Produto.
    Apenas os campos diferentes de None são aplicados.
    """
    name: Optional[str] = None
    price: Optional[Decimal] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    quantity: Optional[int] = None
    description: Optional[str] = None
    image: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        """Retorna somente os campos informados na atualização."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.changes()


@dataclass(frozen=True)
class CartLine:
    """Uma linha do carrinho: referência (por ID) a um produto e a quantidade desejada."""
    product_id: str
    quantity: int


@dataclass
class Cart:
    """Entidade do Carrinho de Compras. Linhas únicas por produto, na ordem de inserção."""
    lines: List[CartLine] = field(default_factory=list)

    def get_line(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product_id == product_id), None)

    def is_empty(self) -> bool:
        return not self.lines


@dataclass(frozen=True)
class CustomerInfo:
    """Dados de contato do cliente informados no checkout."""
    name: str
    email: str
    phone: str

    def missing_fields(self) -> List[str]:
        """Lista os campos obrigatórios que estão vazios."""
        return [
            nome for nome in ('name', 'email', 'phone')
            if not (getattr(self, nome) or '').strip()
        ]


class OrderStatus(str, Enum):
    """Ciclo de vida do pedido: pending -> confirmed -> delivered."""
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    DELIVERED = 'delivered'

    @property
    def rank(self) -> int:
        return list(OrderStatus).index(self)

    def can_transition_to(self, novo_status: 'OrderStatus') -> bool:
        """Somente avanços (ou a manutenção do mesmo status) são permitidos."""
        return novo_status.rank >= self.rank


@dataclass(frozen=True)
class OrderLine:
    """Snapshot de um item no momento da compra (imutável)."""
    product_id: str
    product_name: str
    unit_price: Decimal
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Order:
    """Entidade do Pedido. Somente o status (e a data de modificação) muda após a criação."""
    customer: CustomerInfo
    lines: Tuple[OrderLine, ...]
    subtotal: Decimal
    total: Decimal
    delivery_fee: Decimal = Decimal('0.00')
    status: OrderStatus = OrderStatus.PENDING
    user_id: Optional[str] = None
    id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


@dataclass
class UserProfile:
    """Endereço de entrega salvo pelo cliente, com a localização atual opcional."""
    user_id: str
    full_name: str = ''
    phone: str = ''
    address_line1: str = ''
    address_line2: str = ''
    city: str = ''
    state: str = ''
    postal_code: str = ''
    country: str = 'Brasil'
    use_current_location: bool = False
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    updated_at: Optional[datetime] = None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None
