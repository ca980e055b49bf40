from dataclasses import dataclass
from typing import Iterable, List, Optional


class BaseCoreError(Exception):
    """Classe base para todas as exceções da Camada Core."""
    default_message = "Ocorreu um erro na operação."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ===============================================
# ERROS DE VALIDAÇÃO
# ===============================================

class ValidationError(BaseCoreError):
    """Erro levantado quando campos obrigatórios estão ausentes ou inválidos."""
    default_message = "Os dados fornecidos são inválidos."

    def __init__(self, message: Optional[str] = None, fields: Iterable[str] = ()):
        self.fields = list(fields)
        if message is None and self.fields:
            message = f"Campos obrigatórios ausentes ou inválidos: {', '.join(self.fields)}."
        super().__init__(message)


class EmptyCartError(ValidationError):
    """Erro levantado ao tentar fazer checkout com carrinho vazio."""
    default_message = "O carrinho de compras está vazio."


class InvalidStatusError(ValidationError):
    """Erro levantado ao definir um status de pedido inválido ou uma transição não permitida."""
    default_message = "O status fornecido não é válido para este pedido."


# ===============================================
# ERROS DE AUTENTICAÇÃO E PERMISSÃO
# ===============================================

class AuthenticationError(BaseCoreError):
    """Erro levantado quando não há usuário autenticado."""
    default_message = "É necessário entrar na sua conta para continuar."


class AuthorizationError(BaseCoreError):
    """Erro levantado quando um usuário sem permissão acessa uma operação administrativa."""
    default_message = "Você não tem permissão para executar esta operação."


# ===============================================
# ERROS DE ESTOQUE
# ===============================================

@dataclass(frozen=True)
class StockShortage:
    """Descreve um produto cuja quantidade solicitada excede o estoque."""
    product_id: str
    available: int
    requested: int
    product_name: Optional[str] = None


class InsufficientStockError(BaseCoreError):
    """Erro levantado quando a quantidade solicitada excede o estoque disponível."""

    def __init__(self, product_id: str, available: int, requested: int,
                 product_name: Optional[str] = None, message: Optional[str] = None,
                 shortages: Optional[List[StockShortage]] = None):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        self.product_name = product_name
        self.shortages = shortages or [
            StockShortage(product_id, available, requested, product_name)
        ]
        if message is None:
            message = "; ".join(
                f"Estoque insuficiente para {s.product_name or s.product_id}. "
                f"Disponível: {s.available}, Solicitado: {s.requested}"
                for s in self.shortages
            ) + "."
        super().__init__(message)

    @classmethod
    def from_shortages(cls, shortages: List[StockShortage]) -> 'InsufficientStockError':
        """Agrupa vários produtos sem estoque em um único erro."""
        primeiro = shortages[0]
        return cls(
            primeiro.product_id,
            primeiro.available,
            primeiro.requested,
            product_name=primeiro.product_name,
            shortages=list(shortages),
        )


# ===============================================
# ERROS DE PERSISTÊNCIA E ENTIDADE
# ===============================================

class NotFoundError(BaseCoreError):
    """Erro levantado quando um item (genérico) não é encontrado."""
    default_message = "O item solicitado não foi encontrado."


class ProductNotFoundError(NotFoundError):
    """Erro levantado quando um produto específico não é encontrado."""

    def __init__(self, product_id: str, message: Optional[str] = None):
        self.product_id = product_id
        super().__init__(message or f"Produto {product_id} não encontrado.")


class OrderNotFoundError(NotFoundError):
    """Erro específico para Pedidos não encontrados."""

    def __init__(self, order_id: str, message: Optional[str] = None):
        self.order_id = order_id
        super().__init__(message or f"Pedido {order_id} não encontrado.")


class PersistenceError(BaseCoreError):
    """Erro levantado quando o armazenamento (banco, sessão, rede) falha."""
    default_message = "Falha ao acessar o armazenamento de dados. Tente novamente."
