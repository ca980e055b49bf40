# Armazenamentos duráveis do carrinho: sessão do Django (visitantes) e banco (usuários logados).

import base64
import logging
from typing import Optional

from django.db import DatabaseError

from quitanda.core.exceptions import PersistenceError
from quitanda.core.ports import ICartStorage

from .mappers import get_model

logger = logging.getLogger(__name__)


class SessionCartStorage(ICartStorage):
    """
    Guarda o carrinho na sessão do Django. A sessão é serializada em JSON,
    então os bytes são armazenados em base64.
    """

    def __init__(self, session):
        self.session = session

    def load(self, key: str) -> Optional[bytes]:
        raw = self.session.get(key)
        if not raw:
            return None
        try:
            return base64.b64decode(raw)
        except (ValueError, TypeError):
            logger.warning("Conteúdo inválido na sessão para a chave '%s'.", key)
            return None

    def save(self, key: str, data: bytes) -> None:
        self.session[key] = base64.b64encode(data).decode('ascii')
        self.session.modified = True


class DatabaseCartStorage(ICartStorage):
    """Guarda o carrinho de usuários autenticados na tabela de carrinhos salvos."""

    @property
    def SavedCartModel(self):
        return get_model('carrinho', 'SavedCart')

    def load(self, key: str) -> Optional[bytes]:
        try:
            payload = self.SavedCartModel.objects.filter(key=key).values_list('payload', flat=True).first()
        except DatabaseError as e:
            raise PersistenceError("Não foi possível ler o carrinho salvo.") from e
        return bytes(payload) if payload is not None else None

    def save(self, key: str, data: bytes) -> None:
        try:
            self.SavedCartModel.objects.update_or_create(key=key, defaults={'payload': data})
        except DatabaseError as e:
            raise PersistenceError("Não foi possível salvar o carrinho.") from e
