# quitanda/presentation/exceptions.py
"""
Tradução dos erros da camada Core para respostas HTTP da API.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from quitanda.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BaseCoreError,
    InsufficientStockError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


# Ordem importa: subclasses antes das classes base.
STATUS_POR_ERRO = (
    (InsufficientStockError, status.HTTP_409_CONFLICT, 'insufficient_stock'),
    (ValidationError, status.HTTP_400_BAD_REQUEST, 'validation_error'),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED, 'not_authenticated'),
    (AuthorizationError, status.HTTP_403_FORBIDDEN, 'permission_denied'),
    (NotFoundError, status.HTTP_404_NOT_FOUND, 'not_found'),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE, 'persistence_error'),
)


def core_error_response(exc: BaseCoreError) -> Response:
    """Monta a resposta {detail, code} para um erro do Core."""
    http_status, code = status.HTTP_500_INTERNAL_SERVER_ERROR, 'error'
    for classe, s, c in STATUS_POR_ERRO:
        if isinstance(exc, classe):
            http_status, code = s, c
            break

    data = {'detail': exc.message, 'code': code}
    if isinstance(exc, ValidationError) and exc.fields:
        data['fields'] = exc.fields
    if isinstance(exc, InsufficientStockError):
        data['shortages'] = [
            {
                'product_id': s.product_id,
                'product_name': s.product_name,
                'available': s.available,
                'requested': s.requested,
            }
            for s in exc.shortages
        ]

    if http_status >= 500:
        logger.error("Erro do Core na API: %s", exc.message)
    return Response(data, status=http_status)


def api_exception_handler(exc, context):
    """
    Exception handler do DRF: erros do Core viram respostas HTTP adequadas;
    o restante segue o tratamento padrão do DRF.
    """
    if isinstance(exc, BaseCoreError):
        return core_error_response(exc)
    return exception_handler(exc, context)
