# ====================================================================
# GATEWAYS: implementações concretas dos serviços externos do Core.
# ====================================================================

from typing import Optional

from django.contrib.auth import get_user_model

from quitanda.core.entities import UserIdentity
from quitanda.core.ports import IAuthService


class DjangoAuthService(IAuthService):
    """
    Adapta o usuário autenticado da requisição (sessão ou JWT) para a
    identidade opaca usada pelo Core. Administradores são os usuários staff.
    """

    def __init__(self, request):
        self.request = request

    def get_current_user(self) -> Optional[UserIdentity]:
        user = getattr(self.request, 'user', None)
        if user is None or not user.is_authenticated:
            return None
        return UserIdentity(id=str(user.pk), email=user.email or '')

    def is_admin(self, identity: UserIdentity) -> bool:
        user = getattr(self.request, 'user', None)
        if user is not None and user.is_authenticated and str(user.pk) == identity.id:
            return bool(user.is_staff)
        return get_user_model().objects.filter(pk=identity.id, is_staff=True, is_active=True).exists()
