# quitanda/core/profiles.py
"""
Perfil do cliente: endereço de entrega e localização atual opcional.
"""
import logging
from dataclasses import fields, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict

from quitanda.core.entities import UserProfile
from quitanda.core.exceptions import AuthenticationError, ValidationError
from quitanda.core.ports import IAuthService, IProfileRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = tuple(f.name for f in fields(UserProfile) if f.name not in ('user_id', 'updated_at'))

LIMITES = {'latitude': Decimal('90'), 'longitude': Decimal('180')}


class ProfileService:

    def __init__(self, profile_repo: IProfileRepository, auth: IAuthService):
        self.profile_repo = profile_repo
        self.auth = auth

    def _current_user_id(self) -> str:
        usuario = self.auth.get_current_user()
        if usuario is None:
            raise AuthenticationError()
        return usuario.id

    def get_profile(self) -> UserProfile:
        """Perfil do usuário logado; quem nunca salvou recebe um perfil em branco."""
        user_id = self._current_user_id()
        return self.profile_repo.get_by_user(user_id) or UserProfile(user_id=user_id)

    def update_profile(self, changes: Dict[str, Any]) -> UserProfile:
        """
        Aplica uma atualização parcial ao perfil. Campos desconhecidos são
        ignorados; coordenadas fora da faixa levantam ValidationError.
        Usar a localização atual exige latitude e longitude.
        """
        perfil = self.get_profile()
        aplicados = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        novo = replace(perfil, **aplicados)

        invalidos = []
        for nome, limite in LIMITES.items():
            valor = getattr(novo, nome)
            if valor is None:
                continue
            try:
                if abs(Decimal(str(valor))) > limite:
                    invalidos.append(nome)
            except InvalidOperation:
                invalidos.append(nome)
        if novo.use_current_location and not novo.has_location:
            invalidos.extend(n for n in ('latitude', 'longitude') if getattr(novo, n) is None)
        if invalidos:
            raise ValidationError(fields=invalidos)

        salvo = self.profile_repo.save(novo)
        logger.info("Perfil do usuário %s atualizado: %s", salvo.user_id, sorted(aplicados))
        return salvo
