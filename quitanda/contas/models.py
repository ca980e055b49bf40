# Define o perfil de entrega de cada usuário cadastrado.

from django.conf import settings
from django.db import models


class UserProfile(models.Model):
    """
    Endereço de entrega do cliente, com a localização atual opcional.
    Um perfil por usuário, criado na primeira gravação.
    """
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='perfil')

    full_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=30, blank=True)

    # Endereço
    address_line1 = models.CharField(max_length=255, blank=True)
    address_line2 = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    postal_code = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=100, default='Brasil')

    # Localização atual (GPS)
    use_current_location = models.BooleanField(default=False)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Perfil'
        verbose_name_plural = 'Perfis'
        db_table = 'contas_perfil'

    def __str__(self):
        return f"Perfil de {self.user}"
