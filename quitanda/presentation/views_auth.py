# quitanda/presentation/views_auth.py
"""
Views para cadastro de usuários. O login é feito por JWT (simplejwt).
"""
import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import RegisterSerializer

logger = logging.getLogger(__name__)


class CadastroUsuarioView(APIView):
    """
    View para o registro de usuário.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(request=RegisterSerializer, responses={201: RegisterSerializer})
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Novo usuário cadastrado: %s", user.pk)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
