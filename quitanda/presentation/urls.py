from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from . import views
from .views_auth import CadastroUsuarioView


# Cria o roteador e registra os nossos ViewSets
router = DefaultRouter()
router.register(r'produtos', views.ProductViewSet, basename='produto')
router.register(r'pedidos', views.OrderViewSet, basename='pedido')

urlpatterns = [
    # URLs da API (geradas pelo roteador)
    path('api/', include(router.urls)),
    path('api/carrinho/', views.CartAPIView.as_view(), name='carrinho-api'),
    path('api/checkout/', views.CheckoutAPIView.as_view(), name='checkout-api'),
    path('api/admin/dashboard/', views.AdminDashboardAPIView.as_view(), name='dashboard-api'),
    path('api/perfil/', views.PerfilAPIView.as_view(), name='perfil-api'),

    # URLs de Autenticação
    path('api/auth/cadastro/', CadastroUsuarioView.as_view(), name='cadastro'),
    path('api/auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
]
