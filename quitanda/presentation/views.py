# quitanda/presentation/views.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from quitanda.core.dependency_injection import build_store

from .serializers import (
    AddCartItemSerializer,
    CartSerializer,
    CheckoutSerializer,
    DashboardSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    ProductSerializer,
    ProfileSerializer,
    ProductWriteSerializer,
    RemoveCartItemSerializer,
    UpdateCartItemSerializer,
)


# ====================================================================
# VIEWS: Orquestram a requisição, a execução dos casos de uso e a resposta.
# ====================================================================

class StoreMixin:
    """
    Monta a Loja da sessão sob demanda, depois da autenticação do DRF
    (o usuário JWT só existe a partir daí), e a encerra ao final da resposta.
    """
    _store = None

    @property
    def store(self):
        if self._store is None:
            self._store = build_store(self.request)
        return self._store

    def finalize_response(self, request, response, *args, **kwargs):
        if self._store is not None:
            self._store.close()
        return super().finalize_response(request, response, *args, **kwargs)

    def cart_data(self):
        cart = self.store.cart
        return CartSerializer({
            'items': cart.detailed_lines(),
            'item_count': cart.get_item_count(),
            'total': cart.get_total(),
        }).data


class ProductViewSet(StoreMixin, viewsets.ViewSet):
    """
    API ViewSet do catálogo.
    Qualquer um pode listar e ver produtos; criar, editar e remover exige
    um administrador (verificado no Core).
    """
    permission_classes = [AllowAny]

    @extend_schema(
        parameters=[
            OpenApiParameter('busca', str, description="Busca pelo nome (sem diferenciar maiúsculas)."),
            OpenApiParameter('categoria', str, description="Filtra pela categoria exata."),
        ],
        responses=ProductSerializer(many=True),
    )
    def list(self, request):
        produtos = self.store.catalog.list_products(
            search=request.query_params.get('busca'),
            category=request.query_params.get('categoria'),
        )
        return Response(ProductSerializer(produtos, many=True).data)

    @extend_schema(responses=ProductSerializer)
    def retrieve(self, request, pk=None):
        return Response(ProductSerializer(self.store.catalog.get_product(pk)).data)

    @extend_schema(request=ProductWriteSerializer, responses=ProductSerializer)
    def create(self, request):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        produto = self.store.catalog.create_product(serializer.to_entity())
        return Response(ProductSerializer(produto).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ProductWriteSerializer, responses=ProductSerializer)
    def update(self, request, pk=None):
        return self._update(request, pk, partial=False)

    @extend_schema(request=ProductWriteSerializer, responses=ProductSerializer)
    def partial_update(self, request, pk=None):
        return self._update(request, pk, partial=True)

    def _update(self, request, pk, partial):
        serializer = ProductWriteSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        produto = self.store.catalog.update_product(pk, serializer.to_update())
        return Response(ProductSerializer(produto).data)

    def destroy(self, request, pk=None):
        self.store.catalog.delete_product(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: {'type': 'array', 'items': {'type': 'string'}}})
    @action(detail=False, methods=['get'], url_path='categorias')
    def categorias(self, request):
        return Response(self.store.catalog.list_categories())


class CartAPIView(StoreMixin, APIView):
    """
    API View para o carrinho da sessão.
    Visitantes usam a sessão; usuários logados têm o carrinho salvo no banco.
    """
    permission_classes = [AllowAny]

    @extend_schema(responses=CartSerializer)
    def get(self, request):
        return Response(self.cart_data())

    @extend_schema(request=AddCartItemSerializer, responses=CartSerializer)
    def post(self, request):
        """
        Adiciona uma unidade do produto ao carrinho.
        Espera um JSON com 'product_id'.
        """
        serializer = AddCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        produto = self.store.catalog.get_product(serializer.validated_data['product_id'])
        if not self.store.cart.add_to_cart(produto):
            return Response({
                'detail': f"Estoque insuficiente para {produto.name}.",
                'code': 'insufficient_stock',
                'cart': self.cart_data(),
            }, status=status.HTTP_409_CONFLICT)
        return Response(self.cart_data(), status=status.HTTP_201_CREATED)

    @extend_schema(request=UpdateCartItemSerializer, responses=CartSerializer)
    def patch(self, request):
        """
        Define a quantidade de um item (0 ou menos remove o item).
        Espera um JSON com 'product_id' e 'quantity'.
        """
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.store.cart.update_quantity(
            serializer.validated_data['product_id'],
            serializer.validated_data['quantity'],
        )
        return Response(self.cart_data())

    @extend_schema(request=RemoveCartItemSerializer, responses=CartSerializer)
    def delete(self, request):
        """
        Remove um item do carrinho ('product_id') ou esvazia o carrinho inteiro.
        """
        serializer = RemoveCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product_id = serializer.validated_data.get('product_id')
        if product_id:
            self.store.cart.remove_from_cart(product_id)
        else:
            self.store.cart.clear_cart()
        return Response(self.cart_data())


class CheckoutAPIView(StoreMixin, APIView):
    """
    API View para finalizar o pedido a partir do carrinho da sessão.
    """
    permission_classes = [AllowAny]

    @extend_schema(request=CheckoutSerializer, responses={201: OrderSerializer})
    def post(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        pedido = self.store.checkout(serializer.to_customer_info())
        return Response(OrderSerializer(pedido).data, status=status.HTTP_201_CREATED)


class OrderViewSet(StoreMixin, viewsets.ViewSet):
    """
    API ViewSet de pedidos: listagem administrativa, histórico do cliente,
    detalhe e atualização de status.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[OpenApiParameter('status', str, description="pending, confirmed ou delivered.")],
        responses=OrderSerializer(many=True),
    )
    def list(self, request):
        pedidos = self.store.orders.list_orders(status=request.query_params.get('status'))
        return Response(OrderSerializer(pedidos, many=True).data)

    @extend_schema(responses=OrderSerializer)
    def retrieve(self, request, pk=None):
        return Response(OrderSerializer(self.store.orders.get_order(pk)).data)

    @extend_schema(responses=OrderSerializer(many=True))
    @action(detail=False, methods=['get'], url_path='meus')
    def meus(self, request):
        pedidos = self.store.orders.list_my_orders()
        return Response(OrderSerializer(pedidos, many=True).data)

    @extend_schema(request=OrderStatusSerializer, responses=OrderSerializer)
    @action(detail=True, methods=['post'], url_path='status')
    def alterar_status(self, request, pk=None):
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        pedido = self.store.orders.update_order_status(pk, serializer.validated_data['status'])
        return Response(OrderSerializer(pedido).data)


class PerfilAPIView(StoreMixin, APIView):
    """
    Perfil de entrega do usuário logado (endereço e localização atual).
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(responses=ProfileSerializer)
    def get(self, request):
        return Response(ProfileSerializer(self.store.profiles.get_profile()).data)

    @extend_schema(request=ProfileSerializer, responses=ProfileSerializer)
    def patch(self, request):
        serializer = ProfileSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        perfil = self.store.profiles.update_profile(serializer.to_changes())
        return Response(ProfileSerializer(perfil).data)


class AdminDashboardAPIView(StoreMixin, APIView):
    """
    Indicadores do painel de administração.
    Apenas usuários staff podem acessar.
    """
    permission_classes = [IsAdminUser]

    @extend_schema(responses=DashboardSerializer)
    def get(self, request):
        return Response(DashboardSerializer(self.store.dashboard()).data)
