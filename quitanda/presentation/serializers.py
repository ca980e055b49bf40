from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from quitanda.core.entities import PLACEHOLDER_IMAGE, CustomerInfo, Product, ProductUpdate


# ====================================================================
# SERIALIZERS PARA O CATÁLOGO
# ====================================================================

class ProductSerializer(serializers.Serializer):
    """Representação de leitura da entidade Product."""
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    category = serializers.CharField(read_only=True)
    unit = serializers.CharField(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    in_stock = serializers.BooleanField(read_only=True)
    description = serializers.CharField(read_only=True)
    image = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)


class ProductWriteSerializer(serializers.Serializer):
    """
    Serializer de escrita do produto (painel administrativo).
    As regras de negócio (preço positivo, campos não vazios) ficam no Core;
    aqui só garantimos os tipos.
    """
    name = serializers.CharField(max_length=255, allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    category = serializers.CharField(max_length=100, allow_blank=True)
    unit = serializers.CharField(max_length=50, allow_blank=True)
    quantity = serializers.IntegerField(required=False, default=0)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    image = serializers.CharField(max_length=500, required=False, allow_blank=True)

    def to_entity(self) -> Product:
        data = self.validated_data
        return Product(
            name=data['name'],
            price=data['price'],
            category=data['category'],
            unit=data['unit'],
            quantity=data.get('quantity', 0),
            description=data.get('description', ''),
            image=data.get('image') or PLACEHOLDER_IMAGE,
        )

    def to_update(self) -> ProductUpdate:
        """Converte os campos enviados (PATCH) em uma atualização parcial."""
        return ProductUpdate(**self.validated_data)


# ====================================================================
# SERIALIZERS PARA O CARRINHO
# ====================================================================

class CartItemSerializer(serializers.Serializer):
    """Linha do carrinho com o produto atual aninhado."""
    product = ProductSerializer(read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class CartSerializer(serializers.Serializer):
    """
    Serializer principal para o carrinho de compras.
    Recebe o dicionário montado pela view a partir do CartEngine.
    """
    items = CartItemSerializer(many=True, read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class AddCartItemSerializer(serializers.Serializer):
    product_id = serializers.CharField()


class UpdateCartItemSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    quantity = serializers.IntegerField()


class RemoveCartItemSerializer(serializers.Serializer):
    # Sem product_id o carrinho inteiro é esvaziado.
    product_id = serializers.CharField(required=False)


# ====================================================================
# SERIALIZERS PARA CHECKOUT E PEDIDOS
# ====================================================================

class CheckoutSerializer(serializers.Serializer):
    """
    Serializer para os dados de contato do checkout.
    Campos vazios são aceitos aqui e rejeitados pelo Core com a lista de campos.
    """
    name = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')

    def to_customer_info(self) -> CustomerInfo:
        """
        Converte os dados validados do serializer para uma entidade CustomerInfo.
        """
        return CustomerInfo(
            name=self.validated_data['name'],
            email=self.validated_data['email'],
            phone=self.validated_data['phone'],
        )


class OrderLineSerializer(serializers.Serializer):
    product_id = serializers.CharField(read_only=True)
    product_name = serializers.CharField(read_only=True)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    quantity = serializers.IntegerField(read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class OrderSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    status = serializers.CharField(source='status.value', read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    customer_email = serializers.CharField(source='customer.email', read_only=True)
    customer_phone = serializers.CharField(source='customer.phone', read_only=True)
    lines = OrderLineSerializer(many=True, read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    delivery_fee = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    user_id = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)


class OrderStatusSerializer(serializers.Serializer):
    # A validação do valor é feita pelo Core (InvalidStatusError).
    status = serializers.CharField()


class DashboardSerializer(serializers.Serializer):
    total_products = serializers.IntegerField()
    total_orders = serializers.IntegerField()
    pending_orders = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)


# ====================================================================
# SERIALIZER PARA O PERFIL DE ENTREGA
# ====================================================================

class ProfileSerializer(serializers.Serializer):
    """
    Perfil de entrega do usuário logado. No PATCH só os campos enviados mudam;
    a faixa das coordenadas é validada pelo Core.
    """
    full_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    address_line1 = serializers.CharField(max_length=255, required=False, allow_blank=True)
    address_line2 = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    postal_code = serializers.CharField(max_length=20, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False)
    use_current_location = serializers.BooleanField(required=False)
    latitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True)
    longitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True)
    updated_at = serializers.DateTimeField(read_only=True)

    def to_changes(self):
        return dict(self.validated_data)


# ====================================================================
# SERIALIZER PARA CADASTRO DE USUÁRIO
# ====================================================================

class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})

    def validate_username(self, value):
        if get_user_model().objects.filter(username=value).exists():
            raise serializers.ValidationError("Este nome de usuário já está em uso.")
        return value

    def validate_email(self, value):
        if get_user_model().objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Este e-mail já está cadastrado.")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        return get_user_model().objects.create_user(
            username=validated_data['username'],
            email=validated_data['email'],
            password=validated_data['password'],
        )

    def to_representation(self, instance):
        return {'id': instance.pk, 'username': instance.username, 'email': instance.email}
