# Configuração da interface administrativa do Django para os modelos da Quitanda.

from django.contrib import admin, messages

from quitanda.catalog.models import Product
from quitanda.contas.models import UserProfile
from quitanda.core.dependency_injection import build_store
from quitanda.core.entities import OrderStatus
from quitanda.core.exceptions import BaseCoreError
from quitanda.vendas.models import Order, OrderItem


class StaffAdminMixin:
    """
    O painel segue a mesma regra de administrador do Core: basta ser staff,
    sem depender das permissões de modelo do Django.
    """

    def _is_staff(self, request):
        return request.user.is_active and request.user.is_staff

    def has_module_permission(self, request):
        return self._is_staff(request)

    def has_view_permission(self, request, obj=None):
        return self._is_staff(request)

    def has_change_permission(self, request, obj=None):
        return self._is_staff(request)


# ====================================================================
# 1. ADMIN PARA PRODUTOS
# ====================================================================

@admin.register(Product)
class ProductAdmin(StaffAdminMixin, admin.ModelAdmin):
    list_display = ('name', 'preco_formatado', 'unit', 'quantity', 'category', 'in_stock', 'created_at')
    list_filter = ('in_stock', 'category')
    search_fields = ('name', 'description', 'id')
    ordering = ('name',)
    # O indicador de estoque é derivado da quantidade no save() do modelo
    readonly_fields = ('in_stock', 'created_at', 'updated_at')
    fieldsets = (
        ('Informações Básicas', {
            'fields': ('name', 'description', 'price', 'unit', 'image')
        }),
        ('Estoque e Classificação', {
            'fields': ('category', 'quantity', 'in_stock'),
        }),
        ('Datas', {
            'fields': ('created_at', 'updated_at'),
        }),
    )

    @admin.display(description="Preço", ordering='price')
    def preco_formatado(self, obj):
        return obj.preco_formatado


# ====================================================================
# 2. ADMIN PARA PEDIDOS
# ====================================================================

class OrderItemInline(admin.TabularInline):
    """Exibe os itens comprados (snapshot) dentro do detalhe do Pedido."""
    model = OrderItem
    fields = ('product_name', 'unit_price', 'quantity', 'subtotal')
    readonly_fields = fields
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(StaffAdminMixin, admin.ModelAdmin):
    list_display = ('id', 'customer_name', 'customer_email', 'created_at', 'total', 'status')
    list_filter = ('status', 'created_at')
    search_fields = ('id', 'customer_name', 'customer_email', 'user__email')
    date_hierarchy = 'created_at'
    inlines = [OrderItemInline]
    actions = ['marcar_confirmado', 'marcar_entregue']

    # O status só muda pelas ações abaixo, que passam pelo motor de pedidos
    readonly_fields = (
        'user',
        'customer_name',
        'customer_email',
        'customer_phone',
        'status',
        'created_at',
        'updated_at',
        'subtotal',
        'delivery_fee',
        'total',
    )

    def has_add_permission(self, request):
        """Impedir a criação de pedidos pela interface do Admin (apenas por checkout)."""
        return False

    @admin.action(description="Marcar pedidos selecionados como confirmados")
    def marcar_confirmado(self, request, queryset):
        self._alterar_status(request, queryset, OrderStatus.CONFIRMED)

    @admin.action(description="Marcar pedidos selecionados como entregues")
    def marcar_entregue(self, request, queryset):
        self._alterar_status(request, queryset, OrderStatus.DELIVERED)

    def _alterar_status(self, request, queryset, novo_status):
        alterados = 0
        store = build_store(request)
        try:
            for pedido in queryset:
                try:
                    store.orders.update_order_status(str(pedido.pk), novo_status)
                    alterados += 1
                except BaseCoreError as e:
                    self.message_user(request, f"Pedido {pedido.pk}: {e.message}", level=messages.WARNING)
        finally:
            store.close()

        if alterados:
            self.message_user(
                request,
                f"{alterados} pedido(s) atualizado(s) para '{novo_status.value}'.",
                level=messages.SUCCESS,
            )


# ====================================================================
# 3. ADMIN PARA PERFIS
# ====================================================================

@admin.register(UserProfile)
class UserProfileAdmin(StaffAdminMixin, admin.ModelAdmin):
    list_display = ('user', 'full_name', 'city', 'state', 'use_current_location', 'updated_at')
    search_fields = ('user__username', 'user__email', 'full_name', 'city')
    readonly_fields = ('user', 'latitude', 'longitude', 'updated_at')
