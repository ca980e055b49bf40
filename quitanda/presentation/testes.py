# quitanda/presentation/testes.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from quitanda.catalog.models import Product as ProductModel
from quitanda.contas.models import UserProfile as ProfileModel
from quitanda.core.entities import CustomerInfo, Order, OrderLine
from quitanda.infrastructure.repositories import OrderRepositoryDjango
from quitanda.vendas.models import Order as OrderModel

CARRINHO_URL = '/api/carrinho/'
CHECKOUT_URL = '/api/checkout/'
PERFIL_URL = '/api/perfil/'
CONTATO = {'name': 'Ana Souza', 'email': 'ana@example.com', 'phone': '11999990000'}


class BaseAPITestCase(APITestCase):

    def setUp(self):
        User = get_user_model()
        self.cliente = User.objects.create_user('cliente', 'cliente@example.com', 'senha-123')
        self.admin = User.objects.create_user('admin', 'admin@example.com', 'senha-123', is_staff=True)
        self.banana = ProductModel.objects.create(
            name='Banana Prata', price=Decimal('5.00'), category='Fruits', unit='kg', quantity=3,
        )
        self.alface = ProductModel.objects.create(
            name='Alface', price=Decimal('2.50'), category='Vegetables', unit='unidade', quantity=10,
        )
        self.kiwi = ProductModel.objects.create(
            name='Kiwi', price=Decimal('9.00'), category='Fruits', unit='kg', quantity=0,
        )

    def criar_pedido(self, user, quantidade=1):
        linha = OrderLine(str(self.alface.pk), 'Alface', Decimal('2.50'), quantidade)
        return OrderRepositoryDjango().create_order(Order(
            customer=CustomerInfo(**CONTATO),
            lines=(linha,),
            subtotal=linha.subtotal,
            total=linha.subtotal,
            user_id=str(user.pk),
        ))


# ====================================================================
# CATÁLOGO
# ====================================================================

class TestProductAPI(BaseAPITestCase):

    def test_lista_produtos_para_visitantes(self):
        response = self.client.get('/api/produtos/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 3)

    def test_busca_e_categoria(self):
        response = self.client.get('/api/produtos/', {'busca': 'banana'})
        self.assertEqual([p['name'] for p in response.data], ['Banana Prata'])

        response = self.client.get('/api/produtos/', {'categoria': 'Fruits'})
        self.assertEqual({p['name'] for p in response.data}, {'Banana Prata', 'Kiwi'})

    def test_categorias(self):
        response = self.client.get('/api/produtos/categorias/')
        self.assertEqual(response.data, ['Fruits', 'Vegetables'])

    def test_detalhe_e_404(self):
        response = self.client.get(f'/api/produtos/{self.kiwi.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['in_stock'])
        self.assertEqual(response.data['price'], '9.00')

        response = self.client.get('/api/produtos/nao-existe/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['code'], 'not_found')

    def test_admin_cria_edita_e_remove(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post('/api/produtos/', {
            'name': 'Manga', 'price': '7.00', 'category': 'Fruits', 'unit': 'kg', 'quantity': 4,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        produto_id = response.data['id']

        response = self.client.patch(f'/api/produtos/{produto_id}/', {'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['in_stock'])
        self.assertEqual(response.data['name'], 'Manga')

        response = self.client.delete(f'/api/produtos/{produto_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ProductModel.objects.filter(pk=produto_id).exists())

    def test_preco_invalido_retorna_campos(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/produtos/', {
            'name': 'Manga', 'price': '0.00', 'category': 'Fruits', 'unit': 'kg',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['fields'], ['price'])

    def test_escrita_exige_administrador(self):
        dados = {'name': 'Manga', 'price': '7.00', 'category': 'Fruits', 'unit': 'kg'}

        response = self.client.post('/api/produtos/', dados, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.force_authenticate(self.cliente)
        response = self.client.post('/api/produtos/', dados, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_aceita_nome_e_unidade_no_limite_do_modelo(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/produtos/', {
            'name': 'M' * 255, 'price': '7.00', 'category': 'Fruits', 'unit': 'u' * 50,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(ProductModel.objects.get(pk=response.data['id']).name), 255)


# ====================================================================
# CARRINHO E CHECKOUT
# ====================================================================

class TestCartAPI(BaseAPITestCase):

    def test_carrinho_do_visitante_fica_na_sessao(self):
        response = self.client.post(CARRINHO_URL, {'product_id': str(self.banana.pk)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.client.post(CARRINHO_URL, {'product_id': str(self.banana.pk)}, format='json')

        response = self.client.get(CARRINHO_URL)

        self.assertEqual(response.data['item_count'], 2)
        self.assertEqual(response.data['total'], '10.00')
        self.assertEqual(response.data['items'][0]['product']['name'], 'Banana Prata')

    def test_produto_esgotado_retorna_409(self):
        response = self.client.post(CARRINHO_URL, {'product_id': str(self.kiwi.pk)}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['cart']['item_count'], 0)

    def test_produto_inexistente_retorna_404(self):
        response = self.client.post(CARRINHO_URL, {'product_id': 'nao-existe'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_alterar_quantidade_e_remover(self):
        self.client.post(CARRINHO_URL, {'product_id': str(self.alface.pk)}, format='json')

        response = self.client.patch(CARRINHO_URL, {'product_id': str(self.alface.pk), 'quantity': 4}, format='json')
        self.assertEqual(response.data['item_count'], 4)

        response = self.client.patch(CARRINHO_URL, {'product_id': str(self.alface.pk), 'quantity': 11}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['shortages'][0]['available'], 10)

        response = self.client.delete(CARRINHO_URL, {'product_id': str(self.alface.pk)}, format='json')
        self.assertEqual(response.data['item_count'], 0)

    def test_esvaziar_carrinho(self):
        self.client.post(CARRINHO_URL, {'product_id': str(self.alface.pk)}, format='json')
        self.client.post(CARRINHO_URL, {'product_id': str(self.banana.pk)}, format='json')

        response = self.client.delete(CARRINHO_URL, format='json')

        self.assertEqual(response.data['items'], [])

    def test_carrinho_do_usuario_fica_salvo_no_banco(self):
        self.client.force_authenticate(self.cliente)
        self.client.post(CARRINHO_URL, {'product_id': str(self.alface.pk)}, format='json')

        self.client.logout()
        self.client.force_authenticate(self.cliente)

        self.assertEqual(self.client.get(CARRINHO_URL).data['item_count'], 1)


class TestCheckoutAPI(BaseAPITestCase):

    def test_checkout_exige_login(self):
        self.client.post(CARRINHO_URL, {'product_id': str(self.alface.pk)}, format='json')

        response = self.client.post(CHECKOUT_URL, CONTATO, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(self.client.get(CARRINHO_URL).data['item_count'], 1)

    def test_login_depois_do_401_mantem_o_carrinho(self):
        self.client.post(CARRINHO_URL, {'product_id': str(self.alface.pk)}, format='json')
        self.client.post(CARRINHO_URL, {'product_id': str(self.alface.pk)}, format='json')
        response = self.client.post(CHECKOUT_URL, CONTATO, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.force_authenticate(self.cliente)
        self.assertEqual(self.client.get(CARRINHO_URL).data['item_count'], 2)
        response = self.client.post(CHECKOUT_URL, CONTATO, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total'], '5.00')
        self.assertNotIn('quitanda_cart', self.client.session)
        self.assertEqual(self.client.get(CARRINHO_URL).data['item_count'], 0)

    def test_carrinho_do_visitante_soma_com_o_salvo(self):
        self.client.force_authenticate(self.cliente)
        self.client.post(CARRINHO_URL, {'product_id': str(self.banana.pk)}, format='json')
        self.client.force_authenticate(None)
        self.client.post(CARRINHO_URL, {'product_id': str(self.banana.pk)}, format='json')
        self.client.post(CARRINHO_URL, {'product_id': str(self.alface.pk)}, format='json')

        self.client.force_authenticate(self.cliente)
        response = self.client.get(CARRINHO_URL)

        quantidades = {item['product']['name']: item['quantity'] for item in response.data['items']}
        self.assertEqual(quantidades, {'Banana Prata': 2, 'Alface': 1})

    def test_checkout_com_sucesso(self):
        self.client.force_authenticate(self.cliente)
        self.client.post(CARRINHO_URL, {'product_id': str(self.banana.pk)}, format='json')
        self.client.patch(CARRINHO_URL, {'product_id': str(self.banana.pk), 'quantity': 3}, format='json')

        response = self.client.post(CHECKOUT_URL, CONTATO, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['total'], '15.00')
        self.assertEqual(response.data['lines'][0]['unit_price'], '5.00')
        self.banana.refresh_from_db()
        self.assertEqual(self.banana.quantity, 0)
        self.assertFalse(self.banana.in_stock)
        self.assertEqual(self.client.get(CARRINHO_URL).data['item_count'], 0)

    @override_settings(QUITANDA_DELIVERY_FEE=Decimal('8.00'))
    def test_checkout_soma_taxa_de_entrega(self):
        self.client.force_authenticate(self.cliente)
        self.client.post(CARRINHO_URL, {'product_id': str(self.alface.pk)}, format='json')

        response = self.client.post(CHECKOUT_URL, CONTATO, format='json')

        self.assertEqual(response.data['delivery_fee'], '8.00')
        self.assertEqual(response.data['total'], '10.50')

    def test_checkout_com_carrinho_vazio(self):
        self.client.force_authenticate(self.cliente)
        response = self.client.post(CHECKOUT_URL, CONTATO, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_checkout_sem_contato(self):
        self.client.force_authenticate(self.cliente)
        self.client.post(CARRINHO_URL, {'product_id': str(self.alface.pk)}, format='json')

        response = self.client.post(CHECKOUT_URL, {'name': 'Ana'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['fields'], ['email', 'phone'])

    def test_checkout_com_estoque_alterado(self):
        self.client.force_authenticate(self.cliente)
        self.client.post(CARRINHO_URL, {'product_id': str(self.banana.pk)}, format='json')
        self.client.post(CARRINHO_URL, {'product_id': str(self.banana.pk)}, format='json')
        ProductModel.objects.filter(pk=self.banana.pk).update(quantity=1)

        response = self.client.post(CHECKOUT_URL, CONTATO, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'insufficient_stock')
        self.assertEqual(response.data['shortages'][0]['requested'], 2)
        self.assertEqual(OrderModel.objects.count(), 0)
        self.assertEqual(self.client.get(CARRINHO_URL).data['item_count'], 2)


# ====================================================================
# PEDIDOS E PAINEL
# ====================================================================

class TestOrderAPI(BaseAPITestCase):

    def setUp(self):
        super().setUp()
        self.pedido = self.criar_pedido(self.cliente, quantidade=2)

    def test_listagem_exige_autenticacao(self):
        response = self.client.get('/api/pedidos/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_listagem_geral_e_administrativa(self):
        self.client.force_authenticate(self.cliente)
        self.assertEqual(self.client.get('/api/pedidos/').status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/pedidos/', {'status': 'pending'})
        self.assertEqual([p['id'] for p in response.data], [self.pedido.id])

    def test_meus_pedidos(self):
        self.client.force_authenticate(self.cliente)
        response = self.client.get('/api/pedidos/meus/')
        self.assertEqual(len(response.data), 1)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get('/api/pedidos/meus/').data, [])

    def test_detalhe_so_para_dono_ou_admin(self):
        outro = get_user_model().objects.create_user('outro', 'outro@example.com', 'senha-123')
        url = f'/api/pedidos/{self.pedido.id}/'

        self.client.force_authenticate(outro)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.cliente)
        response = self.client.get(url)
        self.assertEqual(response.data['customer_name'], 'Ana Souza')
        self.assertEqual(response.data['item_count'], 2)

    def test_admin_altera_status(self):
        self.client.force_authenticate(self.admin)
        url = f'/api/pedidos/{self.pedido.id}/status/'

        response = self.client.post(url, {'status': 'delivered'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'delivered')

        response = self.client.post(url, {'status': 'pending'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {'status': 'shipped'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cliente_nao_altera_status(self):
        self.client.force_authenticate(self.cliente)
        response = self.client.post(f'/api/pedidos/{self.pedido.id}/status/', {'status': 'confirmed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_dashboard(self):
        self.client.force_authenticate(self.cliente)
        self.assertEqual(self.client.get('/api/admin/dashboard/').status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.get('/api/admin/dashboard/')

        self.assertEqual(response.data['total_products'], 3)
        self.assertEqual(response.data['total_orders'], 1)
        self.assertEqual(response.data['pending_orders'], 1)
        self.assertEqual(response.data['revenue'], '5.00')


class TestAdminPedidos(BaseAPITestCase):

    def test_acao_do_admin_passa_pelo_motor_de_pedidos(self):
        pedido = self.criar_pedido(self.cliente)
        self.client.force_login(self.admin)
        url = reverse('admin:vendas_order_changelist')

        self.client.post(url, {'action': 'marcar_entregue', '_selected_action': [pedido.id]})
        self.client.post(url, {'action': 'marcar_confirmado', '_selected_action': [pedido.id]})

        self.assertEqual(OrderModel.objects.get(pk=pedido.id).status, 'delivered')

    def test_staff_acessa_o_painel_sem_permissoes_de_modelo(self):
        self.client.force_login(self.admin)

        self.assertEqual(self.client.get(reverse('admin:vendas_order_changelist')).status_code, 200)
        self.assertEqual(self.client.get(reverse('admin:catalog_product_changelist')).status_code, 200)
        response = self.client.get(reverse('admin:catalog_product_change', args=[self.banana.pk]))
        self.assertEqual(response.status_code, 200)

        self.client.force_login(self.cliente)
        response = self.client.get(reverse('admin:vendas_order_changelist'))
        self.assertEqual(response.status_code, 302)


# ====================================================================
# PERFIL DE ENTREGA
# ====================================================================

class TestPerfilAPI(BaseAPITestCase):

    def test_perfil_exige_autenticacao(self):
        response = self.client.get(PERFIL_URL)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_perfil_em_branco_e_atualizacao_parcial(self):
        self.client.force_authenticate(self.cliente)

        response = self.client.get(PERFIL_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['address_line1'], '')
        self.assertEqual(response.data['country'], 'Brasil')

        self.client.patch(PERFIL_URL, {'full_name': 'Ana Souza', 'city': 'Recife'}, format='json')
        response = self.client.patch(PERFIL_URL, {
            'address_line1': 'Rua da Aurora, 100',
            'use_current_location': True,
            'latitude': '-8.063200',
            'longitude': '-34.871100',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['full_name'], 'Ana Souza')
        self.assertEqual(response.data['latitude'], '-8.063200')
        perfil = ProfileModel.objects.get(user=self.cliente)
        self.assertEqual(perfil.city, 'Recife')
        self.assertTrue(perfil.use_current_location)

    def test_coordenada_invalida_retorna_campos(self):
        self.client.force_authenticate(self.cliente)
        response = self.client.patch(PERFIL_URL, {'latitude': '95.000000'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['fields'], ['latitude'])
        self.assertFalse(ProfileModel.objects.exists())

    def test_cada_usuario_ve_o_proprio_perfil(self):
        self.client.force_authenticate(self.cliente)
        self.client.patch(PERFIL_URL, {'city': 'Recife'}, format='json')

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get(PERFIL_URL).data['city'], '')


# ====================================================================
# AUTENTICAÇÃO
# ====================================================================

class TestAuthAPI(APITestCase):

    def test_cadastro_login_jwt_e_historico(self):
        response = self.client.post('/api/auth/cadastro/', {
            'username': 'maria', 'email': 'maria@example.com', 'password': 'Quitanda#2024',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('password', response.data)

        response = self.client.post('/api/auth/token/', {
            'username': 'maria', 'password': 'Quitanda#2024',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        response = self.client.get('/api/pedidos/meus/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    def test_cadastro_com_email_repetido(self):
        get_user_model().objects.create_user('joao', 'joao@example.com', 'senha-123')
        response = self.client.post('/api/auth/cadastro/', {
            'username': 'joao2', 'email': 'JOAO@example.com', 'password': 'Quitanda#2024',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)
