# quitanda/infrastructure/testes.py

from decimal import Decimal
from io import StringIO
from unittest.mock import PropertyMock, patch

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.contrib.sessions.backends.db import SessionStore
from django.core.management import call_command
from django.db import DatabaseError
from django.test import RequestFactory, TestCase

from quitanda.catalog.models import Product as ProductModel
from quitanda.contas.models import UserProfile as ProfileModel
from quitanda.core.entities import (
    CustomerInfo, Order, OrderLine, OrderStatus, Product, ProductUpdate, UserIdentity, UserProfile
)
from quitanda.core.exceptions import (
    InsufficientStockError,
    OrderNotFoundError,
    PersistenceError,
    ProductNotFoundError,
)
from quitanda.infrastructure.gateways import DjangoAuthService
from quitanda.infrastructure.repositories import (
    OrderRepositoryDjango, ProductRepositoryDjango, ProfileRepositoryDjango
)
from quitanda.infrastructure.storage import DatabaseCartStorage, SessionCartStorage
from quitanda.vendas.models import Order as OrderModel


def montar_pedido(user_id, *lines):
    subtotal = sum((line.subtotal for line in lines), Decimal('0.00'))
    return Order(
        customer=CustomerInfo(name='Ana Souza', email='ana@example.com', phone='11999990000'),
        lines=tuple(lines),
        subtotal=subtotal,
        total=subtotal,
        user_id=str(user_id),
    )


class TestProductRepositoryDjango(TestCase):

    def setUp(self):
        self.repo = ProductRepositoryDjango()
        self.produto = self.repo.create_product(Product(
            name='Tomate', price=Decimal('8.90'), category='Vegetables', unit='kg', quantity=3,
        ))

    def test_create_product_atribui_id_e_imagem_padrao(self):
        self.assertIsNotNone(self.produto.id)
        self.assertEqual(self.produto.image, '/placeholder.svg')
        self.assertTrue(ProductModel.objects.get(pk=self.produto.id).in_stock)

    def test_get_by_id_com_id_mal_formado_retorna_none(self):
        self.assertIsNone(self.repo.get_by_id('nao-e-um-uuid'))

    def test_update_product_parcial(self):
        atualizado = self.repo.update_product(self.produto.id, ProductUpdate(price=Decimal('7.50'), quantity=0))

        self.assertEqual(atualizado.price, Decimal('7.50'))
        self.assertEqual(atualizado.name, 'Tomate')
        self.assertFalse(ProductModel.objects.get(pk=self.produto.id).in_stock)

    def test_update_e_delete_de_produto_inexistente(self):
        with self.assertRaises(ProductNotFoundError):
            self.repo.update_product('00000000-0000-0000-0000-000000000000', ProductUpdate(quantity=1))
        with self.assertRaises(ProductNotFoundError):
            self.repo.delete_product('nao-existe')

    def test_decrement_stock_condicional(self):
        self.assertTrue(self.repo.decrement_stock(self.produto.id, 2))
        self.assertFalse(self.repo.decrement_stock(self.produto.id, 2))
        self.assertEqual(self.repo.get_product_stock(self.produto.id), 1)

    def test_decrement_stock_ate_zero_desliga_in_stock(self):
        self.repo.decrement_stock(self.produto.id, 3)

        modelo = ProductModel.objects.get(pk=self.produto.id)
        self.assertEqual(modelo.quantity, 0)
        self.assertFalse(modelo.in_stock)

    def test_erro_de_banco_vira_persistence_error(self):
        with patch.object(ProductRepositoryDjango, 'ProductModel', new_callable=PropertyMock) as model:
            model.return_value.objects.order_by.side_effect = DatabaseError('conexão perdida')
            with self.assertLogs('quitanda.infrastructure.repositories', level='ERROR'):
                with self.assertRaises(PersistenceError):
                    self.repo.list_products()


class TestOrderRepositoryDjango(TestCase):

    def setUp(self):
        self.user = get_user_model().objects.create_user('cliente', 'cliente@example.com', 'senha-123')
        self.product_repo = ProductRepositoryDjango()
        self.repo = OrderRepositoryDjango(product_repo=self.product_repo)
        self.leite = self.product_repo.create_product(Product(
            name='Leite', price=Decimal('4.50'), category='Dairy', unit='litro', quantity=5,
        ))
        self.pao = self.product_repo.create_product(Product(
            name='Pão', price=Decimal('1.00'), category='Bakery', unit='unidade', quantity=1,
        ))

    def test_create_order_grava_itens_e_baixa_estoque(self):
        pedido = self.repo.create_order(montar_pedido(
            self.user.pk,
            OrderLine(self.leite.id, 'Leite', Decimal('4.50'), 2),
            OrderLine(self.pao.id, 'Pão', Decimal('1.00'), 1),
        ))

        self.assertEqual(pedido.status, OrderStatus.PENDING)
        self.assertEqual(pedido.total, Decimal('10.00'))
        self.assertEqual(len(pedido.lines), 2)
        self.assertEqual(pedido.user_id, str(self.user.pk))
        self.assertEqual(self.product_repo.get_product_stock(self.leite.id), 3)
        self.assertEqual(self.product_repo.get_product_stock(self.pao.id), 0)

    def test_create_order_sem_estoque_desfaz_tudo(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            self.repo.create_order(montar_pedido(
                self.user.pk,
                OrderLine(self.leite.id, 'Leite', Decimal('4.50'), 2),
                OrderLine(self.pao.id, 'Pão', Decimal('1.00'), 2),
            ))

        self.assertEqual(ctx.exception.product_id, self.pao.id)
        self.assertEqual(OrderModel.objects.count(), 0)
        self.assertEqual(self.product_repo.get_product_stock(self.leite.id), 5)

    def test_snapshot_do_item_nao_muda_com_o_produto(self):
        pedido = self.repo.create_order(montar_pedido(
            self.user.pk, OrderLine(self.leite.id, 'Leite', Decimal('4.50'), 1),
        ))
        self.product_repo.update_product(self.leite.id, ProductUpdate(name='Leite Desnatado', price=Decimal('6.00')))
        self.product_repo.delete_product(self.leite.id)

        linha = self.repo.get_by_id(pedido.id).lines[0]
        self.assertEqual(linha.product_name, 'Leite')
        self.assertEqual(linha.unit_price, Decimal('4.50'))
        self.assertEqual(linha.product_id, self.leite.id)

    def test_update_order_status(self):
        pedido = self.repo.create_order(montar_pedido(
            self.user.pk, OrderLine(self.leite.id, 'Leite', Decimal('4.50'), 1),
        ))

        atualizado = self.repo.update_order_status(pedido.id, OrderStatus.CONFIRMED)

        self.assertEqual(atualizado.status, OrderStatus.CONFIRMED)
        self.assertIsNotNone(atualizado.updated_at)
        with self.assertRaises(OrderNotFoundError):
            self.repo.update_order_status('00000000-0000-0000-0000-000000000000', OrderStatus.CONFIRMED)

    def test_list_orders_filtra_por_status_e_usuario(self):
        outro = get_user_model().objects.create_user('outro', 'outro@example.com', 'senha-123')
        primeiro = self.repo.create_order(montar_pedido(
            self.user.pk, OrderLine(self.leite.id, 'Leite', Decimal('4.50'), 1),
        ))
        self.repo.create_order(montar_pedido(
            outro.pk, OrderLine(self.leite.id, 'Leite', Decimal('4.50'), 1),
        ))
        self.repo.update_order_status(primeiro.id, OrderStatus.DELIVERED)

        self.assertEqual(len(self.repo.list_orders()), 2)
        self.assertEqual([p.id for p in self.repo.list_orders(user_id=str(self.user.pk))], [primeiro.id])
        self.assertEqual([p.id for p in self.repo.list_orders(status=OrderStatus.DELIVERED)], [primeiro.id])


class TestProfileRepositoryDjango(TestCase):

    def setUp(self):
        self.user = get_user_model().objects.create_user('cliente', 'cliente@example.com', 'senha-123')
        self.repo = ProfileRepositoryDjango()

    def test_save_cria_e_depois_substitui(self):
        self.assertIsNone(self.repo.get_by_user(str(self.user.pk)))

        self.repo.save(UserProfile(user_id=str(self.user.pk), city=' Recife ', state='PE'))
        salvo = self.repo.save(UserProfile(
            user_id=str(self.user.pk), city='Olinda', latitude=Decimal('-8.008900'), longitude=Decimal('-34.855300'),
        ))

        self.assertEqual(ProfileModel.objects.filter(user=self.user).count(), 1)
        self.assertEqual(salvo.city, 'Olinda')
        self.assertEqual(salvo.state, '')
        self.assertTrue(salvo.has_location)
        self.assertEqual(self.repo.get_by_user(str(self.user.pk)).latitude, Decimal('-8.008900'))


class TestCartStorage(TestCase):

    def test_database_storage_grava_e_le(self):
        storage = DatabaseCartStorage()
        self.assertIsNone(storage.load('carrinho:user:1'))

        storage.save('carrinho:user:1', b'{"lines": []}')
        storage.save('carrinho:user:1', b'{"lines": [1]}')

        self.assertEqual(storage.load('carrinho:user:1'), b'{"lines": [1]}')

    def test_session_storage_grava_e_le(self):
        session = SessionStore()
        storage = SessionCartStorage(session)

        storage.save('quitanda_cart', b'{"lines": []}')

        self.assertTrue(session.modified)
        self.assertEqual(storage.load('quitanda_cart'), b'{"lines": []}')

    def test_session_storage_ignora_conteudo_invalido(self):
        session = SessionStore()
        session['quitanda_cart'] = 'isto nao e base64!'

        with self.assertLogs('quitanda.infrastructure.storage', level='WARNING'):
            self.assertIsNone(SessionCartStorage(session).load('quitanda_cart'))


class TestDjangoAuthService(TestCase):

    def setUp(self):
        User = get_user_model()
        self.cliente = User.objects.create_user('cliente', 'cliente@example.com', 'senha-123')
        self.admin = User.objects.create_user('admin', 'admin@example.com', 'senha-123', is_staff=True)
        self.factory = RequestFactory()

    def _auth(self, user):
        request = self.factory.get('/')
        request.user = user
        return DjangoAuthService(request)

    def test_usuario_autenticado(self):
        identidade = self._auth(self.cliente).get_current_user()
        self.assertEqual(identidade, UserIdentity(id=str(self.cliente.pk), email='cliente@example.com'))

    def test_usuario_anonimo(self):
        self.assertIsNone(self._auth(AnonymousUser()).get_current_user())

    def test_administradores_sao_staff(self):
        auth = self._auth(self.cliente)
        self.assertFalse(auth.is_admin(auth.get_current_user()))
        self.assertTrue(auth.is_admin(UserIdentity(id=str(self.admin.pk))))


class TestLoadInitialData(TestCase):

    def test_comando_nao_duplica_produtos(self):
        call_command('load_initial_data', stdout=StringIO())
        total = ProductModel.objects.count()
        call_command('load_initial_data', stdout=StringIO())

        self.assertGreater(total, 0)
        self.assertEqual(ProductModel.objects.count(), total)
        self.assertFalse(ProductModel.objects.get(name='Suco de Laranja').in_stock)
