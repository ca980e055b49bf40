# quitanda/core/testes.py

import json
import random
import unittest
from decimal import Decimal
from unittest.mock import Mock

from quitanda.core.cart import CartEngine
from quitanda.core.catalog import CatalogStore
from quitanda.core.entities import (
    CartLine, CustomerInfo, OrderStatus, Product, ProductUpdate, UserIdentity
)
from quitanda.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    EmptyCartError,
    InsufficientStockError,
    InvalidStatusError,
    OrderNotFoundError,
    PersistenceError,
    ProductNotFoundError,
    ValidationError,
)
from quitanda.core.orders import OrderEngine
from quitanda.core.profiles import ProfileService
from quitanda.core.store import Store
from quitanda.infrastructure.memory import (
    InMemoryCartStorage,
    InMemoryOrderRepository,
    InMemoryProductRepository,
    InMemoryProfileRepository,
    StaticAuthService,
)


CLIENTE = UserIdentity(id='cliente-1', email='cliente@example.com')
ADMIN = UserIdentity(id='admin-1', email='admin@example.com')
DADOS_CLIENTE = CustomerInfo(name='Ana Souza', email='ana@example.com', phone='11999990000')


def novo_produto(name='Banana', price='5.00', quantity=10, category='Fruits', unit='kg'):
    return Product(name=name, price=Decimal(price), category=category, unit=unit, quantity=quantity)


class TestEntidades(unittest.TestCase):

    def test_in_stock_e_derivado_da_quantidade(self):
        self.assertTrue(novo_produto(quantity=1).in_stock)
        self.assertFalse(novo_produto(quantity=0).in_stock)

    def test_status_so_avanca(self):
        self.assertTrue(OrderStatus.PENDING.can_transition_to(OrderStatus.CONFIRMED))
        self.assertTrue(OrderStatus.PENDING.can_transition_to(OrderStatus.DELIVERED))
        self.assertTrue(OrderStatus.CONFIRMED.can_transition_to(OrderStatus.CONFIRMED))
        self.assertFalse(OrderStatus.DELIVERED.can_transition_to(OrderStatus.PENDING))

    def test_product_update_considera_apenas_campos_informados(self):
        update = ProductUpdate(price=Decimal('2.50'), quantity=0)
        self.assertEqual(update.changes(), {'price': Decimal('2.50'), 'quantity': 0})
        self.assertTrue(ProductUpdate().is_empty())

    def test_customer_info_lista_campos_vazios(self):
        info = CustomerInfo(name='Ana', email='  ', phone='')
        self.assertEqual(info.missing_fields(), ['email', 'phone'])


# ====================================================================
# CARRINHO
# ====================================================================

class TestCartEngine(unittest.TestCase):

    def setUp(self):
        self.product_repo = InMemoryProductRepository()
        self.storage = InMemoryCartStorage()
        self.banana = self.product_repo.create_product(novo_produto('Banana', '5.00', quantity=2))
        self.maca = self.product_repo.create_product(novo_produto('Maçã', '3.00', quantity=10))
        self.esgotado = self.product_repo.create_product(novo_produto('Kiwi', '9.00', quantity=0))
        self.cart = CartEngine(self.product_repo, self.storage)

    def test_adicionar_produto_novo_cria_linha_com_uma_unidade(self):
        self.assertTrue(self.cart.add_to_cart(self.banana))

        self.assertEqual(len(self.cart.lines), 1)
        self.assertEqual(self.cart.get_line(self.banana.id).quantity, 1)

    def test_adicionar_produto_existente_incrementa(self):
        self.cart.add_to_cart(self.banana)
        self.cart.add_to_cart(self.banana)

        self.assertEqual(len(self.cart.lines), 1)
        self.assertEqual(self.cart.get_line(self.banana.id).quantity, 2)

    def test_adicionar_alem_do_estoque_nao_altera_carrinho(self):
        self.cart.add_to_cart(self.banana)
        self.cart.add_to_cart(self.banana)

        self.assertFalse(self.cart.add_to_cart(self.banana))
        self.assertEqual(self.cart.get_line(self.banana.id).quantity, 2)

    def test_adicionar_produto_esgotado_e_ignorado(self):
        self.assertFalse(self.cart.add_to_cart(self.esgotado))
        self.assertTrue(self.cart.is_empty())
        self.assertNotIn(CartEngine.DEFAULT_KEY, self.storage.data)

    def test_update_quantity_zero_ou_negativo_remove(self):
        self.cart.add_to_cart(self.maca)
        self.cart.update_quantity(self.maca.id, 0)
        self.assertIsNone(self.cart.get_line(self.maca.id))

        self.cart.add_to_cart(self.maca)
        self.cart.update_quantity(self.maca.id, -3)
        self.assertTrue(self.cart.is_empty())

    def test_update_quantity_zero_equivale_a_remover(self):
        storage_a, storage_b = InMemoryCartStorage(), InMemoryCartStorage()
        cart_a = CartEngine(self.product_repo, storage_a)
        cart_b = CartEngine(self.product_repo, storage_b)
        for cart in (cart_a, cart_b):
            cart.add_to_cart(self.banana)
            cart.add_to_cart(self.maca)
            cart.add_to_cart(self.maca)

        cart_a.update_quantity(self.maca.id, 0)
        cart_b.remove_from_cart(self.maca.id)

        self.assertEqual(cart_a.lines, cart_b.lines)
        self.assertEqual(storage_a.data, storage_b.data)

    def test_update_quantity_acima_do_estoque_e_rejeitado(self):
        self.cart.add_to_cart(self.maca)

        with self.assertRaises(InsufficientStockError) as ctx:
            self.cart.update_quantity(self.maca.id, 11)

        self.assertEqual(ctx.exception.available, 10)
        self.assertEqual(ctx.exception.requested, 11)
        self.assertEqual(self.cart.get_line(self.maca.id).quantity, 1)

    def test_update_quantity_de_produto_fora_do_carrinho_nao_faz_nada(self):
        self.cart.update_quantity(self.maca.id, 4)
        self.assertTrue(self.cart.is_empty())

    def test_update_quantity_de_produto_removido_do_catalogo(self):
        self.cart.add_to_cart(self.maca)
        self.product_repo.delete_product(self.maca.id)

        with self.assertRaises(ProductNotFoundError):
            self.cart.update_quantity(self.maca.id, 2)

    def test_remover_e_idempotente(self):
        self.cart.add_to_cart(self.maca)
        self.cart.remove_from_cart(self.maca.id)
        self.cart.remove_from_cart(self.maca.id)
        self.assertTrue(self.cart.is_empty())

    def test_totais_usam_preco_atual(self):
        self.cart.add_to_cart(self.banana)
        self.cart.add_to_cart(self.banana)
        self.cart.add_to_cart(self.maca)
        self.assertEqual(self.cart.get_total(), Decimal('13.00'))
        self.assertEqual(self.cart.get_item_count(), 3)

        self.product_repo.set_price(self.banana.id, Decimal('6.00'))

        self.assertEqual(self.cart.get_total(), Decimal('15.00'))

    def test_total_com_centavos(self):
        leite = self.product_repo.create_product(novo_produto('Leite', '2.99', quantity=5))
        pao = self.product_repo.create_product(novo_produto('Pão', '3.49', quantity=5))
        self.cart.add_to_cart(leite)
        self.cart.add_to_cart(leite)
        self.cart.add_to_cart(pao)

        self.assertEqual(self.cart.get_total(), Decimal('9.47'))

    def test_detailed_lines_traz_produto_e_subtotal(self):
        self.cart.add_to_cart(self.maca)
        self.cart.update_quantity(self.maca.id, 3)

        linha = self.cart.detailed_lines()[0]
        self.assertEqual(linha['product'].name, 'Maçã')
        self.assertEqual(linha['quantity'], 3)
        self.assertEqual(linha['subtotal'], Decimal('9.00'))

    def test_cada_mutacao_persiste_o_carrinho(self):
        self.cart.add_to_cart(self.maca)
        self.cart.update_quantity(self.maca.id, 4)

        salvo = json.loads(self.storage.data[CartEngine.DEFAULT_KEY].decode('utf-8'))
        self.assertEqual(salvo, {'lines': [{'product_id': self.maca.id, 'quantity': 4}]})

    def test_restore_recupera_o_carrinho_salvo(self):
        self.cart.add_to_cart(self.maca)
        self.cart.add_to_cart(self.banana)

        novo = CartEngine(self.product_repo, self.storage)
        novo.restore()

        self.assertEqual(novo.lines, self.cart.lines)

    def test_restore_descarta_produtos_inexistentes_e_duplicados(self):
        payload = {'lines': [
            {'product_id': self.maca.id, 'quantity': 2},
            {'product_id': 'nao-existe', 'quantity': 1},
            {'product_id': self.maca.id, 'quantity': 5},
        ]}
        self.storage.data[CartEngine.DEFAULT_KEY] = json.dumps(payload).encode('utf-8')

        self.cart.restore()

        self.assertEqual(len(self.cart.lines), 1)
        self.assertEqual(self.cart.get_line(self.maca.id).quantity, 2)
        salvo = json.loads(self.storage.data[CartEngine.DEFAULT_KEY].decode('utf-8'))
        self.assertEqual(len(salvo['lines']), 1)

    def test_restore_com_conteudo_corrompido_inicia_vazio(self):
        self.storage.data[CartEngine.DEFAULT_KEY] = b'{nao e json'
        self.cart.restore()
        self.assertTrue(self.cart.is_empty())

    def test_restore_com_json_em_formato_inesperado(self):
        self.storage.data[CartEngine.DEFAULT_KEY] = b'[]'
        with self.assertLogs('quitanda.core.cart', level='WARNING'):
            self.cart.restore()
        self.assertTrue(self.cart.is_empty())

        payload = {'lines': [{'quantity': 'x'}, 'lixo', {'product_id': self.maca.id, 'quantity': 2}]}
        self.storage.data[CartEngine.DEFAULT_KEY] = json.dumps(payload).encode('utf-8')
        with self.assertLogs('quitanda.core.cart', level='WARNING'):
            self.cart.restore()
        self.assertEqual(self.cart.lines, (CartLine(self.maca.id, 2),))

    def test_sequencia_de_operacoes_mantem_linhas_unicas_e_positivas(self):
        sorteio = random.Random(2024)
        produtos = [self.banana, self.maca, self.esgotado]

        for _ in range(300):
            produto = sorteio.choice(produtos)
            operacao = sorteio.choice(['add', 'update', 'remove'])
            if operacao == 'add':
                self.cart.add_to_cart(self.product_repo.get_by_id(produto.id))
            elif operacao == 'update':
                try:
                    self.cart.update_quantity(produto.id, sorteio.randint(-2, 12))
                except InsufficientStockError:
                    pass
            else:
                self.cart.remove_from_cart(produto.id)

            ids = [line.product_id for line in self.cart.lines]
            self.assertEqual(len(ids), len(set(ids)))
            for line in self.cart.lines:
                self.assertGreaterEqual(line.quantity, 1)
                self.assertLessEqual(line.quantity, self.product_repo.get_product_stock(line.product_id))

    def test_merge_lines_soma_ate_o_limite_do_estoque(self):
        self.cart.add_to_cart(self.banana)

        self.cart.merge_lines([
            CartLine(self.banana.id, 5),
            CartLine(self.maca.id, 3),
            CartLine(self.esgotado.id, 1),
            CartLine('nao-existe', 1),
        ])

        self.assertEqual(self.cart.lines, (CartLine(self.banana.id, 2), CartLine(self.maca.id, 3)))
        salvo = json.loads(self.storage.data[CartEngine.DEFAULT_KEY].decode('utf-8'))
        self.assertEqual(len(salvo['lines']), 2)

    def test_falha_ao_salvar_nao_impede_a_mutacao(self):
        cart = CartEngine(self.product_repo, InMemoryCartStorage(fail=True))

        with self.assertLogs('quitanda.core.cart', level='WARNING'):
            self.assertTrue(cart.add_to_cart(self.maca))

        self.assertEqual(cart.get_item_count(), 1)

    def test_falha_ao_carregar_inicia_vazio(self):
        storage = Mock()
        storage.load.side_effect = PersistenceError()

        cart = CartEngine(self.product_repo, storage)
        cart.restore()

        self.assertTrue(cart.is_empty())


# ====================================================================
# CATÁLOGO
# ====================================================================

class TestCatalogStore(unittest.TestCase):

    def setUp(self):
        self.product_repo = InMemoryProductRepository([
            novo_produto('Banana Prata', category='Fruits'),
            novo_produto('Banana Nanica', category='Fruits'),
            novo_produto('Alface', category='Vegetables'),
        ])
        self.auth = StaticAuthService(ADMIN, admin_ids=[ADMIN.id])
        self.cart = CartEngine(self.product_repo, InMemoryCartStorage())
        self.catalog = CatalogStore(self.product_repo, self.auth, cart=self.cart)

    def test_busca_por_nome_ignora_maiusculas(self):
        nomes = {p.name for p in self.catalog.list_products(search='BANANA')}
        self.assertEqual(nomes, {'Banana Prata', 'Banana Nanica'})

    def test_filtro_por_categoria(self):
        produtos = self.catalog.list_products(category='Vegetables')
        self.assertEqual([p.name for p in produtos], ['Alface'])

    def test_busca_e_categoria_combinadas(self):
        self.assertEqual(self.catalog.list_products(search='banana', category='Vegetables'), [])

    def test_lista_categorias_sem_repeticao(self):
        self.assertEqual(self.catalog.list_categories(), ['Fruits', 'Vegetables'])

    def test_get_product_inexistente(self):
        with self.assertRaises(ProductNotFoundError):
            self.catalog.get_product('nao-existe')

    def test_criar_produto_valida_campos(self):
        with self.assertRaises(ValidationError) as ctx:
            self.catalog.create_product(Product(name=' ', price=Decimal('0'), category='Fruits', unit=''))
        self.assertEqual(ctx.exception.fields, ['name', 'unit', 'price'])

    def test_preco_com_mais_de_duas_casas_e_rejeitado(self):
        for preco in ('0.001', '1.999'):
            with self.assertRaises(ValidationError) as ctx:
                self.catalog.create_product(novo_produto('Manga', price=preco))
            self.assertEqual(ctx.exception.fields, ['price'])

        self.assertEqual(self.catalog.create_product(novo_produto('Manga', price='1.90')).price, Decimal('1.90'))

    def test_criar_produto_atribui_id(self):
        criado = self.catalog.create_product(novo_produto('Manga', quantity=0))
        self.assertIsNotNone(criado.id)
        self.assertFalse(criado.in_stock)

    def test_atualizar_estoque_recalcula_in_stock(self):
        produto = self.catalog.list_products(search='Alface')[0]

        atualizado = self.catalog.update_product(produto.id, ProductUpdate(quantity=0))

        self.assertFalse(atualizado.in_stock)
        self.assertEqual(atualizado.name, 'Alface')

    def test_atualizar_com_quantidade_negativa_falha(self):
        produto = self.catalog.list_products()[0]
        with self.assertRaises(ValidationError):
            self.catalog.update_product(produto.id, ProductUpdate(quantity=-1))

    def test_remover_produto_remove_do_carrinho(self):
        produto = self.catalog.list_products(search='Alface')[0]
        self.cart.add_to_cart(produto)

        self.catalog.delete_product(produto.id)

        self.assertTrue(self.cart.is_empty())
        with self.assertRaises(ProductNotFoundError):
            self.catalog.get_product(produto.id)

    def test_escrita_exige_administrador(self):
        catalog = CatalogStore(self.product_repo, StaticAuthService(CLIENTE, admin_ids=[ADMIN.id]))
        with self.assertRaises(AuthorizationError):
            catalog.create_product(novo_produto('Manga'))

        anonimo = CatalogStore(self.product_repo, StaticAuthService())
        with self.assertRaises(AuthenticationError):
            anonimo.delete_product(self.catalog.list_products()[0].id)


# ====================================================================
# PEDIDOS
# ====================================================================

class TestOrderEngine(unittest.TestCase):

    def setUp(self):
        self.product_repo = InMemoryProductRepository()
        self.order_repo = InMemoryOrderRepository(self.product_repo)
        self.auth = StaticAuthService(CLIENTE, admin_ids=[ADMIN.id])
        self.leite = self.product_repo.create_product(novo_produto('Leite', '4.50', quantity=5))
        self.pao = self.product_repo.create_product(novo_produto('Pão', '1.00', quantity=3))
        self.cart = CartEngine(self.product_repo, InMemoryCartStorage())
        self.engine = OrderEngine(self.product_repo, self.order_repo, self.auth)

    def _encher_carrinho(self, cart=None):
        cart = cart or self.cart
        cart.add_to_cart(self.leite)
        cart.add_to_cart(self.leite)
        cart.add_to_cart(self.pao)
        return cart

    def test_checkout_com_sucesso(self):
        self._encher_carrinho()

        pedido = self.engine.place_order(DADOS_CLIENTE, self.cart)

        self.assertEqual(pedido.status, OrderStatus.PENDING)
        self.assertEqual(pedido.user_id, CLIENTE.id)
        self.assertEqual(pedido.total, Decimal('10.00'))
        self.assertEqual(pedido.item_count, 3)
        self.assertEqual(self.product_repo.get_product_stock(self.leite.id), 3)
        self.assertEqual(self.product_repo.get_product_stock(self.pao.id), 2)
        self.assertTrue(self.cart.is_empty())

    def test_pedido_guarda_preco_do_momento_da_compra(self):
        self._encher_carrinho()
        self.product_repo.set_price(self.leite.id, Decimal('5.00'))

        pedido = self.engine.place_order(DADOS_CLIENTE, self.cart)
        self.product_repo.set_price(self.leite.id, Decimal('99.00'))

        linha = next(l for l in self.order_repo.get_by_id(pedido.id).lines if l.product_id == self.leite.id)
        self.assertEqual(linha.unit_price, Decimal('5.00'))
        self.assertEqual(linha.product_name, 'Leite')

    def test_taxa_de_entrega_entra_no_total(self):
        engine = OrderEngine(self.product_repo, self.order_repo, self.auth, delivery_fee=Decimal('7.00'))
        self._encher_carrinho()

        pedido = engine.place_order(DADOS_CLIENTE, self.cart)

        self.assertEqual(pedido.subtotal, Decimal('10.00'))
        self.assertEqual(pedido.total, Decimal('17.00'))

    def test_checkout_com_carrinho_vazio_falha(self):
        with self.assertRaises(EmptyCartError):
            self.engine.place_order(DADOS_CLIENTE, self.cart)

    def test_checkout_sem_dados_de_contato_falha(self):
        self._encher_carrinho()

        with self.assertRaises(ValidationError) as ctx:
            self.engine.place_order(CustomerInfo(name='Ana', email='', phone=''), self.cart)

        self.assertEqual(ctx.exception.fields, ['email', 'phone'])
        self.assertEqual(self.cart.get_item_count(), 3)

    def test_checkout_sem_usuario_falha_sem_alterar_nada(self):
        engine = OrderEngine(self.product_repo, self.order_repo, StaticAuthService())
        self._encher_carrinho()

        with self.assertRaises(AuthenticationError):
            engine.place_order(DADOS_CLIENTE, self.cart)

        self.assertEqual(self.cart.get_item_count(), 3)
        self.assertEqual(self.product_repo.get_product_stock(self.leite.id), 5)

    def test_estoque_insuficiente_lista_todos_os_produtos(self):
        self._encher_carrinho()
        self.product_repo.update_product(self.leite.id, ProductUpdate(quantity=1))
        self.product_repo.update_product(self.pao.id, ProductUpdate(quantity=0))

        with self.assertRaises(InsufficientStockError) as ctx:
            self.engine.place_order(DADOS_CLIENTE, self.cart)

        faltas = {s.product_id: (s.available, s.requested) for s in ctx.exception.shortages}
        self.assertEqual(faltas, {self.leite.id: (1, 2), self.pao.id: (0, 1)})
        self.assertEqual(self.cart.get_item_count(), 3)
        self.assertEqual(self.order_repo.list_orders(), [])

    def test_pedir_tres_com_dois_em_estoque(self):
        self.cart.add_to_cart(self.pao)
        self.cart.update_quantity(self.pao.id, 3)
        self.product_repo.update_product(self.pao.id, ProductUpdate(quantity=2))

        with self.assertRaises(InsufficientStockError):
            self.engine.place_order(DADOS_CLIENTE, self.cart)

        self.assertEqual(self.cart.get_line(self.pao.id).quantity, 3)
        self.assertEqual(self.product_repo.get_product_stock(self.pao.id), 2)

    def test_falha_na_gravacao_preserva_o_carrinho(self):
        order_repo = Mock()
        order_repo.create_order.side_effect = PersistenceError()
        engine = OrderEngine(self.product_repo, order_repo, self.auth)
        self._encher_carrinho()

        with self.assertRaises(PersistenceError):
            engine.place_order(DADOS_CLIENTE, self.cart)

        self.assertEqual(self.cart.get_item_count(), 3)

    def test_ultima_unidade_disputada_por_duas_sessoes(self):
        self.product_repo.update_product(self.pao.id, ProductUpdate(quantity=1))
        pao = self.product_repo.get_by_id(self.pao.id)
        cart_a = CartEngine(self.product_repo, InMemoryCartStorage())
        cart_b = CartEngine(self.product_repo, InMemoryCartStorage())
        cart_a.add_to_cart(pao)
        cart_b.add_to_cart(pao)

        self.engine.place_order(DADOS_CLIENTE, cart_a)
        with self.assertRaises(InsufficientStockError):
            self.engine.place_order(DADOS_CLIENTE, cart_b)

        self.assertEqual(self.product_repo.get_product_stock(self.pao.id), 0)
        self.assertFalse(cart_b.is_empty())

    def test_cliente_ve_apenas_os_proprios_pedidos(self):
        self._encher_carrinho()
        meu = self.engine.place_order(DADOS_CLIENTE, self.cart)

        outro_auth = StaticAuthService(UserIdentity('cliente-2'), admin_ids=[ADMIN.id])
        outro_engine = OrderEngine(self.product_repo, self.order_repo, outro_auth)

        self.assertEqual([p.id for p in self.engine.list_my_orders()], [meu.id])
        self.assertEqual(outro_engine.list_my_orders(), [])
        with self.assertRaises(AuthorizationError):
            outro_engine.get_order(meu.id)

    def test_get_order_inexistente(self):
        with self.assertRaises(OrderNotFoundError):
            self.engine.get_order('nao-existe')


class TestStatusDoPedido(unittest.TestCase):

    def setUp(self):
        self.product_repo = InMemoryProductRepository()
        self.order_repo = InMemoryOrderRepository(self.product_repo)
        produto = self.product_repo.create_product(novo_produto('Ovos', '12.00', quantity=4))

        cart = CartEngine(self.product_repo, InMemoryCartStorage())
        cart.add_to_cart(produto)
        cliente = OrderEngine(self.product_repo, self.order_repo, StaticAuthService(CLIENTE))
        self.pedido = cliente.place_order(DADOS_CLIENTE, cart)

        self.admin_auth = StaticAuthService(ADMIN, admin_ids=[ADMIN.id])
        self.engine = OrderEngine(self.product_repo, self.order_repo, self.admin_auth)

    def test_avanca_status(self):
        atualizado = self.engine.update_order_status(self.pedido.id, 'confirmed')

        self.assertEqual(atualizado.status, OrderStatus.CONFIRMED)
        self.assertIsNotNone(atualizado.updated_at)
        self.assertEqual(atualizado.total, self.pedido.total)
        self.assertEqual(atualizado.lines, self.pedido.lines)

    def test_pode_pular_para_entregue(self):
        atualizado = self.engine.update_order_status(self.pedido.id, OrderStatus.DELIVERED)
        self.assertEqual(atualizado.status, OrderStatus.DELIVERED)

    def test_nao_pode_voltar_status(self):
        self.engine.update_order_status(self.pedido.id, 'delivered')
        with self.assertRaises(InvalidStatusError):
            self.engine.update_order_status(self.pedido.id, 'pending')

    def test_volta_permitida_quando_regra_desativada(self):
        engine = OrderEngine(self.product_repo, self.order_repo, self.admin_auth,
                             enforce_status_order=False)
        engine.update_order_status(self.pedido.id, 'delivered')

        self.assertEqual(engine.update_order_status(self.pedido.id, 'pending').status, OrderStatus.PENDING)

    def test_status_desconhecido(self):
        with self.assertRaises(InvalidStatusError):
            self.engine.update_order_status(self.pedido.id, 'shipped')

    def test_pedido_inexistente(self):
        antes = self.order_repo.get_by_id(self.pedido.id)

        with self.assertRaises(OrderNotFoundError):
            self.engine.update_order_status('nao-existe', 'confirmed')

        depois = self.order_repo.get_by_id(self.pedido.id)
        self.assertEqual(depois.status, antes.status)
        self.assertEqual(depois.updated_at, antes.updated_at)
        self.assertEqual(len(self.order_repo.list_orders()), 1)

    def test_cliente_nao_altera_status(self):
        engine = OrderEngine(self.product_repo, self.order_repo, StaticAuthService(CLIENTE))
        with self.assertRaises(AuthorizationError):
            engine.update_order_status(self.pedido.id, 'confirmed')

    def test_listagem_administrativa_filtra_por_status(self):
        self.assertEqual(len(self.engine.list_orders()), 1)
        self.assertEqual(self.engine.list_orders(status='confirmed'), [])

    def test_dashboard(self):
        resumo = self.engine.dashboard(product_count=1)
        self.assertEqual(resumo, {
            'total_products': 1,
            'total_orders': 1,
            'pending_orders': 1,
            'revenue': Decimal('12.00'),
        })


# ====================================================================
# LOJA DA SESSÃO
# ====================================================================

class TestStore(unittest.TestCase):

    def setUp(self):
        self.product_repo = InMemoryProductRepository([novo_produto('Queijo', '30.00', quantity=2)])
        self.storage = InMemoryCartStorage()

    def _loja(self, user=CLIENTE):
        return Store(
            product_repo=self.product_repo,
            order_repo=InMemoryOrderRepository(self.product_repo),
            auth=StaticAuthService(user, admin_ids=[ADMIN.id]),
            cart_storage=self.storage,
        )

    def test_loja_fechada_nao_expoe_componentes(self):
        loja = self._loja()
        with self.assertRaises(RuntimeError):
            loja.cart
        with loja:
            self.assertTrue(loja.is_open)
        self.assertFalse(loja.is_open)

    def test_carrinho_sobrevive_entre_sessoes(self):
        with self._loja() as loja:
            loja.cart.add_to_cart(loja.catalog.list_products()[0])

        with self._loja() as loja:
            self.assertEqual(loja.cart.get_item_count(), 1)

    def test_checkout_pela_loja(self):
        with self._loja() as loja:
            loja.cart.add_to_cart(loja.catalog.list_products()[0])
            pedido = loja.checkout(DADOS_CLIENTE)

            self.assertEqual(pedido.total, Decimal('30.00'))
            self.assertTrue(loja.cart.is_empty())

    def test_dashboard_conta_produtos(self):
        with self._loja(user=ADMIN) as loja:
            self.assertEqual(loja.dashboard()['total_products'], 1)

    def test_perfil_pela_loja(self):
        loja = Store(
            product_repo=self.product_repo,
            order_repo=InMemoryOrderRepository(self.product_repo),
            auth=StaticAuthService(CLIENTE),
            cart_storage=self.storage,
            profile_repo=InMemoryProfileRepository(),
        )
        with loja:
            loja.profiles.update_profile({'city': 'Recife'})
            self.assertEqual(loja.profiles.get_profile().city, 'Recife')

        with self._loja() as sem_perfis:
            with self.assertRaises(RuntimeError):
                sem_perfis.profiles


# ====================================================================
# PERFIL DE ENTREGA
# ====================================================================

class TestProfileService(unittest.TestCase):

    def setUp(self):
        self.repo = InMemoryProfileRepository()
        self.service = ProfileService(self.repo, StaticAuthService(CLIENTE))

    def test_perfil_inexistente_vem_em_branco(self):
        perfil = self.service.get_profile()

        self.assertEqual(perfil.user_id, CLIENTE.id)
        self.assertEqual(perfil.address_line1, '')
        self.assertFalse(perfil.has_location)
        self.assertIsNone(self.repo.get_by_user(CLIENTE.id))

    def test_atualizacao_parcial_preserva_os_demais_campos(self):
        self.service.update_profile({'full_name': 'Ana Souza', 'city': 'Recife', 'state': 'PE'})
        perfil = self.service.update_profile({'address_line1': 'Rua da Aurora, 100', 'id': 'ignorado'})

        self.assertEqual(perfil.full_name, 'Ana Souza')
        self.assertEqual(perfil.city, 'Recife')
        self.assertEqual(perfil.address_line1, 'Rua da Aurora, 100')
        self.assertIsNotNone(perfil.updated_at)

    def test_localizacao_atual_exige_coordenadas(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.update_profile({'use_current_location': True, 'latitude': Decimal('-8.05')})
        self.assertEqual(ctx.exception.fields, ['longitude'])

        perfil = self.service.update_profile({
            'use_current_location': True, 'latitude': Decimal('-8.05'), 'longitude': Decimal('-34.9'),
        })
        self.assertTrue(perfil.has_location)

    def test_coordenadas_fora_da_faixa(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.update_profile({'latitude': Decimal('91'), 'longitude': Decimal('-181')})
        self.assertEqual(ctx.exception.fields, ['latitude', 'longitude'])
        self.assertIsNone(self.repo.get_by_user(CLIENTE.id))

    def test_perfil_exige_usuario(self):
        service = ProfileService(self.repo, StaticAuthService())
        with self.assertRaises(AuthenticationError):
            service.get_profile()
        with self.assertRaises(AuthenticationError):
            service.update_profile({'city': 'Recife'})


if __name__ == '__main__':
    unittest.main()
