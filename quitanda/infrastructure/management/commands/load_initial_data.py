"""
Management command para popular o catálogo com produtos de demonstração.
"""
from decimal import Decimal

from django.core.management.base import BaseCommand

from quitanda.core.dependency_injection import get_product_repository
from quitanda.core.entities import Product


PRODUTOS_INICIAIS = [
    Product(name='Banana Prata', price=Decimal('6.99'), category='Fruits', unit='kg', quantity=40,
            description='Banana prata madura, ideal para o café da manhã.'),
    Product(name='Maçã Gala', price=Decimal('9.49'), category='Fruits', unit='kg', quantity=30),
    Product(name='Alface Crespa', price=Decimal('3.50'), category='Vegetables', unit='unidade', quantity=25,
            description='Colhida no dia, direto do produtor.'),
    Product(name='Tomate Italiano', price=Decimal('8.90'), category='Vegetables', unit='kg', quantity=35),
    Product(name='Leite Integral', price=Decimal('5.29'), category='Dairy', unit='litro', quantity=60),
    Product(name='Queijo Minas Frescal', price=Decimal('32.90'), category='Dairy', unit='kg', quantity=10),
    Product(name='Pão Francês', price=Decimal('16.90'), category='Bakery', unit='kg', quantity=20),
    Product(name='Peito de Frango', price=Decimal('21.90'), category='Meat', unit='kg', quantity=15),
    Product(name='Castanha de Caju', price=Decimal('12.50'), category='Snacks', unit='100 g', quantity=18),
    Product(name='Suco de Laranja', price=Decimal('11.00'), category='Beverages', unit='litro', quantity=0,
            description='Suco natural, sem adição de açúcar.'),
]


class Command(BaseCommand):
    """Django command para carregar o catálogo inicial (produtos já existentes são ignorados)."""
    help = 'Carrega produtos de demonstração no catálogo.'

    def handle(self, *args, **options):
        repo = get_product_repository()
        existentes = {p.name for p in repo.list_products()}

        criados = 0
        for produto in PRODUTOS_INICIAIS:
            if produto.name in existentes:
                self.stdout.write(f'Produto "{produto.name}" já existe, ignorando.')
                continue
            repo.create_product(produto)
            criados += 1

        self.stdout.write(self.style.SUCCESS(f'{criados} produto(s) criado(s).'))
