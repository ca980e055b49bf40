import uuid
from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255, verbose_name='Nome')),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))], verbose_name='Preço')),
                ('category', models.CharField(db_index=True, max_length=100, verbose_name='Categoria')),
                ('unit', models.CharField(help_text='Ex: kg, unidade, dúzia', max_length=50, verbose_name='Unidade')),
                ('quantity', models.PositiveIntegerField(default=0, verbose_name='Estoque Atual')),
                ('in_stock', models.BooleanField(default=False, verbose_name='Em Estoque')),
                ('description', models.TextField(blank=True, default='', verbose_name='Descrição')),
                ('image', models.CharField(blank=True, default='', max_length=500, verbose_name='Imagem (URL)')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Produto',
                'verbose_name_plural': 'Produtos',
                'db_table': 'catalogo_produto',
                'ordering': ['-created_at'],
            },
        ),
    ]
