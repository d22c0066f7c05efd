"""
Fabriques de données pour les tests
"""
import random
import string
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.catalog.models import Category, Product
from apps.cycles.models import SalesCycle
from apps.shipping.models import PickupLocation, ShippingZone

User = get_user_model()


class TestDataFactory:
    """Création rapide d'objets de test"""

    @staticmethod
    def random_string(length=8):
        return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))

    @staticmethod
    def create_user(username=None, password='testpass123', is_staff=False):
        if not username:
            username = f'client_{TestDataFactory.random_string(6)}'
        return User.objects.create_user(
            username=username,
            email=f'{username}@example.com',
            password=password,
            is_staff=is_staff,
        )

    @staticmethod
    def create_category(name=None):
        return Category.objects.create(name=name or f'Catégorie {TestDataFactory.random_string(4)}')

    @staticmethod
    def create_product(name=None, price='2.50', stock=10, weight_grams=500, category=None, **kwargs):
        return Product.objects.create(
            name=name or f'Produit {TestDataFactory.random_string(6)}',
            price=Decimal(price),
            stock=stock,
            weight_grams=weight_grams,
            category=category,
            **kwargs
        )

    @staticmethod
    def create_open_cycle(name='Cycle en cours', days_before=2, days_after=5):
        now = timezone.now()
        return SalesCycle.objects.create(
            name=name,
            opening_date=now - timedelta(days=days_before),
            closing_date=now + timedelta(days=days_after),
        )

    @staticmethod
    def create_future_cycle(name='Prochain cycle', days_ahead=3):
        now = timezone.now()
        return SalesCycle.objects.create(
            name=name,
            opening_date=now + timedelta(days=days_ahead),
            closing_date=now + timedelta(days=days_ahead + 7),
        )

    @staticmethod
    def create_pickup_location(name='La Ferme', kind=PickupLocation.KIND_FARM):
        return PickupLocation.objects.create(
            name=name,
            kind=kind,
            address='Lieu-dit Le Potager',
            city='Batilly-en-Puisaye',
            postal_code='45420',
            available_days='Vendredi,Samedi',
        )

    @staticmethod
    def create_zone(name='Loiret', prefixes='45', base_rate='5.00', rate_per_kg='1.00', **kwargs):
        return ShippingZone.objects.create(
            name=name,
            postal_code_prefix=prefixes,
            base_rate=Decimal(base_rate),
            rate_per_kg=Decimal(rate_per_kg),
            **kwargs
        )
