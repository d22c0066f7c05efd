from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from apps.core.test_utils import TestDataFactory
from apps.orders.models import Order, OrderItem
from .admin import dashboard_stats


class DashboardStatsTests(TestCase):

    def setUp(self):
        self.alice = TestDataFactory.create_user("alice")
        self.bob = TestDataFactory.create_user("bob")
        self.carrots = TestDataFactory.create_product(name="Carottes", price="2.50")
        self.eggs = TestDataFactory.create_product(name="Oeufs", price="4.00")

        self.make_order(self.alice, Order.STATUS_PAID, [(self.carrots, 2), (self.eggs, 1)])
        self.make_order(self.alice, Order.STATUS_COMPLETED, [(self.carrots, 4)])
        self.make_order(self.bob, Order.STATUS_READY, [(self.eggs, 1)])
        self.make_order(self.bob, Order.STATUS_PENDING, [(self.eggs, 10)])
        self.make_order(None, Order.STATUS_CANCELLED, [(self.carrots, 10)])

    def make_order(self, user, status, lines):
        total = sum((product.price * qty for product, qty in lines), Decimal("0.00"))
        order = Order.objects.create(user=user, status=status, subtotal=total, total=total)
        for product, qty in lines:
            OrderItem.objects.create(
                order=order,
                product=product,
                product_name=product.name,
                unit_price=product.price,
                quantity=qty,
                line_total=product.price * qty,
            )
        return order

    def test_totals_ignore_pending_and_cancelled(self):
        today = timezone.localdate()
        stats = dashboard_stats(today, today)

        self.assertEqual(stats["total_orders"], 3)
        self.assertEqual(stats["total_revenue"], Decimal("23.00"))
        self.assertEqual(stats["total_customers"], 2)
        self.assertEqual(stats["avg_order_value"], Decimal("23.00") / 3)
        self.assertEqual(stats["orders_by_status"][Order.STATUS_CANCELLED], 1)
        self.assertEqual(stats["revenue_by_day"], [{"date": today.isoformat(), "revenue": 23.0}])

        top = stats["top_products"]
        self.assertEqual(top[0], {"name": "Carottes", "quantity": 6, "revenue": 15.0})
        self.assertEqual(top[1], {"name": "Oeufs", "quantity": 2, "revenue": 8.0})

    def test_empty_period(self):
        day = timezone.localdate() - timedelta(days=60)
        stats = dashboard_stats(day, day)
        self.assertEqual(stats["total_orders"], 0)
        self.assertEqual(stats["avg_order_value"], 0)
        self.assertEqual(stats["top_products"], [])


class DashboardViewTests(TestCase):

    def test_staff_sees_dashboard(self):
        self.client.force_login(TestDataFactory.create_user(is_staff=True))
        response = self.client.get("/admin/reports/reporte/")
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Ventes du")
