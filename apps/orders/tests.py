"""
Tests des commandes : passage de commande, progression du statut, annulation, facture
"""
import json
from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import Client, TestCase

from apps.catalog.models import Product
from apps.core.test_utils import TestDataFactory
from apps.cycles.services import MESSAGE_UNAVAILABLE
from apps.shipping.services import ERROR_ZONES_UNAVAILABLE
from .models import Order, OrderItem


class OrderModelTests(TestCase):

    def setUp(self):
        self.product = TestDataFactory.create_product(stock=5)
        self.order = Order.objects.create(customer_name="Marie", subtotal=Decimal("5.00"), total=Decimal("5.00"))
        OrderItem.objects.create(
            order=self.order,
            product=self.product,
            product_name=self.product.name,
            unit_price=self.product.price,
            quantity=2,
            line_total=self.product.price * 2,
        )

    def test_order_number_generated(self):
        self.assertTrue(self.order.order_number.startswith("CMD-"))
        self.assertTrue(self.order.order_number.endswith(f"{self.order.pk:06d}"))
        self.order.refresh_from_db()
        self.assertTrue(self.order.order_number.startswith("CMD-"))

    def test_status_flow(self):
        seen = []
        while True:
            new_status = self.order.advance_status()
            if new_status is None:
                break
            seen.append(new_status)
        self.assertEqual(seen, ["paid", "preparing", "ready", "completed"])
        self.assertIsNone(self.order.next_status())

    def test_cancelled_order_does_not_advance(self):
        self.order.cancel()
        self.assertIsNone(self.order.next_status())
        self.assertIsNone(self.order.advance_status())
        self.assertEqual(self.order.status, Order.STATUS_CANCELLED)

    def test_cancel_restocks_once(self):
        self.order.cancel()
        self.order.cancel()
        self.order.restock_items()
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 7)
        self.assertTrue(self.order.stock_reverted)


class CheckoutTests(TestCase):
    url = "/api/commande/"

    def setUp(self):
        self.cycle = TestDataFactory.create_open_cycle()
        self.farm = TestDataFactory.create_pickup_location()
        self.zone = TestDataFactory.create_zone()
        self.product = TestDataFactory.create_product(price="2.50", stock=10, weight_grams=500)

    def add_to_cart(self, product, qty):
        return self.client.post(
            f"/api/panier/ajouter/{product.id}/",
            data=json.dumps({"qty": qty}),
            content_type="application/json",
        )

    def checkout(self, **kwargs):
        payload = {
            "customer_name": "Marie Dupont",
            "customer_phone": "06 12 34 56 78",
            "customer_email": "Marie@Example.com",
            "delivery_type": "pickup",
            "pickup_location": self.farm.id,
        }
        payload.update(kwargs)
        return self.client.post(self.url, data=json.dumps(payload), content_type="application/json")

    def test_pickup_order(self):
        self.add_to_cart(self.product, 2)
        response = self.checkout()
        self.assertEqual(response.status_code, 201)

        order = Order.objects.get()
        self.assertEqual(order.delivery_type, Order.DELIVERY_PICKUP)
        self.assertEqual(order.pickup_location, self.farm)
        self.assertEqual(order.sales_cycle, self.cycle)
        self.assertEqual(order.total, Decimal("5.00"))
        self.assertEqual(order.shipping_cost, Decimal("0.00"))
        self.assertEqual(order.weight_grams, 1000)
        self.assertEqual(order.customer_email, "marie@example.com")
        self.assertEqual(order.items.count(), 1)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 8)

        cart = self.client.get("/api/panier/").json()["cart"]
        self.assertEqual(cart["items"], [])

        # Commande anonyme : visible depuis la même session
        detail = self.client.get(f"/api/commandes/{order.id}/")
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(detail.json()["order"]["nextStatus"], "paid")

    def test_chronofresh_order_uses_shipping_quote(self):
        self.add_to_cart(self.product, 4)
        response = self.checkout(
            delivery_type="chronofresh",
            pickup_location=None,
            street="12 rue des Lilas",
            postal_code="45420",
            city="Batilly",
        )
        self.assertEqual(response.status_code, 201, response.content)

        payload = response.json()["order"]
        self.assertEqual(payload["customerPhone"], "+33612345678")
        self.assertEqual(payload["deliveryAddressText"], "Marie Dupont\n12 rue des Lilas\n45420 Batilly")

        invoice = self.client.get(f"/api/commandes/{payload['id']}/facture/")
        self.assertEqual(invoice.status_code, 200)
        self.assertTrue(invoice.content.startswith(b"%PDF"))

        order = Order.objects.get()
        # 5.00 + 1.00 * 2 kg
        self.assertEqual(order.shipping_cost, Decimal("7.00"))
        self.assertEqual(order.total, Decimal("17.00"))
        self.assertEqual(order.shipping_zone, self.zone)
        self.assertEqual(order.delivery_postal_code, "45420")

    def test_chronofresh_outside_zones(self):
        self.add_to_cart(self.product, 1)
        response = self.checkout(
            delivery_type="chronofresh",
            street="1 La Canebière",
            postal_code="13001",
            city="Marseille",
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Zone de livraison non couverte.")
        self.assertFalse(Order.objects.exists())

    def test_chronofresh_requires_address(self):
        self.add_to_cart(self.product, 1)
        response = self.checkout(delivery_type="chronofresh", postal_code="4542")
        self.assertEqual(response.status_code, 400)
        errors = response.json()["errors"]
        self.assertIn("street", errors)
        self.assertIn("postal_code", errors)

    def test_pickup_requires_location(self):
        self.add_to_cart(self.product, 1)
        response = self.checkout(pickup_location=None)
        self.assertEqual(response.status_code, 400)
        self.assertIn("pickup_location", response.json()["errors"])

    def test_shop_closed(self):
        self.cycle.delete()
        TestDataFactory.create_future_cycle()
        self.add_to_cart(self.product, 1)
        response = self.checkout()
        self.assertEqual(response.status_code, 409)
        self.assertFalse(response.json()["salesStatus"]["isOpen"])
        self.assertFalse(Order.objects.exists())

    def test_empty_cart(self):
        response = self.checkout()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Votre panier est vide.")

    def test_stock_changed_during_checkout(self):
        self.add_to_cart(self.product, 3)
        Product.objects.filter(pk=self.product.pk).update(stock=2)
        response = self.checkout()
        self.assertEqual(response.status_code, 400)
        self.assertIn("Stock insuffisant", response.json()["error"])
        self.assertFalse(Order.objects.exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 2)

    def test_other_user_cannot_see_order(self):
        owner = TestDataFactory.create_user()
        self.client.force_login(owner)
        self.add_to_cart(self.product, 1)
        order_id = self.checkout().json()["order"]["id"]

        self.client.force_login(TestDataFactory.create_user())
        self.assertEqual(self.client.get(f"/api/commandes/{order_id}/").status_code, 403)
        self.assertEqual(self.client.get(f"/api/commandes/{order_id}/facture/").status_code, 403)

    def test_my_orders_and_invoice(self):
        user = TestDataFactory.create_user()
        self.client.force_login(user)
        self.add_to_cart(self.product, 1)
        self.checkout()

        data = self.client.get("/api/commandes/").json()
        self.assertEqual(len(data["orders"]), 1)

        order_id = data["orders"][0]["id"]
        response = self.client.get(f"/api/commandes/{order_id}/facture/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertTrue(response.content.startswith(b"%PDF"))

    def test_cycles_unreadable(self):
        self.add_to_cart(self.product, 1)
        with mock.patch("apps.cycles.views.active_cycles", side_effect=DatabaseError("verrou")):
            with self.assertLogs("apps.cycles.views", level="ERROR"):
                response = self.checkout()
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"ok": False, "error": MESSAGE_UNAVAILABLE})
        self.assertFalse(Order.objects.exists())

    def test_zones_unreadable(self):
        self.add_to_cart(self.product, 1)
        with mock.patch("apps.orders.views.active_zones", side_effect=DatabaseError("verrou")):
            with self.assertLogs("apps.orders.views", level="ERROR"):
                response = self.checkout(
                    delivery_type="chronofresh",
                    street="12 rue des Lilas",
                    postal_code="45420",
                    city="Batilly",
                )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"ok": False, "error": ERROR_ZONES_UNAVAILABLE})
        self.assertFalse(Order.objects.exists())

    def test_checkout_with_csrf_token(self):
        client = Client(enforce_csrf_checks=True)
        token = client.get("/api/panier/").json()["csrfToken"]
        client.post(
            f"/api/panier/ajouter/{self.product.id}/",
            data=json.dumps({"qty": 1}),
            content_type="application/json",
            HTTP_X_CSRFTOKEN=token,
        )
        payload = json.dumps({
            "customer_name": "Marie Dupont",
            "customer_phone": "0612345678",
            "customer_email": "marie@example.com",
            "delivery_type": "pickup",
            "pickup_location": self.farm.id,
        })

        refused = client.post(self.url, data=payload, content_type="application/json")
        self.assertEqual(refused.status_code, 403)

        response = client.post(self.url, data=payload, content_type="application/json", HTTP_X_CSRFTOKEN=token)
        self.assertEqual(response.status_code, 201)

    def test_my_orders_requires_login(self):
        response = self.client.get("/api/commandes/")
        self.assertEqual(response.status_code, 302)
