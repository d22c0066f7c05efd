import json
from decimal import Decimal

from django.test import Client, TestCase

from apps.core.test_utils import TestDataFactory
from .models import Cart


class CartApiTests(TestCase):

    def setUp(self):
        self.carrots = TestDataFactory.create_product(name="Carottes", price="2.50", stock=5, weight_grams=1000)
        self.leeks = TestDataFactory.create_product(name="Poireaux", price="3.20", stock=2, weight_grams=None)

    def post(self, url, payload=None):
        return self.client.post(url, data=json.dumps(payload or {}), content_type="application/json")

    def test_empty_cart(self):
        cart = self.client.get("/api/panier/").json()["cart"]
        self.assertEqual(cart["items"], [])
        self.assertEqual(cart["subtotal"], "0.00")
        self.assertEqual(cart["count"], 0)

    def test_add_products(self):
        self.post(f"/api/panier/ajouter/{self.carrots.id}/", {"qty": 2})
        response = self.post(f"/api/panier/ajouter/{self.leeks.id}/")
        self.assertEqual(response.status_code, 200)

        cart = response.json()["cart"]
        self.assertEqual(cart["count"], 3)
        self.assertEqual(cart["subtotal"], "8.20")
        # Poireaux sans poids : 0 g
        self.assertEqual(cart["weightGrams"], 2000)
        self.assertTrue(cart["canCheckout"])

    def test_add_merges_lines(self):
        self.post(f"/api/panier/ajouter/{self.carrots.id}/", {"qty": 2})
        self.post(f"/api/panier/ajouter/{self.carrots.id}/", {"qty": 1})
        cart = Cart.objects.get()
        self.assertEqual(cart.items.count(), 1)
        self.assertEqual(cart.items.get().quantity, 3)

    def test_add_over_stock(self):
        response = self.post(f"/api/panier/ajouter/{self.leeks.id}/", {"qty": 3})
        self.assertEqual(response.status_code, 400)
        data = response.json()
        self.assertEqual(data["error"], "Stock insuffisant. Disponible : 2.")
        self.assertEqual(data["stock"], 2)

    def test_add_out_of_stock_product(self):
        self.carrots.stock = 0
        self.carrots.save()
        response = self.post(f"/api/panier/ajouter/{self.carrots.id}/")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Ce produit n'est plus disponible.")

    def test_unavailable_product_not_found(self):
        self.carrots.is_available = False
        self.carrots.save()
        response = self.post(f"/api/panier/ajouter/{self.carrots.id}/")
        self.assertEqual(response.status_code, 404)

    def test_set_quantity_and_delta(self):
        cart = self.post(f"/api/panier/ajouter/{self.carrots.id}/").json()["cart"]
        item_id = cart["items"][0]["id"]

        data = self.post(f"/api/panier/article/{item_id}/", {"qty": 4}).json()
        self.assertEqual(data["cart"]["items"][0]["quantity"], 4)

        data = self.post(f"/api/panier/article/{item_id}/", {"delta": -1}).json()
        self.assertEqual(data["cart"]["items"][0]["quantity"], 3)

        response = self.post(f"/api/panier/article/{item_id}/", {"qty": 6})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["stock"], 5)

        response = self.post(f"/api/panier/article/{item_id}/", {"qty": "beaucoup"})
        self.assertEqual(response.status_code, 400)

        data = self.post(f"/api/panier/article/{item_id}/", {"qty": 0}).json()
        self.assertTrue(data["deleted"])
        self.assertEqual(data["cart"]["items"], [])

    def test_unknown_item(self):
        response = self.post("/api/panier/article/999/", {"qty": 1})
        self.assertEqual(response.status_code, 404)

    def test_stock_drop_blocks_checkout(self):
        self.post(f"/api/panier/ajouter/{self.carrots.id}/", {"qty": 4})
        self.carrots.stock = 3
        self.carrots.save()
        cart = self.client.get("/api/panier/").json()["cart"]
        self.assertFalse(cart["canCheckout"])

    def test_remove_and_clear(self):
        self.post(f"/api/panier/ajouter/{self.carrots.id}/")
        cart = self.post(f"/api/panier/ajouter/{self.leeks.id}/").json()["cart"]

        cart = self.post(f"/api/panier/supprimer/{cart['items'][0]['id']}/").json()["cart"]
        self.assertEqual(len(cart["items"]), 1)

        cart = self.post("/api/panier/vider/").json()["cart"]
        self.assertEqual(cart["items"], [])
        self.assertEqual(Cart.objects.get().subtotal, Decimal("0.00"))

    def test_session_cart_merged_on_login(self):
        self.post(f"/api/panier/ajouter/{self.carrots.id}/", {"qty": 2})
        self.post(f"/api/panier/ajouter/{self.leeks.id}/", {"qty": 2})

        user = TestDataFactory.create_user()
        user_cart = Cart.objects.create(user=user)
        user_cart.items.create(product=self.carrots, quantity=4)

        self.client.force_login(user)
        cart = self.client.get("/api/panier/").json()["cart"]

        quantities = {it["name"]: it["quantity"] for it in cart["items"]}
        # Plafonné au stock des carottes (5)
        self.assertEqual(quantities, {"Carottes": 5, "Poireaux": 2})
        self.assertEqual(Cart.objects.filter(is_active=True).count(), 1)

    def test_logged_in_user_keeps_cart(self):
        user = TestDataFactory.create_user()
        self.client.force_login(user)
        self.post(f"/api/panier/ajouter/{self.carrots.id}/")

        self.client.logout()
        self.assertEqual(self.client.get("/api/panier/").json()["cart"]["items"], [])

        self.client.force_login(user)
        self.assertEqual(len(self.client.get("/api/panier/").json()["cart"]["items"]), 1)


class CartCsrfTests(TestCase):

    def setUp(self):
        self.product = TestDataFactory.create_product(stock=5)
        self.client = Client(enforce_csrf_checks=True)

    def test_token_issued_by_cart_detail(self):
        response = self.client.get("/api/panier/")
        token = response.json()["csrfToken"]
        self.assertTrue(token)
        self.assertIn("csrftoken", response.cookies)

        url = f"/api/panier/ajouter/{self.product.id}/"
        payload = json.dumps({"qty": 2})

        refused = self.client.post(url, data=payload, content_type="application/json")
        self.assertEqual(refused.status_code, 403)

        response = self.client.post(url, data=payload, content_type="application/json", HTTP_X_CSRFTOKEN=token)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["cart"]["count"], 2)

    def test_token_issued_by_home(self):
        response = self.client.get("/api/accueil/")
        token = response.json()["csrfToken"]
        self.assertIn("csrftoken", response.cookies)

        response = self.client.post("/api/panier/vider/", HTTP_X_CSRFTOKEN=token)
        self.assertEqual(response.status_code, 200)
