from django.test import TestCase

from apps.core.test_utils import TestDataFactory


class ProductSlugTests(TestCase):

    def test_slug_is_unique(self):
        first = TestDataFactory.create_product(name="Tomates cerises")
        second = TestDataFactory.create_product(name="Tomates cerises")
        self.assertEqual(first.slug, "tomates-cerises")
        self.assertEqual(second.slug, "tomates-cerises-2")

    def test_in_stock(self):
        product = TestDataFactory.create_product(stock=0)
        self.assertFalse(product.in_stock)
        product.stock = 3
        self.assertTrue(product.in_stock)
        product.is_available = False
        self.assertFalse(product.in_stock)


class ProductApiTests(TestCase):
    url = "/api/produits/"

    def setUp(self):
        self.vegetables = TestDataFactory.create_category("Légumes")
        self.fruits = TestDataFactory.create_category("Fruits")
        self.carrots = TestDataFactory.create_product(
            name="Carottes", price="2.50", category=self.vegetables, description="Carottes nouvelles"
        )
        self.apples = TestDataFactory.create_product(name="Pommes", price="3.80", category=self.fruits, stock=0)
        self.squash = TestDataFactory.create_product(name="Butternut", price="4.00", category=self.vegetables)
        TestDataFactory.create_product(name="Hors saison", is_available=False)

    def names(self, **params):
        data = self.client.get(self.url, params).json()
        return [p["name"] for p in data["products"]]

    def test_list_grouped_by_category(self):
        self.assertEqual(self.names(), ["Pommes", "Butternut", "Carottes"])

    def test_filters(self):
        self.assertEqual(self.names(q="nouvelles"), ["Carottes"])
        self.assertEqual(self.names(category=self.vegetables.slug), ["Butternut", "Carottes"])
        self.assertEqual(self.names(min="3", max="4"), ["Pommes", "Butternut"])
        self.assertEqual(self.names(in_stock="1"), ["Butternut", "Carottes"])
        self.assertEqual(self.names(category=self.vegetables.slug, sort="price_desc"), ["Butternut", "Carottes"])

    def test_invalid_price_filter_is_ignored(self):
        self.assertEqual(len(self.names(min="abc")), 3)

    def test_detail(self):
        response = self.client.get(f"{self.url}{self.carrots.slug}/")
        self.assertEqual(response.status_code, 200)
        product = response.json()["product"]
        self.assertEqual(product["price"], "2.50")
        self.assertEqual(product["category"], "Légumes")
        self.assertTrue(product["inStock"])

    def test_detail_unavailable(self):
        response = self.client.get(f"{self.url}hors-saison/")
        self.assertEqual(response.status_code, 404)
