from django.test import RequestFactory, TestCase

from .context_processors import site_context
from .test_utils import TestDataFactory
from .utils import parse_number, read_payload


class HomeApiTests(TestCase):

    def test_home_closed_shop(self):
        TestDataFactory.create_product(stock=3)
        TestDataFactory.create_product(stock=0)
        data = self.client.get("/api/accueil/").json()
        self.assertFalse(data["salesStatus"]["isOpen"])
        self.assertEqual(len(data["featuredProducts"]), 1)

    def test_home_open_shop(self):
        TestDataFactory.create_open_cycle()
        data = self.client.get("/api/accueil/").json()
        self.assertTrue(data["salesStatus"]["isOpen"])

    def test_site_context(self):
        request = RequestFactory().get("/")
        context = site_context(request)
        self.assertIn("SITE_NAME", context)
        self.assertFalse(context["SALES_STATUS"].is_open)


class UtilsTests(TestCase):

    def test_read_payload(self):
        factory = RequestFactory()
        request = factory.post("/", data='{"a": 1}', content_type="application/json")
        self.assertEqual(read_payload(request), {"a": 1})

        request = factory.post("/", data="pas du json", content_type="application/json")
        self.assertEqual(read_payload(request), {})

        request = factory.post("/", data="[1, 2]", content_type="application/json")
        self.assertEqual(read_payload(request), {})

        request = factory.post("/", data={"postalCode": "45420"})
        self.assertEqual(read_payload(request), {"postalCode": "45420"})

    def test_parse_number(self):
        self.assertEqual(parse_number("1500"), 1500.0)
        self.assertEqual(parse_number(" 2,5 "), 2.5)
        self.assertEqual(parse_number("abc"), "abc")
        self.assertIsNone(parse_number(None))
        self.assertEqual(parse_number(12), 12)
