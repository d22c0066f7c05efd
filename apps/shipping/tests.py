"""
Tests du calcul des frais de port, des adresses de livraison et des points de retrait.
"""
import json
from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase

from .forms import DeliveryAddressForm
from .models import PickupLocation, ShippingZone
from .services import (
    ERROR_INVALID_POSTAL_CODE,
    ERROR_INVALID_WEIGHT,
    ERROR_ZONE_NOT_COVERED,
    ERROR_ZONES_UNAVAILABLE,
    calculate_shipping_rate,
    find_shipping_zone,
    format_delivery_address,
    format_french_phone_number,
    get_department_from_postal_code,
    haversine_km,
    is_valid_postal_code,
    sort_locations_by_distance,
)


def make_zone(**kwargs):
    defaults = {
        "name": "Loiret",
        "postal_code_prefix": "45",
        "base_rate": Decimal("3.50"),
        "rate_per_kg": Decimal("0.80"),
        "min_weight_grams": 0,
        "max_weight_grams": 30000,
        "estimated_days_min": 1,
        "estimated_days_max": 2,
        "is_active": True,
    }
    defaults.update(kwargs)
    return ShippingZone(**defaults)


class PostalCodeTests(SimpleTestCase):

    def test_valid_postal_codes(self):
        for code in ("45420", "75001", "20100", "00000"):
            self.assertTrue(is_valid_postal_code(code), code)

    def test_invalid_postal_codes(self):
        for code in ("", "4542", "454200", "45A20", " 45420", "45 420", "75001\n", "\n75001", None, 45420):
            self.assertFalse(is_valid_postal_code(code), code)

    def test_department_is_first_two_digits(self):
        self.assertEqual(get_department_from_postal_code("45420"), "45")
        self.assertEqual(get_department_from_postal_code("75001"), "75")

    def test_department_corsica(self):
        self.assertEqual(get_department_from_postal_code("20000"), "2A")
        self.assertEqual(get_department_from_postal_code("20100"), "2A")
        self.assertEqual(get_department_from_postal_code("20250"), "2B")
        self.assertEqual(get_department_from_postal_code("20600"), "2B")

    def test_department_of_invalid_code_is_empty(self):
        self.assertEqual(get_department_from_postal_code("2010"), "")


class FindShippingZoneTests(SimpleTestCase):

    def test_matches_prefix_in_list(self):
        centre = make_zone(name="Centre", postal_code_prefix="18, 45 ,89")
        self.assertIs(find_shipping_zone("45420", [centre]), centre)
        self.assertIs(find_shipping_zone("89000", [centre]), centre)

    def test_first_matching_zone_in_given_order_wins(self):
        first = make_zone(name="A", postal_code_prefix="45")
        second = make_zone(name="B", postal_code_prefix="45,18")
        self.assertIs(find_shipping_zone("45420", [first, second]), first)
        self.assertIs(find_shipping_zone("45420", [second, first]), second)

    def test_falls_back_to_catch_all(self):
        centre = make_zone(name="Centre", postal_code_prefix="45")
        france = make_zone(name="France", postal_code_prefix="")
        self.assertIs(find_shipping_zone("13001", [france, centre]), france)
        # Le catch-all n'a pas priorité sur une zone spécifique
        self.assertIs(find_shipping_zone("45420", [france, centre]), centre)

    def test_no_zone_found(self):
        self.assertIsNone(find_shipping_zone("13001", [make_zone(postal_code_prefix="45")]))
        self.assertIsNone(find_shipping_zone("13001", []))

    def test_inactive_zones_are_ignored(self):
        inactive = make_zone(name="Centre", postal_code_prefix="45", is_active=False)
        france = make_zone(name="France", postal_code_prefix="")
        self.assertIs(find_shipping_zone("45420", [inactive, france]), france)

    def test_corsican_zone_does_not_match_through_lookup(self):
        # La recherche utilise "20", pas "2A" : on tombe sur la zone par défaut
        corse = make_zone(name="Corse-du-Sud", postal_code_prefix="2A")
        france = make_zone(name="France", postal_code_prefix="")
        self.assertIs(find_shipping_zone("20100", [corse, france]), france)
        self.assertIsNone(find_shipping_zone("20100", [corse]))


class CalculateShippingRateTests(SimpleTestCase):

    def setUp(self):
        self.zones = [
            make_zone(name="Loiret", postal_code_prefix="45", min_weight_grams=500,
                      max_weight_grams=30000, estimated_days_min=1, estimated_days_max=2),
            make_zone(name="France", postal_code_prefix="", base_rate=Decimal("9.90"),
                      rate_per_kg=Decimal("1.20"), estimated_days_min=2, estimated_days_max=4),
        ]

    def test_price_formula(self):
        result = calculate_shipping_rate("45420", 2500, self.zones)
        self.assertTrue(result.success)
        self.assertEqual(result.price, Decimal("5.50"))
        self.assertEqual(result.zone, "Loiret")
        self.assertEqual(result.estimated_days_min, 1)
        self.assertEqual(result.estimated_days_max, 2)
        self.assertEqual(result.weight_grams, 2500)
        self.assertIsNone(result.error)

    def test_price_rounded_half_up_to_the_cent(self):
        zone = make_zone(base_rate=Decimal("1.00"), rate_per_kg=Decimal("0.25"))
        # 1.00 + 0.25 * 1.5 = 1.375
        self.assertEqual(calculate_shipping_rate("45420", 1500, [zone]).price, Decimal("1.38"))

    def test_catch_all_zone_quote(self):
        result = calculate_shipping_rate("13001", 1000, self.zones)
        self.assertTrue(result.success)
        self.assertEqual(result.zone, "France")
        self.assertEqual(result.price, Decimal("11.10"))

    def test_invalid_postal_code(self):
        for code in ("4542", "abcde", "", None):
            result = calculate_shipping_rate(code, 1000, self.zones)
            self.assertFalse(result.success)
            self.assertIsNone(result.price)
            self.assertEqual(result.error, ERROR_INVALID_POSTAL_CODE)

    def test_postal_code_checked_before_weight(self):
        result = calculate_shipping_rate("bad", 0, self.zones)
        self.assertEqual(result.error, ERROR_INVALID_POSTAL_CODE)

    def test_non_positive_weight(self):
        for weight in (0, -1, -2500.5, None, "1000", float("nan")):
            result = calculate_shipping_rate("45420", weight, self.zones)
            self.assertFalse(result.success)
            self.assertIsNone(result.price)
            self.assertEqual(result.error, ERROR_INVALID_WEIGHT)

    def test_non_finite_weight(self):
        for weight in (Decimal("NaN"), Decimal("sNaN"), Decimal("Infinity"), float("inf")):
            result = calculate_shipping_rate("45420", weight, self.zones)
            self.assertFalse(result.success)
            self.assertEqual(result.error, ERROR_INVALID_WEIGHT)

    def test_decimal_weight(self):
        result = calculate_shipping_rate("45420", Decimal("2500"), self.zones)
        self.assertTrue(result.success)

    def test_zone_not_covered(self):
        result = calculate_shipping_rate("13001", 1000, self.zones[:1])
        self.assertFalse(result.success)
        self.assertEqual(result.error, ERROR_ZONE_NOT_COVERED)

    def test_below_minimum_weight(self):
        result = calculate_shipping_rate("45420", 499, self.zones)
        self.assertFalse(result.success)
        self.assertIsNone(result.price)
        self.assertEqual(result.error, "Poids minimum pour la livraison: 500g.")

    def test_above_maximum_weight(self):
        result = calculate_shipping_rate("45420", 30001, self.zones)
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Poids maximum pour la livraison: 30kg.")

        zone = make_zone(max_weight_grams=2500)
        result = calculate_shipping_rate("45420", 3000, [zone])
        self.assertEqual(result.error, "Poids maximum pour la livraison: 2.5kg.")

    def test_weight_bounds_are_inclusive(self):
        self.assertTrue(calculate_shipping_rate("45420", 500, self.zones).success)
        self.assertTrue(calculate_shipping_rate("45420", 30000, self.zones).success)

    def test_same_inputs_same_result(self):
        first = calculate_shipping_rate("45420", 2500, self.zones)
        second = calculate_shipping_rate("45420", 2500, self.zones)
        self.assertEqual(first, second)

    def test_as_dict(self):
        self.assertEqual(
            calculate_shipping_rate("45420", 2500, self.zones).as_dict(),
            {
                "success": True,
                "price": 5.5,
                "zone": "Loiret",
                "estimatedDaysMin": 1,
                "estimatedDaysMax": 2,
                "weightGrams": 2500,
            },
        )
        self.assertEqual(
            calculate_shipping_rate("45420", 0, self.zones).as_dict(),
            {"success": False, "error": ERROR_INVALID_WEIGHT},
        )


class DeliveryAddressTests(SimpleTestCase):

    def valid_data(self, **kwargs):
        data = {
            "name": "Marie Dupont",
            "street": "12 rue des Lilas",
            "postal_code": "45420",
            "city": "Batilly-en-Puisaye",
            "phone": "06 12 34 56 78",
        }
        data.update(kwargs)
        return data

    def test_valid_address(self):
        form = DeliveryAddressForm(self.valid_data())
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data["phone"], "0612345678")

    def test_international_phone(self):
        form = DeliveryAddressForm(self.valid_data(phone="+33 6 12 34 56 78"))
        self.assertTrue(form.is_valid(), form.errors)

    def test_invalid_fields(self):
        form = DeliveryAddressForm(self.valid_data(
            name="M", street="rue", postal_code="4542", city="X", phone="0012345678",
        ))
        self.assertFalse(form.is_valid())
        self.assertEqual(set(form.errors), {"name", "street", "postal_code", "city", "phone"})
        self.assertIn("Le code postal doit contenir 5 chiffres.", form.errors["postal_code"])

    def test_format_french_phone_number(self):
        self.assertEqual(format_french_phone_number("06 12 34 56 78"), "+33612345678")
        self.assertEqual(format_french_phone_number("+33 6 12 34 56 78"), "+33612345678")
        self.assertEqual(format_french_phone_number("6.12.34"), "61234")

    def test_format_delivery_address(self):
        text = format_delivery_address({
            "name": "Marie Dupont",
            "street": "12 rue des Lilas",
            "postal_code": "45420",
            "city": "Batilly",
            "instructions": "Sonner deux fois",
        })
        self.assertEqual(text, "Marie Dupont\n12 rue des Lilas\n45420 Batilly\nInstructions: Sonner deux fois")


class PickupLocationTests(SimpleTestCase):

    def test_days_and_hours(self):
        farm = PickupLocation(
            name="La Ferme", kind=PickupLocation.KIND_FARM, address="Lieu-dit Le Potager",
            city="Batilly-en-Puisaye", postal_code="45420",
            available_days="Vendredi, Samedi",
            opening_hours="Vendredi: 16h00 - 19h00\nSamedi: 09h00 - 12h00",
        )
        self.assertTrue(farm.is_available_on("samedi"))
        self.assertFalse(farm.is_available_on("Lundi"))
        self.assertEqual(farm.hours_for("Vendredi"), "16h00 - 19h00")
        self.assertIsNone(farm.hours_for("Lundi"))
        self.assertEqual(farm.full_address, "Lieu-dit Le Potager, 45420 Batilly-en-Puisaye")

    def test_sort_by_distance(self):
        near = PickupLocation(name="Près", latitude=47.67, longitude=3.165)
        far = PickupLocation(name="Loin", latitude=48.85, longitude=2.35)
        unknown = PickupLocation(name="Sans coordonnées")
        ordered = sort_locations_by_distance([unknown, far, near], 47.6667, 3.1667)
        self.assertEqual([loc.name for loc in ordered], ["Près", "Loin", "Sans coordonnées"])

    def test_haversine(self):
        self.assertAlmostEqual(haversine_km(47.0, 3.0, 47.0, 3.0), 0.0)
        # Paris - Orléans, environ 111 km
        self.assertAlmostEqual(haversine_km(48.8566, 2.3522, 47.9030, 1.9093), 111, delta=3)


class ShippingRateApiTests(TestCase):
    url = "/api/livraison/tarif/"

    def setUp(self):
        make_zone(name="Loiret", postal_code_prefix="45").save()
        make_zone(name="Inactive", postal_code_prefix="13", is_active=False).save()

    def post(self, payload):
        return self.client.post(self.url, data=json.dumps(payload), content_type="application/json")

    def test_quote(self):
        response = self.post({"postalCode": "45420", "weightGrams": 2500})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["price"], 5.5)
        self.assertEqual(response.json()["zone"], "Loiret")

    def test_form_encoded_quote(self):
        response = self.client.post(self.url, {"postalCode": "45420", "weightGrams": "2500"})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])

    def test_validation_errors(self):
        response = self.post({"postalCode": "4542", "weightGrams": 2500})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"success": False, "error": ERROR_INVALID_POSTAL_CODE})

        response = self.post({"postalCode": "45420"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], ERROR_INVALID_WEIGHT)

    def test_inactive_zone_not_covered(self):
        response = self.post({"postalCode": "13001", "weightGrams": 1000})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], ERROR_ZONE_NOT_COVERED)

    def test_postal_code_is_not_trimmed(self):
        for code in (" 45420 ", "45420\n"):
            response = self.post({"postalCode": code, "weightGrams": 2500})
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.json()["error"], ERROR_INVALID_POSTAL_CODE)

    def test_zones_unreadable(self):
        with mock.patch("apps.shipping.views.active_zones", side_effect=DatabaseError("verrou")):
            with self.assertLogs("apps.shipping.views", level="ERROR"):
                response = self.post({"postalCode": "45420", "weightGrams": 2500})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"success": False, "error": ERROR_ZONES_UNAVAILABLE})

    def test_get_not_allowed(self):
        self.assertEqual(self.client.get(self.url).status_code, 405)


class PickupLocationsApiTests(TestCase):

    def setUp(self):
        PickupLocation.objects.create(
            name="Dépôt Gare", kind=PickupLocation.KIND_DEPOT, address="Parvis de la Gare",
            city="Batilly", postal_code="45420", latitude=47.6650, longitude=3.1680,
        )
        PickupLocation.objects.create(
            name="La Ferme", kind=PickupLocation.KIND_FARM, address="Le Potager",
            city="Batilly", postal_code="45420", latitude=47.6667, longitude=3.1667,
        )
        PickupLocation.objects.create(
            name="Fermé", address="Ailleurs", city="Batilly", postal_code="45420", is_active=False,
        )

    def test_lists_active_locations(self):
        data = self.client.get("/api/livraison/points-retrait/").json()
        self.assertEqual({loc["name"] for loc in data["locations"]}, {"Dépôt Gare", "La Ferme"})

    def test_sorted_by_distance(self):
        data = self.client.get("/api/livraison/points-retrait/", {"lat": "47.6667", "lng": "3.1667"}).json()
        self.assertEqual(data["locations"][0]["name"], "La Ferme")

    def test_filter_by_type(self):
        data = self.client.get("/api/livraison/points-retrait/", {"type": "farm"}).json()
        self.assertEqual([loc["name"] for loc in data["locations"]], ["La Ferme"])

    def test_filter_by_day_with_schedule(self):
        PickupLocation.objects.filter(name="La Ferme").update(
            available_days="Vendredi,Samedi",
            opening_hours="Vendredi: 16h00 - 19h00\nSamedi: 09h00 - 12h00",
        )
        data = self.client.get("/api/livraison/points-retrait/", {"jour": "samedi"}).json()
        self.assertEqual([loc["name"] for loc in data["locations"]], ["La Ferme"])
        self.assertEqual(data["locations"][0]["schedule"], [
            {"day": "Vendredi", "hours": "16h00 - 19h00"},
            {"day": "Samedi", "hours": "09h00 - 12h00"},
        ])

        data = self.client.get("/api/livraison/points-retrait/", {"jour": "Lundi"}).json()
        self.assertEqual(data["locations"], [])
