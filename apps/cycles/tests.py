"""
Tests du statut de la boutique selon les cycles de vente
"""
from datetime import datetime, timedelta, timezone as dt_timezone
from unittest import mock

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from .models import SalesCycle
from .services import (
    MESSAGE_NO_CYCLE,
    MESSAGE_NOTHING_SCHEDULED,
    MESSAGE_UNAVAILABLE,
    STATE_CLOSED,
    STATE_CLOSED_WITH_NEXT,
    STATE_OPEN,
    format_date_long,
    format_date_short,
    get_current_status,
    is_cycle_open,
    overlapping_cycles,
    past_cycles,
    upcoming_cycles,
)

# Midi à Paris (UTC+1 en hiver)
NOW = datetime(2026, 1, 22, 11, 0, tzinfo=dt_timezone.utc)


def make_cycle(pk, name, opening, closing, is_active=True):
    return SalesCycle(id=pk, name=name, opening_date=opening, closing_date=closing, is_active=is_active)


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


class GetCurrentStatusTests(SimpleTestCase):

    def setUp(self):
        self.january = make_cycle(1, "Cycle Janvier #1", utc(2026, 1, 20, 9), utc(2026, 1, 26, 9))
        self.february = make_cycle(2, "Cycle Février #1", utc(2026, 2, 3, 9), utc(2026, 2, 9, 9))
        self.march = make_cycle(3, "Cycle Mars #1", utc(2026, 3, 2, 9), utc(2026, 3, 8, 9))

    def test_open_inside_cycle(self):
        status = get_current_status(NOW, [self.january, self.february])
        self.assertTrue(status.is_open)
        self.assertEqual(status.state, STATE_OPEN)
        self.assertIs(status.current_cycle, self.january)
        self.assertIsNone(status.next_cycle)
        self.assertIsNone(status.days_until_next_opening)
        self.assertEqual(status.message, "Vente ouverte jusqu'au 26 janvier")

    def test_bounds_are_inclusive(self):
        cycles = [self.january]
        self.assertTrue(get_current_status(self.january.opening_date, cycles).is_open)
        self.assertTrue(get_current_status(self.january.closing_date, cycles).is_open)
        after = self.january.closing_date + timedelta(seconds=1)
        self.assertFalse(get_current_status(after, cycles).is_open)

    def test_closed_with_next_cycle(self):
        now = utc(2026, 1, 30, 9)
        status = get_current_status(now, [self.march, self.january, self.february])
        self.assertFalse(status.is_open)
        self.assertEqual(status.state, STATE_CLOSED_WITH_NEXT)
        self.assertIs(status.next_cycle, self.february)
        self.assertIsNone(status.current_cycle)
        self.assertEqual(status.days_until_next_opening, 4)
        self.assertEqual(status.message, "Prochaine vente : 3 février")

    def test_days_until_is_rounded_up(self):
        # 3,2 jours avant l'ouverture
        now = self.february.opening_date - timedelta(days=3, hours=4, minutes=48)
        status = get_current_status(now, [self.february])
        self.assertEqual(status.days_until_next_opening, 4)

        now = self.february.opening_date - timedelta(days=3)
        self.assertEqual(get_current_status(now, [self.february]).days_until_next_opening, 3)

    def test_no_cycle_at_all(self):
        status = get_current_status(NOW, [])
        self.assertFalse(status.is_open)
        self.assertEqual(status.state, STATE_CLOSED)
        self.assertIsNone(status.next_cycle)
        self.assertEqual(status.message, MESSAGE_NO_CYCLE)

    def test_only_inactive_cycles(self):
        self.january.is_active = False
        status = get_current_status(NOW, [self.january])
        self.assertFalse(status.is_open)
        self.assertEqual(status.message, MESSAGE_NO_CYCLE)

    def test_inactive_cycle_is_not_open(self):
        self.january.is_active = False
        status = get_current_status(NOW, [self.january, self.february])
        self.assertEqual(status.state, STATE_CLOSED_WITH_NEXT)
        self.assertIs(status.next_cycle, self.february)

    def test_nothing_scheduled(self):
        now = utc(2026, 4, 1)
        status = get_current_status(now, [self.january, self.february, self.march])
        self.assertEqual(status.state, STATE_CLOSED)
        self.assertIsNone(status.next_cycle)
        self.assertEqual(status.message, MESSAGE_NOTHING_SCHEDULED)

    def test_overlapping_cycles_first_in_list_wins(self):
        other = make_cycle(9, "Cycle spécial", utc(2026, 1, 21), utc(2026, 1, 23))
        self.assertIs(get_current_status(NOW, [self.january, other]).current_cycle, self.january)
        self.assertIs(get_current_status(NOW, [other, self.january]).current_cycle, other)

    def test_same_inputs_same_result(self):
        cycles = [self.january, self.february]
        self.assertEqual(get_current_status(NOW, cycles), get_current_status(NOW, cycles))

    def test_as_dict(self):
        data = get_current_status(utc(2026, 1, 30, 9), [self.february]).as_dict()
        self.assertEqual(data["isOpen"], False)
        self.assertEqual(data["nextCycle"]["name"], "Cycle Février #1")
        self.assertEqual(data["daysUntilNextOpening"], 4)
        self.assertNotIn("currentCycle", data)

        data = get_current_status(NOW, [self.january]).as_dict()
        self.assertEqual(data["isOpen"], True)
        self.assertEqual(data["currentCycle"]["id"], 1)
        self.assertNotIn("daysUntilNextOpening", data)


class CycleHelpersTests(SimpleTestCase):

    def setUp(self):
        self.past = make_cycle(1, "Passé", utc(2026, 1, 1), utc(2026, 1, 7))
        self.current = make_cycle(2, "En cours", utc(2026, 1, 20), utc(2026, 1, 26))
        self.future = make_cycle(3, "À venir", utc(2026, 2, 3), utc(2026, 2, 9))
        self.cycles = [self.past, self.current, self.future]

    def test_upcoming_and_past(self):
        self.assertEqual(upcoming_cycles(NOW, self.cycles), [self.future])
        self.assertEqual(past_cycles(NOW, self.cycles), [self.past])

    def test_is_cycle_open(self):
        self.assertTrue(is_cycle_open(2, NOW, self.cycles))
        self.assertFalse(is_cycle_open(3, NOW, self.cycles))
        self.assertFalse(is_cycle_open(42, NOW, self.cycles))

    def test_overlapping_cycles(self):
        overlap = make_cycle(4, "Chevauche", utc(2026, 1, 26), utc(2026, 2, 1))
        disabled = make_cycle(5, "Désactivé", utc(2026, 1, 21), utc(2026, 1, 22), is_active=False)
        cycles = self.cycles + [overlap, disabled]
        self.assertEqual(overlapping_cycles(self.current, cycles), [overlap])
        self.assertEqual(overlapping_cycles(self.future, cycles), [])

    def test_phase(self):
        self.assertEqual(self.past.phase(NOW), SalesCycle.PHASE_FINISHED)
        self.assertEqual(self.current.phase(NOW), SalesCycle.PHASE_OPEN)
        self.assertEqual(self.future.phase(NOW), SalesCycle.PHASE_PLANNED)
        self.future.is_active = False
        self.assertEqual(self.future.phase(NOW), SalesCycle.PHASE_DISABLED)

    def test_closing_before_opening_is_rejected(self):
        cycle = make_cycle(None, "Inversé", utc(2026, 2, 9), utc(2026, 2, 3))
        with self.assertRaises(ValidationError):
            cycle.clean()

    def test_format_dates_in_local_time(self):
        # 23h30 UTC le 31 décembre = 1er janvier à Paris
        self.assertEqual(format_date_short(utc(2025, 12, 31, 23, 30)), "1 janvier")
        self.assertEqual(format_date_long(utc(2026, 8, 14, 10)), "14 août 2026")
        self.assertEqual(format_date_short(datetime(2026, 2, 3)), "3 février")


class SalesStatusApiTests(TestCase):
    url = "/api/vente/statut/"

    def test_closed_without_cycles(self):
        data = self.client.get(self.url).json()
        self.assertFalse(data["isOpen"])
        self.assertEqual(data["message"], MESSAGE_NO_CYCLE)

    def test_open_cycle(self):
        now = timezone.now()
        cycle = SalesCycle.objects.create(
            name="Cycle courant",
            opening_date=now - timedelta(days=2),
            closing_date=now + timedelta(days=5),
        )
        data = self.client.get(self.url).json()
        self.assertTrue(data["isOpen"])
        self.assertEqual(data["currentCycle"]["id"], cycle.id)

    def test_next_cycle(self):
        now = timezone.now()
        SalesCycle.objects.create(
            name="Inactif",
            opening_date=now + timedelta(days=1),
            closing_date=now + timedelta(days=3),
            is_active=False,
        )
        SalesCycle.objects.create(
            name="Prochain cycle",
            opening_date=now + timedelta(days=3, hours=1),
            closing_date=now + timedelta(days=10),
        )
        data = self.client.get(self.url).json()
        self.assertFalse(data["isOpen"])
        self.assertEqual(data["nextCycle"]["name"], "Prochain cycle")
        self.assertEqual(data["daysUntilNextOpening"], 4)

    def test_upcoming_cycles(self):
        now = timezone.now()
        SalesCycle.objects.create(name="Passé", opening_date=now - timedelta(days=10), closing_date=now - timedelta(days=5))
        SalesCycle.objects.create(name="Futur", opening_date=now + timedelta(days=5), closing_date=now + timedelta(days=10))
        data = self.client.get("/api/vente/cycles/").json()
        self.assertEqual([c["name"] for c in data["cycles"]], ["Futur"])

    def test_past_and_all_cycles(self):
        now = timezone.now()
        SalesCycle.objects.create(name="Ancien", opening_date=now - timedelta(days=30), closing_date=now - timedelta(days=25))
        SalesCycle.objects.create(name="Récent", opening_date=now - timedelta(days=10), closing_date=now - timedelta(days=5))
        SalesCycle.objects.create(name="En cours", opening_date=now - timedelta(days=1), closing_date=now + timedelta(days=5))

        data = self.client.get("/api/vente/cycles/", {"periode": "passes"}).json()
        self.assertEqual([c["name"] for c in data["cycles"]], ["Récent", "Ancien"])

        data = self.client.get("/api/vente/cycles/", {"periode": "tous"}).json()
        opened = {c["name"]: c["isOpen"] for c in data["cycles"]}
        self.assertEqual(opened, {"Ancien": False, "Récent": False, "En cours": True})

    def test_status_when_cycles_unreadable(self):
        with mock.patch("apps.cycles.views.active_cycles", side_effect=DatabaseError("verrou")):
            with self.assertLogs("apps.cycles.views", level="ERROR"):
                response = self.client.get(self.url)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"isOpen": False, "state": STATE_CLOSED, "message": MESSAGE_UNAVAILABLE})

    def test_cycle_list_when_cycles_unreadable(self):
        with mock.patch("apps.cycles.views.active_cycles", side_effect=DatabaseError("verrou")):
            with self.assertLogs("apps.cycles.views", level="ERROR"):
                response = self.client.get("/api/vente/cycles/")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"ok": False, "error": MESSAGE_UNAVAILABLE})
