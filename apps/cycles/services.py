"""
Statut de la boutique (ouverte / fermée) selon les cycles de vente.

``get_current_status`` est une fonction pure : l'heure courante et les cycles
sont fournis par l'appelant (voir ``apps.cycles.views``).
"""
import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, Optional

from django.utils import timezone

from .models import SalesCycle

STATE_OPEN = "open"
STATE_CLOSED_WITH_NEXT = "closed_with_next"
STATE_CLOSED = "closed"

MESSAGE_NO_CYCLE = "Aucun cycle de vente disponible pour le moment."
MESSAGE_NOTHING_SCHEDULED = "Aucune vente prévue pour le moment. Revenez bientôt !"
MESSAGE_UNAVAILABLE = "Erreur lors de la récupération du statut de la vente."

MONTHS = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class SalesCycleStatus:
    state: str
    message: str
    current_cycle: Optional[SalesCycle] = None
    next_cycle: Optional[SalesCycle] = None
    days_until_next_opening: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.state == STATE_OPEN

    def as_dict(self) -> dict:
        data = {"isOpen": self.is_open, "state": self.state, "message": self.message}
        if self.current_cycle is not None:
            data["currentCycle"] = cycle_payload(self.current_cycle)
        if self.next_cycle is not None:
            data["nextCycle"] = cycle_payload(self.next_cycle)
            data["daysUntilNextOpening"] = self.days_until_next_opening
        return data


def cycle_payload(cycle) -> dict:
    return {
        "id": cycle.id,
        "name": cycle.name,
        "openingDate": cycle.opening_date.isoformat(),
        "closingDate": cycle.closing_date.isoformat(),
        "description": getattr(cycle, "description", "") or None,
    }


def _local(date):
    return timezone.localtime(date) if timezone.is_aware(date) else date


def format_date_short(date) -> str:
    """Ex: « 20 janvier »."""
    date = _local(date)
    return f"{date.day} {MONTHS[date.month - 1]}"


def format_date_long(date) -> str:
    """Ex: « 20 janvier 2026 »."""
    return f"{format_date_short(date)} {_local(date).year}"


def days_until(moment, now) -> int:
    return math.ceil((moment - now) / ONE_DAY)


def get_current_status(now, cycles: Iterable[SalesCycle]) -> SalesCycleStatus:
    active = [c for c in cycles if c.is_active]
    if not active:
        return SalesCycleStatus(state=STATE_CLOSED, message=MESSAGE_NO_CYCLE)

    # Premier cycle qui contient "now", dans l'ordre fourni
    current = next(
        (c for c in active if c.opening_date <= now <= c.closing_date),
        None,
    )
    if current is not None:
        return SalesCycleStatus(
            state=STATE_OPEN,
            current_cycle=current,
            message=f"Vente ouverte jusqu'au {format_date_short(current.closing_date)}",
        )

    future = [c for c in active if c.opening_date > now]
    if future:
        upcoming = min(future, key=lambda c: c.opening_date)
        return SalesCycleStatus(
            state=STATE_CLOSED_WITH_NEXT,
            next_cycle=upcoming,
            days_until_next_opening=days_until(upcoming.opening_date, now),
            message=f"Prochaine vente : {format_date_short(upcoming.opening_date)}",
        )

    return SalesCycleStatus(state=STATE_CLOSED, message=MESSAGE_NOTHING_SCHEDULED)


# ---------------------------------------------------------------------------
# Lecture et helpers pour l'admin
# ---------------------------------------------------------------------------

def active_cycles():
    return list(SalesCycle.objects.filter(is_active=True).order_by("opening_date", "id"))


def upcoming_cycles(now, cycles):
    return [c for c in cycles if c.opening_date > now]


def past_cycles(now, cycles):
    return [c for c in cycles if c.closing_date < now]


def is_cycle_open(cycle_id, now, cycles) -> bool:
    cycle = next((c for c in cycles if c.id == cycle_id), None)
    if cycle is None:
        return False
    return cycle.opening_date <= now <= cycle.closing_date


def overlapping_cycles(cycle, cycles):
    """Cycles actifs dont l'intervalle chevauche celui de ``cycle`` (bornes incluses)."""
    return [
        other for other in cycles
        if other.is_active
        and other.pk != cycle.pk
        and other.opening_date <= cycle.closing_date
        and cycle.opening_date <= other.closing_date
    ]
