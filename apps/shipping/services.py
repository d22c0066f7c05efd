"""
Calcul des frais de port Chronofresh et utilitaires d'adresse de livraison.

Les fonctions de calcul ne lisent jamais la base elles-mêmes : la vue charge
les zones actives (``active_zones``) et les passe en argument.
"""
import logging
import math
import re
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from .models import PickupLocation, ShippingZone

logger = logging.getLogger(__name__)

POSTAL_CODE_RE = re.compile(r"[0-9]{5}")

ERROR_INVALID_POSTAL_CODE = "Code postal invalide. Format attendu: 5 chiffres."
ERROR_INVALID_WEIGHT = "Le poids doit être supérieur à 0."
ERROR_ZONE_NOT_COVERED = "Zone de livraison non couverte."
ERROR_ZONES_UNAVAILABLE = "Impossible de récupérer les zones de livraison."

CENT = Decimal("0.01")
EARTH_RADIUS_KM = 6371


@dataclass(frozen=True)
class ShippingResult:
    success: bool
    price: Optional[Decimal] = None
    zone: Optional[str] = None
    estimated_days_min: Optional[int] = None
    estimated_days_max: Optional[int] = None
    weight_grams: Optional[float] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "ShippingResult":
        return cls(success=False, error=error)

    def as_dict(self) -> dict:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "price": float(self.price),
            "zone": self.zone,
            "estimatedDaysMin": self.estimated_days_min,
            "estimatedDaysMax": self.estimated_days_max,
            "weightGrams": self.weight_grams,
        }


def is_valid_postal_code(postal_code) -> bool:
    return isinstance(postal_code, str) and bool(POSTAL_CODE_RE.fullmatch(postal_code))


def get_department_from_postal_code(postal_code) -> str:
    """
    Code département (2 caractères). La Corse (20xxx) donne 2A ou 2B
    selon le troisième chiffre. Retourne "" si le code est invalide.
    """
    if not is_valid_postal_code(postal_code):
        return ""
    if postal_code.startswith("20"):
        return "2A" if int(postal_code[2]) <= 1 else "2B"
    return postal_code[:2]


def active_zones():
    return list(ShippingZone.objects.filter(is_active=True).order_by("id"))


def find_shipping_zone(postal_code: str, zones: Iterable[ShippingZone]) -> Optional[ShippingZone]:
    # NOTE: la correspondance se fait sur les 2 premiers caractères bruts,
    # pas sur get_department_from_postal_code : une zone "2A"/"2B" ne matche
    # donc jamais un code postal corse.
    department = postal_code[:2]
    zones = [z for z in zones if z.is_active]

    for zone in zones:
        if zone.is_catch_all:
            continue
        if department in zone.prefixes:
            return zone

    return next((z for z in zones if z.is_catch_all), None)


def _format_kg(grams) -> str:
    return f"{grams / 1000:g}"


def calculate_shipping_rate(postal_code, weight_grams, zones: Iterable[ShippingZone]) -> ShippingResult:
    if not is_valid_postal_code(postal_code):
        return ShippingResult.failure(ERROR_INVALID_POSTAL_CODE)

    if isinstance(weight_grams, bool) or not isinstance(weight_grams, (int, float, Decimal)):
        return ShippingResult.failure(ERROR_INVALID_WEIGHT)
    if isinstance(weight_grams, Decimal) and not weight_grams.is_finite():
        return ShippingResult.failure(ERROR_INVALID_WEIGHT)
    if isinstance(weight_grams, float) and not math.isfinite(weight_grams):
        return ShippingResult.failure(ERROR_INVALID_WEIGHT)
    if not weight_grams or weight_grams <= 0:
        return ShippingResult.failure(ERROR_INVALID_WEIGHT)

    zone = find_shipping_zone(postal_code, zones)
    if zone is None:
        logger.info("Aucune zone pour le code postal %s", postal_code)
        return ShippingResult.failure(ERROR_ZONE_NOT_COVERED)

    if weight_grams < zone.min_weight_grams:
        return ShippingResult.failure(
            f"Poids minimum pour la livraison: {zone.min_weight_grams}g."
        )

    if weight_grams > zone.max_weight_grams:
        return ShippingResult.failure(
            f"Poids maximum pour la livraison: {_format_kg(zone.max_weight_grams)}kg."
        )

    # forfait + prix au kg * poids en kg
    weight_kg = Decimal(str(weight_grams)) / Decimal("1000")
    price = Decimal(str(zone.base_rate)) + Decimal(str(zone.rate_per_kg)) * weight_kg
    price = price.quantize(CENT, rounding=ROUND_HALF_UP)

    return ShippingResult(
        success=True,
        price=price,
        zone=zone.name,
        estimated_days_min=zone.estimated_days_min,
        estimated_days_max=zone.estimated_days_max,
        weight_grams=weight_grams,
    )


# ---------------------------------------------------------------------------
# Adresse de livraison
# ---------------------------------------------------------------------------

def format_french_phone_number(phone: str) -> str:
    cleaned = re.sub(r"[^\d+]", "", re.sub(r"\s", "", phone or ""))

    if cleaned.startswith("+33"):
        return cleaned
    if cleaned.startswith("0"):
        return f"+33{cleaned[1:]}"
    return cleaned


def format_delivery_address(address: dict) -> str:
    lines = [
        address.get("name", ""),
        address.get("street", ""),
        f"{address.get('postal_code', '')} {address.get('city', '')}",
    ]
    if address.get("instructions"):
        lines.append(f"Instructions: {address['instructions']}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Points de retrait
# ---------------------------------------------------------------------------

def haversine_km(lat1, lon1, lat2, lon2) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def sort_locations_by_distance(locations: Iterable[PickupLocation], latitude: float, longitude: float):
    """Les points sans coordonnées sont placés en fin de liste."""
    def distance(loc):
        if loc.latitude is None or loc.longitude is None:
            return math.inf
        return haversine_km(latitude, longitude, loc.latitude, loc.longitude)

    return sorted(locations, key=distance)
