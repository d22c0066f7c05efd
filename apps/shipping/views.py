import logging

from django.db import DatabaseError
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.core.utils import parse_number, read_payload
from .models import PickupLocation
from .services import (
    ERROR_ZONES_UNAVAILABLE,
    active_zones,
    calculate_shipping_rate,
    sort_locations_by_distance,
)

logger = logging.getLogger(__name__)


@csrf_exempt
@require_http_methods(["POST"])
def shipping_rate_api(request):
    """
    Reçoit postalCode + weightGrams, retourne le tarif Chronofresh.
    200 si le tarif est calculé, 400 sinon, 500 si les zones sont illisibles.
    """
    data = read_payload(request)
    # Pas de nettoyage : " 75001 " est un code invalide
    postal_code = data.get("postalCode")
    weight = parse_number(data.get("weightGrams"))

    try:
        zones = active_zones()
    except DatabaseError:
        logger.exception("Lecture des zones de livraison impossible")
        return JsonResponse({"success": False, "error": ERROR_ZONES_UNAVAILABLE}, status=500)

    result = calculate_shipping_rate(postal_code, weight, zones)
    return JsonResponse(result.as_dict(), status=200 if result.success else 400)


def _location_payload(loc):
    return {
        "id": loc.id,
        "name": loc.name,
        "type": loc.kind,
        "address": loc.address,
        "city": loc.city,
        "postalCode": loc.postal_code,
        "fullAddress": loc.full_address,
        "coordinates": {
            "latitude": loc.latitude,
            "longitude": loc.longitude,
        } if loc.latitude is not None and loc.longitude is not None else None,
        "openingHours": [line.strip() for line in loc.opening_hours.splitlines() if line.strip()],
        "availableDays": loc.days,
        "schedule": [{"day": day, "hours": loc.hours_for(day)} for day in loc.days],
        "description": loc.description,
    }


@require_http_methods(["GET"])
def pickup_locations_api(request):
    locations = list(PickupLocation.objects.filter(is_active=True))

    lat = parse_number(request.GET.get("lat"))
    lng = parse_number(request.GET.get("lng"))
    if isinstance(lat, float) and isinstance(lng, float):
        locations = sort_locations_by_distance(locations, lat, lng)

    kind = request.GET.get("type")
    if kind:
        locations = [loc for loc in locations if loc.kind == kind]

    day = request.GET.get("jour")
    if day:
        locations = [loc for loc in locations if loc.is_available_on(day)]

    return JsonResponse({
        "ok": True,
        "locations": [_location_payload(loc) for loc in locations],
    })
