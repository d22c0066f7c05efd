import logging

from django.db import DatabaseError
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from .services import (
    MESSAGE_UNAVAILABLE,
    STATE_CLOSED,
    active_cycles,
    cycle_payload,
    get_current_status,
    is_cycle_open,
    past_cycles,
    upcoming_cycles,
)

logger = logging.getLogger(__name__)


def current_status(now=None):
    """
    Statut courant lu depuis la base. Retourne None si la lecture échoue,
    l'appelant décide alors de la réponse.
    """
    try:
        cycles = active_cycles()
    except DatabaseError:
        logger.exception("Lecture des cycles de vente impossible")
        return None
    return get_current_status(now or timezone.now(), cycles)


@require_http_methods(["GET"])
def sales_status_api(request):
    status = current_status()
    if status is None:
        return JsonResponse(
            {"isOpen": False, "state": STATE_CLOSED, "message": MESSAGE_UNAVAILABLE},
            status=500,
        )
    return JsonResponse(status.as_dict())


@require_http_methods(["GET"])
def upcoming_cycles_api(request):
    """
    Cycles à venir par défaut. ?periode=passes : cycles terminés, du plus
    récent au plus ancien. ?periode=tous : tous les cycles actifs.
    """
    try:
        cycles = active_cycles()
    except DatabaseError:
        logger.exception("Lecture des cycles de vente impossible")
        return JsonResponse({"ok": False, "error": MESSAGE_UNAVAILABLE}, status=500)

    now = timezone.now()
    period = request.GET.get("periode")
    if period == "passes":
        selected = list(reversed(past_cycles(now, cycles)))
    elif period == "tous":
        selected = cycles
    else:
        selected = upcoming_cycles(now, cycles)

    return JsonResponse({
        "ok": True,
        "cycles": [
            {**cycle_payload(c), "isOpen": is_cycle_open(c.id, now, cycles)}
            for c in selected
        ],
    })
