import random

from django.conf import settings
from django.http import JsonResponse
from django.middleware.csrf import get_token
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_http_methods

from apps.catalog.models import Product
from apps.catalog.views import product_payload
from apps.cycles.services import MESSAGE_UNAVAILABLE, STATE_CLOSED
from apps.cycles.views import current_status


@ensure_csrf_cookie
@require_http_methods(["GET"])
def home(request):
    """Écran d'accueil de l'app : statut de la vente et quelques produits."""
    status = current_status()
    products = list(
        Product.objects.filter(is_available=True, stock__gt=0).select_related("category")
    )
    featured = random.sample(products, min(len(products), 4))

    return JsonResponse({
        "ok": True,
        "siteName": getattr(settings, "SITE_NAME", "AMAP"),
        "salesStatus": status.as_dict() if status else {
            "isOpen": False, "state": STATE_CLOSED, "message": MESSAGE_UNAVAILABLE,
        },
        "featuredProducts": [product_payload(p) for p in featured],
        "csrfToken": get_token(request),
    })
