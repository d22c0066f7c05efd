from django.db.models import F, Sum
from django.http import JsonResponse
from django.middleware.csrf import get_token
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_http_methods, require_POST

from apps.catalog.models import Product
from apps.core.utils import read_payload
from .models import CartItem
from .services import (
    get_or_create_cart,
    add_to_cart,
    set_qty,
    remove_item,
    clear_cart,
)


def _cart_count(cart) -> int:
    agg = cart.items.aggregate(c=Sum("quantity"))
    return int(agg["c"] or 0)


def _can_checkout(cart) -> bool:
    # True si aucune ligne ne dépasse le stock
    return not cart.items.filter(quantity__gt=F("product__stock")).exists()


def _cart_payload(cart):
    items = cart.items.select_related("product").order_by("id")
    return {
        "items": [
            {
                "id": it.id,
                "productId": it.product_id,
                "name": it.product.name,
                "unit": it.product.unit,
                "unitPrice": str(it.unit_price),
                "quantity": it.quantity,
                "total": str(it.total),
                "stock": it.product.stock,
            }
            for it in items
        ],
        "subtotal": str(cart.subtotal),
        "weightGrams": cart.total_weight_grams,
        "count": _cart_count(cart),
        "canCheckout": _can_checkout(cart),
    }


@ensure_csrf_cookie
@require_http_methods(["GET"])
def cart_detail(request):
    """
    Panier courant. Fournit aussi le jeton CSRF (cookie + champ csrfToken)
    que l'app renvoie dans l'en-tête X-CSRFToken de ses POST.
    """
    cart = get_or_create_cart(request)
    return JsonResponse({"ok": True, "cart": _cart_payload(cart), "csrfToken": get_token(request)})


@require_POST
def cart_add(request, product_id):
    cart = get_or_create_cart(request)
    product = get_object_or_404(Product, pk=product_id, is_available=True)

    data = read_payload(request)
    try:
        qty = int(data.get("qty", 1))
    except (TypeError, ValueError):
        qty = 1

    try:
        add_to_cart(cart, product, qty)
    except ValueError as e:
        return JsonResponse({"ok": False, "error": str(e), "stock": product.stock}, status=400)

    return JsonResponse({"ok": True, "cart": _cart_payload(cart)})


@require_POST
def cart_item_api(request, item_id):
    """
    Reçoit qty (quantité finale) OU delta (+1 / -1).
    """
    cart = get_or_create_cart(request)

    try:
        item = CartItem.objects.select_related("product").get(pk=item_id, cart=cart)
    except CartItem.DoesNotExist:
        return JsonResponse({"ok": False, "error": "Article introuvable."}, status=404)

    data = read_payload(request)
    qty = data.get("qty")
    delta = data.get("delta")

    try:
        if delta is not None and delta != "":
            qty_final = item.quantity + int(delta)
        else:
            qty_final = int(qty)
    except (TypeError, ValueError):
        return JsonResponse({"ok": False, "error": "Quantité invalide."}, status=400)

    try:
        updated_item = set_qty(cart, item_id, qty_final)
    except ValueError as e:
        item.product.refresh_from_db()
        return JsonResponse({"ok": False, "error": str(e), "stock": item.product.stock}, status=400)

    return JsonResponse({
        "ok": True,
        "deleted": updated_item is None,
        "cart": _cart_payload(cart),
    })


@require_POST
def cart_remove(request, item_id):
    cart = get_or_create_cart(request)
    remove_item(cart, item_id)
    return JsonResponse({"ok": True, "cart": _cart_payload(cart)})


@require_POST
def cart_clear(request):
    cart = get_or_create_cart(request)
    clear_cart(cart)
    return JsonResponse({"ok": True, "cart": _cart_payload(cart)})
