import logging

from django.db import transaction

from .models import Cart, CartItem

logger = logging.getLogger(__name__)


def _session_key(request) -> str:
    if not request.session.session_key:
        request.session.create()
    return request.session.session_key


def _ensure_stock(product, qty: int):
    if not product.in_stock:
        raise ValueError("Ce produit n'est plus disponible.")
    if qty > product.stock:
        raise ValueError(f"Stock insuffisant. Disponible : {product.stock}.")


def get_or_create_cart(request) -> Cart:
    """
    Panier actif de l'utilisateur connecté, sinon celui de la session.

    Le panier anonyme est retrouvé par son id en session : la clé de session
    change à la connexion mais les données sont conservées, ce qui permet
    de le fusionner dans le panier du compte.
    """
    session_key = _session_key(request)
    user = getattr(request, "user", None)
    anonymous = Cart.objects.filter(
        pk=request.session.get("cart_id"), user=None, is_active=True
    ).first()

    if user is None or not user.is_authenticated:
        if anonymous is None:
            anonymous = Cart.objects.create(session_key=session_key)
            request.session["cart_id"] = anonymous.pk
        return anonymous

    cart = Cart.objects.filter(user=user, is_active=True).order_by("id").first()
    if cart is None:
        cart = Cart.objects.create(user=user)
    if anonymous is not None:
        merge_carts(anonymous, cart)
        request.session.pop("cart_id", None)
    return cart


@transaction.atomic
def merge_carts(source: Cart, target: Cart):
    """
    Verse les lignes de ``source`` dans ``target`` puis désactive ``source``.
    Les quantités sont plafonnées au stock disponible.
    """
    for item in source.items.select_related("product"):
        line, _ = CartItem.objects.get_or_create(cart=target, product=item.product, defaults={"quantity": 0})
        line.quantity = min(line.quantity + item.quantity, item.product.stock)
        if line.quantity > 0:
            line.save(update_fields=["quantity"])
        else:
            line.delete()

    source.items.all().delete()
    source.is_active = False
    source.save(update_fields=["is_active", "updated_at"])
    logger.debug("Panier %s fusionné dans %s", source.pk, target.pk)


@transaction.atomic
def add_to_cart(cart: Cart, product, qty: int = 1):
    """Ajoute qty à la ligne du produit (créée au besoin)."""
    qty = max(int(qty or 1), 1)

    item = CartItem.objects.select_for_update().filter(cart=cart, product=product).first()
    current = item.quantity if item else 0
    _ensure_stock(product, current + qty)

    if item is None:
        return CartItem.objects.create(cart=cart, product=product, quantity=qty)

    item.quantity = current + qty
    item.save(update_fields=["quantity"])
    return item


@transaction.atomic
def set_qty(cart: Cart, item_id: int, qty: int):
    """
    Quantité finale de la ligne ; 0 ou moins la supprime (retourne None).
    """
    item = CartItem.objects.select_related("product").select_for_update().get(pk=item_id, cart=cart)

    if qty <= 0:
        item.delete()
        return None

    _ensure_stock(item.product, qty)
    item.quantity = qty
    item.save(update_fields=["quantity"])
    return item


def remove_item(cart: Cart, item_id: int):
    CartItem.objects.filter(pk=item_id, cart=cart).delete()


def clear_cart(cart: Cart):
    cart.items.all().delete()
