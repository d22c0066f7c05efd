import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F

from apps.catalog.models import Product
from apps.shipping.models import ShippingZone
from .models import Order, OrderItem

logger = logging.getLogger(__name__)


@transaction.atomic
def create_order(cart, data, user=None, sales_cycle=None, shipping=None):
    """
    Crée la commande à partir du panier et décrémente le stock.

    ``data`` : cleaned_data du CheckoutForm.
    ``shipping`` : ShippingResult réussi pour une livraison Chronofresh.
    Lève ValueError si le stock ne suffit plus.
    """
    is_pickup = data["delivery_type"] == Order.DELIVERY_PICKUP
    subtotal = Decimal(str(cart.subtotal))
    shipping_cost = Decimal("0.00") if is_pickup else shipping.price
    weight = cart.total_weight_grams

    order = Order.objects.create(
        user=user,
        sales_cycle=sales_cycle,
        status=Order.STATUS_PENDING,
        customer_name=data["customer_name"],
        customer_phone=data["customer_phone"],
        customer_email=data["customer_email"],
        notes=data.get("notes", ""),
        delivery_type=data["delivery_type"],
        pickup_location=data.get("pickup_location") if is_pickup else None,
        # le nom de zone est unique
        shipping_zone=None if is_pickup else ShippingZone.objects.filter(name=shipping.zone).first(),
        delivery_street="" if is_pickup else data["street"],
        delivery_postal_code="" if is_pickup else data["postal_code"],
        delivery_city="" if is_pickup else data["city"],
        delivery_instructions="" if is_pickup else data.get("instructions", ""),
        weight_grams=weight,
        shipping_cost=shipping_cost,
        subtotal=subtotal,
        total=subtotal + shipping_cost,
    )

    for item in cart.items.select_related("product"):
        product = item.product

        if not product.is_available or item.quantity > product.stock:
            raise ValueError(
                f"Stock insuffisant pour « {product.name} ». "
                f"Disponible : {product.stock}, demandé : {item.quantity}."
            )

        # Décrément conditionnel : échoue si le stock a bougé entre-temps
        updated = Product.objects.filter(
            pk=product.pk, stock__gte=item.quantity
        ).update(stock=F("stock") - item.quantity)

        if updated == 0:
            raise ValueError(
                f"Stock insuffisant pour « {product.name} » (le stock a changé pendant votre commande)."
            )

        OrderItem.objects.create(
            order=order,
            product=product,
            product_name=product.name,
            product_unit=product.unit,
            unit_price=product.price,
            quantity=item.quantity,
            line_total=product.price * item.quantity,
        )

    cart.items.all().delete()
    logger.info("Commande %s créée (%s, %s €)", order.order_number, order.delivery_type, order.total)
    return order
