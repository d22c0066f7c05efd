import logging
from decimal import Decimal

# Django
from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.db import DatabaseError
from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods, require_POST

# Apps internes
from apps.cart.services import get_or_create_cart
from apps.core.utils import read_payload
from apps.cycles.services import MESSAGE_UNAVAILABLE
from apps.cycles.views import current_status
from apps.shipping.services import (
    ERROR_ZONES_UNAVAILABLE,
    active_zones,
    calculate_shipping_rate,
    format_delivery_address,
    format_french_phone_number,
)
from .forms import CheckoutForm
from .models import Order
from .services import create_order

# ReportLab (PDF)
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle

logger = logging.getLogger(__name__)


def order_payload(order):
    return {
        "id": order.id,
        "orderNumber": order.order_number,
        "status": order.status,
        "statusLabel": order.get_status_display(),
        "nextStatus": order.next_status(),
        "deliveryType": order.delivery_type,
        "pickupLocation": order.pickup_location.name if order.pickup_location else None,
        "customerPhone": format_french_phone_number(order.customer_phone),
        "deliveryAddress": order.delivery_address,
        "deliveryAddressText": format_delivery_address(order.delivery_address) if not order.is_pickup else None,
        "shippingZone": order.shipping_zone.name if order.shipping_zone else None,
        "weightGrams": order.weight_grams,
        "shippingCost": str(order.shipping_cost),
        "subtotal": str(order.subtotal),
        "total": str(order.total),
        "createdAt": order.created_at.isoformat(),
        "items": [
            {
                "productName": it.product_name,
                "unit": it.product_unit,
                "unitPrice": str(it.unit_price),
                "quantity": it.quantity,
                "lineTotal": str(it.line_total),
            }
            for it in order.items.all()
        ],
    }


def _can_view(request, order) -> bool:
    if request.user.is_authenticated and request.user.is_staff:
        return True
    if order.user_id:
        return request.user.is_authenticated and order.user_id == request.user.id
    # Commande anonyme : visible depuis la session qui l'a passée
    return order.id in request.session.get("order_ids", [])


@require_POST
def checkout(request):
    cart = get_or_create_cart(request)

    if cart.items.count() == 0:
        return JsonResponse({"ok": False, "error": "Votre panier est vide."}, status=400)

    status = current_status()
    if status is None:
        return JsonResponse({"ok": False, "error": MESSAGE_UNAVAILABLE}, status=500)
    if not status.is_open:
        return JsonResponse({"ok": False, "error": status.message, "salesStatus": status.as_dict()}, status=409)

    form = CheckoutForm(read_payload(request))
    if not form.is_valid():
        return JsonResponse({"ok": False, "errors": form.errors.get_json_data()}, status=400)

    shipping = None
    if form.cleaned_data["delivery_type"] == Order.DELIVERY_CHRONOFRESH:
        try:
            zones = active_zones()
        except DatabaseError:
            logger.exception("Lecture des zones de livraison impossible")
            return JsonResponse({"ok": False, "error": ERROR_ZONES_UNAVAILABLE}, status=500)

        shipping = calculate_shipping_rate(form.cleaned_data["postal_code"], cart.total_weight_grams, zones)
        if not shipping.success:
            return JsonResponse({"ok": False, "error": shipping.error}, status=400)

    try:
        order = create_order(
            cart,
            form.cleaned_data,
            user=request.user if request.user.is_authenticated else None,
            sales_cycle=status.current_cycle,
            shipping=shipping,
        )
    except ValueError as e:
        return JsonResponse({"ok": False, "error": str(e)}, status=400)

    request.session["order_ids"] = request.session.get("order_ids", []) + [order.id]

    return JsonResponse({"ok": True, "order": order_payload(order)}, status=201)


@require_http_methods(["GET"])
def order_detail(request, order_id):
    order = get_object_or_404(Order.objects.prefetch_related("items"), pk=order_id)

    if not _can_view(request, order):
        return JsonResponse({"ok": False, "error": "Vous n'avez pas accès à cette commande."}, status=403)

    return JsonResponse({"ok": True, "order": order_payload(order)})


@login_required
@require_http_methods(["GET"])
def my_orders(request):
    qs = (
        Order.objects.filter(user=request.user)
        .select_related("pickup_location", "shipping_zone")
        .prefetch_related("items")
        .order_by("-created_at")
    )
    return JsonResponse({"ok": True, "orders": [order_payload(o) for o in qs]})


def money(amount):
    if amount is None:
        return "0.00"
    return f"{amount:.2f}"


# ==============================================================================
# FACTURE PDF
# ==============================================================================
@require_http_methods(["GET"])
def invoice_pdf(request, order_id):
    order = get_object_or_404(Order.objects.prefetch_related("items"), pk=order_id)

    if not _can_view(request, order):
        return JsonResponse({"ok": False, "error": "Vous n'avez pas accès à cette facture."}, status=403)

    response = HttpResponse(content_type='application/pdf')
    response['Content-Disposition'] = f'inline; filename="facture_{order.order_number}.pdf"'

    p = canvas.Canvas(response, pagesize=A4)
    width, height = A4
    margin = 2 * cm

    # -------- En-tête : la ferme --------
    y_header = height - 2 * cm

    p.setFont("Helvetica-Bold", 12)
    p.drawString(margin, y_header, getattr(settings, "SHOP_NAME", "AMAP").upper())
    p.setFont("Helvetica", 10)
    for line in (getattr(settings, "SHOP_ADDRESS", ""), getattr(settings, "SHOP_PHONE", "")):
        if line:
            y_header -= 0.5 * cm
            p.drawString(margin, y_header, line)
    y_header -= 0.5 * cm
    p.drawString(margin, y_header, f"Date : {order.created_at.strftime('%d/%m/%Y')}")

    # -------- Titre et client --------
    y = height - 5.5 * cm

    p.setLineWidth(1)
    p.line(margin, y + 0.5 * cm, width - margin, y + 0.5 * cm)

    p.setFont("Helvetica-Bold", 14)
    p.drawCentredString(width / 2, y, f"FACTURE {order.order_number}")

    y -= 1 * cm
    p.setFont("Helvetica-Bold", 10)
    p.drawString(margin, y, "Client :")

    p.setFont("Helvetica", 10)
    y -= 0.5 * cm
    p.drawString(margin, y, f"Nom : {order.customer_name or 'Client'}")
    p.drawString(width / 2, y, f"Téléphone : {format_french_phone_number(order.customer_phone) or '-'}")

    y -= 0.5 * cm
    if order.is_pickup:
        where = order.pickup_location.full_address if order.pickup_location else "-"
        p.drawString(margin, y, f"Retrait : {where}")
    else:
        p.drawString(margin, y, "Livraison Chronofresh :")
        # Le nom figure déjà au-dessus
        for line in format_delivery_address(order.delivery_address).splitlines()[1:]:
            y -= 0.5 * cm
            p.drawString(margin + 0.5 * cm, y, line)
    y -= 0.5 * cm
    p.drawString(margin, y, f"Email : {order.customer_email or '-'}")

    # -------- Tableau des produits --------
    y -= 1.0 * cm

    data = [['Produit', 'Qté', 'Prix', 'Total']]
    for item in order.items.all():
        desc = item.product_name
        if item.product_unit:
            desc += f" ({item.product_unit})"
        data.append([
            desc,
            str(item.quantity),
            f"{money(item.unit_price)} €",
            f"{money(item.line_total)} €",
        ])

    # 9.5 + 2 + 2.75 + 2.75 = 17cm, largeur utile A4
    table = Table(data, colWidths=[9.5 * cm, 2 * cm, 2.75 * cm, 2.75 * cm])
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.Color(0.18, 0.35, 0.24)),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('ALIGN', (1, 0), (-1, -1), 'CENTER'),
        ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('TOPPADDING', (0, 0), (-1, 0), 8),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.Color(0.8, 0.8, 0.8)),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.Color(0.97, 0.97, 0.97)]),
    ]))

    w_table, h_table = table.wrapOn(p, width, height)

    # Nouvelle page si le tableau ne tient pas
    if y - h_table < 2 * cm:
        p.showPage()
        y = height - margin

    table.drawOn(p, margin, y - h_table)

    # -------- Totaux --------
    y_final = y - h_table - 0.8 * cm
    shipping = order.shipping_cost or Decimal("0.00")

    p.setFont("Helvetica", 10)
    p.drawRightString(width - margin, y_final, f"Sous-total :   {money(order.subtotal)} €")

    y_final -= 0.6 * cm
    label = "Livraison" if not order.is_pickup else "Retrait"
    p.drawRightString(width - margin, y_final, f"{label} :   {money(shipping)} €")

    y_final -= 0.3 * cm
    p.line(width - margin - 5 * cm, y_final, width - margin, y_final)

    y_final -= 0.6 * cm
    p.setFont("Helvetica-Bold", 12)
    p.drawRightString(width - margin, y_final, f"TOTAL :   {money(order.total)} €")

    p.setFont("Helvetica-Oblique", 8)
    p.drawCentredString(width / 2, 2 * cm, f"Merci de votre confiance - {getattr(settings, 'SHOP_NAME', 'AMAP')}")

    p.showPage()
    p.save()
    return response
