import logging

from django.contrib import admin, messages
from django.db import transaction
from django.utils.safestring import mark_safe

from .models import Order, OrderItem

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    Order.STATUS_PENDING: "orange",
    Order.STATUS_PAID: "#1d4ed8",
    Order.STATUS_PREPARING: "purple",
    Order.STATUS_READY: "green",
    Order.STATUS_COMPLETED: "gray",
    Order.STATUS_CANCELLED: "red",
}


# -----------------------------------------------------------------------------
# INLINE : articles de la commande
# -----------------------------------------------------------------------------
class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("product_name", "get_category", "product_unit", "unit_price_formatted", "quantity", "line_total_formatted")
    readonly_fields = ("product_name", "get_category", "product_unit", "unit_price_formatted", "quantity", "line_total_formatted")
    can_delete = False
    verbose_name = "Produit commandé"
    verbose_name_plural = "🧺 Produits de la commande"

    def get_category(self, obj):
        if obj.product and obj.product.category:
            return obj.product.category.name
        return "-"
    get_category.short_description = "Catégorie"

    def unit_price_formatted(self, obj):
        return f"{obj.unit_price} €"
    unit_price_formatted.short_description = "Prix unitaire"

    def line_total_formatted(self, obj):
        return f"{obj.line_total} €"
    line_total_formatted.short_description = "Total ligne"


# -----------------------------------------------------------------------------
# COMMANDES
# -----------------------------------------------------------------------------
@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "customer_info", "status_colored", "delivery_info", "total_formatted", "created_at", "items_count")
    list_filter = ("status", "delivery_type", "sales_cycle", "created_at")
    search_fields = ("order_number", "customer_name", "customer_email", "customer_phone")
    readonly_fields = ("order_number", "created_at", "updated_at", "weight_grams")
    inlines = [OrderItemInline]
    ordering = ("-created_at",)

    fieldsets = (
        ("Client", {
            "fields": ("user", "customer_name", "customer_email", "customer_phone", "notes")
        }),
        ("Réception", {
            "fields": (
                "delivery_type", "pickup_location", "shipping_zone",
                "delivery_street", ("delivery_postal_code", "delivery_city"), "delivery_instructions",
                "weight_grams", "shipping_cost",
            )
        }),
        ("Commande", {
            "fields": ("order_number", "sales_cycle", "status", "subtotal", "total", "created_at", "updated_at")
        }),
    )

    def customer_info(self, obj):
        if obj.user:
            return f"{obj.user.get_full_name() or obj.user.username} ({obj.user.email})"
        return f"{obj.customer_name} ({obj.customer_email})"
    customer_info.short_description = "Client"

    def delivery_info(self, obj):
        if obj.is_pickup:
            return f"🧺 {obj.pickup_location.name}" if obj.pickup_location else "🧺 Retrait"
        return f"🚚 {obj.delivery_postal_code} {obj.delivery_city}"
    delivery_info.short_description = "Réception"

    def total_formatted(self, obj):
        return f"{obj.total} €"
    total_formatted.short_description = "Total"

    def items_count(self, obj):
        return obj.items.count()
    items_count.short_description = "Articles"

    def status_colored(self, obj):
        color = STATUS_COLORS.get(obj.status, "black")
        return mark_safe(f'<span style="color: {color}; font-weight: bold;">{obj.get_status_display().upper()}</span>')
    status_colored.short_description = "Statut"

    # --- Actions rapides ---

    actions = ["advance_status", "mark_cancelled"]

    @admin.action(description="➡️ Passer au statut suivant")
    def advance_status(self, request, queryset):
        moved = 0
        with transaction.atomic():
            for order in queryset.select_for_update():
                if order.status == Order.STATUS_CANCELLED:
                    continue
                new_status = order.advance_status()
                if new_status:
                    moved += 1
                    logger.info("Commande %s passée en %s", order.order_number, new_status)
        self.message_user(request, f"{moved} commande(s) mise(s) à jour.", messages.SUCCESS)

    @admin.action(description="🚫 ANNULER (remet le stock)")
    def mark_cancelled(self, request, queryset):
        with transaction.atomic():
            for order in queryset.select_for_update():
                order.cancel()

    def save_model(self, request, obj, form, change):
        if change:
            old = Order.objects.filter(pk=obj.pk).only("status").first()
            if old and old.status != Order.STATUS_CANCELLED and obj.status == Order.STATUS_CANCELLED:
                super().save_model(request, obj, form, change)
                obj.restock_items()
                return
        super().save_model(request, obj, form, change)
