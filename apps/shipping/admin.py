from django.contrib import admin
from django.utils.html import format_html
from django.utils.safestring import mark_safe
from .models import PickupLocation, ShippingZone


def _status_visual(active, on="✅ Active", off="❌ Inactive"):
    if active:
        return mark_safe(f'<span style="color: green;">{on}</span>')
    return mark_safe(f'<span style="color: red;">{off}</span>')


@admin.register(ShippingZone)
class ShippingZoneAdmin(admin.ModelAdmin):
    list_display = ("name_bold", "prefixes_display", "rate_formatted", "weight_range", "delay", "status_visual")
    list_filter = ("is_active",)
    search_fields = ("name", "postal_code_prefix")

    fieldsets = (
        ("📍 Zone", {
            "fields": ("name", "postal_code_prefix"),
            "description": "Une seule zone doit rester sans département : elle sert de zone par défaut."
        }),
        ("💶 Tarif", {
            "fields": ("base_rate", "rate_per_kg"),
            "description": "Prix = forfait + prix au kg × poids (kg), arrondi au centime."
        }),
        ("⚖️ Poids et délais", {
            "fields": (("min_weight_grams", "max_weight_grams"), ("estimated_days_min", "estimated_days_max")),
        }),
        ("⚙️ Configuration", {
            "fields": ("is_active",),
            "description": "Décochez pour ne plus proposer la livraison dans cette zone."
        }),
    )

    def name_bold(self, obj):
        return format_html('<b>{}</b>', obj.name)
    name_bold.short_description = "Zone"
    name_bold.admin_order_field = "name"

    def prefixes_display(self, obj):
        return ", ".join(obj.prefixes) or "Par défaut"
    prefixes_display.short_description = "Départements"

    def rate_formatted(self, obj):
        return f"{obj.base_rate} € + {obj.rate_per_kg} €/kg"
    rate_formatted.short_description = "Tarif"

    def weight_range(self, obj):
        return f"{obj.min_weight_grams} g - {obj.max_weight_grams} g"
    weight_range.short_description = "Poids"

    def delay(self, obj):
        return f"{obj.estimated_days_min}-{obj.estimated_days_max} j"
    delay.short_description = "Délai"

    def status_visual(self, obj):
        return _status_visual(obj.is_active)
    status_visual.short_description = "Disponibilité"
    status_visual.admin_order_field = "is_active"


@admin.register(PickupLocation)
class PickupLocationAdmin(admin.ModelAdmin):
    list_display = ("name", "kind", "city", "available_days", "status_visual")
    list_filter = ("kind", "is_active")
    search_fields = ("name", "city", "address")

    fieldsets = (
        ("📍 Lieu", {
            "fields": ("name", "kind", "address", ("postal_code", "city"), ("latitude", "longitude"))
        }),
        ("🕒 Retrait", {
            "fields": ("available_days", "opening_hours", "description")
        }),
        ("⚙️ Configuration", {
            "fields": ("is_active",)
        }),
    )

    def status_visual(self, obj):
        return _status_visual(obj.is_active, on="✅ Actif", off="❌ Inactif")
    status_visual.short_description = "Disponibilité"
    status_visual.admin_order_field = "is_active"
