from django.contrib import admin, messages
from django.utils import timezone
from django.utils.safestring import mark_safe

from .models import SalesCycle
from .services import active_cycles, format_date_long, overlapping_cycles

PHASE_COLORS = {
    SalesCycle.PHASE_OPEN: "green",
    SalesCycle.PHASE_PLANNED: "#1d4ed8",
    SalesCycle.PHASE_FINISHED: "gray",
    SalesCycle.PHASE_DISABLED: "gray",
}


@admin.register(SalesCycle)
class SalesCycleAdmin(admin.ModelAdmin):
    list_display = ("name", "opening_date", "closing_date", "phase_visual", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "description")
    ordering = ("-opening_date",)
    date_hierarchy = "opening_date"

    fieldsets = (
        ("🗓️ Cycle", {
            "fields": ("name", "description")
        }),
        ("⏱️ Dates", {
            "fields": ("opening_date", "closing_date"),
            "description": "La boutique est ouverte entre ces deux dates (bornes incluses)."
        }),
        ("⚙️ Configuration", {
            "fields": ("is_active",)
        }),
    )

    actions = ["activate", "deactivate"]

    def phase_visual(self, obj):
        phase = obj.phase(timezone.now())
        color = PHASE_COLORS.get(phase, "black")
        return mark_safe(f'<span style="color: {color}; font-weight: bold;">{phase}</span>')
    phase_visual.short_description = "Statut"

    @admin.action(description="✅ Activer")
    def activate(self, request, queryset):
        queryset.update(is_active=True)

    @admin.action(description="⏸️ Désactiver")
    def deactivate(self, request, queryset):
        queryset.update(is_active=False)

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        if not obj.is_active:
            return
        # Le chevauchement est signalé mais pas bloqué : la boutique affiche
        # alors le premier cycle par date d'ouverture.
        others = overlapping_cycles(obj, active_cycles())
        if others:
            names = ", ".join(f"« {c.name} » ({format_date_long(c.opening_date)})" for c in others)
            messages.warning(request, f"Ce cycle chevauche d'autres cycles actifs : {names}.")
