from django.core.exceptions import ValidationError
from django.db import models


class ShippingZone(models.Model):
    name = models.CharField("Nom", max_length=80, unique=True)
    # Départements séparés par des virgules ("45,18,89"). Vide = zone par défaut.
    postal_code_prefix = models.CharField(
        "Départements",
        max_length=255,
        blank=True,
        help_text="Codes départements séparés par des virgules. Laisser vide pour la zone par défaut.",
    )
    base_rate = models.DecimalField("Forfait", max_digits=8, decimal_places=2, default=0)
    rate_per_kg = models.DecimalField("Prix au kg", max_digits=8, decimal_places=2, default=0)
    min_weight_grams = models.PositiveIntegerField("Poids minimum (g)", default=0)
    max_weight_grams = models.PositiveIntegerField("Poids maximum (g)", default=30000)
    estimated_days_min = models.PositiveSmallIntegerField("Délai minimum (jours)", default=1)
    estimated_days_max = models.PositiveSmallIntegerField("Délai maximum (jours)", default=2)
    is_active = models.BooleanField("Active", default=True)

    class Meta:
        verbose_name = "Zone de livraison"
        verbose_name_plural = "Zones de livraison"
        ordering = ["id"]

    def __str__(self) -> str:
        status = "Active" if self.is_active else "Inactive"
        return f"{self.name} ({self.base_rate} € + {self.rate_per_kg} €/kg) - {status}"

    @property
    def prefixes(self):
        return [p.strip() for p in (self.postal_code_prefix or "").split(",") if p.strip()]

    @property
    def is_catch_all(self) -> bool:
        return (self.postal_code_prefix or "") == ""

    def clean(self):
        errors = {}
        if self.max_weight_grams is not None and self.min_weight_grams is not None:
            if self.max_weight_grams < self.min_weight_grams:
                errors["max_weight_grams"] = "Le poids maximum doit être supérieur au poids minimum."
        if self.estimated_days_max is not None and self.estimated_days_min is not None:
            if self.estimated_days_max < self.estimated_days_min:
                errors["estimated_days_max"] = "Le délai maximum doit être supérieur au délai minimum."
        if errors:
            raise ValidationError(errors)


class PickupLocation(models.Model):
    KIND_FARM = "farm"
    KIND_DEPOT = "depot"

    KIND_CHOICES = [
        (KIND_FARM, "Ferme"),
        (KIND_DEPOT, "Dépôt"),
    ]

    name = models.CharField("Nom", max_length=120)
    kind = models.CharField("Type", max_length=10, choices=KIND_CHOICES, default=KIND_DEPOT)
    address = models.CharField("Adresse", max_length=220)
    city = models.CharField("Ville", max_length=120)
    postal_code = models.CharField("Code postal", max_length=5)
    latitude = models.FloatField("Latitude", null=True, blank=True)
    longitude = models.FloatField("Longitude", null=True, blank=True)
    opening_hours = models.TextField(
        "Horaires",
        blank=True,
        help_text="Une ligne par jour, ex: « Vendredi: 16h00 - 19h00 »",
    )
    available_days = models.CharField(
        "Jours de retrait",
        max_length=120,
        blank=True,
        help_text="Jours séparés par des virgules, ex: Vendredi,Samedi",
    )
    description = models.TextField("Description", blank=True)
    is_active = models.BooleanField("Actif", default=True)

    class Meta:
        verbose_name = "Point de retrait"
        verbose_name_plural = "Points de retrait"
        ordering = ["kind", "name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.get_kind_display()})"

    @property
    def full_address(self) -> str:
        return f"{self.address}, {self.postal_code} {self.city}"

    @property
    def days(self):
        return [d.strip() for d in (self.available_days or "").split(",") if d.strip()]

    def is_available_on(self, day: str) -> bool:
        return day.strip().lower() in [d.lower() for d in self.days]

    def hours_for(self, day: str):
        for line in (self.opening_hours or "").splitlines():
            label, sep, hours = line.partition(":")
            if sep and label.strip().lower() == day.strip().lower():
                return hours.strip()
        return None
