from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class SalesCycle(models.Model):
    PHASE_DISABLED = "Désactivé"
    PHASE_PLANNED = "Planifié"
    PHASE_OPEN = "Ouvert"
    PHASE_FINISHED = "Terminé"

    name = models.CharField("Nom", max_length=120)
    description = models.TextField("Description", blank=True)
    opening_date = models.DateTimeField("Ouverture")
    closing_date = models.DateTimeField("Fermeture")
    is_active = models.BooleanField("Actif", default=True)
    created_at = models.DateTimeField("Créé", auto_now_add=True)

    class Meta:
        verbose_name = "Cycle de vente"
        verbose_name_plural = "Cycles de vente"
        ordering = ["opening_date"]

    def __str__(self) -> str:
        return self.name

    def clean(self):
        if self.opening_date and self.closing_date and self.closing_date < self.opening_date:
            raise ValidationError({"closing_date": "La fermeture doit être postérieure à l'ouverture."})

    def contains(self, moment) -> bool:
        return self.opening_date <= moment <= self.closing_date

    def phase(self, now=None) -> str:
        """Libellé affiché dans l'admin."""
        if not self.is_active:
            return self.PHASE_DISABLED
        now = now or timezone.now()
        if self.opening_date > now:
            return self.PHASE_PLANNED
        if self.contains(now):
            return self.PHASE_OPEN
        return self.PHASE_FINISHED
