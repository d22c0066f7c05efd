from django.conf import settings
from django.db import models
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.cycles.models import SalesCycle
from apps.shipping.models import PickupLocation, ShippingZone


class Order(models.Model):
    STATUS_PENDING = "pending"
    STATUS_PAID = "paid"
    STATUS_PREPARING = "preparing"
    STATUS_READY = "ready"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "En attente"),
        (STATUS_PAID, "Payée"),
        (STATUS_PREPARING, "En préparation"),
        (STATUS_READY, "Prête"),
        (STATUS_COMPLETED, "Récupérée"),
        (STATUS_CANCELLED, "Annulée"),
    ]

    # Progression linéaire ; "cancelled" en sort
    STATUS_FLOW = [STATUS_PENDING, STATUS_PAID, STATUS_PREPARING, STATUS_READY, STATUS_COMPLETED]

    DELIVERY_PICKUP = "pickup"
    DELIVERY_CHRONOFRESH = "chronofresh"

    DELIVERY_CHOICES = [
        (DELIVERY_PICKUP, "Retrait"),
        (DELIVERY_CHRONOFRESH, "Livraison Chronofresh"),
    ]

    order_number = models.CharField("Numéro", max_length=20, unique=True, blank=True)
    status = models.CharField(
        "Statut",
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name="Client",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="orders",
    )
    sales_cycle = models.ForeignKey(
        SalesCycle,
        verbose_name="Cycle de vente",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="orders",
    )

    customer_name = models.CharField("Nom", max_length=120, blank=True)
    customer_phone = models.CharField("Téléphone", max_length=20, blank=True)
    customer_email = models.EmailField("Email", blank=True)
    notes = models.TextField("Notes", blank=True)

    # Retrait / livraison
    delivery_type = models.CharField(
        "Mode de réception",
        max_length=20,
        choices=DELIVERY_CHOICES,
        default=DELIVERY_PICKUP,
    )
    pickup_location = models.ForeignKey(
        PickupLocation,
        verbose_name="Point de retrait",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    shipping_zone = models.ForeignKey(
        ShippingZone,
        verbose_name="Zone de livraison",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    delivery_street = models.CharField("Adresse", max_length=220, blank=True)
    delivery_postal_code = models.CharField("Code postal", max_length=5, blank=True)
    delivery_city = models.CharField("Ville", max_length=120, blank=True)
    delivery_instructions = models.TextField("Instructions de livraison", blank=True)
    weight_grams = models.PositiveIntegerField("Poids (g)", default=0)
    shipping_cost = models.DecimalField("Frais de port", max_digits=10, decimal_places=2, default=0)

    subtotal = models.DecimalField("Sous-total", max_digits=10, decimal_places=2, default=0)
    total = models.DecimalField("Total", max_digits=10, decimal_places=2, default=0)

    stock_reverted = models.BooleanField(default=False)
    created_at = models.DateTimeField("Créée", auto_now_add=True)
    updated_at = models.DateTimeField("Mise à jour", auto_now=True)

    class Meta:
        verbose_name = "Commande"
        verbose_name_plural = "Commandes"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Commande {self.order_number or self.pk} - {self.get_status_display()}"

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        if not self.order_number:
            # CMD-AAAAMMJJ-000042
            stamp = timezone.localdate(self.created_at).strftime("%Y%m%d")
            self.order_number = f"CMD-{stamp}-{self.pk:06d}"
            Order.objects.filter(pk=self.pk).update(order_number=self.order_number)

    @property
    def is_pickup(self) -> bool:
        return self.delivery_type == self.DELIVERY_PICKUP

    @property
    def delivery_address(self):
        if self.is_pickup:
            return None
        return {
            "name": self.customer_name,
            "street": self.delivery_street,
            "postal_code": self.delivery_postal_code,
            "city": self.delivery_city,
            "phone": self.customer_phone,
            "instructions": self.delivery_instructions,
        }

    def next_status(self):
        if self.status not in self.STATUS_FLOW:
            return None
        idx = self.STATUS_FLOW.index(self.status)
        if idx < len(self.STATUS_FLOW) - 1:
            return self.STATUS_FLOW[idx + 1]
        return None

    def advance_status(self):
        """
        Passe au statut suivant. Retourne le nouveau statut ou None si la
        commande est terminée ou annulée.
        """
        new_status = self.next_status()
        if new_status is None:
            return None
        self.status = new_status
        self.save(update_fields=["status", "updated_at"])
        return new_status

    def cancel(self):
        if self.status == self.STATUS_CANCELLED:
            return
        self.status = self.STATUS_CANCELLED
        self.save(update_fields=["status", "updated_at"])
        self.restock_items()

    def restock_items(self):
        """
        Remet le stock si la commande est annulée (une seule fois).
        """
        if self.stock_reverted:
            return

        from apps.catalog.models import Product

        with transaction.atomic():
            self.refresh_from_db()
            if self.stock_reverted:
                return

            for it in self.items.all():
                if it.product_id:
                    Product.objects.filter(pk=it.product_id).update(
                        stock=F("stock") + it.quantity
                    )

            self.stock_reverted = True
            self.save(update_fields=["stock_reverted"])


class OrderItem(models.Model):
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
        verbose_name="Commande"
    )

    # Copie du produit au moment de la commande
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        verbose_name="Produit"
    )

    product_name = models.CharField("Produit", max_length=160)
    product_unit = models.CharField("Unité", max_length=20, blank=True)
    unit_price = models.DecimalField("Prix unitaire", max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField("Quantité", default=1)
    line_total = models.DecimalField("Total", max_digits=10, decimal_places=2)

    class Meta:
        verbose_name = "Article commandé"
        verbose_name_plural = "Articles commandés"

    def __str__(self) -> str:
        return f"{self.product_name} x {self.quantity}"
