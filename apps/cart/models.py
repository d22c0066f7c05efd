from decimal import Decimal

from django.conf import settings
from django.db import models
from apps.catalog.models import Product


class Cart(models.Model):
    # Panier anonyme (session)
    session_key = models.CharField("Clé de session", max_length=40, blank=True, db_index=True)

    # Panier d'un utilisateur connecté
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name="Utilisateur",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="carts",
    )

    is_active = models.BooleanField("Actif", default=True)
    created_at = models.DateTimeField("Créé", auto_now_add=True)
    updated_at = models.DateTimeField("Mis à jour", auto_now=True)

    class Meta:
        verbose_name = "Panier"
        verbose_name_plural = "Paniers"

    def __str__(self) -> str:
        owner = self.user.username if self.user else (self.session_key or "sans-session")
        return f"Panier ({owner})"

    @property
    def subtotal(self):
        return sum((item.total for item in self.items.all()), Decimal("0.00"))

    @property
    def total_weight_grams(self) -> int:
        # Produits sans poids renseigné : comptés à 0 g
        return sum((item.product.weight_grams or 0) * item.quantity for item in self.items.all())


class CartItem(models.Model):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name="items", verbose_name="Panier")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="cart_items", verbose_name="Produit")
    quantity = models.PositiveIntegerField("Quantité", default=1)

    class Meta:
        verbose_name = "Article du panier"
        verbose_name_plural = "Articles du panier"
        constraints = [
            models.UniqueConstraint(fields=["cart", "product"], name="unique_product_per_cart")
        ]

    def __str__(self) -> str:
        return f"{self.product.name} x {self.quantity}"

    @property
    def unit_price(self):
        return self.product.price

    @property
    def total(self):
        return self.unit_price * self.quantity
