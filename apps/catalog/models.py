from django.db import models
from django.utils.text import slugify


class Category(models.Model):
    name = models.CharField("Nom", max_length=100)
    slug = models.SlugField("Slug", max_length=120, unique=True, blank=True)
    description = models.TextField("Description", blank=True)

    class Meta:
        verbose_name = "Catégorie"
        verbose_name_plural = "Catégories"
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)


class Product(models.Model):
    UNIT_CHOICES = [
        ("kg", "Kilo"),
        ("piece", "Pièce"),
        ("botte", "Botte"),
        ("barquette", "Barquette"),
        ("panier", "Panier"),
    ]

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        related_name="products",
        verbose_name="Catégorie",
        null=True,
        blank=True
    )

    name = models.CharField("Nom", max_length=160)
    slug = models.SlugField("Slug", max_length=180, unique=True, blank=True)
    description = models.TextField("Description", blank=True)
    price = models.DecimalField("Prix", max_digits=10, decimal_places=2)
    unit = models.CharField("Unité", max_length=20, choices=UNIT_CHOICES, default="piece")
    image_url = models.URLField("Image", blank=True)
    stock = models.PositiveIntegerField("Stock", default=0)
    # Poids d'une unité, utilisé pour le calcul des frais de port
    weight_grams = models.PositiveIntegerField("Poids unitaire (g)", null=True, blank=True)
    is_available = models.BooleanField("Disponible", default=True)
    created_at = models.DateTimeField("Date de création", auto_now_add=True)

    class Meta:
        verbose_name = "Produit"
        verbose_name_plural = "Produits"
        ordering = ["category", "name"]

    def __str__(self) -> str:
        return f"{self.name} - {self.price} €/{self.get_unit_display().lower()}"

    @property
    def in_stock(self) -> bool:
        return self.is_available and self.stock > 0

    def save(self, *args, **kwargs):
        if not self.slug:
            base = slugify(self.name)
            slug = base
            i = 2
            while Product.objects.filter(slug=slug).exclude(pk=self.pk).exists():
                slug = f"{base}-{i}"
                i += 1
            self.slug = slug
        super().save(*args, **kwargs)
