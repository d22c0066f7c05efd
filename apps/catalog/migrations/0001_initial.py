import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, verbose_name="Nom")),
                ("slug", models.SlugField(blank=True, max_length=120, unique=True, verbose_name="Slug")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
            ],
            options={
                "verbose_name": "Catégorie",
                "verbose_name_plural": "Catégories",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=160, verbose_name="Nom")),
                ("slug", models.SlugField(blank=True, max_length=180, unique=True, verbose_name="Slug")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("price", models.DecimalField(decimal_places=2, max_digits=10, verbose_name="Prix")),
                ("unit", models.CharField(choices=[("kg", "Kilo"), ("piece", "Pièce"), ("botte", "Botte"), ("barquette", "Barquette"), ("panier", "Panier")], default="piece", max_length=20, verbose_name="Unité")),
                ("image_url", models.URLField(blank=True, verbose_name="Image")),
                ("stock", models.PositiveIntegerField(default=0, verbose_name="Stock")),
                ("weight_grams", models.PositiveIntegerField(blank=True, null=True, verbose_name="Poids unitaire (g)")),
                ("is_available", models.BooleanField(default=True, verbose_name="Disponible")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Date de création")),
                ("category", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="products", to="catalog.category", verbose_name="Catégorie")),
            ],
            options={
                "verbose_name": "Produit",
                "verbose_name_plural": "Produits",
                "ordering": ["category", "name"],
            },
        ),
    ]
