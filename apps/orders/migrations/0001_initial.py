import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        ("cycles", "0001_initial"),
        ("shipping", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_number", models.CharField(blank=True, max_length=20, unique=True, verbose_name="Numéro")),
                ("status", models.CharField(choices=[("pending", "En attente"), ("paid", "Payée"), ("preparing", "En préparation"), ("ready", "Prête"), ("completed", "Récupérée"), ("cancelled", "Annulée")], default="pending", max_length=20, verbose_name="Statut")),
                ("customer_name", models.CharField(blank=True, max_length=120, verbose_name="Nom")),
                ("customer_phone", models.CharField(blank=True, max_length=20, verbose_name="Téléphone")),
                ("customer_email", models.EmailField(blank=True, max_length=254, verbose_name="Email")),
                ("notes", models.TextField(blank=True, verbose_name="Notes")),
                ("delivery_type", models.CharField(choices=[("pickup", "Retrait"), ("chronofresh", "Livraison Chronofresh")], default="pickup", max_length=20, verbose_name="Mode de réception")),
                ("delivery_street", models.CharField(blank=True, max_length=220, verbose_name="Adresse")),
                ("delivery_postal_code", models.CharField(blank=True, max_length=5, verbose_name="Code postal")),
                ("delivery_city", models.CharField(blank=True, max_length=120, verbose_name="Ville")),
                ("delivery_instructions", models.TextField(blank=True, verbose_name="Instructions de livraison")),
                ("weight_grams", models.PositiveIntegerField(default=0, verbose_name="Poids (g)")),
                ("shipping_cost", models.DecimalField(decimal_places=2, default=0, max_digits=10, verbose_name="Frais de port")),
                ("subtotal", models.DecimalField(decimal_places=2, default=0, max_digits=10, verbose_name="Sous-total")),
                ("total", models.DecimalField(decimal_places=2, default=0, max_digits=10, verbose_name="Total")),
                ("stock_reverted", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Créée")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Mise à jour")),
                ("pickup_location", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="shipping.pickuplocation", verbose_name="Point de retrait")),
                ("sales_cycle", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to="cycles.salescycle", verbose_name="Cycle de vente")),
                ("shipping_zone", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="shipping.shippingzone", verbose_name="Zone de livraison")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to=settings.AUTH_USER_MODEL, verbose_name="Client")),
            ],
            options={
                "verbose_name": "Commande",
                "verbose_name_plural": "Commandes",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("product_name", models.CharField(max_length=160, verbose_name="Produit")),
                ("product_unit", models.CharField(blank=True, max_length=20, verbose_name="Unité")),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=10, verbose_name="Prix unitaire")),
                ("quantity", models.PositiveIntegerField(default=1, verbose_name="Quantité")),
                ("line_total", models.DecimalField(decimal_places=2, max_digits=10, verbose_name="Total")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order", verbose_name="Commande")),
                ("product", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="catalog.product", verbose_name="Produit")),
            ],
            options={
                "verbose_name": "Article commandé",
                "verbose_name_plural": "Articles commandés",
            },
        ),
    ]
