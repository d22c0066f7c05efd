from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ShippingZone",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=80, unique=True, verbose_name="Nom")),
                ("postal_code_prefix", models.CharField(blank=True, help_text="Codes départements séparés par des virgules. Laisser vide pour la zone par défaut.", max_length=255, verbose_name="Départements")),
                ("base_rate", models.DecimalField(decimal_places=2, default=0, max_digits=8, verbose_name="Forfait")),
                ("rate_per_kg", models.DecimalField(decimal_places=2, default=0, max_digits=8, verbose_name="Prix au kg")),
                ("min_weight_grams", models.PositiveIntegerField(default=0, verbose_name="Poids minimum (g)")),
                ("max_weight_grams", models.PositiveIntegerField(default=30000, verbose_name="Poids maximum (g)")),
                ("estimated_days_min", models.PositiveSmallIntegerField(default=1, verbose_name="Délai minimum (jours)")),
                ("estimated_days_max", models.PositiveSmallIntegerField(default=2, verbose_name="Délai maximum (jours)")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
            ],
            options={
                "verbose_name": "Zone de livraison",
                "verbose_name_plural": "Zones de livraison",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="PickupLocation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120, verbose_name="Nom")),
                ("kind", models.CharField(choices=[("farm", "Ferme"), ("depot", "Dépôt")], default="depot", max_length=10, verbose_name="Type")),
                ("address", models.CharField(max_length=220, verbose_name="Adresse")),
                ("city", models.CharField(max_length=120, verbose_name="Ville")),
                ("postal_code", models.CharField(max_length=5, verbose_name="Code postal")),
                ("latitude", models.FloatField(blank=True, null=True, verbose_name="Latitude")),
                ("longitude", models.FloatField(blank=True, null=True, verbose_name="Longitude")),
                ("opening_hours", models.TextField(blank=True, help_text="Une ligne par jour, ex: « Vendredi: 16h00 - 19h00 »", verbose_name="Horaires")),
                ("available_days", models.CharField(blank=True, help_text="Jours séparés par des virgules, ex: Vendredi,Samedi", max_length=120, verbose_name="Jours de retrait")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("is_active", models.BooleanField(default=True, verbose_name="Actif")),
            ],
            options={
                "verbose_name": "Point de retrait",
                "verbose_name_plural": "Points de retrait",
                "ordering": ["kind", "name"],
            },
        ),
    ]
