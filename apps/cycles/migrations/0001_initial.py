from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SalesCycle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120, verbose_name="Nom")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("opening_date", models.DateTimeField(verbose_name="Ouverture")),
                ("closing_date", models.DateTimeField(verbose_name="Fermeture")),
                ("is_active", models.BooleanField(default=True, verbose_name="Actif")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Créé")),
            ],
            options={
                "verbose_name": "Cycle de vente",
                "verbose_name_plural": "Cycles de vente",
                "ordering": ["opening_date"],
            },
        ),
    ]
