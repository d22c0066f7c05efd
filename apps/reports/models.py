from django.db import models

class Reporte(models.Model):
    """
    Pas de table en base : ce modèle sert seulement à accrocher
    le tableau de bord des ventes dans l'admin.
    """
    class Meta:
        managed = False
        verbose_name = "📊 Tableau de bord"
        verbose_name_plural = "📊 Statistiques de ventes"
        app_label = 'reports'
