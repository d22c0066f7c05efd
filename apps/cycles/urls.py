from django.urls import path
from . import views

app_name = "cycles"

urlpatterns = [
    path("api/vente/statut/", views.sales_status_api, name="status_api"),
    path("api/vente/cycles/", views.upcoming_cycles_api, name="upcoming_api"),
]
