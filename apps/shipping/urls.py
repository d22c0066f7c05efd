from django.urls import path
from . import views

app_name = "shipping"

urlpatterns = [
    path("api/livraison/tarif/", views.shipping_rate_api, name="rate_api"),
    path("api/livraison/points-retrait/", views.pickup_locations_api, name="pickup_locations_api"),
]
