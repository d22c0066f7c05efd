from django.urls import path
from . import views

app_name = "catalog"

urlpatterns = [
    path("api/produits/", views.product_list, name="list"),
    path("api/produits/<slug:slug>/", views.product_detail, name="detail"),
]
