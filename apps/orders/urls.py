from django.urls import path
from . import views

app_name = "orders"

urlpatterns = [
    path("api/commande/", views.checkout, name="checkout"),
    path("api/commandes/", views.my_orders, name="my_orders"),
    path("api/commandes/<int:order_id>/", views.order_detail, name="detail"),
    path("api/commandes/<int:order_id>/facture/", views.invoice_pdf, name="invoice_pdf"),
]
