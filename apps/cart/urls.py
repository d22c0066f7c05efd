from django.urls import path
from . import views

app_name = "cart"

urlpatterns = [
    path("api/panier/", views.cart_detail, name="detail"),
    path("api/panier/ajouter/<int:product_id>/", views.cart_add, name="add"),
    path("api/panier/article/<int:item_id>/", views.cart_item_api, name="item_api"),
    path("api/panier/supprimer/<int:item_id>/", views.cart_remove, name="remove"),
    path("api/panier/vider/", views.cart_clear, name="clear"),
]
