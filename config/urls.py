from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Gart - Administration"
admin.site.site_title = "Gart - Administration"
admin.site.index_title = "Commandes, produits et cycles de vente"

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("apps.core.urls")),
    path("", include("apps.catalog.urls")),
    path("", include("apps.cart.urls")),
    path("", include("apps.shipping.urls")),
    path("", include("apps.cycles.urls")),
    path("", include("apps.orders.urls")),
]
