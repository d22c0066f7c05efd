from django.urls import path
from . import views

app_name = "core"

urlpatterns = [
    path("api/accueil/", views.home, name="home"),
]
