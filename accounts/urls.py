from django.urls import path
from . import views

app_name = "accounts"

urlpatterns = [
    path("setup/", views.initial_admin, name="initial_admin"),
]
