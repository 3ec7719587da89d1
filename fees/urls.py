from django.urls import path
from . import views

app_name = "fees"

urlpatterns = [
    path("", views.manage, name="manage"),
    path("<int:pk>/toggle/", views.toggle_status, name="toggle_status"),
    path("<int:pk>/delete/", views.delete, name="delete"),
    path("summary/", views.summary, name="summary"),
]
