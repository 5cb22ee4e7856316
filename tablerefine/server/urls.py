"""URL configuration for the shared table action endpoint."""

from django.urls import path

from .views import TableActionView

app_name = "tablerefine"

urlpatterns = [
    path("actions/", TableActionView.as_view(), name="action"),
]
