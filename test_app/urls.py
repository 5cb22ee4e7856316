from django.http import HttpResponse
from django.urls import include, path

from tablerefine.server.views import TableView

from .tables import ContactTable, OrganizationTable


def organization_edit(request, pk):
    return HttpResponse(f"edit {pk}")


urlpatterns = [
    path("tables/", include("tablerefine.server.urls")),
    path("organizations/", TableView.as_view(table_class=OrganizationTable), name="organization-index"),
    path(
        "dashboard/",
        TableView.as_view(table_classes=[OrganizationTable, ContactTable]),
        name="dashboard",
    ),
    path("organizations/<int:pk>/edit/", organization_edit, name="organization-edit"),
]
