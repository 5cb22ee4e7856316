from django.db.models import Count

from tablerefine.server import (
    BooleanColumn,
    BooleanFilter,
    BulkAction,
    DateColumn,
    DateFilter,
    InlineAction,
    KeyColumn,
    NumberColumn,
    PageAction,
    SetFilter,
    Sort,
    Table,
    TextColumn,
    register_table,
)

from .models import Contact, Country, Organization


@register_table
class OrganizationTable(Table):
    id = "organizations"
    toggle = True
    pagination = [5, 10, 25]
    default_pagination = 10

    def for_(self):
        return Organization.objects.select_related("country").annotate(
            contacts_count=Count("contacts")
        )

    def columns(self):
        return [
            KeyColumn("id"),
            TextColumn("name").sortable().searchable().always(),
            TextColumn("email").sortable().searchable().with_meta(copyable=True),
            NumberColumn("contacts_count", "Contacts"),
            TextColumn("city").sometimes(),
            TextColumn("country.name", "Country").sometimes(),
            BooleanColumn("active"),
            DateColumn("founded").sortable().sometimes(),
        ]

    def filters(self):
        return [
            SetFilter("country", field="country__code")
            .options(dict(Country.objects.order_by("code").values_list("code", "name")))
            .multiple(),
            BooleanFilter("active").with_meta(hint="Only active organizations"),
            DateFilter("founded_after", "Founded after", field="founded", lookup="gte"),
        ]

    def sorts(self):
        return [
            Sort("city", "City A-Z").asc(),
            Sort("city", "City Z-A").desc(),
            Sort("created", "Newest", field="id").desc().default(),
        ]

    def actions(self):
        return [
            InlineAction("view", "View")
            .default()
            .route(lambda organization: f"/organizations/{organization.pk}/"),
            InlineAction("edit", "Edit").route("organization-edit"),
            InlineAction("delete", "Delete")
            .allow(lambda organization: organization.pk % 2 == 0)
            .confirm("Delete organization", "This cannot be undone.")
            .action(lambda organization: organization.delete()),
            BulkAction("delete", "Delete").action(lambda organizations: organizations.delete()),
            BulkAction("deactivate")
            .keep_selected()
            .action(lambda organizations: {"updated": organizations.update(active=False)}),
            BulkAction("export"),
            PageAction("create").route("/organizations/create/"),
            PageAction("refresh"),
        ]


@register_table
class ContactTable(Table):
    id = "contacts"
    scope = "contacts"
    paginator = "simple"

    def for_(self):
        return Contact.objects.select_related("organization")

    def columns(self):
        return [
            KeyColumn("id"),
            TextColumn("first_name").sortable().searchable(),
            TextColumn("last_name").sortable().searchable(),
            TextColumn("organization.name", "Organization").searchable(),
        ]

    def actions(self):
        return [
            PageAction("archive").action(lambda: {"archived": True}),
        ]
