from django.db import models


class Country(models.Model):
    code = models.CharField(max_length=2, unique=True)
    name = models.CharField(max_length=100)

    class Meta:
        app_label = "test_app"
        verbose_name_plural = "countries"

    def __str__(self):
        return self.name


class Organization(models.Model):
    name = models.CharField(max_length=150)
    email = models.EmailField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    country = models.ForeignKey(
        Country, on_delete=models.PROTECT, related_name="organizations"
    )
    active = models.BooleanField(default=True)
    founded = models.DateField(null=True, blank=True)

    class Meta:
        app_label = "test_app"

    def __str__(self):
        return self.name


class Contact(models.Model):
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="contacts",
        null=True,
        blank=True,
    )

    class Meta:
        app_label = "test_app"

    def __str__(self):
        return f"{self.first_name} {self.last_name}"
