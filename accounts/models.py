from django.db import models
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError

from accounts.constants import UserRole, StationRoles


class User(AbstractUser):
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=UserRole.CHOICES, default=UserRole.CEO)
    station = models.ForeignKey(
        "stations.Station",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="managers"
    )

    class Meta:
        ordering = ["username"]

    def clean(self):
        if self.role in StationRoles.SCOPED and self.station_id is None:
            raise ValidationError("A station manager must be attached to a station.")

    @property
    def display_name(self):
        return self.get_full_name() or self.username

    @property
    def is_station_scoped(self):
        return self.role in StationRoles.SCOPED

    def __str__(self):
        return f"{self.display_name} ({self.role})"
