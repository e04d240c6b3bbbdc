from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from accounts.models import User


@admin.register(User)
class ExpanseUserAdmin(UserAdmin):
    list_display = ("username", "email", "role", "station", "is_active")
    list_filter = ("role", "station", "is_active")
    fieldsets = UserAdmin.fieldsets + (
        ("Expanse", {"fields": ("role", "station")}),
    )
