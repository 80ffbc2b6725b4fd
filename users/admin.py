from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    list_display = ("id", "username", "email", "daily_calorie_goal", "is_active", "created_at")
    search_fields = ("username", "email")
    fieldsets = UserAdmin.fieldsets + (
        ("식단 목표", {"fields": ("daily_calorie_goal",)}),
    )
