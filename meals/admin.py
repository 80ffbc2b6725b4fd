from django.contrib import admin

from . import services
from .aggregation import recompute_buckets
from .models import DailyStats, Meal, MealItem


@admin.register(Meal)
class MealAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "meal_date", "meal_type", "meal_name", "needs_review")
    list_filter = ("meal_type", "needs_review", "meal_date")
    search_fields = ("meal_name", "user__username")

    def save_model(self, request, obj, form, change):
        old_bucket = Meal.objects.filter(pk=obj.pk).values_list("user_id", "meal_date").first()
        super().save_model(request, obj, form, change)
        recompute_buckets([old_bucket, obj.bucket])

    def delete_model(self, request, obj):
        services.delete_meal(obj)

    def delete_queryset(self, request, queryset):
        for meal in queryset:
            services.delete_meal(meal)


@admin.register(MealItem)
class MealItemAdmin(admin.ModelAdmin):
    list_display = ("id", "meal", "food_name", "calories", "source")
    list_filter = ("source", "unit")
    search_fields = ("food_name",)

    def save_model(self, request, obj, form, change):
        old_bucket = None
        if obj.pk:
            old_bucket = Meal.objects.filter(items__pk=obj.pk).values_list("user_id", "meal_date").first()
        super().save_model(request, obj, form, change)
        recompute_buckets([old_bucket, obj.meal.bucket])

    def delete_model(self, request, obj):
        services.delete_meal_item(obj)

    def delete_queryset(self, request, queryset):
        for item in queryset:
            services.delete_meal_item(item)


@admin.register(DailyStats)
class DailyStatsAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "stats_date", "total_calories", "meals_logged", "goal_achieved")
    list_filter = ("goal_achieved", "stats_date")
    readonly_fields = ("user", "stats_date", "total_calories", "meals_logged", "goal_achieved")

    def has_add_permission(self, request):
        return False
