from django.contrib import admin

from .models import Event, EventParticipant, LeaderboardEntry


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("id", "event_name", "event_type", "event_start_date", "event_end_date", "daily_target")
    list_filter = ("event_type",)


@admin.register(EventParticipant)
class EventParticipantAdmin(admin.ModelAdmin):
    list_display = ("id", "event", "user", "joined_date")


@admin.register(LeaderboardEntry)
class LeaderboardEntryAdmin(admin.ModelAdmin):
    list_display = ("id", "challenge_date", "rank", "user", "total_calories")
    list_filter = ("challenge_date",)
