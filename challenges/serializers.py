from rest_framework import serializers

from .models import Event, EventParticipant, LeaderboardEntry


class EventSerializer(serializers.ModelSerializer):
    participant_count = serializers.IntegerField(source="participants.count", read_only=True)

    class Meta:
        model = Event
        fields = [
            "id",
            "event_name",
            "event_start_date",
            "event_end_date",
            "event_type",
            "daily_target",
            "participant_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]

    def validate_daily_target(self, value):
        if value <= 0:
            raise serializers.ValidationError("daily_target 은 0보다 커야 합니다.")
        return value

    def validate(self, attrs):
        start = attrs.get("event_start_date", getattr(self.instance, "event_start_date", None))
        end = attrs.get("event_end_date", getattr(self.instance, "event_end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"event_end_date": "종료일은 시작일보다 빠를 수 없습니다."})
        return attrs


class EventParticipantSerializer(serializers.ModelSerializer):
    username = serializers.ReadOnlyField(source="user.username")
    email = serializers.ReadOnlyField(source="user.email")

    class Meta:
        model = EventParticipant
        fields = ["id", "event", "user", "username", "email", "joined_date"]
        read_only_fields = fields


class LeaderboardEntrySerializer(serializers.ModelSerializer):
    username = serializers.ReadOnlyField(source="user.username")
    total_calories = serializers.FloatField(read_only=True)

    class Meta:
        model = LeaderboardEntry
        fields = ["rank", "user", "username", "challenge_date", "total_calories"]
        read_only_fields = fields
