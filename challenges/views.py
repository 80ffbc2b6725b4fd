# challenges/views.py
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from meals.serializers import parse_date_param

from .models import Event, EventParticipant
from .serializers import EventParticipantSerializer, EventSerializer, LeaderboardEntrySerializer
from .services import event_standings, refresh_leaderboard


class IsStaffOrReadOnly(permissions.BasePermission):
    """읽기는 로그인 사용자 누구나, 쓰기는 관리자만"""

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_staff)


class EventViewSet(viewsets.ModelViewSet):
    """
    - GET  /api/events/                  : 전체 목록
    - GET  /api/events/active/           : 오늘 진행 중인 이벤트
    - GET  /api/events/mine/             : 내가 참여한 이벤트
    - POST /api/events/{id}/join/        : 참여 (이미 참여 중이면 200)
    - POST /api/events/{id}/leave/       : 나가기
    - GET  /api/events/{id}/participants/
    - GET  /api/events/{id}/standings/   : 참여자별 목표 달성 일수
    """
    queryset = Event.objects.all()
    serializer_class = EventSerializer
    permission_classes = [permissions.IsAuthenticated, IsStaffOrReadOnly]

    @action(detail=False, methods=["get"], url_path="active")
    def active(self, request):
        today = timezone.localdate()
        qs = Event.objects.filter(event_start_date__lte=today, event_end_date__gte=today).order_by("event_start_date")
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=False, methods=["get"], url_path="mine")
    def mine(self, request):
        qs = Event.objects.filter(participants__user=request.user).order_by("-event_start_date")
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=True, methods=["post"], url_path="join", permission_classes=[permissions.IsAuthenticated])
    def join(self, request, pk=None):
        event = self.get_object()
        try:
            with transaction.atomic():
                participant, created = EventParticipant.objects.get_or_create(event=event, user=request.user)
        except IntegrityError:
            participant, created = EventParticipant.objects.get(event=event, user=request.user), False
        return Response(
            EventParticipantSerializer(participant).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @action(detail=True, methods=["post", "delete"], url_path="leave", permission_classes=[permissions.IsAuthenticated])
    def leave(self, request, pk=None):
        event = self.get_object()
        deleted, _ = EventParticipant.objects.filter(event=event, user=request.user).delete()
        if not deleted:
            return Response({"detail": "참여 중인 이벤트가 아닙니다."}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"], url_path="participants")
    def participants(self, request, pk=None):
        event = self.get_object()
        qs = event.participants.select_related("user")
        return Response(EventParticipantSerializer(qs, many=True).data)

    @action(detail=True, methods=["get"], url_path="standings")
    def standings(self, request, pk=None):
        event = self.get_object()
        return Response({"event": self.get_serializer(event).data, "standings": event_standings(event)})


class LeaderboardView(APIView):
    """
    GET /api/leaderboard/?date=YYYY-MM-DD&limit=10
    그날 DailyStats 로 순위를 다시 계산한 뒤 상위 N명을 돌려준다.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        value = request.query_params.get("date")
        target = parse_date_param(value) if value else timezone.localdate()
        try:
            limit = max(1, min(int(request.query_params.get("limit", 10)), 100))
        except ValueError:
            limit = 10

        entries = refresh_leaderboard(target)
        data = LeaderboardEntrySerializer(entries[:limit], many=True).data
        return Response({"date": target.isoformat(), "count": len(entries), "results": data})
