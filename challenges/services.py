"""
챌린지 집계.

- refresh_leaderboard(date): 그날 DailyStats 로 LeaderboardEntry 를 다시 만든다
  (끼니를 1개 이상 기록하고 목표를 달성한 사용자만, 총 열량 오름차순,
  동점은 같은 순위 1,1,3 방식)
- event_standings(event): 이벤트 기간 동안 daily_target 이하로 먹은 날 수
"""
import logging

from django.db import transaction
from django.db.models import Count, Q

from meals.models import DailyStats

from .models import EventParticipant, LeaderboardEntry

logger = logging.getLogger(__name__)


@transaction.atomic
def refresh_leaderboard(challenge_date):
    rows = list(
        DailyStats.objects.filter(stats_date=challenge_date, meals_logged__gt=0, goal_achieved=True)
        .order_by("total_calories", "user_id")
        .values_list("user_id", "total_calories")
    )

    entries = []
    rank, prev_total = 0, None
    for position, (user_id, total) in enumerate(rows, start=1):
        if total != prev_total:
            rank, prev_total = position, total
        entries.append(
            LeaderboardEntry(user_id=user_id, challenge_date=challenge_date, total_calories=total, rank=rank)
        )
    # 동시에 새로고침해도 (user, date) 충돌 없이 덮어쓴다
    LeaderboardEntry.objects.bulk_create(
        entries,
        update_conflicts=True,
        unique_fields=["user", "challenge_date"],
        update_fields=["total_calories", "rank"],
    )
    LeaderboardEntry.objects.filter(challenge_date=challenge_date).exclude(
        user_id__in=[user_id for user_id, _ in rows]
    ).delete()
    logger.info("leaderboard %s refreshed: %d entries", challenge_date, len(entries))
    return entries


def event_standings(event):
    """참여자별 성공일 수 (끼니 기록이 있고 총 열량 <= daily_target 인 날)"""
    in_range = Q(
        user__daily_stats__stats_date__gte=event.event_start_date,
        user__daily_stats__stats_date__lte=event.event_end_date,
        user__daily_stats__meals_logged__gt=0,
    )
    qs = (
        EventParticipant.objects.filter(event=event)
        .select_related("user")
        .annotate(
            days_logged=Count("user__daily_stats", filter=in_range),
            days_on_target=Count(
                "user__daily_stats",
                filter=in_range & Q(user__daily_stats__total_calories__lte=event.daily_target),
            ),
        )
    )
    standings = [
        {
            "user_id": p.user_id,
            "username": p.user.username,
            "joined_date": p.joined_date.isoformat(),
            "days_logged": p.days_logged,
            "days_on_target": p.days_on_target,
        }
        for p in qs
    ]
    standings.sort(key=lambda s: (-s["days_on_target"], -s["days_logged"], s["username"]))
    return standings
