from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from meals.models import DailyStats, Meal, MealItem
from users.models import CustomUser


class Command(BaseCommand):
    help = "식단 데이터 보존정책: 최근 N일만 남기고 과거 Meal/MealItem/DailyStats 삭제"

    def add_arguments(self, parser):
        parser.add_argument("--days", type=int, default=365, help="최근 며칠을 보존할지 (기본 365)")
        parser.add_argument("--only-user", type=str, default=None, help="특정 username만")
        parser.add_argument("--dry-run", action="store_true", help="건수만 출력(삭제 안 함)")

    def handle(self, *args, **opt):
        days = opt["days"]
        if days <= 0:
            raise CommandError("--days 는 양수여야 합니다.")
        cutoff = timezone.localdate() - timedelta(days=days)
        self.stdout.write(self.style.NOTICE(f"보존 기준(포함 X): {cutoff} 이전 데이터 삭제"))

        meals_qs = Meal.objects.filter(meal_date__lt=cutoff)
        items_qs = MealItem.objects.filter(meal__meal_date__lt=cutoff)
        stats_qs = DailyStats.objects.filter(stats_date__lt=cutoff)

        if opt["only_user"]:
            users = CustomUser.objects.filter(username=opt["only_user"])
            if not users.exists():
                raise CommandError(f"username={opt['only_user']} 없음")
            meals_qs = meals_qs.filter(user__in=users)
            items_qs = items_qs.filter(meal__user__in=users)
            stats_qs = stats_qs.filter(user__in=users)

        self.stdout.write(
            f"[대상] MealItem={items_qs.count()}, Meal={meals_qs.count()}, DailyStats={stats_qs.count()}"
        )

        if opt["dry_run"]:
            self.stdout.write(self.style.WARNING("DRY-RUN: 삭제하지 않았습니다."))
            return

        # 기준일 이전 버킷은 통째로 지우므로 재계산 없이 함께 삭제
        with transaction.atomic():
            items_deleted = items_qs.delete()[0]
            meals_deleted = meals_qs.delete()[0]
            stats_deleted = stats_qs.delete()[0]

        self.stdout.write(self.style.SUCCESS(
            f"삭제 완료: DailyStats={stats_deleted}, MealItem={items_deleted}, Meal={meals_deleted} "
            f"(최근 {days}일 보존)"
        ))
