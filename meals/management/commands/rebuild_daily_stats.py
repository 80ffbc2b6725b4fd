from django.core.management.base import BaseCommand, CommandError

from meals.aggregation import rebuild_all
from meals.models import DailyStats, Meal
from users.models import CustomUser


class Command(BaseCommand):
    help = "모든 (사용자, 날짜) 버킷의 DailyStats 를 MealItem 기준으로 다시 계산합니다."

    def add_arguments(self, parser):
        parser.add_argument("--only-user", type=str, default=None, help="특정 username만")
        parser.add_argument("--dry-run", action="store_true", help="대상 건수만 출력")

    def handle(self, *args, **opt):
        user = None
        if opt["only_user"]:
            user = CustomUser.objects.filter(username=opt["only_user"]).first()
            if user is None:
                raise CommandError(f"username={opt['only_user']} 없음")

        meals_qs = Meal.objects.all()
        stats_qs = DailyStats.objects.all()
        if user is not None:
            meals_qs = meals_qs.filter(user=user)
            stats_qs = stats_qs.filter(user=user)
        buckets = meals_qs.values_list("user_id", "meal_date").distinct().count()
        self.stdout.write(f"[대상] 끼니 버킷={buckets}, 기존 DailyStats={stats_qs.count()}")

        if opt["dry_run"]:
            self.stdout.write(self.style.WARNING("DRY-RUN: 저장하지 않았습니다."))
            return

        rebuilt = rebuild_all(user=user)
        self.stdout.write(self.style.SUCCESS(f"재계산 완료: DailyStats {rebuilt}건"))
