# meals/management/commands/seed_meals.py
import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from meals import services
from meals.models import ItemSource, MealType, Unit
from users.models import CustomUser

# (음식, kcal, 단백질, 탄수화물, 지방)
SAMPLE_FOODS = [
    ("Scrambled Eggs", 210, 14, 2, 16),
    ("Banana", 105, 1.3, 27, 0.4),
    ("Grilled Chicken Breast", 248, 46, 0, 5),
    ("Brown Rice", 112, 2.6, 23, 0.9),
    ("Steamed Broccoli", 34, 2.8, 7, 0.4),
    ("Greek Yogurt", 100, 17, 6, 0.7),
    ("Salmon Fillet", 367, 39, 0, 22),
    ("Oatmeal", 150, 5, 27, 3),
    ("Apple", 95, 0.5, 25, 0.3),
    ("Kimchi Fried Rice", 520, 12, 78, 16),
]
DEMO_PASSWORD = "demo1234!"


class Command(BaseCommand):
    help = "데모 사용자와 최근 N일치 Meal/MealItem 을 만들어 DailyStats 를 채웁니다."

    def add_arguments(self, parser):
        parser.add_argument("--days", type=int, default=14, help="과거 며칠치 생성할지 (기본 14)")
        parser.add_argument("--users", type=int, default=3, help="데모 사용자 수 (기본 3)")
        parser.add_argument("--only-user", type=str, default=None, help="기존 username만 대상")
        parser.add_argument("--seed", type=int, default=None, help="난수 시드 고정(재현성)")

    @transaction.atomic
    def handle(self, *args, **opts):
        if opts["seed"] is not None:
            random.seed(opts["seed"])

        if opts["only_user"]:
            users = list(CustomUser.objects.filter(username=opts["only_user"]))
        else:
            users = []
            for i in range(1, opts["users"] + 1):
                user, created = CustomUser.objects.get_or_create(
                    username=f"demo{i}",
                    defaults={"email": f"demo{i}@example.com", "daily_calorie_goal": random.choice([1800, 2000, 2200])},
                )
                if created:
                    user.set_password(DEMO_PASSWORD)
                    user.save(update_fields=["password"])
                users.append(user)

        if not users:
            self.stdout.write(self.style.ERROR("대상 사용자(들)가 없습니다."))
            return

        today = timezone.localdate()
        created_meals = created_items = 0

        for user in users:
            for d in range(opts["days"]):
                meal_date = today - timedelta(days=d)
                n_meals = random.randint(2, 4)
                for meal_type in random.sample(list(MealType.values), k=n_meals):
                    foods = random.sample(SAMPLE_FOODS, k=random.randint(1, 3))
                    items = [
                        {
                            "food_name": name,
                            "quantity": 1,
                            "unit": Unit.PIECES,
                            "calories": kcal,
                            "protein": protein,
                            "carbs": carbs,
                            "fat": fat,
                            "source": ItemSource.MANUAL_ENTRY,
                        }
                        for name, kcal, protein, carbs, fat in foods
                    ]
                    services.create_meal(
                        user,
                        meal_type=meal_type,
                        meal_date=meal_date,
                        meal_name=", ".join(f[0] for f in foods),
                        items=items,
                    )
                    created_meals += 1
                    created_items += len(items)

        self.stdout.write(self.style.SUCCESS(
            f"생성 완료: users={len(users)}, meals={created_meals}, items={created_items}"
        ))
