# meals/views.py
import logging
from datetime import timedelta

from django.db.models import Avg, Count
from django.utils import timezone
from rest_framework import exceptions, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from ai.vision import analyze_meal_photo
from utils.errors import UPLOAD_FAILED
from utils.exceptions import error_response

from . import services
from .aggregation import recompute_daily_stats
from .models import DailyStats, ItemSource, Meal, MealItem, Unit
from .photos import PhotoError, compress_photo, upload_meal_photo, validate_photo
from .serializers import (
    DailyStatsSerializer,
    DateRangeQuerySerializer,
    MealItemSerializer,
    MealSerializer,
    MealUploadSerializer,
    parse_date_param,
)

logger = logging.getLogger(__name__)

UNKNOWN_MEAL = "Unknown Meal"
REVIEW_NOTE = "Calories could not be detected, please review"
STREAK_WINDOW_DAYS = 90


def build_meal_name(food_names):
    """인식된 음식 앞 3개로 끼니 이름 생성 (최대 100자)"""
    names = [n for n in food_names if n][:3]
    if not names:
        return UNKNOWN_MEAL
    name = ", ".join(names)
    if len(name) > 100:
        name = name[:97] + "..."
    return name


def _round_kcal(value):
    return int(round(float(value)))


def meal_summary(meal):
    foods = [
        {"food_name": item.food_name, "calories": _round_kcal(item.calories)}
        for item in meal.items.all()
    ]
    return {
        "id": meal.id,
        "date": meal.meal_date.isoformat(),
        "meal_type": meal.meal_type,
        "photo_url": meal.photo_url,
        "meal_name": meal.meal_name,
        "needs_review": meal.needs_review,
        "foods": foods,
        "totalCalories": sum(f["calories"] for f in foods),
    }


# ─────────────────────────  식사(끼니)  ─────────────────────────
class MealViewSet(viewsets.ModelViewSet):
    """
    GET  /api/meals/?date=YYYY-MM-DD&meal_type=lunch
    POST /api/meals/upload/   (multipart: file, meal_type, meal_date)
    GET  /api/meals/history/?startDate=YYYY-MM-DD&endDate=YYYY-MM-DD
    """
    serializer_class = MealSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        qs = Meal.objects.filter(user=self.request.user).prefetch_related("items")
        qp = self.request.query_params
        if qp.get("date"):
            qs = qs.filter(meal_date=parse_date_param(qp["date"]))
        if qp.get("meal_type"):
            qs = qs.filter(meal_type=qp["meal_type"])
        return qs.order_by("-meal_date", "-created_at")

    def perform_create(self, serializer):
        data = dict(serializer.validated_data)
        items = data.pop("items", [])
        serializer.instance = services.create_meal(self.request.user, items=items, **data)

    def perform_update(self, serializer):
        data = dict(serializer.validated_data)
        data.pop("items", None)
        serializer.instance = services.update_meal(serializer.instance, **data)

    def perform_destroy(self, instance):
        services.delete_meal(instance)

    @action(
        detail=False,
        methods=["post"],
        url_path="upload",
        parser_classes=[MultiPartParser, FormParser],
    )
    def upload(self, request):
        ser = MealUploadSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        upload = ser.validated_data["file"]

        try:
            raw = upload.read()
            validate_photo(raw, getattr(upload, "content_type", None))
            photo_url = upload_meal_photo(compress_photo(raw), request.user.id)
        except PhotoError as e:
            if e.status_code >= 500:
                logger.warning("meal photo upload failed for user %s: %s", request.user.id, e.message)
                return error_response(UPLOAD_FAILED, e.status_code)
            raise exceptions.ValidationError({"file": [e.message]})

        result = analyze_meal_photo(photo_url)
        detected = result.success and bool(result.items)
        items = [
            {
                "food_name": food.food_name,
                "quantity": 1,
                "unit": Unit.PIECES,
                "calories": food.calories,
                "source": ItemSource.OCR_DETECTED,
                "confidence": food.confidence,
            }
            for food in (result.items if detected else [])
        ]

        meal = services.create_meal(
            request.user,
            meal_type=ser.validated_data["meal_type"],
            meal_date=ser.validated_data["meal_date"],
            meal_name=build_meal_name([f.food_name for f in result.items]) if detected else UNKNOWN_MEAL,
            photo_url=photo_url,
            needs_review=not detected,
            items=items,
        )

        body = {"mealId": meal.id, "photoUrl": photo_url, "needs_review": meal.needs_review}
        if detected:
            body["foods"] = [
                {
                    "food_name": f.food_name,
                    "portion": f.portion,
                    "calories": f.calories,
                    "confidence": f.confidence,
                }
                for f in result.items
            ]
            body["totalCalories"] = result.total_calories
        else:
            logger.info("meal %s saved without items: %s", meal.id, result.error)
            body["note"] = REVIEW_NOTE
        return Response(body, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path="history")
    def history(self, request):
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        start, end = query.validated_data["startDate"], query.validated_data["endDate"]

        meals = (
            Meal.objects.filter(user=request.user, meal_date__gte=start, meal_date__lte=end)
            .prefetch_related("items")
            .order_by("-meal_date", "-created_at")
        )
        entries = [meal_summary(m) for m in meals]
        return Response(
            {
                "meals": entries,
                "totalMealsLogged": len(entries),
                "dateRange": {"start": start.isoformat(), "end": end.isoformat()},
            }
        )


# ─────────────────────────  식사 항목  ─────────────────────────
class MealItemViewSet(viewsets.ModelViewSet):
    """
    MealItem 은 meal.user 를 통해 소유자가 결정됨.
    - 생성/수정 시 meal.user == request.user 검증
    - 저장/삭제는 meals.services 경유 (DailyStats 재계산)
    """
    serializer_class = MealItemSerializer
    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [JSONParser, FormParser, MultiPartParser]

    def get_queryset(self):
        qs = MealItem.objects.select_related("meal").filter(meal__user=self.request.user)
        meal_id = self.request.query_params.get("meal")
        if meal_id:
            qs = qs.filter(meal_id=meal_id)
        return qs.order_by("-id")

    def _assert_owner(self, meal):
        if meal is not None and meal.user_id != self.request.user.id:
            raise exceptions.PermissionDenied("본인 식사 항목만 추가/수정할 수 있습니다.")

    def perform_create(self, serializer):
        data = dict(serializer.validated_data)
        meal = data.pop("meal", None)
        if meal is None:
            raise exceptions.ValidationError({"meal": "이 필드는 필수입니다."})
        self._assert_owner(meal)
        serializer.instance = services.add_meal_item(meal, **data)

    def perform_update(self, serializer):
        data = dict(serializer.validated_data)
        self._assert_owner(data.get("meal"))
        serializer.instance = services.update_meal_item(serializer.instance, **data)

    def perform_destroy(self, instance):
        services.delete_meal_item(instance)

    @action(detail=False, methods=["get"], url_path="search")
    def search(self, request):
        """
        GET /api/mealitems/search/?q=rice
        내가 기록한 항목 중 이름 부분일치 → 음식별 평균 영양값/사용 횟수
        """
        q = (request.query_params.get("q") or "").strip()
        if not q:
            raise exceptions.ValidationError({"q": "검색어(q)를 입력해주세요."})

        qs = MealItem.objects.filter(meal__user=request.user, food_name__icontains=q)
        rows = list(
            qs.values("food_name")
            .annotate(
                avg_calories=Avg("calories"),
                avg_protein=Avg("protein"),
                avg_carbs=Avg("carbs"),
                avg_fat=Avg("fat"),
                usage_count=Count("id"),
            )
            .order_by("-usage_count", "food_name")[:20]
        )

        units = {}
        names = [r["food_name"] for r in rows]
        for name, unit in qs.filter(food_name__in=names).values_list("food_name", "unit").distinct():
            units.setdefault(name, set()).add(unit)

        results = [
            {
                "food_name": r["food_name"],
                "avg_calories": round(float(r["avg_calories"] or 0), 2),
                "avg_protein": round(float(r["avg_protein"] or 0), 2),
                "avg_carbs": round(float(r["avg_carbs"] or 0), 2),
                "avg_fat": round(float(r["avg_fat"] or 0), 2),
                "usage_count": r["usage_count"],
                "units": sorted(units.get(r["food_name"], ())),
            }
            for r in rows
        ]
        return Response({"query": q, "results": results})


# ─────────────────────────  하루 합계(집계)  ─────────────────────────
def compute_streaks(rows):
    """
    rows: DailyStats (stats_date 오름차순)
    goal_achieved 값이 같은 연속 구간을 묶어서 최신 구간부터 반환.
    """
    runs = []
    for row in rows:
        if runs and runs[-1]["goal_achieved"] == row.goal_achieved:
            runs[-1]["streak_end"] = row.stats_date
            runs[-1]["streak_length"] += 1
        else:
            runs.append({
                "streak_start": row.stats_date,
                "streak_end": row.stats_date,
                "streak_length": 1,
                "goal_achieved": row.goal_achieved,
            })

    longest = {True: 0, False: 0}
    for run in runs:
        longest[run["goal_achieved"]] = max(longest[run["goal_achieved"]], run["streak_length"])
    current = runs[-1]["streak_length"] if runs and runs[-1]["goal_achieved"] else 0

    for run in runs:
        run["streak_start"] = run["streak_start"].isoformat()
        run["streak_end"] = run["streak_end"].isoformat()

    return {
        "current_streak": current,
        "longest_achieved_streak": longest[True],
        "longest_missed_streak": longest[False],
        "streaks": list(reversed(runs)),
    }


class DailyStatsViewSet(viewsets.ReadOnlyModelViewSet):
    """
    DailyStats 는 meals.aggregation 만 쓴다 (여기서는 읽기 + 강제 재계산).
      * GET  /api/dailystats/?start=YYYY-MM-DD&end=YYYY-MM-DD
      * GET  /api/dailystats/by-date/?date=YYYY-MM-DD
      * POST /api/dailystats/{id}/recalc/
      * GET  /api/dailystats/streaks/
    """
    serializer_class = DailyStatsSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        qs = DailyStats.objects.filter(user=self.request.user)
        qp = self.request.query_params
        if qp.get("start"):
            qs = qs.filter(stats_date__gte=parse_date_param(qp["start"], "start"))
        if qp.get("end"):
            qs = qs.filter(stats_date__lte=parse_date_param(qp["end"], "end"))
        return qs.order_by("-stats_date")

    @action(detail=False, methods=["get"], url_path="by-date")
    def by_date(self, request):
        value = request.query_params.get("date")
        if not value:
            raise exceptions.ValidationError({"date": "date=YYYY-MM-DD 쿼리 파라미터가 필요합니다."})
        inst = DailyStats.objects.filter(user=request.user, stats_date=parse_date_param(value)).first()
        if not inst:
            raise exceptions.NotFound("해당 날짜의 기록이 없습니다.")
        return Response(self.get_serializer(inst).data)

    @action(detail=True, methods=["post"], url_path="recalc")
    def recalc(self, request, pk=None):
        stats = self.get_object()
        stats = recompute_daily_stats(stats.user_id, stats.stats_date)
        return Response(self.get_serializer(stats).data)

    @action(detail=False, methods=["get"], url_path="streaks")
    def streaks(self, request):
        end = timezone.localdate()
        start = end - timedelta(days=STREAK_WINDOW_DAYS - 1)
        rows = DailyStats.objects.filter(
            user=request.user, stats_date__gte=start, stats_date__lte=end
        ).order_by("stats_date")
        data = compute_streaks(rows)
        data.update({"start": start.isoformat(), "end": end.isoformat()})
        return Response(data)
