"""
식사 사진 음식 인식 (OpenRouter vision 모델).

- OPENROUTER_API_KEY 가 없으면 mock 결과를 돌려준다 (로컬/테스트용)
- 네트워크/응답 형식 오류는 VISION_MAX_RETRIES 만큼 재시도 (1초, 2초 대기)
- 음식이 하나도 없으면(빈 배열) 재시도 없이 실패로 돌려준다
"""
import json
import logging
import math
import re
import time
from dataclasses import dataclass, field
from typing import List, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

PROMPT = """You are a nutrition expert. Analyze this meal photo and identify ALL visible food items.

For EACH food item you see, provide:
1. food_name: The specific name of the food (e.g., "Grilled Chicken Breast", "Brown Rice")
2. portion: Estimated portion size with unit (e.g., "150g", "1 cup", "2 slices")
3. calories: Estimated calories as a number (e.g., 250)

Return ONLY a JSON array in this exact format: [{"food_name": "...", "portion": "...", "calories": 200}]
If you truly cannot identify any food, return an empty array: []"""

FENCED_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
ARRAY_RE = re.compile(r"(\[[\s\S]*\])")

MOCK_ITEMS = [
    {"food_name": "Grilled Chicken Breast", "portion": "150g", "calories": 248, "confidence": 0.92},
    {"food_name": "Brown Rice", "portion": "100g", "calories": 112, "confidence": 0.88},
    {"food_name": "Steamed Broccoli", "portion": "100g", "calories": 34, "confidence": 0.85},
]

NO_FOOD_MESSAGE = "No food items detected in the image. Please ensure the image contains visible food."
PLACEHOLDER_KEY = "your_openrouter_api_key_here"
# MealItem.calories (max_digits=8, decimal_places=2)
MAX_ITEM_CALORIES = 999999.99


class VisionError(Exception):
    pass


@dataclass
class DetectedFood:
    food_name: str
    portion: str
    calories: float
    confidence: float


@dataclass
class AnalysisResult:
    success: bool
    items: List[DetectedFood] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def total_calories(self) -> float:
        return sum(item.calories for item in self.items)


def _to_food(raw: dict, default_confidence: float) -> DetectedFood:
    if not isinstance(raw, dict) or not raw.get("food_name"):
        raise VisionError(f"Invalid food item in response: {raw!r}")
    try:
        calories = float(raw.get("calories") or 0)
    except (TypeError, ValueError):
        raise VisionError(f"Invalid calories value: {raw.get('calories')!r}")
    if not math.isfinite(calories) or calories > MAX_ITEM_CALORIES:
        raise VisionError(f"Invalid calories value: {raw.get('calories')!r}")
    return DetectedFood(
        food_name=str(raw["food_name"]).strip(),
        portion=str(raw.get("portion") or ""),
        calories=max(calories, 0.0),
        confidence=_to_confidence(raw.get("confidence"), default_confidence),
    )


def _to_confidence(value, default_confidence: float) -> float:
    # 숫자가 아니거나 0~1 범위를 벗어나면 기본값
    if value is None or isinstance(value, bool):
        return default_confidence
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        logger.warning("ignoring non-numeric confidence %r", value)
        return default_confidence
    if not 0.0 <= confidence <= 1.0:
        logger.warning("ignoring out-of-range confidence %r", value)
        return default_confidence
    return confidence


def parse_food_items(content: str, default_confidence: float = 0.85) -> List[DetectedFood]:
    """
    모델 응답 텍스트에서 JSON 배열을 꺼낸다.
    ```json ... ``` 코드블록 또는 본문 안의 [...] 모두 허용.
    """
    match = FENCED_RE.search(content) or ARRAY_RE.search(content)
    if not match:
        raise VisionError("Could not extract JSON from response")
    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError:
        raise VisionError("Failed to parse API response")
    if not isinstance(data, list):
        raise VisionError("Invalid response format: expected array of food items")
    return [_to_food(raw, default_confidence) for raw in data]


def _call_openrouter(image_url: str) -> AnalysisResult:
    headers = {
        "Authorization": f"Bearer {settings.OPENROUTER_API_KEY}",
        "Content-Type": "application/json",
    }
    payload = {
        "model": settings.OPENROUTER_MODEL,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "image_url", "image_url": {"url": image_url}},
                    {"type": "text", "text": PROMPT},
                ],
            }
        ],
        "max_tokens": 1000,
        "temperature": 0.3,
    }

    try:
        r = requests.post(
            settings.OPENROUTER_API_URL,
            headers=headers,
            json=payload,
            timeout=settings.VISION_REQUEST_TIMEOUT,
        )
    except requests.Timeout:
        raise VisionError("Request timeout")
    except requests.RequestException as e:
        raise VisionError(f"Network error: {e}")

    if r.status_code != 200:
        raise VisionError(f"API error: {r.status_code} - {r.text}")

    try:
        content = r.json()["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError):
        raise VisionError("No content in API response")
    if not content:
        raise VisionError("No content in API response")

    items = parse_food_items(content, settings.VISION_DEFAULT_CONFIDENCE)
    if not items:
        logger.info("no food items detected in %s", image_url)
        return AnalysisResult(success=False, error=NO_FOOD_MESSAGE)
    return AnalysisResult(success=True, items=items)


def analyze_mock(image_url: str) -> AnalysisResult:
    logger.info("vision mock mode: %s", image_url)
    return AnalysisResult(
        success=True,
        items=[_to_food(raw, settings.VISION_DEFAULT_CONFIDENCE) for raw in MOCK_ITEMS],
    )


def analyze_meal_photo(image_url: str) -> AnalysisResult:
    """
    사진 URL → 인식 결과. 예외를 던지지 않고 항상 AnalysisResult 를 돌려준다.
    실패 시 success=False, error 메시지 포함.
    """
    if settings.OPENROUTER_API_KEY in ("", PLACEHOLDER_KEY):
        return analyze_mock(image_url)

    retries = settings.VISION_MAX_RETRIES
    last_error = "Unknown error"
    for attempt in range(retries + 1):
        try:
            result = _call_openrouter(image_url)
            logger.info("vision detected %d items (%.0f kcal)", len(result.items), result.total_calories)
            return result
        except VisionError as e:
            last_error = str(e)
            logger.warning("vision attempt %d/%d failed: %s", attempt + 1, retries + 1, last_error)
            if attempt < retries:
                time.sleep(1 * (attempt + 1))

    return AnalysisResult(success=False, error=f"Failed after {retries + 1} attempts: {last_error}")
