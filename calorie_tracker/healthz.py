from django.db import connections
from django.db.utils import OperationalError
from django.http import JsonResponse
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response


@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def healthz(_):
    """
    Liveness: 애플리케이션 프로세스가 살아있는지 확인 (DB 의존 없음)
    """
    return Response({"status": "ok"})


def readyz(_request):
    """
    Readiness: DB 연결 가능 여부로 200/503 판단 (쿠버네티스 readinessProbe 용)
    """
    try:
        connections["default"].cursor()
        return JsonResponse({"status": "ok"})
    except OperationalError:
        return JsonResponse({"status": "db-unavailable"}, status=503)
