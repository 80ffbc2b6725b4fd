import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework.exceptions import (
    AuthenticationFailed,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    Throttled,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .errors import (
    BAD_REQUEST,
    FORBIDDEN,
    NOT_FOUND as E_NOT_FOUND,
    SERVER_ERROR,
    THROTTLED,
    UNAUTHORIZED,
)

logger = logging.getLogger(__name__)


def _detail_message(response, default):
    data = response.data
    if isinstance(data, dict) and "detail" in data:
        return str(data["detail"])
    return default


def custom_exception_handler(exc, context):
    """
    DRF의 기본 exception_handler로 1차 변환 후,
    우리 프로젝트의 통일된 에러 포맷으로 감싸서 반환.
    """
    response = exception_handler(exc, context)

    if response is None:
        # DRF가 처리하지 못한 예외는 500으로 통일
        logger.exception("unhandled API error: %s", exc)
        return Response(SERVER_ERROR.envelope(), status=SERVER_ERROR.status_code)

    if isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
        error, msg = UNAUTHORIZED, _detail_message(response, UNAUTHORIZED.message)
    elif isinstance(exc, (PermissionDenied, DjangoPermissionDenied)):
        error, msg = FORBIDDEN, _detail_message(response, FORBIDDEN.message)
    elif isinstance(exc, (NotFound, Http404)):
        error, msg = E_NOT_FOUND, None
    elif isinstance(exc, ValidationError):
        error, msg = BAD_REQUEST, response.data
    elif isinstance(exc, Throttled):
        error, msg = THROTTLED, None
    else:
        # 405, 415 등은 DRF 상태코드를 유지
        response.data = SERVER_ERROR.envelope(response.data, response.status_code)
        return response

    response.data = error.envelope(msg)
    response.status_code = error.status_code
    return response


def error_response(error, http_status=None, message=None):
    """뷰에서 직접 에러를 돌려줄 때도 같은 포맷 사용"""
    http_status = http_status or error.status_code
    return Response(error.envelope(message, http_status), status=http_status)
