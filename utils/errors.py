from dataclasses import dataclass

from rest_framework import status


@dataclass(frozen=True)
class ErrorDef:
    """에러 코드 + 기본 메시지 + HTTP 상태. 응답 본문은 envelope() 로 만든다."""
    code: str
    message: str
    status_code: int = status.HTTP_400_BAD_REQUEST

    def envelope(self, message=None, status_code=None):
        return {
            "error": {
                "code": self.code,
                "message": self.message if message is None else message,
                "status_code": status_code or self.status_code,
            }
        }


SERVER_ERROR = ErrorDef("server_error", "서버 내부 오류가 발생했습니다.", status.HTTP_500_INTERNAL_SERVER_ERROR)
UNAUTHORIZED = ErrorDef("unauthorized", "인증이 필요합니다.", status.HTTP_401_UNAUTHORIZED)
FORBIDDEN = ErrorDef("forbidden", "이 요청을 수행할 권한이 없습니다.", status.HTTP_403_FORBIDDEN)
NOT_FOUND = ErrorDef("not_found", "요청한 항목을 찾을 수 없습니다.", status.HTTP_404_NOT_FOUND)
BAD_REQUEST = ErrorDef("bad_request", "요청 값이 올바르지 않습니다.")
THROTTLED = ErrorDef(
    "throttled", "로그인 시도가 너무 많습니다. 잠시 후 다시 시도해 주세요.", status.HTTP_429_TOO_MANY_REQUESTS
)
# 사진 저장소(R2/로컬) 실패. 잘못된 파일은 PhotoError 의 400 을 그대로 쓴다
UPLOAD_FAILED = ErrorDef(
    "upload_failed", "사진 업로드에 실패했습니다. 잠시 후 다시 시도해 주세요.", status.HTTP_500_INTERNAL_SERVER_ERROR
)
