"""
앱 공통 에러 분류.

응답 형태(``{"message": ...}``)는 ``common.handlers.api_exception_handler`` 가 만든다.
"""
from rest_framework import exceptions, status

# 잘못된 형식 또는 범위를 벗어난 입력 (400)
ValidationError = exceptions.ValidationError


class InvalidCredential(exceptions.AuthenticationFailed):
    default_detail = "Invalid token"
    default_code = "invalid_credential"


class ExpiredCredential(exceptions.AuthenticationFailed):
    default_detail = "Token expired"
    default_code = "expired_credential"


class UnknownSubject(exceptions.AuthenticationFailed):
    default_detail = "Invalid token - user not found"
    default_code = "unknown_subject"


class Forbidden(exceptions.PermissionDenied):
    default_detail = "Access denied. Insufficient permissions."
    default_code = "forbidden"


class ResourceNotFound(exceptions.NotFound):
    default_detail = "Resource not found"
    default_code = "not_found"


class StoreNotFound(ResourceNotFound):
    default_detail = "Store not found"
    default_code = "store_not_found"


class BackendUnavailable(exceptions.APIException):
    """일시적인 DB 장애. 조회만 재시도해도 안전하다."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Service temporarily unavailable, please retry"
    default_code = "backend_unavailable"
