"""
DRF 예외 핸들러.

모든 실패는 해당 클래스의 상태 코드와 함께 ``{"message": ...}`` 형태로 응답한다.
필드 단위 유효성 검사 실패는 ``errors`` 도 함께 담는다.
"""
import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _single_message(detail):
    if isinstance(detail, list) and len(detail) == 1 and isinstance(detail[0], str):
        return str(detail[0])
    if isinstance(detail, str):
        return str(detail)
    return None


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "request")
        return Response(
            {"message": "Internal server error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    detail = getattr(exc, "detail", None)
    if isinstance(exc, exceptions.ValidationError):
        message = _single_message(detail)
        if message is not None:
            response.data = {"message": message}
        else:
            response.data = {"message": "Validation failed", "errors": response.data}
    else:
        message = _single_message(detail)
        response.data = {"message": message if message is not None else str(detail)}

    if response.status_code >= 500:
        logger.error("Request failed with %s: %s", response.status_code, response.data["message"])
    return response
