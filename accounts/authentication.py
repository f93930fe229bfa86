"""
Bearer 토큰 검증.

simplejwt 가 발급한 access 토큰의 서명/만료를 확인하고 토큰의 subject 를
계정으로 되돌린다. 실패 사유별로 다른 예외를 던진다.
"""
import logging

import jwt
from django.db import DatabaseError
from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework_simplejwt.settings import api_settings

from common.exceptions import (
    BackendUnavailable,
    ExpiredCredential,
    InvalidCredential,
    UnknownSubject,
)
from .models import User

logger = logging.getLogger(__name__)

AUTH_HEADER_TYPE = "Bearer"


def _decode(token):
    try:
        return jwt.decode(
            token,
            api_settings.VERIFYING_KEY or api_settings.SIGNING_KEY,
            algorithms=[api_settings.ALGORITHM],
            leeway=api_settings.LEEWAY,
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise ExpiredCredential()
    except jwt.InvalidTokenError:
        raise InvalidCredential()


def verify(token, using="default"):
    """토큰 -> User (id, name, email, role 만 로드). 읽기 전용."""
    if not token or not isinstance(token, str):
        raise InvalidCredential()

    payload = _decode(token)

    if payload.get(api_settings.TOKEN_TYPE_CLAIM) != "access":
        raise InvalidCredential()

    user_id = payload.get(api_settings.USER_ID_CLAIM)
    if user_id is None:
        raise InvalidCredential()

    try:
        return (
            User.objects.using(using)
            .only("id", "name", "email", "role")
            .get(id=user_id, is_active=True)
        )
    except (User.DoesNotExist, ValueError, TypeError):
        raise UnknownSubject()
    except DatabaseError:
        logger.exception("Identity lookup failed for subject %s", user_id)
        raise BackendUnavailable()


class BearerTokenAuthentication(BaseAuthentication):
    """
    ``Authorization: Bearer <token>`` 헤더 인증.
    헤더가 없으면 None (익명) -> 권한 클래스에서 401.
    """

    def authenticate(self, request):
        header = get_authorization_header(request).split()
        if not header or header[0].decode("latin-1").lower() != AUTH_HEADER_TYPE.lower():
            return None
        if len(header) != 2:
            raise InvalidCredential()

        try:
            token = header[1].decode("utf-8")
        except UnicodeError:
            raise InvalidCredential()

        try:
            user = verify(token)
        except (InvalidCredential, ExpiredCredential, UnknownSubject) as e:
            logger.warning("Rejected bearer token: %s", e.default_code)
            raise
        return user, token

    def authenticate_header(self, request):
        return AUTH_HEADER_TYPE
