"""
권한 게이트.

요청마다 인증된 계정(identity)과 요구 조건(requirement)을 받아 허용/거부를 결정한다.
거부되면 뷰 로직(조회/변경)이 실행되기 전에 요청이 끝난다.
"""
import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional, Type

from django.db import DatabaseError
from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import BasePermission

from common.exceptions import BackendUnavailable, Forbidden, ResourceNotFound, StoreNotFound
from .models import Role

logger = logging.getLogger(__name__)


# ── 요구 조건 ─────────────────────────────────────────

@dataclass(frozen=True)
class RoleIn:
    roles: FrozenSet[Role]

    @classmethod
    def of(cls, *roles):
        return cls(frozenset(Role.parse(r) for r in roles))


@dataclass(frozen=True)
class OwnsResource:
    """가게 소유 여부. ADMIN 이거나 해당 가게의 점주여야 한다."""
    store_id: int


@dataclass(frozen=True)
class OwnsRating:
    """평점 작성자 본인 또는 ADMIN."""
    rating_id: int


# ── 결정 ──────────────────────────────────────────────

@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""
    error: Optional[Type[Exception]] = None

    def __bool__(self):
        return self.allowed


ALLOW = Decision(True)


def deny(reason, error=Forbidden):
    return Decision(False, reason, error)


def _role_of(identity):
    try:
        return Role.parse(getattr(identity, "role", None))
    except ValueError:
        return None


def authorize(identity, requirement, using="default"):
    if identity is None or not getattr(identity, "is_authenticated", False):
        return deny("Authentication required", NotAuthenticated)

    role = _role_of(identity)

    if isinstance(requirement, RoleIn):
        if role in requirement.roles:
            return ALLOW
        return deny("Access denied. Insufficient permissions.")

    if isinstance(requirement, OwnsResource):
        from stores.models import Store

        try:
            owner_ids = list(
                Store.objects.using(using)
                .filter(pk=requirement.store_id)
                .values_list("owner_id", flat=True)[:1]
            )
        except (ValueError, TypeError):
            return deny("Store not found", StoreNotFound)
        except DatabaseError:
            logger.exception("Ownership lookup failed for store %s", requirement.store_id)
            raise BackendUnavailable()

        if not owner_ids:
            return deny("Store not found", StoreNotFound)
        if role == Role.ADMIN:
            return ALLOW
        if role == Role.STORE_OWNER and owner_ids[0] == identity.id:
            return ALLOW
        return deny("Access denied. You can only access your own store.")

    if isinstance(requirement, OwnsRating):
        from ratings.models import Rating

        try:
            author_ids = list(
                Rating.objects.using(using)
                .filter(pk=requirement.rating_id)
                .values_list("user_id", flat=True)[:1]
            )
        except (ValueError, TypeError):
            return deny("Rating not found", ResourceNotFound)
        except DatabaseError:
            logger.exception("Author lookup failed for rating %s", requirement.rating_id)
            raise BackendUnavailable()

        if not author_ids:
            return deny("Rating not found", ResourceNotFound)
        if role == Role.ADMIN or author_ids[0] == identity.id:
            return ALLOW
        return deny("Access denied. You can only change your own rating.")

    raise TypeError(f"Unsupported requirement: {requirement!r}")


def enforce(identity, requirement, using="default"):
    """거부면 해당 예외를 던진다."""
    decision = authorize(identity, requirement, using=using)
    if not decision.allowed:
        logger.warning(
            "Denied %s for account %s: %s",
            requirement, getattr(identity, "id", None), decision.reason,
        )
        raise decision.error(decision.reason)
    return decision


# ── DRF 권한 클래스 ────────────────────────────────────

class RolePermission(BasePermission):
    allowed_roles = ()

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            # DRF 가 NotAuthenticated(401) 로 응답
            return False
        enforce(request.user, RoleIn.of(*self.allowed_roles))
        return True


class IsAdmin(RolePermission):
    allowed_roles = (Role.ADMIN,)


class IsNormalUser(RolePermission):
    allowed_roles = (Role.NORMAL_USER,)


class IsStoreOwnerOfStore(BasePermission):
    """URL 의 store_id 에 대해 OwnsResource 검사."""

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        enforce(request.user, OwnsResource(view.kwargs["store_id"]))
        return True


class IsRatingAuthorOrAdmin(BasePermission):

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        enforce(request.user, OwnsRating(view.kwargs["rating_id"]))
        return True
