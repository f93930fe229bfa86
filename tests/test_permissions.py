import pytest
from rest_framework.exceptions import NotAuthenticated
from django.contrib.auth.models import AnonymousUser

from accounts.models import Role
from accounts.permissions import OwnsRating, OwnsResource, RoleIn, authorize, enforce
from common.exceptions import Forbidden, ResourceNotFound, StoreNotFound
from ratings.models import Rating


@pytest.mark.parametrize("raw, expected", [
    ("ADMIN", Role.ADMIN),
    ("admin", Role.ADMIN),
    (" Store_Owner ", Role.STORE_OWNER),
    ("SYSTEM_ADMIN", Role.ADMIN),
    (Role.NORMAL_USER, Role.NORMAL_USER),
])
def test_role_parse(raw, expected):
    assert Role.parse(raw) is expected


@pytest.mark.parametrize("raw", ["", "root", None, 3])
def test_role_parse_rejects_unknown(raw):
    with pytest.raises(ValueError):
        Role.parse(raw)


def test_role_in(admin_user, normal_user):
    requirement = RoleIn.of("admin", "store_owner")

    assert authorize(admin_user, requirement).allowed
    decision = authorize(normal_user, requirement)
    assert not decision.allowed
    assert decision.error is Forbidden


def test_anonymous_is_denied():
    decision = authorize(AnonymousUser(), RoleIn.of(Role.ADMIN))
    assert not decision
    assert decision.error is NotAuthenticated


def test_owner_of_store_is_allowed(owner_user, make_store):
    store = make_store(owner=owner_user)
    assert authorize(owner_user, OwnsResource(store.pk)).allowed


def test_admin_is_allowed_on_any_store(admin_user, make_store):
    store = make_store()
    assert authorize(admin_user, OwnsResource(store.pk)).allowed


def test_other_store_owner_is_forbidden(owner_user, make_user, make_store):
    store = make_store(owner=owner_user)
    stranger = make_user(role=Role.STORE_OWNER)

    decision = authorize(stranger, OwnsResource(store.pk))
    assert not decision.allowed
    assert decision.error is Forbidden
    with pytest.raises(Forbidden):
        enforce(stranger, OwnsResource(store.pk))


def test_normal_user_never_owns_a_store(normal_user, make_store):
    store = make_store()
    decision = authorize(normal_user, OwnsResource(store.pk))
    assert decision.error is Forbidden


def test_unowned_store_is_forbidden_for_store_owner(owner_user, make_store):
    store = make_store(owner=None)
    assert not authorize(owner_user, OwnsResource(store.pk)).allowed


@pytest.mark.parametrize("role", [Role.ADMIN, Role.STORE_OWNER, Role.NORMAL_USER])
def test_missing_store_is_not_found(make_user, role):
    user = make_user(role=role)
    with pytest.raises(StoreNotFound):
        enforce(user, OwnsResource(999999))


def test_rating_author_or_admin(make_user, normal_user, admin_user, make_store):
    store = make_store()
    rating = Rating.objects.create(user=normal_user, store=store, score=4)
    other = make_user()

    assert authorize(normal_user, OwnsRating(rating.pk)).allowed
    assert authorize(admin_user, OwnsRating(rating.pk)).allowed
    assert authorize(other, OwnsRating(rating.pk)).error is Forbidden
    assert authorize(other, OwnsRating(424242)).error is ResourceNotFound
