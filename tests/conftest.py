import itertools

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.models import Role, User
from stores.models import Store

PASSWORD = "Secret#Pass1"

_seq = itertools.count(1)


@pytest.fixture(autouse=True)
def _fast_password_hasher(settings):
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


def access_token_for(user):
    return str(RefreshToken.for_user(user).access_token)


@pytest.fixture
def make_user(db):
    def _make(role=Role.NORMAL_USER, name=None, email=None, address="12 Market Street, Springfield"):
        n = next(_seq)
        return User.objects.create_user(
            email=email or f"user{n}@example.com",
            password=PASSWORD,
            name=name or f"Registered Test Account {n:04d}",
            address=address,
            role=role,
        )
    return _make


@pytest.fixture
def make_store(db):
    def _make(owner=None, name=None, email=None, address="99 High Road, Shelbyville"):
        n = next(_seq)
        return Store.objects.create(
            name=name or f"Neighbourhood Grocery Store {n:04d}",
            email=email or f"store{n}@example.com",
            address=address,
            owner=owner,
        )
    return _make


@pytest.fixture
def admin_user(make_user):
    return make_user(role=Role.ADMIN, name="Platform Administrator Account")


@pytest.fixture
def owner_user(make_user):
    return make_user(role=Role.STORE_OWNER, name="First Store Owner Of The Mall")


@pytest.fixture
def normal_user(make_user):
    return make_user(role=Role.NORMAL_USER, name="Ordinary Customer Account One")


@pytest.fixture
def client_for():
    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.credentials(HTTP_AUTHORIZATION=f"Bearer {access_token_for(user)}")
        return client
    return _client
