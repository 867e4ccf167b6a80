"""
Pytest configuration for the ledger test suite.
"""

import itertools

import pytest

_emails = itertools.count(1)


@pytest.fixture(autouse=True)
def fast_password_hashing(settings):
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


@pytest.fixture
def make_user(django_user_model):
    def _make_user(email=None, password="Str0ng-Passw0rd", **extra):
        email = email or f"user{next(_emails)}@stmarys-hospital.org"
        return django_user_model.objects.create_user(email=email, password=password, **extra)
    return _make_user


@pytest.fixture
def administrator(make_user):
    return make_user(email="cmo@stmarys-hospital.org")


@pytest.fixture
def physician(make_user):
    return make_user(email="physician@stmarys-hospital.org")


@pytest.fixture
def staff(make_user):
    return make_user(email="nurse@stmarys-hospital.org")


@pytest.fixture
def outsider(make_user):
    return make_user(email="visitor@stmarys-hospital.org")


@pytest.fixture
def ledger(db, administrator):
    """An initialised ledger with `administrator` as chief medical officer."""
    from apps.ledger.services import initialize_ledger
    return initialize_ledger(administrator)


@pytest.fixture
def api_client():
    from ninja.testing import TestClient
    from config.api import api
    return TestClient(api)


@pytest.fixture
def auth_headers():
    from rest_framework_simplejwt.tokens import RefreshToken

    def _auth_headers(user):
        token = RefreshToken.for_user(user).access_token
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
