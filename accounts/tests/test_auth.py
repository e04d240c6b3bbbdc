import pytest
from rest_framework_simplejwt.tokens import AccessToken

from accounts.constants import UserRole

pytestmark = pytest.mark.django_db

LOGIN_URL = "/api/v1/auth/login/"
ME_URL = "/api/v1/me/"


def test_login_by_email_returns_tokens(api_client, manager, station):
    resp = api_client.post(LOGIN_URL, {"email": "MANAGER@expanse.test"}, format="json")

    assert resp.status_code == 200
    assert resp.data["user"]["role"] == UserRole.STATION_MANAGER
    assert resp.data["user"]["station_name"] == station.name

    token = AccessToken(resp.data["access"])
    assert token["role"] == UserRole.STATION_MANAGER
    assert token["station_id"] == station.id


def test_unknown_email_is_rejected(api_client):
    resp = api_client.post(LOGIN_URL, {"email": "nobody@expanse.test"}, format="json")

    assert resp.status_code == 401


def test_inactive_account_is_rejected(api_client, ceo):
    ceo.is_active = False
    ceo.save(update_fields=["is_active"])

    resp = api_client.post(LOGIN_URL, {"email": ceo.email}, format="json")

    assert resp.status_code == 401


def test_me_with_bearer_token(api_client, accountant):
    access = api_client.post(LOGIN_URL, {"email": accountant.email}, format="json").data["access"]
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")

    resp = api_client.get(ME_URL)

    assert resp.status_code == 200
    assert resp.data["email"] == accountant.email
    assert resp.data["station"] is None


def test_me_requires_authentication(api_client):
    assert api_client.get(ME_URL).status_code == 401
