"""
Authentication flow: sign-up, sign-in, session, sign-out, password reset.
"""
import json
import re

import pytest
from django.contrib.auth import get_user_model
from django.core import mail
from django.test import Client


def post_json(client, path, payload):
    return client.post(path, data=json.dumps(payload), content_type="application/json")


@pytest.mark.django_db
class TestSignup:

    def test_signup_creates_user(self, client):
        resp = post_json(client, "/api/auth/signup/", {
            "email": "New@Clinic.test",
            "password": "clinic1234!",
            "password_confirm": "clinic1234!",
            "name": "이실장",
        })
        assert resp.status_code == 200
        assert resp.json()["data"]["user"]["email"] == "new@clinic.test"
        user = get_user_model().objects.get(username="new@clinic.test")
        assert user.check_password("clinic1234!")
        assert user.first_name == "이실장"

    def test_weak_password(self, client):
        resp = post_json(client, "/api/auth/signup/", {"email": "a@clinic.test", "password": "password"})
        assert resp.status_code == 400
        assert resp.json()["detail"]["errors"][0]["field"] == "password"

    def test_password_confirm_mismatch(self, client):
        resp = post_json(client, "/api/auth/signup/", {
            "email": "a@clinic.test", "password": "clinic1234!", "password_confirm": "clinic1234?",
        })
        assert resp.status_code == 400
        assert resp.json()["detail"]["errors"][0]["field"] == "password_confirm"

    def test_invalid_email(self, client):
        resp = post_json(client, "/api/auth/signup/", {"email": "not-an-email", "password": "clinic1234!"})
        assert resp.status_code == 400
        assert resp.json()["detail"]["errors"][0]["field"] == "email"

    def test_duplicate_email(self, client, staff_user):
        resp = post_json(client, "/api/auth/signup/", {"email": "staff@clinic.test", "password": "clinic1234!"})
        assert resp.status_code == 409
        assert resp.json()["code"] == "EMAIL_ALREADY_REGISTERED"


@pytest.mark.django_db
class TestSession:

    def test_login_session_logout(self, staff_user):
        client = Client()
        assert client.get("/api/auth/session/").json()["data"]["authenticated"] is False

        resp = post_json(client, "/api/auth/login/", {"email": "STAFF@clinic.test", "password": "clinic1234!"})
        assert resp.status_code == 200
        session = client.get("/api/auth/session/").json()["data"]
        assert session["authenticated"] is True
        assert session["user"]["email"] == "staff@clinic.test"
        assert client.get("/api/questionnaires/").status_code == 200

        assert client.post("/api/auth/logout/").status_code == 200
        assert client.get("/api/auth/session/").json()["data"]["authenticated"] is False
        assert client.get("/api/questionnaires/").status_code == 401

    def test_wrong_password(self, staff_user):
        resp = post_json(Client(), "/api/auth/login/", {"email": "staff@clinic.test", "password": "wrong1234!"})
        assert resp.status_code == 401
        assert resp.json()["code"] == "INVALID_CREDENTIALS"

    def test_login_requires_post(self):
        assert Client().get("/api/auth/login/").status_code == 405


@pytest.mark.django_db
class TestPasswordReset:

    def _reset_link_params(self):
        body = mail.outbox[0].body
        uid = re.search(r"uid=([\w-]+)", body).group(1)
        token = re.search(r"token=([\w-]+)", body).group(1)
        return uid, token

    def test_full_reset_flow(self, client, staff_user):
        resp = post_json(client, "/api/auth/password-reset/", {"email": "staff@clinic.test"})
        assert resp.status_code == 200
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ["staff@clinic.test"]

        uid, token = self._reset_link_params()
        resp = post_json(client, "/api/auth/password-reset/confirm/", {
            "uid": uid, "token": token, "password": "newpass123#", "password_confirm": "newpass123#",
        })
        assert resp.status_code == 200
        staff_user.refresh_from_db()
        assert staff_user.check_password("newpass123#")

        # a token works only once
        resp = post_json(client, "/api/auth/password-reset/confirm/", {
            "uid": uid, "token": token, "password": "another123#",
        })
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_RESET_LINK"

    def test_unknown_email_same_answer(self, client):
        resp = post_json(client, "/api/auth/password-reset/", {"email": "nobody@clinic.test"})
        assert resp.status_code == 200
        assert len(mail.outbox) == 0

    def test_weak_new_password(self, client, staff_user):
        post_json(client, "/api/auth/password-reset/", {"email": "staff@clinic.test"})
        uid, token = self._reset_link_params()
        resp = post_json(client, "/api/auth/password-reset/confirm/", {
            "uid": uid, "token": token, "password": "short",
        })
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"

    def test_garbage_uid(self, client):
        resp = post_json(client, "/api/auth/password-reset/confirm/", {"uid": "!!", "token": "x", "password": "a"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_RESET_LINK"
