"""Tests for account registration, login and account state routes."""

import pytest

from conftest import OWNER_ID, json_body, make_request, response_json
from shared.errors import RemoteOperationFailed

REGISTER_BODY = {
    "email": "ana@example.com",
    "password": "s3cret-pass",
    "name": "Ana Pérez",
    "telefono_e164": "+51999888777",
    "pais_iso2": "PE",
}


class TestRegister:
    async def test_register_creates_user_profile_and_session(self, call, data_api, identity):
        profile = {"id": OWNER_ID, "correo": "ana@example.com", "nombre_completo": "Ana Pérez"}
        data_api.on("POST", "usuarios", status=201, json=[profile])
        data_api.on("GET", "usuarios", json=[profile])

        response = await call("register_account", make_request("POST", "auth/register", body=REGISTER_BODY))

        assert response.status_code == 201
        body = response_json(response)
        assert body["user"] == {"id": OWNER_ID, "email": "ana@example.com"}
        assert body["profile"] == profile
        assert body["session"]["access_token"] == "access-token"

        created = identity.created[0]
        assert created["email_confirm"] is True
        assert created["user_metadata"] == {"name": "Ana Pérez"}
        assert created["app_metadata"] == {"role": "user"}

        upsert = data_api.calls_to("usuarios", "POST")[0]
        assert upsert.url.params["on_conflict"] == "id"
        assert json_body(upsert)["nombre_completo"] == "Ana Pérez"
        assert json_body(upsert)["correo"] == "ana@example.com"

    async def test_profile_failure_removes_auth_user(self, call, data_api, identity):
        data_api.on("POST", "usuarios", status=400, text='{"message":"null value in column dni"}')

        response = await call("register_account", make_request("POST", "auth/register", body=REGISTER_BODY))

        assert response.status_code == 400
        assert response_json(response)["message"].startswith("Error creating profile")
        assert identity.deleted == [OWNER_ID]

    async def test_short_password_rejected(self, call, identity):
        body = {**REGISTER_BODY, "password": "short"}

        response = await call("register_account", make_request("POST", "auth/register", body=body))

        assert response.status_code == 422
        assert identity.created == []


class TestLogin:
    async def test_login_returns_session_and_profile(self, call, data_api):
        data_api.on("GET", "usuarios", json=[{"id": OWNER_ID, "correo": "ana@example.com"}])

        response = await call(
            "login",
            make_request("POST", "auth/login", body={"email": "ana@example.com", "password": "x"}),
        )

        assert response.status_code == 200
        body = response_json(response)
        assert body["profile"]["id"] == OWNER_ID
        assert data_api.calls[0].url.params["correo"] == "eq.ana@example.com"

    async def test_missing_profile_does_not_fail_login(self, call, data_api):
        data_api.on("GET", "usuarios", json=[])

        response = await call(
            "login",
            make_request("POST", "auth/login", body={"email": "ana@example.com", "password": "x"}),
        )

        assert response.status_code == 200
        assert response_json(response)["profile"] is None

    async def test_rejected_credentials(self, call, identity):
        identity.sign_in_error = RemoteOperationFailed(400, "Invalid login credentials")

        response = await call(
            "login",
            make_request("POST", "auth/login", body={"email": "ana@example.com", "password": "x"}),
        )

        assert response.status_code == 400
        assert response_json(response)["message"] == "Invalid login credentials"


class TestUpdateAccount:
    async def test_only_provided_fields_written(self, call, data_api, identity, owner_token):
        data_api.on("PATCH", "usuarios", json=[{"id": OWNER_ID, "nombre_completo": "Ana María"}])

        response = await call(
            "update_account",
            make_request("PUT", "auth/me", token=owner_token, body={"name": "Ana María"}),
        )

        assert response.status_code == 200
        assert identity.updated == [{"id": OWNER_ID, "user_metadata": {"name": "Ana María"}}]
        patch = data_api.calls_to("usuarios", "PATCH")[0]
        assert json_body(patch) == {"nombre_completo": "Ana María"}
        assert patch.url.params["id"] == f"eq.{OWNER_ID}"

    async def test_empty_update_returns_current_profile(self, call, data_api, identity, owner_token):
        data_api.on("GET", "usuarios", json=[{"id": OWNER_ID}])

        response = await call("update_account", make_request("PUT", "auth/me", token=owner_token, body={}))

        assert response.status_code == 200
        assert response_json(response)["profile"] == {"id": OWNER_ID}
        assert identity.updated == []
        assert data_api.calls_to("usuarios", "PATCH") == []

    @pytest.mark.parametrize("field", ["email", "password", "name"])
    async def test_null_credential_fields_rejected(self, call, data_api, identity, owner_token, field):
        response = await call(
            "update_account",
            make_request("PUT", "auth/me", token=owner_token, body={field: None}),
        )

        assert response.status_code == 422
        assert response_json(response)["errors"][0]["field"] == field
        assert identity.updated == []
        assert data_api.calls == []


class TestAccountState:
    async def test_deactivate_records_reason(self, call, data_api, owner_token):
        data_api.on("PATCH", "usuarios", json=[{"id": OWNER_ID, "activo": False}])

        response = await call(
            "deactivate_account",
            make_request("PUT", "auth/me/deactivate", token=owner_token, body={"reason": "moving"}),
        )

        assert response.status_code == 200
        values = json_body(data_api.calls_to("usuarios", "PATCH")[0])
        assert values["activo"] is False
        assert values["desactivado_motivo"] == "moving"
        assert values["desactivado_en"]

    async def test_reactivate_is_idempotent(self, call, data_api, owner_token):
        active = {"id": OWNER_ID, "activo": True, "desactivado_en": None, "desactivado_motivo": None}
        data_api.on("PATCH", "usuarios", json=[active])

        first = await call("reactivate_account", make_request("PUT", "auth/me/reactivate", token=owner_token))
        second = await call("reactivate_account", make_request("PUT", "auth/me/reactivate", token=owner_token))

        assert first.status_code == second.status_code == 200
        assert response_json(first) == response_json(second) == {"ok": True, "profile": active}
        for patch in data_api.calls_to("usuarios", "PATCH"):
            assert json_body(patch) == {
                "activo": True, "desactivado_en": None, "desactivado_motivo": None
            }

    async def test_deactivate_requires_token(self, call, data_api):
        response = await call("deactivate_account", make_request("PUT", "auth/me/deactivate", body={}))

        assert response.status_code == 401
        assert data_api.calls == []
