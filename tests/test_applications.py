"""Tests for application routes."""

import httpx

from conftest import CAREGIVER_ID, OWNER_ID, json_body, make_request, response_json

REQUEST_ID = "44444444-4444-4444-8444-444444444444"
APPLICATION_ID = "55555555-5555-4555-8555-555555555555"

DUPLICATE_ERROR = (
    '{"code":"23505","details":null,"hint":null,'
    '"message":"duplicate key value violates unique constraint \\"postulaciones_unicas_activas\\""}'
)


class ActiveApplications:
    """Rejects a second active application for the same request and caregiver."""

    def __init__(self):
        self.active = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        row = json_body(request)
        key = (row["solicitud_id"], row["cuidador_id"])
        if key in self.active:
            return httpx.Response(409, text=DUPLICATE_ERROR)
        self.active.add(key)
        return httpx.Response(201, json=[{"id": APPLICATION_ID, **row}])


class TestCreateApplication:
    async def test_create_application(self, call, data_api, caregiver_token):
        data_api.on("POST", "postulaciones", handler=ActiveApplications())

        response = await call(
            "create_application",
            make_request(
                "POST", "applications",
                token=caregiver_token,
                body={"solicitud_id": REQUEST_ID, "mensaje": "Tengo experiencia", "tarifa_propuesta": 20},
            ),
        )

        assert response.status_code == 201
        postulacion = response_json(response)["postulacion"]
        assert postulacion["cuidador_id"] == CAREGIVER_ID
        assert postulacion["estado"] == "POSTULADO"

    async def test_second_application_is_conflict(self, call, data_api, caregiver_token):
        data_api.on("POST", "postulaciones", handler=ActiveApplications())
        body = {"solicitud_id": REQUEST_ID}

        first = await call("create_application", make_request("POST", "applications", token=caregiver_token, body=body))
        second = await call("create_application", make_request("POST", "applications", token=caregiver_token, body=body))

        assert first.status_code == 201
        assert second.status_code == 409
        assert "already applied" in response_json(second)["message"]

    async def test_other_remote_errors_pass_through(self, call, data_api, caregiver_token):
        data_api.on("POST", "postulaciones", status=400, text='{"message":"violates foreign key"}')

        response = await call(
            "create_application",
            make_request("POST", "applications", token=caregiver_token, body={"solicitud_id": REQUEST_ID}),
        )

        assert response.status_code == 400

    async def test_invalid_input_rejected(self, call, data_api, caregiver_token):
        not_uuid = await call(
            "create_application",
            make_request("POST", "applications", token=caregiver_token, body={"solicitud_id": "abc"}),
        )
        too_expensive = await call(
            "create_application",
            make_request(
                "POST", "applications",
                token=caregiver_token,
                body={"solicitud_id": REQUEST_ID, "tarifa_propuesta": 1001},
            ),
        )

        assert not_uuid.status_code == 422
        assert too_expensive.status_code == 422
        assert data_api.calls == []


class TestListApplications:
    async def test_owner_sees_mapped_applications(self, call, data_api, owner_token):
        data_api.on("GET", "solicitudes", json=[{"id": REQUEST_ID, "usuario_id": OWNER_ID}])
        data_api.on("GET", "postulaciones", json=[{
            "id": APPLICATION_ID,
            "mensaje": "Hola",
            "tarifa_propuesta": 20,
            "precio_solicitante": 25,
            "estado": "POSTULADO",
            "creado_en": "2025-01-01T00:00:00Z",
            "cuidador": {
                "usuario_id": CAREGIVER_ID,
                "bio": "Enfermera",
                "anios_experiencia": 5,
                "rating_promedio": 4.8,
                "tipos_servicio": ["ABUELOS"],
                "usuario": {"nombre_completo": "Marta", "correo": "m@example.com", "foto_url": None},
            },
        }])

        response = await call(
            "list_request_applications",
            make_request(
                "GET", f"applications/request/{REQUEST_ID}",
                token=owner_token,
                route_params={"request_id": REQUEST_ID},
            ),
        )

        assert response.status_code == 200
        body = response_json(response)
        assert body["solicitud_id"] == REQUEST_ID
        assert body["total"] == 1
        assert body["postulaciones"][0]["cuidador"] == {
            "bio": "Enfermera",
            "rating_promedio": 4.8,
            "tipos_servicio": ["ABUELOS"],
            "usuario": {"nombre_completo": "Marta", "correo": "m@example.com", "foto_url": None},
        }

    async def test_non_owner_forbidden(self, call, data_api, caregiver_token):
        data_api.on("GET", "solicitudes", json=[{"id": REQUEST_ID, "usuario_id": OWNER_ID}])

        response = await call(
            "list_request_applications",
            make_request(
                "GET", f"applications/request/{REQUEST_ID}",
                token=caregiver_token,
                route_params={"request_id": REQUEST_ID},
            ),
        )

        assert response.status_code == 403
        assert data_api.calls_to("postulaciones") == []


class TestAcceptApplication:
    async def test_accept_invokes_single_procedure(self, call, data_api, owner_token):
        result = {"asignacion_id": "a1", "solicitud_estado": "ASIGNADA"}
        data_api.on("POST", "rpc/rpc_seleccionar_postulacion", json=result)

        response = await call(
            "accept_application",
            make_request(
                "POST", f"applications/{APPLICATION_ID}/accept",
                token=owner_token,
                body={"tarifa_acordada": 42.5},
                route_params={"application_id": APPLICATION_ID},
            ),
        )

        assert response.status_code == 200
        assert response_json(response)["result"] == result
        assert len(data_api.calls) == 1
        assert json_body(data_api.calls[0]) == {
            "p_postulacion_id": APPLICATION_ID,
            "p_actor_id": OWNER_ID,
            "p_tarifa_acordada": 42.5,
        }

    async def test_accept_requires_rate(self, call, data_api, owner_token):
        response = await call(
            "accept_application",
            make_request(
                "POST", f"applications/{APPLICATION_ID}/accept",
                token=owner_token,
                body={},
                route_params={"application_id": APPLICATION_ID},
            ),
        )

        assert response.status_code == 422
        assert data_api.calls == []
