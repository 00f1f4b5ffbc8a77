from unittest.mock import call

import pytest

from comandas_shared.api_client import ApiError
from conftest import route_responses

PENDIENTE = {"idComanda": 10, "mesaId": 3, "estadoNombre": "PENDIENTE", "total": 25000}
EN_PREPARACION = {"idComanda": 11, "mesaId": 4, "estadoNombre": "EN_PREPARACION", "total": 9000}


@pytest.fixture
def cocinero(login_as):
    login_as("COCINERO", id_usuario="12", nombre="Luis")


class TestCocineroRoutes:

    def test_waiter_cannot_use_kitchen(self, client, login_as):
        login_as("MESERO")

        response = client.get("/api/cocinero/comandas")

        assert response.status_code == 403

    def test_queue_flags_allowed_actions(self, client, api, cocinero):
        api.get.side_effect = route_responses(
            {"comandas/pendientes": [PENDIENTE], "comandas/preparacion": [EN_PREPARACION]}
        )

        response = client.get("/api/cocinero/comandas")

        data = response.get_json()["data"]
        by_id = {c["id"]: c for c in data["comandas"]}
        assert by_id[10]["puede_iniciar"] is True
        assert by_id[10]["puede_marcar_lista"] is False
        assert by_id[11]["puede_marcar_lista"] is True
        assert data["contadores"] == {"todas": 2, "pendientes": 1, "enPreparacion": 1}

    def test_queue_survives_failing_preparation_list(self, client, api, cocinero):
        api.get.side_effect = route_responses(
            {"comandas/pendientes": [PENDIENTE], "comandas/preparacion": ApiError("Internal", 500)}
        )

        response = client.get("/api/cocinero/comandas?estado=PENDIENTE")

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert [c["id"] for c in data["comandas"]] == [10]
        assert "preparacion" in data["errores"]

    def test_queue_fails_when_pending_list_fails(self, client, api, cocinero):
        api.get.side_effect = route_responses(
            {"comandas/pendientes": ApiError("Internal", 500), "comandas/preparacion": []}
        )

        response = client.get("/api/cocinero/comandas")

        assert response.status_code == 502
        assert response.get_json()["error"] == "Error en el servidor"

    def test_order_detail_keeps_only_its_lines(self, client, api, cocinero):
        api.get.side_effect = route_responses(
            {
                "comandas/10": PENDIENTE,
                "detalles-comanda": [
                    {"idDetalleComanda": 1, "comandaId": 10, "productoId": 1, "cantidad": 2, "precioUnitario": 10000},
                    {"idDetalleComanda": 2, "comandaId": 99, "productoId": 2, "cantidad": 5, "precioUnitario": 5000},
                ],
            }
        )

        response = client.get("/api/cocinero/comandas/10")

        data = response.get_json()["data"]
        assert [d["id"] for d in data["detalles"]] == [1]

    def test_start_preparation_asks_first(self, client, api, cocinero):
        api.get.side_effect = route_responses({"comandas/10": PENDIENTE})

        response = client.post("/api/cocinero/comandas/10/iniciar")

        assert response.status_code == 409
        assert response.get_json()["requires_confirmation"] is True
        api.put.assert_not_called()

    def test_start_preparation_partial_failure(self, client, api, cocinero):
        api.get.side_effect = route_responses({"comandas/10": PENDIENTE})
        api.put.side_effect = [None, ApiError("Internal", 500)]

        response = client.post("/api/cocinero/comandas/10/iniciar", json={"confirm": True})

        body = response.get_json()
        assert response.status_code == 502
        assert body["status"] == "error"
        assert body["partial"] is True
        assert api.put.call_args_list == [
            call("comandas/10/cocinero", {"id_cocinero": 12}),
            call("comandas/10/estado", {"estado": 2}),
        ]

    def test_start_preparation_success(self, client, api, cocinero):
        api.get.side_effect = route_responses({"comandas/10": PENDIENTE})

        response = client.post("/api/cocinero/comandas/10/iniciar", json={"confirm": True})

        assert response.status_code == 200
        assert response.get_json()["message"] == "✅ Comanda #10 en preparación"

    def test_mark_ready_refused_for_pending_order(self, client, api, cocinero):
        api.get.side_effect = route_responses({"comandas/10": PENDIENTE})

        response = client.post("/api/cocinero/comandas/10/lista", json={"confirm": True})

        assert response.status_code == 409
        api.put.assert_not_called()

    def test_mark_ready(self, client, api, cocinero):
        api.get.side_effect = route_responses({"comandas/11": EN_PREPARACION})

        response = client.post("/api/cocinero/comandas/11/lista", json={"confirm": True})

        assert response.status_code == 200
        api.put.assert_called_once_with("comandas/11/estado", {"estado": 3})
