from unittest.mock import MagicMock

import pytest

from comandas_shared.api_client import ApiClient
from comandas_shared.services.comanda_service import ComandaService
from comandas_shared.services.mesa_service import MesaService
from comandas_shared.services.resource_service import unwrap_list
from comandas_shared.services.user_service import UsuarioService


@pytest.fixture
def api():
    api = MagicMock(spec=ApiClient)
    api.get.return_value = []
    return api


@pytest.mark.parametrize(
    "method, args, endpoint",
    [
        ("get_mis_comandas_activas", (), "comandas/mis-comandas-activas"),
        ("get_mis_comandas_de_mesa", (3,), "comandas/mesa/3/mis-comandas"),
        ("get_mi_comanda", (10,), "comandas/mis-comandas/10"),
        ("get_mis_comandas", (), "comandas/mis-comandas"),
        ("get_by_mesero", (7,), "comandas/mesero/7"),
        ("get_activas_by_mesero", (7,), "comandas/mesero/7/activas"),
        ("get_by_mesa", (3,), "comandas/mesa/3"),
        ("get_by_cocinero", (12,), "comandas/cocinero/12"),
    ],
)
def test_comanda_lookup_endpoints(api, method, args, endpoint):
    getattr(ComandaService(api), method)(*args)

    assert api.get.call_args.args[0] == endpoint


def test_comanda_write_endpoints(api):
    service = ComandaService(api)

    service.create_completa({"idMesa": 3, "detalles": []})
    service.add_productos(10, [{"idProducto": 1, "cantidad": 2}])
    service.close(10)

    assert api.post.call_args_list[0].args == ("comandas/completa", {"idMesa": 3, "detalles": []})
    assert api.post.call_args_list[1].args == (
        "comandas/10/productos",
        [{"idProducto": 1, "cantidad": 2}],
    )
    assert api.put.call_args.args[0] == "comandas/10/cerrar"


def test_mesa_listing_endpoints(api):
    api.get.side_effect = [[{"idMesa": 1}], {"data": [{"idMesa": 2}]}]
    service = MesaService(api)

    disponibles = service.get_disponibles()
    ocupadas = service.get_ocupadas()

    assert [m.id for m in disponibles] == [1]
    assert [m.id for m in ocupadas] == [2]
    assert [c.args[0] for c in api.get.call_args_list] == ["mesas/disponibles", "mesas/ocupadas"]


def test_perfil_missing_body_is_none(api):
    api.get.return_value = None

    assert UsuarioService(api).get_perfil() is None
    api.get.assert_called_once_with("usuarios/perfil")


def test_unwrap_list_accepts_named_envelope():
    assert unwrap_list({"roles": [{"id": 1}]}, "roles") == [{"id": 1}]
    assert unwrap_list({"data": [{"id": 2}]}) == [{"id": 2}]
    assert unwrap_list(None) == []
