"""
Shared fixtures.

The remote restaurant backend is replaced by a MagicMock of ApiClient; the
Flask app builds every per-request client through the injected factory.
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from comandas_shared.api_client import ApiClient
from comandas_shared.models import Producto
from comandas_web.app import create_app


def route_responses(mapping):
    """
    side_effect for ApiClient.get: answer by endpoint, raise stored exceptions.
    """

    def _get(endpoint, params=None):
        if endpoint not in mapping:
            raise AssertionError(f"Unexpected GET {endpoint}")
        value = mapping[endpoint]
        if isinstance(value, Exception):
            raise value
        return value

    return _get


@pytest.fixture
def api():
    return MagicMock(spec=ApiClient)


@pytest.fixture
def app(api):
    return create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret-key",
            "REFRESH_STATUS_CATALOG": False,
            "DASHBOARD_WORKERS": 2,
        },
        api_client_factory=lambda base_url, token_provider, timeout: api,
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(client):
    """Store a token and profile in the session cookie for the given role."""

    def _login(rol, id_usuario="7", nombre="Ana Gómez", email="ana@buensazon.co"):
        with client.session_transaction() as sess:
            sess["token"] = "test-token"
            sess["usuario"] = {
                "email": email,
                "nombre": nombre,
                "rol": rol,
                "idUsuario": id_usuario,
                "type": "Bearer",
            }

    return _login


@pytest.fixture
def producto_a():
    return Producto(id=1, nombre="Bandeja paisa", precio=Decimal("10000"))


@pytest.fixture
def producto_b():
    return Producto(id=2, nombre="Limonada", precio=Decimal("5000"))


@pytest.fixture
def productos_backend():
    return [
        {"idProducto": 1, "nombre": "Bandeja paisa", "precio": 10000, "stock": 20, "estado": True},
        {"idProducto": 2, "nombre": "Limonada", "precio": 5000, "stock": 50, "estado": True},
        {"idProducto": 3, "nombre": "Ajiaco", "precio": 18000, "stock": 0, "estado": False},
    ]
