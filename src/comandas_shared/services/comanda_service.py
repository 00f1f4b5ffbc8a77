"""
Order (comanda) and order-line clients.

Endpoint templates mirror the backend routes; paths prefixed with
`mis-comandas` are scoped by the backend to the authenticated waiter.
"""

from __future__ import annotations

from typing import Any

from comandas_shared.constants import Resource
from comandas_shared.models import Comanda, DetalleComanda
from comandas_shared.services.resource_service import ResourceService, unwrap_list


class ComandaService(ResourceService):
    resource = Resource.COMANDAS.value
    model = Comanda

    # Waiter scoped
    def get_mis_comandas_activas(self) -> list[Comanda]:
        return self._to_models(self.api.get(self.path("mis-comandas-activas")))

    def get_mis_comandas_de_mesa(self, mesa_id: int) -> list[Comanda]:
        return self._to_models(self.api.get(self.path("mesa", mesa_id, "mis-comandas")))

    def get_mi_comanda(self, comanda_id: int) -> Comanda | None:
        return self._to_model(self.api.get(self.path("mis-comandas", comanda_id)))

    def get_detalles_de_mi_comanda(self, comanda_id: int) -> list[DetalleComanda]:
        data = self.api.get(self.path("mis-comandas", comanda_id, "detalles"))
        return [DetalleComanda.from_backend(d) for d in unwrap_list(data, "detalles")]

    def get_mis_comandas(self) -> list[Comanda]:
        return self._to_models(self.api.get(self.path("mis-comandas")))

    def create_completa(self, payload: dict[str, Any]) -> Comanda | None:
        """Create an order together with its lines in one call."""
        return self._to_model(self.api.post(self.path("completa"), payload))

    def close(self, comanda_id: int):
        return self.api.put(self.path(comanda_id, "cerrar"))

    def add_productos(self, comanda_id: int, detalles: list[dict[str, Any]]):
        return self.api.post(self.path(comanda_id, "productos"), detalles)

    # Lookups by owner or table
    def get_by_mesero(self, mesero_id: int) -> list[Comanda]:
        return self._to_models(self.api.get(self.path("mesero", mesero_id)))

    def get_activas_by_mesero(self, mesero_id: int) -> list[Comanda]:
        return self._to_models(self.api.get(self.path("mesero", mesero_id, "activas")))

    def get_by_mesa(self, mesa_id: int) -> list[Comanda]:
        return self._to_models(self.api.get(self.path("mesa", mesa_id)))

    def get_by_cocinero(self, cocinero_id: int) -> list[Comanda]:
        return self._to_models(self.api.get(self.path("cocinero", cocinero_id)))

    # Kitchen
    def get_pendientes(self) -> list[Comanda]:
        return self._to_models(self.api.get(self.path("pendientes")))

    def get_en_preparacion(self) -> list[Comanda]:
        return self._to_models(self.api.get(self.path("preparacion")))

    def set_status(self, comanda_id: int, estado_id: int):
        return self.api.put(self.path(comanda_id, "estado"), {"estado": estado_id})

    def assign_cocinero(self, comanda_id: int, cocinero_id: int | str):
        return self.api.put(self.path(comanda_id, "cocinero"), {"id_cocinero": cocinero_id})

    # Admin
    def get_detalles_admin(self, comanda_id: int) -> list[DetalleComanda]:
        data = self.api.get(self.path("admin", comanda_id, "detalles"))
        return [DetalleComanda.from_backend(d) for d in unwrap_list(data, "detalles")]

    def get_hoy(self) -> list[Comanda]:
        return self._to_models(self.api.get(self.path("hoy")))

    def get_estadisticas(self) -> Any:
        return self.api.get(self.path("estadisticas"))

    def get_ventas_hoy(self) -> Any:
        return self.api.get(self.path("ventas", "hoy"))


class DetalleComandaService(ResourceService):
    resource = Resource.DETALLES_COMANDA.value
    model = DetalleComanda

    def get_by_comanda(self, comanda_id: int) -> list[DetalleComanda]:
        """All lines belonging to one order, filtered locally."""
        return [d for d in self.get_all() if d.comanda_id == comanda_id]
