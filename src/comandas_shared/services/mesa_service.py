"""Table (mesa) client and table filtering helpers."""

from __future__ import annotations

from comandas_shared.constants import Resource, TableStatus
from comandas_shared.models import Mesa
from comandas_shared.services.resource_service import ResourceService


class MesaService(ResourceService):
    resource = Resource.MESAS.value
    model = Mesa

    def get_disponibles(self) -> list[Mesa]:
        return self._to_models(self.api.get(self.path("disponibles")))

    def get_ocupadas(self) -> list[Mesa]:
        return self._to_models(self.api.get(self.path("ocupadas")))

    def set_status(self, mesa_id: int, status: TableStatus):
        """PATCH mesas/{id}/estado with the integer code of `status`."""
        return self.api.patch(self.path(mesa_id, "estado"), {"estadoId": int(status)})


def filter_mesas(
    mesas: list[Mesa],
    texto: str | None = None,
    estado: TableStatus | None = None,
    capacidad_min: int | None = None,
) -> list[Mesa]:
    result = mesas
    if texto:
        needle = texto.strip().lower()
        result = [m for m in result if needle in m.label.lower()]
    if estado is not None:
        result = [m for m in result if m.status == estado]
    if capacidad_min:
        result = [m for m in result if m.capacidad >= capacidad_min]
    return result


def count_by_status(mesas: list[Mesa]) -> dict[str, int]:
    counts = {status.name: 0 for status in TableStatus}
    for mesa in mesas:
        if mesa.status is not None:
            counts[mesa.status.name] += 1
    counts["TOTAL"] = len(mesas)
    return counts
