"""
Role dashboards and order list views.

Independent backend lists are fetched concurrently; each failure is kept
apart so one broken list does not blank the rest of the view.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Any

from comandas_shared.api_client import ApiError
from comandas_shared.constants import (
    ACTIVE_ORDER_STATUSES,
    ADMIN_ENTITY_CARDS,
    COMPLETED_ORDER_STATUSES,
    FILTER_ALL,
    KITCHEN_QUEUE_STATUSES,
    OrderStatus,
    TableStatus,
)
from comandas_shared.error_catalog import describe_api_error
from comandas_shared.logging_config import get_logger
from comandas_shared.models import Comanda
from comandas_shared.serializers import money, serialize_comanda, serialize_mesa
from comandas_shared.services.auth_service import UserProfile
from comandas_shared.services.comanda_service import ComandaService, DetalleComandaService
from comandas_shared.services.mesa_service import MesaService
from comandas_shared.services.resource_service import ResourceService
from comandas_shared.services.status_label_service import StatusCatalog

logger = get_logger(__name__)


def fetch_concurrently(
    tasks: dict[str, Callable[[], Any]], max_workers: int = 4
) -> tuple[dict[str, Any], dict[str, ApiError]]:
    """
    Run independent backend calls in parallel.

    Returns:
        (results, errors) keyed by task name; a task appears in exactly one
    """
    results: dict[str, Any] = {}
    errors: dict[str, ApiError] = {}
    if not tasks:
        return results, errors

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(tasks)))) as executor:
        futures = {name: executor.submit(task) for name, task in tasks.items()}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except ApiError as e:
                logger.warning(f"Dashboard fetch '{name}' failed ({e.status}): {e.message}")
                errors[name] = e
    return results, errors


def _user_card(profile: UserProfile | None) -> dict[str, Any] | None:
    if profile is None:
        return None
    return {
        "nombre": profile.nombre,
        "email": profile.email,
        "rol": profile.rol,
        "inicial": profile.initial,
    }


def count_by_status(
    comandas: list[Comanda], catalog: StatusCatalog, statuses: set[OrderStatus]
) -> int:
    return sum(1 for c in comandas if catalog.status_of(c) in statuses)


def filter_by_status(
    comandas: list[Comanda], catalog: StatusCatalog, filtro: str | None
) -> list[Comanda]:
    """Keep orders whose status matches `filtro`; TODAS or empty keeps all."""
    if not filtro or filtro.strip().upper() == FILTER_ALL:
        return comandas
    wanted = catalog.normalize(filtro)
    if wanted is None:
        return []
    return [c for c in comandas if catalog.status_of(c) == wanted]


def _errors_payload(errors: dict[str, ApiError]) -> dict[str, str]:
    return {name: describe_api_error(error) for name, error in errors.items()}


class AdminDashboardService:
    def __init__(self, resources: dict[str, ResourceService], max_workers: int = 4) -> None:
        self.resources = resources
        self.max_workers = max_workers

    def overview(self, profile: UserProfile | None) -> dict[str, Any]:
        tasks = {
            card["entity"]: self.resources[card["entity"]].get_all
            for card in ADMIN_ENTITY_CARDS
            if card["entity"] in self.resources
        }
        results, errors = fetch_concurrently(tasks, self.max_workers)

        cards = []
        for card in ADMIN_ENTITY_CARDS:
            entity = card["entity"]
            items = results.get(entity)
            cards.append({**card, "total": len(items) if items is not None else None})

        return {
            "usuario": _user_card(profile),
            "cards": cards,
            "errores": _errors_payload(errors),
        }


class MeseroDashboardService:
    def __init__(
        self,
        mesas: MesaService,
        comandas: ComandaService,
        catalog: StatusCatalog,
        max_workers: int = 4,
    ) -> None:
        self.mesas = mesas
        self.comandas = comandas
        self.catalog = catalog
        self.max_workers = max_workers

    def statistics(self, comandas: list[Comanda]) -> dict[str, Any]:
        return {
            "mesasAtendidas": len({c.mesa_id for c in comandas if c.mesa_id is not None}),
            "comandasPendientes": count_by_status(comandas, self.catalog, KITCHEN_QUEUE_STATUSES),
            "comandasCompletadas": count_by_status(
                comandas, self.catalog, COMPLETED_ORDER_STATUSES
            ),
            "totalVendido": money(sum((c.display_total for c in comandas), Decimal("0"))),
        }

    def overview(self, profile: UserProfile | None) -> dict[str, Any]:
        results, errors = fetch_concurrently(
            {
                "mesas": self.mesas.get_all,
                "comandas": self.comandas.get_mis_comandas_activas,
            },
            self.max_workers,
        )
        mesas = results.get("mesas") or []
        comandas = results.get("comandas") or []

        return {
            "usuario": _user_card(profile),
            "mesas": [serialize_mesa(m) for m in mesas],
            "comandas": [self._serialize(c) for c in comandas],
            "estadisticas": self.statistics(comandas),
            "errores": _errors_payload(errors),
        }

    def available_tables(self) -> list[dict[str, Any]]:
        return [serialize_mesa(m) for m in self.mesas.get_all() if m.status == TableStatus.DISPONIBLE]

    def active_orders(self, filtro: str | None = None) -> dict[str, Any]:
        """Waiter's active orders with per-status counters."""
        comandas = self.comandas.get_mis_comandas_activas()
        visibles = filter_by_status(comandas, self.catalog, filtro)
        return {
            "comandas": [self._serialize(c) for c in visibles],
            "contadores": {
                "pendientes": count_by_status(comandas, self.catalog, {OrderStatus.PENDIENTE}),
                "enPreparacion": count_by_status(
                    comandas, self.catalog, {OrderStatus.EN_PREPARACION}
                ),
                "listas": count_by_status(comandas, self.catalog, {OrderStatus.LISTA}),
                "total": count_by_status(comandas, self.catalog, ACTIVE_ORDER_STATUSES),
            },
            "filtro": (filtro or FILTER_ALL).upper(),
        }

    def order_history(self, filtro: str | None = None) -> dict[str, Any]:
        """Every order of the waiter, closed ones included."""
        comandas = self.comandas.get_mis_comandas()
        visibles = filter_by_status(comandas, self.catalog, filtro)
        return {
            "comandas": [self._serialize(c) for c in visibles],
            "estadisticas": self.statistics(comandas),
            "filtro": (filtro or FILTER_ALL).upper(),
        }

    def _serialize(self, comanda: Comanda) -> dict[str, Any]:
        return serialize_comanda(comanda, self.catalog.describe(self.catalog.status_of(comanda)))


class CocineroDashboardService:
    def __init__(
        self,
        comandas: ComandaService,
        detalles: DetalleComandaService,
        catalog: StatusCatalog,
        max_workers: int = 4,
    ) -> None:
        self.comandas = comandas
        self.detalles = detalles
        self.catalog = catalog
        self.max_workers = max_workers

    def _serialize(self, comanda: Comanda) -> dict[str, Any]:
        status = self.catalog.status_of(comanda)
        data = serialize_comanda(comanda, self.catalog.describe(status))
        data["puede_iniciar"] = status == OrderStatus.PENDIENTE
        data["puede_marcar_lista"] = status == OrderStatus.EN_PREPARACION
        return data

    def _queue(self) -> tuple[list[Comanda], list[Comanda], dict[str, ApiError]]:
        results, errors = fetch_concurrently(
            {
                "pendientes": self.comandas.get_pendientes,
                "preparacion": self.comandas.get_en_preparacion,
            },
            self.max_workers,
        )
        return results.get("pendientes") or [], results.get("preparacion") or [], errors

    def overview(self, profile: UserProfile | None) -> dict[str, Any]:
        pendientes, preparacion, errors = self._queue()
        return {
            "usuario": _user_card(profile),
            "pendientes": [self._serialize(c) for c in pendientes],
            "enPreparacion": [self._serialize(c) for c in preparacion],
            "estadisticas": {
                "comandasPendientes": len(pendientes),
                "comandasEnPreparacion": len(preparacion),
                "comandasCompletadas": count_by_status(
                    preparacion, self.catalog, {OrderStatus.LISTA}
                ),
                "totalPreparando": sum(len(c.detalles) for c in preparacion),
            },
            "errores": _errors_payload(errors),
        }

    def kitchen_queue(self, filtro: str | None = None) -> dict[str, Any]:
        """
        Pending plus in-preparation orders.

        If the pending list cannot be loaded the error propagates; a failing
        in-preparation list only drops those orders from the view.
        """
        pendientes, preparacion, errors = self._queue()
        if "pendientes" in errors:
            raise errors["pendientes"]

        comandas = pendientes + preparacion
        visibles = filter_by_status(comandas, self.catalog, filtro)
        return {
            "comandas": [self._serialize(c) for c in visibles],
            "contadores": {
                "todas": len(comandas),
                "pendientes": count_by_status(comandas, self.catalog, {OrderStatus.PENDIENTE}),
                "enPreparacion": count_by_status(
                    comandas, self.catalog, {OrderStatus.EN_PREPARACION}
                ),
            },
            "filtro": (filtro or FILTER_ALL).upper(),
            "errores": _errors_payload(errors),
        }

    def order_detail(self, comanda_id: int) -> dict[str, Any] | None:
        """One order with only its own lines."""
        comanda = self.comandas.get_by_id(comanda_id)
        if comanda is None:
            return None
        if not comanda.detalles:
            comanda.detalles = self.detalles.get_by_comanda(comanda_id)
        else:
            comanda.detalles = [
                d for d in comanda.detalles if d.comanda_id in (None, comanda_id)
            ]
        return self._serialize(comanda)
