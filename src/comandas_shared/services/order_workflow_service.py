"""
Order workflow: table occupation, order submission, kitchen transitions and
closing a table's bill.

Every transition is a backend call; local guards only decide whether the
call is attempted. Actions the user must confirm return a result with
`requires_confirmation` set until they are repeated with `confirmed=True`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from http import HTTPStatus
from typing import Any

from comandas_shared.api_client import ApiError
from comandas_shared.constants import (
    ACTIVE_ORDER_STATUSES,
    OrderStatus,
    TableStatus,
)
from comandas_shared.logging_config import get_logger
from comandas_shared.models import Comanda, Mesa, Usuario, money_to_wire
from comandas_shared.serializers import (
    error_response,
    money,
    serialize_comanda,
    serialize_mesa,
    success_response,
)
from comandas_shared.services.auth_service import UserProfile
from comandas_shared.services.cart_service import Cart
from comandas_shared.services.comanda_service import ComandaService
from comandas_shared.services.mesa_service import MesaService
from comandas_shared.services.order_saga import Saga, SagaStep
from comandas_shared.services.price_service import bill_totals
from comandas_shared.services.status_label_service import StatusCatalog

logger = get_logger(__name__)

STEP_OCCUPY_TABLE = "ocupar_mesa"
STEP_CREATE_ORDER = "crear_comanda"
STEP_ASSIGN_COOK = "asignar_cocinero"
STEP_START_PREPARATION = "iniciar_preparacion"


class WorkflowRefused(Exception):
    """Raised when a local guard refuses an action before any backend call."""

    def __init__(self, message: str, status: HTTPStatus = HTTPStatus.CONFLICT) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


@dataclass
class WorkflowResult:
    success: bool
    message: str
    status: HTTPStatus = HTTPStatus.OK
    data: Any = None
    warnings: list[str] = field(default_factory=list)
    partial: bool = False
    requires_confirmation: bool = False

    @classmethod
    def confirmation(cls, prompt: str) -> WorkflowResult:
        return cls(
            success=False,
            message=prompt,
            status=HTTPStatus.CONFLICT,
            requires_confirmation=True,
        )

    def to_response(self) -> tuple[dict, HTTPStatus]:
        if self.success:
            body = success_response(self.data, self.message)
        else:
            body = error_response(self.message)
            if self.data is not None:
                body["data"] = self.data
        if self.requires_confirmation:
            body["requires_confirmation"] = True
        if self.partial:
            body["partial"] = True
        if self.warnings:
            body["warnings"] = self.warnings
        return body, self.status


def failure_status(error: ApiError) -> HTTPStatus:
    """Status this app answers with when a backend call fails."""
    if error.is_unauthorized:
        return HTTPStatus.UNAUTHORIZED
    if error.is_forbidden:
        return HTTPStatus.FORBIDDEN
    if error.is_not_found:
        return HTTPStatus.NOT_FOUND
    if error.is_validation_error:
        return HTTPStatus.BAD_REQUEST
    return HTTPStatus.BAD_GATEWAY


def _wire_id(value: str | None) -> int | str | None:
    if value is None:
        return None
    return int(value) if str(value).isdigit() else value


@dataclass
class TableBill:
    mesa: Mesa
    comandas: list[Comanda]
    statuses: dict[int | None, OrderStatus | None]
    subtotal: Decimal
    propina: Decimal
    total: Decimal
    total_productos: int

    @property
    def puede_cerrar(self) -> bool:
        return bool(self.comandas) and all(
            self.statuses.get(c.id) == OrderStatus.LISTA for c in self.comandas
        )

    def to_dict(self, catalog: StatusCatalog) -> dict[str, Any]:
        return {
            "mesa": serialize_mesa(self.mesa),
            "comandas": [
                serialize_comanda(c, catalog.describe(self.statuses.get(c.id)))
                for c in self.comandas
            ],
            "subtotal": money(self.subtotal),
            "propina": money(self.propina),
            "total": money(self.total),
            "total_productos": self.total_productos,
            "puede_cerrar": self.puede_cerrar,
        }


class OrderWorkflowService:
    """Transitions available to waiters and cooks for the logged-in user."""

    def __init__(
        self,
        comandas: ComandaService,
        mesas: MesaService,
        catalog: StatusCatalog,
        profile: UserProfile | None,
        tip_rate: Decimal | float | None = None,
    ) -> None:
        self.comandas = comandas
        self.mesas = mesas
        self.catalog = catalog
        self.profile = profile
        self.tip_rate = tip_rate

    def _current_user_id(self, role_label: str) -> str:
        if self.profile is None or not self.profile.id_usuario:
            raise WorkflowRefused(
                f"No se pudo identificar al {role_label}", HTTPStatus.UNAUTHORIZED
            )
        return self.profile.id_usuario

    def _load_comanda(self, comanda_id: int) -> Comanda:
        comanda = self.comandas.get_by_id(comanda_id)
        if comanda is None:
            raise WorkflowRefused(f"Comanda #{comanda_id} no encontrada", HTTPStatus.NOT_FOUND)
        return comanda

    def _load_mesa(self, mesa_id: int) -> Mesa:
        mesa = self.mesas.get_by_id(mesa_id)
        if mesa is None:
            raise WorkflowRefused(f"Mesa {mesa_id} no encontrada", HTTPStatus.NOT_FOUND)
        return mesa

    # ------------------------------------------------------------------
    # Kitchen
    # ------------------------------------------------------------------

    def can_start(self, comanda: Comanda) -> bool:
        return self.catalog.status_of(comanda) == OrderStatus.PENDIENTE

    def can_mark_ready(self, comanda: Comanda) -> bool:
        return self.catalog.status_of(comanda) == OrderStatus.EN_PREPARACION

    def start_preparation(self, comanda_id: int, confirmed: bool = False) -> WorkflowResult:
        """
        Assign the current cook and move the order to EN_PREPARACION.

        Cook assignment cannot be undone through the API, so a failure in the
        second call is reported as a partial failure.
        """
        comanda = self._load_comanda(comanda_id)
        if not self.can_start(comanda):
            raise WorkflowRefused(f"La comanda #{comanda_id} no está PENDIENTE")

        if not confirmed:
            return WorkflowResult.confirmation(f"¿Iniciar preparación de la comanda #{comanda_id}?")

        cocinero_id = _wire_id(self._current_user_id("cocinero"))
        en_preparacion = self.catalog.transition_code(OrderStatus.EN_PREPARACION)

        saga = Saga(
            f"start_preparation#{comanda_id}",
            [
                SagaStep(
                    STEP_ASSIGN_COOK,
                    lambda: self.comandas.assign_cocinero(comanda_id, cocinero_id),
                ),
                SagaStep(
                    STEP_START_PREPARATION,
                    lambda: self.comandas.set_status(comanda_id, en_preparacion),
                ),
            ],
        )
        outcome = saga.run()

        if outcome.ok:
            logger.info(f"Order {comanda_id} in preparation by cook {cocinero_id}")
            return WorkflowResult(True, f"✅ Comanda #{comanda_id} en preparación")

        if outcome.failed_step == STEP_ASSIGN_COOK:
            return WorkflowResult(
                False, "❌ Error al asignar cocinero", failure_status(outcome.error)
            )

        return WorkflowResult(
            False,
            f"❌ Error al iniciar preparación: el cocinero quedó asignado pero la comanda "
            f"#{comanda_id} sigue en su estado anterior",
            failure_status(outcome.error),
            partial=True,
        )

    def mark_ready(self, comanda_id: int, confirmed: bool = False) -> WorkflowResult:
        comanda = self._load_comanda(comanda_id)
        if not self.can_mark_ready(comanda):
            raise WorkflowRefused(f"La comanda #{comanda_id} no está EN_PREPARACION")

        if not confirmed:
            return WorkflowResult.confirmation(f"¿Marcar como lista la comanda #{comanda_id}?")

        try:
            self.comandas.set_status(comanda_id, self.catalog.transition_code(OrderStatus.LISTA))
        except ApiError as e:
            logger.warning(f"Could not mark order {comanda_id} ready: {e.message}")
            return WorkflowResult(False, "❌ Error al actualizar estado", failure_status(e))

        return WorkflowResult(True, f"✅ Comanda #{comanda_id} marcada como lista")

    # ------------------------------------------------------------------
    # Waiter
    # ------------------------------------------------------------------

    def build_order_payload(
        self, mesa: Mesa, cart: Cart, cocinero: Usuario | None = None
    ) -> dict[str, Any]:
        """Order-with-lines payload for POST comandas; ids of 0 are assigned by the backend."""
        mesero_id = self._current_user_id("mesero")
        return {
            "idComanda": 0,
            "fecha": datetime.now(timezone.utc).isoformat(),
            "mesaId": mesa.id,
            "mesaUbicacion": mesa.label,
            "meseroId": str(mesero_id),
            "meseroNombre": self.profile.nombre,
            "cocineroId": str(cocinero.id) if cocinero else "",
            "cocineroNombre": cocinero.nombre if cocinero else "",
            "estadoId": self.catalog.code_for(OrderStatus.PENDIENTE),
            "estadoNombre": OrderStatus.PENDIENTE.value,
            "detalles": [detalle.to_backend() for detalle in cart.to_detalles()],
            "total": money_to_wire(cart.total),
        }

    def submit_order(
        self, mesa_id: int, cart: Cart, cocinero: Usuario | None = None
    ) -> WorkflowResult:
        """
        Occupy the table, then create the order.

        If creating the order fails the table is set back to DISPONIBLE. A
        failed revert is logged and returned as a warning.
        """
        if cart.is_empty():
            raise WorkflowRefused("La comanda está vacía", HTTPStatus.BAD_REQUEST)

        mesa = self._load_mesa(mesa_id)
        if mesa.status == TableStatus.OCUPADA:
            raise WorkflowRefused(
                f"{mesa.label} ya está ocupada. Consulta su cuenta para agregar pedidos."
            )

        payload = self.build_order_payload(mesa, cart, cocinero)

        saga = Saga(
            f"submit_order@mesa{mesa_id}",
            [
                SagaStep(
                    STEP_OCCUPY_TABLE,
                    lambda: self.mesas.set_status(mesa_id, TableStatus.OCUPADA),
                    compensation=lambda: self.mesas.set_status(mesa_id, TableStatus.DISPONIBLE),
                ),
                SagaStep(STEP_CREATE_ORDER, lambda: self.comandas.create(payload)),
            ],
        )
        outcome = saga.run()

        if outcome.failed_step == STEP_OCCUPY_TABLE:
            return WorkflowResult(
                False,
                "Error al ocupar la mesa. No se puede crear la comanda.",
                failure_status(outcome.error),
            )

        if outcome.failed_step == STEP_CREATE_ORDER:
            detail = outcome.error.backend_message or "Error desconocido"
            result = WorkflowResult(
                False, f"Error al enviar la comanda: {detail}", failure_status(outcome.error)
            )
            if outcome.compensation_failures:
                result.warnings.append(
                    f"No se pudo liberar {mesa.label}; puede haber quedado OCUPADA"
                )
                result.partial = True
            return result

        created = outcome.results.get(STEP_CREATE_ORDER)
        logger.info(f"Order created for table {mesa_id} with {cart.item_count} items")
        return WorkflowResult(
            True,
            "¡Comanda enviada exitosamente! ✅",
            HTTPStatus.CREATED,
            data=serialize_comanda(created) if created is not None else payload,
        )

    def change_table_status(
        self, mesa_id: int, nuevo_estado: Any, confirmed: bool = False
    ) -> WorkflowResult:
        target = TableStatus.parse(nuevo_estado)
        if target is None:
            raise WorkflowRefused("Estado de mesa inválido", HTTPStatus.BAD_REQUEST)

        mesa = self._load_mesa(mesa_id)
        if mesa.status == target:
            return WorkflowResult(True, f"{mesa.label} ya está {target.name}", data=serialize_mesa(mesa))
        if mesa.status == TableStatus.OCUPADA:
            raise WorkflowRefused(
                "❌ No puedes cambiar el estado. Esta mesa tiene comandas activas."
            )
        if mesa.status is None:
            raise WorkflowRefused(f"{mesa.label} no tiene un estado reconocido")

        if not confirmed:
            return WorkflowResult.confirmation(
                f"¿Cambiar {mesa.label} de {mesa.status.name} a {target.name}?"
            )

        try:
            self.mesas.set_status(mesa_id, target)
        except ApiError as e:
            logger.warning(f"Could not change table {mesa_id} to {target.name}: {e.message}")
            return WorkflowResult(
                False, "❌ Error al cambiar el estado de la mesa.", failure_status(e)
            )

        mesa.status = target
        mesa.status_code = int(target)
        return WorkflowResult(
            True,
            f"✅ Mesa actualizada a {target.name}",
            data=serialize_mesa(mesa),
        )

    def table_bill(self, mesa_id: int) -> TableBill:
        """
        Active orders of the table placed by the current waiter, with lines and totals.

        A 404 on the order list means the table has no orders. A failed line
        fetch leaves that order without lines.
        """
        mesa = self._load_mesa(mesa_id)

        try:
            comandas = self.comandas.get_mis_comandas_de_mesa(mesa_id)
        except ApiError as e:
            if e.is_not_found:
                comandas = []
            elif e.is_forbidden:
                raise WorkflowRefused(
                    "No tienes permisos para ver las comandas de esta mesa", HTTPStatus.FORBIDDEN
                ) from e
            else:
                raise

        statuses = {c.id: self.catalog.status_of(c) for c in comandas}
        # Unrecognized statuses stay on the bill and keep it open
        activas = [
            c for c in comandas if statuses[c.id] is None or statuses[c.id] in ACTIVE_ORDER_STATUSES
        ]

        for comanda in activas:
            try:
                detalles = self.comandas.get_detalles_de_mi_comanda(comanda.id)
            except ApiError as e:
                logger.warning(f"Could not load lines for order {comanda.id}: {e.message}")
                detalles = []
            if detalles or not comanda.detalles:
                comanda.detalles = detalles

        subtotal = sum((c.display_total for c in activas), Decimal("0"))
        totals = bill_totals(subtotal, self.tip_rate)
        return TableBill(
            mesa=mesa,
            comandas=activas,
            statuses=statuses,
            subtotal=totals["subtotal"],
            propina=totals["propina"],
            total=totals["total"],
            total_productos=sum(c.item_count for c in activas),
        )

    def close_bill(self, mesa_id: int, confirmed: bool = False) -> WorkflowResult:
        """Free the table once every active order on it is LISTA."""
        bill = self.table_bill(mesa_id)
        if not bill.comandas:
            raise WorkflowRefused("No hay comandas activas en esta mesa")
        if not bill.puede_cerrar:
            raise WorkflowRefused(
                "⚠️ No se puede cerrar la cuenta. Todas las comandas deben estar en estado LISTA."
            )

        if not confirmed:
            return WorkflowResult.confirmation(
                f"¿Cerrar la cuenta de {bill.mesa.label}? Total: ${bill.total:,.2f}"
            )

        try:
            self.mesas.set_status(mesa_id, TableStatus.DISPONIBLE)
        except ApiError as e:
            logger.warning(f"Could not close bill for table {mesa_id}: {e.message}")
            return WorkflowResult(
                False,
                "Error al cerrar la cuenta. Por favor intenta nuevamente.",
                failure_status(e),
            )

        logger.info(f"Bill closed for table {mesa_id}, total {bill.total}")
        return WorkflowResult(
            True, "✅ Cuenta cerrada exitosamente", data=bill.to_dict(self.catalog)
        )
