from decimal import Decimal
from http import HTTPStatus
from unittest.mock import Mock, call

import pytest

from comandas_shared.api_client import ApiError
from comandas_shared.constants import OrderStatus, TableStatus
from comandas_shared.models import Comanda, Estado, Mesa, Usuario
from comandas_shared.services.auth_service import UserProfile
from comandas_shared.services.cart_service import Cart
from comandas_shared.services.comanda_service import ComandaService
from comandas_shared.services.mesa_service import MesaService
from comandas_shared.services.order_workflow_service import (
    OrderWorkflowService,
    WorkflowRefused,
)
from comandas_shared.services.status_label_service import StatusCatalog


@pytest.fixture
def comandas():
    return Mock(spec=ComandaService)


@pytest.fixture
def mesas():
    return Mock(spec=MesaService)


@pytest.fixture
def mesero():
    return UserProfile(email="ana@buensazon.co", nombre="Ana", rol="MESERO", id_usuario="7")


@pytest.fixture
def cocinero():
    return UserProfile(email="luis@buensazon.co", nombre="Luis", rol="COCINERO", id_usuario="12")


@pytest.fixture
def catalog():
    return StatusCatalog()


def mesa(status, mesa_id=3):
    return Mesa(id=mesa_id, label=f"Mesa {mesa_id}", capacidad=4, status=status, status_code=int(status))


def comanda(comanda_id, estado, total="0"):
    return Comanda(id=comanda_id, mesa_id=3, estado_nombre=estado, total=Decimal(total))


@pytest.fixture
def cart(producto_a, producto_b):
    cart = Cart()
    cart.add(producto_a, 2)
    cart.add(producto_b, 1)
    return cart


class TestSubmitOrder:

    def test_success_occupies_table_then_creates_order(self, comandas, mesas, catalog, mesero, cart):
        mesas.get_by_id.return_value = mesa(TableStatus.DISPONIBLE)
        comandas.create.return_value = Comanda(id=50, mesa_id=3, estado_nombre="PENDIENTE")
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        result = service.submit_order(3, cart)

        assert result.success
        assert result.status == HTTPStatus.CREATED
        mesas.set_status.assert_called_once_with(3, TableStatus.OCUPADA)
        payload = comandas.create.call_args.args[0]
        assert payload["mesaId"] == 3
        assert payload["meseroId"] == "7"
        assert payload["estadoId"] == 4
        assert payload["total"] == 25000
        assert len(payload["detalles"]) == 2

    def test_failed_creation_frees_the_same_table(self, comandas, mesas, catalog, mesero, cart):
        mesas.get_by_id.return_value = mesa(TableStatus.DISPONIBLE)
        comandas.create.side_effect = ApiError("Bad Request", 400, payload={"message": "Sin stock"})
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        result = service.submit_order(3, cart)

        assert not result.success
        assert result.message == "Error al enviar la comanda: Sin stock"
        assert result.status == HTTPStatus.BAD_REQUEST
        assert mesas.set_status.call_args_list == [
            call(3, TableStatus.OCUPADA),
            call(3, TableStatus.DISPONIBLE),
        ]
        assert int(mesas.set_status.call_args_list[1].args[1]) == 1
        assert not result.partial

    def test_failed_revert_is_reported_as_warning(self, comandas, mesas, catalog, mesero, cart):
        mesas.get_by_id.return_value = mesa(TableStatus.DISPONIBLE)
        mesas.set_status.side_effect = [None, ApiError("down", 0)]
        comandas.create.side_effect = ApiError("Internal", 500)
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        result = service.submit_order(3, cart)

        assert result.partial
        assert result.warnings
        assert result.message == "Error al enviar la comanda: Error desconocido"

    def test_failed_occupation_does_not_create(self, comandas, mesas, catalog, mesero, cart):
        mesas.get_by_id.return_value = mesa(TableStatus.DISPONIBLE)
        mesas.set_status.side_effect = ApiError("Forbidden", 403)
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        result = service.submit_order(3, cart)

        assert result.message == "Error al ocupar la mesa. No se puede crear la comanda."
        comandas.create.assert_not_called()

    def test_occupied_table_is_refused(self, comandas, mesas, catalog, mesero, cart):
        mesas.get_by_id.return_value = mesa(TableStatus.OCUPADA)
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        with pytest.raises(WorkflowRefused):
            service.submit_order(3, cart)
        mesas.set_status.assert_not_called()

    def test_empty_cart_is_refused(self, comandas, mesas, catalog, mesero):
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        with pytest.raises(WorkflowRefused, match="vacía"):
            service.submit_order(3, Cart())

    def test_selected_cook_goes_in_payload(self, comandas, mesas, catalog, mesero, cart):
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)
        luis = Usuario(id=12, nombre="Luis", email="luis@buensazon.co", rol_nombre="COCINERO")

        payload = service.build_order_payload(mesa(TableStatus.DISPONIBLE), cart, luis)

        assert payload["cocineroId"] == "12"
        assert payload["cocineroNombre"] == "Luis"
        assert payload["idComanda"] == 0


class TestKitchenTransitions:

    def test_start_requires_confirmation(self, comandas, mesas, catalog, cocinero):
        comandas.get_by_id.return_value = comanda(10, "PENDIENTE")
        service = OrderWorkflowService(comandas, mesas, catalog, cocinero)

        result = service.start_preparation(10)

        assert result.requires_confirmation
        comandas.assign_cocinero.assert_not_called()

    def test_start_assigns_cook_then_sets_status(self, comandas, mesas, catalog, cocinero):
        comandas.get_by_id.return_value = comanda(10, "PENDIENTE")
        service = OrderWorkflowService(comandas, mesas, catalog, cocinero)

        result = service.start_preparation(10, confirmed=True)

        assert result.success
        comandas.assign_cocinero.assert_called_once_with(10, 12)
        comandas.set_status.assert_called_once_with(10, 2)

    def test_status_failure_after_assignment_is_partial(self, comandas, mesas, catalog, cocinero):
        comandas.get_by_id.return_value = comanda(10, "PENDIENTE")
        comandas.set_status.side_effect = ApiError("Internal", 500)
        service = OrderWorkflowService(comandas, mesas, catalog, cocinero)

        result = service.start_preparation(10, confirmed=True)

        assert not result.success
        assert result.partial
        assert "cocinero quedó asignado" in result.message

    def test_assignment_failure_is_not_partial(self, comandas, mesas, catalog, cocinero):
        comandas.get_by_id.return_value = comanda(10, "PENDIENTE")
        comandas.assign_cocinero.side_effect = ApiError("Forbidden", 403)
        service = OrderWorkflowService(comandas, mesas, catalog, cocinero)

        result = service.start_preparation(10, confirmed=True)

        assert result.message == "❌ Error al asignar cocinero"
        assert result.status == HTTPStatus.FORBIDDEN
        assert not result.partial
        comandas.set_status.assert_not_called()

    def test_cannot_start_order_in_preparation(self, comandas, mesas, catalog, cocinero):
        comandas.get_by_id.return_value = comanda(10, "En preparación")
        service = OrderWorkflowService(comandas, mesas, catalog, cocinero)

        with pytest.raises(WorkflowRefused):
            service.start_preparation(10, confirmed=True)

    def test_mark_ready_sends_kitchen_lista_code(self, comandas, mesas, catalog, cocinero):
        comandas.get_by_id.return_value = comanda(10, "EN_PREPARACION")
        service = OrderWorkflowService(comandas, mesas, catalog, cocinero)

        result = service.mark_ready(10, confirmed=True)

        assert result.success
        comandas.set_status.assert_called_once_with(10, 3)

    def test_kitchen_codes_survive_catalog_reload(self, comandas, mesas, catalog, cocinero):
        catalog.load([Estado(id=11, nombre="EN_PREPARACION"), Estado(id=15, nombre="LISTA")])
        comandas.get_by_id.side_effect = [comanda(10, "PENDIENTE"), comanda(10, "EN_PREPARACION")]
        service = OrderWorkflowService(comandas, mesas, catalog, cocinero)

        service.start_preparation(10, confirmed=True)
        service.mark_ready(10, confirmed=True)

        assert comandas.set_status.call_args_list == [call(10, 2), call(10, 3)]

    def test_cannot_mark_pending_order_ready(self, comandas, mesas, catalog, cocinero):
        comandas.get_by_id.return_value = comanda(10, "PENDIENTE")
        service = OrderWorkflowService(comandas, mesas, catalog, cocinero)

        with pytest.raises(WorkflowRefused):
            service.mark_ready(10, confirmed=True)


class TestTableStatus:

    def test_occupied_table_cannot_change(self, comandas, mesas, catalog, mesero):
        mesas.get_by_id.return_value = mesa(TableStatus.OCUPADA)
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        with pytest.raises(WorkflowRefused, match="comandas activas"):
            service.change_table_status(3, "DISPONIBLE", confirmed=True)
        mesas.set_status.assert_not_called()

    def test_reserve_free_table(self, comandas, mesas, catalog, mesero):
        mesas.get_by_id.return_value = mesa(TableStatus.DISPONIBLE)
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        result = service.change_table_status(3, "reservada", confirmed=True)

        assert result.success
        assert result.data["estado"] == "RESERVADA"
        mesas.set_status.assert_called_once_with(3, TableStatus.RESERVADA)

    def test_same_status_is_a_no_op(self, comandas, mesas, catalog, mesero):
        mesas.get_by_id.return_value = mesa(TableStatus.RESERVADA)
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        result = service.change_table_status(3, 3)

        assert result.success
        mesas.set_status.assert_not_called()

    def test_invalid_status_is_rejected(self, comandas, mesas, catalog, mesero):
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        with pytest.raises(WorkflowRefused) as excinfo:
            service.change_table_status(3, "LIMPIEZA")
        assert excinfo.value.status == HTTPStatus.BAD_REQUEST


class TestCloseBill:

    def test_pending_order_blocks_closing(self, comandas, mesas, catalog, mesero):
        mesas.get_by_id.return_value = mesa(TableStatus.OCUPADA)
        comandas.get_mis_comandas_de_mesa.return_value = [
            comanda(10, "LISTA", "20000"),
            comanda(11, "PENDIENTE", "5000"),
        ]
        comandas.get_detalles_de_mi_comanda.return_value = []
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        with pytest.raises(WorkflowRefused, match="Todas las comandas deben estar en estado LISTA"):
            service.close_bill(3, confirmed=True)
        mesas.set_status.assert_not_called()

    def test_all_ready_frees_table(self, comandas, mesas, catalog, mesero):
        mesas.get_by_id.return_value = mesa(TableStatus.OCUPADA)
        comandas.get_mis_comandas_de_mesa.return_value = [
            comanda(10, "LISTA", "20000"),
            comanda(11, "Listo", "5000"),
            comanda(12, "ENTREGADA", "9000"),
        ]
        comandas.get_detalles_de_mi_comanda.return_value = []
        service = OrderWorkflowService(comandas, mesas, catalog, mesero, tip_rate=Decimal("0.10"))

        result = service.close_bill(3, confirmed=True)

        assert result.success
        assert result.data["total"] == 27500.0
        mesas.set_status.assert_called_once_with(3, TableStatus.DISPONIBLE)

    def test_close_asks_for_confirmation_with_total(self, comandas, mesas, catalog, mesero):
        mesas.get_by_id.return_value = mesa(TableStatus.OCUPADA)
        comandas.get_mis_comandas_de_mesa.return_value = [comanda(10, "LISTA", "25000")]
        comandas.get_detalles_de_mi_comanda.return_value = []
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        result = service.close_bill(3)

        assert result.requires_confirmation
        assert "27,500.00" in result.message

    def test_bill_without_orders_after_404(self, comandas, mesas, catalog, mesero):
        mesas.get_by_id.return_value = mesa(TableStatus.DISPONIBLE)
        comandas.get_mis_comandas_de_mesa.side_effect = ApiError("Not Found", 404)
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        bill = service.table_bill(3)

        assert bill.comandas == []
        assert not bill.puede_cerrar

    def test_forbidden_table_is_refused(self, comandas, mesas, catalog, mesero):
        mesas.get_by_id.return_value = mesa(TableStatus.OCUPADA)
        comandas.get_mis_comandas_de_mesa.side_effect = ApiError("Forbidden", 403)
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        with pytest.raises(WorkflowRefused, match="No tienes permisos"):
            service.table_bill(3)

    def test_order_with_unknown_status_keeps_bill_open(self, comandas, mesas, catalog, mesero):
        mesas.get_by_id.return_value = mesa(TableStatus.OCUPADA)
        comandas.get_mis_comandas_de_mesa.return_value = [
            comanda(1, "LISTA", "20000"),
            Comanda(id=2, mesa_id=3, estado_id=99, total=Decimal("5000")),
        ]
        comandas.get_detalles_de_mi_comanda.return_value = []
        service = OrderWorkflowService(comandas, mesas, catalog, mesero)

        bill = service.table_bill(3)

        assert [c.id for c in bill.comandas] == [1, 2]
        assert not bill.puede_cerrar
        with pytest.raises(WorkflowRefused):
            service.close_bill(3, confirmed=True)
        mesas.set_status.assert_not_called()
