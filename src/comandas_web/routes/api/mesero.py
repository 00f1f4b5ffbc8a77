"""
Waiter (mesero) API: dashboard, menu, cart, order submission, table status
and bills.
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from comandas_shared.constants import Roles
from comandas_shared.error_catalog import describe_api_error
from comandas_shared.models import to_int
from comandas_shared.schemas import (
    CartRequest,
    ConfirmRequest,
    SubmitOrderRequest,
    TableStatusRequest,
)
from comandas_shared.serializers import serialize_entity, serialize_producto, success_response
from comandas_shared.services.cart_service import Cart, CartError
from comandas_shared.services.dashboard_service import fetch_concurrently
from comandas_shared.services.menu_service import filter_productos, with_category_names
from comandas_shared.services.price_service import bill_totals
from comandas_shared.services.user_service import filter_cocineros
from comandas_web.decorators import role_required
from comandas_web.utils.context import get_services

mesero_bp = Blueprint("comandas_mesero", __name__, url_prefix="/mesero")


@mesero_bp.get("/dashboard")
@role_required(Roles.MESERO)
def dashboard():
    services = get_services()
    return jsonify(success_response(services.mesero_dashboard.overview(services.profile))), HTTPStatus.OK


@mesero_bp.get("/mesas/disponibles")
@role_required(Roles.MESERO)
def available_tables():
    mesas = get_services().mesero_dashboard.available_tables()
    if not mesas:
        return jsonify(success_response([], "No hay mesas disponibles.")), HTTPStatus.OK
    return jsonify(success_response(mesas)), HTTPStatus.OK


@mesero_bp.patch("/mesas/<int:mesa_id>/estado")
@role_required(Roles.MESERO)
def change_table_status(mesa_id: int):
    form = TableStatusRequest(**(request.get_json(silent=True) or {}))
    result = get_services().workflow.change_table_status(mesa_id, form.estado, form.confirm)
    body, status = result.to_response()
    return jsonify(body), status


@mesero_bp.get("/menu")
@role_required(Roles.MESERO)
def menu():
    """Categories, active products (filtered) and cooks to pick for a new order."""
    services = get_services()
    results, errors = fetch_concurrently(
        {
            "categorias": services.categorias.get_all,
            "productos": services.productos.get_all,
            "usuarios": services.usuarios.get_all,
        },
        services.max_workers,
    )
    if "productos" in errors:
        raise errors["productos"]

    categorias = results.get("categorias") or []
    productos = with_category_names(results.get("productos") or [], categorias)
    productos = filter_productos(
        productos,
        categoria_id=to_int(request.args.get("categoria_id")),
        texto=request.args.get("q"),
        solo_activos=True,
    )
    cocineros = filter_cocineros(results.get("usuarios") or [])

    return jsonify(
        success_response(
            {
                "categorias": [serialize_entity(c) for c in categorias],
                "productos": [serialize_producto(p) for p in productos],
                "cocineros": [serialize_entity(u) for u in cocineros],
                "errores": {name: describe_api_error(e) for name, e in errors.items()},
            }
        )
    ), HTTPStatus.OK


@mesero_bp.post("/carrito")
@role_required(Roles.MESERO)
def cart_preview():
    """
    Recompute a cart sent by the client, optionally applying one action.

    The cart lives in the client; this endpoint only prices it against the
    current menu and enforces the cart rules.
    """
    form = CartRequest(**(request.get_json(silent=True) or {}))
    services = get_services()
    productos = services.productos.get_all()
    cart = Cart.from_request(form.items, productos)

    if form.accion is not None:
        producto = next((p for p in productos if p.id == form.accion.producto_id), None)
        if producto is None:
            raise CartError(f"Producto {form.accion.producto_id} no encontrado en el menú")
        cart.apply(form.accion.tipo, producto, form.accion.cantidad, form.accion.observaciones)

    data = cart.to_dict()
    totals = bill_totals(cart.total, services.tip_rate)
    data["propina_sugerida"] = float(totals["propina"])
    data["total_con_propina"] = float(totals["total"])
    return jsonify(success_response(data)), HTTPStatus.OK


@mesero_bp.post("/comandas")
@role_required(Roles.MESERO)
def submit_order():
    form = SubmitOrderRequest(**(request.get_json(silent=True) or {}))
    services = get_services()
    cart = Cart.from_request(form.items, services.productos.get_all())

    cocinero = None
    if form.cocinero_id:
        cocinero = next(
            (u for u in filter_cocineros(services.usuarios.get_all()) if u.id == form.cocinero_id),
            None,
        )
        if cocinero is None:
            raise CartError("El cocinero seleccionado no existe")

    result = services.workflow.submit_order(form.mesa_id, cart, cocinero)
    body, status = result.to_response()
    return jsonify(body), status


@mesero_bp.get("/comandas/activas")
@role_required(Roles.MESERO)
def active_orders():
    data = get_services().mesero_dashboard.active_orders(request.args.get("estado"))
    return jsonify(success_response(data)), HTTPStatus.OK


@mesero_bp.get("/comandas/historial")
@role_required(Roles.MESERO)
def order_history():
    data = get_services().mesero_dashboard.order_history(request.args.get("estado"))
    return jsonify(success_response(data)), HTTPStatus.OK


@mesero_bp.get("/mesas/<int:mesa_id>/cuenta")
@role_required(Roles.MESERO)
def table_bill(mesa_id: int):
    services = get_services()
    bill = services.workflow.table_bill(mesa_id)
    message = None if bill.comandas else "No hay comandas activas en esta mesa"
    return jsonify(success_response(bill.to_dict(services.catalog), message)), HTTPStatus.OK


@mesero_bp.post("/mesas/<int:mesa_id>/cerrar-cuenta")
@role_required(Roles.MESERO)
def close_bill(mesa_id: int):
    form = ConfirmRequest(**(request.get_json(silent=True) or {}))
    result = get_services().workflow.close_bill(mesa_id, form.confirm)
    body, status = result.to_response()
    return jsonify(body), status
