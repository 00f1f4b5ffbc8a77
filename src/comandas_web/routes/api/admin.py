"""
Admin API: dashboard and CRUD over every backend collection.

Collections are addressed by their backend name, e.g. /admin/mesas or
/admin/detalles-comanda/5.
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from comandas_shared.constants import Resource, Roles
from comandas_shared.schemas import ProductStateRequest, StockRequest
from comandas_shared.serializers import (
    error_response,
    serialize_detalle,
    serialize_entity,
    success_response,
)
from comandas_web.decorators import role_required
from comandas_web.utils.context import get_services

admin_bp = Blueprint("comandas_admin", __name__, url_prefix="/admin")


def _require_entity(entity: str):
    if entity not in {resource.value for resource in Resource}:
        return jsonify(error_response(f"Entidad desconocida: {entity}")), HTTPStatus.NOT_FOUND
    return None


@admin_bp.get("/dashboard")
@role_required(Roles.ADMIN)
def dashboard():
    services = get_services()
    return jsonify(success_response(services.admin_dashboard.overview(services.profile))), HTTPStatus.OK


@admin_bp.get("/<entity>")
@role_required(Roles.ADMIN)
def list_entities(entity: str):
    if (error := _require_entity(entity)) is not None:
        return error
    data = get_services().admin.list(entity, request.args.to_dict())
    return jsonify(success_response(data)), HTTPStatus.OK


@admin_bp.get("/<entity>/<int:entity_id>")
@role_required(Roles.ADMIN)
def get_entity(entity: str, entity_id: int):
    if (error := _require_entity(entity)) is not None:
        return error
    data = get_services().admin.get(entity, entity_id)
    if data is None:
        return jsonify(error_response("Recurso no encontrado")), HTTPStatus.NOT_FOUND
    return jsonify(success_response(data)), HTTPStatus.OK


@admin_bp.post("/<entity>")
@role_required(Roles.ADMIN)
def create_entity(entity: str):
    if (error := _require_entity(entity)) is not None:
        return error
    result = get_services().admin.create(entity, request.get_json(silent=True) or {})
    body, status = result.to_response()
    return jsonify(body), status


@admin_bp.put("/<entity>/<int:entity_id>")
@role_required(Roles.ADMIN)
def update_entity(entity: str, entity_id: int):
    if (error := _require_entity(entity)) is not None:
        return error
    result = get_services().admin.update(entity, entity_id, request.get_json(silent=True) or {})
    body, status = result.to_response()
    return jsonify(body), status


@admin_bp.delete("/<entity>/<int:entity_id>")
@role_required(Roles.ADMIN)
def delete_entity(entity: str, entity_id: int):
    if (error := _require_entity(entity)) is not None:
        return error
    result = get_services().admin.delete(entity, entity_id)
    body, status = result.to_response()
    return jsonify(body), status


@admin_bp.get("/comandas/<int:comanda_id>/detalles")
@role_required(Roles.ADMIN)
def order_lines(comanda_id: int):
    detalles = get_services().comandas.get_detalles_admin(comanda_id)
    return jsonify(success_response([serialize_detalle(d) for d in detalles])), HTTPStatus.OK


@admin_bp.get("/comandas/hoy")
@role_required(Roles.ADMIN)
def orders_today():
    services = get_services()
    comandas = services.comandas.get_hoy()
    return jsonify(success_response([services.admin.serialize(c) for c in comandas])), HTTPStatus.OK


@admin_bp.get("/comandas/estadisticas")
@role_required(Roles.ADMIN)
def order_statistics():
    services = get_services()
    return jsonify(
        success_response(
            {
                "estadisticas": services.comandas.get_estadisticas(),
                "ventasHoy": services.comandas.get_ventas_hoy(),
            }
        )
    ), HTTPStatus.OK


@admin_bp.put("/productos/<int:producto_id>/stock")
@role_required(Roles.ADMIN)
def update_stock(producto_id: int):
    form = StockRequest(**(request.get_json(silent=True) or {}))
    data = get_services().productos.update_stock(producto_id, form.cantidad, form.operacion)
    return jsonify(success_response(data, "Stock actualizado")), HTTPStatus.OK


@admin_bp.put("/productos/<int:producto_id>/estado")
@role_required(Roles.ADMIN)
def set_product_state(producto_id: int):
    form = ProductStateRequest(**(request.get_json(silent=True) or {}))
    data = get_services().productos.set_active(producto_id, form.estado)
    message = "Producto activado" if form.estado else "Producto desactivado"
    return jsonify(success_response(data, message)), HTTPStatus.OK


@admin_bp.get("/usuarios/rol/<rol>")
@role_required(Roles.ADMIN)
def users_by_role(rol: str):
    usuarios = get_services().usuarios.get_by_rol(rol.upper())
    return jsonify(success_response([serialize_entity(u) for u in usuarios])), HTTPStatus.OK


@admin_bp.post("/usuarios/<int:usuario_id>/telefonos/<int:telefono_id>")
@role_required(Roles.ADMIN)
def link_phone(usuario_id: int, telefono_id: int):
    get_services().usuarios.add_telefono(usuario_id, telefono_id)
    return jsonify(success_response(None, "Teléfono asociado al usuario")), HTTPStatus.OK


@admin_bp.delete("/usuarios/<int:usuario_id>/telefonos/<int:telefono_id>")
@role_required(Roles.ADMIN)
def unlink_phone(usuario_id: int, telefono_id: int):
    get_services().usuarios.remove_telefono(usuario_id, telefono_id)
    return jsonify(success_response(None, "Teléfono desasociado del usuario")), HTTPStatus.OK
