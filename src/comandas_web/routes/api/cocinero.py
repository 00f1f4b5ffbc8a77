"""Cook (cocinero) API: kitchen queue and order transitions."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from comandas_shared.constants import Roles
from comandas_shared.schemas import ConfirmRequest
from comandas_shared.serializers import error_response, success_response
from comandas_web.decorators import role_required
from comandas_web.utils.context import get_services

cocinero_bp = Blueprint("comandas_cocinero", __name__, url_prefix="/cocinero")


@cocinero_bp.get("/dashboard")
@role_required(Roles.COCINERO)
def dashboard():
    services = get_services()
    return jsonify(success_response(services.cocinero_dashboard.overview(services.profile))), HTTPStatus.OK


@cocinero_bp.get("/comandas")
@role_required(Roles.COCINERO)
def kitchen_queue():
    data = get_services().cocinero_dashboard.kitchen_queue(request.args.get("estado"))
    return jsonify(success_response(data)), HTTPStatus.OK


@cocinero_bp.get("/comandas/<int:comanda_id>")
@role_required(Roles.COCINERO)
def order_detail(comanda_id: int):
    data = get_services().cocinero_dashboard.order_detail(comanda_id)
    if data is None:
        return jsonify(error_response("Error al cargar la comanda")), HTTPStatus.NOT_FOUND
    return jsonify(success_response(data)), HTTPStatus.OK


@cocinero_bp.post("/comandas/<int:comanda_id>/iniciar")
@role_required(Roles.COCINERO)
def start_preparation(comanda_id: int):
    form = ConfirmRequest(**(request.get_json(silent=True) or {}))
    result = get_services().workflow.start_preparation(comanda_id, form.confirm)
    body, status = result.to_response()
    return jsonify(body), status


@cocinero_bp.post("/comandas/<int:comanda_id>/lista")
@role_required(Roles.COCINERO)
def mark_ready(comanda_id: int):
    form = ConfirmRequest(**(request.get_json(silent=True) or {}))
    result = get_services().workflow.mark_ready(comanda_id, form.confirm)
    body, status = result.to_response()
    return jsonify(body), status
