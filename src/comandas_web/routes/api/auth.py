"""
Authentication API.

Endpoints:
- POST /auth/login - Authenticate against the backend, store token and profile
- POST /auth/register - Create a MESERO or COCINERO account
- POST /auth/password-strength - Rate a candidate password
- POST /auth/logout - Clear the session
- GET /auth/me - Current profile and its dashboard
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request

from comandas_shared.schemas import LoginRequest, RegisterRequest
from comandas_shared.serializers import success_response
from comandas_shared.services.auth_service import dashboard_for_role
from comandas_shared.validation import password_strength
from comandas_web.decorators import login_required
from comandas_web.utils.context import get_services

auth_bp = Blueprint("comandas_auth", __name__)


@auth_bp.post("/auth/login")
def login():
    form = LoginRequest(**(request.get_json(silent=True) or {}))
    result = get_services().auth.login(form.email, form.password)
    return jsonify(
        success_response(
            {"usuario": result.profile.to_storage(), "redirect": result.redirect_to},
            f"Bienvenido, {result.profile.nombre or result.profile.email}",
        )
    ), HTTPStatus.OK


@auth_bp.post("/auth/register")
def register():
    form = RegisterRequest(**(request.get_json(silent=True) or {}))
    created = get_services().auth.register(
        form.nombre, form.email, form.password, form.confirm_password, form.rol
    )
    return jsonify(
        success_response(created, "Usuario registrado exitosamente. Ya puedes iniciar sesión")
    ), HTTPStatus.CREATED


@auth_bp.post("/auth/password-strength")
def check_password_strength():
    data = request.get_json(silent=True) or {}
    return jsonify(success_response({"nivel": password_strength(data.get("password") or "")})), HTTPStatus.OK


@auth_bp.post("/auth/logout")
def logout():
    get_services().auth.logout()
    return jsonify(success_response(None, "Sesión cerrada")), HTTPStatus.OK


@auth_bp.get("/auth/me")
@login_required
def me():
    profile = get_services().profile
    return jsonify(
        success_response(
            {
                "usuario": profile.to_storage(),
                "inicial": profile.initial,
                "redirect": dashboard_for_role(profile.rol),
            }
        )
    ), HTTPStatus.OK
