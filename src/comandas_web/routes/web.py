"""
Entry points that send the browser to the right place for its session.
"""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, redirect, url_for

from comandas_shared.constants import LOGIN_ROUTE
from comandas_shared.serializers import success_response
from comandas_shared.services.auth_service import dashboard_for_role
from comandas_web.utils.context import get_services

web_bp = Blueprint("comandas_web", __name__)


@web_bp.get("/")
def home():
    """Redirect to the dashboard of the logged-in role, or to login."""
    services = get_services()
    if not services.auth.is_authenticated():
        return redirect(LOGIN_ROUTE)

    target = dashboard_for_role(services.auth.current_role())
    if target is None:
        services.auth.logout()
        return redirect(LOGIN_ROUTE)
    return redirect(target)


@web_bp.get(LOGIN_ROUTE)
def login_page():
    return jsonify(
        success_response(
            {"login": url_for("comandas_api.comandas_auth.login")},
            "Inicia sesión para continuar",
        )
    ), HTTPStatus.OK


@web_bp.get("/<any(admin, mesero, cocinero):role>/dashboard")
def dashboard_page(role: str):
    # Role checks happen on the JSON endpoint
    return redirect(url_for(f"comandas_api.comandas_{role}.dashboard"))


@web_bp.get("/logout")
def logout():
    get_services().auth.logout()
    return redirect(LOGIN_ROUTE)
