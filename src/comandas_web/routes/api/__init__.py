"""
Comandas JSON API - Modular Blueprint Structure

Endpoints are grouped by role in sub-blueprints registered under api_bp.
"""

from flask import Blueprint

api_bp = Blueprint("comandas_api", __name__)

from comandas_web.routes.api.admin import admin_bp  # noqa: E402
from comandas_web.routes.api.auth import auth_bp  # noqa: E402
from comandas_web.routes.api.cocinero import cocinero_bp  # noqa: E402
from comandas_web.routes.api.mesero import mesero_bp  # noqa: E402

api_bp.register_blueprint(auth_bp)
api_bp.register_blueprint(admin_bp)
api_bp.register_blueprint(mesero_bp)
api_bp.register_blueprint(cocinero_bp)

__all__ = ["api_bp"]
