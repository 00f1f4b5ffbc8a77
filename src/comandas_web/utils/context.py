"""
Per-request wiring of the backend client and services.

Services are built lazily once per request and cached on `flask.g`; the
bearer token comes from the current session.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from functools import cached_property

from flask import current_app, g

from comandas_shared.api_client import ApiClient
from comandas_shared.constants import Resource
from comandas_shared.logging_config import get_logger
from comandas_shared.services.admin_service import AdminService
from comandas_shared.services.auth_service import AuthService, SessionHolder, UserProfile
from comandas_shared.services.comanda_service import ComandaService, DetalleComandaService
from comandas_shared.services.dashboard_service import (
    AdminDashboardService,
    CocineroDashboardService,
    MeseroDashboardService,
)
from comandas_shared.services.menu_service import CategoriaService, ProductoService
from comandas_shared.services.mesa_service import MesaService
from comandas_shared.services.order_workflow_service import OrderWorkflowService
from comandas_shared.services.resource_service import ResourceService
from comandas_shared.services.status_label_service import StatusCatalog
from comandas_shared.services.user_service import (
    EstadoService,
    RolService,
    TelefonoService,
    UsuarioService,
)
from comandas_web.utils.session_store import FlaskSessionStore

logger = get_logger(__name__)

EXTENSION_KEY = "comandas"


def default_api_client_factory(base_url: str, token_provider, timeout: float) -> ApiClient:
    return ApiClient(base_url, token_provider=token_provider, timeout=timeout)


@dataclass
class RequestServices:
    holder: SessionHolder
    api: ApiClient
    catalog: StatusCatalog
    api_base_url: str
    tip_rate: Decimal
    max_workers: int

    @cached_property
    def auth(self) -> AuthService:
        return AuthService(self.api, self.holder, self.api_base_url)

    @cached_property
    def profile(self) -> UserProfile | None:
        return self.auth.get_profile()

    @cached_property
    def mesas(self) -> MesaService:
        return MesaService(self.api)

    @cached_property
    def categorias(self) -> CategoriaService:
        return CategoriaService(self.api)

    @cached_property
    def productos(self) -> ProductoService:
        return ProductoService(self.api)

    @cached_property
    def estados(self) -> EstadoService:
        return EstadoService(self.api)

    @cached_property
    def roles(self) -> RolService:
        return RolService(self.api)

    @cached_property
    def usuarios(self) -> UsuarioService:
        return UsuarioService(self.api)

    @cached_property
    def telefonos(self) -> TelefonoService:
        return TelefonoService(self.api, self.usuarios)

    @cached_property
    def comandas(self) -> ComandaService:
        return ComandaService(self.api)

    @cached_property
    def detalles(self) -> DetalleComandaService:
        return DetalleComandaService(self.api)

    @cached_property
    def resources(self) -> dict[str, ResourceService]:
        return {
            Resource.CATEGORIAS.value: self.categorias,
            Resource.COMANDAS.value: self.comandas,
            Resource.DETALLES_COMANDA.value: self.detalles,
            Resource.ESTADOS.value: self.estados,
            Resource.MESAS.value: self.mesas,
            Resource.PRODUCTOS.value: self.productos,
            Resource.ROLES.value: self.roles,
            Resource.TELEFONOS.value: self.telefonos,
            Resource.USUARIOS.value: self.usuarios,
        }

    @cached_property
    def workflow(self) -> OrderWorkflowService:
        return OrderWorkflowService(
            self.comandas, self.mesas, self.catalog, self.profile, tip_rate=self.tip_rate
        )

    @cached_property
    def admin(self) -> AdminService:
        return AdminService(self.resources, self.catalog)

    @cached_property
    def admin_dashboard(self) -> AdminDashboardService:
        return AdminDashboardService(self.resources, self.max_workers)

    @cached_property
    def mesero_dashboard(self) -> MeseroDashboardService:
        return MeseroDashboardService(self.mesas, self.comandas, self.catalog, self.max_workers)

    @cached_property
    def cocinero_dashboard(self) -> CocineroDashboardService:
        return CocineroDashboardService(
            self.comandas, self.detalles, self.catalog, self.max_workers
        )


def get_services() -> RequestServices:
    services = g.get("comandas_services")
    if services is not None:
        return services

    extension = current_app.extensions[EXTENSION_KEY]
    config = current_app.config
    holder = SessionHolder(FlaskSessionStore())
    api = extension["api_client_factory"](
        config["API_BASE_URL"], holder.token_provider, config["API_TIMEOUT_SECONDS"]
    )
    services = RequestServices(
        holder=holder,
        api=api,
        catalog=extension["status_catalog"],
        api_base_url=config["API_BASE_URL"],
        tip_rate=Decimal(str(config["SUGGESTED_TIP_RATE"])),
        max_workers=config["DASHBOARD_WORKERS"],
    )

    if config.get("REFRESH_STATUS_CATALOG") and holder.token:
        services.catalog.refresh_if_stale(services.estados)

    g.comandas_services = services
    return services
