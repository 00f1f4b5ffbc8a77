"""
Admin CRUD over every backend collection.

Request bodies arrive in this app's snake_case form and are validated and
converted to the backend's camelCase payloads here.
"""

from __future__ import annotations

from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any

from comandas_shared.api_client import ApiError
from comandas_shared.constants import Resource, TableStatus
from comandas_shared.logging_config import get_logger
from comandas_shared.models import Comanda, DetalleComanda, Mesa, money_to_wire, to_int
from comandas_shared.schemas import (
    CategoriaPayload,
    EstadoPayload,
    RolPayload,
    TelefonoPayload,
    UsuarioPayload,
)
from comandas_shared.serializers import serialize_comanda, serialize_entity
from comandas_shared.services.mesa_service import count_by_status, filter_mesas
from comandas_shared.services.menu_service import filter_productos
from comandas_shared.services.order_workflow_service import WorkflowResult, failure_status
from comandas_shared.services.resource_service import ResourceService
from comandas_shared.services.status_label_service import StatusCatalog
from comandas_shared.services.user_service import TelefonoService
from comandas_shared.validation import (
    ValidationError,
    parse_money,
    validate_detalle,
    validate_mesa,
    validate_producto,
)

logger = get_logger(__name__)

ALREADY_DELETED_MESSAGE = "El registro no existe o ya fue eliminado. Recargando lista..."


class AdminService:
    def __init__(self, resources: dict[str, ResourceService], catalog: StatusCatalog) -> None:
        self.resources = resources
        self.catalog = catalog

    def service_for(self, entity: str) -> ResourceService:
        service = self.resources.get(entity)
        if service is None:
            raise ValidationError(f"Entidad desconocida: {entity}")
        return service

    def serialize(self, item: Any) -> dict[str, Any]:
        if isinstance(item, Comanda):
            return serialize_comanda(item, self.catalog.describe(self.catalog.status_of(item)))
        return serialize_entity(item)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list(self, entity: str, filters: dict[str, Any] | None = None) -> dict[str, Any]:
        filters = filters or {}
        items = self.service_for(entity).get_all()
        extra: dict[str, Any] = {}

        if entity == Resource.MESAS.value:
            extra["contadores"] = count_by_status(items)
            estado = filters.get("estado")
            items = filter_mesas(
                items,
                texto=filters.get("texto"),
                estado=TableStatus.parse(estado) if estado else None,
                capacidad_min=to_int(filters.get("capacidad_min")),
            )
        elif entity == Resource.COMANDAS.value:
            items = self._filter_comandas(items, filters)
        elif entity == Resource.DETALLES_COMANDA.value:
            comanda_id = to_int(filters.get("comanda_id"))
            producto_id = to_int(filters.get("producto_id"))
            if comanda_id:
                items = [d for d in items if d.comanda_id == comanda_id]
            if producto_id:
                items = [d for d in items if d.producto_id == producto_id]
        elif entity == Resource.PRODUCTOS.value:
            items = filter_productos(
                items, categoria_id=to_int(filters.get("categoria_id")), texto=filters.get("texto")
            )
        elif entity == Resource.USUARIOS.value and filters.get("rol"):
            rol = str(filters["rol"]).strip().upper()
            items = [u for u in items if (u.rol_nombre or "").upper() == rol]

        return {"items": [self.serialize(item) for item in items], "total": len(items), **extra}

    def _filter_comandas(self, comandas: list[Comanda], filters: dict[str, Any]) -> list[Comanda]:
        estado = filters.get("estado")
        mesa_id = to_int(filters.get("mesa_id"))
        mesero_id = filters.get("mesero_id")
        if estado:
            wanted = self.catalog.normalize(estado)
            comandas = [c for c in comandas if self.catalog.status_of(c) == wanted]
        if mesa_id:
            comandas = [c for c in comandas if c.mesa_id == mesa_id]
        if mesero_id:
            comandas = [c for c in comandas if str(c.mesero_id) == str(mesero_id)]
        return comandas

    def get(self, entity: str, entity_id: int) -> dict[str, Any] | None:
        item = self.service_for(entity).get_by_id(entity_id)
        return self.serialize(item) if item is not None else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def build_payload(self, entity: str, data: dict[str, Any]) -> dict[str, Any]:
        """Validate an admin form and return the backend payload."""
        if entity == Resource.CATEGORIAS.value:
            form = CategoriaPayload(**data)
            return {"nombre": form.nombre.strip(), "descripcion": form.descripcion or ""}
        if entity == Resource.ESTADOS.value:
            return {"nombre": EstadoPayload(**data).nombre.strip()}
        if entity == Resource.ROLES.value:
            return {"nombre": RolPayload(**data).nombre.strip().upper()}
        if entity == Resource.TELEFONOS.value:
            return {"numero": TelefonoPayload(**data).numero.strip()}
        if entity == Resource.USUARIOS.value:
            form = UsuarioPayload(**data)
            payload = {"nombre": form.nombre.strip(), "email": form.email.strip().lower(), "rolId": form.rol_id}
            if form.password:
                payload["password"] = form.password
            return payload
        if entity == Resource.MESAS.value:
            return self._mesa_payload(data)
        if entity == Resource.PRODUCTOS.value:
            return self._producto_payload(data)
        if entity == Resource.DETALLES_COMANDA.value:
            return self._detalle_payload(data)
        if entity == Resource.COMANDAS.value:
            return self._comanda_payload(data)
        raise ValidationError(f"Entidad desconocida: {entity}")

    def _mesa_payload(self, data: dict[str, Any]) -> dict[str, Any]:
        numero = data.get("numero_mesa") or data.get("label")
        validate_mesa(numero, data.get("capacidad"))
        estado = TableStatus.parse(data.get("estado", TableStatus.DISPONIBLE))
        if estado is None:
            raise ValidationError("Estado de mesa inválido")
        mesa = Mesa(
            id=to_int(data.get("id")),
            label=str(numero).strip(),
            capacidad=int(data["capacidad"]),
            status=estado,
        )
        return mesa.to_backend()

    def _producto_payload(self, data: dict[str, Any]) -> dict[str, Any]:
        validate_producto(
            data.get("nombre"), data.get("precio"), data.get("stock", 0), data.get("categoria_id")
        )
        return {
            "nombre": data["nombre"].strip(),
            "descripcion": (data.get("descripcion") or "").strip(),
            "precio": money_to_wire(parse_money(data["precio"])),
            "stock": int(data.get("stock", 0)),
            "estado": bool(data.get("activo", True)),
            "idCategoria": int(data["categoria_id"]),
        }

    def _detalle_payload(self, data: dict[str, Any]) -> dict[str, Any]:
        comanda_id = to_int(data.get("comanda_id"))
        producto_id = to_int(data.get("producto_id"))
        validate_detalle(comanda_id, producto_id, data.get("cantidad"))

        precio = data.get("precio_unitario")
        nombre = data.get("nombre_producto") or ""
        if precio is None or not nombre:
            producto = self.service_for(Resource.PRODUCTOS.value).get_by_id(producto_id)
            if producto is None:
                raise ValidationError("Debe seleccionar un producto")
            precio = producto.precio if precio is None else precio
            nombre = nombre or producto.nombre

        detalle = DetalleComanda(
            id=to_int(data.get("id")),
            comanda_id=comanda_id,
            producto_id=producto_id,
            cantidad=int(data["cantidad"]),
            precio_unitario=parse_money(precio, "precio unitario"),
            nombre_producto=nombre,
            observaciones=data.get("observaciones"),
        )
        return detalle.to_backend()

    def _comanda_payload(self, data: dict[str, Any]) -> dict[str, Any]:
        mesa_id = to_int(data.get("mesa_id"))
        if not mesa_id:
            raise ValidationError("Debe seleccionar una mesa")
        estado = self.catalog.normalize(data.get("estado", "PENDIENTE"))
        if estado is None:
            raise ValidationError("Estado de comanda inválido")
        return {
            "mesaId": mesa_id,
            "meseroId": str(data.get("mesero_id") or ""),
            "cocineroId": str(data.get("cocinero_id") or ""),
            "estadoId": self.catalog.code_for(estado),
            "estadoNombre": estado.value,
            "fecha": data.get("fecha") or datetime.now(timezone.utc).isoformat(),
            "total": money_to_wire(parse_money(data.get("total", 0), "total")),
        }

    def create(self, entity: str, data: dict[str, Any]) -> WorkflowResult:
        if entity == Resource.TELEFONOS.value:
            return self._create_telefono(data)
        payload = self.build_payload(entity, data)
        created = self.service_for(entity).create(payload)
        return WorkflowResult(
            True,
            "Registro creado correctamente",
            HTTPStatus.CREATED,
            data=self.serialize(created) if created is not None else payload,
        )

    def _create_telefono(self, data: dict[str, Any]) -> WorkflowResult:
        form = TelefonoPayload(**data)
        service = self.service_for(Resource.TELEFONOS.value)
        if not isinstance(service, TelefonoService):
            raise ValidationError("Entidad desconocida: telefonos")
        creation = service.create_for_user(form.numero.strip(), form.usuario_id)
        result = WorkflowResult(
            True,
            "Teléfono creado correctamente",
            HTTPStatus.CREATED,
            data=self.serialize(creation.telefono) if creation.telefono else None,
        )
        if creation.warning:
            result.warnings.append(creation.warning)
        return result

    def update(self, entity: str, entity_id: int, data: dict[str, Any]) -> WorkflowResult:
        data = {**data, "id": entity_id}
        if entity == Resource.MESAS.value and data.get("estado") in (None, ""):
            current = self.service_for(entity).get_by_id(entity_id)
            if current is not None and current.status is not None:
                data["estado"] = current.status
        payload = self.build_payload(entity, data)
        updated = self.service_for(entity).update(entity_id, payload)
        return WorkflowResult(
            True,
            "Registro actualizado correctamente",
            data=self.serialize(updated) if updated is not None else payload,
        )

    def delete(self, entity: str, entity_id: int) -> WorkflowResult:
        """
        Delete a record. A record that is already gone counts as deleted and the
        refreshed list is returned with the notice.
        """
        service = self.service_for(entity)
        try:
            service.delete(entity_id)
        except ApiError as e:
            if not e.is_not_found:
                logger.warning(f"Could not delete {entity}/{entity_id}: {e.message}")
                return WorkflowResult(False, e.backend_message or e.message, failure_status(e))
            logger.info(f"{entity}/{entity_id} was already deleted, refreshing list")
            return WorkflowResult(True, ALREADY_DELETED_MESSAGE, data=self.list(entity))
        return WorkflowResult(True, "Registro eliminado correctamente")
