"""
Serializers for consistent API responses.
"""

from __future__ import annotations

from dataclasses import asdict
from decimal import Decimal
from typing import Any

from comandas_shared.constants import TABLE_STATUS_LABELS, UNKNOWN_STATUS_LABEL
from comandas_shared.models import (
    Categoria,
    Comanda,
    DetalleComanda,
    Estado,
    Mesa,
    Producto,
    Rol,
    Telefono,
    Usuario,
)


def money(value: Decimal | None) -> float:
    if value is None:
        return 0.0
    return float(value)


def serialize_detalle(detalle: DetalleComanda) -> dict[str, Any]:
    return {
        "id": detalle.id,
        "comanda_id": detalle.comanda_id,
        "producto_id": detalle.producto_id,
        "nombre_producto": detalle.nombre_producto,
        "cantidad": detalle.cantidad,
        "precio_unitario": money(detalle.precio_unitario),
        "subtotal": money(detalle.subtotal),
        "observaciones": detalle.observaciones,
    }


def serialize_comanda(comanda: Comanda, status_meta: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Serialize a Comanda for the role views.

    Args:
        comanda: Order to serialize
        status_meta: Normalized status info, from StatusCatalog.describe()
    """
    return {
        "id": comanda.id,
        "mesa_id": comanda.mesa_id,
        "mesa": comanda.mesa_label or (f"Mesa {comanda.mesa_id}" if comanda.mesa_id else None),
        "mesero_id": comanda.mesero_id,
        "mesero_nombre": comanda.mesero_nombre,
        "cocinero_id": comanda.cocinero_id,
        "cocinero_nombre": comanda.cocinero_nombre,
        "estado_id": comanda.estado_id,
        "estado_nombre": comanda.estado_nombre,
        "estado": status_meta,
        "fecha": comanda.fecha,
        "total": money(comanda.display_total),
        "total_servidor": money(comanda.total),
        "cantidad_productos": comanda.item_count,
        "detalles": [serialize_detalle(d) for d in comanda.detalles],
    }


def serialize_mesa(mesa: Mesa) -> dict[str, Any]:
    return {
        "id": mesa.id,
        "label": mesa.label,
        "capacidad": mesa.capacidad,
        "estado": mesa.status.name if mesa.status is not None else UNKNOWN_STATUS_LABEL,
        "estado_id": mesa.status_code,
        "estado_label": TABLE_STATUS_LABELS.get(mesa.status, UNKNOWN_STATUS_LABEL),
    }


def serialize_producto(producto: Producto) -> dict[str, Any]:
    return {
        "id": producto.id,
        "nombre": producto.nombre,
        "descripcion": producto.descripcion,
        "precio": money(producto.precio),
        "stock": producto.stock,
        "activo": producto.activo,
        "categoria_id": producto.categoria_id,
        "categoria_nombre": producto.categoria_nombre,
    }


def serialize_entity(entity: Any) -> dict[str, Any]:
    """Serialize any of the flat reference entities."""
    if isinstance(entity, Comanda):
        return serialize_comanda(entity)
    if isinstance(entity, Mesa):
        return serialize_mesa(entity)
    if isinstance(entity, Producto):
        return serialize_producto(entity)
    if isinstance(entity, DetalleComanda):
        return serialize_detalle(entity)
    if isinstance(entity, (Categoria, Estado, Rol, Telefono, Usuario)):
        return asdict(entity)
    return entity


def success_response(data: Any, message: str | None = None) -> dict[str, Any]:
    """Create a standardized success response."""
    response = {"status": "success", "data": data, "error": None}
    if message:
        response["message"] = message
    return response


def error_response(error: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Create a standardized error response."""
    response = {"status": "error", "data": None, "error": error}
    if details:
        response["details"] = details
    return response
