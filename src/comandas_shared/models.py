"""
Domain data classes for the entities owned by the restaurant backend.

Each class converts from and to the backend's camelCase JSON. Wire codes
(table status integers, money as numbers) are converted here and nowhere else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from comandas_shared.constants import TableStatus


def to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def money_to_wire(value: Decimal) -> float | int:
    """Backend expects plain JSON numbers."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _first(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _nested_id(value: Any, *keys: str) -> Any:
    """Accept either a scalar id or a nested object carrying the id."""
    if isinstance(value, dict):
        return _first(value, *keys)
    return value


@dataclass
class Categoria:
    id: int | None
    nombre: str
    descripcion: str = ""

    @classmethod
    def from_backend(cls, data: dict[str, Any]) -> Categoria:
        return cls(
            id=to_int(_first(data, "idCategoria", "id")),
            nombre=data.get("nombre") or "",
            descripcion=data.get("descripcion") or "",
        )

    def to_backend(self) -> dict[str, Any]:
        return {"idCategoria": self.id, "nombre": self.nombre, "descripcion": self.descripcion}


@dataclass
class Producto:
    id: int | None
    nombre: str
    precio: Decimal
    descripcion: str = ""
    stock: int = 0
    activo: bool = True
    categoria_id: int | None = None
    categoria_nombre: str | None = None

    @classmethod
    def from_backend(cls, data: dict[str, Any]) -> Producto:
        categoria = data.get("categoria")
        estado = data.get("estado")
        return cls(
            id=to_int(_first(data, "idProducto", "id")),
            nombre=data.get("nombre") or "",
            precio=to_decimal(data.get("precio")),
            descripcion=data.get("descripcion") or "",
            stock=to_int(data.get("stock")) or 0,
            activo=True if estado is None else bool(estado),
            categoria_id=to_int(
                _first(data, "idCategoria", "categoriaId") or _nested_id(categoria, "idCategoria")
            ),
            categoria_nombre=_first(data, "categoriaNombre", "nombreCategoria")
            or (categoria.get("nombre") if isinstance(categoria, dict) else None),
        )

    def to_backend(self) -> dict[str, Any]:
        return {
            "idProducto": self.id,
            "nombre": self.nombre,
            "descripcion": self.descripcion,
            "precio": money_to_wire(self.precio),
            "stock": self.stock,
            "estado": self.activo,
            "idCategoria": self.categoria_id,
        }


@dataclass
class Mesa:
    id: int | None
    label: str
    capacidad: int = 0
    status: TableStatus | None = None
    status_code: int | None = None

    @classmethod
    def from_backend(cls, data: dict[str, Any]) -> Mesa:
        mesa_id = to_int(_first(data, "idMesa", "id"))
        label = _first(data, "numeroMesa", "ubicacion")
        code = to_int(_nested_id(_first(data, "estadoId", "idEstado", "estado"), "idEstado", "id"))
        return cls(
            id=mesa_id,
            label=str(label) if label not in (None, "") else f"Mesa {mesa_id}",
            capacidad=to_int(data.get("capacidad")) or 0,
            status=TableStatus.from_code(code),
            status_code=code,
        )

    def to_backend(self) -> dict[str, Any]:
        return {
            "idMesa": self.id,
            "numeroMesa": self.label,
            "capacidad": self.capacidad,
            "estadoId": int(self.status) if self.status is not None else self.status_code,
        }


@dataclass
class Estado:
    id: int | None
    nombre: str

    @classmethod
    def from_backend(cls, data: dict[str, Any]) -> Estado:
        return cls(id=to_int(_first(data, "idEstado", "id")), nombre=data.get("nombre") or "")

    def to_backend(self) -> dict[str, Any]:
        return {"idEstado": self.id, "nombre": self.nombre}


@dataclass
class Rol:
    id: int | None
    nombre: str
    cantidad_usuarios: int | None = None

    @classmethod
    def from_backend(cls, data: dict[str, Any]) -> Rol:
        return cls(
            id=to_int(_first(data, "idRol", "id")),
            nombre=data.get("nombre") or "",
            cantidad_usuarios=to_int(data.get("cantidadUsuarios")),
        )

    def to_backend(self) -> dict[str, Any]:
        return {"idRol": self.id, "nombre": self.nombre}


@dataclass
class Telefono:
    id: int | None
    numero: str
    usuarios: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_backend(cls, data: dict[str, Any]) -> Telefono:
        return cls(
            id=to_int(_first(data, "idTelefono", "id")),
            numero=str(data.get("numero") or ""),
            usuarios=list(data.get("usuarios") or []),
        )

    def to_backend(self) -> dict[str, Any]:
        return {"idTelefono": self.id, "numero": self.numero}


@dataclass
class Usuario:
    id: int | None
    nombre: str
    email: str
    rol_id: int | None = None
    rol_nombre: str | None = None

    @classmethod
    def from_backend(cls, data: dict[str, Any]) -> Usuario:
        rol = data.get("rol")
        rol_nombre = data.get("rolNombre")
        if rol_nombre is None:
            rol_nombre = rol.get("nombre") if isinstance(rol, dict) else rol
        return cls(
            id=to_int(_first(data, "idUsuario", "id")),
            nombre=data.get("nombre") or "",
            email=data.get("email") or "",
            rol_id=to_int(_first(data, "rolId", "idRol") or _nested_id(rol, "idRol")),
            rol_nombre=rol_nombre,
        )

    def to_backend(self) -> dict[str, Any]:
        return {
            "idUsuario": self.id,
            "nombre": self.nombre,
            "email": self.email,
            "rolId": self.rol_id,
        }


@dataclass
class DetalleComanda:
    comanda_id: int | None
    producto_id: int | None
    cantidad: int
    precio_unitario: Decimal
    nombre_producto: str = ""
    id: int | None = None
    observaciones: str | None = None

    @property
    def subtotal(self) -> Decimal:
        return self.precio_unitario * self.cantidad

    @classmethod
    def from_backend(cls, data: dict[str, Any]) -> DetalleComanda:
        return cls(
            id=to_int(_first(data, "idDetalleComanda", "idDetalle", "id")),
            comanda_id=to_int(_first(data, "comandaId", "idComanda")),
            producto_id=to_int(_first(data, "productoId", "idProducto")),
            cantidad=to_int(data.get("cantidad")) or 0,
            precio_unitario=to_decimal(data.get("precioUnitario")),
            nombre_producto=_first(data, "nombreProducto", "productoNombre") or "",
            observaciones=data.get("observaciones"),
        )

    def to_backend(self) -> dict[str, Any]:
        payload = {
            "idDetalleComanda": self.id or 0,
            "comandaId": self.comanda_id or 0,
            "productoId": self.producto_id,
            "productoNombre": self.nombre_producto,
            "precioUnitario": money_to_wire(self.precio_unitario),
            "cantidad": self.cantidad,
            "subtotal": money_to_wire(self.subtotal),
        }
        if self.observaciones:
            payload["observaciones"] = self.observaciones
        return payload


@dataclass
class Comanda:
    id: int | None
    mesa_id: int | None
    mesa_label: str | None = None
    mesero_id: int | None = None
    mesero_nombre: str | None = None
    cocinero_id: int | None = None
    cocinero_nombre: str | None = None
    estado_id: int | None = None
    estado_nombre: str | None = None
    fecha: str | None = None
    total: Decimal = Decimal("0")
    detalles: list[DetalleComanda] = field(default_factory=list)

    @property
    def display_total(self) -> Decimal:
        """Sum of line subtotals when lines are loaded, else the server total."""
        if self.detalles:
            return sum((detalle.subtotal for detalle in self.detalles), Decimal("0"))
        return self.total

    @property
    def item_count(self) -> int:
        return sum(detalle.cantidad for detalle in self.detalles)

    @classmethod
    def from_backend(cls, data: dict[str, Any]) -> Comanda:
        estado = data.get("estado")
        estado_id = _first(data, "estadoId", "idEstado")
        estado_nombre = data.get("estadoNombre")
        if isinstance(estado, dict):
            estado_id = estado_id if estado_id is not None else _first(estado, "idEstado", "id")
            estado_nombre = estado_nombre or estado.get("nombre")
        elif isinstance(estado, str) and not estado_nombre:
            estado_nombre = estado
        elif isinstance(estado, int) and estado_id is None:
            estado_id = estado

        return cls(
            id=to_int(_first(data, "comandaId", "idComanda", "id")),
            mesa_id=to_int(_first(data, "mesaId", "idMesa")),
            mesa_label=data.get("mesaUbicacion"),
            mesero_id=to_int(_first(data, "meseroId", "idMesero")),
            mesero_nombre=data.get("meseroNombre"),
            cocinero_id=to_int(_first(data, "cocineroId", "idCocinero")),
            cocinero_nombre=data.get("cocineroNombre"),
            estado_id=to_int(estado_id),
            estado_nombre=estado_nombre,
            fecha=data.get("fecha"),
            total=to_decimal(data.get("total")),
            detalles=[DetalleComanda.from_backend(d) for d in data.get("detalles") or []],
        )
