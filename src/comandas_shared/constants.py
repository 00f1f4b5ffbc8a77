"""
Application constants and enums.
"""

from __future__ import annotations

import unicodedata
from enum import Enum


class Roles(str, Enum):
    ADMIN = "ADMIN"
    MESERO = "MESERO"
    COCINERO = "COCINERO"

    @classmethod
    def parse(cls, value) -> Roles | None:
        if value is None:
            return None
        normalized = str(value).strip().upper()
        for member in cls:
            if member.value == normalized:
                return member
        return None


# Roles a visitor may pick for self-registration
REGISTRABLE_ROLES = (Roles.MESERO, Roles.COCINERO)

# Backend numeric id of the cook role, used by some user payloads instead of the name
COCINERO_ROLE_ID = 3

ROLE_DASHBOARDS = {
    Roles.ADMIN: "/admin/dashboard",
    Roles.MESERO: "/mesero/dashboard",
    Roles.COCINERO: "/cocinero/dashboard",
}

LOGIN_ROUTE = "/login"


class TableStatus(int, Enum):
    DISPONIBLE = 1
    OCUPADA = 2
    RESERVADA = 3

    @classmethod
    def from_code(cls, value) -> TableStatus | None:
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return None

    @classmethod
    def parse(cls, value) -> TableStatus | None:
        """Accept a numeric code or a status name."""
        if isinstance(value, TableStatus):
            return value
        status = cls.from_code(value)
        if status is not None:
            return status
        if isinstance(value, str):
            key = normalize_status_name(value)
            for member in cls:
                if member.name == key:
                    return member
        return None


TABLE_STATUS_LABELS = {
    TableStatus.DISPONIBLE: "Disponible",
    TableStatus.OCUPADA: "Ocupada",
    TableStatus.RESERVADA: "Reservada",
}

UNKNOWN_STATUS_LABEL = "SIN ESTADO"


class OrderStatus(str, Enum):
    PENDIENTE = "PENDIENTE"
    EN_PREPARACION = "EN_PREPARACION"
    LISTA = "LISTA"
    ENTREGADA = "ENTREGADA"
    CANCELADA = "CANCELADA"


# Default numeric codes as found in the estados table of the backend.
# EN_PREPARACION has no seeded row; 2 is the code the kitchen writes.
ORDER_STATUS_DEFAULT_CODES = {
    OrderStatus.PENDIENTE: 4,
    OrderStatus.LISTA: 5,
    OrderStatus.ENTREGADA: 6,
    OrderStatus.CANCELADA: 7,
    OrderStatus.EN_PREPARACION: 2,
}

# Codes accepted by PUT comandas/{id}/estado for the kitchen transitions.
# LISTA is written as 3 there while order listings report it as 5.
KITCHEN_TRANSITION_CODES = {
    OrderStatus.EN_PREPARACION: 2,
    OrderStatus.LISTA: 3,
}

ORDER_STATUS_META_DEFAULT = {
    OrderStatus.PENDIENTE: {"label": "Pendiente", "icon": "⏳"},
    OrderStatus.EN_PREPARACION: {"label": "En preparación", "icon": "👨‍🍳"},
    OrderStatus.LISTA: {"label": "Lista", "icon": "✅"},
    OrderStatus.ENTREGADA: {"label": "Entregada", "icon": "🍽️"},
    OrderStatus.CANCELADA: {"label": "Cancelada", "icon": "❌"},
}

ACTIVE_ORDER_STATUSES = {
    OrderStatus.PENDIENTE,
    OrderStatus.EN_PREPARACION,
    OrderStatus.LISTA,
}

KITCHEN_QUEUE_STATUSES = {
    OrderStatus.PENDIENTE,
    OrderStatus.EN_PREPARACION,
}

COMPLETED_ORDER_STATUSES = {
    OrderStatus.LISTA,
    OrderStatus.ENTREGADA,
}

# Synonyms seen in backend payloads
ORDER_STATUS_ALIASES = {
    "PREPARACION": OrderStatus.EN_PREPARACION,
    "PREPARANDO": OrderStatus.EN_PREPARACION,
    "LISTO": OrderStatus.LISTA,
    "ENTREGADO": OrderStatus.ENTREGADA,
    "SERVIDO": OrderStatus.ENTREGADA,
    "SERVIDA": OrderStatus.ENTREGADA,
    "CANCELADO": OrderStatus.CANCELADA,
}

FILTER_ALL = "TODAS"

STOCK_OPERATIONS = ("aumentar", "reducir")


def normalize_status_name(value: str) -> str:
    """Uppercase, strip accents and join words with underscores."""
    decomposed = unicodedata.normalize("NFKD", value.strip())
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return "_".join(ascii_only.upper().replace("-", " ").split())


class Resource(str, Enum):
    """Backend collections exposed by the REST API."""

    CATEGORIAS = "categorias"
    COMANDAS = "comandas"
    DETALLES_COMANDA = "detalles-comanda"
    ESTADOS = "estados"
    MESAS = "mesas"
    PRODUCTOS = "productos"
    ROLES = "roles"
    TELEFONOS = "telefonos"
    USUARIOS = "usuarios"


ADMIN_ENTITY_CARDS = [
    {
        "entity": Resource.CATEGORIAS.value,
        "title": "Categorías",
        "badge": "Menú",
        "description": "Organiza los productos del menú por categorías.",
        "route": "/admin/categorias",
    },
    {
        "entity": Resource.COMANDAS.value,
        "title": "Comandas",
        "badge": "Operación",
        "description": "Consulta y gestiona todas las comandas del restaurante.",
        "route": "/admin/comandas",
    },
    {
        "entity": Resource.DETALLES_COMANDA.value,
        "title": "Detalles de comanda",
        "badge": "Operación",
        "description": "Líneas de producto asociadas a cada comanda.",
        "route": "/admin/detalles-comanda",
    },
    {
        "entity": Resource.ESTADOS.value,
        "title": "Estados",
        "badge": "Catálogo",
        "description": "Estados de mesas y comandas.",
        "route": "/admin/estados",
    },
    {
        "entity": Resource.MESAS.value,
        "title": "Mesas",
        "badge": "Salón",
        "description": "Mesas del salón, capacidad y disponibilidad.",
        "route": "/admin/mesas",
    },
    {
        "entity": Resource.PRODUCTOS.value,
        "title": "Productos",
        "badge": "Menú",
        "description": "Platos y bebidas con precio, stock y estado.",
        "route": "/admin/productos",
    },
    {
        "entity": Resource.ROLES.value,
        "title": "Roles",
        "badge": "Seguridad",
        "description": "Roles disponibles para los usuarios del sistema.",
        "route": "/admin/roles",
    },
    {
        "entity": Resource.TELEFONOS.value,
        "title": "Teléfonos",
        "badge": "Contacto",
        "description": "Teléfonos de contacto asociados a usuarios.",
        "route": "/admin/telefonos",
    },
    {
        "entity": Resource.USUARIOS.value,
        "title": "Usuarios",
        "badge": "Seguridad",
        "description": "Administradores, meseros y cocineros.",
        "route": "/admin/usuarios",
    },
]

MIN_PASSWORD_LENGTH = 6
