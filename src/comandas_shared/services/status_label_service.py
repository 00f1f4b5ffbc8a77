"""
Order status catalog.

Maps between the canonical `OrderStatus` names and the numeric codes used by
the backend. Codes start from defaults and are refreshed by name from the
`estados` collection, so views never hard-code a number.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from comandas_shared.api_client import ApiError
from comandas_shared.constants import (
    KITCHEN_TRANSITION_CODES,
    ORDER_STATUS_ALIASES,
    ORDER_STATUS_DEFAULT_CODES,
    ORDER_STATUS_META_DEFAULT,
    UNKNOWN_STATUS_LABEL,
    OrderStatus,
    normalize_status_name,
)
from comandas_shared.logging_config import get_logger
from comandas_shared.models import Comanda

logger = get_logger(__name__)

_CATALOG_TTL = timedelta(minutes=5)

# Checked in order against names that match no status exactly
_SUBSTRING_RULES = (
    ("PREPARA", OrderStatus.EN_PREPARACION),
    ("PENDIENTE", OrderStatus.PENDIENTE),
    ("LIST", OrderStatus.LISTA),
    ("ENTREGAD", OrderStatus.ENTREGADA),
    ("SERVID", OrderStatus.ENTREGADA),
    ("CANCELAD", OrderStatus.CANCELADA),
)


def status_from_name(name: str) -> OrderStatus | None:
    key = normalize_status_name(name)
    if not key:
        return None
    if key in OrderStatus.__members__:
        return OrderStatus[key]
    if key in ORDER_STATUS_ALIASES:
        return ORDER_STATUS_ALIASES[key]
    for needle, status in _SUBSTRING_RULES:
        if needle in key:
            return status
    return None


class StatusCatalog:
    """Name <-> code table for order statuses."""

    def __init__(self, codes: dict[OrderStatus, int] | None = None) -> None:
        self._codes: dict[OrderStatus, int] = dict(codes or ORDER_STATUS_DEFAULT_CODES)
        self._refreshed_at: datetime | None = None

    def code_for(self, status: OrderStatus) -> int:
        return self._codes[status]

    def transition_code(self, status: OrderStatus) -> int:
        """Code the kitchen sends to move an order into `status`."""
        return KITCHEN_TRANSITION_CODES[status]

    def status_for_code(self, code: Any) -> OrderStatus | None:
        try:
            code = int(code)
        except (TypeError, ValueError):
            return None
        for status, known in self._codes.items():
            if known == code:
                return status
        for status, known in KITCHEN_TRANSITION_CODES.items():
            if known == code:
                return status
        return None

    def normalize(self, value: Any) -> OrderStatus | None:
        """
        Accept a code, a name in any case or spacing, or an {idEstado, nombre}
        object, and return the canonical status.
        """
        if value is None:
            return None
        if isinstance(value, OrderStatus):
            return value
        if isinstance(value, dict):
            nombre = value.get("nombre")
            if nombre:
                status = status_from_name(str(nombre))
                if status is not None:
                    return status
            return self.status_for_code(value.get("idEstado", value.get("id")))
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return self.status_for_code(value)
        text = str(value).strip()
        if text.isdigit():
            return self.status_for_code(text)
        return status_from_name(text)

    def status_of(self, comanda: Comanda) -> OrderStatus | None:
        """Prefer the status name carried by the order, fall back to its code."""
        if comanda.estado_nombre:
            status = status_from_name(comanda.estado_nombre)
            if status is not None:
                return status
        return self.status_for_code(comanda.estado_id)

    def describe(self, status: OrderStatus | None) -> dict[str, Any]:
        if status is None:
            return {"codigo": None, "nombre": UNKNOWN_STATUS_LABEL, "label": UNKNOWN_STATUS_LABEL}
        meta = ORDER_STATUS_META_DEFAULT[status]
        return {
            "codigo": self._codes.get(status),
            "nombre": status.value,
            "label": meta["label"],
            "icon": meta["icon"],
        }

    def load(self, estados: list) -> None:
        """Update codes from backend Estado rows matched by name."""
        for estado in estados:
            if estado.id is None:
                continue
            key = normalize_status_name(estado.nombre or "")
            status = OrderStatus.__members__.get(key) or ORDER_STATUS_ALIASES.get(key)
            if status is not None:
                self._codes[status] = estado.id
        self._refreshed_at = datetime.now(timezone.utc)

    def refresh_if_stale(self, estado_service) -> None:
        """Reload codes from `estados` at most every few minutes; keep the last known on failure."""
        if self._refreshed_at and datetime.now(timezone.utc) - self._refreshed_at < _CATALOG_TTL:
            return
        try:
            self.load(estado_service.get_all())
        except ApiError as e:
            logger.warning(f"Could not refresh order status codes, using cached values: {e.message}")
            self._refreshed_at = datetime.now(timezone.utc)
