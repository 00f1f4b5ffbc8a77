"""
Waiter cart used to build a new order before submitting it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from comandas_shared.models import DetalleComanda, Producto


class CartError(Exception):
    """Raised when a cart operation is not allowed."""

    pass


@dataclass
class CartItem:
    producto: Producto
    cantidad: int = 1
    observaciones: str | None = None
    # Price snapshotted when the product was added
    precio_unitario: Decimal = field(default=Decimal("0"))

    def __post_init__(self) -> None:
        if not self.precio_unitario:
            self.precio_unitario = self.producto.precio

    @property
    def subtotal(self) -> Decimal:
        return self.precio_unitario * self.cantidad

    def to_detalle(self) -> DetalleComanda:
        return DetalleComanda(
            comanda_id=None,
            producto_id=self.producto.id,
            cantidad=self.cantidad,
            precio_unitario=self.precio_unitario,
            nombre_producto=self.producto.nombre,
            observaciones=(self.observaciones or "").strip() or None,
        )


class Cart:
    """Ordered cart lines, one per product."""

    def __init__(self) -> None:
        self.items: list[CartItem] = []

    def _find(self, producto_id: int | None) -> CartItem | None:
        for item in self.items:
            if item.producto.id == producto_id:
                return item
        return None

    def _require(self, producto_id: int) -> CartItem:
        item = self._find(producto_id)
        if item is None:
            raise CartError(f"El producto {producto_id} no está en la comanda")
        return item

    def add(self, producto: Producto, cantidad: int = 1, observaciones: str | None = None) -> CartItem:
        """Add a product, or increment its line if it is already in the cart."""
        if cantidad < 1:
            raise CartError("La cantidad debe ser al menos 1")
        if not producto.activo:
            raise CartError(f"El producto {producto.nombre} no está disponible")

        item = self._find(producto.id)
        if item is None:
            item = CartItem(producto=producto, cantidad=cantidad, observaciones=observaciones)
            self.items.append(item)
        else:
            item.cantidad += cantidad
            if observaciones:
                item.observaciones = observaciones
        return item

    def increase(self, producto_id: int) -> CartItem:
        item = self._require(producto_id)
        item.cantidad += 1
        return item

    def decrease(self, producto_id: int) -> CartItem:
        """Decrement a line; quantity never goes below 1 (use remove instead)."""
        item = self._require(producto_id)
        if item.cantidad <= 1:
            raise CartError("La cantidad mínima es 1. Use eliminar para quitar el producto")
        item.cantidad -= 1
        return item

    def set_observaciones(self, producto_id: int, observaciones: str | None) -> CartItem:
        item = self._require(producto_id)
        item.observaciones = observaciones
        return item

    def remove(self, producto_id: int) -> None:
        item = self._require(producto_id)
        self.items.remove(item)

    def clear(self) -> None:
        self.items.clear()

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(item.cantidad for item in self.items)

    def is_empty(self) -> bool:
        return not self.items

    def to_detalles(self) -> list[DetalleComanda]:
        return [item.to_detalle() for item in self.items]

    @classmethod
    def from_request(cls, items: list, productos: list[Producto]) -> Cart:
        """
        Build a cart from requested (producto_id, cantidad, observaciones) items.

        Prices come from the catalog, never from the request.

        Raises:
            CartError: If a product is unknown or inactive
        """
        by_id = {p.id: p for p in productos}
        cart = cls()
        for requested in items:
            producto = by_id.get(requested.producto_id)
            if producto is None:
                raise CartError(f"Producto {requested.producto_id} no encontrado en el menú")
            cart.add(producto, requested.cantidad, requested.observaciones)
        return cart

    def apply(self, tipo: str, producto: Producto, cantidad: int = 1, observaciones: str | None = None) -> None:
        """Apply one cart action by name."""
        if tipo == "agregar":
            self.add(producto, cantidad, observaciones)
        elif tipo == "aumentar":
            self.increase(producto.id)
        elif tipo == "disminuir":
            self.decrease(producto.id)
        elif tipo == "eliminar":
            self.remove(producto.id)
        elif tipo == "observaciones":
            self.set_observaciones(producto.id, observaciones)
        else:
            raise CartError(f"Acción inválida: {tipo}")

    def to_dict(self) -> dict:
        return {
            "items": [
                {
                    "producto_id": item.producto.id,
                    "nombre": item.producto.nombre,
                    "precio_unitario": float(item.precio_unitario),
                    "cantidad": item.cantidad,
                    "subtotal": float(item.subtotal),
                    "observaciones": item.observaciones,
                }
                for item in self.items
            ],
            "total": float(self.total),
            "cantidad_productos": self.item_count,
        }
