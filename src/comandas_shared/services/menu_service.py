"""
Menu catalog: categories and products.
"""

from __future__ import annotations

from comandas_shared.constants import STOCK_OPERATIONS, Resource
from comandas_shared.models import Categoria, Producto
from comandas_shared.services.resource_service import ResourceService
from comandas_shared.validation import ValidationError


class CategoriaService(ResourceService):
    resource = Resource.CATEGORIAS.value
    model = Categoria


class ProductoService(ResourceService):
    resource = Resource.PRODUCTOS.value
    model = Producto

    def update_stock(self, producto_id: int, cantidad: int, operacion: str):
        if operacion not in STOCK_OPERATIONS:
            raise ValidationError(f"Operación inválida: {operacion}")
        return self.api.put(
            self.path(producto_id, "stock"), {"cantidad": cantidad, "operacion": operacion}
        )

    def set_active(self, producto_id: int, activo: bool):
        return self.api.put(self.path(producto_id, "estado"), {"estado": activo})


def filter_productos(
    productos: list[Producto],
    categoria_id: int | None = None,
    texto: str | None = None,
    solo_activos: bool = False,
) -> list[Producto]:
    """Filter by category and by free text over name and description."""
    result = productos
    if solo_activos:
        result = [p for p in result if p.activo]
    if categoria_id:
        result = [p for p in result if p.categoria_id == categoria_id]
    if texto and texto.strip():
        needle = texto.strip().lower()
        result = [
            p for p in result if needle in p.nombre.lower() or needle in p.descripcion.lower()
        ]
    return result


def with_category_names(
    productos: list[Producto], categorias: list[Categoria]
) -> list[Producto]:
    """Fill categoria_nombre from the category list where the backend omitted it."""
    names = {c.id: c.nombre for c in categorias}
    for producto in productos:
        if not producto.categoria_nombre and producto.categoria_id in names:
            producto.categoria_nombre = names[producto.categoria_id]
    return productos
