from decimal import Decimal
from types import SimpleNamespace

import pytest

from comandas_shared.models import Producto
from comandas_shared.services.cart_service import Cart, CartError
from comandas_shared.services.price_service import bill_totals


class TestCart:

    def test_adding_same_product_twice_merges_lines(self, producto_a):
        cart = Cart()
        cart.add(producto_a)
        cart.add(producto_a)

        assert len(cart.items) == 1
        assert cart.items[0].cantidad == 2
        assert cart.items[0].subtotal == Decimal("20000")

    def test_remove_drops_only_that_line(self, producto_a, producto_b):
        cart = Cart()
        cart.add(producto_a, 2)
        cart.add(producto_b)

        cart.remove(producto_a.id)

        assert [item.producto.id for item in cart.items] == [producto_b.id]
        assert cart.total == Decimal("5000")

    def test_decrease_below_one_is_rejected(self, producto_a):
        cart = Cart()
        cart.add(producto_a)

        with pytest.raises(CartError, match="La cantidad mínima es 1"):
            cart.decrease(producto_a.id)
        assert cart.items[0].cantidad == 1

    def test_increase_recomputes_subtotal(self, producto_b):
        cart = Cart()
        cart.add(producto_b)
        cart.increase(producto_b.id)

        assert cart.items[0].subtotal == Decimal("10000")
        assert cart.item_count == 2

    def test_inactive_product_cannot_be_added(self):
        agotado = Producto(id=9, nombre="Ajiaco", precio=Decimal("18000"), activo=False)

        with pytest.raises(CartError, match="no está disponible"):
            Cart().add(agotado)

    def test_unknown_product_line_is_rejected(self, producto_a):
        with pytest.raises(CartError):
            Cart().increase(producto_a.id)

    def test_price_is_snapshotted_when_added(self, producto_a):
        cart = Cart()
        cart.add(producto_a)
        producto_a.precio = Decimal("12000")

        assert cart.total == Decimal("10000")

    def test_bill_for_two_products(self, producto_a, producto_b):
        cart = Cart()
        cart.add(producto_a, 2)
        cart.add(producto_b, 1)

        totals = bill_totals(cart.total, Decimal("0.10"))

        assert cart.total == Decimal("25000")
        assert totals["propina"] == Decimal("2500.00")
        assert totals["total"] == Decimal("27500.00")

    def test_from_request_uses_catalog_prices(self, producto_a, producto_b):
        requested = [
            SimpleNamespace(producto_id=1, cantidad=2, observaciones="sin cebolla"),
            SimpleNamespace(producto_id=2, cantidad=1, observaciones=None),
        ]

        cart = Cart.from_request(requested, [producto_a, producto_b])

        assert cart.total == Decimal("25000")
        assert cart.items[0].observaciones == "sin cebolla"

    def test_from_request_rejects_unknown_product(self, producto_a):
        requested = [SimpleNamespace(producto_id=99, cantidad=1, observaciones=None)]

        with pytest.raises(CartError, match="no encontrado"):
            Cart.from_request(requested, [producto_a])

    def test_apply_dispatches_actions(self, producto_a):
        cart = Cart()
        cart.apply("agregar", producto_a, 3)
        cart.apply("disminuir", producto_a)
        cart.apply("observaciones", producto_a, observaciones="bien cocido")

        assert cart.items[0].cantidad == 2
        assert cart.items[0].observaciones == "bien cocido"

        cart.apply("eliminar", producto_a)
        assert cart.is_empty()

    def test_to_detalles_carries_line_data(self, producto_a):
        cart = Cart()
        cart.add(producto_a, 2, "  ")

        detalle = cart.to_detalles()[0]

        assert detalle.producto_id == 1
        assert detalle.precio_unitario == Decimal("10000")
        assert detalle.observaciones is None
        assert detalle.to_backend()["subtotal"] == 20000
