"""
Input validation utilities.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from comandas_shared.constants import MIN_PASSWORD_LENGTH, REGISTRABLE_ROLES, Roles


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


def validate_email(email: str) -> None:
    """Validate email format."""
    if not email:
        raise ValidationError("El email es requerido")

    pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    if not re.match(pattern, email):
        raise ValidationError("Formato de email inválido")


def validate_registration(
    nombre: str, email: str, password: str, confirm_password: str, rol: str | None
) -> None:
    """
    Check a self-registration form before it reaches the backend.

    Checks run in the order the form shows its messages.
    """
    if Roles.parse(rol) not in REGISTRABLE_ROLES:
        raise ValidationError("Debes seleccionar un rol (Mesero o Cocinero)")

    if password != confirm_password:
        raise ValidationError("Las contraseñas no coinciden")

    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres"
        )

    if not (nombre or "").strip() or not (email or "").strip():
        raise ValidationError("Todos los campos son obligatorios")

    validate_email(email.strip())


def password_strength(password: str) -> str:
    """
    Rate a password as 'weak', 'medium' or 'strong'.

    One point each for length >= 8, mixed case, digits and symbols.
    """
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return "weak"

    score = 0
    if len(password) >= 8:
        score += 1
    if re.search(r"[a-z]", password) and re.search(r"[A-Z]", password):
        score += 1
    if re.search(r"[0-9]", password):
        score += 1
    if re.search(r"[^a-zA-Z0-9]", password):
        score += 1

    if score >= 3:
        return "strong"
    if score >= 1:
        return "medium"
    return "weak"


def validate_detalle(comanda_id, producto_id, cantidad) -> None:
    if not comanda_id:
        raise ValidationError("Debe seleccionar una comanda")
    if not producto_id:
        raise ValidationError("Debe seleccionar un producto")
    try:
        cantidad_int = int(cantidad)
    except (TypeError, ValueError):
        raise ValidationError("La cantidad debe ser al menos 1")
    if cantidad_int < 1:
        raise ValidationError("La cantidad debe ser al menos 1")


def validate_mesa(numero_mesa: str | None, capacidad) -> None:
    if not (numero_mesa or "").strip():
        raise ValidationError("El número o ubicación de la mesa es obligatorio")
    try:
        capacidad_int = int(capacidad)
    except (TypeError, ValueError):
        raise ValidationError("La capacidad debe ser al menos 1")
    if capacidad_int < 1:
        raise ValidationError("La capacidad debe ser al menos 1")


def parse_money(value, field_name: str = "precio") -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"El {field_name} no es un número válido")
    if not amount.is_finite():
        raise ValidationError(f"El {field_name} no es un número válido")
    return amount


def validate_producto(nombre: str | None, precio, stock, id_categoria) -> None:
    if not (nombre or "").strip():
        raise ValidationError("El nombre del producto es obligatorio")
    if parse_money(precio) <= 0:
        raise ValidationError("El precio debe ser mayor a 0")
    try:
        stock_int = int(stock)
    except (TypeError, ValueError):
        raise ValidationError("El stock debe ser un número entero")
    if stock_int < 0:
        raise ValidationError("El stock no puede ser negativo")
    if not id_categoria:
        raise ValidationError("Debe seleccionar una categoría")
