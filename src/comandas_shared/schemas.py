"""
Pydantic schemas for request validation.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, validator

from comandas_shared.constants import STOCK_OPERATIONS


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, pattern=r"^[^@]+@[^@]+\.[^@]+$")
    password: str = Field(..., min_length=1)

    @validator("email")
    def normalize_email(cls, v):
        return v.strip().lower()


class RegisterRequest(BaseModel):
    # Rules with their own user-facing messages live in validate_registration
    nombre: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    rol: str | None = None


class CartItemRequest(BaseModel):
    producto_id: int = Field(..., gt=0)
    cantidad: int = Field(default=1, ge=1)
    observaciones: str | None = Field(default=None, max_length=255)


class SubmitOrderRequest(BaseModel):
    mesa_id: int = Field(..., gt=0)
    items: list[CartItemRequest] = Field(..., min_length=1)
    cocinero_id: int | None = None


class TableStatusRequest(BaseModel):
    estado: int | str
    confirm: bool = False


class ConfirmRequest(BaseModel):
    confirm: bool = False


class StockRequest(BaseModel):
    cantidad: int = Field(..., gt=0)
    operacion: str

    @validator("operacion")
    def validate_operacion(cls, v):
        v = v.strip().lower()
        if v not in STOCK_OPERATIONS:
            raise ValueError(f"Operación inválida: {v}")
        return v


class ProductStateRequest(BaseModel):
    estado: bool


class CategoriaPayload(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=120)
    descripcion: str | None = None


class EstadoPayload(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=60)


class RolPayload(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=60)


class TelefonoPayload(BaseModel):
    numero: str = Field(..., min_length=5, max_length=20, pattern=r"^[0-9+\-\s()]+$")
    usuario_id: int | None = None


class UsuarioPayload(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., pattern=r"^[^@]+@[^@]+\.[^@]+$")
    password: str | None = None
    rol_id: int = Field(..., gt=0)


class CartActionRequest(BaseModel):
    tipo: str
    producto_id: int = Field(..., gt=0)
    cantidad: int = Field(default=1, ge=1)
    observaciones: str | None = Field(default=None, max_length=255)

    @validator("tipo")
    def validate_tipo(cls, v):
        v = v.strip().lower()
        if v not in {"agregar", "aumentar", "disminuir", "eliminar", "observaciones"}:
            raise ValueError(f"Acción inválida: {v}")
        return v


class CartRequest(BaseModel):
    items: list[CartItemRequest] = Field(default_factory=list)
    accion: CartActionRequest | None = None
