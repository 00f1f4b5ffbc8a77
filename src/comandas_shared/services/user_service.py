"""
Users, roles, states and phones.
"""

from __future__ import annotations

from dataclasses import dataclass

from comandas_shared.api_client import ApiError
from comandas_shared.constants import COCINERO_ROLE_ID, Resource, Roles
from comandas_shared.logging_config import get_logger
from comandas_shared.models import Estado, Rol, Telefono, Usuario
from comandas_shared.services.resource_service import ResourceService

logger = get_logger(__name__)


class EstadoService(ResourceService):
    resource = Resource.ESTADOS.value
    model = Estado


class RolService(ResourceService):
    resource = Resource.ROLES.value
    model = Rol


class UsuarioService(ResourceService):
    resource = Resource.USUARIOS.value
    model = Usuario

    def get_perfil(self) -> Usuario | None:
        return self._to_model(self.api.get(self.path("perfil")))

    def get_by_rol(self, rol: str) -> list[Usuario]:
        return self._to_models(self.api.get(self.path("rol", rol)))

    def add_telefono(self, usuario_id: int, telefono_id: int):
        return self.api.post(self.path(usuario_id, "telefonos", telefono_id))

    def remove_telefono(self, usuario_id: int, telefono_id: int) -> None:
        self.api.delete(self.path(usuario_id, "telefonos", telefono_id))


def is_cocinero(usuario: Usuario) -> bool:
    return (
        Roles.parse(usuario.rol_nombre) == Roles.COCINERO or usuario.rol_id == COCINERO_ROLE_ID
    )


def filter_cocineros(usuarios: list[Usuario]) -> list[Usuario]:
    return [u for u in usuarios if is_cocinero(u)]


@dataclass
class TelefonoCreation:
    telefono: Telefono | None
    asociado: bool
    warning: str | None = None


class TelefonoService(ResourceService):
    resource = Resource.TELEFONOS.value
    model = Telefono

    def __init__(self, api, usuarios: UsuarioService | None = None) -> None:
        super().__init__(api)
        self.usuarios = usuarios or UsuarioService(api)

    def create_for_user(self, numero: str, usuario_id: int | None) -> TelefonoCreation:
        """
        Create a phone and associate it to a user.

        These are two backend calls. A failed association leaves the phone
        created and is reported as a warning, not as an error.
        """
        telefono = self.create({"numero": numero})
        if usuario_id is None or telefono is None or telefono.id is None:
            return TelefonoCreation(telefono=telefono, asociado=False)

        try:
            self.usuarios.add_telefono(usuario_id, telefono.id)
        except ApiError as e:
            logger.warning(
                f"Phone {telefono.id} created but not linked to user {usuario_id}: {e.message}"
            )
            return TelefonoCreation(
                telefono=telefono,
                asociado=False,
                warning="Teléfono creado pero no se pudo asociar al usuario",
            )
        return TelefonoCreation(telefono=telefono, asociado=True)
