"""Session holding and authentication against the restaurant backend."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Protocol

from comandas_shared.api_client import ApiClient, ApiError, as_http_status
from comandas_shared.constants import ROLE_DASHBOARDS, Roles
from comandas_shared.error_catalog import (
    DEFAULT_ERROR_MESSAGE,
    ERROR_CATALOG,
    connection_error_message,
)
from comandas_shared.jwt_service import extract_user_id
from comandas_shared.logging_config import get_logger
from comandas_shared.validation import validate_registration

logger = get_logger(__name__)

TOKEN_KEY = "token"
PROFILE_KEY = "usuario"


class AuthError(Exception):
    """Raised when an authentication or authorization error occurs."""

    def __init__(self, message: str, status: HTTPStatus = HTTPStatus.UNAUTHORIZED) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


@dataclass
class UserProfile:
    """Profile returned by the backend at login, as kept in the session."""

    email: str
    nombre: str
    rol: str
    id_usuario: str | None = None
    token_type: str = "Bearer"

    @property
    def role(self) -> Roles | None:
        return Roles.parse(self.rol)

    @property
    def initial(self) -> str:
        return (self.nombre or self.email or "?")[:1].upper()

    def to_storage(self) -> dict[str, Any]:
        return {
            "email": self.email,
            "nombre": self.nombre,
            "rol": self.rol,
            "idUsuario": self.id_usuario,
            "type": self.token_type,
        }

    @classmethod
    def from_storage(cls, data: dict[str, Any]) -> UserProfile:
        id_usuario = data.get("idUsuario")
        return cls(
            email=data.get("email") or "",
            nombre=data.get("nombre") or "",
            rol=data.get("rol") or "",
            id_usuario=str(id_usuario) if id_usuario not in (None, "") else None,
            token_type=data.get("type") or "Bearer",
        )


class SessionStore(Protocol):
    """Key/value storage for the two session entries."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class MemorySessionStore:
    """Dict-backed store for scripts and tests."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SessionHolder:
    """
    Reads and writes the stored token and profile.

    The token is read once and kept on the holder, so calls made from
    worker threads never touch the underlying store.
    """

    def __init__(self, store: SessionStore) -> None:
        self.store = store
        self._token: str | None = store.get(TOKEN_KEY) or None

    @property
    def token(self) -> str | None:
        return self._token

    def token_provider(self) -> str | None:
        return self._token

    def raw_profile(self) -> dict[str, Any] | None:
        data = self.store.get(PROFILE_KEY)
        return data if isinstance(data, dict) else None

    def save(self, token: str, profile: UserProfile) -> None:
        self._token = token
        self.store.set(TOKEN_KEY, token)
        self.store.set(PROFILE_KEY, profile.to_storage())

    def save_profile(self, profile: UserProfile) -> None:
        self.store.set(PROFILE_KEY, profile.to_storage())

    def clear(self) -> None:
        self._token = None
        self.store.delete(TOKEN_KEY)
        self.store.delete(PROFILE_KEY)


@dataclass
class LoginResult:
    profile: UserProfile
    redirect_to: str


def dashboard_for_role(rol: str | Roles | None) -> str | None:
    role = Roles.parse(rol.value if isinstance(rol, Roles) else rol)
    if role is None:
        return None
    return ROLE_DASHBOARDS[role]


class AuthService:
    """Login, registration and profile access for the current session."""

    def __init__(self, api_client: ApiClient, holder: SessionHolder, api_base_url: str) -> None:
        self.api = api_client
        self.holder = holder
        self.api_base_url = api_base_url.rstrip("/")

    def _login_error(self, error: ApiError) -> AuthError:
        if error.is_network_error:
            return AuthError(
                connection_error_message(self.api_base_url), HTTPStatus.SERVICE_UNAVAILABLE
            )
        if error.is_unauthorized:
            return AuthError(ERROR_CATALOG["AUTH_001"]["description"], HTTPStatus.UNAUTHORIZED)
        if error.is_not_found:
            return AuthError(
                f"Endpoint no encontrado: {self.api_base_url}/auth/login", HTTPStatus.BAD_GATEWAY
            )
        return AuthError(error.backend_message or DEFAULT_ERROR_MESSAGE, HTTPStatus.BAD_GATEWAY)

    def login(self, email: str, password: str) -> LoginResult:
        """
        Authenticate and persist token and profile.

        Raises:
            AuthError: With a user-facing message for each failure kind
        """
        try:
            response = self.api.post("auth/login", {"email": email, "password": password})
        except ApiError as e:
            raise self._login_error(e) from e

        if not isinstance(response, dict) or not response.get("token"):
            raise AuthError("Respuesta de login inválida", HTTPStatus.BAD_GATEWAY)

        token = response["token"]
        rol = response.get("rol") or ""
        redirect_to = dashboard_for_role(rol)
        if redirect_to is None:
            logger.warning(f"Login rejected for {email}: unknown role {rol!r}")
            self.holder.clear()
            raise AuthError("Rol de usuario no válido", HTTPStatus.FORBIDDEN)

        profile = UserProfile(
            email=response.get("email") or email,
            nombre=response.get("nombre") or "",
            rol=Roles.parse(rol).value,
            id_usuario=self._resolve_user_id(response.get("idUsuario"), token, email),
            token_type=response.get("type") or "Bearer",
        )
        self.holder.save(token, profile)
        logger.info(f"User {profile.email} logged in as {profile.rol}")
        return LoginResult(profile=profile, redirect_to=redirect_to)

    @staticmethod
    def _resolve_user_id(explicit: Any, token: str | None, email: str) -> str:
        if explicit not in (None, ""):
            return str(explicit)
        from_token = extract_user_id(token)
        if from_token:
            return from_token
        logger.warning(f"No user id in login response or token for {email}, using email")
        return email

    def register(
        self, nombre: str, email: str, password: str, confirm_password: str, rol: str | None
    ) -> Any:
        """
        Create a MESERO or COCINERO account.

        Raises:
            ValidationError: When the form fails client-side checks
            AuthError: When the backend rejects the registration
        """
        validate_registration(nombre, email, password, confirm_password, rol)
        payload = {
            "nombre": nombre.strip(),
            "email": email.strip().lower(),
            "password": password,
            "rol": Roles.parse(rol).value,
        }
        try:
            return self.api.post("auth/register", payload)
        except ApiError as e:
            if e.is_network_error:
                raise AuthError(
                    connection_error_message(self.api_base_url), HTTPStatus.SERVICE_UNAVAILABLE
                ) from e
            raise AuthError(
                e.backend_message or "Error al registrar el usuario",
                as_http_status(e.status),
            ) from e

    def get_profile(self) -> UserProfile | None:
        """
        Return the stored profile, backfilling a missing user id.

        The id comes from token claims when possible; otherwise the email is
        used so the session keeps working in a degraded mode.
        """
        data = self.holder.raw_profile()
        if data is None:
            return None

        profile = UserProfile.from_storage(data)
        if not profile.id_usuario:
            profile.id_usuario = self._resolve_user_id(None, self.holder.token, profile.email)
            self.holder.save_profile(profile)
        return profile

    def is_authenticated(self) -> bool:
        if not self.holder.token:
            return False
        profile = self.get_profile()
        return bool(profile and profile.id_usuario)

    def current_role(self) -> Roles | None:
        profile = self.get_profile()
        return profile.role if profile else None

    def logout(self) -> None:
        self.holder.clear()
