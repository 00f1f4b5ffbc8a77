"""
Catálogo centralizado de errores controlados del frontend de comandas.

Traduce los fallos del backend remoto a mensajes para el usuario.
"""

from __future__ import annotations

from comandas_shared.api_client import ApiError

ERROR_CATALOG = {
    "NET_001": {
        "title": "Servidor no disponible",
        "description": "No se puede conectar con el servidor",
        "http_code": 0,
        "solution": "Verificar que el backend esté ejecutándose y que la URL configurada sea correcta.",
    },
    "AUTH_001": {
        "title": "Credenciales Inválidas",
        "description": "Credenciales incorrectas",
        "http_code": 401,
        "solution": "Verificar el correo y la contraseña y reintentar.",
    },
    "AUTH_002": {
        "title": "Sesión Expirada",
        "description": "Sesión expirada - Vuelve a iniciar sesión",
        "http_code": 401,
        "solution": "Iniciar sesión nuevamente.",
    },
    "PERM_001": {
        "title": "Acceso Denegado",
        "description": "No tienes permisos para realizar esta acción",
        "http_code": 403,
        "solution": "Solicitar acceso a un administrador.",
    },
    "NF_001": {
        "title": "Recurso no encontrado",
        "description": "El registro no existe o ya fue eliminado",
        "http_code": 404,
        "solution": "Recargar la lista.",
    },
    "VAL_001": {
        "title": "Datos inválidos",
        "description": "Los datos enviados no son válidos",
        "http_code": 400,
        "solution": "Revisar los campos del formulario.",
    },
    "SYSTEM_001": {
        "title": "Error Interno",
        "description": "Error en el servidor",
        "http_code": 500,
        "solution": "Revisar los logs del backend.",
    },
}

DEFAULT_ERROR_MESSAGE = "Ha ocurrido un error"

CONNECTION_CAUSES = (
    "El backend no está ejecutándose",
    "La URL del API es incorrecta",
    "El servidor bloquea la petición (CORS)",
)


def connection_error_message(api_base_url: str | None = None) -> str:
    message = ERROR_CATALOG["NET_001"]["description"]
    causes = "; ".join(CONNECTION_CAUSES)
    if api_base_url:
        return f"{message}. Posibles causas: {causes}. URL: {api_base_url}"
    return f"{message}. Posibles causas: {causes}."


def describe_api_error(error: ApiError, action: str | None = None) -> str:
    """
    Build the user-facing message for a failed backend call.

    Validation errors keep the backend's own message because it names the
    offending field; other statuses use the catalog.
    """
    if error.is_network_error:
        message = ERROR_CATALOG["NET_001"]["description"]
    elif error.is_unauthorized:
        message = ERROR_CATALOG["AUTH_002"]["description"]
    elif error.is_forbidden:
        message = ERROR_CATALOG["PERM_001"]["description"]
    elif error.is_not_found:
        message = ERROR_CATALOG["NF_001"]["description"]
    elif error.is_validation_error:
        message = error.backend_message or ERROR_CATALOG["VAL_001"]["description"]
    elif error.status >= 500:
        message = ERROR_CATALOG["SYSTEM_001"]["description"]
    else:
        message = error.backend_message or DEFAULT_ERROR_MESSAGE

    if action:
        return f"{action}: {message}"
    return message
