"""
HTTP error taxonomy shared by every module.

Services raise these instead of bare HTTPException so status codes and
default messages stay consistent. The handlers in main.py render all of
them as {"error": "<message>"}.
"""

from fastapi import HTTPException, status


class HubError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Erro interno do servidor"

    def __init__(self, message: str = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message)


class Unauthorized(HubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Não autorizado"


class Forbidden(HubError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Acesso negado"


class NotFound(HubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Registro não encontrado"


class ValidationFailed(HubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Dados inválidos"


class Conflict(HubError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Registro duplicado"


class UpstreamError(HubError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
