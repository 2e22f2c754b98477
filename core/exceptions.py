from django.db import DatabaseError
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("framety.core")


# ---- Domain errors ----------------------------------------------------


class DomainError(APIException):
    """Base for every typed failure the project operations report."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Operação inválida."
    default_code = "domain_error"


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Registro não encontrado."
    default_code = "not_found"


class Unauthorized(DomainError):
    # The caller is authenticated; the policy denied the operation
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Você não tem permissão para esta operação."
    default_code = "unauthorized"


class InvalidTransition(DomainError):
    default_detail = "Transição de status inválida."
    default_code = "invalid_transition"


class ValidationError(DomainError):
    default_detail = "Dados inválidos."
    default_code = "validation_error"


class StoreUnavailable(DomainError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Banco de dados indisponível. Tente novamente."
    default_code = "store_unavailable"


# ---- DRF handler ------------------------------------------------------


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    if isinstance(exc, DatabaseError):
        logger.error("Database failure while handling request: %s", exc)
        exc = StoreUnavailable()

    response = drf_exception_handler(exc, context)

    if response is not None:
        errors = response.data
        if isinstance(exc, DomainError):
            errors = {"detail": exc.detail, "code": exc.default_code}
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "errors": errors,
            },
            status=response.status_code,
        )

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "errors": {"detail": "Erro interno do servidor."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
