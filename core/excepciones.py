"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Manejador de excepciones de la API. Envuelve el manejador
                       por defecto de DRF y entrega todos los errores con la misma
                       forma: {"success": false, "message": ..., "errors": ...}.
                       Se activa con REST_FRAMEWORK["EXCEPTION_HANDLER"].
--------------------------------------------------------------------------------
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _errores_django(exc: DjangoValidationError):
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    return {"non_field_errors": exc.messages}


def respuesta_error(mensaje, codigo, errores=None):
    return Response({"success": False, "message": mensaje, "errors": errores or {}}, status=codigo)


def manejador_excepciones(exc, context):
    """Punto de entrada configurado en settings.REST_FRAMEWORK."""
    vista = context.get("view")
    nombre_vista = vista.__class__.__name__ if vista is not None else "?"

    # 1. Errores que DRF ya sabe traducir (validación, 401, 403, 404, 405...).
    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, ValidationError):
            errores = response.data if isinstance(response.data, dict) else {"non_field_errors": response.data}
            response.data = {"success": False, "message": "Datos de entrada inválidos", "errors": errores}
        else:
            detalle = response.data.get("detail") if isinstance(response.data, dict) else response.data
            response.data = {"success": False, "message": str(detalle), "errors": {}}
        return response

    # 2. Validaciones de modelos Django (ej. Perfil.save con RUT inválido).
    if isinstance(exc, DjangoValidationError):
        logger.warning("Validación de modelo fallida en %s: %s", nombre_vista, exc)
        return respuesta_error("Datos de entrada inválidos", status.HTTP_400_BAD_REQUEST, _errores_django(exc))

    # 3. Restricciones únicas violadas en la base de datos.
    if isinstance(exc, IntegrityError):
        logger.warning("Conflicto de integridad en %s: %s", nombre_vista, exc)
        return respuesta_error("Recurso duplicado. El valor ya existe.", status.HTTP_409_CONFLICT)

    # 4. Cualquier otro error: se registra con traza y se responde 500.
    logger.exception("Error no controlado en %s", nombre_vista)
    return respuesta_error("Error interno del servidor", status.HTTP_500_INTERNAL_SERVER_ERROR)
