"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Reglas de asistencia a programas. Registra o actualiza la
                       asistencia de un miembro (una por programa), respeta el
                       límite de asistentes y calcula el resumen por programa.
--------------------------------------------------------------------------------
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from .models import Asistencia, Programa

logger = logging.getLogger(__name__)


def _bloquear_programa(programa):
    """Bloquea la fila del programa hasta el fin de la transacción."""
    return Programa.objects.select_for_update().get(pk=programa.pk)


def _verificar_cupo(programa):
    limite = programa.limite_asistentes
    if limite is not None and programa.asistencias.count() >= limite:
        raise ValidationError({"limite_asistentes": f"El programa alcanzó su límite de {limite} asistentes."})


def registrar_asistencia(programa, miembro, asistio, justificacion="", hora_llegada=None,
                         registrado_por=None) -> Asistencia:
    """Crea o actualiza la asistencia del miembro al programa."""
    with transaction.atomic():
        programa = _bloquear_programa(programa)
        asistencia = Asistencia.objects.select_for_update().filter(programa=programa, miembro=miembro).first()
        if asistencia is None:
            _verificar_cupo(programa)
            asistencia = Asistencia(programa=programa, miembro=miembro)

        asistencia.asistio = bool(asistio)
        asistencia.justificacion = (justificacion or "").strip()
        asistencia.hora_llegada = hora_llegada
        asistencia.confirmado = True
        asistencia.registrado_por = registrado_por
        asistencia.hora_registro = timezone.now()
        asistencia.save()

    logger.info("Asistencia registrada: programa %s, miembro %s, asistió=%s", programa.pk, miembro.pk, asistio)
    return asistencia


def registrar_asistencias(programa, registros, registrado_por=None):
    """Registro masivo; si una falla, no se guarda ninguna."""
    with transaction.atomic():
        return [
            registrar_asistencia(
                programa,
                r["miembro"],
                r["asistio"],
                justificacion=r.get("justificacion", ""),
                hora_llegada=r.get("hora_llegada"),
                registrado_por=registrado_por,
            )
            for r in registros
        ]


def confirmar_asistencia(programa, miembro) -> Asistencia:
    """El propio miembro confirma que asistirá."""
    with transaction.atomic():
        programa = _bloquear_programa(programa)
        asistencia = Asistencia.objects.select_for_update().filter(programa=programa, miembro=miembro).first()
        if asistencia is None:
            _verificar_cupo(programa)
            asistencia = Asistencia(programa=programa, miembro=miembro)
        asistencia.confirmado = True
        asistencia.save()
    logger.info("Miembro %s confirmó asistencia al programa %s", miembro.pk, programa.pk)
    return asistencia


def resumen_asistencia(programa) -> dict:
    sin_justificacion = Q(justificacion="")
    datos = programa.asistencias.aggregate(
        total=Count("id"),
        presentes=Count("id", filter=Q(asistio=True)),
        justificados=Count("id", filter=Q(asistio=False) & ~sin_justificacion),
        ausentes=Count("id", filter=Q(asistio=False) & sin_justificacion),
        confirmados=Count("id", filter=Q(confirmado=True)),
    )
    total = datos["total"]
    datos["porcentaje_asistencia"] = round(datos["presentes"] * 100 / total) if total else 0
    datos["limite_asistentes"] = programa.limite_asistentes
    return datos
