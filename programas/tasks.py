"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Tareas de Celery de programas: aviso de programa nuevo a
                       quienes pueden verlo y recordatorio de los programas que
                       ocurren dentro de las próximas 24 horas.
--------------------------------------------------------------------------------
"""

import logging
from datetime import timedelta

from celery import shared_task
from django.utils import timezone

from notificaciones.models import Notificacion
from notificaciones.servicios import notificar_por_grado

from .models import Programa

logger = logging.getLogger(__name__)


@shared_task
def notificar_nuevo_programa(programa_id):
    try:
        programa = Programa.objects.get(pk=programa_id)
    except Programa.DoesNotExist:
        logger.warning("Programa %s no encontrado. Omitiendo notificación.", programa_id)
        return 0

    fecha = timezone.localtime(programa.fecha)
    notificaciones = notificar_por_grado(
        programa.grado,
        titulo="Nuevo Programa Programado",
        mensaje=f"Se ha programado: {programa.tema} para el {fecha:%d/%m/%Y}",
        tipo=Notificacion.Tipos.PROGRAMA,
        excluir_usuario_id=programa.responsable_id,
        relacionado_tipo="programa",
        relacionado_id=programa.pk,
        accion_url=f"/programas/{programa.pk}",
    )
    logger.info("[Celery] Programa %s notificado a %s usuarios", programa.pk, len(notificaciones))
    return len(notificaciones)


@shared_task
def recordar_programas_proximos():
    ahora = timezone.now()
    proximos = Programa.objects.filter(
        activo=True,
        fecha__gt=ahora,
        fecha__lte=ahora + timedelta(days=1),
    ).exclude(estado=Programa.Estados.CANCELADO)

    total = 0
    for programa in proximos:
        enviadas = notificar_por_grado(
            programa.grado,
            titulo="Recordatorio de Programa",
            mensaje=f"Recordatorio: {programa.tema} es mañana",
            tipo=Notificacion.Tipos.PROGRAMA,
            prioridad=Notificacion.Prioridades.ALTA,
            relacionado_tipo="programa",
            relacionado_id=programa.pk,
            accion_url=f"/programas/{programa.pk}",
            expira_en=programa.fecha,
        )
        total += len(enviadas)
    logger.info("[Celery] Recordatorios enviados: %s", total)
    return total
