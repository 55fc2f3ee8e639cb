"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Tareas de Celery de notificaciones. La purga de avisos
                       vencidos se agenda a diario con Celery Beat.
--------------------------------------------------------------------------------
"""

import logging

from celery import shared_task

from .servicios import limpiar_expiradas

logger = logging.getLogger(__name__)


@shared_task
def limpiar_notificaciones_expiradas():
    eliminadas = limpiar_expiradas()
    logger.info("[Celery] Limpieza de notificaciones: %s eliminadas", eliminadas)
    return eliminadas
