"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Tareas de Celery de documentos: avisa a quienes pueden ver
                       un documento nuevo y al autor de una plancha cuando ésta
                       es aprobada o rechazada.
--------------------------------------------------------------------------------
"""

import logging

from celery import shared_task

from notificaciones.models import Notificacion
from notificaciones.servicios import crear_notificacion, notificar_por_grado

from .models import Documento

logger = logging.getLogger(__name__)


@shared_task
def notificar_nuevo_documento(documento_id):
    try:
        documento = Documento.objects.get(pk=documento_id)
    except Documento.DoesNotExist:
        logger.warning("Documento %s no encontrado. Omitiendo notificación.", documento_id)
        return 0

    notificaciones = notificar_por_grado(
        documento.categoria,
        titulo="Nuevo Documento Disponible",
        mensaje=f"Se ha subido un nuevo documento: {documento.nombre} ({documento.get_categoria_display()})",
        tipo=Notificacion.Tipos.DOCUMENTO,
        excluir_usuario_id=documento.subido_por_id,
        prioridad=Notificacion.Prioridades.ALTA if documento.es_plancha else Notificacion.Prioridades.NORMAL,
        relacionado_tipo="documento",
        relacionado_id=documento.pk,
        accion_url=f"/documentos/{documento.pk}",
    )
    logger.info("[Celery] Documento %s notificado a %s usuarios", documento.pk, len(notificaciones))
    return len(notificaciones)


@shared_task
def notificar_plancha_moderada(documento_id, moderador_id=None):
    try:
        documento = Documento.objects.select_related("autor").get(pk=documento_id)
    except Documento.DoesNotExist:
        logger.warning("Plancha %s no encontrada. Omitiendo notificación.", documento_id)
        return None

    if documento.autor is None:
        return None

    aprobada = documento.plancha_estado == Documento.EstadosPlancha.APROBADA
    mensaje = f'Su plancha "{documento.nombre}" ha sido {documento.plancha_estado}'
    if documento.plancha_comentarios:
        mensaje += f". Comentarios: {documento.plancha_comentarios}"

    notificacion = crear_notificacion(
        documento.autor,
        titulo=f"Plancha {'Aprobada' if aprobada else 'Rechazada'}",
        mensaje=mensaje,
        tipo=Notificacion.Tipos.PLANCHA,
        prioridad=Notificacion.Prioridades.NORMAL if aprobada else Notificacion.Prioridades.ALTA,
        relacionado_tipo="documento",
        relacionado_id=documento.pk,
        accion_url=f"/documentos/{documento.pk}",
        remitente_id=moderador_id,
    )
    return notificacion.pk
