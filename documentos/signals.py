"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Señales de Documento: al crear uno se encola la tarea de
                       notificación; al borrarlo se elimina el archivo físico.
--------------------------------------------------------------------------------
"""

import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Documento
from .tasks import notificar_nuevo_documento

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Documento)
def notificar_documento_nuevo(sender, instance, created, **kwargs):
    if created:
        logger.info("Nuevo documento %s. Enviando a Celery...", instance.pk)
        # Se pasa solo el ID: los objetos del ORM no son serializables para Celery.
        notificar_nuevo_documento.delay(instance.pk)


@receiver(post_delete, sender=Documento)
def eliminar_archivo_documento(sender, instance, **kwargs):
    if instance.archivo:
        instance.archivo.delete(save=False)
