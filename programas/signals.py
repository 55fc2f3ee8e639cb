"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Al crear un Programa se encola la tarea que notifica a los
                       hermanos que pueden verlo.
--------------------------------------------------------------------------------
"""

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Programa
from .tasks import notificar_nuevo_programa

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Programa)
def notificar_programa_nuevo(sender, instance, created, **kwargs):
    if created:
        logger.info("Nuevo programa %s. Enviando a Celery...", instance.pk)
        notificar_nuevo_programa.delay(instance.pk)
