"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Señales de Miembro: cualquier alta, cambio o baja invalida
                       las estadísticas cacheadas.
--------------------------------------------------------------------------------
"""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .estadisticas import invalidar_estadisticas
from .models import Miembro


@receiver(post_save, sender=Miembro)
@receiver(post_delete, sender=Miembro)
def invalidar_cache_miembros(sender, instance, **kwargs):
    invalidar_estadisticas()
