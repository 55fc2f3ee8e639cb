"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Configuración de la app 'miembros'.
--------------------------------------------------------------------------------
"""

from django.apps import AppConfig


class MiembrosConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "miembros"

    def ready(self):
        from . import signals  # noqa: F401
