"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Configuración de la app 'core'. Carga las señales al
                       iniciar la aplicación.
--------------------------------------------------------------------------------
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Núcleo"

    def ready(self):
        """Importa signals para activarlas."""
        from . import signals  # noqa: F401
