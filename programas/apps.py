"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Configuración de la app 'programas'. Conecta la señal de
                       alta de programas.
--------------------------------------------------------------------------------
"""

from django.apps import AppConfig  # Clase base de configuración


class ProgramasConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "programas"

    def ready(self):
        from . import signals  # noqa: F401
