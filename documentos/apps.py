"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Configuración de la app 'documentos'. Conecta las señales
                       que notifican altas y borran archivos.
--------------------------------------------------------------------------------
"""

from django.apps import AppConfig  # Clase base de configuración


class DocumentosConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "documentos"

    def ready(self):
        from . import signals  # noqa: F401
