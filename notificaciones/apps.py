"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Configuración de la app 'notificaciones'.
--------------------------------------------------------------------------------
"""

from django.apps import AppConfig  # Clase base de configuración


class NotificacionesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "notificaciones"
