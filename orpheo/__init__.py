"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:   Inicializador del paquete del proyecto. Carga la aplicación Celery
               para que las tareas asíncronas se registren al arrancar Django.
--------------------------------------------------------------------------------
"""
from .celery import app as celery_app

__all__ = ("celery_app",)
