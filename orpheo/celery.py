"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:   Configuración de Celery. Las notificaciones de documentos y
               programas nuevos se envían en segundo plano sin bloquear la
               respuesta de la API.
--------------------------------------------------------------------------------
"""
import os

from celery import Celery

# Settings de Django para los workers
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "orpheo.settings")

app = Celery("orpheo")

# Lee las variables CELERY_* de settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Registra los tasks.py de cada app instalada
app.autodiscover_tasks()
