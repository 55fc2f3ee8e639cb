"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:   Punto de entrada ASGI. Solo se atienden peticiones HTTP.
--------------------------------------------------------------------------------
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "orpheo.settings")

application = get_asgi_application()
