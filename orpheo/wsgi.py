"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:   Punto de entrada WSGI para servidores como Gunicorn.
--------------------------------------------------------------------------------
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "orpheo.settings")

application = get_wsgi_application()
