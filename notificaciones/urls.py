"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Rutas de la API de notificaciones (router DRF).
--------------------------------------------------------------------------------
"""

# Router de DRF que genera las rutas del ViewSet.
from rest_framework.routers import DefaultRouter

from .api import NotificacionViewSet

router = DefaultRouter()
router.register(r"notificaciones", NotificacionViewSet, basename="notificacion")

urlpatterns = router.urls
