"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Rutas de la API de programas (router DRF).
--------------------------------------------------------------------------------
"""

# Router de DRF que genera las rutas del ViewSet.
from rest_framework.routers import DefaultRouter

from .api import ProgramaViewSet

router = DefaultRouter()
router.register(r"programas", ProgramaViewSet, basename="programa")

urlpatterns = router.urls
