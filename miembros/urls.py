"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Rutas de la API de miembros (router DRF).
--------------------------------------------------------------------------------
"""

# Router de DRF que genera las rutas del ViewSet.
from rest_framework.routers import DefaultRouter

from .api import MiembroViewSet

router = DefaultRouter()
router.register(r"miembros", MiembroViewSet, basename="miembro")

urlpatterns = router.urls
