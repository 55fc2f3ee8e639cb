"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Rutas de la API de documentos (router DRF).
--------------------------------------------------------------------------------
"""

# Router de DRF que genera las rutas del ViewSet.
from rest_framework.routers import DefaultRouter

from .api import DocumentoViewSet

router = DefaultRouter()
router.register(r"documentos", DocumentoViewSet, basename="documento")

urlpatterns = router.urls
