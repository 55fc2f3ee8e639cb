"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:   Rutas maestras del proyecto. Autenticación en /api/auth/ y los
               routers REST de cada módulo bajo /api/.
--------------------------------------------------------------------------------
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/", include("core.urls")),
    path("api/", include("miembros.urls")),
    path("api/", include("documentos.urls")),
    path("api/", include("programas.urls")),
    path("api/", include("notificaciones.urls")),
]

# Archivos subidos en desarrollo
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
