"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Rutas de autenticación de la API.
--------------------------------------------------------------------------------
"""

from django.urls import path

from .api import CambioPasswordAPIView, LoginAPIView, LogoutAPIView, PerfilAPIView

app_name = "core"

urlpatterns = [
    path("login/", LoginAPIView.as_view(), name="login"),
    path("logout/", LogoutAPIView.as_view(), name="logout"),
    path("perfil/", PerfilAPIView.as_view(), name="perfil"),
    path("cambiar-password/", CambioPasswordAPIView.as_view(), name="cambiar_password"),
]
