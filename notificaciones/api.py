"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           API REST de Notificaciones. Cada usuario ve solo las suyas
                       que no han expirado; puede contarlas, marcarlas como leídas,
                       ver sus estadísticas y eliminarlas. Administradores y los
                       cargos autorizados envían avisos manuales (POST).
--------------------------------------------------------------------------------
"""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.authz import perfil_de
from core.paginacion import DefaultPagination
from core.roles import puede_enviar_notificaciones

from .models import Notificacion
from .serializers import EnvioNotificacionSerializer, NotificacionSerializer
from . import servicios

logger = logging.getLogger(__name__)


class NotificacionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = NotificacionSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["tipo", "prioridad", "leido"]

    def get_queryset(self):
        return Notificacion.objects.filter(usuario=self.request.user).vigentes().select_related("remitente")

    def create(self, request, *args, **kwargs):
        """Envío manual de un aviso."""
        if not (request.user.is_superuser or puede_enviar_notificaciones(perfil_de(request.user))):
            raise PermissionDenied("No tiene permisos para enviar notificaciones.")

        datos = EnvioNotificacionSerializer(data=request.data)
        datos.is_valid(raise_exception=True)
        notificaciones = servicios.enviar_notificacion(request.user, **datos.validated_data)
        if not notificaciones:
            return Response(
                {"success": False, "message": "No se encontraron usuarios destinatarios", "errors": {}},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(
            {"success": True, "message": "Notificaciones enviadas", "data": {"cantidad": len(notificaciones)}},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"])
    def estadisticas(self, request):
        return Response({"success": True, "data": servicios.estadisticas_usuario(request.user)})

    @action(detail=False, methods=["get"], url_path="no-leidas")
    def no_leidas(self, request):
        return Response({"success": True, "data": {"no_leidas": servicios.contar_no_leidas(request.user)}})

    @action(detail=True, methods=["post"], url_path="marcar-leida")
    def marcar_leida(self, request, pk=None):
        notificacion = servicios.marcar_leida(self.get_object())
        return Response(self.get_serializer(notificacion).data)

    @action(detail=False, methods=["post"], url_path="marcar-todas-leidas")
    def marcar_todas_leidas(self, request):
        actualizadas = servicios.marcar_todas_leidas(request.user)
        return Response({"success": True, "data": {"actualizadas": actualizadas}}, status=status.HTTP_200_OK)
