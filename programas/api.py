"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           API REST de Programas. Calendario filtrado por los grados
                       que el usuario puede ver, con acciones para tomar y
                       consultar la asistencia, confirmarla como miembro y
                       obtener el resumen de asistencia del programa.
--------------------------------------------------------------------------------
"""

import logging

from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.authz import PermisoRecurso, perfil_de
from core.paginacion import DefaultPagination
from core.roles import grados_visibles, puede_gestionar_asistencia

from . import asistencia as servicio_asistencia
from .estadisticas import calcular_estadisticas, proximos_programas
from .models import Programa
from .serializers import AsistenciaSerializer, ProgramaSerializer, RegistroMasivoSerializer

logger = logging.getLogger(__name__)


def grados_de_programa(user):
    if getattr(user, "is_superuser", False):
        return list(Programa.Grados.values)
    return grados_visibles(perfil_de(user))


class ProgramaViewSet(viewsets.ModelViewSet):
    serializer_class = ProgramaSerializer
    permission_classes = [IsAuthenticated, PermisoRecurso]
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["grado", "tipo", "estado"]
    search_fields = ["tema", "encargado", "quien_imparte"]
    ordering_fields = ["fecha", "tema", "creado"]

    recurso = "programas"
    operaciones_extra = {
        "asistencia": "read",
        "confirmar": "read",
        "resumen_asistencia": "read",
        "estadisticas": "read",
    }

    def get_queryset(self):
        queryset = (
            Programa.objects.filter(activo=True, grado__in=grados_de_programa(self.request.user))
            .select_related("responsable")
            .prefetch_related("documentos")
        )
        if self.request.query_params.get("proximos") in ("1", "true"):
            queryset = queryset.filter(fecha__gt=timezone.now()).exclude(estado=Programa.Estados.CANCELADO)
        return queryset

    def perform_create(self, serializer):
        responsable = serializer.validated_data.get("responsable") or self.request.user
        programa = serializer.save(responsable=responsable)
        logger.info("Programa %s creado por %s", programa.pk, self.request.user.username)

    def perform_update(self, serializer):
        programa = serializer.save()
        logger.info("Programa %s actualizado por %s", programa.pk, self.request.user.username)

    def perform_destroy(self, instance):
        logger.info("Programa %s eliminado por %s", instance.pk, self.request.user.username)
        instance.delete()

    @action(detail=False, methods=["get"])
    def estadisticas(self, request):
        programas = self.get_queryset()
        datos = calcular_estadisticas(programas)
        datos["proximos_programas"] = ProgramaSerializer(proximos_programas(programas), many=True).data
        return Response({"success": True, "data": datos})

    @action(detail=True, methods=["get", "post"])
    def asistencia(self, request, pk=None):
        programa = self.get_object()

        if request.method == "GET":
            registros = programa.asistencias.select_related("miembro", "registrado_por")
            return Response(AsistenciaSerializer(registros, many=True).data)

        if not (request.user.is_superuser or puede_gestionar_asistencia(perfil_de(request.user), programa.grado)):
            raise PermissionDenied("No tiene permisos para registrar asistencia en este programa.")

        datos = RegistroMasivoSerializer(data=request.data)
        datos.is_valid(raise_exception=True)
        registros = servicio_asistencia.registrar_asistencias(
            programa, datos.validated_data["asistencias"], registrado_por=request.user
        )
        return Response(AsistenciaSerializer(registros, many=True).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def confirmar(self, request, pk=None):
        programa = self.get_object()
        miembro = getattr(request.user, "miembro", None)
        if miembro is None:
            raise PermissionDenied("El usuario no tiene una ficha de miembro asociada.")
        registro = servicio_asistencia.confirmar_asistencia(programa, miembro)
        return Response(AsistenciaSerializer(registro).data)

    @action(detail=True, methods=["get"], url_path="resumen-asistencia")
    def resumen_asistencia(self, request, pk=None):
        programa = self.get_object()
        return Response({"success": True, "data": servicio_asistencia.resumen_asistencia(programa)})
