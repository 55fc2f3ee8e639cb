"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           API REST de Miembros. CRUD con búsqueda, filtros y orden;
                       los lectores que no son administradores solo ven miembros
                       de los grados que su propio grado permite. Incluye las
                       acciones 'estadisticas' (cacheada), 'validar' (en seco) e
                       'importar' (planilla Excel o lista de fichas).
--------------------------------------------------------------------------------
"""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.authz import PermisoRecurso, perfil_de
from core.paginacion import DefaultPagination
from core.roles import JERARQUIA_GRADOS, es_administrador, grados_visibles, tiene_permiso

from .estadisticas import obtener_estadisticas
from .importacion import PlanillaInvalida, importar_miembros, leer_planilla
from .models import Miembro
from .serializers import MiembroSerializer, ValidacionFichaSerializer, edad_minima_configurada
from .validacion import validar_formulario_completo

logger = logging.getLogger(__name__)


def grados_de_usuario(user):
    """Grados de miembros que el usuario puede consultar."""
    if getattr(user, "is_superuser", False):
        return list(JERARQUIA_GRADOS)
    perfil = perfil_de(user)
    if perfil is None:
        return []
    if es_administrador(perfil) or tiene_permiso(perfil, "read_all_profiles"):
        return list(JERARQUIA_GRADOS)
    return [g for g in grados_visibles(perfil) if g in JERARQUIA_GRADOS]


class MiembroViewSet(viewsets.ModelViewSet):
    serializer_class = MiembroSerializer
    permission_classes = [IsAuthenticated, PermisoRecurso]
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["grado", "estado", "vigente"]
    search_fields = ["nombres", "apellidos", "rut", "email"]
    ordering_fields = ["nombres", "apellidos", "fecha_ingreso", "grado", "creado"]

    recurso = "miembros"
    operaciones_extra = {"estadisticas": "read", "validar": "create", "importar": "create"}

    def get_queryset(self):
        return Miembro.objects.filter(grado__in=grados_de_usuario(self.request.user)).select_related("usuario")

    def perform_create(self, serializer):
        miembro = serializer.save(creado_por=self.request.user)
        logger.info("Miembro %s creado por %s", miembro.rut, self.request.user.username)

    def perform_update(self, serializer):
        miembro = serializer.save()
        logger.info("Miembro %s actualizado por %s", miembro.rut, self.request.user.username)

    def perform_destroy(self, instance):
        logger.info("Miembro %s eliminado por %s", instance.rut, self.request.user.username)
        instance.delete()

    @action(detail=False, methods=["get"])
    def estadisticas(self, request):
        datos = obtener_estadisticas(grados_de_usuario(request.user))
        return Response({"success": True, "data": datos})

    @action(detail=False, methods=["post"])
    def validar(self, request):
        """Valida una ficha sin guardarla."""
        resultado = validar_formulario_completo(request.data, edad_minima=edad_minima_configurada())
        return Response(ValidacionFichaSerializer(resultado).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], parser_classes=[MultiPartParser, JSONParser])
    def importar(self, request):
        """Alta masiva desde 'archivo' (.xlsx) o desde 'filas' (lista de fichas)."""
        archivo = request.FILES.get("archivo")
        if archivo is not None:
            try:
                filas = leer_planilla(archivo)
            except PlanillaInvalida as error:
                return Response(
                    {"success": False, "message": str(error), "errors": {}}, status=status.HTTP_400_BAD_REQUEST
                )
        else:
            registros = request.data if isinstance(request.data, list) else request.data.get("filas")
            if not isinstance(registros, list):
                return Response(
                    {"success": False, "message": "No se ha proporcionado ningún archivo", "errors": {}},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            filas = list(enumerate(registros, start=1))

        resultado = importar_miembros(filas, creado_por=request.user)
        return Response({"success": True, "message": "Importación completada", "data": resultado})
