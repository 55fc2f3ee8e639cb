"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           API REST de Documentos. Subida de archivos (multipart),
                       listado filtrado por las categorías que el grado del
                       usuario permite ver, descarga con contador y moderación
                       de planchas (aprobar / rechazar).
--------------------------------------------------------------------------------
"""

import logging

from django.db.models import F
from django.http import FileResponse
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.authz import PermisoRecurso, perfil_de
from core.paginacion import DefaultPagination
from core.roles import grados_visibles, puede_aprobar_plancha

from .estadisticas import calcular_estadisticas
from .models import Documento
from .serializers import DocumentoSerializer, ModeracionSerializer
from .tasks import notificar_plancha_moderada

logger = logging.getLogger(__name__)


def categorias_de_usuario(user):
    if getattr(user, "is_superuser", False):
        return list(Documento.Categorias.values)
    return grados_visibles(perfil_de(user))


class DocumentoViewSet(viewsets.ModelViewSet):
    serializer_class = DocumentoSerializer
    permission_classes = [IsAuthenticated, PermisoRecurso]
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["categoria", "tipo", "es_plancha", "plancha_estado"]
    search_fields = ["nombre", "descripcion", "palabras_clave", "autor__username"]
    ordering_fields = ["creado", "nombre", "descargas", "tamano"]

    recurso = "documentos"
    operaciones_extra = {"descargar": "read", "aprobar": "read", "rechazar": "read", "estadisticas": "read"}

    def get_queryset(self):
        return (
            Documento.objects.filter(activo=True, categoria__in=categorias_de_usuario(self.request.user))
            .select_related("autor", "subido_por")
        )

    def perform_create(self, serializer):
        autor = serializer.validated_data.get("autor") or self.request.user
        documento = serializer.save(subido_por=self.request.user, autor=autor)
        logger.info("Documento %s subido por %s", documento.pk, self.request.user.username)

    def perform_destroy(self, instance):
        logger.info("Documento %s eliminado por %s", instance.pk, self.request.user.username)
        instance.delete()

    def retrieve(self, request, *args, **kwargs):
        documento = self.get_object()
        Documento.objects.filter(pk=documento.pk).update(visualizaciones=F("visualizaciones") + 1)
        documento.refresh_from_db(fields=["visualizaciones"])
        return Response(self.get_serializer(documento).data)

    @action(detail=False, methods=["get"])
    def estadisticas(self, request):
        return Response({"success": True, "data": calcular_estadisticas(self.get_queryset())})

    @action(detail=True, methods=["get"])
    def descargar(self, request, pk=None):
        documento = self.get_object()
        Documento.objects.filter(pk=documento.pk).update(descargas=F("descargas") + 1)
        logger.info("Documento %s descargado por %s", documento.pk, request.user.username)
        return FileResponse(documento.archivo.open("rb"), as_attachment=True, filename=documento.archivo.name.rsplit("/", 1)[-1])

    def _moderar(self, request, estado):
        documento = self.get_object()
        if not (request.user.is_superuser or puede_aprobar_plancha(perfil_de(request.user))):
            raise PermissionDenied("No tiene permisos para moderar planchas.")
        if not documento.es_plancha:
            return Response(
                {"success": False, "message": "El documento no es una plancha", "errors": {}},
                status=status.HTTP_400_BAD_REQUEST,
            )

        datos = ModeracionSerializer(data=request.data)
        datos.is_valid(raise_exception=True)

        documento.plancha_estado = estado
        documento.plancha_comentarios = datos.validated_data["comentarios"]
        documento.moderado_por = request.user
        documento.save(update_fields=["plancha_estado", "plancha_comentarios", "moderado_por", "actualizado"])
        logger.info("Plancha %s %s por %s", documento.pk, estado, request.user.username)

        notificar_plancha_moderada.delay(documento.pk, request.user.pk)
        return Response(self.get_serializer(documento).data)

    @action(detail=True, methods=["post"])
    def aprobar(self, request, pk=None):
        return self._moderar(request, Documento.EstadosPlancha.APROBADA)

    @action(detail=True, methods=["post"])
    def rechazar(self, request, pk=None):
        return self._moderar(request, Documento.EstadosPlancha.RECHAZADA)
