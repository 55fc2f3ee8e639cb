"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Serializadores de Programas y Asistencia, incluido el
                       registro masivo de asistencia.
--------------------------------------------------------------------------------
"""

from django.utils import timezone
from rest_framework import serializers

from miembros.models import Miembro

from .models import Asistencia, Programa


class ProgramaSerializer(serializers.ModelSerializer):
    responsable_nombre = serializers.CharField(source="responsable.username", read_only=True, allow_null=True)
    dias_restantes = serializers.IntegerField(read_only=True)
    total_asistencias = serializers.IntegerField(source="asistencias.count", read_only=True)

    class Meta:
        model = Programa
        fields = [
            "id",
            "tema",
            "fecha",
            "encargado",
            "quien_imparte",
            "resumen",
            "grado",
            "tipo",
            "estado",
            "ubicacion",
            "detalles_adicionales",
            "documentos",
            "requiere_confirmacion",
            "limite_asistentes",
            "responsable",
            "responsable_nombre",
            "observaciones",
            "dias_restantes",
            "total_asistencias",
            "creado",
            "actualizado",
        ]
        read_only_fields = ["creado", "actualizado"]

    def validate_tema(self, value):
        value = value.strip()
        if len(value) < 3:
            raise serializers.ValidationError("El tema debe tener al menos 3 caracteres.")
        return value

    def validate_fecha(self, value):
        # Solo al crear: programas ya realizados pueden editarse.
        if self.instance is None and value <= timezone.now():
            raise serializers.ValidationError("La fecha debe ser futura.")
        return value


class AsistenciaSerializer(serializers.ModelSerializer):
    miembro_nombre = serializers.CharField(source="miembro.nombre_completo", read_only=True)
    miembro_grado = serializers.CharField(source="miembro.grado", read_only=True)
    tipo_asistencia = serializers.CharField(read_only=True)
    registrado_por_nombre = serializers.CharField(source="registrado_por.username", read_only=True, allow_null=True)

    class Meta:
        model = Asistencia
        fields = [
            "id",
            "programa",
            "miembro",
            "miembro_nombre",
            "miembro_grado",
            "asistio",
            "confirmado",
            "justificacion",
            "tipo_asistencia",
            "hora_llegada",
            "hora_registro",
            "registrado_por_nombre",
            "observaciones",
        ]
        read_only_fields = fields


class RegistroAsistenciaSerializer(serializers.Serializer):
    miembro = serializers.PrimaryKeyRelatedField(queryset=Miembro.objects.all())
    asistio = serializers.BooleanField()
    justificacion = serializers.CharField(required=False, allow_blank=True, default="")
    hora_llegada = serializers.TimeField(required=False, allow_null=True, default=None)


class RegistroMasivoSerializer(serializers.Serializer):
    asistencias = RegistroAsistenciaSerializer(many=True, allow_empty=False)
