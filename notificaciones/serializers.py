"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Serializadores de Notificaciones: lectura de los avisos
                       propios y validación del envío manual a todos, a un grado
                       o a los administradores.
--------------------------------------------------------------------------------
"""

# Importa los serializadores de DRF.
from rest_framework import serializers

# Grados que se pueden elegir como destino.
from core.roles import JERARQUIA_GRADOS

from .models import Notificacion
from .servicios import DESTINO_ADMINS, DESTINO_GRADO, DESTINO_TODOS


class NotificacionSerializer(serializers.ModelSerializer):
    remitente_nombre = serializers.CharField(source="remitente.username", read_only=True, allow_null=True)

    class Meta:
        model = Notificacion
        fields = [
            "id",
            "titulo",
            "mensaje",
            "tipo",
            "prioridad",
            "leido",
            "leido_en",
            "relacionado_tipo",
            "relacionado_id",
            "accion_url",
            "remitente_nombre",
            "expira_en",
            "creado",
        ]
        read_only_fields = fields


class EnvioNotificacionSerializer(serializers.Serializer):
    titulo = serializers.CharField(max_length=255)
    mensaje = serializers.CharField(max_length=1000)
    tipo = serializers.ChoiceField(choices=Notificacion.Tipos.choices)
    prioridad = serializers.ChoiceField(choices=Notificacion.Prioridades.choices, default=Notificacion.Prioridades.NORMAL)
    destinatario = serializers.ChoiceField(choices=[DESTINO_TODOS, DESTINO_GRADO, DESTINO_ADMINS])
    grado_destino = serializers.ChoiceField(choices=list(JERARQUIA_GRADOS), required=False)
    expira_en = serializers.DateTimeField(required=False, allow_null=True)
    accion_url = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["destinatario"] == DESTINO_GRADO and not attrs.get("grado_destino"):
            raise serializers.ValidationError({"grado_destino": "Debe indicar el grado de destino."})
        return attrs
