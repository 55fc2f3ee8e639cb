"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:           Serializadores de Documentos: subida con metadatos
                       derivados del archivo y comentarios de moderación.
--------------------------------------------------------------------------------
"""

from rest_framework import serializers

from .models import Documento


class DocumentoSerializer(serializers.ModelSerializer):
    tamano_formateado = serializers.CharField(read_only=True)
    autor_nombre = serializers.SerializerMethodField()
    subido_por_nombre = serializers.CharField(source="subido_por.username", read_only=True, allow_null=True)
    # El nombre es opcional: si no viene se usa el del archivo.
    nombre = serializers.CharField(max_length=255, required=False, allow_blank=True)

    class Meta:
        model = Documento
        fields = [
            "id",
            "archivo",
            "nombre",
            "descripcion",
            "tipo",
            "tamano",
            "tamano_formateado",
            "hash_archivo",
            "categoria",
            "subcategoria",
            "palabras_clave",
            "es_plancha",
            "plancha_estado",
            "plancha_comentarios",
            "autor",
            "autor_nombre",
            "subido_por",
            "subido_por_nombre",
            "descargas",
            "visualizaciones",
            "creado",
            "actualizado",
        ]
        read_only_fields = [
            "tipo",
            "tamano",
            "hash_archivo",
            "plancha_estado",
            "plancha_comentarios",
            "subido_por",
            "descargas",
            "visualizaciones",
            "creado",
            "actualizado",
        ]

    def get_autor_nombre(self, obj):
        if obj.autor is None:
            return None
        return obj.autor.get_full_name() or obj.autor.username

    def validate(self, attrs):
        if not attrs.get("nombre"):
            archivo = attrs.get("archivo")
            if archivo is not None:
                attrs["nombre"] = archivo.name
            elif self.instance is None:
                raise serializers.ValidationError({"nombre": "El nombre es requerido."})
            else:
                attrs.pop("nombre", None)
        return attrs


class ModeracionSerializer(serializers.Serializer):
    comentarios = serializers.CharField(required=False, allow_blank=True, default="")
