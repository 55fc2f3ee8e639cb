import django.db.models.deletion
import documentos.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Documento",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("archivo", models.FileField(upload_to="documentos/%Y/%m/", validators=[documentos.models.validar_archivo_documento])),
                ("nombre", models.CharField(max_length=255)),
                ("descripcion", models.TextField(blank=True, default="")),
                ("tipo", models.CharField(editable=False, max_length=10)),
                ("tamano", models.PositiveBigIntegerField(blank=True, editable=False, null=True)),
                ("hash_archivo", models.CharField(blank=True, default="", editable=False, max_length=64)),
                ("categoria", models.CharField(choices=[("aprendiz", "Aprendiz"), ("companero", "Compañero"), ("maestro", "Maestro"), ("general", "General"), ("administrativo", "Administrativo")], db_index=True, max_length=20)),
                ("subcategoria", models.CharField(blank=True, default="", max_length=100)),
                ("palabras_clave", models.TextField(blank=True, default="")),
                ("es_plancha", models.BooleanField(db_index=True, default=False)),
                ("plancha_estado", models.CharField(blank=True, choices=[("pendiente", "Pendiente"), ("aprobada", "Aprobada"), ("rechazada", "Rechazada")], default="", max_length=10)),
                ("plancha_comentarios", models.TextField(blank=True, default="")),
                ("descargas", models.PositiveIntegerField(default=0)),
                ("visualizaciones", models.PositiveIntegerField(default=0)),
                ("activo", models.BooleanField(db_index=True, default=True)),
                ("creado", models.DateTimeField(auto_now_add=True)),
                ("actualizado", models.DateTimeField(auto_now=True)),
                ("moderado_por", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="planchas_moderadas", to=settings.AUTH_USER_MODEL)),
                ("autor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="documentos_autor", to=settings.AUTH_USER_MODEL)),
                ("subido_por", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="documentos_subidos", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Documento",
                "verbose_name_plural": "Documentos",
                "ordering": ["-creado"],
            },
        ),
    ]
