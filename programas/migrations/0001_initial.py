import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("documentos", "0001_initial"),
        ("miembros", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Programa",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tema", models.CharField(max_length=255, validators=[django.core.validators.MinLengthValidator(3)])),
                ("fecha", models.DateTimeField(db_index=True)),
                ("encargado", models.CharField(max_length=100, validators=[django.core.validators.MinLengthValidator(2)])),
                ("quien_imparte", models.CharField(blank=True, default="", max_length=100)),
                ("resumen", models.TextField(blank=True, default="")),
                ("grado", models.CharField(choices=[("aprendiz", "Aprendiz"), ("companero", "Compañero"), ("maestro", "Maestro"), ("general", "General")], db_index=True, max_length=20)),
                ("tipo", models.CharField(choices=[("tenida", "Tenida"), ("instruccion", "Instrucción"), ("camara", "Cámara"), ("trabajo", "Trabajo"), ("ceremonia", "Ceremonia"), ("reunion", "Reunión")], max_length=20)),
                ("estado", models.CharField(choices=[("pendiente", "Pendiente"), ("programado", "Programado"), ("completado", "Completado"), ("cancelado", "Cancelado")], db_index=True, default="pendiente", max_length=20)),
                ("ubicacion", models.CharField(blank=True, default="", max_length=200)),
                ("detalles_adicionales", models.TextField(blank=True, default="")),
                ("requiere_confirmacion", models.BooleanField(default=True)),
                ("limite_asistentes", models.PositiveIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ("observaciones", models.TextField(blank=True, default="")),
                ("activo", models.BooleanField(db_index=True, default=True)),
                ("creado", models.DateTimeField(auto_now_add=True)),
                ("actualizado", models.DateTimeField(auto_now=True)),
                ("documentos", models.ManyToManyField(blank=True, related_name="programas", to="documentos.documento")),
                ("responsable", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="programas_a_cargo", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Programa",
                "verbose_name_plural": "Programas",
                "ordering": ["fecha"],
            },
        ),
        migrations.CreateModel(
            name="Asistencia",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("asistio", models.BooleanField(db_index=True, default=False)),
                ("confirmado", models.BooleanField(db_index=True, default=False)),
                ("justificacion", models.TextField(blank=True, default="")),
                ("hora_registro", models.DateTimeField(default=django.utils.timezone.now)),
                ("hora_llegada", models.TimeField(blank=True, null=True)),
                ("observaciones", models.TextField(blank=True, default="")),
                ("programa", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="asistencias", to="programas.programa")),
                ("miembro", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="asistencias", to="miembros.miembro")),
                ("registrado_por", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="asistencias_registradas", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Asistencia",
                "verbose_name_plural": "Asistencias",
                "ordering": ["miembro__apellidos", "miembro__nombres"],
                "constraints": [models.UniqueConstraint(fields=("programa", "miembro"), name="asistencia_programa_miembro_unica")],
            },
        ),
    ]
