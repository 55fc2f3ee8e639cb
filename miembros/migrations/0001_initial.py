import core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Miembro",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("nombres", models.CharField(max_length=100)),
                ("apellidos", models.CharField(max_length=100)),
                ("rut", models.CharField(help_text="12.345.678-5", max_length=12, unique=True, validators=[core.validators.rut_validator])),
                ("email", models.EmailField(max_length=100)),
                ("telefono", models.CharField(blank=True, default="", max_length=20, validators=[core.validators.telefono_validator])),
                ("direccion", models.CharField(blank=True, default="", max_length=255)),
                ("fecha_nacimiento", models.DateField()),
                ("ciudad_nacimiento", models.CharField(blank=True, default="", max_length=100)),
                ("profesion", models.CharField(blank=True, default="", max_length=100)),
                ("fecha_ingreso", models.DateField()),
                ("grado", models.CharField(choices=[("aprendiz", "Aprendiz"), ("companero", "Compañero"), ("maestro", "Maestro")], db_index=True, max_length=20)),
                ("estado", models.CharField(choices=[("activo", "Activo"), ("inactivo", "Inactivo"), ("suspendido", "Suspendido")], db_index=True, default="activo", max_length=20)),
                ("cargo", models.CharField(blank=True, default="", max_length=50)),
                ("vigente", models.BooleanField(db_index=True, default=True)),
                ("observaciones", models.TextField(blank=True, default="")),
                ("creado", models.DateTimeField(auto_now_add=True)),
                ("actualizado", models.DateTimeField(auto_now=True)),
                ("usuario", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="miembro", to=settings.AUTH_USER_MODEL)),
                ("creado_por", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="miembros_creados", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Miembro",
                "verbose_name_plural": "Miembros",
                "ordering": ["apellidos", "nombres"],
                "indexes": [models.Index(fields=["apellidos", "nombres"], name="miembro_nombre_idx")],
            },
        ),
    ]
