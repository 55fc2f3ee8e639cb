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
            name="Perfil",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("rol", models.CharField(choices=[("superadmin", "SUPERADMIN"), ("admin", "ADMIN"), ("general", "GENERAL")], default="general", max_length=20)),
                ("grado", models.CharField(choices=[("aprendiz", "Aprendiz"), ("companero", "Compañero"), ("maestro", "Maestro")], default="aprendiz", max_length=20)),
                ("cargo", models.CharField(blank=True, choices=[("venerable_maestro", "Venerable Maestro"), ("primer_vigilante", "Primer Vigilante"), ("segundo_vigilante", "Segundo Vigilante"), ("secretario", "Secretario"), ("tesorero", "Tesorero"), ("orador", "Orador"), ("maestro_ceremonias", "Maestro de Ceremonias"), ("hospitalario", "Hospitalario")], default="", max_length=30)),
                ("rut", models.CharField(help_text="12.345.678-5", max_length=12, unique=True, validators=[core.validators.rut_validator])),
                ("telefono", models.CharField(blank=True, default="", max_length=20, validators=[core.validators.telefono_validator], verbose_name="Teléfono")),
                ("creado", models.DateTimeField(auto_now_add=True)),
                ("actualizado", models.DateTimeField(auto_now=True)),
                ("usuario", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="perfil", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Perfil",
                "verbose_name_plural": "Perfiles",
                "constraints": [models.CheckConstraint(condition=models.Q(("rut", ""), _negated=True), name="perfil_rut_no_vacio")],
            },
        ),
    ]
