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
            name="Notificacion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("titulo", models.CharField(max_length=255)),
                ("mensaje", models.TextField(max_length=1000)),
                ("tipo", models.CharField(choices=[("programa", "Programa"), ("documento", "Documento"), ("miembro", "Miembro"), ("administrativo", "Administrativo"), ("sistema", "Sistema"), ("plancha", "Plancha"), ("asistencia", "Asistencia")], db_index=True, max_length=20)),
                ("prioridad", models.CharField(choices=[("baja", "Baja"), ("normal", "Normal"), ("alta", "Alta"), ("urgente", "Urgente")], default="normal", max_length=10)),
                ("leido", models.BooleanField(db_index=True, default=False)),
                ("leido_en", models.DateTimeField(blank=True, null=True)),
                ("relacionado_tipo", models.CharField(blank=True, default="", max_length=20)),
                ("relacionado_id", models.PositiveBigIntegerField(blank=True, null=True)),
                ("accion_url", models.CharField(blank=True, default="", max_length=500)),
                ("expira_en", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("creado", models.DateTimeField(auto_now_add=True)),
                ("usuario", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notificaciones", to=settings.AUTH_USER_MODEL)),
                ("remitente", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="notificaciones_enviadas", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Notificación",
                "verbose_name_plural": "Notificaciones",
                "ordering": ["-creado"],
                "indexes": [models.Index(fields=["relacionado_tipo", "relacionado_id"], name="notif_relacionado_idx")],
            },
        ),
    ]
