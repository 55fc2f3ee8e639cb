"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:   Pruebas de notificaciones: servicio de creación y lectura,
               expiración y endpoints del usuario autenticado.
--------------------------------------------------------------------------------
"""
from datetime import timedelta

from django.contrib.auth.models import User
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from core.tests import crear_hermano
from notificaciones import servicios
from notificaciones.models import Notificacion
from notificaciones.tasks import limpiar_notificaciones_expiradas

TIPO = Notificacion.Tipos.SISTEMA


class ServiciosNotificacionTest(TestCase):
    def setUp(self):
        self.uno = crear_hermano("uno", grado="maestro")
        self.dos = crear_hermano("dos", grado="aprendiz")

    def test_crear_y_contar(self):
        servicios.crear_notificacion(self.uno, "Hola", "Mensaje", TIPO, prioridad=Notificacion.Prioridades.ALTA)
        servicios.crear_para_usuarios([self.uno.pk, self.dos.pk], "Aviso", "Para todos", TIPO)

        self.assertEqual(servicios.contar_no_leidas(self.uno), 2)
        self.assertEqual(servicios.contar_no_leidas(self.dos), 1)

    def test_marcar_leida_guarda_la_hora(self):
        notificacion = servicios.crear_notificacion(self.uno, "Hola", "Mensaje", TIPO)
        servicios.marcar_leida(notificacion)
        notificacion.refresh_from_db()
        self.assertTrue(notificacion.leido)
        self.assertIsNotNone(notificacion.leido_en)

        primera_lectura = notificacion.leido_en
        servicios.marcar_leida(notificacion)
        self.assertEqual(notificacion.leido_en, primera_lectura)

    def test_marcar_todas_leidas(self):
        servicios.crear_para_usuarios([self.uno.pk, self.uno.pk, self.dos.pk], "Aviso", "x", TIPO)
        self.assertEqual(servicios.marcar_todas_leidas(self.uno), 2)
        self.assertEqual(servicios.contar_no_leidas(self.uno), 0)
        self.assertEqual(servicios.contar_no_leidas(self.dos), 1)

    def test_destinatarios_por_grado(self):
        """PU-01: Usuarios inactivos y excluidos no reciben avisos; el superusuario sí."""
        User.objects.create_superuser(username="root", password="x", email="root@logia.cl")
        inactivo = crear_hermano("inactivo", grado="maestro")
        inactivo.is_active = False
        inactivo.save()

        ids = servicios.destinatarios_por_grado("maestro")
        nombres = set(User.objects.filter(pk__in=ids).values_list("username", flat=True))
        self.assertEqual(nombres, {"uno", "root"})

        ids = servicios.destinatarios_por_grado("aprendiz", excluir_usuario_id=self.dos.pk)
        nombres = set(User.objects.filter(pk__in=ids).values_list("username", flat=True))
        self.assertEqual(nombres, {"uno", "root"})

    def test_notificar_por_grado_sin_destinatarios(self):
        self.assertEqual(servicios.notificar_por_grado("administrativo", "x", "y", TIPO), [])
        self.assertFalse(Notificacion.objects.exists())

    def test_expiradas_no_cuentan_y_se_limpian(self):
        pasado = timezone.now() - timedelta(hours=1)
        futuro = timezone.now() + timedelta(hours=1)
        servicios.crear_notificacion(self.uno, "Vencida", "x", TIPO, expira_en=pasado)
        servicios.crear_notificacion(self.uno, "Vigente", "x", TIPO, expira_en=futuro)
        servicios.crear_notificacion(self.uno, "Permanente", "x", TIPO)

        self.assertEqual(servicios.contar_no_leidas(self.uno), 2)
        self.assertEqual(limpiar_notificaciones_expiradas(), 1)
        self.assertFalse(Notificacion.objects.filter(titulo="Vencida").exists())
        self.assertEqual(Notificacion.objects.count(), 2)


class NotificacionAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = crear_hermano("hermano", grado="companero")
        self.otro = crear_hermano("otro", grado="companero")
        self.propia = servicios.crear_notificacion(self.user, "Propia", "x", TIPO)
        self.ajena = servicios.crear_notificacion(self.otro, "Ajena", "x", TIPO)
        self.client.force_authenticate(self.user)

    def test_listado_solo_propias(self):
        response = self.client.get(reverse("notificacion-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([n["titulo"] for n in response.data["results"]], ["Propia"])

        response = self.client.get(reverse("notificacion-detail", args=[self.ajena.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data["success"])

    def test_contador_y_lectura(self):
        response = self.client.get(reverse("notificacion-no-leidas"))
        self.assertEqual(response.data["data"]["no_leidas"], 1)

        response = self.client.post(reverse("notificacion-marcar-leida", args=[self.propia.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["leido"])

        response = self.client.get(reverse("notificacion-no-leidas"))
        self.assertEqual(response.data["data"]["no_leidas"], 0)

    def test_marcar_todas_leidas(self):
        servicios.crear_notificacion(self.user, "Otra", "x", TIPO)
        response = self.client.post(reverse("notificacion-marcar-todas-leidas"))
        self.assertEqual(response.data["data"]["actualizadas"], 2)
        self.ajena.refresh_from_db()
        self.assertFalse(self.ajena.leido)

    def test_eliminar(self):
        response = self.client.delete(reverse("notificacion-detail", args=[self.propia.pk]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.delete(reverse("notificacion-detail", args=[self.ajena.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_requiere_autenticacion(self):
        self.client.force_authenticate(None)
        response = self.client.get(reverse("notificacion-list"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_estadisticas_propias(self):
        servicios.crear_notificacion(self.user, "Urgente", "x", Notificacion.Tipos.PROGRAMA, prioridad="alta")
        servicios.marcar_leida(self.propia)

        response = self.client.get(reverse("notificacion-estadisticas"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        datos = response.data["data"]
        self.assertEqual((datos["total"], datos["no_leidas"], datos["leidas"]), (2, 1, 1))
        self.assertEqual(datos["porcentaje_leidas"], 50.0)
        self.assertEqual(datos["por_tipo"], {"sistema": 1, "programa": 1})
        self.assertEqual(datos["por_prioridad"], {"normal": 1, "alta": 1})


class EnvioNotificacionAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.secretario = crear_hermano("secretario", grado="maestro", cargo="secretario")
        self.companero = crear_hermano("companero", grado="companero")
        self.aprendiz = crear_hermano("aprendiz", grado="aprendiz")
        self.url = reverse("notificacion-list")

    def aviso(self, **cambios):
        datos = {"titulo": " Tenida suspendida ", "mensaje": "Se traslada al viernes.", "tipo": "administrativo"}
        datos.update(cambios)
        return datos

    def test_envio_a_un_grado(self):
        """PI-01: El Secretario envía un aviso solo a los compañeros."""
        self.client.force_authenticate(self.secretario)
        response = self.client.post(self.url, self.aviso(destinatario="grado", grado_destino="companero"), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["data"]["cantidad"], 1)
        notificacion = Notificacion.objects.get()
        self.assertEqual(notificacion.usuario, self.companero)
        self.assertEqual(notificacion.titulo, "Tenida suspendida")
        self.assertEqual(notificacion.remitente, self.secretario)

    def test_envio_a_todos_y_a_administradores(self):
        self.client.force_authenticate(self.secretario)
        response = self.client.post(self.url, self.aviso(destinatario="todos", prioridad="urgente"), format="json")
        self.assertEqual(response.data["data"]["cantidad"], 3)
        self.assertEqual(Notificacion.objects.filter(prioridad="urgente").count(), 3)

        response = self.client.post(self.url, self.aviso(destinatario="admins"), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "No se encontraron usuarios destinatarios")

        crear_hermano("admin", rol="admin")
        response = self.client.post(self.url, self.aviso(destinatario="admins"), format="json")
        self.assertEqual(response.data["data"]["cantidad"], 1)

    def test_grado_destino_requerido(self):
        self.client.force_authenticate(self.secretario)
        response = self.client.post(self.url, self.aviso(destinatario="grado"), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("grado_destino", response.data["errors"])

    def test_sin_permiso_de_envio(self):
        self.client.force_authenticate(self.companero)
        response = self.client.post(self.url, self.aviso(destinatario="todos"), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Notificacion.objects.exists())
