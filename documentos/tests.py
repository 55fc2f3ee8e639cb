"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:   Pruebas de documentos: metadatos derivados del archivo, subida
               con validación de tipo y tamaño, visibilidad por categoría,
               descargas, moderación de planchas y notificaciones.
--------------------------------------------------------------------------------
"""
import hashlib
import shutil
import tempfile
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from core.tests import crear_hermano
from documentos.models import Documento, formatear_tamano
from documentos.tasks import notificar_nuevo_documento, notificar_plancha_moderada
from notificaciones.models import Notificacion

MEDIA_PRUEBAS = tempfile.mkdtemp(prefix="orpheo-media-")


def tearDownModule():
    shutil.rmtree(MEDIA_PRUEBAS, ignore_errors=True)


def archivo(nombre="acta.pdf", contenido=b"%PDF-1.4 contenido de prueba"):
    return SimpleUploadedFile(nombre, contenido, content_type="application/octet-stream")


def crear_documento(subido_por, categoria="aprendiz", es_plancha=False, **extra):
    return Documento.objects.create(
        archivo=extra.pop("archivo", archivo()),
        nombre=extra.pop("nombre", "Acta de tenida"),
        categoria=categoria,
        es_plancha=es_plancha,
        subido_por=subido_por,
        autor=extra.pop("autor", subido_por),
        **extra,
    )


# ==========================================
# 1. PRUEBAS DE MODELO
# ==========================================
@override_settings(MEDIA_ROOT=MEDIA_PRUEBAS)
class DocumentoModelTest(TestCase):
    def setUp(self):
        self.user = crear_hermano("orador", grado="maestro", cargo="orador")

    def test_metadatos_derivados_del_archivo(self):
        """PU-01: Tipo, tamaño y hash se calculan al subir."""
        contenido = b"Trabajo sobre el simbolismo del mandil"
        documento = crear_documento(self.user, archivo=archivo("trabajo.DOCX", contenido))

        self.assertEqual(documento.tipo, "docx")
        self.assertEqual(documento.tamano, len(contenido))
        self.assertEqual(documento.hash_archivo, hashlib.sha256(contenido).hexdigest())
        self.assertEqual(documento.plancha_estado, "")

    def test_plancha_nueva_queda_pendiente(self):
        documento = crear_documento(self.user, es_plancha=True)
        self.assertEqual(documento.plancha_estado, Documento.EstadosPlancha.PENDIENTE)

    def test_borrar_documento_elimina_el_archivo(self):
        documento = crear_documento(self.user)
        almacenamiento, nombre = documento.archivo.storage, documento.archivo.name
        self.assertTrue(almacenamiento.exists(nombre))
        documento.delete()
        self.assertFalse(almacenamiento.exists(nombre))

    def test_formatear_tamano(self):
        self.assertEqual(formatear_tamano(None), "Desconocido")
        self.assertEqual(formatear_tamano(512), "512.0 Bytes")
        self.assertEqual(formatear_tamano(1536), "1.5 KB")
        self.assertEqual(formatear_tamano(5 * 1024 * 1024), "5.0 MB")


# ==========================================
# 2. TAREAS DE NOTIFICACIÓN
# ==========================================
@override_settings(MEDIA_ROOT=MEDIA_PRUEBAS)
class NotificacionesDocumentoTest(TestCase):
    def setUp(self):
        self.maestro = crear_hermano("maestro", grado="maestro")
        self.otro_maestro = crear_hermano("maestro2", grado="maestro")
        self.companero = crear_hermano("companero", grado="companero")
        self.aprendiz = crear_hermano("aprendiz", grado="aprendiz")
        self.admin = crear_hermano("admin", rol="admin", grado="aprendiz")

    @mock.patch("documentos.signals.notificar_nuevo_documento")
    def test_alta_encola_la_tarea(self, tarea):
        documento = crear_documento(self.maestro, categoria="companero")
        tarea.delay.assert_called_once_with(documento.pk)

    @mock.patch("documentos.signals.notificar_nuevo_documento")
    def test_nuevo_documento_llega_a_quienes_pueden_verlo(self, _tarea):
        """PU-02: Se notifica a los grados con acceso y a los administradores, nunca al autor."""
        documento = crear_documento(self.maestro, categoria="companero")

        self.assertEqual(notificar_nuevo_documento(documento.pk), 3)
        destinatarios = set(Notificacion.objects.values_list("usuario__username", flat=True))
        self.assertEqual(destinatarios, {"maestro2", "companero", "admin"})
        notificacion = Notificacion.objects.first()
        self.assertEqual(notificacion.tipo, Notificacion.Tipos.DOCUMENTO)
        self.assertEqual(notificacion.relacionado_id, documento.pk)

    @mock.patch("documentos.signals.notificar_nuevo_documento")
    def test_documento_administrativo_solo_para_administradores(self, _tarea):
        documento = crear_documento(self.maestro, categoria="administrativo")
        notificar_nuevo_documento(documento.pk)
        self.assertEqual(list(Notificacion.objects.values_list("usuario__username", flat=True)), ["admin"])

    def test_documento_inexistente(self):
        self.assertEqual(notificar_nuevo_documento(999999), 0)

    @mock.patch("documentos.signals.notificar_nuevo_documento")
    def test_plancha_moderada_avisa_al_autor(self, _tarea):
        plancha = crear_documento(self.maestro, es_plancha=True, autor=self.companero)
        plancha.plancha_estado = Documento.EstadosPlancha.RECHAZADA
        plancha.plancha_comentarios = "Falta bibliografía"
        plancha.save()

        notificar_plancha_moderada(plancha.pk, self.admin.pk)
        notificacion = Notificacion.objects.get(usuario=self.companero)
        self.assertEqual(notificacion.titulo, "Plancha Rechazada")
        self.assertIn("Falta bibliografía", notificacion.mensaje)
        self.assertEqual(notificacion.prioridad, Notificacion.Prioridades.ALTA)
        self.assertEqual(notificacion.remitente, self.admin)


# ==========================================
# 3. PRUEBAS DE INTEGRACIÓN (API)
# ==========================================
@override_settings(MEDIA_ROOT=MEDIA_PRUEBAS)
class DocumentoAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.maestro = crear_hermano("maestro", grado="maestro")
        self.aprendiz = crear_hermano("aprendiz", grado="aprendiz")
        self.orador = crear_hermano("orador", grado="maestro", cargo="orador")
        self.url = reverse("documento-list")

    def test_subida_de_documento(self):
        """PI-01: Un maestro sube un documento; el nombre por defecto es el del archivo."""
        self.client.force_authenticate(self.maestro)
        response = self.client.post(self.url, {"archivo": archivo("ritual.pdf"), "categoria": "aprendiz"})

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        documento = Documento.objects.get()
        self.assertEqual(documento.nombre, "ritual.pdf")
        self.assertEqual(documento.tipo, "pdf")
        self.assertEqual(documento.subido_por, self.maestro)
        self.assertEqual(documento.autor, self.maestro)

    def test_aprendiz_no_puede_subir(self):
        self.client.force_authenticate(self.aprendiz)
        response = self.client.post(self.url, {"archivo": archivo(), "categoria": "aprendiz"})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_extension_no_permitida(self):
        self.client.force_authenticate(self.maestro)
        response = self.client.post(self.url, {"archivo": archivo("virus.exe"), "categoria": "aprendiz"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("archivo", response.data["errors"])
        self.assertFalse(Documento.objects.exists())

    @override_settings(ORPHEO={"DOCUMENTO_TAMANO_MAXIMO": 10})
    def test_archivo_demasiado_grande(self):
        self.client.force_authenticate(self.maestro)
        response = self.client.post(self.url, {"archivo": archivo(contenido=b"x" * 11), "categoria": "aprendiz"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("archivo", response.data["errors"])

    def test_listado_por_categoria(self):
        """PI-02: Un aprendiz no ve documentos de grados superiores ni administrativos."""
        for categoria in ("aprendiz", "general", "maestro", "administrativo"):
            crear_documento(self.maestro, categoria=categoria, nombre=f"Doc {categoria}")

        self.client.force_authenticate(self.aprendiz)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        categorias = {d["categoria"] for d in response.data["results"]}
        self.assertEqual(categorias, {"aprendiz", "general"})

        self.client.force_authenticate(self.maestro)
        categorias = {d["categoria"] for d in self.client.get(self.url).data["results"]}
        self.assertEqual(categorias, {"aprendiz", "general", "maestro"})

    def test_detalle_y_descarga_cuentan_accesos(self):
        documento = crear_documento(self.maestro, archivo=archivo("acta.pdf", b"contenido"))
        self.client.force_authenticate(self.aprendiz)

        response = self.client.get(reverse("documento-detail", args=[documento.pk]))
        self.assertEqual(response.data["visualizaciones"], 1)

        response = self.client.get(reverse("documento-descargar", args=[documento.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("attachment", response["Content-Disposition"])
        self.assertEqual(b"".join(response.streaming_content), b"contenido")
        response.close()
        documento.refresh_from_db()
        self.assertEqual(documento.descargas, 1)

    def test_solo_el_autor_edita_su_documento(self):
        documento = crear_documento(self.maestro)
        url = reverse("documento-detail", args=[documento.pk])

        self.client.force_authenticate(self.orador)
        response = self.client.patch(url, {"descripcion": "cambio ajeno"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.maestro)
        response = self.client.patch(url, {"descripcion": "cambio propio"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        documento.refresh_from_db()
        self.assertEqual(documento.descripcion, "cambio propio")
        self.assertEqual(documento.nombre, "Acta de tenida")

    @mock.patch("documentos.api.notificar_plancha_moderada")
    def test_aprobar_plancha(self, tarea):
        """PI-03: El Orador aprueba la plancha y se notifica al autor."""
        plancha = crear_documento(self.maestro, es_plancha=True)
        self.client.force_authenticate(self.orador)

        response = self.client.post(
            reverse("documento-aprobar", args=[plancha.pk]), {"comentarios": "Excelente trabajo"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        plancha.refresh_from_db()
        self.assertEqual(plancha.plancha_estado, Documento.EstadosPlancha.APROBADA)
        self.assertEqual(plancha.plancha_comentarios, "Excelente trabajo")
        self.assertEqual(plancha.moderado_por, self.orador)
        tarea.delay.assert_called_once_with(plancha.pk, self.orador.pk)

    def test_rechazo_requiere_permiso_y_plancha(self):
        plancha = crear_documento(self.maestro, es_plancha=True)
        documento = crear_documento(self.maestro)

        self.client.force_authenticate(self.maestro)
        response = self.client.post(reverse("documento-rechazar", args=[plancha.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.orador)
        response = self.client.post(reverse("documento-rechazar", args=[documento.pk]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "El documento no es una plancha")

    def test_estadisticas_segun_lo_visible(self):
        crear_documento(self.maestro, categoria="aprendiz", archivo=archivo("a.pdf"))
        crear_documento(self.maestro, categoria="maestro", archivo=archivo("b.docx"))
        crear_documento(self.maestro, categoria="aprendiz", es_plancha=True, archivo=archivo("c.pdf"))
        Documento.objects.filter(tipo="pdf").update(descargas=2, visualizaciones=5)

        self.client.force_authenticate(self.aprendiz)
        response = self.client.get(reverse("documento-estadisticas"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        datos = response.data["data"]
        self.assertEqual(datos["total"], 2)
        self.assertEqual(datos["por_categoria"]["aprendiz"], 2)
        self.assertEqual(datos["por_categoria"]["maestro"], 0)
        self.assertEqual(datos["por_tipo"], {"pdf": 2})
        self.assertEqual(datos["planchas"], {"total": 1, "pendientes": 1, "aprobadas": 0, "rechazadas": 0})
        self.assertEqual(datos["uso"], {"total_descargas": 4, "total_visualizaciones": 10})

        self.client.force_authenticate(self.maestro)
        self.assertEqual(self.client.get(reverse("documento-estadisticas")).data["data"]["total"], 3)
