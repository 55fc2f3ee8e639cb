"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:   Pruebas de programas: reglas de asistencia (registro único,
               límite de asistentes, resumen), API con visibilidad por grado y
               tareas de notificación y recordatorio.
--------------------------------------------------------------------------------
"""
from datetime import date, timedelta
from unittest import mock

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from core.tests import crear_hermano
from miembros.models import Miembro
from notificaciones.models import Notificacion
from programas.asistencia import confirmar_asistencia, registrar_asistencia, registrar_asistencias, resumen_asistencia
from programas.models import Asistencia, Programa
from programas.tasks import notificar_nuevo_programa, recordar_programas_proximos


def crear_programa(grado="aprendiz", dias=7, **extra):
    return Programa.objects.create(
        tema=extra.pop("tema", "Instrucción de primer grado"),
        fecha=timezone.now() + timedelta(days=dias),
        encargado=extra.pop("encargado", "Primer Vigilante"),
        grado=grado,
        tipo=extra.pop("tipo", Programa.Tipos.INSTRUCCION),
        **extra,
    )


def crear_miembro(rut, grado="aprendiz", usuario=None):
    return Miembro.objects.create(
        nombres="Hermano",
        apellidos=rut,
        rut=rut,
        email=f"{rut[:5]}@logia.cl",
        fecha_nacimiento=date(1980, 1, 1),
        fecha_ingreso=date(2010, 1, 1),
        grado=grado,
        usuario=usuario,
    )


# ==========================================
# 1. REGLAS DE ASISTENCIA
# ==========================================
@mock.patch("programas.signals.notificar_nuevo_programa")
class AsistenciaTest(TestCase):
    def setUp(self):
        self.uno = crear_miembro("11111111-1")
        self.dos = crear_miembro("22222222-2")
        self.tres = crear_miembro("33333333-3")

    def test_registro_unico_por_miembro(self, _tarea):
        """PU-01: Registrar dos veces al mismo miembro actualiza el registro."""
        programa = crear_programa()
        registrar_asistencia(programa, self.uno, asistio=False)
        registro = registrar_asistencia(programa, self.uno, asistio=True)

        self.assertEqual(Asistencia.objects.count(), 1)
        self.assertTrue(registro.asistio)
        self.assertTrue(registro.confirmado)
        self.assertEqual(registro.tipo_asistencia, Asistencia.TiposAsistencia.PRESENTE)

    def test_limite_de_asistentes(self, _tarea):
        programa = crear_programa(limite_asistentes=1)
        registrar_asistencia(programa, self.uno, asistio=True)
        # Actualizar un registro existente no consume cupo.
        registrar_asistencia(programa, self.uno, asistio=False, justificacion="Viaje")
        self.assertEqual(programa.cupos_disponibles, 0)

        with self.assertRaises(ValidationError):
            registrar_asistencia(programa, self.dos, asistio=True)
        with self.assertRaises(ValidationError):
            confirmar_asistencia(programa, self.dos)

    def test_cupo_se_verifica_sobre_el_programa_bloqueado(self, _tarea):
        """PU-03: El cupo se cuenta con la fila del programa bloqueada y releída."""
        programa = crear_programa()
        # Otro proceso fija el límite después de que se cargó la instancia.
        Programa.objects.filter(pk=programa.pk).update(limite_asistentes=1)

        with mock.patch.object(
            Programa.objects, "select_for_update", wraps=Programa.objects.select_for_update
        ) as bloqueo:
            registrar_asistencia(programa, self.uno, asistio=True)
            with self.assertRaises(ValidationError):
                confirmar_asistencia(programa, self.dos)
        self.assertEqual(bloqueo.call_count, 2)
        self.assertEqual(Asistencia.objects.count(), 1)

    def test_registro_masivo_es_atomico(self, _tarea):
        programa = crear_programa(limite_asistentes=2)
        registros = [{"miembro": m, "asistio": True} for m in (self.uno, self.dos, self.tres)]
        with self.assertRaises(ValidationError):
            registrar_asistencias(programa, registros)
        self.assertFalse(Asistencia.objects.exists())

    def test_resumen(self, _tarea):
        programa = crear_programa()
        registrar_asistencia(programa, self.uno, asistio=True)
        registrar_asistencia(programa, self.dos, asistio=False, justificacion="Enfermo")
        registrar_asistencia(programa, self.tres, asistio=False)

        resumen = resumen_asistencia(programa)
        self.assertEqual(resumen["total"], 3)
        self.assertEqual(resumen["presentes"], 1)
        self.assertEqual(resumen["justificados"], 1)
        self.assertEqual(resumen["ausentes"], 1)
        self.assertEqual(resumen["confirmados"], 3)
        self.assertEqual(resumen["porcentaje_asistencia"], 33)

    def test_resumen_sin_registros(self, _tarea):
        self.assertEqual(resumen_asistencia(crear_programa())["porcentaje_asistencia"], 0)

    def test_dias_restantes(self, _tarea):
        programa = crear_programa(dias=0)
        programa.fecha = timezone.now() + timedelta(hours=25)
        self.assertEqual(programa.dias_restantes, 2)
        programa.fecha = timezone.now() - timedelta(hours=1)
        self.assertFalse(programa.es_futuro)
        self.assertEqual(programa.dias_restantes, 0)


# ==========================================
# 2. TAREAS
# ==========================================
@mock.patch("programas.signals.notificar_nuevo_programa")
class TareasProgramaTest(TestCase):
    def setUp(self):
        self.responsable = crear_hermano("responsable", grado="maestro")
        self.companero = crear_hermano("companero", grado="companero")
        self.aprendiz = crear_hermano("aprendiz", grado="aprendiz")

    def test_alta_encola_la_tarea(self, tarea):
        programa = crear_programa(responsable=self.responsable)
        tarea.delay.assert_called_once_with(programa.pk)

    def test_notificacion_por_grado(self, _tarea):
        """PU-02: Un programa de compañeros no llega a los aprendices ni al responsable."""
        programa = crear_programa(grado="companero", responsable=self.responsable)
        self.assertEqual(notificar_nuevo_programa(programa.pk), 1)

        notificacion = Notificacion.objects.get()
        self.assertEqual(notificacion.usuario, self.companero)
        self.assertEqual(notificacion.tipo, Notificacion.Tipos.PROGRAMA)
        self.assertEqual(notificacion.accion_url, f"/programas/{programa.pk}")

    def test_programa_general_llega_a_todos(self, _tarea):
        programa = crear_programa(grado="general")
        self.assertEqual(notificar_nuevo_programa(programa.pk), 3)

    def test_recordatorio_de_programas_proximos(self, _tarea):
        proximo = crear_programa(grado="maestro", dias=0.5)
        crear_programa(grado="maestro", dias=3)
        crear_programa(grado="maestro", dias=0.25, estado=Programa.Estados.CANCELADO)

        self.assertEqual(recordar_programas_proximos(), 1)
        recordatorio = Notificacion.objects.get(titulo="Recordatorio de Programa")
        self.assertEqual(recordatorio.usuario, self.responsable)
        self.assertEqual(recordatorio.expira_en, proximo.fecha)


# ==========================================
# 3. PRUEBAS DE INTEGRACIÓN (API)
# ==========================================
class ProgramaAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.maestro = crear_hermano("maestro", grado="maestro")
        self.vigilante = crear_hermano("vigilante", grado="companero", cargo="primer_vigilante")
        self.aprendiz = crear_hermano("aprendiz", grado="aprendiz")
        self.url = reverse("programa-list")

    def datos(self, **cambios):
        datos = {
            "tema": "Tenida de instrucción",
            "fecha": (timezone.now() + timedelta(days=10)).isoformat(),
            "encargado": "Venerable Maestro",
            "grado": "aprendiz",
            "tipo": "tenida",
        }
        datos.update(cambios)
        return datos

    def test_crear_programa(self):
        """PI-01: Un maestro crea un programa y queda como responsable."""
        self.client.force_authenticate(self.maestro)
        response = self.client.post(self.url, self.datos(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        programa = Programa.objects.get()
        self.assertEqual(programa.responsable, self.maestro)
        self.assertEqual(programa.estado, Programa.Estados.PENDIENTE)
        # Se notificó a los grados que pueden verlo.
        self.assertTrue(Notificacion.objects.filter(usuario=self.aprendiz, relacionado_id=programa.pk).exists())

    def test_validaciones_de_creacion(self):
        self.client.force_authenticate(self.maestro)
        pasado = (timezone.now() - timedelta(days=1)).isoformat()
        response = self.client.post(self.url, self.datos(tema="ab", fecha=pasado), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["errors"]["fecha"], ["La fecha debe ser futura."])
        self.assertIn("tema", response.data["errors"])

    def test_aprendiz_no_puede_crear(self):
        self.client.force_authenticate(self.aprendiz)
        response = self.client.post(self.url, self.datos(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    @mock.patch("programas.signals.notificar_nuevo_programa")
    def test_listado_por_grado_y_proximos(self, _tarea):
        crear_programa(grado="aprendiz")
        crear_programa(grado="general")
        crear_programa(grado="maestro")
        crear_programa(grado="aprendiz", dias=-2, tema="Tenida pasada")

        self.client.force_authenticate(self.aprendiz)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({p["grado"] for p in response.data["results"]}, {"aprendiz", "general"})
        self.assertEqual(response.data["count"], 3)

        response = self.client.get(self.url, {"proximos": "1"})
        self.assertEqual(response.data["count"], 2)

    @mock.patch("programas.signals.notificar_nuevo_programa")
    def test_responsable_edita_su_programa(self, _tarea):
        programa = crear_programa(responsable=self.maestro)
        otro = crear_hermano("otro", grado="maestro")
        url = reverse("programa-detail", args=[programa.pk])

        self.client.force_authenticate(otro)
        self.assertEqual(self.client.patch(url, {"ubicacion": "Templo 2"}, format="json").status_code, 403)

        self.client.force_authenticate(self.maestro)
        response = self.client.patch(url, {"ubicacion": "Templo 2"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    @mock.patch("programas.signals.notificar_nuevo_programa")
    def test_toma_de_asistencia(self, _tarea):
        """PI-02: El Primer Vigilante toma asistencia en programas de aprendices."""
        programa = crear_programa(grado="aprendiz")
        uno, dos = crear_miembro("11111111-1"), crear_miembro("22222222-2")
        url = reverse("programa-asistencia", args=[programa.pk])
        payload = {
            "asistencias": [
                {"miembro": uno.pk, "asistio": True, "hora_llegada": "19:30"},
                {"miembro": dos.pk, "asistio": False, "justificacion": "Turno laboral"},
            ]
        }

        self.client.force_authenticate(self.aprendiz)
        self.assertEqual(self.client.post(url, payload, format="json").status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.vigilante)
        response = self.client.post(url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(Asistencia.objects.filter(programa=programa).count(), 2)
        self.assertEqual(Asistencia.objects.get(miembro=dos).registrado_por, self.vigilante)

        response = self.client.get(url)
        tipos = {r["miembro"]: r["tipo_asistencia"] for r in response.data}
        self.assertEqual(tipos, {uno.pk: "presente", dos.pk: "justificado"})

        response = self.client.get(reverse("programa-resumen-asistencia", args=[programa.pk]))
        self.assertEqual(response.data["data"]["presentes"], 1)
        self.assertEqual(response.data["data"]["porcentaje_asistencia"], 50)

    @mock.patch("programas.signals.notificar_nuevo_programa")
    def test_vigilante_no_gestiona_otros_grados(self, _tarea):
        programa = crear_programa(grado="companero")
        miembro = crear_miembro("11111111-1", grado="companero")
        self.client.force_authenticate(self.vigilante)
        response = self.client.post(
            reverse("programa-asistencia", args=[programa.pk]),
            {"asistencias": [{"miembro": miembro.pk, "asistio": True}]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    @mock.patch("programas.signals.notificar_nuevo_programa")
    def test_limite_de_asistentes_responde_400(self, _tarea):
        programa = crear_programa(limite_asistentes=1)
        uno, dos = crear_miembro("11111111-1"), crear_miembro("22222222-2")
        self.client.force_authenticate(self.maestro)
        response = self.client.post(
            reverse("programa-asistencia", args=[programa.pk]),
            {"asistencias": [{"miembro": uno.pk, "asistio": True}, {"miembro": dos.pk, "asistio": True}]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("limite_asistentes", response.data["errors"])
        self.assertFalse(Asistencia.objects.exists())

    @mock.patch("programas.signals.notificar_nuevo_programa")
    def test_confirmar_asistencia_propia(self, _tarea):
        programa = crear_programa()
        miembro = crear_miembro("11111111-1", usuario=self.aprendiz)
        url = reverse("programa-confirmar", args=[programa.pk])

        self.client.force_authenticate(self.aprendiz)
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        registro = Asistencia.objects.get(programa=programa, miembro=miembro)
        self.assertTrue(registro.confirmado)
        self.assertFalse(registro.asistio)

        self.client.force_authenticate(self.maestro)
        self.assertEqual(self.client.post(url).status_code, status.HTTP_403_FORBIDDEN)

    @mock.patch("programas.signals.notificar_nuevo_programa")
    def test_estadisticas(self, _tarea):
        programado = crear_programa(grado="aprendiz", dias=2, estado=Programa.Estados.PROGRAMADO)
        pasado = crear_programa(grado="aprendiz", dias=-2, estado=Programa.Estados.COMPLETADO)
        crear_programa(grado="maestro", estado=Programa.Estados.PROGRAMADO)
        uno, dos = crear_miembro("11111111-1"), crear_miembro("22222222-2")
        registrar_asistencia(pasado, uno, asistio=True)
        registrar_asistencia(pasado, dos, asistio=False)
        registrar_asistencia(programado, uno, asistio=True)

        self.client.force_authenticate(self.aprendiz)
        response = self.client.get(reverse("programa-estadisticas"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        datos = response.data["data"]
        self.assertEqual(datos["total_programas"], 2)
        self.assertEqual(datos["por_grado"], {"aprendiz": 2})
        self.assertEqual(datos["por_estado"], {"programado": 1, "completado": 1})
        self.assertEqual(datos["porcentaje_asistencia_general"], 66.7)
        self.assertEqual([p["id"] for p in datos["proximos_programas"]], [programado.pk])
