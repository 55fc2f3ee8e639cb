"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:   Pruebas del módulo de miembros: validador compuesto de la ficha,
               saneamiento de datos, API REST con filtrado por grado y
               estadísticas cacheadas e importación masiva.
--------------------------------------------------------------------------------
"""
from datetime import date, datetime
from io import BytesIO

from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from openpyxl import Workbook
from rest_framework import status
from rest_framework.test import APIClient

from core.cache import CacheConTTL
from core.tests import AlmacenMemoria, crear_hermano
from miembros.estadisticas import calcular_estadisticas, invalidar_estadisticas, obtener_estadisticas
from miembros.models import Miembro
from miembros.validacion import (
    FichaMiembro,
    limpiar_datos_miembro,
    validar_formulario_completo,
    validar_formulario_miembro,
)

HOY = date(2024, 6, 10)


def ficha_valida(**cambios):
    datos = {
        "nombres": "Juan Pablo",
        "apellidos": "Pérez Soto",
        "rut": "12345678-5",
        "email": "Juan.Perez@Logia.cl",
        "telefono": "987654321",
        "fecha_nacimiento": "1980-05-17",
        "fecha_ingreso": "2010-03-01",
        "grado": "Compañero",
        "estado": "activo",
        "direccion": "Av. Matta 1234",
        "profesion": "Ingeniero",
    }
    datos.update(cambios)
    return datos


def crear_miembro(rut, grado="aprendiz", estado="activo", **extra):
    return Miembro.objects.create(
        nombres=extra.pop("nombres", "Hermano"),
        apellidos=extra.pop("apellidos", "Prueba"),
        rut=rut,
        email=extra.pop("email", f"{rut[:4]}@logia.cl"),
        fecha_nacimiento=date(1980, 1, 1),
        fecha_ingreso=date(2010, 1, 1),
        grado=grado,
        estado=estado,
        **extra,
    )


# ==========================================
# 1. PRUEBAS UNITARIAS (Validador de ficha)
# ==========================================
class ValidacionFichaTest(SimpleTestCase):
    def test_ficha_valida_no_tiene_errores(self):
        self.assertEqual(validar_formulario_miembro(ficha_valida(), hoy=HOY), {})

    def test_ficha_vacia_reporta_requeridos(self):
        """PU-01: Cada campo requerido ausente tiene su propio mensaje."""
        errores = validar_formulario_miembro({}, hoy=HOY)
        self.assertEqual(errores["nombres"], "Los nombres son requeridos")
        self.assertEqual(errores["apellidos"], "Los apellidos son requeridos")
        self.assertEqual(errores["rut"], "El RUT es requerido")
        self.assertEqual(errores["email"], "El email es requerido")
        self.assertEqual(errores["fecha_nacimiento"], "La fecha de nacimiento es requerida")
        self.assertEqual(errores["fecha_ingreso"], "La fecha de ingreso es requerida")
        self.assertIn("grado", errores)
        self.assertIn("estado", errores)
        # Los opcionales no se reportan.
        self.assertNotIn("telefono", errores)
        self.assertNotIn("direccion", errores)

    def test_entrada_que_no_es_ficha(self):
        """PU-04: Textos, listas o números se validan como una ficha vacía, sin lanzar."""
        requeridos = validar_formulario_miembro({}, hoy=HOY)
        for entrada in ("texto", [1, 2], 42, None):
            self.assertEqual(validar_formulario_miembro(entrada, hoy=HOY), requeridos, entrada)
            self.assertEqual(limpiar_datos_miembro(entrada), FichaMiembro())
            resultado = validar_formulario_completo(entrada, hoy=HOY)
            self.assertFalse(resultado.valido)
            self.assertIn("rut", resultado.campos_con_error)
            self.assertIsNone(resultado.datos_limpios)

    def test_formatos_invalidos(self):
        errores = validar_formulario_miembro(
            ficha_valida(nombres="J", rut="12.345.678-9", email="juan@", telefono="123", grado="gran maestro"),
            hoy=HOY,
        )
        self.assertEqual(errores["nombres"], "Los nombres deben tener al menos 2 caracteres")
        self.assertEqual(errores["rut"], "El RUT no es válido")
        self.assertEqual(errores["email"], "El email no es válido")
        self.assertEqual(errores["telefono"], "El teléfono no es válido")
        self.assertEqual(errores["grado"], "El grado masónico no es válido")

    def test_limite_de_edad_minima(self):
        """PU-02: Con 16 años recién cumplidos se acepta; un día antes no."""
        ok = validar_formulario_miembro(
            ficha_valida(fecha_nacimiento="2008-06-10", fecha_ingreso="2024-06-10"), hoy=HOY
        )
        self.assertNotIn("fecha_nacimiento", ok)

        errores = validar_formulario_miembro(
            ficha_valida(fecha_nacimiento="2008-06-11", fecha_ingreso="2024-06-10"), hoy=HOY
        )
        self.assertEqual(errores["fecha_nacimiento"], "El miembro debe tener al menos 16 años")

    def test_edad_minima_configurable(self):
        errores = validar_formulario_miembro(ficha_valida(fecha_nacimiento="2008-01-01"), hoy=HOY, edad_minima=18)
        self.assertEqual(errores["fecha_nacimiento"], "El miembro debe tener al menos 18 años")

    def test_fechas_futuras_e_invalidas(self):
        errores = validar_formulario_miembro(
            ficha_valida(fecha_nacimiento="2030-01-01", fecha_ingreso="2024-06-11"), hoy=HOY
        )
        self.assertEqual(errores["fecha_nacimiento"], "La fecha de nacimiento no puede ser futura")
        self.assertEqual(errores["fecha_ingreso"], "La fecha de ingreso no puede ser futura")

        errores = validar_formulario_miembro(ficha_valida(fecha_nacimiento="1980-02-30"), hoy=HOY)
        self.assertEqual(errores["fecha_nacimiento"], "La fecha de nacimiento no es válida")

    def test_ingreso_estrictamente_posterior_al_nacimiento(self):
        errores = validar_formulario_miembro(
            ficha_valida(fecha_nacimiento="1980-05-17", fecha_ingreso="1980-05-17"), hoy=HOY
        )
        self.assertEqual(errores["fecha_ingreso"], "La fecha de ingreso debe ser posterior al nacimiento")

    def test_opcionales_con_formato_invalido(self):
        errores = validar_formulario_miembro(
            ficha_valida(direccion="<script>", ciudad_nacimiento="Stgo 1", profesion="x", observaciones="o" * 1001),
            hoy=HOY,
        )
        self.assertEqual(
            set(errores), {"direccion", "ciudad_nacimiento", "profesion", "observaciones"}
        )

    def test_limpieza_de_datos(self):
        limpia = limpiar_datos_miembro(ficha_valida(nombres="  Juan   <b>Pablo</b> ", fecha_ingreso="01/03/2010"))
        self.assertIsInstance(limpia, FichaMiembro)
        self.assertEqual(limpia.nombres, "Juan bPablo/b")
        self.assertEqual(limpia.rut, "12.345.678-5")
        self.assertEqual(limpia.email, "juan.perez@logia.cl")
        self.assertEqual(limpia.telefono, "+56 9 8765 4321")
        self.assertEqual(limpia.grado, "companero")
        self.assertEqual(limpia.fecha_ingreso, "2010-03-01")

    def test_resultado_completo(self):
        resultado = validar_formulario_completo(ficha_valida(), hoy=HOY)
        self.assertTrue(resultado.valido)
        self.assertEqual(resultado.cantidad_errores, 0)
        self.assertEqual(resultado.datos_limpios.rut, "12.345.678-5")

        resultado = validar_formulario_completo(ficha_valida(rut="", email="x"), hoy=HOY)
        self.assertFalse(resultado.valido)
        self.assertEqual(resultado.cantidad_errores, 2)
        self.assertEqual(resultado.campos_con_error, ["rut", "email"])
        self.assertIsNone(resultado.datos_limpios)


# ==========================================
# 2. ESTADÍSTICAS CACHEADAS
# ==========================================
class EstadisticasTest(TestCase):
    def setUp(self):
        cache.clear()
        crear_miembro("11111111-1", grado="aprendiz")
        crear_miembro("22222222-2", grado="companero", estado="inactivo")
        crear_miembro("33333333-3", grado="maestro")

    def test_calculo_por_alcance(self):
        todos = calcular_estadisticas(["aprendiz", "companero", "maestro"])
        self.assertEqual(todos["total_miembros"], 3)
        self.assertEqual(todos["activos"], 2)
        self.assertEqual(todos["inactivos"], 1)
        self.assertEqual(todos["distribucion_por_grado"], {"aprendiz": 1, "companero": 1, "maestro": 1})

        aprendices = calcular_estadisticas(["aprendiz"])
        self.assertEqual(aprendices["total_miembros"], 1)
        self.assertEqual(aprendices["porcentaje_activos"], 100.0)

    def test_cache_e_invalidacion(self):
        """PU-03: Las estadísticas se sirven desde caché hasta que se invalidan."""
        cache_ttl = CacheConTTL(AlmacenMemoria(), prefijo="miembros", ttl=300)
        self.assertEqual(obtener_estadisticas(["maestro", "aprendiz", "companero"], cache_ttl)["total_miembros"], 3)

        crear_miembro("44444444-4", grado="maestro")
        self.assertEqual(obtener_estadisticas(["aprendiz", "companero", "maestro"], cache_ttl)["total_miembros"], 3)

        invalidar_estadisticas(cache_ttl)
        self.assertEqual(obtener_estadisticas(["aprendiz", "companero", "maestro"], cache_ttl)["total_miembros"], 4)

    def test_cambios_en_miembros_invalidan_la_cache_compartida(self):
        self.assertEqual(obtener_estadisticas(["aprendiz", "companero", "maestro"])["total_miembros"], 3)
        Miembro.objects.get(rut="33.333.333-3").delete()
        self.assertEqual(obtener_estadisticas(["aprendiz", "companero", "maestro"])["total_miembros"], 2)


# ==========================================
# 3. PRUEBAS DE INTEGRACIÓN (API)
# ==========================================
class MiembroAPITest(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.secretario = crear_hermano("secretario", grado="maestro", cargo="secretario")
        self.aprendiz = crear_hermano("aprendiz", grado="aprendiz")
        self.url = reverse("miembro-list")

    def test_crear_miembro_guarda_datos_saneados(self):
        """PI-01: El alta persiste la ficha normalizada."""
        self.client.force_authenticate(self.secretario)
        response = self.client.post(self.url, ficha_valida(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        miembro = Miembro.objects.get()
        self.assertEqual(miembro.rut, "12.345.678-5")
        self.assertEqual(miembro.email, "juan.perez@logia.cl")
        self.assertEqual(miembro.telefono, "+56 9 8765 4321")
        self.assertEqual(miembro.grado, "companero")
        self.assertEqual(miembro.fecha_ingreso, date(2010, 3, 1))
        self.assertEqual(miembro.creado_por, self.secretario)
        self.assertEqual(response.data["nombre_completo"], "Juan Pablo Pérez Soto")

    def test_crear_miembro_invalido_responde_mapa_de_errores(self):
        self.client.force_authenticate(self.secretario)
        response = self.client.post(self.url, ficha_valida(rut="12.345.678-9", email=""), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["message"], "Datos de entrada inválidos")
        self.assertEqual(response.data["errors"]["rut"], ["El RUT no es válido"])
        self.assertEqual(response.data["errors"]["email"], ["El email es requerido"])
        self.assertFalse(Miembro.objects.exists())

    def test_rut_y_email_unicos(self):
        self.client.force_authenticate(self.secretario)
        self.client.post(self.url, ficha_valida(), format="json")
        response = self.client.post(self.url, ficha_valida(rut="12.345.678-5"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["errors"]["rut"], ["Ya existe un miembro con este RUT"])
        self.assertEqual(response.data["errors"]["email"], ["Ya existe un miembro con este email"])

    def test_actualizacion_parcial_revalida_la_ficha(self):
        miembro = crear_miembro("11111111-1", email="uno@logia.cl")
        self.client.force_authenticate(self.secretario)
        url = reverse("miembro-detail", args=[miembro.pk])

        response = self.client.patch(url, {"telefono": "22345678"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        miembro.refresh_from_db()
        self.assertEqual(miembro.telefono, "+56 2 2234 5678")

        response = self.client.patch(url, {"fecha_ingreso": "1970-01-01"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("fecha_ingreso", response.data["errors"])

    def test_aprendiz_no_puede_crear(self):
        self.client.force_authenticate(self.aprendiz)
        response = self.client.post(self.url, ficha_valida(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data["success"])

    def test_listado_filtrado_por_grado(self):
        """PI-02: Un aprendiz solo ve aprendices; un maestro ve a todos."""
        crear_miembro("11111111-1", grado="aprendiz")
        maestro = crear_miembro("33333333-3", grado="maestro")

        self.client.force_authenticate(self.aprendiz)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["grado"], "aprendiz")
        response = self.client.get(reverse("miembro-detail", args=[maestro.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(self.secretario)
        self.assertEqual(self.client.get(self.url).data["count"], 2)

    def test_busqueda(self):
        crear_miembro("11111111-1", nombres="Hiram", email="hiram@logia.cl")
        crear_miembro("22222222-2", nombres="Salomón", email="salomon@logia.cl")
        self.client.force_authenticate(self.secretario)
        response = self.client.get(self.url, {"search": "hiram"})
        self.assertEqual(response.data["count"], 1)

    def test_eliminar(self):
        miembro = crear_miembro("11111111-1")
        self.client.force_authenticate(self.secretario)
        response = self.client.delete(reverse("miembro-detail", args=[miembro.pk]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Miembro.objects.exists())

    def test_estadisticas_respetan_el_grado(self):
        crear_miembro("11111111-1", grado="aprendiz")
        crear_miembro("33333333-3", grado="maestro")

        self.client.force_authenticate(self.aprendiz)
        response = self.client.get(reverse("miembro-estadisticas"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["total_miembros"], 1)

        self.client.force_authenticate(self.secretario)
        response = self.client.get(reverse("miembro-estadisticas"))
        self.assertEqual(response.data["data"]["total_miembros"], 2)

    def test_validacion_en_seco(self):
        self.client.force_authenticate(self.secretario)
        response = self.client.post(reverse("miembro-validar"), ficha_valida(nombres=""), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["valido"])
        self.assertEqual(response.data["errores"], {"nombres": "Los nombres son requeridos"})
        self.assertIsNone(response.data["datos_limpios"])
        self.assertFalse(Miembro.objects.exists())

        response = self.client.post(reverse("miembro-validar"), ficha_valida(), format="json")
        self.assertTrue(response.data["valido"])
        self.assertEqual(response.data["datos_limpios"]["rut"], "12.345.678-5")

    def test_cuerpo_que_no_es_objeto(self):
        """PI-03: Un cuerpo JSON que no es objeto responde errores de ficha, no 500."""
        self.client.force_authenticate(self.secretario)
        response = self.client.post(reverse("miembro-validar"), [1, 2], format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["valido"])
        self.assertEqual(response.data["errores"]["rut"], "El RUT es requerido")

        response = self.client.post(self.url, [1, 2], format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["errors"]["nombres"], ["Los nombres son requeridos"])
        self.assertFalse(Miembro.objects.exists())


# ==========================================
# 4. IMPORTACIÓN MASIVA
# ==========================================
def planilla(filas, encabezados=("nombres", "apellidos", "rut", "email", "fechaNacimiento", "fechaIngreso", "grado")):
    libro = Workbook()
    hoja = libro.active
    hoja.append(list(encabezados))
    for fila in filas:
        hoja.append(list(fila))
    contenido = BytesIO()
    libro.save(contenido)
    return SimpleUploadedFile(
        "miembros.xlsx",
        contenido.getvalue(),
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


class ImportacionMiembrosTest(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.secretario = crear_hermano("secretario", grado="maestro", cargo="secretario")
        self.url = reverse("miembro-importar")

    def test_importar_lista_de_fichas(self):
        """PI-04: Las filas válidas se guardan; las demás se informan con su número."""
        filas = [
            ficha_valida(),
            ficha_valida(rut="12.345.678-9", email="otro@logia.cl"),
            ficha_valida(email="repetido@logia.cl"),
            "no es una ficha",
            ficha_valida(rut="11111111-1", email="sin.grado@logia.cl", grado="", estado=None),
        ]
        self.client.force_authenticate(self.secretario)
        response = self.client.post(self.url, {"filas": filas}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        datos = response.data["data"]
        self.assertEqual(datos["total_filas"], 5)
        self.assertEqual([e["fila"] for e in datos["exitosos"]], [1, 5])
        self.assertEqual(datos["exitosos"][0]["rut"], "12.345.678-5")
        self.assertEqual([e["fila"] for e in datos["errores"]], [2, 3, 4])
        self.assertIn("rut: El RUT no es válido", datos["errores"][0]["error"])
        self.assertIn("Ya existe un miembro con este RUT", datos["errores"][1]["error"])

        # Sin grado ni estado se asume aprendiz activo.
        nuevo = Miembro.objects.get(rut="11.111.111-1")
        self.assertEqual((nuevo.grado, nuevo.estado), ("aprendiz", "activo"))
        self.assertEqual(nuevo.creado_por, self.secretario)

    def test_importar_planilla_excel(self):
        archivo = planilla(
            [
                ("Hiram", "Abif", "12345678-5", "hiram@logia.cl", datetime(1980, 5, 17), "2010-03-01", "maestro"),
                (None, None, None, None, None, None, None),
                ("Salomón", "Rey", 11111111, "salomon@logia.cl", "1975-01-01", "2005-01-01", "maestro"),
            ]
        )
        self.client.force_authenticate(self.secretario)
        response = self.client.post(self.url, {"archivo": archivo}, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        datos = response.data["data"]
        # La fila vacía se omite; la numeración sigue la de la planilla.
        self.assertEqual(datos["total_filas"], 2)
        self.assertEqual([e["fila"] for e in datos["exitosos"]], [2])
        self.assertEqual(datos["errores"][0]["fila"], 4)
        hiram = Miembro.objects.get()
        self.assertEqual(hiram.fecha_nacimiento, date(1980, 5, 17))
        self.assertEqual(hiram.grado, "maestro")

    def test_archivo_que_no_es_planilla(self):
        self.client.force_authenticate(self.secretario)
        archivo = SimpleUploadedFile("miembros.xlsx", b"esto no es un zip")
        response = self.client.post(self.url, {"archivo": archivo}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "El archivo no es una planilla Excel válida")

    def test_sin_archivo_ni_filas(self):
        self.client.force_authenticate(self.secretario)
        response = self.client.post(self.url, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "No se ha proporcionado ningún archivo")

    def test_aprendiz_no_puede_importar(self):
        self.client.force_authenticate(crear_hermano("aprendiz", grado="aprendiz"))
        response = self.client.post(self.url, {"filas": [ficha_valida()]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Miembro.objects.exists())
