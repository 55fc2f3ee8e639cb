"""
--------------------------------------------------------------------------------
Proyecto:              Orpheo
Descripción:   Pruebas del núcleo: RUT (Módulo 11), validadores de campo, matriz
               de permisos, caché con TTL, autorización, manejador de errores
               de la API y endpoints de autenticación.
--------------------------------------------------------------------------------
"""
import itertools
from datetime import date, datetime
from types import SimpleNamespace
from unittest import mock

from django.contrib.auth.models import AnonymousUser, User
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.test import APIClient

from core import roles
from core.authz import can
from core.cache import AlmacenDjangoCache, CacheConTTL
from core.excepciones import manejador_excepciones
from core.models import Perfil
from core.rut import calcular_dv, formatear_rut, limpiar_rut, validar_rut
from core.validators import (
    calcular_edad,
    convertir_fecha,
    formatear_telefono,
    sanitizar_texto,
    validar_direccion,
    validar_edad_minima,
    validar_email,
    validar_fecha_no_futura,
    validar_fecha_posterior,
    validar_grado,
    validar_longitud,
    validar_nombre,
    validar_telefono,
)

_cuerpos_rut = itertools.count(10000000)


def rut_nuevo() -> str:
    """RUT válido y distinto en cada llamada."""
    cuerpo = str(next(_cuerpos_rut))
    return formatear_rut(cuerpo + calcular_dv(cuerpo))


def crear_hermano(username, rol="general", grado="aprendiz", cargo="", password="clave-segura-123", **extra):
    """Usuario con Perfil de la logia, para las pruebas de todas las apps."""
    user = User.objects.create_user(
        username=username, password=password, email=extra.pop("email", f"{username}@logia.cl"), **extra
    )
    Perfil.objects.create(usuario=user, rol=rol, grado=grado, cargo=cargo, rut=rut_nuevo())
    return user


# ==========================================
# 1. PRUEBAS UNITARIAS (Lógica pura)
# ==========================================
class RutTest(SimpleTestCase):
    def test_rut_valido_en_distintos_formatos(self):
        """PU-01: El mismo RUT es válido con o sin puntos y guion."""
        for rut in ("12.345.678-5", "12345678-5", "123456785", " 12 345 678 5 "):
            self.assertTrue(validar_rut(rut), rut)

    def test_digito_verificador_incorrecto(self):
        self.assertFalse(validar_rut("12.345.678-9"))

    def test_largo_y_caracteres_invalidos(self):
        for rut in ("", None, 12345678, "1-9", "1234567890-1", "12.3A5.678-5"):
            self.assertFalse(validar_rut(rut), rut)

    def test_casos_especiales_modulo_11(self):
        """PU-02: Resto 1 entrega 'K' y resto 0 entrega '0'."""
        self.assertEqual(calcular_dv("1000005"), "K")
        self.assertEqual(calcular_dv("2000009"), "0")
        self.assertTrue(validar_rut("1.000.005-k"))
        self.assertTrue(validar_rut("2000009-0"))

    def test_digito_verificador_con_cuerpo_invalido(self):
        """Un cuerpo que no son solo dígitos no lanza; retorna cadena vacía."""
        self.assertEqual(calcular_dv(12345678), "5")
        for cuerpo in ("12a45", "", "-5", None, 3.5, ["1", "2"], True):
            self.assertEqual(calcular_dv(cuerpo), "", cuerpo)

    def test_limpiar_es_idempotente_y_pasa_a_mayuscula(self):
        limpio = limpiar_rut("1.000.005-k")
        self.assertEqual(limpio, "1000005K")
        self.assertEqual(limpiar_rut(limpio), limpio)
        self.assertEqual(limpiar_rut(None), "")

    def test_formato_de_despliegue(self):
        self.assertEqual(formatear_rut("123456785"), "12.345.678-5")
        self.assertEqual(formatear_rut("1000005k"), "1.000.005-K")
        self.assertEqual(formatear_rut(formatear_rut("123456785")), "12.345.678-5")
        # Entradas muy cortas se devuelven sin cambios.
        self.assertEqual(formatear_rut("5"), "5")
        self.assertEqual(formatear_rut(None), "")


class ValidadoresTest(SimpleTestCase):
    def test_email(self):
        self.assertTrue(validar_email("hermano@logia.cl"))
        self.assertFalse(validar_email("hermano@logia"))
        self.assertFalse(validar_email(""))

    def test_telefono_opcional_y_patrones_chilenos(self):
        for telefono in ("", None, "+56 9 1234 5678", "987654321", "22345678", "(2) 2345 6789"):
            self.assertTrue(validar_telefono(telefono), telefono)
        for telefono in ("12345", "abc", "+1 555 123"):
            self.assertFalse(validar_telefono(telefono), telefono)

    def test_formatear_telefono(self):
        self.assertEqual(formatear_telefono("987654321"), "+56 9 8765 4321")
        self.assertEqual(formatear_telefono("+56912345678"), "+56 9 1234 5678")
        self.assertEqual(formatear_telefono("22345678"), "+56 2 2234 5678")
        self.assertEqual(formatear_telefono("sin numero"), "sin numero")

    def test_nombre(self):
        self.assertTrue(validar_nombre("José Ñúñez"))
        self.assertTrue(validar_nombre("O'Higgins-Riquelme"))
        self.assertFalse(validar_nombre("J"))
        self.assertFalse(validar_nombre("Juan3"))

    def test_sanitizar_texto(self):
        self.assertEqual(sanitizar_texto("  <b>Hola</b>   mundo "), "bHola/b mundo")
        self.assertEqual(sanitizar_texto(None), "")

    def test_apostrofe_valido_pero_removido_al_sanitizar(self):
        # Un nombre con apóstrofe es válido, pero se guarda sin él.
        self.assertTrue(validar_nombre("O'Higgins"))
        self.assertEqual(sanitizar_texto("O'Higgins"), "OHiggins")

    def test_convertir_fecha(self):
        self.assertEqual(convertir_fecha("1980-05-17"), date(1980, 5, 17))
        self.assertEqual(convertir_fecha("17/05/1980"), date(1980, 5, 17))
        self.assertEqual(convertir_fecha(datetime(1980, 5, 17, 10, 30)), date(1980, 5, 17))
        self.assertIsNone(convertir_fecha("2023-02-30"))
        self.assertIsNone(convertir_fecha("ayer"))

    def test_edad_cumplida_el_dia_del_cumpleanos(self):
        """PU-03: La edad sube exactamente el día del cumpleaños."""
        hoy = date(2024, 6, 10)
        self.assertEqual(calcular_edad("2008-06-10", hoy=hoy), 16)
        self.assertEqual(calcular_edad("2008-06-11", hoy=hoy), 15)
        self.assertTrue(validar_edad_minima("2008-06-10", 16, hoy=hoy))
        self.assertFalse(validar_edad_minima("2008-06-11", 16, hoy=hoy))
        self.assertFalse(validar_edad_minima("no-es-fecha", 16, hoy=hoy))

    def test_fechas(self):
        hoy = date(2024, 6, 10)
        self.assertTrue(validar_fecha_no_futura("2024-06-10", hoy=hoy))
        self.assertFalse(validar_fecha_no_futura("2024-06-11", hoy=hoy))
        self.assertTrue(validar_fecha_posterior("2020-01-02", "2020-01-01"))
        self.assertFalse(validar_fecha_posterior("2020-01-01", "2020-01-01"))

    def test_longitud_direccion_y_grado(self):
        self.assertTrue(validar_longitud("", 0, 10))
        self.assertFalse(validar_longitud("", 2, 10))
        self.assertFalse(validar_longitud("x" * 11, 0, 10))
        self.assertTrue(validar_direccion("Av. Matta 1234, depto #5"))
        self.assertFalse(validar_direccion("Casa"))
        self.assertTrue(validar_grado("Compañero"))
        self.assertFalse(validar_grado("gran maestro"))


class RolesTest(SimpleTestCase):
    def perfil(self, rol="general", grado="aprendiz", cargo="", usuario_id=1):
        return SimpleNamespace(rol=rol, grado=grado, cargo=cargo, usuario_id=usuario_id)

    def test_comodin_del_superadmin(self):
        """PU-04: El comodín se expande a todas las capacidades conocidas."""
        self.assertEqual(roles.permisos_de_rol("superadmin"), roles.CAPACIDADES_CONOCIDAS)
        self.assertTrue(roles.tiene_capacidad("superadmin", "approve_planchas"))
        self.assertNotIn(roles.COMODIN, roles.permisos_de_rol("superadmin"))
        self.assertEqual(roles.permisos_de_rol("desconocido"), frozenset())

    def test_permisos_se_acumulan_por_rol_grado_y_cargo(self):
        perfil = self.perfil(grado="maestro", cargo="orador")
        permisos = roles.permisos_de_usuario(perfil)
        self.assertIn("read_documents", permisos)
        self.assertIn("manage_attendance", permisos)
        self.assertIn("approve_planchas", permisos)
        self.assertNotIn("manage_members", permisos)

    def test_jerarquia_de_grados(self):
        self.assertTrue(roles.puede_ver_grado("maestro", "aprendiz"))
        self.assertTrue(roles.puede_ver_grado("companero", "companero"))
        self.assertFalse(roles.puede_ver_grado("aprendiz", "companero"))
        self.assertTrue(roles.puede_ver_grado("aprendiz", "general"))
        self.assertFalse(roles.puede_ver_grado("maestro", "administrativo"))
        self.assertEqual(roles.grados_que_pueden_ver("companero"), ["companero", "maestro"])
        self.assertEqual(roles.grados_visibles(self.perfil(grado="companero")), ["aprendiz", "companero", "general", "todos"])
        self.assertIn("administrativo", roles.grados_visibles(self.perfil(rol="admin")))

    def test_aprobar_planchas(self):
        self.assertTrue(roles.puede_aprobar_plancha(self.perfil(cargo="venerable_maestro")))
        self.assertTrue(roles.puede_aprobar_plancha(self.perfil(rol="admin")))
        self.assertFalse(roles.puede_aprobar_plancha(self.perfil(grado="maestro")))
        self.assertFalse(roles.puede_aprobar_plancha(None))

    def test_gestion_de_asistencia_por_vigilante(self):
        vigilante = self.perfil(cargo="primer_vigilante")
        self.assertTrue(roles.puede_gestionar_asistencia(vigilante, "aprendiz"))
        self.assertFalse(roles.puede_gestionar_asistencia(vigilante, "companero"))
        self.assertTrue(roles.puede_gestionar_asistencia(self.perfil(grado="maestro"), "companero"))

    def test_envio_de_notificaciones(self):
        self.assertTrue(roles.puede_enviar_notificaciones(self.perfil(cargo="secretario")))
        self.assertTrue(roles.puede_enviar_notificaciones(self.perfil(cargo="venerable_maestro")))
        self.assertTrue(roles.puede_enviar_notificaciones(self.perfil(rol="admin")))
        self.assertFalse(roles.puede_enviar_notificaciones(self.perfil(grado="maestro", cargo="orador")))
        self.assertFalse(roles.puede_enviar_notificaciones(None))

    def test_operaciones_sobre_recursos(self):
        aprendiz = self.perfil(usuario_id=7)
        propio = SimpleNamespace(subido_por_id=7, categoria="aprendiz")
        ajeno = SimpleNamespace(subido_por_id=8, categoria="maestro")
        self.assertTrue(roles.puede_operar(aprendiz, "documentos", "read", propio))
        self.assertFalse(roles.puede_operar(aprendiz, "documentos", "read", ajeno))
        self.assertTrue(roles.puede_operar(aprendiz, "documentos", "update", propio))
        self.assertFalse(roles.puede_operar(aprendiz, "documentos", "delete", ajeno))
        self.assertFalse(roles.puede_operar(aprendiz, "miembros", "create"))
        self.assertTrue(roles.puede_operar(self.perfil(cargo="secretario"), "miembros", "create"))
        self.assertTrue(roles.puede_operar(self.perfil(rol="superadmin"), "programas", "delete", object()))
        self.assertFalse(roles.puede_operar(None, "miembros", "read"))


class AlmacenMemoria:
    """Almacén clave-valor en memoria con la interfaz get/set/delete."""

    def __init__(self):
        self.datos = {}

    def get(self, clave):
        return self.datos.get(clave)

    def set(self, clave, valor):
        self.datos[clave] = valor

    def delete(self, clave):
        self.datos.pop(clave, None)


class AlmacenRoto(AlmacenMemoria):
    def set(self, clave, valor):
        raise ConnectionError("redis caído")


class CacheConTTLTest(SimpleTestCase):
    def setUp(self):
        self.ahora = [1000.0]
        self.almacen = AlmacenMemoria()
        self.cache = CacheConTTL(self.almacen, prefijo="prueba", ttl=60, reloj=lambda: self.ahora[0])

    def test_guarda_y_lee_con_prefijo(self):
        self.assertTrue(self.cache.guardar("clave", {"total": 3}))
        self.assertIn("prueba:clave", self.almacen.datos)
        self.assertEqual(self.cache.obtener("clave"), {"total": 3})
        self.assertTrue(self.cache.es_valido("clave"))

    def test_entrada_vencida_se_elimina_al_leer(self):
        """PU-05: Vence cuando el tiempo transcurrido supera el TTL."""
        self.cache.guardar("clave", "valor")
        self.ahora[0] += 60
        self.assertEqual(self.cache.obtener("clave"), "valor")
        self.ahora[0] += 1
        self.assertIsNone(self.cache.obtener("clave"))
        self.assertNotIn("prueba:clave", self.almacen.datos)

    def test_ttl_por_entrada(self):
        self.cache.guardar("corta", "x", ttl=5)
        self.ahora[0] += 6
        self.assertFalse(self.cache.es_valido("corta"))

    def test_obtener_o_calcular_calcula_una_vez(self):
        llamadas = []

        def calcular():
            llamadas.append(1)
            return 42

        self.assertEqual(self.cache.obtener_o_calcular("k", calcular), 42)
        self.assertEqual(self.cache.obtener_o_calcular("k", calcular), 42)
        self.assertEqual(len(llamadas), 1)

    def test_limpiar_expirados(self):
        self.cache.guardar("a", 1, ttl=10)
        self.cache.guardar("b", 2, ttl=100)
        self.ahora[0] += 50
        self.assertEqual(self.cache.limpiar_expirados(), 1)
        self.assertNotIn("prueba:a", self.almacen.datos)
        self.assertIn("prueba:b", self.almacen.datos)

    def test_falla_del_almacen_no_propaga(self):
        cache = CacheConTTL(AlmacenRoto(), ttl=60)
        with self.assertLogs("core.cache", level="ERROR"):
            self.assertFalse(cache.guardar("clave", 1))
        self.assertIsNone(cache.obtener("clave"))

    def test_almacen_django_expira_con_el_ttl_de_la_entrada(self):
        """PU-06: El backend de Django recibe el TTL de cada entrada como timeout."""
        backend = mock.Mock()
        cache = CacheConTTL(AlmacenDjangoCache(backend), prefijo="prueba", ttl=60, reloj=lambda: self.ahora[0])
        cache.guardar("larga", 1)
        cache.guardar("corta", 2, ttl=5)

        backend.set.assert_any_call("prueba:larga", {"data": 1, "timestamp": 1000.0, "ttl": 60}, timeout=60)
        backend.set.assert_any_call("prueba:corta", {"data": 2, "timestamp": 1000.0, "ttl": 5}, timeout=5)


class ManejadorExcepcionesTest(SimpleTestCase):
    def test_validacion_drf(self):
        response = manejador_excepciones(DRFValidationError({"rut": ["El RUT no es válido"]}), {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Datos de entrada inválidos")
        self.assertEqual(response.data["errors"], {"rut": ["El RUT no es válido"]})
        self.assertFalse(response.data["success"])

    def test_validacion_de_modelo(self):
        response = manejador_excepciones(ValidationError({"rut": "El RUT no es válido."}), {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("rut", response.data["errors"])

    def test_conflicto_de_integridad(self):
        response = manejador_excepciones(IntegrityError("UNIQUE constraint failed"), {})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["message"], "Recurso duplicado. El valor ya existe.")

    def test_error_no_controlado(self):
        with self.assertLogs("core.excepciones", level="ERROR"):
            response = manejador_excepciones(RuntimeError("boom"), {})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["message"], "Error interno del servidor")


# ==========================================
# 2. PRUEBAS DE MODELO Y AUTORIZACIÓN
# ==========================================
class PerfilModelTest(TestCase):
    def test_rut_se_guarda_formateado(self):
        user = User.objects.create_user(username="hiram", password="x")
        perfil = Perfil.objects.create(usuario=user, rut="123456785")
        self.assertEqual(perfil.rut, "12.345.678-5")
        self.assertFalse(perfil.es_administrador)

    def test_rut_invalido_o_vacio_no_se_guarda(self):
        user = User.objects.create_user(username="hiram", password="x")
        with self.assertRaises(ValidationError):
            Perfil.objects.create(usuario=user, rut="12.345.678-9")
        with self.assertRaises(ValidationError):
            Perfil.objects.create(usuario=user, rut="  ")
        self.assertFalse(Perfil.objects.exists())

    def test_email_de_usuario_unico_sin_importar_mayusculas(self):
        User.objects.create_user(username="uno", password="x", email="Hermano@Logia.cl")
        self.assertTrue(User.objects.filter(email="hermano@logia.cl").exists())
        with self.assertRaises(ValidationError):
            User.objects.create_user(username="dos", password="x", email="HERMANO@logia.cl")


class CanTest(TestCase):
    def test_reglas_base(self):
        self.assertFalse(can(AnonymousUser(), "miembros", "read"))
        root = User.objects.create_superuser(username="root", password="x", email="root@logia.cl")
        self.assertTrue(can(root, "miembros", "delete"))
        sin_perfil = User.objects.create_user(username="sinperfil", password="x")
        self.assertFalse(can(sin_perfil, "miembros", "read"))

    def test_consulta_la_matriz(self):
        secretario = crear_hermano("secretario", cargo="secretario")
        aprendiz = crear_hermano("aprendiz")
        self.assertTrue(can(secretario, "miembros", "create"))
        self.assertFalse(can(aprendiz, "miembros", "create"))


# ==========================================
# 3. PRUEBAS DE INTEGRACIÓN (API)
# ==========================================
class AutenticacionAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = crear_hermano("venerable", grado="maestro", cargo="venerable_maestro", password="clave-segura-123")

    def test_login_con_usuario(self):
        """PI-01: Login por nombre de usuario entrega token y permisos."""
        response = self.client.post(
            reverse("core:login"), {"username": "venerable", "password": "clave-segura-123"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["token"], Token.objects.get(user=self.user).key)
        self.assertIn("approve_planchas", response.data["user"]["permisos"])
        self.assertEqual(response.data["user"]["perfil"]["grado"], "maestro")

    def test_login_con_correo_sin_distinguir_mayusculas(self):
        response = self.client.post(
            reverse("core:login"), {"email": "VENERABLE@logia.cl", "password": "clave-segura-123"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_login_fallido(self):
        response = self.client.post(
            reverse("core:login"), {"username": "venerable", "password": "otra"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["message"], "Credenciales inválidas")

    def test_login_sin_identificador(self):
        response = self.client.post(reverse("core:login"), {"password": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("username", response.data["errors"])

    def test_perfil_requiere_autenticacion(self):
        response = self.client.get(reverse("core:perfil"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])

    def test_perfil_y_logout_con_token(self):
        token = Token.objects.create(user=self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

        response = self.client.get(reverse("core:perfil"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["username"], "venerable")
        self.assertTrue(response.data["data"]["recursos"]["documentos"]["approve_planchas"])

        response = self.client.post(reverse("core:logout"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Token.objects.filter(user=self.user).exists())

    def test_cambio_de_password(self):
        """PI-02: El cambio de contraseña revoca el token anterior y entrega uno nuevo."""
        anterior = Token.objects.create(user=self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {anterior.key}")

        response = self.client.post(
            reverse("core:cambiar_password"),
            {"password_actual": "clave-segura-123", "password_nueva": "Acacia-Templo-2024"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertNotEqual(response.data["token"], anterior.key)
        self.assertFalse(Token.objects.filter(key=anterior.key).exists())
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("Acacia-Templo-2024"))

    def test_cambio_de_password_rechazado(self):
        self.client.force_authenticate(self.user)
        url = reverse("core:cambiar_password")

        response = self.client.post(url, {"password_actual": "otra", "password_nueva": "Acacia-Templo-2024"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password_actual", response.data["errors"])

        response = self.client.post(
            url, {"password_actual": "clave-segura-123", "password_nueva": "clave-segura-123"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password_nueva", response.data["errors"])

        # Los validadores de Django rechazan contraseñas cortas.
        response = self.client.post(url, {"password_actual": "clave-segura-123", "password_nueva": "corta"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password_nueva", response.data["errors"])

        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("clave-segura-123"))
