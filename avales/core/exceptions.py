"""
Excepciones de dominio para el registro de avales.

No dependen del framework HTTP: cada una lleva el status_code con el que
la capa de API la convierte en una respuesta de rechazo estructurada
(ver el handler registrado en avales.main).
"""


class AvalException(Exception):
    """Base de todos los errores de negocio del sistema."""

    status_code: int = 400
    default_detail: str = "Solicitud rechazada"

    def __init__(self, detail: str | None = None, fields: list[str] | None = None):
        self.detail = detail or self.default_detail
        self.fields = list(fields) if fields else []
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        content: dict = {"detail": self.detail}
        if self.fields:
            content["fields"] = self.fields
        return content


class ValidationException(AvalException):
    """Campo obligatorio vacío o inválido (422). Lista los campos afectados."""

    status_code = 422
    default_detail = "Campos obligatorios incompletos"


class NotFoundException(AvalException):
    """Recurso no encontrado (404)."""

    status_code = 404

    def __init__(self, resource: str = "Recurso", detail: str | None = None):
        super().__init__(detail or f"{resource} no encontrado")


class ForbiddenFieldException(AvalException):
    """Intento de modificar correlativo o campos de anulación por la vía de edición (400)."""

    status_code = 400
    default_detail = "No puedes editar correlativo ni campos de anulacion"


class ImmutableException(AvalException):
    """Edición sobre un aval anulado (409)."""

    status_code = 409
    default_detail = "El aval está anulado y no puede modificarse"


class AlreadyVoidedException(AvalException):
    """Segunda anulación sobre el mismo aval (409)."""

    status_code = 409
    default_detail = "El aval ya fue anulado"


class UnknownSequenceException(AvalException):
    """La secuencia solicitada no existe. Error de configuración, no de usuario."""

    status_code = 500

    def __init__(self, nombre: str):
        self.nombre = nombre
        super().__init__(f"No existe la secuencia {nombre}")


class InvalidSequenceNumberException(AvalException):
    """Número de secuencia fuera de rango. Indica un error de programación."""

    status_code = 500

    def __init__(self, numero: object):
        self.numero = numero
        super().__init__(f"Número de secuencia inválido: {numero!r}")


class ImportacionException(AvalException):
    """Error fatal durante la importación masiva; no se aplica ningún cambio."""

    status_code = 422
    default_detail = "No se pudo importar el archivo"
