class PulpitoError(Exception):
    """Base class for errors raised by the scheduling services."""

    default_message = "Ha ocurrido un error. Por favor, intenta de nuevo."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self):
        return self.args[0]


class PersistenceError(PulpitoError):
    default_message = "Error en la base de datos."


class NotFoundError(PulpitoError):
    default_message = "Recurso no encontrado."

    def __init__(self, resource="Recurso", message=None):
        self.resource = resource
        super().__init__(message or f"{resource} no encontrado")


class ValidationError(PulpitoError):
    default_message = "Datos no válidos."

    def __init__(self, message=None, field=None):
        self.field = field
        super().__init__(message)


class LimitExceededError(ValidationError):
    pass
