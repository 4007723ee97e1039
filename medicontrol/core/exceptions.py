"""
Domain errors for the inventory and sales core.

Every error carries a client-safe message and the HTTP status the API
answers with. Handlers in ``medicontrol.main`` render them as
``{"error": message}``; internal details are only logged.
"""


class MediControlError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(MediControlError):
    """Malformed input: negative quantity, empty sale, unknown movement kind."""

    kind = "validation"
    status_code = 400


class NotFoundError(MediControlError):
    """
    A referenced medication or sale does not exist.

    404 when answering a single-entity GET. Mutations that reference a
    missing id raise it with ``status_code=400``.
    """

    kind = "not_found"
    status_code = 404


class InsufficientStockError(MediControlError):
    kind = "insufficient_stock"
    status_code = 400

    def __init__(self, medication_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for '{medication_name}': "
            f"{available} available, {requested} requested"
        )
        self.medication_name = medication_name
        self.available = available
        self.requested = requested


class ConflictError(MediControlError):
    kind = "conflict"
    status_code = 409


class StorageError(MediControlError):
    """Underlying store failure. The transaction has been rolled back."""

    kind = "storage"
    status_code = 500

    def __init__(self, message: str = "An internal error occurred. Please try again later."):
        super().__init__(message)


class MissingQueryError(StorageError):
    def __init__(self, name: str):
        super().__init__()
        self.query_name = name


class ConfigError(MediControlError):
    """Startup configuration is unusable (e.g. critical SQL missing). Fatal."""

    kind = "config"
    status_code = 500
