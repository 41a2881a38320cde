"""Error taxonomy shared by the store, the repositories and the HTTP layer."""


class InventoryError(Exception):
    """Base class: every error carries a stable code and an HTTP status."""

    code = "inventory_error"
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload = {"ok": False, "error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(InventoryError):
    """Caller data violates field constraints.

    ``errors`` maps every offending field to a message, never just the first.
    """

    code = "validation_error"
    status_code = 400

    def __init__(self, errors: dict[str, str], message: str = "Validation failed"):
        self.errors = dict(errors)
        super().__init__(message, details=self.errors)


class NotFound(InventoryError):
    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, record_id: str, message: str | None = None):
        self.entity = entity
        self.record_id = record_id
        super().__init__(message or f"{entity} '{record_id}' not found")


class InvalidPath(InventoryError):
    """A file reference resolves outside the managed storage root."""

    code = "invalid_path"
    status_code = 400

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Invalid file reference: {reference!r}")


class StorageError(InventoryError):
    code = "storage_error"
    status_code = 500
