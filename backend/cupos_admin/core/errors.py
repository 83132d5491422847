class CuposError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CuposError):
    """Malformed or inconsistent request input; the caller must fix it."""

    status_code = 400


class IneligibleDeletionError(ValidationError):
    """A bulk delete targeted slots that are missing or not SIN_ASIGNAR."""

    def __init__(self, message: str, offending_ids: list[int]) -> None:
        super().__init__(message)
        self.offending_ids = offending_ids


class SchemaResolutionError(CuposError):
    """A required table or column is absent from the deployed schema."""

    status_code = 500

    def __init__(self, table: str, field: str | None = None, tried: list[str] | None = None):
        if field is None:
            message = f"Table {table} not found in database"
        else:
            candidates = ", ".join(tried or [])
            message = f"{table} missing required column for {field} (tried: {candidates})"
        super().__init__(message)
        self.table = table
        self.field = field
