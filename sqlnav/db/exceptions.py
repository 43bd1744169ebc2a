"""Custom exceptions for the database layer."""


class DataUnavailableError(ConnectionError):
    """Exception raised when the catalog cannot answer a listing request."""

    def __init__(
        self,
        item_type: str,
        *,
        scope: tuple[str, ...] = (),
        cause: BaseException | None = None,
    ):
        self.item_type = item_type
        self.scope = scope
        self.cause = cause
        location = ".".join(scope) if scope else "<server>"
        message = f"Cannot list {item_type} in {location}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
