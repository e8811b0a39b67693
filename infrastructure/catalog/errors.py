"""Typed errors raised by catalog clients."""


class CatalogError(Exception):
    """Base class for catalog call failures."""


class CatalogApiError(CatalogError):
    """The catalog answered with a non-success HTTP status."""

    def __init__(self, status: int, detail: str | None = None) -> None:
        self.status = status
        self.detail = detail or ""
        msg = f"Catalog API error ({status})"
        if self.detail:
            msg += f": {self.detail}"
        super().__init__(msg)


class PermanentCatalogError(CatalogApiError):
    """A rejection that will not succeed on retry (status configured as permanent)."""


class MalformedResponseError(CatalogError):
    """The catalog reported success but the body does not carry the created id."""
