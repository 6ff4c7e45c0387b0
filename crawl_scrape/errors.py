"""
Fehlerklassen für Crawl and Scrape

Jeder Fehler trägt einen stabilen `code`, der 1:1 im Fehler-Detail der API
landet ({"error": {"code": ..., "message": ...}}).
"""

from typing import Optional


class ScrapeError(Exception):
    """Basisklasse für alle Fehler dieses Pakets"""

    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        if code is not None:
            self.code = code

    @property
    def message(self) -> str:
        return str(self)


class InvalidParameterError(ScrapeError):
    """Ungültige Item-Parameter (URL, Operation, Header/Cookie-JSON, ...)"""

    code = "INVALID_PARAMETER"


class FetchError(ScrapeError):
    """
    Fetch oder Navigation fehlgeschlagen.

    Netzwerkfehler, Timeouts und Non-2xx Responses landen alle hier.
    Der ursprüngliche Fehler hängt als __cause__ dran.
    """

    code = "FETCH_FAILED"

    def __init__(self, url: str, message: str, code: Optional[str] = None):
        super().__init__(message, code=code)
        self.url = url


class ItemExecutionError(ScrapeError):
    """Bricht den Batch ab - trägt den Index des fehlgeschlagenen Items"""

    def __init__(self, item_index: int, cause: Exception):
        code = cause.code if isinstance(cause, ScrapeError) else ScrapeError.code
        super().__init__(str(cause), code=code)
        self.item_index = item_index
        self.cause = cause
