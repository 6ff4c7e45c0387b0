"""
Shared Types für Fetcher Module
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class FetchResult:
    """Standardisiertes Ergebnis eines Static-Fetches"""
    url: str  # Original-URL ohne Cache-Buster
    final_url: str  # nach Redirects, ohne Cache-Buster
    status: int
    headers: Dict[str, str]
    html: str
    fetched_at: str
    via: str  # "httpx" | "playwright"
    content_type: Optional[str] = None


@dataclass
class ExtractionResult:
    """Ergebnis von Fetch + Extraktion für genau ein Item"""
    operation: str
    url: str
    message: str
    payload: Dict[str, Any] = field(default_factory=dict)
    via: str = "httpx"
    status: str = "success"

    def to_data(self) -> Dict[str, Any]:
        """`data`-Objekt des Ergebnis-Records: url + operationsspezifische Felder"""
        return {"url": self.url, **self.payload}
