"""
Request-Konfiguration - Header, Cookies, Proxies und Browser-Flag

Normalisiert die vier unabhängigen User-Inputs zu einer RequestConfig:
- Header: JSON-Objekt oder Raw-String ("Key: Value" oder alternierende Zeilen)
- Cookies: JSON-Objekt oder Raw-String ("k1=v1; k2=v2")
- Proxy-Liste: eine Proxy-URL pro Zeile
- use_browser: Static-Fetch (httpx) vs. Browser-Rendering (Playwright)

Alle Funktionen hier sind pure - kein Netzwerk, kein I/O.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..errors import InvalidParameterError
from ..models import NodeParameters
from ..validators import validate_target_url

logger = logging.getLogger(__name__)

QUOTE_CHARS = "'\""


@dataclass(frozen=True)
class RequestConfig:
    """Fertige Fetch-Konfiguration eines Items (nach dem Bauen unveränderlich)"""
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)
    proxy_urls: Tuple[str, ...] = ()
    use_browser: bool = False

    def cookie_header(self) -> Optional[str]:
        """Synthetisiert den Cookie-Header ("k1=v1; k2=v2") oder None"""
        if not self.cookies:
            return None
        return "; ".join(f"{key}={value}" for key, value in self.cookies.items())

    def user_agent(self) -> Optional[str]:
        return find_header(self.headers, "user-agent")


def _clean_header_key(key: str) -> Optional[str]:
    """Trimmt den Key, entfernt Quotes und verwirft ungültige Keys"""
    key = key.strip()
    for quote in QUOTE_CHARS:
        key = key.replace(quote, "")

    # Header-Keys dürfen keine Spaces enthalten, Pseudo-Header (":authority") raus
    if not key or " " in key or key.startswith(":"):
        return None
    return key


def parse_raw_headers(raw: str) -> Dict[str, str]:
    """
    Parst einen Raw-Header-String.

    Zwei Formate werden automatisch erkannt:
    1. "Key: Value" Zeilen (sobald irgendeine Zeile einen ':' enthält)
    2. Alternierende Zeilen (Key-Zeile, dann Value-Zeile) - typisch für
       Copy & Paste aus den Browser-DevTools

    Ungültige Zeilen werden stillschweigend verworfen.
    """
    lines = [line.strip() for line in (raw or "").split("\n")]
    lines = [line for line in lines if line]
    headers: Dict[str, str] = {}

    if any(":" in line for line in lines):
        for line in lines:
            key, sep, value = line.partition(":")
            if not sep:
                continue

            clean_key = _clean_header_key(key)
            if clean_key is None:
                logger.debug(f"Dropping header line: {line!r}")
                continue
            headers[clean_key] = value.strip()
    else:
        # Paarweise lesen, eine übrig gebliebene letzte Zeile wird ignoriert
        for i in range(0, len(lines) - 1, 2):
            clean_key = _clean_header_key(lines[i])
            if clean_key is None:
                logger.debug(f"Dropping header pair: {lines[i]!r}")
                continue
            headers[clean_key] = lines[i + 1].strip()

    return headers


def parse_raw_cookies(raw: str) -> Dict[str, str]:
    """
    Parst einen Raw-Cookie-String ("k1=v1; k2=v2").

    Segmente ohne '=' werden verworfen, ein abschließendes ';' stört nicht.
    """
    cookies: Dict[str, str] = {}
    for segment in (raw or "").split(";"):
        segment = segment.strip()
        if not segment:
            continue

        key, sep, value = segment.partition("=")
        if not sep:
            logger.debug(f"Dropping cookie segment without '=': {segment!r}")
            continue
        cookies[key] = value

    return cookies


def _coerce_mapping(value: Mapping[str, Any]) -> Dict[str, str]:
    return {str(key): str(val) for key, val in value.items() if val is not None}


def parse_json_mapping(value: Union[Mapping[str, Any], str, None], field_name: str) -> Dict[str, str]:
    """
    JSON-Input (Objekt oder JSON-Text) zu einem str->str Mapping.

    Raises:
        InvalidParameterError: Wenn der JSON-Text kein Objekt ist
    """
    if value is None:
        return {}

    if isinstance(value, str):
        if not value.strip():
            return {}
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise InvalidParameterError(f"{field_name} is not valid JSON: {e}") from e

    if not isinstance(value, Mapping):
        raise InvalidParameterError(f"{field_name} must be a JSON object")

    return _coerce_mapping(value)


def normalize_headers(value: Union[Mapping[str, Any], str, None]) -> Dict[str, str]:
    """Header aus Mapping oder Raw-String"""
    if value is None:
        return {}
    if isinstance(value, str):
        return parse_raw_headers(value)
    return _coerce_mapping(value)


def normalize_cookies(value: Union[Mapping[str, Any], str, None]) -> Dict[str, str]:
    """Cookies aus Mapping oder Raw-String"""
    if value is None:
        return {}
    if isinstance(value, str):
        return parse_raw_cookies(value)
    return _coerce_mapping(value)


def find_header_key(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive Suche - liefert den Key in Original-Schreibweise"""
    name = name.lower()
    for key in headers:
        if key.lower() == name:
            return key
    return None


def find_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    key = find_header_key(headers, name)
    return headers[key] if key is not None else None


def reconcile(headers: Mapping[str, str], cookies: Mapping[str, str]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Führt Header und Cookies zusammen.

    1. Ein Cookie-Header wird geparst und in die Cookies gemerged - explizite
       Cookies gewinnen bei Key-Kollision. Der Header selbst fliegt raus.
    2. Accept-Encoding wird entfernt, die Dekompression macht der Client.

    Die Inputs werden nicht verändert.

    Returns:
        (final_headers, final_cookies)
    """
    final_headers = dict(headers)
    final_cookies = dict(cookies)

    cookie_key = find_header_key(final_headers, "cookie")
    while cookie_key is not None:
        header_cookies = parse_raw_cookies(final_headers.pop(cookie_key))
        for key, value in header_cookies.items():
            final_cookies.setdefault(key, value)
        cookie_key = find_header_key(final_headers, "cookie")

    encoding_key = find_header_key(final_headers, "accept-encoding")
    while encoding_key is not None:
        del final_headers[encoding_key]
        encoding_key = find_header_key(final_headers, "accept-encoding")

    return final_headers, final_cookies


def parse_proxy_urls(raw: Optional[str]) -> Tuple[str, ...]:
    """Eine Proxy-URL pro Zeile, Leerzeilen werden ignoriert"""
    return tuple(line.strip() for line in (raw or "").split("\n") if line.strip())


def build_request_config(params: NodeParameters) -> RequestConfig:
    """
    Baut die RequestConfig für ein Item.

    Raises:
        InvalidParameterError: Bei ungültiger URL oder kaputtem JSON
    """
    url = validate_target_url(params.url)

    # JSON-Text wird vorab dekodiert, danach laufen beide Formen durch den Normalizer
    if params.header_input_type == "json":
        header_input = parse_json_mapping(params.json_headers, "jsonHeaders")
    else:
        header_input = params.raw_header_string
    headers = normalize_headers(header_input)

    if params.cookie_input_type == "json":
        cookie_input = parse_json_mapping(params.json_cookies, "jsonCookies")
    else:
        cookie_input = params.raw_cookie_string
    cookies = normalize_cookies(cookie_input)

    final_headers, final_cookies = reconcile(headers, cookies)

    return RequestConfig(
        url=url,
        headers=final_headers,
        cookies=final_cookies,
        proxy_urls=parse_proxy_urls(params.proxy_urls),
        use_browser=params.use_browser,
    )
