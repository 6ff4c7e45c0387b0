"""
Pydantic Models für Item-Parameter und Ergebnis-Records

Die Feldnamen der Item-Parameter entsprechen 1:1 den Parameternamen des
Workflow-Hosts (camelCase).
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class NodeParameters(BaseModel):
    """Parameter eines einzelnen Input-Items"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str
    operation: str = "extractLinks"
    max_depth: int = Field(default=1, ge=0, alias="maxDepth")  # wird akzeptiert, aber nicht genutzt
    proxy_urls: str = Field(default="", alias="proxyUrls")
    use_browser: bool = Field(default=False, alias="useBrowser")

    header_input_type: Literal["json", "string"] = Field(default="json", alias="headerInputType")
    json_headers: Union[Dict[str, Any], str, None] = Field(default=None, alias="jsonHeaders")
    raw_header_string: str = Field(default="", alias="rawHeaderString")

    cookie_input_type: Literal["json", "string"] = Field(default="json", alias="cookieInputType")
    json_cookies: Union[Dict[str, Any], str, None] = Field(default=None, alias="jsonCookies")
    raw_cookie_string: str = Field(default="", alias="rawCookieString")


class ErrorDetail(BaseModel):
    code: str
    message: str


class ItemResult(BaseModel):
    """Ein Ergebnis-Record pro Input-Item"""

    status: Literal["success", "error"]
    message: str
    data: Optional[Dict[str, Any]] = None
    error: Optional[ErrorDetail] = None
    item_index: int


class ExecuteRequest(BaseModel):
    # Rohe Dicts - validiert wird pro Item, damit continue_on_fail greift
    items: List[Dict[str, Any]]
    continue_on_fail: bool = False


class ExecuteResponse(BaseModel):
    ok: bool
    results: List[ItemResult] = []
