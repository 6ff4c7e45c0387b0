"""
Item Executor - verarbeitet die Input-Items eines Workflow-Aufrufs

- Items werden strikt nacheinander verarbeitet (kein paralleles Fetchen)
- Jedes Item liefert ein explizites ItemResult zurück, kein geteilter State
- continue_on_fail: Fehler landet im Ergebnis des Items, der Rest läuft weiter
- sonst: erster Fehler bricht ab (ItemExecutionError mit item_index)
"""

import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from ..errors import InvalidParameterError, ItemExecutionError, ScrapeError
from ..models import ErrorDetail, ItemResult, NodeParameters
from .fetchers.fetch_manager import FetchManager
from .proxy_rotation import ProxyRotator
from .request_config import build_request_config

logger = logging.getLogger(__name__)


class ItemExecutor:
    """
    Führt einen Batch aus.

    Proxy-Rotatoren leben nur für die Dauer eines Batches: Items mit
    derselben Proxy-Liste bekommen die Proxies reihum.
    """

    def __init__(self, fetch_manager: Optional[FetchManager] = None):
        self.fetch_manager = fetch_manager or FetchManager()
        self._rotators: Dict[Tuple[str, ...], ProxyRotator] = {}

    def _select_proxy(self, proxy_urls: Tuple[str, ...]) -> Optional[str]:
        if not proxy_urls:
            return None
        if proxy_urls not in self._rotators:
            self._rotators[proxy_urls] = ProxyRotator(proxy_urls)
        return self._rotators[proxy_urls].next_proxy()

    async def execute_item(
        self, params: Union[NodeParameters, Mapping[str, Any]], item_index: int, exec_id: str = "-"
    ) -> ItemResult:
        """
        Verarbeitet ein einzelnes Item.

        Rohe Dicts werden hier validiert, damit ein kaputtes Item nur dieses
        Item betrifft (und nicht den ganzen Request).

        Raises:
            InvalidParameterError: Ungültige Parameter
            FetchError: Fetch fehlgeschlagen
        """
        if not isinstance(params, NodeParameters):
            try:
                params = NodeParameters.model_validate(params)
            except ValidationError as e:
                raise InvalidParameterError(_format_validation_error(e)) from e

        request_config = build_request_config(params)

        if params.max_depth > 1:
            # TODO: maxDepth > 1 bräuchte Frontier-Queue + Visited-Set, bisher nur Seed-URL
            logger.debug(f"[{exec_id}] maxDepth={params.max_depth} ignored, fetching seed URL only")

        proxy_url = self._select_proxy(request_config.proxy_urls)
        result = await self.fetch_manager.fetch_and_extract(request_config, params.operation, proxy_url)

        logger.info(f"[{exec_id}] Item {item_index}: {result.message} ({result.url})")
        return ItemResult(
            status=result.status,
            message=result.message,
            data=result.to_data(),
            item_index=item_index,
        )

    async def execute_items(
        self, items: Sequence[Union[NodeParameters, Mapping[str, Any]]], continue_on_fail: bool = False
    ) -> List[ItemResult]:
        """
        Verarbeitet alle Items sequentiell.

        Raises:
            ItemExecutionError: Erster Fehler, wenn continue_on_fail False ist
        """
        exec_id = uuid.uuid4().hex[:8]
        logger.info(f"[{exec_id}] Executing {len(items)} item(s), continue_on_fail={continue_on_fail}")

        results: List[ItemResult] = []
        try:
            for item_index, params in enumerate(items):
                try:
                    results.append(await self.execute_item(params, item_index, exec_id))
                except Exception as e:
                    if not isinstance(e, ScrapeError):
                        logger.error(f"[{exec_id}] Unexpected error in item {item_index}: {e}", exc_info=True)
                    if not continue_on_fail:
                        raise ItemExecutionError(item_index, e) from e

                    error = e if isinstance(e, ScrapeError) else ScrapeError(str(e))
                    logger.warning(f"[{exec_id}] Item {item_index} failed ({error.code}): {error}")
                    results.append(ItemResult(
                        status="error",
                        message=str(error),
                        error=ErrorDetail(code=error.code, message=str(error)),
                        item_index=item_index,
                    ))
        finally:
            self._rotators.clear()

        return results


async def execute_items(
    items: Sequence[Union[NodeParameters, Mapping[str, Any]]], continue_on_fail: bool = False
) -> List[ItemResult]:
    """Convenience-Wrapper: frischer Executor pro Aufruf"""
    return await ItemExecutor().execute_items(items, continue_on_fail=continue_on_fail)


def _format_validation_error(error: ValidationError) -> str:
    """Kompakte Fehlermeldung: "url: Field required; operation: ..." """
    parts = []
    for detail in error.errors():
        location = ".".join(str(loc) for loc in detail.get("loc", ())) or "item"
        parts.append(f"{location}: {detail.get('msg', 'invalid value')}")
    return "Invalid item parameters - " + "; ".join(parts)
