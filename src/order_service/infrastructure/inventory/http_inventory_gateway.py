"""HTTP implementation of InventoryGateway.

Talks JSON to the inventory authority over httpx.  Deployments differ in
how they expose availability, so the check comes in two modes:

  per-item  GET  {base}/products/{id}      -> {"stock": 12, ...}
  bulk      POST {base}/inventory/check    -> {"available": false,
                                               "unavailable_items": [...]}

Deduction is always ``PUT {base}/products/{id}/stock``.

Nothing is retried here.  A request that fails, times out, or returns a
payload we cannot read is a failure: for availability that product counts
as unavailable, for deduction it raises DeductionError.  A 4xx answer is a
refusal; a 5xx, a transport error or an unreadable payload leaves the
product unverified.

Product ids are opaque and always percent-encoded as one path segment.
"""

from __future__ import annotations

import asyncio
from typing import Any, Sequence
from urllib.parse import quote

import httpx
import structlog

from order_service.domain.exceptions import DeductionError
from order_service.domain.gateway.inventory_gateway import InventoryGateway
from order_service.domain.model.inventory import (
    AvailabilityResult,
    StockDeduction,
    StockRequest,
    merge_requests,
)

PER_ITEM = "per-item"
BULK = "bulk"

_STOCK_KEYS = ("stock", "available_quantity", "quantity")
_NEW_QUANTITY_KEYS = ("new_quantity", "newQuantity", "stock")


class MalformedPayload(ValueError):
    """The inventory authority answered with JSON we cannot interpret."""


class InvalidProductId(ValueError):
    """The product id cannot be addressed as a single URL path segment."""


def _read_int(payload: Any, keys: Sequence[str]) -> int:
    if not isinstance(payload, dict):
        raise MalformedPayload(f"expected a JSON object, got {type(payload).__name__}")
    for key in keys:
        if key in payload:
            value = payload[key]
            if isinstance(value, bool):
                break
            if isinstance(value, float):
                if not value.is_integer():
                    raise MalformedPayload(f"{key} is not a whole number: {value!r}")
                return int(value)
            try:
                return int(value)
            except (TypeError, ValueError):
                break
    raise MalformedPayload(f"no integer field among {', '.join(keys)}")


def _segment(product_id: str) -> str:
    """Encode *product_id* as exactly one URL path segment."""
    if product_id in (".", ".."):
        raise InvalidProductId(f"product id {product_id!r} cannot be a path segment")
    return quote(product_id, safe="")


class HttpInventoryGateway(InventoryGateway):

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        check_mode: str = PER_ITEM,
        client: httpx.AsyncClient | None = None,
        logger=None,
    ) -> None:
        if check_mode not in (PER_ITEM, BULK):
            raise ValueError(f"Unknown inventory check mode: {check_mode!r}")
        self._base_url = base_url.rstrip("/")
        self._check_mode = check_mode
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._log = logger or structlog.get_logger(__name__)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpInventoryGateway:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # --- InventoryGateway interface -------------------------------------------

    async def check_availability(
        self, requests: Sequence[StockRequest]
    ) -> AvailabilityResult:
        merged = merge_requests(list(requests))
        if not merged:
            return AvailabilityResult.all_available()

        self._log.info("inventory_check_started", mode=self._check_mode, items=len(merged))
        if self._check_mode == BULK:
            result = await self._check_bulk(merged)
        else:
            outcomes = await asyncio.gather(*(self._check_one(req) for req in merged))
            result = AvailabilityResult(
                unavailable_items=frozenset(
                    req.product_id for req, ok in zip(merged, outcomes) if ok is not True
                ),
                unverified_items=frozenset(
                    req.product_id for req, ok in zip(merged, outcomes) if ok is None
                ),
            )

        self._log.info(
            "inventory_check_finished",
            available=result.available,
            unavailable_items=sorted(result.unavailable_items),
            unverified_items=sorted(result.unverified_items),
        )
        return result

    async def deduct_stock(self, product_id: str, quantity: int) -> StockDeduction:
        log = self._log.bind(product_id=product_id, quantity=quantity)
        try:
            url = f"{self._base_url}/products/{_segment(product_id)}/stock"
            response = await self._client.put(
                url, json={"quantity": quantity, "operation": "deduct"}
            )
            response.raise_for_status()
            new_quantity = _read_int(response.json(), _NEW_QUANTITY_KEYS)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            log.error("inventory_deduct_rejected", status_code=status)
            # 4xx: the authority answered and refused; 5xx: it is broken
            raise DeductionError(
                product_id, f"inventory responded {status}", refused=status < 500
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.error("inventory_deduct_unreachable", error=repr(exc))
            raise DeductionError(product_id, f"inventory unreachable: {exc!r}") from exc
        except InvalidProductId as exc:
            log.error("inventory_deduct_unaddressable", error=str(exc))
            raise DeductionError(product_id, str(exc), refused=True) from exc
        except ValueError as exc:  # MalformedPayload or undecodable JSON
            log.error("inventory_deduct_malformed", error=str(exc))
            raise DeductionError(product_id, f"malformed response: {exc}") from exc

        log.info("inventory_deducted", new_quantity=new_quantity)
        return StockDeduction(product_id=product_id, quantity=quantity, new_quantity=new_quantity)

    # --- Availability modes ---------------------------------------------------

    async def _check_one(self, req: StockRequest) -> bool | None:
        """True if in stock, False if refused, None if no usable answer."""
        log = self._log.bind(product_id=req.product_id, required=req.quantity)
        try:
            response = await self._client.get(
                f"{self._base_url}/products/{_segment(req.product_id)}"
            )
            response.raise_for_status()
            stock = _read_int(response.json(), _STOCK_KEYS)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            log.warning("inventory_product_unavailable", status_code=status)
            return False if status < 500 else None
        except InvalidProductId as exc:
            log.warning("inventory_product_unavailable", error=str(exc))
            return False
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            log.warning("inventory_product_unverified", error=repr(exc))
            return None
        log.debug("inventory_product_checked", stock=stock)
        return stock >= req.quantity

    async def _check_bulk(self, merged: list[StockRequest]) -> AvailabilityResult:
        requested = frozenset(req.product_id for req in merged)
        try:
            response = await self._client.post(
                f"{self._base_url}/inventory/check",
                json={
                    "items": [
                        {"product_id": req.product_id, "quantity": req.quantity}
                        for req in merged
                    ]
                },
            )
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict) or not isinstance(payload.get("available"), bool):
                raise MalformedPayload("missing boolean 'available'")
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            self._log.warning("inventory_bulk_check_failed", status_code=status)
            if status < 500:
                return AvailabilityResult(unavailable_items=requested)
            return AvailabilityResult(unavailable_items=requested, unverified_items=requested)
        except (httpx.HTTPError, ValueError) as exc:
            self._log.warning("inventory_bulk_check_failed", error=repr(exc))
            return AvailabilityResult(unavailable_items=requested, unverified_items=requested)

        if payload["available"]:
            return AvailabilityResult.all_available()
        listed = payload.get("unavailable_items", payload.get("unavailableItems"))
        if not isinstance(listed, list):
            # Told "no" without being told which: all of them count as refused
            return AvailabilityResult(unavailable_items=requested)
        unavailable = frozenset(str(pid) for pid in listed) & requested
        return AvailabilityResult(unavailable_items=unavailable or requested)
