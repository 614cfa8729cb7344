#   Copyright 2026 UCP Authors
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

"""Saleor GraphQL client.

Every call is a POST of `{"query", "variables"}` to the single Saleor
endpoint with the app token as bearer. Transport failures, non-2xx answers,
top-level GraphQL `errors` and mutation `errors` lists all surface as
`UpstreamError`.
"""

import logging
from typing import Any, Optional, Type, TypeVar

import httpx
from exceptions import UpstreamError
from models import CompletedOrder
from models import Page
from models import SaleorCategory
from models import SaleorCollection
from models import SaleorProduct
from models import ShippingMethod
from models import VariantDetails
from pydantic import BaseModel
from pydantic import ValidationError
import saleor_queries

logger = logging.getLogger(__name__)

UPSTREAM = "Saleor"

ModelT = TypeVar("ModelT", bound=BaseModel)


def _dig(data: Any, *path: str) -> Any:
  for key in path:
    if not isinstance(data, dict):
      return None
    data = data.get(key)
  return data


def _parse_page(connection: Any, model: Type[ModelT]) -> Page[ModelT]:
  """Converts a Relay connection into a Page of typed nodes."""
  if not isinstance(connection, dict):
    return Page[model]()
  edges = connection.get("edges") or []
  page_info = connection.get("pageInfo") or {}
  try:
    nodes = [model.model_validate(edge["node"]) for edge in edges]
  except (KeyError, TypeError, ValidationError) as e:
    raise UpstreamError(UPSTREAM, f"Unexpected connection shape: {e}") from e
  return Page[model](
      nodes=nodes,
      total_count=connection.get("totalCount") or 0,
      has_next_page=bool(page_info.get("hasNextPage")),
      end_cursor=page_info.get("endCursor"),
  )


def _validate(model: Type[ModelT], data: Any) -> ModelT:
  try:
    return model.model_validate(data)
  except ValidationError as e:
    raise UpstreamError(
        UPSTREAM, f"Unexpected {model.__name__} shape: {e}"
    ) from e


def _error_message(error: Any) -> str:
  if isinstance(error, dict):
    return str(error.get("message") or error.get("code") or error)
  return str(error)


def _mutation_errors(payload: Any) -> Optional[str]:
  errors = _dig(payload, "errors") or []
  if not errors:
    return None
  return ", ".join(_error_message(e) for e in errors)


class SaleorClient:
  """Typed access to the Saleor queries and mutations the connector uses."""

  def __init__(
      self,
      api_url: str,
      token: str,
      timeout: float = 20.0,
      transport: Optional[httpx.AsyncBaseTransport] = None,
  ):
    self.api_url = api_url
    self.token = token
    self.timeout = timeout
    self._transport = transport

  async def execute(
      self, document: str, variables: Optional[dict[str, Any]] = None
  ) -> dict[str, Any]:
    """Runs a GraphQL document and returns its `data` object."""
    if not self.api_url:
      raise UpstreamError(UPSTREAM, "API URL is not configured")

    logger.debug("Saleor request: %s", document.split("(", 1)[0].strip())
    headers = {"Content-Type": "application/json"}
    if self.token:
      headers["Authorization"] = f"Bearer {self.token}"

    try:
      async with httpx.AsyncClient(
          timeout=self.timeout, transport=self._transport
      ) as client:
        response = await client.post(
            self.api_url,
            json={"query": document, "variables": variables or {}},
            headers=headers,
        )
    except httpx.HTTPError as e:
      raise UpstreamError(UPSTREAM, f"request failed: {e}") from e

    if response.status_code >= 400:
      raise UpstreamError(
          UPSTREAM, f"HTTP {response.status_code}: {response.text}"
      )

    try:
      body = response.json()
    except ValueError as e:
      raise UpstreamError(UPSTREAM, "response is not JSON") from e

    errors = body.get("errors") if isinstance(body, dict) else None
    if errors:
      messages = ", ".join(_error_message(e) for e in errors)
      raise UpstreamError(UPSTREAM, messages)

    data = body.get("data") if isinstance(body, dict) else None
    return data or {}

  async def _mutate(
      self, document: str, variables: dict[str, Any], field: str
  ) -> dict[str, Any]:
    data = await self.execute(document, variables)
    payload = data.get(field) or {}
    message = _mutation_errors(payload)
    if message:
      raise UpstreamError(UPSTREAM, message)
    return payload

  # --- Catalog ---

  async def fetch_products_page(
      self, first: int, after: Optional[str], channel: str
  ) -> Page[SaleorProduct]:
    data = await self.execute(
        saleor_queries.FETCH_PRODUCTS,
        {"first": first, "after": after, "channel": channel},
    )
    return _parse_page(data.get("products"), SaleorProduct)

  async def fetch_products_by_category_page(
      self, category_id: str, first: int, after: Optional[str], channel: str
  ) -> Page[SaleorProduct]:
    data = await self.execute(
        saleor_queries.FETCH_PRODUCTS_BY_CATEGORY,
        {
            "categoryId": category_id,
            "first": first,
            "after": after,
            "channel": channel,
        },
    )
    return _parse_page(data.get("products"), SaleorProduct)

  async def fetch_products_by_collection_page(
      self, collection_id: str, first: int, after: Optional[str], channel: str
  ) -> Page[SaleorProduct]:
    data = await self.execute(
        saleor_queries.FETCH_PRODUCTS_BY_COLLECTION,
        {
            "collectionId": collection_id,
            "first": first,
            "after": after,
            "channel": channel,
        },
    )
    return _parse_page(_dig(data, "collection", "products"), SaleorProduct)

  async def fetch_collections_page(
      self, first: int, after: Optional[str], channel: str
  ) -> Page[SaleorCollection]:
    data = await self.execute(
        saleor_queries.FETCH_COLLECTIONS,
        {"first": first, "after": after, "channel": channel},
    )
    return _parse_page(data.get("collections"), SaleorCollection)

  async def fetch_categories_page(
      self, first: int, after: Optional[str], channel: str
  ) -> Page[SaleorCategory]:
    # Categories are not channel-scoped in Saleor.
    del channel
    data = await self.execute(
        saleor_queries.FETCH_CATEGORIES, {"first": first, "after": after}
    )
    return _parse_page(data.get("categories"), SaleorCategory)

  # --- Orders ---

  async def get_variant(
      self, variant_id: str, channel: str
  ) -> Optional[VariantDetails]:
    data = await self.execute(
        saleor_queries.GET_VARIANT_DETAILS,
        {"id": variant_id, "channel": channel},
    )
    variant = data.get("productVariant")
    if not variant:
      return None
    return _validate(VariantDetails, variant)

  async def get_shipping_methods(self, channel: str) -> list[ShippingMethod]:
    """Returns the shipping methods of the channel's first shipping zone."""
    data = await self.execute(
        saleor_queries.GET_SHIPPING_METHODS, {"channel": channel}
    )
    edges = _dig(data, "shippingZones", "edges") or []
    if not edges:
      return []
    methods = _dig(edges[0], "node", "shippingMethods") or []
    return [_validate(ShippingMethod, m) for m in methods]

  async def create_draft_order(self, draft_input: dict[str, Any]) -> str:
    payload = await self._mutate(
        saleor_queries.DRAFT_ORDER_CREATE,
        {"input": draft_input},
        "draftOrderCreate",
    )
    order_id = _dig(payload, "order", "id")
    if not order_id:
      raise UpstreamError(UPSTREAM, "No order ID returned")
    return order_id

  async def complete_draft_order(self, order_id: str) -> CompletedOrder:
    payload = await self._mutate(
        saleor_queries.DRAFT_ORDER_COMPLETE,
        {"id": order_id},
        "draftOrderComplete",
    )
    order = payload.get("order") or {}
    number = order.get("number")
    return CompletedOrder(
        id=order.get("id") or order_id,
        number=str(number) if number is not None else None,
    )

  async def set_draft_order_shipping_method(
      self, order_id: str, shipping_method_id: str
  ) -> None:
    await self._mutate(
        saleor_queries.DRAFT_ORDER_UPDATE_SHIPPING_METHOD,
        {"id": order_id, "shippingMethod": shipping_method_id},
        "draftOrderUpdate",
    )

  async def mark_order_as_paid(
      self, order_id: str, transaction_reference: str
  ) -> None:
    await self._mutate(
        saleor_queries.ORDER_MARK_AS_PAID,
        {"id": order_id, "transactionReference": transaction_reference},
        "orderMarkAsPaid",
    )

  async def add_order_note(self, order_id: str, message: str) -> None:
    await self._mutate(
        saleor_queries.ORDER_NOTE_ADD,
        {"orderId": order_id, "message": message},
        "orderNoteAdd",
    )
