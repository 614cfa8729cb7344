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

"""In-memory stand-ins for the Saleor and ShipRocket clients, for tests."""

import collections
from typing import Any, Optional

from exceptions import UpstreamError
from models import AccessTokenResponse
from models import CompletedOrder
from models import Page
from models import SaleorCategory
from models import SaleorCollection
from models import SaleorProduct
from models import ShippingMethod
from models import VariantDetails


def make_product(index: int, **fields: Any) -> SaleorProduct:
  data = {
      "id": f"P{index}",
      "name": f"Product {index}",
      "description": "<p>Fresh</p>",
      "created": "2026-01-01T00:00:00+00:00",
      "updatedAt": "2026-01-02T00:00:00+00:00",
      "category": {"id": "C1", "name": "Flowers"},
      "thumbnail": {"url": f"https://cdn.example.com/p{index}.jpg"},
      "metadata": [],
      "variants": [{
          "id": f"V{index}",
          "name": "Bouquet",
          "sku": f"SKU-{index}",
          "quantityAvailable": 5,
          "pricing": {
              "price": {"gross": {"amount": "499.00", "currency": "INR"}}
          },
          "weight": {"value": 1.5, "unit": "KG"},
          "media": [],
      }],
  }
  data.update(fields)
  return SaleorProduct.model_validate(data)


def _page(items: list, first: int, after: Optional[str]) -> Page:
  start = int(after) if after else 0
  nodes = items[start : start + first]
  end = start + len(nodes)
  return Page(
      nodes=nodes,
      total_count=len(items),
      has_next_page=end < len(items),
      end_cursor=str(end) if nodes else None,
  )


class FakeSaleorClient:
  """Serves fixed catalog fixtures and records every order mutation.

  Cursors are stringified offsets. `fail` maps a method name to the error
  message that method raises as an UpstreamError.
  """

  def __init__(
      self,
      products: Optional[list[SaleorProduct]] = None,
      categories: Optional[list[SaleorCategory]] = None,
      collections_: Optional[list[SaleorCollection]] = None,
      variants: Optional[dict[str, VariantDetails]] = None,
      shipping_methods: Optional[list[ShippingMethod]] = None,
      fail: Optional[dict[str, str]] = None,
  ):
    self.products = products or []
    self.categories = categories or []
    self.collections = collections_ or []
    self.variants = variants or {}
    self.shipping_methods = shipping_methods or []
    self.fail = fail or {}
    self.calls = collections.defaultdict(list)

  def _record(self, method: str, *args: Any) -> None:
    self.calls[method].append(args)
    if method in self.fail:
      raise UpstreamError("Saleor", self.fail[method])

  async def fetch_products_page(self, first, after, channel):
    self._record("fetch_products_page", first, after, channel)
    return _page(self.products, first, after)

  async def fetch_products_by_category_page(
      self, category_id, first, after, channel
  ):
    self._record(
        "fetch_products_by_category_page", category_id, first, after, channel
    )
    matching = [
        p for p in self.products if p.category and p.category.id == category_id
    ]
    return _page(matching, first, after)

  async def fetch_products_by_collection_page(
      self, collection_id, first, after, channel
  ):
    self._record(
        "fetch_products_by_collection_page",
        collection_id,
        first,
        after,
        channel,
    )
    return _page(self.products, first, after)

  async def fetch_collections_page(self, first, after, channel):
    self._record("fetch_collections_page", first, after, channel)
    return _page(self.collections, first, after)

  async def fetch_categories_page(self, first, after, channel):
    self._record("fetch_categories_page", first, after, channel)
    return _page(self.categories, first, after)

  async def get_variant(self, variant_id, channel):
    self._record("get_variant", variant_id, channel)
    return self.variants.get(variant_id)

  async def get_shipping_methods(self, channel):
    self._record("get_shipping_methods", channel)
    return self.shipping_methods

  async def create_draft_order(self, draft_input):
    self._record("create_draft_order", draft_input)
    return "T3JkZXI6MQ=="

  async def complete_draft_order(self, order_id):
    self._record("complete_draft_order", order_id)
    return CompletedOrder(id=order_id, number="1001")

  async def set_draft_order_shipping_method(self, order_id, method_id):
    self._record("set_draft_order_shipping_method", order_id, method_id)

  async def mark_order_as_paid(self, order_id, transaction_reference):
    self._record("mark_order_as_paid", order_id, transaction_reference)

  async def add_order_note(self, order_id, message):
    self._record("add_order_note", order_id, message)


class FakeShiprocketClient:
  """Records pushes and answers token requests from a fixed response."""

  def __init__(
      self,
      token_response: Optional[dict[str, Any]] = None,
      order_details: Optional[dict[str, Any]] = None,
      fail: Optional[dict[str, str]] = None,
  ):
    self.token_response = token_response or {
        "result": {
            "token": "tok-123",
            "order_id": "SR-ORDER-1",
            "checkout_url": "https://checkout.example.com/tok-123",
        }
    }
    self.order_details = order_details or {"result": {"status": "SUCCESS"}}
    self.fail = fail or {}
    self.calls = collections.defaultdict(list)

  def _record(self, method: str, *args: Any) -> None:
    self.calls[method].append(args)
    if method in self.fail:
      raise UpstreamError("ShipRocket", self.fail[method])

  async def generate_access_token(self, items, redirect_url):
    self._record("generate_access_token", items, redirect_url)
    return AccessTokenResponse.model_validate(self.token_response)

  async def sync_product(self, product):
    self._record("sync_product", product)
    return {}

  async def sync_collection(self, collection):
    self._record("sync_collection", collection)
    return {}

  async def get_order_details(self, order_id):
    self._record("get_order_details", order_id)
    return self.order_details
