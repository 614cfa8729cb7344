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

"""Typed models for the ShipRocket connector.

Three families live here:
- Saleor entities as read from GraphQL responses and webhook payloads
  (camelCase on the wire, snake_case in Python).
- ShipRocket shapes: the catalog documents we serve and push, the order
  webhook we receive and the checkout token exchange.
- Result objects returned by the services instead of raising.
"""

import datetime
from decimal import Decimal
from typing import Annotated, Any, Generic, Optional, TypeVar

from pydantic import BaseModel
from pydantic import BeforeValidator
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


# --- Saleor ---


class SaleorModel(BaseModel):
  model_config = ConfigDict(
      alias_generator=to_camel, populate_by_name=True, extra="ignore"
  )


class SaleorImage(SaleorModel):
  url: Optional[str] = None


class MetadataItem(SaleorModel):
  key: str
  value: Optional[str] = None


class Money(SaleorModel):
  amount: Optional[Decimal] = None
  currency: Optional[str] = None


class TaxedMoney(SaleorModel):
  gross: Optional[Money] = None


class VariantPricing(SaleorModel):
  price: Optional[TaxedMoney] = None


class Weight(SaleorModel):
  value: Optional[float] = None
  unit: Optional[str] = None


class SaleorVariant(SaleorModel):
  id: str
  name: Optional[str] = None
  sku: Optional[str] = None
  quantity_available: Optional[int] = None
  pricing: Optional[VariantPricing] = None
  weight: Optional[Weight] = None
  media: list[SaleorImage] = []

  @field_validator("media", mode="before")
  @classmethod
  def none_media_as_empty(cls, value: Any) -> Any:
    return value or []


class SaleorCategoryRef(SaleorModel):
  id: Optional[str] = None
  name: Optional[str] = None


class SaleorProduct(SaleorModel):
  id: str
  name: Optional[str] = None
  description: Optional[str] = None
  created: Optional[str] = None
  updated_at: Optional[str] = None
  category: Optional[SaleorCategoryRef] = None
  thumbnail: Optional[SaleorImage] = None
  metadata: list[MetadataItem] = []
  variants: list[SaleorVariant] = []

  @field_validator("metadata", "variants", mode="before")
  @classmethod
  def none_list_as_empty(cls, value: Any) -> Any:
    return value or []


class SaleorCollection(SaleorModel):
  id: str
  name: Optional[str] = None
  description: Optional[str] = None
  background_image: Optional[SaleorImage] = None


class SaleorCategory(SaleorModel):
  id: str
  name: Optional[str] = None
  description: Optional[str] = None
  background_image: Optional[SaleorImage] = None


class VariantDetails(SaleorModel):
  """The subset of a variant the order saga needs."""

  id: str
  name: Optional[str] = None
  sku: Optional[str] = None
  quantity_available: Optional[int] = None


class ShippingMethod(SaleorModel):
  id: str
  name: Optional[str] = None


class Page(BaseModel, Generic[T]):
  """One page of a cursor-paginated Saleor connection."""

  nodes: list[T] = []
  total_count: int = 0
  has_next_page: bool = False
  end_cursor: Optional[str] = None


class CompletedOrder(BaseModel):
  id: str
  number: Optional[str] = None


# --- ShipRocket catalog ---


class CatalogImage(BaseModel):
  src: str


class CatalogVariant(BaseModel):
  id: str
  product_id: str
  title: str
  price: str
  sku: str
  compare_at_price: str = ""
  inventory_quantity: int
  weight: float
  weight_unit: str
  image: Optional[CatalogImage] = None
  updated_at: str


class CatalogProduct(BaseModel):
  id: str
  title: str
  body_html: str
  vendor: str
  product_type: str
  created_at: str
  updated_at: str
  status: str = "active"
  variants: list[CatalogVariant] = []
  image: Optional[CatalogImage] = None


class CatalogCollection(BaseModel):
  id: str
  title: str
  body_html: str
  updated_at: str
  image: Optional[CatalogImage] = None


class Pagination(BaseModel):
  current_page: int
  total_pages: int
  total_count: int
  per_page: int


class CatalogProductsResponse(BaseModel):
  products: list[CatalogProduct]
  pagination: Pagination


class CatalogCollectionsResponse(BaseModel):
  collections: list[CatalogCollection]
  pagination: Pagination


# --- ShipRocket checkout ---


class CheckoutCartItem(BaseModel):
  variant_id: str
  quantity: int


class CheckoutCartData(BaseModel):
  items: list[CheckoutCartItem]


class CheckoutRequest(BaseModel):
  cart_data: CheckoutCartData
  redirect_url: Optional[str] = None
  customer_email: Optional[str] = None
  customer_phone: Optional[str] = None


class CartValidation(BaseModel):
  valid: bool
  error: Optional[str] = None


class AccessTokenResult(BaseModel):
  token: Optional[str] = None
  order_id: Optional[str] = None
  checkout_url: Optional[str] = None


class AccessTokenResponse(BaseModel):
  status: Optional[bool] = None
  message: Optional[str] = None
  result: Optional[AccessTokenResult] = None


class CheckoutAuthorizationResponse(BaseModel):
  success: bool
  token: str = ""
  order_id: str = ""
  checkout_url: Optional[str] = None
  error: Optional[str] = None
  code: Optional[str] = None


# --- ShipRocket order webhook ---


def _int_to_str(value: Any) -> Any:
  if isinstance(value, int) and not isinstance(value, bool):
    return str(value)
  return value


# ShipRocket sends some ids, phone numbers and pincodes as JSON numbers.
WebhookStr = Annotated[str, BeforeValidator(_int_to_str)]


class WebhookAddress(BaseModel):
  model_config = ConfigDict(extra="allow")

  address_line_1: Optional[WebhookStr] = None
  address_line_2: Optional[WebhookStr] = None
  city: Optional[WebhookStr] = None
  state: Optional[WebhookStr] = None
  pincode: Optional[WebhookStr] = None
  country: Optional[WebhookStr] = None


class CustomerDetails(BaseModel):
  model_config = ConfigDict(extra="allow")

  name: Optional[WebhookStr] = None
  phone: Optional[WebhookStr] = None
  email: Optional[WebhookStr] = None


class WebhookCartItem(BaseModel):
  model_config = ConfigDict(extra="allow")

  variant_id: str
  quantity: int
  product_id: Optional[str] = None
  price: Optional[float] = None


class WebhookCartData(BaseModel):
  model_config = ConfigDict(extra="allow")

  items: list[WebhookCartItem]


class ShiprocketOrderWebhook(BaseModel):
  """Order placed notification sent by ShipRocket after checkout.

  Unknown fields are kept so a queued payload can be replayed verbatim.
  """

  model_config = ConfigDict(extra="allow")

  order_id: WebhookStr = Field(min_length=1)
  cart_data: WebhookCartData
  status: Optional[WebhookStr] = None
  phone: Optional[WebhookStr] = None
  email: Optional[WebhookStr] = None
  payment_type: Optional[WebhookStr] = None
  total_amount_payable: Optional[float] = None
  customer_details: Optional[CustomerDetails] = None
  shipping_address: Optional[WebhookAddress] = None
  billing_address: Optional[WebhookAddress] = None
  coupon_code: Optional[str] = None
  discount_amount: Optional[float] = None
  shipping_charges: Optional[float] = None
  payment_method: Optional[str] = None
  transaction_id: Optional[str] = None


# --- Service results ---


class OrderResult(BaseModel):
  success: bool
  order_id: Optional[str] = None
  order_number: Optional[str] = None
  error: Optional[str] = None


class SyncResult(BaseModel):
  success: bool
  error: Optional[str] = None


class BatchSyncResult(BaseModel):
  success: int = 0
  failed: int = 0
  errors: list[str] = []


class OrderDetailsResult(BaseModel):
  success: bool
  order: Optional[dict[str, Any]] = None
  error: Optional[str] = None


class FailedWebhookEntry(BaseModel):
  """A failed order webhook waiting in the retry queue."""

  webhook: ShiprocketOrderWebhook
  attempts: int = 1
  last_error: str = ""
  last_attempt: datetime.datetime
