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

"""Saleor to ShipRocket catalog mapping.

All functions here are pure: they only read their arguments. Missing optional
fields degrade to fixed defaults, so mapping never fails on a valid model.
The only value not derived from the input is a timestamp Saleor does not
provide, which is taken from `now` (defaults to the current UTC time).
"""

import datetime
from decimal import Decimal
import math
from typing import Iterable, Optional, Union

from models import CatalogCollection
from models import CatalogCollectionsResponse
from models import CatalogImage
from models import CatalogProduct
from models import CatalogProductsResponse
from models import CatalogVariant
from models import Pagination
from models import SaleorCategory
from models import SaleorCollection
from models import SaleorImage
from models import SaleorProduct
from models import SaleorVariant

DEFAULT_VENDOR = "Default Vendor"
DEFAULT_PRODUCT_TYPE = "Uncategorized"
DEFAULT_VARIANT_TITLE = "Default"
DEFAULT_WEIGHT_UNIT = "kg"
PRODUCT_STATUS = "active"


def _timestamp(now: Optional[datetime.datetime]) -> str:
  now = now or datetime.datetime.now(datetime.timezone.utc)
  return now.isoformat()


def _image(url: Optional[str]) -> Optional[CatalogImage]:
  return CatalogImage(src=url) if url else None


def _first_url(media: list[SaleorImage]) -> Optional[str]:
  return media[0].url if media else None


def format_amount(amount: Optional[Decimal]) -> str:
  """Renders a money amount as a plain decimal string ("0" when absent)."""
  if amount is None:
    return "0"
  return format(amount.normalize(), "f")


def _variant_price(variant: SaleorVariant) -> str:
  pricing = variant.pricing
  if pricing and pricing.price and pricing.price.gross:
    return format_amount(pricing.price.gross.amount)
  return "0"


def _vendor(product: SaleorProduct) -> str:
  for item in product.metadata:
    if item.key == "vendor":
      return item.value or DEFAULT_VENDOR
  return DEFAULT_VENDOR


def _map_variant(
    product: SaleorProduct,
    variant: SaleorVariant,
    product_image_url: Optional[str],
    updated_at: str,
) -> CatalogVariant:
  weight = variant.weight
  return CatalogVariant(
      id=variant.id,
      product_id=product.id,
      title=variant.name or DEFAULT_VARIANT_TITLE,
      price=_variant_price(variant),
      sku=variant.sku or "",
      compare_at_price="",
      inventory_quantity=variant.quantity_available or 0,
      weight=(weight.value if weight and weight.value else 0),
      weight_unit=(
          weight.unit.lower()
          if weight and weight.unit
          else DEFAULT_WEIGHT_UNIT
      ),
      image=_image(_first_url(variant.media) or product_image_url),
      updated_at=updated_at,
  )


def map_product(
    product: SaleorProduct, now: Optional[datetime.datetime] = None
) -> CatalogProduct:
  """Maps a Saleor product (with variants) to a ShipRocket catalog product."""
  first_variant = product.variants[0] if product.variants else None
  image_url = (product.thumbnail.url if product.thumbnail else None) or (
      _first_url(first_variant.media) if first_variant else None
  )
  mapped_at = _timestamp(now)
  created_at = product.created or mapped_at
  updated_at = product.updated_at or mapped_at

  return CatalogProduct(
      id=product.id,
      title=product.name or "",
      body_html=product.description or "",
      vendor=_vendor(product),
      product_type=(
          product.category.name
          if product.category and product.category.name
          else DEFAULT_PRODUCT_TYPE
      ),
      created_at=created_at,
      updated_at=updated_at,
      status=PRODUCT_STATUS,
      variants=[
          _map_variant(product, variant, image_url, updated_at)
          for variant in product.variants
      ],
      image=_image(image_url),
  )


def map_collection(
    collection: Union[SaleorCollection, SaleorCategory],
    now: Optional[datetime.datetime] = None,
) -> CatalogCollection:
  """Maps a Saleor collection to a ShipRocket collection.

  Saleor has no update timestamp on collections, so `updated_at` is the
  mapping time.
  """
  background = collection.background_image
  return CatalogCollection(
      id=collection.id,
      title=collection.name or "",
      body_html=collection.description or "",
      updated_at=_timestamp(now),
      image=_image(background.url if background else None),
  )


def map_category(
    category: SaleorCategory, now: Optional[datetime.datetime] = None
) -> CatalogCollection:
  """Categories are exposed to ShipRocket as collections."""
  return map_collection(category, now)


def build_pagination(page: int, per_page: int, total_count: int) -> Pagination:
  return Pagination(
      current_page=page,
      total_pages=math.ceil(total_count / per_page) if per_page else 0,
      total_count=total_count,
      per_page=per_page,
  )


def build_products_response(
    products: Iterable[SaleorProduct],
    page: int,
    per_page: int,
    total_count: int,
    now: Optional[datetime.datetime] = None,
) -> CatalogProductsResponse:
  return CatalogProductsResponse(
      products=[map_product(p, now) for p in products],
      pagination=build_pagination(page, per_page, total_count),
  )


def build_collections_response(
    collections: Iterable[Union[SaleorCollection, SaleorCategory]],
    page: int,
    per_page: int,
    total_count: int,
    now: Optional[datetime.datetime] = None,
) -> CatalogCollectionsResponse:
  return CatalogCollectionsResponse(
      collections=[map_collection(c, now) for c in collections],
      pagination=build_pagination(page, per_page, total_count),
  )
