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

"""Catalog service serving Saleor data as numbered ShipRocket pages.

Saleor only offers cursor pagination, while ShipRocket asks for page P of
size L. To answer, the service walks the cursor from the start in steps of
L until it holds P * L nodes (or Saleor runs out) and slices out the last
window. Page P therefore costs P sequential round-trips; there is no cache
across requests.

Key responsibilities include:
- Products, categories (presented as collections) and collections.
- Products of one category or collection, chosen by a `ProductFilter`.
- Walking a whole connection for bulk sync.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from enums import ProductFilter
import mappers
from models import CatalogCollectionsResponse
from models import CatalogProductsResponse
from models import Page
from models import SaleorCategory
from models import SaleorCollection
from models import SaleorProduct
from saleor_client import SaleorClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fetches one page: (first, after) -> Page.
PageFetcher = Callable[[int, Optional[str]], Awaitable[Page]]

BULK_PAGE_SIZE = 100


async def collect_page(
    fetch: PageFetcher, page: int, limit: int
) -> tuple[list[T], int]:
  """Returns the nodes of 1-based `page` of size `limit` and the total count.

  Pages are fetched sequentially from the first cursor, so their order is
  the order Saleor returns.
  """
  wanted = page * limit
  nodes: list[T] = []
  total_count = 0
  cursor: Optional[str] = None
  has_next_page = True

  while has_next_page and len(nodes) < wanted:
    result = await fetch(limit, cursor)
    nodes.extend(result.nodes)
    total_count = result.total_count
    has_next_page = result.has_next_page and bool(result.end_cursor)
    cursor = result.end_cursor

  start = (page - 1) * limit
  return nodes[start : start + limit], total_count


async def collect_all(fetch: PageFetcher, page_size: int = BULK_PAGE_SIZE):
  """Follows the cursor until Saleor reports no further page."""
  nodes = []
  cursor: Optional[str] = None
  while True:
    result = await fetch(page_size, cursor)
    nodes.extend(result.nodes)
    if not result.has_next_page or not result.end_cursor:
      return nodes
    cursor = result.end_cursor


class ProductSource:
  """Where the products of one ShipRocket "collection" come from."""

  product_filter: ProductFilter

  def __init__(self, client: SaleorClient):
    self.client = client

  def products_fetcher(
      self, group_id: str, channel: str
  ) -> PageFetcher:
    raise NotImplementedError

  def groups_fetcher(self, channel: str) -> PageFetcher:
    raise NotImplementedError


class CategoryProductSource(ProductSource):
  product_filter = ProductFilter.CATEGORY

  def products_fetcher(self, group_id, channel):
    return lambda first, after: self.client.fetch_products_by_category_page(
        group_id, first, after, channel
    )

  def groups_fetcher(self, channel):
    return lambda first, after: self.client.fetch_categories_page(
        first, after, channel
    )


class CollectionProductSource(ProductSource):
  product_filter = ProductFilter.COLLECTION

  def products_fetcher(self, group_id, channel):
    return lambda first, after: self.client.fetch_products_by_collection_page(
        group_id, first, after, channel
    )

  def groups_fetcher(self, channel):
    return lambda first, after: self.client.fetch_collections_page(
        first, after, channel
    )


def product_source(
    product_filter: ProductFilter, client: SaleorClient
) -> ProductSource:
  if product_filter == ProductFilter.COLLECTION:
    return CollectionProductSource(client)
  return CategoryProductSource(client)


class CatalogService:
  """Reads the Saleor catalog for ShipRocket.

  Saleor failures propagate as `UpstreamError`.
  """

  def __init__(
      self,
      client: SaleorClient,
      product_filter: ProductFilter = ProductFilter.CATEGORY,
  ):
    self.client = client
    self.source = product_source(product_filter, client)

  async def fetch_products(
      self, page: int, limit: int, channel: str
  ) -> CatalogProductsResponse:
    products, total = await collect_page(
        lambda first, after: self.client.fetch_products_page(
            first, after, channel
        ),
        page,
        limit,
    )
    logger.info("Fetched %d products for page %d", len(products), page)
    return mappers.build_products_response(products, page, limit, total)

  async def fetch_categories(
      self, page: int, limit: int, channel: str
  ) -> CatalogCollectionsResponse:
    categories, total = await collect_page(
        lambda first, after: self.client.fetch_categories_page(
            first, after, channel
        ),
        page,
        limit,
    )
    logger.info("Fetched %d categories for page %d", len(categories), page)
    return mappers.build_collections_response(categories, page, limit, total)

  async def fetch_collections(
      self, page: int, limit: int, channel: str
  ) -> CatalogCollectionsResponse:
    collections, total = await collect_page(
        lambda first, after: self.client.fetch_collections_page(
            first, after, channel
        ),
        page,
        limit,
    )
    logger.info("Fetched %d collections for page %d", len(collections), page)
    return mappers.build_collections_response(
        collections, page, limit, total
    )

  async def fetch_groups(
      self, page: int, limit: int, channel: str
  ) -> CatalogCollectionsResponse:
    """Lists what ShipRocket sees as collections under the active filter."""
    if self.source.product_filter == ProductFilter.COLLECTION:
      return await self.fetch_collections(page, limit, channel)
    return await self.fetch_categories(page, limit, channel)

  async def fetch_products_by_group(
      self, group_id: str, page: int, limit: int, channel: str
  ) -> CatalogProductsResponse:
    products, total = await collect_page(
        self.source.products_fetcher(group_id, channel), page, limit
    )
    logger.info(
        "Fetched %d products for %s %s, page %d",
        len(products),
        self.source.product_filter.value,
        group_id,
        page,
    )
    return mappers.build_products_response(products, page, limit, total)

  async def list_all_products(self, channel: str) -> list[SaleorProduct]:
    return await collect_all(
        lambda first, after: self.client.fetch_products_page(
            first, after, channel
        )
    )

  async def list_all_groups(
      self, channel: str
  ) -> list[SaleorCategory | SaleorCollection]:
    return await collect_all(self.source.groups_fetcher(channel))
