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

"""Catalog pull routes called by ShipRocket."""

import logging
from typing import Optional

import config
import dependencies
from fastapi import APIRouter
from fastapi import Depends
from fastapi import Path
from fastapi import Query
from models import CatalogCollectionsResponse
from models import CatalogProductsResponse
from services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["catalog"])


class PageParams:
  """`page`, `limit` and `channel` query parameters, normalized."""

  def __init__(
      self,
      page: int = Query(1),
      limit: int = Query(config.DEFAULT_PAGE_SIZE),
      channel: Optional[str] = Query(None),
      settings: config.Settings = Depends(dependencies.get_settings),
  ):
    self.page = max(page, 1)
    if limit < 1:
      limit = config.DEFAULT_PAGE_SIZE
    self.limit = min(limit, config.MAX_PAGE_SIZE)
    self.channel = channel or settings.default_channel


@router.get(
    "/products",
    response_model=CatalogProductsResponse,
    summary="List Products",
)
async def list_products(
    params: PageParams = Depends(),
    catalog_service: CatalogService = Depends(
        dependencies.get_catalog_service
    ),
):
  logger.info(
      "Catalog request: products page=%d limit=%d channel=%s",
      params.page,
      params.limit,
      params.channel,
  )
  return await catalog_service.fetch_products(
      params.page, params.limit, params.channel
  )


@router.get(
    "/collections",
    response_model=CatalogCollectionsResponse,
    summary="List Collections",
)
@router.get(
    "/categories",
    response_model=CatalogCollectionsResponse,
    summary="List Categories",
)
async def list_collections(
    params: PageParams = Depends(),
    catalog_service: CatalogService = Depends(
        dependencies.get_catalog_service
    ),
):
  """Lists the groups ShipRocket treats as collections.

  These are Saleor categories unless PRODUCT_FILTER is `collection`.
  """
  logger.info(
      "Catalog request: collections page=%d limit=%d", params.page, params.limit
  )
  return await catalog_service.fetch_groups(
      params.page, params.limit, params.channel
  )


@router.get(
    "/collections/{collection_id}/products",
    response_model=CatalogProductsResponse,
    summary="List Collection Products",
)
async def list_collection_products(
    collection_id: str = Path(..., min_length=1),
    params: PageParams = Depends(),
    catalog_service: CatalogService = Depends(
        dependencies.get_catalog_service
    ),
):
  logger.info(
      "Catalog request: products of %s page=%d limit=%d",
      collection_id,
      params.page,
      params.limit,
  )
  return await catalog_service.fetch_products_by_group(
      collection_id, params.page, params.limit, params.channel
  )
