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

"""Manual catalog sync routes."""

import logging
from typing import Any, Optional

import config
import dependencies
from enums import SyncType
from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from pydantic import BaseModel
from services.catalog_service import CatalogService
from services.sync_service import SyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


class BulkSyncRequest(BaseModel):
  type: SyncType = SyncType.ALL


@router.post(
    "/bulk",
    summary="Bulk Sync Catalog",
    dependencies=[Depends(dependencies.verify_admin_bearer)],
)
async def bulk_sync(
    request: Optional[BulkSyncRequest] = None,
    settings: config.Settings = Depends(dependencies.get_settings),
    catalog_service: CatalogService = Depends(
        dependencies.get_catalog_service
    ),
    sync_service: SyncService = Depends(dependencies.get_sync_service),
) -> dict[str, Any]:
  """Pushes the whole Saleor catalog to ShipRocket.

  Saleor read failures surface as 502; push failures are counted per item.
  """
  sync_type = request.type if request else SyncType.ALL
  channel = settings.default_channel
  logger.info("Starting bulk sync (type=%s)", sync_type.value)
  results: dict[str, Any] = {"products": None, "collections": None}

  if sync_type in (SyncType.PRODUCTS, SyncType.ALL):
    products = await catalog_service.list_all_products(channel)
    batch = await sync_service.batch_sync_products(products)
    results["products"] = batch.model_dump()

  if sync_type in (SyncType.COLLECTIONS, SyncType.ALL):
    groups = await catalog_service.list_all_groups(channel)
    batch = await sync_service.batch_sync_collections(groups)
    results["collections"] = batch.model_dump()

  logger.info("Bulk sync completed: %s", results)
  return {"success": True, "message": "Bulk sync completed", "results": results}


@router.api_route(
    "/manual",
    methods=["GET", "POST"],
    summary="Check Saleor Connectivity",
    dependencies=[Depends(dependencies.verify_admin_bearer)],
)
async def manual_sync(
    channel: Optional[str] = Query(None),
    settings: config.Settings = Depends(dependencies.get_settings),
    catalog_service: CatalogService = Depends(
        dependencies.get_catalog_service
    ),
) -> dict[str, Any]:
  """Reads the first catalog page to confirm Saleor answers.

  Nothing is pushed to ShipRocket. Saleor failures surface as 502.
  """
  channel = channel or settings.default_channel
  logger.info("Manual sync triggered (channel=%s)", channel)

  products = await catalog_service.fetch_products(
      1, config.MAX_PAGE_SIZE, channel
  )
  categories = await catalog_service.fetch_categories(
      1, config.MAX_PAGE_SIZE, channel
  )

  result = {
      "success": True,
      "message": "Manual sync completed",
      "channel": channel,
      "counts": {
          "products": products.pagination.total_count,
          "categories": categories.pagination.total_count,
      },
      "sample": {
          "products": [
              {"id": p.id, "title": p.title, "variants": len(p.variants)}
              for p in products.products[:3]
          ],
          "categories": [
              {"id": c.id, "title": c.title}
              for c in categories.collections[:3]
          ],
      },
  }
  logger.info("Manual sync result: %s", result["counts"])
  return result
