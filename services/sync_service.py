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

"""Pushes Saleor catalog changes to ShipRocket."""

import asyncio
import logging
from typing import Awaitable, Callable, Sequence, Union

from exceptions import ConnectorError
import mappers
from models import BatchSyncResult
from models import SaleorCategory
from models import SaleorCollection
from models import SaleorProduct
from models import SyncResult
from shiprocket_client import ShiprocketClient

logger = logging.getLogger(__name__)

# Pause between pushes in a batch, to stay under ShipRocket's rate limit.
BATCH_DELAY_SECONDS = 0.1


class SyncService:
  """Maps Saleor entities and pushes them to the ShipRocket webhooks."""

  def __init__(
      self,
      client: ShiprocketClient,
      delay_seconds: float = BATCH_DELAY_SECONDS,
      sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
  ):
    self.client = client
    self.delay_seconds = delay_seconds
    self._sleep = sleep

  async def sync_product(self, product: SaleorProduct) -> SyncResult:
    logger.info(
        "Syncing product %s (%s) to ShipRocket", product.id, product.name
    )
    try:
      payload = mappers.map_product(product)
      if not payload.variants:
        logger.warning("Product %s has no variants, skipping sync", product.id)
        return SyncResult(success=False, error="Product has no variants")

      await self.client.sync_product(payload)
    except ConnectorError as e:
      logger.error("Failed to sync product %s: %s", product.id, e.message)
      return SyncResult(success=False, error=e.message)
    except Exception as e:  # pylint: disable=broad-exception-caught
      logger.exception("Unexpected error syncing product %s", product.id)
      return SyncResult(success=False, error=str(e))

    logger.info(
        "Synced product %s (%d variants)", product.id, len(payload.variants)
    )
    return SyncResult(success=True)

  async def sync_collection(
      self, collection: Union[SaleorCollection, SaleorCategory]
  ) -> SyncResult:
    logger.info(
        "Syncing collection %s (%s) to ShipRocket",
        collection.id,
        collection.name,
    )
    try:
      await self.client.sync_collection(mappers.map_collection(collection))
    except ConnectorError as e:
      logger.error("Failed to sync collection %s: %s", collection.id, e.message)
      return SyncResult(success=False, error=e.message)
    except Exception as e:  # pylint: disable=broad-exception-caught
      logger.exception("Unexpected error syncing collection %s", collection.id)
      return SyncResult(success=False, error=str(e))

    logger.info("Synced collection %s", collection.id)
    return SyncResult(success=True)

  async def sync_category(self, category: SaleorCategory) -> SyncResult:
    """Pushes a category, which ShipRocket knows as a collection."""
    return await self.sync_collection(category)

  async def batch_sync_products(
      self, products: Sequence[SaleorProduct]
  ) -> BatchSyncResult:
    logger.info("Starting batch product sync (count=%d)", len(products))
    result = await self._batch(products, self.sync_product)
    logger.info(
        "Batch product sync complete (total=%d, success=%d, failed=%d)",
        len(products),
        result.success,
        result.failed,
    )
    return result

  async def batch_sync_collections(
      self, collections: Sequence[Union[SaleorCollection, SaleorCategory]]
  ) -> BatchSyncResult:
    logger.info("Starting batch collection sync (count=%d)", len(collections))
    result = await self._batch(collections, self.sync_collection)
    logger.info(
        "Batch collection sync complete (total=%d, success=%d, failed=%d)",
        len(collections),
        result.success,
        result.failed,
    )
    return result

  async def _batch(self, items, sync_one) -> BatchSyncResult:
    result = BatchSyncResult()
    for item in items:
      outcome = await sync_one(item)
      if outcome.success:
        result.success += 1
      else:
        result.failed += 1
        if outcome.error:
          result.errors.append(f"{item.id}: {outcome.error}")
      await self._sleep(self.delay_seconds)
    return result
