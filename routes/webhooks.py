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

"""Webhook routes for ShipRocket orders and Saleor catalog changes.

Senders retry on anything but a 2xx, so processing failures are answered
with 200 and `success: false`. Only unauthenticated (401) and malformed
(400) requests get an error status.
"""

import json
import logging
from typing import Any, Type, TypeVar

import dependencies
from exceptions import InvalidRequestError
from exceptions import ResourceNotFoundError
from fastapi import APIRouter
from fastapi import Depends
from fastapi import Path
from fastapi import Request
from fastapi.responses import JSONResponse
from models import SaleorCategory
from models import SaleorCollection
from models import SaleorProduct
from models import ShiprocketOrderWebhook
from pydantic import BaseModel
from pydantic import ValidationError
from retry_queue import WebhookRetryQueue
from services.order_service import OrderService
from services.order_service import process_order_webhook
from services.order_service import retry_failed_orders
from services.sync_service import SyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

ModelT = TypeVar("ModelT", bound=BaseModel)


async def _json_body(request: Request) -> Any:
  body = await request.body()
  try:
    return json.loads(body)
  except ValueError as e:
    raise InvalidRequestError("Request body is not valid JSON") from e


def _parse_order_webhook(payload: Any) -> ShiprocketOrderWebhook:
  try:
    return ShiprocketOrderWebhook.model_validate(payload)
  except ValidationError as e:
    logger.warning("Invalid order webhook payload: %s", e)
    raise InvalidRequestError("Invalid webhook payload") from e


def _saleor_entity(payload: Any, model: Type[ModelT], *path: str) -> ModelT:
  """Pulls the entity at `path` out of a Saleor webhook payload."""
  entity = payload
  for key in path:
    entity = entity.get(key) if isinstance(entity, dict) else None
  if not isinstance(entity, dict) or not entity.get("id"):
    logger.warning("Invalid Saleor webhook payload: missing %s", ".".join(path))
    raise InvalidRequestError("Invalid payload")
  try:
    return model.model_validate(entity)
  except ValidationError as e:
    logger.warning("Invalid Saleor webhook payload: %s", e)
    raise InvalidRequestError("Invalid payload") from e


def _sync_response(result, synced: str) -> dict[str, Any]:
  if not result.success:
    return {
        "success": False,
        "error": result.error,
        "message": "Sync failed but webhook acknowledged",
    }
  return {"success": True, "message": f"{synced} synced to ShipRocket"}


@router.post(
    "/order-placed",
    summary="ShipRocket Order Placed",
    dependencies=[
        Depends(dependencies.verify_shiprocket_signature_if_present)
    ],
)
async def order_placed(
    request: Request,
    order_service: OrderService = Depends(dependencies.get_order_service),
    queue: WebhookRetryQueue = Depends(dependencies.get_retry_queue),
):
  """Creates the Saleor order for a completed ShipRocket checkout."""
  webhook = _parse_order_webhook(await _json_body(request))
  logger.info(
      "Received order webhook from ShipRocket (order_id=%s, status=%s)",
      webhook.order_id,
      webhook.status,
  )

  try:
    result = await process_order_webhook(order_service, queue, webhook)
  except Exception as e:  # pylint: disable=broad-exception-caught
    logger.exception("Order webhook processing error")
    return {"success": False, "error": "Internal error", "message": str(e)}

  if not result.success:
    return {
        "success": False,
        "error": result.error,
        "message": "Order creation failed but webhook acknowledged",
    }
  return {
      "success": True,
      "order_id": result.order_id,
      "order_number": result.order_number,
      "message": "Order created successfully",
  }


@router.post(
    "/saleor-product-updated",
    summary="Saleor Product Updated",
    dependencies=[Depends(dependencies.verify_saleor_signature)],
)
async def saleor_product_updated(
    request: Request,
    sync_service: SyncService = Depends(dependencies.get_sync_service),
):
  product = _saleor_entity(
      await _json_body(request), SaleorProduct, "product"
  )
  logger.info("Received product update webhook (product_id=%s)", product.id)
  result = await sync_service.sync_product(product)
  return _sync_response(result, "Product")


@router.post(
    "/saleor-product-variant-updated",
    summary="Saleor Product Variant Updated",
    dependencies=[Depends(dependencies.verify_saleor_signature)],
)
async def saleor_product_variant_updated(
    request: Request,
    sync_service: SyncService = Depends(dependencies.get_sync_service),
):
  """Re-syncs the whole product; ShipRocket has no variant endpoint."""
  product = _saleor_entity(
      await _json_body(request), SaleorProduct, "productVariant", "product"
  )
  logger.info("Received variant update webhook (product_id=%s)", product.id)
  result = await sync_service.sync_product(product)
  return _sync_response(result, "Product")


@router.post(
    "/saleor-collection-updated",
    summary="Saleor Collection Updated",
    dependencies=[Depends(dependencies.verify_saleor_signature)],
)
async def saleor_collection_updated(
    request: Request,
    sync_service: SyncService = Depends(dependencies.get_sync_service),
):
  collection = _saleor_entity(
      await _json_body(request), SaleorCollection, "collection"
  )
  logger.info(
      "Received collection update webhook (collection_id=%s)", collection.id
  )
  result = await sync_service.sync_collection(collection)
  return _sync_response(result, "Collection")


@router.post(
    "/saleor-category-updated",
    summary="Saleor Category Updated",
    dependencies=[Depends(dependencies.verify_saleor_signature)],
)
async def saleor_category_updated(
    request: Request,
    sync_service: SyncService = Depends(dependencies.get_sync_service),
):
  category = _saleor_entity(
      await _json_body(request), SaleorCategory, "category"
  )
  logger.info("Received category update webhook (category_id=%s)", category.id)
  result = await sync_service.sync_category(category)
  return _sync_response(result, "Category")


@router.get(
    "/status",
    summary="Retry Queue Status",
    dependencies=[Depends(dependencies.verify_admin_bearer)],
)
async def retry_queue_status(
    queue: WebhookRetryQueue = Depends(dependencies.get_retry_queue),
):
  return {"success": True, **queue.status()}


@router.post(
    "/retry",
    summary="Retry Failed Orders",
    dependencies=[Depends(dependencies.verify_admin_bearer)],
)
async def retry_all(
    order_service: OrderService = Depends(dependencies.get_order_service),
    queue: WebhookRetryQueue = Depends(dependencies.get_retry_queue),
):
  """Re-runs every queued order whose cool-down has passed."""
  results = await retry_failed_orders(order_service, queue)
  return {
      "success": True,
      "retried": len(results),
      "succeeded": sum(1 for r in results if r["success"]),
      "results": results,
      "queue_size": len(queue),
  }


@router.post(
    "/retry/{order_id}",
    summary="Retry One Order",
    dependencies=[Depends(dependencies.verify_admin_bearer)],
)
async def retry_order(
    request: Request,
    order_id: str = Path(..., min_length=1),
    order_service: OrderService = Depends(dependencies.get_order_service),
    queue: WebhookRetryQueue = Depends(dependencies.get_retry_queue),
):
  """Re-runs the saga with the posted payload, else the queued one."""
  logger.info("Manual retry requested for order %s", order_id)
  if await request.body():
    webhook = _parse_order_webhook(await _json_body(request))
    if webhook.order_id != order_id:
      raise InvalidRequestError("Order ID does not match webhook payload")
  else:
    entry = queue.get(order_id)
    if entry is None:
      raise ResourceNotFoundError(f"No queued webhook for order {order_id}")
    webhook = entry.webhook

  result = await process_order_webhook(order_service, queue, webhook)
  if not result.success:
    return JSONResponse(
        status_code=400, content={"success": False, "error": result.error}
    )
  return {
      "success": True,
      "message": "Order created successfully on retry",
      "order_id": result.order_id,
      "order_number": result.order_number,
  }
