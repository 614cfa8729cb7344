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

"""Order service turning ShipRocket order webhooks into Saleor orders.

The order is created as a saga of Saleor calls with no rollback:

1. status gate (critical)
2. order lines from variant lookups (critical if none resolve)
3. draft order creation (critical)
4. shipping method (non-critical)
5. draft order completion (critical, leaves the draft behind on failure)
6. mark as paid for PREPAID orders (non-critical)
7. order note (non-critical)

Non-critical failures are logged and the order is still reported as created.
"""

import logging
from typing import Any, Optional

from enums import OrderStatus
from enums import PaymentType
from exceptions import ConnectorError
from models import OrderResult
from models import ShiprocketOrderWebhook
from models import WebhookAddress
from models import WebhookCartItem
from retry_queue import WebhookRetryQueue
from saleor_client import SaleorClient

logger = logging.getLogger(__name__)

FALLBACK_FIRST_NAME = "Guest"
FALLBACK_LAST_NAME = "Customer"
FALLBACK_CITY = "Unknown"
FALLBACK_POSTAL_CODE = "000000"
FALLBACK_COUNTRY = "IN"


class SagaAborted(Exception):
  """A critical saga step failed."""


def build_address(address: Optional[WebhookAddress]) -> dict[str, str]:
  """Builds a Saleor AddressInput from a ShipRocket address.

  ShipRocket does not send a recipient name with the address; the name is
  taken from the city field split on whitespace.
  """
  if address is None:
    return {
        "firstName": FALLBACK_FIRST_NAME,
        "lastName": FALLBACK_LAST_NAME,
        "streetAddress1": "Address not provided",
        "city": FALLBACK_CITY,
        "postalCode": FALLBACK_POSTAL_CODE,
        "country": FALLBACK_COUNTRY,
    }

  name_parts = (address.city or "").split()
  first_name = name_parts[0] if name_parts else FALLBACK_FIRST_NAME
  last_name = " ".join(name_parts[1:]) or FALLBACK_LAST_NAME

  return {
      "firstName": first_name,
      "lastName": last_name,
      "streetAddress1": address.address_line_1 or "Not provided",
      "streetAddress2": address.address_line_2 or "",
      "city": address.city or FALLBACK_CITY,
      "countryArea": address.state or "",
      "postalCode": address.pincode or FALLBACK_POSTAL_CODE,
      "country": address.country or FALLBACK_COUNTRY,
  }


def order_note(webhook: ShiprocketOrderWebhook) -> str:
  return (
      f"ShipRocket Order ID: {webhook.order_id}\n"
      f"Payment Type: {webhook.payment_type or ''}"
  )


class OrderService:
  """Creates Saleor orders from ShipRocket order webhooks."""

  def __init__(self, client: SaleorClient, channel: str):
    self.client = client
    self.channel = channel

  async def create_order_from_webhook(
      self, webhook: ShiprocketOrderWebhook
  ) -> OrderResult:
    """Runs the order saga. Never raises.

    Args:
      webhook: The validated order webhook.

    Returns:
      The Saleor order id and number on success, else the error.
    """
    logger.info(
        "Processing ShipRocket order webhook (order_id=%s, items=%d,"
        " payment_type=%s)",
        webhook.order_id,
        len(webhook.cart_data.items),
        webhook.payment_type,
    )

    if webhook.status != OrderStatus.SUCCESS.value:
      logger.warning(
          "Order webhook %s received with status %s",
          webhook.order_id,
          webhook.status,
      )
      return OrderResult(
          success=False,
          error=f"Order status is {webhook.status}, not SUCCESS",
      )

    try:
      lines = await self._build_order_lines(webhook.cart_data.items)
      if not lines:
        raise SagaAborted("No valid order lines could be created")

      order_id = await self._create_draft_order(webhook, lines)
      await self._attach_shipping_method(order_id)

      completed = await self.client.complete_draft_order(order_id)
    except (SagaAborted, ConnectorError) as e:
      message = e.message if isinstance(e, ConnectorError) else str(e)
      logger.error(
          "Failed to create order from webhook %s: %s",
          webhook.order_id,
          message,
      )
      return OrderResult(success=False, error=message)
    except Exception as e:  # pylint: disable=broad-exception-caught
      logger.exception(
          "Unexpected error creating order from webhook %s", webhook.order_id
      )
      return OrderResult(success=False, error=str(e))

    if webhook.payment_type == PaymentType.PREPAID.value:
      await self._mark_as_paid(order_id, webhook.order_id)
    await self._add_note(order_id, order_note(webhook))

    logger.info(
        "Created Saleor order %s (number=%s) from ShipRocket order %s",
        order_id,
        completed.number,
        webhook.order_id,
    )
    return OrderResult(
        success=True, order_id=order_id, order_number=completed.number
    )

  async def _build_order_lines(
      self, items: list[WebhookCartItem]
  ) -> list[dict[str, Any]]:
    lines = []
    for item in items:
      try:
        variant = await self.client.get_variant(item.variant_id, self.channel)
      except ConnectorError as e:
        logger.warning(
            "Error fetching variant %s: %s", item.variant_id, e.message
        )
        continue

      if variant is None:
        logger.warning("Variant %s not found or unavailable", item.variant_id)
        continue

      available = variant.quantity_available
      if available is not None and available < item.quantity:
        # Oversell is accepted; the order goes through.
        logger.warning(
            "Insufficient stock for variant %s (requested=%d, available=%d)",
            item.variant_id,
            item.quantity,
            available,
        )

      lines.append({"variantId": item.variant_id, "quantity": item.quantity})
    return lines

  async def _create_draft_order(
      self, webhook: ShiprocketOrderWebhook, lines: list[dict[str, Any]]
  ) -> str:
    shipping_address = build_address(webhook.shipping_address)
    billing_address = build_address(
        webhook.billing_address or webhook.shipping_address
    )
    draft_input = {
        # Saleor resolves the channel from its slug here.
        "channelId": self.channel,
        "userEmail": webhook.email,
        "shippingAddress": shipping_address,
        "billingAddress": billing_address,
        "lines": lines,
    }
    order_id = await self.client.create_draft_order(draft_input)
    logger.info("Created draft order %s", order_id)
    return order_id

  async def _attach_shipping_method(self, order_id: str) -> None:
    try:
      methods = await self.client.get_shipping_methods(self.channel)
      if not methods:
        logger.warning("No shipping methods available for %s", self.channel)
        return
      await self.client.set_draft_order_shipping_method(
          order_id, methods[0].id
      )
      logger.info(
          "Added shipping method %s to order %s", methods[0].id, order_id
      )
    except Exception as e:  # pylint: disable=broad-exception-caught
      logger.error("Error adding shipping method to %s: %s", order_id, e)

  async def _mark_as_paid(self, order_id: str, transaction_reference: str):
    try:
      await self.client.mark_order_as_paid(order_id, transaction_reference)
      logger.info(
          "Marked order %s as paid (reference=%s)",
          order_id,
          transaction_reference,
      )
    except Exception as e:  # pylint: disable=broad-exception-caught
      logger.error("Error marking order %s as paid: %s", order_id, e)

  async def _add_note(self, order_id: str, message: str):
    try:
      await self.client.add_order_note(order_id, message)
      logger.info("Added note to order %s", order_id)
    except Exception as e:  # pylint: disable=broad-exception-caught
      logger.error("Error adding note to order %s: %s", order_id, e)


async def process_order_webhook(
    order_service: OrderService,
    queue: WebhookRetryQueue,
    webhook: ShiprocketOrderWebhook,
) -> OrderResult:
  """Runs the saga and keeps the retry queue in step with the outcome.

  Only SUCCESS-status webhooks are queued on failure; a rejected status is
  not something a retry can fix.
  """
  result = await order_service.create_order_from_webhook(webhook)
  if result.success:
    queue.remove(webhook.order_id)
  elif webhook.status == OrderStatus.SUCCESS.value:
    queue.add_failure(webhook, result.error or "Unknown error")
  return result


async def retry_failed_orders(
    order_service: OrderService, queue: WebhookRetryQueue
) -> list[dict[str, Any]]:
  """Re-runs the saga for every retryable queue entry, in queue order."""
  outcomes = []
  for entry in queue.list_retryable():
    order_id = entry.webhook.order_id
    logger.info(
        "Retrying order webhook %s (attempt %d)", order_id, entry.attempts + 1
    )
    result = await process_order_webhook(order_service, queue, entry.webhook)
    outcomes.append({
        "order_id": order_id,
        "success": result.success,
        "saleor_order_id": result.order_id,
        "error": result.error,
    })
  return outcomes
