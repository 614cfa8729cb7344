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

"""Checkout service issuing ShipRocket checkout tokens for storefront carts.

The cart is validated before anything goes over the network; an invalid
cart never reaches ShipRocket. Neither public method raises: failures come
back as result objects.
"""

import logging
from typing import Any, Optional

from exceptions import ConnectorError
from models import CartValidation
from models import CheckoutAuthorizationResponse
from models import CheckoutRequest
from models import OrderDetailsResult
from pydantic import ValidationError
from shiprocket_client import ShiprocketClient

logger = logging.getLogger(__name__)


def validate_cart_data(cart_data: Any) -> CartValidation:
  """Checks a raw `cart_data` object from the storefront."""
  items = cart_data.get("items") if isinstance(cart_data, dict) else None
  if not isinstance(items, list):
    return CartValidation(
        valid=False, error="Invalid cart data: items array is required"
    )

  if not items:
    return CartValidation(valid=False, error="Cart is empty")

  for item in items:
    if not isinstance(item, dict):
      return CartValidation(valid=False, error="Invalid cart item")

    variant_id = item.get("variant_id")
    if not isinstance(variant_id, str) or not variant_id.strip():
      return CartValidation(
          valid=False, error="Invalid variant_id in cart item"
      )

    quantity = item.get("quantity")
    if (
        not isinstance(quantity, int)
        or isinstance(quantity, bool)
        or quantity < 1
    ):
      return CartValidation(valid=False, error="Invalid quantity in cart item")

  return CartValidation(valid=True)


def _failure(error: str, code: str) -> CheckoutAuthorizationResponse:
  return CheckoutAuthorizationResponse(success=False, error=error, code=code)


class CheckoutService:
  """Service for ShipRocket checkout tokens and order lookups."""

  def __init__(self, client: ShiprocketClient, storefront_url: str = ""):
    self.client = client
    self.storefront_url = storefront_url

  async def generate_checkout_token(
      self, request: Any
  ) -> CheckoutAuthorizationResponse:
    """Validates the raw request body and asks ShipRocket for a token."""
    cart_data = request.get("cart_data") if isinstance(request, dict) else None
    validation = validate_cart_data(cart_data)
    if not validation.valid:
      logger.warning("Cart validation failed: %s", validation.error)
      return _failure(validation.error or "Invalid cart", "INVALID_REQUEST")

    try:
      checkout_request = CheckoutRequest.model_validate(request)
    except ValidationError as e:
      logger.warning("Checkout request rejected: %s", e)
      return _failure("Invalid checkout request", "INVALID_REQUEST")

    redirect_url = checkout_request.redirect_url or self.storefront_url
    items = checkout_request.cart_data.items

    logger.info(
        "Generating ShipRocket checkout token (items=%d, redirect_url=%s)",
        len(items),
        redirect_url,
    )

    try:
      response = await self.client.generate_access_token(items, redirect_url)
    except ConnectorError as e:
      logger.error("Failed to generate checkout token: %s", e.message)
      return _failure(e.message, e.code)
    except Exception as e:  # pylint: disable=broad-exception-caught
      logger.exception("Unexpected error generating checkout token")
      return _failure(
          str(e) or "Failed to generate checkout token", "INTERNAL_ERROR"
      )

    result = response.result
    if not result or not result.token:
      logger.error("ShipRocket did not return a valid token")
      return _failure(
          "ShipRocket did not return a valid token", "UPSTREAM_ERROR"
      )

    logger.info(
        "Successfully generated checkout token (order_id=%s)", result.order_id
    )
    return CheckoutAuthorizationResponse(
        success=True,
        token=result.token,
        order_id=result.order_id or "",
        checkout_url=result.checkout_url,
    )

  async def fetch_order_details(self, order_id: str) -> OrderDetailsResult:
    logger.info(
        "Fetching order details from ShipRocket (order_id=%s)", order_id
    )
    try:
      response = await self.client.get_order_details(order_id)
    except ConnectorError as e:
      logger.error("Failed to fetch order details: %s", e.message)
      return OrderDetailsResult(success=False, error=e.message)
    except Exception as e:  # pylint: disable=broad-exception-caught
      logger.exception("Unexpected error fetching order details")
      return OrderDetailsResult(success=False, error=str(e))

    order: Optional[dict[str, Any]] = (
        response if isinstance(response, dict) else {"result": response}
    )
    return OrderDetailsResult(success=True, order=order)
