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

"""ShipRocket Checkout API client.

Every request is a JSON POST signed with HMAC-SHA256 over the exact body
bytes that go on the wire.
"""

import datetime
import logging
from typing import Any, Optional

import config
from exceptions import UpstreamError
import httpx
from models import AccessTokenResponse
from models import CatalogCollection
from models import CatalogProduct
from models import CheckoutCartItem
from pydantic import ValidationError
from signing import canonical_bytes
from signing import HmacSigner

logger = logging.getLogger(__name__)

UPSTREAM = "ShipRocket"


def _timestamp() -> str:
  return datetime.datetime.now(datetime.timezone.utc).isoformat()


class ShiprocketClient:
  """Authenticated access to the ShipRocket endpoints the connector uses."""

  def __init__(
      self,
      base_url: str,
      api_key: str,
      signer: HmacSigner,
      timeout: float = 20.0,
      transport: Optional[httpx.AsyncBaseTransport] = None,
  ):
    self.base_url = base_url.rstrip("/")
    self.api_key = api_key
    self.signer = signer
    self.timeout = timeout
    self._transport = transport

  def signed_headers(self, body: bytes) -> dict[str, str]:
    return {
        "X-Api-Key": self.api_key,
        "X-Api-HMAC-SHA256": self.signer.sign(body),
        "Content-Type": "application/json",
    }

  async def post(self, endpoint: str, payload: dict[str, Any]) -> Any:
    url = f"{self.base_url}{endpoint}"
    body = canonical_bytes(payload)
    logger.debug("ShipRocket request: POST %s (%d bytes)", url, len(body))

    try:
      async with httpx.AsyncClient(
          timeout=self.timeout, transport=self._transport
      ) as client:
        response = await client.post(
            url, content=body, headers=self.signed_headers(body)
        )
    except httpx.HTTPError as e:
      raise UpstreamError(UPSTREAM, f"request to {endpoint} failed: {e}") from e

    logger.debug(
        "ShipRocket response: %s %d", endpoint, response.status_code
    )
    if response.status_code >= 400:
      logger.error(
          "ShipRocket API error response (%d): %s",
          response.status_code,
          response.text,
      )
      raise UpstreamError(
          UPSTREAM, f"HTTP {response.status_code}: {response.text}"
      )

    if not response.content:
      return {}
    try:
      return response.json()
    except ValueError as e:
      raise UpstreamError(UPSTREAM, "response is not JSON") from e

  async def generate_access_token(
      self, items: list[CheckoutCartItem], redirect_url: str
  ) -> AccessTokenResponse:
    payload = {
        "cart_data": {"items": [item.model_dump() for item in items]},
        "redirect_url": redirect_url,
        "timestamp": _timestamp(),
    }
    data = await self.post(config.ACCESS_TOKEN_ENDPOINT, payload)
    try:
      return AccessTokenResponse.model_validate(data)
    except ValidationError as e:
      raise UpstreamError(UPSTREAM, f"Unexpected token response: {e}") from e

  async def sync_product(self, product: CatalogProduct) -> Any:
    return await self.post(
        config.PRODUCT_WEBHOOK_ENDPOINT, product.model_dump(mode="json")
    )

  async def sync_collection(self, collection: CatalogCollection) -> Any:
    return await self.post(
        config.COLLECTION_WEBHOOK_ENDPOINT, collection.model_dump(mode="json")
    )

  async def get_order_details(self, order_id: str) -> Any:
    payload = {"order_id": order_id, "timestamp": _timestamp()}
    return await self.post(config.ORDER_DETAILS_ENDPOINT, payload)
