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

"""FastAPI dependencies for the connector.

This module contains dependency injection logic for FastAPI endpoints,
including:
- Access to the components created at startup (settings, signers, retry
  queue, rate limiter).
- Client and service instantiation per request.
- Webhook signature verification over the raw request body.
- Admin bearer authentication, rate limiting and origin checks.
"""

import hmac
from typing import Optional

from config import Settings
from exceptions import OriginNotAllowedError
from exceptions import RateLimitedError
from exceptions import UnauthorizedError
from fastapi import Depends
from fastapi import Header
from fastapi import Request
from rate_limiter import RateLimiter
from retry_queue import WebhookRetryQueue
from saleor_client import SaleorClient
from services.catalog_service import CatalogService
from services.checkout_service import CheckoutService
from services.order_service import OrderService
from services.sync_service import SyncService
from shiprocket_client import ShiprocketClient
from signing import HmacSigner


def get_settings(request: Request) -> Settings:
  return request.app.state.settings


def get_retry_queue(request: Request) -> WebhookRetryQueue:
  return request.app.state.retry_queue


def get_rate_limiter(request: Request) -> RateLimiter:
  return request.app.state.rate_limiter


def get_shiprocket_signer(request: Request) -> HmacSigner:
  return request.app.state.shiprocket_signer


def get_saleor_signer(request: Request) -> HmacSigner:
  return request.app.state.saleor_signer


def get_saleor_client(
    settings: Settings = Depends(get_settings),
) -> SaleorClient:
  """Dependency provider for SaleorClient."""
  return SaleorClient(
      settings.saleor_api_url,
      settings.saleor_app_token,
      timeout=settings.request_timeout,
  )


def get_shiprocket_client(
    settings: Settings = Depends(get_settings),
    signer: HmacSigner = Depends(get_shiprocket_signer),
) -> ShiprocketClient:
  """Dependency provider for ShiprocketClient."""
  return ShiprocketClient(
      settings.shiprocket_api_base_url,
      settings.shiprocket_api_key,
      signer,
      timeout=settings.request_timeout,
  )


def get_catalog_service(
    settings: Settings = Depends(get_settings),
    client: SaleorClient = Depends(get_saleor_client),
) -> CatalogService:
  return CatalogService(client, settings.product_filter)


def get_checkout_service(
    settings: Settings = Depends(get_settings),
    client: ShiprocketClient = Depends(get_shiprocket_client),
) -> CheckoutService:
  return CheckoutService(client, settings.storefront_url)


def get_order_service(
    settings: Settings = Depends(get_settings),
    client: SaleorClient = Depends(get_saleor_client),
) -> OrderService:
  return OrderService(client, settings.default_channel)


def get_sync_service(
    client: ShiprocketClient = Depends(get_shiprocket_client),
) -> SyncService:
  return SyncService(client)


async def verify_admin_bearer(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
  """Requires `Authorization: Bearer <SECRET_KEY>`."""
  expected = f"Bearer {settings.secret_key}"
  if not settings.secret_key or not authorization:
    raise UnauthorizedError()
  if not hmac.compare_digest(authorization.encode(), expected.encode()):
    raise UnauthorizedError()


def client_identifier(request: Request) -> str:
  """First X-Forwarded-For hop, else the socket peer address."""
  forwarded = request.headers.get("x-forwarded-for")
  if forwarded:
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
      return first_hop
  if request.client:
    return request.client.host
  return "unknown"


async def enforce_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
  if not limiter.is_allowed(client_identifier(request)):
    raise RateLimitedError()


async def enforce_allowed_origin(
    origin: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
  """Rejects browser requests from origins outside ALLOWED_ORIGINS.

  Requests without an Origin header (server to server) pass.
  """
  if origin and origin not in settings.allowed_origins:
    raise OriginNotAllowedError(f"Origin {origin} is not allowed")


async def verify_saleor_signature(
    request: Request,
    saleor_signature: Optional[str] = Header(None),
    signer: HmacSigner = Depends(get_saleor_signer),
) -> None:
  """Requires a valid `saleor-signature` over the raw request body."""
  body = await request.body()
  if not signer.verify(body, saleor_signature):
    raise UnauthorizedError("Invalid signature")


async def verify_shiprocket_signature_if_present(
    request: Request,
    x_api_hmac_sha256: Optional[str] = Header(None),
    signer: HmacSigner = Depends(get_shiprocket_signer),
) -> None:
  """Checks `X-Api-HMAC-SHA256` over the raw body when the header is set.

  Unsigned requests are accepted, so anyone who can reach the endpoint can
  submit an order webhook.
  """
  if not x_api_hmac_sha256:
    return
  body = await request.body()
  if not signer.verify(body, x_api_hmac_sha256):
    raise UnauthorizedError("Invalid signature")
