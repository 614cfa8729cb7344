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

"""Shared configuration and startup logic for the connector.

Every setting is an absl flag whose default is read from the environment
(a `.env` file is honoured), so the server can be configured either way.
"""

import contextlib
import logging
import os
from typing import Optional

from absl import flags
from dotenv import load_dotenv
from enums import ProductFilter
from exceptions import ConfigurationError
from fastapi import FastAPI
from pydantic import BaseModel
from rate_limiter import RateLimiter
from retry_queue import WebhookRetryQueue
from signing import HmacSigner
from signing import SignatureEncoding

logger = logging.getLogger(__name__)

load_dotenv()

FLAGS = flags.FLAGS

DEFAULT_SHIPROCKET_API_BASE_URL = "https://checkout-api.shiprocket.com"
DEFAULT_CHANNEL = "default-channel"

# ShipRocket endpoint paths, relative to the API base URL.
ACCESS_TOKEN_ENDPOINT = "/api/v1/access-token/checkout"
PRODUCT_WEBHOOK_ENDPOINT = "/wh/v1/custom/product"
COLLECTION_WEBHOOK_ENDPOINT = "/wh/v1/custom/collection"
ORDER_DETAILS_ENDPOINT = "/api/v1/custom-platform-order/details"

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 100

# Define flags only if they haven't been defined yet (to avoid duplicates
# during tests or re-imports)
try:
  flags.DEFINE_string(
      "saleor_api_url",
      os.getenv("SALEOR_API_URL", ""),
      "Saleor GraphQL endpoint",
  )
  flags.DEFINE_string(
      "saleor_app_token",
      os.getenv("SALEOR_APP_TOKEN", ""),
      "Bearer token for the Saleor API",
  )
  flags.DEFINE_string(
      "shiprocket_api_key", os.getenv("SHIPROCKET_API_KEY", ""), "API key"
  )
  flags.DEFINE_string(
      "shiprocket_secret_key",
      os.getenv("SHIPROCKET_SECRET_KEY", ""),
      "Secret shared with ShipRocket for request signatures",
  )
  flags.DEFINE_string(
      "shiprocket_api_base_url",
      os.getenv("SHIPROCKET_API_BASE_URL", DEFAULT_SHIPROCKET_API_BASE_URL),
      "ShipRocket checkout API base URL",
  )
  flags.DEFINE_string(
      "secret_key",
      os.getenv("SECRET_KEY", ""),
      "Secret for Saleor webhook signatures and admin bearer auth",
  )
  flags.DEFINE_string(
      "storefront_url",
      os.getenv("STOREFRONT_URL", ""),
      "Default checkout redirect URL",
  )
  flags.DEFINE_list(
      "allowed_origins",
      os.getenv("ALLOWED_ORIGINS", ""),
      "Origins allowed to call the checkout endpoints",
  )
  flags.DEFINE_string(
      "default_channel",
      os.getenv("DEFAULT_CHANNEL", DEFAULT_CHANNEL),
      "Saleor channel used when a request does not name one",
  )
  flags.DEFINE_enum(
      "product_filter",
      os.getenv("PRODUCT_FILTER", ProductFilter.CATEGORY.value),
      [f.value for f in ProductFilter],
      "Upstream axis for collection product listings",
  )
  flags.DEFINE_float(
      "request_timeout",
      float(os.getenv("REQUEST_TIMEOUT", "20")),
      "Timeout in seconds for outbound HTTP calls",
  )
  flags.DEFINE_string(
      "log_level", os.getenv("LOG_LEVEL", "INFO"), "Logging verbosity"
  )
  flags.DEFINE_integer(
      "port", int(os.getenv("PORT", "8000")), "Port to run the server on"
  )
except flags.DuplicateFlagError:
  pass


class Settings(BaseModel):
  """Resolved connector configuration."""

  saleor_api_url: str = ""
  saleor_app_token: str = ""
  shiprocket_api_key: str = ""
  shiprocket_secret_key: str = ""
  shiprocket_api_base_url: str = DEFAULT_SHIPROCKET_API_BASE_URL
  secret_key: str = ""
  storefront_url: str = ""
  allowed_origins: list[str] = []
  default_channel: str = DEFAULT_CHANNEL
  product_filter: ProductFilter = ProductFilter.CATEGORY
  request_timeout: float = 20.0
  log_level: str = "INFO"
  port: int = 8000

  def require(self, *names: str) -> None:
    """Raises ConfigurationError naming every empty setting in `names`."""
    missing = [name for name in names if not getattr(self, name)]
    if missing:
      raise ConfigurationError(
          "Missing required configuration: " + ", ".join(missing)
      )


def _flag_value(name: str):
  # Reading through the Flag object works before absl has parsed argv,
  # e.g. when the app is served by `uvicorn server:app` or under pytest.
  return FLAGS[name].value


def load_settings() -> Settings:
  """Builds Settings from the absl flags."""
  origins = _flag_value("allowed_origins") or []
  return Settings(
      saleor_api_url=_flag_value("saleor_api_url") or "",
      saleor_app_token=_flag_value("saleor_app_token") or "",
      shiprocket_api_key=_flag_value("shiprocket_api_key") or "",
      shiprocket_secret_key=_flag_value("shiprocket_secret_key") or "",
      shiprocket_api_base_url=(
          _flag_value("shiprocket_api_base_url")
          or DEFAULT_SHIPROCKET_API_BASE_URL
      ),
      secret_key=_flag_value("secret_key") or "",
      storefront_url=_flag_value("storefront_url") or "",
      allowed_origins=[o.strip() for o in origins if o.strip()],
      default_channel=_flag_value("default_channel") or DEFAULT_CHANNEL,
      product_filter=ProductFilter(_flag_value("product_filter")),
      request_timeout=_flag_value("request_timeout"),
      log_level=_flag_value("log_level") or "INFO",
      port=_flag_value("port"),
  )


def shiprocket_signer(settings: Settings) -> HmacSigner:
  """Signer for traffic exchanged with ShipRocket (base64 digests)."""
  return HmacSigner(settings.shiprocket_secret_key, SignatureEncoding.BASE64)


def saleor_signer(settings: Settings) -> HmacSigner:
  """Signer for webhooks sent by Saleor (hex digests)."""
  return HmacSigner(settings.secret_key, SignatureEncoding.HEX)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI, settings: Optional[Settings] = None):
  """Creates the process-wide components and fails fast on bad config."""
  settings = settings or load_settings()
  settings.require(
      "shiprocket_api_key", "shiprocket_secret_key", "secret_key"
  )
  if not settings.allowed_origins:
    logger.warning(
        "No ALLOWED_ORIGINS configured. Browser checkout requests will be"
        " blocked."
    )
  logging.getLogger().setLevel(settings.log_level.upper())

  app.state.settings = settings
  app.state.shiprocket_signer = shiprocket_signer(settings)
  app.state.saleor_signer = saleor_signer(settings)
  app.state.retry_queue = WebhookRetryQueue()
  app.state.rate_limiter = RateLimiter(limit=10, window_seconds=60)
  logger.info(
      "Connector started (channel=%s, product_filter=%s)",
      settings.default_channel,
      settings.product_filter.value,
  )
  yield
  pending = len(app.state.retry_queue)
  if pending:
    # The queue lives in memory only; these entries are gone after exit.
    logger.warning("Shutting down with %d failed webhooks unretried", pending)
