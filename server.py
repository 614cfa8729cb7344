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

"""Saleor to ShipRocket Checkout connector (Python/FastAPI)."""

import logging
from typing import Sequence

from absl import app as absl_app
import config
from exceptions import ConnectorError
from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from routes.catalog import router as catalog_router
from routes.checkout import router as checkout_router
from routes.sync import router as sync_router
from routes.webhooks import router as webhooks_router
import uvicorn

API_PREFIX = "/api/shiprocket"

# --- App Setup ---

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="ShipRocket Saleor Connector",
    version="0.1.0",
    description="Catalog, checkout and order bridge between Saleor and"
    " ShipRocket Checkout",
    lifespan=config.lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.load_settings().allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(ConnectorError)
async def connector_exception_handler(request: Request, exc: ConnectorError):
  """Converts connector exceptions to JSON responses."""
  del request  # Unused.
  if exc.status_code >= 500:
    logger.error("%s: %s", exc.code, exc.message)
  return JSONResponse(
      status_code=exc.status_code,
      content={"detail": exc.message, "code": exc.code},
  )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
):
  """Malformed requests are answered with 400, not FastAPI's 422."""
  del request  # Unused.
  return JSONResponse(
      status_code=400,
      content={"detail": str(exc.errors()), "code": "INVALID_REQUEST"},
  )


app.include_router(catalog_router, prefix=API_PREFIX)
app.include_router(checkout_router, prefix=API_PREFIX)
app.include_router(webhooks_router, prefix=API_PREFIX)
app.include_router(sync_router, prefix=API_PREFIX)


@app.get("/api/health", summary="Health Check")
async def health():
  return {"status": "ok"}


def main(argv: Sequence[str]) -> None:
  """Main entry point for the connector server."""
  del argv  # Unused.
  uvicorn.run(app, host="0.0.0.0", port=config.FLAGS.port)


def run() -> None:
  absl_app.run(main)


if __name__ == "__main__":
  run()
