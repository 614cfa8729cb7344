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

"""Checkout routes called by the storefront."""

import logging
from typing import Any

import dependencies
from exceptions import InvalidRequestError
from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from fastapi import Path
from fastapi.responses import JSONResponse
from services.checkout_service import CheckoutService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["checkout"])

_STATUS_BY_CODE = {
    "INVALID_REQUEST": 400,
    "UPSTREAM_ERROR": 502,
}


@router.post(
    "/authorize",
    summary="Issue Checkout Token",
    dependencies=[
        Depends(dependencies.enforce_allowed_origin),
        Depends(dependencies.enforce_rate_limit),
    ],
)
async def authorize_checkout(
    request: dict[str, Any] = Body(...),
    checkout_service: CheckoutService = Depends(
        dependencies.get_checkout_service
    ),
):
  """Exchanges a storefront cart for a ShipRocket checkout token."""
  cart_data = request.get("cart_data")
  if not cart_data:
    raise InvalidRequestError("Missing cart_data in request body")

  items = cart_data.get("items") if isinstance(cart_data, dict) else None
  logger.info(
      "Received checkout authorization request (items=%d,"
      " has_redirect_url=%s)",
      len(items) if isinstance(items, list) else 0,
      bool(request.get("redirect_url")),
  )

  result = await checkout_service.generate_checkout_token(request)
  if result.success:
    status_code = 200
  else:
    status_code = _STATUS_BY_CODE.get(result.code, 500)
  return JSONResponse(
      status_code=status_code, content=result.model_dump(exclude_none=True)
  )


@router.get("/order/{order_id}", summary="Get ShipRocket Order")
async def get_order(
    order_id: str = Path(..., min_length=1),
    checkout_service: CheckoutService = Depends(
        dependencies.get_checkout_service
    ),
):
  result = await checkout_service.fetch_order_details(order_id)
  if not result.success:
    return JSONResponse(
        status_code=502, content={"success": False, "error": result.error}
    )
  return {"success": True, "order": result.order}
