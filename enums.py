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

"""Enumerations for the ShipRocket connector.

This module defines the enums shared by the webhook models, the order saga
and the sync endpoints.
"""

import enum


class OrderStatus(str, enum.Enum):
  SUCCESS = "SUCCESS"
  FAILED = "FAILED"
  PENDING = "PENDING"


class PaymentType(str, enum.Enum):
  CASH_ON_DELIVERY = "CASH_ON_DELIVERY"
  PREPAID = "PREPAID"


class ProductFilter(str, enum.Enum):
  """Upstream axis used when the provider asks for a collection's products."""

  CATEGORY = "category"
  COLLECTION = "collection"


class SyncType(str, enum.Enum):
  PRODUCTS = "products"
  COLLECTIONS = "collections"
  ALL = "all"
