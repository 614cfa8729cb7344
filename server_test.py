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

"""HTTP tests for the connector routes."""

import json

from absl.testing import absltest
import config
import dependencies
from fakes import FakeSaleorClient
from fakes import FakeShiprocketClient
from fakes import make_product
from fastapi.testclient import TestClient
from models import SaleorCategory
from models import SaleorCollection
from models import ShippingMethod
from models import ShiprocketOrderWebhook
from models import VariantDetails
from rate_limiter import RateLimiter
from retry_queue import WebhookRetryQueue
from server import app
from services.sync_service import SyncService

PREFIX = "/api/shiprocket"
SHOP = "https://shop.example.com"
ADMIN = {"Authorization": "Bearer saleor-secret"}

ORDER_WEBHOOK = {
    "order_id": "SR-1",
    "status": "SUCCESS",
    "cart_data": {"items": [{"variant_id": "V1", "quantity": 2}]},
    "email": "a@b.com",
    "phone": "123",
    "payment_type": "PREPAID",
    "total_amount_payable": 500,
}


class ServerTest(absltest.TestCase):
  """Routes exercised against fake Saleor and ShipRocket clients."""

  def setUp(self) -> None:
    super().setUp()
    self.settings = config.Settings(
        shiprocket_api_key="sr-key",
        shiprocket_secret_key="sr-secret",
        secret_key="saleor-secret",
        storefront_url=SHOP,
        allowed_origins=[SHOP],
    )
    app.state.settings = self.settings
    app.state.shiprocket_signer = config.shiprocket_signer(self.settings)
    app.state.saleor_signer = config.saleor_signer(self.settings)
    app.state.retry_queue = WebhookRetryQueue()
    app.state.rate_limiter = RateLimiter(limit=10, window_seconds=60)

    self.saleor = FakeSaleorClient(
        products=[make_product(i) for i in range(1, 6)],
        categories=[SaleorCategory(id="C1", name="Flowers")],
        collections_=[SaleorCollection(id="K1", name="Summer")],
        variants={"V1": VariantDetails(id="V1", quantity_available=10)},
        shipping_methods=[ShippingMethod(id="SM1")],
    )
    self.shiprocket = FakeShiprocketClient()

    app.dependency_overrides[dependencies.get_saleor_client] = (
        lambda: self.saleor
    )
    app.dependency_overrides[dependencies.get_shiprocket_client] = (
        lambda: self.shiprocket
    )
    app.dependency_overrides[dependencies.get_sync_service] = (
        lambda: SyncService(self.shiprocket, delay_seconds=0)
    )

    self.client = TestClient(app)

  def tearDown(self) -> None:
    app.dependency_overrides.clear()
    super().tearDown()

  @property
  def queue(self) -> WebhookRetryQueue:
    return app.state.retry_queue

  def _saleor_post(self, path, payload, signature=None):
    body = json.dumps(payload).encode()
    if signature is None:
      signature = app.state.saleor_signer.sign(body)
    return self.client.post(
        f"{PREFIX}/webhooks/{path}",
        content=body,
        headers={
            "Content-Type": "application/json",
            "saleor-signature": signature,
        },
    )

  # --- Catalog ---

  def test_list_products_defaults(self):
    response = self.client.get(f"{PREFIX}/catalog/products")

    self.assertEqual(response.status_code, 200)
    data = response.json()
    self.assertLen(data["products"], 5)
    self.assertEqual(
        data["pagination"],
        {
            "current_page": 1,
            "total_pages": 1,
            "total_count": 5,
            "per_page": 100,
        },
    )
    first, after, channel = self.saleor.calls["fetch_products_page"][0]
    self.assertEqual((first, after, channel), (100, None, "default-channel"))

  def test_list_products_normalizes_query(self):
    response = self.client.get(
        f"{PREFIX}/catalog/products",
        params={"page": 0, "limit": 500, "channel": "channel-in"},
    )

    pagination = response.json()["pagination"]
    self.assertEqual(pagination["current_page"], 1)
    self.assertEqual(pagination["per_page"], 100)
    self.assertEqual(
        self.saleor.calls["fetch_products_page"][0][2], "channel-in"
    )

  def test_list_products_second_page(self):
    response = self.client.get(
        f"{PREFIX}/catalog/products", params={"page": 2, "limit": 2}
    )

    data = response.json()
    self.assertEqual([p["id"] for p in data["products"]], ["P3", "P4"])
    self.assertEqual(data["pagination"]["total_pages"], 3)

  def test_collections_and_categories_list_categories(self):
    for path in ("collections", "categories"):
      with self.subTest(path=path):
        response = self.client.get(f"{PREFIX}/catalog/{path}")

        self.assertEqual(response.status_code, 200)
        collections = response.json()["collections"]
        self.assertEqual([c["id"] for c in collections], ["C1"])

  def test_collection_products(self):
    response = self.client.get(f"{PREFIX}/catalog/collections/C1/products")

    self.assertEqual(response.status_code, 200)
    self.assertLen(response.json()["products"], 5)
    self.assertEqual(
        self.saleor.calls["fetch_products_by_category_page"][0][0], "C1"
    )

  def test_catalog_upstream_failure_is_502(self):
    self.saleor.fail["fetch_products_page"] = "boom"

    response = self.client.get(f"{PREFIX}/catalog/products")

    self.assertEqual(response.status_code, 502)
    self.assertEqual(
        response.json(),
        {"detail": "Saleor error: boom", "code": "UPSTREAM_ERROR"},
    )

  # --- Checkout ---

  def test_authorize_issues_token(self):
    response = self.client.post(
        f"{PREFIX}/checkout/authorize",
        json={"cart_data": {"items": [{"variant_id": "V1", "quantity": 1}]}},
        headers={"Origin": SHOP},
    )

    self.assertEqual(response.status_code, 200)
    data = response.json()
    self.assertTrue(data["success"])
    self.assertEqual(data["token"], "tok-123")
    self.assertEqual(self.shiprocket.calls["generate_access_token"][0][1], SHOP)

  def test_authorize_requires_cart_data(self):
    response = self.client.post(
        f"{PREFIX}/checkout/authorize", json={"redirect_url": SHOP}
    )

    self.assertEqual(response.status_code, 400)
    self.assertEqual(response.json()["code"], "INVALID_REQUEST")

  def test_authorize_rejects_invalid_cart(self):
    response = self.client.post(
        f"{PREFIX}/checkout/authorize",
        json={"cart_data": {"items": [{"variant_id": "V1", "quantity": 0}]}},
    )

    self.assertEqual(response.status_code, 400)
    self.assertEqual(response.json()["error"], "Invalid quantity in cart item")
    self.assertEmpty(self.shiprocket.calls["generate_access_token"])

  def test_authorize_upstream_failure_is_502(self):
    self.shiprocket.fail["generate_access_token"] = "HTTP 500"

    response = self.client.post(
        f"{PREFIX}/checkout/authorize",
        json={"cart_data": {"items": [{"variant_id": "V1", "quantity": 1}]}},
    )

    self.assertEqual(response.status_code, 502)
    self.assertFalse(response.json()["success"])

  def test_authorize_rejects_unknown_origin(self):
    response = self.client.post(
        f"{PREFIX}/checkout/authorize",
        json={"cart_data": {"items": [{"variant_id": "V1", "quantity": 1}]}},
        headers={"Origin": "https://evil.example.com"},
    )

    self.assertEqual(response.status_code, 403)
    self.assertEqual(response.json()["code"], "ORIGIN_NOT_ALLOWED")

  def test_authorize_is_rate_limited_per_client(self):
    body = {"cart_data": {"items": [{"variant_id": "V1", "quantity": 1}]}}
    headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}

    statuses = [
        self.client.post(
            f"{PREFIX}/checkout/authorize", json=body, headers=headers
        ).status_code
        for _ in range(11)
    ]

    self.assertEqual(statuses, [200] * 10 + [429])
    other = self.client.post(
        f"{PREFIX}/checkout/authorize",
        json=body,
        headers={"X-Forwarded-For": "198.51.100.2"},
    )
    self.assertEqual(other.status_code, 200)

  def test_order_details(self):
    response = self.client.get(f"{PREFIX}/checkout/order/SR-1")

    self.assertEqual(response.status_code, 200)
    self.assertEqual(
        response.json(),
        {"success": True, "order": {"result": {"status": "SUCCESS"}}},
    )

  def test_order_details_failure_is_502(self):
    self.shiprocket.fail["get_order_details"] = "HTTP 404"

    response = self.client.get(f"{PREFIX}/checkout/order/SR-404")

    self.assertEqual(response.status_code, 502)
    self.assertFalse(response.json()["success"])

  # --- ShipRocket order webhook ---

  def test_order_placed_unsigned_is_accepted(self):
    response = self.client.post(
        f"{PREFIX}/webhooks/order-placed", json=ORDER_WEBHOOK
    )

    self.assertEqual(response.status_code, 200)
    data = response.json()
    self.assertTrue(data["success"])
    self.assertEqual(data["order_id"], "T3JkZXI6MQ==")
    self.assertEqual(data["order_number"], "1001")
    self.assertEqual(
        self.saleor.calls["mark_order_as_paid"], [("T3JkZXI6MQ==", "SR-1")]
    )

  def test_order_placed_checks_signature_when_present(self):
    body = json.dumps(ORDER_WEBHOOK).encode()
    signature = app.state.shiprocket_signer.sign(body)

    good = self.client.post(
        f"{PREFIX}/webhooks/order-placed",
        content=body,
        headers={"X-Api-HMAC-SHA256": signature},
    )
    bad = self.client.post(
        f"{PREFIX}/webhooks/order-placed",
        content=body,
        headers={"X-Api-HMAC-SHA256": "bm90IGEgc2lnbmF0dXJl"},
    )

    self.assertEqual(good.status_code, 200)
    self.assertEqual(bad.status_code, 401)
    self.assertLen(self.saleor.calls["create_draft_order"], 1)

  def test_order_placed_empty_signature_counts_as_unsigned(self):
    response = self.client.post(
        f"{PREFIX}/webhooks/order-placed",
        content=json.dumps(ORDER_WEBHOOK).encode(),
        headers={"X-Api-HMAC-SHA256": ""},
    )

    self.assertEqual(response.status_code, 200)
    self.assertTrue(response.json()["success"])

  def test_order_placed_accepts_nulls_and_numbers(self):
    payload = {
        **ORDER_WEBHOOK,
        "email": None,
        "phone": 9876543210,
        "payment_type": None,
        "total_amount_payable": None,
        "shipping_address": {
            "address_line_1": "12 MG Road",
            "city": "Bengaluru",
            "state": None,
            "pincode": 560001,
        },
    }

    response = self.client.post(
        f"{PREFIX}/webhooks/order-placed", json=payload
    )

    self.assertEqual(response.status_code, 200)
    self.assertTrue(response.json()["success"])
    draft_input = self.saleor.calls["create_draft_order"][0][0]
    self.assertIsNone(draft_input["userEmail"])
    self.assertEqual(draft_input["shippingAddress"]["postalCode"], "560001")
    self.assertEqual(draft_input["shippingAddress"]["countryArea"], "")
    self.assertEmpty(self.saleor.calls["mark_order_as_paid"])

  def test_order_placed_without_status_is_acknowledged(self):
    payload = {k: v for k, v in ORDER_WEBHOOK.items() if k != "status"}

    response = self.client.post(
        f"{PREFIX}/webhooks/order-placed", json=payload
    )

    self.assertEqual(response.status_code, 200)
    self.assertFalse(response.json()["success"])
    self.assertEmpty(self.queue)

  def test_order_placed_rejects_malformed_payloads(self):
    malformed = [
        b"{not json",
        json.dumps({"status": "SUCCESS"}).encode(),
        json.dumps({**ORDER_WEBHOOK, "order_id": ""}).encode(),
        json.dumps({**ORDER_WEBHOOK, "cart_data": {}}).encode(),
    ]
    for body in malformed:
      with self.subTest(body=body):
        response = self.client.post(
            f"{PREFIX}/webhooks/order-placed", content=body
        )
        self.assertEqual(response.status_code, 400)

  def test_order_placed_failure_is_acknowledged_and_queued(self):
    self.saleor.fail["create_draft_order"] = "down"

    response = self.client.post(
        f"{PREFIX}/webhooks/order-placed", json=ORDER_WEBHOOK
    )

    self.assertEqual(response.status_code, 200)
    self.assertFalse(response.json()["success"])
    self.assertEqual(self.queue.get("SR-1").attempts, 1)

  def test_order_placed_non_success_status_is_not_queued(self):
    response = self.client.post(
        f"{PREFIX}/webhooks/order-placed",
        json={**ORDER_WEBHOOK, "status": "FAILED"},
    )

    self.assertEqual(response.status_code, 200)
    self.assertFalse(response.json()["success"])
    self.assertEmpty(self.queue)

  # --- Saleor webhooks ---

  def test_product_updated_pushes_product(self):
    product = make_product(1).model_dump(mode="json", by_alias=True)

    response = self._saleor_post("saleor-product-updated", {"product": product})

    self.assertEqual(response.status_code, 200)
    self.assertTrue(response.json()["success"])
    self.assertEqual(self.shiprocket.calls["sync_product"][0][0].id, "P1")

  def test_saleor_webhooks_require_signature(self):
    payload = {"product": {"id": "P1"}}
    for signature in ("", "deadbeef"):
      with self.subTest(signature=signature):
        response = self._saleor_post(
            "saleor-product-updated", payload, signature=signature
        )
        self.assertEqual(response.status_code, 401)
    self.assertEmpty(self.shiprocket.calls["sync_product"])

  def test_product_updated_without_product_is_400(self):
    response = self._saleor_post("saleor-product-updated", {"other": {}})

    self.assertEqual(response.status_code, 400)

  def test_product_without_variants_is_acknowledged(self):
    response = self._saleor_post(
        "saleor-product-updated", {"product": {"id": "P1", "variants": []}}
    )

    self.assertEqual(response.status_code, 200)
    self.assertEqual(response.json()["error"], "Product has no variants")

  def test_variant_updated_pushes_parent_product(self):
    product = make_product(2).model_dump(mode="json", by_alias=True)

    response = self._saleor_post(
        "saleor-product-variant-updated",
        {"productVariant": {"id": "V2", "product": product}},
    )

    self.assertEqual(response.status_code, 200)
    self.assertEqual(self.shiprocket.calls["sync_product"][0][0].id, "P2")

  def test_collection_and_category_updates(self):
    self._saleor_post(
        "saleor-collection-updated",
        {"collection": {"id": "K1", "name": "Summer"}},
    )
    self._saleor_post(
        "saleor-category-updated", {"category": {"id": "C1", "name": "Roses"}}
    )

    pushed = [call[0] for call in self.shiprocket.calls["sync_collection"]]
    self.assertEqual(
        [(c.id, c.title) for c in pushed], [("K1", "Summer"), ("C1", "Roses")]
    )

  # --- Retry queue ---

  def test_admin_routes_require_bearer(self):
    for method, path in (
        ("get", "/webhooks/status"),
        ("post", "/webhooks/retry"),
        ("post", "/webhooks/retry/SR-1"),
        ("post", "/sync/bulk"),
        ("get", "/sync/manual"),
    ):
      with self.subTest(path=path):
        response = getattr(self.client, method)(
            f"{PREFIX}{path}", headers={"Authorization": "Bearer wrong"}
        )
        self.assertEqual(response.status_code, 401)

  def test_status_lists_queue(self):
    self.queue.add_failure(
        ShiprocketOrderWebhook.model_validate(ORDER_WEBHOOK), "down"
    )

    response = self.client.get(f"{PREFIX}/webhooks/status", headers=ADMIN)

    self.assertEqual(response.status_code, 200)
    data = response.json()
    self.assertEqual(data["queue_size"], 1)
    self.assertEqual(data["items"][0]["order_id"], "SR-1")

  def test_retry_one_uses_queued_payload(self):
    self.queue.add_failure(
        ShiprocketOrderWebhook.model_validate(ORDER_WEBHOOK), "down"
    )

    response = self.client.post(
        f"{PREFIX}/webhooks/retry/SR-1", headers=ADMIN
    )

    self.assertEqual(response.status_code, 200)
    self.assertTrue(response.json()["success"])
    self.assertNotIn("SR-1", self.queue)

  def test_retry_one_accepts_body(self):
    response = self.client.post(
        f"{PREFIX}/webhooks/retry/SR-1", json=ORDER_WEBHOOK, headers=ADMIN
    )

    self.assertEqual(response.status_code, 200)
    self.assertLen(self.saleor.calls["create_draft_order"], 1)

  def test_retry_one_unknown_order_is_404(self):
    response = self.client.post(
        f"{PREFIX}/webhooks/retry/SR-404", headers=ADMIN
    )

    self.assertEqual(response.status_code, 404)

  def test_retry_one_failure_is_400_and_counted(self):
    self.queue.add_failure(
        ShiprocketOrderWebhook.model_validate(ORDER_WEBHOOK), "down"
    )
    self.saleor.fail["complete_draft_order"] = "still down"

    response = self.client.post(
        f"{PREFIX}/webhooks/retry/SR-1", headers=ADMIN
    )

    self.assertEqual(response.status_code, 400)
    self.assertIn("still down", response.json()["error"])
    self.assertEqual(self.queue.get("SR-1").attempts, 2)

  def test_retry_all_skips_entries_in_cooldown(self):
    self.queue.add_failure(
        ShiprocketOrderWebhook.model_validate(ORDER_WEBHOOK), "down"
    )

    response = self.client.post(f"{PREFIX}/webhooks/retry", headers=ADMIN)

    self.assertEqual(response.status_code, 200)
    self.assertEqual(response.json()["retried"], 0)
    self.assertEqual(response.json()["queue_size"], 1)

  # --- Bulk sync ---

  def test_bulk_sync_all(self):
    response = self.client.post(
        f"{PREFIX}/sync/bulk", json={"type": "all"}, headers=ADMIN
    )

    self.assertEqual(response.status_code, 200)
    results = response.json()["results"]
    self.assertEqual(results["products"]["success"], 5)
    self.assertEqual(results["collections"]["success"], 1)
    self.assertLen(self.shiprocket.calls["sync_product"], 5)

  def test_bulk_sync_defaults_to_all_and_filters_type(self):
    default = self.client.post(f"{PREFIX}/sync/bulk", headers=ADMIN)
    products_only = self.client.post(
        f"{PREFIX}/sync/bulk", json={"type": "products"}, headers=ADMIN
    )

    self.assertIsNotNone(default.json()["results"]["collections"])
    self.assertIsNone(products_only.json()["results"]["collections"])

  def test_bulk_sync_rejects_unknown_type(self):
    response = self.client.post(
        f"{PREFIX}/sync/bulk", json={"type": "orders"}, headers=ADMIN
    )

    self.assertEqual(response.status_code, 400)

  def test_manual_sync_reports_counts_and_sample(self):
    response = self.client.get(
        f"{PREFIX}/sync/manual",
        params={"channel": "channel-in"},
        headers=ADMIN,
    )

    self.assertEqual(response.status_code, 200)
    data = response.json()
    self.assertEqual(data["channel"], "channel-in")
    self.assertEqual(data["counts"], {"products": 5, "categories": 1})
    self.assertEqual(
        data["sample"]["products"][0],
        {"id": "P1", "title": "Product 1", "variants": 1},
    )
    self.assertLen(data["sample"]["products"], 3)
    self.assertEqual(
        data["sample"]["categories"], [{"id": "C1", "title": "Flowers"}]
    )
    self.assertEmpty(self.shiprocket.calls["sync_product"])

  def test_manual_sync_accepts_post_and_default_channel(self):
    response = self.client.post(f"{PREFIX}/sync/manual", headers=ADMIN)

    self.assertEqual(response.status_code, 200)
    self.assertEqual(response.json()["channel"], "default-channel")

  def test_manual_sync_saleor_failure_is_502(self):
    self.saleor.fail["fetch_categories_page"] = "unreachable"

    response = self.client.get(f"{PREFIX}/sync/manual", headers=ADMIN)

    self.assertEqual(response.status_code, 502)
    self.assertEqual(response.json()["code"], "UPSTREAM_ERROR")

  def test_health(self):
    self.assertEqual(self.client.get("/api/health").json(), {"status": "ok"})


if __name__ == "__main__":
  absltest.main()
