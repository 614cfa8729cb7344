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

"""Tests for the Saleor GraphQL client."""

import asyncio
import json

from absl.testing import absltest
from exceptions import UpstreamError
import httpx
from saleor_client import SaleorClient

API_URL = "https://saleor.example.com/graphql/"


class SaleorClientTest(absltest.TestCase):

  def setUp(self):
    super().setUp()
    self.requests = []
    self.responses = []

  def _client(self, token="app-token"):
    def handler(request: httpx.Request) -> httpx.Response:
      self.requests.append(request)
      return self.responses.pop(0)

    return SaleorClient(
        API_URL, token, transport=httpx.MockTransport(handler)
    )

  def _respond(self, data=None, errors=None, status_code=200):
    body = {"data": data}
    if errors is not None:
      body["errors"] = errors
    self.responses.append(httpx.Response(status_code, json=body))

  def test_execute_posts_query_with_bearer_token(self):
    self._respond({"ok": True})

    data = asyncio.run(self._client().execute("query Q { ok }", {"a": 1}))

    self.assertEqual(data, {"ok": True})
    request = self.requests[0]
    self.assertEqual(request.headers["Authorization"], "Bearer app-token")
    self.assertEqual(
        json.loads(request.content),
        {"query": "query Q { ok }", "variables": {"a": 1}},
    )

  def test_graphql_errors_raise_upstream_error(self):
    self._respond(None, errors=[{"message": "Permission denied"}])

    with self.assertRaisesRegex(UpstreamError, "Permission denied"):
      asyncio.run(self._client().execute("query Q { ok }"))

  def test_http_error_status_raises_upstream_error(self):
    self.responses.append(httpx.Response(503, text="unavailable"))

    with self.assertRaises(UpstreamError) as ctx:
      asyncio.run(self._client().execute("query Q { ok }"))
    self.assertEqual(ctx.exception.status_code, 502)
    self.assertEqual(ctx.exception.upstream, "Saleor")

  def test_transport_failure_raises_upstream_error(self):
    def handler(request):
      raise httpx.ConnectError("refused", request=request)

    client = SaleorClient(API_URL, "t", transport=httpx.MockTransport(handler))
    with self.assertRaisesRegex(UpstreamError, "request failed"):
      asyncio.run(client.execute("query Q { ok }"))

  def test_missing_api_url_raises_upstream_error(self):
    with self.assertRaisesRegex(UpstreamError, "not configured"):
      asyncio.run(SaleorClient("", "t").execute("query Q { ok }"))

  def test_fetch_products_page_parses_connection(self):
    self._respond({
        "products": {
            "totalCount": 3,
            "pageInfo": {"hasNextPage": True, "endCursor": "YXJyYXk6MQ=="},
            "edges": [
                {"node": {"id": "P1", "name": "Rose", "variants": None}},
                {"node": {"id": "P2", "name": "Tulip", "variants": []}},
            ],
        }
    })

    page = asyncio.run(
        self._client().fetch_products_page(2, None, "default-channel")
    )

    self.assertEqual([p.id for p in page.nodes], ["P1", "P2"])
    self.assertEqual(page.total_count, 3)
    self.assertTrue(page.has_next_page)
    self.assertEqual(page.end_cursor, "YXJyYXk6MQ==")
    variables = json.loads(self.requests[0].content)["variables"]
    self.assertEqual(
        variables, {"first": 2, "after": None, "channel": "default-channel"}
    )

  def test_fetch_products_by_collection_reads_nested_connection(self):
    self._respond({
        "collection": {
            "products": {
                "totalCount": 1,
                "pageInfo": {"hasNextPage": False, "endCursor": None},
                "edges": [{"node": {"id": "P1"}}],
            }
        }
    })

    page = asyncio.run(
        self._client().fetch_products_by_collection_page(
            "Q29sbGVjdGlvbjox", 10, None, "default-channel"
        )
    )

    self.assertEqual([p.id for p in page.nodes], ["P1"])
    self.assertFalse(page.has_next_page)

  def test_unknown_collection_is_an_empty_page(self):
    self._respond({"collection": None})

    page = asyncio.run(
        self._client().fetch_products_by_collection_page(
            "missing", 10, None, "default-channel"
        )
    )

    self.assertEmpty(page.nodes)
    self.assertEqual(page.total_count, 0)

  def test_get_variant_returns_none_when_missing(self):
    self._respond({"productVariant": None})

    variant = asyncio.run(self._client().get_variant("V404", "default"))

    self.assertIsNone(variant)

  def test_get_shipping_methods_uses_first_zone(self):
    self._respond({
        "shippingZones": {
            "edges": [
                {"node": {"id": "Z1", "shippingMethods": [
                    {"id": "SM1", "name": "Standard"},
                    {"id": "SM2", "name": "Express"},
                ]}},
                {"node": {"id": "Z2", "shippingMethods": [{"id": "SM3"}]}},
            ]
        }
    })

    methods = asyncio.run(self._client().get_shipping_methods("default"))

    self.assertEqual([m.id for m in methods], ["SM1", "SM2"])

  def test_mutation_errors_raise_upstream_error(self):
    self._respond({
        "draftOrderCreate": {
            "order": None,
            "errors": [
                {"field": "lines", "message": "Variant not available"},
                {"field": "email", "message": "Invalid email"},
            ],
        }
    })

    with self.assertRaisesRegex(
        UpstreamError, "Variant not available, Invalid email"
    ):
      asyncio.run(self._client().create_draft_order({"lines": []}))

  def test_create_draft_order_requires_order_id(self):
    self._respond({"draftOrderCreate": {"order": None, "errors": []}})

    with self.assertRaisesRegex(UpstreamError, "No order ID returned"):
      asyncio.run(self._client().create_draft_order({"lines": []}))

  def test_complete_draft_order_returns_number_as_string(self):
    self._respond({
        "draftOrderComplete": {
            "order": {"id": "T3JkZXI6MQ==", "number": 1001},
            "errors": [],
        }
    })

    completed = asyncio.run(
        self._client().complete_draft_order("T3JkZXI6MQ==")
    )

    self.assertEqual(completed.id, "T3JkZXI6MQ==")
    self.assertEqual(completed.number, "1001")

  def test_mark_order_as_paid_sends_transaction_reference(self):
    self._respond({"orderMarkAsPaid": {"order": {"id": "O1"}, "errors": []}})

    asyncio.run(self._client().mark_order_as_paid("O1", "SR-1"))

    variables = json.loads(self.requests[0].content)["variables"]
    self.assertEqual(variables, {"id": "O1", "transactionReference": "SR-1"})


if __name__ == "__main__":
  absltest.main()
