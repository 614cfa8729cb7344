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

"""GraphQL documents sent to the Saleor API."""

PRODUCT_FIELDS = """
fragment ProductFields on Product {
  id
  name
  description
  created
  updatedAt
  category { id name }
  thumbnail { url }
  metadata { key value }
  variants {
    id
    name
    sku
    quantityAvailable
    pricing { price { gross { amount currency } } }
    weight { value unit }
    media { url }
  }
}
"""

PAGE_INFO = "pageInfo { hasNextPage endCursor }"

FETCH_PRODUCTS = (
    """
query FetchProducts($first: Int!, $after: String, $channel: String) {
  products(first: $first, after: $after, channel: $channel) {
    totalCount
    %s
    edges { node { ...ProductFields } }
  }
}
"""
    % PAGE_INFO
    + PRODUCT_FIELDS
)

FETCH_PRODUCTS_BY_CATEGORY = (
    """
query FetchProductsByCategory(
  $categoryId: ID!, $first: Int!, $after: String, $channel: String
) {
  products(
    first: $first
    after: $after
    channel: $channel
    filter: { categories: [$categoryId] }
  ) {
    totalCount
    %s
    edges { node { ...ProductFields } }
  }
}
"""
    % PAGE_INFO
    + PRODUCT_FIELDS
)

FETCH_PRODUCTS_BY_COLLECTION = (
    """
query FetchProductsByCollection(
  $collectionId: ID!, $first: Int!, $after: String, $channel: String
) {
  collection(id: $collectionId, channel: $channel) {
    products(first: $first, after: $after) {
      totalCount
      %s
      edges { node { ...ProductFields } }
    }
  }
}
"""
    % PAGE_INFO
    + PRODUCT_FIELDS
)

FETCH_COLLECTIONS = """
query FetchCollections($first: Int!, $after: String, $channel: String) {
  collections(first: $first, after: $after, channel: $channel) {
    totalCount
    %s
    edges { node { id name description backgroundImage { url } } }
  }
}
""" % PAGE_INFO

FETCH_CATEGORIES = """
query FetchCategories($first: Int!, $after: String) {
  categories(first: $first, after: $after) {
    totalCount
    %s
    edges { node { id name description backgroundImage { url } } }
  }
}
""" % PAGE_INFO

GET_VARIANT_DETAILS = """
query GetVariantDetails($id: ID!, $channel: String) {
  productVariant(id: $id, channel: $channel) {
    id
    name
    sku
    quantityAvailable
  }
}
"""

GET_SHIPPING_METHODS = """
query GetShippingMethods($channel: String) {
  shippingZones(first: 1, channel: $channel) {
    edges { node { id shippingMethods { id name } } }
  }
}
"""

DRAFT_ORDER_CREATE = """
mutation CreateDraftOrder($input: DraftOrderCreateInput!) {
  draftOrderCreate(input: $input) {
    order { id }
    errors { field message code }
  }
}
"""

DRAFT_ORDER_COMPLETE = """
mutation CompleteDraftOrder($id: ID!) {
  draftOrderComplete(id: $id) {
    order { id number }
    errors { field message code }
  }
}
"""

DRAFT_ORDER_UPDATE_SHIPPING_METHOD = """
mutation UpdateDraftOrderShippingMethod($id: ID!, $shippingMethod: ID) {
  draftOrderUpdate(id: $id, input: { shippingMethod: $shippingMethod }) {
    order { id }
    errors { field message code }
  }
}
"""

ORDER_MARK_AS_PAID = """
mutation OrderMarkAsPaid($id: ID!, $transactionReference: String) {
  orderMarkAsPaid(id: $id, transactionReference: $transactionReference) {
    order { id }
    errors { field message code }
  }
}
"""

ORDER_NOTE_ADD = """
mutation OrderNoteAdd($orderId: ID!, $message: String!) {
  orderNoteAdd(order: $orderId, input: { message: $message }) {
    order { id }
    errors { field message code }
  }
}
"""
