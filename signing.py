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

"""HMAC-SHA256 request signing and verification.

ShipRocket signs (and expects) base64 digests in `X-Api-HMAC-SHA256`; Saleor
signs its webhooks with hex digests in `saleor-signature`. Each side has its
own secret and its own `HmacSigner` instance.
"""

import base64
import enum
import hashlib
import hmac
import json
from typing import Any

from exceptions import ConfigurationError


class SignatureEncoding(str, enum.Enum):
  BASE64 = "base64"
  HEX = "hex"


def canonical_bytes(payload: Any) -> bytes:
  """Serializes a payload the way it is put on the wire.

  Bytes and strings are used verbatim. Anything else is dumped as compact
  JSON, which is also how outbound request bodies are encoded.
  """
  if isinstance(payload, bytes):
    return payload
  if isinstance(payload, str):
    return payload.encode("utf-8")
  return json.dumps(
      payload, separators=(",", ":"), ensure_ascii=False
  ).encode("utf-8")


class HmacSigner:
  """Computes and checks HMAC-SHA256 signatures with one shared secret."""

  def __init__(
      self,
      secret: str,
      encoding: SignatureEncoding = SignatureEncoding.BASE64,
  ):
    if not secret:
      raise ConfigurationError("HMAC secret is not configured")
    self._key = secret.encode("utf-8")
    self.encoding = encoding

  def sign(self, payload: Any) -> str:
    digest = hmac.new(
        self._key, canonical_bytes(payload), hashlib.sha256
    ).digest()
    if self.encoding == SignatureEncoding.HEX:
      return digest.hex()
    return base64.b64encode(digest).decode("ascii")

  def verify(self, payload: Any, signature: Any) -> bool:
    """Returns whether `signature` matches `payload`. Never raises."""
    if not isinstance(signature, str) or not signature:
      return False
    try:
      expected = self.sign(payload).encode("ascii")
      received = signature.encode("utf-8")
    except (TypeError, ValueError):
      return False
    if len(expected) != len(received):
      return False
    return hmac.compare_digest(expected, received)
