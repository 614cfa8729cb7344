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

"""In-memory retry queue for order webhooks whose saga failed.

Entries are keyed by the ShipRocket order id. The queue does not run
retries itself: an operator or a scheduler asks for `list_retryable()` and
feeds the stored payloads back into the order saga.

Nothing is persisted. Restarting the process drops every pending entry.
"""

import datetime
import logging
import threading
from typing import Callable, Optional

from models import FailedWebhookEntry
from models import ShiprocketOrderWebhook

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
RETRY_COOLDOWN = datetime.timedelta(minutes=5)


def _utcnow() -> datetime.datetime:
  return datetime.datetime.now(datetime.timezone.utc)


class WebhookRetryQueue:
  """Bounded-attempt store of failed order webhooks.

  All access goes through one lock, so concurrent failures for the same
  order id cannot lose an attempt increment.
  """

  def __init__(
      self,
      max_attempts: int = MAX_ATTEMPTS,
      cooldown: datetime.timedelta = RETRY_COOLDOWN,
      clock: Callable[[], datetime.datetime] = _utcnow,
  ):
    self.max_attempts = max_attempts
    self.cooldown = cooldown
    self._clock = clock
    self._entries: dict[str, FailedWebhookEntry] = {}
    self._lock = threading.Lock()

  def __len__(self) -> int:
    with self._lock:
      return len(self._entries)

  def __contains__(self, order_id: str) -> bool:
    with self._lock:
      return order_id in self._entries

  def add_failure(
      self, webhook: ShiprocketOrderWebhook, error: str
  ) -> Optional[FailedWebhookEntry]:
    """Records a failed attempt for `webhook`.

    Returns the updated entry, or None when the entry had already used all
    of its attempts and was evicted instead.
    """
    order_id = webhook.order_id
    now = self._clock()
    with self._lock:
      entry = self._entries.get(order_id)
      if entry is None:
        entry = FailedWebhookEntry(
            webhook=webhook, attempts=1, last_error=error, last_attempt=now
        )
        self._entries[order_id] = entry
      elif entry.attempts >= self.max_attempts:
        del self._entries[order_id]
        self._log_exhausted(order_id, entry.attempts + 1, error)
        return None
      else:
        entry.attempts += 1
        entry.last_error = error
        entry.last_attempt = now
      attempts = entry.attempts
      snapshot = entry.model_copy()

    logger.warning(
        "Added webhook to retry queue (order_id=%s, attempts=%d): %s",
        order_id,
        attempts,
        error,
    )
    return snapshot

  def list_retryable(self) -> list[FailedWebhookEntry]:
    """Returns entries whose cool-down has passed.

    Entries that reached the attempt limit are evicted during the same scan.
    """
    now = self._clock()
    retryable = []
    exhausted = []
    with self._lock:
      for order_id, entry in list(self._entries.items()):
        if entry.attempts >= self.max_attempts:
          del self._entries[order_id]
          exhausted.append(entry)
        elif now - entry.last_attempt > self.cooldown:
          retryable.append(entry.model_copy())

    for entry in exhausted:
      self._log_exhausted(
          entry.webhook.order_id, entry.attempts, entry.last_error
      )
    return retryable

  def get(self, order_id: str) -> Optional[FailedWebhookEntry]:
    with self._lock:
      entry = self._entries.get(order_id)
      return entry.model_copy() if entry else None

  def remove(self, order_id: str) -> bool:
    """Acknowledges a successful retry. Returns whether an entry existed."""
    with self._lock:
      return self._entries.pop(order_id, None) is not None

  def status(self) -> dict:
    with self._lock:
      entries = list(self._entries.values())
    return {
        "queue_size": len(entries),
        "items": [
            {
                "order_id": e.webhook.order_id,
                "attempts": e.attempts,
                "last_error": e.last_error,
                "last_attempt": e.last_attempt.isoformat(),
            }
            for e in entries
        ],
    }

  def _log_exhausted(self, order_id: str, attempts: int, error: str) -> None:
    logger.error(
        "Max retry attempts reached for webhook, manual intervention required"
        " (order_id=%s, attempts=%d, last_error=%s)",
        order_id,
        attempts,
        error,
    )
