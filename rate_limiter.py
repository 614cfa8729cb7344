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

"""Sliding-window rate limiter for the checkout endpoints."""

import threading
import time
from typing import Callable

SWEEP_EVERY = 100


class RateLimiter:
  """Allows at most `limit` calls per identifier within `window_seconds`."""

  def __init__(
      self,
      limit: int = 10,
      window_seconds: float = 60.0,
      clock: Callable[[], float] = time.monotonic,
  ):
    self.limit = limit
    self.window_seconds = window_seconds
    self._clock = clock
    self._requests: dict[str, list[float]] = {}
    self._calls = 0
    self._lock = threading.Lock()

  def is_allowed(self, identifier: str) -> bool:
    now = self._clock()
    with self._lock:
      recent = [
          t
          for t in self._requests.get(identifier, [])
          if now - t < self.window_seconds
      ]
      allowed = len(recent) < self.limit
      if allowed:
        recent.append(now)
      self._requests[identifier] = recent

      self._calls += 1
      if self._calls % SWEEP_EVERY == 0:
        self._sweep(now)
    return allowed

  def _sweep(self, now: float) -> None:
    for key in list(self._requests):
      valid = [t for t in self._requests[key] if now - t < self.window_seconds]
      if valid:
        self._requests[key] = valid
      else:
        del self._requests[key]

  def tracked_identifiers(self) -> int:
    with self._lock:
      return len(self._requests)
