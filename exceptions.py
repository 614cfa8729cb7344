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

"""Custom exceptions for the ShipRocket connector."""


class ConnectorError(Exception):
  """Base class for all connector exceptions."""

  def __init__(
      self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500
  ):
    self.message = message
    self.code = code
    self.status_code = status_code
    super().__init__(self.message)


class ConfigurationError(ConnectorError):
  """Raised when required configuration is missing or invalid."""

  def __init__(self, message: str):
    super().__init__(message, code="CONFIGURATION_ERROR", status_code=500)


class InvalidRequestError(ConnectorError):
  """Raised when the request is invalid (e.g. missing fields)."""

  def __init__(self, message: str):
    super().__init__(message, code="INVALID_REQUEST", status_code=400)


class UnauthorizedError(ConnectorError):
  """Raised when a signature or bearer secret does not match."""

  def __init__(self, message: str = "Unauthorized"):
    super().__init__(message, code="UNAUTHORIZED", status_code=401)


class OriginNotAllowedError(ConnectorError):
  """Raised when a browser request comes from an origin not on the list."""

  def __init__(self, message: str = "Origin not allowed"):
    super().__init__(message, code="ORIGIN_NOT_ALLOWED", status_code=403)


class ResourceNotFoundError(ConnectorError):
  """Raised when a requested resource is not found."""

  def __init__(self, message: str):
    super().__init__(message, code="RESOURCE_NOT_FOUND", status_code=404)


class RateLimitedError(ConnectorError):
  """Raised when a client exceeds its request budget."""

  def __init__(self, message: str = "Too many requests"):
    super().__init__(message, code="RATE_LIMITED", status_code=429)


class UpstreamError(ConnectorError):
  """Raised when Saleor or ShipRocket fails or answers with an error."""

  def __init__(self, upstream: str, message: str):
    self.upstream = upstream
    super().__init__(
        f"{upstream} error: {message}", code="UPSTREAM_ERROR", status_code=502
    )
