"""
errors.py

Error taxonomy of the safe-routing core. Each error carries a stable
reason code that ends up in RouteResult.reason and in log events.
"""


class SafeRoutingError(RuntimeError):
    reason_code = "safe_routing_error"


class AssetUnavailable(SafeRoutingError):
    """The offline road-graph asset is missing or malformed."""

    reason_code = "asset_unavailable"


class ServiceUnavailable(SafeRoutingError):
    """A network call failed, timed out or returned an error status."""

    reason_code = "service_unavailable"


class NoPathFound(SafeRoutingError):
    """Every routing strategy was exhausted without a safe route."""

    reason_code = "no_path_found"


class InputInvalid(SafeRoutingError, ValueError):
    """The start or end point lies inside a danger zone."""

    reason_code = "input_invalid"
