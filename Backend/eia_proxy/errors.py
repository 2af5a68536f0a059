"""Error kinds raised by the cache, the EIA client and the routes.

Each kind carries the HTTP status it is reported with. Server-side kinds
share the generic ``Server Error`` body; the detail only goes to the log.
"""


class EnergyProxyError(Exception):
    status_code = 500
    public_message = "Server Error"


class StoreError(EnergyProxyError):
    """Database unreachable or a query failed."""

    status_code = 503


class UpstreamError(EnergyProxyError):
    """EIA API unreachable, non-2xx, or an unparsable payload."""

    status_code = 502


class ValidationError(EnergyProxyError):
    status_code = 400

    @property
    def public_message(self) -> str:
        return str(self)


class InsufficientDataError(EnergyProxyError):
    """Not enough history to fit a line (fewer than two periods)."""

    status_code = 422

    @property
    def public_message(self) -> str:
        return str(self)
