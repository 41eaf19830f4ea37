"""
errors.py: Domain error taxonomy for trip planning.

    TravelRiskError
    ├── ValidationError        bad input; the user may retry with other input
    │   └── InvalidRouteError  route cannot form a corridor
    ├── UpstreamFetchError     directions / weather / report fetch failed
    └── StalePlanError         result superseded by a newer request token

main.py maps ValidationError → 422 and UpstreamFetchError → 502.
An empty corridor is NOT an error: it scores 0.
"""


class TravelRiskError(Exception):
    """Base class for errors raised by the planning core."""


class ValidationError(TravelRiskError):
    """Input rejected before any computation happened."""


class InvalidRouteError(ValidationError):
    """Route has fewer than 2 points, bad coordinates, or zero length."""


class UpstreamFetchError(TravelRiskError):
    """A collaborator (directions, weather, report store) failed."""

    def __init__(self, source: str, detail: str = "") -> None:
        self.source = source
        self.detail = detail
        super().__init__(f"{source} fetch failed" + (f": {detail}" if detail else ""))


class StalePlanError(TravelRiskError):
    """A newer plan was started for the same session before this one finished."""

    def __init__(self, token: int, latest: int) -> None:
        self.token = token
        self.latest = latest
        super().__init__(f"plan token {token} superseded by {latest}")
