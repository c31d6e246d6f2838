"""Stand-in for the commerce API used across the test suite."""
import json
from typing import Any, Dict, List, Optional, Tuple

import httpx

BASE_URL = "https://commerce.test"


def envelope(data: Any, **extra: Any) -> Dict[str, Any]:
    """Commerce API success envelope."""
    return {"status": "success", "data": data, **extra}


def error_envelope(message: str, errors: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Commerce API error envelope."""
    return {"status": "error", "message": message, "errors": errors or {}}


class FakeCommerceAPI:
    """
    In-memory stand-in for the commerce API, served through ``httpx.MockTransport``.

    Routes are keyed by method and path. Unregistered routes answer 404 with
    the error envelope. A route may be given a list of outcomes, which are
    served in order; the last one repeats.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], List[Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        status_code: int = 200,
        exc: Optional[Exception] = None
    ) -> None:
        outcome = exc if exc is not None else (status_code, json_body)
        self.routes.setdefault((method.upper(), path), []).append(outcome)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcomes = self.routes.get((request.method, request.url.path))
        if not outcomes:
            return httpx.Response(404, json=error_envelope("Not found"))

        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        status_code, body = outcome
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]
