import logging
from typing import Any, Optional

import requests

from . import config

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """A collaborator call failed: transport error, non-2xx status or unusable body."""


class ServiceClient:
    """Thin JSON-over-HTTP wrapper bound to the collaborator services' base origin.

    No retries, no auth headers, no caching. Every failure is collapsed into
    ``ServiceError``.
    """

    def __init__(self, base_url: str, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def request(self, method: str, path: str, *, params: Optional[dict] = None, json: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s", method, url, params)
        try:
            resp = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise ServiceError(f"{method} {path} failed: {e}") from e
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ServiceError(f"{method} {path} returned a non-JSON body") from e

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, params: Optional[dict] = None) -> Any:
        return self.request("POST", path, params=params, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def close(self):
        self.session.close()


def create_client(settings: Optional[config.Settings] = None) -> ServiceClient:
    settings = settings or config.get_settings()
    return ServiceClient(settings.services_url, timeout=settings.request_timeout)


# Dependency to get a collaborator client per request

def get_api():
    api = create_client()
    try:
        yield api
    finally:
        api.close()
