import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)


class DeepTalkError(Exception):
    """Base class for failures talking to the DeepTalk backend."""


class NetworkError(DeepTalkError):
    """The request never produced an HTTP response."""


class ApiError(DeepTalkError):
    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    @property
    def is_server_error(self):
        return self.status_code is not None and self.status_code >= 500


class AuthenticationError(ApiError):
    pass


class MalformedResponseError(DeepTalkError):
    pass


def _build_session(retries=0):
    session = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "POST", "PUT", "PATCH", "DELETE"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def error_message(response) -> str:
    try:
        detail = response.json()
    except ValueError:
        detail = None
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message")
        if message:
            return str(message)
    return f"HTTP {response.status_code}: {response.reason}"


class ApiClient:
    """Shared transport for every backend call.

    Cookies persist on the underlying session, so session-authenticated
    requests behave like a browser fetch with ``credentials: include``.
    The bearer token is read from the token store on every request.
    """

    def __init__(self, base_url, token_store=None, timeout=10, retries=0, session=None):
        self.base_url = str(base_url or "").rstrip("/")
        self.token_store = token_store
        self.timeout = timeout
        self.session = session if session is not None else _build_session(retries)

    @classmethod
    def from_settings(cls, settings, token_store=None, session=None):
        return cls(
            settings.base_url,
            token_store=token_store,
            timeout=settings.request_timeout,
            retries=settings.api_retries,
            session=session,
        )

    def _headers(self, authenticated):
        headers = {"Content-Type": "application/json"}
        if authenticated and self.token_store is not None:
            token = self.token_store.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: Any = None,
        authenticated: bool = True,
    ) -> Any:
        if not self.base_url:
            raise RuntimeError("DEEPTALK_API_BASE_URL not configured")
        url = f"{self.base_url}{path}"
        logger.debug("API request: %s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(authenticated),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("API request failed: %s %s (%s)", method, url, exc)
            raise NetworkError(f"Network error: {exc}") from exc

        if not response.ok:
            message = error_message(response)
            logger.warning("API error %s on %s %s: %s", response.status_code, method, path, message)
            error_cls = AuthenticationError if response.status_code == 401 else ApiError
            raise error_cls(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Invalid JSON from {method} {path}") from exc

    def clear_cookies(self):
        # Forget the backend session cookie along with the token.
        cookies = getattr(self.session, "cookies", None)
        if cookies is not None:
            cookies.clear()

    def get(self, path, params=None, **kwargs):
        return self.request("GET", path, params=params, **kwargs)

    def post(self, path, json=None, **kwargs):
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path, json=None, **kwargs):
        return self.request("PUT", path, json=json, **kwargs)

    def delete(self, path, **kwargs):
        return self.request("DELETE", path, **kwargs)
