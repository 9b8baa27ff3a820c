"""HTTP transport for the WeDeploy API"""

from typing import Any, Dict, Optional

import requests

from wedeploy_cli import __version__
from wedeploy_cli.constants import DEFAULT_REQUEST_TIMEOUT, USER_AGENT
from wedeploy_cli.core.config_loader import Context
from wedeploy_cli.exceptions import APIFault, APIConnectionError
from wedeploy_cli.logger import debug


class APIClient:
    """
    Thin wrapper around requests.Session bound to a Context.

    Non-2xx responses raise APIFault; network failures raise
    APIConnectionError.
    """

    def __init__(self, context: Context, session: Optional[requests.Session] = None):
        self.context = context
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": USER_AGENT.format(version=__version__),
                "Accept": "application/json",
            }
        )
        if context.token:
            self.session.headers["Authorization"] = f"Bearer {context.token}"
        elif context.username and context.password:
            self.session.auth = (context.username, context.password)

    def url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return self.context.infrastructure.rstrip("/") + "/" + path.lstrip("/")

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        **kwargs,
    ) -> requests.Response:
        """
        Send a request and validate its status.

        Raises:
            APIFault: Response status is not 2xx
            APIConnectionError: Connection failed or timed out
        """
        url = self.url(path)
        debug(f"> {method} {url}")

        try:
            response = self.session.request(
                method, url, params=params, json=json, timeout=timeout, **kwargs
            )
        except requests.Timeout as e:
            raise APIConnectionError(f"network connection timed out:\n{e}")
        except requests.RequestException as e:
            raise APIConnectionError(f"network connection error:\n{e}")

        debug(f"< {response.status_code} {method} {url}")

        if response.status_code < 200 or response.status_code >= 300:
            try:
                body = response.json()
            except ValueError:
                body = None
            raise APIFault.from_response(method, url, response.status_code, body)

        return response

    def decode(self, response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise APIFault(
                method=response.request.method if response.request else "",
                url=response.url,
                status=response.status_code,
                message="Can only decode data for application/json",
            )

    def get(self, path: str, **kwargs) -> Any:
        return self.decode(self.request("GET", path, **kwargs))

    def post(self, path: str, **kwargs) -> Any:
        return self.decode(self.request("POST", path, **kwargs))

    def put(self, path: str, **kwargs) -> Any:
        return self.decode(self.request("PUT", path, **kwargs))

    def delete(self, path: str, **kwargs) -> Any:
        return self.decode(self.request("DELETE", path, **kwargs))

    def close(self) -> None:
        self.session.close()
