"""Download and persist the OpenAPI document of an NPL engine.

The document is treated as opaque JSON: it is fetched with a single GET and
written back pretty-printed under ``<project>/openapi/``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx

from .errors import FetchFailure, IOFailure
from .utils import save_json


def openapi_url(tenant: str, app: str, package: str, cloud_domain: str = "noumena.cloud") -> str:
    """Return the engine URL serving the OpenAPI document of *package*."""
    return f"https://engine-{tenant}-{app}.{cloud_domain}/npl/{package}/-/openapi.json"


def openapi_path(project_dir: str | Path, package: str) -> Path:
    """Return where the OpenAPI document of *package* is stored in a project."""
    return Path(project_dir) / "openapi" / f"{package}-openapi.json"


class OpenApiFetcher:
    """Fetches JSON documents over HTTP.

    No retries and no timeout override: httpx's transport defaults apply.
    A custom *transport* can be supplied, which is how tests serve canned
    responses.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, follow_redirects=True)

    async def fetch_json(self, url: str) -> Any:
        """GET *url* and return the decoded JSON body.

        Raises:
            FetchFailure: On a non-2xx status, a transport error, or a body
                that is not JSON.
        """
        try:
            async with self._client() as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            raise FetchFailure(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchFailure(url, exc) from exc
        except ValueError as exc:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors.
            raise FetchFailure(url, f"invalid JSON body: {exc}") from exc

    async def persist(self, document: Any, path: str | Path) -> Path:
        """Write *document* to *path* with 2-space indentation.

        Raises:
            IOFailure: If the file or its parent directory cannot be written.
        """
        try:
            return await save_json(document, path)
        except OSError as exc:
            raise IOFailure(f"Cannot write {path}: {exc}", step="persist OpenAPI document") from exc

    async def download(self, url: str, path: str | Path) -> Path:
        """Fetch *url* and persist the result to *path*."""
        document = await self.fetch_json(url)
        return await self.persist(document, path)
