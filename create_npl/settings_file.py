"""The ``frontend-config.ts`` settings file used by ``create-npl setup``.

The file is plain TypeScript exporting four string constants.  It is read as
text and each value is pulled out with a ``NAME = "value"`` pattern match; it
is never evaluated.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel

from .errors import IOFailure

PLACEHOLDER_DOMAIN = "your-domain.com"

SETTINGS_TEMPLATE = """// NPL Frontend Configuration
// Update these values with your actual endpoints and credentials

export const NPL_TOKEN_ENDPOINT = "https://keycloak-your-domain.com/realms/your-realm/protocol/openid-connect/token";
export const NPL_CLIENT_ID = "your-client-id";
export const NPL_APPLICATION_URL = "https://engine-your-domain.com";
export const NPL_SWAGGER_URL = "https://engine-your-domain.com/npl/your-package/-/openapi.json";
"""

_PACKAGE_IN_URL = re.compile(r"/npl/([^/]+)/-/openapi\.json")


def extract_constant(text: str, name: str) -> str | None:
    """Return the string value assigned to *name* in *text*, if any."""
    match = re.search(rf"{re.escape(name)}\s*=\s*\"([^\"]+)\"", text)
    return match.group(1) if match else None


class NplSettings(BaseModel):
    """Values read from a settings file."""

    token_endpoint: str | None = None
    client_id: str | None = None
    application_url: str | None = None
    swagger_url: str | None = None
    has_placeholders: bool = True

    @classmethod
    def parse(cls, text: str) -> "NplSettings":
        return cls(
            token_endpoint=extract_constant(text, "NPL_TOKEN_ENDPOINT"),
            client_id=extract_constant(text, "NPL_CLIENT_ID"),
            application_url=extract_constant(text, "NPL_APPLICATION_URL"),
            swagger_url=extract_constant(text, "NPL_SWAGGER_URL"),
            has_placeholders=PLACEHOLDER_DOMAIN in text,
        )

    @classmethod
    def load(cls, path: str | Path) -> "NplSettings":
        """Read and parse the settings file at *path*.

        Raises:
            IOFailure: If the file cannot be read.
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise IOFailure(f"Cannot read settings file {path}: {exc}", step="read settings") from exc
        return cls.parse(text)

    @property
    def package(self) -> str | None:
        """NPL package name taken from the ``/npl/<package>/`` part of the swagger URL."""
        if not self.swagger_url:
            return None
        match = _PACKAGE_IN_URL.search(self.swagger_url)
        return match.group(1) if match else None


def write_settings_template(path: str | Path) -> Path:
    """Write the placeholder settings file to *path*.

    Raises:
        IOFailure: If the file cannot be written.
    """
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(SETTINGS_TEMPLATE, encoding="utf-8")
    except OSError as exc:
        raise IOFailure(f"Cannot write settings file {target}: {exc}", step="create settings") from exc
    return target
