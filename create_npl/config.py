"""create-npl configuration.

Typed settings for the scaffolder.  Everything here has a sensible default so
the CLI works out of the box; ``Config.from_env`` lets operators point the
tool at another cloud domain, package manager or template tree without new
command-line flags.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

_PACKAGE_TEMPLATE_DIR = Path(__file__).parent / "templates"


class Config(BaseModel):
    """Global scaffolder configuration.

    Created once by the CLI entry point and handed to the orchestrator.
    """

    cloud_domain: str = Field(default="noumena.cloud", min_length=1)
    package_manager: str = Field(default="npm", min_length=1)
    npx: str = Field(default="npx", min_length=1)
    client_generator: str = Field(default="@hey-api/openapi-ts")
    client_output: str = Field(default="src/api.ts")
    template_dir: Path = Field(default=_PACKAGE_TEMPLATE_DIR)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def create_template_path(self) -> Path:
        """Template tree copied by ``create-npl create``."""
        return self.template_dir / "app"

    @property
    def setup_template_path(self) -> Path:
        """Template tree copied by ``create-npl setup``."""
        return self.template_dir / "setup"

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            NPL_CLOUD_DOMAIN, NPL_PACKAGE_MANAGER, NPL_NPX, NPL_TEMPLATE_DIR.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("NPL_CLOUD_DOMAIN"):
            kwargs["cloud_domain"] = os.environ["NPL_CLOUD_DOMAIN"]
        if os.environ.get("NPL_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["NPL_PACKAGE_MANAGER"]
        if os.environ.get("NPL_NPX"):
            kwargs["npx"] = os.environ["NPL_NPX"]
        if os.environ.get("NPL_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["NPL_TEMPLATE_DIR"])
        return cls(**kwargs)
