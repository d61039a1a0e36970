"""Universal Dev Environment configuration.

Typed user selections (``ProjectConfig``) and tool-level settings
(``Settings``).  All models use Pydantic v2 so they are validated once at
construction time; unknown enum values are coerced to their defaults so the
template generators never interpolate missing values.
"""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from universal_dev_env import __version__


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ProjectType(str, Enum):
    """Kind of project being scaffolded."""
    REACT = "react"
    NODE = "node"
    PYTHON = "python"
    FULL_STACK = "full-stack"
    CUSTOM = "custom"


class Backend(str, Enum):
    """Backend paired with a React frontend."""
    NONE = "none"
    EXPRESS = "express"
    NEXTJS = "nextjs"
    FIREBASE = "firebase"
    SERVERLESS = "serverless"


class Feature(str, Enum):
    """Optional feature flags selectable at init time."""
    AI_CLI = "ai-cli"
    GCLOUD = "gcloud"
    GITHUB_CLI = "github-cli"
    PLAYWRIGHT = "playwright"
    DOCKER_MULTI_STAGE = "docker-multi-stage"
    VSCODE_EXTENSIONS = "vscode-extensions"


class BaseImage(str, Enum):
    """Base image family for the universal devcontainer."""
    DEBIAN = "debian"
    ALPINE = "alpine"


DEFAULT_FEATURES: list[Feature] = [
    Feature.AI_CLI,
    Feature.GCLOUD,
    Feature.GITHUB_CLI,
    Feature.VSCODE_EXTENSIONS,
]

DEFAULT_TEMPLATE_BASE_URL = "https://raw.githubusercontent.com/nhangen/universal-dev-env/main"


class UserInputError(Exception):
    """Raised for invalid names, unknown templates or malformed role keys."""


def _enum_value_or(enum_cls: type[Enum], value: Any, default: Enum) -> Enum:
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return default
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# User selections
# ---------------------------------------------------------------------------

class ProjectConfig(BaseModel):
    """User selections for a single CLI invocation.

    Created once from interactive prompts or flags and never mutated
    afterwards (the model is frozen).
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="Project (and directory) name")
    project_type: ProjectType = Field(default=ProjectType.CUSTOM)
    backend: Backend = Field(default=Backend.NONE)
    include_ml: bool = Field(default=False, description="Add ML libraries and ports")
    features: list[Feature] = Field(default_factory=list)
    ai_context: bool = Field(default=False, description="Generate the .ai/ context folder")
    use_cache: bool = Field(default=True, description="Use the template download cache")
    base_image: BaseImage = Field(default=BaseImage.DEBIAN)

    @field_validator("project_name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Project name must not be empty")
        # The name doubles as the project directory
        if "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError("Project name must not contain path separators or be '.' or '..'")
        return value

    @field_validator("project_type", mode="before")
    @classmethod
    def _coerce_project_type(cls, value: Any) -> ProjectType:
        return _enum_value_or(ProjectType, value, ProjectType.CUSTOM)

    @field_validator("backend", mode="before")
    @classmethod
    def _coerce_backend(cls, value: Any) -> Backend:
        return _enum_value_or(Backend, value, Backend.NONE)

    @field_validator("base_image", mode="before")
    @classmethod
    def _coerce_base_image(cls, value: Any) -> BaseImage:
        return _enum_value_or(BaseImage, value, BaseImage.DEBIAN)

    @field_validator("features", mode="before")
    @classmethod
    def _filter_features(cls, value: Any) -> list[Feature]:
        if not value:
            return []
        known = {f.value for f in Feature}
        result: list[Feature] = []
        for item in value:
            raw = item.value if isinstance(item, Feature) else str(item).strip().lower()
            if raw in known and Feature(raw) not in result:
                result.append(Feature(raw))
        return result

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    def has_feature(self, feature: Feature | str) -> bool:
        """Return ``True`` if *feature* was selected."""
        return feature in self.features

    @property
    def project_slug(self) -> str:
        """Lower-cased, dash-separated name usable in package.json."""
        return re.sub(r"\s+", "-", self.project_name.lower())

    @property
    def is_node_family(self) -> bool:
        """Whether the project is driven by ``package.json``."""
        return self.project_type != ProjectType.PYTHON


# ---------------------------------------------------------------------------
# Tool settings
# ---------------------------------------------------------------------------

class Settings(BaseModel):
    """Tool-level settings shared by every command.

    Holds the home/cache locations, the cache expiry window and the base URL
    used to download template files.
    """

    home_dir: Path = Field(default_factory=lambda: Path.home() / ".universal-dev-env")
    cache_dir_override: Path | None = Field(default=None)
    cache_expiry_days: int = Field(default=30, ge=1)
    template_base_url: str = Field(default=DEFAULT_TEMPLATE_BASE_URL)
    version: str = Field(default=__version__)
    http_timeout: float = Field(default=30.0, gt=0)

    @property
    def cache_dir(self) -> Path:
        """Directory holding downloaded template files."""
        return self.cache_dir_override or (self.home_dir / "cache")

    @property
    def cache_expiry_seconds(self) -> int:
        return self.cache_expiry_days * 24 * 60 * 60

    def template_url(self, filename: str) -> str:
        """Full download URL of an upstream template file."""
        return f"{self.template_base_url.rstrip('/')}/{filename}"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            UDE_HOME, UDE_CACHE_DIR, UDE_CACHE_EXPIRY_DAYS,
            UDE_TEMPLATE_BASE_URL, UDE_HTTP_TIMEOUT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("UDE_HOME"):
            kwargs["home_dir"] = Path(os.environ["UDE_HOME"]).expanduser()
        if os.environ.get("UDE_CACHE_DIR"):
            kwargs["cache_dir_override"] = Path(os.environ["UDE_CACHE_DIR"]).expanduser()
        if os.environ.get("UDE_CACHE_EXPIRY_DAYS"):
            kwargs["cache_expiry_days"] = int(os.environ["UDE_CACHE_EXPIRY_DAYS"])
        if os.environ.get("UDE_TEMPLATE_BASE_URL"):
            kwargs["template_base_url"] = os.environ["UDE_TEMPLATE_BASE_URL"]
        if os.environ.get("UDE_HTTP_TIMEOUT"):
            kwargs["http_timeout"] = float(os.environ["UDE_HTTP_TIMEOUT"])
        return cls(**kwargs)
