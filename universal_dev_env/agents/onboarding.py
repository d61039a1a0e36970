"""AI agent onboarding documents and session handoffs.

Each project carries three files at its root:

* ``.ai-agent-config.json`` - enabled roles and project metadata.
* ``AI_AGENT_ONBOARDING.md`` - instructions every new agent session reads first.
* ``SESSION_HANDOFF.md`` - what the previous session did and what comes next.

Previous handoffs are archived under ``.handoffs/`` before a new one is
written.  An existing ``SESSION_HANDOFF.md`` is never overwritten when the
onboarding instructions are regenerated.
"""

from __future__ import annotations

import json
import re
import shutil
import time
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from universal_dev_env import __version__
from universal_dev_env.config import UserInputError
from universal_dev_env.hooks import HANDOFF_FILE, install_post_commit_hook
from universal_dev_env.scaffolder.templates import TemplateRenderer
from universal_dev_env.utils import dump_json, print_warning, write_text

from .roles import (
    AgentRole,
    assignment_guide,
    container_strategy,
    default_roles,
    key_directories,
    most_needed_roles,
    project_architecture,
    project_focus,
    project_language,
    recommended_next_role,
)

CONFIG_FILE = ".ai-agent-config.json"
ONBOARDING_FILE = "AI_AGENT_ONBOARDING.md"
HANDOFF_ARCHIVE_DIR = ".handoffs"

ROLE_KEY_PATTERN = re.compile(r"^[a-z-]+$")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class AgentProject(BaseModel):
    name: str
    type: str = "react"


class AgentConfig(BaseModel):
    """Contents of ``.ai-agent-config.json`` (camelCase on disk)."""

    model_config = ConfigDict(populate_by_name=True)

    project: AgentProject
    roles: dict[str, AgentRole] = Field(default_factory=default_roles)
    auto_tracking: bool = Field(default=False, alias="autoTracking")
    generated_at: str = Field(default_factory=_now, alias="generatedAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")
    version: str = Field(default=__version__)

    @property
    def enabled_roles(self) -> list[tuple[str, AgentRole]]:
        return [(key, role) for key, role in self.roles.items() if role.enabled]


def default_agent_config(project_dir: Path, project_type: str = "react") -> AgentConfig:
    """Default configuration named after *project_dir*."""
    return AgentConfig(project=AgentProject(name=project_dir.resolve().name, type=project_type))


def build_agent_config(
    project_name: str,
    project_type: str,
    enabled: list[str],
    auto_tracking: bool = False,
    customizations: dict[str, tuple[str, list[str]]] | None = None,
) -> AgentConfig:
    """Build a configuration from the choices made in ``onboard configure``.

    Args:
        project_name: Project display name.
        project_type: One of the agent project types (``react``, ``research``...).
        enabled: Keys of the roles to enable; every other role is disabled.
        auto_tracking: Install the post-commit reminder hook.
        customizations: ``{role key: (description, focus)}`` overrides.

    Raises:
        UserInputError: No role enabled, or an unknown role key.
    """
    if not enabled:
        raise UserInputError("At least one role must be enabled")

    roles = default_roles()
    unknown = [key for key in enabled if key not in roles]
    if unknown:
        raise UserInputError(f"Unknown role(s): {', '.join(unknown)}")

    for key, role in roles.items():
        role.enabled = key in enabled

    for key, (description, focus) in (customizations or {}).items():
        role = roles[key]
        role.description = description
        role.focus = focus
        role.customized = True

    return AgentConfig(
        project=AgentProject(name=project_name, type=project_type),
        roles=roles,
        auto_tracking=auto_tracking,
    )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def load_agent_config(project_dir: Path) -> AgentConfig:
    """Read ``.ai-agent-config.json`` from *project_dir*.

    A missing file yields the defaults; a corrupt one yields the defaults
    with a warning.
    """
    path = project_dir / CONFIG_FILE
    if path.is_file():
        try:
            return AgentConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (ValueError, ValidationError):
            print_warning("Invalid config file, using defaults")
    return default_agent_config(project_dir)


async def save_agent_config(config: AgentConfig, project_dir: Path) -> Path:
    """Stamp ``updatedAt`` and write the configuration."""
    config.updated_at = _now()
    data = config.model_dump(by_alias=True, exclude_none=True)
    return await write_text(project_dir / CONFIG_FILE, dump_json(data))


def add_role(
    config: AgentConfig,
    key: str,
    name: str,
    description: str,
    focus: list[str] | None = None,
) -> AgentRole:
    """Add (or replace) a custom, enabled role.

    Raises:
        UserInputError: *key* is not lowercase letters and hyphens.
    """
    if not ROLE_KEY_PATTERN.fullmatch(key):
        raise UserInputError(f"Invalid role key '{key}': use lowercase letters and hyphens only")
    role = AgentRole(
        name=name or key,
        description=description,
        focus=[item for item in (focus or []) if item],
        enabled=True,
        custom=True,
    )
    config.roles[key] = role
    return role


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def _base_context(config: AgentConfig) -> dict:
    return {
        "project": config.project,
        "enabled_roles": config.enabled_roles,
        "handoff_file": HANDOFF_FILE,
        "onboarding_file": ONBOARDING_FILE,
        "config_file": CONFIG_FILE,
        "version": config.version,
        "date": _today(),
    }


def render_onboarding(config: AgentConfig, renderer: TemplateRenderer | None = None) -> str:
    """Return ``AI_AGENT_ONBOARDING.md``."""
    renderer = renderer or TemplateRenderer()
    project_type = config.project.type
    context = _base_context(config)
    context.update(
        assignment_guide=assignment_guide(project_type),
        language=project_language(project_type),
        architecture=project_architecture(project_type),
        container_strategy=container_strategy(project_type),
        key_directories=key_directories(project_type),
        auto_tracking=config.auto_tracking,
        total_roles=len(config.roles),
        custom_roles=sum(1 for role in config.roles.values() if role.is_custom),
    )
    return renderer.render("agents/onboarding.md.j2", context)


def render_initial_handoff(config: AgentConfig, renderer: TemplateRenderer | None = None) -> str:
    """Return the first ``SESSION_HANDOFF.md`` written after configuration."""
    renderer = renderer or TemplateRenderer()
    project_type = config.project.type
    context = _base_context(config)
    context.update(
        focus=project_focus(project_type),
        most_needed_roles=most_needed_roles(project_type, config.roles),
        recommended_role=recommended_next_role(project_type, config.roles),
    )
    return renderer.render("agents/initial-handoff.md.j2", context)


def render_session_handoff(
    config: AgentConfig,
    role_key: str,
    summary: str,
    renderer: TemplateRenderer | None = None,
) -> str:
    renderer = renderer or TemplateRenderer()
    role = config.roles.get(role_key)
    context = _base_context(config)
    context.update(role_name=role.name if role else role_key, summary=summary)
    return renderer.render("agents/handoff.md.j2", context)


async def generate_agent_instructions(
    config: AgentConfig,
    project_dir: Path,
    renderer: TemplateRenderer | None = None,
) -> list[Path]:
    """Write the onboarding file and configuration into *project_dir*.

    Also installs the post-commit hook when ``auto_tracking`` is on and seeds
    ``SESSION_HANDOFF.md`` if the project has none yet.

    Returns:
        Written file paths.
    """
    renderer = renderer or TemplateRenderer()
    written = [
        await write_text(project_dir / ONBOARDING_FILE, render_onboarding(config, renderer)),
        await save_agent_config(config, project_dir),
    ]

    if config.auto_tracking:
        hook = install_post_commit_hook(project_dir, renderer)
        if hook is not None:
            written.append(hook)

    handoff = project_dir / HANDOFF_FILE
    if not handoff.exists():
        written.append(await write_text(handoff, render_initial_handoff(config, renderer)))

    return written


def archive_handoff(project_dir: Path) -> Path | None:
    """Copy the current handoff to ``.handoffs/handoff-<date>-<epoch-ms>.md``."""
    handoff = project_dir / HANDOFF_FILE
    if not handoff.exists():
        return None
    archive_dir = project_dir / HANDOFF_ARCHIVE_DIR
    archive_dir.mkdir(parents=True, exist_ok=True)
    backup = archive_dir / f"handoff-{_today()}-{int(time.time() * 1000)}.md"
    shutil.copy2(handoff, backup)
    return backup


async def generate_session_handoff(
    config: AgentConfig,
    role_key: str,
    summary: str,
    project_dir: Path,
    renderer: TemplateRenderer | None = None,
) -> Path:
    """Archive the current handoff and write a fresh template for *role_key*."""
    archive_handoff(project_dir)
    content = render_session_handoff(config, role_key, summary, renderer)
    return await write_text(project_dir / HANDOFF_FILE, content)
