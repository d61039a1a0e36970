"""Integration tests for full project setup followed by agent onboarding.

These tests run the real scaffolder against every supported stack with the
network disabled (bundled templates only) and verify that the generated
project contains valid, well-formed configuration files.

No external services (Docker, npm, git remotes) are required.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml

from universal_dev_env.agents import build_agent_config, generate_agent_instructions, generate_session_handoff
from universal_dev_env.hooks import HANDOFF_FILE
from universal_dev_env.installer import Installer
from universal_dev_env.scaffolder import ProjectGenerator


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _scaffold(config, settings, cache, target: Path) -> Path:
    installer = MagicMock(spec=Installer)
    installer.install_ai_clis = AsyncMock(return_value={})
    gen = ProjectGenerator(config, settings=settings, cache=cache, installer=installer)
    result = await gen.setup_project(target)
    return result.root


def _json(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

@pytest.mark.integration
class TestGeneratedProjects:
    """Every generated configuration file parses."""

    async def test_react_express_compose(self, tmp_path, react_express_config, settings, offline_cache):
        root = await _scaffold(react_express_config, settings, offline_cache, tmp_path)

        compose = yaml.safe_load((root / "docker-compose.yml").read_text(encoding="utf-8"))
        assert set(compose["services"]) == {"client", "server", "db"}
        for service in ("client", "server"):
            assert compose["services"][service]["build"] == f"./{service}"
            assert (root / service / "Dockerfile").is_file()
            assert _json(root / service / "package.json")["name"] == f"shop-{service}"

        devcontainer = _json(root / ".devcontainer" / "devcontainer.json")
        assert devcontainer["dockerComposeFile"] == "../docker-compose.yml"
        assert devcontainer["forwardPorts"] == [3000, 3001, 5432]

        package = _json(root / "package.json")
        assert "dev" in package["scripts"]

    @pytest.mark.parametrize(
        ("project_type", "backend", "ml"),
        [
            ("react", "none", False),
            ("react", "nextjs", False),
            ("react", "firebase", False),
            ("react", "serverless", False),
            ("node", "none", False),
            ("python", "none", True),
            ("full-stack", "none", False),
            ("custom", "none", False),
        ],
    )
    async def test_every_stack_generates_valid_files(
        self, tmp_path, make_config, settings, offline_cache, project_type, backend, ml
    ):
        config = make_config(
            project_type=project_type,
            backend=backend,
            include_ml=ml,
            ai_context=True,
            features=["playwright", "vscode-extensions"],
        )
        root = await _scaffold(config, settings, offline_cache, tmp_path)

        devcontainer = _json(root / ".devcontainer" / "devcontainer.json")
        assert devcontainer["name"] == "test-project Dev Environment"
        assert _json(root / "devcontainer.universal.json")["name"] == "Universal Dev Environment"

        if (root / "docker-compose.yml").exists():
            assert "services" in yaml.safe_load((root / "docker-compose.yml").read_text(encoding="utf-8"))
        if (root / "package.json").exists():
            assert _json(root / "package.json")["name"] == "test-project"
        for yaml_file in ("serverless.yml",):
            if (root / yaml_file).exists():
                yaml.safe_load((root / yaml_file).read_text(encoding="utf-8"))
        if (root / "firebase.json").exists():
            _json(root / "firebase.json")

        assert (root / ".env.development").is_file()
        assert (root / "README.md").read_text(encoding="utf-8").startswith("# test-project")
        assert (root / ".ai" / "context.md").is_file()

    async def test_rerun_keeps_user_edits(self, tmp_path, make_config, settings, offline_cache):
        config = make_config(project_type="python")
        root = await _scaffold(config, settings, offline_cache, tmp_path)
        (root / "main.py").write_text("print('edited')\n", encoding="utf-8")

        await _scaffold(config, settings, offline_cache, tmp_path)
        assert (root / "main.py").read_text(encoding="utf-8") == "print('edited')\n"


@pytest.mark.integration
class TestOnboardingFlow:
    """Scaffold, onboard agents, then hand off between sessions."""

    async def test_handoff_not_clobbered(self, tmp_path, react_express_config, settings, offline_cache, renderer):
        root = await _scaffold(react_express_config, settings, offline_cache, tmp_path)
        config = build_agent_config("shop", "full-stack", ["senior-software-engineer", "qa-engineer"])

        await generate_agent_instructions(config, root, renderer)
        handoff = root / HANDOFF_FILE
        assert "Initial Setup" in handoff.read_text(encoding="utf-8")

        await generate_session_handoff(config, "qa-engineer", "Added API tests", root, renderer)
        current = handoff.read_text(encoding="utf-8")
        assert "Added API tests" in current

        # Regenerating onboarding must leave the session handoff alone
        await generate_agent_instructions(config, root, renderer)
        assert handoff.read_text(encoding="utf-8") == current
        assert len(list((root / ".handoffs").iterdir())) == 1
