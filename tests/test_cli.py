"""Tests for the ``uds`` command line.

Covers:
- Argument parsing and --version
- collect_config from flags and prompts
- init / setup (dry run and real, offline)
- template, cache, install, update, uninstall
- onboard configure / add-role / handoff / roles
- Error exit codes
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from universal_dev_env import __version__
from universal_dev_env.cache import TemplateCache
from universal_dev_env.cli import build_parser, collect_config, main
from universal_dev_env.config import Backend, Feature, ProjectType, UserInputError

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch) -> Path:
    """Run every command in ``tmp_path`` with an isolated home and no network."""
    home = tmp_path / "ude-home"
    monkeypatch.setenv("UDE_HOME", str(home))
    monkeypatch.delenv("UDE_CACHE_DIR", raising=False)
    monkeypatch.chdir(tmp_path)

    async def _offline(self, url: str) -> str:
        raise httpx.ConnectError("offline", request=httpx.Request("GET", url))

    monkeypatch.setattr(TemplateCache, "fetch", _offline)
    monkeypatch.setattr("universal_dev_env.installer.dev_start_path", lambda: tmp_path / "bin" / "dev-start")
    return home


def _setup_args(*argv: str) -> argparse.Namespace:
    return build_parser().parse_args(["setup", *argv])


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TestParser:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_command_required(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_invalid_type_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["init", "--type", "cobol"])

    def test_cache_flag(self):
        assert _setup_args().cache is True
        assert _setup_args("--no-cache").cache is False

    def test_onboard_defaults(self):
        args = build_parser().parse_args(["onboard"])
        assert args.action == "configure"
        assert args.directory == "."


# ---------------------------------------------------------------------------
# collect_config
# ---------------------------------------------------------------------------


class TestCollectConfig:
    def test_flags_only(self, tmp_path: Path):
        args = _setup_args("--skip-prompts", "--type", "react", "--backend", "express", "--name", "shop")
        config = collect_config(args, cwd=tmp_path)
        assert config.project_name == "shop"
        assert config.project_type == ProjectType.REACT
        assert config.backend == Backend.EXPRESS
        assert Feature.AI_CLI in config.features

    def test_defaults_to_directory_name(self, tmp_path: Path):
        config = collect_config(_setup_args("--skip-prompts"), cwd=tmp_path / "my-dir")
        assert config.project_name == "my-dir"
        assert config.project_type == ProjectType.REACT

    def test_explicit_features(self, tmp_path: Path):
        args = _setup_args("--skip-prompts", "--features", "playwright, gcloud")
        assert collect_config(args, cwd=tmp_path).features == [Feature.PLAYWRIGHT, Feature.GCLOUD]

    def test_blank_name_is_user_error(self, tmp_path: Path):
        with pytest.raises(UserInputError, match="Invalid project configuration"):
            collect_config(_setup_args("--skip-prompts", "--name", "   "), cwd=tmp_path)

    def test_prompts(self, tmp_path: Path):
        answers = iter(["lab", "python", "playwright", "alpine"])
        with patch("universal_dev_env.cli.Prompt.ask", side_effect=lambda *a, **k: next(answers)), \
             patch("universal_dev_env.cli.Confirm.ask", return_value=True):
            config = collect_config(_setup_args(), cwd=tmp_path)
        assert config.project_name == "lab"
        assert config.project_type == ProjectType.PYTHON
        assert config.include_ml is True
        assert config.features == [Feature.PLAYWRIGHT]
        assert config.ai_context is True
        assert config.base_image.value == "alpine"


# ---------------------------------------------------------------------------
# init / setup
# ---------------------------------------------------------------------------


class TestInitAndSetup:
    def test_dry_run_writes_nothing(self, tmp_path: Path, capsys):
        main(["init", "--skip-prompts", "--type", "python", "--name", "lab", "--dry-run"])
        assert not (tmp_path / "lab").exists()
        out = capsys.readouterr().out
        assert "Dockerfile" in out
        assert "docker" in out

    def test_init_creates_project(self, tmp_path: Path):
        main([
            "init", "--skip-prompts", "--skip-tools",
            "--type", "react", "--backend", "express", "--name", "shop",
        ])
        root = tmp_path / "shop"
        assert (root / "docker-compose.yml").is_file()
        assert (root / "client" / "Dockerfile").is_file()
        devcontainer = json.loads((root / ".devcontainer" / "devcontainer.json").read_text(encoding="utf-8"))
        assert devcontainer["service"] == "client"

    def test_init_here(self, tmp_path: Path):
        main(["init", "--here", "--skip-prompts", "--skip-tools", "--type", "node", "--name", "api"])
        assert (tmp_path / "package.json").is_file()
        assert not (tmp_path / "api").exists()

    def test_setup_uses_current_directory(self, tmp_path: Path):
        main(["setup", "--skip-prompts", "--skip-tools", "--type", "python", "--ai-context"])
        assert (tmp_path / "Dockerfile").is_file()
        assert (tmp_path / ".ai" / "context.md").is_file()

    def test_ai_cli_install_skipped_with_flag(self, tmp_path: Path):
        with patch("universal_dev_env.installer.Installer.install_ai_clis", new_callable=AsyncMock) as install:
            main(["setup", "--skip-prompts", "--skip-tools", "--type", "react"])
        install.assert_not_awaited()

    def test_ai_cli_install_for_host_strategy(self, tmp_path: Path):
        with patch("universal_dev_env.installer.Installer.install_ai_clis", new_callable=AsyncMock) as install:
            main(["setup", "--skip-prompts", "--type", "react"])
        install.assert_awaited_once()

    def test_invalid_name_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["init", "--skip-prompts", "--name", "  "])
        assert exc_info.value.code == 1

    def test_name_outside_working_directory_exits(self, tmp_path: Path):
        with pytest.raises(SystemExit) as exc_info:
            main(["init", "--skip-prompts", "--skip-tools", "--name", "../escaped"])
        assert exc_info.value.code == 1
        assert not (tmp_path.parent / "escaped").exists()


# ---------------------------------------------------------------------------
# template / cache / install / update / uninstall
# ---------------------------------------------------------------------------


class TestTemplateCommand:
    def test_unknown_template(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["template", "rust"])
        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert 'Template "rust" not found.' in out
        assert "Available templates: react, node, python, full-stack" in out

    def test_creates_template(self, tmp_path: Path):
        main(["template", "python", "-d", str(tmp_path / "svc")])
        assert (tmp_path / "svc" / "main.py").is_file()
        assert (tmp_path / "svc" / "requirements.txt").is_file()

    def test_filesystem_root_directory_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["template", "python", "-d", "/"])
        assert exc_info.value.code == 1
        assert "Cannot name a project after directory /" in capsys.readouterr().out


class TestCacheCommand:
    def test_info_without_cache(self, capsys):
        main(["cache", "--info"])
        assert "No cache directory found" in capsys.readouterr().out

    def test_info_with_cache(self, isolated_env: Path, capsys):
        cache_dir = isolated_env / "cache"
        cache_dir.mkdir(parents=True)
        (cache_dir / "abc_file.sh").write_text("x" * 2048, encoding="utf-8")
        main(["cache", "--info"])
        out = capsys.readouterr().out
        assert "2.0 KB" in out

    def test_clear(self, isolated_env: Path):
        (isolated_env / "cache").mkdir(parents=True)
        main(["cache", "--clear"])
        assert not (isolated_env / "cache").exists()

    def test_help_text(self, capsys):
        main(["cache"])
        assert "--clear" in capsys.readouterr().out


class TestToolCommands:
    def test_install_dry_run(self):
        with patch("universal_dev_env.installer.run_command", new_callable=AsyncMock) as run:
            main(["install", "--dry-run"])
        run.assert_not_awaited()

    def test_install_offline_fails(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["install"])
        assert exc_info.value.code == 1
        assert "Could not download universal-setup.sh" in capsys.readouterr().out

    def test_install_script_failure(self, monkeypatch):
        async def _script(self, url: str) -> str:
            return "exit 3\n"

        monkeypatch.setattr(TemplateCache, "fetch", _script)
        with patch("universal_dev_env.installer.run_command", new_callable=AsyncMock, return_value=(3, "", "")):
            with pytest.raises(SystemExit) as exc_info:
                main(["install"])
        assert exc_info.value.code == 1

    def test_update_dry_run(self):
        with patch("universal_dev_env.installer.run_command", new_callable=AsyncMock) as run:
            main(["update", "--dry-run"])
        run.assert_not_awaited()

    def test_uninstall_yes(self, isolated_env: Path):
        isolated_env.mkdir(parents=True)
        main(["uninstall", "--yes"])
        assert not isolated_env.exists()

    def test_uninstall_cancelled(self, isolated_env: Path):
        isolated_env.mkdir(parents=True)
        with patch("universal_dev_env.cli.Confirm.ask", return_value=False):
            main(["uninstall"])
        assert isolated_env.exists()

    def test_uninstall_dry_run(self, isolated_env: Path):
        isolated_env.mkdir(parents=True)
        main(["uninstall", "--dry-run"])
        assert isolated_env.exists()


# ---------------------------------------------------------------------------
# onboard
# ---------------------------------------------------------------------------


class TestOnboard:
    def test_configure_skip_prompts(self, tmp_path: Path):
        main(["onboard", "configure", "--skip-prompts", "--roles", "qa-engineer,devops-engineer",
              "--project-type", "infrastructure"])
        config = json.loads((tmp_path / ".ai-agent-config.json").read_text(encoding="utf-8"))
        enabled = sorted(key for key, role in config["roles"].items() if role["enabled"])
        assert enabled == ["devops-engineer", "qa-engineer"]
        assert config["project"]["type"] == "infrastructure"
        assert (tmp_path / "AI_AGENT_ONBOARDING.md").is_file()
        assert (tmp_path / "SESSION_HANDOFF.md").is_file()

    def test_configure_default_roles(self, tmp_path: Path):
        main(["onboard", "--skip-prompts"])
        config = json.loads((tmp_path / ".ai-agent-config.json").read_text(encoding="utf-8"))
        assert sum(role["enabled"] for role in config["roles"].values()) == 5

    def test_configure_unknown_role_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["onboard", "configure", "--skip-prompts", "--roles", "wizard"])
        assert exc_info.value.code == 1

    def test_configure_keeps_existing_handoff(self, tmp_path: Path):
        (tmp_path / "SESSION_HANDOFF.md").write_text("ongoing\n", encoding="utf-8")
        main(["onboard", "configure", "--skip-prompts"])
        assert (tmp_path / "SESSION_HANDOFF.md").read_text(encoding="utf-8") == "ongoing\n"

    def test_add_role(self, tmp_path: Path):
        main(["onboard", "add-role", "--key", "ml-ops", "--name", "ML Ops",
              "--description", "Run pipelines", "--focus", "pipelines/,models/"])
        config = json.loads((tmp_path / ".ai-agent-config.json").read_text(encoding="utf-8"))
        role = config["roles"]["ml-ops"]
        assert role["custom"] is True
        assert role["focus"] == ["pipelines/", "models/"]
        assert "ML Ops" in (tmp_path / "AI_AGENT_ONBOARDING.md").read_text(encoding="utf-8")

    def test_add_role_invalid_key(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["onboard", "add-role", "--key", "Bad_Key", "--name", "x", "--description", "y", "--focus", "z"])
        assert exc_info.value.code == 1

    def test_handoff(self, tmp_path: Path):
        (tmp_path / "SESSION_HANDOFF.md").write_text("previous\n", encoding="utf-8")
        main(["onboard", "handoff", "--role", "qa-engineer", "--summary", "Added tests"])
        assert "Added tests" in (tmp_path / "SESSION_HANDOFF.md").read_text(encoding="utf-8")
        assert len(list((tmp_path / ".handoffs").iterdir())) == 1

    def test_handoff_positional_role(self, tmp_path: Path):
        main(["onboard", "handoff", "devops-engineer", "--summary", "Fixed CI"])
        assert "Fixed CI" in (tmp_path / "SESSION_HANDOFF.md").read_text(encoding="utf-8")

    def test_handoff_blank_summary(self):
        with patch("universal_dev_env.cli.Prompt.ask", return_value="  "):
            with pytest.raises(SystemExit) as exc_info:
                main(["onboard", "handoff", "--role", "qa-engineer"])
        assert exc_info.value.code == 1

    def test_roles_listing(self, capsys):
        main(["onboard", "roles"])
        out = capsys.readouterr().out
        assert "Enabled Roles:" in out
        assert "Disabled Roles:" in out

    def test_single_role(self, capsys):
        main(["onboard", "roles", "qa-engineer"])
        assert "QA Engineer" in capsys.readouterr().out

    def test_unknown_single_role(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["onboard", "roles", "wizard"])
        assert exc_info.value.code == 1
