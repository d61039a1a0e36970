"""Host tooling installation, self-update and uninstall.

The heavy lifting (system packages, cloud CLIs, shell helpers) lives in the
upstream ``universal-setup.sh`` script; this module downloads it through the
template cache and runs it.  AI CLIs are installed with ``npm install -g``.
"""

from __future__ import annotations

import platform
import shutil
import sys
from pathlib import Path

from universal_dev_env.cache import TemplateCache
from universal_dev_env.config import Settings
from universal_dev_env.utils import (
    command_exists,
    console,
    make_executable,
    print_info,
    print_success,
    print_warning,
    run_command,
)

SETUP_SCRIPT = "universal-setup.sh"
PACKAGE_NAME = "universal-dev-env"

# (binary, npm package, manual install docs)
AI_CLIS: list[tuple[str, str, str]] = [
    ("claude", "@anthropic-ai/claude-code", "https://docs.anthropic.com/en/docs/claude-code"),
    ("gemini", "@google/gemini-cli", "https://github.com/google-gemini/gemini-cli"),
]

INSTALL_TIMEOUT = 1800


class InstallError(Exception):
    """Raised when an installer subprocess exits non-zero."""

    def __init__(self, message: str, command: str = "", returncode: int | None = None):
        self.command = command
        self.returncode = returncode
        super().__init__(message)


# ---------------------------------------------------------------------------
# Platform detection
# ---------------------------------------------------------------------------


def detect_platform() -> str:
    """``windows``, ``darwin`` or ``linux`` (anything else is returned as-is)."""
    return platform.system().lower()


def detect_package_manager(system: str | None = None) -> str:
    """Name of the system package manager.

    ``choco`` on Windows, ``brew`` on macOS, the first of ``apt-get`` /
    ``yum`` / ``apk`` found on ``PATH`` elsewhere, else ``unknown``.
    """
    system = system or detect_platform()
    if system == "windows":
        return "choco"
    if system == "darwin":
        return "brew"
    for binary, name in (("apt-get", "apt"), ("yum", "yum"), ("apk", "apk")):
        if command_exists(binary):
            return name
    return "unknown"


def dev_start_path() -> Path:
    """Helper script the setup script installs into ``~/bin``."""
    return Path.home() / "bin" / "dev-start"


# ---------------------------------------------------------------------------
# Installer
# ---------------------------------------------------------------------------


class Installer:
    """Runs the setup script and manages the tool's own installation.

    Attributes:
        settings: Tool settings (home directory, download URLs).
        cache: Template cache used to fetch the setup script.
    """

    def __init__(self, settings: Settings, cache: TemplateCache | None = None) -> None:
        self.settings = settings
        self.cache = cache or TemplateCache(settings)

    @property
    def script_path(self) -> Path:
        return self.settings.home_dir / SETUP_SCRIPT

    async def _run(self, cmd: list[str], timeout: int = INSTALL_TIMEOUT) -> None:
        cmd_str = " ".join(cmd)
        returncode, _, stderr = await run_command(cmd, timeout=timeout, capture=False)
        if returncode != 0:
            raise InstallError(
                f"Command failed (exit {returncode}): {cmd_str}\n{stderr}".rstrip(),
                command=cmd_str,
                returncode=returncode,
            )

    async def install_environment(self, dry_run: bool = False, use_cache: bool = True) -> Path:
        """Download ``universal-setup.sh`` and run it with bash.

        Returns:
            Path of the setup script (not written in dry-run mode).

        Raises:
            DownloadError: The script could not be downloaded and is not cached.
            InstallError: The script exited non-zero.
        """
        if dry_run:
            print_info(f"Dry run mode - would execute: bash {self.script_path}")
            print_info(f"Detected package manager: {detect_package_manager()}")
            return self.script_path

        content = await self.cache.download_with_cache(
            self.settings.template_url(SETUP_SCRIPT), SETUP_SCRIPT, use_cache=use_cache
        )
        self.script_path.parent.mkdir(parents=True, exist_ok=True)
        self.script_path.write_text(content, encoding="utf-8")
        make_executable(self.script_path)

        await self._run(["bash", str(self.script_path)])
        return self.script_path

    async def install_ai_clis(self, dry_run: bool = False) -> dict[str, bool]:
        """Install the Claude and Gemini CLIs globally with npm.

        Failures are reported with the manual install URL and never raise.

        Returns:
            ``{binary: available}`` after the attempt.
        """
        if detect_platform() == "windows":
            print_warning("Automatic AI CLI installation is not supported on Windows. Install manually:")
            for _, package, url in AI_CLIS:
                console.print(f"  npm install -g {package}  ({url})")
            return {binary: command_exists(binary) for binary, _, _ in AI_CLIS}

        results: dict[str, bool] = {}
        for binary, package, url in AI_CLIS:
            if command_exists(binary):
                print_info(f"{binary} CLI already installed")
                results[binary] = True
                continue
            if dry_run:
                print_info(f"Dry run mode - would execute: npm install -g {package}")
                results[binary] = False
                continue
            if not command_exists("npm"):
                print_warning(f"npm not found; install {package} manually: {url}")
                results[binary] = False
                continue
            try:
                await self._run(["npm", "install", "-g", package], timeout=600)
            except InstallError:
                print_warning(f"Failed to install {package}. Install manually: {url}")
                results[binary] = False
            else:
                print_success(f"Installed {package}")
                results[binary] = True
        return results

    async def update_tool(self, dry_run: bool = False) -> None:
        """Upgrade the installed package with pip."""
        cmd = [sys.executable, "-m", "pip", "install", "--upgrade", PACKAGE_NAME]
        if dry_run:
            print_info(f"Dry run mode - would execute: {' '.join(cmd)}")
            return
        await self._run(cmd, timeout=600)

    def uninstall_targets(self) -> list[Path]:
        return [self.settings.home_dir, dev_start_path()]

    async def uninstall(self, dry_run: bool = False, remove_package: bool = False) -> list[Path]:
        """Remove the tool's home directory and the ``dev-start`` helper.

        Args:
            dry_run: Only report what would be removed.
            remove_package: Also ``pip uninstall`` the package itself.

        Returns:
            Paths that were (or in dry-run mode would be) removed.
        """
        targets = [path for path in self.uninstall_targets() if path.exists()]
        for path in targets:
            if dry_run:
                print_info(f"Would remove: {path}")
            elif path.is_dir():
                shutil.rmtree(path)
                print_success(f"Removed {path}")
            else:
                path.unlink()
                print_success(f"Removed {path}")

        if remove_package:
            cmd = [sys.executable, "-m", "pip", "uninstall", "-y", PACKAGE_NAME]
            if dry_run:
                print_info(f"Would execute: {' '.join(cmd)}")
            else:
                await self._run(cmd, timeout=600)
        return targets
