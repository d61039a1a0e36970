"""Git post-commit hook that reminds agents to keep the session handoff current."""

from __future__ import annotations

import shutil
import time
from pathlib import Path

from universal_dev_env.scaffolder.templates import TemplateRenderer
from universal_dev_env.utils import print_success, print_warning

HANDOFF_FILE = "SESSION_HANDOFF.md"

# Handoff older than this after a commit triggers the "update it" reminder
HANDOFF_MAX_AGE_SECONDS = 300

SIGNIFICANT_KEYWORDS = ["major", "significant", "important", "breaking", "refactor"]


def render_post_commit_hook(renderer: TemplateRenderer | None = None) -> str:
    """Return the post-commit hook script."""
    renderer = renderer or TemplateRenderer()
    return renderer.render(
        "hooks/post-commit.j2",
        {
            "handoff_file": HANDOFF_FILE,
            "max_age_seconds": HANDOFF_MAX_AGE_SECONDS,
            "significant_keywords": SIGNIFICANT_KEYWORDS,
        },
    )


def install_post_commit_hook(
    project_dir: Path,
    renderer: TemplateRenderer | None = None,
) -> Path | None:
    """Install the reminder hook into ``<project_dir>/.git/hooks/post-commit``.

    An existing hook is copied to ``post-commit.backup-<epoch-ms>`` first.
    Problems are reported as warnings; this never raises.

    Returns:
        Path of the installed hook, or ``None`` when nothing was installed.
    """
    git_dir = project_dir / ".git"
    if not git_dir.exists():
        print_warning("Not a git repository - skipping post-commit hook installation")
        return None

    hook_file = git_dir / "hooks" / "post-commit"
    try:
        hook_file.parent.mkdir(parents=True, exist_ok=True)
        if hook_file.exists():
            backup = hook_file.with_name(f"post-commit.backup-{int(time.time() * 1000)}")
            shutil.copy2(hook_file, backup)
            print_warning(f"Existing post-commit hook backed up to: {backup}")

        hook_file.write_text(render_post_commit_hook(renderer), encoding="utf-8")
        hook_file.chmod(0o755)
    except OSError as exc:
        print_warning(f"Failed to install post-commit hook: {exc}")
        return None

    print_success(f"Post-commit hook installed - will remind you to update {HANDOFF_FILE}")
    return hook_file
