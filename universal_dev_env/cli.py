"""Universal Dev Environment command line.

Usage::

    uds init --type react --backend express --name my-app
    uds setup --skip-prompts --type python --ml
    uds template node -d ./api
    uds cache --info
    uds onboard configure
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError
from rich.prompt import Confirm, Prompt

from universal_dev_env import __version__
from universal_dev_env.agents import (
    add_role,
    build_agent_config,
    generate_agent_instructions,
    generate_session_handoff,
    load_agent_config,
)
from universal_dev_env.agents.roles import AGENT_PROJECT_TYPES, DEFAULT_AGENT_ROLES
from universal_dev_env.cache import DownloadError, TemplateCache
from universal_dev_env.config import (
    DEFAULT_FEATURES,
    Backend,
    BaseImage,
    Feature,
    ProjectConfig,
    ProjectType,
    Settings,
    UserInputError,
)
from universal_dev_env.installer import InstallError, Installer
from universal_dev_env.scaffolder.generator import (
    TEMPLATES,
    ProjectGenerator,
    ScaffoldError,
    create_template,
    planned_files,
)
from universal_dev_env.strategy import select_configuration_strategy
from universal_dev_env.utils import (
    console,
    create_progress,
    format_size,
    print_error,
    print_header,
    print_info,
    print_success,
    print_summary_table,
    print_warning,
)

# ---------------------------------------------------------------------------
# Project configuration from flags / prompts
# ---------------------------------------------------------------------------


def _split_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def collect_config(args: argparse.Namespace, cwd: Path | None = None) -> ProjectConfig:
    """Build the ``ProjectConfig`` from flags, prompting for anything missing.

    Raises:
        UserInputError: The answers do not form a valid configuration.
    """
    cwd = cwd or Path.cwd()
    features = _split_list(args.features) if args.features else [f.value for f in DEFAULT_FEATURES]
    answers: dict[str, Any] = {
        "project_name": args.name or cwd.name,
        "project_type": args.type or ProjectType.REACT.value,
        "backend": args.backend or Backend.NONE.value,
        "include_ml": args.ml,
        "features": features,
        "ai_context": args.ai_context,
        "use_cache": args.cache,
        "base_image": args.base_image or BaseImage.DEBIAN.value,
    }

    if not args.skip_prompts:
        answers["project_name"] = Prompt.ask("Project name", default=answers["project_name"])
        answers["project_type"] = Prompt.ask(
            "Project type",
            choices=[t.value for t in ProjectType],
            default=answers["project_type"],
        )
        if answers["project_type"] == ProjectType.REACT.value and not args.backend:
            answers["backend"] = Prompt.ask(
                "Backend", choices=[b.value for b in Backend], default=Backend.NONE.value
            )
        if answers["project_type"] == ProjectType.PYTHON.value and not args.ml:
            answers["include_ml"] = Confirm.ask("Include ML libraries?", default=False)
        if not args.features:
            console.print(f"[dim]Available features: {', '.join(f.value for f in Feature)}[/dim]")
            answers["features"] = _split_list(
                Prompt.ask("Features (comma-separated)", default=",".join(features))
            )
        if not args.ai_context:
            answers["ai_context"] = Confirm.ask("Generate .ai/ context folder?", default=True)
        if not args.base_image:
            answers["base_image"] = Prompt.ask(
                "Base image", choices=[b.value for b in BaseImage], default=BaseImage.DEBIAN.value
            )

    try:
        return ProjectConfig(**answers)
    except ValidationError as exc:
        messages = "; ".join(error["msg"] for error in exc.errors())
        raise UserInputError(f"Invalid project configuration: {messages}") from exc


def _print_strategy(config: ProjectConfig) -> None:
    strategy = select_configuration_strategy(config)
    print_summary_table(
        {
            "Project": config.project_name,
            "Type": config.project_type.value,
            "Backend": config.backend.value,
            "Container": strategy.container_strategy.value,
            "Deployment": strategy.deployment_strategy.value,
            "Tools installed on": strategy.install_location.value,
            "Environments": ", ".join(strategy.environment_configs),
            "Config format": strategy.config_format.value,
            "Additional configs": ", ".join(strategy.additional_configs) or "-",
        },
        title="Configuration Strategy",
    )


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _setup(args: argparse.Namespace, here: bool) -> None:
    print_header("Universal Development Environment Setup")
    config = collect_config(args)
    settings = Settings.from_env()

    if args.dry_run:
        _print_strategy(config)
        target = "." if here else config.project_name
        print_info(f"Dry run - would generate in {target}/:")
        for name in planned_files(config):
            console.print(f"  {name}")
        return

    generator = ProjectGenerator(config, settings)
    with create_progress() as progress:
        label = "Setting up project (cache enabled)..." if config.use_cache else "Setting up project..."
        task = progress.add_task(label, total=None)
        try:
            result = asyncio.run(
                generator.setup_project(Path.cwd(), here=here, install_tools=not args.skip_tools)
            )
        except Exception:
            progress.update(task, description="[red]Setup failed[/red]")
            raise

    print_success(f'Project "{config.project_name}" created successfully!')
    _print_strategy(config)
    console.print(f"[dim]{len(result.written)} files written, {len(result.skipped)} existing files kept[/dim]")
    console.print("[yellow]Next steps:[/yellow]")
    step = 1
    if not here:
        console.print(f"  {step}. cd {config.project_name}")
        step += 1
    console.print(f"  {step}. Open in VS Code with Dev Containers extension")
    console.print(f"  {step + 1}. Run ./universal-setup.sh to install tools")
    console.print(f"  {step + 2}. Start coding!")


def cmd_init(args: argparse.Namespace) -> None:
    _setup(args, here=args.here)


def cmd_setup(args: argparse.Namespace) -> None:
    _setup(args, here=True)


def cmd_install(args: argparse.Namespace) -> None:
    installer = Installer(Settings.from_env())
    if args.dry_run:
        asyncio.run(installer.install_environment(dry_run=True, use_cache=args.cache))
        return
    print_info("Installing development environment...")
    asyncio.run(installer.install_environment(use_cache=args.cache))
    print_success("Development environment installed successfully!")


def cmd_template(args: argparse.Namespace) -> None:
    if args.name not in TEMPLATES:
        print_error(f'Template "{args.name}" not found.')
        print_warning(f"Available templates: {', '.join(TEMPLATES)}")
        sys.exit(1)
    with create_progress() as progress:
        progress.add_task(f"Creating {args.name} project template...", total=None)
        written = asyncio.run(create_template(args.name, args.directory))
    print_success(f"{args.name} template created successfully! ({len(written)} files)")


def cmd_update(args: argparse.Namespace) -> None:
    installer = Installer(Settings.from_env())
    asyncio.run(installer.update_tool(dry_run=args.dry_run))
    if not args.dry_run:
        print_success("Upgraded to latest version!")


def cmd_cache(args: argparse.Namespace) -> None:
    cache = TemplateCache(Settings.from_env())
    if args.clear:
        if cache.clear():
            print_success("Cache cleared")
        else:
            print_info("No cache directory found")
        return
    if args.info:
        info = cache.info()
        if not info.exists:
            print_warning("No cache directory found")
            return
        print_summary_table(
            {
                "Cache directory": str(info.directory),
                "Cached files": str(info.entries),
                "Total cache size": format_size(info.total_bytes),
            },
            title="Template Cache",
        )
        return
    console.print("Cache management options:")
    console.print("  --clear  Clear all cached files")
    console.print("  --info   Show cache information")


def cmd_uninstall(args: argparse.Namespace) -> None:
    installer = Installer(Settings.from_env())
    if not args.dry_run and not args.yes:
        targets = ", ".join(str(p) for p in installer.uninstall_targets())
        if not Confirm.ask(f"Remove {targets}?", default=False):
            print_info("Uninstall cancelled")
            return
    removed = asyncio.run(installer.uninstall(dry_run=args.dry_run, remove_package=args.remove_package))
    if not args.dry_run:
        print_success(f"Uninstalled ({len(removed)} paths removed)")


# -- onboard ---------------------------------------------------------------


def _onboard_configure(args: argparse.Namespace, project_dir: Path) -> None:
    print_header("AI Agent Role Configuration")
    name = args.project_name or project_dir.resolve().name
    project_type = args.project_type or "react"
    enabled = _split_list(args.roles)
    auto_tracking = args.auto_tracking
    customizations: dict[str, tuple[str, list[str]]] = {}

    if not args.skip_prompts:
        name = Prompt.ask("Project name", default=name)
        project_type = Prompt.ask(
            "Primary project type", choices=list(AGENT_PROJECT_TYPES), default=project_type
        )
        defaults = enabled or [key for key, role in DEFAULT_AGENT_ROLES.items() if role.enabled]
        for key, role in DEFAULT_AGENT_ROLES.items():
            console.print(f"  [cyan]{key}[/cyan] {role.name} - {role.description[:80]}...")
        enabled = _split_list(Prompt.ask("Enabled roles (comma-separated)", default=",".join(defaults)))
        auto_tracking = Confirm.ask(
            "Enable automatic session tracking with git post-commit hook?", default=auto_tracking
        )
        for key in enabled:
            role = DEFAULT_AGENT_ROLES.get(key)
            if role is None or not Confirm.ask(f"Customize description for {role.name}?", default=False):
                continue
            description = Prompt.ask("Description", default=role.description)
            focus = _split_list(Prompt.ask("Focus areas (comma-separated)", default=", ".join(role.focus)))
            customizations[key] = (description, focus)
    elif not enabled:
        enabled = [key for key, role in DEFAULT_AGENT_ROLES.items() if role.enabled]

    config = build_agent_config(name, project_type, enabled, auto_tracking, customizations)
    asyncio.run(generate_agent_instructions(config, project_dir))
    print_success("AI Agent Configuration Complete!")
    console.print("Generated files:")
    console.print("[dim]  AI_AGENT_ONBOARDING.md - Instructions for new AI agents[/dim]")
    console.print("[dim]  .ai-agent-config.json   - Role configuration[/dim]")
    console.print("[dim]  SESSION_HANDOFF.md      - Template for session handoffs[/dim]")


def _onboard_add_role(args: argparse.Namespace, project_dir: Path) -> None:
    config = load_agent_config(project_dir)
    key = args.key or Prompt.ask("Role key (lowercase-with-hyphens)")
    name = args.name or Prompt.ask("Role display name", default=key)
    description = args.description or Prompt.ask("Role description and responsibilities")
    focus = _split_list(args.focus) if args.focus else _split_list(
        Prompt.ask("Focus areas (comma-separated)", default="")
    )
    role = add_role(config, key, name, description, focus)
    asyncio.run(generate_agent_instructions(config, project_dir))
    print_success(f"Added custom role: {role.name}")


def _onboard_handoff(args: argparse.Namespace, project_dir: Path) -> None:
    config = load_agent_config(project_dir)
    role = args.role or args.role_key
    if not role:
        choices = [key for key, _ in config.enabled_roles]
        if not choices:
            raise UserInputError("No roles enabled. Run `uds onboard configure` first.")
        role = Prompt.ask("What role were you acting as this session?", choices=choices)
    summary = args.summary or Prompt.ask("Brief session summary")
    if not summary.strip():
        raise UserInputError("Session summary must not be empty")
    asyncio.run(generate_session_handoff(config, role, summary, project_dir))
    print_success("Session handoff generated: SESSION_HANDOFF.md")


def _onboard_roles(args: argparse.Namespace, project_dir: Path) -> None:
    config = load_agent_config(project_dir)
    if args.role_key:
        role = config.roles.get(args.role_key)
        if role is None:
            raise UserInputError(f"Unknown role: {args.role_key}")
        console.print(f"\n[bold blue]{role.name}[/bold blue]")
        console.print(f"Description: {role.description}")
        console.print(f"Focus Areas: {', '.join(role.focus)}")
        console.print(f"Status: {'[green]Enabled[/green]' if role.enabled else '[red]Disabled[/red]'}")
        if role.is_custom:
            console.print("[yellow]Custom: Modified from default[/yellow]")
        return

    print_header("Configured AI Agent Roles")
    enabled = config.enabled_roles
    if enabled:
        console.print("[bold green]Enabled Roles:[/bold green]")
        for key, role in enabled:
            more = "..." if len(role.focus) > 3 else ""
            console.print(f"[cyan]{role.name}[/cyan]")
            console.print(f"[dim]  Key: {key}[/dim]")
            console.print(f"[dim]  Focus: {', '.join(role.focus[:3])}{more}[/dim]")
            if role.is_custom:
                console.print("[yellow]  Status: Customized[/yellow]")
    disabled = [(key, role) for key, role in config.roles.items() if not role.enabled]
    if disabled:
        console.print("[bold red]Disabled Roles:[/bold red]")
        for key, role in disabled:
            console.print(f"[dim]{role.name} ({key})[/dim]")


_ONBOARD_ACTIONS: dict[str, Callable[[argparse.Namespace, Path], None]] = {
    "configure": _onboard_configure,
    "add-role": _onboard_add_role,
    "handoff": _onboard_handoff,
    "roles": _onboard_roles,
}


def cmd_onboard(args: argparse.Namespace) -> None:
    _ONBOARD_ACTIONS[args.action or "configure"](args, Path(args.directory))


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_setup_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--type", "-t", choices=[t.value for t in ProjectType], help="Project type")
    parser.add_argument("--name", "-n", help="Project name (default: current directory name)")
    parser.add_argument("--backend", "-b", choices=[b.value for b in Backend], help="Backend for React projects")
    parser.add_argument("--ml", action="store_true", help="Include ML libraries (python)")
    parser.add_argument("--features", help="Comma-separated feature flags")
    parser.add_argument("--base-image", choices=[b.value for b in BaseImage], help="Devcontainer base image")
    parser.add_argument("--ai-context", action="store_true", help="Generate the .ai/ context folder")
    parser.add_argument("--skip-prompts", action="store_true", help="Skip interactive prompts")
    parser.add_argument("--skip-tools", action="store_true", help="Do not install AI CLIs on the host")
    parser.add_argument(
        "--cache",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Use the template download cache (default: on)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Show the strategy and files without writing")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="uds",
        description="Universal Dev Environment -- development environment scaffolding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  uds init --type react --backend express --name my-app\n"
            "  uds setup --skip-prompts --type python --ml\n"
            "  uds template node -d ./api\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="Initialize a new project with a development environment")
    _add_setup_options(p)
    p.add_argument("--here", action="store_true", help="Use the current directory as the project root")
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("setup", help="Set up the development environment in the current directory")
    _add_setup_options(p)
    p.set_defaults(func=cmd_setup)

    p = sub.add_parser("install", help="Install development tools in the current environment")
    p.add_argument("--dry-run", action="store_true", help="Show what would be installed")
    p.add_argument("--cache", action=argparse.BooleanOptionalAction, default=True)
    p.set_defaults(func=cmd_install)

    p = sub.add_parser("template", help="Create a project from a named template")
    p.add_argument("name", help=f"Template name ({', '.join(TEMPLATES)})")
    p.add_argument("-d", "--directory", default=".", help="Target directory (default: .)")
    p.set_defaults(func=cmd_template)

    p = sub.add_parser("update", help="Upgrade universal-dev-env to the latest version")
    p.add_argument("--dry-run", action="store_true")
    p.set_defaults(func=cmd_update)

    p = sub.add_parser("cache", help="Manage the template cache")
    p.add_argument("--clear", action="store_true", help="Clear all cached files")
    p.add_argument("--info", action="store_true", help="Show cache information")
    p.set_defaults(func=cmd_cache)

    p = sub.add_parser("onboard", help="AI agent onboarding and session handoffs")
    p.add_argument("action", nargs="?", choices=list(_ONBOARD_ACTIONS), default="configure")
    p.add_argument("role_key", nargs="?", metavar="ROLE", help="Role key (roles, handoff)")
    p.add_argument("--role", help="Role acted as this session (handoff)")
    p.add_argument("-d", "--directory", default=".", help="Project directory (default: .)")
    p.add_argument("--project-name")
    p.add_argument("--project-type", choices=list(AGENT_PROJECT_TYPES))
    p.add_argument("--roles", help="Comma-separated role keys to enable (configure)")
    p.add_argument("--auto-tracking", action="store_true", help="Install the post-commit reminder hook")
    p.add_argument("--skip-prompts", action="store_true")
    p.add_argument("--key", help="Role key (add-role)")
    p.add_argument("--name", help="Role display name (add-role)")
    p.add_argument("--description", help="Role description (add-role)")
    p.add_argument("--focus", help="Comma-separated focus areas (add-role)")
    p.add_argument("--summary", help="Session summary (handoff)")
    p.set_defaults(func=cmd_onboard)

    p = sub.add_parser("uninstall", help="Remove the tool's files from this machine")
    p.add_argument("--dry-run", action="store_true")
    p.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    p.add_argument("--remove-package", action="store_true", help="Also pip uninstall the package")
    p.set_defaults(func=cmd_uninstall)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``uds`` and ``python -m universal_dev_env``."""
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except (UserInputError, ScaffoldError, InstallError, DownloadError) as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        print_warning("Aborted")
        sys.exit(1)


if __name__ == "__main__":
    main()
