"""Configuration setup utilities for planlog."""

import json
from pathlib import Path

import click

from ..core.config import CONFIG_FILENAME, Config, ConfigError

CONFIG_TEMPLATE = """\
# planlog configuration

[plans]
directory = "plans"
prefix = "todo"
number_width = 3
log_file = "LOG.md"
statuses = ["done", "abandoned", "superseded"]
require_approval = true
instructions_file = "INSTRUCTIONS.md"

[deploy]
remote = "origin"
branch = "main"
# Public URL where the CI workflow publishes the site
site_url = ""
# Text the published page must contain, e.g. the application title
expected_text = ""
# Name of the CI workflow, shown in the checklist only
workflow = ""
timeout = 600
interval = 15
request_timeout = 10
require_change = false
allow_dirty = false

[logging]
level = "INFO"
"""


@click.group()
def config():
    """Configuration management commands."""
    pass


@config.command()
@click.option(
    "--scope",
    type=click.Choice(["local", "user"]),
    default="local",
    help="Configuration scope (local=current dir, user=~/.config/planlog)",
)
@click.option("--force", is_flag=True, help="Overwrite existing configuration file")
def init(scope: str, force: bool):
    """Create a configuration file from the template."""
    if scope == "local":
        config_path = Path.cwd() / CONFIG_FILENAME
    else:
        config_dir = Path.home() / ".config" / "planlog"
        config_dir.mkdir(parents=True, exist_ok=True)
        config_path = config_dir / CONFIG_FILENAME

    if config_path.exists() and not force:
        click.echo(f"Configuration file already exists: {config_path}")
        click.echo("Use --force to overwrite")
        raise SystemExit(1)

    config_path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    click.echo(f"Created configuration file: {config_path}")
    click.echo("\nNext steps:")
    click.echo("1. Set deploy.site_url and deploy.expected_text")
    click.echo("2. Check the file with: planlog-config validate")


@config.command()
@click.option("--config-file", "-c", type=click.Path(), help="Explicit config file")
def show(config_file):
    """Show the effective configuration and its source."""
    try:
        cfg = Config(config_file)
    except ConfigError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        raise SystemExit(1)

    source = cfg.source or "built-in defaults"
    click.echo(f"Configuration source: {source}")
    click.echo(json.dumps(cfg.config, indent=2))


@config.command()
@click.option("--config-file", "-c", type=click.Path(), help="Explicit config file")
def validate(config_file):
    """Validate the configuration."""
    try:
        cfg = Config(config_file)
        cfg.validate()
    except ConfigError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1)

    click.echo(f"✓ Configuration valid ({cfg.source or 'built-in defaults'})")
    if not cfg.deploy["site_url"]:
        click.echo("⚠ deploy.site_url is not set; 'planlog deploy' needs --url")


if __name__ == "__main__":
    config()
