#!/usr/bin/env python3
"""
Configuration commands for the goldenreset CLI.
"""

from pathlib import Path

import yaml

from goldenreset.cli.utils import console, settings_from_args
from goldenreset.models import save_settings


def cmd_config_show(args):
    """Print the effective settings."""
    settings = settings_from_args(args)
    console.print(yaml.safe_dump(settings.to_yaml_dict(), default_flow_style=False, sort_keys=False))


def cmd_config_set(args):
    """Persist base path, golden tag or vmrun path."""
    settings = settings_from_args(args)
    path = save_settings(settings, Path(args.config) if args.config else None)
    console.print(f"[green]✅ Config saved to: {path}[/]")
