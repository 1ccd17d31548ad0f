#!/usr/bin/env python3
"""
Pydantic models for goldenreset configuration validation.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from goldenreset.paths import default_base_path, default_config_path


class ResetSettings(BaseModel):
    """Settings shared by every reset operation.

    Passed explicitly to the orchestrator and its components; there is no
    process-wide configuration object.
    """

    base_path: Path = Field(
        default_factory=default_base_path, description="Root directory searched for .vmx files"
    )
    golden_tag: str = Field(
        default="golden", description="Snapshot name fragment highlighted as recommended"
    )
    vmrun_path: Optional[Path] = Field(
        default=None, description="Path to vmrun (default: PATH lookup, then known install dirs)"
    )
    host_type: str = Field(default="ws", description="vmrun -T host type")
    poll_interval: float = Field(default=3.0, gt=0, le=300, description="Progress poll interval (s)")
    eta_warmup: float = Field(default=5.0, ge=0, le=3600, description="Elapsed seconds before ETA")
    settle_delay: float = Field(default=2.0, ge=0, le=120, description="Wait after stopping the VM (s)")
    use_lock: bool = Field(default=True, description="Refuse concurrent resets of the same VM")

    @field_validator("base_path", "vmrun_path", mode="before")
    @classmethod
    def expand_user(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        return Path(v).expanduser()

    @field_validator("golden_tag")
    @classmethod
    def tag_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("golden_tag cannot be empty")
        return v.strip()

    @field_validator("host_type")
    @classmethod
    def host_type_must_be_valid(cls, v: str) -> str:
        valid = {"ws", "fusion", "player"}
        if v not in valid:
            raise ValueError(f"host_type must be one of: {valid}")
        return v

    def with_overrides(self, **overrides: Any) -> "ResetSettings":
        """Return a copy with the non-None overrides applied and validated."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return ResetSettings.model_validate(data)

    def to_yaml_dict(self) -> Dict[str, Any]:
        data = self.model_dump()
        data["base_path"] = str(self.base_path)
        data["vmrun_path"] = str(self.vmrun_path) if self.vmrun_path else None
        return data


def load_settings(config_path: Optional[Path] = None) -> ResetSettings:
    """Load settings from YAML, falling back to defaults when the file is absent.

    A file that exists but is not valid YAML or fails validation raises
    ValueError; silently ignoring a broken config could point a reset at the
    wrong directory.
    """
    path = Path(config_path) if config_path else default_config_path()
    if not path.exists():
        return ResetSettings()

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config {path} must be a mapping")

    try:
        return ResetSettings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config {path}: {e}") from e


def save_settings(settings: ResetSettings, config_path: Optional[Path] = None) -> Path:
    """Write settings as YAML and return the path written."""
    path = Path(config_path) if config_path else default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(settings.to_yaml_dict(), f, default_flow_style=False, sort_keys=False)
    return path
