"""frameforge tool settings.

Typed, environment-driven settings for the generator itself (not for the
project being generated).  Settings only seed prompt defaults and control the
post-generation tooling; every project decision is still collected by the
interactive wizard.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from frameforge.model.models import is_valid_environment_name


_TRUTHY = {"1", "true", "yes", "y", "on"}


def _env_flag(name: str) -> bool | None:
    """Return the boolean value of env var *name*, or ``None`` when unset."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() in _TRUTHY


class ToolingConfig(BaseModel):
    """Executables and limits for the post-generation subprocess runner."""

    npm: str = Field(default="npm")
    npx: str = Field(default="npx")
    git: str = Field(default="git")
    timeout: int = Field(default=600, ge=10, description="Per-command timeout in seconds")


class GeneratorSettings(BaseModel):
    """Settings for one frameforge session.

    Instances are created once by the CLI entry point (normally through
    :meth:`from_env`) and handed to the wizard controller.
    """

    default_project_name: str = Field(default="playwright-automation")
    default_target_path: Path = Field(default_factory=Path.cwd)
    default_base_url: str = Field(default="https://example.com")
    default_api_url: str = Field(default="https://api.example.com")
    default_environments: list[str] = Field(
        default_factory=lambda: ["local", "staging", "production"]
    )
    run_post_generation: bool = Field(
        default=True,
        description="Default answer for running npm/browser/git tooling after generation",
    )
    clean_on_overwrite: bool = Field(
        default=False,
        description="Remove an existing project directory before regenerating it",
    )
    tooling: ToolingConfig = Field(default_factory=ToolingConfig)

    @field_validator("default_environments")
    @classmethod
    def _valid_environment_names(cls, value: list[str]) -> list[str]:
        invalid = [name for name in value if not is_valid_environment_name(name)]
        if invalid:
            raise ValueError(
                f"Invalid environment name(s) {', '.join(map(repr, invalid))}: "
                "use a lowercase letter first, then a-z, 0-9, '-' or '_'"
            )
        return value

    @classmethod
    def from_env(cls) -> "GeneratorSettings":
        """Build settings from environment variables.

        Recognised variables (all optional):
            FRAMEFORGE_PROJECT_NAME, FRAMEFORGE_TARGET_PATH, FRAMEFORGE_BASE_URL,
            FRAMEFORGE_API_URL, FRAMEFORGE_ENVIRONMENTS, FRAMEFORGE_RUN_TOOLING,
            FRAMEFORGE_CLEAN_ON_OVERWRITE, FRAMEFORGE_TOOLING_TIMEOUT,
            FRAMEFORGE_NPM, FRAMEFORGE_NPX, FRAMEFORGE_GIT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("FRAMEFORGE_PROJECT_NAME"):
            kwargs["default_project_name"] = os.environ["FRAMEFORGE_PROJECT_NAME"]
        if os.environ.get("FRAMEFORGE_TARGET_PATH"):
            kwargs["default_target_path"] = Path(os.environ["FRAMEFORGE_TARGET_PATH"])
        if os.environ.get("FRAMEFORGE_BASE_URL"):
            kwargs["default_base_url"] = os.environ["FRAMEFORGE_BASE_URL"]
        if os.environ.get("FRAMEFORGE_API_URL"):
            kwargs["default_api_url"] = os.environ["FRAMEFORGE_API_URL"]
        if os.environ.get("FRAMEFORGE_ENVIRONMENTS"):
            envs = [e.strip() for e in os.environ["FRAMEFORGE_ENVIRONMENTS"].split(",")]
            kwargs["default_environments"] = [e for e in envs if e]

        run_tooling = _env_flag("FRAMEFORGE_RUN_TOOLING")
        if run_tooling is not None:
            kwargs["run_post_generation"] = run_tooling
        clean = _env_flag("FRAMEFORGE_CLEAN_ON_OVERWRITE")
        if clean is not None:
            kwargs["clean_on_overwrite"] = clean

        tooling_kwargs: dict[str, Any] = {}
        if os.environ.get("FRAMEFORGE_TOOLING_TIMEOUT"):
            tooling_kwargs["timeout"] = int(os.environ["FRAMEFORGE_TOOLING_TIMEOUT"])
        if os.environ.get("FRAMEFORGE_NPM"):
            tooling_kwargs["npm"] = os.environ["FRAMEFORGE_NPM"]
        if os.environ.get("FRAMEFORGE_NPX"):
            tooling_kwargs["npx"] = os.environ["FRAMEFORGE_NPX"]
        if os.environ.get("FRAMEFORGE_GIT"):
            tooling_kwargs["git"] = os.environ["FRAMEFORGE_GIT"]

        return cls(tooling=ToolingConfig(**tooling_kwargs), **kwargs)
