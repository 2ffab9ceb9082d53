"""Unit tests for post-generation tooling (frameforge.scaffolder.tooling).

Tests cover:
- Step planning per automation type and engine
- Successful runs
- Non-zero exits and missing executables become warnings
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from frameforge.config import ToolingConfig
from frameforge.scaffolder.tooling import (
    PostGenerationToolingFailure,
    plan_tooling,
    run_tooling,
)


def _commands(config, tooling=None) -> list[list[str]]:
    return [step.command for step in plan_tooling(config, tooling or ToolingConfig())]


class TestPlanTooling:
    @pytest.mark.unit
    def test_web(self, web_basic_config):
        assert _commands(web_basic_config) == [
            ["npm", "install"],
            ["npx", "playwright", "install"],
            ["git", "init"],
        ]

    @pytest.mark.unit
    def test_api_skips_browsers(self, api_bearer_config):
        assert _commands(api_bearer_config) == [["npm", "install"], ["git", "init"]]

    @pytest.mark.unit
    def test_mobile_installs_appium_drivers(self, mobile_both_config):
        commands = _commands(mobile_both_config)
        assert ["npx", "appium", "driver", "install", "uiautomator2"] in commands
        assert ["npx", "appium", "driver", "install", "xcuitest"] in commands
        assert ["npx", "playwright", "install"] not in commands

    @pytest.mark.unit
    def test_mobile_web_needs_browsers(self, sample_configs):
        config = next(
            c for c in sample_configs
            if c.mobile is not None and c.mobile.platform.value == "mobile-web"
        )
        assert ["npx", "playwright", "install"] in _commands(config)

    @pytest.mark.unit
    def test_custom_executables(self, web_basic_config):
        commands = _commands(web_basic_config, ToolingConfig(npm="pnpm", npx="pnpx", git="/opt/git"))
        assert commands[0] == ["pnpm", "install"]
        assert commands[-1] == ["/opt/git", "init"]


class TestRunTooling:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_all_steps_succeed(self, web_basic_config):
        runner = AsyncMock(return_value=(0, "ok", ""))
        report = await run_tooling(web_basic_config, ToolingConfig(timeout=30), runner)

        assert report.clean
        assert report.completed == [
            "Install dependencies",
            "Install Playwright browsers",
            "Initialize git repository",
        ]
        first = runner.call_args_list[0]
        assert first.args[0] == ["npm", "install"]
        assert first.kwargs["cwd"] == web_basic_config.project_root
        assert first.kwargs["timeout"] == 30

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_becomes_warning_and_run_continues(self, web_basic_config):
        runner = AsyncMock(side_effect=[
            (1, "", "npm ERR! network\nnpm ERR! ETIMEDOUT"),
            (0, "", ""),
            (0, "", ""),
        ])
        report = await run_tooling(web_basic_config, ToolingConfig(), runner)

        assert not report.clean
        assert runner.await_count == 3
        assert report.completed == ["Install Playwright browsers", "Initialize git repository"]
        warning = report.warnings[0]
        assert isinstance(warning, PostGenerationToolingFailure)
        assert warning.step == "Install dependencies"
        assert warning.returncode == 1
        assert warning.detail == "npm ERR! ETIMEDOUT"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_without_stderr(self, api_bearer_config):
        runner = AsyncMock(side_effect=[(-1, "", ""), (0, "", "")])
        report = await run_tooling(api_bearer_config, ToolingConfig(), runner)
        assert report.warnings[0].detail == "exit code -1"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_executable_becomes_warning(self, api_bearer_config):
        runner = AsyncMock(side_effect=[FileNotFoundError("npm"), (0, "", "")])
        report = await run_tooling(api_bearer_config, ToolingConfig(), runner)

        assert [w.step for w in report.warnings] == ["Install dependencies"]
        assert report.warnings[0].returncode is None
        assert report.completed == ["Initialize git repository"]
