"""Shared pytest fixtures for the frameforge test suite.

Provides reusable fixtures for:
- Generator settings pointed at a temporary directory
- A scripted line reader that answers wizard prompts from a list
- An in-memory filesystem that records every write
- Frozen project configurations for each automation type
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

import pytest

from frameforge.config import GeneratorSettings
from frameforge.model import (
    ApiConfig,
    AuthType,
    AutomationType,
    DeviceTarget,
    FeatureKey,
    IntegrationConfig,
    MobileConfig,
    MobileEngine,
    MobilePlatform,
    ProjectConfig,
    ProjectDraft,
    TemplatePreset,
    resolve_features,
)


# ---------------------------------------------------------------------------
# Prompt input
# ---------------------------------------------------------------------------

class ScriptedReader:
    """LineReader that replays canned answers and records every prompt.

    Running out of answers raises ``EOFError``, which is what a closed
    terminal does, so a wizard that asks more than expected fails loudly
    instead of hanging.
    """

    def __init__(self, answers: Iterable[str]):
        self.answers = list(answers)
        self.prompts: list[str] = []

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError(f"No scripted answer left for prompt: {prompt}")
        return self.answers.pop(0)

    @property
    def exhausted(self) -> bool:
        return not self.answers


@pytest.fixture
def scripted_reader() -> Callable[..., ScriptedReader]:
    """Factory: ``scripted_reader("1", "my-suite", "")``."""
    return lambda *answers: ScriptedReader(answers)


# ---------------------------------------------------------------------------
# Filesystem
# ---------------------------------------------------------------------------

class FakeFileSystem:
    """In-memory :class:`FileSystem` that records writes in order.

    Attributes:
        files: Written (or pre-seeded) file contents by path.
        dirs: Existing directories.
        writes: Every ``write_text`` target, in call order.
        fail_on: Paths whose write raises ``OSError``.
    """

    def __init__(self, dirs: Iterable[Path] = (), files: Mapping[Path, str] | None = None):
        self.dirs: set[Path] = set()
        self.files: dict[Path, str] = dict(files or {})
        self.writes: list[Path] = []
        self.mkdirs: list[Path] = []
        self.removed: list[Path] = []
        self.fail_on: set[Path] = set()
        for d in dirs:
            self._add_dir(d)
        for f in self.files:
            self._add_dir(f.parent)

    def _add_dir(self, path: Path) -> None:
        self.dirs.add(path)
        self.dirs.update(path.parents)

    def exists(self, path: Path) -> bool:
        return path in self.dirs or path in self.files

    def is_dir(self, path: Path) -> bool:
        return path in self.dirs

    def mkdir(self, path: Path) -> None:
        self.mkdirs.append(path)
        self._add_dir(path)

    def write_text(self, path: Path, content: str) -> None:
        if path in self.fail_on:
            raise OSError(f"Permission denied: {path}")
        self.writes.append(path)
        self.files[path] = content

    def remove_tree(self, path: Path) -> None:
        self.removed.append(path)
        self.dirs = {d for d in self.dirs if d != path and path not in d.parents}
        self.files = {f: c for f, c in self.files.items() if path not in f.parents}


@pytest.fixture
def fs_factory() -> type[FakeFileSystem]:
    """The in-memory filesystem class, for tests that pre-seed dirs or files."""
    return FakeFileSystem


@pytest.fixture
def fake_fs(tmp_path: Path) -> FakeFileSystem:
    """In-memory filesystem in which ``tmp_path`` already exists."""
    return FakeFileSystem(dirs=[tmp_path])


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path: Path) -> GeneratorSettings:
    """Settings that target ``tmp_path`` and never run post-generation tooling."""
    return GeneratorSettings(
        default_project_name="my-suite",
        default_target_path=tmp_path,
        run_post_generation=False,
    )


# ---------------------------------------------------------------------------
# Project configurations
# ---------------------------------------------------------------------------

ANDROID_TARGET = DeviceTarget(
    os=MobilePlatform.ANDROID,
    engine=MobileEngine.UIAUTOMATOR2,
    device_name="Android Emulator",
    platform_version="13.0",
)
IOS_TARGET = DeviceTarget(
    os=MobilePlatform.IOS,
    engine=MobileEngine.XCUITEST,
    device_name="iPhone Simulator",
    platform_version="16.0",
)


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., ProjectConfig]:
    """Factory building a frozen config the same way the wizard does.

    Usage::

        config = make_config(AutomationType.WEB, TemplatePreset.BASIC)
    """

    def _make(
        automation_type: AutomationType = AutomationType.WEB,
        template: TemplatePreset = TemplatePreset.STANDARD,
        *,
        custom: Mapping[FeatureKey, bool] | None = None,
        mobile: MobileConfig | None = None,
        api: ApiConfig | None = None,
        **overrides: Any,
    ) -> ProjectConfig:
        draft = ProjectDraft(
            project_name=overrides.pop("project_name", "my-suite"),
            target_path=overrides.pop("target_path", tmp_path),
            automation_type=automation_type,
            template=template,
            custom_features=dict(custom) if custom is not None else None,
            mobile=mobile,
            api=api,
            **overrides,
        )
        features = resolve_features(template, automation_type, custom)
        return draft.freeze(features)

    return _make


@pytest.fixture
def web_basic_config(make_config) -> ProjectConfig:
    return make_config(AutomationType.WEB, TemplatePreset.BASIC)


@pytest.fixture
def web_standard_config(make_config) -> ProjectConfig:
    return make_config(AutomationType.WEB, TemplatePreset.STANDARD)


@pytest.fixture
def web_all_features_config(make_config) -> ProjectConfig:
    return make_config(
        AutomationType.WEB,
        TemplatePreset.CUSTOM,
        custom={key: True for key in FeatureKey},
    )


@pytest.fixture
def api_bearer_config(make_config) -> ProjectConfig:
    return make_config(
        AutomationType.API,
        TemplatePreset.STANDARD,
        api=ApiConfig(auth_type=AuthType.BEARER, token_env="API_TOKEN"),
    )


@pytest.fixture
def mobile_both_config(make_config) -> ProjectConfig:
    return make_config(
        AutomationType.MOBILE,
        TemplatePreset.MOBILE_FIRST,
        mobile=MobileConfig(platform=MobilePlatform.BOTH, targets=(ANDROID_TARGET, IOS_TARGET)),
    )


@pytest.fixture
def hybrid_enterprise_config(make_config) -> ProjectConfig:
    return make_config(
        AutomationType.HYBRID,
        TemplatePreset.ENTERPRISE,
        mobile=MobileConfig(platform=MobilePlatform.ANDROID, targets=(ANDROID_TARGET,)),
        environments=["local", "staging", "qa", "production"],
        integrations=IntegrationConfig(reporters=("html", "allure")),
    )


@pytest.fixture
def sample_configs(make_config) -> list[ProjectConfig]:
    """One config per automation type plus every platform and auth variant."""
    configs = [
        make_config(AutomationType.WEB, TemplatePreset.BASIC),
        make_config(AutomationType.WEB, TemplatePreset.ENTERPRISE),
        make_config(
            AutomationType.WEB,
            TemplatePreset.CUSTOM,
            custom={
                key: key not in (FeatureKey.INTERACTIONS_MODULE, FeatureKey.UTILITIES_MODULE)
                for key in FeatureKey
            },
        ),
        make_config(
            AutomationType.MOBILE,
            TemplatePreset.ENTERPRISE,
            mobile=MobileConfig(platform=MobilePlatform.BOTH, targets=(ANDROID_TARGET, IOS_TARGET)),
        ),
        make_config(
            AutomationType.HYBRID,
            TemplatePreset.ENTERPRISE,
            mobile=MobileConfig(
                platform=MobilePlatform.MOBILE_WEB,
                targets=(DeviceTarget(
                    os=MobilePlatform.MOBILE_WEB,
                    engine=MobileEngine.PLAYWRIGHT,
                    device_name="Pixel 7",
                ),),
            ),
        ),
        make_config(
            AutomationType.MOBILE,
            TemplatePreset.STANDARD,
            mobile=MobileConfig(
                platform=MobilePlatform.DESKTOP,
                targets=(DeviceTarget(
                    os=MobilePlatform.DESKTOP,
                    engine=MobileEngine.ELECTRON,
                    device_name="Desktop",
                ),),
            ),
        ),
    ]
    api_variants = [
        ApiConfig(auth_type=AuthType.NONE),
        ApiConfig(auth_type=AuthType.BEARER, token_env="API_TOKEN", flavor="both"),
        ApiConfig(auth_type=AuthType.APIKEY, api_key_header="X-API-Key", api_key_env="API_KEY"),
        ApiConfig(auth_type=AuthType.BASIC, username_env="API_USERNAME", password_env="API_PASSWORD"),
        ApiConfig(
            auth_type=AuthType.OAUTH2,
            token_url="https://auth.example.com/oauth/token",
            client_id_env="OAUTH_CLIENT_ID",
            client_secret_env="OAUTH_CLIENT_SECRET",
            flavor="graphql",
        ),
    ]
    configs.extend(
        make_config(AutomationType.API, TemplatePreset.ENTERPRISE, api=api)
        for api in api_variants
    )
    return configs
