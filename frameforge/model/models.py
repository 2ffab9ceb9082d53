"""Pydantic v2 models describing the project to generate.

Defines the closed enumerations the wizard chooses from, the complete
``FeatureVector``, the platform sub-configurations, and the two-stage project
aggregate: a mutable ``ProjectDraft`` populated step by step by the wizard, and
the immutable ``ProjectConfig`` it is frozen into before generation starts.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class AutomationType(str, Enum):
    """Delivery channel of the generated project."""
    WEB = "web"
    MOBILE = "mobile"
    HYBRID = "hybrid"
    API = "api"


class TemplatePreset(str, Enum):
    """Named bundle of feature defaults."""
    BASIC = "basic"
    STANDARD = "standard"
    ENTERPRISE = "enterprise"
    MOBILE_FIRST = "mobile-first"
    CUSTOM = "custom"


class FeatureKey(str, Enum):
    """Closed set of feature flags, in canonical declaration order."""
    API_TESTING = "api-testing"
    VISUAL_TESTING = "visual-testing"
    PERFORMANCE_TESTING = "performance-testing"
    ACCESSIBILITY_TESTING = "accessibility-testing"
    MOBILE_TESTING = "mobile-testing"
    CI_CD_TEMPLATES = "ci-cd-templates"
    DOCKER_SUPPORT = "docker-support"
    CLOUD_TESTING = "cloud-testing"
    REPORTING_DASHBOARD = "reporting-dashboard"
    TEST_GENERATOR = "test-generator"
    INTERACTIONS_MODULE = "interactions-module"
    RUNNER_CONFIGURATION = "runner-configuration"
    UTILITIES_MODULE = "utilities-module"
    CONSTANTS_MODULE = "constants-module"

    @property
    def field_name(self) -> str:
        """Attribute name of this key on :class:`FeatureVector`."""
        return self.value.replace("-", "_")


FEATURE_DESCRIPTIONS: dict[FeatureKey, str] = {
    FeatureKey.API_TESTING: "API Testing Support",
    FeatureKey.VISUAL_TESTING: "Visual Testing (Screenshots/Diff)",
    FeatureKey.PERFORMANCE_TESTING: "Performance Testing",
    FeatureKey.ACCESSIBILITY_TESTING: "Accessibility Testing",
    FeatureKey.MOBILE_TESTING: "Mobile Device Testing",
    FeatureKey.CI_CD_TEMPLATES: "CI/CD Templates",
    FeatureKey.DOCKER_SUPPORT: "Docker Support",
    FeatureKey.CLOUD_TESTING: "Cloud Testing Integration",
    FeatureKey.REPORTING_DASHBOARD: "Advanced Reporting Dashboard",
    FeatureKey.TEST_GENERATOR: "AI-Powered Test Generator",
    FeatureKey.INTERACTIONS_MODULE: "Advanced Interactions Module",
    FeatureKey.RUNNER_CONFIGURATION: "Runner Configuration",
    FeatureKey.UTILITIES_MODULE: "Utilities Module",
    FeatureKey.CONSTANTS_MODULE: "Constants Module",
}


class MobilePlatform(str, Enum):
    """Target platform selection for mobile and hybrid projects."""
    ANDROID = "android"
    IOS = "ios"
    BOTH = "both"
    MOBILE_WEB = "mobile-web"
    DESKTOP = "desktop"


class MobileEngine(str, Enum):
    """Automation engine driving one device target."""
    UIAUTOMATOR2 = "uiautomator2"
    ESPRESSO = "espresso"
    XCUITEST = "xcuitest"
    PLAYWRIGHT = "playwright"
    ELECTRON = "electron"


class AuthType(str, Enum):
    """Authentication scheme of the API under test."""
    NONE = "none"
    BEARER = "bearer"
    APIKEY = "apikey"
    BASIC = "basic"
    OAUTH2 = "oauth2"


class ApiFlavor(str, Enum):
    """Style of the API under test."""
    REST = "rest"
    GRAPHQL = "graphql"
    BOTH = "both"


class FileConflictPolicy(str, Enum):
    """What the materializer does with a path that already exists."""
    OVERWRITE = "overwrite"
    ABORT = "abort"


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

_PROJECT_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_ENVIRONMENT_NAME_RE = re.compile(r"^[a-z][a-z0-9_-]*$")


def is_valid_project_name(name: str) -> bool:
    """Return ``True`` if *name* uses only letters, digits, hyphens and underscores."""
    return bool(_PROJECT_NAME_RE.match(name))


def is_valid_environment_name(name: str) -> bool:
    """Lowercase letter first, then a-z, 0-9, hyphens or underscores."""
    return bool(_ENVIRONMENT_NAME_RE.match(name))


def is_absolute_url(url: str) -> bool:
    """Return ``True`` if *url* parses as an absolute http(s) URL with a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


# ---------------------------------------------------------------------------
# Feature vector
# ---------------------------------------------------------------------------

class FeatureVector(BaseModel):
    """Complete boolean map over the closed feature-key set.

    Every key is a required field, so a vector can never be partial, and
    ``extra="forbid"`` rejects unknown keys.  Fields are addressed by their
    hyphenated key (``vector["api-testing"]``) or by attribute
    (``vector.api_testing``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    api_testing: bool = Field(..., alias="api-testing")
    visual_testing: bool = Field(..., alias="visual-testing")
    performance_testing: bool = Field(..., alias="performance-testing")
    accessibility_testing: bool = Field(..., alias="accessibility-testing")
    mobile_testing: bool = Field(..., alias="mobile-testing")
    ci_cd_templates: bool = Field(..., alias="ci-cd-templates")
    docker_support: bool = Field(..., alias="docker-support")
    cloud_testing: bool = Field(..., alias="cloud-testing")
    reporting_dashboard: bool = Field(..., alias="reporting-dashboard")
    test_generator: bool = Field(..., alias="test-generator")
    interactions_module: bool = Field(..., alias="interactions-module")
    runner_configuration: bool = Field(..., alias="runner-configuration")
    utilities_module: bool = Field(..., alias="utilities-module")
    constants_module: bool = Field(..., alias="constants-module")

    @classmethod
    def from_mapping(cls, flags: Mapping[str, bool]) -> "FeatureVector":
        """Build a vector from a ``{key: bool}`` mapping.

        Raises:
            ValueError: If a key is unknown or any feature key is missing.
        """
        resolved: dict[FeatureKey, bool] = {}
        for raw_key, value in flags.items():
            try:
                key = FeatureKey(raw_key)
            except ValueError as exc:
                raise ValueError(f"Unknown feature key: {raw_key!r}") from exc
            resolved[key] = bool(value)

        missing = [k.value for k in FeatureKey if k not in resolved]
        if missing:
            raise ValueError(f"Feature vector is missing keys: {', '.join(missing)}")
        return cls(**{k.value: v for k, v in resolved.items()})

    def __getitem__(self, key: FeatureKey | str) -> bool:
        return getattr(self, FeatureKey(key).field_name)

    def enabled(self) -> list[FeatureKey]:
        """Enabled keys in canonical declaration order."""
        return [k for k in FeatureKey if self[k]]

    def as_dict(self) -> dict[str, bool]:
        """Plain ``{hyphenated-key: bool}`` mapping in canonical order."""
        return {k.value: self[k] for k in FeatureKey}

    def without(self, keys: Iterable[FeatureKey]) -> "FeatureVector":
        """Return a copy with every key in *keys* forced to ``False``."""
        return self.model_copy(update={FeatureKey(k).field_name: False for k in keys})


# ---------------------------------------------------------------------------
# Platform sub-configurations
# ---------------------------------------------------------------------------

# Engines available per device OS; the first entry is the menu default.
PLATFORM_ENGINES: dict[MobilePlatform, list[MobileEngine]] = {
    MobilePlatform.ANDROID: [MobileEngine.UIAUTOMATOR2, MobileEngine.ESPRESSO],
    MobilePlatform.IOS: [MobileEngine.XCUITEST],
    MobilePlatform.MOBILE_WEB: [MobileEngine.PLAYWRIGHT],
    MobilePlatform.DESKTOP: [MobileEngine.ELECTRON],
}

# (device name, platform version) defaults per device OS.
DEVICE_DEFAULTS: dict[MobilePlatform, tuple[str, str | None]] = {
    MobilePlatform.ANDROID: ("Android Emulator", "13.0"),
    MobilePlatform.IOS: ("iPhone Simulator", "16.0"),
    MobilePlatform.MOBILE_WEB: ("Pixel 7", None),
    MobilePlatform.DESKTOP: ("Desktop", None),
}


def target_platforms(platform: MobilePlatform) -> list[MobilePlatform]:
    """Expand a platform selection into the concrete device OS list."""
    if platform is MobilePlatform.BOTH:
        return [MobilePlatform.ANDROID, MobilePlatform.IOS]
    return [platform]


class DeviceTarget(BaseModel):
    """One concrete device OS with its engine and device defaults."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    os: MobilePlatform = Field(..., description="Concrete device OS (never 'both')")
    engine: MobileEngine = Field(..., description="Automation engine for this OS")
    device_name: str = Field(..., min_length=1)
    platform_version: str | None = Field(default=None)

    @model_validator(mode="after")
    def _engine_matches_os(self) -> "DeviceTarget":
        if self.os is MobilePlatform.BOTH:
            raise ValueError("A device target must name a single OS, not 'both'")
        if self.engine not in PLATFORM_ENGINES[self.os]:
            raise ValueError(f"Engine {self.engine.value!r} cannot drive {self.os.value!r}")
        return self


class MobileConfig(BaseModel):
    """Mobile/desktop platform settings for ``mobile`` and ``hybrid`` projects."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    platform: MobilePlatform
    targets: tuple[DeviceTarget, ...] = Field(..., min_length=1)
    app_path: Path | None = Field(default=None, description="Optional app binary (.apk/.ipa/.app)")

    @model_validator(mode="after")
    def _targets_match_platform(self) -> "MobileConfig":
        expected = target_platforms(self.platform)
        actual = [t.os for t in self.targets]
        if actual != expected:
            raise ValueError(
                f"Targets {[p.value for p in actual]} do not match platform {self.platform.value!r}"
            )
        return self

    @property
    def engines(self) -> list[MobileEngine]:
        return [t.engine for t in self.targets]

    def target_for(self, os: MobilePlatform) -> DeviceTarget | None:
        for target in self.targets:
            if target.os is os:
                return target
        return None

    @property
    def is_native(self) -> bool:
        """Whether any target is driven through Appium (Android or iOS)."""
        return any(t.os in (MobilePlatform.ANDROID, MobilePlatform.IOS) for t in self.targets)


# Required secondary fields per auth type.
AUTH_REQUIRED_FIELDS: dict[AuthType, tuple[str, ...]] = {
    AuthType.NONE: (),
    AuthType.BEARER: ("token_env",),
    AuthType.APIKEY: ("api_key_header", "api_key_env"),
    AuthType.BASIC: ("username_env", "password_env"),
    AuthType.OAUTH2: ("token_url", "client_id_env", "client_secret_env"),
}


class ApiConfig(BaseModel):
    """API-under-test settings for ``api`` projects."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    auth_type: AuthType = Field(default=AuthType.NONE)
    flavor: ApiFlavor = Field(default=ApiFlavor.REST)
    token_env: str | None = None
    api_key_header: str | None = None
    api_key_env: str | None = None
    username_env: str | None = None
    password_env: str | None = None
    token_url: str | None = None
    client_id_env: str | None = None
    client_secret_env: str | None = None
    graphql_path: str = Field(default="/graphql")

    @model_validator(mode="after")
    def _auth_fields_present(self) -> "ApiConfig":
        missing = [
            name for name in AUTH_REQUIRED_FIELDS[self.auth_type]
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                f"Auth type {self.auth_type.value!r} requires: {', '.join(missing)}"
            )
        if self.token_url is not None and not is_absolute_url(self.token_url):
            raise ValueError(f"token_url must be an absolute URL: {self.token_url!r}")
        return self

    @property
    def uses_rest(self) -> bool:
        return self.flavor in (ApiFlavor.REST, ApiFlavor.BOTH)

    @property
    def uses_graphql(self) -> bool:
        return self.flavor in (ApiFlavor.GRAPHQL, ApiFlavor.BOTH)


# (name, enabled by default)
BROWSER_CHOICES: list[tuple[str, bool]] = [
    ("chromium", True),
    ("firefox", True),
    ("webkit", True),
    ("mobile-chrome", False),
    ("mobile-safari", False),
]

REPORTER_CHOICES: list[tuple[str, bool]] = [
    ("html", True),
    ("json", True),
    ("junit", True),
    ("allure", False),
]


class IntegrationConfig(BaseModel):
    """Browser projects, reporters and post-generation tooling consent."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    browsers: tuple[str, ...] = Field(
        default_factory=lambda: tuple(name for name, on in BROWSER_CHOICES if on)
    )
    reporters: tuple[str, ...] = Field(
        default_factory=lambda: tuple(name for name, on in REPORTER_CHOICES if on)
    )
    run_tooling: bool = Field(default=True)

    @field_validator("browsers")
    @classmethod
    def _known_browsers(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        known = {name for name, _ in BROWSER_CHOICES}
        unknown = [b for b in value if b not in known]
        if unknown:
            raise ValueError(f"Unknown browsers: {', '.join(unknown)}")
        return value

    @field_validator("reporters")
    @classmethod
    def _known_reporters(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        known = {name for name, _ in REPORTER_CHOICES}
        unknown = [r for r in value if r not in known]
        if unknown:
            raise ValueError(f"Unknown reporters: {', '.join(unknown)}")
        return value


# ---------------------------------------------------------------------------
# Project aggregate
# ---------------------------------------------------------------------------

class ProjectConfig(BaseModel):
    """Frozen, fully-resolved description of the project to generate.

    Only ever produced by :meth:`ProjectDraft.freeze`.  Every downstream
    component (planner, materializer, manifest assemblers, tooling) receives
    this read-only view.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    project_name: str = Field(..., min_length=1)
    target_path: Path
    automation_type: AutomationType
    template: TemplatePreset
    features: FeatureVector
    base_url: str = Field(default="https://example.com")
    api_url: str = Field(default="https://api.example.com")
    environments: tuple[str, ...] = Field(default=("local", "staging", "production"))
    mobile: MobileConfig | None = None
    api: ApiConfig | None = None
    integrations: IntegrationConfig = Field(default_factory=IntegrationConfig)
    conflict_policy: FileConflictPolicy = Field(default=FileConflictPolicy.ABORT)

    @field_validator("project_name")
    @classmethod
    def _safe_name(cls, value: str) -> str:
        if not is_valid_project_name(value):
            raise ValueError(
                "Project name may only contain letters, numbers, hyphens and underscores"
            )
        return value

    @field_validator("base_url", "api_url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        if not is_absolute_url(value):
            raise ValueError(f"Not an absolute URL: {value!r}")
        return value

    @field_validator("environments")
    @classmethod
    def _valid_environments(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("At least one environment is required")
        invalid = [name for name in value if not is_valid_environment_name(name)]
        if invalid:
            raise ValueError(f"Invalid environment name(s): {', '.join(invalid)}")
        return value

    @model_validator(mode="after")
    def _platform_matches_type(self) -> "ProjectConfig":
        needs_mobile = self.automation_type in (AutomationType.MOBILE, AutomationType.HYBRID)
        needs_api = self.automation_type is AutomationType.API
        if needs_mobile != (self.mobile is not None):
            raise ValueError(
                f"Mobile configuration is {'required' if needs_mobile else 'not allowed'} "
                f"for automation type {self.automation_type.value!r}"
            )
        if needs_api != (self.api is not None):
            raise ValueError(
                f"API configuration is {'required' if needs_api else 'not allowed'} "
                f"for automation type {self.automation_type.value!r}"
            )
        return self

    @property
    def project_root(self) -> Path:
        """Directory the project is generated into."""
        return self.target_path / self.project_name

    @property
    def has_browser(self) -> bool:
        """Whether the project drives a desktop browser through Playwright."""
        return self.automation_type in (AutomationType.WEB, AutomationType.HYBRID)


class ProjectDraft(BaseModel):
    """Mutable, progressively-populated project description.

    Owned exclusively by the wizard controller.  Assignments are validated as
    they happen; :meth:`freeze` checks completeness and returns the immutable
    :class:`ProjectConfig`.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    project_name: str | None = None
    target_path: Path | None = None
    create_target: bool = False
    automation_type: AutomationType | None = None
    template: TemplatePreset | None = None
    custom_features: dict[FeatureKey, bool] | None = None
    base_url: str | None = None
    api_url: str | None = None
    environments: list[str] = Field(default_factory=list)
    mobile: MobileConfig | None = None
    api: ApiConfig | None = None
    integrations: IntegrationConfig = Field(default_factory=IntegrationConfig)
    conflict_policy: FileConflictPolicy = Field(default=FileConflictPolicy.ABORT)

    @property
    def project_root(self) -> Path | None:
        if self.target_path is None or self.project_name is None:
            return None
        return self.target_path / self.project_name

    def missing_fields(self) -> list[str]:
        """Names of required fields that have not been populated yet."""
        required = ("project_name", "target_path", "automation_type", "template")
        missing = [name for name in required if getattr(self, name) is None]
        if self.template is TemplatePreset.CUSTOM and self.custom_features is None:
            missing.append("custom_features")
        return missing

    def freeze(self, features: FeatureVector) -> ProjectConfig:
        """Validate completeness and return the immutable configuration.

        Args:
            features: The resolved (and masked) feature vector.

        Raises:
            ValueError: If required fields are missing or the combination is
                invalid (``pydantic.ValidationError`` is a ``ValueError``).
        """
        missing = self.missing_fields()
        if missing:
            raise ValueError(f"Project draft is incomplete: {', '.join(missing)}")

        optional: dict[str, object] = {}
        if self.base_url:
            optional["base_url"] = self.base_url
        if self.api_url:
            optional["api_url"] = self.api_url
        if self.environments:
            optional["environments"] = tuple(self.environments)

        return ProjectConfig(
            project_name=self.project_name,
            target_path=self.target_path,
            automation_type=self.automation_type,
            template=self.template,
            features=features,
            mobile=self.mobile,
            api=self.api,
            integrations=self.integrations,
            conflict_policy=self.conflict_policy,
            **optional,
        )
