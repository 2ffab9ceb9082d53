"""Wizard controller: the project-generation state machine.

Walks a strictly forward sequence of steps::

    SELECT_AUTOMATION_TYPE -> SELECT_PLATFORM_DETAIL (skipped for web)
    -> COLLECT_PROJECT_IDENTITY -> SELECT_TEMPLATE
    -> COLLECT_CUSTOM_FEATURES (custom template only)
    -> COLLECT_ENVIRONMENT_CONFIG -> OPTIONAL_EXTRA_INTEGRATION
    -> GENERATE_PROJECT -> TERMINAL

Invalid answers re-prompt inside the current step.  Declining to overwrite an
existing project directory raises :class:`PathConflictAbort`, which jumps
straight to ``TERMINAL`` with exit code 0.  Nothing touches the filesystem
(other than existence checks) before ``GENERATE_PROJECT``.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from urllib.parse import urlparse

from rich.panel import Panel

from frameforge.config import GeneratorSettings
from frameforge.model.models import (
    BROWSER_CHOICES,
    DEVICE_DEFAULTS,
    FEATURE_DESCRIPTIONS,
    PLATFORM_ENGINES,
    REPORTER_CHOICES,
    ApiConfig,
    ApiFlavor,
    AuthType,
    AutomationType,
    DeviceTarget,
    FeatureKey,
    FileConflictPolicy,
    IntegrationConfig,
    MobileConfig,
    MobileEngine,
    MobilePlatform,
    ProjectConfig,
    ProjectDraft,
    TemplatePreset,
    target_platforms,
)
from frameforge.model.presets import (
    PRESET_DESCRIPTIONS,
    PRESET_TABLE,
    masked_keys,
    resolve_features,
)
from frameforge.scaffolder.materializer import (
    FileSystem,
    LocalFileSystem,
    MaterializationResult,
    Materializer,
)
from frameforge.scaffolder.planner import GenerationTask, plan_generation, planned_test_categories
from frameforge.scaffolder.templates import TemplateRenderer
from frameforge.scaffolder.tooling import CommandRunner, ToolingReport, run_tooling
from frameforge.utils import (
    console,
    format_duration,
    print_error,
    print_info,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
    run_command,
)
from frameforge.wizard.prompts import (
    LineReader,
    ask_menu,
    ask_multi_select,
    ask_text,
    ask_yes_no,
    validate_env_var,
    validate_environment_name,
    validate_header_name,
    validate_optional_file,
    validate_project_name,
    validate_url,
    validate_url_path,
)

# ---------------------------------------------------------------------------
# Menus
# ---------------------------------------------------------------------------

AUTOMATION_TYPE_OPTIONS: list[tuple[AutomationType, str]] = [
    (AutomationType.WEB, "Web Application Testing (Playwright)"),
    (AutomationType.MOBILE, "Mobile Application Testing (Appium + WebdriverIO)"),
    (AutomationType.HYBRID, "Hybrid Testing (Web + Mobile)"),
    (AutomationType.API, "API Testing Only"),
]

PLATFORM_OPTIONS: list[tuple[MobilePlatform, str]] = [
    (MobilePlatform.ANDROID, "Android"),
    (MobilePlatform.IOS, "iOS"),
    (MobilePlatform.BOTH, "Both Android and iOS"),
    (MobilePlatform.MOBILE_WEB, "Mobile Web (browser on device emulation)"),
    (MobilePlatform.DESKTOP, "Desktop (Electron)"),
]

ENGINE_LABELS: dict[MobileEngine, str] = {
    MobileEngine.UIAUTOMATOR2: "UiAutomator2 (recommended)",
    MobileEngine.ESPRESSO: "Espresso",
    MobileEngine.XCUITEST: "XCUITest",
    MobileEngine.PLAYWRIGHT: "Playwright device emulation",
    MobileEngine.ELECTRON: "Electron",
}

AUTH_OPTIONS: list[tuple[AuthType, str]] = [
    (AuthType.NONE, "No authentication"),
    (AuthType.BEARER, "Bearer token"),
    (AuthType.APIKEY, "API key header"),
    (AuthType.BASIC, "HTTP Basic"),
    (AuthType.OAUTH2, "OAuth2 client credentials"),
]

FLAVOR_OPTIONS: list[tuple[ApiFlavor, str]] = [
    (ApiFlavor.REST, "REST"),
    (ApiFlavor.GRAPHQL, "GraphQL"),
    (ApiFlavor.BOTH, "REST and GraphQL"),
]

STANDARD_ENVIRONMENTS: list[str] = ["local", "staging", "production"]
CUSTOM_ENVIRONMENT = "custom"


# ---------------------------------------------------------------------------
# States and outcome
# ---------------------------------------------------------------------------


class WizardState(str, Enum):
    """Steps of the wizard, in forward order."""
    SELECT_AUTOMATION_TYPE = "select_automation_type"
    SELECT_PLATFORM_DETAIL = "select_platform_detail"
    COLLECT_PROJECT_IDENTITY = "collect_project_identity"
    SELECT_TEMPLATE = "select_template"
    COLLECT_CUSTOM_FEATURES = "collect_custom_features"
    COLLECT_ENVIRONMENT_CONFIG = "collect_environment_config"
    OPTIONAL_EXTRA_INTEGRATION = "optional_extra_integration"
    GENERATE_PROJECT = "generate_project"
    TERMINAL = "terminal"


STEP_TITLES: dict[WizardState, str] = {
    WizardState.SELECT_AUTOMATION_TYPE: "Automation Type",
    WizardState.SELECT_PLATFORM_DETAIL: "Platform Details",
    WizardState.COLLECT_PROJECT_IDENTITY: "Project Setup",
    WizardState.SELECT_TEMPLATE: "Framework Template",
    WizardState.COLLECT_CUSTOM_FEATURES: "Custom Features",
    WizardState.COLLECT_ENVIRONMENT_CONFIG: "Environments",
    WizardState.OPTIONAL_EXTRA_INTEGRATION: "Extra Integration",
    WizardState.GENERATE_PROJECT: "Generate Project",
}


class PathConflictAbort(Exception):
    """The user declined to overwrite an existing project directory."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Project directory {path} already exists; generation cancelled.")


@dataclass
class WizardOutcome:
    """Final result of one wizard run."""

    exit_code: int
    status: str  # "completed", "failed" or "aborted"
    config: ProjectConfig | None = None
    result: MaterializationResult | None = None
    tooling: ToolingReport | None = None
    issues: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class WizardController:
    """Drives the interactive generation flow.

    The controller exclusively owns the :class:`ProjectDraft` until it is
    frozen in ``GENERATE_PROJECT``; planner, materializer and tooling only
    ever see the resulting read-only :class:`ProjectConfig`.

    Attributes:
        reader: Source of answers (``ask(prompt) -> str``).
        settings: Tool settings seeding prompt defaults.
        fs: Filesystem abstraction; only ``exists`` is used before generation.
        draft: The project description being collected.
        state: Current :class:`WizardState`.
        history: States visited so far, in order.
    """

    def __init__(
        self,
        reader: LineReader,
        settings: GeneratorSettings | None = None,
        fs: FileSystem | None = None,
        renderer: TemplateRenderer | None = None,
        tool_runner: CommandRunner = run_command,
    ) -> None:
        self.reader = reader
        self.settings = settings or GeneratorSettings()
        self.fs: FileSystem = fs if fs is not None else LocalFileSystem()
        self.renderer = renderer
        self.tool_runner = tool_runner
        self.draft = ProjectDraft()
        self.state = WizardState.SELECT_AUTOMATION_TYPE
        self.history: list[WizardState] = []
        self._outcome: WizardOutcome | None = None
        self._steps: dict[WizardState, Callable[[], WizardState]] = {
            WizardState.SELECT_AUTOMATION_TYPE: self._select_automation_type,
            WizardState.SELECT_PLATFORM_DETAIL: self._select_platform_detail,
            WizardState.COLLECT_PROJECT_IDENTITY: self._collect_project_identity,
            WizardState.SELECT_TEMPLATE: self._select_template,
            WizardState.COLLECT_CUSTOM_FEATURES: self._collect_custom_features,
            WizardState.COLLECT_ENVIRONMENT_CONFIG: self._collect_environment_config,
            WizardState.OPTIONAL_EXTRA_INTEGRATION: self._optional_extra_integration,
        }

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    async def run(self) -> WizardOutcome:
        """Run the wizard to completion and return its outcome.

        Raises:
            PlanningInvariantViolation: If the mapping tables are inconsistent
                (raised before anything is written).
        """
        try:
            while self.state is not WizardState.TERMINAL:
                self.history.append(self.state)
                print_step_header(len(self.history), STEP_TITLES[self.state])
                if self.state is WizardState.GENERATE_PROJECT:
                    self.state = await self._generate_project()
                else:
                    self.state = self._steps[self.state]()
        except PathConflictAbort as exc:
            print_warning(str(exc))
            self.state = WizardState.TERMINAL
            self._outcome = WizardOutcome(exit_code=0, status="aborted")

        assert self._outcome is not None
        return self._outcome

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _select_automation_type(self) -> WizardState:
        self.draft.automation_type = ask_menu(
            self.reader,
            "What type of automation framework do you want to create?",
            AUTOMATION_TYPE_OPTIONS,
            default=AutomationType.WEB,
        )
        if self.draft.automation_type is AutomationType.WEB:
            return WizardState.COLLECT_PROJECT_IDENTITY
        return WizardState.SELECT_PLATFORM_DETAIL

    def _select_platform_detail(self) -> WizardState:
        if self.draft.automation_type is AutomationType.API:
            self.draft.api = self._collect_api_config()
        else:
            self.draft.mobile = self._collect_mobile_config()
        return WizardState.COLLECT_PROJECT_IDENTITY

    def _collect_mobile_config(self) -> MobileConfig:
        platform = ask_menu(
            self.reader,
            "Which platform do you want to automate?",
            PLATFORM_OPTIONS,
            default=MobilePlatform.ANDROID,
        )

        targets: list[DeviceTarget] = []
        for device_os in target_platforms(platform):
            engines = PLATFORM_ENGINES[device_os]
            engine = engines[0]
            if len(engines) > 1:
                engine = ask_menu(
                    self.reader,
                    f"Automation engine for {device_os.value}:",
                    [(e, ENGINE_LABELS[e]) for e in engines],
                    default=engines[0],
                )
            device_name, version = DEVICE_DEFAULTS[device_os]
            targets.append(
                DeviceTarget(os=device_os, engine=engine, device_name=device_name, platform_version=version)
            )

        app_path = ask_text(
            self.reader,
            "Path to the app binary (optional, Enter to skip)",
            default="",
            validator=validate_optional_file,
        )
        return MobileConfig(
            platform=platform,
            targets=tuple(targets),
            app_path=Path(app_path).expanduser() if app_path else None,
        )

    def _collect_api_config(self) -> ApiConfig:
        auth_type = ask_menu(
            self.reader,
            "How does the API authenticate requests?",
            AUTH_OPTIONS,
            default=AuthType.NONE,
        )

        fields: dict[str, str] = {}
        if auth_type is AuthType.BEARER:
            fields["token_env"] = ask_text(
                self.reader, "Environment variable holding the token", "API_TOKEN", validate_env_var
            )
        elif auth_type is AuthType.APIKEY:
            fields["api_key_header"] = ask_text(
                self.reader, "API key header name", "X-API-Key", validate_header_name
            )
            fields["api_key_env"] = ask_text(
                self.reader, "Environment variable holding the key", "API_KEY", validate_env_var
            )
        elif auth_type is AuthType.BASIC:
            fields["username_env"] = ask_text(
                self.reader, "Environment variable holding the username", "API_USERNAME", validate_env_var
            )
            fields["password_env"] = ask_text(
                self.reader, "Environment variable holding the password", "API_PASSWORD", validate_env_var
            )
        elif auth_type is AuthType.OAUTH2:
            fields["token_url"] = ask_text(
                self.reader,
                "OAuth2 token URL",
                f"{self.settings.default_api_url.rstrip('/')}/oauth/token",
                validate_url,
            )
            fields["client_id_env"] = ask_text(
                self.reader, "Environment variable holding the client id", "OAUTH_CLIENT_ID", validate_env_var
            )
            fields["client_secret_env"] = ask_text(
                self.reader,
                "Environment variable holding the client secret",
                "OAUTH_CLIENT_SECRET",
                validate_env_var,
            )

        flavor = ask_menu(
            self.reader, "Which API style?", FLAVOR_OPTIONS, default=ApiFlavor.REST
        )
        if flavor in (ApiFlavor.GRAPHQL, ApiFlavor.BOTH):
            fields["graphql_path"] = ask_text(
                self.reader, "GraphQL endpoint path", "/graphql", validate_url_path
            )

        return ApiConfig(auth_type=auth_type, flavor=flavor, **fields)

    def _collect_project_identity(self) -> WizardState:
        self.draft.project_name = ask_text(
            self.reader,
            "Project name",
            self.settings.default_project_name,
            validate_project_name,
        )

        while True:
            raw = ask_text(
                self.reader,
                "Where should the project be created?",
                str(self.settings.default_target_path),
            )
            target = Path(raw).expanduser()
            if self.fs.is_dir(target):
                self.draft.create_target = False
                break
            if self.fs.exists(target):
                print_warning(f"{target} is not a directory.")
                continue
            if ask_yes_no(self.reader, f"Directory {target} does not exist. Create it?", default=True):
                self.draft.create_target = True
                break
            print_info("Choose another location.")
        self.draft.target_path = target

        project_root = target / self.draft.project_name
        if self.fs.exists(project_root):
            overwrite = ask_yes_no(
                self.reader,
                f"Directory {project_root} already exists. Overwrite existing files?",
                default=False,
            )
            if not overwrite:
                raise PathConflictAbort(project_root)
            self.draft.conflict_policy = FileConflictPolicy.OVERWRITE
        else:
            self.draft.conflict_policy = FileConflictPolicy.ABORT

        return WizardState.SELECT_TEMPLATE

    def _select_template(self) -> WizardState:
        self.draft.template = ask_menu(
            self.reader,
            "Choose a framework template:",
            [(preset, PRESET_DESCRIPTIONS[preset]) for preset in TemplatePreset],
            default=TemplatePreset.STANDARD,
        )
        if self.draft.template is TemplatePreset.CUSTOM:
            return WizardState.COLLECT_CUSTOM_FEATURES
        return WizardState.COLLECT_ENVIRONMENT_CONFIG

    def _collect_custom_features(self) -> WizardState:
        masked = masked_keys(self.draft.automation_type)
        defaults = PRESET_TABLE[TemplatePreset.STANDARD]
        answers: dict[FeatureKey, bool] = {}
        for key in FeatureKey:
            label = FEATURE_DESCRIPTIONS[key]
            if key in masked:
                label += f" (not used by {self.draft.automation_type.value} projects)"
            answers[key] = ask_yes_no(self.reader, f"Enable {label}?", default=defaults[key])
        self.draft.custom_features = answers
        return WizardState.COLLECT_ENVIRONMENT_CONFIG

    def _collect_environment_config(self) -> WizardState:
        if self.draft.automation_type is not AutomationType.API:
            self.draft.base_url = ask_text(
                self.reader, "Base URL of the application", self.settings.default_base_url, validate_url
            )
        self.draft.api_url = ask_text(
            self.reader, "Base URL of the API", self.settings.default_api_url, validate_url
        )

        defaults = self.settings.default_environments or list(STANDARD_ENVIRONMENTS)
        names = list(STANDARD_ENVIRONMENTS) + [e for e in defaults if e not in STANDARD_ENVIRONMENTS]
        options = [(name, name.capitalize(), name in defaults) for name in names]
        options.append((CUSTOM_ENVIRONMENT, "Custom environment", False))

        selected = ask_multi_select(self.reader, "Which environments do you need?", options)
        environments: list[str] = []
        for name in selected:
            if name == CUSTOM_ENVIRONMENT:
                name = ask_text(
                    self.reader, "Custom environment name", validator=validate_environment_name
                )
            if name not in environments:
                environments.append(name)

        if self.draft.base_url and _is_localhost(self.draft.base_url) and "local" not in environments:
            environments.insert(0, "local")

        self.draft.environments = environments
        return WizardState.OPTIONAL_EXTRA_INTEGRATION

    def _optional_extra_integration(self) -> WizardState:
        run_default = self.settings.run_post_generation
        if not ask_yes_no(
            self.reader, "Configure browsers, reporters and post-generation tooling?", default=False
        ):
            self.draft.integrations = IntegrationConfig(run_tooling=run_default)
            return WizardState.GENERATE_PROJECT

        browsers = IntegrationConfig().browsers
        if self.draft.automation_type in (AutomationType.WEB, AutomationType.HYBRID):
            browsers = tuple(
                ask_multi_select(
                    self.reader,
                    "Which browsers should the suite run on?",
                    [(name, name, on) for name, on in BROWSER_CHOICES],
                )
            )
        reporters = tuple(
            ask_multi_select(
                self.reader,
                "Which reporters should be configured?",
                [(name, name, on) for name, on in REPORTER_CHOICES],
            )
        )
        run_tooling = ask_yes_no(
            self.reader,
            "Install dependencies, browsers/drivers and initialize git after generation?",
            default=run_default,
        )
        self.draft.integrations = IntegrationConfig(
            browsers=browsers, reporters=reporters, run_tooling=run_tooling
        )
        return WizardState.GENERATE_PROJECT

    async def _generate_project(self) -> WizardState:
        features = resolve_features(
            self.draft.template, self.draft.automation_type, self.draft.custom_features
        )
        config = self.draft.freeze(features)
        tasks = plan_generation(config, self.renderer)

        print_summary_table(_config_summary(config, tasks), title="Project Configuration")

        started = time.monotonic()
        materializer = Materializer(config.project_root, self.fs)
        if config.conflict_policy is FileConflictPolicy.OVERWRITE and self.settings.clean_on_overwrite:
            print_info(f"Removing existing {config.project_root}")
            await materializer.clean()

        result = await materializer.materialize(tasks, config.conflict_policy)
        elapsed = time.monotonic() - started

        issues = [str(err) for err in result.errors]
        tooling: ToolingReport | None = None
        if config.integrations.run_tooling:
            if result.success:
                tooling = await run_tooling(config, self.settings.tooling, self.tool_runner)
                issues.extend(str(w) for w in tooling.warnings)
            else:
                print_warning("Skipping post-generation tooling because some files failed.")

        self._outcome = WizardOutcome(
            exit_code=0 if result.success else 1,
            status="completed" if result.success else "failed",
            config=config,
            result=result,
            tooling=tooling,
            issues=issues,
        )
        self._print_final_summary(self._outcome, elapsed)
        return WizardState.TERMINAL

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _print_final_summary(self, outcome: WizardOutcome, elapsed: float) -> None:
        """Print the result table, next steps and any accumulated issues."""
        config = outcome.config
        result = outcome.result
        assert config is not None and result is not None

        print_summary_table(
            {
                "Location": str(config.project_root),
                "Result": result.summary(),
                "Duration": format_duration(elapsed),
            },
            title="Generation Result",
        )

        if result.success:
            print_success(f"Project {config.project_name} generated successfully.")
        else:
            print_error(f"Project {config.project_name} generated with {len(result.errors)} error(s).")

        tooling_ran = outcome.tooling is not None
        console.print(
            Panel(
                "\n".join(next_steps(config, tooling_ran)),
                title="[bold]Next Steps[/bold]",
                border_style="cyan",
            )
        )

        if outcome.issues:
            console.print(
                Panel(
                    "\n".join(f"- {issue}" for issue in outcome.issues),
                    title="[bold yellow]Issues[/bold yellow]",
                    border_style="yellow",
                )
            )


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _is_localhost(url: str) -> bool:
    return urlparse(url).hostname in ("localhost", "127.0.0.1")


def _config_summary(config: ProjectConfig, tasks: list[GenerationTask]) -> dict[str, str]:
    summary = {
        "Project": config.project_name,
        "Location": str(config.project_root),
        "Automation type": config.automation_type.value,
        "Template": config.template.value,
        "Features": ", ".join(k.value for k in config.features.enabled()) or "none",
        "Environments": ", ".join(config.environments),
        "Test suites": ", ".join(planned_test_categories(tasks)) or "none",
    }
    if config.mobile is not None:
        summary["Platform"] = config.mobile.platform.value
        summary["Engines"] = ", ".join(e.value for e in config.mobile.engines)
    if config.api is not None:
        summary["Auth"] = config.api.auth_type.value
        summary["API style"] = config.api.flavor.value
    return summary


def next_steps(config: ProjectConfig, tooling_ran: bool) -> list[str]:
    """Return the follow-up commands tailored to *config*."""
    steps = [f"cd {config.project_root}"]
    if not tooling_ran:
        steps.append("npm install")
        if config.has_browser:
            steps.append("npx playwright install")
    if config.mobile is not None and config.mobile.is_native:
        steps.append("npm run mobile:setup   # install Appium drivers")
        steps.append("npm run appium         # start the Appium server")
    if config.api is not None and config.api.auth_type is not AuthType.NONE:
        steps.append("Fill in the API credentials in .env")
    steps.append("npm test")
    if config.features.ci_cd_templates:
        steps.append("Push to GitHub to trigger .github/workflows/tests.yml")
    if config.features.docker_support:
        steps.append("npm run docker:build && npm run docker:run")
    return steps
