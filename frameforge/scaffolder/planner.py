"""Feature-to-artifact planning.

Expands a frozen :class:`ProjectConfig` into an ordered, de-duplicated list of
:class:`GenerationTask` objects.  Contributions are evaluated in a fixed
order::

    base subtree -> automation-type subtree -> feature subtrees
    (canonical key order) -> platform subtree

A path keeps the position of its first appearance and the content of its last
contribution, so no path is ever planned twice.

Each table entry is ``(relative_path, source)`` where *source* is a template
path under ``scaffolder/templates``, one of the ``MANIFEST_*`` markers, or
``None`` for a bare directory.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from frameforge.model.models import (
    AuthType,
    AutomationType,
    DeviceTarget,
    FeatureKey,
    MobilePlatform,
    ProjectConfig,
)
from frameforge.model.presets import PlanningInvariantViolation
from frameforge.scaffolder.manifests import build_script_table, render_package_json, render_tsconfig
from frameforge.scaffolder.templates import TemplateRenderer, build_context

__all__ = [
    "GenerationTask",
    "PlanningInvariantViolation",
    "plan_generation",
    "planned_test_categories",
    "validate_tables",
]

MANIFEST_PACKAGE_JSON = "manifest:package.json"
MANIFEST_TSCONFIG = "manifest:tsconfig.json"

_MANIFEST_RENDERERS: dict[str, Callable[[ProjectConfig], str]] = {
    MANIFEST_PACKAGE_JSON: render_package_json,
    MANIFEST_TSCONFIG: render_tsconfig,
}

Entry = tuple[str, str | None]


# ---------------------------------------------------------------------------
# Generation task
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GenerationTask:
    """One planned write: a directory (no producer) or a file.

    Equality ignores the producer callable so two plans for the same config
    compare equal.
    """

    relative_path: str
    source: str
    producer: Callable[[], str] | None = field(default=None, compare=False, repr=False)

    @property
    def is_directory(self) -> bool:
        return self.producer is None

    def produce(self) -> str:
        """Render the file content.  Raises whatever the producer raises."""
        if self.producer is None:
            raise ValueError(f"{self.relative_path} is a directory task")
        return self.producer()


# ---------------------------------------------------------------------------
# Mapping tables
# ---------------------------------------------------------------------------

BASE_SUBTREE: list[Entry] = [
    ("reports", None),
    ("docs", None),
    ("fixtures", None),
    ("data", None),
    ("README.md", "base/README.md.j2"),
    (".gitignore", "base/gitignore.j2"),
    (".env", "base/env.j2"),
    ("framework.config.ts", "base/framework.config.ts.j2"),
    ("framework/config/EnvironmentConfig.ts", "base/EnvironmentConfig.ts.j2"),
    ("package.json", MANIFEST_PACKAGE_JSON),
    ("tsconfig.json", MANIFEST_TSCONFIG),
    ("fixtures/sample-data.json", "base/sample-data.json.j2"),
    ("data/test-data.json", "base/test-data.json.j2"),
    ("docs/GETTING_STARTED.md", "base/GETTING_STARTED.md.j2"),
]

_WEB_SUBTREE: list[Entry] = [
    ("framework.config.ts", "web/framework.config.ts.j2"),
    ("playwright.config.ts", "web/playwright.config.ts.j2"),
    ("framework/core/BasePage.ts", "web/BasePage.ts.j2"),
    ("framework/core/TestBase.ts", "web/TestBase.ts.j2"),
    ("framework/pages/HomePage.ts", "web/HomePage.ts.j2"),
    ("tests/smoke/smoke.spec.ts", "web/smoke.spec.ts.j2"),
    ("tests/e2e/e2e.spec.ts", "web/e2e.spec.ts.j2"),
    ("tests/regression/regression.spec.ts", "web/regression.spec.ts.j2"),
]

_MOBILE_CORE: list[Entry] = [
    ("mobile/core/MobileDriver.ts", "mobile/MobileDriver.ts.j2"),
    ("mobile/core/BaseMobilePage.ts", "mobile/BaseMobilePage.ts.j2"),
    ("mobile/core/MobileTestBase.ts", "mobile/MobileTestBase.ts.j2"),
    ("mobile/setup/setup-mobile.sh", "mobile/setup-mobile.sh.j2"),
]

TYPE_SUBTREES: dict[AutomationType, list[Entry]] = {
    AutomationType.WEB: _WEB_SUBTREE,
    AutomationType.MOBILE: _MOBILE_CORE + [
        ("mobile/pages/MobileLoginPage.ts", "mobile/MobileLoginPage.ts.j2"),
        ("mobile/tests/mobile-smoke.spec.ts", "mobile/mobile-smoke.spec.ts.j2"),
    ],
    AutomationType.HYBRID: _WEB_SUBTREE + _MOBILE_CORE,
    AutomationType.API: [
        ("framework.config.ts", "api/framework.config.ts.j2"),
        ("playwright.config.ts", "web/playwright.config.ts.j2"),
        ("api/core/ApiClient.ts", "api/ApiClient.ts.j2"),
        ("api/core/ApiTestBase.ts", "api/ApiTestBase.ts.j2"),
        ("tests/smoke/api-smoke.spec.ts", "api/api-smoke.spec.ts.j2"),
    ],
}

FEATURE_SUBTREES: dict[FeatureKey, list[Entry]] = {
    FeatureKey.API_TESTING: [
        ("framework/api/ApiHelper.ts", "features/api/ApiHelper.ts.j2"),
        ("tests/api/api.spec.ts", "features/api/api.spec.ts.j2"),
    ],
    FeatureKey.VISUAL_TESTING: [
        ("framework/visual/VisualComparator.ts", "features/visual/VisualComparator.ts.j2"),
        ("tests/visual/visual.spec.ts", "features/visual/visual.spec.ts.j2"),
    ],
    FeatureKey.PERFORMANCE_TESTING: [
        ("framework/performance/PerformanceMonitor.ts", "features/performance/PerformanceMonitor.ts.j2"),
        ("tests/performance/performance.spec.ts", "features/performance/performance.spec.ts.j2"),
    ],
    FeatureKey.ACCESSIBILITY_TESTING: [
        ("framework/interactions/Accessibility.ts", "features/accessibility/Accessibility.ts.j2"),
        ("tests/accessibility/accessibility.spec.ts", "features/accessibility/accessibility.spec.ts.j2"),
    ],
    FeatureKey.MOBILE_TESTING: [
        ("tests/mobile/mobile.spec.ts", "features/mobile/mobile.spec.ts.j2"),
    ],
    FeatureKey.CI_CD_TEMPLATES: [
        (".github/workflows/tests.yml", "features/ci/github-workflow.yml.j2"),
        ("Jenkinsfile", "features/ci/Jenkinsfile.j2"),
        ("ci-cd/run-tests.sh", "features/ci/run-tests.sh.j2"),
    ],
    FeatureKey.DOCKER_SUPPORT: [
        ("Dockerfile", "features/docker/Dockerfile.j2"),
        ("docker-compose.yml", "features/docker/docker-compose.yml.j2"),
        (".dockerignore", "features/docker/dockerignore.j2"),
    ],
    FeatureKey.CLOUD_TESTING: [
        ("framework/cloud/CloudProvider.ts", "features/cloud/CloudProvider.ts.j2"),
        ("framework/cloud/cloud.config.ts", "features/cloud/cloud.config.ts.j2"),
    ],
    FeatureKey.REPORTING_DASHBOARD: [
        ("framework/reporting/Dashboard.ts", "features/reporting/Dashboard.ts.j2"),
        ("framework/utils/Reporting.ts", "features/reporting/Reporting.ts.j2"),
    ],
    FeatureKey.TEST_GENERATOR: [
        ("framework/generator/TestGenerator.ts", "features/generator/TestGenerator.ts.j2"),
        ("framework/generator/generate-test.ts", "features/generator/generate-test.ts.j2"),
    ],
    FeatureKey.INTERACTIONS_MODULE: [
        ("framework/interactions/Click.ts", "features/interactions/Click.ts.j2"),
        ("framework/interactions/Type.ts", "features/interactions/Type.ts.j2"),
        ("framework/interactions/Wait.ts", "features/interactions/Wait.ts.j2"),
        ("framework/interactions/Accessibility.ts", "features/interactions/Accessibility.ts.j2"),
        ("framework/interactions/index.ts", "features/interactions/index.ts.j2"),
    ],
    FeatureKey.RUNNER_CONFIGURATION: [
        ("framework/runner/runner.config.ts", "features/runner/runner.config.ts.j2"),
    ],
    FeatureKey.UTILITIES_MODULE: [
        ("framework/utils/Utilities.ts", "features/utils/Utilities.ts.j2"),
        ("framework/utils/Reporting.ts", "features/utils/Reporting.ts.j2"),
    ],
    FeatureKey.CONSTANTS_MODULE: [
        ("framework/constants/Constants.ts", "features/constants/Constants.ts.j2"),
    ],
}

# Device OS -> platform config files (the shared WebdriverIO config is added once
# for any native target).
PLATFORM_SUBTREES: dict[MobilePlatform, list[Entry]] = {
    MobilePlatform.ANDROID: [("mobile/config/wdio.android.conf.ts", "mobile/config/wdio.android.conf.ts.j2")],
    MobilePlatform.IOS: [("mobile/config/wdio.ios.conf.ts", "mobile/config/wdio.ios.conf.ts.j2")],
    MobilePlatform.MOBILE_WEB: [("mobile/config/mobile-web.config.ts", "mobile/config/mobile-web.config.ts.j2")],
    MobilePlatform.DESKTOP: [("mobile/config/electron.config.ts", "mobile/config/electron.config.ts.j2")],
}

_NATIVE_SHARED: Entry = ("mobile/config/wdio.shared.conf.ts", "mobile/config/wdio.shared.conf.ts.j2")
_DEVICES: Entry = ("mobile/config/devices.json", "mobile/config/devices.json.j2")

AUTH_SUBTREES: dict[AuthType, list[Entry]] = {
    AuthType.NONE: [],
    AuthType.BEARER: [("api/auth/bearer.ts", "api/auth/bearer.ts.j2")],
    AuthType.APIKEY: [("api/auth/apikey.ts", "api/auth/apikey.ts.j2")],
    AuthType.BASIC: [("api/auth/basic.ts", "api/auth/basic.ts.j2")],
    AuthType.OAUTH2: [("api/auth/oauth2.ts", "api/auth/oauth2.ts.j2")],
}

_REST_CLIENT: Entry = ("api/clients/RestClient.ts", "api/RestClient.ts.j2")
_GRAPHQL_CLIENT: Entry = ("api/clients/GraphQLClient.ts", "api/GraphQLClient.ts.j2")


# ---------------------------------------------------------------------------
# Table validation
# ---------------------------------------------------------------------------

def _check_unique(name: str, entries: Iterable[Entry]) -> None:
    seen: set[str] = set()
    for path, _source in entries:
        if path in seen:
            raise PlanningInvariantViolation(f"{name} lists {path!r} more than once")
        seen.add(path)


def validate_tables() -> None:
    """Check every mapping table for unmapped keys and duplicate paths.

    Raises:
        PlanningInvariantViolation: On the first inconsistency found.
    """
    _check_unique("base subtree", BASE_SUBTREE)

    for automation_type in AutomationType:
        if automation_type not in TYPE_SUBTREES:
            raise PlanningInvariantViolation(
                f"No subtree mapped for automation type {automation_type.value!r}"
            )
        _check_unique(f"{automation_type.value} subtree", TYPE_SUBTREES[automation_type])

    for key in FeatureKey:
        if key not in FEATURE_SUBTREES:
            raise PlanningInvariantViolation(f"No subtree mapped for feature {key.value!r}")
        _check_unique(f"{key.value} subtree", FEATURE_SUBTREES[key])

    for platform in MobilePlatform:
        if platform is not MobilePlatform.BOTH and platform not in PLATFORM_SUBTREES:
            raise PlanningInvariantViolation(f"No subtree mapped for platform {platform.value!r}")

    for auth_type in AuthType:
        if auth_type not in AUTH_SUBTREES:
            raise PlanningInvariantViolation(f"No subtree mapped for auth type {auth_type.value!r}")


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------

# (path, source, extra template context)
_Contribution = tuple[str, str | None, dict[str, Any]]


def _plain(entries: Iterable[Entry]) -> list[_Contribution]:
    return [(path, source, {}) for path, source in entries]


def _base_contributions(config: ProjectConfig) -> list[_Contribution]:
    contributions = _plain(BASE_SUBTREE)
    for env in config.environments:
        contributions.append(
            (f"environments/{env}.env", "base/environment.env.j2", {"env_name": env})
        )
    return contributions


def _platform_contributions(config: ProjectConfig) -> list[_Contribution]:
    contributions: list[_Contribution] = []

    if config.mobile is not None:
        if config.mobile.is_native:
            contributions.append((*_NATIVE_SHARED, {}))
        for target in config.mobile.targets:
            contributions.extend(_target_contributions(target))
        contributions.append((*_DEVICES, {}))

    if config.api is not None:
        if config.api.uses_rest:
            contributions.append((*_REST_CLIENT, {}))
        if config.api.uses_graphql:
            contributions.append((*_GRAPHQL_CLIENT, {}))
        contributions.extend(_plain(AUTH_SUBTREES[config.api.auth_type]))

    return contributions


def _target_contributions(target: DeviceTarget) -> list[_Contribution]:
    try:
        entries = PLATFORM_SUBTREES[target.os]
    except KeyError as exc:
        raise PlanningInvariantViolation(
            f"No subtree mapped for platform {target.os.value!r}"
        ) from exc
    return [(path, source, {"target": target}) for path, source in entries]


def _make_producer(
    source: str,
    config: ProjectConfig,
    renderer: TemplateRenderer,
    context: dict[str, Any],
) -> Callable[[], str]:
    manifest = _MANIFEST_RENDERERS.get(source)
    if manifest is not None:
        return partial(manifest, config)
    return partial(renderer.render, source, context)


def plan_generation(
    config: ProjectConfig,
    renderer: TemplateRenderer | None = None,
) -> list[GenerationTask]:
    """Expand *config* into the ordered, de-duplicated task list.

    Rendering is deferred: each file task carries a producer that renders its
    template only when the materializer asks for the content.

    Raises:
        PlanningInvariantViolation: If a mapping table is inconsistent or names
            a template the renderer does not have.  Raised
            before any task is returned, so nothing is ever written.
    """
    validate_tables()
    renderer = renderer or TemplateRenderer()

    context = build_context(config)
    context["scripts"] = build_script_table(config)

    contributions: list[_Contribution] = []
    contributions.extend(_base_contributions(config))
    contributions.extend(_plain(TYPE_SUBTREES[config.automation_type]))
    for key in config.features.enabled():
        contributions.extend(_plain(FEATURE_SUBTREES[key]))
    contributions.extend(_platform_contributions(config))

    # Re-assigning an existing key keeps its original insertion position.
    planned: dict[str, GenerationTask] = {}
    for path, source, extra in contributions:
        if source is None:
            planned[path] = GenerationTask(relative_path=path, source="<directory>")
            continue
        if source not in _MANIFEST_RENDERERS and not renderer.has_template(source):
            raise PlanningInvariantViolation(f"{path} is mapped to missing template {source!r}")
        task_context = {**context, **extra} if extra else context
        planned[path] = GenerationTask(
            relative_path=path,
            source=source,
            producer=_make_producer(source, config, renderer, task_context),
        )

    return list(planned.values())


def planned_test_categories(tasks: Iterable[GenerationTask]) -> list[str]:
    """Return the distinct ``tests/<category>`` directories a plan populates."""
    dirs: list[str] = []
    for task in tasks:
        parts = task.relative_path.split("/")
        if len(parts) > 2 and parts[0] == "tests":
            category = f"tests/{parts[1]}"
            if category not in dirs:
                dirs.append(category)
    return dirs
