"""Manifest assemblers for the generated project's descriptor files.

Pure functions of a frozen :class:`ProjectConfig`.  Each builds one secondary
artifact (dependency manifest, npm script table, TypeScript path aliases) from
fixed tables, in the same precedence order the planner uses:

    base -> automation type -> feature keys (declaration order) -> platform

Identical configs always serialize to byte-identical ``package.json`` and
``tsconfig.json`` output.  No timestamps, no environment lookups.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from frameforge.model.models import (
    AutomationType,
    FeatureKey,
    MobileEngine,
    ProjectConfig,
)


# ---------------------------------------------------------------------------
# Dependency tables
# ---------------------------------------------------------------------------

BASE_DEPENDENCIES: dict[str, str] = {
    "dotenv": "^16.0.0",
}

BASE_DEV_DEPENDENCIES: dict[str, str] = {
    "@playwright/test": "^1.53.0",
    "@types/node": "^20.11.24",
    "typescript": "^5.0.0",
}

_WDIO_STACK: dict[str, str] = {
    "webdriverio": "^8.27.0",
    "@wdio/cli": "^8.27.0",
    "@wdio/local-runner": "^8.27.0",
    "@wdio/mocha-framework": "^8.27.0",
    "@wdio/spec-reporter": "^8.27.0",
    "@wdio/appium-service": "^8.27.0",
    "@wdio/types": "^8.27.0",
    "appium": "^2.4.0",
    "ts-node": "^10.9.2",
}

TYPE_DEV_DEPENDENCIES: dict[AutomationType, dict[str, str]] = {
    AutomationType.WEB: {},
    AutomationType.MOBILE: dict(_WDIO_STACK),
    AutomationType.HYBRID: dict(_WDIO_STACK),
    AutomationType.API: {},
}

FEATURE_DEV_DEPENDENCIES: dict[FeatureKey, dict[str, str]] = {
    FeatureKey.API_TESTING: {"axios": "^1.6.0"},
    FeatureKey.VISUAL_TESTING: {"pixelmatch": "^5.3.0", "pngjs": "^7.0.0"},
    FeatureKey.PERFORMANCE_TESTING: {"lighthouse": "^11.0.0"},
    FeatureKey.ACCESSIBILITY_TESTING: {
        "axe-core": "^4.8.0",
        "@axe-core/playwright": "^4.8.0",
    },
    FeatureKey.TEST_GENERATOR: {"ts-node": "^10.9.2"},
}

ENGINE_DEV_DEPENDENCIES: dict[MobileEngine, dict[str, str]] = {
    MobileEngine.UIAUTOMATOR2: {"appium-uiautomator2-driver": "^2.40.0"},
    MobileEngine.ESPRESSO: {"appium-espresso-driver": "^2.30.0"},
    MobileEngine.XCUITEST: {"appium-xcuitest-driver": "^5.12.0"},
    MobileEngine.PLAYWRIGHT: {},
    MobileEngine.ELECTRON: {"electron": "^28.0.0"},
}

REST_DEPENDENCIES: dict[str, str] = {
    "axios": "^1.6.0",
}

GRAPHQL_DEPENDENCIES: dict[str, str] = {
    "graphql": "^16.8.0",
    "graphql-request": "^6.1.0",
}

REPORTER_DEV_DEPENDENCIES: dict[str, dict[str, str]] = {
    "allure": {"allure-playwright": "^2.9.0", "allure-commandline": "^2.27.0"},
}


# ---------------------------------------------------------------------------
# Script tables
# ---------------------------------------------------------------------------

_RUN = "playwright test --config=framework.config.ts"

COMMON_SCRIPTS: dict[str, str] = {
    "test": _RUN,
    "report": "playwright show-report",
}

BROWSER_SCRIPTS: dict[str, str] = {
    "test:ui": f"{_RUN} --ui",
    "test:headed": f"{_RUN} --headed",
    "test:debug": f"{_RUN} --debug",
    "test:smoke": "playwright test tests/smoke/ --config=framework.config.ts",
    "test:regression": "playwright test tests/regression/ --config=framework.config.ts",
    "test:e2e": "playwright test tests/e2e/ --config=framework.config.ts",
    "test:parallel": f"{_RUN} --workers=4",
    "test:sequential": f"{_RUN} --workers=1",
    "install-browsers": "playwright install",
    "codegen": "playwright codegen",
    "trace": "playwright show-trace",
}

# Browser project name -> script suffix
BROWSER_PROJECT_SCRIPTS: dict[str, str] = {
    "chromium": "chrome",
    "firefox": "firefox",
    "webkit": "safari",
    "mobile-chrome": "mobile",
    "mobile-safari": "mobile-safari",
}

API_TYPE_SCRIPTS: dict[str, str] = {
    "test:smoke": "playwright test tests/smoke/ --config=framework.config.ts",
}

MOBILE_TYPE_SCRIPTS: dict[str, str] = {
    "appium": "appium",
    "appium:doctor": "npx appium-doctor",
    "mobile:setup": "bash mobile/setup/setup-mobile.sh",
}

FEATURE_SCRIPTS: dict[FeatureKey, dict[str, str]] = {
    FeatureKey.API_TESTING: {
        "test:api": "playwright test tests/api/ --config=framework.config.ts",
    },
    FeatureKey.VISUAL_TESTING: {
        "test:visual": "playwright test tests/visual/ --config=framework.config.ts",
        "update-baselines": "playwright test --update-snapshots",
    },
    FeatureKey.PERFORMANCE_TESTING: {
        "test:performance": "playwright test tests/performance/ --config=framework.config.ts",
        "lighthouse": "lighthouse --output html --output-path ./performance-results/",
    },
    FeatureKey.ACCESSIBILITY_TESTING: {
        "test:accessibility": "playwright test tests/accessibility/ --config=framework.config.ts",
    },
    FeatureKey.MOBILE_TESTING: {
        "test:mobile-only": "playwright test tests/mobile/ --config=framework.config.ts",
    },
    FeatureKey.DOCKER_SUPPORT: {
        "docker:build": "docker build -t playwright-tests .",
        "docker:run": "docker run playwright-tests",
        "docker:compose": "docker compose up --abort-on-container-exit",
    },
    FeatureKey.CLOUD_TESTING: {
        "test:cloud": "playwright test --config=framework/cloud/cloud.config.ts",
    },
    FeatureKey.REPORTING_DASHBOARD: {
        "report:dashboard": "ts-node framework/reporting/Dashboard.ts",
    },
    FeatureKey.TEST_GENERATOR: {
        "generate:test": "ts-node framework/generator/generate-test.ts",
    },
}

ENGINE_SCRIPTS: dict[MobileEngine, dict[str, str]] = {
    MobileEngine.UIAUTOMATOR2: {"test:android": "wdio run mobile/config/wdio.android.conf.ts"},
    MobileEngine.ESPRESSO: {"test:android": "wdio run mobile/config/wdio.android.conf.ts"},
    MobileEngine.XCUITEST: {"test:ios": "wdio run mobile/config/wdio.ios.conf.ts"},
    MobileEngine.PLAYWRIGHT: {
        "test:mobile-web": "playwright test --config=mobile/config/mobile-web.config.ts",
    },
    MobileEngine.ELECTRON: {
        "test:desktop": "playwright test --config=mobile/config/electron.config.ts",
    },
}

REPORTER_SCRIPTS: dict[str, dict[str, str]] = {
    "allure": {
        "allure:generate": "allure generate allure-results --clean -o allure-report",
        "allure:open": "allure open allure-report",
    },
}


# ---------------------------------------------------------------------------
# Path alias tables
# ---------------------------------------------------------------------------

BASE_PATH_ALIASES: dict[str, list[str]] = {
    "@/*": ["./framework/*"],
    "@config/*": ["./framework/config/*"],
    "@core/*": ["./framework/core/*"],
    "@tests/*": ["./tests/*"],
    "@data/*": ["./data/*"],
    "@fixtures/*": ["./fixtures/*"],
}

TYPE_PATH_ALIASES: dict[AutomationType, dict[str, list[str]]] = {
    AutomationType.WEB: {},
    AutomationType.MOBILE: {"@mobile-app/*": ["./mobile/*"]},
    AutomationType.HYBRID: {"@mobile-app/*": ["./mobile/*"]},
    AutomationType.API: {"@api-core/*": ["./api/*"]},
}

FEATURE_PATH_ALIASES: dict[FeatureKey, dict[str, list[str]]] = {
    FeatureKey.API_TESTING: {"@api/*": ["./tests/api/*"]},
    FeatureKey.VISUAL_TESTING: {"@visual/*": ["./tests/visual/*"]},
    FeatureKey.PERFORMANCE_TESTING: {"@performance/*": ["./tests/performance/*"]},
    FeatureKey.ACCESSIBILITY_TESTING: {"@accessibility/*": ["./tests/accessibility/*"]},
    FeatureKey.MOBILE_TESTING: {"@mobile/*": ["./tests/mobile/*"]},
    FeatureKey.CLOUD_TESTING: {"@cloud/*": ["./framework/cloud/*"]},
    FeatureKey.REPORTING_DASHBOARD: {"@reporting/*": ["./framework/reporting/*"]},
    FeatureKey.TEST_GENERATOR: {"@generator/*": ["./framework/generator/*"]},
    FeatureKey.INTERACTIONS_MODULE: {"@interactions/*": ["./framework/interactions/*"]},
    FeatureKey.RUNNER_CONFIGURATION: {"@runner/*": ["./framework/runner/*"]},
    FeatureKey.UTILITIES_MODULE: {"@utils/*": ["./framework/utils/*"]},
    FeatureKey.CONSTANTS_MODULE: {"@constants/*": ["./framework/constants/*"]},
}


# ---------------------------------------------------------------------------
# Keywords
# ---------------------------------------------------------------------------

BASE_KEYWORDS: list[str] = [
    "playwright",
    "testing",
    "automation",
    "framework",
    "e2e",
    "typescript",
    "page-object-model",
]

FEATURE_KEYWORDS: dict[FeatureKey, str] = {
    FeatureKey.API_TESTING: "api-testing",
    FeatureKey.VISUAL_TESTING: "visual-testing",
    FeatureKey.PERFORMANCE_TESTING: "performance-testing",
    FeatureKey.ACCESSIBILITY_TESTING: "accessibility-testing",
    FeatureKey.MOBILE_TESTING: "mobile-testing",
    FeatureKey.CI_CD_TEMPLATES: "ci-cd",
    FeatureKey.DOCKER_SUPPORT: "docker",
    FeatureKey.CLOUD_TESTING: "cloud-testing",
}


# ---------------------------------------------------------------------------
# Assemblers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DependencyManifest:
    """Runtime and development dependencies of the generated project."""

    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)


def build_dependency_manifest(config: ProjectConfig) -> DependencyManifest:
    """Collect dependencies for *config*.

    Later contributions override the version range of an earlier one.  Both
    maps are returned sorted by package name, the way npm writes them.
    """
    deps: dict[str, str] = dict(BASE_DEPENDENCIES)
    dev: dict[str, str] = dict(BASE_DEV_DEPENDENCIES)

    dev.update(TYPE_DEV_DEPENDENCIES[config.automation_type])

    for key in config.features.enabled():
        dev.update(FEATURE_DEV_DEPENDENCIES.get(key, {}))

    if config.mobile is not None:
        for engine in config.mobile.engines:
            dev.update(ENGINE_DEV_DEPENDENCIES[engine])
    if config.api is not None and config.api.uses_rest:
        dev.update(REST_DEPENDENCIES)
    if config.api is not None and config.api.uses_graphql:
        deps.update(GRAPHQL_DEPENDENCIES)

    for reporter in config.integrations.reporters:
        dev.update(REPORTER_DEV_DEPENDENCIES.get(reporter, {}))

    return DependencyManifest(
        dependencies=dict(sorted(deps.items())),
        dev_dependencies=dict(sorted(dev.items())),
    )


def build_script_table(config: ProjectConfig) -> dict[str, str]:
    """Build the npm ``scripts`` table for *config*.

    Entries keep their first-insertion position; a later contribution with the
    same name replaces the command in place.  Per-environment runs live under
    ``test:env:<name>`` so an environment can never shadow a suite script.
    """
    scripts: dict[str, str] = dict(COMMON_SCRIPTS)

    if config.has_browser:
        scripts.update(BROWSER_SCRIPTS)
        for browser in config.integrations.browsers:
            suffix = BROWSER_PROJECT_SCRIPTS[browser]
            scripts[f"test:{suffix}"] = f"{_RUN} --project={browser}"
        for env in config.environments:
            scripts[f"test:env:{env}"] = f"TEST_ENV={env} {_RUN}"
    elif config.automation_type is AutomationType.API:
        scripts.update(API_TYPE_SCRIPTS)
        for env in config.environments:
            scripts[f"test:env:{env}"] = f"TEST_ENV={env} {_RUN}"

    if config.automation_type in (AutomationType.MOBILE, AutomationType.HYBRID):
        scripts.update(MOBILE_TYPE_SCRIPTS)

    for key in config.features.enabled():
        scripts.update(FEATURE_SCRIPTS.get(key, {}))

    if config.mobile is not None:
        for engine in config.mobile.engines:
            scripts.update(ENGINE_SCRIPTS[engine])
    if config.api is not None and config.api.uses_graphql:
        scripts["test:graphql"] = f"{_RUN} --grep @graphql"

    for reporter in config.integrations.reporters:
        scripts.update(REPORTER_SCRIPTS.get(reporter, {}))

    return scripts


def build_path_alias_map(config: ProjectConfig) -> dict[str, list[str]]:
    """Build the ``compilerOptions.paths`` table for *config*."""
    aliases: dict[str, list[str]] = {k: list(v) for k, v in BASE_PATH_ALIASES.items()}
    for alias, targets in TYPE_PATH_ALIASES[config.automation_type].items():
        aliases[alias] = list(targets)
    for key in config.features.enabled():
        for alias, targets in FEATURE_PATH_ALIASES.get(key, {}).items():
            aliases[alias] = list(targets)
    return aliases


def build_keywords(config: ProjectConfig) -> list[str]:
    keywords = list(BASE_KEYWORDS)
    if config.automation_type is not AutomationType.WEB:
        keywords.append(f"{config.automation_type.value}-testing")
    for key in config.features.enabled():
        keyword = FEATURE_KEYWORDS.get(key)
        if keyword and keyword not in keywords:
            keywords.append(keyword)
    return keywords


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _dump(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def render_package_json(config: ProjectConfig) -> str:
    """Serialize the dependency manifest and script table into ``package.json``."""
    manifest = build_dependency_manifest(config)
    package: dict[str, Any] = {
        "name": config.project_name.lower(),
        "version": "1.0.0",
        "description": f"{config.automation_type.value.capitalize()} test automation framework",
        "private": True,
        "scripts": build_script_table(config),
        "keywords": build_keywords(config),
        "license": "MIT",
        "dependencies": manifest.dependencies,
        "devDependencies": manifest.dev_dependencies,
        "engines": {"node": ">=18.0.0"},
    }
    return _dump(package)


def render_tsconfig(config: ProjectConfig) -> str:
    """Serialize the path alias map into ``tsconfig.json``."""
    include = ["framework/**/*", "tests/**/*", "*.ts"]
    if config.automation_type in (AutomationType.MOBILE, AutomationType.HYBRID):
        include.append("mobile/**/*")
    if config.automation_type is AutomationType.API:
        include.append("api/**/*")

    tsconfig: dict[str, Any] = {
        "compilerOptions": {
            "target": "ES2020",
            "module": "commonjs",
            "moduleResolution": "node",
            "esModuleInterop": True,
            "allowSyntheticDefaultImports": True,
            "strict": True,
            "skipLibCheck": True,
            "forceConsistentCasingInFileNames": True,
            "resolveJsonModule": True,
            "outDir": "./dist",
            "rootDir": "./",
            "baseUrl": "./",
            "paths": build_path_alias_map(config),
        },
        "include": include,
        "exclude": ["node_modules", "dist", "test-results", "playwright-report"],
    }
    return _dump(tsconfig)
