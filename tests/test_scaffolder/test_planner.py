"""Unit tests for generation planning (frameforge.scaffolder.planner).

Tests cover:
- No duplicate paths and deterministic output
- Contribution order (base -> type -> features -> platform)
- Path collisions (first position, last content)
- Per-type, per-platform and per-auth subtrees
- tests/ categories derived from the plan
- Table consistency checks
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from frameforge.model import (
    ApiConfig,
    ApiFlavor,
    AuthType,
    AutomationType,
    FeatureKey,
    PlanningInvariantViolation,
    TemplatePreset,
)
from frameforge.scaffolder import planner
from frameforge.scaffolder.planner import (
    GenerationTask,
    plan_generation,
    planned_test_categories,
    validate_tables,
)

pytestmark = pytest.mark.unit


def _paths(tasks: list[GenerationTask]) -> list[str]:
    return [t.relative_path for t in tasks]


def _task(tasks: list[GenerationTask], path: str) -> GenerationTask:
    for task in tasks:
        if task.relative_path == path:
            return task
    raise AssertionError(f"{path} was not planned")


class TestPlanShape:
    def test_no_duplicate_paths(self, sample_configs):
        for config in sample_configs:
            paths = _paths(plan_generation(config))
            assert len(paths) == len(set(paths)), config.automation_type

    def test_deterministic(self, sample_configs):
        for config in sample_configs:
            assert plan_generation(config) == plan_generation(config)

    def test_directories_have_no_producer(self, web_basic_config):
        tasks = plan_generation(web_basic_config)
        reports = _task(tasks, "reports")
        assert reports.is_directory
        with pytest.raises(ValueError):
            reports.produce()
        assert not _task(tasks, "README.md").is_directory

    def test_base_subtree_first(self, web_basic_config):
        paths = _paths(plan_generation(web_basic_config))
        assert paths[:4] == ["reports", "docs", "fixtures", "data"]

    def test_order_base_type_features_platform(self, mobile_both_config):
        paths = _paths(plan_generation(mobile_both_config))
        assert paths.index("README.md") < paths.index("mobile/core/MobileDriver.ts")
        assert paths.index("mobile/core/MobileDriver.ts") < paths.index("tests/mobile/mobile.spec.ts")
        assert paths.index("tests/mobile/mobile.spec.ts") < paths.index("mobile/config/wdio.shared.conf.ts")

    def test_environment_files(self, hybrid_enterprise_config):
        paths = _paths(plan_generation(hybrid_enterprise_config))
        for env in ("local", "staging", "qa", "production"):
            assert f"environments/{env}.env" in paths


class TestCollisions:
    def test_type_overrides_base_in_place(self, web_basic_config):
        tasks = plan_generation(web_basic_config)
        paths = _paths(tasks)
        config_task = _task(tasks, "framework.config.ts")
        assert config_task.source == "web/framework.config.ts.j2"
        # Keeps the base position, ahead of anything the type subtree adds.
        assert paths.index("framework.config.ts") < paths.index("playwright.config.ts")

    def test_later_feature_wins_content(self, web_standard_config):
        features = web_standard_config.features
        assert features.accessibility_testing and features.interactions_module
        tasks = plan_generation(web_standard_config)
        paths = _paths(tasks)
        task = _task(tasks, "framework/interactions/Accessibility.ts")
        assert task.source == "features/interactions/Accessibility.ts.j2"
        assert paths.index("framework/interactions/Accessibility.ts") < paths.index(
            "framework/interactions/Click.ts"
        )

    def test_single_contributor_keeps_its_content(self, make_config):
        custom = {key: False for key in FeatureKey}
        custom[FeatureKey.ACCESSIBILITY_TESTING] = True
        config = make_config(AutomationType.WEB, TemplatePreset.CUSTOM, custom=custom)
        task = _task(plan_generation(config), "framework/interactions/Accessibility.ts")
        assert task.source == "features/accessibility/Accessibility.ts.j2"

    def test_utilities_reporting_wins_over_dashboard(self, hybrid_enterprise_config):
        task = _task(plan_generation(hybrid_enterprise_config), "framework/utils/Reporting.ts")
        assert task.source == "features/utils/Reporting.ts.j2"


class TestScenarios:
    def test_web_basic_has_no_api_or_mobile_paths(self, web_basic_config):
        for path in _paths(plan_generation(web_basic_config)):
            assert not path.startswith(("api/", "mobile/", "framework/api/", "tests/api/", "tests/mobile/"))

    def test_custom_all_true_is_strict_superset_of_basic(self, web_basic_config, web_all_features_config):
        basic = set(_paths(plan_generation(web_basic_config)))
        everything = set(_paths(plan_generation(web_all_features_config)))
        assert basic < everything

    def test_api_bearer(self, api_bearer_config):
        paths = _paths(plan_generation(api_bearer_config))
        assert "api/core/ApiClient.ts" in paths
        assert "api/auth/bearer.ts" in paths
        assert "api/clients/RestClient.ts" in paths
        assert "api/clients/GraphQLClient.ts" not in paths
        assert not any(p.startswith("mobile/") for p in paths)
        assert "framework/core/BasePage.ts" not in paths

    def test_api_graphql_only(self, make_config):
        config = make_config(
            AutomationType.API,
            TemplatePreset.BASIC,
            api=ApiConfig(auth_type=AuthType.NONE, flavor=ApiFlavor.GRAPHQL),
        )
        paths = _paths(plan_generation(config))
        assert "api/clients/GraphQLClient.ts" in paths
        assert "api/clients/RestClient.ts" not in paths
        assert not any(p.startswith("api/auth/") for p in paths)

    def test_mobile_both_platforms(self, mobile_both_config):
        paths = _paths(plan_generation(mobile_both_config))
        assert paths.count("mobile/config/wdio.shared.conf.ts") == 1
        assert "mobile/config/wdio.android.conf.ts" in paths
        assert "mobile/config/wdio.ios.conf.ts" in paths
        assert "mobile/config/devices.json" in paths
        assert "playwright.config.ts" not in paths

    def test_hybrid_has_web_and_mobile(self, hybrid_enterprise_config):
        paths = _paths(plan_generation(hybrid_enterprise_config))
        assert "framework/core/BasePage.ts" in paths
        assert "mobile/core/MobileDriver.ts" in paths
        assert "mobile/config/wdio.android.conf.ts" in paths
        assert "mobile/config/wdio.ios.conf.ts" not in paths

    def test_mobile_web_has_no_native_config(self, sample_configs):
        hybrid_web = next(
            c for c in sample_configs
            if c.mobile is not None and c.mobile.platform.value == "mobile-web"
        )
        paths = _paths(plan_generation(hybrid_web))
        assert "mobile/config/mobile-web.config.ts" in paths
        assert "mobile/config/wdio.shared.conf.ts" not in paths


class TestTestCategories:
    def test_web_basic(self, web_basic_config):
        categories = planned_test_categories(plan_generation(web_basic_config))
        assert categories == ["tests/smoke", "tests/e2e", "tests/regression", "tests/visual"]

    def test_api(self, api_bearer_config):
        categories = planned_test_categories(plan_generation(api_bearer_config))
        assert categories == ["tests/smoke", "tests/api"]

    def test_every_enabled_test_feature_has_a_category(self, web_all_features_config):
        categories = planned_test_categories(plan_generation(web_all_features_config))
        for name in ("api", "visual", "performance", "accessibility", "mobile"):
            assert f"tests/{name}" in categories


class TestTableValidation:
    def test_shipped_tables_are_consistent(self):
        validate_tables()

    def test_unmapped_feature(self, web_basic_config):
        with patch.dict(planner.FEATURE_SUBTREES):
            del planner.FEATURE_SUBTREES[FeatureKey.CONSTANTS_MODULE]
            with pytest.raises(PlanningInvariantViolation, match="constants-module"):
                plan_generation(web_basic_config)

    def test_unmapped_automation_type(self, web_basic_config):
        with patch.dict(planner.TYPE_SUBTREES):
            del planner.TYPE_SUBTREES[AutomationType.API]
            with pytest.raises(PlanningInvariantViolation, match="api"):
                plan_generation(web_basic_config)

    def test_duplicate_path_within_subtree(self, web_basic_config):
        duplicated = [
            ("framework/runner/runner.config.ts", "features/runner/runner.config.ts.j2"),
            ("framework/runner/runner.config.ts", "features/runner/runner.config.ts.j2"),
        ]
        with patch.dict(planner.FEATURE_SUBTREES, {FeatureKey.RUNNER_CONFIGURATION: duplicated}):
            with pytest.raises(PlanningInvariantViolation, match="more than once"):
                plan_generation(web_basic_config)

    def test_missing_template_is_rejected_before_planning(self, web_basic_config, tmp_path):
        from frameforge.scaffolder.templates import TemplateRenderer

        with pytest.raises(PlanningInvariantViolation, match="missing template 'base/README.md.j2'"):
            plan_generation(web_basic_config, TemplateRenderer(tmp_path))

    def test_every_source_template_exists(self):
        from frameforge.scaffolder.templates import TemplateRenderer

        renderer = TemplateRenderer()
        entries = list(planner.BASE_SUBTREE)
        for table in (planner.TYPE_SUBTREES, planner.FEATURE_SUBTREES,
                      planner.PLATFORM_SUBTREES, planner.AUTH_SUBTREES):
            for subtree in table.values():
                entries.extend(subtree)
        entries.extend([planner._NATIVE_SHARED, planner._DEVICES,
                        planner._REST_CLIENT, planner._GRAPHQL_CLIENT])
        for path, source in entries:
            if source is None or source.startswith("manifest:"):
                continue
            assert renderer.has_template(source), f"{path}: missing template {source}"
