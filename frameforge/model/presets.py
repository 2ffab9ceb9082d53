"""Template preset resolution and per-type feature masks.

Turns a template preset (plus the chosen automation type) into a complete
:class:`FeatureVector`.  Resolution is a pure table lookup followed by the
mask, which always forces browser- or device-only features off for automation
types where they are meaningless.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeVar

from frameforge.model.models import AutomationType, FeatureKey, FeatureVector, TemplatePreset
from frameforge.utils import print_warning

T = TypeVar("T")


class PlanningInvariantViolation(Exception):
    """Raised when a mapping table is inconsistent (duplicate or unmapped key).

    Signals a defect in the generator's own tables, never bad user input.
    """


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

_F = FeatureKey

PRESET_TABLE: dict[TemplatePreset, dict[FeatureKey, bool]] = {
    TemplatePreset.BASIC: {
        _F.API_TESTING: False,
        _F.VISUAL_TESTING: True,
        _F.PERFORMANCE_TESTING: False,
        _F.ACCESSIBILITY_TESTING: False,
        _F.MOBILE_TESTING: False,
        _F.CI_CD_TEMPLATES: False,
        _F.DOCKER_SUPPORT: False,
        _F.CLOUD_TESTING: False,
        _F.REPORTING_DASHBOARD: False,
        _F.TEST_GENERATOR: False,
        _F.INTERACTIONS_MODULE: True,
        _F.RUNNER_CONFIGURATION: True,
        _F.UTILITIES_MODULE: True,
        _F.CONSTANTS_MODULE: True,
    },
    TemplatePreset.STANDARD: {
        _F.API_TESTING: True,
        _F.VISUAL_TESTING: True,
        _F.PERFORMANCE_TESTING: False,
        _F.ACCESSIBILITY_TESTING: True,
        _F.MOBILE_TESTING: True,
        _F.CI_CD_TEMPLATES: True,
        _F.DOCKER_SUPPORT: False,
        _F.CLOUD_TESTING: True,
        _F.REPORTING_DASHBOARD: True,
        _F.TEST_GENERATOR: False,
        _F.INTERACTIONS_MODULE: True,
        _F.RUNNER_CONFIGURATION: True,
        _F.UTILITIES_MODULE: True,
        _F.CONSTANTS_MODULE: True,
    },
    TemplatePreset.ENTERPRISE: {key: True for key in FeatureKey},
    TemplatePreset.MOBILE_FIRST: {
        _F.API_TESTING: False,
        _F.VISUAL_TESTING: True,
        _F.PERFORMANCE_TESTING: False,
        _F.ACCESSIBILITY_TESTING: True,
        _F.MOBILE_TESTING: True,
        _F.CI_CD_TEMPLATES: True,
        _F.DOCKER_SUPPORT: False,
        _F.CLOUD_TESTING: True,
        _F.REPORTING_DASHBOARD: True,
        _F.TEST_GENERATOR: False,
        _F.INTERACTIONS_MODULE: True,
        _F.RUNNER_CONFIGURATION: True,
        _F.UTILITIES_MODULE: True,
        _F.CONSTANTS_MODULE: True,
    },
}

PRESET_DESCRIPTIONS: dict[TemplatePreset, str] = {
    TemplatePreset.BASIC: "Basic - Essential features only",
    TemplatePreset.STANDARD: "Standard - Recommended features (default)",
    TemplatePreset.ENTERPRISE: "Enterprise - All features enabled",
    TemplatePreset.MOBILE_FIRST: "Mobile-First - Optimized for mobile testing",
    TemplatePreset.CUSTOM: "Custom - Choose features individually",
}

# Features forced off per automation type, whatever the preset or answers say.
MASKS: dict[AutomationType, frozenset[FeatureKey]] = {
    AutomationType.WEB: frozenset(),
    AutomationType.HYBRID: frozenset(),
    AutomationType.MOBILE: frozenset({
        _F.INTERACTIONS_MODULE,
        _F.PERFORMANCE_TESTING,
        _F.ACCESSIBILITY_TESTING,
    }),
    AutomationType.API: frozenset({
        _F.INTERACTIONS_MODULE,
        _F.MOBILE_TESTING,
        _F.VISUAL_TESTING,
        _F.ACCESSIBILITY_TESTING,
        _F.PERFORMANCE_TESTING,
    }),
}


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def masked_keys(automation_type: AutomationType) -> frozenset[FeatureKey]:
    """Return the feature keys forced off for *automation_type*."""
    try:
        return MASKS[automation_type]
    except KeyError as exc:
        raise PlanningInvariantViolation(
            f"No feature mask defined for automation type {automation_type!r}"
        ) from exc


def apply_mask(features: FeatureVector, automation_type: AutomationType) -> FeatureVector:
    """Force every masked feature of *automation_type* to ``False``."""
    return features.without(masked_keys(automation_type))


def resolve_preset(preset: TemplatePreset, automation_type: AutomationType) -> FeatureVector:
    """Look up a non-custom preset and apply the automation-type mask.

    Raises:
        ValueError: If *preset* is ``custom`` (use :func:`resolve_features`
            with the per-flag answers instead).
        PlanningInvariantViolation: If the preset table row is missing or
            incomplete.
    """
    if preset is TemplatePreset.CUSTOM:
        raise ValueError("The custom preset has no table row; answers are required")
    row = PRESET_TABLE.get(preset)
    if row is None:
        raise PlanningInvariantViolation(f"No preset table row for {preset!r}")
    try:
        vector = FeatureVector.from_mapping(row)
    except ValueError as exc:
        raise PlanningInvariantViolation(f"Preset {preset.value!r}: {exc}") from exc
    return apply_mask(vector, automation_type)


def resolve_features(
    preset: TemplatePreset,
    automation_type: AutomationType,
    custom_answers: Mapping[FeatureKey, bool] | None = None,
) -> FeatureVector:
    """Resolve the final feature vector for a project.

    For ``custom`` the answers must cover every feature key; they are checked
    for completeness before the mask is applied.
    """
    if preset is TemplatePreset.CUSTOM:
        if custom_answers is None:
            raise ValueError("The custom preset requires an answer for every feature")
        return apply_mask(FeatureVector.from_mapping(custom_answers), automation_type)
    return resolve_preset(preset, automation_type)


def resolve_or_default(
    choice: str | None,
    table: Mapping[str, T],
    default: T,
    label: str = "choice",
) -> T:
    """Resolve a menu answer against *table*, falling back to *default*.

    Empty input selects the default silently; an unknown answer selects the
    default and prints a warning.  Never raises.
    """
    answer = (choice or "").strip()
    if not answer:
        return default
    if answer in table:
        return table[answer]
    print_warning(f"Invalid {label} {answer!r}, using default.")
    return default
