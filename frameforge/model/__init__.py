"""Configuration model and template preset resolution."""

from frameforge.model.models import (
    ApiConfig,
    ApiFlavor,
    AuthType,
    AutomationType,
    DeviceTarget,
    FeatureKey,
    FeatureVector,
    FileConflictPolicy,
    IntegrationConfig,
    MobileConfig,
    MobileEngine,
    MobilePlatform,
    ProjectConfig,
    ProjectDraft,
    TemplatePreset,
)
from frameforge.model.presets import (
    PlanningInvariantViolation,
    apply_mask,
    resolve_features,
    resolve_or_default,
    resolve_preset,
)

__all__ = [
    "ApiConfig",
    "ApiFlavor",
    "AuthType",
    "AutomationType",
    "DeviceTarget",
    "FeatureKey",
    "FeatureVector",
    "FileConflictPolicy",
    "IntegrationConfig",
    "MobileConfig",
    "MobileEngine",
    "MobilePlatform",
    "PlanningInvariantViolation",
    "ProjectConfig",
    "ProjectDraft",
    "TemplatePreset",
    "apply_mask",
    "resolve_features",
    "resolve_or_default",
    "resolve_preset",
]
