"""Planning, materialization and manifest generation for test projects."""

from frameforge.scaffolder.manifests import (
    DependencyManifest,
    build_dependency_manifest,
    build_path_alias_map,
    build_script_table,
    render_package_json,
    render_tsconfig,
)
from frameforge.scaffolder.materializer import (
    FileSystem,
    LocalFileSystem,
    MaterializationError,
    MaterializationResult,
    Materializer,
)
from frameforge.scaffolder.planner import GenerationTask, plan_generation
from frameforge.scaffolder.templates import TemplateRenderer
from frameforge.scaffolder.tooling import PostGenerationToolingFailure, ToolingReport, run_tooling

__all__ = [
    "DependencyManifest",
    "FileSystem",
    "GenerationTask",
    "LocalFileSystem",
    "MaterializationError",
    "MaterializationResult",
    "Materializer",
    "PostGenerationToolingFailure",
    "TemplateRenderer",
    "ToolingReport",
    "build_dependency_manifest",
    "build_path_alias_map",
    "build_script_table",
    "plan_generation",
    "render_package_json",
    "render_tsconfig",
    "run_tooling",
]
