"""
WidgetLens Configuration — pydantic-settings based.

All settings are read from environment variables or .env file.
List and dict values are given as JSON in the environment, e.g.
LOCAL_SEARCH_PATHS='["src", "lib"]'.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_PACKAGE_ALIASES: dict[str, str] = {
    "@flutterjs/runtime": "packages/flutterjs_runtime/src/index.js",
    "@flutterjs/vdom": "packages/flutterjs_vdom/src/index.js",
    "@flutterjs/analyzer": "packages/flutterjs_analyzer/src/index.js",
    "@flutterjs/material": "packages/flutterjs_material/src/index.js",
    "@flutterjs/cupertino": "packages/flutterjs_cupertino/src/index.js",
    "@flutterjs/foundation": "packages/flutterjs_foundation/src/index.js",
}


class Settings(BaseSettings):
    """Application-wide settings sourced from environment variables."""

    # ── Import resolution ──
    strict_imports: bool = Field(
        default=False,
        description="Treat unresolved imports as fatal instead of recording them",
    )
    package_aliases: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_PACKAGE_ALIASES),
        description="Framework package specifiers mapped to their locations",
    )
    package_mappings: dict[str, str] = Field(
        default_factory=dict,
        description="Project-specific specifier (or specifier prefix) mappings",
    )
    local_search_paths: list[str] = Field(
        default=["src", "lib", "packages", "modules", "."],
        description="Ordered directories searched for bare specifiers",
    )
    package_cache_dirs: list[str] = Field(
        default_factory=list,
        description="Ordered package cache directories, searched last",
    )
    module_extensions: list[str] = Field(
        default=[".js", ".fjs"], description="File extensions tried for module files"
    )
    project_root: str = Field(default=".", description="Root for relative imports")

    # ── Analysis ──
    max_tree_depth: int = Field(
        default=64, description="Depth bound for widget tree reconstruction"
    )
    max_tree_nodes: int = Field(
        default=2000, description="Node budget for widget tree reconstruction"
    )
    max_source_bytes: int = Field(
        default=500_000, description="Max source size accepted per file (bytes)"
    )
    max_concurrent_files: int = Field(
        default=4, description="Files analyzed at once by the batch worker"
    )

    # ── Diagnostics ──
    diagnostics_path: str | None = Field(
        default=None,
        description="JSON-lines diagnostics file; disabled when unset",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    # ── Server ──
    port: int = Field(default=5001, description="Server port")
    host: str = Field(default="0.0.0.0", description="Server bind host")
    cors_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance, imported by other modules
settings = Settings()
