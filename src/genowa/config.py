"""
Configuration - Generator settings with environment fallbacks.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any


ENV_PREFIX = "GENOWA_"
DEFAULT_MAX_INCLUDE_DEPTH = 16


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class GeneratorConfig:
    """Settings for the generation driver and CLI."""
    template_root: Path = Path("template")
    output_root: Path = Path("output")
    metadata_path: Path | None = None  # Falls back to GENOWA_METADATA_PATH
    linkage_prefix: str = ""
    max_workers: int = 4
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH
    log_level: str = "INFO"
    json_logs: bool = False

    def __post_init__(self):
        self.template_root = Path(self.template_root)
        self.output_root = Path(self.output_root)
        if self.metadata_path is not None:
            self.metadata_path = Path(self.metadata_path)
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.max_include_depth < 1:
            raise ValueError(f"max_include_depth must be >= 1, got {self.max_include_depth}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides: Any) -> "GeneratorConfig":
        """
        Build a config from GENOWA_* variables.

        GENOWA_TEMPLATE_ROOT, GENOWA_OUTPUT_ROOT, GENOWA_METADATA_PATH,
        GENOWA_LINKAGE_PREFIX, GENOWA_MAX_WORKERS, GENOWA_MAX_INCLUDE_DEPTH,
        GENOWA_LOG_LEVEL, GENOWA_JSON_LOGS. Explicit overrides that are not
        None win over the environment.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            if f.name in ("max_workers", "max_include_depth"):
                try:
                    values[f.name] = int(raw)
                except ValueError:
                    raise ValueError(f"{ENV_PREFIX}{f.name.upper()} must be an integer, got {raw!r}") from None
            elif f.name == "json_logs":
                values[f.name] = _env_bool(raw)
            else:
                values[f.name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "GeneratorConfig":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
