"""Configuration management for codectx."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, get_origin

from pydantic import BaseModel, Field, ValidationError, field_validator

from codectx.exceptions import ConfigError

CODECTX_DIR = ".codectx"
CONFIG_FILE = "config.json"

DEFAULT_MAX_CONTEXT_LENGTH = 16384


class ContextConfig(BaseModel):
    """Context aggregation configuration."""

    max_context_length: int = DEFAULT_MAX_CONTEXT_LENGTH
    ignore_dirs: list[str] = Field(
        default_factory=lambda: [
            ".git",
            "node_modules",
            "__pycache__",
            "venv",
            ".env",
            ".venv",
        ]
    )
    ignore_files: list[str] = Field(
        default_factory=lambda: [".DS_Store", "*.pyc", "*.o", "*.out", "*.log"]
    )
    # Added through add_ignore_pattern(), so "build/" means a directory
    extra_ignore_patterns: list[str] = Field(default_factory=list)
    security_distro: bool | None = None  # None = auto-detect

    @field_validator("max_context_length")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("max_context_length must be >= 0")
        return value


class PromptConfig(BaseModel):
    """System prompts used when building a prompt for the inference backend."""

    system_prompts: dict[str, str] = Field(
        default_factory=lambda: {
            "generate": (
                "You are an expert code generator. Create clean, efficient, and "
                "well-commented code based on the user's requirements."
            ),
            "explain": (
                "You are a code explanation expert. Analyze the provided code and "
                "explain how it works in clear, concise terms."
            ),
            "refactor": (
                "You are a code refactoring specialist. Analyze the provided code and "
                "suggest improvements to make it more efficient, readable, and "
                "maintainable without changing its core functionality."
            ),
            "debug": (
                "You are a debugging expert. Analyze the code and error messages to "
                "identify issues. Provide clear explanations of the bugs and suggest "
                "fixes with improved code."
            ),
            "test": (
                "You are a testing specialist. Create comprehensive test cases for the "
                "provided code, covering edge cases and typical usage patterns."
            ),
            "doc": (
                "You are a documentation expert. Generate clear, concise documentation "
                "for the provided code, including function descriptions, parameters, "
                "return values, and usage examples."
            ),
        }
    )
    fallback_prompt: str = "You are a helpful AI coding assistant."


class ProjectConfig(BaseModel):
    """Full project configuration."""

    name: str = ""
    root_path: str = "."
    context: ContextConfig = Field(default_factory=ContextConfig)
    prompts: PromptConfig = Field(default_factory=PromptConfig)


def find_project_root(start: Path | None = None) -> Path | None:
    """Walk up from `start` looking for a .codectx directory."""
    here = (start or Path.cwd()).resolve()
    return next((d for d in (here, *here.parents) if get_codectx_dir(d).is_dir()), None)


def get_codectx_dir(root: Path) -> Path:
    """Get the .codectx directory for a project root."""
    return root / CODECTX_DIR


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from .codectx/config.json."""
    config_path = get_codectx_dir(root) / CONFIG_FILE
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
            return ProjectConfig(**data)
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ConfigError(f"Invalid config file {config_path}: {exc}") from exc
    return ProjectConfig(name=root.name, root_path=str(root))


def save_config(root: Path, config: ProjectConfig) -> None:
    """Save configuration to .codectx/config.json."""
    ctx_dir = get_codectx_dir(root)
    ctx_dir.mkdir(parents=True, exist_ok=True)
    config_path = ctx_dir / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(), indent=2))


def _field_path(key: str) -> list[str]:
    """Split a dotted key, checking each part against the model fields."""
    parts = key.split(".")
    model: type[BaseModel] | None = ProjectConfig
    for i, part in enumerate(parts):
        if model is None or part not in model.model_fields:
            raise KeyError(f"Invalid config key: {key}")
        annotation = model.model_fields[part].annotation
        is_model = (
            get_origin(annotation) is None
            and isinstance(annotation, type)
            and issubclass(annotation, BaseModel)
        )
        model = annotation if is_model else None
        if model is not None and i == len(parts) - 1:
            raise KeyError(f"Config key {key} is a section, not a value")
    return parts


def get_config_value(config: ProjectConfig, key: str) -> Any:
    """Read a value by dotted key (e.g., 'context.max_context_length')."""
    value: Any = config
    for part in _field_path(key):
        value = getattr(value, part)
    return value


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Return a copy of `config` with the dotted `key` set to `value`.

    The whole config is re-validated, so a bad value raises ConfigError and
    leaves `config` untouched.
    """
    *sections, field = _field_path(key)
    data = config.model_dump()
    section = data
    for name in sections:
        section = section[name]
    section[field] = value
    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from exc
