"""Gate configuration loader.

Supports .secgate/gate.toml or .secgate/gate.json under the project root
for overriding the locations and heuristics the checks use. Every key is
optional; anything missing keeps its default.
"""

import json
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from secgate.schemas.validator import validate_data
from secgate.tools import DEFAULT_TOOL_TIMEOUT
from secgate.types import ConfigError

CONFIG_DIRNAME = ".secgate"


@dataclass(frozen=True)
class SyntaxConfig:
    """Syntax checker for the bundled application's language."""

    tool: str = "php"
    args: tuple[str, ...] = ("-l",)
    extensions: tuple[str, ...] = (".php",)
    source_dir: str = "learning-app-ecommerce"


@dataclass(frozen=True)
class GateConfig:
    """Locations and heuristics used by the check catalog.

    Paths are relative to the project root.
    """

    dockerfile: str = "docker/Dockerfile"
    manifests_dir: str = "k8s"
    workload_kinds: tuple[str, ...] = ("Deployment",)
    database_image: str = "mysql"
    minimal_variants: tuple[str, ...] = ("alpine", "slim")
    hadolint_ignore: tuple[str, ...] = ("DL3008", "DL3009", "DL3015")
    secret_scan_extensions: tuple[str, ...] = (".yaml", ".yml", ".php", ".sh")
    excluded_dirs: tuple[str, ...] = ("node_modules", "vendor")
    # Helm templates are not plain YAML until rendered.
    yaml_exclude: tuple[str, ...] = ("**/templates/*",)
    tool_timeout: float = DEFAULT_TOOL_TIMEOUT
    workflows_dir: str = ".github/workflows"
    secrets_doc: str = ".github/docs/SECRETS.md"
    syntax: SyntaxConfig = field(default_factory=SyntaxConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "GateConfig":
        """Validate a config dict and overlay it on the defaults.

        Raises:
            ConfigError: If the dict does not match the gate_config schema
        """
        ok, errors = validate_data(data, "gate_config", strict=False)
        if not ok:
            raise ConfigError("Invalid gate config: " + "; ".join(errors))

        overrides: dict = {}
        for key, value in data.items():
            if key == "syntax":
                continue
            overrides[key] = tuple(value) if isinstance(value, list) else value

        syntax_data = data.get("syntax", {})
        syntax = replace(
            SyntaxConfig(),
            **{k: tuple(v) if isinstance(v, list) else v for k, v in syntax_data.items()},
        )
        return replace(cls(), syntax=syntax, **overrides)


def _load_file(path: Path) -> dict:
    if path.suffix == ".toml":
        try:
            with open(path, "rb") as f:
                return tomllib.load(f)
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            raise ConfigError(f"Malformed TOML config at {path}: {e}") from e
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Malformed JSON config at {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config at {path} must be a JSON object")
    return data


def load_gate_config(project_root: Path, config_path: Path | None = None) -> GateConfig:
    """Load gate configuration for a project.

    Priority order:
    1. explicit config_path
    2. <root>/.secgate/gate.toml
    3. <root>/.secgate/gate.json
    4. built-in defaults

    Raises:
        ConfigError: If a config file is unreadable, malformed or invalid
    """
    candidates = (
        [config_path]
        if config_path is not None
        else [project_root / CONFIG_DIRNAME / "gate.toml", project_root / CONFIG_DIRNAME / "gate.json"]
    )
    for path in candidates:
        if config_path is None and not path.exists():
            continue
        try:
            data = _load_file(path)
        except OSError as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        try:
            return GateConfig.from_dict(data)
        except ConfigError as e:
            raise ConfigError(f"{path}: {e}") from e
    return GateConfig()
