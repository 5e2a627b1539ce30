"""Layered configuration loading for the Newsdesk aggregator.

Layers, lowest precedence first:

1. ``DEFAULT_CONFIG`` from ``newsdesk.config_schema``
2. ``config.toml`` (project root unless another path is given)
3. ``NEWSDESK__SECTION__KEY`` entries of the ``.env`` file beside it
4. ``NEWSDESK__SECTION__KEY`` variables of the process environment

The layer that supplied each overridden key is remembered on the loaded
config, so validation errors and ``newsdesk-config --show`` can name it.
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from dotenv import dotenv_values
from pydantic import ValidationError

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for Py <3.11
    import tomli as tomllib  # type: ignore[no-redef]

from newsdesk.config_schema import DEFAULT_CONFIG, Config

ENV_PREFIX = "NEWSDESK"
CONFIG_FILENAME = "config.toml"
ENV_FILENAME = ".env"
SECRET_KEYS = frozenset({"translation.api_key"})
MASK = "***"


class ConfigError(RuntimeError):
    """Raised when configuration loading or validation fails."""


@dataclass
class Layer:
    """Overrides from one source, keyed by dotted path (``section.key``)."""

    name: str
    values: Dict[str, Any] = field(default_factory=dict)
    origins: Dict[str, str] = field(default_factory=dict)

    def put(self, key: str, value: Any, origin: str) -> None:
        self.values[key] = value
        self.origins[key] = origin

    def describe(self, key: str) -> str:
        return f"{self.name} ({self.origins[key]})"


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _default_value(key: str) -> Any:
    section, _, name = key.partition(".")
    return getattr(getattr(DEFAULT_CONFIG, section, None), name, None)


def _flatten(table: Mapping[str, Any], prefix: str = "") -> Iterator[Tuple[str, Any]]:
    for name, value in table.items():
        key = f"{prefix}.{name}" if prefix else str(name)
        if isinstance(value, Mapping):
            yield from _flatten(value, key)
        else:
            yield key, value


def _file_layer(path: Path) -> Layer:
    layer = Layer("file")
    try:
        with path.open("rb") as handle:
            table = tomllib.load(handle)
    except FileNotFoundError:
        return layer
    except (tomllib.TOMLDecodeError, OSError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc
    for key, value in _flatten(table):
        layer.put(key, value, str(path))
    return layer


def env_var_to_key(variable: str) -> Optional[str]:
    """Map ``NEWSDESK__TRANSLATION__BATCH_SIZE`` to ``translation.batch_size``.

    Returns None for variables outside the prefix. Raises ``ConfigError``
    when the variable carries the prefix but does not name a section and key.
    """
    head = ENV_PREFIX + "__"
    if not variable.startswith(head):
        return None
    segments = [part.lower() for part in variable[len(head) :].split("__") if part]
    if len(segments) != 2 or segments[0] not in Config.model_fields:
        raise ConfigError(
            f"{variable} must look like {head}<SECTION>__<KEY> with SECTION one of: "
            + ", ".join(sorted(Config.model_fields))
        )
    return ".".join(segments)


def _env_value(key: str, raw: str) -> Any:
    # Scalars stay text and pydantic coerces them; list settings accept JSON or commas.
    text = raw.strip()
    if not isinstance(_default_value(key), list):
        return text
    if text.startswith("["):
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"{key}: invalid JSON list {text!r}") from exc
    return [part.strip() for part in text.split(",") if part.strip()]


def _env_layer(name: str, variables: Mapping[str, Optional[str]], origin: str) -> Layer:
    layer = Layer(name)
    for variable, raw in variables.items():
        key = env_var_to_key(variable)
        if key is None or raw is None:
            continue
        layer.put(key, _env_value(key, raw), f"{variable}, {origin}")
    return layer


def _apply(target: Dict[str, Any], key: str, value: Any) -> None:
    section, _, name = key.partition(".")
    bucket = target.setdefault(section, {})
    if not isinstance(bucket, dict) or not name:
        raise ConfigError(f"{key}: settings must live inside a [section] table")
    bucket[name] = value


def _validation_error(exc: ValidationError, sources: Mapping[str, str]) -> ConfigError:
    lines: List[str] = []
    for record in exc.errors():
        key = ".".join(str(part) for part in record.get("loc", ())) or "<root>"
        line = f"{key}: {record.get('msg', 'invalid value')}"
        if key not in SECRET_KEYS and record.get("input") is not None:
            line += f" (got {record['input']!r})"
        lines.append(f"{line} [{sources.get(key, 'default')}]")
    return ConfigError("Invalid configuration:\n - " + "\n - ".join(lines))


def load_config(
    path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """Merge every layer over the defaults and validate the result."""

    config_path = path or _project_root() / CONFIG_FILENAME
    env_path = config_path.parent / ENV_FILENAME
    layers = [_file_layer(config_path)]
    if env_path.exists():
        layers.append(
            _env_layer("env-file", dotenv_values(env_path, verbose=False), str(env_path))
        )
    layers.append(_env_layer("env", os.environ if environ is None else environ, "process"))

    merged = DEFAULT_CONFIG.model_dump(mode="python")
    sources: Dict[str, str] = {}
    for layer in layers:
        for key, value in layer.values.items():
            _apply(merged, key, value)
            sources[key] = layer.describe(key)

    try:
        config = Config.model_validate(merged)
    except ValidationError as exc:
        raise _validation_error(exc, sources) from exc
    config._sources = sources
    return config


def source_of(config: Config, key: str) -> str:
    """Return which layer supplied ``key``; ``default`` when nothing overrode it."""
    return config._sources.get(key, "default")


def check_consistency(config: Config) -> None:
    """Cross-field rules that a single field validator cannot express."""

    translation = config.translation
    if not translation.api_url.startswith(("http://", "https://")):
        raise ConfigError("translation.api_url must be an http(s) URL")
    if translation.batch_delay_seconds >= translation.cycle_interval_seconds:
        raise ConfigError(
            "translation.batch_delay_seconds must be shorter than cycle_interval_seconds"
        )


def show_value(config: Config, key: str) -> str:
    section, _, name = key.partition(".")
    model = getattr(config, section, None)
    if model is None or not name or name not in type(model).model_fields:
        raise ConfigError(f"Unknown configuration key: {key}")
    value = getattr(model, name)
    if key in SECRET_KEYS and value:
        rendered = MASK
    elif isinstance(value, Path):
        rendered = str(value)
    else:
        rendered = json.dumps(value, ensure_ascii=False)
    return f"{key} = {rendered}  [{source_of(config, key)}]"


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Newsdesk configuration check")
    parser.add_argument("--config", type=Path, help="Path to the TOML configuration file")
    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument(
        "--validate", action="store_true", help="Load and check the active configuration"
    )
    actions.add_argument(
        "--show", metavar="KEY", help="Print one value (e.g. translation.batch_size) and its source"
    )
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        check_consistency(config)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.validate:
        credential = "set" if config.translation.api_key else "not set"
        print(
            "Configuration OK: locales "
            f"{', '.join(config.translation.enabled_locales)}, "
            f"batch size {config.translation.batch_size}, "
            f"translation credential {credential}"
        )
        return 0

    try:
        print(show_value(config, args.show))
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI entry point
    raise SystemExit(main())
