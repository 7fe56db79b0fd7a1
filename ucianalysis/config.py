"""
Configuration loading from config.yaml plus the environment toggle read by the parser.

Uses typed dataclasses throughout so the rest of the app gets IDE
completion and type-checker support without touching raw dicts.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

ALLOW_UNKNOWN_INFO_KEY = "ALLOW_UNKNOWN_INFO_KEY"

_TRUE_VALUES = ("1", "true", "yes", "on")


def env_true(name: str) -> bool:
    """True when the environment variable is set to 1/true/yes/on (any case)."""
    return os.environ.get(name, "").strip().lower() in _TRUE_VALUES


def allow_unknown_info_key() -> bool:
    return env_true(ALLOW_UNKNOWN_INFO_KEY)


@dataclass
class EngineConfig:
    path: str = "stockfish"
    args: list[str] = field(default_factory=list)
    # setoption pairs; dict keeps the yaml order, engines care about it
    options: dict[str, str] = field(default_factory=dict)


@dataclass
class ParserConfig:
    allow_unknown_info_key: bool = False


@dataclass
class Config:
    engine: EngineConfig = field(default_factory=EngineConfig)
    search: dict[str, str] = field(default_factory=dict)
    parser: ParserConfig = field(default_factory=ParserConfig)

    @property
    def allow_unknown_info_key(self) -> bool:
        """The config flag or the environment toggle, whichever is on."""
        return self.parser.allow_unknown_info_key or allow_unknown_info_key()


def load_config(path: str | Path = "config.yaml") -> Config:
    """
    Load and validate config.yaml.

    Raises:
        FileNotFoundError: config.yaml is missing.
        ValueError: required fields are absent or invalid.
    """
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {cfg_path.resolve()}\n"
            "Copy config.example.yaml to config.yaml and point engine.path at your engine."
        )

    with cfg_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    try:
        engine_raw = raw.get("engine") or {}
        engine_cfg = EngineConfig(
            path=str(engine_raw.get("path", "stockfish")),
            args=[str(a) for a in engine_raw.get("args") or []],
            options=_string_pairs(engine_raw.get("options"), "engine.options"),
        )

        parser_raw = raw.get("parser") or {}
        parser_cfg = ParserConfig(
            allow_unknown_info_key=_parse_bool(
                parser_raw.get("allow_unknown_info_key", False),
                "parser.allow_unknown_info_key",
            ),
        )

        config = Config(
            engine=engine_cfg,
            search=_string_pairs(raw.get("search"), "search"),
            parser=parser_cfg,
        )
        _validate(config)
        return config

    except (AttributeError, KeyError, TypeError) as exc:
        raise ValueError(f"Invalid config.yaml structure: {exc}") from exc


def _validate(config: Config) -> None:
    if not config.engine.path.strip():
        raise ValueError("engine.path must not be empty")
    for key in config.engine.options:
        if not key.strip():
            raise ValueError("engine.options keys must not be empty")
    for key, value in config.search.items():
        if " " in key or not key:
            raise ValueError(f"search key {key!r} must be a single word")
        if not value.strip():
            raise ValueError(f"search.{key} must have a value")


def _string_pairs(value: object, where: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{where} must be a mapping, got {type(value).__name__}")
    # yaml gives us True/False for booleans; UCI spells them lowercase
    return {
        str(k): (str(v).lower() if isinstance(v, bool) else str(v))
        for k, v in value.items()
    }


def _parse_bool(value: object, where: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"{where} must be true/false, got {value!r}")
