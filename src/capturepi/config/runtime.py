"""Runtime configuration for the capture service."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

DEFAULT_CONFIG_PATH = Path("~/.config/capturepi/capturepi.yaml")


@dataclass(slots=True)
class StoreConfig:
    """Which capture store to build and how to reach it."""

    kind: str = "memory"
    url: str = "sqlite:///captures.db"
    compress: bool = True
    page_size: int = 100

    def sanitized(self) -> StoreConfig:
        kind = str(self.kind or "memory").strip().lower()
        return StoreConfig(
            kind=kind,
            url=str(self.url),
            compress=bool(self.compress),
            page_size=max(1, int(self.page_size)),
        )


@dataclass(slots=True)
class CaptureConfig:
    """
    Tuning knobs for how captures are sampled, signalled, and stored.

    The defaults sample at 29.9 Hz on the mock board and keep captures in
    memory.
    """

    frequency_hz: float = 29.9
    board: str = "mock"
    buzzer_ms: int = 250
    sync_light_pattern_ms: list[int] = field(default_factory=lambda: [500, 250, 500])
    system_config_path: str | None = None
    store: StoreConfig = field(default_factory=StoreConfig)

    def sanitized(self) -> CaptureConfig:
        """Return a copy with derived limits applied."""
        store = self.store
        if isinstance(store, Mapping):
            store = store_config_from_mapping(store)
        return CaptureConfig(
            frequency_hz=max(0.001, float(self.frequency_hz)),
            board=str(self.board or "mock").strip().lower(),
            buzzer_ms=max(0, int(self.buzzer_ms)),
            sync_light_pattern_ms=[max(0, int(ms)) for ms in self.sync_light_pattern_ms],
            system_config_path=self.system_config_path,
            store=store.sanitized(),
        )


def _recognized(cls) -> set[str]:
    return {f.name for f in fields(cls)}


def store_config_from_mapping(data: Mapping[str, Any] | None) -> StoreConfig:
    if not data:
        return StoreConfig()
    payload = {key: data[key] for key in data.keys() & _recognized(StoreConfig)}
    return StoreConfig(**payload).sanitized()


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten a top-level ``capture`` block into the root mapping."""
    if "capture" in data and isinstance(data["capture"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "capture":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> CaptureConfig:
    """Build :class:`CaptureConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return CaptureConfig()
    normalized = _normalize_mapping(data)
    payload = {key: normalized[key] for key in normalized.keys() & _recognized(CaptureConfig)}
    if "store" in payload:
        payload["store"] = store_config_from_mapping(payload["store"])
    return CaptureConfig(**payload).sanitized()


def load_config(path: str | Path | None = None) -> CaptureConfig:
    """
    Load configuration from ``path`` (or ``$CAPTUREPI_CONFIG``).

    Missing files fall back to default :class:`CaptureConfig`.
    """
    if path is None:
        path = os.environ.get("CAPTUREPI_CONFIG") or DEFAULT_CONFIG_PATH
    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        return CaptureConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["CaptureConfig", "StoreConfig", "config_from_mapping", "load_config"]
