"""Dedup policy table: eventType -> dedup window (seconds).

Loaded once at startup from a .properties file (eventType=seconds per line)
or a YAML mapping. A missing or unreadable source yields an empty table,
which disables dedup for every event type. Malformed entries are skipped
with a warning so lookups never fail later.
"""

import logging
import re
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import PositiveInt, TypeAdapter, ValidationError

from eventdedup.core.errors import ConfigLoadError

logger = logging.getLogger(__name__)

_window_adapter = TypeAdapter(PositiveInt)

YAML_SUFFIXES = (".yaml", ".yml")

# key, then =, : or whitespace (optionally followed by = or :), then value
_PROPERTY_LINE = re.compile(r"^(?P<key>[^=:\s]+)\s*[=:\s]\s*(?P<value>.*)$")


class DedupPolicyTable(Mapping[str, int]):
    """Immutable mapping of event type to dedup window in seconds."""

    def __init__(self, windows: Mapping[str, int] | None = None) -> None:
        self._windows: Mapping[str, int] = MappingProxyType(dict(windows or {}))

    @classmethod
    def from_mapping(cls, raw: Mapping[Any, Any], source: str = "<mapping>") -> "DedupPolicyTable":
        """Build a validated table, skipping entries that are not positive integers."""
        windows: dict[str, int] = {}
        for event_type, value in raw.items():
            name = str(event_type).strip() if event_type is not None else ""
            if not name:
                logger.warning(f"Skipping dedup policy entry with empty event type in {source}")
                continue
            try:
                windows[name] = _window_adapter.validate_python(value)
            except ValidationError:
                logger.warning(
                    f"Skipping dedup policy entry {name}={value!r} in {source}: "
                    "window must be a positive integer number of seconds"
                )
        return cls(windows)

    def window_for(self, event_type: str | None) -> int | None:
        """Dedup window for event_type, or None if dedup is disabled for it."""
        if not event_type:
            return None
        return self._windows.get(event_type)

    def __getitem__(self, event_type: str) -> int:
        return self._windows[event_type]

    def __iter__(self) -> Iterator[str]:
        return iter(self._windows)

    def __len__(self) -> int:
        return len(self._windows)

    def __repr__(self) -> str:
        return f"DedupPolicyTable({dict(self._windows)!r})"


def parse_properties(text: str) -> dict[str, str]:
    """Parse key=value, key: value and "key value" lines. Comments start with # or !.

    The key ends at the first =, : or whitespace; an = or : after that
    whitespace is part of the separator. Lines with only a key are kept with
    an empty value so they get reported as malformed during validation.
    """
    entries: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue
        match = _PROPERTY_LINE.match(line)
        if match is None:
            entries[line] = ""
            continue
        entries[match.group("key")] = match.group("value").strip()
    return entries


def _read_source(path: Path) -> Mapping[Any, Any]:
    """Read raw policy entries from path.

    Raises:
        ConfigLoadError: If the file is missing, unreadable or not a mapping
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoadError(f"Cannot read dedup policy file {path}: {e}") from e

    if path.suffix.lower() not in YAML_SUFFIXES:
        return parse_properties(text)

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in dedup policy file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Dedup policy file {path} must contain a mapping")
    return data


def load_policy_table(path: str | Path) -> DedupPolicyTable:
    """Load the dedup policy table once at startup.

    Never raises for a bad source: degrades to an empty table and logs a warning.
    """
    path = Path(path)
    try:
        raw = _read_source(path)
    except ConfigLoadError as e:
        logger.warning(f"{e}; dedup disabled for all event types")
        return DedupPolicyTable()

    table = DedupPolicyTable.from_mapping(raw, source=str(path))
    logger.info(f"Loaded {len(table)} dedup policies from {path}")
    return table
