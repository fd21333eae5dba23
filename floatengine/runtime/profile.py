from __future__ import annotations

import json
import logging
from dataclasses import fields, replace
from pathlib import Path
from typing import Optional

from floatengine.core.config import DEFAULT_PRESET, PRESETS, Preset, PresetName

logger = logging.getLogger(__name__)

# profile section -> Preset attribute
_SECTIONS = ("gesture", "capture", "edge", "physics", "trash")


def _profile_path() -> Path:
    p = Path.home() / ".config" / "floatengine"
    p.mkdir(parents=True, exist_ok=True)
    return p / "profile.json"


def save_profile(profile: dict) -> None:
    _profile_path().write_text(json.dumps(profile, indent=2))


def load_profile() -> Optional[dict]:
    p = _profile_path()
    if not p.exists():
        return None
    return json.loads(p.read_text())


def apply_profile(preset: Preset, profile: Optional[dict]) -> Preset:
    """
    Return a copy of preset with the profile's values swapped in.

    {"preset": "Snappy", "edge": {"duration_ms": 300}} picks the Snappy base
    and then overrides one edge value. Unknown keys are logged and skipped.
    """
    if not profile:
        return preset

    base = preset
    name = profile.get("preset")
    if name is not None:
        try:
            base = PRESETS[PresetName(name)]
        except ValueError:
            logger.warning("unknown preset %r in profile, keeping %s", name, preset.name.value)

    changes = {}
    for key, values in profile.items():
        if key == "preset":
            continue
        if key not in _SECTIONS or not isinstance(values, dict):
            logger.warning("ignoring profile key %r", key)
            continue
        group = getattr(base, key)
        known = {f.name for f in fields(group)}
        picked = {}
        for k, v in values.items():
            if k not in known:
                logger.warning("ignoring profile key %s.%s", key, k)
                continue
            # keep the field's numeric type (ints stay ints)
            current = getattr(group, k)
            picked[k] = type(current)(v)
        if picked:
            changes[key] = replace(group, **picked)

    return replace(base, **changes)


def active_preset() -> Preset:
    """Default preset with the saved profile applied, if any."""
    return apply_profile(DEFAULT_PRESET, load_profile())
