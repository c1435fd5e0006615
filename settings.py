"""
settings.py

Persistent settings management for shapecraft.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/shapecraft/settings.toml
    - macOS: ~/Library/Application Support/shapecraft/settings.toml
    - Linux: ~/.config/shapecraft/settings.toml

Every tolerance below is expressed in screen pixels and is divided by the
current zoom scale before it is compared against diagram coordinates.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "shapecraft"

log = logging.getLogger(__name__)

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


def set_settings(manager: Optional["SettingsManager"]) -> None:
    """Replace the global settings manager (None resets it lazily)."""
    global _settings_manager
    _settings_manager = manager


# =============================================================================
# Canvas Settings
# =============================================================================

@dataclass
class CanvasHandleSettings:
    """Bounding box handle settings.

    Defaults:
        anchor_size: 5.0
        rotation_offset: 20.0
    """
    anchor_size: float = 5.0        # Default: 5.0 pixels (half of the square)
    rotation_offset: float = 20.0   # Default: 20.0 pixels outward from the corner


@dataclass
class CanvasShapeSettings:
    """Shape geometry settings.

    Defaults:
        min_size: 10.0
        default_width: 100.0
        default_height: 100.0
    """
    min_size: float = 10.0         # Default: 10.0 units while resizing
    default_width: float = 100.0   # Default: 100.0 units
    default_height: float = 100.0  # Default: 100.0 units


@dataclass
class CanvasLineSettings:
    """Line hit testing settings.

    Defaults:
        hit_width: 6.0
    """
    hit_width: float = 6.0  # Default: 6.0 pixels either side of the segment


@dataclass
class CanvasZoomSettings:
    """Zoom behavior settings.

    Defaults:
        wheel_factor: 1.15
        min_scale: 0.1
        max_scale: 10.0
    """
    wheel_factor: float = 1.15  # Default: 1.15 (15% per scroll step)
    min_scale: float = 0.1      # Default: 0.1
    max_scale: float = 10.0     # Default: 10.0


@dataclass
class CanvasSettings:
    """All canvas-related settings."""
    handles: CanvasHandleSettings = field(default_factory=CanvasHandleSettings)
    shapes: CanvasShapeSettings = field(default_factory=CanvasShapeSettings)
    lines: CanvasLineSettings = field(default_factory=CanvasLineSettings)
    zoom: CanvasZoomSettings = field(default_factory=CanvasZoomSettings)


# =============================================================================
# Snapping / Rotation / Gesture Settings
# =============================================================================

@dataclass
class SnappingSettings:
    """Snapping settings.

    Defaults:
        enabled: True
        threshold: 10.0
        grid_enabled: False
        grid_size: 50.0
    """
    enabled: bool = True        # Default: True
    threshold: float = 10.0     # Default: 10.0 pixels
    grid_enabled: bool = False  # Default: False
    grid_size: float = 50.0     # Default: 50.0 units


@dataclass
class RotationSettings:
    """Rotation gesture settings.

    Defaults:
        snap_step: 15.0
        loose_step: 45.0
        loose_tolerance: 5.0
    """
    snap_step: float = 15.0        # Default: 15 degrees when snapping is forced
    loose_step: float = 45.0       # Default: 45 degrees for loose snapping
    loose_tolerance: float = 5.0   # Default: 5 degree grid that has to agree with loose_step


@dataclass
class GestureSettings:
    """Pointer gesture settings.

    Defaults:
        drag_threshold: 4.0
    """
    drag_threshold: float = 4.0  # Default: 4.0 pixels before a press turns into a drag


@dataclass
class DebugSettings:
    """Diagnostics settings.

    Defaults:
        trace_states: False
    """
    trace_states: bool = False  # Default: False


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        canvas: Canvas geometry and handle settings.
        snapping: Snapping settings.
        rotation: Rotation gesture settings.
        gesture: Pointer gesture settings.
        debug: Diagnostics settings.
    """
    canvas: CanvasSettings = field(default_factory=CanvasSettings)
    snapping: SnappingSettings = field(default_factory=SnappingSettings)
    rotation: RotationSettings = field(default_factory=RotationSettings)
    gesture: GestureSettings = field(default_factory=GestureSettings)
    debug: DebugSettings = field(default_factory=DebugSettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
        settings_dir: Optional explicit directory, mainly for tests.
    """

    def __init__(self, app_name: str = APP_NAME, settings_dir: Optional[Path] = None):
        if settings_dir is None:
            settings_dir = Path(platformdirs.user_config_dir(app_name))
        self.settings_dir = Path(settings_dir)
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            log.warning("Ignoring unreadable settings file %s: %s", self.settings_file, e)
            return AppSettings()

        return self._parse_toml(data)

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Unknown keys are ignored and missing keys keep their defaults.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        # Canvas section
        canvas = data.get("canvas", {})
        if "handles" in canvas:
            h = canvas["handles"]
            settings.canvas.handles.anchor_size = h.get("anchor_size", settings.canvas.handles.anchor_size)
            settings.canvas.handles.rotation_offset = h.get("rotation_offset", settings.canvas.handles.rotation_offset)
        if "shapes" in canvas:
            s = canvas["shapes"]
            settings.canvas.shapes.min_size = s.get("min_size", settings.canvas.shapes.min_size)
            settings.canvas.shapes.default_width = s.get("default_width", settings.canvas.shapes.default_width)
            settings.canvas.shapes.default_height = s.get("default_height", settings.canvas.shapes.default_height)
        if "lines" in canvas:
            li = canvas["lines"]
            settings.canvas.lines.hit_width = li.get("hit_width", settings.canvas.lines.hit_width)
        if "zoom" in canvas:
            zm = canvas["zoom"]
            settings.canvas.zoom.wheel_factor = zm.get("wheel_factor", settings.canvas.zoom.wheel_factor)
            settings.canvas.zoom.min_scale = zm.get("min_scale", settings.canvas.zoom.min_scale)
            settings.canvas.zoom.max_scale = zm.get("max_scale", settings.canvas.zoom.max_scale)

        # Snapping section
        sn = data.get("snapping", {})
        settings.snapping.enabled = sn.get("enabled", settings.snapping.enabled)
        settings.snapping.threshold = sn.get("threshold", settings.snapping.threshold)
        settings.snapping.grid_enabled = sn.get("grid_enabled", settings.snapping.grid_enabled)
        settings.snapping.grid_size = sn.get("grid_size", settings.snapping.grid_size)

        # Rotation section
        rot = data.get("rotation", {})
        settings.rotation.snap_step = rot.get("snap_step", settings.rotation.snap_step)
        settings.rotation.loose_step = rot.get("loose_step", settings.rotation.loose_step)
        settings.rotation.loose_tolerance = rot.get("loose_tolerance", settings.rotation.loose_tolerance)

        # Gesture section
        ge = data.get("gesture", {})
        settings.gesture.drag_threshold = ge.get("drag_threshold", settings.gesture.drag_threshold)

        # Debug section
        dbg = data.get("debug", {})
        settings.debug.trace_states = dbg.get("trace_states", settings.debug.trace_states)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "canvas": {
                "handles": {
                    "anchor_size": s.canvas.handles.anchor_size,
                    "rotation_offset": s.canvas.handles.rotation_offset,
                },
                "shapes": {
                    "min_size": s.canvas.shapes.min_size,
                    "default_width": s.canvas.shapes.default_width,
                    "default_height": s.canvas.shapes.default_height,
                },
                "lines": {
                    "hit_width": s.canvas.lines.hit_width,
                },
                "zoom": {
                    "wheel_factor": s.canvas.zoom.wheel_factor,
                    "min_scale": s.canvas.zoom.min_scale,
                    "max_scale": s.canvas.zoom.max_scale,
                },
            },
            "snapping": {
                "enabled": s.snapping.enabled,
                "threshold": s.snapping.threshold,
                "grid_enabled": s.snapping.grid_enabled,
                "grid_size": s.snapping.grid_size,
            },
            "rotation": {
                "snap_step": s.rotation.snap_step,
                "loose_step": s.rotation.loose_step,
                "loose_tolerance": s.rotation.loose_tolerance,
            },
            "gesture": {
                "drag_threshold": s.gesture.drag_threshold,
            },
            "debug": {
                "trace_states": s.debug.trace_states,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string.

        Returns:
            TOML representation of the current settings.
        """
        data = self._to_toml_dict()
        return tomli_w.dumps(data)

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
