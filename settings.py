"""
settings.py

Persistent settings management for docfold.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/docfold/settings.toml
    - macOS: ~/Library/Application Support/docfold/settings.toml
    - Linux: ~/.config/docfold/settings.toml

Default values are documented in comments throughout this file.
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

APP_NAME = "docfold"

HIDE_STYLES = ("complete", "partial", "first-line")
DIALECTS = ("emacs-lisp", "common-lisp", "scheme", "clojure")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

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


# =============================================================================
# Editor Settings
# =============================================================================

@dataclass
class EditorFontSettings:
    """Editor font settings.

    Defaults:
        family: "Consolas"
        size: 10
        tab_width: 2
    """
    family: str = "Consolas"  # Default: "Consolas"
    size: int = 10            # Default: 10 points
    tab_width: int = 2        # Default: 2 characters


@dataclass
class EditorLineNumberSettings:
    """Line number gutter settings.

    Defaults:
        left_margin: 8
        right_margin: 4
    """
    left_margin: int = 8    # Default: 8 pixels
    right_margin: int = 4   # Default: 4 pixels


@dataclass
class EditorGutterSettings:
    """Docstring gutter settings.

    Defaults:
        width: 14
    """
    width: int = 14  # Default: 14 pixels


@dataclass
class EditorSyntaxSettings:
    """Lisp syntax highlighting colors.

    Defaults:
        comment_color: "#7F8C8D"
        string_color: "#27AE60"
        doc_color: "#B9770E"
        doc_italic: True
        keyword_color: "#8E44AD"
        keyword_bold: True
        function_color: "#2E86C1"
        constant_color: "#D35400"
        builtin_color: "#16A085"
        paren_color: "#566573"
    """
    comment_color: str = "#7F8C8D"   # Default: gray
    string_color: str = "#27AE60"    # Default: green
    doc_color: str = "#B9770E"       # Default: amber
    doc_italic: bool = True          # Default: True
    keyword_color: str = "#8E44AD"   # Default: purple
    keyword_bold: bool = True        # Default: True
    function_color: str = "#2E86C1"  # Default: blue
    constant_color: str = "#D35400"  # Default: orange
    builtin_color: str = "#16A085"   # Default: teal
    paren_color: str = "#566573"     # Default: slate


@dataclass
class EditorSettings:
    """All editor-related settings.

    Contains nested settings for font, line numbers, gutter, and syntax.
    """
    font: EditorFontSettings = field(default_factory=EditorFontSettings)
    line_numbers: EditorLineNumberSettings = field(default_factory=EditorLineNumberSettings)
    gutter: EditorGutterSettings = field(default_factory=EditorGutterSettings)
    syntax: EditorSyntaxSettings = field(default_factory=EditorSyntaxSettings)


# =============================================================================
# Docstring Settings
# =============================================================================

@dataclass
class DocstringSettings:
    """Docstring hiding settings.

    Defaults:
        hide_style: "complete"
        partial_chars: 40
        marker: "..."
        dialect: "emacs-lisp"
    """
    hide_style: str = "complete"     # Default: "complete" (or "partial", "first-line")
    partial_chars: int = 40          # Default: 40 characters left visible
    marker: str = "..."              # Default: "..." (empty = no marker)
    dialect: str = "emacs-lisp"      # Default: used when the file extension is unknown


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        theme: The editor theme name (must match a key in styles.THEMES).
        log_level: Root logging level name.
        editor: Editor-related settings.
        docstrings: Docstring hiding settings.
    """
    theme: str = "Light"        # Default: "Light"
    log_level: str = "WARNING"  # Default: "WARNING"

    editor: EditorSettings = field(default_factory=EditorSettings)
    docstrings: DocstringSettings = field(default_factory=DocstringSettings)


def _choice(value: Any, allowed, default: str, name: str) -> str:
    if value in allowed:
        return value
    log.warning("ignoring invalid %s %r, using %r", name, value, default)
    return default


def _non_negative(value: Any, default: int, name: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    log.warning("ignoring invalid %s %r, using %r", name, value, default)
    return default


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
        settings_dir: Explicit directory, overriding the platform location.
    """

    def __init__(self, app_name: str = APP_NAME, settings_dir: Optional[Path] = None):
        self.settings_dir = Path(settings_dir) if settings_dir else Path(platformdirs.user_config_dir(app_name))
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()
        self._needs_save = not self.settings_file.exists()  # Save if file didn't exist

    def ensure_file_complete(self) -> None:
        """Ensure settings file exists with all sections. Call once at startup."""
        if self._needs_save or not self.settings_file.exists():
            self.save()
            self._needs_save = False

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
            log.warning("could not read %s (%s), using defaults", self.settings_file, e)
            return AppSettings()

        return self._parse_toml(data)

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        # General section
        general = data.get("general", {})
        settings.theme = general.get("theme", settings.theme)
        settings.log_level = _choice(
            str(general.get("log_level", settings.log_level)).upper(), LOG_LEVELS, settings.log_level, "log_level"
        )

        # Editor section
        editor = data.get("editor", {})
        if "font" in editor:
            font = editor["font"]
            settings.editor.font.family = font.get("family", settings.editor.font.family)
            settings.editor.font.size = font.get("size", settings.editor.font.size)
            settings.editor.font.tab_width = font.get("tab_width", settings.editor.font.tab_width)
        if "line_numbers" in editor:
            ln = editor["line_numbers"]
            settings.editor.line_numbers.left_margin = ln.get("left_margin", settings.editor.line_numbers.left_margin)
            settings.editor.line_numbers.right_margin = ln.get("right_margin", settings.editor.line_numbers.right_margin)
        if "gutter" in editor:
            settings.editor.gutter.width = editor["gutter"].get("width", settings.editor.gutter.width)
        if "syntax" in editor:
            syn = editor["syntax"]
            for name in vars(settings.editor.syntax):
                setattr(settings.editor.syntax, name, syn.get(name, getattr(settings.editor.syntax, name)))

        # Docstrings section
        docs = data.get("docstrings", {})
        d = settings.docstrings
        d.hide_style = _choice(docs.get("hide_style", d.hide_style), HIDE_STYLES, d.hide_style, "hide_style")
        d.partial_chars = _non_negative(docs.get("partial_chars", d.partial_chars), d.partial_chars, "partial_chars")
        d.marker = str(docs.get("marker", d.marker))
        d.dialect = _choice(docs.get("dialect", d.dialect), DIALECTS, d.dialect, "dialect")

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
            "general": {
                "theme": s.theme,
                "log_level": s.log_level,
            },
            "editor": {
                "font": {
                    "family": s.editor.font.family,
                    "size": s.editor.font.size,
                    "tab_width": s.editor.font.tab_width,
                },
                "line_numbers": {
                    "left_margin": s.editor.line_numbers.left_margin,
                    "right_margin": s.editor.line_numbers.right_margin,
                },
                "gutter": {
                    "width": s.editor.gutter.width,
                },
                "syntax": dict(vars(s.editor.syntax)),
            },
            "docstrings": {
                "hide_style": s.docstrings.hide_style,
                "partial_chars": s.docstrings.partial_chars,
                "marker": s.docstrings.marker,
                "dialect": s.docstrings.dialect,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string.

        Returns:
            TOML representation of the current settings.
        """
        return tomli_w.dumps(self._to_toml_dict())

    def reset(self) -> None:
        """Restore all defaults (not saved until ``save``)."""
        self.settings = AppSettings()

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
