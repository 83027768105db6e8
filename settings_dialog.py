"""
settings_dialog.py

Settings dialog for docfold.
Organizes the docstring hiding options and editor settings into tabs.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGroupBox,
    QLineEdit,
    QSpinBox,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

if TYPE_CHECKING:
    from settings import SettingsManager

from settings import DIALECTS, HIDE_STYLES, LOG_LEVELS, AppSettings
from styles import THEMES


class SettingsDialog(QDialog):
    """
    Settings dialog with tabbed organization.

    Tabs:
    - Docstrings: Hide style, partial character count, marker, dialect
    - Editor: Theme, font, gutter
    """

    def __init__(self, settings_manager: "SettingsManager", parent=None):
        super().__init__(parent)
        self.settings_manager = settings_manager
        self.setWindowTitle("docfold Settings")
        self.setMinimumSize(420, 320)

        # Store original settings for cancel
        self._original_settings = copy.deepcopy(settings_manager.settings)

        self._setup_ui()
        self._load_settings()

    def _setup_ui(self):
        """Create the dialog UI."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(4)

        self.tabs = QTabWidget()
        layout.addWidget(self.tabs)
        self.tabs.addTab(self._create_docstrings_tab(), "Docstrings")
        self.tabs.addTab(self._create_editor_tab(), "Editor")

        button_box = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok |
            QDialogButtonBox.StandardButton.Cancel |
            QDialogButtonBox.StandardButton.RestoreDefaults
        )
        button_box.accepted.connect(self._on_ok)
        button_box.rejected.connect(self._on_cancel)
        button_box.button(QDialogButtonBox.StandardButton.RestoreDefaults).clicked.connect(self._on_restore_defaults)
        layout.addWidget(button_box)

    def _create_docstrings_tab(self) -> QWidget:
        """Create the Docstrings settings tab."""
        widget = QWidget()
        layout = QVBoxLayout(widget)
        layout.setContentsMargins(4, 4, 4, 4)

        group = QGroupBox("Hiding")
        form = QFormLayout(group)

        self.style_combo = QComboBox()
        self.style_combo.addItems(list(HIDE_STYLES))
        self.style_combo.currentTextChanged.connect(self._sync_partial_enabled)
        form.addRow("Hide style:", self.style_combo)

        self.partial_chars_spin = QSpinBox()
        self.partial_chars_spin.setRange(0, 10000)
        self.partial_chars_spin.setSuffix(" chars")
        form.addRow("Visible in partial mode:", self.partial_chars_spin)

        self.marker_edit = QLineEdit()
        self.marker_edit.setPlaceholderText("(no marker)")
        form.addRow("Marker after hidden text:", self.marker_edit)

        self.dialect_combo = QComboBox()
        self.dialect_combo.addItems(list(DIALECTS))
        form.addRow("Default dialect:", self.dialect_combo)

        layout.addWidget(group)
        layout.addStretch()
        return widget

    def _create_editor_tab(self) -> QWidget:
        """Create the Editor settings tab."""
        widget = QWidget()
        layout = QVBoxLayout(widget)
        layout.setContentsMargins(4, 4, 4, 4)

        group = QGroupBox("Appearance")
        form = QFormLayout(group)

        self.theme_combo = QComboBox()
        self.theme_combo.addItems(list(THEMES.keys()))
        form.addRow("Theme:", self.theme_combo)

        self.font_family_edit = QLineEdit()
        form.addRow("Font family:", self.font_family_edit)

        self.font_size_spin = QSpinBox()
        self.font_size_spin.setRange(6, 48)
        form.addRow("Font size:", self.font_size_spin)

        self.doc_italic_cb = QCheckBox("Italic docstrings")
        form.addRow("", self.doc_italic_cb)

        self.log_level_combo = QComboBox()
        self.log_level_combo.addItems(list(LOG_LEVELS))
        form.addRow("Log level:", self.log_level_combo)

        layout.addWidget(group)
        layout.addStretch()
        return widget

    def _sync_partial_enabled(self, style: str):
        self.partial_chars_spin.setEnabled(style == "partial")

    def _load_settings(self):
        """Populate the widgets from the settings manager."""
        s = self.settings_manager.settings
        self.style_combo.setCurrentText(s.docstrings.hide_style)
        self.partial_chars_spin.setValue(s.docstrings.partial_chars)
        self.marker_edit.setText(s.docstrings.marker)
        self.dialect_combo.setCurrentText(s.docstrings.dialect)
        self.theme_combo.setCurrentText(s.theme)
        self.font_family_edit.setText(s.editor.font.family)
        self.font_size_spin.setValue(s.editor.font.size)
        self.doc_italic_cb.setChecked(s.editor.syntax.doc_italic)
        self.log_level_combo.setCurrentText(s.log_level)
        self._sync_partial_enabled(s.docstrings.hide_style)

    def _save_settings(self):
        """Write the widget values back and persist them."""
        s = self.settings_manager.settings
        s.docstrings.hide_style = self.style_combo.currentText()
        s.docstrings.partial_chars = self.partial_chars_spin.value()
        s.docstrings.marker = self.marker_edit.text()
        s.docstrings.dialect = self.dialect_combo.currentText()
        s.theme = self.theme_combo.currentText()
        s.editor.font.family = self.font_family_edit.text() or s.editor.font.family
        s.editor.font.size = self.font_size_spin.value()
        s.editor.syntax.doc_italic = self.doc_italic_cb.isChecked()
        s.log_level = self.log_level_combo.currentText()
        self.settings_manager.save()

    def _on_ok(self):
        """Handle OK button - save and close."""
        self._save_settings()
        self.accept()

    def _on_cancel(self):
        """Handle Cancel button - restore original settings and close."""
        self.settings_manager.settings = self._original_settings
        self.reject()

    def _on_restore_defaults(self):
        """Handle Restore Defaults button - reset all settings to defaults."""
        self.settings_manager.settings = AppSettings()
        self._load_settings()

    def selected_theme(self) -> str:
        return self.theme_combo.currentText()
