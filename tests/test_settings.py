"""Tests for TOML settings persistence."""
from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from settings import AppSettings, SettingsManager, get_settings


class TestSettingsManager:
    def test_defaults_without_file(self, tmp_path):
        manager = SettingsManager(settings_dir=tmp_path)
        assert manager.settings == AppSettings()
        assert manager.get_settings_path() == tmp_path / "settings.toml"

    def test_save_and_reload(self, tmp_path):
        manager = SettingsManager(settings_dir=tmp_path)
        manager.settings.snapping.threshold = 4.0
        manager.settings.canvas.shapes.min_size = 2.0
        manager.settings.debug.trace_states = True
        manager.save()

        reloaded = SettingsManager(settings_dir=tmp_path)
        assert reloaded.settings.snapping.threshold == 4.0
        assert reloaded.settings.canvas.shapes.min_size == 2.0
        assert reloaded.settings.debug.trace_states is True

    def test_partial_file_keeps_defaults(self, tmp_path):
        (tmp_path / "settings.toml").write_text("[snapping]\nenabled = false\n", encoding="utf-8")
        manager = SettingsManager(settings_dir=tmp_path)
        assert manager.settings.snapping.enabled is False
        assert manager.settings.snapping.threshold == 10.0
        assert manager.settings.gesture.drag_threshold == 4.0

    def test_corrupted_file_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "settings.toml").write_text("not = [valid", encoding="utf-8")
        manager = SettingsManager(settings_dir=tmp_path)
        assert manager.settings == AppSettings()

    def test_to_toml(self, tmp_path):
        text = SettingsManager(settings_dir=tmp_path).to_toml()
        assert "[snapping]" in text
        assert "drag_threshold" in text

    def test_global_manager_is_isolated(self, isolated_settings):
        assert get_settings() is isolated_settings
