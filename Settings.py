"""Persistent FibPad settings stored as JSON in the user's home directory."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

SETTINGS_PATH = Path.home() / ".fibpad.json"
DEFAULT_TAB_SIZE = 4
TAB_SIZE_CHOICES = (2, 3, 4, 8)
DEFAULTS: Dict[str, Any] = {"tab_size": DEFAULT_TAB_SIZE, "word_wrap": True}


def load_settings(path: Path = SETTINGS_PATH) -> Dict[str, Any]:
	"""Load settings from disk. Returns a dict with every key of DEFAULTS."""
	if not path.exists():
		return dict(DEFAULTS)
	try:
		with open(path, "r", encoding="utf-8") as fh:
			data = json.load(fh)
	except (OSError, ValueError) as exc:
		logger.warning("Could not read settings from %s: %s", path, exc)
		return dict(DEFAULTS)
	if not isinstance(data, dict):
		logger.warning("Ignoring settings in %s: expected a JSON object", path)
		return dict(DEFAULTS)
	for k, v in DEFAULTS.items():
		data.setdefault(k, v)
	return data


def save_settings(settings: Dict[str, Any], path: Path = SETTINGS_PATH) -> None:
	try:
		with open(path, "w", encoding="utf-8") as fh:
			json.dump(settings, fh, indent=2)
	except OSError as exc:
		logger.warning("Could not save settings to %s: %s", path, exc)


def tab_size_from(settings: Dict[str, Any]) -> int:
	"""Configured tab size, or the default if it is not a positive integer."""
	value = settings.get("tab_size", DEFAULT_TAB_SIZE)
	# bool is an int subclass
	if isinstance(value, bool) or not isinstance(value, int) or value < 1:
		logger.warning("Invalid tab_size %r, using %d", value, DEFAULT_TAB_SIZE)
		return DEFAULT_TAB_SIZE
	return value
