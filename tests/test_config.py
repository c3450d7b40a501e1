#!/usr/bin/env python3

import os
import sys
import tempfile
import unittest

# PIP3 modules
import pytest
import yaml

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from silcutlib.core import config

#============================================

class ConfigFileTest(unittest.TestCase):
	#============================================
	def test_default_round_trip(self) -> None:
		"""A written default config loads back to the default settings."""
		with tempfile.TemporaryDirectory() as temp_dir:
			path = config.default_config_path(os.path.join(temp_dir, "talk.mp4"))
			self.assertTrue(path.endswith("talk.mp4.silcut.config.yaml"))
			config.write_config_file(path, config.default_config())
			loaded = config.load_config(path)
		settings = config.build_settings(loaded, path)
		self.assertEqual(settings['mode'], 'transcript')
		self.assertEqual(settings['preset'], 'normal')
		self.assertEqual(settings['content_type'], 'talking_head')
		self.assertEqual(settings['naturalness'], 50.0)
		self.assertEqual(settings['frame_ms'], 20.0)
		self.assertEqual(settings['sample_rate'], 16000)
		self.assertEqual(settings['fps'], 30.0)
		self.assertEqual(settings['history_max_entries'], 20)
		self.assertFalse(settings['refiner_enabled'])

	#============================================
	def test_marker_is_required(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "bad.yaml")
			with open(path, 'w', encoding='utf-8') as handle:
				handle.write(yaml.safe_dump({'settings': {}}))
			with self.assertRaises(RuntimeError):
				config.load_config(path)

#============================================

def test_overrides_are_coerced() -> None:
	raw = {
		'silence_cutter': 1,
		'settings': {
			'mode': "Energy",
			'preset': "gentle",
			'naturalness': "80",
			'analysis': {'sample_rate': "22050"},
			'export': {'mlt': "yes"},
			'refiner': {'enabled': 1, 'timeout': 5},
		},
	}
	settings = config.build_settings(raw, "test.yaml")
	assert settings['mode'] == 'energy'
	assert settings['preset'] == 'gentle'
	assert settings['naturalness'] == 80.0
	assert settings['sample_rate'] == 22050
	assert settings['export_mlt'] is True
	assert settings['refiner_enabled'] is True
	assert settings['refiner_timeout'] == 5.0
	assert settings['refiner_model'] == "llama-3.3-70b-versatile"

#============================================

@pytest.mark.parametrize("overrides", [
	{'mode': "fast"},
	{'preset': "extreme"},
	{'content_type': "vlog"},
	{'naturalness': 150},
	{'analysis': {'frame_ms': 0}},
	{'export': {'edl': "maybe"}},
	{'history': {'max_entries': 0}},
	{'refiner': "on"},
])
def test_bad_values_raise(overrides) -> None:
	with pytest.raises(RuntimeError) as excinfo:
		config.build_settings({'silence_cutter': 1, 'settings': overrides}, "test.yaml")
	assert "test.yaml" in str(excinfo.value)

#============================================

def test_coerce_helpers() -> None:
	assert config.coerce_bool("off", "c", "k") is False
	assert config.coerce_int(3.9, "c", "k") == 3
	assert config.coerce_float("0.25", "c", "k") == 0.25
	with pytest.raises(RuntimeError):
		config.coerce_float(True, "c", "k")
	with pytest.raises(RuntimeError):
		config.coerce_str(5, "c", "k")
