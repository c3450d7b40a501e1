#!/usr/bin/env python3

"""
config.py

Silence cutter YAML config: defaults, loading, and normalization into a
flat settings dict.
"""

# Standard Library
import os

# PIP3 modules
import yaml

# local repo modules
from silcutlib.core import params as paramlib

#============================================

MODES = ('transcript', 'energy')

#============================================

def coerce_bool(value, config_path: str, key_path: str) -> bool:
	"""
	Coerce a value to bool.

	Args:
		value: Raw value.
		config_path: Config file path.
		key_path: Key path string.

	Returns:
		bool: Coerced boolean.
	"""
	if isinstance(value, bool):
		return value
	if isinstance(value, int):
		return bool(value)
	if isinstance(value, str):
		normalized = value.strip().lower()
		if normalized in ("true", "yes", "1", "on"):
			return True
		if normalized in ("false", "no", "0", "off"):
			return False
	raise RuntimeError(f"config {config_path}: {key_path} must be a boolean")

#============================================

def coerce_float(value, config_path: str, key_path: str) -> float:
	if isinstance(value, bool):
		raise RuntimeError(f"config {config_path}: {key_path} must be a number")
	if isinstance(value, (int, float)):
		return float(value)
	if isinstance(value, str):
		try:
			return float(value)
		except ValueError:
			pass
	raise RuntimeError(f"config {config_path}: {key_path} must be a number")

#============================================

def coerce_int(value, config_path: str, key_path: str) -> int:
	if isinstance(value, bool):
		raise RuntimeError(f"config {config_path}: {key_path} must be an integer")
	if isinstance(value, int):
		return value
	if isinstance(value, float):
		return int(value)
	if isinstance(value, str):
		try:
			return int(float(value))
		except ValueError:
			pass
	raise RuntimeError(f"config {config_path}: {key_path} must be an integer")

#============================================

def coerce_str(value, config_path: str, key_path: str) -> str:
	if isinstance(value, str):
		return value
	raise RuntimeError(f"config {config_path}: {key_path} must be a string")

#============================================

def coerce_choice(value, choices: tuple, config_path: str, key_path: str) -> str:
	text = coerce_str(value, config_path, key_path).strip().lower()
	if text not in choices:
		allowed = ", ".join(choices)
		raise RuntimeError(f"config {config_path}: {key_path} must be one of {allowed}")
	return text

#============================================

def default_config() -> dict:
	"""
	Build the default config dictionary.

	Returns:
		dict: Default configuration values.
	"""
	return {
		'silence_cutter': 1,
		'settings': {
			'mode': 'transcript',
			'preset': paramlib.DEFAULT_PRESET,
			'content_type': paramlib.DEFAULT_CONTENT_TYPE,
			'naturalness': 50,
			'min_silence_to_remove_ms': 500,
			'analysis': {
				'frame_ms': 20,
				'sample_rate': 16000,
			},
			'export': {
				'fps': 30,
				'edl': True,
				'cut_list': True,
				'mlt': False,
			},
			'refiner': {
				'enabled': False,
				'url': "https://api.groq.com/openai/v1",
				'model': "llama-3.3-70b-versatile",
				'api_key_env': "GROQ_API_KEY",
				'timeout': 60.0,
				'temperature': 0.3,
			},
			'transcriber': {
				'url': "https://api.groq.com/openai/v1",
				'model': "whisper-large-v3-turbo",
				'api_key_env': "GROQ_API_KEY",
				'timeout': 300.0,
			},
			'history': {
				'enabled': True,
				'file': "~/.silcut_history.yaml",
				'max_entries': 20,
			},
		},
	}

#============================================

def default_config_path(input_file: str) -> str:
	return f"{input_file}.silcut.config.yaml"

#============================================

def build_config_text(config: dict) -> str:
	return yaml.safe_dump(config, sort_keys=False, default_flow_style=False)

#============================================

def write_config_file(config_path: str, config: dict) -> None:
	"""
	Write a config file to disk.

	Args:
		config_path: Output file path.
		config: Config dictionary.
	"""
	text = build_config_text(config)
	os.makedirs(os.path.dirname(config_path) or '.', exist_ok=True)
	with open(config_path, 'w', encoding='utf-8') as handle:
		handle.write(text)
	return

#============================================

def load_config(config_path: str) -> dict:
	"""
	Load a config file from disk.

	Args:
		config_path: Config file path.

	Returns:
		dict: Parsed config dictionary.
	"""
	with open(config_path, 'r', encoding='utf-8') as handle:
		data = yaml.safe_load(handle)
	if not isinstance(data, dict):
		raise RuntimeError("config file must be a mapping")
	if data.get('silence_cutter') != 1:
		raise RuntimeError("config file must set silence_cutter: 1")
	return data

#============================================

def _section(overrides: dict, name: str, config_path: str) -> dict:
	section = overrides.get(name, {})
	if section is None:
		return {}
	if not isinstance(section, dict):
		raise RuntimeError(f"config {config_path}: settings.{name} must be a mapping")
	return section

#============================================

def build_settings(config: dict, config_path: str) -> dict:
	"""
	Normalize settings with defaults.

	Args:
		config: Raw config dictionary.
		config_path: Config file path, used in error messages.

	Returns:
		dict: Flat settings dictionary.
	"""
	settings = default_config()['settings']
	overrides = {}
	if isinstance(config, dict):
		overrides = config.get('settings', {}) or {}
	if not isinstance(overrides, dict):
		raise RuntimeError(f"config {config_path}: settings must be a mapping")
	analysis = _section(overrides, 'analysis', config_path)
	export = _section(overrides, 'export', config_path)
	refiner = _section(overrides, 'refiner', config_path)
	transcriber = _section(overrides, 'transcriber', config_path)
	history = _section(overrides, 'history', config_path)
	mode = coerce_choice(overrides.get('mode', settings['mode']), MODES,
		config_path, "settings.mode")
	preset = coerce_choice(overrides.get('preset', settings['preset']),
		paramlib.PRESETS, config_path, "settings.preset")
	content_type = coerce_choice(overrides.get('content_type',
		settings['content_type']), paramlib.CONTENT_TYPES, config_path,
		"settings.content_type")
	naturalness = coerce_float(overrides.get('naturalness',
		settings['naturalness']), config_path, "settings.naturalness")
	if naturalness < 0 or naturalness > 100:
		raise RuntimeError(f"config {config_path}: settings.naturalness must be 0..100")
	min_silence = coerce_float(overrides.get('min_silence_to_remove_ms',
		settings['min_silence_to_remove_ms']), config_path,
		"settings.min_silence_to_remove_ms")
	frame_ms = coerce_float(analysis.get('frame_ms',
		settings['analysis']['frame_ms']), config_path,
		"settings.analysis.frame_ms")
	sample_rate = coerce_int(analysis.get('sample_rate',
		settings['analysis']['sample_rate']), config_path,
		"settings.analysis.sample_rate")
	if frame_ms <= 0:
		raise RuntimeError(f"config {config_path}: settings.analysis.frame_ms must be positive")
	if sample_rate <= 0:
		raise RuntimeError(f"config {config_path}: settings.analysis.sample_rate must be positive")
	fps = coerce_float(export.get('fps', settings['export']['fps']), config_path,
		"settings.export.fps")
	if fps <= 0:
		raise RuntimeError(f"config {config_path}: settings.export.fps must be positive")
	history_max = coerce_int(history.get('max_entries',
		settings['history']['max_entries']), config_path,
		"settings.history.max_entries")
	if history_max <= 0:
		raise RuntimeError(f"config {config_path}: settings.history.max_entries must be positive")
	return {
		'mode': mode,
		'preset': preset,
		'content_type': content_type,
		'naturalness': naturalness,
		'min_silence_to_remove_ms': min_silence,
		'frame_ms': frame_ms,
		'sample_rate': sample_rate,
		'fps': fps,
		'export_edl': coerce_bool(export.get('edl', settings['export']['edl']),
			config_path, "settings.export.edl"),
		'export_cut_list': coerce_bool(export.get('cut_list',
			settings['export']['cut_list']), config_path, "settings.export.cut_list"),
		'export_mlt': coerce_bool(export.get('mlt', settings['export']['mlt']),
			config_path, "settings.export.mlt"),
		'refiner_enabled': coerce_bool(refiner.get('enabled',
			settings['refiner']['enabled']), config_path, "settings.refiner.enabled"),
		'refiner_url': coerce_str(refiner.get('url', settings['refiner']['url']),
			config_path, "settings.refiner.url"),
		'refiner_model': coerce_str(refiner.get('model',
			settings['refiner']['model']), config_path, "settings.refiner.model"),
		'refiner_api_key_env': coerce_str(refiner.get('api_key_env',
			settings['refiner']['api_key_env']), config_path,
			"settings.refiner.api_key_env"),
		'refiner_timeout': coerce_float(refiner.get('timeout',
			settings['refiner']['timeout']), config_path, "settings.refiner.timeout"),
		'refiner_temperature': coerce_float(refiner.get('temperature',
			settings['refiner']['temperature']), config_path,
			"settings.refiner.temperature"),
		'transcriber_url': coerce_str(transcriber.get('url',
			settings['transcriber']['url']), config_path, "settings.transcriber.url"),
		'transcriber_model': coerce_str(transcriber.get('model',
			settings['transcriber']['model']), config_path,
			"settings.transcriber.model"),
		'transcriber_api_key_env': coerce_str(transcriber.get('api_key_env',
			settings['transcriber']['api_key_env']), config_path,
			"settings.transcriber.api_key_env"),
		'transcriber_timeout': coerce_float(transcriber.get('timeout',
			settings['transcriber']['timeout']), config_path,
			"settings.transcriber.timeout"),
		'history_enabled': coerce_bool(history.get('enabled',
			settings['history']['enabled']), config_path, "settings.history.enabled"),
		'history_file': os.path.expanduser(coerce_str(history.get('file',
			settings['history']['file']), config_path, "settings.history.file")),
		'history_max_entries': history_max,
	}
