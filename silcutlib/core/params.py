#!/usr/bin/env python3

"""
params.py

Detection parameter ranges, preset fallback table, validation of refiner
output, and resolution of the parameter set a run will use.
"""

# Standard Library
import math

# local repo modules
from silcutlib.core.errors import ExternalServiceFailure
from silcutlib.core.errors import InvalidInput
from silcutlib.core.errors import ValidationFailure

#============================================

PARAM_RANGES = {
	'energy_multiplier': (1.5, 6.0),
	'minimum_silence_ms': (250, 1500),
	'minimum_speech_ms': (100, 500),
	'merge_gap_ms': (100, 400),
	'keep_short_pauses_under_ms': (150, 600),
	'pre_pad_ms': (80, 400),
	'post_pad_ms': (80, 400),
	'max_jump_cut_rate_per_minute': (10, 40),
}

PARAM_KEYS = list(PARAM_RANGES.keys())

# wire names used by the refinement service and exported JSON
CAMEL_KEYS = {
	'energy_multiplier': 'energyMultiplier',
	'minimum_silence_ms': 'minimumSilenceMs',
	'minimum_speech_ms': 'minimumSpeechMs',
	'merge_gap_ms': 'mergeGapMs',
	'keep_short_pauses_under_ms': 'keepShortPausesUnderMs',
	'pre_pad_ms': 'prePadMs',
	'post_pad_ms': 'postPadMs',
	'max_jump_cut_rate_per_minute': 'maxJumpCutRatePerMinute',
}

PRESETS = ('gentle', 'normal', 'aggressive')
DEFAULT_PRESET = 'normal'

CONTENT_TYPES = ('talking_head', 'tutorial', 'podcast', 'screen_recording')
DEFAULT_CONTENT_TYPE = 'talking_head'

PRESET_PARAMS = {
	'gentle': {
		'energy_multiplier': 2.0,
		'minimum_silence_ms': 800,
		'minimum_speech_ms': 200,
		'merge_gap_ms': 300,
		'keep_short_pauses_under_ms': 500,
		'pre_pad_ms': 200,
		'post_pad_ms': 250,
		'max_jump_cut_rate_per_minute': 15,
	},
	'normal': {
		'energy_multiplier': 2.5,
		'minimum_silence_ms': 500,
		'minimum_speech_ms': 200,
		'merge_gap_ms': 200,
		'keep_short_pauses_under_ms': 300,
		'pre_pad_ms': 150,
		'post_pad_ms': 180,
		'max_jump_cut_rate_per_minute': 25,
	},
	'aggressive': {
		'energy_multiplier': 3.5,
		'minimum_silence_ms': 300,
		'minimum_speech_ms': 150,
		'merge_gap_ms': 150,
		'keep_short_pauses_under_ms': 200,
		'pre_pad_ms': 100,
		'post_pad_ms': 120,
		'max_jump_cut_rate_per_minute': 35,
	},
}

PRESET_NOTES = {
	'gentle': "Gentle preset: conservative cuts, preserves natural pacing",
	'normal': "Default parameters (refiner unavailable)",
	'aggressive': "Aggressive preset: tight cuts, fast pacing",
}

#============================================

def params_for_preset(preset: str = DEFAULT_PRESET) -> dict:
	"""
	Fallback parameters for a preset.

	Args:
		preset: gentle, normal, or aggressive.

	Returns:
		dict: A fresh copy of the preset row.
	"""
	if preset is None:
		preset = DEFAULT_PRESET
	if preset not in PRESET_PARAMS:
		raise InvalidInput(f"unknown preset: {preset}")
	return dict(PRESET_PARAMS[preset])

#============================================

def _as_number(key: str, value) -> float:
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		raise ValidationFailure(f"{key} must be a number", field=key, value=value)
	number = float(value)
	if math.isnan(number) or math.isinf(number):
		raise ValidationFailure(f"{key} must be finite", field=key, value=value)
	return number

#============================================

def validate_params(raw: dict) -> dict:
	"""
	Check that every parameter is present, numeric, and within range.

	Args:
		raw: Parameter dict, snake_case keys.

	Returns:
		dict: Clean parameter dict with only the known keys.
	"""
	if not isinstance(raw, dict):
		raise ValidationFailure("parameters must be a mapping")
	clean = {}
	for key in PARAM_KEYS:
		if key not in raw:
			raise ValidationFailure(f"missing parameter: {key}", field=key)
		number = _as_number(key, raw[key])
		low, high = PARAM_RANGES[key]
		if number < low or number > high:
			raise ValidationFailure(
				f"{key}={number} outside range [{low}, {high}]",
				field=key, value=number)
		clean[key] = number
	return clean

#============================================

def clamp_params(raw: dict, base: dict = None) -> dict:
	"""
	Force every parameter into its declared range.

	Missing or non-numeric values are taken from base, which defaults to
	the normal preset.

	Args:
		raw: Parameter dict, possibly out of range.
		base: Fallback values.

	Returns:
		dict: Parameter dict inside all ranges.
	"""
	if base is None:
		base = params_for_preset(DEFAULT_PRESET)
	clamped = {}
	for key in PARAM_KEYS:
		value = raw.get(key, base[key]) if isinstance(raw, dict) else base[key]
		try:
			number = _as_number(key, value)
		except ValidationFailure:
			number = float(base[key])
		low, high = PARAM_RANGES[key]
		clamped[key] = min(max(number, low), high)
	return clamped

#============================================

def apply_user_settings(params: dict, naturalness: float = 50,
	min_silence_to_remove_ms: float = None) -> dict:
	"""
	Adjust preset parameters from the naturalness slider.

	Naturalness 0..100 maps to a 0..2 multiplier that widens pauses and
	padding. The result is clamped because the mapping can overshoot the
	merge gap range.

	Args:
		params: Base parameters.
		naturalness: Slider value 0..100.
		min_silence_to_remove_ms: Minimum silence to cut, in milliseconds.

	Returns:
		dict: Adjusted, clamped parameters.
	"""
	naturalness = min(max(float(naturalness), 0.0), 100.0)
	factor = naturalness / 50.0
	adjusted = dict(params)
	if min_silence_to_remove_ms is not None:
		adjusted['minimum_silence_ms'] = min_silence_to_remove_ms
	adjusted['keep_short_pauses_under_ms'] = round(200 + factor * 200)
	adjusted['pre_pad_ms'] = round(100 + factor * 100)
	adjusted['post_pad_ms'] = round(120 + factor * 130)
	adjusted['merge_gap_ms'] = round(150 + factor * 150)
	return clamp_params(adjusted, base=params)

#============================================

def to_camel_params(params: dict) -> dict:
	return {CAMEL_KEYS[key]: params[key] for key in PARAM_KEYS if key in params}

#============================================

def from_camel_params(raw: dict) -> dict:
	"""
	Map camelCase keys from the wire format to snake_case.

	Keys already in snake_case pass through unchanged.
	"""
	converted = {}
	for key in PARAM_KEYS:
		camel = CAMEL_KEYS[key]
		if camel in raw:
			converted[key] = raw[camel]
		elif key in raw:
			converted[key] = raw[key]
	return converted

#============================================

def build_refine_request(preset: str, content_type: str, stats: dict,
	initial_segments: list) -> dict:
	"""
	Build the payload a parameter refiner receives.

	Args:
		preset: User preset.
		content_type: Content type.
		stats: Audio stats.
		initial_segments: Segments from initial detection.

	Returns:
		dict: Refinement request.
	"""
	return {
		'preset': preset,
		'content_type': content_type,
		'stats': {
			'noise_floor_rms': stats['noise_floor_rms'],
			'rms_p10': stats['rms_p10'],
			'rms_p50': stats['rms_p50'],
			'rms_p90': stats['rms_p90'],
		},
		'initial_segments': [
			{'start': segment['start'], 'end': segment['end']}
			for segment in initial_segments
		],
	}

#============================================

def resolve_params(refiner, preset: str, content_type: str, stats: dict,
	initial_segments: list) -> tuple:
	"""
	Ask the refiner for tuned parameters, falling back to the preset table.

	The refiner is any object with refine(request) -> {'params', 'notes'}.
	Its output is validated, never clamped: anything outside the ranges
	means the preset row is used instead.

	Args:
		refiner: Refiner object or None.
		preset: User preset.
		content_type: Content type.
		stats: Audio stats.
		initial_segments: Segments from initial detection.

	Returns:
		tuple: (params, notes, source) where source is 'refiner' or 'fallback'.
	"""
	fallback = params_for_preset(preset)
	fallback_notes = PRESET_NOTES.get(preset or DEFAULT_PRESET, "")
	if refiner is None:
		return (fallback, fallback_notes, 'fallback')
	request = build_refine_request(preset, content_type, stats, initial_segments)
	try:
		response = refiner.refine(request)
		if not isinstance(response, dict):
			raise ValidationFailure("refiner response must be a mapping")
		raw = response.get('params')
		if not isinstance(raw, dict):
			raise ValidationFailure("refiner params must be a mapping")
		params = validate_params(from_camel_params(raw))
	except ValidationFailure as exc:
		notes = f"{fallback_notes} (refiner response was invalid: {exc})"
		return (fallback, notes, 'fallback')
	except ExternalServiceFailure as exc:
		notes = f"{fallback_notes} (refiner unavailable: {exc})"
		return (fallback, notes, 'fallback')
	notes = response.get('notes') or ""
	return (params, str(notes), 'refiner')
