#!/usr/bin/env python3

import os
import sys
import unittest

# PIP3 modules
import numpy
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from silcutlib.core import detection
from silcutlib.core import envelope
from silcutlib.core import pipeline
from silcutlib.core.errors import InvalidInput

#============================================

def make_burst_audio(duration: float = 5.0, burst_start: float = 1.0,
	burst_end: float = 3.0, sample_rate: int = 16000):
	"""
	Low noise with one loud tone burst.
	"""
	rng = numpy.random.default_rng(7)
	samples = rng.uniform(-0.001, 0.001, int(duration * sample_rate))
	start = int(burst_start * sample_rate)
	end = int(burst_end * sample_rate)
	times = numpy.arange(end - start) / float(sample_rate)
	samples[start:end] += 0.5 * numpy.sin(2 * numpy.pi * 220.0 * times)
	return samples

#============================================

class RawDetectorTest(unittest.TestCase):
	#============================================
	def test_silent_audio_has_no_segments(self) -> None:
		"""Ten seconds of digital silence produce no speech."""
		samples = numpy.zeros(10 * 16000)
		frames = envelope.compute_rms_envelope(samples, 16000)
		stats = envelope.calculate_audio_stats(frames, 16000, 10.0)
		segments = detection.detect_raw_segments(frames, stats['noise_floor_rms'], 2.5)
		self.assertEqual(segments, [])

	#============================================
	def test_single_burst_is_one_segment(self) -> None:
		"""A 1.0s to 3.0s burst in a 5s clip gives one segment."""
		samples = make_burst_audio()
		frames = envelope.compute_rms_envelope(samples, 16000)
		stats = envelope.calculate_audio_stats(frames, 16000, 5.0)
		segments = detection.detect_raw_segments(frames, stats['noise_floor_rms'], 2.5)
		self.assertEqual(len(segments), 1)
		self.assertAlmostEqual(segments[0]['start'], 1.0, delta=0.02)
		self.assertAlmostEqual(segments[0]['end'], 3.0, delta=0.02)

	#============================================
	def test_threshold_is_strict(self) -> None:
		"""A frame exactly at the threshold is not speech."""
		frames = [{'start': 0.0, 'rms': 2.0}, {'start': 0.02, 'rms': 2.01}]
		mask = detection.detect_speech_mask(frames, 1.0, 2.0)
		self.assertEqual(mask, [False, True])

	#============================================
	def test_multiplier_below_one_is_invalid(self) -> None:
		with self.assertRaises(InvalidInput):
			detection.detect_speech_mask([{'start': 0.0, 'rms': 1.0}], 0.1, 0.5)

#============================================

def test_run_to_end_uses_nominal_frame() -> None:
	"""A speech run reaching the last frame ends one frame after it."""
	frames = [{'start': 0.0, 'rms': 1.0}, {'start': 0.02, 'rms': 0.0},
		{'start': 0.04, 'rms': 1.0}, {'start': 0.06, 'rms': 1.0}]
	segments = detection.frames_to_segments([True, False, True, True], frames, 20)
	assert len(segments) == 2
	assert segments[0]['start'] == 0.0
	assert segments[0]['end'] == 0.02
	assert segments[1]['start'] == 0.04
	assert segments[1]['end'] == pytest.approx(0.08)

#============================================

def test_initial_detection_smooths_and_ids() -> None:
	samples = make_burst_audio()
	result = pipeline.run_initial_detection(samples, 16000)
	assert len(result['initial_segments']) == 1
	segment = result['initial_segments'][0]
	assert segment['id'] == "seg-0"
	assert segment['enabled'] is True
	assert segment['start'] == pytest.approx(1.0, abs=0.02)
	assert segment['end'] == pytest.approx(3.0, abs=0.02)

#============================================

def test_initial_detection_clamps_parameters() -> None:
	"""An out-of-range multiplier is clamped before detection."""
	samples = make_burst_audio()
	params = {'energy_multiplier': 100, 'minimum_speech_ms': 200, 'merge_gap_ms': 200}
	result = pipeline.run_initial_detection(samples, 16000, params=params)
	assert result['params']['energy_multiplier'] == 6.0
	assert len(result['initial_segments']) == 1

#============================================

def test_zero_duration_is_invalid() -> None:
	with pytest.raises(InvalidInput):
		pipeline.run_initial_detection([0.0], 16000, total_duration=0.0)
