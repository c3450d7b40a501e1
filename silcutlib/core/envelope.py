#!/usr/bin/env python3

"""
envelope.py

Per-frame RMS energy envelope and the summary statistics derived from it.
"""

# Standard Library
import math

# PIP3 modules
import numpy

# local repo modules
from silcutlib.core.errors import InvalidInput

#============================================

FRAME_MS = 20
ANALYSIS_SAMPLE_RATE = 16000
NOISE_FLOOR_FRACTION = 0.1

#============================================

def frame_size_samples(sample_rate: int, frame_ms: float = FRAME_MS) -> int:
	"""
	Number of samples in one analysis frame.

	Args:
		sample_rate: Samples per second.
		frame_ms: Frame length in milliseconds.

	Returns:
		int: Frame size, at least one sample.
	"""
	return max(1, int(frame_ms * sample_rate / 1000.0))

#============================================

def compute_rms_envelope(samples, sample_rate: int, frame_ms: float = FRAME_MS) -> list:
	"""
	Compute the RMS envelope of mono samples.

	Frames tile the input with no gaps or overlap. The last frame holds
	whatever samples remain and may be shorter than the others.

	Args:
		samples: Mono samples in [-1, 1].
		sample_rate: Samples per second.
		frame_ms: Frame length in milliseconds.

	Returns:
		list: Frames as {'start', 'rms'} dicts in time order.
	"""
	if sample_rate is None or sample_rate <= 0:
		raise InvalidInput("sample rate must be positive")
	if frame_ms is None or frame_ms <= 0:
		raise InvalidInput("frame size must be positive")
	data = numpy.asarray(samples, dtype=numpy.float64).reshape(-1)
	if data.size == 0:
		raise InvalidInput("audio contains no samples")
	frame_size = frame_size_samples(sample_rate, frame_ms)
	full_frames = data.size // frame_size
	rms_values = []
	if full_frames > 0:
		body = data[:full_frames * frame_size].reshape(full_frames, frame_size)
		rms_values.append(numpy.sqrt(numpy.mean(body ** 2, axis=1)))
	tail = data[full_frames * frame_size:]
	if tail.size > 0:
		rms_values.append(numpy.array([math.sqrt(float(numpy.mean(tail ** 2)))]))
	rms = numpy.concatenate(rms_values)
	starts = numpy.arange(rms.size) * frame_size / float(sample_rate)
	frames = []
	for start, value in zip(starts, rms):
		frames.append({'start': float(start), 'rms': float(value)})
	return frames

#============================================

def calculate_audio_stats(frames: list, sample_rate: int, total_duration: float,
	frame_ms: float = FRAME_MS) -> dict:
	"""
	Summarize an RMS envelope.

	The noise floor is the median of the quietest tenth of frames, which
	tracks room tone without being dragged to zero by a few dead frames.

	Args:
		frames: Frames from compute_rms_envelope().
		sample_rate: Samples per second.
		total_duration: Audio duration in seconds.
		frame_ms: Frame length in milliseconds.

	Returns:
		dict: Audio stats.
	"""
	if len(frames) == 0:
		raise InvalidInput("no frames to summarize")
	sorted_rms = numpy.sort(numpy.array([frame['rms'] for frame in frames],
		dtype=numpy.float64))
	count = sorted_rms.size
	lowest_count = max(1, int(math.floor(count * NOISE_FLOOR_FRACTION)))
	lowest = sorted_rms[:lowest_count]
	noise_floor = float(lowest[lowest_count // 2])
	return {
		'noise_floor_rms': noise_floor,
		'rms_p10': percentile_value(sorted_rms, 10),
		'rms_p50': percentile_value(sorted_rms, 50),
		'rms_p90': percentile_value(sorted_rms, 90),
		'total_duration': float(total_duration),
		'frame_ms': frame_ms,
		'sample_rate': sample_rate,
	}

#============================================

def percentile_value(sorted_values, percent: float) -> float:
	"""
	Simple index percentile over already sorted values.

	Args:
		sorted_values: Ascending values.
		percent: Percentile 0..100.

	Returns:
		float: Value at floor(percent/100 * n), clamped to the array.
	"""
	count = len(sorted_values)
	if count == 0:
		raise InvalidInput("no values for percentile")
	index = int(math.floor((percent / 100.0) * count))
	index = min(max(index, 0), count - 1)
	return float(sorted_values[index])
