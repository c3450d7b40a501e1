#!/usr/bin/env python3

"""
detection.py

Threshold the RMS envelope into speech frames and collapse runs of
speech frames into raw segments.
"""

# local repo modules
from silcutlib.core.envelope import FRAME_MS
from silcutlib.core.errors import InvalidInput
from silcutlib.core.segments import make_segment

#============================================

def detect_speech_mask(frames: list, noise_floor: float, energy_multiplier: float) -> list:
	"""
	Mark frames louder than the scaled noise floor as speech.

	Args:
		frames: RMS frames.
		noise_floor: Noise floor RMS.
		energy_multiplier: Threshold multiplier, at least 1.

	Returns:
		list: One bool per frame.
	"""
	if energy_multiplier < 1:
		raise InvalidInput("energy multiplier must be at least 1")
	threshold = noise_floor * energy_multiplier
	return [frame['rms'] > threshold for frame in frames]

#============================================

def frames_to_segments(mask: list, frames: list, frame_ms: float = FRAME_MS) -> list:
	"""
	Collapse contiguous speech frames into segments.

	A run ends at the start of the first silent frame after it. A run that
	reaches the last frame ends one nominal frame after that frame's start.

	Args:
		mask: Speech flag per frame.
		frames: RMS frames.
		frame_ms: Nominal frame length in milliseconds.

	Returns:
		list: Raw segments.
	"""
	if len(mask) != len(frames):
		raise InvalidInput("speech mask and frames differ in length")
	segments = []
	run_start = None
	for is_speech, frame in zip(mask, frames):
		if is_speech and run_start is None:
			run_start = frame['start']
		elif not is_speech and run_start is not None:
			segments.append(make_segment(run_start, frame['start']))
			run_start = None
	if run_start is not None:
		last_frame = frames[-1]
		segments.append(make_segment(run_start, last_frame['start'] + frame_ms / 1000.0))
	return segments

#============================================

def detect_raw_segments(frames: list, noise_floor: float, energy_multiplier: float,
	frame_ms: float = FRAME_MS) -> list:
	mask = detect_speech_mask(frames, noise_floor, energy_multiplier)
	return frames_to_segments(mask, frames, frame_ms)
