#!/usr/bin/env python3

"""
refine.py

Stage B of silence removal: turn detected speech into the final list of
kept segments using tuned parameters, and compute the cut statistics.
"""

# Standard Library
import math

# local repo modules
from silcutlib.core import segments as seglib

#============================================

def add_padding(segments: list, pre_pad_ms: float, post_pad_ms: float,
	total_duration: float) -> list:
	"""
	Widen each segment, clipped to [0, total_duration].

	Args:
		segments: Segments.
		pre_pad_ms: Padding before speech, milliseconds.
		post_pad_ms: Padding after speech, milliseconds.
		total_duration: Media duration in seconds.

	Returns:
		list: Padded segments. Segments that collapse after clipping are dropped.
	"""
	pre_pad = pre_pad_ms / 1000.0
	post_pad = post_pad_ms / 1000.0
	padded = []
	for segment in segments:
		start = max(0.0, segment['start'] - pre_pad)
		end = min(total_duration, segment['end'] + post_pad)
		if end <= start:
			continue
		padded.append(seglib.make_segment(start, end))
	return padded

#============================================

def max_cuts_for(max_jump_cut_rate_per_minute: float, total_duration: float) -> int:
	return int(math.ceil(max_jump_cut_rate_per_minute * total_duration / 60.0))

#============================================

def limit_cut_rate(segments: list, max_jump_cut_rate_per_minute: float,
	total_duration: float) -> list:
	"""
	Merge across the smallest gaps until the cut count fits the rate cap.

	Ties go to the first pair in scan order.

	Args:
		segments: Ordered, non-overlapping segments.
		max_jump_cut_rate_per_minute: Maximum cuts per minute.
		total_duration: Media duration in seconds.

	Returns:
		list: Segments with at most max_cuts + 1 entries.
	"""
	result = [seglib.copy_segment(segment) for segment in segments]
	if len(result) <= 1:
		return result
	max_cuts = max_cuts_for(max_jump_cut_rate_per_minute, total_duration)
	while len(result) - 1 > max_cuts and len(result) > 1:
		smallest_index = 0
		smallest_gap = math.inf
		for index in range(len(result) - 1):
			gap = result[index + 1]['start'] - result[index]['end']
			if gap < smallest_gap:
				smallest_gap = gap
				smallest_index = index
		left = result[smallest_index]
		right = result[smallest_index + 1]
		merged = seglib.make_segment(left['start'], max(left['end'], right['end']))
		if left.get('label'):
			merged['label'] = seglib.continued_label(left['label'])
		result[smallest_index] = merged
		del result[smallest_index + 1]
	return result

#============================================

def enforce_cut_rate(segments: list, params: dict, total_duration: float) -> list:
	limited = limit_cut_rate(segments, params['max_jump_cut_rate_per_minute'],
		total_duration)
	return seglib.merge_overlapping(limited)

#============================================

def refine_segments(initial_segments: list, params: dict, total_duration: float) -> list:
	"""
	Apply the natural-cut rules to enabled segments.

	Order is fixed: keep short pauses, pad, merge overlaps, cap the cut
	rate, then merge overlaps once more.

	Args:
		initial_segments: Speech segments; disabled ones are ignored.
		params: Validated detection parameters.
		total_duration: Media duration in seconds.

	Returns:
		list: Refined speech segments with ids refined-N.
	"""
	working = seglib.enabled_segments(initial_segments)
	working.sort(key=lambda item: item['start'])
	working = seglib.keep_short_pauses(working, params['keep_short_pauses_under_ms'])
	working = add_padding(working, params['pre_pad_ms'], params['post_pad_ms'],
		total_duration)
	working = seglib.merge_overlapping(working)
	working = enforce_cut_rate(working, params, total_duration)
	return seglib.to_speech_segments(working, id_prefix='refined')

#============================================

def kept_duration(segments: list) -> float:
	return seglib.total_duration(seglib.enabled_segments(segments))

#============================================

def number_of_cuts(segments: list) -> int:
	return max(0, len(seglib.enabled_segments(segments)) - 1)

#============================================

def time_removed(segments: list, total_duration: float) -> float:
	return total_duration - kept_duration(segments)

#============================================

def summarize_segments(segments: list, total_duration: float) -> dict:
	"""
	Cut statistics over the enabled segments.

	Args:
		segments: Speech segments.
		total_duration: Media duration in seconds.

	Returns:
		dict: kept_duration, number_of_cuts, time_removed, segment_count.
	"""
	kept = kept_duration(segments)
	return {
		'total_duration': total_duration,
		'kept_duration': kept,
		'time_removed': total_duration - kept,
		'number_of_cuts': number_of_cuts(segments),
		'segment_count': len(seglib.enabled_segments(segments)),
	}
