#!/usr/bin/env python3

"""
segments.py

Time-range helpers shared by every stage. Segments are dicts with
start/end/duration in seconds. Every function returns new dicts and leaves
its input alone.
"""

#============================================

def make_segment(start: float, end: float) -> dict:
	"""
	Build a segment dict.

	Args:
		start: Start time in seconds.
		end: End time in seconds.

	Returns:
		dict: Segment with start/end/duration.
	"""
	start = float(start)
	end = float(end)
	return {'start': start, 'end': end, 'duration': end - start}

#============================================

def copy_segment(segment: dict) -> dict:
	item = dict(segment)
	item['duration'] = item['end'] - item['start']
	return item

#============================================

def continued_label(label: str) -> str:
	"""Label for a segment that absorbed the speech after it."""
	return label.split("...")[0] + "..."

#============================================

def _merge_by_gap(segments: list, gap_seconds: float, inclusive: bool) -> list:
	if len(segments) == 0:
		return []
	merged = [copy_segment(segments[0])]
	for segment in segments[1:]:
		last = merged[-1]
		gap = segment['start'] - last['end']
		if gap < gap_seconds or (inclusive and gap <= gap_seconds):
			if segment['end'] > last['end']:
				last['end'] = segment['end']
				last['duration'] = last['end'] - last['start']
		else:
			merged.append(copy_segment(segment))
	return merged

#============================================

def merge_close_segments(segments: list, merge_gap_ms: float) -> list:
	"""
	Merge neighbours separated by a gap shorter than merge_gap_ms.

	Args:
		segments: Ordered segments.
		merge_gap_ms: Gap threshold in milliseconds, exclusive.

	Returns:
		list: Merged segments.
	"""
	return _merge_by_gap(segments, merge_gap_ms / 1000.0, inclusive=False)

#============================================

def keep_short_pauses(segments: list, keep_short_pauses_under_ms: float) -> list:
	"""
	Merge neighbours whose pause is at most keep_short_pauses_under_ms.

	Args:
		segments: Ordered segments.
		keep_short_pauses_under_ms: Pause threshold in milliseconds, inclusive.

	Returns:
		list: Merged segments.
	"""
	return _merge_by_gap(segments, keep_short_pauses_under_ms / 1000.0, inclusive=True)

#============================================

def filter_short_speech(segments: list, minimum_speech_ms: float) -> list:
	"""
	Drop segments shorter than minimum_speech_ms.

	Args:
		segments: Segments.
		minimum_speech_ms: Minimum kept duration in milliseconds.

	Returns:
		list: Remaining segments.
	"""
	min_duration = minimum_speech_ms / 1000.0
	kept = []
	for segment in segments:
		if (segment['end'] - segment['start']) >= min_duration:
			kept.append(copy_segment(segment))
	return kept

#============================================

def smooth_segments(segments: list, params: dict) -> list:
	"""
	VAD smoothing for raw detector output: merge close, then drop short.

	Filtering runs after merging so a merge can rescue a segment that was
	too short on its own.
	"""
	merged = merge_close_segments(segments, params['merge_gap_ms'])
	return filter_short_speech(merged, params['minimum_speech_ms'])

#============================================

def merge_overlapping(segments: list) -> list:
	"""
	Sort by start and merge any segment that starts at or before the
	previous end.

	Args:
		segments: Segments in any order.

	Returns:
		list: Ordered, non-overlapping segments.
	"""
	if len(segments) == 0:
		return []
	ordered = sorted(segments, key=lambda item: item['start'])
	return _merge_by_gap(ordered, 0.0, inclusive=True)

#============================================

def to_speech_segments(segments: list, id_prefix: str = 'seg') -> list:
	"""
	Convert plain segments to display segments with ids and enabled flags.

	Args:
		segments: Segments.
		id_prefix: Prefix for generated ids.

	Returns:
		list: Speech segments.
	"""
	speech = []
	for index, segment in enumerate(segments):
		item = {
			'id': f"{id_prefix}-{index}",
			'start': segment['start'],
			'end': segment['end'],
			'duration': segment['end'] - segment['start'],
			'enabled': True,
		}
		if segment.get('label') is not None:
			item['label'] = segment['label']
		speech.append(item)
	return speech

#============================================

def enabled_segments(segments: list) -> list:
	return [copy_segment(segment) for segment in segments if segment.get('enabled', True)]

#============================================

def set_segment_enabled(segments: list, segment_id: str, enabled: bool) -> list:
	"""
	Toggle one segment by id without touching any boundaries.

	Args:
		segments: Speech segments.
		segment_id: Id of the segment to change.
		enabled: New flag value.

	Returns:
		list: New list with the flag updated.
	"""
	found = False
	updated = []
	for segment in segments:
		item = dict(segment)
		if item.get('id') == segment_id:
			item['enabled'] = bool(enabled)
			found = True
		updated.append(item)
	if not found:
		raise RuntimeError(f"segment not found: {segment_id}")
	return updated

#============================================

def is_ordered_non_overlapping(segments: list) -> bool:
	for index in range(len(segments) - 1):
		if segments[index]['end'] > segments[index + 1]['start']:
			return False
	return True

#============================================

def total_duration(segments: list) -> float:
	return sum(segment['end'] - segment['start'] for segment in segments)
