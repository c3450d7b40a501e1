#!/usr/bin/env python3

"""
cutlist.py

JSON cut list of the kept segments, plus reading it back for rendering.
"""

# Standard Library
import datetime
import json
import os

# local repo modules
from silcutlib.core import refine
from silcutlib.core import segments as seglib

#============================================

def build_cut_list(segments: list, source_file_name: str, original_duration: float,
	fps: float = 30) -> dict:
	"""
	Build the cut list dict.

	Args:
		segments: Speech segments; only enabled ones are exported.
		source_file_name: Source media name.
		original_duration: Source duration in seconds.
		fps: Frame rate assumed by downstream editors.

	Returns:
		dict: Cut list with camelCase keys.
	"""
	kept = seglib.enabled_segments(segments)
	final_duration = refine.kept_duration(kept)
	exported_at = datetime.datetime.now(datetime.timezone.utc)
	return {
		'sourceFileName': source_file_name,
		'fpsAssumed': fps,
		'totalDurationOriginal': original_duration,
		'totalDurationAfterCuts': final_duration,
		'totalTimeRemoved': original_duration - final_duration,
		'numberOfCuts': refine.number_of_cuts(kept),
		'keptSegments': [
			{'startSeconds': segment['start'], 'endSeconds': segment['end']}
			for segment in kept
		],
		'exportedAt': exported_at.isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
	}

#============================================

def default_cut_list_path(input_file: str) -> str:
	base, _ = os.path.splitext(input_file)
	return f"{base}_cuts.json"

#============================================

def write_cut_list(output_file: str, cut_list: dict) -> str:
	with open(output_file, 'w', encoding='utf-8') as handle:
		json.dump(cut_list, handle, indent=2)
		handle.write("\n")
	return output_file

#============================================

def load_cut_list(input_file: str) -> dict:
	"""
	Read a cut list and convert its kept segments to speech segments.

	Args:
		input_file: Cut list JSON path.

	Returns:
		dict: The cut list with an added 'segments' list.
	"""
	with open(input_file, 'r', encoding='utf-8') as handle:
		data = json.load(handle)
	if not isinstance(data, dict) or 'keptSegments' not in data:
		raise RuntimeError(f"not a cut list: {input_file}")
	plain = []
	for item in data['keptSegments']:
		start = float(item['startSeconds'])
		end = float(item['endSeconds'])
		if end <= start:
			raise RuntimeError(f"cut list segment has end <= start: {item}")
		plain.append(seglib.make_segment(start, end))
	data['segments'] = seglib.to_speech_segments(plain, id_prefix='cut')
	return data
