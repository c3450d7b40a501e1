#!/usr/bin/env python3

"""
edl.py

CMX 3600 edit decision list for the kept segments.
"""

# Standard Library
import math
import os

# local repo modules
from silcutlib.core import segments as seglib

#============================================

def seconds_to_timecode(total_seconds: float, fps: float = 30) -> str:
	"""
	Convert seconds to HH:MM:SS:FF with floor arithmetic.

	Args:
		total_seconds: Time in seconds.
		fps: Frames per second.

	Returns:
		str: Timecode.
	"""
	hours = int(math.floor(total_seconds / 3600))
	minutes = int(math.floor((total_seconds % 3600) / 60))
	seconds = int(math.floor(total_seconds % 60))
	frames = int(math.floor((total_seconds % 1) * fps))
	return f"{hours:02d}:{minutes:02d}:{seconds:02d}:{frames:02d}"

#============================================

def build_edl(segments: list, fps: float = 30,
	title: str = "Silence Cutter Export") -> str:
	"""
	Build EDL text with one video and one audio event per enabled segment.

	Source timecodes come from the segment times. Record timecodes run
	back to back on the output timeline.

	Args:
		segments: Speech segments.
		fps: Frames per second for timecodes.
		title: EDL title line.

	Returns:
		str: EDL text.
	"""
	kept = seglib.enabled_segments(segments)
	lines = []
	lines.append(f"TITLE: {title}")
	lines.append("FCM: NON-DROP FRAME")
	lines.append("")
	record_in = 0.0
	for index, segment in enumerate(kept):
		event_num = f"{index + 1:03d}"
		source_in = seconds_to_timecode(segment['start'], fps)
		source_out = seconds_to_timecode(segment['end'], fps)
		record_in_tc = seconds_to_timecode(record_in, fps)
		record_out_tc = seconds_to_timecode(record_in + segment['duration'], fps)
		times = f"{source_in} {source_out} {record_in_tc} {record_out_tc}"
		lines.append(f"{event_num}  AX       V     C        {times}")
		lines.append(f"{event_num}  AX       A     C        {times}")
		lines.append(f"* SEGMENT {index + 1}: {segment['start']:.2f}s - {segment['end']:.2f}s")
		lines.append("")
		record_in += segment['duration']
	return "\n".join(lines)

#============================================

def default_edl_path(input_file: str) -> str:
	base, _ = os.path.splitext(input_file)
	return f"{base}_silence_removed.edl"

#============================================

def write_edl(output_file: str, segments: list, source_file: str,
	fps: float = 30) -> str:
	base_name = os.path.splitext(os.path.basename(source_file))[0]
	text = build_edl(segments, fps, f"{base_name} - Silence Removed")
	with open(output_file, 'w', encoding='utf-8') as handle:
		handle.write(text)
	return output_file
