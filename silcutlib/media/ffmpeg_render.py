#!/usr/bin/env python3

"""
ffmpeg_render.py

Render kept segments of a source file into a single output with one
ffmpeg trim and concat filter graph.
"""

# Standard Library
import time

# local repo modules
from silcutlib.core import segments as seglib
from silcutlib.core import utils

#============================================

def build_filter_complex(segments: list, has_video: bool = True) -> str:
	"""
	Build a trim and concat filter graph for the kept segments.

	Args:
		segments: Ordered kept segments, seconds.
		has_video: Include video trim chains when True.

	Returns:
		str: Filter graph ending in [outv] and [outa] (or only [outa]).
	"""
	if len(segments) == 0:
		raise RuntimeError("no segments to render")
	chains = []
	concat_inputs = ""
	for index, segment in enumerate(segments):
		start = f"{segment['start']:.3f}"
		end = f"{segment['end']:.3f}"
		if has_video:
			chains.append(
				f"[0:v]trim=start={start}:end={end},setpts=PTS-STARTPTS[v{index}]")
			concat_inputs += f"[v{index}]"
		chains.append(
			f"[0:a]atrim=start={start}:end={end},asetpts=PTS-STARTPTS[a{index}]")
		concat_inputs += f"[a{index}]"
	count = len(segments)
	if has_video:
		chains.append(f"{concat_inputs}concat=n={count}:v=1:a=1[outv][outa]")
	else:
		chains.append(f"{concat_inputs}concat=n={count}:v=0:a=1[outa]")
	return ";".join(chains)

#============================================

def build_render_command(input_file: str, output_file: str, segments: list,
	has_video: bool = True, crf: int = 20, preset: str = 'veryfast') -> list:
	filter_text = build_filter_complex(segments, has_video)
	cmd = [
		"ffmpeg", "-y", "-hide_banner", "-loglevel", "error",
		"-i", input_file,
		"-filter_complex", filter_text,
	]
	if has_video:
		cmd += ["-map", "[outv]"]
		cmd += ["-codec:v", "libx264", "-crf", str(crf), "-preset", preset]
		cmd += ["-pix_fmt", "yuv420p"]
	cmd += ["-map", "[outa]", "-codec:a", "aac", "-b:a", "192k"]
	cmd.append(output_file)
	return cmd

#============================================

def render_segments(input_file: str, output_file: str, segments: list,
	has_video: bool = True) -> str:
	"""
	Render enabled segments of input_file into output_file.

	Args:
		input_file: Source media path.
		output_file: Rendered media path.
		segments: Speech segments; disabled ones are skipped.
		has_video: Source carries a video stream.

	Returns:
		str: Output file path.
	"""
	t0 = time.time()
	kept = seglib.enabled_segments(segments)
	kept.sort(key=lambda item: item['start'])
	cmd = build_render_command(input_file, output_file, kept, has_video)
	utils.run_process(cmd, capture_output=True)
	utils.ensure_file_exists(output_file)
	utils.log(f"Rendered {len(kept)} segments in {int(time.time() - t0)} seconds")
	return output_file
