#!/usr/bin/env python3

"""
ffmpeg_extract.py

Decode media with ffmpeg and probe it with ffprobe.
"""

# Standard Library
import json
import os

# local repo modules
from silcutlib.core import utils

#============================================

def extract_audio(input_file: str, wav_path: str, sample_rate: int = 16000) -> str:
	"""
	Extract mono 16-bit PCM audio from a media file.

	Args:
		input_file: Video or audio file path.
		wav_path: Output wav path.
		sample_rate: Output sample rate in Hz.

	Returns:
		str: Output wav path.
	"""
	cmd = [
		"ffmpeg", "-y", "-hide_banner", "-loglevel", "error",
		"-i", input_file,
		"-vn", "-sn",
		"-acodec", "pcm_s16le",
		"-ar", str(int(sample_rate)),
	]
	cmd += ["-ac", "1"]
	cmd.append(wav_path)
	utils.run_process(cmd, capture_output=True)
	if not os.path.isfile(wav_path):
		raise RuntimeError("audio extraction failed")
	return wav_path

#============================================

def probe_duration(input_file: str) -> float:
	cmd = [
		"ffprobe", "-v", "error",
		"-show_entries", "format=duration",
		"-of", "json",
		input_file,
	]
	proc = utils.run_process(cmd, capture_output=True)
	data = json.loads(proc.stdout)
	duration = float(data.get('format', {}).get('duration', 0.0))
	if duration <= 0:
		raise RuntimeError("invalid duration from ffprobe")
	return duration

#============================================

def probe_video_stream(input_file: str) -> dict:
	"""
	Probe video stream metadata using ffprobe.

	Args:
		input_file: Media file path.

	Returns:
		dict: width, height, fps (as a fraction string), or None when the
		file has no video stream.
	"""
	cmd = [
		"ffprobe", "-v", "error",
		"-select_streams", "v:0",
		"-show_entries", "stream=width,height,r_frame_rate,avg_frame_rate",
		"-of", "json",
		input_file,
	]
	proc = utils.run_process(cmd, capture_output=True)
	data = json.loads(proc.stdout)
	streams = data.get('streams', [])
	if len(streams) == 0:
		return None
	stream = streams[0]
	fps_value = stream.get('r_frame_rate')
	if fps_value is None or fps_value == "0/0":
		fps_value = stream.get('avg_frame_rate')
	if fps_value is None or fps_value == "0/0":
		raise RuntimeError("invalid frame rate from ffprobe")
	return {
		'width': int(stream.get('width', 0)),
		'height': int(stream.get('height', 0)),
		'fps': fps_value,
	}
