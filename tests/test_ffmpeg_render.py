#!/usr/bin/env python3

"""
Pytest coverage for ffmpeg command building and rendering.
"""

# Standard Library
import os
import shutil
import subprocess
import sys
import tempfile
import unittest.mock

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from silcutlib.core import segments as seglib
from silcutlib.media import ffmpeg_extract
from silcutlib.media import ffmpeg_render
from silcutlib.media import wavio

#============================================

FFMPEG_TOOLS = ("ffmpeg", "ffprobe")
MISSING_TOOLS = [tool for tool in FFMPEG_TOOLS if shutil.which(tool) is None]
HAVE_TOOLS = len(MISSING_TOOLS) == 0
SKIP_TOOLS_REASON = f"missing tools: {', '.join(MISSING_TOOLS)}"

#============================================

def test_filter_graph_with_video() -> None:
	segments = [seglib.make_segment(1.0, 2.5), seglib.make_segment(4.0, 5.0)]
	graph = ffmpeg_render.build_filter_complex(segments)
	chains = graph.split(";")
	assert chains[0] == "[0:v]trim=start=1.000:end=2.500,setpts=PTS-STARTPTS[v0]"
	assert chains[1] == "[0:a]atrim=start=1.000:end=2.500,asetpts=PTS-STARTPTS[a0]"
	assert chains[-1] == "[v0][a0][v1][a1]concat=n=2:v=1:a=1[outv][outa]"

#============================================

def test_filter_graph_audio_only() -> None:
	graph = ffmpeg_render.build_filter_complex([seglib.make_segment(0.0, 1.0)], False)
	assert "[0:v]" not in graph
	assert graph.endswith("[a0]concat=n=1:v=0:a=1[outa]")

#============================================

def test_empty_segments_raise() -> None:
	with pytest.raises(RuntimeError):
		ffmpeg_render.build_filter_complex([])

#============================================

def test_render_command_maps_outputs() -> None:
	cmd = ffmpeg_render.build_render_command("in.mp4", "out.mp4",
		[seglib.make_segment(0.0, 1.0)])
	assert cmd[0] == "ffmpeg"
	assert cmd[-1] == "out.mp4"
	assert "[outv]" in cmd
	assert "[outa]" in cmd
	assert "libx264" in cmd

#============================================

def test_render_skips_disabled_segments() -> None:
	speech = seglib.to_speech_segments([seglib.make_segment(0.0, 1.0),
		seglib.make_segment(2.0, 3.0)])
	speech = seglib.set_segment_enabled(speech, "seg-0", False)
	with tempfile.TemporaryDirectory() as temp_dir:
		output_file = os.path.join(temp_dir, "out.m4a")
		with open(output_file, 'wb') as handle:
			handle.write(b"x")
		with unittest.mock.patch.object(ffmpeg_render.utils, 'run_process') as run_process:
			ffmpeg_render.render_segments("in.wav", output_file, speech, has_video=False)
	cmd = run_process.call_args[0][0]
	graph = cmd[cmd.index("-filter_complex") + 1]
	assert "concat=n=1" in graph
	assert "start=2.000" in graph

#============================================

def test_extract_command() -> None:
	with tempfile.TemporaryDirectory() as temp_dir:
		wav_path = os.path.join(temp_dir, "out.wav")
		def fake_run(cmd, capture_output=True):
			with open(wav_path, 'wb') as handle:
				handle.write(b"x")
		with unittest.mock.patch.object(ffmpeg_extract.utils, 'run_process',
			side_effect=fake_run) as run_process:
			ffmpeg_extract.extract_audio("talk.mp4", wav_path, 22050)
	cmd = run_process.call_args[0][0]
	assert cmd[cmd.index("-ar") + 1] == "22050"
	assert cmd[cmd.index("-ac") + 1] == "1"
	assert cmd[cmd.index("-acodec") + 1] == "pcm_s16le"

#============================================

@pytest.mark.skipif(not HAVE_TOOLS, reason=SKIP_TOOLS_REASON)
def test_render_audio_file() -> None:
	with tempfile.TemporaryDirectory() as temp_dir:
		source = os.path.join(temp_dir, "source.wav")
		wavio.write_wav_mono(source, [0.1] * 48000, 16000)
		output_file = os.path.join(temp_dir, "out.m4a")
		segments = [seglib.make_segment(0.0, 0.5), seglib.make_segment(1.5, 2.5)]
		ffmpeg_render.render_segments(source, output_file, segments, has_video=False)
		assert ffmpeg_extract.probe_video_stream(output_file) is None
		duration = ffmpeg_extract.probe_duration(output_file)
		assert duration == pytest.approx(1.5, abs=0.1)

#============================================

@pytest.mark.skipif(not HAVE_TOOLS, reason=SKIP_TOOLS_REASON)
def test_extract_resamples_to_mono() -> None:
	with tempfile.TemporaryDirectory() as temp_dir:
		source = os.path.join(temp_dir, "source.wav")
		subprocess.run(["ffmpeg", "-y", "-loglevel", "error", "-f", "lavfi",
			"-i", "sine=frequency=440:sample_rate=44100:duration=1", "-ac", "2", source],
			check=True)
		wav_path = os.path.join(temp_dir, "analysis.wav")
		ffmpeg_extract.extract_audio(source, wav_path)
		decoded = wavio.read_wav_mono(wav_path)
		assert decoded['sample_rate'] == 16000
		assert decoded['channels'] == 1
		assert decoded['duration'] == pytest.approx(1.0, abs=0.05)
