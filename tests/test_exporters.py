#!/usr/bin/env python3

"""
Tests for EDL, cut list, and MLT export.
"""

# Standard Library
import json
import os
import sys
import tempfile
import unittest
import xml.etree.ElementTree

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from silcutlib.core import segments as seglib
from silcutlib.exporters import cutlist
from silcutlib.exporters import edl
from silcutlib.exporters.mlt import MltExporter

#============================================

def sample_segments() -> list:
	speech = seglib.to_speech_segments([
		seglib.make_segment(1.5, 3.0),
		seglib.make_segment(4.0, 5.0),
		seglib.make_segment(7.25, 9.75),
	])
	return seglib.set_segment_enabled(speech, "seg-1", False)

#============================================

class EdlTest(unittest.TestCase):
	#============================================
	def test_timecode_floors_frames(self) -> None:
		self.assertEqual(edl.seconds_to_timecode(0.0), "00:00:00:00")
		self.assertEqual(edl.seconds_to_timecode(1.5, 30), "00:00:01:15")
		self.assertEqual(edl.seconds_to_timecode(3725.25, 24), "01:02:05:06")

	#============================================
	def test_events_for_enabled_segments(self) -> None:
		text = edl.build_edl(sample_segments(), 30, "Talk - Silence Removed")
		lines = text.split("\n")
		self.assertEqual(lines[0], "TITLE: Talk - Silence Removed")
		self.assertEqual(lines[1], "FCM: NON-DROP FRAME")
		self.assertEqual(lines[2], "")
		self.assertEqual(lines[3],
			"001  AX       V     C        00:00:01:15 00:00:03:00 00:00:00:00 00:00:01:15")
		self.assertEqual(lines[4],
			"001  AX       A     C        00:00:01:15 00:00:03:00 00:00:00:00 00:00:01:15")
		self.assertEqual(lines[5], "* SEGMENT 1: 1.50s - 3.00s")
		self.assertEqual(lines[7],
			"002  AX       V     C        00:00:07:07 00:00:09:22 00:00:01:15 00:00:04:00")
		self.assertEqual(lines[9], "* SEGMENT 2: 7.25s - 9.75s")
		self.assertEqual(len([line for line in lines if " V " in line]), 2)

	#============================================
	def test_write_edl_title(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			output_file = os.path.join(temp_dir, "talk.edl")
			edl.write_edl(output_file, sample_segments(), "/videos/talk.mp4")
			with open(output_file, 'r', encoding='utf-8') as handle:
				first_line = handle.readline().strip()
		self.assertEqual(first_line, "TITLE: talk - Silence Removed")

#============================================

def test_cut_list_fields() -> None:
	data = cutlist.build_cut_list(sample_segments(), "talk.mp4", 12.0)
	assert list(data.keys()) == [
		'sourceFileName', 'fpsAssumed', 'totalDurationOriginal',
		'totalDurationAfterCuts', 'totalTimeRemoved', 'numberOfCuts',
		'keptSegments', 'exportedAt',
	]
	assert data['fpsAssumed'] == 30
	assert data['totalDurationAfterCuts'] == pytest.approx(4.0)
	assert data['totalTimeRemoved'] == pytest.approx(8.0)
	assert data['numberOfCuts'] == 1
	assert data['keptSegments'][1] == {'startSeconds': 7.25, 'endSeconds': 9.75}
	assert data['exportedAt'].endswith("Z")

#============================================

def test_cut_list_file_reloads() -> None:
	with tempfile.TemporaryDirectory() as temp_dir:
		path = os.path.join(temp_dir, "talk_cuts.json")
		cutlist.write_cut_list(path, cutlist.build_cut_list(sample_segments(),
			"talk.mp4", 12.0))
		with open(path, 'r', encoding='utf-8') as handle:
			assert json.load(handle)['sourceFileName'] == "talk.mp4"
		loaded = cutlist.load_cut_list(path)
	assert [item['id'] for item in loaded['segments']] == ["cut-0", "cut-1"]
	assert loaded['segments'][0]['start'] == 1.5

#============================================

def test_cut_list_rejects_other_json() -> None:
	with tempfile.TemporaryDirectory() as temp_dir:
		path = os.path.join(temp_dir, "other.json")
		with open(path, 'w', encoding='utf-8') as handle:
			json.dump({'clips': []}, handle)
		with pytest.raises(RuntimeError):
			cutlist.load_cut_list(path)

#============================================

def test_default_paths() -> None:
	assert cutlist.default_cut_list_path("/v/talk.mp4") == "/v/talk_cuts.json"
	assert edl.default_edl_path("/v/talk.mp4") == "/v/talk_silence_removed.edl"

#============================================

class MltExportTest(unittest.TestCase):
	#============================================
	def test_playlist_entries_use_frames(self) -> None:
		"""Each kept segment becomes one playlist entry on the source producer."""
		with tempfile.TemporaryDirectory() as temp_dir:
			mlt_file = os.path.join(temp_dir, "talk.mlt")
			exporter = MltExporter("/videos/talk.mp4", sample_segments(), mlt_file,
				fps=30, width=1280, height=720)
			exporter.export()
			root = xml.etree.ElementTree.parse(mlt_file).getroot()
		profile = root.find('profile')
		self.assertEqual(profile.get('frame_rate_num'), "30")
		self.assertEqual(profile.get('display_aspect_num'), "16")
		self.assertEqual(profile.get('display_aspect_den'), "9")
		producers = root.findall('producer')
		self.assertEqual(len(producers), 1)
		entries = root.find('playlist').findall('entry')
		self.assertEqual(len(entries), 2)
		self.assertEqual(entries[0].get('in'), "45")
		self.assertEqual(entries[0].get('out'), "89")
		self.assertEqual(entries[1].get('in'), "218")
		self.assertEqual(entries[1].get('out'), "292")
		track = root.find('tractor').find('multitrack').find('track')
		self.assertEqual(track.get('producer'), 'main')
