#!/usr/bin/env python3

import json
import os
import sys
import tempfile
import unittest
import unittest.mock

# PIP3 modules
import numpy

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

import silcut_cli
from silcutlib import history
from silcutlib.core import config
from silcutlib.core import pipeline
from silcutlib.core import utils
from silcutlib.exporters import cutlist
from silcutlib.media import wavio

#============================================

def fake_extract(input_file: str, wav_path: str, sample_rate: int = 16000) -> str:
	rng = numpy.random.default_rng(3)
	samples = rng.uniform(-0.001, 0.001, 6 * sample_rate)
	first = int(2.0 * sample_rate)
	last = int(4.0 * sample_rate)
	samples[first:last] += 0.3
	wavio.write_wav_mono(wav_path, samples, sample_rate)
	return wav_path

#============================================

class CliTest(unittest.TestCase):
	#============================================
	def tearDown(self) -> None:
		utils.set_quiet_mode(False)

	#============================================
	def test_parse_analyze_overrides(self) -> None:
		args = silcut_cli.parse_args(['analyze', '-i', 'talk.mp4', '-p', 'gentle',
			'-m', 'energy', '-n', '70', '-R'])
		self.assertEqual(args.command, 'analyze')
		self.assertEqual(args.preset, 'gentle')
		self.assertEqual(args.mode, 'energy')
		self.assertEqual(args.naturalness, 70.0)
		self.assertFalse(args.use_refiner)

	#============================================
	def test_analyze_energy_writes_exports(self) -> None:
		"""Energy mode writes a default config, a cut list, an EDL, and history."""
		with tempfile.TemporaryDirectory() as temp_dir:
			input_file = os.path.join(temp_dir, "talk.mp4")
			with open(input_file, 'wb') as handle:
				handle.write(b"x")
			history_file = os.path.join(temp_dir, "history.yaml")
			raw = config.default_config()
			raw['settings']['history']['file'] = history_file
			config_file = config.default_config_path(input_file)
			config.write_config_file(config_file, raw)
			with unittest.mock.patch.object(pipeline.ffmpeg_extract, 'extract_audio',
				side_effect=fake_extract):
				with unittest.mock.patch.object(silcut_cli.utils, 'check_dependency'):
					silcut_cli.main(['-q', 'analyze', '-i', input_file, '-m', 'energy'])
			cut_file = os.path.join(temp_dir, "talk_cuts.json")
			with open(cut_file, 'r', encoding='utf-8') as handle:
				cut_list = json.load(handle)
			self.assertTrue(os.path.isfile(os.path.join(temp_dir,
				"talk_silence_removed.edl")))
			entries = history.HistoryLog(history.YamlFileStore(history_file)).list()
		self.assertEqual(cut_list['sourceFileName'], "talk.mp4")
		self.assertEqual(len(cut_list['keptSegments']), 1)
		self.assertAlmostEqual(cut_list['keptSegments'][0]['startSeconds'], 1.85,
			delta=0.03)
		self.assertEqual(len(entries), 1)
		self.assertEqual(entries[0]['file_name'], "talk.mp4")

	#============================================
	def test_history_listing_and_delete(self) -> None:
		with tempfile.TemporaryDirectory() as temp_dir:
			history_file = os.path.join(temp_dir, "history.yaml")
			log = history.HistoryLog(history.YamlFileStore(history_file))
			entry = log.add("a.mp4", 10.0, 6.0, 'normal', 'podcast',
				[{'start': 0.0, 'end': 6.0}])
			silcut_cli.main(['history', '-f', history_file])
			silcut_cli.main(['history', '-f', history_file, '-d', entry['id']])
			self.assertEqual(log.list(), [])
			with self.assertRaises(RuntimeError):
				silcut_cli.main(['history', '-f', history_file, '-d', entry['id']])

#============================================

def test_render_reports_rendered_duration(capsys) -> None:
	with tempfile.TemporaryDirectory() as temp_dir:
		input_file = os.path.join(temp_dir, "talk.mp4")
		with open(input_file, 'wb') as handle:
			handle.write(b"x")
		segments = [{'start': 1.0, 'end': 30.0}, {'start': 40.0, 'end': 76.5}]
		cutlist.write_cut_list(cutlist.default_cut_list_path(input_file),
			cutlist.build_cut_list(segments, "talk.mp4", 90.0))
		output_file = os.path.join(temp_dir, "talk_silence_removed.mp4")
		with unittest.mock.patch.object(silcut_cli.utils, 'check_dependency'), \
			unittest.mock.patch.object(silcut_cli.ffmpeg_extract, 'probe_video_stream',
				return_value=None), \
			unittest.mock.patch.object(silcut_cli.ffmpeg_render, 'render_segments',
				return_value=output_file) as render_segments, \
			unittest.mock.patch.object(silcut_cli.ffmpeg_extract, 'probe_duration',
				return_value=65.5) as probe_duration:
			silcut_cli.main(['render', '-i', input_file])
	args = render_segments.call_args[0]
	assert args[0] == input_file
	assert args[1] == output_file
	assert [(item['start'], item['end']) for item in args[2]] == [(1.0, 30.0), (40.0, 76.5)]
	assert args[3] is False
	probe_duration.assert_called_once_with(output_file)
	assert f"Wrote: {output_file} (1:05)" in capsys.readouterr().out
