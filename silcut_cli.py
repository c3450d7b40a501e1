#!/usr/bin/env python3

import argparse
import os
from silcutlib import history
from silcutlib.core import config
from silcutlib.core import params as paramlib
from silcutlib.core import pipeline
from silcutlib.core import utils
from silcutlib.exporters import cutlist
from silcutlib.exporters import edl
from silcutlib.exporters import mlt
from silcutlib.media import ffmpeg_extract
from silcutlib.media import ffmpeg_render
from silcutlib.services import refiner as refiner_service
from silcutlib.services import transcriber as transcriber_service

#============================================

def parse_args(argv: list = None):
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Natural silence removal for talking videos")
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='only print the final summary')
	subparsers = parser.add_subparsers(dest='command', required=True)

	analyze = subparsers.add_parser('analyze', help='detect speech and export cuts')
	analyze.add_argument('-i', '--input', dest='input_file', required=True,
		help='input video or audio file')
	analyze.add_argument('-c', '--config', dest='config_file', default=None,
		help='path to a silence cutter config YAML')
	analyze.add_argument('-m', '--mode', dest='mode', choices=config.MODES,
		help='override analysis mode')
	analyze.add_argument('-p', '--preset', dest='preset', choices=paramlib.PRESETS,
		help='override cut preset')
	analyze.add_argument('-t', '--content-type', dest='content_type',
		choices=paramlib.CONTENT_TYPES, help='override content type')
	analyze.add_argument('-n', '--naturalness', dest='naturalness', type=float,
		help='override naturalness 0..100')
	analyze.add_argument('-s', '--min-silence-ms', dest='min_silence_ms', type=float,
		help='override minimum silence to remove, in milliseconds')
	analyze.add_argument('-o', '--output-dir', dest='output_dir', default=None,
		help='directory for exported files, defaults next to the input')
	analyze.add_argument('-k', '--keep-wav', dest='keep_wav', action='store_true',
		help='keep the extracted analysis wav')
	analyze.add_argument('-R', '--no-refiner', dest='use_refiner', action='store_false',
		help='skip the parameter refiner and use the preset table')
	analyze.set_defaults(keep_wav=False)
	analyze.set_defaults(use_refiner=True)

	render = subparsers.add_parser('render', help='render kept segments with ffmpeg')
	render.add_argument('-i', '--input', dest='input_file', required=True,
		help='source video or audio file')
	render.add_argument('-l', '--cut-list', dest='cut_list_file', default=None,
		help='cut list JSON, defaults to <input>_cuts.json')
	render.add_argument('-o', '--output', dest='output_file', default=None,
		help='rendered output file')

	history_parser = subparsers.add_parser('history', help='list or delete past runs')
	history_parser.add_argument('-f', '--history-file', dest='history_file',
		default=None, help='history YAML file')
	history_parser.add_argument('-d', '--delete', dest='delete_id', default=None,
		help='delete the entry with this id')
	history_parser.add_argument('-x', '--clear', dest='clear', action='store_true',
		help='delete all entries')
	history_parser.set_defaults(clear=False)

	args = parser.parse_args(argv)
	return args

#============================================

def load_settings(args) -> dict:
	config_path = args.config_file
	if config_path is None:
		config_path = config.default_config_path(args.input_file)
	if not os.path.exists(config_path):
		config.write_config_file(config_path, config.default_config())
		utils.log(f"Wrote default config: {config_path}")
	settings = config.build_settings(config.load_config(config_path), config_path)
	if args.mode is not None:
		settings['mode'] = args.mode
	if args.preset is not None:
		settings['preset'] = args.preset
	if args.content_type is not None:
		settings['content_type'] = args.content_type
	if args.naturalness is not None:
		if args.naturalness < 0 or args.naturalness > 100:
			raise RuntimeError("naturalness must be between 0 and 100")
		settings['naturalness'] = args.naturalness
	if args.min_silence_ms is not None:
		if args.min_silence_ms <= 0:
			raise RuntimeError("min silence must be positive")
		settings['min_silence_to_remove_ms'] = args.min_silence_ms
	return settings

#============================================

def print_progress(stage: str, progress: int, message: str) -> None:
	utils.log(f"[{progress:3d}%] {stage}: {message}")

#============================================

def output_base(input_file: str, output_dir: str) -> str:
	if output_dir is None:
		return input_file
	os.makedirs(output_dir, exist_ok=True)
	return os.path.join(output_dir, os.path.basename(input_file))

#============================================

def print_summary(input_file: str, result: dict, outputs: list) -> None:
	"""
	Print a human-readable summary.
	"""
	summary = result['summary']
	duration = summary['total_duration']
	removed = summary['time_removed']
	removed_pct = (removed / duration) * 100.0 if duration > 0 else 0.0
	print("")
	print("Silence Cutter Summary")
	print(f"Input: {input_file}")
	print(f"Mode: {result['mode']}")
	print(f"Parameters: {result['params_source']}")
	if result['notes']:
		print(f"Notes: {result['notes']}")
	print(f"Duration: {utils.format_timestamp(duration)} ({duration:.3f}s)")
	print(f"Kept: {utils.format_timestamp(summary['kept_duration'])}")
	print(f"Removed: {utils.format_clock(removed)} ({removed_pct:.2f}%)")
	print(f"Cuts: {summary['number_of_cuts']}")
	if result['pause_stats'] is not None:
		pause_stats = result['pause_stats']
		print(f"Pauses: {pause_stats['total_pauses']} "
			f"(avg {pause_stats['avg_pause_ms']} ms)")
	for path in outputs:
		print(f"Wrote: {path}")
	print("")
	return

#============================================

def run_analyze(args) -> None:
	utils.ensure_file_exists(args.input_file)
	settings = load_settings(args)
	utils.check_dependency("ffmpeg")
	transcriber = None
	if settings['mode'] == 'transcript':
		transcriber = transcriber_service.WhisperTranscriber.from_settings(settings)
	refiner = None
	if settings['mode'] == 'energy' and settings['refiner_enabled'] and args.use_refiner:
		refiner = refiner_service.ChatParamsRefiner.from_settings(settings)
	cutter = pipeline.SilenceCutter(settings, transcriber=transcriber,
		refiner=refiner, listener=print_progress)
	result = cutter.analyze_file(args.input_file, keep_wav=args.keep_wav)
	segments = result['segments']
	duration = result['total_duration']
	base = output_base(args.input_file, args.output_dir)
	outputs = []
	if settings['export_cut_list']:
		cut_list = cutlist.build_cut_list(segments, os.path.basename(args.input_file),
			duration, settings['fps'])
		outputs.append(cutlist.write_cut_list(cutlist.default_cut_list_path(base),
			cut_list))
	if settings['export_edl']:
		outputs.append(edl.write_edl(edl.default_edl_path(base), segments,
			args.input_file, settings['fps']))
	if settings['export_mlt']:
		video = ffmpeg_extract.probe_video_stream(args.input_file)
		width = video['width'] if video is not None else 1920
		height = video['height'] if video is not None else 1080
		base_name, _ = os.path.splitext(base)
		exporter = mlt.MltExporter(os.path.abspath(args.input_file), segments,
			f"{base_name}_silence_removed.mlt", settings['fps'], width, height)
		outputs.append(exporter.export())
	if settings['history_enabled']:
		history_log = history.HistoryLog(history.YamlFileStore(settings['history_file']),
			settings['history_max_entries'])
		history_log.add(os.path.basename(args.input_file), duration,
			result['summary']['kept_duration'], settings['preset'],
			settings['content_type'], segments)
	if result['wav_path'] is not None:
		outputs.append(result['wav_path'])
	print_summary(args.input_file, result, outputs)

#============================================

def run_render(args) -> None:
	utils.ensure_file_exists(args.input_file)
	utils.check_dependency("ffmpeg")
	utils.check_dependency("ffprobe")
	cut_list_file = args.cut_list_file
	if cut_list_file is None:
		cut_list_file = cutlist.default_cut_list_path(args.input_file)
	data = cutlist.load_cut_list(cut_list_file)
	output_file = args.output_file
	if output_file is None:
		base, ext = os.path.splitext(args.input_file)
		output_file = f"{base}_silence_removed{ext}"
	has_video = ffmpeg_extract.probe_video_stream(args.input_file) is not None
	ffmpeg_render.render_segments(args.input_file, output_file, data['segments'],
		has_video)
	rendered = ffmpeg_extract.probe_duration(output_file)
	print(f"Wrote: {output_file} ({utils.format_clock(rendered)})")

#============================================

def run_history(args) -> None:
	history_file = args.history_file
	if history_file is None:
		history_file = os.path.expanduser(
			config.default_config()['settings']['history']['file'])
	history_log = history.HistoryLog(history.YamlFileStore(history_file))
	if args.clear:
		history_log.clear()
		print("History cleared")
		return
	if args.delete_id is not None:
		if not history_log.delete(args.delete_id):
			raise RuntimeError(f"history entry not found: {args.delete_id}")
		print(f"Deleted: {args.delete_id}")
		return
	entries = history_log.list()
	if len(entries) == 0:
		print("No history entries")
		return
	for entry in entries:
		print(f"{entry['id']}  {entry['file_name']}  "
			f"{utils.format_clock(entry['original_duration'])} -> "
			f"{utils.format_clock(entry['final_duration'])}  "
			f"{entry['number_of_cuts']} cuts  {entry['preset']}")

#============================================

def main(argv: list = None):
	args = parse_args(argv)
	utils.set_quiet_mode(args.quiet)
	if args.command == 'analyze':
		run_analyze(args)
	elif args.command == 'render':
		run_render(args)
	elif args.command == 'history':
		run_history(args)


if __name__ == '__main__':
	main()
