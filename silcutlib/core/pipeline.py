#!/usr/bin/env python3

"""
pipeline.py

Run a full silence analysis: energy detection or transcript grouping,
parameter resolution, and refinement into the final kept segments.
"""

# Standard Library
import os
import shutil
import tempfile

# local repo modules
from silcutlib.core import config
from silcutlib.core import detection
from silcutlib.core import envelope
from silcutlib.core import params as paramlib
from silcutlib.core import refine
from silcutlib.core import segments as seglib
from silcutlib.core import transcript
from silcutlib.core import utils
from silcutlib.core.errors import InvalidInput
from silcutlib.media import ffmpeg_extract
from silcutlib.media import wavio

#============================================

STAGES = (
	'extracting_audio',
	'transcribing',
	'analyzing_pauses',
	'generating_segments',
	'analyzing_audio',
	'fetching_params',
	'refining_segments',
	'complete',
)

#============================================

def resolve_duration(samples, sample_rate: int, total_duration: float = None) -> float:
	if sample_rate is None or sample_rate <= 0:
		raise InvalidInput("sample rate must be positive")
	if total_duration is None:
		total_duration = len(samples) / float(sample_rate)
	if total_duration <= 0:
		raise InvalidInput("media duration must be positive")
	return float(total_duration)

#============================================

def run_initial_detection(samples, sample_rate: int, total_duration: float = None,
	params: dict = None, frame_ms: float = envelope.FRAME_MS) -> dict:
	"""
	Stage A: deterministic energy-based speech detection.

	Args:
		samples: Mono samples in [-1, 1].
		sample_rate: Samples per second.
		total_duration: Media duration, defaults to the sample length.
		params: Detection parameters, defaults to the normal preset.
		frame_ms: Analysis frame length in milliseconds.

	Returns:
		dict: frames, stats, raw_segments, initial_segments, params.
	"""
	total_duration = resolve_duration(samples, sample_rate, total_duration)
	if params is None:
		params = paramlib.params_for_preset(paramlib.DEFAULT_PRESET)
	params = paramlib.clamp_params(params)
	frames = envelope.compute_rms_envelope(samples, sample_rate, frame_ms)
	stats = envelope.calculate_audio_stats(frames, sample_rate, total_duration, frame_ms)
	raw_segments = detection.detect_raw_segments(frames, stats['noise_floor_rms'],
		params['energy_multiplier'], frame_ms)
	smoothed = seglib.smooth_segments(raw_segments, params)
	return {
		'frames': frames,
		'stats': stats,
		'raw_segments': raw_segments,
		'initial_segments': seglib.to_speech_segments(smoothed, id_prefix='seg'),
		'params': params,
	}

#============================================

class SilenceCutter():
	"""
	Analysis driver tying the detection stages to the external services.

	The transcriber needs transcribe(wav_path) -> transcription dict and
	the refiner needs refine(request) -> {'params', 'notes'}. Either may
	be None. Stage changes are recorded in self.events and passed to the
	optional listener as (stage, progress, message).
	"""

	def __init__(self, settings: dict = None, transcriber=None, refiner=None,
		listener=None):
		if settings is None:
			settings = config.build_settings(config.default_config(), "<defaults>")
		self.settings = settings
		self.transcriber = transcriber
		self.refiner = refiner
		self.listener = listener
		self.events = []

	#============================
	def _emit(self, stage: str, progress: int, message: str = "") -> None:
		event = {'stage': stage, 'progress': progress, 'message': message}
		self.events.append(event)
		if self.listener is not None:
			self.listener(stage, progress, message)

	#============================
	def base_params(self) -> dict:
		preset_params = paramlib.params_for_preset(self.settings['preset'])
		return paramlib.apply_user_settings(preset_params,
			self.settings['naturalness'], self.settings['min_silence_to_remove_ms'])

	#============================
	def analyze_energy(self, samples, sample_rate: int, total_duration: float = None) -> dict:
		"""
		Energy envelope path: detect, ask the refiner for parameters, refine.
		"""
		total_duration = resolve_duration(samples, sample_rate, total_duration)
		self._emit('analyzing_audio', 30, "computing energy envelope")
		initial = run_initial_detection(samples, sample_rate, total_duration,
			self.base_params(), self.settings['frame_ms'])
		self._emit('fetching_params', 60, "resolving detection parameters")
		tuned, notes, source = paramlib.resolve_params(self.refiner,
			self.settings['preset'], self.settings['content_type'],
			initial['stats'], initial['initial_segments'])
		utils.log(f"Parameters from {source}: {notes}")
		self._emit('refining_segments', 80, "applying natural cut rules")
		final_segments = refine.refine_segments(initial['initial_segments'], tuned,
			total_duration)
		self._emit('complete', 100, "analysis complete")
		return {
			'mode': 'energy',
			'total_duration': total_duration,
			'stats': initial['stats'],
			'initial_segments': initial['initial_segments'],
			'params': tuned,
			'params_source': source,
			'notes': notes,
			'segments': final_segments,
			'summary': refine.summarize_segments(final_segments, total_duration),
			'pause_stats': None,
		}

	#============================
	def analyze_transcript(self, transcription: dict, total_duration: float,
		samples=None, sample_rate: int = None) -> dict:
		"""
		Transcript path: group timestamped words at long pauses.

		Audio stats are computed for display when samples are given.
		"""
		if total_duration is None or total_duration <= 0:
			raise InvalidInput("media duration must be positive")
		stats = None
		if samples is not None and len(samples) > 0:
			frames = envelope.compute_rms_envelope(samples, sample_rate,
				self.settings['frame_ms'])
			stats = envelope.calculate_audio_stats(frames, sample_rate, total_duration,
				self.settings['frame_ms'])
		self._emit('analyzing_pauses', 60, "analyzing pauses")
		pause_stats = transcript.calculate_pause_stats(transcription)
		run_params = self.base_params()
		self._emit('generating_segments', 80, "generating segments")
		speech = transcript.segments_from_transcription(transcription, run_params,
			total_duration)
		max_cuts = refine.max_cuts_for(run_params['max_jump_cut_rate_per_minute'],
			total_duration)
		if refine.number_of_cuts(speech) > max_cuts:
			limited = refine.enforce_cut_rate(speech, run_params, total_duration)
			speech = seglib.to_speech_segments(limited, id_prefix='seg')
		self._emit('complete', 100, "analysis complete")
		return {
			'mode': 'transcript',
			'total_duration': total_duration,
			'stats': stats,
			'initial_segments': speech,
			'params': run_params,
			'params_source': 'settings',
			'notes': "",
			'segments': speech,
			'summary': refine.summarize_segments(speech, total_duration),
			'pause_stats': pause_stats,
		}

	#============================
	def analyze_file(self, input_file: str, work_dir: str = None,
		keep_wav: bool = False) -> dict:
		"""
		Decode a media file and run the configured analysis mode.

		Args:
			input_file: Video or audio file path.
			work_dir: Directory for the extracted wav.
			keep_wav: Keep the extracted wav when True.

		Returns:
			dict: Analysis result with source_file and wav_path added.
		"""
		utils.ensure_file_exists(input_file)
		mode = self.settings['mode']
		if mode == 'transcript' and self.transcriber is None:
			raise RuntimeError("transcript mode requires a transcriber")
		temp_dir = None
		if work_dir is None:
			temp_dir = tempfile.mkdtemp(prefix="silcut-")
			work_dir = temp_dir
		base_name = os.path.splitext(os.path.basename(input_file))[0]
		wav_path = os.path.join(work_dir, f"{base_name}.analysis.wav")
		try:
			self._emit('extracting_audio', 0, "extracting audio")
			ffmpeg_extract.extract_audio(input_file, wav_path,
				sample_rate=self.settings['sample_rate'])
			decoded = wavio.read_wav_mono(wav_path)
			duration = decoded['duration']
			if mode == 'transcript':
				self._emit('transcribing', 20, "transcribing audio")
				transcription = self.transcriber.transcribe(wav_path)
				result = self.analyze_transcript(transcription, duration,
					decoded['samples'], decoded['sample_rate'])
			else:
				result = self.analyze_energy(decoded['samples'],
					decoded['sample_rate'], duration)
		finally:
			if not keep_wav:
				if temp_dir is not None:
					shutil.rmtree(temp_dir, ignore_errors=True)
				elif os.path.exists(wav_path):
					os.remove(wav_path)
		result['source_file'] = input_file
		result['wav_path'] = wav_path if keep_wav else None
		return result
