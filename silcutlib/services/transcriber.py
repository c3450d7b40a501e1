#!/usr/bin/env python3

"""
transcriber.py

Whisper transcription over an OpenAI-compatible audio endpoint, returning
segments with word-level timestamps.
"""

# Standard Library
import os

# PIP3 modules
import requests

# local repo modules
from silcutlib.core import utils
from silcutlib.core.errors import ExternalServiceFailure
from silcutlib.services import http

#============================================

def _normalize_words(raw_words) -> list:
	words = []
	for word in raw_words or []:
		words.append({
			'word': str(word.get('word', "") or ""),
			'start': float(word.get('start', 0.0) or 0.0),
			'end': float(word.get('end', 0.0) or 0.0),
		})
	return words

#============================================

def attach_words(segments: list, words: list) -> list:
	"""
	Place top-level words into the segment that contains their start time.

	Words before the first segment go to the first one; words in a gap go
	to the segment before the gap.
	"""
	if len(segments) == 0 or len(words) == 0:
		return segments
	for segment in segments:
		segment['words'] = []
	index = 0
	for word in sorted(words, key=lambda item: item['start']):
		while (index + 1 < len(segments)
			and word['start'] >= segments[index + 1]['start']):
			index += 1
		segments[index]['words'].append(word)
	return segments

#============================================

def normalize_transcription(result: dict) -> dict:
	"""
	Normalize a verbose_json reply into the transcription shape.

	Args:
		result: Raw JSON reply.

	Returns:
		dict: text, segments (id, start, end, text, words), language, duration.
	"""
	segments = []
	for index, segment in enumerate(result.get('segments') or []):
		item = {
			'id': segment.get('id', index),
			'start': float(segment.get('start', 0.0) or 0.0),
			'end': float(segment.get('end', 0.0) or 0.0),
			'text': str(segment.get('text', "") or ""),
		}
		if segment.get('words'):
			item['words'] = _normalize_words(segment['words'])
		segments.append(item)
	top_words = _normalize_words(result.get('words'))
	if len(top_words) > 0 and not any('words' in item for item in segments):
		if len(segments) == 0:
			segments.append({'id': 0, 'start': top_words[0]['start'],
				'end': top_words[-1]['end'], 'text': str(result.get('text', ""))})
		attach_words(segments, top_words)
	return {
		'text': str(result.get('text', "") or ""),
		'segments': segments,
		'language': result.get('language') or "unknown",
		'duration': float(result.get('duration', 0.0) or 0.0),
	}

#============================================

class WhisperTranscriber():
	"""
	Transcriber backed by an OpenAI-compatible /audio/transcriptions endpoint.
	"""

	def __init__(self, base_url: str, model: str, api_key_env: str = "GROQ_API_KEY",
		timeout: float = 300.0, session=None):
		self.base_url = base_url.rstrip('/')
		self.model = model
		self.api_key_env = api_key_env
		self.timeout = timeout
		self.session = session if session is not None else http.build_session()

	#============================
	@classmethod
	def from_settings(cls, settings: dict):
		return cls(settings['transcriber_url'], settings['transcriber_model'],
			api_key_env=settings['transcriber_api_key_env'],
			timeout=settings['transcriber_timeout'])

	#============================
	def transcribe(self, audio_path: str) -> dict:
		"""
		Upload an audio file and return the normalized transcription.

		Args:
			audio_path: Audio file path.

		Returns:
			dict: Transcription result.
		"""
		utils.ensure_file_exists(audio_path)
		api_key = http.read_api_key(self.api_key_env, 'transcriber')
		data = [
			('model', self.model),
			('response_format', 'verbose_json'),
			('timestamp_granularities[]', 'word'),
			('timestamp_granularities[]', 'segment'),
		]
		headers = {'Authorization': f"Bearer {api_key}"}
		utils.log(f"Transcribing {os.path.basename(audio_path)} with {self.model}")
		try:
			with open(audio_path, 'rb') as handle:
				files = {'file': (os.path.basename(audio_path), handle, 'audio/wav')}
				response = self.session.post(f"{self.base_url}/audio/transcriptions",
					data=data, files=files, headers=headers, timeout=self.timeout)
		except requests.exceptions.RequestException as exc:
			raise ExternalServiceFailure(f"transcription request failed: {exc}",
				service='transcriber') from exc
		result = http.check_response(response, 'transcriber')
		return normalize_transcription(result)
