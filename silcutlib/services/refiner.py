#!/usr/bin/env python3

"""
refiner.py

Chat-completions client that recommends detection parameters from audio
statistics and the initial speech segments. The model never hears audio.
"""

# Standard Library
import json

# PIP3 modules
import requests

# local repo modules
from silcutlib.core import params as paramlib
from silcutlib.core import utils
from silcutlib.core.errors import ExternalServiceFailure
from silcutlib.core.errors import ValidationFailure
from silcutlib.services import http

#============================================

SYSTEM_PROMPT = (
	"You are an audio engineering AI assistant. Output ONLY valid JSON matching "
	"the exact schema requested. No markdown code blocks, no explanation outside "
	"JSON, just the raw JSON object."
)

LANGUAGE_NAMES = {
	'en': "English",
	'ru': "Russian",
}

#============================================

def build_params_prompt(request: dict, language: str = 'en') -> str:
	"""
	Build the user prompt for a refine request.

	Args:
		request: Output of params.build_refine_request().
		language: Language code for the notes field.

	Returns:
		str: Prompt text.
	"""
	stats = request['stats']
	segments = request['initial_segments']
	dynamic_range = stats['rms_p90'] - stats['rms_p10']
	snr = stats['rms_p50'] / max(stats['noise_floor_rms'], 0.0001)
	total_segments = len(segments)
	speech_time = sum(item['end'] - item['start'] for item in segments)
	average_duration = speech_time / total_segments if total_segments > 0 else 0.0
	video_time = segments[-1]['end'] if total_segments > 0 else 0.0
	speech_ratio = speech_time / video_time if video_time > 0 else 0.0
	content_type = request['content_type'].replace("_", " ")
	language_name = LANGUAGE_NAMES.get(language, "English")
	lines = []
	lines.append("You are an audio engineer AI that recommends silence-cutting "
		"parameters for video editing.")
	lines.append("")
	lines.append("TASK:")
	lines.append("Analyze the audio statistics and initial speech segments, then "
		"recommend parameters that produce NATURAL-LOOKING cuts. Remove dead air "
		"without making the video feel artificially fast or robotic.")
	lines.append("")
	lines.append("AUDIO ANALYSIS SUMMARY:")
	lines.append(f"- Noise floor RMS: {stats['noise_floor_rms']:.6f}")
	lines.append(f"- RMS 10th percentile: {stats['rms_p10']:.6f}")
	lines.append(f"- RMS 50th percentile (median): {stats['rms_p50']:.6f}")
	lines.append(f"- RMS 90th percentile: {stats['rms_p90']:.6f}")
	lines.append(f"- Dynamic range (P90-P10): {dynamic_range:.6f}")
	lines.append(f"- Signal-to-noise ratio: {snr:.2f}x")
	lines.append(f"- Initial segments detected: {total_segments}")
	lines.append(f"- Average segment duration: {average_duration:.2f}s")
	lines.append(f"- Speech ratio: {speech_ratio * 100:.1f}%")
	lines.append("")
	lines.append("USER SETTINGS:")
	lines.append(f"- Preset: {request['preset'].upper()}")
	lines.append(f"- Content type: {content_type}")
	lines.append("")
	lines.append("PRESET GUIDELINES:")
	lines.append("- GENTLE: Preserve natural pacing, only remove obvious long pauses.")
	lines.append("- NORMAL: Balanced cuts that feel professional.")
	lines.append("- AGGRESSIVE: Tight cuts for fast-paced content.")
	lines.append("")
	lines.append("CONTENT TYPE CONSIDERATIONS:")
	lines.append("- talking_head: Preserve breathing room and emphasis pauses")
	lines.append("- tutorial: Can be tighter, viewers expect efficiency")
	lines.append("- podcast: Keep the conversational rhythm")
	lines.append("- screen_recording: Usually can be tight, focus on action")
	lines.append("")
	lines.append("NATURAL CUT RULES:")
	lines.append("1. keepShortPausesUnderMs: micro-pauses of 200-400ms are natural speech.")
	lines.append("2. prePadMs/postPadMs: too little padding cuts mid-word.")
	lines.append("3. maxJumpCutRatePerMinute: over 30 cuts per minute feels choppy.")
	lines.append("4. minimumSilenceMs: only silence longer than this gets cut.")
	lines.append("5. mergeGapMs: merge segments separated by tiny gaps.")
	lines.append("")
	lines.append("PARAMETER RANGES (you MUST stay within these):")
	for key in paramlib.PARAM_KEYS:
		low, high = paramlib.PARAM_RANGES[key]
		lines.append(f"- {paramlib.CAMEL_KEYS[key]}: {low} - {high}")
	lines.append("")
	lines.append("RESPOND WITH ONLY A VALID JSON OBJECT:")
	lines.append("{")
	for key in paramlib.PARAM_KEYS:
		lines.append(f'  "{paramlib.CAMEL_KEYS[key]}": <number>,')
	lines.append(f'  "notes": "<brief explanation of your reasoning, in {language_name}>"')
	lines.append("}")
	return "\n".join(lines)

#============================================

def strip_code_fence(text: str) -> str:
	result = text.strip()
	if result.startswith("```json"):
		result = result[7:]
	elif result.startswith("```"):
		result = result[3:]
	if result.endswith("```"):
		result = result[:-3]
	return result.strip()

#============================================

def parse_params_reply(content: str) -> dict:
	"""
	Parse a model reply into {'params', 'notes'}.

	Args:
		content: Raw assistant message text.

	Returns:
		dict: params with snake_case keys, and notes.
	"""
	if not content:
		raise ExternalServiceFailure("empty response from refiner", service='refiner')
	try:
		parsed = json.loads(strip_code_fence(content))
	except ValueError as exc:
		raise ValidationFailure("refiner reply is not valid JSON") from exc
	if not isinstance(parsed, dict):
		raise ValidationFailure("refiner reply must be a JSON object")
	return {
		'params': paramlib.from_camel_params(parsed),
		'notes': str(parsed.get('notes', "")),
	}

#============================================

class ChatParamsRefiner():
	"""
	Parameter refiner backed by an OpenAI-compatible chat endpoint.
	"""

	def __init__(self, base_url: str, model: str, api_key_env: str = "GROQ_API_KEY",
		timeout: float = 60.0, temperature: float = 0.3, language: str = 'en',
		session=None):
		self.base_url = base_url.rstrip('/')
		self.model = model
		self.api_key_env = api_key_env
		self.timeout = timeout
		self.temperature = temperature
		self.language = language
		self.session = session if session is not None else http.build_session()

	#============================
	@classmethod
	def from_settings(cls, settings: dict):
		return cls(settings['refiner_url'], settings['refiner_model'],
			api_key_env=settings['refiner_api_key_env'],
			timeout=settings['refiner_timeout'],
			temperature=settings['refiner_temperature'])

	#============================
	def refine(self, request: dict) -> dict:
		"""
		Ask the model for parameters.

		Args:
			request: Output of params.build_refine_request().

		Returns:
			dict: {'params', 'notes'}; params are not yet validated.
		"""
		api_key = http.read_api_key(self.api_key_env, 'refiner')
		payload = {
			'model': self.model,
			'messages': [
				{'role': 'system', 'content': SYSTEM_PROMPT},
				{'role': 'user', 'content': build_params_prompt(request, self.language)},
			],
			'temperature': self.temperature,
			'max_tokens': 1000,
		}
		headers = {'Authorization': f"Bearer {api_key}"}
		utils.log(f"Requesting parameters from {self.model}")
		try:
			response = self.session.post(f"{self.base_url}/chat/completions",
				json=payload, headers=headers, timeout=self.timeout)
		except requests.exceptions.RequestException as exc:
			raise ExternalServiceFailure(f"refiner request failed: {exc}",
				service='refiner') from exc
		data = http.check_response(response, 'refiner')
		choices = data.get('choices') or []
		content = None
		if len(choices) > 0:
			content = (choices[0].get('message') or {}).get('content')
		return parse_params_reply(content)
