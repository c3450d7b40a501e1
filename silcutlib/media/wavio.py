#!/usr/bin/env python3

"""
wavio.py

Read and write PCM wav files as mono float samples in [-1, 1].
"""

# Standard Library
import wave

# PIP3 modules
import numpy

# local repo modules
from silcutlib.core.errors import InvalidInput

#============================================

DTYPE_MAP = {
	1: numpy.dtype('u1'),
	2: numpy.dtype('<i2'),
	4: numpy.dtype('<i4'),
}

#============================================

def get_wav_info(audio_path: str) -> dict:
	"""
	Get wav metadata.

	Args:
		audio_path: Audio file path.

	Returns:
		dict: channels, sample_rate, sample_width, total_frames, duration.
	"""
	with wave.open(audio_path, 'rb') as wav_handle:
		channels = wav_handle.getnchannels()
		sample_rate = wav_handle.getframerate()
		sample_width = wav_handle.getsampwidth()
		total_frames = wav_handle.getnframes()
	if sample_rate <= 0:
		raise InvalidInput("audio sample rate must be positive")
	if channels <= 0:
		raise InvalidInput("audio channel count must be positive")
	return {
		'channels': channels,
		'sample_rate': sample_rate,
		'sample_width': sample_width,
		'total_frames': total_frames,
		'duration': total_frames / float(sample_rate),
	}

#============================================

def read_wav_mono(audio_path: str) -> dict:
	"""
	Decode a wav file and downmix it to mono floats.

	Args:
		audio_path: Audio file path.

	Returns:
		dict: samples (float64 array), sample_rate, duration, channels.
	"""
	info = get_wav_info(audio_path)
	sample_width = info['sample_width']
	channels = info['channels']
	if sample_width not in DTYPE_MAP:
		raise InvalidInput("unsupported wav sample width")
	with wave.open(audio_path, 'rb') as wav_handle:
		data = wav_handle.readframes(info['total_frames'])
	samples = numpy.frombuffer(data, dtype=DTYPE_MAP[sample_width])
	if sample_width == 1:
		samples = samples.astype(numpy.int16) - 128
	frame_count = samples.size // channels
	if frame_count == 0:
		raise InvalidInput(f"no audio samples in {audio_path}")
	samples = samples[:frame_count * channels].astype(numpy.float64)
	if channels > 1:
		samples = numpy.mean(samples.reshape(frame_count, channels), axis=1)
	max_amplitude = float(2 ** (8 * sample_width - 1))
	samples = samples / max_amplitude
	return {
		'samples': samples,
		'sample_rate': info['sample_rate'],
		'duration': frame_count / float(info['sample_rate']),
		'channels': channels,
	}

#============================================

def write_wav_mono(audio_path: str, samples, sample_rate: int) -> str:
	"""
	Write mono float samples as 16-bit PCM.

	Negative values scale by 32768 and positive values by 32767.
	"""
	if sample_rate <= 0:
		raise InvalidInput("sample rate must be positive")
	values = numpy.clip(numpy.asarray(samples, dtype=numpy.float64), -1.0, 1.0)
	scaled = numpy.where(values < 0, values * 32768.0, values * 32767.0)
	pcm = numpy.round(scaled).astype('<i2')
	with wave.open(audio_path, 'wb') as wav_handle:
		wav_handle.setnchannels(1)
		wav_handle.setsampwidth(2)
		wav_handle.setframerate(int(sample_rate))
		wav_handle.writeframes(pcm.tobytes())
	return audio_path
