#!/usr/bin/env python3

"""
transcript.py

Build speech segments from word-level transcription timestamps, and
summarize the pauses between words.
"""

# local repo modules
from silcutlib.core import segments as seglib

#============================================

LABEL_WORDS = 5
PAUSE_IGNORE_MS = 50
PAUSE_SHORT_MS = 300
PAUSE_LONG_MS = 800

#============================================

def collect_words(transcription: dict) -> list:
	"""
	Flatten a transcription result into a sorted word list.

	Segments without word timestamps contribute one pseudo-word spanning
	the whole segment.

	Args:
		transcription: Transcription result with a segments list.

	Returns:
		list: Words as {'word', 'start', 'end'} sorted by start.
	"""
	words = []
	for segment in transcription.get('segments', []) or []:
		segment_words = segment.get('words')
		if segment_words:
			for word in segment_words:
				words.append({
					'word': str(word.get('word', "")),
					'start': float(word.get('start', 0.0)),
					'end': float(word.get('end', 0.0)),
				})
		else:
			words.append({
				'word': str(segment.get('text', "")),
				'start': float(segment.get('start', 0.0)),
				'end': float(segment.get('end', 0.0)),
			})
	words.sort(key=lambda item: item['start'])
	return words

#============================================

def build_label(words: list) -> str:
	label = " ".join(word.strip() for word in words[:LABEL_WORDS])
	if len(words) > LABEL_WORDS:
		label += "..."
	return label

#============================================

def segments_from_words(words: list, params: dict, video_duration: float) -> list:
	"""
	Group words into padded speech segments split at long pauses.

	Both edges are padded by pre_pad_ms. The gap to each word is measured
	from the unpadded end of the running segment. A word joins the running
	segment when the gap is under either the minimum silence or the merge
	gap, so whichever threshold is looser wins.

	Args:
		words: Words sorted by start time.
		params: Detection parameters.
		video_duration: Media duration in seconds.

	Returns:
		list: Speech segments with labels, ids "0".."n-1".
	"""
	if len(words) == 0:
		return []
	ordered = sorted(words, key=lambda item: item['start'])
	minimum_silence = params['minimum_silence_ms'] / 1000.0
	merge_gap = params['merge_gap_ms'] / 1000.0
	pre_pad = params['pre_pad_ms'] / 1000.0
	groups = []
	current = None
	for word in ordered:
		if current is not None:
			gap = word['start'] - current['speech_end']
			if gap < minimum_silence or gap < merge_gap:
				current['speech_end'] = max(current['speech_end'], word['end'])
				current['words'].append(word['word'])
				continue
			groups.append(current)
		current = {
			'start': max(0.0, word['start'] - pre_pad),
			'speech_end': word['end'],
			'words': [word['word']],
		}
	groups.append(current)
	speech = []
	for group in groups:
		start = group['start']
		end = min(group['speech_end'] + pre_pad, video_duration)
		if end <= start:
			continue
		speech.append({
			'id': str(len(speech)),
			'start': start,
			'end': end,
			'duration': end - start,
			'enabled': True,
			'label': build_label(group['words']),
		})
	return merge_short_pauses(speech, params['keep_short_pauses_under_ms'])

#============================================

def merge_short_pauses(segments: list, keep_short_pauses_under_ms: float) -> list:
	"""
	Merge neighbours whose pause is at most keep_short_pauses_under_ms.

	Args:
		segments: Ordered speech segments.
		keep_short_pauses_under_ms: Pause threshold, inclusive.

	Returns:
		list: Merged speech segments, ids renumbered.
	"""
	if len(segments) == 0:
		return []
	merged = [dict(segments[0])]
	for segment in segments[1:]:
		current = merged[-1]
		gap_ms = (segment['start'] - current['end']) * 1000.0
		if gap_ms <= keep_short_pauses_under_ms:
			current['end'] = max(current['end'], segment['end'])
			current['duration'] = current['end'] - current['start']
			if current.get('label'):
				current['label'] = seglib.continued_label(current['label'])
		else:
			merged.append(dict(segment))
	for index, segment in enumerate(merged):
		segment['id'] = str(index)
	return merged

#============================================

def segments_from_transcription(transcription: dict, params: dict,
	video_duration: float) -> list:
	words = collect_words(transcription)
	return segments_from_words(words, params, video_duration)

#============================================

def calculate_pause_stats(transcription: dict) -> dict:
	"""
	Pause statistics between timestamped words.

	Gaps of 50 ms or less are not counted as pauses. Segments without word
	timestamps are ignored here.

	Args:
		transcription: Transcription result.

	Returns:
		dict: Pause counts, average/min/max in ms, and a distribution.
	"""
	words = []
	for segment in transcription.get('segments', []) or []:
		for word in segment.get('words') or []:
			words.append(word)
	words.sort(key=lambda item: item['start'])
	pauses = []
	for index in range(1, len(words)):
		gap = (words[index]['start'] - words[index - 1]['end']) * 1000.0
		if gap > PAUSE_IGNORE_MS:
			pauses.append(gap)
	if len(pauses) == 0:
		return {
			'total_pauses': 0,
			'avg_pause_ms': 0,
			'max_pause_ms': 0,
			'min_pause_ms': 0,
			'distribution': {'short': 0, 'medium': 0, 'long': 0},
		}
	short = len([pause for pause in pauses if pause < PAUSE_SHORT_MS])
	medium = len([pause for pause in pauses if PAUSE_SHORT_MS <= pause < PAUSE_LONG_MS])
	long_count = len([pause for pause in pauses if pause >= PAUSE_LONG_MS])
	return {
		'total_pauses': len(pauses),
		'avg_pause_ms': int(round(sum(pauses) / len(pauses))),
		'max_pause_ms': int(round(max(pauses))),
		'min_pause_ms': int(round(min(pauses))),
		'distribution': {'short': short, 'medium': medium, 'long': long_count},
	}

