#!/usr/bin/env python3

"""
history.py

Recent analysis runs kept in a small key-value store, newest first.
"""

# Standard Library
import os
import time
import uuid

# PIP3 modules
import yaml

#============================================

HISTORY_KEY = 'silence_cutter_history'
MAX_ENTRIES = 20

#============================================
class MemoryStore():
	def __init__(self):
		self.data = {}

	def get(self, key: str):
		return self.data.get(key)

	def set(self, key: str, value) -> None:
		self.data[key] = value

	def delete(self, key: str) -> None:
		self.data.pop(key, None)

#============================================
class YamlFileStore():
	"""
	Key-value store backed by a single YAML mapping on disk.
	"""

	def __init__(self, path: str):
		self.path = path

	#============================
	def _read(self) -> dict:
		if not os.path.isfile(self.path):
			return {}
		with open(self.path, 'r', encoding='utf-8') as handle:
			data = yaml.safe_load(handle)
		if data is None:
			return {}
		if not isinstance(data, dict):
			raise RuntimeError(f"history file must be a mapping: {self.path}")
		return data

	#============================
	def _write(self, data: dict) -> None:
		os.makedirs(os.path.dirname(self.path) or '.', exist_ok=True)
		with open(self.path, 'w', encoding='utf-8') as handle:
			yaml.safe_dump(data, handle, sort_keys=False, default_flow_style=False)

	#============================
	def get(self, key: str):
		return self._read().get(key)

	#============================
	def set(self, key: str, value) -> None:
		data = self._read()
		data[key] = value
		self._write(data)

	#============================
	def delete(self, key: str) -> None:
		data = self._read()
		if key in data:
			del data[key]
			self._write(data)

#============================================
class HistoryLog():
	"""
	History entries for finished analyses.

	Args:
		store: Object with get/set/delete.
		max_entries: Entries kept after each add.
	"""

	def __init__(self, store, max_entries: int = MAX_ENTRIES):
		self.store = store
		self.max_entries = max_entries

	#============================
	def list(self) -> list:
		entries = self.store.get(HISTORY_KEY)
		if not isinstance(entries, list):
			return []
		return entries

	#============================
	def add(self, file_name: str, original_duration: float, final_duration: float,
		preset: str, content_type: str, kept_segments: list) -> dict:
		"""
		Record one analysis run.

		Args:
			file_name: Source media name.
			original_duration: Source duration in seconds.
			final_duration: Duration after cuts in seconds.
			preset: Preset used.
			content_type: Content type used.
			kept_segments: Kept segments with start/end.

		Returns:
			dict: The stored entry.
		"""
		kept = [
			{'start': float(segment['start']), 'end': float(segment['end'])}
			for segment in kept_segments
		]
		entry = {
			'id': str(uuid.uuid4()),
			'timestamp': int(time.time() * 1000),
			'file_name': file_name,
			'original_duration': float(original_duration),
			'final_duration': float(final_duration),
			'time_removed': float(original_duration) - float(final_duration),
			'number_of_cuts': len(kept) - 1 if len(kept) > 0 else 0,
			'preset': preset,
			'content_type': content_type,
			'kept_segments': kept,
		}
		entries = [entry] + self.list()
		self.store.set(HISTORY_KEY, entries[:self.max_entries])
		return entry

	#============================
	def get(self, entry_id: str):
		for entry in self.list():
			if entry.get('id') == entry_id:
				return entry
		return None

	#============================
	def delete(self, entry_id: str) -> bool:
		entries = self.list()
		remaining = [entry for entry in entries if entry.get('id') != entry_id]
		self.store.set(HISTORY_KEY, remaining)
		return len(remaining) != len(entries)

	#============================
	def clear(self) -> None:
		self.store.delete(HISTORY_KEY)
