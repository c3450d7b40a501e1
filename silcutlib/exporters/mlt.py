#!/usr/bin/env python3

"""
mlt.py

MLT XML project with the kept segments of one source on a single playlist,
for Shotcut and Kdenlive.
"""

# Standard Library
import os

# PIP3 modules
import lxml.etree

# local repo modules
from silcutlib.core import segments as seglib
from silcutlib.core import utils

#============================================

def reduce_fraction(num: int, den: int) -> tuple:
	if den == 0:
		return (num, den)
	a = num
	b = den
	while b != 0:
		a, b = b, a % b
	gcd = a if a != 0 else 1
	return (num // gcd, den // gcd)

#============================================
class MltExporter():
	def __init__(self, source_file: str, segments: list, output_file: str = None,
		fps=30, width: int = 1920, height: int = 1080):
		self.source_file = source_file
		self.segments = seglib.enabled_segments(segments)
		self.output_file = output_file or self._default_output_path()
		self.fps = utils.parse_fps(fps)
		self.width = width
		self.height = height
		self.root = None

	#============================
	def _default_output_path(self) -> str:
		base, _ = os.path.splitext(self.source_file)
		return base + "_silence_removed.mlt"

	#============================
	def build(self):
		self.root = lxml.etree.Element('mlt')
		self._emit_profile()
		self._emit_producer()
		self._emit_playlist()
		self._emit_tractor()
		return self.root

	#============================
	def export(self) -> str:
		self.build()
		self._write_output()
		return self.output_file

	#============================
	def _emit_profile(self) -> None:
		(display_num, display_den) = reduce_fraction(self.width, self.height)
		profile = lxml.etree.SubElement(self.root, 'profile')
		profile.set('description', 'silcut')
		profile.set('width', str(self.width))
		profile.set('height', str(self.height))
		profile.set('progressive', '1')
		profile.set('sample_aspect_num', '1')
		profile.set('sample_aspect_den', '1')
		profile.set('display_aspect_num', str(display_num))
		profile.set('display_aspect_den', str(display_den))
		profile.set('frame_rate_num', str(self.fps.numerator))
		profile.set('frame_rate_den', str(self.fps.denominator))
		profile.set('colorspace', '709')

	#============================
	def _emit_producer(self) -> None:
		producer = lxml.etree.SubElement(self.root, 'producer')
		producer.set('id', 'source_0001')
		self._set_property(producer, 'mlt_service', 'avformat')
		self._set_property(producer, 'resource', self.source_file)

	#============================
	def _emit_playlist(self) -> None:
		playlist_elem = lxml.etree.SubElement(self.root, 'playlist')
		playlist_elem.set('id', 'main')
		for segment in self.segments:
			start_frame = utils.frames_from_seconds(segment['start'], self.fps)
			end_frame = utils.frames_from_seconds(segment['end'], self.fps) - 1
			if end_frame < start_frame:
				continue
			playlist_entry = lxml.etree.SubElement(playlist_elem, 'entry')
			playlist_entry.set('producer', 'source_0001')
			playlist_entry.set('in', str(start_frame))
			playlist_entry.set('out', str(end_frame))

	#============================
	def _emit_tractor(self) -> None:
		tractor = lxml.etree.SubElement(self.root, 'tractor')
		tractor.set('id', 'tractor0')
		multitrack = lxml.etree.SubElement(tractor, 'multitrack')
		track_elem = lxml.etree.SubElement(multitrack, 'track')
		track_elem.set('producer', 'main')

	#============================
	def _set_property(self, parent, name: str, value: str) -> None:
		prop = lxml.etree.SubElement(parent, 'property')
		prop.set('name', name)
		prop.text = value

	#============================
	def _write_output(self) -> None:
		os.makedirs(os.path.dirname(self.output_file) or '.', exist_ok=True)
		tree = lxml.etree.ElementTree(self.root)
		tree.write(self.output_file, encoding='utf-8', xml_declaration=True,
			pretty_print=True)
