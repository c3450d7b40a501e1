#!/usr/bin/env python3

"""
Error types raised by the silence cutter.

Everything derives from RuntimeError so callers that already catch
RuntimeError around media tooling keep working.
"""

#============================================

class SilcutError(RuntimeError):
	pass

#============================================

class InvalidInput(SilcutError):
	"""Empty or malformed audio, zero-duration media, unknown presets."""
	pass

#============================================

class ExternalServiceFailure(SilcutError):
	"""A transcription or parameter refinement call failed."""

	def __init__(self, message: str, service: str = None, status_code: int = None):
		super().__init__(message)
		self.service = service
		self.status_code = status_code

#============================================

class ValidationFailure(ExternalServiceFailure):
	"""Refiner output fell outside the declared parameter ranges."""

	def __init__(self, message: str, field: str = None, value=None):
		super().__init__(message, service='refiner')
		self.field = field
		self.value = value
