#!/usr/bin/env python3

import decimal
import math
import os
import shlex
import shutil
import subprocess
from fractions import Fraction

_QUIET_MODE = False

#============================================

def set_quiet_mode(enabled: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(enabled)

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def log(message: str) -> None:
	if _QUIET_MODE:
		return
	print(message)

#============================================

def run_process(cmd: list, capture_output: bool = True) -> subprocess.CompletedProcess:
	"""
	Run a subprocess command.

	Args:
		cmd: Command list to execute.
		capture_output: Capture stdout and stderr when True.

	Returns:
		subprocess.CompletedProcess: The completed process.
	"""
	showcmd = shlex.join(cmd)
	log(f"CMD: '{showcmd}'")
	proc = subprocess.run(cmd, capture_output=capture_output, text=True)
	if proc.returncode != 0:
		stderr_text = (proc.stderr or "").strip()
		raise RuntimeError(f"command failed: {showcmd}\n{stderr_text}")
	return proc

#============================================

def check_dependency(cmd_name: str) -> None:
	if shutil.which(cmd_name) is None:
		raise RuntimeError(f"missing dependency: {cmd_name}")
	return

#============================================

def ensure_file_exists(filepath: str) -> None:
	if not os.path.isfile(filepath):
		raise RuntimeError(f"file not found: {filepath}")
	return

#============================================

def parse_fps(raw_fps) -> Fraction:
	if raw_fps is None:
		raise RuntimeError("fps is required")
	if isinstance(raw_fps, bool):
		raise RuntimeError("fps must be int, float, or fraction string")
	if isinstance(raw_fps, int):
		return Fraction(raw_fps, 1)
	if isinstance(raw_fps, float):
		return Fraction(str(raw_fps))
	if isinstance(raw_fps, str):
		if '/' in raw_fps:
			parts = raw_fps.split('/')
			return Fraction(int(parts[0]), int(parts[1]))
		return Fraction(raw_fps)
	raise RuntimeError("fps must be int, float, or fraction string")

#============================================

def round_half_up_fraction(value: Fraction) -> int:
	numerator = value.numerator
	denominator = value.denominator
	whole = numerator // denominator
	remainder = numerator - (whole * denominator)
	if remainder * 2 >= denominator:
		return whole + 1
	return whole

#============================================

def frames_from_seconds(seconds: float, fps: Fraction) -> int:
	seconds_fraction = Fraction(str(seconds))
	frame_fraction = seconds_fraction * fps
	return round_half_up_fraction(frame_fraction)

#============================================

def seconds_to_millis(seconds: float) -> int:
	"""
	Convert seconds to integer milliseconds using half-up rounding.

	Args:
		seconds: Time in seconds.

	Returns:
		int: Time in milliseconds.
	"""
	value = decimal.Decimal(str(seconds))
	millis = value * decimal.Decimal(1000)
	millis = millis.quantize(decimal.Decimal("1"), rounding=decimal.ROUND_HALF_UP)
	result = int(millis)
	if result < 0:
		result = 0
	return result

#============================================

def format_timestamp(seconds: float) -> str:
	"""
	Format seconds as HH:MM:SS.mmm.

	Args:
		seconds: Time in seconds.

	Returns:
		str: Formatted timestamp.
	"""
	total_millis = seconds_to_millis(seconds)
	hours = total_millis // 3600000
	remainder = total_millis % 3600000
	minutes = remainder // 60000
	remainder = remainder % 60000
	seconds_part = remainder // 1000
	millis_part = remainder % 1000
	return f"{hours:02d}:{minutes:02d}:{seconds_part:02d}.{millis_part:03d}"

#============================================

def format_clock(seconds: float) -> str:
	"""
	Format seconds as M:SS, or H:MM:SS past the hour.
	"""
	if seconds < 0:
		seconds = 0.0
	hours = int(seconds // 3600)
	minutes = int((seconds % 3600) // 60)
	secs = int(math.floor(seconds % 60))
	if hours > 0:
		return f"{hours}:{minutes:02d}:{secs:02d}"
	return f"{minutes}:{secs:02d}"
