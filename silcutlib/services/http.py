#!/usr/bin/env python3

"""
http.py

Shared requests session setup for the OpenAI-compatible services.
"""

# Standard Library
import os

# PIP3 modules
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

# local repo modules
from silcutlib.core.errors import ExternalServiceFailure

#============================================

RETRY_STATUS = [500, 502, 503, 504]

#============================================

def build_session(max_retries: int = 3, backoff_factor: float = 0.5) -> requests.Session:
	"""
	Create a session that retries server errors on GET and POST.

	429 is left out of the retry list so rate limits surface to the caller.
	"""
	session = requests.Session()
	retry_strategy = Retry(
		total=max_retries,
		backoff_factor=backoff_factor,
		status_forcelist=RETRY_STATUS,
		allowed_methods=["GET", "POST"],
	)
	adapter = HTTPAdapter(max_retries=retry_strategy)
	session.mount("http://", adapter)
	session.mount("https://", adapter)
	return session

#============================================

def read_api_key(env_name: str, service: str) -> str:
	api_key = os.environ.get(env_name, "").strip()
	if not api_key:
		raise ExternalServiceFailure(f"{env_name} is not set", service=service)
	return api_key

#============================================

def check_response(response, service: str) -> dict:
	"""
	Turn an HTTP response into parsed JSON or an ExternalServiceFailure.

	Args:
		response: requests.Response.
		service: Service name for the error.

	Returns:
		dict: Parsed JSON body.
	"""
	if response.status_code == 429:
		raise ExternalServiceFailure("rate limit exceeded", service=service,
			status_code=429)
	if response.status_code != 200:
		detail = (response.text or "").strip()[:200]
		raise ExternalServiceFailure(
			f"{service} request failed: HTTP {response.status_code} {detail}",
			service=service, status_code=response.status_code)
	try:
		return response.json()
	except ValueError as exc:
		raise ExternalServiceFailure(f"{service} returned invalid JSON",
			service=service, status_code=response.status_code) from exc
