"""Advisory estimator: optional LLM-sourced water range and interval.

The scheduler only depends on the one-method :class:`AdvisoryEstimator`
protocol.  Any failure (no API key, transport error, timeout, unparsable or
out-of-range answer) comes back as ``None``.
"""

from __future__ import annotations

import json
import re
from typing import Any, Protocol

import httpx
import structlog

from app.config import Settings, get_settings
from app.engine.advisory import AdvisoryEstimate, AdvisoryRequest, validate_estimate

logger = structlog.get_logger("tarimsense.advisory")

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class AdvisoryEstimator(Protocol):
	async def estimate(self, request: AdvisoryRequest) -> AdvisoryEstimate | None: ...


class NullAdvisoryEstimator:
	"""Used when no advisory endpoint is configured."""

	async def estimate(self, request: AdvisoryRequest) -> AdvisoryEstimate | None:
		return None


class LLMAdvisoryEstimator:
	def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
		self.settings = settings or get_settings()
		self.transport = transport

	async def estimate(self, request: AdvisoryRequest) -> AdvisoryEstimate | None:
		try:
			text = await self._complete(self.build_prompt(request))
		except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
			logger.warning("advisory_unavailable", crop=request.crop_type, error=str(exc))
			return None

		estimate = validate_estimate(self.parse_payload(text))
		if estimate is None:
			logger.warning("advisory_rejected", crop=request.crop_type)
		return estimate

	@staticmethod
	def build_prompt(request: AdvisoryRequest) -> str:
		forecast = request.forecast
		return (
			"You are an agronomy assistant. Return JSON only.\n"
			f"Crop: {request.crop_type}\n"
			f"Soil: {request.soil_type}\n"
			f"Location: lat {request.latitude}, lon {request.longitude}\n"
			f"Month: {request.month}\n"
			"Forecast summary (next ~5 days): "
			f"avgTemp={forecast.avg_temp:.1f}°C, "
			f"avgHumidity={round(forecast.avg_humidity)}%, "
			f"totalRain={forecast.total_rain:.1f}mm.\n\n"
			"Return a JSON object with:\n"
			'{"waterMin": number, "waterMax": number, "intervalDays": number, '
			'"recommendedTimeRange": "HH:MM-HH:MM"}\n\n'
			"waterMin/waterMax are liters per square meter per irrigation. "
			"Be conservative, realistic for field irrigation."
		)

	@staticmethod
	def parse_payload(text: str) -> dict[str, Any] | None:
		match = _JSON_OBJECT.search(text or "")
		if match is None:
			return None
		try:
			parsed = json.loads(match.group(0))
		except json.JSONDecodeError:
			return None
		if not isinstance(parsed, dict):
			return None
		return parsed

	async def _complete(self, prompt: str) -> str:
		headers = {
			"x-api-key": self.settings.anthropic_api_key,
			"anthropic-version": "2023-06-01",
			"content-type": "application/json",
		}
		body = {
			"model": self.settings.anthropic_model,
			"max_tokens": 200,
			"messages": [{"role": "user", "content": prompt}],
		}

		async with httpx.AsyncClient(
			timeout=self.settings.advisory_timeout_seconds,
			transport=self.transport,
		) as client:
			response = await client.post(self.settings.anthropic_base_url, headers=headers, json=body)
			response.raise_for_status()
			payload = response.json()

		content = payload.get("content")
		if not isinstance(content, list) or not content:
			raise ValueError("advisory response has no content")
		return str(content[0].get("text") or "")


def build_advisory_estimator(settings: Settings | None = None) -> AdvisoryEstimator:
	settings = settings or get_settings()
	if not settings.anthropic_api_key:
		return NullAdvisoryEstimator()
	return LLMAdvisoryEstimator(settings)
