"""
Report Service Module
Client for the external text-generation service that writes the QA report.
"""

import base64
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from .errors import UpstreamServiceError
from .raster import RasterImage

logger = logging.getLogger(__name__)

PLACEHOLDER_REPORT = 'No report generated.'

QA_PROMPT = (
    'You are a precise UI QA assistant. Compare the two UI screenshots provided - one is the '
    'Figma design and the other is the actual implementation. Give a detailed visual comparison '
    'covering layout, alignment, spacing, font style and size, color (including even subtle '
    'differences), and any missing or extra elements. Be strict in identifying pixel-level '
    'differences, especially around buttons, headers, and icons. Highlight differences clearly '
    'and do not ignore small color or font mismatches. Please format the response as Figma vs '
    'Implemented and include a summary table at the end.'
)

GEMINI_ENDPOINT = 'https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent'


class ReportClient(ABC):
    @abstractmethod
    def generate(self, design: RasterImage, actual: RasterImage) -> str:
        """Return free-text report comparing the two images. Raises UpstreamServiceError."""


class GeminiReportClient(ReportClient):
    def __init__(self,
                 api_key: str,
                 model: str = 'gemini-2.0-flash',
                 prompt: str = QA_PROMPT,
                 timeout: float = 60.0,
                 http_client: Optional[httpx.Client] = None):
        self.api_key = api_key
        self.model = model
        self.prompt = prompt
        self.timeout = timeout
        self._http = http_client

    def _payload(self, design: RasterImage, actual: RasterImage) -> dict:
        def inline(image: RasterImage) -> dict:
            return {'inlineData': {'mimeType': 'image/png',
                                   'data': base64.b64encode(image.to_png_bytes()).decode('ascii')}}
        return {'contents': [{'parts': [{'text': self.prompt}, inline(design), inline(actual)]}]}

    def generate(self, design: RasterImage, actual: RasterImage) -> str:
        url = GEMINI_ENDPOINT.format(model=self.model)
        client = self._http or httpx.Client(timeout=self.timeout)
        try:
            response = client.post(url, params={'key': self.api_key}, json=self._payload(design, actual))
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamServiceError(f"report service returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise UpstreamServiceError(f"report service request failed: {e}") from e
        except ValueError as e:
            raise UpstreamServiceError("report service returned invalid JSON") from e
        finally:
            if self._http is None:
                client.close()
        try:
            text = data['candidates'][0]['content']['parts'][0]['text']
        except (KeyError, IndexError, TypeError):
            text = None
        if not text or not str(text).strip():
            raise UpstreamServiceError("report service returned no text")
        logger.info("Report service returned %d characters", len(text))
        return text


def generate_report_or_placeholder(client: Optional[ReportClient],
                                   design: RasterImage,
                                   actual: RasterImage) -> str:
    """Ask the report service for a report, degrading to a placeholder on failure."""
    if client is None:
        logger.warning("No report service configured; using placeholder report")
        return PLACEHOLDER_REPORT
    try:
        return client.generate(design, actual)
    except UpstreamServiceError as e:
        logger.warning("Report generation failed: %s", e)
        return PLACEHOLDER_REPORT
