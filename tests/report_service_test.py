import sys
import os
import json
import httpx
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from core.report_service import (
    GeminiReportClient, ReportClient, generate_report_or_placeholder, PLACEHOLDER_REPORT, QA_PROMPT
)
from core.errors import UpstreamServiceError
from core.raster import RasterImage

DESIGN = RasterImage.blank(4, 4)
ACTUAL = RasterImage.blank(4, 4)


def client_returning(status, body, seen=None):
    def handler(request):
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=body)
    return GeminiReportClient('secret', http_client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_report_text_extracted():
    seen = []
    body = {'candidates': [{'content': {'parts': [{'text': 'Header font differs.'}]}}]}
    client = client_returning(200, body, seen)
    assert client.generate(DESIGN, ACTUAL) == 'Header font differs.'

    request = seen[0]
    assert request.url.params['key'] == 'secret'
    assert 'gemini-2.0-flash:generateContent' in request.url.path
    parts = json.loads(request.content)['contents'][0]['parts']
    assert parts[0]['text'] == QA_PROMPT
    assert [p['inlineData']['mimeType'] for p in parts[1:]] == ['image/png', 'image/png']


def test_http_error_is_upstream_error():
    client = client_returning(500, {'error': 'boom'})
    with pytest.raises(UpstreamServiceError):
        client.generate(DESIGN, ACTUAL)


def test_empty_candidates_is_upstream_error():
    client = client_returning(200, {'candidates': []})
    with pytest.raises(UpstreamServiceError):
        client.generate(DESIGN, ACTUAL)


def test_placeholder_on_failure():
    client = client_returning(503, {})
    assert generate_report_or_placeholder(client, DESIGN, ACTUAL) == PLACEHOLDER_REPORT


def test_placeholder_without_client():
    assert generate_report_or_placeholder(None, DESIGN, ACTUAL) == PLACEHOLDER_REPORT


def test_custom_client_passthrough():
    class Canned(ReportClient):
        def generate(self, design, actual):
            return 'ok'

    assert generate_report_or_placeholder(Canned(), DESIGN, ACTUAL) == 'ok'
