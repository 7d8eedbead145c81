"""
Web Interface for Design vs Implementation Comparison
"""

import functools
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from flask import Flask, jsonify, request

from comparator.report_builder import ReportBuilder
from comparator.style_comparator import StyleComparator
from core.browser import BrowserDriver
from core.config import Settings, load_settings
from core.errors import UIDiffError
from core.report_service import GeminiReportClient, ReportClient, generate_report_or_placeholder
from core.style_extractor import ElementStyleExtractor
from core.visual_diff import VisualDiff
from utils.logging_utils import configure_logging

logger = logging.getLogger(__name__)


def _error(message: str, status: int):
    return jsonify({'error': message}), status


def _parse_threshold(raw: Optional[str], default: float) -> float:
    if raw is None or raw == '':
        return default
    value = float(raw)
    if not 0.0 <= value <= 1.0:
        raise ValueError('threshold must be between 0 and 1')
    return value


def create_app(settings: Optional[Settings] = None,
               report_client: Optional[ReportClient] = None,
               driver_factory: Optional[Callable[[], BrowserDriver]] = None) -> Flask:
    """
    Build the Flask app.

    ``report_client`` and ``driver_factory`` default to the Gemini client
    (when an API key is configured) and headless Chromium via Playwright.
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    if report_client is None and settings.gemini_api_key:
        report_client = GeminiReportClient(settings.gemini_api_key, model=settings.gemini_model)
    if driver_factory is None:
        from visual.playwright_driver import PlaywrightDriver
        driver_factory = functools.partial(PlaywrightDriver, viewport=settings.viewport)

    app = Flask(__name__)
    app.config['UI_DIFF_SETTINGS'] = settings
    visual_diff = VisualDiff(target_width=settings.target_width)
    comparator = StyleComparator()
    reports = ReportBuilder()

    @app.after_request
    def add_cors_headers(response):
        response.headers['Access-Control-Allow-Origin'] = settings.allowed_origin
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, OPTIONS'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
        return response

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    @app.route('/upload', methods=['POST'])
    def upload():
        """Diff a design screenshot against an implementation screenshot."""
        figma = request.files.get('figma')
        actual = request.files.get('actual')
        if figma is None or actual is None:
            return _error('Both figma and actual image files are required', 400)
        try:
            threshold = _parse_threshold(request.form.get('threshold'), settings.threshold)
        except ValueError as e:
            return _error(f'Invalid threshold: {e}', 400)
        try:
            logger.info("Received files: %s, %s", figma.filename, actual.filename)
            comparison = visual_diff.compare(figma.read(), actual.read(), threshold)
            report = generate_report_or_placeholder(report_client, comparison.design, comparison.actual)
            diff = comparison.diff
            return jsonify({
                'report': report,
                'diffImage': diff.image.to_data_uri(),
                'mismatchCount': diff.mismatch_count,
                'similarity': diff.similarity,
                'summary': reports.diff_summary(diff, threshold),
                'stats': diff.to_dict(),
            })
        except UIDiffError as e:
            logger.warning("Image comparison failed: %s", e)
            return _error(str(e), e.http_status)
        except Exception:
            logger.exception("Image comparison failed")
            return _error('Image comparison failed.', 500)

    @app.route('/extract-live-element', methods=['POST'])
    def extract_live_element():
        """Screenshot one element of a live page and return its computed styles."""
        body = request.get_json(silent=True) or {}
        selector = body.get('selector')
        url = body.get('url')
        if not isinstance(selector, str) or not selector.strip() or not isinstance(url, str) or not url.strip():
            return _error('Missing selector or URL', 400)
        extractor = ElementStyleExtractor(
            driver_factory,
            output_dir=settings.output_dir,
            navigation_timeout_ms=settings.navigation_timeout_ms,
            selector_timeout_ms=settings.selector_timeout_ms,
        )
        try:
            result = extractor.extract(url.strip(), selector.strip())
            return jsonify({
                'screenshotBase64': result.screenshot.to_data_uri(),
                'computedStyles': result.snapshot.to_dict(),
            })
        except UIDiffError as e:
            logger.warning("Extraction failed: %s", e)
            return _error(str(e), e.http_status)
        except Exception as e:
            logger.exception("Extraction failed")
            return _error(str(e) or 'Extraction failed', 500)

    @app.route('/compare-styles', methods=['POST'])
    def compare_styles():
        """Compare an expected style JSON against an extracted snapshot."""
        body = request.get_json(silent=True) or {}
        expected = body.get('expected')
        actual = body.get('actual')
        if not isinstance(expected, dict) or not isinstance(actual, dict):
            return _error('Both expected and actual styles are required', 400)
        mismatches = comparator.compare(expected, actual)
        return jsonify(reports.style_report_data(mismatches))

    return app


if __name__ == '__main__':
    settings = load_settings()
    create_app(settings).run(host='0.0.0.0', port=settings.port)
