import sys
import os
import numpy as np
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from comparator.report_builder import ReportBuilder
from comparator.style_comparator import MismatchEntry
from core.pixel_diff import DiffResult
from core.raster import RasterImage


def test_no_differences_message():
    builder = ReportBuilder()
    assert builder.style_report([]) == 'No differences found. UI matches expected styles.'


def test_mismatch_report_lists_expected_and_actual():
    builder = ReportBuilder()
    report = builder.style_report([
        MismatchEntry('fontSize', '18px', '16px'),
        MismatchEntry('width', 120, None),
    ])
    assert report.startswith('2 style mismatches found:')
    assert 'fontSize mismatch:\n   Expected: 18px\n   Actual: 16px' in report
    assert 'width mismatch:\n   Expected: 120\n   Actual: null' in report


def test_single_mismatch_wording():
    builder = ReportBuilder()
    report = builder.style_report([MismatchEntry('color', 'red', 'blue')])
    assert report.startswith('1 style mismatch found:')


def test_style_report_data():
    builder = ReportBuilder()
    data = builder.style_report_data([MismatchEntry('color', 'red', 'blue')])
    assert data['mismatches'] == [{'property': 'color', 'expected': 'red', 'actual': 'blue'}]
    assert 'color mismatch' in data['report']


def test_diff_summary():
    builder = ReportBuilder()
    result = DiffResult(image=RasterImage(np.zeros((10, 20, 4), dtype=np.uint8)), mismatch_count=50)
    summary = builder.diff_summary(result, 0.1)
    assert summary == 'Visual diff 20x10: 50 of 200 pixels differ (75.00% similar) at threshold 0.1.'
