"""
Report Builder Module
Renders style mismatch and pixel diff summaries using Jinja2 templates.
"""

import json
from typing import Any, Dict, List, Optional

from jinja2 import DictLoader, Environment, StrictUndefined

from core.pixel_diff import DiffResult

from .style_comparator import MismatchEntry

TEMPLATES = {
    'style_report.txt': (
        "{% if not mismatches %}"
        "No differences found. UI matches expected styles."
        "{% else %}"
        "{{ mismatches|length }} style mismatch{{ 'es' if mismatches|length != 1 else '' }} found:\n"
        "{% for m in mismatches %}"
        "\n{{ m.property }} mismatch:\n"
        "   Expected: {{ m.expected|display }}\n"
        "   Actual: {{ m.actual|display }}\n"
        "{% endfor %}"
        "{% endif %}"
    ),
    'diff_summary.txt': (
        "Visual diff {{ result.width }}x{{ result.height }}: "
        "{{ result.mismatch_count }} of {{ result.total_pixels }} pixels differ "
        "({{ '%.2f'|format(result.similarity * 100) }}% similar)"
        "{% if result.antialiased_count %}, {{ result.antialiased_count }} anti-aliased pixels ignored{% endif %}"
        "{% if threshold is not none %} at threshold {{ threshold }}{% endif %}."
    ),
}


def _display(value: Any) -> str:
    # Strings are shown verbatim; everything else as JSON so None reads as null.
    if isinstance(value, str):
        return value
    return json.dumps(value)


class ReportBuilder:
    def __init__(self):
        self.env = Environment(loader=DictLoader(TEMPLATES),
                               undefined=StrictUndefined,
                               keep_trailing_newline=False,
                               autoescape=False)
        self.env.filters['display'] = _display

    def style_report(self, mismatches: List[MismatchEntry]) -> str:
        """Human-readable list of style mismatches."""
        return self.env.get_template('style_report.txt').render(mismatches=mismatches).rstrip()

    def diff_summary(self, result: DiffResult, threshold: Optional[float] = None) -> str:
        return self.env.get_template('diff_summary.txt').render(result=result, threshold=threshold)

    def style_report_data(self, mismatches: List[MismatchEntry]) -> Dict[str, Any]:
        return {
            'mismatches': [m.to_dict() for m in mismatches],
            'report': self.style_report(mismatches),
        }
