"""
Style Comparator Module
Shallow key-by-key comparison of expected and actual style snapshots.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Union

from core.style_snapshot import StyleSnapshot

SnapshotLike = Union[StyleSnapshot, Mapping[str, Any]]


@dataclass(frozen=True)
class MismatchEntry:
    property: str
    expected: Any
    actual: Any

    def to_dict(self):
        return {'property': self.property, 'expected': self.expected, 'actual': self.actual}


def _as_mapping(snapshot: SnapshotLike) -> Mapping[str, Any]:
    if isinstance(snapshot, StyleSnapshot):
        return snapshot.to_dict()
    return snapshot


def _is_nested(value: Any) -> bool:
    return isinstance(value, (dict, list, tuple))


def _kind(value: Any):
    if isinstance(value, bool):
        return bool
    if isinstance(value, (int, float)):
        return float
    return type(value)


def _same(expected: Any, actual: Any) -> bool:
    # "16px" != 16 and True != 1, but 16 == 16.0 as in JSON
    return _kind(expected) is _kind(actual) and expected == actual


class StyleComparator:
    def compare(self, expected: SnapshotLike, actual: SnapshotLike) -> List[MismatchEntry]:
        """
        Compare every scalar key of ``expected`` against ``actual``.

        Nested values (input field lists, dropdown options) are skipped.
        A key missing from ``actual`` reads as None.
        """
        expected_map = _as_mapping(expected)
        actual_map = _as_mapping(actual)
        mismatches = []
        for key, expected_value in expected_map.items():
            if _is_nested(expected_value):
                continue
            actual_value = actual_map.get(key)
            if not _same(expected_value, actual_value):
                mismatches.append(MismatchEntry(key, expected_value, actual_value))
        return mismatches
