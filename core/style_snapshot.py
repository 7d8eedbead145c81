"""
Style Snapshot Module
Normalized record of an element's computed style and structural content.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

Number = Union[int, float]

FONT_WEIGHT_ALIASES = {
    'normal': '400',
    'bold': '700',
}

FONT_WEIGHT_NAMES = {
    '100': 'thin',
    '200': 'extra-light',
    '300': 'light',
    '400': 'normal',
    '500': 'medium',
    '600': 'semi-bold',
    '700': 'bold',
    '800': 'extra-bold',
    '900': 'black',
}

# Serialized name -> attribute name. Order is the serialization order.
FIELD_NAMES = {
    'tag': 'tag',
    'textContent': 'text_content',
    'placeholder': 'placeholder',
    'inputFields': 'input_fields',
    'dropdownOptions': 'dropdown_options',
    'fontFamily': 'font_family',
    'fontSize': 'font_size',
    'fontWeight': 'font_weight',
    'fontWeightName': 'font_weight_name',
    'color': 'color',
    'backgroundColor': 'background_color',
    'padding': 'padding',
    'margin': 'margin',
    'textAlign': 'text_align',
    'display': 'display',
    'position': 'position',
    'width': 'width',
    'height': 'height',
    'style': 'style',
}


def normalize_font_weight(weight: Any) -> Tuple[Optional[str], Optional[str]]:
    """
    Map a computed font-weight to (numeric value, canonical name).

    >>> normalize_font_weight('bold')
    ('700', 'bold')
    >>> normalize_font_weight('650')
    ('650', None)
    """
    if weight is None:
        return None, None
    value = str(weight).strip()
    value = FONT_WEIGHT_ALIASES.get(value.lower(), value)
    return value, FONT_WEIGHT_NAMES.get(value)


@dataclass(frozen=True)
class InputField:
    type: str
    name: Optional[str] = None
    placeholder: Optional[str] = None
    value: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'name': self.name,
            'placeholder': self.placeholder,
            'value': self.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'InputField':
        return cls(
            type=data.get('type') or 'text',
            name=data.get('name') or None,
            placeholder=data.get('placeholder') or None,
            value=data.get('value') or '',
        )


@dataclass(frozen=True)
class StyleSnapshot:
    tag: str
    text_content: str = ''
    placeholder: Optional[str] = None
    input_fields: Tuple[InputField, ...] = ()
    dropdown_options: Tuple[str, ...] = ()
    font_family: Optional[str] = None
    font_size: Optional[str] = None
    font_weight: Optional[str] = None
    font_weight_name: Optional[str] = None
    color: Optional[str] = None
    background_color: Optional[str] = None
    padding: Optional[str] = None
    margin: Optional[str] = None
    text_align: Optional[str] = None
    display: Optional[str] = None
    position: Optional[str] = None
    width: Number = 0
    height: Number = 0
    style: Optional[str] = None
    extra: Mapping[str, str] = field(default_factory=dict)

    # extra is a read-only view, so snapshots compare by value but are not hashable
    __hash__ = None

    def __post_init__(self):
        object.__setattr__(self, 'extra', MappingProxyType(dict(self.extra)))

    @classmethod
    def from_computed(cls, raw: Mapping[str, Any]) -> 'StyleSnapshot':
        """Build a snapshot from the raw browser extraction payload, normalizing font weight."""
        font_weight, font_weight_name = normalize_font_weight(raw.get('fontWeight'))
        return cls(
            tag=str(raw.get('tag') or ''),
            text_content=(raw.get('textContent') or '').strip(),
            placeholder=raw.get('placeholder') or None,
            input_fields=tuple(InputField.from_dict(f) for f in raw.get('inputFields') or []
                               if (f.get('type') or '').lower() != 'hidden'),
            dropdown_options=tuple((o or '').strip() for o in raw.get('dropdownOptions') or []),
            font_family=raw.get('fontFamily'),
            font_size=raw.get('fontSize'),
            font_weight=font_weight,
            font_weight_name=font_weight_name,
            color=raw.get('color'),
            background_color=raw.get('backgroundColor'),
            padding=raw.get('padding'),
            margin=raw.get('margin'),
            text_align=raw.get('textAlign'),
            display=raw.get('display'),
            position=raw.get('position'),
            width=raw.get('width') or 0,
            height=raw.get('height') or 0,
            style=raw.get('style') or None,
            extra=dict(raw.get('extra') or {}),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'StyleSnapshot':
        """Load a serialized snapshot. Unknown top-level keys are rejected."""
        unknown = set(data) - set(FIELD_NAMES) - {'extra'}
        if unknown:
            raise ValueError(f"unknown style snapshot keys: {', '.join(sorted(unknown))}")
        if 'tag' not in data:
            raise ValueError("style snapshot requires a 'tag'")
        kwargs = {attr: data[key] for key, attr in FIELD_NAMES.items() if key in data}
        kwargs['input_fields'] = tuple(InputField.from_dict(f) for f in data.get('inputFields') or [])
        kwargs['dropdown_options'] = tuple(data.get('dropdownOptions') or [])
        kwargs['extra'] = dict(data.get('extra') or {})
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase vocabulary used by the HTTP API and JSON files."""
        out: Dict[str, Any] = {}
        for key, attr in FIELD_NAMES.items():
            value = getattr(self, attr)
            if attr == 'input_fields':
                value = [f.to_dict() for f in value]
            elif attr == 'dropdown_options':
                value = list(value)
            out[key] = value
        if self.extra:
            out['extra'] = dict(self.extra)
        return out
