"""
Positioned-element model for report card templates.

A template is an ordered list of elements placed on a fixed A4 canvas
(794 x 1123 px at 96 DPI). Elements carry free-form `style` and `metadata`
dicts; the metadata decides what an element binds to (a dynamic field, a
subjects/traits table, a placeholder image...).
"""
import copy
import math
import random
import string
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from result_templates.fields import is_known_field

CANVAS_WIDTH = 794
CANVAS_HEIGHT = 1123

ELEMENT_TYPES = (
    'text', 'image', 'shape', 'dynamic', 'table', 'header', 'info-grid',
    'subjects-table', 'traits-panel', 'remarks-section', 'grading-legend',
)
LEVELS = ('primary', 'junior_secondary', 'senior_secondary', 'all')

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_element_id() -> str:
    """el_<epoch millis>_<9 base36 chars>; not stable across reloads"""
    suffix = ''.join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"el_{int(time.time() * 1000)}_{suffix}"


class TemplateFormatError(ValueError):
    """Raised when stored/posted template content cannot be parsed"""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__('; '.join(self.problems))


@dataclass
class CanvasSize:
    width: int = CANVAS_WIDTH
    height: int = CANVAS_HEIGHT

    def to_dict(self) -> Dict[str, Any]:
        return {'width': self.width, 'height': self.height}

    @staticmethod
    def from_dict(d: Optional[Dict[str, Any]]) -> "CanvasSize":
        if not d:
            return CanvasSize()
        if not isinstance(d, dict):
            raise TemplateFormatError(['canvasSize must be an object'])
        size = CanvasSize(width=d.get('width', CANVAS_WIDTH), height=d.get('height', CANVAS_HEIGHT))
        for value in (size.width, size.height):
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise TemplateFormatError(['canvasSize width and height must be numbers'])
        return size


@dataclass
class TemplateElement:
    type: str
    x: float
    y: float
    width: float
    height: float
    content: Optional[str] = None
    style: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=generate_element_id)

    @property
    def table_type(self):
        return self.metadata.get('tableType')

    @property
    def field_key(self):
        key = self.metadata.get('field')
        return key if isinstance(key, str) else None

    def problems(self, canvas: CanvasSize) -> List[str]:
        """Layout rule violations for this element (empty when valid)"""
        found = []
        label = f"Element {self.id} ({self.type})"
        if self.type not in ELEMENT_TYPES:
            found.append(f"{label}: unknown element type")
        if self.width <= 0 or self.height <= 0:
            found.append(f"{label}: width and height must be positive")
        if self.x < 0 or self.y < 0:
            found.append(f"{label}: position must not be negative")
        if self.x + self.width > canvas.width or self.y + self.height > canvas.height:
            found.append(f"{label}: extends beyond the {canvas.width}x{canvas.height} canvas")

        if self.type == 'dynamic':
            if not self.metadata.get('field'):
                found.append(f"{label}: dynamic element needs metadata.field")
            elif not self.field_key:
                found.append(f"{label}: metadata.field must be a string")
            elif not is_known_field(self.field_key):
                found.append(f"{label}: unknown dynamic field '{self.field_key}'")

        if self.type == 'table':
            found.extend(self._table_problems(label))
        return found

    def _table_problems(self, label):
        found = []
        for key in ('rows', 'cols'):
            value = self.metadata.get(key)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                found.append(f"{label}: metadata.{key} must be a whole number")
        lists = {}
        for key in ('headers', 'columnWidths', 'traits', 'skills'):
            value = self.metadata.get(key) or []
            if not isinstance(value, list):
                found.append(f"{label}: metadata.{key} must be a list")
                value = []
            lists[key] = value
        headers, widths = lists['headers'], lists['columnWidths']
        if len(headers) != len(widths):
            found.append(f"{label}: {len(headers)} headers but {len(widths)} column widths")
        return found

    def clone(self, fresh_id=True) -> "TemplateElement":
        twin = copy.deepcopy(self)
        if fresh_id:
            twin.id = generate_element_id()
        return twin

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'type': self.type,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
            'style': copy.deepcopy(self.style),
            'metadata': copy.deepcopy(self.metadata),
        }
        if self.content is not None:
            data['content'] = self.content
        return data

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TemplateElement":
        missing = [k for k in ('type', 'x', 'y', 'width', 'height') if k not in d]
        if missing:
            raise TemplateFormatError([f"Element is missing {', '.join(missing)}"])
        try:
            x, y, width, height = (float(d[k]) for k in ('x', 'y', 'width', 'height'))
        except (TypeError, ValueError):
            raise TemplateFormatError([f"Element {d.get('id', '?')}: coordinates must be numbers"])
        if not all(math.isfinite(v) for v in (x, y, width, height)):
            raise TemplateFormatError([f"Element {d.get('id', '?')}: coordinates must be finite numbers"])
        for key in ('style', 'metadata'):
            if d.get(key) is not None and not isinstance(d[key], dict):
                raise TemplateFormatError([f"Element {d.get('id', '?')}: {key} must be an object"])
        return TemplateElement(
            id=d.get('id') or generate_element_id(),
            type=d['type'],
            x=x,
            y=y,
            width=width,
            height=height,
            content=d.get('content'),
            style=dict(d.get('style') or {}),
            metadata=dict(d.get('metadata') or {}),
        )


@dataclass
class TemplateDefinition:
    name: str
    description: str = ''
    level: str = 'all'
    canvas_size: CanvasSize = field(default_factory=CanvasSize)
    elements: List[TemplateElement] = field(default_factory=list)

    def validate(self) -> List[str]:
        """All rule violations of this template; an empty list means valid"""
        found = []
        if self.level not in LEVELS:
            found.append(f"Unknown template level '{self.level}'")
        if (self.canvas_size.width, self.canvas_size.height) != (CANVAS_WIDTH, CANVAS_HEIGHT):
            found.append(f"Canvas must be {CANVAS_WIDTH}x{CANVAS_HEIGHT}")
        for element in self.elements:
            found.extend(element.problems(self.canvas_size))
        return found

    def find_table(self, table_type):
        for element in self.elements:
            if element.type == 'table' and element.table_type == table_type:
                return element
        return None

    def clone(self, fresh_ids=True) -> "TemplateDefinition":
        return TemplateDefinition(
            name=self.name,
            description=self.description,
            level=self.level,
            canvas_size=CanvasSize(self.canvas_size.width, self.canvas_size.height),
            elements=[el.clone(fresh_id=fresh_ids) for el in self.elements],
        )

    def derive(self, name, description, level='all', **table_changes):
        """Copy of this template with the metadata of named tables replaced.

        `table_changes` maps a tableType to the metadata keys to override,
        e.g. ``subjects={'headers': [...], 'cols': 7, 'columnWidths': [...]}``.
        """
        derived = self.clone()
        derived.name, derived.description, derived.level = name, description, level
        for element in derived.elements:
            if element.type == 'table' and element.table_type in table_changes:
                element.metadata.update(table_changes[element.table_type])
        return derived

    def editor_state(self) -> Dict[str, Any]:
        """Elements with fresh ids plus the canvas size, as the editor stores them"""
        return {
            'elements': [el.clone().to_dict() for el in self.elements],
            'canvasSize': self.canvas_size.to_dict(),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'description': self.description,
            'level': self.level,
            'canvasSize': self.canvas_size.to_dict(),
            'elements': [el.to_dict() for el in self.elements],
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TemplateDefinition":
        if not isinstance(d, dict):
            raise TemplateFormatError(['Template content must be an object'])
        elements = d.get('elements')
        if not isinstance(elements, list):
            raise TemplateFormatError(['Template content must have an elements list'])
        problems, parsed = [], []
        for raw in elements:
            if not isinstance(raw, dict):
                problems.append('Every element must be an object')
                continue
            try:
                parsed.append(TemplateElement.from_dict(raw))
            except TemplateFormatError as e:
                problems.extend(e.problems)
        if problems:
            raise TemplateFormatError(problems)
        return TemplateDefinition(
            name=d.get('name') or 'Untitled',
            description=d.get('description') or '',
            level=d.get('level') or 'all',
            canvas_size=CanvasSize.from_dict(d.get('canvasSize')),
            elements=parsed,
        )


def check_content(content):
    """Parse and validate posted template content.

    Returns ``(template, problems)``; `template` is None when the content
    could not be parsed at all.
    """
    try:
        template = TemplateDefinition.from_dict(content)
    except TemplateFormatError as e:
        return None, e.problems
    return template, template.validate()
