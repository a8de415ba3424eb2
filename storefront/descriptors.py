"""Descriptor-driven table and form modal.

Columns and form fields are plain data. ``build_table`` and ``build_form``
turn them plus records into view models that the ``_table.html`` and
``_modal.html`` macros render, so one pair of templates serves every admin
resource.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, NamedTuple, Optional, Sequence, Union

from markupsafe import Markup

FieldKind = Literal["text", "number", "email", "select", "textarea"]
FIELD_KINDS = ("text", "number", "email", "select", "textarea")

_MISSING = object()


def get_path(record: Any, path: str, default: Any = None) -> Any:
    """Safe navigation over mappings and attribute objects.

    ``get_path(user, "user_details.email")`` returns the nested value, or
    ``default`` as soon as any step is missing or ``None``.
    """
    current = record
    for part in path.split("."):
        if current is None:
            return default
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return default
    return default if current is None else current


Renderer = Callable[[Any, Any], Union[str, Markup]]


@dataclass
class Column:
    key: str
    label: str
    render: Optional[Renderer] = None
    accessor: Optional[Callable[[Any], Any]] = None

    def value(self, record: Any) -> Any:
        if self.accessor is not None:
            return self.accessor(record)
        return get_path(record, self.key)

    def cell(self, record: Any) -> Union[str, Markup]:
        value = self.value(record)
        if self.render is not None:
            return self.render(value, record)
        return "" if value is None else str(value)


class Option(NamedTuple):
    value: Union[str, int]
    label: str


@dataclass
class FormField:
    name: str
    label: str
    kind: FieldKind = "text"
    required: bool = False
    options: List[Option] = field(default_factory=list)
    placeholder: Optional[str] = None

    def __post_init__(self):
        if self.kind not in FIELD_KINDS:
            raise ValueError(f"unknown field kind: {self.kind}")

    @property
    def empty_value(self) -> Union[int, str]:
        return 0 if self.kind == "number" else ""


class TableRow(NamedTuple):
    id: int
    cells: List[Union[str, Markup]]
    armed: bool


class TableView(NamedTuple):
    title: str
    headers: List[str]
    rows: List[TableRow]
    can_create: bool
    can_edit: bool
    can_delete: bool

    @property
    def has_actions(self) -> bool:
        return self.can_edit or self.can_delete

    @property
    def empty_message(self) -> str:
        return f"No {self.title.lower()} found"


def build_table(
    title: str,
    records: Sequence[Any],
    columns: Sequence[Column],
    *,
    can_create: bool = False,
    can_edit: bool = False,
    can_delete: bool = False,
    armed_id: Optional[int] = None,
) -> TableView:
    rows = [
        TableRow(id=get_path(r, "id"), cells=[c.cell(r) for c in columns], armed=armed_id is not None and get_path(r, "id") == armed_id)
        for r in records
    ]
    return TableView(
        title=title,
        headers=[c.label for c in columns],
        rows=rows,
        can_create=can_create,
        can_edit=can_edit,
        can_delete=can_delete,
    )


def initial_values(fields: Sequence[FormField], initial: Optional[Mapping] = None) -> Dict[str, Any]:
    """Seed form values.

    Without ``initial`` every field gets its kind's empty value. With it, each
    field is looked up by its literal name: dotted names are not traversed, so
    nested values (``userDetails.firstName``) open empty, matching the flat
    shape ``collect_submission`` sends back.
    """
    if initial is None:
        return {f.name: f.empty_value for f in fields}
    values = {}
    for f in fields:
        value = initial.get(f.name)
        values[f.name] = f.empty_value if value is None else value
    return values


def coerce_number(raw: Any) -> Any:
    if isinstance(raw, (int, float)):
        return raw
    text = str(raw).strip()
    if text == "":
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def collect_submission(fields: Sequence[FormField], form: Mapping) -> Dict[str, Any]:
    """Package a submitted form into one flat mapping of exactly the declared names."""
    data = {}
    for f in fields:
        raw = form.get(f.name, f.empty_value)
        data[f.name] = coerce_number(raw) if f.kind == "number" else ("" if raw is None else str(raw))
    return data


class FormView(NamedTuple):
    title: str
    action: str
    fields: List[FormField]
    values: Dict[str, Any]
    editing: bool

    @property
    def submit_label(self) -> str:
        return "Update" if self.editing else "Create"


def build_form(
    title: str,
    action: str,
    fields: Sequence[FormField],
    initial: Optional[Mapping] = None,
    submitted: Optional[Mapping] = None,
    editing: Optional[bool] = None,
) -> FormView:
    # A re-rendered failed submit shows what the user typed.
    values = dict(submitted) if submitted is not None else initial_values(fields, initial)
    if editing is None:
        editing = initial is not None
    return FormView(title=title, action=action, fields=list(fields), values=values, editing=editing)
