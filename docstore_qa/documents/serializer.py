"""Canonical text rendering of schemaless records.

The rendered text is both what gets embedded and what is shown to the
generation model as context, so it is deterministic and preserves the
record's own key order.
"""

import json
from collections.abc import Mapping, Set
from datetime import UTC, date, datetime
from typing import Any

from docstore_qa.logging_config import get_logger

logger = get_logger(__name__)

FIELD_SEPARATOR = ", "


def _is_sequence(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return False
    return isinstance(value, (list, tuple, Set))


def _items(value: Any) -> list[Any]:
    # Sets have no stable iteration order
    if isinstance(value, Set):
        return sorted(value, key=str)
    return list(value)


def _render_date(value: date) -> str:
    if isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%d")


def _render_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if _is_sequence(value):
        return _items(value)
    return str(value)


class DocumentSerializer:
    """Render records as ``key: value`` text.

    Each value is dispatched on what it can do rather than on its concrete
    type: mappings become compact JSON, sequences become bracketed lists,
    dates drop their time of day, and anything else uses its string form.
    """

    def __init__(self, id_field: str = "_id") -> None:
        self.id_field = id_field

    def serialize(self, collection_name: str, record: Mapping[str, Any]) -> str:
        """Build the embeddable text for a record.

        Args:
            collection_name: Source collection the record belongs to.
            record: The record itself.

        Returns:
            ``Collection: <name>\\nDocument: <fields>``.
        """
        return f"Collection: {collection_name}\nDocument: {self.format_record(record)}"

    def format_record(self, record: Mapping[str, Any]) -> str:
        """Join every field of the record in iteration order."""
        return FIELD_SEPARATOR.join(
            f"{key}: {self.render_field(key, value)}" for key, value in record.items()
        )

    def render_field(self, key: str, value: Any) -> str:
        """Render one field, never raising."""
        try:
            if key == self.id_field:
                return str(value)
            return self.render_value(value)
        except Exception as e:
            logger.warning(
                f"Could not render field {key!r}, using plain string form: {e}",
                extra={"field": key, "value_type": type(value).__name__},
            )
            return self._best_effort(value)

    def render_value(self, value: Any) -> str:
        if _is_sequence(value):
            rendered = (self._render_item(v) for v in _items(value))
            return "[" + FIELD_SEPARATOR.join(rendered) + "]"
        return self._render_item(value)

    def _render_item(self, value: Any) -> str:
        if isinstance(value, date):
            return _render_date(value)
        if isinstance(value, Mapping):
            return json.dumps(
                value,
                separators=(",", ":"),
                ensure_ascii=False,
                default=_json_default,
            )
        if _is_sequence(value):
            return json.dumps(
                _items(value),
                separators=(",", ":"),
                ensure_ascii=False,
                default=_json_default,
            )
        return _render_scalar(value)

    @staticmethod
    def _best_effort(value: Any) -> str:
        try:
            return str(value)
        except Exception:
            return object.__repr__(value)
