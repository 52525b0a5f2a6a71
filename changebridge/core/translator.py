"""Record translation between ServiceNow field names and canonical tickets.

The translator is driven entirely by a field table; it knows nothing
about individual fields. Mapping is sparse: a canonical field appears
only when its external counterpart is present, and unknown fields
are dropped.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .errors import MalformedPayloadError
from .models import CHANGE_TICKET_FIELDS, ChangeTicket, FieldMapping

logger = logging.getLogger(__name__)


class RecordTranslator:
    """Converts raw records to canonical change tickets and back."""

    def __init__(self, fields: Iterable[FieldMapping] = CHANGE_TICKET_FIELDS):
        self.fields = tuple(fields)
        canonical_names = [f.canonical for f in self.fields]
        if len(set(canonical_names)) != len(canonical_names):
            raise ValueError("canonical field names must be unique")

    def to_canonical(self, record: Mapping[str, Any]) -> ChangeTicket:
        """Map one external record to a canonical ticket."""
        if not isinstance(record, Mapping):
            raise MalformedPayloadError(
                f"Expected a record object, got {type(record).__name__}"
            )
        return {
            f.canonical: record[f.external]
            for f in self.fields
            if f.external in record
        }

    def to_external(self, ticket: Mapping[str, Any]) -> dict[str, Any]:
        """Map canonical ticket fields back to external field names."""
        return {
            f.external: ticket[f.canonical]
            for f in self.fields
            if f.canonical in ticket
        }

    def translate_many(self, response: Any) -> list[ChangeTicket]:
        """Translate a read response whose ``result`` is a list of records.

        Order and length of the list are preserved.

        Raises:
            MalformedPayloadError: If the body is missing or not a list result.
        """
        result = self._extract_result(response)
        if not isinstance(result, list):
            raise MalformedPayloadError(
                f"Expected 'result' to be a list, got {type(result).__name__}"
            )
        return [self.to_canonical(record) for record in result]

    def translate_one(self, response: Any) -> ChangeTicket:
        """Translate a create response whose ``result`` is a single record.

        Raises:
            MalformedPayloadError: If the body is missing or not an object result.
        """
        result = self._extract_result(response)
        if not isinstance(result, Mapping):
            raise MalformedPayloadError(
                f"Expected 'result' to be an object, got {type(result).__name__}"
            )
        return self.to_canonical(result)

    @staticmethod
    def _extract_result(response: Any) -> Any:
        body = getattr(response, "body", None)
        if body is None:
            raise MalformedPayloadError("Response has no body")

        try:
            payload = json.loads(body)
        except (TypeError, json.JSONDecodeError) as e:
            logger.debug(f"Unparseable response body: {body!r:.200}")
            raise MalformedPayloadError(f"Response body is not valid JSON: {e}") from e

        if not isinstance(payload, dict) or "result" not in payload:
            raise MalformedPayloadError("Response body has no 'result' field")
        return payload["result"]
