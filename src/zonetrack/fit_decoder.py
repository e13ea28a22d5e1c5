"""
FIT byte-stream decoding via fitparse.

Converts fitparse data messages into plain ``RawMessage`` values so the rest
of the pipeline never touches fitparse objects directly.
"""

from __future__ import annotations

import logging
import os
import struct
from typing import Any, Iterable, List, NamedTuple, Sequence

import fitparse

from .errors import MalformedFitError, SourceUnreadableError

logger = logging.getLogger(__name__)


class RawField(NamedTuple):
    name: str
    value: Any
    enum: bool = False


class RawMessage(NamedTuple):
    kind: str
    fields: Sequence[RawField]

    def get(self, name: str, default: Any = None) -> Any:
        for raw_field in self.fields:
            if raw_field.name == name:
                return raw_field.value
        return default


def _is_enum_field(field_data) -> bool:
    base_type = getattr(field_data, 'base_type', None)
    return getattr(base_type, 'name', None) == 'enum'


def convert_message(message) -> RawMessage:
    """Convert one fitparse DataMessage into a RawMessage."""
    fields = [
        RawField(field_data.name, field_data.value, _is_enum_field(field_data))
        for field_data in message.fields
    ]
    return RawMessage(message.name, fields)


def convert_messages(messages: Iterable) -> List[RawMessage]:
    return [convert_message(message) for message in messages]


def decode_fit_file(path: str) -> List[RawMessage]:
    """
    Decode every data message in a FIT file.

    The whole file is decoded before anything is returned, so callers never
    see a partially decoded activity.

    Raises:
        SourceUnreadableError: the file could not be opened or read
        MalformedFitError: fitparse rejected the byte stream
    """
    filename = os.path.basename(path)
    try:
        fit_file = fitparse.FitFile(path)
        messages = convert_messages(fit_file.get_messages())
    except OSError as exc:
        raise SourceUnreadableError(
            f"Failed to open file: {exc}", {'filename': filename}
        ) from exc
    except (fitparse.FitParseError, struct.error, ValueError) as exc:
        raise MalformedFitError(
            f"FIT parse error: {exc}", {'filename': filename}
        ) from exc

    logger.debug("Decoded %d messages from %s", len(messages), filename)
    return messages
