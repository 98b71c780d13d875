"""
Client identifier decoding.

Desktop clients send an identifier such as
``User-Alice-Machine-PC7-Copy-3`` alongside the serial.  Two decoding
policies exist and both expose ``decode(identifier)``:

* ``AnchorIdentifierDecoder`` looks for the ``User-``, ``Machine-`` and
  ``Copy-`` anchors anywhere in the string, in any order.  All three
  must be present; otherwise the whole identifier decodes to the
  defaults.  This is the default policy.
* ``PositionIdentifierDecoder`` splits on ``-`` and reads fixed
  positions (1, 3 and 5).  It is kept for clients that send the legacy
  layout and is selected with ``IDENTIFIER_POLICY=position``.

Neither decoder raises: unknown text fields become ``"Unknown"`` and an
unreadable copy count becomes ``0``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Protocol


logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"

_ANCHORS = ("User", "Machine", "Copy")
# A text value runs until the next "-<Anchor>-" or the end of the string.
_NEXT_ANCHOR = r"(?=-(?:{})-|$)".format("|".join(_ANCHORS))
_USER_RE = re.compile(r"User-(.*?)" + _NEXT_ANCHOR)
_MACHINE_RE = re.compile(r"Machine-(.*?)" + _NEXT_ANCHOR)
# Digits only; "Copy-" followed by anything else still counts as present.
_COPY_RE = re.compile(r"Copy-(\d*)")


@dataclass(frozen=True)
class DecodedIdentifier:
    user: str = UNKNOWN
    machine: str = UNKNOWN
    copy_index: int = 0


class IdentifierDecoder(Protocol):
    def decode(self, identifier: Optional[str]) -> DecodedIdentifier:
        ...


def _text_or_unknown(value: Optional[str]) -> str:
    value = (value or "").strip()
    return value or UNKNOWN


def _int_or_zero(value: Optional[str]) -> int:
    try:
        return int((value or "").strip())
    except ValueError:
        return 0


class AnchorIdentifierDecoder:
    """Decode identifiers by locating keyword anchors."""

    def decode(self, identifier: Optional[str]) -> DecodedIdentifier:
        if not identifier:
            return DecodedIdentifier()
        try:
            user = _USER_RE.search(identifier)
            machine = _MACHINE_RE.search(identifier)
            copy_index = _COPY_RE.search(identifier)
            if not (user and machine and copy_index):
                return DecodedIdentifier()
            return DecodedIdentifier(
                user=_text_or_unknown(user.group(1)),
                machine=_text_or_unknown(machine.group(1)),
                copy_index=_int_or_zero(copy_index.group(1)),
            )
        except Exception:
            logger.warning("Could not decode client identifier %r", identifier, exc_info=True)
            return DecodedIdentifier()


class PositionIdentifierDecoder:
    """Decode identifiers by splitting on a delimiter and reading fixed positions."""

    def __init__(self, delimiter: str = "-", user_index: int = 1, machine_index: int = 3, copy_index: int = 5) -> None:
        self.delimiter = delimiter
        self.user_index = user_index
        self.machine_index = machine_index
        self.copy_index = copy_index

    def _part(self, parts: list, index: int) -> Optional[str]:
        return parts[index] if index < len(parts) else None

    def decode(self, identifier: Optional[str]) -> DecodedIdentifier:
        if not identifier:
            return DecodedIdentifier()
        parts = identifier.split(self.delimiter)
        return DecodedIdentifier(
            user=_text_or_unknown(self._part(parts, self.user_index)),
            machine=_text_or_unknown(self._part(parts, self.machine_index)),
            copy_index=_int_or_zero(self._part(parts, self.copy_index)),
        )


def build_decoder(policy: str) -> IdentifierDecoder:
    """Return the decoder registered under ``policy`` (``anchor`` or ``position``)."""
    if policy == "anchor":
        return AnchorIdentifierDecoder()
    if policy == "position":
        return PositionIdentifierDecoder()
    raise ValueError(f"Unknown identifier policy: {policy!r}")
