"""simpletrack: tracker configuration and error types.

All option checking happens here, before any frame is linked. The option
names of the classic key/value interface (``Method``, ``MaxLinkingDistance``,
``MaxGapClosing``, ``Debug``) are accepted next to the snake_case ones.

License: AGPL-3.0-or-later
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
class SimpleTrackError(Exception):
    """Base exception for all simpletrack errors."""

    pass


class ConfigurationError(SimpleTrackError, ValueError):
    """Raised when a tracker option is unknown or has an invalid value."""

    def __init__(self, message: str, option: Optional[str] = None):
        self.option = option
        super().__init__(message)


class InputError(SimpleTrackError, ValueError):
    """Raised when frame data is malformed or dimensionally inconsistent."""

    def __init__(self, message: str, frame_index: Optional[int] = None):
        self.frame_index = frame_index
        super().__init__(message)


class GraphError(SimpleTrackError, RuntimeError):
    """Raised on any attempt to break the adjacency graph invariants."""

    pass


# ---------------------------------------------------------------------------
# Linking method
# ---------------------------------------------------------------------------
class LinkingMethod(Enum):
    """Frame-to-frame linking strategy selection."""
    HUNGARIAN = "hungarian"                # Exact assignment, O(n^3)
    NEAREST_NEIGHBOR = "nearest_neighbor"  # Greedy, O(n^2), local optimum

    @classmethod
    def parse(cls, value: Union["LinkingMethod", str]) -> "LinkingMethod":
        """Resolve an enum member or a loosely spelled method name."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ConfigurationError(
                f"method must be a string or LinkingMethod, got {type(value).__name__}",
                option="method")
        key = value.lower()
        for ch in "_- ":
            key = key.replace(ch, "")
        for member in cls:
            if member.value.replace("_", "") == key:
                return member
        expected = ", ".join(m.value for m in cls)
        raise ConfigurationError(
            f"Unrecognized linking method '{value}' (expected one of: {expected})",
            option="method")


# Classic option spellings -> dataclass field names
_OPTION_ALIASES = {
    "method": "method",
    "maxlinkingdistance": "max_linking_distance",
    "maxgapclosing": "max_gap_closing",
    "debug": "debug",
    "progresscallback": "progress_callback",
}


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


@dataclass
class TrackerConfig:
    """Configuration for a tracking run.

    Attributes:
        method: Frame-to-frame strategy. Gap closing is always greedy.
        max_linking_distance: Hard cap on the euclidean length of any link,
            in both linking and gap closing (default: unrestricted)
        max_gap_closing: Largest frame span a gap-closing link may bridge
            (default 3, ``math.inf`` searches every later frame)
        debug: Report progress at INFO level instead of DEBUG
        progress_callback: Optional callback(pair_index, n_pairs)
    """
    method: Union[LinkingMethod, str] = LinkingMethod.HUNGARIAN
    max_linking_distance: float = math.inf
    max_gap_closing: Union[int, float] = 3
    debug: bool = False
    progress_callback: Optional[Callable[[int, int], None]] = None

    def __post_init__(self):
        self.method = LinkingMethod.parse(self.method)

        d = self.max_linking_distance
        if not _is_number(d) or math.isnan(d):
            raise ConfigurationError(
                f"max_linking_distance must be a number, got {d!r}",
                option="max_linking_distance")
        if d <= 0:
            raise ConfigurationError(
                f"max_linking_distance must be positive, got {d}",
                option="max_linking_distance")
        self.max_linking_distance = float(d)

        g = self.max_gap_closing
        if not _is_number(g) or math.isnan(g):
            raise ConfigurationError(
                f"max_gap_closing must be a number, got {g!r}",
                option="max_gap_closing")
        if g != math.inf:
            if g < 1 or int(g) != g:
                raise ConfigurationError(
                    f"max_gap_closing must be a positive integer or inf, got {g}",
                    option="max_gap_closing")
            self.max_gap_closing = int(g)

        if not isinstance(self.debug, bool):
            raise ConfigurationError(
                f"debug must be a boolean, got {self.debug!r}", option="debug")

        if self.progress_callback is not None and not callable(self.progress_callback):
            raise ConfigurationError(
                "progress_callback must be callable", option="progress_callback")

    @classmethod
    def from_kwargs(cls, **options: Any) -> "TrackerConfig":
        """Build a config from keyword options.

        Keys are matched case-insensitively with underscores ignored, so
        ``MaxLinkingDistance=2.0`` and ``max_linking_distance=2.0`` are
        equivalent. Unknown keys raise ``ConfigurationError``.
        """
        fields = {}
        for name, value in options.items():
            key = _OPTION_ALIASES.get(name.lower().replace("_", ""))
            if key is None:
                raise ConfigurationError(f"Unknown tracker option '{name}'", option=name)
            if key in fields:
                raise ConfigurationError(f"Option '{name}' given more than once", option=name)
            fields[key] = value
        return cls(**fields)
