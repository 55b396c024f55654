from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple, Union

from .entities import Track


@dataclass(frozen=True)
class Found:
    """Provider returned a tracklist. ``tracks`` keeps source order."""

    tracks: Tuple[Track, ...] = ()
    kind: str = field(default="found", init=False)

    def __post_init__(self):
        object.__setattr__(self, 'tracks', tuple(self.tracks))


@dataclass(frozen=True)
class NotFound:
    """Provider replied with the "no information" sentinel."""

    kind: str = field(default="not_found", init=False)


@dataclass(frozen=True)
class ProviderFailure:
    """Provider call failed; ``message`` is shown to the user as-is."""

    message: str
    kind: str = field(default="provider_error", init=False)


@dataclass(frozen=True)
class Timeout:
    """Provider call exceeded the configured timeout."""

    message: str
    kind: str = field(default="timeout", init=False)


@dataclass(frozen=True)
class NoTracksParsed:
    """Provider text had neither the sentinel nor any usable track line."""

    raw_text: str = ""
    kind: str = field(default="no_tracks", init=False)


LookupOutcome = Union[Found, NotFound, ProviderFailure, Timeout, NoTracksParsed]
