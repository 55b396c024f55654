from __future__ import annotations

from dataclasses import dataclass

from .errors import ValidationError


@dataclass(frozen=True)
class LookupRequest:
    """Artist and album to look up. Both must be non-empty after trimming."""

    artist: str
    album: str

    def __post_init__(self):
        if not (self.artist or "").strip() or not (self.album or "").strip():
            raise ValidationError("Please enter both artist and album name")

    @classmethod
    def from_input(cls, artist: str, album: str) -> "LookupRequest":
        """Build a request from raw form input, trimming both fields."""
        return cls(artist=(artist or "").strip(), album=(album or "").strip())


@dataclass(frozen=True)
class Track:
    """One entry of a parsed tracklist."""

    position: int
    name: str

    def __post_init__(self):
        if self.position < 1:
            raise ValueError(f"Track position must be positive, got {self.position}")
        if not self.name.strip():
            raise ValueError("Track name must not be empty")
