from __future__ import annotations

import re
from typing import List, Optional

from .entities import Track
from .outcomes import Found, LookupOutcome, NotFound


# Substrings of the reply sentence mandated by build_prompt. Case-sensitive, unanchored.
NOT_FOUND_MARKERS = ("don't have information", "don't know")

# "12. Name" -> ("12", "Name"). The remainder may be empty so that a bare
# "3." is treated as a numbering artifact and dropped. Longer digit runs are
# not a track number and leave the line as a plain name.
_NUMBERED_LINE_PATTERN = re.compile(r"^(\d{1,9})\.\s*(.*)$")


def is_not_found(raw_text: str) -> bool:
    return any(marker in raw_text for marker in NOT_FOUND_MARKERS)


def parse_track_line(line: str, rank: int) -> Optional[Track]:
    """Parse one non-empty line into a Track, or None if no name is left.

    An explicit leading number is kept as-is; otherwise ``rank`` (the 1-based
    index of the line among retained lines) becomes the position.
    """
    text = line.strip()
    match = _NUMBERED_LINE_PATTERN.match(text)
    if match:
        position = int(match.group(1))
        name = match.group(2).strip()
        if position < 1:
            # "0." cannot be a track position
            position = rank
    else:
        position = rank
        name = text
    if not name:
        return None
    return Track(position=position, name=name)


def parse_tracks(raw_text: str) -> List[Track]:
    lines = [line for line in raw_text.splitlines() if line.strip()]
    tracks: List[Track] = []
    for rank, line in enumerate(lines, start=1):
        track = parse_track_line(line, rank)
        if track is not None:
            tracks.append(track)
    return tracks


def normalize(raw_text: str) -> LookupOutcome:
    """Classify and parse raw provider text.

    Returns ``NotFound`` when the reply carries the "no information" sentence,
    else ``Found`` with the tracks in source order. ``Found`` may be empty when
    nothing parsable was returned; ``lookup_tracks`` reports that separately.
    """
    raw_text = raw_text or ""
    if is_not_found(raw_text):
        return NotFound()
    return Found(tracks=parse_tracks(raw_text))
