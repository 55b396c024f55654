from __future__ import annotations

from .errors import ValidationError


NOT_FOUND_SENTENCE = "I don't have information about this album."

_PROMPT_TEMPLATE = (
    'List the tracks of the officially released standard edition of the album "{album}" by {artist}. '
    "Do not include tracks that only appear on deluxe, remastered, live or bonus editions. "
    "Keep the tracks in their correct order. "
    "Provide ONLY the track names, one per line, each prefixed with its 1-based number "
    '(for example "1. Track Name"). '
    "Do not include any commentary, release years or other extra text. "
    "If you are not confident about the exact tracklist, reply with exactly this sentence "
    'and nothing else: "{sentinel}"'
)


def build_prompt(artist: str, album: str) -> str:
    """Build the instruction sent to the text provider for one album.

    Both values are embedded verbatim. The reply sentence for unknown albums is
    fixed because ``normalize`` recognises it by substring.
    """
    if not (artist or "").strip() or not (album or "").strip():
        raise ValidationError("Please enter both artist and album name")
    return _PROMPT_TEMPLATE.format(artist=artist, album=album, sentinel=NOT_FOUND_SENTENCE)
