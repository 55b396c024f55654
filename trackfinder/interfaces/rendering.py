from typing import Any, Dict, Optional

from flask import render_template_string

from trackfinder.domain.outcomes import (
    Found, LookupOutcome, NoTracksParsed, NotFound, ProviderFailure, Timeout
)

NOT_FOUND_MESSAGE = 'Album not found. Please check the artist and album name.'
NO_TRACKS_MESSAGE = 'The provider answered, but no track names could be read from the reply.'


def describe_outcome(outcome: LookupOutcome) -> Optional[str]:
    """User-facing error message for an outcome, or None for a tracklist."""
    if isinstance(outcome, Found):
        return None if outcome.tracks else NO_TRACKS_MESSAGE
    if isinstance(outcome, NotFound):
        return NOT_FOUND_MESSAGE
    if isinstance(outcome, NoTracksParsed):
        return NO_TRACKS_MESSAGE
    if isinstance(outcome, (ProviderFailure, Timeout)):
        return outcome.message or 'An error occurred while fetching tracks'
    raise TypeError(f"Unknown lookup outcome: {outcome!r}")


def outcome_to_dict(outcome: LookupOutcome) -> Dict[str, Any]:
    """JSON-ready form of an outcome."""
    data: Dict[str, Any] = {'outcome': outcome.kind}
    if isinstance(outcome, Found):
        data['tracks'] = [
            {'position': track.position, 'name': track.name} for track in outcome.tracks
        ]
    else:
        data['message'] = describe_outcome(outcome)
    return data


def render_text(outcome: LookupOutcome, artist: str, album: str) -> str:
    """Plain-text rendering used by the CLI."""
    message = describe_outcome(outcome)
    if message is not None:
        return message

    lines = [f"{album} by {artist}", '-' * 50]
    width = len(str(max(track.position for track in outcome.tracks)))
    for track in outcome.tracks:
        lines.append(f"{track.position:>{width}}. {track.name}")
    return '\n'.join(lines)


PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Album Track Finder</title>
  <style>
    body { font-family: sans-serif; background: #f5f3ff; margin: 0; padding: 2rem 1rem; }
    .card { max-width: 40rem; margin: 0 auto 1.5rem; background: #fff; border-radius: .5rem;
            box-shadow: 0 4px 12px rgba(0,0,0,.08); padding: 1.5rem; }
    label { display: block; font-size: .875rem; margin: 1rem 0 .4rem; color: #374151; }
    input { width: 100%; box-sizing: border-box; padding: .5rem 1rem; border: 1px solid #d1d5db;
            border-radius: .5rem; }
    button { width: 100%; margin-top: 1.5rem; padding: .75rem; border: 0; border-radius: .5rem;
             background: #7c3aed; color: #fff; font-weight: 600; cursor: pointer; }
    .hint { font-size: .75rem; color: #6b7280; }
    button.toggle-key { width: auto; margin-top: .4rem; padding: 0; background: none;
                        color: #7c3aed; font-weight: 400; font-size: .75rem; }
    .error { max-width: 40rem; margin: 0 auto 1.5rem; background: #fef2f2; color: #b91c1c;
             border: 1px solid #fecaca; border-radius: .5rem; padding: .75rem 1rem; }
    .track { display: flex; gap: .75rem; padding: .75rem; background: #f9fafb;
             border-radius: .5rem; margin-bottom: .5rem; }
    .position { color: #7c3aed; font-weight: 700; width: 2rem; }
  </style>
</head>
<body>
  <div class="card">
    <h1>Album Track Finder</h1>
    <form method="post" action="/">
      <label for="api_key">Gemini API Key</label>
      <input id="api_key" name="api_key" type="password" autocomplete="off"
             placeholder="{{ 'Key stored for this session' if has_key else 'Enter your Gemini API key' }}">
      <button type="button" class="toggle-key" aria-controls="api_key" aria-pressed="false">Show key</button>
      <p class="hint">Get your free API key from
        <a href="https://aistudio.google.com/app/apikey" target="_blank" rel="noopener noreferrer">Google AI Studio</a>.
        The key is kept in memory only while the server runs, and everyone who can
        reach this server shares it.</p>
      <label for="artist">Artist Name</label>
      <input id="artist" name="artist" type="text" value="{{ artist }}" placeholder="e.g., The Beatles">
      <label for="album">Album Name</label>
      <input id="album" name="album" type="text" value="{{ album }}" placeholder="e.g., Abbey Road">
      <button type="submit">Find Tracks</button>
    </form>
  </div>
  {% if error %}
  <div class="error">{{ error }}</div>
  {% endif %}
  {% if tracks %}
  <div class="card">
    <h2>{{ album }} by {{ artist }}</h2>
    {% for track in tracks %}
    <div class="track"><span class="position">{{ track.position }}</span><span>{{ track.name }}</span></div>
    {% endfor %}
  </div>
  {% endif %}
  <script>
    document.querySelector('.toggle-key').addEventListener('click', function () {
      var input = document.getElementById('api_key');
      var show = input.type === 'password';
      input.type = show ? 'text' : 'password';
      this.textContent = show ? 'Hide key' : 'Show key';
      this.setAttribute('aria-pressed', show ? 'true' : 'false');
    });
  </script>
</body>
</html>
"""


def render_page(artist: str = '', album: str = '', outcome: Optional[LookupOutcome] = None,
                error: Optional[str] = None, has_key: bool = False) -> str:
    """Render the single-page form, with results or an error when present.

    Must be called inside a Flask application context.
    """
    tracks = ()
    if outcome is not None:
        if isinstance(outcome, Found):
            tracks = outcome.tracks
        error = describe_outcome(outcome) or error
    return render_template_string(
        PAGE_TEMPLATE,
        artist=artist,
        album=album,
        tracks=tracks,
        error=error,
        has_key=has_key,
    )
