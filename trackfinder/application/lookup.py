import threading
import time
import uuid
from enum import Enum
from typing import Callable, Optional

from trackfinder.crosscutting.config import Settings, get_settings
from trackfinder.crosscutting.credentials import SessionCredential
from trackfinder.crosscutting.logging import (
    CorrelationContext, get_logger, log_error, log_lookup_complete, log_lookup_start,
    log_with_fields
)
from trackfinder.domain.entities import LookupRequest
from trackfinder.domain.errors import LookupInProgress, ProviderError, ProviderTimeout
from trackfinder.domain.normalization import normalize
from trackfinder.domain.outcomes import (
    Found, LookupOutcome, NoTracksParsed, ProviderFailure, Timeout
)
from trackfinder.domain.ports import TextGenerator
from trackfinder.domain.prompt import build_prompt

logger = get_logger(__name__)


def lookup_tracks(request: LookupRequest, provider: TextGenerator) -> LookupOutcome:
    """Run one lookup: build the prompt, call the provider, normalize the reply.

    Provider failures come back as outcome values, never as exceptions. A reply
    that is neither the "no information" sentence nor parsable into at least one
    track is reported as ``NoTracksParsed``.
    """
    prompt = build_prompt(request.artist, request.album)
    log_with_fields(logger, 'DEBUG', 'Prompt built', prompt=prompt)

    try:
        raw_text = provider.generate(prompt)
    except ProviderTimeout as e:
        log_error(logger, 'Provider call failed', e, outcome='timeout')
        return Timeout(message=str(e))
    except ProviderError as e:
        log_error(logger, 'Provider call failed', e, outcome='provider_error')
        return ProviderFailure(message=str(e))

    log_with_fields(logger, 'DEBUG', 'Provider replied', raw_text=raw_text)

    outcome = normalize(raw_text)
    if isinstance(outcome, Found) and not outcome.tracks:
        return NoTracksParsed(raw_text=raw_text)
    return outcome


class LookupState(Enum):
    IDLE = 'idle'
    REQUESTING = 'requesting'


class LookupSession:
    """One user's session: the in-memory API key and at most one lookup in flight.

    A second lookup started while one is running is rejected with
    ``LookupInProgress`` rather than queued.
    """

    def __init__(self,
                 provider_factory: Callable[[SessionCredential, Settings], TextGenerator],
                 settings: Optional[Settings] = None,
                 credential: Optional[SessionCredential] = None):
        self.settings = settings or get_settings()
        self.credential = credential or SessionCredential()
        self._provider_factory = provider_factory
        self._busy = threading.Lock()
        self._state = LookupState.IDLE

    @property
    def state(self) -> LookupState:
        return self._state

    def set_api_key(self, key: str) -> None:
        self.credential.set(key)

    def clear_api_key(self) -> None:
        self.credential.clear()

    def lookup(self, artist: str, album: str) -> LookupOutcome:
        """Validate raw input and run a lookup with the session's key.

        Raises:
            ValidationError: missing key, artist or album
            LookupInProgress: another lookup on this session has not finished
        """
        self.credential.require()
        request = LookupRequest.from_input(artist, album)

        if not self._busy.acquire(blocking=False):
            raise LookupInProgress('A lookup is already in progress')

        lookup_id = f"lookup_{uuid.uuid4().hex[:12]}"
        start = time.time()
        self._state = LookupState.REQUESTING
        try:
            log_lookup_start(logger, lookup_id, request.artist, request.album,
                             model=self.settings.model)
            with CorrelationContext(lookup_id=lookup_id, stage='requesting'):
                provider = self._provider_factory(self.credential, self.settings)
                outcome = lookup_tracks(request, provider)
        finally:
            self._state = LookupState.IDLE
            self._busy.release()

        track_count = len(outcome.tracks) if isinstance(outcome, Found) else 0
        log_lookup_complete(logger, lookup_id, outcome.kind, track_count,
                            int((time.time() - start) * 1000))
        return outcome
