from trackfinder.application.lookup import lookup_tracks
from trackfinder.domain.entities import LookupRequest, Track
from trackfinder.domain.errors import ProviderError
from trackfinder.domain.outcomes import Found, ProviderFailure
from trackfinder.domain.ports import TextGenerator


class EchoGenerator(TextGenerator):
    """Minimal provider: numbers the quoted album name three times."""

    def generate(self, prompt: str) -> str:
        album = prompt.split('"')[1]
        return "\n".join(f"{i}. {album} Part {i}" for i in range(1, 4))


class BrokenGenerator(TextGenerator):
    def generate(self, prompt: str) -> str:
        raise ProviderError("Unauthorized")


def test_contract_generate_returns_text_that_normalizes():
    outcome = lookup_tracks(LookupRequest("Artist", "Suite"), EchoGenerator())
    assert outcome == Found(tracks=[
        Track(1, "Suite Part 1"),
        Track(2, "Suite Part 2"),
        Track(3, "Suite Part 3"),
    ])


def test_contract_provider_errors_become_outcomes():
    outcome = lookup_tracks(LookupRequest("Artist", "Suite"), BrokenGenerator())
    assert outcome == ProviderFailure(message="Unauthorized")
