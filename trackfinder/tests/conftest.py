import os
import sys
import pytest


def _ensure_project_root_on_sys_path() -> None:
    here = os.path.dirname(__file__)
    project_root = os.path.abspath(os.path.join(here, "..", ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


_ensure_project_root_on_sys_path()


class FakeTextGenerator:
    """TextGenerator double returning a canned reply or raising a canned error."""

    def __init__(self, reply: str = "", error: Exception = None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def fake_generator():
    return FakeTextGenerator


@pytest.fixture(autouse=True)
def _isolate_trackfinder_env():
    """Keep TRACKFINDER_* settings and the cached global settings out of tests."""
    import trackfinder.crosscutting.config as config

    keys = list(config.ENV_KEYS)
    backup = {k: os.environ.get(k) for k in keys}
    for k in keys:
        os.environ.pop(k, None)
    config._settings = None
    try:
        yield
    finally:
        config._settings = None
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v
