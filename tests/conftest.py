"""
Shared fixtures: a recording stand-in for GeminiClient and a TestClient
wired to it, with uploads parked in a per-test temporary directory.
"""

import asyncio
import logging

import pytest
from fastapi.testclient import TestClient

import gemini_service
from gemini_service import app, get_model_client


class RecordingClient:
    """Captures every `generate()` call; answers with `output` or raises `error`."""

    model_name = "models/test-model"

    def __init__(self, output: str = "generated text", error: Exception = None, watch_dir=None):
        self.output = output
        self.error = error
        self.watch_dir = watch_dir
        self.calls = []
        self.files_during_call = []

    async def generate(self, contents):
        self.calls.append(contents)
        if self.watch_dir is not None and self.watch_dir.exists():
            self.files_during_call.append(sorted(p.name for p in self.watch_dir.iterdir()))
        if self.error is not None:
            raise self.error
        return self.output


class GatedClient(RecordingClient):
    """Blocks each call until the test releases the event keyed by its prompt."""

    def __init__(self, prompts, **kwargs):
        super().__init__(**kwargs)
        self.release = {p: asyncio.Event() for p in prompts}
        self.all_arrived = asyncio.Event()

    async def generate(self, contents):
        self.calls.append(contents)
        if len(self.calls) == len(self.release):
            self.all_arrived.set()
        await self.release[contents[0]].wait()
        return f"done: {contents[0]}"


@pytest.fixture(autouse=True)
def quiet_logs():
    logging.getLogger("gemini-gateway").setLevel(logging.WARNING)


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(gemini_service, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def fake_model(upload_dir):
    return RecordingClient(watch_dir=upload_dir)


@pytest.fixture
def client(fake_model):
    app.dependency_overrides[get_model_client] = lambda: fake_model
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def gated_model():
    """Factory for GatedClient; events must be built inside the running loop."""
    return GatedClient
