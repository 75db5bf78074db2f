"""Shared pytest fixtures for golfsg tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from golfsg.app import app
from golfsg.config import reset_settings_cache
from golfsg.courses.schemas import CourseLayout
from golfsg.rounds.service import RoundService, get_round_service
from golfsg.tests.course_data import build_layout, samples_around


@pytest.fixture
def layout() -> CourseLayout:
    return build_layout()


@pytest.fixture
def make_samples():
    return samples_around


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    for name in ("GOLFSG_REQUIRE_API_KEY", "GOLFSG_API_KEYS", "GOLFSG_SMOOTHING_WINDOW_S"):
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def sg_client(tmp_path):
    service = RoundService(base_dir=tmp_path / "rounds")
    app.dependency_overrides[get_round_service] = lambda: service
    with TestClient(app) as client:
        yield client, service
    app.dependency_overrides.pop(get_round_service, None)
