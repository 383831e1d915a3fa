from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from carlot.config import Settings  # noqa: E402
from carlot.service import DealerService  # noqa: E402
from carlot.session import SessionManager  # noqa: E402
from carlot.store import DealersStore, SessionStore  # noqa: E402


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a per-test data directory."""
    return Settings(data_dir=tmp_path / "Data")


@pytest.fixture
def dealers_store(settings: Settings) -> DealersStore:
    return DealersStore(settings.dealers_path)


@pytest.fixture
def session_store(settings: Settings) -> SessionStore:
    return SessionStore(settings.session_path)


@pytest.fixture
def service(dealers_store: DealersStore) -> DealerService:
    return DealerService(dealers_store)


@pytest.fixture
def sessions(session_store: SessionStore) -> SessionManager:
    return SessionManager(session_store)
