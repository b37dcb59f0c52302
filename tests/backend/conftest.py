import os
import sys
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from backend.app.main import create_app  # noqa: E402
from core.db import db, get_db  # noqa: E402
from core.services import BackgroundWriter  # noqa: E402


@pytest.fixture
def test_app_client(test_db, fake_cache) -> Iterator[tuple[TestClient, object]]:
    _, TestingSessionLocal, _ = test_db

    # startup runs its health check against the global manager
    db.reset()
    db.initialize("sqlite://")

    app = create_app(cache=fake_cache, writer=BackgroundWriter(max_workers=1))

    def override_get_db() -> Iterator[Session]:
        session = TestingSessionLocal()
        try:
            yield session
            session.commit()  # Auto-commit on success like production
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client, app

    db.reset()
