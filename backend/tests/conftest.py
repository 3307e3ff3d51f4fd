import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the environment is prepared first
_TMP = Path(tempfile.mkdtemp(prefix="civiccare-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ["SECRET_KEY"] = "test-secret"
os.environ["HIVE_API_KEY"] = "test-hive-key"
os.environ["SCREENING_ON_ERROR"] = "fail-open"

import pytest
from fastapi.testclient import TestClient

from config import settings
from database import Base, engine
from main import app
from utils import hive_client as hive

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x00" * 64 + b"\xff\xd9"

VALID_COORDS = '{"lat": 52.2297, "lng": 21.0122}'


def hive_payload(ai_score=0.01, similarity=0.01):
    return {
        "status": [
            {
                "response": {
                    "output": [
                        {
                            "ai_generated": {"score": ai_score},
                            "image_similarity": {"score": similarity},
                        }
                    ]
                }
            }
        ]
    }


class FakeHive:
    """Stands in for Hive; queued results are consumed one per image."""

    def __init__(self):
        self.results = []
        self.calls = []

    def queue(self, *results):
        self.results.extend(results)

    async def analyze_image(self, path):
        self.calls.append(Path(path).name)
        result = self.results.pop(0) if self.results else hive_payload()
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(autouse=True)
def reset_state():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    uploads = Path(settings.UPLOAD_DIR)
    uploads.mkdir(parents=True, exist_ok=True)
    for f in uploads.iterdir():
        f.unlink()
    yield


@pytest.fixture(autouse=True)
def fake_hive(monkeypatch):
    fake = FakeHive()
    monkeypatch.setattr(hive.hive_client, "analyze_image", fake.analyze_image)
    return fake


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def stored_files():
    return sorted(p.name for p in Path(settings.UPLOAD_DIR).iterdir())


def image(name="photo.jpg", content_type="image/jpeg"):
    return ("images", (name, JPEG_BYTES, content_type))


def register(client, name, email, role="user", password="secret123"):
    r = client.post("/auth/register", json={"name": name, "email": email, "password": password, "role": role})
    assert r.status_code == 201, r.text
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def citizen(client):
    return register(client, "Alice Citizen", "alice@example.com")


@pytest.fixture
def other_citizen(client):
    return register(client, "Bob Citizen", "bob@example.com")


@pytest.fixture
def official(client):
    return register(client, "Olga Official", "olga@city.gov", role="authority")


def create_complaint(client, headers, files=None, **overrides):
    data = {
        "title": "Broken streetlight",
        "description": "The lamp at the corner has been dark for a week",
        "category": "Electrical",
        "location": "Main St 12",
        "coordinates": VALID_COORDS,
    }
    data.update(overrides)
    data = {k: v for k, v in data.items() if v is not None}
    return client.post("/complaints", data=data, files=files if files is not None else [image()], headers=headers)


class CommitFailure:
    """Once armed, any commit carrying a new or changed Complaint fails."""

    def __init__(self):
        self.armed = False

    def arm(self):
        self.armed = True


@pytest.fixture
def failing_complaint_commit(monkeypatch):
    from sqlalchemy.exc import OperationalError
    from sqlalchemy.orm import Session

    from models.complaint import Complaint

    failure = CommitFailure()
    real_commit = Session.commit

    def commit(self):
        pending = list(self.new) + list(self.dirty)
        if failure.armed and any(isinstance(obj, Complaint) for obj in pending):
            raise OperationalError("COMMIT", {}, Exception("database is locked"))
        return real_commit(self)

    monkeypatch.setattr(Session, "commit", commit)
    return failure
