import httpx
import pytest

from config import settings
from conftest import create_complaint, hive_payload, image, stored_files
from utils import storage
from utils.exceptions import StorageError


def test_defaults_and_owner_expansion(client, citizen):
    r = create_complaint(client, citizen)
    assert r.status_code == 201, r.text
    body = r.json()

    assert body["status"] == "Pending"
    assert body["priority"] == "Medium"
    assert body["assignedTo"] is None
    assert body["category"] == "Electrical"
    assert body["coordinates"] == {"lat": 52.2297, "lng": 21.0122}
    assert body["user"]["name"] == "Alice Citizen"
    assert body["user"]["email"] == "alice@example.com"
    assert "createdAt" in body and "updatedAt" in body

    assert len(body["images"]) == 1
    assert body["images"] == stored_files()


def test_images_kept_in_submission_order(client, citizen, fake_hive):
    r = create_complaint(client, citizen, files=[image("a.jpg"), image("b.png", "image/png"), image("c.webp", "image/webp")])
    assert r.status_code == 201, r.text
    images = r.json()["images"]

    assert images == fake_hive.calls
    assert [name.rsplit(".", 1)[1] for name in images] == ["jpg", "png", "webp"]


def test_no_images_rejected(client, citizen):
    r = create_complaint(client, citizen, files=[])
    assert r.status_code == 400
    assert r.json()["detail"] == "Image required"
    assert client.get("/complaints/my-complaints", headers=citizen).json() == []


def test_ai_generated_image_rejected(client, citizen, fake_hive):
    fake_hive.queue(hive_payload(ai_score=0.9))
    r = create_complaint(client, citizen)

    assert r.status_code == 400
    assert r.json()["reason"] == "ai_generated"
    assert "AI-generated" in r.json()["detail"]
    assert client.get("/complaints/my-complaints", headers=citizen).json() == []
    assert stored_files() == []


def test_plagiarized_image_rejected(client, citizen, fake_hive):
    fake_hive.queue(hive_payload(ai_score=0.75, similarity=0.71))
    r = create_complaint(client, citizen)

    assert r.status_code == 400
    assert r.json()["reason"] == "plagiarized"
    assert client.get("/complaints/my-complaints", headers=citizen).json() == []


def test_ai_check_wins_when_both_fail(client, citizen, fake_hive):
    fake_hive.queue(hive_payload(ai_score=0.99, similarity=0.99))
    assert create_complaint(client, citizen).json()["reason"] == "ai_generated"


def test_scores_on_threshold_are_accepted(client, citizen, fake_hive):
    fake_hive.queue(hive_payload(ai_score=0.75, similarity=0.7))
    assert create_complaint(client, citizen).status_code == 201


def test_one_bad_image_vetoes_the_whole_submission(client, citizen, fake_hive):
    fake_hive.queue(hive_payload(), hive_payload(similarity=0.95), hive_payload())
    r = create_complaint(client, citizen, files=[image("1.jpg"), image("2.jpg"), image("3.jpg")])

    assert r.status_code == 400
    assert r.json()["reason"] == "plagiarized"
    # Screening stops at the first rejection
    assert len(fake_hive.calls) == 2
    # The accepted first image is discarded too
    assert stored_files() == []
    assert client.get("/complaints/my-complaints", headers=citizen).json() == []


def test_fail_open_on_transport_error(client, citizen, fake_hive):
    fake_hive.queue(httpx.ConnectError("hive down"))
    r = create_complaint(client, citizen)
    assert r.status_code == 201
    assert len(stored_files()) == 1


def test_fail_open_on_unexpected_payload(client, citizen, fake_hive):
    fake_hive.queue({"status": []})
    assert create_complaint(client, citizen).status_code == 201


def test_fail_closed_rejects_and_cleans_up(client, citizen, fake_hive, monkeypatch):
    monkeypatch.setattr(settings, "SCREENING_ON_ERROR", "fail-closed")
    fake_hive.queue(hive_payload(), httpx.ReadTimeout("slow"))

    r = create_complaint(client, citizen, files=[image("1.jpg"), image("2.jpg")])
    assert r.status_code == 503
    assert stored_files() == []
    assert client.get("/complaints/my-complaints", headers=citizen).json() == []


def test_fail_open_on_invalid_hive_url(client, citizen, fake_hive):
    fake_hive.queue(httpx.InvalidURL("bad url"))
    r = create_complaint(client, citizen)
    assert r.status_code == 201, r.text
    assert len(stored_files()) == 1


def test_fail_closed_on_invalid_hive_url(client, citizen, fake_hive, monkeypatch):
    monkeypatch.setattr(settings, "SCREENING_ON_ERROR", "fail-closed")
    fake_hive.queue(httpx.InvalidURL("bad url"))
    r = create_complaint(client, citizen)
    assert r.status_code == 503
    assert stored_files() == []


def test_failed_commit_removes_written_files(client, citizen, failing_complaint_commit):
    before = stored_files()
    failing_complaint_commit.arm()

    r = create_complaint(client, citizen, files=[image("1.jpg"), image("2.jpg")])

    assert r.status_code == 500
    assert r.json() == {"detail": "Could not save complaint"}
    assert stored_files() == before
    assert client.get("/complaints/my-complaints", headers=citizen).json() == []


def test_partial_write_is_cleaned_up(client, citizen, fake_hive, monkeypatch):
    real_save = storage.save_upload
    saved = []

    def save_upload(upload):
        if saved:
            raise StorageError("File save error: disk full")
        stored = real_save(upload)
        saved.append(stored.filename)
        return stored

    monkeypatch.setattr(storage, "save_upload", save_upload)

    r = create_complaint(client, citizen, files=[image("1.jpg"), image("2.jpg")])

    assert r.status_code == 500
    assert len(saved) == 1
    assert stored_files() == []
    assert fake_hive.calls == []


def test_too_many_images(client, citizen, fake_hive):
    files = [image(f"{i}.jpg") for i in range(settings.MAX_IMAGES_PER_REQUEST + 1)]
    r = create_complaint(client, citizen, files=files)
    assert r.status_code == 400
    assert fake_hive.calls == []
    assert stored_files() == []


def test_non_image_upload(client, citizen):
    r = create_complaint(client, citizen, files=[("images", ("notes.txt", b"hello", "text/plain"))])
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid file type"


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": None},
        {"title": "   "},
        {"description": None},
        {"location": None},
        {"category": "Potholes"},
        {"coordinates": None},
        {"coordinates": "not json"},
        {"coordinates": '{"lat": 123, "lng": 0}'},
    ],
)
def test_invalid_fields(client, citizen, fake_hive, overrides):
    r = create_complaint(client, citizen, **overrides)
    assert r.status_code == 400
    assert fake_hive.calls == []
    assert stored_files() == []


def test_authority_cannot_submit(client, official):
    assert create_complaint(client, official).status_code == 403
