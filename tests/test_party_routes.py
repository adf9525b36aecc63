from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from pharmasys.config import settings

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def _stored_file(url):
    return Path(settings.UPLOAD_DIR) / url[len(settings.MEDIA_URL) + 1:]


def test_patient_crud(client):
    res = client.post("/patients/", json={"name": "Budi Santoso", "gender": "L", "birth_date": "1990-04-12"})
    assert res.status_code == 201
    patient = res.json()
    assert patient["birth_date"] == "1990-04-12"

    res = client.put(f"/patients/{patient['id']}", json={"phone": "08123456789"})
    assert res.json()["phone"] == "08123456789"
    assert res.json()["name"] == "Budi Santoso"

    assert client.get("/patients/", params={"search": "bdi"}).json()["total"] == 1

    assert client.delete(f"/patients/{patient['id']}").status_code == 200
    assert client.get(f"/patients/{patient['id']}").status_code == 404


def test_doctor_and_supplier_fields(client):
    res = client.post("/doctors/", json={"name": "dr. Sari", "specialization": "Anak", "experience_years": 8})
    assert res.json()["experience_years"] == 8

    res = client.post("/suppliers/", json={"name": "PT Kimia Farma", "contact_person": "Andi"})
    assert res.json()["contact_person"] == "Andi"


def test_image_upload_replace_and_delete(client):
    supplier = client.post("/suppliers/", json={"name": "PT Enseval"}).json()
    url = f"/suppliers/{supplier['id']}/image"

    first = client.post(url, files={"file": ("logo.png", PNG_BYTES, "image/png")}).json()["image_url"]
    assert first.startswith(f"/uploads/suppliers/{supplier['id']}/")
    assert _stored_file(first).is_file()
    assert client.get(first).content == PNG_BYTES

    second = client.post(url, files={"file": ("logo2.png", PNG_BYTES, "image/png")}).json()["image_url"]
    assert second != first
    assert not _stored_file(first).exists()
    assert _stored_file(second).is_file()

    res = client.delete(url)
    assert res.status_code == 200
    assert res.json()["image_url"] is None
    assert not _stored_file(second).exists()

    assert client.delete(url).status_code == 404


def test_image_upload_rejects_non_images(client):
    doctor = client.post("/doctors/", json={"name": "dr. Rudi"}).json()
    res = client.post(f"/doctors/{doctor['id']}/image", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert res.status_code == 400


def test_deleting_party_removes_its_image(client):
    patient = client.post("/patients/", json={"name": "Siti"}).json()
    image_url = client.post(
        f"/patients/{patient['id']}/image", files={"file": ("me.png", PNG_BYTES, "image/png")}
    ).json()["image_url"]

    client.delete(f"/patients/{patient['id']}")
    assert not _stored_file(image_url).exists()


def test_supplier_with_purchases_cannot_be_deleted(client, amoxicillin):
    supplier = client.post("/suppliers/", json={"name": "PT AAM"}).json()
    client.post("/purchases/", json={
        "invoice_number": "FAK-001",
        "supplier_id": supplier["id"],
        "items": [{"item_id": amoxicillin, "quantity": 1, "price": 50000}],
    })

    res = client.delete(f"/suppliers/{supplier['id']}")
    assert res.status_code == 409


def test_update_with_null_name_is_rejected(client):
    patient = client.post("/patients/", json={"name": "Budi"}).json()
    res = client.put(f"/patients/{patient['id']}", json={"name": None})
    assert res.status_code == 422
    assert client.get("/patients/", params={"page_size": 0}).status_code == 422


def test_failed_image_save_removes_new_file(client, monkeypatch):
    supplier = client.post("/suppliers/", json={"name": "PT Enseval"}).json()
    upload_dir = Path(settings.UPLOAD_DIR) / "suppliers" / str(supplier["id"])
    before = set(upload_dir.glob("*"))

    def failing_commit(self):
        raise RuntimeError("database went away")

    monkeypatch.setattr(Session, "commit", failing_commit)
    with pytest.raises(RuntimeError):
        client.post(f"/suppliers/{supplier['id']}/image", files={"file": ("logo.png", PNG_BYTES, "image/png")})
    monkeypatch.undo()

    assert set(upload_dir.glob("*")) == before
    assert client.get(f"/suppliers/{supplier['id']}").json()["image_url"] is None
