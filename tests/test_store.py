import json
import os
from pathlib import Path

import pytest

from carlot.errors import CorruptDocumentError, StorageError
from carlot.models import Car, CarDealer
from carlot.store import DealersDocument, DealersStore, SessionDocument, SessionStore


def test_load_creates_default_dealers_document(tmp_path: Path) -> None:
    path = tmp_path / "Data" / "Dealers.json"
    store = DealersStore(path)

    document = store.load()
    assert document.type == "Dealers"
    assert document.description == "Dealers list"
    assert document.dealers == []
    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "Type": "Dealers",
        "Description": "Dealers list",
        "Dealers": [],
    }


def test_load_creates_default_session_document(tmp_path: Path) -> None:
    path = tmp_path / "Data" / "Session.json"
    document = SessionStore(path).load()
    assert document.dealer_id is None
    assert document.presence is False
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "Type": "Session",
        "Description": "Session config",
        "DealerId": None,
        "Presence": False,
    }


def test_dealers_round_trip(tmp_path: Path) -> None:
    store = DealersStore(tmp_path / "Dealers.json")
    rented = Car(plate="ABC-123", vin="V1", brand="B", model="M", year="2020", color="RED")
    rented.rent("7")
    idle = Car(plate="XYZ-999", vin="V2", brand="B2", model="M2", year="0000", color="BLUE", last_users=["1", "2"])
    original = DealersDocument(dealers=[CarDealer(name="Acme", cars=[rented, idle]), CarDealer(name="Other")])

    store.save(original)
    loaded = store.load()

    assert loaded.model_dump() == original.model_dump()
    assert loaded.dealers[0].cars[0].current_user == "7"
    assert loaded.dealers[0].cars[1].last_users == ["1", "2"]


def test_reads_existing_on_disk_layout(tmp_path: Path) -> None:
    path = tmp_path / "Dealers.json"
    raw = {
        "Type": "Dealers",
        "Description": "Dealers list",
        "Dealers": [
            {
                "Id": "d-1",
                "Name": "Acme",
                "Cars": [
                    {
                        "Id": "c-1",
                        "Plate": "ABC-123",
                        "Brand": "TOYOTA",
                        "Model": "COROLLA",
                        "Year": "2020",
                        "Color": "RED",
                        "Vin": "1HG",
                        "IsInUse": False,
                        "CurrentUser": None,
                        "LastUsers": ["3"],
                    }
                ],
            }
        ],
    }
    # BOM-prefixed files are accepted
    path.write_text(json.dumps(raw, indent=2), encoding="utf-8-sig")

    document = DealersStore(path).load()
    assert document.dealers[0].id == "d-1"
    assert document.dealers[0].cars[0].last_users == ["3"]

    DealersStore(path).save(document)
    assert json.loads(path.read_text(encoding="utf-8")) == raw


def test_invalid_json_is_reported_not_replaced(tmp_path: Path) -> None:
    path = tmp_path / "Dealers.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(CorruptDocumentError):
        DealersStore(path).load()
    assert path.read_text(encoding="utf-8") == "{not json"


def test_schema_mismatch_is_corrupt(tmp_path: Path) -> None:
    path = tmp_path / "Session.json"
    path.write_text(json.dumps({"Presence": "maybe"}), encoding="utf-8")
    with pytest.raises(CorruptDocumentError):
        SessionStore(path).load()


def test_json_null_is_corrupt(tmp_path: Path) -> None:
    path = tmp_path / "Dealers.json"
    path.write_text("null", encoding="utf-8")
    with pytest.raises(CorruptDocumentError):
        DealersStore(path).load()


def test_corrupt_document_is_a_storage_error() -> None:
    assert issubclass(CorruptDocumentError, StorageError)


def test_save_failure_raises_storage_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    store = SessionStore(blocker / "Session.json")
    with pytest.raises(StorageError):
        store.save(SessionDocument())


def test_read_failure_raises_storage_error(tmp_path: Path) -> None:
    path = tmp_path / "Dealers.json"
    path.mkdir()
    with pytest.raises(StorageError):
        DealersStore(path).load()


def test_save_leaves_no_temp_files(tmp_path: Path) -> None:
    store = DealersStore(tmp_path / "Dealers.json")
    store.save(DealersDocument(dealers=[CarDealer(name="Acme")]))
    store.save(DealersDocument())
    assert sorted(item.name for item in tmp_path.iterdir()) == ["Dealers.json"]


def test_undecodable_bytes_are_corrupt(tmp_path: Path) -> None:
    path = tmp_path / "Dealers.json"
    path.write_bytes(b'{"Type": "\xff\xfe"}')
    with pytest.raises(CorruptDocumentError):
        DealersStore(path).load()
    assert path.read_bytes() == b'{"Type": "\xff\xfe"}'


def test_rented_car_without_user_is_corrupt(tmp_path: Path) -> None:
    path = tmp_path / "Dealers.json"
    car = {"Plate": "ABC-123", "Brand": "B", "Model": "M", "Year": "2020", "Color": "C", "Vin": "V", "IsInUse": True}
    path.write_text(json.dumps({"Dealers": [{"Name": "Acme", "Cars": [car]}]}), encoding="utf-8")
    with pytest.raises(CorruptDocumentError):
        DealersStore(path).load()


@pytest.mark.skipif(os.name == "nt", reason="POSIX file modes")
def test_new_file_gets_umask_default_mode(tmp_path: Path) -> None:
    path = tmp_path / "Dealers.json"
    previous = os.umask(0o022)
    try:
        DealersStore(path).save(DealersDocument())
    finally:
        os.umask(previous)
    assert path.stat().st_mode & 0o777 == 0o644


@pytest.mark.skipif(os.name == "nt", reason="POSIX file modes")
def test_save_keeps_existing_file_mode(tmp_path: Path) -> None:
    path = tmp_path / "Session.json"
    store = SessionStore(path)
    store.save(SessionDocument())
    path.chmod(0o640)
    store.save(SessionDocument(dealer_id="d-1"))
    assert path.stat().st_mode & 0o777 == 0o640
    assert store.load().dealer_id == "d-1"
