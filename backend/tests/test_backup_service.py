from app.schemas.user import UserCreate
from app.services.backup_service import backup_service, payload_size
from app.services.user_service import user_service


def _user(db, email="b@x.com"):
    return user_service.create_user(db, UserCreate(email=email, password="pw"))


def test_payload_size_counts_utf8_bytes():
    assert payload_size({"diaries": [{"id": 1}]}) == len('{"diaries":[{"id":1}]}')
    assert payload_size({"note": "é"}) == len('{"note":"é"}'.encode("utf-8"))


def test_create_backup_summary_fields(db):
    user = _user(db)
    backup = backup_service.create_backup(db, user.id, {"diaries": [], "version": "3.0.0"}, device_info="iPhone")

    summary = backup_service.to_response(backup)
    assert summary.version == "3.0.0"
    assert summary.device_info == "iPhone"
    assert summary.file_name.startswith("backup_")
    assert "data" not in summary.model_dump()


def test_explicit_version_overrides_payload(db):
    user = _user(db)
    backup = backup_service.create_backup(db, user.id, {"version": "3.0.0"}, version="4.0.0")
    assert backup.version == "4.0.0"


def test_data_response_defaults(db):
    user = _user(db)
    backup = backup_service.create_backup(db, user.id, {"profile": {"name": "Ann"}})

    data = backup_service.to_data_response(backup)
    assert data.diaries == []
    assert data.symptoms == []
    assert data.profile == {"name": "Ann"}
    assert data.settings is None
    assert data.version == "1.0.0"


def test_store_is_ownership_agnostic(db):
    owner = _user(db)
    backup = backup_service.create_backup(db, owner.id, {})

    # Any caller can fetch by id here; the route layer enforces ownership
    assert backup_service.get_backup_by_id(db, backup.id).user_id == owner.id


def test_delete_backup(db):
    user = _user(db)
    backup = backup_service.create_backup(db, user.id, {})
    backup_id = backup.id

    assert backup_service.delete_backup(db, backup_id) is True
    assert backup_service.get_backup_by_id(db, backup_id) is None
    assert backup_service.delete_backup(db, backup_id) is False
    assert backup_service.list_backups(db, user.id) == []
