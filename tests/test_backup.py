"""Tests for backup export and import."""

import json

import aiosqlite
import pytest

from workout_gamifier.db import init_db, seed_preloaded_workouts
from workout_gamifier.db.repositories import ActionRepository
from workout_gamifier.errors import GamifierError, IntegrityViolationError, StorageFailureError
from workout_gamifier.services import BackupService, CatalogService, SessionEngine


async def play_session(db_path, catalog) -> int:
    """Earn 10 points, spend 7, end the session."""
    engine = SessionEngine(db_path)
    session = await engine.start_session("Morning", catalog.pool.id)
    await engine.complete_action(session.id, catalog.action.id)
    await engine.complete_action(session.id, catalog.action.id)
    await engine.redeem_workout(session.id, 7)
    await engine.end_session(session.id)
    return session.id


def empty_document() -> dict:
    """A valid export document with every collection empty."""
    return {
        "workouts": [],
        "actions": [],
        "workoutPools": [],
        "workoutPoolWorkouts": [],
        "sessions": [],
        "actionCompletions": [],
        "workoutReceived": [],
        "exportedAt": "2024-01-01T00:00:00Z",
        "appVersion": "0.1.0",
    }


@pytest.fixture
def backup_service(db_path):
    return BackupService(db_path)


class TestExport:
    """Tests for exporting."""

    @pytest.mark.asyncio
    async def test_export_document(self, backup_service, db_path, catalog):
        """Test the export carries every collection and metadata."""
        await play_session(db_path, catalog)

        doc = json.loads(await backup_service.export_json())

        assert len(doc["workouts"]) == 2
        assert len(doc["workoutPoolWorkouts"]) == 2
        assert len(doc["actionCompletions"]) == 2
        assert len(doc["workoutReceived"]) == 1
        assert doc["sessions"][0]["pointsEarned"] == 10
        assert doc["sessions"][0]["status"] == "completed"
        assert doc["appVersion"] == "0.1.0"
        assert doc["exportedAt"] is not None

    @pytest.mark.asyncio
    async def test_export_validates_cleanly(self, backup_service, db_path, catalog):
        """Test an export passes its own validation."""
        await play_session(db_path, catalog)

        report = backup_service.validate_backup_json(await backup_service.export_json())
        assert report.is_valid
        assert report.warnings == []


class TestValidateJson:
    """Tests for document-level validation."""

    def test_empty(self, backup_service):
        """Test empty input."""
        assert backup_service.validate_backup_json("  ").errors == ["Backup data is empty"]

    def test_invalid_json(self, backup_service):
        """Test unparsable input."""
        report = backup_service.validate_backup_json("{not json")
        assert report.errors[0].startswith("Invalid JSON format")

    def test_not_an_object(self, backup_service):
        """Test a top-level array is rejected."""
        assert not backup_service.validate_backup_json("[]").is_valid

    def test_malformed_record(self, backup_service):
        """Test records missing required fields."""
        report = backup_service.validate_backup_json(json.dumps({"workouts": [{"id": 1}]}))
        assert "workouts[0] is malformed" in report.errors[0]

    def test_record_not_an_object(self, backup_service):
        """Test a bare string in a collection is reported, not raised."""
        report = backup_service.validate_backup_json(json.dumps({"workouts": ["not-an-object"]}))
        assert not report.is_valid
        assert report.errors == ["workouts[0] is malformed: record must be an object"]

    def test_non_string_timestamp(self, backup_service):
        """Test a numeric exportedAt becomes a warning."""
        doc = empty_document()
        doc["exportedAt"] = 12345

        report = backup_service.validate_backup_json(json.dumps(doc))

        assert report.is_valid
        assert "Export timestamp is missing or invalid" in report.warnings

    def test_non_string_record_timestamp(self, backup_service):
        """Test a numeric createdAt inside a record is a malformed record."""
        doc = empty_document()
        doc["actions"] = [{"id": 1, "description": "Stretch", "pointValue": 2, "createdAt": 7}]

        report = backup_service.validate_backup_json(json.dumps(doc))

        assert not report.is_valid
        assert report.errors[0].startswith("actions[0] is malformed")

    def test_non_string_name(self, backup_service):
        """Test a numeric workout name is a validation error."""
        doc = empty_document()
        doc["workouts"] = [
            {"id": 1, "name": 123, "durationMinutes": 10, "difficulty": "Beginner"}
        ]

        report = backup_service.validate_backup_json(json.dumps(doc))

        assert not report.is_valid
        assert "Workout at index 0: Workout name must be text" in report.errors

    def test_non_string_session_name(self, backup_service):
        """Test a numeric session name is a validation error."""
        doc = empty_document()
        doc["workoutPools"] = [{"id": 1, "name": "Pool"}]
        doc["sessions"] = [{"id": 1, "name": 42, "workoutPoolId": 1, "status": "active"}]

        report = backup_service.validate_backup_json(json.dumps(doc))

        assert "Session at index 0: Session name must be text" in report.errors


class TestImport:
    """Tests for importing."""

    @pytest.mark.asyncio
    async def test_overwrite_round_trip(self, backup_service, db_path, catalog):
        """Test overwrite restores ids, counts and totals."""
        session_id = await play_session(db_path, catalog)
        text = await backup_service.export_json()

        catalog_service = CatalogService(db_path)
        await catalog_service.create_action("Added later", 1)

        result = await backup_service.import_json(text, overwrite=True)

        assert result.success
        assert result.workouts_imported == 2
        assert result.sessions_imported == 1
        assert result.action_completions_imported == 2

        restored = json.loads(await backup_service.export_json())
        original = json.loads(text)
        for key in ("workouts", "actions", "workoutPools", "workoutPoolWorkouts",
                    "actionCompletions", "workoutReceived"):
            assert restored[key] == original[key]
        session = (await SessionEngine(db_path).get_session(session_id))
        assert session.points_earned == 10
        assert session.points_spent == 7

    @pytest.mark.asyncio
    async def test_rejected_import_persists_nothing(self, backup_service, db_path, catalog):
        """Test a dangling reference rejects the whole import."""
        await play_session(db_path, catalog)
        doc = json.loads(await backup_service.export_json())
        doc["workoutReceived"][0]["workoutId"] = 999
        before = await backup_service.export_data()

        with pytest.raises(IntegrityViolationError) as exc_info:
            await backup_service.import_json(json.dumps(doc), overwrite=True)

        assert any("Workout ID: 999" in e for e in exc_info.value.errors)
        after = await backup_service.export_data()
        assert after.counts() == before.counts()

    @pytest.mark.asyncio
    async def test_failed_apply_rolls_back(
        self, backup_service, db_path, catalog, monkeypatch
    ):
        """Test a storage failure mid-import leaves existing data in place."""
        await play_session(db_path, catalog)
        text = await backup_service.export_json()
        before = await backup_service.export_data()

        async def broken_create(self, action):
            raise aiosqlite.OperationalError("disk I/O error")

        monkeypatch.setattr(ActionRepository, "create", broken_create)

        with pytest.raises(StorageFailureError):
            await backup_service.import_json(text, overwrite=True)

        after = await backup_service.export_data()
        assert after.counts() == before.counts()
        assert [s.points_earned for s in after.sessions] == [10]

    @pytest.mark.asyncio
    async def test_merge_adds_under_new_ids(self, backup_service, db_path, catalog):
        """Test merge mode appends catalog entries and skips history."""
        await play_session(db_path, catalog)
        text = await backup_service.export_json()

        result = await backup_service.import_json(text, overwrite=False)

        assert result.workouts_imported == 2
        assert result.workout_pools_imported == 1
        assert result.sessions_imported == 1
        assert result.action_completions_imported == 0
        assert any("Skipped 5" in w for w in result.warnings)

        data = await backup_service.export_data()
        assert len(data.workouts) == 4
        assert len(data.workout_pools) == 2
        assert len({s.workout_pool_id for s in data.sessions}) == 2

    @pytest.mark.asyncio
    async def test_merge_skips_second_active_session(self, backup_service, db_path, catalog):
        """Test merge keeps at most one active session per owner."""
        engine = SessionEngine(db_path)
        await engine.start_session("Running", catalog.pool.id)
        text = await backup_service.export_json()

        result = await backup_service.import_json(text, overwrite=False)

        assert result.sessions_imported == 0
        assert any("already has an active session" in w for w in result.warnings)
        assert len(await engine.get_all_sessions()) == 1

    @pytest.mark.asyncio
    async def test_overwrite_keeps_preloaded(self, backup_service, db_path):
        """Test preloaded workouts survive an overwrite with an empty backup."""
        seeded = await seed_preloaded_workouts(db_path)
        empty = json.dumps(empty_document())

        await backup_service.import_json(empty, overwrite=True)

        assert len((await backup_service.export_data()).workouts) == seeded

    @pytest.mark.asyncio
    async def test_overwrite_onto_seeded_ids(self, backup_service, db_path, catalog, tmp_path):
        """Test custom workouts keep their ids where seeded workouts already sit."""
        await play_session(db_path, catalog)
        text = await backup_service.export_json()

        target = tmp_path / "seeded.db"
        await init_db(target)
        seeded = await seed_preloaded_workouts(target)
        restore = BackupService(target)

        await restore.import_json(text, overwrite=True)

        data = await restore.export_data()
        by_id = {w.id: w for w in data.workouts}
        assert by_id[catalog.workout_a.id].name == "Workout A"
        assert not by_id[catalog.workout_a.id].is_preloaded
        assert not by_id[catalog.workout_b.id].is_preloaded
        assert len([w for w in data.workouts if w.is_preloaded]) == seeded
        assert len(data.workouts) == seeded + 2

        original = json.loads(text)
        restored = json.loads(await restore.export_json())
        for key in ("actions", "workoutPools", "workoutPoolWorkouts",
                    "actionCompletions", "workoutReceived"):
            assert restored[key] == original[key]


class TestFiles:
    """Tests for backup files."""

    @pytest.mark.asyncio
    async def test_save_and_load(self, backup_service, tmp_path, catalog):
        """Test writing and reading a backup file."""
        text = await backup_service.export_json()
        path = await backup_service.save_backup_to_file(text, tmp_path / "nested" / "b.json")

        assert path.exists()
        assert await backup_service.load_backup_from_file(path) == text

    @pytest.mark.asyncio
    async def test_load_missing_file(self, backup_service, tmp_path):
        """Test a missing file raises a domain error."""
        with pytest.raises(GamifierError, match="not found"):
            await backup_service.load_backup_from_file(tmp_path / "missing.json")
