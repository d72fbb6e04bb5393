"""Tests for snapshot integrity validation."""

from datetime import datetime, timezone

import pytest

from workout_gamifier.models import (
    Action,
    ActionCompletion,
    BackupData,
    Session,
    SessionStatus,
    Workout,
    WorkoutPool,
    WorkoutPoolWorkout,
    WorkoutReceived,
)
from workout_gamifier.services import IntegrityValidator


def make_snapshot() -> BackupData:
    """A small consistent snapshot: one pool, one finished session."""
    return BackupData(
        workouts=[
            Workout(id=1, name="A", duration_minutes=10),
            Workout(id=2, name="B", duration_minutes=20),
        ],
        actions=[Action(id=1, description="Drink water", point_value=5)],
        workout_pools=[WorkoutPool(id=1, name="Pool")],
        workout_pool_workouts=[
            WorkoutPoolWorkout(workout_pool_id=1, workout_id=1),
            WorkoutPoolWorkout(workout_pool_id=1, workout_id=2),
        ],
        sessions=[
            Session(
                id=1,
                name="Morning",
                workout_pool_id=1,
                status=SessionStatus.COMPLETED,
                points_earned=10,
                points_spent=7,
            )
        ],
        action_completions=[
            ActionCompletion(id=1, session_id=1, action_id=1, points_awarded=5),
            ActionCompletion(id=2, session_id=1, action_id=1, points_awarded=5),
        ],
        workout_received=[
            WorkoutReceived(id=1, session_id=1, workout_id=2, points_spent=7),
        ],
        exported_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        app_version="0.1.0",
    )


@pytest.fixture
def validator():
    return IntegrityValidator()


class TestStructure:
    """Tests for the structural pass."""

    def test_consistent_snapshot(self, validator):
        """Test a consistent snapshot has no errors or warnings."""
        report = validator.validate(make_snapshot())

        assert report.is_valid
        assert report.warnings == []

    def test_missing_collection(self, validator):
        """Test an absent collection is an error."""
        data = make_snapshot()
        data.sessions = None

        report = validator.validate(data)
        assert "Sessions collection is missing" in report.errors

    def test_missing_metadata_warns(self, validator):
        """Test missing export metadata only warns."""
        data = make_snapshot()
        data.exported_at = None
        data.app_version = None

        report = validator.validate(data)
        assert report.is_valid
        assert len(report.warnings) == 2

    def test_invalid_entity(self, validator):
        """Test field validation errors name the record index."""
        data = make_snapshot()
        data.workouts[1].duration_minutes = 0

        report = validator.validate(data)
        assert any(e.startswith("Workout at index 1:") for e in report.errors)

    def test_duplicate_ids(self, validator):
        """Test duplicate ids are errors."""
        data = make_snapshot()
        data.actions.append(Action(id=1, description="Again", point_value=1))

        report = validator.validate(data)
        assert "Actions ID 1 appears 2 times" in report.errors

    def test_duplicate_membership(self, validator):
        """Test repeated pool memberships are errors."""
        data = make_snapshot()
        data.workout_pool_workouts.append(WorkoutPoolWorkout(workout_pool_id=1, workout_id=1))

        report = validator.validate(data)
        assert not report.is_valid


class TestReferences:
    """Tests for the referential pass."""

    def test_redemption_of_missing_workout(self, validator):
        """Test a dangling workout id is named in the error."""
        data = make_snapshot()
        data.workout_received[0].workout_id = 99

        report = validator.validate(data)
        assert not report.is_valid
        assert "WorkoutReceived 1 references non-existent Workout ID: 99" in report.errors

    def test_session_with_missing_pool(self, validator):
        """Test a session pointing at a missing pool."""
        data = make_snapshot()
        data.sessions[0].workout_pool_id = 5

        report = validator.validate(data)
        assert "Session 1 references non-existent WorkoutPool ID: 5" in report.errors

    def test_completion_with_missing_action(self, validator):
        """Test a completion pointing at a missing action."""
        data = make_snapshot()
        data.action_completions[0].action_id = 8

        report = validator.validate(data)
        assert "ActionCompletion 1 references non-existent Action ID: 8" in report.errors


class TestBusinessRules:
    """Tests for the business-rule pass."""

    def test_points_mismatch_warns(self, validator):
        """Test drifted totals are tolerated with a warning."""
        data = make_snapshot()
        data.sessions[0].points_earned = 12

        report = validator.validate(data)
        assert report.is_valid
        assert "Session 1 points earned mismatch: expected 10, got 12" in report.warnings

    def test_overspent_session(self, validator):
        """Test spent above earned is an error."""
        data = make_snapshot()
        data.sessions[0].points_spent = 11
        data.workout_received[0].points_spent = 11

        report = validator.validate(data)
        assert not report.is_valid
        assert any("negative balance" in e for e in report.errors)

    def test_empty_pool_warns(self, validator):
        """Test a pool without members only warns."""
        data = make_snapshot()
        data.workout_pools.append(WorkoutPool(id=2, name="Empty"))

        report = validator.validate(data)
        assert report.is_valid
        assert "WorkoutPool 'Empty' has no associated workouts" in report.warnings

    def test_two_active_sessions_for_owner(self, validator):
        """Test one owner cannot hold two active sessions."""
        data = make_snapshot()
        data.sessions.extend(
            [
                Session(id=2, name="A", workout_pool_id=1),
                Session(id=3, name="B", workout_pool_id=1),
            ]
        )

        report = validator.validate(data)
        assert "Owner 'default' has 2 active sessions" in report.errors
