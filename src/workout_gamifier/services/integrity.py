"""Integrity checks over a full data snapshot."""

import logging
from collections import Counter, defaultdict

from ..config import EconomyPolicy
from ..models.backup import BackupData, ValidationReport
from .validation import validate_action, validate_pool, validate_workout

logger = logging.getLogger(__name__)

REQUIRED_COLLECTIONS = {
    "workouts": "Workouts",
    "workout_pools": "WorkoutPools",
    "workout_pool_workouts": "WorkoutPoolWorkouts",
    "actions": "Actions",
    "sessions": "Sessions",
    "action_completions": "ActionCompletions",
    "workout_received": "WorkoutReceived",
}


class IntegrityValidator:
    """Re-derives links and ledger totals from raw records.

    Runs three passes (structure, references, business rules) and never
    touches storage. Errors mean the snapshot must not be imported;
    warnings are surfaced but tolerated, which lets legacy data with
    drifted totals through.
    """

    def __init__(self, policy: EconomyPolicy | None = None):
        self.policy = policy or EconomyPolicy()

    def validate(self, data: BackupData) -> ValidationReport:
        report = ValidationReport(data=data)

        self._check_structure(data, report)
        self._check_entities(data, report)
        self._check_references(data, report)
        self._check_business_rules(data, report)

        for warning in report.warnings:
            logger.warning("Integrity warning: %s", warning)
        if report.errors:
            logger.warning("Integrity check found %d error(s)", len(report.errors))
        return report

    def _check_structure(self, data: BackupData, report: ValidationReport) -> None:
        for attr, label in REQUIRED_COLLECTIONS.items():
            if getattr(data, attr) is None:
                report.errors.append(f"{label} collection is missing")

        if data.exported_at is None:
            report.warnings.append("Export timestamp is missing or invalid")
        if not data.app_version:
            report.warnings.append("App version information is missing")

    def _check_entities(self, data: BackupData, report: ValidationReport) -> None:
        for i, w in enumerate(data.workouts or []):
            result = validate_workout(
                w.name, w.duration_minutes, w.difficulty, w.description,
                w.instructions, self.policy,
            )
            for err in result.errors:
                report.errors.append(f"Workout at index {i}: {err.message}")

        for i, a in enumerate(data.actions or []):
            for err in validate_action(a.description, a.point_value, self.policy).errors:
                report.errors.append(f"Action at index {i}: {err.message}")

        for i, p in enumerate(data.workout_pools or []):
            for err in validate_pool(p.name, p.description, self.policy).errors:
                report.errors.append(f"WorkoutPool at index {i}: {err.message}")

        for i, s in enumerate(data.sessions or []):
            if s.name is not None and not isinstance(s.name, str):
                report.errors.append(f"Session at index {i}: Session name must be text")
            elif not s.name or not s.name.strip():
                report.errors.append(f"Session at index {i}: Session name is required")
            if s.points_earned < 0 or s.points_spent < 0:
                report.errors.append(f"Session at index {i}: point totals cannot be negative")

        self._check_duplicate_ids(data, report)

    def _check_duplicate_ids(self, data: BackupData, report: ValidationReport) -> None:
        for attr, label in REQUIRED_COLLECTIONS.items():
            if attr == "workout_pool_workouts":
                pairs = Counter(
                    (m.workout_pool_id, m.workout_id) for m in data.workout_pool_workouts or []
                )
                for (pool_id, workout_id), n in pairs.items():
                    if n > 1:
                        report.errors.append(
                            f"WorkoutPoolWorkout pair ({pool_id}, {workout_id}) appears {n} times"
                        )
                continue
            ids = Counter(item.id for item in getattr(data, attr) or [] if item.id is not None)
            for entity_id, n in ids.items():
                if n > 1:
                    report.errors.append(f"{label} ID {entity_id} appears {n} times")

    def _check_references(self, data: BackupData, report: ValidationReport) -> None:
        workout_ids = {w.id for w in data.workouts or []}
        pool_ids = {p.id for p in data.workout_pools or []}
        action_ids = {a.id for a in data.actions or []}
        session_ids = {s.id for s in data.sessions or []}

        for m in data.workout_pool_workouts or []:
            if m.workout_id not in workout_ids:
                report.errors.append(
                    f"WorkoutPoolWorkout ({m.workout_pool_id}, {m.workout_id}) "
                    f"references non-existent Workout ID: {m.workout_id}"
                )
            if m.workout_pool_id not in pool_ids:
                report.errors.append(
                    f"WorkoutPoolWorkout ({m.workout_pool_id}, {m.workout_id}) "
                    f"references non-existent WorkoutPool ID: {m.workout_pool_id}"
                )

        for s in data.sessions or []:
            if s.workout_pool_id not in pool_ids:
                report.errors.append(
                    f"Session {s.id} references non-existent WorkoutPool ID: {s.workout_pool_id}"
                )

        for ac in data.action_completions or []:
            if ac.session_id not in session_ids:
                report.errors.append(
                    f"ActionCompletion {ac.id} references non-existent Session ID: {ac.session_id}"
                )
            if ac.action_id not in action_ids:
                report.errors.append(
                    f"ActionCompletion {ac.id} references non-existent Action ID: {ac.action_id}"
                )

        for wr in data.workout_received or []:
            if wr.session_id not in session_ids:
                report.errors.append(
                    f"WorkoutReceived {wr.id} references non-existent Session ID: {wr.session_id}"
                )
            if wr.workout_id not in workout_ids:
                report.errors.append(
                    f"WorkoutReceived {wr.id} references non-existent Workout ID: {wr.workout_id}"
                )

    def _check_business_rules(self, data: BackupData, report: ValidationReport) -> None:
        members = Counter(m.workout_pool_id for m in data.workout_pool_workouts or [])
        for pool in data.workout_pools or []:
            if members[pool.id] == 0:
                report.warnings.append(f"WorkoutPool '{pool.name}' has no associated workouts")

        earned = defaultdict(int)
        for ac in data.action_completions or []:
            earned[ac.session_id] += ac.points_awarded
        spent = defaultdict(int)
        for wr in data.workout_received or []:
            spent[wr.session_id] += wr.points_spent

        active_by_owner = Counter()
        for s in data.sessions or []:
            if s.points_earned != earned[s.id]:
                report.warnings.append(
                    f"Session {s.id} points earned mismatch: "
                    f"expected {earned[s.id]}, got {s.points_earned}"
                )
            if s.points_spent != spent[s.id]:
                report.warnings.append(
                    f"Session {s.id} points spent mismatch: "
                    f"expected {spent[s.id]}, got {s.points_spent}"
                )
            if s.points_spent > s.points_earned:
                report.errors.append(
                    f"Session {s.id} has negative balance: "
                    f"earned {s.points_earned}, spent {s.points_spent}"
                )
            if s.is_active:
                active_by_owner[s.owner] += 1

        for owner, n in active_by_owner.items():
            if n > 1:
                report.errors.append(f"Owner '{owner}' has {n} active sessions")
