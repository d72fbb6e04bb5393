"""Backup export and import."""

import json
import logging
from datetime import datetime
from pathlib import Path

from ..config import APP_VERSION, BACKUP_DIR, EconomyPolicy
from ..db.unit_of_work import UnitOfWork
from ..errors import GamifierError, IntegrityViolationError
from ..models.backup import BackupData, ImportResult, ValidationReport
from ..models.base import utcnow
from .integrity import IntegrityValidator

logger = logging.getLogger(__name__)


def default_backup_path(backup_dir: Path | None = None) -> Path:
    """Timestamped file name inside the backup directory."""
    backup_dir = backup_dir or BACKUP_DIR
    backup_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return backup_dir / f"workout_gamifier_backup_{stamp}.json"


class BackupService:
    """Exports the whole database as one snapshot and restores it.

    Imports are validated first and then applied in a single transaction,
    so a rejected or failed import leaves the database untouched.
    """

    def __init__(self, db_path: Path | None = None, policy: EconomyPolicy | None = None):
        self.db_path = db_path
        self.validator = IntegrityValidator(policy)

    async def export_data(self) -> BackupData:
        """Read every collection into a snapshot."""
        async with UnitOfWork(self.db_path) as uow:
            data = BackupData(
                workouts=await uow.workouts.list_all(include_deleted=True),
                actions=await uow.actions.list_all(),
                workout_pools=await uow.pools.list_all(),
                workout_pool_workouts=await uow.pools.list_memberships(),
                sessions=await uow.sessions.list_all(),
                action_completions=await uow.completions.list_all(),
                workout_received=await uow.redemptions.list_all(),
                exported_at=utcnow(),
                app_version=APP_VERSION,
            )
        logger.info("Exported snapshot: %s", data.counts())
        return data

    async def export_json(self) -> str:
        data = await self.export_data()
        return json.dumps(data.to_dict(), indent=2)

    def validate_backup_json(self, text: str) -> ValidationReport:
        """Parse and validate an export document without touching storage."""
        report = ValidationReport()
        if not text or not text.strip():
            report.errors.append("Backup data is empty")
            return report

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            report.errors.append(f"Invalid JSON format: {e}")
            return report
        if not isinstance(raw, dict):
            report.errors.append("Backup document must be a JSON object")
            return report

        try:
            data = BackupData.from_dict(raw)
        except ValueError as e:
            report.errors.append(str(e))
            return report

        return self.validator.validate(data)

    def validate_backup(self, data: BackupData) -> ValidationReport:
        return self.validator.validate(data)

    async def import_json(self, text: str, overwrite: bool = False) -> ImportResult:
        """Validate and import an export document.

        Raises:
            IntegrityViolationError: the document failed validation
        """
        report = self.validate_backup_json(text)
        if not report.is_valid:
            raise IntegrityViolationError(report.errors, report.warnings)
        return await self._apply(report, overwrite)

    async def import_data(self, data: BackupData, overwrite: bool = False) -> ImportResult:
        """Validate and import a snapshot.

        With ``overwrite`` the existing non-preloaded data is replaced and
        snapshot ids are kept. Otherwise only workouts, actions, pools and
        sessions are added under fresh ids; memberships and history are
        skipped because their references would not match the new ids.

        Raises:
            IntegrityViolationError: the snapshot failed validation
        """
        report = self.validator.validate(data)
        if not report.is_valid:
            raise IntegrityViolationError(report.errors, report.warnings)
        return await self._apply(report, overwrite)

    async def _apply(self, report: ValidationReport, overwrite: bool) -> ImportResult:
        data = report.data
        result = ImportResult(warnings=list(report.warnings))

        async with UnitOfWork(self.db_path) as uow:
            async with uow.transaction():
                if overwrite:
                    await self._clear_existing(uow)
                    await self._import_overwrite(uow, data, result)
                else:
                    await self._import_merge(uow, data, result)

        result.success = True
        result.message = "Data imported successfully"
        logger.info(
            "Imported backup (overwrite=%s): %d workouts, %d actions, %d pools, %d sessions",
            overwrite,
            result.workouts_imported,
            result.actions_imported,
            result.workout_pools_imported,
            result.sessions_imported,
        )
        return result

    async def _clear_existing(self, uow: UnitOfWork) -> None:
        # Reverse dependency order
        await uow.redemptions.delete_all()
        await uow.completions.delete_all()
        await uow.sessions.delete_all()
        await uow.pools.delete_all_memberships()
        await uow.pools.delete_all()
        await uow.actions.delete_all()
        await uow.workouts.delete_non_preloaded()

    async def _import_overwrite(
        self, uow: UnitOfWork, data: BackupData, result: ImportResult
    ) -> None:
        await self._release_claimed_ids(uow, data)

        for workout in data.workouts:
            existing = await uow.workouts.get(workout.id) if workout.id is not None else None
            if existing is not None:
                # Only a preloaded row matched by a preloaded record is left here
                await uow.workouts.update(workout)
            else:
                await uow.workouts.create(workout)
            result.workouts_imported += 1

        for action in data.actions:
            await uow.actions.create(action)
            result.actions_imported += 1

        for pool in data.workout_pools:
            await uow.pools.create(pool)
            result.workout_pools_imported += 1

        for membership in data.workout_pool_workouts:
            await uow.pools.add_workout(membership.workout_pool_id, membership.workout_id)
            result.workout_pool_workouts_imported += 1

        for session in data.sessions:
            await uow.sessions.create(session)
            result.sessions_imported += 1

        for completion in data.action_completions:
            await uow.completions.create(completion)
            result.action_completions_imported += 1

        for received in data.workout_received:
            await uow.redemptions.create(received)
            result.workout_received_imported += 1

    async def _release_claimed_ids(self, uow: UnitOfWork, data: BackupData) -> None:
        """Move surviving preloaded workouts off ids a custom backup workout uses.

        Nothing references the survivors once existing data is cleared, so
        they can be renumbered and the snapshot keeps its own ids.
        """
        claimed = {w.id for w in data.workouts if w.id is not None and not w.is_preloaded}
        survivors = await uow.workouts.list_all(include_deleted=True)
        next_id = max(
            [w.id for w in data.workouts if w.id is not None] + [w.id for w in survivors],
            default=0,
        ) + 1
        for workout in survivors:
            if workout.id not in claimed:
                continue
            old_id = workout.id
            await uow.workouts.delete(old_id)
            workout.id = next_id
            await uow.workouts.create(workout)
            next_id += 1
            logger.info(
                "Moved preloaded workout '%s' from id %d to %d", workout.name, old_id, workout.id
            )

    async def _import_merge(
        self, uow: UnitOfWork, data: BackupData, result: ImportResult
    ) -> None:
        for workout in data.workouts:
            workout.id = None
            workout.is_preloaded = False
            workout.created_at = workout.updated_at = None
            await uow.workouts.create(workout)
            result.workouts_imported += 1

        for action in data.actions:
            action.id = None
            action.created_at = action.updated_at = None
            await uow.actions.create(action)
            result.actions_imported += 1

        # Pool ids change, so sessions are remapped onto the new pools
        pool_ids: dict[int, int] = {}
        for pool in data.workout_pools:
            old_id = pool.id
            pool.id = None
            pool.created_at = pool.updated_at = None
            await uow.pools.create(pool)
            pool_ids[old_id] = pool.id
            result.workout_pools_imported += 1

        active = await uow.sessions.get_active_owners()
        for session in data.sessions:
            session.id = None
            session.created_at = session.updated_at = None
            session.workout_pool_id = pool_ids[session.workout_pool_id]
            if session.is_active and session.owner in active:
                result.warnings.append(
                    f"Session '{session.name}' skipped: owner '{session.owner}' "
                    "already has an active session"
                )
                continue
            await uow.sessions.create(session)
            if session.is_active:
                active.add(session.owner)
            result.sessions_imported += 1

        skipped = (
            len(data.workout_pool_workouts)
            + len(data.action_completions)
            + len(data.workout_received)
        )
        if skipped:
            result.warnings.append(
                f"Skipped {skipped} pool membership and history record(s) in merge mode"
            )

    async def save_backup_to_file(self, text: str, path: Path | None = None) -> Path:
        """Write an export document, creating parent directories."""
        path = Path(path) if path else default_backup_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise GamifierError(f"Failed to save backup file {path}: {e}") from e
        logger.info("Saved backup to %s", path)
        return path

    async def load_backup_from_file(self, path: Path) -> str:
        path = Path(path)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise GamifierError(f"Backup file not found: {path}") from e
        except OSError as e:
            raise GamifierError(f"Failed to load backup file {path}: {e}") from e
