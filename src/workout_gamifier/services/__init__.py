"""Business services for workout-gamifier."""

from .backup import BackupService, default_backup_path
from .catalog import CatalogService
from .integrity import IntegrityValidator
from .ledger import PointLedger
from .selector import WorkoutSelector
from .session_engine import SessionEngine
from .statistics import StatisticsService

__all__ = [
    "BackupService",
    "CatalogService",
    "default_backup_path",
    "IntegrityValidator",
    "PointLedger",
    "SessionEngine",
    "StatisticsService",
    "WorkoutSelector",
]
