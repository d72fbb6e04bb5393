"""Point ledger rules for sessions."""

from datetime import datetime, timedelta

from ..errors import InsufficientPointsError, InvalidArgumentError
from ..models.session import Session, SessionStatus


class PointLedger:
    """Rules over a session's earned/spent totals.

    The engine applies credits and debits with single conditional updates
    in storage; this class holds the same rules for in-memory checks and
    reporting.
    """

    def balance(self, session: Session) -> int:
        """Points currently available to spend."""
        return session.points_earned - session.points_spent

    def can_afford(self, session: Session, cost: int) -> bool:
        return self.balance(session) >= cost

    def check_spend(self, session: Session, cost: int) -> None:
        """Validate a debit without applying it.

        Raises:
            InvalidArgumentError: if cost is not positive
            InsufficientPointsError: if the balance does not cover cost
        """
        if cost <= 0:
            raise InvalidArgumentError(f"Point cost must be greater than 0, got {cost}")
        if not self.can_afford(session, cost):
            raise InsufficientPointsError(balance=self.balance(session), required=cost)

    def session_duration(self, session: Session, now: datetime | None = None) -> timedelta:
        """Elapsed time, up to now for a running session."""
        return session.elapsed(now)

    def average_session_minutes(self, sessions: list[Session]) -> float:
        """Mean duration in minutes over completed sessions."""
        finished = [
            s for s in sessions
            if s.status == SessionStatus.COMPLETED and s.duration is not None
        ]
        if not finished:
            return 0.0
        total = sum(s.duration.total_seconds() for s in finished) / 60
        return total / len(finished)
