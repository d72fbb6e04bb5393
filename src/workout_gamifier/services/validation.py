"""Field-level validation for catalog and session input."""

from dataclasses import dataclass, field

from ..config import EconomyPolicy
from ..errors import InvalidArgumentError
from ..models.workout import Difficulty


@dataclass
class FieldError:
    """A problem with one input field."""

    field_name: str
    message: str


@dataclass
class ValidationResult:
    """Collected field errors for one form of input."""

    errors: list[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, field_name: str, message: str) -> None:
        self.errors.append(FieldError(field_name, message))

    def raise_if_invalid(self) -> None:
        """Raise InvalidArgumentError carrying every message."""
        if self.errors:
            raise InvalidArgumentError(
                "; ".join(f"{e.field_name}: {e.message}" for e in self.errors)
            )


def _parse_int(value: int | str | None) -> int | None:
    if isinstance(value, int):
        return value
    if value is None or not str(value).strip():
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _check_name(result: ValidationResult, label: str, name: str | None, limit: int) -> None:
    if name is not None and not isinstance(name, str):
        result.add_error("Name", f"{label} name must be text")
    elif not name or not name.strip():
        result.add_error("Name", f"{label} name is required")
    elif len(name) > limit:
        result.add_error("Name", f"{label} name cannot exceed {limit} characters")


def _check_optional_text(
    result: ValidationResult, field_name: str, value: str | None, limit: int
) -> None:
    if value is None:
        return
    if not isinstance(value, str):
        result.add_error(field_name, f"{field_name} must be text")
    elif len(value) > limit:
        result.add_error(field_name, f"{field_name} cannot exceed {limit} characters")


def validate_workout(
    name: str | None,
    duration: int | str | None,
    difficulty: Difficulty | str | None = Difficulty.BEGINNER,
    description: str | None = None,
    instructions: str | None = None,
    policy: EconomyPolicy | None = None,
) -> ValidationResult:
    """Validate workout fields against the policy bounds."""
    policy = policy or EconomyPolicy()
    result = ValidationResult()

    _check_name(result, "Workout", name, policy.max_name_length)
    _check_optional_text(result, "Description", description, policy.max_description_length)
    _check_optional_text(result, "Instructions", instructions, policy.max_instructions_length)

    minutes = _parse_int(duration)
    if duration is None or (isinstance(duration, str) and not duration.strip()):
        result.add_error("Duration", "Duration is required")
    elif minutes is None:
        result.add_error("Duration", "Duration must be a valid number")
    elif minutes < policy.min_workout_duration:
        result.add_error("Duration", "Duration must be greater than 0 minutes")
    elif minutes > policy.max_workout_duration:
        result.add_error(
            "Duration",
            f"Duration cannot exceed {policy.max_workout_duration} minutes",
        )

    try:
        Difficulty(difficulty)
    except ValueError:
        result.add_error("Difficulty", "Please select a valid difficulty level")

    return result


def validate_action(
    description: str | None,
    point_value: int | str | None,
    policy: EconomyPolicy | None = None,
) -> ValidationResult:
    """Validate action fields against the policy bounds."""
    policy = policy or EconomyPolicy()
    result = ValidationResult()

    limit = policy.max_action_description_length
    if description is not None and not isinstance(description, str):
        result.add_error("Description", "Action description must be text")
    elif not description or not description.strip():
        result.add_error("Description", "Action description is required")
    elif len(description) > limit:
        result.add_error("Description", f"Description cannot exceed {limit} characters")

    points = _parse_int(point_value)
    if point_value is None or (isinstance(point_value, str) and not point_value.strip()):
        result.add_error("Point Value", "Point value is required")
    elif points is None:
        result.add_error("Point Value", "Point value must be a valid number")
    elif points < policy.min_point_value:
        result.add_error("Point Value", "Point value must be greater than 0")
    elif points > policy.max_point_value:
        result.add_error(
            "Point Value", f"Point value cannot exceed {policy.max_point_value}"
        )

    return result


def validate_pool(
    name: str | None,
    description: str | None = None,
    policy: EconomyPolicy | None = None,
) -> ValidationResult:
    policy = policy or EconomyPolicy()
    result = ValidationResult()
    _check_name(result, "Workout pool", name, policy.max_name_length)
    _check_optional_text(result, "Description", description, policy.max_description_length)
    return result


def validate_session(
    name: str | None,
    workout_pool_id: int | None,
    description: str | None = None,
    policy: EconomyPolicy | None = None,
) -> ValidationResult:
    """Validate the input for starting a session."""
    policy = policy or EconomyPolicy()
    result = ValidationResult()
    _check_name(result, "Session", name, policy.max_name_length)
    _check_optional_text(result, "Description", description, policy.max_description_length)
    if workout_pool_id is None or workout_pool_id <= 0:
        result.add_error("Workout Pool", "Please select a workout pool")
    return result
