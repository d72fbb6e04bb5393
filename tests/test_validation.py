"""Tests for input validation."""

import pytest

from workout_gamifier.config import EconomyPolicy
from workout_gamifier.errors import InvalidArgumentError
from workout_gamifier.services.validation import (
    validate_action,
    validate_pool,
    validate_session,
    validate_workout,
)


class TestValidateWorkout:
    """Tests for workout validation."""

    def test_valid(self):
        """Test a well-formed workout passes."""
        assert validate_workout("Squats", 10, "Beginner").is_valid

    def test_name_required(self):
        """Test blank names are rejected."""
        result = validate_workout("   ", 10)
        assert not result.is_valid
        assert result.errors[0].message == "Workout name is required"

    def test_name_too_long(self):
        """Test the name length bound."""
        assert not validate_workout("x" * 101, 10).is_valid

    @pytest.mark.parametrize(
        "duration,message",
        [
            (None, "Duration is required"),
            ("abc", "Duration must be a valid number"),
            (0, "Duration must be greater than 0 minutes"),
            (481, "Duration cannot exceed 480 minutes"),
        ],
    )
    def test_duration_bounds(self, duration, message):
        """Test duration messages."""
        result = validate_workout("W", duration)
        assert [e.message for e in result.errors] == [message]

    def test_duration_bound_from_policy(self):
        """Test the maximum duration follows the policy."""
        policy = EconomyPolicy(max_workout_duration=300)
        assert not validate_workout("W", 301, policy=policy).is_valid
        assert validate_workout("W", 300, policy=policy).is_valid

    def test_numeric_string_duration(self):
        """Test numeric strings are accepted."""
        assert validate_workout("W", " 15 ").is_valid

    def test_bad_difficulty(self):
        """Test unknown difficulty."""
        result = validate_workout("W", 10, "Impossible")
        assert result.errors[0].field_name == "Difficulty"

    def test_raise_if_invalid_collects_messages(self):
        """Test all field errors are reported together."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_workout("", 0).raise_if_invalid()

        message = str(exc_info.value)
        assert "Workout name is required" in message
        assert "Duration must be greater than 0 minutes" in message


class TestValidateAction:
    """Tests for action validation."""

    def test_valid(self):
        """Test a well-formed action passes."""
        assert validate_action("Drink water", 5).is_valid

    @pytest.mark.parametrize("points", [0, -5, 1001])
    def test_point_bounds(self, points):
        """Test point value bounds."""
        assert not validate_action("Drink water", points).is_valid

    def test_description_required(self):
        """Test blank descriptions are rejected."""
        assert not validate_action("", 5).is_valid

    def test_description_too_long(self):
        """Test description length bound."""
        assert not validate_action("x" * 201, 5).is_valid


class TestValidatePoolAndSession:
    """Tests for pool and session validation."""

    def test_pool_name_required(self):
        """Test blank pool names."""
        assert not validate_pool("").is_valid

    def test_session_requires_pool(self):
        """Test a pool must be chosen."""
        result = validate_session("Morning", None)
        assert result.errors[0].field_name == "Workout Pool"

    def test_session_valid(self):
        """Test a well-formed session passes."""
        assert validate_session("Morning", 1, "Before work").is_valid


class TestNonTextInput:
    """Tests for values of the wrong JSON type."""

    def test_numeric_workout_name(self):
        """Test a number where a name belongs."""
        result = validate_workout(123, 10)
        assert [e.message for e in result.errors] == ["Workout name must be text"]

    def test_numeric_description(self):
        """Test a number where a description belongs."""
        result = validate_pool("Pool", 42)
        assert [e.message for e in result.errors] == ["Description must be text"]

    def test_list_instructions(self):
        """Test a list where instructions belong."""
        result = validate_workout("Run", 10, instructions=["step one"])
        assert [e.field_name for e in result.errors] == ["Instructions"]

    def test_numeric_action_description(self):
        """Test a number where an action description belongs."""
        result = validate_action(7, 5)
        assert [e.message for e in result.errors] == ["Action description must be text"]
