"""workout-gamifier: earn points for actions, spend them on random workouts."""

__version__ = "0.1.0"
