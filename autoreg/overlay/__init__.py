"""Manual deload window, independent of the mesocycle."""
