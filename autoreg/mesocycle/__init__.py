"""Mesocycle models, week planning and lifecycle transitions."""
