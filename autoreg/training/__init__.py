"""Muscle groups, volume landmarks and fixed auto-regulation rules."""
