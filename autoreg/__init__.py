"""Training-load auto-regulation engine.

Decides from workout and feedback history whether accumulated fatigue
warrants a deload week, and manages the mesocycle that prescribes weekly
volume per muscle group.
"""
