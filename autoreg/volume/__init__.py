"""Weekly volume ledger and per-muscle fatigue."""
