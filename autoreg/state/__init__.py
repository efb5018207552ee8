"""Training state, persistence effects and (de)serialization."""
