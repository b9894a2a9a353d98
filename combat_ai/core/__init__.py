"""Core engine modules: errors, dice estimation and the decision AI."""
