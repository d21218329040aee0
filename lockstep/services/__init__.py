"""Application services for the lockstep CLI."""
