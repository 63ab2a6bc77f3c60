"""Application layer: vote signing and tally orchestration."""
