"""Engine and session wiring."""
