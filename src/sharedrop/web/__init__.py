"""HTTP boundary for sharedrop."""
