"""Real-time notification service package."""
