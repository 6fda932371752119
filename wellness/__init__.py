"""Wellness -- find short pauses in your day and match them to your mood."""
