"""Version 1 of the assessment API."""
