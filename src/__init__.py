"""Adaptive tutor: mastery estimation and learning analytics."""
