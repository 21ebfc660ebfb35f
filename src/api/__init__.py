"""HTTP surface for the adaptive tutor service."""
