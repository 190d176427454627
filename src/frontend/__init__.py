"""Command-line and web front ends for the MagicText engine."""
