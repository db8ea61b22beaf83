"""Interactive console player."""
