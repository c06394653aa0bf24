"""HTTP host for the componentkb services."""
