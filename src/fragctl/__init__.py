"""fragctl: composable runtime fragments with a queryable command registry."""

__version__ = "0.1.0"
