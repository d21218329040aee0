"""lockstep: keep a tree of packages released on one shared version."""

__version__ = "0.1.0"
