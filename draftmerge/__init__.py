"""Draft comparison and merge engine for manuscript projects."""

__version__ = "1.0.0"
