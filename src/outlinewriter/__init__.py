"""OutlineWriter: expand a hierarchical outline into a continuous essay, point by point."""

__version__ = "0.1.0"
