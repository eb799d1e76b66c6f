"""mpm: npm-style dependency manager for Maven projects."""

__version__ = "1.0.0"
