"""pubsentinel — find unused, misplaced and duplicate pubspec dependencies."""

__version__ = "0.1.0"
