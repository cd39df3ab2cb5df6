"""Qt integration (non-visual). Import lazily; requires PySide6."""
