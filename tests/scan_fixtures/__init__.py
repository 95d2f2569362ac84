"""Auto-bind classes discovered by the package scanner tests."""
