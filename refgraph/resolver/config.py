"""
Configuration for the Python resolver.

Plain dataclasses with defaults; nothing is read from the environment.
"""

import fnmatch
from dataclasses import dataclass, field


@dataclass
class ResolverConfig:
    """Configuration for discovering and classifying files of a Python unit."""

    # Files whose declarations are test-only (matched against the base name)
    test_file_patterns: list[str] = field(default_factory=lambda: [
        "test_*.py",
        "*_test.py",
        "conftest.py",
    ])

    # Files never loaded into the unit
    exclude_patterns: list[str] = field(default_factory=lambda: [
        ".*",
        "*.pyc",
        "setup.py",
    ])

    # Encoding used when reading files from disk
    encoding: str = "utf-8"

    def is_test_file(self, file_name: str) -> bool:
        """Check if a file name matches any test pattern."""
        return any(fnmatch.fnmatch(file_name, pattern) for pattern in self.test_file_patterns)

    def is_excluded(self, file_name: str) -> bool:
        """Check if a file name matches any exclusion pattern."""
        return any(fnmatch.fnmatch(file_name, pattern) for pattern in self.exclude_patterns)
