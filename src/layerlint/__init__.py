"""Layerlint: namespace-based architecture rules for PHP codebases."""

__version__ = "0.3.0"
