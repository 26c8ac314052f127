"""Test suite for the class-discovery package.

This package contains unit and integration tests validating directory
scanning, module loading, sync and async resolution, memoized bindings,
the type registry and the command-line utilities.
"""
