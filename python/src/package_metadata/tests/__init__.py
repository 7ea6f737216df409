"""
Package Metadata Tests Module

Test suite for the package metadata resolver.

Test Coverage:
- Version parsing, ordering and selection policy
- Connection cache reuse, failure and cancellation handling
- Registration and search queries against a fake registry
- End-to-end resolution and error propagation
"""
