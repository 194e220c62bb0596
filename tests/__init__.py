# hashlink Test Suite
"""
Test suite including:
- Unit tests
- Integration tests
- Security tests (tampering and malformed input)

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
