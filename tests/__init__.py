"""
Test Suite

Contains unit tests for the account service client.

Structure:
- tests/unit/: Tests for individual components (classifier, session, requests,
  publisher, account service, transport, config, FastAPI bridge)

Uses pytest with pytest-asyncio for testing async functionality. No test
opens a real network connection.
"""
