"""
Test suite for shopless

Contains:
- tests/unit/          : Unit tests for money, pricing, cart and adapters
"""
