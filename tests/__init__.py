"""
Test suite for the bonding-curve launch core

Contains:
- tests/unit/          : Unit tests for individual modules and the state machine
"""
