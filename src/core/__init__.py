"""
Core domain models, fixed-point primitives, and contracts.

This module contains the foundational building blocks of the launch core
that are independent of custody, clocks and storage.
"""
