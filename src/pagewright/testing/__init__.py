"""Test utilities for pagewright applications::

    from pagewright.testing import TestClient
"""

from pagewright.testing.client import TestClient

__all__ = ["TestClient"]
