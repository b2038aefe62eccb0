"""
Fixture types documented by the test suite.

Everything under tests.domain is inside the documented namespace; types in
tests.external are not.
"""
