"""
API surface coverage analysis for versioned module manifests.

Counts the configuration surface of generated resources per module, classifies
it by the stability of the constructs that wrap it, and reports coverage as CSV
and as versioned history rows.
"""

__version__ = "0.1.0"
