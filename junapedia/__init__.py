"""
Junapedia - merchant record linkage and store directory.
"""

__version__ = "0.1.0"
