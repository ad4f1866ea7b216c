"""
Bundled reference data.
"""
