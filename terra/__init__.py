"""
Terra Character Forge
=====================
Character assembly and validation core for campaign rule catalogs.
"""

__version__ = "0.3.0"
