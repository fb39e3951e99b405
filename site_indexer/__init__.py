# site_indexer/__init__.py
"""
SiteIndexer package initializer.
Defines package version.
"""
__version__ = "0.1.0"
