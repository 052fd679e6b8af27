"""
refedit - Reference catalog editor for platform update solutions

Keeps a platform reference file consistent while entries are edited:
- Cascading removal of solutions across devices, software and app records
- Replacement by a superseded version with history preserved
- Fetching catalogs and package metadata, pre-downloading payloads
"""

__version__ = "0.3.0"
__author__ = "refedit contributors"
