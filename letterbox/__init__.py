"""
Letterbox - Anonymous Letter Board

Pick a recipient, leave them an anonymous letter, reply to letters
and like them. Storage is delegated to SQLite or a hosted PostgREST store.
"""

__version__ = "0.1.0"
__author__ = "Letterbox Project"
