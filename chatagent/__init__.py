# chatagent/__init__.py
"""
ChatAgent - turns natural-language change requests into staged, reviewable
file operations on a local repository.
"""

__version__ = "0.1.0"
