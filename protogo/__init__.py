"""
protogo - automated protoc / flatc installation for Go builds.
"""

__version__ = "0.1.0"
