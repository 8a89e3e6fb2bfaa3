"""
External compiler management: family descriptors, cache resolution and
installation of protoc and flatc releases.
"""

from .families import CompilerFamily, GoPackage, PROTOC, FLATC, FAMILIES, get_family
from .resolver import CacheEntry, resolve, normalize_version, LATEST, LOCAL
from .installer import CompilerInstaller
from .manager import CompilerManager

__all__ = [
    "CompilerFamily",
    "GoPackage",
    "PROTOC",
    "FLATC",
    "FAMILIES",
    "get_family",
    "CacheEntry",
    "resolve",
    "normalize_version",
    "LATEST",
    "LOCAL",
    "CompilerInstaller",
    "CompilerManager",
]
