"""
Entry point for running protogo CLI as a module.

Usage: python -m protogo.cli [go arguments] -- [protoc|flatc] [compiler arguments]
"""

from .parser import main

if __name__ == "__main__":
    main()
