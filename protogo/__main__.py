"""
Entry point for running protogo as a module.

Usage: python -m protogo [go arguments] -- [protoc|flatc] [compiler arguments]
"""

from protogo.cli.parser import main

if __name__ == "__main__":
    main()
