# clinic_registry/__main__.py

"""Entry point for executing clinic_registry as a module.

This file allows the clinic_registry package to be executed as a script
using `python -m clinic_registry`.
"""
import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())
