"""Entry point for running infrachat as a module.

This allows running: python -m infrachat
"""

from .cli import main

if __name__ == "__main__":
    # main() is the CLI boundary and already logs and exits on failure.
    main()
