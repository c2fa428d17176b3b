"""Allow ``python -m postlang``."""

from .cli import main

if __name__ == "__main__":
    main()
