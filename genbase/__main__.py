"""Allow ``python -m genbase``."""

from .cli import main

if __name__ == "__main__":
    main()
