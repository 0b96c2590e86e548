"""Allow ``python -m tome.cli``."""

from tome.cli.main import main

if __name__ == "__main__":
    main()
