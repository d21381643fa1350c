"""Allow ``python -m climcp``."""

from climcp.app import main

if __name__ == "__main__":
    main()
