"""Allow running as `python -m delegate_auth`."""

from delegate_auth.cli import main

if __name__ == "__main__":
    main()
