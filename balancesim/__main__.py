"""Module entrypoint for ``python -m balancesim``."""

from balancesim.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
