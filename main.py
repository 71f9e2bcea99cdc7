"""Main CLI entry point."""

from certctl.cli.menu import main

if __name__ == "__main__":
    main()
