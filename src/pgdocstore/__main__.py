"""Entry point for 'python -m pgdocstore' command."""

from pgdocstore.cli import main

if __name__ == "__main__":
    main()
