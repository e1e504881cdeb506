"""Entry point for 'python -m schemabase'."""

from schemabase.cli import main

if __name__ == "__main__":
    main()
