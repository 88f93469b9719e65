"""Allow running as `python -m fakecandy`."""

from fakecandy.cli.main import cli

if __name__ == "__main__":
    cli()
