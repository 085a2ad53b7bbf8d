"""Allow running the CLI as a module: python -m saasfactory."""

from saasfactory.cli.app import main

if __name__ == "__main__":
    main()
