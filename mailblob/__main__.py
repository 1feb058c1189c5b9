from __future__ import annotations

from mailblob.cli.main import cli


def main() -> None:
    cli(prog_name="mailblob")


if __name__ == "__main__":
    main()
