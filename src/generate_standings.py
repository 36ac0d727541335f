from __future__ import annotations

from standings_core import parse_args, run_standings


def main() -> None:
    run_standings(parse_args())


if __name__ == "__main__":
    main()
