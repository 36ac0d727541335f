from __future__ import annotations

from house_core import parse_args, run_house_effects


def main() -> None:
    run_house_effects(parse_args())


if __name__ == "__main__":
    main()
