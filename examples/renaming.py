from __future__ import annotations

import math

from debug_plotter import plot


def main() -> None:
    for a in range(10):
        b = math.sin(a / 2.0) * 10.0
        c = 5 - a
        plot({"Alice": a, "Bob": b, "Charlie": c}, caption="Renaming")


if __name__ == "__main__":
    main()
