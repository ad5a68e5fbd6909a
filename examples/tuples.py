from __future__ import annotations

import math

from debug_plotter import plot


def main() -> None:
    for i in range(100):
        x = i / 100.0 * math.pi * 2.0
        plot({"sin(x)": (x, math.sin(x)), "cos(x)": (x, math.cos(x))}, caption="Trigonometry", x_desc="x")


if __name__ == "__main__":
    main()
