from __future__ import annotations

import logging
import math

from debug_plotter import plot


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    i = 0
    while True:
        x = i / 100.0 * math.pi * 2.0
        plot(
            {"sin(x)": (x, math.sin(x)), "cos(x)": (x, math.cos(x))},
            caption="Live Trigonometry",
            x_desc="x",
            values=100,
            live=True,
            size=(1080, 720),
        )
        i += 1


if __name__ == "__main__":
    main()
