from __future__ import annotations

import numpy as np

from debug_plotter import flush_all, plot


def main() -> None:
    rng = np.random.default_rng(7)
    walk = 0.0
    for step in range(500):
        walk += float(rng.normal())
        # Each line is its own call site and ends up in its own image.
        plot({"walk": walk}, caption="Random walk")
        plot({"step^2": step * step}, caption="Squares", values=100)
    report = flush_all()
    for path in report.rendered:
        print(path)


if __name__ == "__main__":
    main()
