from __future__ import annotations

from debug_plotter import plot


def main() -> None:
    for i in range(1000):
        plot(
            {"i": i},
            caption="Options",
            size=(400, 300),
            path="plots/Options.jpg",
            x_desc="X Description",
            y_desc="Y Description",
            x_range=(0.0, 500.0),
            y_range=(0.0, 500.0),
        )


if __name__ == "__main__":
    main()
