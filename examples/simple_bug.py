"""Example script that dies with an uncaught exception.

Run with: specimen examples/simple_bug.py
"""


class WeatherStation:
    units = "metric"

    def __init__(self, name, readings):
        self.name = name
        self.readings = readings
        self._calibrated = False

    def average(self, key):
        values = self.readings[key]
        return sum(values) / len(values)


def load_config(path):
    try:
        return open(path).read()
    except FileNotFoundError as e:
        raise RuntimeError(f"cannot load station config from {path}") from e


def main():
    shared = [72, 68, 75]
    station = WeatherStation(
        "north",
        {"temperatures": shared, "backup": shared, "wind_speed": [5, 7]},
    )

    print("Processing weather data...")
    for key in station.readings:
        print(f"  {key}: avg={station.average(key):.1f}")

    load_config("/nonexistent/station.toml")


if __name__ == "__main__":
    main()
