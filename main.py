# main.py

from typing import List

from models import ROUTE_INPUT_INVALID, DangerZone, Point
from route_planner import build_router


def read_float(prompt: str) -> float:
    while True:
        try:
            return float(input(prompt))
        except ValueError:
            print("Invalid input. Please enter a numeric value (e.g., 44.9697, -93.2223).")


def read_point(label: str) -> Point:
    while True:
        lat = read_float(f"{label} latitude: ")
        lon = read_float(f"{label} longitude: ")
        try:
            return Point.from_dict({"lat": lat, "lon": lon})
        except ValueError as e:
            print(f"Invalid coordinate: {e}")


def read_zones() -> List[DangerZone]:
    zones: List[DangerZone] = []
    count = int(read_float("Enter number of danger zones: "))
    for i in range(count):
        print(f"\n--- Danger zone {i + 1} ---")
        center = read_point("Zone center")
        while True:
            radius = read_float("Radius (meters): ")
            if radius >= 0:
                break
            print("Radius must be zero or positive.")
        zones.append(DangerZone(lat=center.lat, lon=center.lon, radius_m=radius, zone_id=str(i + 1)))
    return zones


def main():
    print("\n=== Safe Walking Route (offline graph, OSRM, ORS, local detour) ===")

    print("\nEnter Start Location:")
    start = read_point("Start")
    print("\nEnter Destination:")
    end = read_point("Destination")
    print("\nEnter Danger Zones:")
    zones = read_zones()

    router = build_router()
    print(f"\nCalculating route using: {', '.join(router.strategy_names)} ...")
    result = router.route(start, end, zones)

    if result.status == ROUTE_INPUT_INVALID:
        print("Your start or destination is inside a danger zone. No route can be safe.")
    elif not result.ok:
        print("No safe route found. Try a different destination.")
        print("Warning: the direct line is shown only as an unsafe fallback.")
    else:
        print(f"\nRoute found via {result.source} ({len(result.points)} points):")
        for p in result.points:
            print(f"  {p.lat:.6f}, {p.lon:.6f}")


if __name__ == "__main__":
    main()
