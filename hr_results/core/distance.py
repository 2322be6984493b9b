"""Convert race distances (in miles) to something a human would rather see."""


# Non-integral distances we know about. Most are really metric races
# whose distance was recorded in miles.
KNOWN_DISTANCES = {
    3.107: '5km',
    6.214: '10km',
    0.932: '1.5km',
    1.553: '2.5km',
    2.7: '2.7 Miles',
    0.746: '1.2km',
    0.5: '1/2 Mile',
}


def distance_for_humans(distance) -> str:
    """Return a display label for a distance in miles.

    Args:
        distance: Miles as a number or numeric string, e.g. 2 or "3.107".

    Returns:
        "1 Mile", "2 Miles", one of KNOWN_DISTANCES, or "<distance> Miles"
        with the distance exactly as passed.
    """
    miles = float(distance)
    if miles.is_integer():
        n = int(miles)
        return f'{n} Mile' if n == 1 else f'{n} Miles'
    if miles in KNOWN_DISTANCES:
        return KNOWN_DISTANCES[miles]
    return f'{distance} Miles'
