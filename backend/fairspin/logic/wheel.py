"""European roulette wheel layout."""
RED_NUMBERS = frozenset(
    {1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36}
)
BLACK_NUMBERS = frozenset(
    {2, 4, 6, 8, 10, 11, 13, 15, 17, 20, 22, 24, 26, 28, 29, 31, 33, 35}
)

# Clockwise from 0
WHEEL_ORDER: tuple[int, ...] = (
    0, 32, 15, 19, 4, 21, 2, 25, 17, 34, 6, 27, 13, 36, 11, 30, 8, 23, 10,
    5, 24, 16, 33, 1, 20, 14, 31, 9, 22, 18, 29, 7, 28, 12, 35, 3, 26,
)


def _check(number: int) -> None:
    if isinstance(number, bool) or not isinstance(number, int) or not 0 <= number <= 36:
        raise ValueError(f"Not a roulette number: {number!r}")


def number_color(number: int) -> str:
    """Return "green", "red" or "black"."""
    _check(number)
    if number == 0:
        return "green"
    return "red" if number in RED_NUMBERS else "black"


def wheel_index(number: int) -> int:
    """Pocket position of number on the wheel, 0 being the green zero."""
    _check(number)
    return WHEEL_ORDER.index(number)
