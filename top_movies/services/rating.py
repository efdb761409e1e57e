"""User rating validation.

A rating is an integer string in [1, 10]. Anything else is rejected before it
can reach the local store.
"""

import re

from top_movies.errors import ValidationError

MIN_RATING = 1
MAX_RATING = 10

_INTEGER_RE = re.compile(r"([+-]?)([0-9]+)")


def validate_user_rating(value: str) -> str:
    """Validate a user rating and return its canonical form ("07" -> "7").

    Raises:
        ValidationError: kind "non_numeric" if value is not an integer string,
            kind "out_of_range" if it is outside [1, 10].
    """
    match = _INTEGER_RE.fullmatch(value) if isinstance(value, str) else None
    if match is None:
        raise ValidationError("non_numeric", f"Rating must be a whole number, got {value!r}")

    sign, digits = match.groups()
    digits = digits.lstrip("0") or "0"
    # Never hand int() an unbounded digit string
    if len(digits) > len(str(MAX_RATING)):
        raise ValidationError(
            "out_of_range",
            f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {value[:12]!r}",
        )

    rating = int(sign + digits)
    if rating < MIN_RATING or rating > MAX_RATING:
        raise ValidationError(
            "out_of_range",
            f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}",
        )
    return str(rating)
