"""URL slugs for catalogue entries."""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Lower-case the name and collapse every non-alphanumeric run into a hyphen.

    >>> slugify("Noise-Cancelling Headphones (2nd Gen)")
    'noise-cancelling-headphones-2nd-gen'
    """
    return _NON_ALNUM.sub("-", name.lower()).strip("-")
