"""Random name suffixes for collision avoidance."""

import random
import string

_ALPHABET = string.ascii_letters + string.digits


def generate_slug(length: int) -> str:
    """Return `length` random alphanumeric characters.

    Not suitable for anything security sensitive.
    """
    if length <= 0:
        raise ValueError(f"slug length must be positive, got {length}")
    return "".join(random.choices(_ALPHABET, k=length))


def slugged_name(name: str | None, slug_length: int) -> str | None:
    """Effective resource name: "{name}_{slug}", bare name, or None when unset."""
    if name is None:
        return None
    if slug_length > 0:
        return f"{name}_{generate_slug(slug_length)}"
    return name
