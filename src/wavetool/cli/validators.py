from wavetool.dsp.filter import parse_mask, parse_prime_list


def validate_mask_string(type_: object, mask: str | None) -> None:
    """Validate a bitmap/pattern mask made of '0' and '1' characters."""
    if mask is None:
        return

    parse_mask(mask)


def validate_prime_list(type_: object, primes: str | None) -> None:
    """Validate a comma separated list of primes, e.g. '2,3,7'."""
    if primes is None:
        return

    parse_prime_list(primes)


def validate_non_negative_integer(type_: object, value: int | None) -> None:
    if value is not None and value < 0:
        raise ValueError("Value must not be negative")
