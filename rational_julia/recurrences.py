"""
Recurrence strategies for the rational Julia explorer.

A recurrence is split in two steps so the engine can inspect the
denominator before dividing by it:

    d = recurrence.denominator(z, params)
    if |d| < threshold: singularity
    z = recurrence.advance(z, d, params)

Supported recurrences:
- 0: z = (k / (z - v))^2 + x   (rational Julia, the default)
- 1: z = 1 / (z^2 - v)         (inverse square)

The integer ids are shared with the Numba and PyTorch kernels.
"""

from collections import namedtuple

from .complex_number import Complex, ONE


# Recurrence IDs
RECURRENCE_RATIONAL_JULIA = 0   # (k / (z - v))² + x
RECURRENCE_INVERSE_SQUARE = 1   # 1 / (z² - v)


RecurrenceParams = namedtuple("RecurrenceParams", ["singularity", "k", "x"])
RecurrenceParams.__doc__ = """Constants handed to a recurrence for one evaluation.

singularity: the user-tunable pole location v (Complex)
k: real scalar numerator
x: additive constant (Complex)
"""

JuliaConstants = namedtuple("JuliaConstants", ["k", "x"])


class Recurrence:
    """Base class for the per-iteration update rule."""

    name = None
    recurrence_id = None
    formula = None

    def denominator(self, z, params):
        """Return the expression whose modulus may approach zero."""
        raise NotImplementedError

    def advance(self, z, denominator, params):
        """Return the next z, given the denominator computed for this step."""
        raise NotImplementedError

    def constants_view(self, params):
        """
        Variant-specific constants for display, or None.

        Lets callers show extra fields (such as the Julia constants) without
        checking the concrete recurrence type.
        """
        return None

    def __repr__(self):
        return f"{type(self).__name__}()"

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))


class RationalJulia(Recurrence):
    """z = (k / (z - v))² + x; the pole sits at z = v."""

    name = "Rational Julia"
    recurrence_id = RECURRENCE_RATIONAL_JULIA
    formula = "(k / (z - v))^2 + x"

    def denominator(self, z, params):
        return z - params.singularity

    def advance(self, z, denominator, params):
        return (Complex(params.k, 0.0) / denominator).square() + params.x

    def constants_view(self, params):
        return JuliaConstants(params.k, params.x)


class InverseSquare(Recurrence):
    """z = 1 / (z² - v); poles where z² = v."""

    name = "Inverse Square"
    recurrence_id = RECURRENCE_INVERSE_SQUARE
    formula = "1 / (z^2 - v)"

    def denominator(self, z, params):
        return z.square() - params.singularity

    def advance(self, z, denominator, params):
        return ONE / denominator


# Registry of available recurrences, keyed by display name.
RECURRENCES = {
    RationalJulia.name: RationalJulia,
    InverseSquare.name: InverseSquare,
}


def get_recurrence(key):
    """
    Get a recurrence instance by display name or integer id.

    Raises:
        KeyError if no recurrence matches
    """
    if isinstance(key, Recurrence):
        return key
    for cls in RECURRENCES.values():
        if key == cls.name or key == cls.recurrence_id:
            return cls()
    raise KeyError(f"Unknown recurrence: {key!r}")


def get_default_recurrence():
    return RationalJulia()


def list_recurrence_names():
    return list(RECURRENCES.keys())
