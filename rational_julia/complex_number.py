"""
Immutable complex number used by the escape-time engine.

Python already has a builtin ``complex``, but its division raises
ZeroDivisionError. The fractal loop needs a total division: dividing by a
zero-modulus value returns 0 instead. Callers that care about the pole
(the iteration engine) test the denominator against a threshold before
dividing.
"""

import math


class Complex:
    """
    A complex number with real and imaginary parts.

    Instances are immutable and hashable. Arithmetic operators accept other
    Complex values or plain ints/floats (treated as real scalars).
    """

    __slots__ = ("_re", "_im")

    def __init__(self, re=0.0, im=0.0):
        object.__setattr__(self, "_re", float(re))
        object.__setattr__(self, "_im", float(im))

    def __setattr__(self, name, value):
        raise AttributeError("Complex is immutable")

    @property
    def re(self):
        return self._re

    @property
    def im(self):
        return self._im

    @classmethod
    def from_builtin(cls, value):
        """Build from a Python ``complex`` (or any number)."""
        value = complex(value)
        return cls(value.real, value.imag)

    def to_builtin(self):
        return complex(self._re, self._im)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def modulus_squared(self):
        return self._re * self._re + self._im * self._im

    @property
    def modulus(self):
        return math.hypot(self._re, self._im)

    @property
    def argument(self):
        """
        Principal angle in radians, in [0, 2*pi).

        The argument of zero is 0 by convention.
        """
        if self._re == 0.0 and self._im == 0.0:
            return 0.0
        angle = math.atan2(self._im, self._re)
        if angle < 0.0:
            angle += 2.0 * math.pi
        # atan2 of a tiny negative imaginary part can round up to exactly 2*pi
        if angle >= 2.0 * math.pi:
            angle = 0.0
        return angle

    def is_finite(self):
        return math.isfinite(self._re) and math.isfinite(self._im)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def add(self, other):
        other = _coerce(other)
        return Complex(self._re + other._re, self._im + other._im)

    def sub(self, other):
        other = _coerce(other)
        return Complex(self._re - other._re, self._im - other._im)

    def mul(self, other):
        """Multiply by another Complex or by a real scalar."""
        if isinstance(other, Complex):
            return Complex(
                self._re * other._re - self._im * other._im,
                self._re * other._im + self._im * other._re,
            )
        scalar = float(other)
        return Complex(self._re * scalar, self._im * scalar)

    def div(self, other):
        """
        Divide by another Complex or by a real scalar.

        Division by a zero-modulus value returns Complex(0, 0) rather than
        raising.
        """
        if isinstance(other, Complex):
            denom = other.modulus_squared
            if denom == 0.0:
                return Complex(0.0, 0.0)
            return Complex(
                (self._re * other._re + self._im * other._im) / denom,
                (self._im * other._re - self._re * other._im) / denom,
            )
        scalar = float(other)
        if scalar == 0.0:
            return Complex(0.0, 0.0)
        return Complex(self._re / scalar, self._im / scalar)

    def square(self):
        return Complex(
            self._re * self._re - self._im * self._im,
            2.0 * self._re * self._im,
        )

    def power(self, n):
        """
        Compute z^n for a non-negative integer n by repeated multiplication.

        Args:
            n: Exponent (int >= 0)

        Returns:
            Complex result; power(0) is 1 and power(1) is self.

        Raises:
            ValueError if n is negative
        """
        n = int(n)
        if n < 0:
            raise ValueError(f"power() needs a non-negative exponent, got {n}")
        if n == 0:
            return Complex(1.0, 0.0)
        if n == 1:
            return self
        if n == 2:
            return self.square()
        result = self
        for _ in range(n - 1):
            result = result.mul(self)
        return result

    def conjugate(self):
        return Complex(self._re, -self._im)

    # Operator sugar
    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __truediv__ = div

    def __radd__(self, other):
        return _coerce(other).add(self)

    def __rsub__(self, other):
        return _coerce(other).sub(self)

    def __rmul__(self, other):
        return self.mul(other)

    def __rtruediv__(self, other):
        return _coerce(other).div(self)

    def __neg__(self):
        return Complex(-self._re, -self._im)

    def __abs__(self):
        return self.modulus

    def __eq__(self, other):
        if isinstance(other, Complex):
            return self._re == other._re and self._im == other._im
        if isinstance(other, (int, float, complex)):
            other = complex(other)
            return self._re == other.real and self._im == other.imag
        return NotImplemented

    def __hash__(self):
        return hash((self._re, self._im))

    def __iter__(self):
        yield self._re
        yield self._im

    def __repr__(self):
        return f"Complex({self._re!r}, {self._im!r})"

    def __str__(self):
        if self._im >= 0:
            return f"{self._re} + {self._im}i"
        return f"{self._re} - {-self._im}i"


ONE = Complex(1.0, 0.0)


def _coerce(value):
    if isinstance(value, Complex):
        return value
    if isinstance(value, complex):
        return Complex(value.real, value.imag)
    return Complex(float(value), 0.0)
