from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_EVEN
from functools import total_ordering
from typing import Union

from errors import DecimalOverflowError, DecimalUnderflowError, NegativeResultError, ValidationError

# Wide enough for MAX at PRECISION decimal places without rounding.
_CONTEXT = Context(prec=40, rounding=ROUND_HALF_EVEN)
_QUANTUM = Decimal("0.0001")


@total_ordering
class CheckedDecimal:
    """
    Immutable fixed-scale decimal used for every balance and amount.

    Results are kept at 4 decimal places and within +/- (2**96 - 1).
    Arithmetic never wraps or clamps: leaving the range raises, and subtraction
    refuses to go below zero unless the caller explicitly allows it.
    """

    PRECISION = 4
    MAX = Decimal(2 ** 96 - 1)
    MIN = Decimal(-(2 ** 96 - 1))

    __slots__ = ("_value",)

    def __init__(self, value: Union[Decimal, int, str] = 0):
        value = Decimal(value)
        if not value.is_finite():
            raise ValidationError(f"Amount is not a finite number: {value}")
        if value > self.MAX:
            raise DecimalOverflowError()
        if value < self.MIN:
            raise DecimalUnderflowError()
        value = value.quantize(_QUANTUM, context=_CONTEXT)
        self._value = value

    @classmethod
    def parse(cls, text: str) -> "CheckedDecimal":
        """Parse user input, rounding to PRECISION. Raises ValidationError on bad input."""
        if isinstance(text, str) and ("e" in text or "E" in text):
            raise ValidationError(f"Invalid amount, exponent notation not accepted: {text!r}")
        try:
            value = Decimal(text.strip())
        except (InvalidOperation, AttributeError):
            raise ValidationError(f"Invalid amount: {text!r}")
        # Out-of-range input is a bad row, not an arithmetic failure.
        if value.is_finite() and not (cls.MIN <= value <= cls.MAX):
            raise ValidationError(f"Amount out of range: {text!r}")
        return cls(value)

    @property
    def value(self) -> Decimal:
        return self._value

    def is_negative(self) -> bool:
        return self._value < 0

    def checked_add(self, other: "CheckedDecimal") -> "CheckedDecimal":
        result = _CONTEXT.add(self._value, _unwrap(other))
        if result > self.MAX:
            raise DecimalOverflowError()
        if result < self.MIN:
            raise DecimalUnderflowError()
        return CheckedDecimal(result)

    def checked_sub(self, other: "CheckedDecimal", allow_negative: bool = False) -> "CheckedDecimal":
        result = _CONTEXT.subtract(self._value, _unwrap(other))
        if result < self.MIN:
            raise DecimalUnderflowError()
        if result > self.MAX:
            raise DecimalOverflowError()
        if result < 0 and not allow_negative:
            raise NegativeResultError()
        return CheckedDecimal(result)

    def compare(self, other: "CheckedDecimal") -> int:
        """Return -1, 0 or 1."""
        return int(self._value.compare(_unwrap(other)))

    def __eq__(self, other) -> bool:
        if isinstance(other, (CheckedDecimal, Decimal, int)):
            return self._value == _unwrap(other)
        return NotImplemented

    def __lt__(self, other) -> bool:
        if isinstance(other, (CheckedDecimal, Decimal, int)):
            return self._value < _unwrap(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __bool__(self) -> bool:
        return bool(self._value)

    def __repr__(self) -> str:
        return f"CheckedDecimal('{self._value}')"

    def __str__(self) -> str:
        return str(self._value)

    def __format__(self, format_spec: str) -> str:
        return format(self._value, format_spec)


def _unwrap(value) -> Decimal:
    if isinstance(value, CheckedDecimal):
        return value._value
    return Decimal(value)


ZERO = CheckedDecimal(0)
