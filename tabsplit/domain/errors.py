"""Line- and token-scoped parsing errors.

None of these ever escape a public parser: they mark the single token or
line that gets skipped.
"""


class ParseError(ValueError):
    """A token could not be interpreted as a number or quantity."""


class NoMatchError(LookupError):
    """No grammar rule applied to a line or segment."""


class DivisionGuardError(ZeroDivisionError):
    """A unit price was requested for a zero (or negative) quantity."""
