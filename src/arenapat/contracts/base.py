"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for codec
contracts. It enforces invariants of patterns, geometries and headers at
the boundary where they enter the codec.
"""

from typing import Type

from arenapat.contracts.failure import PatternCodecError, ValidationError


def require(
    condition: bool,
    message: str,
    error: Type[PatternCodecError] = ValidationError,
) -> None:
    """Enforce a codec contract.

    Fail-fast: no recovery, no fallback, no silence.

    Parameters
    ----------
    condition : bool
        The invariant that must be true.

    message : str
        Error message explaining the violation.

    error : type, optional
        PatternCodecError subclass to raise. Defaults to ValidationError.

    Raises
    ------
    PatternCodecError
        The requested subclass, if condition is False.

    Examples
    --------
    >>> require(rows > 0, "Geometry contract: num_panel_rows must be > 0", GeometryError)
    >>> require(len(stretch) == n, "Pattern contract: stretch length mismatch")
    """
    if not condition:
        raise error(message)
