"""Digest declaration parsing and streaming integrity validation.

A digest declaration is the ``Digest`` request header, for example
``sha-256=<base64>, md5=<base64>``. Each recognized ``algorithm=value`` token
becomes one hash accumulator; the declaration as a whole is valid only when
every accumulator matches its expected value once the body has been written.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Protocol

DIGEST_ALGORITHMS: Mapping[str, Callable[[], Any]] = {
    "sha-256": hashlib.sha256,
    "md5": hashlib.md5,
}


class DigestValidator(Protocol):
    """Write sink that reports whether the bytes it saw match a digest."""

    def write(self, data: bytes) -> int:
        """Accumulate one chunk of the body."""

    def is_valid(self) -> bool:
        """Return whether the accumulated bytes match the expected digest."""


class HashDigestValidator:
    """One hash accumulator compared against one expected digest value."""

    def __init__(self, *, algorithm: str, expected: bytes, hasher: Any) -> None:
        self.algorithm = algorithm
        self._expected = expected
        self._hasher = hasher

    def write(self, data: bytes) -> int:
        self._hasher.update(data)
        return len(data)

    def is_valid(self) -> bool:
        return hmac.compare_digest(self._hasher.digest(), self._expected)


class MultiDigestValidator:
    """Fan-out validator: every member sees every byte, all must match.

    An empty validator is vacuously valid; callers distinguish "no digest
    requested" through ``ParsedDigest.supplied``.
    """

    def __init__(self, validators: list[HashDigestValidator] | None = None) -> None:
        self._validators = list(validators or [])

    def __len__(self) -> int:
        return len(self._validators)

    @property
    def algorithms(self) -> tuple[str, ...]:
        """Return the algorithm names in declaration order."""
        return tuple(item.algorithm for item in self._validators)

    def write(self, data: bytes) -> int:
        for validator in self._validators:
            validator.write(data)
        return len(data)

    def is_valid(self) -> bool:
        return all(validator.is_valid() for validator in self._validators)


@dataclass(frozen=True)
class ParsedDigest:
    """Outcome of parsing one digest declaration."""

    validator: MultiDigestValidator
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def supplied(self) -> bool:
        """Return whether at least one recognized digest was declared."""
        return len(self.validator) > 0


def supported_algorithms(
    algorithms: Mapping[str, Callable[[], Any]] = DIGEST_ALGORITHMS,
) -> str:
    """Return the registry's algorithm names for diagnostics."""
    return ", ".join(algorithms)


def parse_digest(
    header: str | None,
    *,
    algorithms: Mapping[str, Callable[[], Any]] = DIGEST_ALGORITHMS,
) -> ParsedDigest:
    """Parse a digest declaration into validators and per-token errors.

    Tokens without ``=`` and unknown algorithm names are skipped silently.
    A recognized algorithm whose value is not valid base64 is recorded as an
    error without stopping the remaining tokens from being parsed.
    """
    validators: list[HashDigestValidator] = []
    errors: list[str] = []

    for token in (header or "").split(","):
        name, separator, value = token.partition("=")
        if not separator:
            continue
        algorithm = name.strip().lower()
        factory = algorithms.get(algorithm)
        if factory is None:
            continue

        try:
            expected = base64.b64decode(value.strip(), validate=True)
        except binascii.Error as exc:
            errors.append(f"{algorithm}: illegal base64 data: {exc}")
            continue
        validators.append(
            HashDigestValidator(
                algorithm=algorithm, expected=expected, hasher=factory()
            )
        )

    return ParsedDigest(
        validator=MultiDigestValidator(validators), errors=tuple(errors)
    )
