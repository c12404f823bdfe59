"""
Runtime Marker Matching
========================

The marker set is the list of substrings whose presence in a binary is
taken as circumstantial evidence that it links the Rust runtime:

- ``rust_panic`` -- the panic/unwind entry point every Rust program links
- ``rust_eh_personality`` -- the exception-handling personality routine

Matching is a plain contiguous subsequence test: case-sensitive, no
normalisation, no word boundaries (a marker inside a longer mangled
identifier still matches).  Marker order is the tie-break when several
markers would match the same haystack.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Union

from shared.config import DEFAULT_MARKERS

Haystack = Union[str, bytes]


def find_subsequence(haystack: Haystack, needle: Haystack) -> int:
    """Return the index of the first occurrence of *needle*, or ``-1``.

    *haystack* and *needle* must both be ``str`` or both be ``bytes``.
    """
    return haystack.find(needle)  # type: ignore[arg-type]


def contains(haystack: Haystack, needle: Haystack) -> bool:
    """Return ``True`` if *needle* occurs contiguously in *haystack*."""
    return find_subsequence(haystack, needle) != -1


@dataclass(frozen=True, slots=True)
class MarkerSet:
    """Immutable, ordered set of runtime marker strings.

    Usage::

        markers = MarkerSet().extended("__rust_alloc")
        hit = markers.first_in_name("_ZN3std9panicking11rust_panic17h...E")
        # => "rust_panic"
    """

    markers: tuple[str, ...] = DEFAULT_MARKERS
    _encoded: tuple[bytes, ...] = field(
        init=False, repr=False, compare=False, default=()
    )

    def __post_init__(self) -> None:
        # A lone string would otherwise split into one marker per character
        if isinstance(self.markers, (str, bytes)):
            raise ValueError(f"markers must be a sequence of strings, got {self.markers!r}")
        try:
            object.__setattr__(self, "markers", tuple(self.markers))
        except TypeError:
            raise ValueError(
                f"markers must be a sequence of strings, got {self.markers!r}"
            ) from None
        for marker in self.markers:
            if not isinstance(marker, str) or not marker:
                raise ValueError(f"markers must be non-empty strings, got {marker!r}")
        # Byte forms are derived once; scanning raw sections reuses them
        object.__setattr__(
            self, "_encoded", tuple(m.encode("utf-8") for m in self.markers)
        )

    def __iter__(self) -> Iterator[str]:
        return iter(self.markers)

    def __len__(self) -> int:
        return len(self.markers)

    @classmethod
    def from_iterable(cls, markers: Iterable[str]) -> MarkerSet:
        return cls(markers)  # type: ignore[arg-type]

    def extended(self, *extra: str) -> MarkerSet:
        """Return a new set with *extra* appended, skipping duplicates."""
        merged = list(self.markers)
        for marker in extra:
            if marker not in merged:
                merged.append(marker)
        return MarkerSet(tuple(merged))

    def first_in_name(self, name: str) -> Optional[str]:
        """Return the first marker contained in a symbol *name*, or ``None``."""
        for marker in self.markers:
            if contains(name, marker):
                return marker
        return None

    def first_in_bytes(self, data: bytes) -> Optional[str]:
        """Return the first marker whose UTF-8 bytes occur in *data*, or ``None``."""
        for marker, encoded in zip(self.markers, self._encoded):
            if contains(data, encoded):
                return marker
        return None
