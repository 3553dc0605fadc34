"""
Read-only student-pair similarity matrices.

Matrices arrive as ``{studentKey: {studentKey: float}}`` snapshots from
the similarity service. Keys have the form ``"Name (VariantCode)"``.
"""

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

_STUDENT_KEY_PATTERN = re.compile(r"^(.+?)\s*\(([^()]+)\)$")


@dataclass(frozen=True)
class StudentKey:
    raw: str
    name: str
    variant_code: str | None


def parse_student_key(key: str) -> StudentKey:
    """Split ``"Name (V1)"`` into name and variant code."""
    match = _STUDENT_KEY_PATTERN.match(key.strip())
    if match is None:
        return StudentKey(raw=key, name=key.strip(), variant_code=None)
    return StudentKey(
        raw=key,
        name=match.group(1).strip(),
        variant_code=match.group(2).strip(),
    )


@dataclass(frozen=True)
class SimilarityPair:
    student1: str
    student2: str
    similarity: float


class SimilarityMatrix:
    """
    Immutable nested mapping of pair similarities.

    Lookups try the direct orientation first, then the mirrored one.
    ``lookup`` additionally falls back to group keys (variant codes).
    """

    def __init__(self, data: Mapping[str, Mapping[str, float]]) -> None:
        self._data: Mapping[str, Mapping[str, float]] = MappingProxyType(
            {
                row: MappingProxyType({col: float(v) for col, v in cols.items()})
                for row, cols in data.items()
            }
        )

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def keys(self) -> list[str]:
        return list(self._data)

    def _direct(self, a: str, b: str) -> float | None:
        row = self._data.get(a)
        if row is None:
            return None
        return row.get(b)

    def get(self, a: str, b: str) -> float | None:
        value = self._direct(a, b)
        if value is None:
            value = self._direct(b, a)
        return value

    def lookup(
        self,
        a: str,
        b: str,
        group_a: str | None = None,
        group_b: str | None = None,
    ) -> float | None:
        """
        Similarity for a pair: direct, then mirrored, then by group keys.

        Returns None when no orientation matches.
        """
        value = self.get(a, b)
        if value is not None:
            return value
        if group_a is None or group_b is None:
            return None
        return self.get(group_a, group_b)

    def unique_pairs(self) -> Iterator[SimilarityPair]:
        """
        Each unordered non-self pair once, oriented with the smaller key first.

        Pairs are yielded in sorted key order so the output does not depend
        on the insertion order of the input mapping.
        """
        pairs: dict[tuple[str, str], float] = {}
        for row, cols in self._data.items():
            for col in cols:
                if row == col:
                    continue
                first, second = sorted((row, col))
                # Direct orientation wins over the mirrored entry
                if row == first:
                    pairs[(first, second)] = cols[col]
                else:
                    pairs.setdefault((first, second), cols[col])

        for (first, second), value in sorted(pairs.items()):
            yield SimilarityPair(
                student1=first, student2=second, similarity=value
            )
