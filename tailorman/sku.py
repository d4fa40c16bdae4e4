"""
SKU matching — isolated, testable, reusable.

A SKU is STYLE-WAIST-SHAPE-LENGTH-WASH, e.g. ``ST-32-X-32-STA``.

Washes come in two groups, each with one universal (undyed) code:

    light: STA, IND  ->  RAW
    dark:  ONX, JAG  ->  BRW

A universal unit is longer than any order needs and can be cut down and
wash-finished to satisfy any order of its group. Never the reverse.

Examples:
    >>> target = Sku.parse("ST-32-X-32-STA")
    >>> universalize(target)
    Sku(style='ST', waist=32, shape='X', length=36, wash='RAW')
    >>> is_universal_match(target, universalize(target))
    True
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from tailorman.exceptions import TailorError

UNIVERSAL_LENGTH = 36

WASH_GROUPS = {
    'LIGHT': {'washes': ('STA', 'IND'), 'universal': 'RAW'},
    'DARK': {'washes': ('ONX', 'JAG'), 'universal': 'BRW'},
}

UNIVERSAL_WASHES = tuple(group['universal'] for group in WASH_GROUPS.values())
TARGET_WASHES = tuple(w for group in WASH_GROUPS.values() for w in group['washes'])

SKU_FIELDS = ('style', 'waist', 'shape', 'length', 'wash')


@dataclass(frozen=True)
class Sku:
    """Garment specification."""

    style: str
    waist: int
    shape: str
    length: int
    wash: str

    @classmethod
    def parse(cls, text: str) -> Sku:
        """Parse the canonical ``STYLE-WAIST-SHAPE-LENGTH-WASH`` form."""
        parts = (text or '').strip().split('-')
        if len(parts) != 5:
            raise TailorError('INVALID_SKU', sku=text)
        style, waist, shape, length, wash = parts
        try:
            return cls(style, int(waist), shape, int(length), wash)
        except ValueError:
            raise TailorError('INVALID_SKU', sku=text) from None

    @classmethod
    def of(cls, obj, prefix: str = '') -> Sku:
        """Read a SKU off any object exposing the five fields (optionally prefixed)."""
        return cls(*(getattr(obj, f"{prefix}{name}") for name in SKU_FIELDS))

    def as_fields(self, prefix: str = '') -> dict:
        """Model field kwargs, e.g. ``Unit.objects.filter(**sku.as_fields())``."""
        return {f"{prefix}{name}": getattr(self, name) for name in SKU_FIELDS}

    @property
    def key(self) -> str:
        return str(self)

    def __str__(self) -> str:
        return f"{self.style}-{self.waist}-{self.shape}-{self.length}-{self.wash}"


def universal_wash_of(wash: str) -> str:
    """Universal code for the wash's group."""
    for group in WASH_GROUPS.values():
        if wash in group['washes']:
            return group['universal']
    raise TailorError('INVALID_WASH_CODE', wash=wash)


def is_universal_wash(wash: str) -> bool:
    return wash in UNIVERSAL_WASHES


def is_exact_match(target: Sku, candidate: Sku) -> bool:
    """All five fields equal."""
    return target == candidate


def is_universal_match(target: Sku, candidate: Sku) -> bool:
    """
    Candidate is a universal unit that can be finished into the target.

    Same style/waist/shape, at least as long, and carrying the universal
    wash of the target's group.
    """
    return (
        target.style == candidate.style
        and target.waist == candidate.waist
        and target.shape == candidate.shape
        and candidate.length >= target.length
        and candidate.wash == universal_wash_of(target.wash)
    )


def can_satisfy(target: Sku, candidate: Sku) -> bool:
    """Exact or universal match."""
    if is_exact_match(target, candidate):
        return True
    if target.wash not in TARGET_WASHES:
        return False
    return is_universal_match(target, candidate)


def universalize(sku: Sku, length: int = UNIVERSAL_LENGTH) -> Sku:
    """Canonical production SKU for a group of compatible orders."""
    return replace(sku, length=length, wash=universal_wash_of(sku.wash))


def universal_candidates_filter(target: Sku, prefix: str = '') -> dict:
    """
    Queryset-level version of is_universal_match.

    Returns filter kwargs selecting rows that may universally match the target.
    The wash is narrowed to the target's universal code so no post-filter is needed.
    """
    return {
        f"{prefix}style": target.style,
        f"{prefix}waist": target.waist,
        f"{prefix}shape": target.shape,
        f"{prefix}length__gte": target.length,
        f"{prefix}wash": universal_wash_of(target.wash),
    }
