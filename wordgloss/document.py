"""Document abstraction consumed by the annotation scanner.

A document is an ordered collection of text units addressed by stable
references. Units are replaced wholesale with a list of fragments, so an
annotated unit still knows its original text.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    Callable,
    Dict,
    Hashable,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
)

# Regions whose text is never prose worth annotating.
SKIPPED_REGIONS = frozenset({"script", "style", "noscript", "iframe", "ruby", "rt", "rp"})

_EMPTY_METADATA: Mapping[str, object] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class TextFragment:
    """Plain run of text."""

    text: str


@dataclass(frozen=True, slots=True)
class AnnotationFragment:
    """A word of the original text together with its inline hint."""

    base_text: str
    annotation_text: str
    word: str
    metadata: Mapping[str, object] = field(
        default_factory=lambda: _EMPTY_METADATA, compare=False, hash=False
    )

    @property
    def text(self) -> str:
        return self.base_text


Fragment = Union[TextFragment, AnnotationFragment]


@dataclass(slots=True)
class TextUnit:
    """One addressable run of text, e.g. a paragraph or a DOM text node."""

    ref: Hashable
    fragments: List[Fragment]
    region: str = "body"

    def content(self) -> str:
        """Return the unit's text without any annotation hints."""
        return "".join(fragment.text for fragment in self.fragments)

    @property
    def annotations(self) -> List[AnnotationFragment]:
        return [fragment for fragment in self.fragments if isinstance(fragment, AnnotationFragment)]

    @property
    def annotated(self) -> bool:
        return any(isinstance(fragment, AnnotationFragment) for fragment in self.fragments)


ExcludePredicate = Callable[[TextUnit], bool]


def default_exclude(unit: TextUnit) -> bool:
    """Skip non-prose regions, blank units and units that already carry annotations."""

    return unit.region in SKIPPED_REGIONS or not unit.content().strip() or unit.annotated


class DocumentModel(Protocol):
    """Interface the scanner needs from a document."""

    def enumerate_text_units(self, exclude: Optional[ExcludePredicate] = None) -> Iterator[TextUnit]:
        ...

    def get_unit(self, ref: Hashable) -> Optional[TextUnit]:
        ...

    def replace_unit(self, ref: Hashable, fragments: Sequence[Fragment]) -> None:
        ...

    def unit_exists(self, ref: Hashable) -> bool:
        ...


class InMemoryDocument:
    """List-backed :class:`DocumentModel` with integer unit references."""

    def __init__(self, texts: Iterable[Union[str, Tuple[str, str]]] = ()) -> None:
        self._units: Dict[Hashable, TextUnit] = {}
        self._counter = itertools.count()
        self.replace_calls = 0
        for item in texts:
            if isinstance(item, tuple):
                text, region = item
                self.add_unit(text, region=region)
            else:
                self.add_unit(item)

    def add_unit(self, text: str, *, region: str = "body", ref: Optional[Hashable] = None) -> Hashable:
        key = next(self._counter) if ref is None else ref
        if key in self._units:
            raise KeyError(f"Text unit {key!r} already exists")
        self._units[key] = TextUnit(ref=key, fragments=[TextFragment(text)], region=region)
        return key

    def remove_unit(self, ref: Hashable) -> None:
        self._units.pop(ref, None)

    def set_text(self, ref: Hashable, text: str) -> None:
        """Overwrite a unit's content, discarding any annotations."""
        self._require(ref).fragments = [TextFragment(text)]

    def _require(self, ref: Hashable) -> TextUnit:
        try:
            return self._units[ref]
        except KeyError:
            raise KeyError(f"Text unit {ref!r} does not exist") from None

    def enumerate_text_units(self, exclude: Optional[ExcludePredicate] = None) -> Iterator[TextUnit]:
        for unit in list(self._units.values()):
            if exclude is not None and exclude(unit):
                continue
            yield unit

    def get_unit(self, ref: Hashable) -> Optional[TextUnit]:
        return self._units.get(ref)

    def replace_unit(self, ref: Hashable, fragments: Sequence[Fragment]) -> None:
        unit = self._require(ref)
        unit.fragments = [
            fragment
            for fragment in fragments
            if isinstance(fragment, AnnotationFragment) or fragment.text
        ]
        if not unit.fragments:
            unit.fragments = [TextFragment("")]
        self.replace_calls += 1

    def unit_exists(self, ref: Hashable) -> bool:
        return ref in self._units

    @property
    def refs(self) -> List[Hashable]:
        return list(self._units)

    def text(self, separator: str = "\n") -> str:
        """Return the plain document text."""
        return separator.join(unit.content() for unit in self._units.values())

    def annotations(self) -> List[AnnotationFragment]:
        return [fragment for unit in self._units.values() for fragment in unit.annotations]

    def snapshot(self) -> Tuple[Tuple[Hashable, Tuple[Fragment, ...]], ...]:
        """Return an immutable view of every unit, handy for equality checks."""
        return tuple((ref, tuple(unit.fragments)) for ref, unit in self._units.items())


__all__ = [
    "AnnotationFragment",
    "DocumentModel",
    "ExcludePredicate",
    "Fragment",
    "InMemoryDocument",
    "SKIPPED_REGIONS",
    "TextFragment",
    "TextUnit",
    "default_exclude",
]
