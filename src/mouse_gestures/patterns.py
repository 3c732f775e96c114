"""Direction patterns: accumulation from trajectories and diagonal folding.

A pattern is the de-duplicated sequence of directions a stroke went through,
e.g. (R, D) for "right then down". Its serialized form is the concatenation of
the token values ("RD"), which is also the key used by action maps.

Usage:
    acc = PatternAccumulator(min_segment_px=18, classifier=DirectionClassifier(4))
    for sample in samples:
        acc.feed(sample)
    pattern = normalize(acc.pattern)
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from mouse_gestures.directions import Direction, DirectionClassifier
from mouse_gestures.sampler import PointerSample

PATTERN_CHARS = frozenset("LRUD")


class GesturePattern:
    """Immutable token sequence where no two adjacent tokens are equal."""

    __slots__ = ("_tokens",)

    def __init__(self, tokens: Iterable[Direction | str] = ()):
        collapsed: list[Direction] = []
        for token in tokens:
            token = Direction(token)
            if not collapsed or collapsed[-1] != token:
                collapsed.append(token)
        self._tokens = tuple(collapsed)

    @property
    def tokens(self) -> tuple[Direction, ...]:
        return self._tokens

    @property
    def last(self) -> Optional[Direction]:
        return self._tokens[-1] if self._tokens else None

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Direction]:
        return iter(self._tokens)

    def __bool__(self) -> bool:
        return bool(self._tokens)

    def __eq__(self, other) -> bool:
        if isinstance(other, GesturePattern):
            return self._tokens == other._tokens
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._tokens)

    def __str__(self) -> str:
        return "".join(t.value for t in self._tokens)

    def __repr__(self) -> str:
        return f"GesturePattern({str(self)!r})"


def is_pattern_key(key) -> bool:
    """True if ``key`` is a usable action-map key such as "R" or "URD"."""
    return isinstance(key, str) and bool(key) and set(key) <= PATTERN_CHARS


class PatternAccumulator:
    """Turns a stream of trajectory samples into direction tokens.

    Keeps an anchor point. Once a sample is at least ``min_segment_px`` away
    from the anchor, the anchor→sample displacement is classified and the
    anchor moves to that sample, whether or not a new token came out of it.
    Moving the anchor every time stops a slow drift in one direction from
    re-triggering the same segment.
    """

    def __init__(self, min_segment_px: float = 18.0, classifier: Optional[DirectionClassifier] = None):
        self.min_segment_px = min_segment_px
        self.classifier = classifier or DirectionClassifier()
        self._anchor: Optional[PointerSample] = None
        self._tokens: list[Direction] = []

    def feed(self, sample: PointerSample) -> Optional[Direction]:
        """Process the next trajectory sample. Returns the token appended, if any."""
        if self._anchor is None:
            self._anchor = sample
            return None

        anchor = self._anchor
        if anchor.distance_to(sample) < self.min_segment_px:
            return None

        self._anchor = sample
        token = self.classifier(sample.x - anchor.x, sample.y - anchor.y)
        if token is None or (self._tokens and self._tokens[-1] == token):
            return None

        self._tokens.append(token)
        return token

    @property
    def pattern(self) -> GesturePattern:
        return GesturePattern(self._tokens)

    def reset(self):
        self._anchor = None
        self._tokens = []


def accumulate(
    samples: Iterable[PointerSample],
    min_segment_px: float = 18.0,
    classifier: Optional[DirectionClassifier] = None,
) -> GesturePattern:
    """Compute the pattern of a complete trajectory in one pass."""
    acc = PatternAccumulator(min_segment_px, classifier)
    for sample in samples:
        acc.feed(sample)
    return acc.pattern


def normalize(pattern: GesturePattern) -> GesturePattern:
    """Fold a horizontal+vertical two-token pattern into its diagonal.

    (R, U) and (U, R) both become (UR). Anything else is returned as is,
    so normalizing twice changes nothing.
    """
    if len(pattern) != 2:
        return pattern

    first, second = pattern.tokens
    if first.is_horizontal and second.is_vertical:
        return GesturePattern([Direction.diagonal(second, first)])
    if first.is_vertical and second.is_horizontal:
        return GesturePattern([Direction.diagonal(first, second)])
    return pattern
