"""Match registry for emphasis delimiter tracking.

Decouples match state from token objects, so tokens stay immutable.

Thread Safety:
MatchRegistry instances are single-use per _parse_inline() call.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class DelimiterMatch:
    """Record of a matched opener-closer pair.

    Attributes:
        opener_idx: Index of the opener token in the token list.
        closer_idx: Index of the closer token in the token list.
        count: Delimiters used (1 emphasis, 2 strong; any for strikethrough).

    """

    opener_idx: int
    closer_idx: int
    count: int


@dataclass(slots=True)
class MatchRegistry:
    """External tracking for delimiter matches.

    Usage:
        registry = MatchRegistry()
        registry.record_match(opener_idx=0, closer_idx=5, count=2)
        registry.remaining_count(0, original_count=3)  # 1

    """

    consumed: dict[int, int] = field(default_factory=dict)
    opens: dict[int, list[DelimiterMatch]] = field(default_factory=dict)
    closes: dict[int, list[DelimiterMatch]] = field(default_factory=dict)

    def record_match(self, opener_idx: int, closer_idx: int, count: int) -> DelimiterMatch:
        """Record a delimiter match.

        Matches are recorded innermost first, so ``opens[i]`` lists an
        opener's matches from the inside out.
        """
        match = DelimiterMatch(opener_idx, closer_idx, count)
        self.opens.setdefault(opener_idx, []).append(match)
        self.closes.setdefault(closer_idx, []).append(match)
        self.consumed[opener_idx] = self.consumed.get(opener_idx, 0) + count
        self.consumed[closer_idx] = self.consumed.get(closer_idx, 0) + count
        return match

    def remaining_count(self, idx: int, original_count: int) -> int:
        """Delimiters of token ``idx`` not yet used by a match."""
        return original_count - self.consumed.get(idx, 0)
