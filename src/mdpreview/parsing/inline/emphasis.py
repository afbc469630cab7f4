"""Emphasis parsing for mdpreview.

Implements the CommonMark delimiter run algorithm for emphasis and strong
emphasis, plus GFM strikethrough (runs of one or two tildes that only match
a run of the same length).
See: https://spec.commonmark.org/0.31.2/#emphasis-and-strong-emphasis

Thread Safety:
All methods are stateless or use instance-local state only.

"""

from mdpreview.parsing.inline.match_registry import MatchRegistry
from mdpreview.parsing.inline.tokens import DelimiterToken, InlineToken
from mdpreview.parsing.lines import is_punctuation, is_whitespace


class EmphasisMixin:
    """Mixin for emphasis delimiter processing.

    Required Host Attributes: None

    Required Host Methods: None

    """

    def _is_left_flanking(self, before: str, after: str) -> bool:
        """Check if delimiter run is left-flanking.

        Left-flanking: not followed by whitespace, and either:
        - not followed by punctuation, OR
        - preceded by whitespace or punctuation
        """
        if is_whitespace(after):
            return False
        if not is_punctuation(after):
            return True
        return is_whitespace(before) or is_punctuation(before)

    def _is_right_flanking(self, before: str, after: str) -> bool:
        """Check if delimiter run is right-flanking (mirror of left-flanking)."""
        if is_whitespace(before):
            return False
        if not is_punctuation(before):
            return True
        return is_whitespace(after) or is_punctuation(after)

    def _delimiter_token(self, text: str, start: int, end: int) -> DelimiterToken:
        """Classify the delimiter run ``text[start:end]``."""
        char = text[start]
        before = text[start - 1] if start > 0 else ""
        after = text[end] if end < len(text) else ""
        left = self._is_left_flanking(before, after)
        right = self._is_right_flanking(before, after)

        if char == "_":
            # Intraword underscores never open or close
            can_open = left and (not right or is_punctuation(before))
            can_close = right and (not left or is_punctuation(after))
        else:
            can_open, can_close = left, right

        return DelimiterToken(char, end - start, can_open, can_close)  # type: ignore[arg-type]

    def _process_emphasis(self, tokens: list[InlineToken]) -> MatchRegistry:
        """Match closers against openers, left to right.

        ``stack`` holds indices of potential openers. ``bottoms`` is the
        CommonMark openers_bottom table: for each (char, closer-can-open,
        length mod 3) it records the stack height below which no opener can
        match, keeping pathological inputs linear.
        """
        registry = MatchRegistry()
        stack: list[int] = []
        bottoms: dict[tuple[str, bool, int], int] = {}

        for idx, token in enumerate(tokens):
            if not isinstance(token, DelimiterToken):
                continue

            if token.can_close:
                while (remaining := registry.remaining_count(idx, token.count)) > 0:
                    key = (token.char, token.can_open, token.count % 3)
                    floor = min(bottoms.get(key, 0), len(stack))
                    found = -1

                    for s in range(len(stack) - 1, floor - 1, -1):
                        opener = tokens[stack[s]]
                        if opener.char != token.char:
                            continue
                        if token.char == "~":
                            if opener.count != token.count:
                                continue
                        elif (
                            (opener.can_close or token.can_open)
                            and (opener.count + token.count) % 3 == 0
                            and not (opener.count % 3 == 0 and token.count % 3 == 0)
                        ):
                            # Rule of 3
                            continue
                        found = s
                        break

                    if found < 0:
                        bottoms[key] = len(stack)
                        break

                    opener_idx = stack[found]
                    opener_left = registry.remaining_count(opener_idx, tokens[opener_idx].count)
                    if token.char == "~":
                        use = remaining
                    else:
                        use = 2 if opener_left >= 2 and remaining >= 2 else 1
                    registry.record_match(opener_idx, idx, use)

                    # Delimiters between opener and closer can no longer match
                    del stack[found + 1 :]
                    if opener_left == use:
                        stack.pop()
                    for k, height in bottoms.items():
                        if height > len(stack):
                            bottoms[k] = len(stack)

            if token.can_open and registry.remaining_count(idx, token.count) > 0:
                stack.append(idx)

        return registry
