"""
Line classification for a single language grammar.

Each line of a file goes through two phases:

1. `advance_multiline` consumes the block-comment delimiters on the line and
   returns whether the line belongs to a block comment, together with the
   state to carry to the next line.
2. If it does not, `classify` decides between empty, comment, mixed and
   logical using the single-line markers.

`parse` chains both phases. The parser itself holds no per-file state: the
caller threads a MultilineState value from one line to the next, starting from
`MultilineState()` for every file.

This is not a lexer. String literals are not recognised, so a comment marker
inside a string is treated as a real marker.
"""

from core.models import Language, LineType, MultilineState


class CommentParser:
    """
    Classifies lines according to one Language's comment grammar.

    Attributes:
        language: The grammar used for classification.
        ignore_preprocessor: If True, lines starting with the language's
            preprocessor prefix are classified as empty.
    """

    def __init__(self, language: Language, ignore_preprocessor: bool = False):
        self.language = language
        self.ignore_preprocessor = ignore_preprocessor

    def parse(
        self, line: str, state: MultilineState
    ) -> tuple[LineType, MultilineState]:
        """
        Classify one line and return the state for the next line.

        Lines belonging to a block comment are COMMENT, or EMPTY when blank.
        Every other line is classified by `classify`.

        Args:
            line: Raw line, without its line terminator.
            state: Block-comment state left by the previous line.

        Returns:
            A (LineType, MultilineState) pair.
        """
        in_block, state = self.advance_multiline(line, state)
        if in_block:
            return (LineType.COMMENT if line.strip() else LineType.EMPTY), state
        return self.classify(line), state

    def classify(self, line: str) -> LineType:
        """
        Classify a line that is not part of a block comment.

        Rules, in order:
            1. Preprocessor directive (when suppression is on) -> EMPTY.
            2. Blank line -> EMPTY.
            3. Starts with a single-line marker -> COMMENT, or EMPTY when
               nothing but whitespace follows the marker.
            4. Contains a single-line marker after code -> MIXED.
            5. Anything else -> LOGICAL.
        """
        trimmed = line.strip()

        prefix = self.language.preprocessor_prefix
        if self.ignore_preprocessor and prefix and trimmed.startswith(prefix):
            return LineType.EMPTY

        if not trimmed:
            return LineType.EMPTY

        for marker in self.language.single_line_markers:
            if trimmed.startswith(marker):
                if not trimmed[len(marker) :].strip():
                    return LineType.EMPTY
                return LineType.COMMENT

        # No marker starts the line, so any marker found sits after code
        if any(marker in line for marker in self.language.single_line_markers):
            return LineType.MIXED

        return LineType.LOGICAL

    def advance_multiline(
        self, line: str, state: MultilineState
    ) -> tuple[bool, MultilineState]:
        """
        Consume the block-comment delimiters of one line.

        For nesting languages the depth goes up on every start marker and down
        (never below zero) on every end marker; the line is in a comment if the
        depth is non-zero at any point on it. For other languages a start marker
        opens a comment that the matching end marker closes; if code remains
        before or after the comment, the line is reported as not in a comment so
        that `classify` counts it.

        Single-line markers do not stop the scan, so a block start that follows
        one still opens a block comment. Text made only of a line comment does
        not count as code next to a flat block.

        Args:
            line: Raw line, without its line terminator.
            state: Block-comment state left by the previous line.

        Returns:
            (in_block, next_state). Languages without block comments always
            return (False, state).
        """
        if not self.language.multi_line_markers:
            return False, state
        if self.language.nested:
            return self._advance_nested(line, state)
        return self._advance_flat(line, state)

    def _advance_nested(
        self, line: str, state: MultilineState
    ) -> tuple[bool, MultilineState]:
        starts = [start for start, _ in self.language.multi_line_markers]
        ends = [end for _, end in self.language.multi_line_markers]

        depth = state.depth
        in_block = depth > 0
        pos = 0
        while True:
            opening = _earliest(line, pos, starts)
            closing = _earliest(line, pos, ends)
            if opening is None and closing is None:
                break
            if closing is None or (
                opening is not None
                and (
                    opening[0] < closing[0]
                    # Identical start/end markers: close when something is open
                    or (opening[0] == closing[0] and depth == 0)
                )
            ):
                index, marker = opening
                depth += 1
                in_block = True
            else:
                index, marker = closing
                depth = max(0, depth - 1)
            pos = index + len(marker)

        return in_block, MultilineState(in_comment=depth > 0, depth=depth)

    def _advance_flat(
        self, line: str, state: MultilineState
    ) -> tuple[bool, MultilineState]:
        pairs = dict(reversed(self.language.multi_line_markers))
        in_comment = state.in_comment
        end_marker = state.end_marker
        touched = in_comment
        has_code = False
        pos = 0

        while True:
            if in_comment:
                closers = [end_marker] if end_marker else list(pairs.values())
                closing = _earliest(line, pos, closers)
                if closing is None:
                    break
                index, marker = closing
                in_comment, end_marker = False, None
                pos = index + len(marker)
                continue

            opening = _earliest(line, pos, list(pairs))
            if opening is None:
                has_code = has_code or self._is_code(line[pos:])
                break

            index, marker = opening
            has_code = has_code or self._is_code(line[pos:index])
            touched = True
            in_comment, end_marker = True, pairs[marker]
            pos = index + len(marker)

        next_state = MultilineState(in_comment=in_comment, end_marker=end_marker)
        return touched and not has_code, next_state

    def _is_code(self, segment: str) -> bool:
        """True if `segment` holds anything besides whitespace and a line comment."""
        trimmed = segment.strip()
        return bool(trimmed) and not trimmed.startswith(
            tuple(self.language.single_line_markers)
        )


def _earliest(line: str, pos: int, markers) -> tuple[int, str] | None:
    """Find the first marker occurring at or after `pos`; longest wins on ties."""
    best: tuple[int, str] | None = None
    for marker in markers:
        index = line.find(marker, pos)
        if index < 0:
            continue
        if best is None or index < best[0] or (
            index == best[0] and len(marker) > len(best[1])
        ):
            best = (index, marker)
    return best

