"""Text compression for request messages.

Normalizes whitespace, strips Markdown styling and rewrites punctuation so
that less text is sent to the completion API. Every step is a pure
str -> str function; TextCompressor applies the enabled ones in a fixed
order and repeats the pass until the text stops changing, which makes
compress() idempotent for a given option set.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from contextkit.config.models import CompressionOptions

DEFAULT_COMPRESSION_OPTIONS = CompressionOptions()

CODE_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```")

# (pattern, replacement) pairs, applied in order
MARKDOWN_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^#{1,6}[ \t]+", re.MULTILINE), ""),  # 見出し
    (re.compile(r"\*\*(.+?)\*\*"), r"\1"),  # 太字 **
    (re.compile(r"(?<!\w)__(.+?)__(?!\w)"), r"\1"),  # 太字 __
    (re.compile(r"(?<!\*)\*(?!\*)(.+?)\*(?!\*)"), r"\1"),  # 斜体 *
    (re.compile(r"(?<![\w_])_(?!_)(.+?)(?<!_)_(?![\w_])"), r"\1"),  # 斜体 _
    (re.compile(r"~~(.+?)~~"), r"\1"),  # 取り消し線
    (re.compile(r"`([^`\n]+)`"), r"\1"),  # インラインコード
    (re.compile(r"!\[([^\]]*)\]\([^)]+\)"), r"\1"),  # 画像
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),  # リンク
    (re.compile(r"^[ \t]*[-*+][ \t]+", re.MULTILINE), ""),  # 箇条書き
    (re.compile(r"^[ \t]*\d+\.[ \t]+", re.MULTILINE), ""),  # 番号付きリスト
    (re.compile(r"^>[ \t]+", re.MULTILINE), ""),  # 引用
    (re.compile(r"^[-*_]{3,}[ \t]*$", re.MULTILINE), ""),  # 水平線
]

FULL_WIDTH_BRACKETS = str.maketrans(
    {
        "（": "(",
        "）": ")",
        "【": "[",
        "】": "]",
        "「": '"',
        "」": '"',
        "『": "'",
        "』": "'",
    }
)

CJK_PUNCTUATION = str.maketrans(
    {
        "，": ",",
        "。": ".",
        "！": "!",
        "？": "?",
        "；": ";",
        "：": ":",
        "“": "'",
        "”": "'",
        "‘": "'",
        "’": "'",
        "、": ",",
    }
)

REPEATED_SYMBOL_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"！{2,}"), "！"),
    (re.compile(r"!{2,}"), "!"),
    (re.compile(r"？{2,}"), "？"),
    (re.compile(r"\?{2,}"), "?"),
    (re.compile(r"。{2,}"), "。"),
    (re.compile(r"\.{3,}"), "..."),
    (re.compile(r"，{2,}"), "，"),
    (re.compile(r",{2,}"), ","),
    (re.compile(r"；{2,}"), "；"),
    (re.compile(r";{2,}"), ";"),
    (re.compile(r"：{2,}"), "："),
    (re.compile(r":{2,}"), ":"),
    (re.compile(r"-{4,}"), "---"),
    (re.compile(r"~{2,}"), "~"),
]

EMOJI_PATTERN = re.compile(
    "["
    "\U0001F000-\U0001F02F"
    "\U0001F0A0-\U0001F0FF"
    "\U0001F100-\U0001F64F"
    "\U0001F680-\U0001F6FF"
    "\U0001F300-\U0001F5FF"
    "\U0001F900-\U0001F9FF"
    "\U0001FA00-\U0001FAFF"
    "\u2600-\u26FF"
    "\u2700-\u27BF"
    "]"
)

TABLE_PATTERN = re.compile(r"(\|.+\|)\n(\|[ \t:|-]+\|)\n((?:\|.+\|\n?)+)")
# whitespace at the end of a segment is left alone so a following fence
# stays on its own line
CJK_PUNCTUATION_SPACES = re.compile(r"([，。！？；：、])\s+(?=\S)")
LATIN_PUNCTUATION_SPACES = re.compile(r"([,.!?;:])[ \t]{2,}")
INLINE_WHITESPACE = re.compile(r"[ \t]+")


def _outside_code_blocks(text: str, func: Callable[[str], str]) -> str:
    """Apply func to the parts of text that are not fenced code blocks."""
    parts: list[str] = []
    last = 0
    for match in CODE_BLOCK_PATTERN.finditer(text):
        parts.append(func(text[last : match.start()]))
        parts.append(match.group(0))
        last = match.end()
    parts.append(func(text[last:]))
    return "".join(parts)


def _lines_with_code_flags(text: str) -> list[tuple[str, bool]]:
    """Split text into lines, flagging the ones inside a fenced code block.

    Fence lines count as inside.
    """
    spans = [match.span() for match in CODE_BLOCK_PATTERN.finditer(text)]
    result: list[tuple[str, bool]] = []
    pos = 0
    for line in text.split("\n"):
        end = pos + len(line)
        in_code = any(start < end and pos < stop for start, stop in spans)
        result.append((line, in_code))
        pos = end + 1
    return result


def _map_lines_outside_code_blocks(text: str, func: Callable[[str], str]) -> str:
    return "\n".join(
        line if in_code else func(line)
        for line, in_code in _lines_with_code_flags(text)
    )


def _strip_markdown(text: str) -> str:
    for pattern, replacement in MARKDOWN_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def remove_markdown_styling(text: str) -> str:
    """Remove Markdown styling marks, keeping the visible text.

    Fenced code blocks are left as they are.
    """
    return _outside_code_blocks(text, _strip_markdown)


def remove_full_width_brackets(text: str) -> str:
    """Map full-width brackets and corner quotes to ASCII."""
    return text.translate(FULL_WIDTH_BRACKETS)


def normalize_punctuation(text: str) -> str:
    """Map CJK punctuation to its ASCII counterpart."""
    return text.translate(CJK_PUNCTUATION)


def merge_repeated_symbols(text: str) -> str:
    """Collapse runs of the same punctuation mark (e.g. "！！！" -> "！")."""
    for pattern, replacement in REPEATED_SYMBOL_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def remove_emojis(text: str) -> str:
    """Remove emoji and pictographic symbols."""
    return EMOJI_PATTERN.sub("", text)


def compress_tables(text: str) -> str:
    """Remove padding inside Markdown table cells."""

    def compact(match: re.Match[str]) -> str:
        table = re.sub(r"\|[ \t]+", "|", match.group(0))
        return re.sub(r"[ \t]+\|", "|", table)

    return TABLE_PATTERN.sub(compact, text)


def trim_lines(text: str) -> str:
    """Strip leading and trailing whitespace from every line outside code blocks."""
    return _map_lines_outside_code_blocks(text, str.strip)


def remove_extra_whitespace(text: str) -> str:
    """Collapse runs of spaces and tabs within a line into one space.

    Lines inside fenced code blocks keep their indentation.
    """
    return _map_lines_outside_code_blocks(
        text, lambda line: INLINE_WHITESPACE.sub(" ", line)
    )


def _strip_punctuation_spaces(text: str) -> str:
    text = CJK_PUNCTUATION_SPACES.sub(r"\1", text)
    return LATIN_PUNCTUATION_SPACES.sub(r"\1 ", text)


def remove_punctuation_spaces(text: str) -> str:
    """Drop whitespace after CJK punctuation; keep one space after Latin punctuation.

    Line breaks after CJK punctuation are removed as well. Code blocks are
    left as they are.
    """
    return _outside_code_blocks(text, _strip_punctuation_spaces)


def compress_newlines(text: str, max_newlines: int) -> str:
    """Limit consecutive newlines outside code blocks to max_newlines.

    0 turns every newline run into a single space, except that a run next to
    a code block becomes one newline. A negative value leaves the text
    unchanged.
    """
    if max_newlines < 0:
        return text

    if max_newlines == 0:

        def collapse(segment: str) -> str:
            return re.sub(
                r"\n+",
                lambda m: "\n" if m.start() == 0 or m.end() == len(segment) else " ",
                segment,
            )

    else:
        pattern = re.compile(f"\n{{{max_newlines + 1},}}")

        def collapse(segment: str) -> str:
            return pattern.sub("\n" * max_newlines, segment)

    return _outside_code_blocks(text, collapse)


def remove_empty_lines(text: str) -> str:
    """Drop blank lines outside fenced code blocks."""
    return "\n".join(
        line
        for line, in_code in _lines_with_code_flags(text)
        if in_code or line.strip()
    )


def compress_code_blocks(text: str, drop_empty_lines: bool) -> str:
    """Strip trailing whitespace inside fenced code blocks.

    Indentation is kept. Empty lines inside a block are dropped only when
    drop_empty_lines is set.
    """

    def compact(match: re.Match[str]) -> str:
        block = match.group(0)
        lines = block.split("\n")
        if len(lines) < 3:
            return block
        code_lines = [line.rstrip() for line in lines[1:-1]]
        if drop_empty_lines:
            code_lines = [line for line in code_lines if line]
        return "\n".join([lines[0], *code_lines, lines[-1]])

    return CODE_BLOCK_PATTERN.sub(compact, text)


@dataclass(frozen=True)
class CompressionStats:
    """Size comparison between original and compressed text.

    Attributes:
        original_size: Character count before compression.
        compressed_size: Character count after compression.
        saved_chars: Characters removed.
        compression_ratio: Percentage of characters removed.
    """

    original_size: int
    compressed_size: int
    saved_chars: int
    compression_ratio: float

    @property
    def ratio_text(self) -> str:
        """Ratio formatted as a percentage string, e.g. "12.50%"."""
        return f"{self.compression_ratio:.2f}%"


class TextCompressor:
    """Applies the enabled compression steps in a fixed order."""

    def __init__(self, options: CompressionOptions | None = None) -> None:
        """Initialize the compressor.

        Args:
            options: Compression options. Defaults enable every standard step.
        """
        self._options = options or DEFAULT_COMPRESSION_OPTIONS

    @property
    def options(self) -> CompressionOptions:
        return self._options

    def compress(self, text: str) -> str:
        """Compress text.

        Args:
            text: Original text.

        Returns:
            Compressed text. Compressing it again returns it unchanged.
        """
        if not text:
            return text

        result = self._compress_once(text)
        while True:
            again = self._compress_once(result)
            if again == result:
                return result
            result = again

    def _compress_once(self, text: str) -> str:
        options = self._options
        result = text

        if options.remove_emojis:
            result = remove_emojis(result)
        if options.compress_tables:
            result = compress_tables(result)
        if options.remove_markdown_styling:
            result = remove_markdown_styling(result)

        if options.remove_full_width_brackets:
            result = remove_full_width_brackets(result)
        if options.normalize_punctuation:
            result = normalize_punctuation(result)
        if options.merge_repeated_symbols:
            result = merge_repeated_symbols(result)

        if options.trim_lines:
            result = trim_lines(result)
        if options.remove_extra_whitespace:
            result = remove_extra_whitespace(result)
        if options.remove_punctuation_spaces:
            result = remove_punctuation_spaces(result)
        result = compress_newlines(result, options.compress_newlines)
        if options.remove_empty_lines:
            result = remove_empty_lines(result)
        if options.compress_code_blocks:
            result = compress_code_blocks(
                result, options.remove_code_block_empty_lines
            )

        return result.strip()

    @staticmethod
    def get_compression_stats(original: str, compressed: str) -> CompressionStats:
        """Compare sizes of original and compressed text."""
        return get_compression_stats(original, compressed)


def get_compression_stats(original: str, compressed: str) -> CompressionStats:
    """Compare sizes of original and compressed text.

    Args:
        original: Text before compression.
        compressed: Text after compression.

    Returns:
        CompressionStats with a 0.0 ratio for empty originals.
    """
    original_size = len(original)
    compressed_size = len(compressed)
    saved = original_size - compressed_size
    ratio = (saved / original_size) * 100 if original_size > 0 else 0.0
    return CompressionStats(
        original_size=original_size,
        compressed_size=compressed_size,
        saved_chars=saved,
        compression_ratio=ratio,
    )


default_text_compressor = TextCompressor(DEFAULT_COMPRESSION_OPTIONS)


def compress_text(text: str, options: CompressionOptions | None = None) -> str:
    """Compress text with the given options (defaults when None)."""
    if options is None:
        return default_text_compressor.compress(text)
    return TextCompressor(options).compress(text)
