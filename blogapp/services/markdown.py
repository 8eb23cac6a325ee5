"""
Splits blog content into plain text runs and fenced code blocks.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional, Union

FENCE_RE = re.compile(r"^```(\w+)?\s*$")
LINE_BREAK_RE = re.compile(r"\r?\n")


@dataclass
class TextBlock:
    lines: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass
class CodeBlock:
    language: Optional[str] = None
    lines: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


Block = Union[TextBlock, CodeBlock]


def split_markdown_blocks(content: str) -> List[Block]:
    """
    Group ``content`` lines into text and code blocks.

    A line that is exactly a triple-backtick fence (optionally followed by a
    language tag) opens a code block, and the next fence closes it. A code
    block still open at the end of the input is emitted as-is.
    """
    blocks: List[Block] = []
    text_lines: List[str] = []
    code: Optional[CodeBlock] = None

    for line in LINE_BREAK_RE.split(content or ""):
        fence = FENCE_RE.match(line)
        if fence:
            if code is not None:
                blocks.append(code)
                code = None
            else:
                if text_lines:
                    blocks.append(TextBlock(text_lines))
                    text_lines = []
                code = CodeBlock(language=fence.group(1))
            continue

        if code is not None:
            code.lines.append(line)
        else:
            text_lines.append(line)

    if code is not None:
        blocks.append(code)
    elif text_lines:
        blocks.append(TextBlock(text_lines))

    return blocks
