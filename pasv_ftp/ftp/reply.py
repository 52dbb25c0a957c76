"""Control-channel reply parsing.

FTP replies carry no length prefix, so the end of a reply is found with a
continuation heuristic:

- a line whose three leading digits are followed by a non-space
  (``211-First``) opens a multi-line block;
- lines indented by three spaces never end the reply;
- any other line ends it, so a single-line reply is one line long;
- running out of input also ends it.

The status code is the first run of three digits in the reply text.
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from pasv_ftp.ftp.exceptions import UnexpectedResponseError


CONTINUATION_PATTERN = re.compile(r"^\d{3}\S")
CODE_PATTERN = re.compile(r"\d{3}")
INDENT = "   "

# Returns the next line without its terminator, or None at end of input
LineSource = Callable[[], Optional[str]]
LineObserver = Callable[[str], None]


@dataclass(frozen=True)
class Reply:
    """One parsed server reply."""
    code: int
    raw_lines: Tuple[str, ...]

    @property
    def text(self) -> str:
        """Reply lines joined with newlines."""
        return "\n".join(self.raw_lines)

    def __str__(self) -> str:
        return self.text


def read_reply(readline: LineSource, on_line: Optional[LineObserver] = None) -> Reply:
    """
    Read exactly one reply from a line source.

    Args:
        readline: Callable returning the next line, or None at end of input
        on_line: Optional observer called with every line as it is read

    Returns:
        Parsed Reply (code 0 if no status code was found)
    """
    lines = []

    while True:
        line = readline()
        if line is None:
            break
        lines.append(line)
        if on_line is not None:
            on_line(line)

        if CONTINUATION_PATTERN.match(line) or line.startswith(INDENT):
            continue
        # Closing line of a block, or a plain single-line reply
        break

    return Reply(code=parse_code("\n".join(lines)), raw_lines=tuple(lines))


def parse_code(text: str) -> int:
    """Return the first three-digit run in text as an int, 0 if none."""
    match = CODE_PATTERN.search(text)
    return int(match.group()) if match else 0


def check_reply(reply: Reply, allowed: Iterable[int]) -> Reply:
    """
    Enforce an allow-list of reply codes.

    Args:
        reply: Reply to check
        allowed: Acceptable codes; empty means any code is accepted

    Returns:
        The same reply

    Raises:
        UnexpectedResponseError: If the code is not in a non-empty allow-list
    """
    allowed = tuple(allowed)
    if allowed and reply.code not in allowed:
        raise UnexpectedResponseError(reply.code, reply.text)
    return reply
