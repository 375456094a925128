"""Split runtime log lines into per-program invocation frames."""

import re
from dataclasses import dataclass, field

INVOKE_RE = re.compile(r"^Program (\S+) invoke \[(\d+)\]$")
CONSUMED_RE = re.compile(r"^Program (\S+) consumed (\d+) of (\d+) compute units$")
SUCCESS_RE = re.compile(r"^Program (\S+) success$")
FAILED_RE = re.compile(r"^Program (\S+) failed: (.*)$")


@dataclass
class LogFrame:
    """One program invocation and the log lines it emitted directly."""

    program_id: str
    depth: int
    lines: list[str] = field(default_factory=list)
    compute_units_consumed: int | None = None
    succeeded: bool | None = None
    error: str | None = None


def split_invocations(logs: list[str]) -> list[LogFrame]:
    """Return frames in invocation order. Lines outside any frame are dropped."""
    frames: list[LogFrame] = []
    stack: list[LogFrame] = []

    for line in logs:
        m = INVOKE_RE.match(line)
        if m:
            frame = LogFrame(program_id=m.group(1), depth=int(m.group(2)))
            frames.append(frame)
            stack.append(frame)
            continue

        m = CONSUMED_RE.match(line)
        if m and stack and stack[-1].program_id == m.group(1):
            stack[-1].compute_units_consumed = int(m.group(2))
            continue

        m = SUCCESS_RE.match(line)
        if m and stack and stack[-1].program_id == m.group(1):
            stack.pop().succeeded = True
            continue

        m = FAILED_RE.match(line)
        if m and stack and stack[-1].program_id == m.group(1):
            frame = stack.pop()
            frame.succeeded = False
            frame.error = m.group(2)
            continue

        if stack:
            stack[-1].lines.append(line)

    return frames


def top_level_frames(logs: list[str]) -> list[LogFrame]:
    return [f for f in split_invocations(logs) if f.depth == 1]
