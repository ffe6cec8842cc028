"""Summary formatting and the report sink."""

import sys
from pathlib import Path
from typing import Optional, TextIO

from .config import Summary


def format_summary(sent: int, failed: int, elapsed: float) -> str:
    """Render counters as a one-line summary.

    A non-positive ``elapsed`` reports a rate of zero.
    """
    rate = Summary(sent, failed, elapsed).rate
    return f"{sent} requests sent, {failed} failed, {rate:.2f} avg req/s"


class ReportWriter:
    """Writes summary lines to a stream and, optionally, a report file.

    A quiet writer keeps interim summaries off the stream; they still go
    to the report file.
    """

    PREFIX = "[*] "

    def __init__(self, stream: Optional[TextIO] = None, output_path: Optional[Path] = None,
                 quiet: bool = False):
        self.stream = stream if stream is not None else sys.stdout
        self.output_path = output_path
        self.quiet = quiet
        self.line_count = 0

    def initialize(self) -> None:
        """Prepare the report file, truncating an old one."""
        if self.output_path is None:
            return
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        if self.output_path.exists():
            self.output_path.unlink()

    def write(self, line: str, to_stream: bool = True) -> None:
        if to_stream:
            self.stream.write(line + '\n')
            self.stream.flush()
        if self.output_path is not None:
            try:
                with open(self.output_path, 'a', encoding='utf-8') as f:
                    f.write(line + '\n')
            except OSError as e:
                raise OSError(f"Failed to write report line {self.line_count}: {e}") from e
        self.line_count += 1

    def report(self, summary: Summary, interim: bool = False) -> None:
        """Write one summary line."""
        line = self.PREFIX + format_summary(summary.sent, summary.failed, summary.elapsed)
        self.write(line, to_stream=not (interim and self.quiet))

    def finalize(self) -> int:
        """Return the number of lines written."""
        return self.line_count
