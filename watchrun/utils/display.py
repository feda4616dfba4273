# watchrun/utils/display.py

"""
Result display surfaces for command output
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

logger = logging.getLogger(__name__)


class ResultDisplay:
    """Base interface for showing action output"""

    def show_inline(self, text: str) -> None:
        raise NotImplementedError

    def show_surface(self, title: str, text: str) -> Optional[Path]:
        """Show text on a freshly created surface; returns its location"""
        raise NotImplementedError


class ConsoleDisplay(ResultDisplay):
    """
    Prints short output, writes long output to a new result file
    """

    def __init__(self, results_dir: Path, stream: Optional[TextIO] = None):
        """
        Initialize console display

        Args:
            results_dir: Directory for result files
            stream: Output stream (defaults to stdout)
        """
        self.results_dir = Path(results_dir)
        self.stream = stream or sys.stdout

    def show_inline(self, text: str) -> None:
        text = text.rstrip("\n")
        if not text:
            return
        print(text, file=self.stream)
        self.stream.flush()

    def show_surface(self, title: str, text: str) -> Path:
        self.results_dir.mkdir(parents=True, exist_ok=True)

        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        base = f"{stamp}-{_slug(title)}"
        path = self.results_dir / f"{base}.log"
        counter = 1
        while path.exists():
            path = self.results_dir / f"{base}-{counter}.log"
            counter += 1

        with open(path, 'x', encoding='utf-8') as f:
            f.write(text)

        print(f"[{title}] {len(text.splitlines())} lines of output written to {path}",
              file=self.stream)
        self.stream.flush()
        logger.info(f"Result surface created: {path}")
        return path


def _slug(title: str) -> str:
    cleaned = "".join(c if c.isalnum() else "-" for c in title.lower())
    return "-".join(part for part in cleaned.split("-") if part)[:40] or "output"
