"""Append-only edits to shell and agent configuration files."""
from dataclasses import dataclass
from pathlib import Path


def comment_block(comment: str, line: str) -> str:
    """Build a block preceded by a blank line and a comment."""
    return f"\n# {comment}\n{line}\n"


def file_contains(path: Path, marker: str) -> bool:
    """Check for ``marker`` in a file of any encoding, like grep does."""
    return path.is_file() and marker.encode() in path.read_bytes()


@dataclass(frozen=True)
class ConfigEdit:
    """A block appended to ``path`` unless ``marker`` is already there.

    Existing content is never rewritten or reordered.
    """
    path: Path
    marker: str
    block: str

    def is_applied(self) -> bool:
        return file_contains(self.path, self.marker)

    def apply(self) -> bool:
        """Append the block, returning False if it was already present."""
        if self.is_applied():
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        block = self.block.encode()
        if self.path.is_file():
            existing = self.path.read_bytes()
            if existing and not existing.endswith(b"\n"):
                block = b"\n" + block
        # One write per block so a block is never half appended.
        with open(self.path, 'ab') as f:
            f.write(block)
        return True
