"""
Source mapping for the Pebble Programming Language
Tracks registered source texts and resolves spans to line/column positions
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import os

@dataclass(frozen=True)
class Span:
    """A region of one source file, as byte offsets"""
    file_id: int
    start: int  # inclusive
    end: int    # exclusive

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Invalid span: start ({self.start}) > end ({self.end})")

@dataclass
class Position:
    """Line/column position in source file (1-indexed)"""
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"

class SourceFile:
    """A registered source text with its line index"""

    def __init__(self, file_id: int, path: str, content: str):
        self.file_id = file_id
        self.path = path
        self.content = content
        self.line_starts = self._compute_line_starts()

    def _compute_line_starts(self) -> List[int]:
        line_starts = [0]
        for i, char in enumerate(self.content):
            if char == '\n':
                line_starts.append(i + 1)
        return line_starts

    def offset_to_position(self, offset: int) -> Position:
        """Convert byte offset to line/column position"""
        if offset < 0 or offset > len(self.content):
            raise ValueError(f"Offset {offset} out of bounds for file {self.path}")

        line_num = bisect_right(self.line_starts, offset)
        column = offset - self.line_starts[line_num - 1] + 1
        return Position(line_num, column)

    def span_to_positions(self, span: Span) -> Tuple[Position, Position]:
        if span.file_id != self.file_id:
            raise ValueError(f"Span file_id {span.file_id} doesn't match file {self.file_id}")

        start_pos = self.offset_to_position(span.start)
        end_pos = self.offset_to_position(max(span.start, span.end - 1))  # end is exclusive
        return start_pos, end_pos

    def get_line(self, line_num: int) -> str:
        """Get the content of a specific line (1-indexed)"""
        if line_num < 1 or line_num > len(self.line_starts):
            raise ValueError(f"Line {line_num} out of bounds")

        start = self.line_starts[line_num - 1]
        if line_num < len(self.line_starts):
            end = self.line_starts[line_num] - 1  # Exclude the newline
        else:
            end = len(self.content)
        return self.content[start:end]

    @property
    def line_count(self) -> int:
        return len(self.line_starts)

def is_pseudo_path(path: str) -> bool:
    """Paths like <stdin> or <repl> name a text that has no file behind it"""
    return path.startswith('<') and path.endswith('>')

class SourceMap:
    """Manages every source text seen in this process"""

    def __init__(self):
        self.files: Dict[int, SourceFile] = {}
        self.path_to_id: Dict[str, int] = {}
        self.next_id = 1

    def add_file(self, path: str, content: str) -> int:
        """Register a source text and return its ID

        Real files are registered once per absolute path. Pseudo-paths get a
        fresh ID every time, since each REPL line is a different text.
        """
        if is_pseudo_path(path):
            key = None
        else:
            key = os.path.abspath(path)
            if key in self.path_to_id:
                existing = self.files[self.path_to_id[key]]
                if existing.content == content:
                    return existing.file_id

        file_id = self.next_id
        self.next_id += 1

        self.files[file_id] = SourceFile(file_id, key or path, content)
        if key is not None:
            self.path_to_id[key] = file_id
        return file_id

    def get_file(self, file_id: int) -> Optional[SourceFile]:
        return self.files.get(file_id)

    def resolve_span(self, span: Span) -> Tuple[SourceFile, Position, Position]:
        """Resolve a span to file and positions"""
        source_file = self.get_file(span.file_id)
        if not source_file:
            raise ValueError(f"Unknown file ID: {span.file_id}")

        start_pos, end_pos = source_file.span_to_positions(span)
        return source_file, start_pos, end_pos

# Global source map instance
_source_map = SourceMap()

def get_source_map() -> SourceMap:
    """Get the global source map instance"""
    return _source_map

def reset_source_map():
    """Reset the global source map (useful for testing)"""
    global _source_map
    _source_map = SourceMap()
