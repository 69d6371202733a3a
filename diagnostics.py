"""
Diagnostic formatting and reporting for the Pebble Programming Language
Provides pretty-printed error messages with code frames and ANSI colors
"""

import sys
import os
from typing import Optional, List, TextIO
from enum import Enum

from errors import Diagnostic, PebbleError, Severity
from source_map import get_source_map, SourceFile, Position

class ColorMode(Enum):
    """Color output modes"""
    NEVER = "never"
    ALWAYS = "always"
    AUTO = "auto"

class DiagnosticFormatter:
    """Formats diagnostics for human-readable output"""

    def __init__(self, color_mode: ColorMode = ColorMode.AUTO, max_errors: int = 20):
        self.color_mode = color_mode
        self.max_errors = max_errors
        self.error_count = 0

        # ANSI color codes
        self.colors = {
            'reset': '\033[0m',
            'cyan': '\033[36m',
            'blue': '\033[34m',
            'white': '\033[37m',
            'bright_red': '\033[91m',
            'bright_yellow': '\033[93m',
            'bright_blue': '\033[94m',
            'bright_cyan': '\033[96m',
        }

    def should_use_colors(self, file: TextIO) -> bool:
        """Determine if we should use ANSI colors"""
        if self.color_mode == ColorMode.NEVER:
            return False
        elif self.color_mode == ColorMode.ALWAYS:
            return True
        else:  # AUTO
            isatty = getattr(file, 'isatty', None)
            return bool(isatty and isatty()) and os.getenv('NO_COLOR') is None

    def colorize(self, text: str, color: str, file: TextIO) -> str:
        """Apply color to text if colors are enabled"""
        if not self.should_use_colors(file):
            return text
        return f"{self.colors.get(color, '')}{text}{self.colors['reset']}"

    def reset(self):
        """Forget counts from previous runs"""
        self.error_count = 0

    def format_diagnostic(self, diagnostic: Diagnostic, file: TextIO) -> str:
        """Format a single diagnostic with code frame"""
        output_lines = []

        if diagnostic.severity == Severity.ERROR:
            self.error_count += 1

        if self.error_count > self.max_errors:
            # Only say so once
            if self.error_count == self.max_errors + 1:
                return self.colorize("... (too many errors, stopping)\n", 'bright_red', file)
            return ""

        severity_color = self._get_severity_color(diagnostic.severity)
        header = f"{diagnostic.severity.value.title()} [{diagnostic.code}]: {diagnostic.message}"
        output_lines.append(self.colorize(header, severity_color, file))

        primary_span = diagnostic.primary_span()
        resolved = None
        if primary_span:
            try:
                resolved = get_source_map().resolve_span(primary_span)
            except ValueError:
                resolved = None

        if resolved:
            source_file, start_pos, _ = resolved
            output_lines.extend(self._format_location(diagnostic, source_file, start_pos, file))
        elif diagnostic.line is not None:
            output_lines.append(self.colorize(f"  --> line {diagnostic.line}", 'bright_blue', file))

        if diagnostic.help:
            output_lines.append(self.colorize(f"   = help: {diagnostic.help}", 'cyan', file))

        for note in diagnostic.notes:
            output_lines.append(self.colorize(f"   = note: {note}", 'blue', file))

        output_lines.append("")  # Empty line after diagnostic
        return "\n".join(output_lines) + "\n"

    def _format_location(self, diagnostic: Diagnostic, source_file: SourceFile,
                         start_pos: Position, file: TextIO) -> List[str]:
        """Format the file location and code frame"""
        lines = []
        file_name = os.path.relpath(source_file.path) if os.path.exists(source_file.path) else source_file.path
        location = f"  --> {file_name}:{start_pos.line}:{start_pos.column}"
        lines.append(self.colorize(location, 'bright_blue', file))
        lines.append(self.colorize("   |", 'bright_blue', file))
        lines.extend(self._format_code_frame(diagnostic, source_file, file))
        return lines

    def _format_code_frame(self, diagnostic: Diagnostic, source_file: SourceFile, file: TextIO) -> List[str]:
        """Format the code frame with line numbers and labels"""
        lines = []
        source_map = get_source_map()

        span_info = []
        for label in diagnostic.labels:
            try:
                _, start_pos, end_pos = source_map.resolve_span(label.span)
            except ValueError:
                continue
            span_info.append((label, start_pos, end_pos))

        if not span_info:
            return lines

        all_lines = [info[1].line for info in span_info] + [info[2].line for info in span_info]
        min_line = max(1, min(all_lines) - 1)
        max_line = min(source_file.line_count, max(all_lines) + 1)
        gutter_width = len(str(max_line))

        for line_num in range(min_line, max_line + 1):
            line_content = source_file.get_line(line_num)
            line_labels = [info for info in span_info if info[1].line <= line_num <= info[2].line]

            gutter = f"{line_num:>{gutter_width}}"
            if line_labels:
                lines.append(self._format_line_with_spans(
                    gutter, line_content, line_labels, line_num, gutter_width, file
                ))
            else:
                gutter_colored = self.colorize(gutter, 'bright_blue', file)
                pipe_colored = self.colorize('|', 'bright_blue', file)
                lines.append(f"{gutter_colored} {pipe_colored} {line_content}")

        return lines

    def _format_line_with_spans(self, gutter: str, line_content: str, line_labels: List,
                                line_num: int, gutter_width: int, file: TextIO) -> str:
        """Format a line that contains labeled spans"""
        output_lines = []

        gutter_colored = self.colorize(gutter, 'bright_blue', file)
        pipe_colored = self.colorize('|', 'bright_blue', file)
        output_lines.append(f"{gutter_colored} {pipe_colored} {line_content}")

        # One extra cell so a span at end of line (e.g. EOF) still gets a caret
        underline_chars = [' '] * (len(line_content) + 1)
        label_positions = []

        for label, start_pos, end_pos in line_labels:
            if start_pos.line != line_num:
                continue
            start_col = max(0, start_pos.column - 1)
            if end_pos.line == line_num:
                end_col = min(len(line_content), end_pos.column)
            else:
                end_col = len(line_content)

            underline_char = '^' if label.is_primary else '-'
            for i in range(start_col, max(start_col + 1, end_col)):
                if i < len(underline_chars):
                    underline_chars[i] = underline_char

            if label.label:
                label_positions.append((start_col, label.label, label.is_primary))

        if any(c != ' ' for c in underline_chars):
            underline = ''.join(underline_chars).rstrip()
            gutter_spaces = ' ' * gutter_width
            output_lines.append(f"{gutter_spaces} {pipe_colored} {self._colorize_underline(underline, file)}")

            for col, label_text, is_primary in label_positions:
                label_line = ' ' * (gutter_width + 3 + col)
                label_color = 'bright_red' if is_primary else 'bright_yellow'
                output_lines.append(label_line + self.colorize(label_text, label_color, file))

        return '\n'.join(output_lines)

    def _colorize_underline(self, underline: str, file: TextIO) -> str:
        result = []
        for char in underline:
            if char == '^':
                result.append(self.colorize(char, 'bright_red', file))
            elif char == '-':
                result.append(self.colorize(char, 'bright_yellow', file))
            else:
                result.append(char)
        return ''.join(result)

    def _get_severity_color(self, severity: Severity) -> str:
        color_map = {
            Severity.ERROR: 'bright_red',
        }
        return color_map.get(severity, 'white')

    def emit_diagnostic(self, diagnostic: Diagnostic, file: Optional[TextIO] = None):
        """Emit a diagnostic to the given file"""
        file = file or sys.stderr
        file.write(self.format_diagnostic(diagnostic, file))
        file.flush()

    def print_summary(self, file: Optional[TextIO] = None):
        """Print the error count for this run"""
        file = file or sys.stderr
        if self.error_count == 0:
            return

        error_text = f"{self.error_count} error{'s' if self.error_count != 1 else ''}"
        file.write(self.colorize(error_text, 'bright_red', file) + " generated\n")
        file.flush()

# Global formatter instance
_formatter = DiagnosticFormatter()

def get_formatter() -> DiagnosticFormatter:
    """Get the global diagnostic formatter"""
    return _formatter

def report(error: PebbleError):
    """Default error sink: render the error through the global formatter"""
    _formatter.emit_diagnostic(error.diagnostic)

def set_color_mode(mode: ColorMode):
    """Set the global color mode"""
    _formatter.color_mode = mode

def set_max_errors(max_errors: int):
    """Set the maximum number of errors to show"""
    _formatter.max_errors = max_errors
