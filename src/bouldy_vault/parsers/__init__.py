from .todo_parser import parse_todos, serialize_todos, parse_lines, LineResult
from .archive_parser import parse_archive, format_archive_entries, archive_file_name
from .prompt_parser import parse_prompt_content, serialize_prompt_content

__all__ = [
    "parse_todos",
    "serialize_todos",
    "parse_lines",
    "LineResult",
    "parse_archive",
    "format_archive_entries",
    "archive_file_name",
    "parse_prompt_content",
    "serialize_prompt_content",
]
