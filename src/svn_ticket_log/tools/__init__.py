"""Tool implementations

Read-only git command execution used by the log retrieval layer.
"""

from .tool import Tool
from .tool_result import ToolResult
from .git_command_tool import GitCommandTool

__all__ = [
    "Tool",
    "ToolResult",
    "GitCommandTool",
]
