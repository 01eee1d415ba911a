"""Tool schemas for MCP server.

Defines JSON Schema for each tool's input parameters.
"""

TOOL_SCHEMAS = {
    "git-commit": {
        "description": "Stage and commit files to git repository",
        "inputSchema": {
            "type": "object",
            "properties": {
                "files": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "List of files to stage and commit"
                },
                "message": {
                    "type": "string",
                    "description": "Commit message"
                },
                "directory": {
                    "type": "string",
                    "description": "Directory to execute git commands in"
                }
            },
            "required": ["files", "message", "directory"]
        }
    },
}
