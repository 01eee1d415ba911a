from mcp_git_command.cli.commands import run

if __name__ == "__main__":
    run()
