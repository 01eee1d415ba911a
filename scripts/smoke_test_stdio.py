#!/usr/bin/env python3
"""Smoke-test the MCP Git Command server over stdio.

Spawns the server, sends initialize, tools/list and a git-commit call, and
prints what came back. Exit status is 0 when the commit succeeded.

Usage:
    python scripts/smoke_test_stdio.py --directory /path/to/repo -m "message" file1 [file2 ...]
"""
import argparse
import json
import subprocess
import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent.parent / "src"


def send(proc, msg):
    proc.stdin.write(json.dumps(msg) + "\n")
    proc.stdin.flush()


def recv(proc):
    line = proc.stdout.readline()
    if not line:
        return None
    return json.loads(line)


def main() -> int:
    parser = argparse.ArgumentParser(description="Smoke-test the MCP Git Command server")
    parser.add_argument("--directory", default=".", help="Working tree to commit in")
    parser.add_argument("--message", "-m", required=True, help="Commit message")
    parser.add_argument("files", nargs="+", help="Files to stage")
    args = parser.parse_args()

    proc = subprocess.Popen(
        [sys.executable, "-m", "mcp_git_command"],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=sys.stderr,
        text=True,
        cwd=str(SRC_DIR),
    )

    print("=" * 60)
    print("Testing MCP Git Command Server")
    print("=" * 60)

    try:
        print("\n📌 Test 1: Initialize MCP server")
        send(proc, {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}})
        response = recv(proc)
        if not response or "error" in response:
            print(f"❌ Error: {response}")
            return 1
        print(f"✅ Server initialized: {response['result']['serverInfo']['name']}")
        send(proc, {"jsonrpc": "2.0", "method": "notifications/initialized"})

        print("\n📌 Test 2: List available tools")
        send(proc, {"jsonrpc": "2.0", "id": 2, "method": "tools/list", "params": {}})
        response = recv(proc)
        if not response or "error" in response:
            print(f"❌ Error: {response}")
            return 1
        tools = response["result"]["tools"]
        print(f"✅ Found {len(tools)} tools: {', '.join(t['name'] for t in tools)}")

        print("\n📌 Test 3: git-commit")
        send(proc, {"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {
            "name": "git-commit",
            "arguments": {
                "files": args.files,
                "message": args.message,
                "directory": str(Path(args.directory).resolve())
            }
        }})
        response = recv(proc)
        if not response or "error" in response:
            print(f"❌ Error: {response}")
            return 1

        result = response["result"]
        print(result["content"][0]["text"])
        return 1 if result.get("isError") else 0

    finally:
        proc.stdin.close()
        proc.wait(timeout=30)


if __name__ == "__main__":
    sys.exit(main())
