"""Tests for JSON-RPC request handling and stdio framing."""
import io
import json
import sys

import pytest

from conftest import git
from mcp_git_command.config import ServerConfig
from mcp_git_command.mcp import tools
from mcp_git_command.mcp.server import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    STARTUP_BANNER,
    handle_request,
    run_stdio_server,
)


def request(req_id, method, params=None):
    message = {"jsonrpc": "2.0", "id": req_id, "method": method}
    if params is not None:
        message["params"] = params
    return message


async def serve_lines(lines):
    """Feed lines through the stdio loop and return decoded output records."""
    reader = io.StringIO("".join(lines))
    writer = io.StringIO()
    await run_stdio_server(reader=reader, writer=writer)
    return [json.loads(line) for line in writer.getvalue().splitlines()]


@pytest.mark.asyncio
async def test_initialize():
    """Test initialize reports server info from config."""
    tools.set_config(ServerConfig(server_name="git-test", server_version="9.9.9"))

    response = await handle_request(request(1, "initialize", {}))

    assert response["id"] == 1
    result = response["result"]
    assert result["protocolVersion"] == "2024-11-05"
    assert result["capabilities"] == {"tools": {}}
    assert result["serverInfo"] == {"name": "git-test", "version": "9.9.9"}


@pytest.mark.asyncio
async def test_ping():
    response = await handle_request(request("p", "ping"))
    assert response == {"jsonrpc": "2.0", "id": "p", "result": {}}


@pytest.mark.asyncio
async def test_tools_list():
    """Test tools/list returns the git-commit descriptor."""
    response = await handle_request(request(2, "tools/list"))

    tools_listed = response["result"]["tools"]
    assert len(tools_listed) == 1
    assert tools_listed[0]["name"] == "git-commit"
    assert "inputSchema" in tools_listed[0]


@pytest.mark.asyncio
async def test_tools_list_is_stable_across_calls(git_repo):
    """Test discovery is unchanged after a tool call."""
    before = await handle_request(request(1, "tools/list"))
    (git_repo / "a.txt").write_text("x")
    await handle_request(request(2, "tools/call", {
        "name": "git-commit",
        "arguments": {"files": ["a.txt"], "message": "m", "directory": str(git_repo)}
    }))
    after = await handle_request(request(3, "tools/list"))

    assert before["result"] == after["result"]


@pytest.mark.asyncio
async def test_tools_call_unknown_tool():
    """Test an unknown tool is a protocol-level error carrying the name."""
    response = await handle_request(request(3, "tools/call", {"name": "git-push", "arguments": {}}))

    assert "result" not in response
    assert response["id"] == 3
    assert response["error"]["code"] == METHOD_NOT_FOUND
    assert response["error"]["message"] == "Unknown tool: git-push"
    assert response["error"]["data"] == {"tool": "git-push"}


@pytest.mark.asyncio
async def test_tools_call_invalid_params():
    """Test argument validation failures map to Invalid params."""
    response = await handle_request(request(4, "tools/call", {
        "name": "git-commit",
        "arguments": {"files": [], "message": "m"}
    }))

    assert response["error"]["code"] == INVALID_PARAMS
    assert response["error"]["data"]["tool"] == "git-commit"
    locs = [err["loc"] for err in response["error"]["data"]["errors"]]
    assert ["files"] in locs
    assert ["directory"] in locs


@pytest.mark.asyncio
async def test_tools_call_failure_is_a_result():
    """Test a git failure is a result envelope with isError, not a protocol error."""
    response = await handle_request(request(5, "tools/call", {
        "name": "git-commit",
        "arguments": {"files": ["a.txt"], "message": "m", "directory": "/path/does/not/exist"}
    }))

    assert "error" not in response
    assert response["result"]["isError"] is True
    assert "FAILED" in response["result"]["content"][0]["text"]


@pytest.mark.asyncio
async def test_unknown_method():
    response = await handle_request(request(6, "resources/list"))

    assert response["error"]["code"] == METHOD_NOT_FOUND
    assert "tools/call" in response["error"]["data"]["available_methods"]


@pytest.mark.asyncio
async def test_notification_gets_no_response():
    response = await handle_request({"jsonrpc": "2.0", "method": "notifications/initialized"})
    assert response is None


@pytest.mark.asyncio
async def test_tools_call_notification_still_runs(git_repo):
    """Test a tools/call without an id commits but sends nothing back."""
    (git_repo / "a.txt").write_text("x")

    response = await handle_request({"jsonrpc": "2.0", "method": "tools/call", "params": {
        "name": "git-commit",
        "arguments": {"files": ["a.txt"], "message": "quiet", "directory": str(git_repo)}
    }})

    assert response is None
    assert git(git_repo, "log", "--format=%s").strip() == "quiet"


@pytest.mark.asyncio
async def test_failing_notification_gets_no_response():
    response = await handle_request({"jsonrpc": "2.0", "method": "tools/call", "params": {"name": "nope"}})
    assert response is None
    assert await handle_request({"jsonrpc": "2.0", "method": "resources/list"}) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("message", [[1, 2], "tools/list", {"id": 7}, {"id": 7, "method": 5}])
async def test_invalid_request(message):
    response = await handle_request(message)
    assert response["error"]["code"] == INVALID_REQUEST


@pytest.mark.asyncio
async def test_params_must_be_object():
    response = await handle_request(request(8, "tools/call", ["git-commit"]))
    assert response["error"]["code"] == INVALID_PARAMS


@pytest.mark.asyncio
async def test_internal_error(monkeypatch):
    """Test unexpected handler exceptions become Internal error."""
    from mcp_git_command.mcp import server

    async def broken(params):
        raise RuntimeError("kaboom")

    monkeypatch.setitem(server.MCP_METHODS, "tools/list", broken)
    response = await handle_request(request(9, "tools/list"))

    assert response["error"]["code"] == INTERNAL_ERROR
    assert response["error"]["data"] == {"error": "kaboom", "error_type": "RuntimeError"}


@pytest.mark.asyncio
async def test_stdio_loop_answers_in_order(capsys):
    """Test one response line per request, banner on stderr only."""
    out = await serve_lines([
        json.dumps(request(1, "initialize", {})) + "\n",
        "\n",
        json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}) + "\n",
        json.dumps(request(2, "tools/list")) + "\n",
    ])

    assert [r["id"] for r in out] == [1, 2]
    captured = capsys.readouterr()
    assert STARTUP_BANNER in captured.err
    assert captured.out == ""


@pytest.mark.asyncio
async def test_stdio_loop_survives_malformed_record():
    """Test a malformed line gets a parse error and the next request is answered."""
    out = await serve_lines([
        "{not json\n",
        json.dumps(request(2, "ping")) + "\n",
    ])

    assert out[0]["id"] is None
    assert out[0]["error"]["code"] == PARSE_ERROR
    assert out[1] == {"jsonrpc": "2.0", "id": 2, "result": {}}


@pytest.mark.asyncio
@pytest.mark.parametrize("record", [
    pytest.param(
        '{"jsonrpc": "2.0", "id": ' + "1" * 5000 + ', "method": "ping"}',
        marks=pytest.mark.skipif(
            not hasattr(sys, "get_int_max_str_digits"),
            reason="interpreter has no integer string length limit"
        ),
        id="oversized-integer",
    ),
    pytest.param("[" * 200000, id="deep-nesting"),
])
async def test_stdio_loop_survives_undecodable_record(record):
    """Test records json can't decode (huge ints, deep nesting) don't stop the loop."""
    out = await serve_lines([
        record + "\n",
        json.dumps(request(2, "ping")) + "\n",
    ])

    assert len(out) == 2
    assert out[0]["id"] is None
    assert out[0]["error"]["code"] == PARSE_ERROR
    assert out[1] == {"jsonrpc": "2.0", "id": 2, "result": {}}


@pytest.mark.asyncio
async def test_stdio_loop_handles_last_line_without_newline():
    out = await serve_lines([json.dumps(request(1, "ping"))])
    assert out == [{"jsonrpc": "2.0", "id": 1, "result": {}}]


@pytest.mark.asyncio
async def test_stdio_loop_output_is_one_record_per_line(git_repo):
    """Test multi-line report text is escaped inside a single output line."""
    (git_repo / "a.txt").write_text("x")
    reader = io.StringIO(json.dumps(request(1, "tools/call", {
        "name": "git-commit",
        "arguments": {"files": ["a.txt"], "message": "init", "directory": str(git_repo)}
    })) + "\n")
    writer = io.StringIO()

    await run_stdio_server(reader=reader, writer=writer)

    lines = writer.getvalue().splitlines()
    assert len(lines) == 1
    text = json.loads(lines[0])["result"]["content"][0]["text"]
    assert "SUCCESS" in text
    assert "\n" in text
