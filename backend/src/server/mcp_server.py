"""
Human-in-the-loop MCP Server

MCP (Model Context Protocol) server letting an agent delegate a question to a
human worker on Amazon Mechanical Turk.

Features:
- askHuman: create a HIT, wait for a worker's answer, auto-approve it
- checkHITStatus: re-check a HIT later using the ticket askHuman returned
- mturk-account:// resources: balance, active HITs, configuration
- ask-human / check-hit prompts

Transport: stdio (JSON-RPC 2.0, one message per line). Logs go to stderr.
"""
import json
import sys
from typing import Any, Optional

from handlers.account import get_account_info
from handlers.hits import ask_human, check_hit_status
from shared.config import config
from shared.logging import logger
from shared.utils import format_tool_result


# ── MCP Protocol Constants ──────────────────────────────────────────

MCP_VERSION = "2024-11-05"
SERVER_NAME = "Human-in-the-loop Assistant"
SERVER_VERSION = "1.0.0"


# ── Tool Definitions ────────────────────────────────────────────────

TOOLS = [
    {
        "name": "askHuman",
        "description": (
            "Ask a human worker a question via Amazon Mechanical Turk and wait for "
            "the answer. If nobody answers within maxWaitSeconds, returns a HIT ID "
            "that can be checked later with checkHITStatus."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "question": {
                    "type": "string",
                    "description": "The question to ask a human worker",
                },
                "reward": {
                    "type": "string",
                    "description": f"The reward amount in USD (default: ${config.DEFAULT_REWARD})",
                    "default": config.DEFAULT_REWARD,
                },
                "title": {
                    "type": "string",
                    "description": "Title for the HIT (optional)",
                },
                "description": {
                    "type": "string",
                    "description": "Description for the HIT (optional)",
                },
                "hitValiditySeconds": {
                    "type": "integer",
                    "description": "Time until the HIT expires in seconds (default: 1 hour)",
                    "default": config.DEFAULT_HIT_VALIDITY_SECONDS,
                },
                "maxWaitSeconds": {
                    "type": "number",
                    "description": "How long to wait for an answer before returning (default: 5 minutes)",
                    "default": config.DEFAULT_MAX_WAIT_SECONDS,
                },
            },
            "required": ["question"],
        },
    },
    {
        "name": "checkHITStatus",
        "description": "Check the status of a HIT and retrieve any answers. Submitted answers are approved.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "hitId": {
                    "type": "string",
                    "description": "The HIT ID to check status for",
                },
            },
            "required": ["hitId"],
        },
    },
]

TOOL_HANDLERS = {
    "askHuman": ask_human.handler,
    "checkHITStatus": check_hit_status.handler,
}


# ── Resource Definitions ────────────────────────────────────────────

RESOURCES = [
    {
        "uri": "mturk-account://balance",
        "name": "balance",
        "description": "Get MTurk account balance",
        "mimeType": "text/plain",
    },
    {
        "uri": "mturk-account://hits",
        "name": "hits",
        "description": "List active HITs",
        "mimeType": "text/plain",
    },
    {
        "uri": "mturk-account://config",
        "name": "config",
        "description": "Get MTurk configuration",
        "mimeType": "text/plain",
    },
]

RESOURCE_TEMPLATES = [
    {
        "uriTemplate": "mturk-account://{info}",
        "name": "mturk-account",
        "description": "MTurk account information: balance, hits or config",
        "mimeType": "text/plain",
    },
]


# ── Prompt Definitions ──────────────────────────────────────────────

PROMPTS = [
    {
        "name": "ask-human",
        "description": "A prompt for asking human workers questions via MTurk",
        "arguments": [
            {"name": "question", "required": True},
            {"name": "reward", "required": False},
            {"name": "title", "required": False},
            {"name": "maxWaitTime", "required": False},
        ],
    },
    {
        "name": "check-hit",
        "description": "A prompt for checking the status of a HIT",
        "arguments": [
            {"name": "hitId", "required": True},
        ],
    },
]


def _text_message(role: str, text: str) -> dict:
    return {"role": role, "content": {"type": "text", "text": text}}


def render_prompt(name: str, args: dict) -> dict:
    """Render a prompt's messages."""
    if name == "ask-human":
        question = args.get("question")
        if not question:
            raise ValueError("Missing required argument: question")
        return {
            "description": "Ask a human worker a question",
            "messages": [
                _text_message("user", f'I need to ask a human worker the following question: "{question}"'),
                _text_message("assistant", "I'll help you ask a human worker through Mechanical Turk. Let me set that up for you."),
                _text_message("assistant", f'Let me ask a human for you: "{question}"'),
            ],
        }
    if name == "check-hit":
        hit_id = args.get("hitId")
        if not hit_id:
            raise ValueError("Missing required argument: hitId")
        return {
            "description": "Check the status of a HIT",
            "messages": [
                _text_message("user", f"Check the status of HIT with ID {hit_id}"),
                _text_message("assistant", f"I'll check the status of the HIT with ID {hit_id} for you."),
            ],
        }
    raise ValueError(f"Unknown prompt: {name}")


# ── MCP Server ──────────────────────────────────────────────────────

class MCPServer:
    """JSON-RPC 2.0 MCP server over stdio."""

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self._initialized = False

    # ── JSON-RPC Transport ──────────────────────────────────────

    def run(self):
        """Main loop: read JSON-RPC messages from stdin, write responses to stdout."""
        for line in self.stdin:
            line = line.strip()
            if not line:
                continue
            try:
                msg = json.loads(line)
            except json.JSONDecodeError:
                self._send_error(None, -32700, "Parse error")
                continue

            if not isinstance(msg, dict):
                self._send_error(None, -32600, "Invalid Request")
                continue

            response = self._handle_message(msg)
            if response is not None:
                self._send(response)

    def _send(self, msg: dict):
        """Write a JSON-RPC message to stdout."""
        self.stdout.write(json.dumps(msg) + "\n")
        self.stdout.flush()

    def _send_error(self, id: Any, code: int, message: str):
        self._send({"jsonrpc": "2.0", "id": id, "error": {"code": code, "message": message}})

    # ── Message Router ──────────────────────────────────────────

    def _handle_message(self, msg: dict) -> Optional[dict]:
        method = msg.get("method", "")
        id = msg.get("id")
        params = msg.get("params") or {}

        # Notifications carry no id and get no reply
        if id is None:
            if method == "notifications/initialized":
                self._initialized = True
            return None

        handler = {
            "initialize": self._handle_initialize,
            "ping": self._handle_ping,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
            "resources/list": self._handle_resources_list,
            "resources/templates/list": self._handle_resource_templates_list,
            "resources/read": self._handle_resources_read,
            "prompts/list": self._handle_prompts_list,
            "prompts/get": self._handle_prompts_get,
        }.get(method)

        if handler is None:
            return {"jsonrpc": "2.0", "id": id, "error": {
                "code": -32601, "message": f"Method not found: {method}"
            }}

        try:
            result = handler(params)
            return {"jsonrpc": "2.0", "id": id, "result": result}
        except ValueError as e:
            return {"jsonrpc": "2.0", "id": id, "error": {
                "code": -32602, "message": str(e)
            }}
        except Exception as e:
            logger.exception(f"Error handling {method}")
            return {"jsonrpc": "2.0", "id": id, "error": {
                "code": -32603, "message": f"Internal error: {e}"
            }}

    # ── MCP Handlers ────────────────────────────────────────────

    def _handle_initialize(self, params: dict) -> dict:
        return {
            "protocolVersion": MCP_VERSION,
            "capabilities": {
                "tools": {},
                "resources": {},
                "prompts": {},
            },
            "serverInfo": {
                "name": SERVER_NAME,
                "version": SERVER_VERSION,
            },
        }

    def _handle_ping(self, params: dict) -> dict:
        return {}

    def _handle_tools_list(self, params: dict) -> dict:
        return {"tools": TOOLS}

    def _handle_tools_call(self, params: dict) -> dict:
        name = params.get("name", "")
        args = params.get("arguments") or {}

        handler = TOOL_HANDLERS.get(name)
        if handler is None:
            # Tool failures stay in the result body
            return format_tool_result(f"Error: Unknown tool: {name}")

        logger.info(f"Calling tool {name}")
        return handler(args)

    def _handle_resources_list(self, params: dict) -> dict:
        return {"resources": RESOURCES}

    def _handle_resource_templates_list(self, params: dict) -> dict:
        return {"resourceTemplates": RESOURCE_TEMPLATES}

    def _handle_resources_read(self, params: dict) -> dict:
        uri = params.get("uri", "")
        if not uri.startswith(get_account_info.RESOURCE_SCHEME):
            raise ValueError(f"Unknown resource: {uri}")
        return get_account_info.handler({"uri": uri})

    def _handle_prompts_list(self, params: dict) -> dict:
        return {"prompts": PROMPTS}

    def _handle_prompts_get(self, params: dict) -> dict:
        return render_prompt(params.get("name", ""), params.get("arguments") or {})


def main():
    logger.info(
        f"MCP Human-in-the-loop server starting (sandbox={config.USE_SANDBOX}, form={config.FORM_URL})"
    )
    try:
        MCPServer().run()
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
