import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from . import precommit
from .config import Settings, load_settings
from .exceptions import E2EError
from .runner import SuiteRunner
from .scenarios import list_scenarios

logger = logging.getLogger(__name__)


class SuiteToolServer:
    """Exposes the suite and the pre-commit checks to a coding assistant over MCP"""

    def __init__(
            self,
            settings: Optional[Settings] = None,
            runner: Optional[SuiteRunner] = None,
            repo_root: Optional[Path] = None
    ):
        self.settings = settings or load_settings()
        self.runner = runner or SuiteRunner(self.settings)
        self.repo_root = Path(repo_root or Path.cwd())
        self.server = Server("passthenote-e2e")
        self.setup_tools()

    async def initialize(self):
        """Initialize all components"""
        await self.runner.initialize()

    def tool_definitions(self) -> List[Tool]:
        return [
            Tool(
                name="list_scenarios",
                description="List the end-to-end scenarios in the catalog",
                inputSchema={"type": "object", "properties": {}}
            ),
            Tool(
                name="run_scenario",
                description="Run one end-to-end scenario against the live site",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "name": {
                            "type": "string",
                            "description": "Scenario name from list_scenarios"
                        }
                    },
                    "required": ["name"]
                }
            ),
            Tool(
                name="run_suite",
                description="Run several scenarios, or the whole catalog when none are named",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "names": {
                            "type": "array",
                            "items": {"type": "string"}
                        }
                    }
                }
            ),
            Tool(
                name="get_run_history",
                description="Get past scenario results and per-scenario totals",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "scenario": {"type": "string"},
                        "limit": {"type": "integer", "minimum": 1}
                    }
                }
            ),
            Tool(
                name="run_precommit_checks",
                description="Run compilation, credential, naming and test checks before a commit",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "staged_only": {"type": "boolean", "default": True},
                        "include_tests": {"type": "boolean", "default": True}
                    }
                }
            )
        ]

    def setup_tools(self):
        """Register available tools with MCP protocol"""

        @self.server.list_tools()
        async def list_tools() -> List[Tool]:
            return self.tool_definitions()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: Dict) -> List[TextContent]:
            return await self.handle_tool(name, arguments or {})

    async def handle_tool(self, name: str, arguments: Dict) -> List[TextContent]:
        try:
            result = await self.dispatch(name, arguments)
        except E2EError as e:
            logger.warning("Tool %s failed: %s", name, e)
            result = {
                "error": str(e),
                "tool": name,
                "arguments": arguments
            }
        except Exception as e:
            logger.exception("Tool %s raised", name)
            result = {
                "error": str(e),
                "tool": name,
                "arguments": arguments
            }

        return [TextContent(
            type="text",
            text=json.dumps(result, indent=2, default=str)
        )]

    async def dispatch(self, name: str, arguments: Dict) -> Any:
        if name == "list_scenarios":
            return {"scenarios": list_scenarios()}

        elif name == "run_scenario":
            if not arguments.get("name"):
                raise E2EError("run_scenario requires a scenario name")
            return await self.runner.run_scenario(arguments["name"])

        elif name == "run_suite":
            return await self.runner.run_suite(arguments.get("names"))

        elif name == "get_run_history":
            history = self.runner.history
            return {
                "summary": history.summary(),
                "records": history.get_history(arguments.get("scenario"), arguments.get("limit"))
            }

        elif name == "run_precommit_checks":
            # Subprocess-heavy; keep it off the event loop
            report = await asyncio.to_thread(
                precommit.run_checks,
                self.repo_root,
                staged_only=arguments.get("staged_only", True),
                include_tests=arguments.get("include_tests", True),
                settings=self.settings
            )
            return report.to_dict()

        return {"error": f"Unknown tool: {name}"}

    async def cleanup(self):
        """Clean up resources"""
        await self.runner.cleanup()

    async def run(self):
        """Start the MCP server"""
        await self.initialize()

        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options()
                )
        finally:
            await self.cleanup()


def main():
    """Entry point for the MCP server"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )

    try:
        server = SuiteToolServer()
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logging.info("Server stopped by user")
    except E2EError as e:
        logging.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
