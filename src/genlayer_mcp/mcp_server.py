"""MCP server for GenLayer contract generation.

GenLayerMCPServer owns the closed tool registry and is transport-agnostic:
``list_tools`` describes every tool and ``call_tool`` dispatches by name and
always returns a ToolResult. ``build_server`` wires it to the low-level MCP
SDK server, and ``run_stdio`` serves it over stdin/stdout.

MCP tools:
  generate_intelligent_contract  -> base contract + optional LLM / web blocks
  generate_contract_template     -> named template contract
  create_prediction_market       -> yes/no betting market
  create_vector_store            -> semantic search store
  add_web_data_access            -> append web methods to existing code
  add_equivalence_principle      -> annotate a method with validation notes
  explain_genlayer_concepts      -> concept explanations
  generate_deployment_script     -> deployment scripts and configs
  fetch_latest_api_docs          -> live API reference lookup
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from pydantic import BaseModel, ValidationError

from genlayer_mcp import tools
from genlayer_mcp.config import ServerConfig
from genlayer_mcp.docs_lookup import Fetcher
from genlayer_mcp.schemas import (
    AddEquivalencePrincipleParams,
    AddWebDataAccessParams,
    CreatePredictionMarketParams,
    CreateVectorStoreParams,
    ExplainConceptsParams,
    FetchApiDocsParams,
    GenerateContractTemplateParams,
    GenerateDeploymentScriptParams,
    GenerateIntelligentContractParams,
    ToolResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    params_model: type[BaseModel]
    handler: Any
    uses_fetcher: bool = False


TOOL_SPECS: list[ToolSpec] = [
    ToolSpec(
        "generate_intelligent_contract",
        "Generate a GenLayer Intelligent Contract with optional LLM and web data capabilities",
        GenerateIntelligentContractParams,
        tools.generate_intelligent_contract,
    ),
    ToolSpec(
        "generate_contract_template",
        "Generate a contract from a predefined template "
        "(dao_governance, content_moderation, sentiment_tracker, multi_oracle)",
        GenerateContractTemplateParams,
        tools.generate_contract_template,
    ),
    ToolSpec(
        "create_prediction_market",
        "Create a yes/no prediction market contract resolved from web sources",
        CreatePredictionMarketParams,
        tools.create_prediction_market,
    ),
    ToolSpec(
        "create_vector_store",
        "Create a GenLayer Vector Store contract for semantic search capabilities",
        CreateVectorStoreParams,
        tools.create_vector_store,
    ),
    ToolSpec(
        "add_web_data_access",
        "Add web data access capabilities to an existing contract",
        AddWebDataAccessParams,
        tools.add_web_data_access,
    ),
    ToolSpec(
        "add_equivalence_principle",
        "Add equivalence principle validation notes to a contract method",
        AddEquivalencePrincipleParams,
        tools.add_equivalence_principle,
    ),
    ToolSpec(
        "explain_genlayer_concepts",
        "Explain GenLayer concepts such as the equivalence principle or optimistic democracy",
        ExplainConceptsParams,
        tools.explain_genlayer_concepts,
    ),
    ToolSpec(
        "generate_deployment_script",
        "Generate deployment scripts and configuration for GenLayer networks",
        GenerateDeploymentScriptParams,
        tools.generate_deployment_script,
    ),
    ToolSpec(
        "fetch_latest_api_docs",
        "Fetch the latest GenLayer API reference, optionally filtered by topic",
        FetchApiDocsParams,
        tools.fetch_latest_api_docs,
        uses_fetcher=True,
    ),
]


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "arguments"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


class GenLayerMCPServer:
    """Tool registry and dispatcher for the GenLayer MCP server.

    Can be driven directly (tests, the ``call`` CLI command) or through
    ``build_server`` for a real MCP transport.
    """

    def __init__(self, config: ServerConfig | None = None, fetcher: Fetcher | None = None):
        self.config = config or ServerConfig()
        self._fetcher = fetcher
        self._specs = {spec.name: spec for spec in TOOL_SPECS}

    @property
    def tool_names(self) -> list[str]:
        return list(self._specs)

    def list_tools(self) -> list[dict[str, Any]]:
        """Describe every tool: name, description and JSON input schema."""
        return [
            {
                "name": spec.name,
                "description": spec.description,
                "inputSchema": spec.params_model.model_json_schema(),
            }
            for spec in TOOL_SPECS
        ]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        spec = self._specs.get(name)
        if spec is None:
            logger.warning("Unknown tool requested: %s", name)
            return ToolResult(content=f"Error: Unknown tool: {name}", is_error=True)

        try:
            params = spec.params_model.model_validate(arguments or {})
        except ValidationError as e:
            logger.warning("Invalid arguments for %s: %s", name, e)
            return ToolResult(
                content=f"Error: Invalid parameters for {name}: {_format_validation_error(e)}",
                is_error=True,
            )

        logger.debug("Calling tool %s", name)
        if spec.uses_fetcher:
            return await spec.handler(params, config=self.config, fetcher=self._fetcher)
        return await spec.handler(params, config=self.config)


class ToolCallFailed(Exception):
    """Raised inside the SDK handler so the SDK reports ``isError``."""


def build_server(app: GenLayerMCPServer) -> Server:
    """Register the app's tools on a low-level MCP server."""
    server = Server(app.config.server_name, version=app.config.server_version)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [Tool(**tool) for tool in app.list_tools()]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any] | None = None) -> list[TextContent]:
        result = await app.call_tool(name, arguments)
        if result.is_error:
            raise ToolCallFailed(result.content)
        return [TextContent(type="text", text=result.content)]

    return server


async def run_stdio(config: ServerConfig | None = None) -> None:
    """Serve the tools over stdio until the client disconnects."""
    app = GenLayerMCPServer(config)
    server = build_server(app)
    logger.info("Starting %s v%s on stdio", app.config.server_name, app.config.server_version)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
