"""Tool functions exposed over MCP.

Each tool takes its pydantic parameter model, validates domain rules,
generates code and wraps it in a Markdown report. Tools never raise: the
``tool_boundary`` decorator turns validation failures and unexpected
exceptions into an error ToolResult.
"""

from __future__ import annotations

import functools
import json
import logging
import re
from collections.abc import Awaitable, Callable

from genlayer_mcp import generator, templates
from genlayer_mcp.concepts import available_concepts, render_concept
from genlayer_mcp.config import ServerConfig
from genlayer_mcp.deployment import render_deployment_script
from genlayer_mcp.docs_lookup import Fetcher
from genlayer_mcp.docs_lookup import fetch_latest_api_docs as _fetch_docs
from genlayer_mcp.schemas import (
    AddEquivalencePrincipleParams,
    AddWebDataAccessParams,
    Concept,
    CreatePredictionMarketParams,
    CreateVectorStoreParams,
    ExplainConceptsParams,
    FetchApiDocsParams,
    GenerateContractTemplateParams,
    GenerateDeploymentScriptParams,
    GenerateIntelligentContractParams,
    ScriptType,
    TemplateType,
    ToolResult,
)
from genlayer_mcp.security import (
    MARKET_NAME,
    PASCAL_CASE,
    sanitize_contract_code,
    sanitize_text_input,
    validate_file_path,
    validate_identifier,
    validate_url,
)
from genlayer_mcp.type_mapping import map_type

logger = logging.getLogger(__name__)


class ToolValidationError(ValueError):
    """Tool input broke a domain rule. The message is shown to the caller."""


# ── Validation helpers ───────────────────────────────────────────────


def validate_pascal_case(name: str, label: str = "Contract name") -> str:
    if not name or not PASCAL_CASE.match(name):
        raise ToolValidationError(
            f"{label} must be in PascalCase and start with a capital letter. Got: {name}"
        )
    return name


def validate_market_name(name: str) -> str:
    if not name or not MARKET_NAME.match(name):
        raise ToolValidationError(
            "Market name should be in PascalCase and end with 'Market'. Example: BitcoinPriceMarket"
        )
    return name


def validate_min_length(text: str, minimum: int, label: str) -> str:
    if not text or len(text.strip()) < minimum:
        raise ToolValidationError(f"{label} must be at least {minimum} characters long.")
    return text


def _placeholder_free(url_template: str) -> str:
    return re.sub(r"\{[^}]*\}", "placeholder", url_template)


def validate_source_urls(urls: list[str], production: bool = False, label: str = "Web source") -> list[str]:
    """Check every source URL and return the cleaned list."""
    cleaned = []
    for url in urls:
        check = validate_url(url, production=production)
        if not check.is_valid:
            raise ToolValidationError(f"{label} failed security validation: {check.error}")
        cleaned.append(check.value)
    return cleaned


# ── Error boundary ───────────────────────────────────────────────────


ToolFn = Callable[..., Awaitable[ToolResult]]


def tool_boundary(action: str) -> Callable[[ToolFn], ToolFn]:
    """Convert exceptions raised inside a tool into error results."""

    def decorate(fn: ToolFn) -> ToolFn:
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs) -> ToolResult:
            try:
                return await fn(*args, **kwargs)
            except ToolValidationError as e:
                logger.warning("%s rejected: %s", fn.__name__, e)
                return ToolResult(content=f"Error: {e}", is_error=True)
            except Exception as e:
                logger.exception("%s failed", fn.__name__)
                return ToolResult(
                    content=f"Error {action}: {e}\n\nPlease check your parameters and try again.",
                    is_error=True,
                )

        return wrapper

    return decorate


def _code_block(code: str) -> str:
    return f"```python\n{code.rstrip()}\n```"


def _warnings_section(warnings: list[str]) -> list[str]:
    if not warnings:
        return []
    return ["## Security Warnings", *(f"- {w}" for w in warnings), ""]


# ── Contract generation ──────────────────────────────────────────────


@tool_boundary("generating contract")
async def generate_intelligent_contract(
    params: GenerateIntelligentContractParams,
    config: ServerConfig | None = None,
) -> ToolResult:
    config = config or ServerConfig()
    validate_pascal_case(params.contract_name)
    if not params.requirements or len(params.requirements.strip()) < config.min_requirements_length:
        raise ToolValidationError(
            f"Requirements must be at least {config.min_requirements_length} characters long "
            "and describe what the contract should do."
        )
    requirements = sanitize_text_input(params.requirements)

    if params.template_type and params.template_type != TemplateType.BASIC:
        code = templates.generate_template(params.template_type, params.contract_name, {})
    else:
        code = generator.build_base_contract(params.contract_name, params.storage_fields)
        if params.use_llm:
            code = generator.add_llm_interactions(code, requirements.value)
        if params.web_access:
            code = generator.add_web_data_access(code, config.default_url_template, requirements.value)

    logger.debug("Generated contract %s (%d chars)", params.contract_name, len(code))
    lines = [
        f"# Generated Intelligent Contract: {params.contract_name}",
        "",
        "## Requirements",
        requirements.value,
        "",
        "## Features",
        f"- Template: {params.template_type or TemplateType.BASIC}",
        f"- LLM Integration: {'Yes' if params.use_llm else 'No'}",
        f"- Web Access: {'Yes' if params.web_access else 'No'}",
        f"- Storage Fields: {len(params.storage_fields)}",
        "",
        "## Contract Code",
        "",
        _code_block(code),
        "",
        *_warnings_section(requirements.warnings),
        "## Usage Notes",
        "- Deploy this contract to GenLayer testnet or mainnet",
        "- All methods marked with @gl.public.view are read-only",
        "- Methods marked with @gl.public.write modify contract state",
        "- LLM methods use equivalence principles for consensus",
        "- Web data methods fetch real-time information",
        "",
        "## Next Steps",
        "1. Review the generated contract code",
        "2. Customize the business logic as needed",
        f"3. Test on GenLayer Studio: {config.studio_url}",
        "4. Deploy to your preferred GenLayer network",
    ]
    return ToolResult(content="\n".join(lines))


TEMPLATE_FEATURES = {
    TemplateType.DAO_GOVERNANCE.value: ["AI-powered proposal analysis", "Voting mechanisms", "Member management"],
    TemplateType.CONTENT_MODERATION.value: ["AI content analysis", "Violation detection", "Severity scoring"],
    TemplateType.SENTIMENT_TRACKER.value: ["Real-time sentiment analysis", "Historical tracking", "Topic tagging"],
    TemplateType.MULTI_ORACLE.value: ["Multi-source data aggregation", "Consensus mechanisms", "Data validation"],
}

TEMPLATE_NOTES = {
    TemplateType.DAO_GOVERNANCE.value: "Configure voting thresholds and member requirements according to your DAO structure.",
    TemplateType.CONTENT_MODERATION.value: "Adjust moderation strictness based on your community guidelines.",
    TemplateType.SENTIMENT_TRACKER.value: "Define relevant categories and topics for your use case and audience.",
    TemplateType.MULTI_ORACLE.value: "Set up reliable data sources and configure consensus parameters for accuracy.",
}


@tool_boundary("generating template")
async def generate_contract_template(
    params: GenerateContractTemplateParams,
    config: ServerConfig | None = None,
) -> ToolResult:
    config = config or ServerConfig()
    validate_pascal_case(params.contract_name)
    if params.custom_parameters.data_sources:
        params.custom_parameters.data_sources = validate_source_urls(
            params.custom_parameters.data_sources, config.production, label="Data source",
        )
    custom = params.custom_parameters.model_dump(exclude_none=True)
    code = templates.generate_template(params.template_type, params.contract_name, custom)

    features = TEMPLATE_FEATURES.get(params.template_type, ["Base contract skeleton"])
    notes = TEMPLATE_NOTES.get(
        params.template_type, "Customize the template according to your specific requirements."
    )
    lines = [
        f"# Generated {params.template_type} Template: {params.contract_name}",
        "",
        "## Template Features",
        *(f"• {f}" for f in features),
        "",
    ]
    if custom:
        lines += ["## Custom Parameters", "```json", json.dumps(custom, indent=2, sort_keys=True), "```", ""]
    lines += [
        "## Contract Code",
        "",
        _code_block(code),
        "",
        "## Usage Instructions",
        "1. Review the generated template code",
        "2. Customize parameters and business logic",
        "3. Test on GenLayer Studio",
        "4. Deploy when ready",
        "",
        "## Template-Specific Notes",
        notes,
    ]
    return ToolResult(content="\n".join(lines))


@tool_boundary("creating prediction market")
async def create_prediction_market(
    params: CreatePredictionMarketParams,
    config: ServerConfig | None = None,
) -> ToolResult:
    config = config or ServerConfig()
    validate_market_name(params.market_name)
    validate_min_length(params.description, config.min_description_length, "Description")
    if len(params.resolution_criteria) < config.min_criteria_length:
        raise ToolValidationError(
            "Resolution criteria must be specific and detailed "
            f"(at least {config.min_criteria_length} characters)."
        )

    sources = validate_source_urls(params.web_sources, config.production) or [config.default_web_source]
    code = templates.generate_prediction_market(
        params.market_name, params.description, params.resolution_criteria, sources,
    )

    lines = [
        f"# Generated Prediction Market: {params.market_name}",
        "",
        "## Market Details",
        f"- **Category**: {params.category}",
        f"- **Description**: {params.description}",
        f"- **Resolution Criteria**: {params.resolution_criteria}",
        f"- **Resolution Deadline**: {params.resolution_deadline}",
        f"- **Web Sources**: {len(sources)} configured",
        "",
        "## Contract Code",
        "",
        _code_block(code),
        "",
        "## Usage Instructions",
        "1. Deploy the contract with proper constructor arguments",
        "2. Users can place bets using place_bet() method",
        "3. Resolve market using resolve_market() when deadline reached",
        "4. Winners can claim payouts using claim_winnings()",
        "",
        "## Next Steps",
        "1. Review and customize the resolution logic",
        "2. Test with small amounts on testnet",
        "3. Configure reliable web sources",
        "4. Deploy to mainnet when ready",
    ]
    return ToolResult(content="\n".join(lines))


@tool_boundary("creating vector store")
async def create_vector_store(
    params: CreateVectorStoreParams,
    config: ServerConfig | None = None,
) -> ToolResult:
    config = config or ServerConfig()
    validate_pascal_case(params.store_name, label="Store name")
    validate_min_length(params.description, config.min_description_length, "Description")

    code = templates.generate_vector_store(params.store_name, params.description, params.metadata_fields)

    lines = [
        f"# Generated Vector Store: {params.store_name}",
        "",
        "## Store Configuration",
        f"- **Description**: {params.description}",
        f"- **Metadata Fields**: {len(params.metadata_fields)} configured",
    ]
    lines += [f"  - `{m.name}`: {map_type(m.type)}" for m in params.metadata_fields]
    lines += [
        "",
        "## Contract Code",
        "",
        _code_block(code),
        "",
        "## Usage Instructions",
        "1. Deploy the vector store contract",
        "2. Add texts using add_text() method",
        "3. Search using search_similar() method",
        "4. Query store info with get_store_info()",
    ]
    return ToolResult(content="\n".join(lines))


# ── Augmenters ───────────────────────────────────────────────────────


@tool_boundary("adding web data access")
async def add_web_data_access(
    params: AddWebDataAccessParams,
    config: ServerConfig | None = None,
) -> ToolResult:
    config = config or ServerConfig()
    if not params.contract_code.strip():
        raise ToolValidationError("Contract code must not be empty.")
    check = validate_url(_placeholder_free(params.url_template), production=config.production)
    if not check.is_valid:
        raise ToolValidationError(f"URL failed security validation: {check.error}")
    validate_min_length(params.data_processing_logic, config.min_description_length, "Data processing logic")

    sanitized = sanitize_contract_code(params.contract_code)
    logic = sanitize_text_input(params.data_processing_logic)
    code = generator.add_web_data_access(sanitized.value, params.url_template.strip(), logic.value)

    lines = [
        "# Updated Contract with Web Data Access",
        "",
        "## Web Access Configuration",
        f"- **URL Template**: {params.url_template}",
        f"- **Processing Logic**: {params.data_processing_logic}",
        "",
        "## Updated Contract Code",
        "",
        _code_block(code),
        "",
        *_warnings_section(sanitized.warnings + logic.warnings),
        "## Next Steps",
        "1. Test the web data fetching functionality",
        "2. Verify data processing logic",
        "3. Monitor validator consensus on web data",
    ]
    return ToolResult(content="\n".join(lines))


@tool_boundary("adding equivalence principle")
async def add_equivalence_principle(
    params: AddEquivalencePrincipleParams,
    config: ServerConfig | None = None,
) -> ToolResult:
    if not params.contract_code.strip():
        raise ToolValidationError("Contract code must not be empty.")
    method = validate_identifier(params.method_name, "method")
    if not method.is_valid:
        raise ToolValidationError(method.error)

    sanitized = sanitize_contract_code(params.contract_code)
    code = generator.add_equivalence_principle(
        sanitized.value, method.value, params.validation_type, params.tolerance,
    )
    found = code != sanitized.value

    lines = [
        "# Updated Contract with Equivalence Principle",
        "",
        "## Validation Configuration",
        f"- **Method**: {method.value}",
        f"- **Type**: {params.validation_type}",
        f"- **Tolerance**: {params.tolerance or 'default'}",
    ]
    if not found:
        lines.append(f"- **Note**: method `{method.value}` not found; code unchanged")
    lines += [
        "",
        "## Updated Contract Code",
        "",
        _code_block(code),
        "",
        *_warnings_section(sanitized.warnings),
        "## Equivalence Principle Notes",
        "- **Comparative**: Uses tolerance-based comparison for numerical results",
        "- **Non-comparative**: Uses qualitative assessment for subjective decisions",
    ]
    return ToolResult(content="\n".join(lines))


# ── Knowledge tools ──────────────────────────────────────────────────


@tool_boundary("explaining concept")
async def explain_genlayer_concepts(
    params: ExplainConceptsParams,
    config: ServerConfig | None = None,
) -> ToolResult:
    try:
        concept = Concept(params.concept)
    except ValueError:
        raise ToolValidationError(
            f"Unknown concept '{params.concept}'. Available concepts: {', '.join(available_concepts())}"
        ) from None
    return ToolResult(content=render_concept(concept, params.include_examples, params.detail_level))


@tool_boundary("generating deployment script")
async def generate_deployment_script(
    params: GenerateDeploymentScriptParams,
    config: ServerConfig | None = None,
) -> ToolResult:
    try:
        script_type = ScriptType(params.script_type)
    except ValueError:
        raise ToolValidationError(
            f"Unknown script type '{params.script_type}'. "
            f"Available types: {', '.join(t.value for t in ScriptType)}"
        ) from None

    path_check = validate_file_path(params.contract_path)
    if not path_check.is_valid:
        raise ToolValidationError(path_check.error)

    opts = params.deployment_options
    script = render_deployment_script(
        script_type, path_check.value, params.network_target, params.constructor_args, opts,
    )
    if script_type in (ScriptType.TYPESCRIPT, ScriptType.PYTHON):
        script = f"```{script_type.value}\n{script}\n```"

    if params.constructor_args:
        arg_lines = [
            f"- **{a.name}** ({a.type}): {a.value}" + (f" - {a.description}" if a.description else "")
            for a in params.constructor_args
        ]
    else:
        arg_lines = ["No constructor arguments"]

    lines = [
        "# GenLayer Deployment Script",
        "",
        script,
        "",
        "## Constructor Arguments:",
        *arg_lines,
        "",
        "## Deployment Options:",
        f"- **Network**: {params.network_target}",
        f"- **Gas Limit**: {opts.gas_limit}",
        f"- **Wait for Confirmation**: {'Yes' if opts.wait_for_confirmation else 'No'}",
        f"- **Verify Deployment**: {'Yes' if opts.verify_deployment else 'No'}",
        "",
        "## Next Steps:",
        "1. Review the generated deployment script",
        "2. Set up your environment variables (PRIVATE_KEY, etc.)",
        "3. Test on localnet first",
        "4. Deploy to testnet for validation",
    ]
    return ToolResult(content="\n".join(lines))


@tool_boundary("fetching API documentation")
async def fetch_latest_api_docs(
    params: FetchApiDocsParams,
    config: ServerConfig | None = None,
    fetcher: Fetcher | None = None,
) -> ToolResult:
    return await _fetch_docs(params.topic, fetcher=fetcher, config=config)
