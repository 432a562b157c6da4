"""Pydantic models for tool parameters and results.

Every tool receives a JSON object from the MCP transport; these models give
it a shape and defaults before any generation runs. Domain rules (PascalCase
names, minimum lengths) live in the tool layer, not here, so their error
messages stay under its control.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field


# ── Shared value records ─────────────────────────────────────────────


class FieldSpec(BaseModel):
    """A storage field for the base contract builder."""
    name: str
    type: str = Field(description="Abstract type tag, e.g. 'string' or 'integer'")
    description: str = ""


class MetadataFieldSpec(BaseModel):
    """A metadata field attached to vector store entries."""
    name: str
    type: str


class ConstructorArgSpec(BaseModel):
    """A constructor argument rendered into a deployment script."""
    name: str
    type: str
    value: str
    description: str = ""


class ToolResult(BaseModel):
    """Uniform return shape of every tool."""
    content: str
    is_error: bool = False


# ── Closed tag sets ──────────────────────────────────────────────────


class TemplateType(StrEnum):
    BASIC = "basic"
    DAO_GOVERNANCE = "dao_governance"
    CONTENT_MODERATION = "content_moderation"
    SENTIMENT_TRACKER = "sentiment_tracker"
    MULTI_ORACLE = "multi_oracle"


class Concept(StrEnum):
    EQUIVALENCE_PRINCIPLE = "equivalence_principle"
    OPTIMISTIC_DEMOCRACY = "optimistic_democracy"
    LLM_INTEGRATION = "llm_integration"
    WEB_DATA_ACCESS = "web_data_access"
    VECTOR_STORES = "vector_stores"
    CONSENSUS_MECHANISMS = "consensus_mechanisms"
    INTELLIGENT_CONTRACTS = "intelligent_contracts"
    GENVM = "genvm"
    GENLAYER_TYPES = "genlayer_types"
    BEST_PRACTICES = "best_practices"


class ScriptType(StrEnum):
    TYPESCRIPT = "typescript"
    PYTHON = "python"
    CLI_COMMAND = "cli_command"
    DEPLOY_CONFIG = "deploy_config"


class NetworkTarget(StrEnum):
    LOCALNET = "localnet"
    STUDIONET = "studionet"
    TESTNET_ASIMOV = "testnet_asimov"
    ALL_NETWORKS = "all_networks"


MarketCategory = Literal[
    "crypto", "sports", "politics", "technology",
    "finance", "weather", "entertainment", "other",
]


# ── Tool parameter models ────────────────────────────────────────────


class GenerateIntelligentContractParams(BaseModel):
    contract_name: str
    requirements: str
    use_llm: bool = False
    web_access: bool = False
    storage_fields: list[FieldSpec] = []
    template_type: str = TemplateType.BASIC.value


class CustomTemplateParams(BaseModel):
    """Template-specific knobs, echoed into the report."""
    voting_threshold: float | None = Field(default=None, ge=1, le=100)
    moderation_strictness: Literal["lenient", "moderate", "strict"] | None = None
    sentiment_categories: list[str] | None = None
    data_sources: list[str] | None = None


class GenerateContractTemplateParams(BaseModel):
    template_type: str
    contract_name: str
    custom_parameters: CustomTemplateParams = Field(default_factory=CustomTemplateParams)


class CreatePredictionMarketParams(BaseModel):
    market_name: str
    description: str
    resolution_criteria: str
    web_sources: list[str] = []
    resolution_deadline: str = "No specific deadline"
    category: MarketCategory = "other"


class CreateVectorStoreParams(BaseModel):
    store_name: str
    description: str
    metadata_fields: list[MetadataFieldSpec] = []


class AddWebDataAccessParams(BaseModel):
    contract_code: str
    url_template: str
    data_processing_logic: str


class AddEquivalencePrincipleParams(BaseModel):
    contract_code: str
    method_name: str
    validation_type: Literal["comparative", "non_comparative"]
    tolerance: float | None = Field(default=None, ge=0, le=1)


class ExplainConceptsParams(BaseModel):
    concept: str
    include_examples: bool = True
    detail_level: Literal["basic", "intermediate", "advanced"] = "intermediate"


class DeploymentOptions(BaseModel):
    gas_limit: int = 1000000
    wait_for_confirmation: bool = True
    verify_deployment: bool = True


class GenerateDeploymentScriptParams(BaseModel):
    script_type: str
    contract_path: str
    network_target: NetworkTarget = NetworkTarget.LOCALNET
    constructor_args: list[ConstructorArgSpec] = []
    deployment_options: DeploymentOptions = Field(default_factory=DeploymentOptions)


class FetchApiDocsParams(BaseModel):
    topic: str = "all"
