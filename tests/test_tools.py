"""Tests for tool functions and their Markdown reports."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from genlayer_mcp import tools
from genlayer_mcp.config import ServerConfig
from genlayer_mcp.generator import build_base_contract
from genlayer_mcp.schemas import (
    AddEquivalencePrincipleParams,
    AddWebDataAccessParams,
    CreatePredictionMarketParams,
    CreateVectorStoreParams,
    ExplainConceptsParams,
    FieldSpec,
    GenerateContractTemplateParams,
    GenerateDeploymentScriptParams,
    GenerateIntelligentContractParams,
)

INJECTED_SOURCE = 'not-a-url"""\n        import os\n        os.system("rm -rf /")\n        """'


class TestValidationHelpers:
    def test_pascal_case(self):
        assert tools.validate_pascal_case("ContractName") == "ContractName"
        with pytest.raises(tools.ToolValidationError, match="PascalCase"):
            tools.validate_pascal_case("contractName")

    def test_market_name(self):
        assert tools.validate_market_name("BitcoinMarket") == "BitcoinMarket"
        with pytest.raises(tools.ToolValidationError, match="Market"):
            tools.validate_market_name("BitcoinPrice")

    def test_min_length(self):
        tools.validate_min_length("A simple storage contract", 10, "Requirements")
        with pytest.raises(tools.ToolValidationError, match="at least 10 characters"):
            tools.validate_min_length("Too short", 10, "Requirements")

    def test_validation_error_is_value_error(self):
        assert issubclass(tools.ToolValidationError, ValueError)


class TestGenerateIntelligentContract:
    @pytest.mark.asyncio
    async def test_basic_contract(self):
        result = await tools.generate_intelligent_contract(GenerateIntelligentContractParams(
            contract_name="TestContract",
            requirements="A simple storage contract",
            storage_fields=[FieldSpec(name="data", type="string")],
        ))
        assert not result.is_error
        assert result.content.startswith("# Generated Intelligent Contract: TestContract")
        assert "```python\n" in result.content
        assert "class TestContract(gl.Contract):" in result.content
        assert "- Storage Fields: 1" in result.content
        assert "def process_with_llm" not in result.content

    @pytest.mark.asyncio
    async def test_lowercase_name_rejected(self):
        result = await tools.generate_intelligent_contract(GenerateIntelligentContractParams(
            contract_name="contractName", requirements="A simple storage contract",
        ))
        assert result.is_error
        assert "PascalCase" in result.content
        assert "class " not in result.content

    @pytest.mark.asyncio
    async def test_short_requirements_rejected(self):
        result = await tools.generate_intelligent_contract(GenerateIntelligentContractParams(
            contract_name="ContractName", requirements="Too short",
        ))
        assert result.is_error
        assert "at least 10 characters" in result.content

    @pytest.mark.asyncio
    async def test_name_checked_before_requirements(self):
        result = await tools.generate_intelligent_contract(GenerateIntelligentContractParams(
            contract_name="bad", requirements="x",
        ))
        assert "PascalCase" in result.content

    @pytest.mark.asyncio
    async def test_llm_then_web(self):
        result = await tools.generate_intelligent_contract(GenerateIntelligentContractParams(
            contract_name="Smart", requirements="Track token prices daily",
            use_llm=True, web_access=True,
        ))
        content = result.content
        assert content.index("def process_with_llm") < content.index("def fetch_web_data")
        assert 'url: str = "https://api.example.com/data"' in content
        assert "Processing: Track token prices daily" in content

    @pytest.mark.asyncio
    async def test_augmenters_get_sanitized_requirements(self):
        result = await tools.generate_intelligent_contract(GenerateIntelligentContractParams(
            contract_name="Smart", requirements="Track token\x07 prices daily",
            use_llm=True, web_access=True,
        ))
        assert not result.is_error
        assert "\x07" not in result.content
        assert "Processing: Track token prices daily" in result.content

    @pytest.mark.asyncio
    async def test_template_overrides_builder(self):
        result = await tools.generate_intelligent_contract(GenerateIntelligentContractParams(
            contract_name="Dao", requirements="Govern the treasury", template_type="dao_governance",
            use_llm=True,
        ))
        assert "def create_proposal" in result.content
        assert "def process_with_llm" not in result.content

    @pytest.mark.asyncio
    async def test_threshold_from_config(self):
        config = ServerConfig(min_requirements_length=30)
        result = await tools.generate_intelligent_contract(
            GenerateIntelligentContractParams(contract_name="Cfg", requirements="A simple storage contract"),
            config=config,
        )
        assert result.is_error
        assert "at least 30 characters" in result.content

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_result(self):
        with patch.object(tools.generator, "build_base_contract", side_effect=RuntimeError("boom")):
            result = await tools.generate_intelligent_contract(GenerateIntelligentContractParams(
                contract_name="Boom", requirements="A simple storage contract",
            ))
        assert result.is_error
        assert result.content.startswith("Error generating contract: boom")


class TestGenerateContractTemplate:
    @pytest.mark.asyncio
    async def test_named_template(self):
        result = await tools.generate_contract_template(GenerateContractTemplateParams(
            template_type="content_moderation", contract_name="Moderator",
            custom_parameters={"moderation_strictness": "strict"},
        ))
        assert not result.is_error
        assert "# Generated content_moderation Template: Moderator" in result.content
        assert "• AI content analysis" in result.content
        assert '"moderation_strictness": "strict"' in result.content
        assert "def moderate_content" in result.content

    @pytest.mark.asyncio
    async def test_unknown_template_uses_base(self):
        result = await tools.generate_contract_template(GenerateContractTemplateParams(
            template_type="custom", contract_name="Thing",
        ))
        assert not result.is_error
        assert build_base_contract("Thing", []).rstrip() in result.content

    @pytest.mark.asyncio
    async def test_valid_data_sources_echoed(self):
        result = await tools.generate_contract_template(GenerateContractTemplateParams(
            template_type="multi_oracle", contract_name="Oracle",
            custom_parameters={"data_sources": ["https://api.example.com/feed"]},
        ))
        assert not result.is_error
        assert "https://api.example.com/feed" in result.content

    @pytest.mark.asyncio
    async def test_data_source_injection_rejected(self):
        result = await tools.generate_contract_template(GenerateContractTemplateParams(
            template_type="multi_oracle", contract_name="Oracle",
            custom_parameters={"data_sources": [INJECTED_SOURCE]},
        ))
        assert result.is_error
        assert "Data source failed security validation" in result.content
        assert "os.system" not in result.content


class TestCreatePredictionMarket:
    @pytest.mark.asyncio
    async def test_bitcoin_market(self):
        result = await tools.create_prediction_market(CreatePredictionMarketParams(
            market_name="BitcoinPriceMarket",
            description="Will BTC close above 100k this year?",
            resolution_criteria="Resolves YES if BTC/USD closes above 100,000 on Dec 31",
            category="crypto",
        ))
        assert not result.is_error
        assert "class BitcoinPriceMarket(gl.Contract):" in result.content
        assert "- **Category**: crypto" in result.content
        assert "- **Web Sources**: 1 configured" in result.content
        assert "Web Sources: https://api.coindesk.com/v1/bpi/currentprice.json" in result.content
        assert "- **Resolution Deadline**: No specific deadline" in result.content

    @pytest.mark.asyncio
    async def test_name_must_end_with_market(self):
        result = await tools.create_prediction_market(CreatePredictionMarketParams(
            market_name="BitcoinPrice",
            description="Will BTC close above 100k this year?",
            resolution_criteria="Resolves YES if BTC/USD closes above 100,000 on Dec 31",
        ))
        assert result.is_error
        assert "Market" in result.content

    @pytest.mark.asyncio
    async def test_short_criteria(self):
        result = await tools.create_prediction_market(CreatePredictionMarketParams(
            market_name="BitcoinMarket",
            description="Will BTC close above 100k this year?",
            resolution_criteria="BTC up",
        ))
        assert result.is_error
        assert "at least 20 characters" in result.content

    @pytest.mark.asyncio
    async def test_short_description(self):
        result = await tools.create_prediction_market(CreatePredictionMarketParams(
            market_name="BitcoinMarket",
            description="BTC?",
            resolution_criteria="Resolves YES if BTC/USD closes above 100,000 on Dec 31",
        ))
        assert result.is_error
        assert "Description" in result.content

    @pytest.mark.asyncio
    async def test_custom_web_sources(self):
        result = await tools.create_prediction_market(CreatePredictionMarketParams(
            market_name="BitcoinMarket",
            description="Will BTC close above 100k this year?",
            resolution_criteria="Resolves YES if BTC/USD closes above 100,000 on Dec 31",
            web_sources=["https://api.example.com/btc", "https://www.coindesk.com/price"],
        ))
        assert not result.is_error
        assert "- **Web Sources**: 2 configured" in result.content

    @pytest.mark.asyncio
    async def test_web_source_injection_rejected(self):
        result = await tools.create_prediction_market(CreatePredictionMarketParams(
            market_name="BitcoinMarket",
            description="Will BTC close above 100k this year?",
            resolution_criteria="Resolves YES if BTC/USD closes above 100,000 on Dec 31",
            web_sources=[INJECTED_SOURCE],
        ))
        assert result.is_error
        assert "Web source failed security validation" in result.content
        assert "os.system" not in result.content


class TestCreateVectorStore:
    @pytest.mark.asyncio
    async def test_store_with_metadata(self):
        result = await tools.create_vector_store(CreateVectorStoreParams(
            store_name="KnowledgeBase",
            description="Support articles for search",
            metadata_fields=[{"name": "author", "type": "string"}, {"name": "views", "type": "integer"}],
        ))
        assert not result.is_error
        assert "- **Metadata Fields**: 2 configured" in result.content
        assert "  - `author`: str" in result.content
        assert "  - `views`: u256" in result.content
        assert "class KnowledgeBase(gl.Contract):" in result.content

    @pytest.mark.asyncio
    async def test_bad_store_name(self):
        result = await tools.create_vector_store(CreateVectorStoreParams(
            store_name="kb", description="Support articles for search",
        ))
        assert result.is_error
        assert "PascalCase" in result.content


class TestAddWebDataAccess:
    @pytest.mark.asyncio
    async def test_appends_block(self):
        result = await tools.add_web_data_access(AddWebDataAccessParams(
            contract_code=build_base_contract("Feed"),
            url_template="https://api.example.com/prices/{symbol}",
            data_processing_logic="Extract the latest price",
        ))
        assert not result.is_error
        assert 'url: str = "https://api.example.com/prices/{symbol}"' in result.content
        assert "## Security Warnings" not in result.content

    @pytest.mark.asyncio
    async def test_rejects_bad_url(self):
        result = await tools.add_web_data_access(AddWebDataAccessParams(
            contract_code=build_base_contract("Feed"),
            url_template="javascript:alert(1)",
            data_processing_logic="Extract the latest price",
        ))
        assert result.is_error
        assert "URL failed security validation" in result.content

    @pytest.mark.asyncio
    async def test_dangerous_code_warned(self):
        code = "import os\n" + build_base_contract("Feed")
        result = await tools.add_web_data_access(AddWebDataAccessParams(
            contract_code=code,
            url_template="https://api.example.com/data",
            data_processing_logic="Extract the latest price",
        ))
        assert not result.is_error
        assert "## Security Warnings" in result.content
        assert "# REMOVED FOR SECURITY" in result.content

    @pytest.mark.asyncio
    async def test_short_processing_logic(self):
        result = await tools.add_web_data_access(AddWebDataAccessParams(
            contract_code=build_base_contract("Feed"),
            url_template="https://api.example.com/data",
            data_processing_logic="x",
        ))
        assert result.is_error
        assert "Data processing logic must be at least 10 characters" in result.content


class TestAddEquivalencePrinciple:
    @pytest.mark.asyncio
    async def test_annotates_method(self):
        result = await tools.add_equivalence_principle(AddEquivalencePrincipleParams(
            contract_code=build_base_contract("Info"),
            method_name="get_info",
            validation_type="comparative",
            tolerance=0.1,
        ))
        assert not result.is_error
        assert "# Equivalence Principle Validation (comparative)" in result.content
        assert "- **Tolerance**: 0.1" in result.content

    @pytest.mark.asyncio
    async def test_missing_method_noted(self):
        result = await tools.add_equivalence_principle(AddEquivalencePrincipleParams(
            contract_code=build_base_contract("Info"),
            method_name="nope",
            validation_type="non_comparative",
        ))
        assert not result.is_error
        assert "not found; code unchanged" in result.content

    @pytest.mark.asyncio
    async def test_empty_code(self):
        result = await tools.add_equivalence_principle(AddEquivalencePrincipleParams(
            contract_code="  ", method_name="x", validation_type="comparative",
        ))
        assert result.is_error

    @pytest.mark.asyncio
    async def test_malformed_method_name(self):
        result = await tools.add_equivalence_principle(AddEquivalencePrincipleParams(
            contract_code=build_base_contract("Info"),
            method_name="get_info(self):\n    pass\ndef x",
            validation_type="comparative",
        ))
        assert result.is_error
        assert "naming convention" in result.content

    @pytest.mark.asyncio
    async def test_reserved_method_name(self):
        result = await tools.add_equivalence_principle(AddEquivalencePrincipleParams(
            contract_code=build_base_contract("Info"),
            method_name="eval",
            validation_type="comparative",
        ))
        assert result.is_error
        assert "reserved" in result.content


class TestExplainConcepts:
    @pytest.mark.asyncio
    async def test_known_concept(self):
        result = await tools.explain_genlayer_concepts(ExplainConceptsParams(concept="equivalence_principle"))
        assert not result.is_error
        assert "# Equivalence Principle in GenLayer" in result.content

    @pytest.mark.asyncio
    async def test_unknown_concept(self):
        result = await tools.explain_genlayer_concepts(ExplainConceptsParams(concept="sharding"))
        assert result.is_error
        assert "Unknown concept 'sharding'. Available concepts:" in result.content
        assert "genvm" in result.content


class TestGenerateDeploymentScript:
    @pytest.mark.asyncio
    async def test_python_script(self):
        result = await tools.generate_deployment_script(GenerateDeploymentScriptParams(
            script_type="python",
            contract_path="contracts/storage.py",
            constructor_args=[
                {"name": "owner", "type": "string", "value": "alice", "description": "Owner name"},
                {"name": "limit", "type": "u256", "value": "10"},
            ],
        ))
        assert not result.is_error
        assert "```python\n#!/usr/bin/env python3" in result.content
        assert "- **owner** (string): alice - Owner name" in result.content
        assert "- **Gas Limit**: 1000000" in result.content
        assert "- **Network**: localnet" in result.content

    @pytest.mark.asyncio
    async def test_unknown_script_type(self):
        result = await tools.generate_deployment_script(GenerateDeploymentScriptParams(
            script_type="bash", contract_path="contracts/storage.py",
        ))
        assert result.is_error
        assert "Unknown script type 'bash'" in result.content

    @pytest.mark.asyncio
    async def test_bad_path(self):
        result = await tools.generate_deployment_script(GenerateDeploymentScriptParams(
            script_type="typescript", contract_path="../../etc/passwd.py",
        ))
        assert result.is_error
        assert "traversal" in result.content

    @pytest.mark.asyncio
    async def test_no_args(self):
        result = await tools.generate_deployment_script(GenerateDeploymentScriptParams(
            script_type="cli_command", contract_path="contracts/storage.py",
        ))
        assert "No constructor arguments" in result.content
