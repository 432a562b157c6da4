"""Tests for named templates, prediction markets and vector stores."""

from __future__ import annotations

import pytest

from genlayer_mcp.generator import build_base_contract
from genlayer_mcp.schemas import MetadataFieldSpec
from genlayer_mcp.templates import (
    generate_prediction_market,
    generate_template,
    generate_vector_store,
)


class TestGenerateTemplate:
    @pytest.mark.parametrize("template_type,marker,wrapper", [
        ("dao_governance", "def create_proposal(self, title: str, description: str)", "gl.eq_principle_strict_eq"),
        ("content_moderation", "def moderate_content(self, content: str)", "gl.eq_principle_prompt_non_comparative"),
        ("sentiment_tracker", "def analyze_sentiment(self, text: str, topic: str = \"general\")", "gl.eq_principle_strict_eq"),
        ("multi_oracle", "def fetch_consensus_data(self, data_type: str, query: str)", "gl.eq_principle_strict_eq"),
    ])
    def test_named_templates(self, template_type, marker, wrapper):
        code = generate_template(template_type, "MyContract")
        assert "class MyContract(gl.Contract):" in code
        assert marker in code
        assert wrapper in code
        compile(code, "<template>", "exec")

    def test_unknown_template_falls_back_to_base(self):
        assert generate_template("unknown_kind", "Fallback") == build_base_contract("Fallback", [])

    def test_basic_falls_back_to_base(self):
        assert generate_template("basic", "Plain") == build_base_contract("Plain", [])

    def test_custom_params_do_not_change_body(self):
        plain = generate_template("dao_governance", "Dao")
        custom = generate_template("dao_governance", "Dao", {"voting_threshold": 66})
        assert plain == custom

    def test_dao_membership_seeded_with_sender(self):
        code = generate_template("dao_governance", "Dao")
        assert "self.members[gl.message.sender_address] = True" in code
        assert "self.total_members = u256(1)" in code


class TestPredictionMarket:
    def test_bitcoin_market_example(self):
        code = generate_prediction_market(
            "BitcoinPriceMarket",
            "Will BTC close above 100k?",
            "Resolves YES if BTC/USD closes above 100,000 on the deadline",
            ["https://api.coindesk.com/v1/bpi/currentprice.json", "https://example.org/btc"],
        )
        assert "class BitcoinPriceMarket(gl.Contract):" in code
        assert "@gl.public.write.payable" in code
        assert "def place_bet(self, prediction: bool) -> str:" in code
        assert "def resolve_market(self) -> str:" in code
        assert "def claim_winnings(self) -> u256:" in code
        assert "def get_market_info(self) -> dict:" in code
        assert "Resolution Criteria: Resolves YES if BTC/USD closes above 100,000" in code
        assert (
            "Web Sources: https://api.coindesk.com/v1/bpi/currentprice.json, https://example.org/btc"
        ) in code
        assert '"name": "BitcoinPriceMarket"' in code
        compile(code, "<market>", "exec")

    def test_resolution_is_placeholder_yes(self):
        code = generate_prediction_market("XMarket", "desc text here", "criteria long enough to pass", [])
        assert "self.outcome = True  # Placeholder outcome" in code

    def test_payout_formula(self):
        code = generate_prediction_market("XMarket", "desc text here", "criteria long enough to pass", [])
        assert "payout = (user_bet_on_winner * total_pool) // winning_pool" in code


class TestVectorStore:
    def test_store(self):
        code = generate_vector_store("DocStore", "Stores product docs")
        assert "class DocStore(gl.Contract):" in code
        assert "def add_text(self, text: str, metadata: dict = None) -> str:" in code
        assert "def search_similar(self, query: str, top_k: int = 5) -> list:" in code
        assert "def get_store_info(self) -> dict:" in code
        assert '"description": "Stores product docs"' in code
        compile(code, "<store>", "exec")

    def test_metadata_fields_do_not_change_code(self):
        plain = generate_vector_store("DocStore", "Stores product docs")
        with_meta = generate_vector_store(
            "DocStore", "Stores product docs", [MetadataFieldSpec(name="author", type="string")],
        )
        assert plain == with_meta
