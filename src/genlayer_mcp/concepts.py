"""GenLayer concept explanations served by explain_genlayer_concepts.

Each concept is a ConceptDoc: prose sections, optional code examples and a
list of related topics. Rendering is deterministic and keyed by the closed
Concept enum.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from genlayer_mcp.config import GENLAYER_DOCS_URL
from genlayer_mcp.schemas import Concept


@dataclass(frozen=True)
class ConceptExample:
    title: str
    code: str


@dataclass(frozen=True)
class ConceptDoc:
    title: str
    overview: str
    sections: list[tuple[str, str]] = field(default_factory=list)
    examples: list[ConceptExample] = field(default_factory=list)
    related: list[str] = field(default_factory=list)


CONCEPTS: dict[Concept, ConceptDoc] = {
    Concept.EQUIVALENCE_PRINCIPLE: ConceptDoc(
        title="Equivalence Principle in GenLayer",
        overview=(
            "The Equivalence Principle is how GenLayer validators reach consensus on "
            "non-deterministic operations such as LLM calls and web requests. A leader "
            "executes the operation and the other validators decide whether their own "
            "result is equivalent."
        ),
        sections=[
            ("Strict Equality (gl.eq_principle_strict_eq)",
             "Every validator must produce an identical result. Use it for formatted "
             "data, classifications with a closed answer set, and normalized JSON."),
            ("Comparative Validation (gl.eq_principle_prompt_comparative)",
             "Results are compared under a tolerance or criteria. Use it for prices, "
             "measurements and other numeric values that drift between sources."),
            ("Non-Comparative Validation (gl.eq_principle_prompt_non_comparative)",
             "Validators judge the leader's output against criteria instead of "
             "recomputing it. Use it for subjective decisions such as moderation."),
            ("Consensus Flow",
             "1. **Leader Execution**: one validator runs the operation\n"
             "2. **Result Distribution**: the leader shares its result\n"
             "3. **Validation**: every validator checks the result independently\n"
             "4. **Consensus**: a majority accepts the result, otherwise it is retried"),
        ],
        examples=[
            ConceptExample("Strict equality", '''@gl.public.write
def classify(self, text: str) -> str:
    def task() -> str:
        return gl.nondet.exec_prompt(f"Classify as spam or ham: {text}").strip()

    return gl.eq_principle_strict_eq(task)'''),
            ConceptExample("Comparative with tolerance", '''@gl.public.write
def market_price(self, symbol: str) -> str:
    def task() -> str:
        return gl.nondet.exec_prompt(f"Current USD price of {symbol}, number only")

    return gl.eq_principle_prompt_comparative(
        task,
        task="Get market price",
        tolerance=0.01
    )'''),
            ConceptExample("Non-comparative", '''@gl.public.write
def analyze_sentiment(self, text: str) -> str:
    return gl.eq_principle_prompt_non_comparative(
        lambda: gl.nondet.exec_prompt(f"Sentiment of: {text}"),
        task="Sentiment analysis",
        criteria="Must return one of: positive, negative, neutral"
    )'''),
        ],
        related=["Optimistic Democracy", "Consensus Mechanisms", "LLM Integration"],
    ),
    Concept.OPTIMISTIC_DEMOCRACY: ConceptDoc(
        title="Optimistic Democracy Consensus",
        overview=(
            "Optimistic Democracy is GenLayer's delegated proof-of-stake consensus. "
            "Transactions are accepted optimistically and can be challenged during an "
            "appeal window, when a larger validator set re-evaluates them."
        ),
        sections=[
            ("Validator Network",
             "Validators are selected by stake. Each connects to its own LLM provider, "
             "so model diversity is part of the security model."),
            ("Transaction Phases",
             "1. **Optimistic Execution**: a leader executes and validators vote\n"
             "2. **Appeal Window**: any participant may challenge the outcome\n"
             "3. **Finalization**: unchallenged results become final"),
            ("Appeals",
             "An appeal re-runs the transaction with a larger validator set. "
             "Each round roughly doubles the number of validators involved."),
        ],
        examples=[
            ConceptExample("Consensus-backed decision", '''@gl.public.write
def ai_decision(self, input_data: str) -> str:
    def task() -> str:
        return gl.nondet.exec_prompt(f"Approve or reject: {input_data}")

    # Only finalized if validators agree
    return gl.eq_principle_strict_eq(task)'''),
        ],
        related=["Equivalence Principle", "Validator Networks", "Consensus Algorithms"],
    ),
    Concept.LLM_INTEGRATION: ConceptDoc(
        title="LLM Integration in GenLayer",
        overview=(
            "GenLayer contracts call Large Language Models directly through "
            "gl.nondet.exec_prompt. Every call is non-deterministic, so it is wrapped "
            "in an equivalence principle before its result can change state."
        ),
        sections=[
            ("Prompt Design",
             "Ask for short, closed-form answers. Request JSON when you need "
             "structure and normalize it (sort keys, strip code fences) before "
             "comparing."),
            ("Context Management",
             "Keep conversation history in contract storage and pass only a bounded "
             "window into each prompt."),
            ("Error Handling",
             "Parse model output defensively and fall back to a documented error "
             "envelope when parsing fails."),
        ],
        examples=[
            ConceptExample("Structured JSON output", '''@gl.public.write
def summarize(self, content: str) -> str:
    def task() -> str:
        raw = gl.nondet.exec_prompt(
            f"Summarize as JSON {{\\"summary\\": str}}: {content}"
        )
        cleaned = raw.replace("```json", "").replace("```", "").strip()
        return json.dumps(json.loads(cleaned), sort_keys=True)

    return json.loads(gl.eq_principle_strict_eq(task))["summary"]'''),
        ],
        related=["Equivalence Principle", "Intelligent Contracts", "GenLayer Types"],
    ),
    Concept.WEB_DATA_ACCESS: ConceptDoc(
        title="Web Data Access in GenLayer",
        overview=(
            "Contracts read the live web with gl.nondet.web.render(url, mode=...). "
            "Modes are text, html and screenshot. Like LLM calls, fetches are "
            "non-deterministic and need an equivalence principle."
        ),
        sections=[
            ("Extracting Data",
             "Render the page, then ask an LLM to extract exactly the fields you "
             "need. Comparing extracted values is far more stable than comparing "
             "raw pages."),
            ("Multiple Sources",
             "Fetch several sources and cross-check them to reduce reliance on any "
             "single provider."),
            ("Failure Handling",
             "Return a JSON error envelope with url, mode and status instead of "
             "raising, so validators agree on failures too."),
        ],
        examples=[
            ConceptExample("Fetching a price", '''@gl.public.write
def btc_price(self) -> str:
    def task() -> str:
        page = gl.nondet.web.render("https://api.coindesk.com/v1/bpi/currentprice.json", mode="text")
        return gl.nondet.exec_prompt(f"Extract the USD rate as a number: {page}").strip()

    return gl.eq_principle_prompt_comparative(task, task="BTC price", tolerance=0.01)'''),
        ],
        related=["LLM Integration", "Intelligent Contracts", "GenLayer Types"],
    ),
    Concept.VECTOR_STORES: ConceptDoc(
        title="Vector Stores in GenLayer",
        overview=(
            "Vector stores give contracts semantic search: texts are embedded on "
            "insert and queried by similarity."
        ),
        sections=[
            ("Adding Entries",
             "Store text together with a metadata dict (category, author, "
             "timestamp) for later filtering."),
            ("Similarity Search",
             "Query with natural language and a top_k bound; filter the results "
             "by a similarity threshold if needed."),
        ],
        examples=[
            ConceptExample("Document store", '''class DocumentStore(gl.Contract):
    vector_store: VectorStore

    def __init__(self):
        self.vector_store = VectorStore()

    @gl.public.write
    def add_document(self, content: str, category: str) -> str:
        self.vector_store.add_text(content, {"category": category})
        return "added"

    @gl.public.view
    def search(self, query: str, top_k: int = 5) -> list:
        return self.vector_store.search(query, top_k)'''),
        ],
        related=["LLM Integration", "Intelligent Contracts", "GenLayer Types"],
    ),
    Concept.CONSENSUS_MECHANISMS: ConceptDoc(
        title="Consensus Mechanisms in GenLayer",
        overview=(
            "GenLayer combines Optimistic Democracy at the transaction level with "
            "equivalence principles at the operation level."
        ),
        sections=[
            ("Choosing a Mechanism",
             "- **Strict equality**: deterministic or normalized outputs\n"
             "- **Comparative**: numeric values within a tolerance\n"
             "- **Non-comparative**: subjective judgements against criteria"),
            ("Designing for Agreement",
             "Narrow prompts, normalized outputs and explicit criteria all raise "
             "the rate at which validators agree on the first round."),
        ],
        examples=[
            ConceptExample("Picking a wrapper", '''# Deterministic output
gl.eq_principle_strict_eq(task)
# Numeric output
gl.eq_principle_prompt_comparative(task, task="...", tolerance=0.1)
# Subjective output
gl.eq_principle_prompt_non_comparative(task, task="...", criteria="...")'''),
        ],
        related=["Equivalence Principle", "Optimistic Democracy", "Best Practices"],
    ),
    Concept.INTELLIGENT_CONTRACTS: ConceptDoc(
        title="Intelligent Contracts Overview",
        overview=(
            "Intelligent Contracts are Python classes deriving from gl.Contract. "
            "They keep typed storage, expose @gl.public.view and @gl.public.write "
            "methods, and can call LLMs and the web."
        ),
        sections=[
            ("Structure",
             "Declare storage fields with GenLayer types, initialize them in "
             "__init__, and mark every public method with a decorator."),
            ("Views and Writes",
             "@gl.public.view methods are read-only. @gl.public.write methods "
             "change state; @gl.public.write.payable ones also accept value."),
        ],
        examples=[
            ConceptExample("Minimal contract", '''# { "Depends": "py-genlayer:test" }
from genlayer import *

class Counter(gl.Contract):
    count: u256

    def __init__(self):
        self.count = u256(0)

    @gl.public.write
    def increment(self) -> None:
        self.count += u256(1)

    @gl.public.view
    def get_count(self) -> u256:
        return self.count'''),
        ],
        related=["LLM Integration", "Web Data Access", "GenVM"],
    ),
    Concept.GENVM: ConceptDoc(
        title="GenVM (GenLayer Virtual Machine)",
        overview=(
            "GenVM executes Intelligent Contracts. It runs deterministic Python "
            "code and brokers non-deterministic operations through consensus."
        ),
        sections=[
            ("Execution Flow",
             "1. **Transaction Parsing**: decode the call\n"
             "2. **Code Execution**: run the method in a sandbox\n"
             "3. **Non-deterministic Blocks**: LLM and web calls\n"
             "4. **Consensus Validation**: equivalence principle checks\n"
             "5. **State Updates**: commit accepted changes"),
            ("Sandboxing",
             "Contracts cannot touch the host filesystem or network except through "
             "the gl.nondet APIs."),
        ],
        related=["Intelligent Contracts", "GenLayer Types", "Best Practices"],
    ),
    Concept.GENLAYER_TYPES: ConceptDoc(
        title="GenLayer Type System",
        overview="Storage fields must use GenLayer types so they can be persisted.",
        sections=[
            ("Primitive Types",
             "- **Integers**: u8 … u256, i8 … i256, bigint\n"
             "- **Other**: bool, str, bytes, Address"),
            ("Collection Types",
             "- **DynArray[T]**: dynamic arrays\n"
             "- **TreeMap[K, V]**: ordered key-value mappings"),
            ("Mapping from Tool Field Types",
             "string → str, integer → u256, float → f64, boolean → bool, "
             "address → Address, list → DynArray[str], dict → TreeMap[str, str], "
             "bytes → bytes"),
        ],
        examples=[
            ConceptExample("Typed storage", '''class Registry(gl.Contract):
    owner: Address
    names: DynArray[str]
    balances: TreeMap[Address, u256]'''),
        ],
        related=["GenVM", "Best Practices", "Intelligent Contracts"],
    ),
    Concept.BEST_PRACTICES: ConceptDoc(
        title="GenLayer Development Best Practices",
        overview="Guidelines for safe, consensus-friendly Intelligent Contracts.",
        sections=[
            ("Security",
             "Validate every input, restrict privileged methods by sender address, "
             "and never trust model output without parsing it."),
            ("Consensus-Friendly Design",
             "Keep non-deterministic blocks small, normalize their output, and pick "
             "the weakest equivalence principle that still protects your state."),
            ("Development Workflow",
             "1. Test locally on localnet\n"
             "2. Iterate in GenLayer Studio\n"
             "3. Validate on testnet before production"),
        ],
        related=["Security", "LLM Integration", "GenLayer Types"],
    ),
}


def available_concepts() -> list[str]:
    return [c.value for c in Concept]


def render_concept(concept: Concept, include_examples: bool = True, detail_level: str = "intermediate") -> str:
    """Render a concept explanation as Markdown."""
    doc = CONCEPTS[concept]
    lines: list[str] = [f"# {doc.title}", "", doc.overview, ""]

    for heading, body in doc.sections:
        lines.append(f"## {heading}")
        lines.append("")
        lines.append(body)
        lines.append("")

    if include_examples and doc.examples:
        lines.append("## Code Examples")
        lines.append("")
        for example in doc.examples:
            lines.append(f"### {example.title}")
            lines.append("")
            lines.append("```python")
            lines.append(example.code)
            lines.append("```")
            lines.append("")

    if detail_level == "advanced" and doc.related:
        lines.append("## Related Topics")
        lines.extend(f"• {topic}" for topic in doc.related)
        lines.append("")

    lines.append("## Learn More")
    lines.append(f"- Documentation: {GENLAYER_DOCS_URL}")
    return "\n".join(lines)
