"""Tests for keyword definition providers."""
import pytest

from app.services.definitions import (
    LocalDefinitionProvider,
    OllamaDefinitionProvider,
    build_definition_provider,
    find_definitional_span,
)
from app.services.fingerprint import SemanticFingerprint
from app.services.llm_client import OllamaLLMService


class FakeLLM:
    """Stands in for OllamaLLMService.generate."""

    is_enabled = True

    def __init__(self, response: str = "", error: Exception = None) -> None:
        self.response = response
        self.error = error
        self.prompts = []

    async def generate(self, prompt, system=None, max_tokens=1000, temperature=0.3):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.response


EMPTY = SemanticFingerprint()
CS = SemanticFingerprint(domain_indicators=("Computer Science",))


def test_verb_definition_found():
    window = "In this work, entropy is a measure of disorder in a system. It grows."
    assert find_definitional_span("entropy", window) == "Entropy is a measure of disorder in a system."


def test_refers_to_definition_found():
    window = "A tensor refers to a multidimensional array of numbers."
    assert find_definitional_span("tensor", window) == "Tensor refers to a multidimensional array of numbers."


def test_gloss_before_acronym():
    window = "Classifier: support vector machine (SVM) baseline."
    assert find_definitional_span("SVM", window) == "Support vector machine (SVM)."


def test_gloss_after_term():
    window = "We use BERT (a transformer language model) for encoding."
    assert find_definitional_span("BERT", window) == "BERT (a transformer language model)."


def test_no_definitional_pattern():
    assert find_definitional_span("graph", "The graph was large") == ""


@pytest.mark.asyncio
async def test_local_fallback_mentions_first_domain():
    provider = LocalDefinitionProvider()
    definition = await provider.define("Pipeline", "A pipeline runs daily", CS)

    assert definition.text == (
        "Pipeline is a term used in Computer Science that is central to this document."
    )
    assert definition.is_from_external_source is False


@pytest.mark.asyncio
async def test_local_fallback_generic_without_domain():
    definition = await LocalDefinitionProvider().define("Pipeline", "nothing relevant", EMPTY)
    assert definition.text == "Pipeline is a key term in this document."


@pytest.mark.asyncio
async def test_llm_definition_marked_external():
    llm = FakeLLM("Definition: A sequence of processing stages.")
    provider = OllamaDefinitionProvider(llm)

    definition = await provider.define("pipeline", "The pipeline has four stages.", CS)

    assert definition.text == "A sequence of processing stages."
    assert definition.is_from_external_source is True
    assert "Computer Science" in llm.prompts[0]
    assert "The pipeline has four stages." in llm.prompts[0]


@pytest.mark.asyncio
async def test_llm_empty_response_falls_back():
    provider = OllamaDefinitionProvider(FakeLLM(""))
    definition = await provider.define("entropy", "entropy is a measure of disorder.", EMPTY)

    assert definition.text == "Entropy is a measure of disorder."
    assert definition.is_from_external_source is False


@pytest.mark.asyncio
async def test_llm_error_falls_back():
    provider = OllamaDefinitionProvider(FakeLLM(error=RuntimeError("boom")))
    definition = await provider.define("graph", "no definition here", EMPTY)

    assert definition.text == "graph is a key term in this document."
    assert definition.is_from_external_source is False


def test_provider_selection():
    assert isinstance(build_definition_provider(None), LocalDefinitionProvider)

    disabled = OllamaLLMService(base_url="http://ollama.test", enabled=False)
    assert isinstance(build_definition_provider(disabled), LocalDefinitionProvider)

    enabled = OllamaLLMService(base_url="http://ollama.test", enabled=True)
    assert isinstance(build_definition_provider(enabled), OllamaDefinitionProvider)
