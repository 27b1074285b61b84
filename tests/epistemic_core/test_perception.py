# tests/epistemic_core/test_perception.py

import time

import pytest

# Subject under test
from epistemic_core.core.context import ContextElement, WorkingContext
from epistemic_core.core.perception import MessagePerception, ObservationPerception, ToolResultPerception

# Test Cases

## 1. Perceptions


def test_declared_propositions_are_relevant():
    perception = ToolResultPerception(data={"x": 1}, source="tool", propositions=["P"])
    assert perception.propositions == ("P",)
    assert perception.is_relevant_to("P")


def test_relevance_falls_back_to_case_insensitive_text_match():
    """
    Tests that a proposition mentioned in the data counts as relevant even
    when it was not declared.
    """
    perception = MessagePerception(data={"claim": "ServerIsUp"}, source="agent_b")
    assert perception.is_relevant_to("serverisup")
    assert not perception.is_relevant_to("DatabaseIsUp")


def test_negated_proposition_in_structured_data_is_relevant():
    perception = ObservationPerception(data={"content": "survey says ¬SentimentIsPositive"}, source="survey")
    assert perception.is_relevant_to("¬SentimentIsPositive")
    assert len(perception.justification_elements("¬SentimentIsPositive")) == 1


def test_justification_elements_match_perception_kind():
    tool = ToolResultPerception(data="ok", source="ping", propositions=("P",))
    message = MessagePerception(data="ok", source="agent_b", propositions=("P",))
    observation = ObservationPerception(data="ok", source="eyes", propositions=("P",))

    assert tool.justification_elements("P")[0].type == "tool_result"
    assert message.justification_elements("P")[0].type == "testimony"
    assert observation.justification_elements("P")[0].type == "observation"
    assert tool.justification_elements("Q") == []


def test_evidence_type_retags_elements():
    """
    Tests that a perception tagged with a frame-specific evidence type offers
    elements under that tag.
    """
    perception = ToolResultPerception(data="12ms", source="bench", propositions=("P",), evidence_type="performance")
    element = perception.justification_elements("P")[0]
    assert element.type == "performance"
    assert element.source == "bench"


def test_evaluator_is_passed_to_elements():
    perception = ToolResultPerception(data="x", source="t", propositions=("P",), evaluator=lambda p: 0.9)
    assert perception.justification_elements("P")[0].has_evaluator


def test_with_data_leaves_original_untouched():
    perception = ToolResultPerception(data={"a": 1}, source="t")
    changed = perception.with_data({"a": 2})
    assert perception.data == {"a": 1}
    assert changed.data == {"a": 2}
    assert changed.id == perception.id


def test_observation_context_is_tagged_with_observation_type():
    perception = ObservationPerception(data="smoke", source="camera", observation_type="visual")
    [context] = perception.contextual_elements()
    assert context.type == "observation:visual"
    assert context.source == "camera"


## 2. Working context


def test_working_context_evicts_oldest_when_full():
    context = WorkingContext(max_elements=2)
    context.add_elements([ContextElement("a", 1), ContextElement("b", 2), ContextElement("c", 3)])
    assert [e.type for e in context.elements] == ["b", "c"]


def test_working_context_prunes_expired_elements():
    context = WorkingContext(max_elements=10, max_age=60.0)
    stale = ContextElement("old", 1, timestamp=time.time() - 120)
    fresh = ContextElement("new", 2)
    context.add_elements([stale, fresh])
    assert [e.type for e in context.elements] == ["new"]


def test_working_context_queries():
    context = WorkingContext()
    context.add_elements(
        [ContextElement("message", "hi", source="a"), ContextElement("tool_result", 1, source="b")]
    )
    assert len(context.by_type("message")) == 1
    assert context.by_source("b")[0].type == "tool_result"
    assert context.most_recent().type == "tool_result"
    assert context.most_recent(lambda e: e.source == "a").type == "message"
    context.clear()
    assert len(context) == 0


def test_working_context_rejects_non_positive_capacity():
    with pytest.raises(ValueError):
        WorkingContext(max_elements=0)
