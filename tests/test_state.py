"""
Tests for the state management module.
"""

import pytest

from tiered_assistant.core.errors import StateValidationError
from tiered_assistant.core.state import (
    END,
    Continue,
    End,
    RequiredShape,
    WorkflowState,
    create_initial_state,
    to_transition,
)
from tiered_assistant.memory import AssistantMessage, ConversationMemory, Message, ReadOnlyMemory


class TestTransitions:
    """Tests for step return normalization."""

    def test_step_name(self):
        """Test a step name continues to that step."""
        assert to_transition("critique") == Continue("critique")

    def test_end_sentinel(self):
        """Test END terminates."""
        assert to_transition(END) == End()

    def test_none_is_end(self):
        """Test returning nothing terminates."""
        assert to_transition(None) == End()

    def test_end_is_singleton(self):
        """Test the END sentinel identity."""
        assert type(END)() is END
        assert repr(END) == "END"

    def test_invalid_return(self):
        """Test non-name return values are rejected."""
        with pytest.raises(TypeError):
            to_transition(42)


class TestWorkflowState:
    """Tests for WorkflowState creation."""

    def test_defaults(self):
        """Test schema defaults."""
        state = create_initial_state(WorkflowState)
        assert state.answer is None
        assert state.memory is None

    def test_initial_fields_merged(self):
        """Test initial fields override defaults."""
        view = ConversationMemory().as_read_only()
        state = create_initial_state(WorkflowState, memory=view)
        assert state.memory is view
        assert state.answer is None

    def test_fresh_per_call(self):
        """Test each call builds a new state."""
        first = create_initial_state(WorkflowState)
        first.answer = AssistantMessage("x")
        second = create_initial_state(WorkflowState)
        assert second.answer is None

    def test_unknown_field(self):
        """Test unknown initial fields are rejected."""
        with pytest.raises(StateValidationError) as exc_info:
            create_initial_state(WorkflowState, verdict="TRUE")
        assert exc_info.value.field == "verdict"


class TestRequiredShape:
    """Tests for strict step preconditions."""

    @pytest.fixture
    def shape(self):
        return RequiredShape({"answer": Message, "memory": ReadOnlyMemory})

    def test_satisfied(self, shape):
        """Test a complete state passes."""
        state = WorkflowState(
            answer=AssistantMessage("4"),
            memory=ConversationMemory().as_read_only()
        )
        shape.validate("critique", state)

    def test_missing_field(self, shape):
        """Test a missing field is named."""
        state = WorkflowState(memory=ConversationMemory().as_read_only())
        with pytest.raises(StateValidationError) as exc_info:
            shape.validate("critique", state)
        assert exc_info.value.step == "critique"
        assert exc_info.value.field == "answer"
        assert exc_info.value.reason == "missing"

    def test_invalid_type(self, shape):
        """Test a wrongly typed field is named."""
        state = WorkflowState(answer="4", memory=ConversationMemory().as_read_only())
        with pytest.raises(StateValidationError) as exc_info:
            shape.validate("critique", state)
        assert exc_info.value.field == "answer"
        assert exc_info.value.reason == "invalid"
        assert "Message" in str(exc_info.value)

    def test_mutable_memory_is_not_read_only(self, shape):
        """Test the mutable handle does not satisfy a read-only requirement."""
        state = WorkflowState(answer=AssistantMessage("4"), memory=ConversationMemory())
        with pytest.raises(StateValidationError) as exc_info:
            shape.validate("critique", state)
        assert exc_info.value.field == "memory"

    def test_names(self, shape):
        """Test declared field names."""
        assert shape.names == ["answer", "memory"]
