"""
Test suite for the batched call context snapshot.
"""

import pytest

from rpccontext.batching.context import BatchedCallContext, MissingFieldError


class TestBuilder:
    """Tests for building a batch snapshot."""

    def test_build_with_all_fields(self):
        """Test that the snapshot carries exactly the values set."""
        snapshot = (
            BatchedCallContext.new_builder()
            .set_element_count(5)
            .set_byte_count(100)
            .set_total_throttled_time_ms(20)
            .build()
        )

        assert snapshot.element_count == 5
        assert snapshot.byte_count == 100
        assert snapshot.total_throttled_time_ms == 20

    def test_zero_values_are_valid(self):
        snapshot = (
            BatchedCallContext.Builder()
            .set_element_count(0)
            .set_byte_count(0)
            .set_total_throttled_time_ms(0)
            .build()
        )

        assert snapshot.to_dict() == {
            "element_count": 0,
            "byte_count": 0,
            "total_throttled_time_ms": 0,
        }

    @pytest.mark.parametrize(
        "skipped",
        ["set_element_count", "set_byte_count", "set_total_throttled_time_ms"],
    )
    def test_missing_field_fails(self, skipped):
        """Test that omitting any setter makes build fail."""
        builder = BatchedCallContext.new_builder()
        for setter in ("set_element_count", "set_byte_count", "set_total_throttled_time_ms"):
            if setter != skipped:
                getattr(builder, setter)(1)

        with pytest.raises(MissingFieldError) as exc_info:
            builder.build()

        assert exc_info.value.missing == [skipped[len("set_"):]]

    def test_empty_builder_lists_every_missing_field(self):
        with pytest.raises(MissingFieldError, match="element_count, byte_count"):
            BatchedCallContext.new_builder().build()

    def test_missing_field_is_value_error(self):
        with pytest.raises(ValueError):
            BatchedCallContext.new_builder().set_element_count(1).build()

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError, match="byte_count"):
            BatchedCallContext.new_builder().set_byte_count(-1)

    def test_setter_overwrites_previous_value(self):
        snapshot = (
            BatchedCallContext.new_builder()
            .set_element_count(1)
            .set_element_count(7)
            .set_byte_count(10)
            .set_total_throttled_time_ms(0)
            .build()
        )

        assert snapshot.element_count == 7


class TestSnapshot:
    """Tests for the built snapshot."""

    @pytest.fixture
    def snapshot(self) -> BatchedCallContext:
        return (
            BatchedCallContext.new_builder()
            .set_element_count(3)
            .set_byte_count(256)
            .set_total_throttled_time_ms(15)
            .build()
        )

    def test_immutable(self, snapshot):
        with pytest.raises(AttributeError):
            snapshot.element_count = 4

    def test_builder_changes_do_not_affect_built_snapshot(self):
        builder = (
            BatchedCallContext.new_builder()
            .set_element_count(1)
            .set_byte_count(1)
            .set_total_throttled_time_ms(1)
        )
        snapshot = builder.build()

        builder.set_element_count(99)

        assert snapshot.element_count == 1
        assert builder.build().element_count == 99

    def test_value_equality(self, snapshot):
        same = (
            BatchedCallContext.new_builder()
            .set_element_count(3)
            .set_byte_count(256)
            .set_total_throttled_time_ms(15)
            .build()
        )

        assert snapshot == same
        assert hash(snapshot) == hash(same)
