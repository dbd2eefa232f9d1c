# Area: Shared Tests
"""Tests for lastcall_engine.errors — fatal error types."""

from lastcall_engine.errors import (
    EngineInvariantError,
    LastCallEngineError,
    RoundConfigurationError,
    SnapshotImportError,
)


class TestErrors:
    """Tests for the exception hierarchy and error log blocks."""

    def test_hierarchy(self):
        for error in (
            RoundConfigurationError(["x"]),
            EngineInvariantError("x"),
            SnapshotImportError("rounds", ["x"]),
        ):
            assert isinstance(error, LastCallEngineError)

    def test_round_configuration_message(self):
        error = RoundConfigurationError(["Round 2 has no point values", "Rounds must start at 1"])
        assert str(error) == (
            "Invalid round configuration: Round 2 has no point values; Rounds must start at 1"
        )

    def test_round_configuration_log_block(self):
        block = RoundConfigurationError(["Round 2 has no point values"]).format_error_log()
        assert " ENGINE ERROR — INITIALIZATION REFUSED" in block
        assert "Error Type:   ROUND_CONFIGURATION" in block
        assert " • Round 2 has no point values" in block
        assert "Section:" not in block

    def test_snapshot_import_log_block(self):
        block = SnapshotImportError("scores", ["team t1: unknown member 'x'"]).format_error_log()
        assert " ENGINE ERROR — STATE IMPORT REFUSED" in block
        assert "INITIALIZATION" not in block
        assert "Error Type:   SNAPSHOT_IMPORT" in block
        assert "Section:      scores" in block
        assert " • team t1: unknown member 'x'" in block

    def test_invariant_error_carries_submission(self):
        error = EngineInvariantError("Question 'q9' not found in round 1", submission_id="s1")
        assert error.submission_id == "s1"
        assert "q9" in str(error)
