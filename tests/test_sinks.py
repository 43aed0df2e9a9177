"""
Tests for event sinks.
"""

import io
import json
import logging
from datetime import date

import pytest

from spanlog.core.logger import create_logger
from spanlog.observability.metrics import MetricsCollector
from spanlog.sinks import EventSink, JsonStreamSink, LoggingSink, MemorySink, MeteredSink, build_sink


class ExplodingSink:
    def emit(self, record):
        raise OSError("disk full")


class TestJsonStreamSink:
    def test_one_line_per_record(self):
        stream = io.StringIO()
        sink = JsonStreamSink(stream)

        sink.emit({"message": "a", "n": 1})
        sink.emit({"message": "b", "ok": True})

        lines = stream.getvalue().splitlines()
        assert [json.loads(line) for line in lines] == [
            {"message": "a", "n": 1},
            {"message": "b", "ok": True},
        ]

    def test_non_json_values_are_stringified(self):
        stream = io.StringIO()
        JsonStreamSink(stream).emit({"day": date(2024, 1, 2)})
        assert json.loads(stream.getvalue()) == {"day": "2024-01-02"}


class TestLoggingSink:
    def test_forwards_message_and_fields(self, caplog):
        sink = LoggingSink()
        with caplog.at_level(logging.INFO, logger="spanlog.events"):
            create_logger(sink=sink).child(requestId="r-1").log("handled {requestId}")

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.getMessage() == "handled r-1"
        assert record.requestId == "r-1"
        assert record.levelno == logging.INFO

    def test_level_field_selects_level(self, caplog):
        sink = LoggingSink()
        with caplog.at_level(logging.DEBUG, logger="spanlog.events"):
            sink.emit({"message": "careful", "level": "warning"})
            sink.emit({"message": "numeric", "level": logging.ERROR})
            sink.emit({"message": "unknown", "level": "loud"})

        assert [r.levelno for r in caplog.records] == [logging.WARNING, logging.ERROR, logging.INFO]

    def test_fields_named_like_call_parameters(self, caplog):
        with caplog.at_level(logging.INFO, logger="spanlog.events"):
            create_logger(sink=LoggingSink()).child({"msg": "retry later", "self": "me", "extra": 1}).log("handled")

        record = caplog.records[0]
        assert record.getMessage() == "handled"
        assert record.field_msg == "retry later"
        assert record.self == "me"
        assert record.extra == 1

    def test_log_record_attribute_names_are_renamed_not_dropped(self, caplog):
        root = create_logger(sink=LoggingSink())
        with caplog.at_level(logging.INFO, logger="spanlog.events"):
            root.child({"name": "alice", "module": "billing", "process": 7, "args": "x", "kept": 1}).log("user {name}")

        record = caplog.records[0]
        assert record.getMessage() == "user alice"
        assert record.name == "spanlog.events"
        assert record.field_name == "alice"
        assert record.field_module == "billing"
        assert record.field_process == 7
        assert record.field_args == "x"
        assert record.kept == 1

    def test_renamed_field_does_not_clobber_existing_key(self, caplog):
        with caplog.at_level(logging.INFO, logger="spanlog.events"):
            LoggingSink().emit({"message": "m", "name": "alice", "field_name": "bob"})

        record = caplog.records[0]
        assert record.field_name == "bob"
        assert record.field_field_name == "alice"

    def test_level_field_is_kept(self, caplog):
        with caplog.at_level(logging.INFO, logger="spanlog.events"):
            LoggingSink().emit({"message": "m", "level": "high"})

        record = caplog.records[0]
        assert record.levelno == logging.INFO
        assert record.level == "high"


class TestMemoryAndMeteredSinks:
    def test_memory_sink(self):
        sink = MemorySink()
        sink.emit({"message": "a"})
        sink.emit({"other": 1})

        assert sink.messages == ["a", ""]
        assert len(sink) == 2
        sink.clear()
        assert len(sink) == 0

    def test_metered_sink_counts_then_delegates(self):
        inner = MemorySink()
        collector = MetricsCollector()
        sink = MeteredSink(inner, collector)

        create_logger(sink=sink).log("one")
        create_logger(sink=sink).log("two")

        assert inner.messages == ["one", "two"]
        summary = collector.get_summary()
        assert summary["events_emitted"] == 2
        assert summary["events_by_sink"] == {"memory": 2}

    def test_sinks_satisfy_protocol(self):
        for sink in (JsonStreamSink(), LoggingSink(), MemorySink(), MeteredSink(MemorySink(), MetricsCollector())):
            assert isinstance(sink, EventSink)


class TestBuildSink:
    def test_known_kinds(self):
        assert isinstance(build_sink("json"), JsonStreamSink)
        assert isinstance(build_sink("logging"), LoggingSink)
        assert isinstance(build_sink("memory"), MemorySink)

    def test_stderr_stream(self, capsys):
        build_sink("json", "stderr").emit({"message": "x"})
        captured = capsys.readouterr()
        assert captured.out == ""
        assert json.loads(captured.err) == {"message": "x"}

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown sink kind"):
            build_sink("kafka")


class TestSinkErrors:
    def test_sink_errors_propagate_and_reset_pending_message(self):
        logger = create_logger(sink=ExplodingSink())
        logger.message("queued")

        with pytest.raises(OSError, match="disk full"):
            logger.log()

        assert logger.pending_message == ""
