"""
Tests for the enrichment pipeline: span enrichers on child creation and
event enrichers on emission, both walked root-to-leaf.
"""

from datetime import datetime

import pytest

from spanlog.core.enrichers import (
    START_TIMESTAMP_FIELD,
    TIMESTAMP_FIELD,
    EnricherRegistry,
    span_enricher,
    static_fields_enricher,
    timestamp_enricher,
)


class TestSpanEnrichers:
    def test_root_enricher_fires_for_every_descendant(self, root):
        created = []
        root.add_span_enricher(created.append)

        child = root.child()
        grandchild = child.child()
        sibling = root.child()

        assert created == [child, grandchild, sibling]

    def test_enricher_runs_before_initial_fields(self, root):
        seen = []
        root.tag(rootField=1)
        root.add_span_enricher(lambda node: seen.append(node.merged_fields()))

        child = root.child({"childField": 2})
        child.tag(later=3)

        assert seen == [{"rootField": 1}]
        assert child.merged_fields() == {"rootField": 1, "childField": 2, "later": 3}

    def test_enrichers_walk_root_to_leaf(self, root):
        order = []
        mid = root.child()
        root.add_span_enricher(lambda node: order.append("root"))
        mid.add_span_enricher(lambda node: order.append("mid"))

        mid.child()
        root.child()

        assert order == ["root", "mid", "root"]

    def test_own_enrichers_do_not_fire_for_self(self, root):
        calls = []
        child = root.child()
        child.add_span_enricher(calls.append)
        assert calls == []

    def test_later_enricher_sees_earlier_tags(self, root):
        seen = []
        mid = root.child()
        root.add_span_enricher(lambda node: node.tag(stamp="root"))
        mid.add_span_enricher(lambda node: seen.append(node.fields.get("stamp")))

        mid.child()

        assert seen == ["root"]

    def test_span_enricher_stamps_start_time(self, root):
        root.add_span_enricher(span_enricher)

        child = root.child()

        datetime.fromisoformat(child.fields[START_TIMESTAMP_FIELD])
        assert START_TIMESTAMP_FIELD not in root.fields

    def test_initial_fields_override_enricher_tags(self, root):
        root.add_span_enricher(lambda node: node.tag(owner="enricher"))
        assert root.child(owner="caller").fields == {"owner": "caller"}


class TestEventEnrichers:
    def test_enrichers_at_two_levels_run_root_first(self, root, memory_sink):
        mid = root.child()
        leaf = mid.child()
        root.add_event_enricher(lambda event, template, node: event.setdefault("markers", []).append("root"))
        mid.add_event_enricher(lambda event, template, node: event.setdefault("markers", []).append("mid"))

        leaf.log("hello")

        assert memory_sink.records[0]["markers"] == ["root", "mid"]

    def test_enricher_arguments(self, root):
        calls = []
        root.add_event_enricher(lambda event, template, node: calls.append((dict(event), template, node)))
        leaf = root.child(a=1).prefix("[{a}] ")

        leaf.log("value {b}", {"b": 2})

        event, template, node = calls[0]
        assert event == {"a": 1, "b": 2}
        assert template == "[{a}] value {b}"
        assert node is leaf

    def test_enricher_fields_are_rendered(self, root, memory_sink):
        root.add_event_enricher(lambda event, template, node: event.update(host="db-1"))
        root.log("on {host}")
        assert memory_sink.messages == ["on db-1"]

    def test_enrichers_below_emitter_do_not_run(self, root, memory_sink):
        child = root.child()
        child.add_event_enricher(lambda event, template, node: event.update(child=True))

        root.log()

        assert "child" not in memory_sink.records[0]

    def test_timestamp_enricher(self, root, memory_sink):
        root.add_event_enricher(timestamp_enricher)
        root.child().log()
        datetime.fromisoformat(memory_sink.records[0][TIMESTAMP_FIELD])

    def test_static_fields_enricher_keeps_existing_values(self, root, memory_sink):
        root.add_event_enricher(static_fields_enricher(env="prod", region="eu"))
        root.child(region="us").log()
        record = memory_sink.records[0]
        assert record["env"] == "prod"
        assert record["region"] == "us"

    def test_walk_uses_snapshot(self, root, memory_sink):
        def register_another(event, template, node):
            event.setdefault("markers", []).append("first")
            root.add_event_enricher(lambda e, t, n: e.setdefault("markers", []).append("added"))

        root.add_event_enricher(register_another)

        root.log()
        assert memory_sink.records[0]["markers"] == ["first"]


class TestEnricherRegistry:
    def test_empty_by_default(self):
        registry = EnricherRegistry()
        assert registry.span_enrichers == ()
        assert registry.event_enrichers == ()
        assert len(registry) == 0

    def test_preserves_registration_order(self):
        registry = EnricherRegistry()
        first, second = (lambda node: None), (lambda node: None)
        registry.add_span_enricher(first)
        registry.add_span_enricher(second)
        assert registry.span_enrichers == (first, second)

    def test_rejects_non_callables(self, root):
        with pytest.raises(TypeError):
            root.add_span_enricher("not callable")
        with pytest.raises(TypeError):
            root.add_event_enricher(None)
