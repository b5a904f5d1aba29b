"""Tests for WidgetModel events, comm sync and the molecule models."""

from __future__ import annotations

import pytest

from nbmolviz2d.comm import LoopbackComm
from nbmolviz2d.models import MoleculeModel, NodesModel, WidgetModel


class Recorder:
    def __init__(self):
        self.calls: list[tuple] = []

    def __call__(self, *args):
        self.calls.append(args)


class TestSetAndEvents:
    def test_set_fires_attribute_then_change(self):
        model = WidgetModel({"a": 1})
        order = []
        model.on("change:a", lambda m, v: order.append(("change:a", v)))
        model.on_change(lambda m: order.append(("change",)))

        assert model.set("a", 2) is True
        assert order == [("change:a", 2), ("change",)]
        assert model.get("a") == 2

    def test_equal_value_fires_nothing(self):
        model = WidgetModel({"a": {"x": [1, 2]}})
        rec = Recorder()
        model.on_change(rec)
        assert model.set("a", {"x": [1, 2]}) is False
        assert rec.calls == []

    def test_force_fires_for_equal_value(self):
        model = WidgetModel({"a": 1})
        rec = Recorder()
        model.on_change(rec)
        assert model.set("a", 1, force=True) is True
        assert len(rec.calls) == 1

    def test_set_dict_fires_one_change(self):
        model = WidgetModel()
        rec = Recorder()
        model.on_change(rec)
        model.set({"a": 1, "b": 2})
        assert len(rec.calls) == 1
        assert model.get("b") == 2

    def test_unsubscribe(self):
        model = WidgetModel()
        rec = Recorder()
        unsubscribe = model.on_change(rec)
        unsubscribe()
        model.set("a", 1)
        assert rec.calls == []

    def test_off_unknown_handler_is_noop(self):
        model = WidgetModel()
        model.off("change", lambda m: None)

    def test_handler_may_unsubscribe_during_trigger(self):
        model = WidgetModel()
        calls = []

        def once(m):
            calls.append(1)
            unsubscribe()

        unsubscribe = model.on_change(once)
        model.set("a", 1)
        model.set("a", 2)
        assert calls == [1]


class TestCommSync:
    def test_save_sends_unsaved_state(self):
        kernel, view_end = LoopbackComm.pair()
        received = []
        kernel.on_msg(received.append)
        model = WidgetModel({"a": 1}, comm=view_end)

        model.set("a", 2)
        model.set("b", 3)
        sent = model.save()

        assert sent == {"a": 2, "b": 3}
        assert received == [{"method": "update", "state": {"a": 2, "b": 3}}]

    def test_save_with_nothing_changed_sends_nothing(self):
        kernel, view_end = LoopbackComm.pair()
        received = []
        kernel.on_msg(received.append)
        model = WidgetModel(comm=view_end)
        assert model.save() == {}
        assert received == []

    def test_remote_update_applies_without_echo(self):
        kernel, view_end = LoopbackComm.pair()
        model = WidgetModel({"a": 1}, comm=view_end)
        rec = Recorder()
        model.on("change:a", rec)

        kernel.send({"method": "update", "state": {"a": 5}})

        assert model.get("a") == 5
        assert rec.calls == [(model, 5)]
        assert model.save() == {}

    def test_custom_message_triggers_msg_custom(self):
        kernel, view_end = LoopbackComm.pair()
        model = WidgetModel(comm=view_end)
        rec = Recorder()
        model.on("msg:custom", rec)
        kernel.send({"method": "custom", "content": {"event": "ping"}})
        assert rec.calls == [({"event": "ping"},)]

    def test_unknown_method_ignored(self):
        kernel, view_end = LoopbackComm.pair()
        model = WidgetModel({"a": 1}, comm=view_end)
        kernel.send({"method": "display"})
        assert model.get("a") == 1

    def test_send_wraps_custom_envelope(self):
        kernel, view_end = LoopbackComm.pair()
        received = []
        kernel.on_msg(received.append)
        WidgetModel(comm=view_end).send({"event": "ready"})
        assert received == [{"method": "custom", "content": {"event": "ready"}}]

    def test_send_without_comm_raises(self):
        model = WidgetModel()
        assert not model.can_send
        with pytest.raises(RuntimeError, match="no comm"):
            model.send({"event": "ready"})

    def test_save_without_comm_clears_unsaved(self):
        model = WidgetModel()
        model.set("a", 1)
        assert model.save() == {"a": 1}
        assert model.save() == {}


class TestLoopbackComm:
    def test_serialize_turns_tuples_into_lists(self):
        kernel, view_end = LoopbackComm.pair()
        received = []
        view_end.on_msg(received.append)
        kernel.send({"bond": (0, 1)})
        assert received == [{"bond": [0, 1]}]

    def test_without_serialize_passes_objects(self):
        kernel, view_end = LoopbackComm.pair(serialize=False)
        received = []
        view_end.on_msg(received.append)
        payload = {"bond": (0, 1)}
        kernel.send(payload)
        assert received[0] is payload

    def test_unpaired_send_is_recorded_and_dropped(self):
        comm = LoopbackComm()
        comm.send({"a": 1})
        assert comm.sent == [{"a": 1}]


class TestMoleculeModels:
    def test_defaults(self):
        model = MoleculeModel()
        assert model.graph == {"nodes": [], "links": []}
        assert model.get("clicked_atom_index") == -1
        assert model.get("highlighted_atoms") == []
        assert model.get("id").startswith("molviz2d_")

    def test_explicit_id_kept(self):
        assert MoleculeModel({"id": "mol"}).get("id") == "mol"

    def test_defaults_not_shared(self):
        a, b = MoleculeModel(), MoleculeModel()
        a.graph["nodes"].append({"id": 1})
        assert b.graph["nodes"] == []

    def test_state_is_a_copy(self, molecule):
        model = MoleculeModel({"graph": molecule})
        state = model.state()
        state["graph"]["nodes"].clear()
        assert len(model.graph["nodes"]) == 3

    def test_nodes_model_select(self):
        nodes = NodesModel()
        rec = Recorder()
        nodes.on("change:clicked_atom_index", rec)
        nodes.select(2)
        assert rec.calls == [(nodes, 2)]

    def test_nodes_model_keeps_record_list_identity(self, molecule):
        records = molecule["nodes"]
        assert NodesModel({"nodes": records}).get("nodes") is records
