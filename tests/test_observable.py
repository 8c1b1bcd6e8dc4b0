"""Tests for Observable, Atom and ObservableDict."""

import operator

from controllerkit import Atom, Observable, ObservableDict, autorun


class TestObservable:
    def test_get_set(self):
        o = Observable(42)
        assert o.get() == 42
        o.set(100)
        assert o.get() == 100

    def test_dedup(self):
        """Setting an equal value should not trigger observers."""
        o = Observable(42)
        log = []
        autorun(lambda: log.append(o.get()))
        assert log == [42]
        o.set(42)
        assert log == [42]  # no re-run

    def test_identity_equals_notifies_on_equal_object(self):
        o = Observable({"a": 1}, equals=operator.is_)
        log = []
        autorun(lambda: log.append(o.get()))
        o.set({"a": 1})
        assert len(log) == 2
        assert log[0] is not log[1]

    def test_notifies_observers(self):
        o = Observable("hello")
        log = []
        autorun(lambda: log.append(o.get()))
        assert log == ["hello"]
        o.set("world")
        assert log == ["hello", "world"]

    def test_repr(self):
        o = Observable(5)
        assert "Observable(5)" in repr(o)


class TestAtom:
    def test_report_changed_reruns_observer(self):
        atom = Atom()
        log = []

        def fn():
            atom.report_observed()
            log.append("run")

        autorun(fn)
        atom.report_changed()
        assert log == ["run", "run"]

    def test_untracked_read_registers_nothing(self):
        atom = Atom()
        atom.report_observed()
        assert "observers=0" in repr(atom)


class TestObservableDict:
    def test_basic_operations(self):
        d = ObservableDict({"a": 1, "b": 2})
        assert d["a"] == 1
        assert d.get("c", 99) == 99
        assert "a" in d
        assert len(d) == 2
        assert set(d) == {"a", "b"}
        assert bool(d) is True

    def test_equals_plain_dict(self):
        d = ObservableDict({"a": 1})
        assert d == {"a": 1}
        assert d != {"a": 2}
        assert d.to_dict() == {"a": 1}
        assert type(d.to_dict()) is dict

    def test_non_string_keys(self):
        marker = object()
        d = ObservableDict({1: "one", ("x", 2): "pair"})
        d[marker] = "sentinel"
        assert d[1] == "one"
        assert d[("x", 2)] == "pair"
        assert d[marker] == "sentinel"

    def test_key_reader_ignores_other_keys(self):
        d = ObservableDict({"a": 1, "b": 2})
        log = []
        autorun(lambda: log.append(d["a"]))
        d["b"] = 20
        assert log == [1]
        d["a"] = 10
        assert log == [1, 10]

    def test_contents_reader_sees_every_write(self):
        d = ObservableDict({"a": 1})
        log = []
        autorun(lambda: log.append(dict(d.items())))
        assert log == [{"a": 1}]
        d["b"] = 2
        assert log == [{"a": 1}, {"a": 1, "b": 2}]

    def test_missing_key_reader_sees_addition(self):
        d = ObservableDict()
        log = []
        autorun(lambda: log.append(d.get("late")))
        d["late"] = "here"
        assert log == [None, "here"]

    def test_same_object_is_not_a_change(self):
        value = ["x"]
        d = ObservableDict({"a": value})
        log = []
        autorun(lambda: log.append(d["a"]))
        d["a"] = value
        assert len(log) == 1

    def test_reader_of_both_atoms_runs_once_per_write(self):
        d = ObservableDict({"a": 1})
        log = []
        autorun(lambda: log.append((d["a"], len(d))))
        d["a"] = 2
        assert log == [(1, 1), (2, 1)]

    def test_pop_del_clear(self):
        d = ObservableDict({"a": 1, "b": 2})
        result = d.pop("a")
        assert result == 1
        assert "a" not in d
        assert d.pop("missing", "fallback") == "fallback"
        del d["b"]
        assert len(d) == 0
        d["x"] = 10
        d.clear()
        assert len(d) == 0

    def test_update(self):
        d = ObservableDict({"a": 1})
        log = []
        autorun(lambda: log.append(len(d)))
        d.update({"b": 2}, c=3)
        assert d["b"] == 2
        assert d["c"] == 3
        assert log == [1, 3]

    def test_setdefault(self):
        d = ObservableDict({"a": 1})
        assert d.setdefault("a", 99) == 1
        assert d.setdefault("b", 42) == 42
        assert d["b"] == 42

    def test_keys_values_items(self):
        d = ObservableDict({"a": 1, "b": 2})
        assert set(d.keys()) == {"a", "b"}
        assert set(d.values()) == {1, 2}
        assert set(d.items()) == {("a", 1), ("b", 2)}

    def test_splat_into_dict(self):
        d = ObservableDict({"a": 1})
        assert {**d, "b": 2} == {"a": 1, "b": 2}
