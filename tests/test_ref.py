"""Tests for Ref, ref(), is_ref(), and unref()."""

from refx import Ref, Runtime, effect, is_reactive, is_ref, ref, unref


class TestRef:
    def test_get_set(self):
        r = ref(1)
        assert r.value == 1
        r.value = 2
        assert r.value == 2

    def test_tracks_and_triggers(self):
        r = ref("hello")
        log = []
        effect(lambda: log.append(r.value))
        r.value = "world"
        assert log == ["hello", "world"]

    def test_dedup(self):
        r = ref(5)
        log = []
        effect(lambda: log.append(r.value))
        r.value = 5
        assert log == [5]

    def test_object_payload_is_reactive(self):
        r = ref({"user": {"name": "Alice", "age": 25}})
        log = []
        effect(lambda: log.append((r.value.user.name, r.value.user.age)))
        r.value.user.name = "Bob"
        r.value.user.age = 30
        assert log == [("Alice", 25), ("Bob", 25), ("Bob", 30)]

    def test_replaced_object_payload_is_reactive(self):
        r = ref(None)
        r.value = {"n": 1}
        assert is_reactive(r.value)

    def test_peek_is_untracked(self):
        rt = Runtime()
        r = ref(1, runtime=rt)
        log = []
        effect(lambda: log.append(r.peek()), runtime=rt)
        r.value = 2
        assert log == [1]

    def test_helpers(self):
        r = ref(3)
        assert isinstance(r, Ref)
        assert is_ref(r)
        assert not is_ref(3)
        assert unref(r) == 3
        assert unref(3) == 3

    def test_repr(self):
        assert repr(ref(5)) == "Ref(5)"
