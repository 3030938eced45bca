import pytest

from talk.talk_datatypes import Value, Delegate, EvalError
from talk.talk_interpreter import Assign, FieldPath, Literal
from talk.talk_runtime import TalkRunner


def assert_ok(res, expected=None):
    assert res.status == "success", f"expected success, got {res}"
    if expected is not None:
        assert res.value == expected, f"expected {expected!r}, got {res.value!r}"


class Player:
    """Host-side game state that knows nothing about TALK."""
    def __init__(self):
        self.hp = 100
        self.name = "hero"


class PlayerHost(Delegate):
    """Exposes a Player to scripts without copying it into a namespace."""
    def __init__(self, player):
        self.player = player
        self._slots = {}

    def get(self, name):
        if name == "hp":
            return self._slot(name, Value.new_integer(self.player.hp))
        if name == "name":
            return self._slot(name, Value.new_text(self.player.name))
        raise EvalError(f"Player has no field '{name}'")

    def _slot(self, name, fresh):
        # Keep one live Value per field so results stay stable.
        slot = self._slots.get(name)
        if slot is None:
            self._slots[name] = slot = fresh
        else:
            slot.assign(fresh)
        return slot

    def set(self, name, value):
        if name == "hp":
            self.player.hp = value.into_integer()
        elif name == "name":
            self.player.name = value.data
        else:
            raise EvalError(f"Player has no field '{name}'")


def test_host_fields_read_through_runner():
    runner = TalkRunner(host_object=PlayerHost(Player()))
    assert_ok(runner.handle(FieldPath(["hp"])), Value.new_integer(100))
    assert_ok(runner.handle(FieldPath(["name"])), Value.new_text("hero"))
    assert runner.root.fields == {}


def test_host_set_through_namespace():
    player = Player()
    runner = TalkRunner(host_object=PlayerHost(player))
    runner.root.set("hp", Value.new_integer(80))
    assert player.hp == 80


def test_assignment_through_host_slot():
    player = Player()
    host = PlayerHost(player)
    runner = TalkRunner(host_object=host)
    res = runner.handle(Assign(FieldPath(["hp"]), Literal(Value.new_integer(5))))
    assert_ok(res, Value.new_integer(5))
    assert player.hp == 5
    assert res.value is host._slots["hp"]


def test_assignment_rejected_by_host_surfaces():
    player = Player()
    runner = TalkRunner(host_object=PlayerHost(player))
    res = runner.handle(Assign(FieldPath(["hp"]), Literal(Value.new_text("full"))))
    assert res.status == "error"
    assert res.error_message == "Integer value expected, got String full"
    assert player.hp == 100


def test_host_errors_surface_unmodified():
    runner = TalkRunner(host_object=PlayerHost(Player()))
    res = runner.handle(FieldPath(["mana"]))
    assert res.status == "error"
    assert res.error_message == "Player has no field 'mana'"


def test_host_type_errors_surface():
    host = PlayerHost(Player())
    runner = TalkRunner(host_object=host)
    with pytest.raises(EvalError, match="Integer value expected, got String lots"):
        runner.root.set("hp", Value.new_text("lots"))


def test_host_is_never_empty_by_default():
    runner = TalkRunner(host_object=PlayerHost(Player()))
    assert runner.root.is_empty() is False
    assert runner.root.delegate is runner.host_object
