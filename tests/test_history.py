"""Tests for history module."""

from chat_bridge.history import History, Message, SessionID

SID = SessionID(user=1, chat=2, model="gpt-4")


class TestSessionID:
    def test_structural_equality(self) -> None:
        assert SessionID(1, 2, "gpt-4") == SID
        assert hash(SessionID(1, 2, "gpt-4")) == hash(SID)
        assert SessionID(1, 2, "gpt-3.5-turbo") != SID

    def test_dict_roundtrip(self) -> None:
        assert SessionID.from_dict(SID.to_dict()) == SID


class TestHistory:
    def test_defaults(self) -> None:
        h = History(id=SID)
        assert h.prompt == ""
        assert h.log == []

    def test_add_keeps_order_and_duplicates(self) -> None:
        h = History(id=SID)
        h.add(Message("a", "1"))
        h.add(Message("b", "2"))
        h.add(Message("a", "1"))
        assert [m.user for m in h.log] == ["a", "b", "a"]

    def test_clear_keeps_prompt(self) -> None:
        h = History(id=SID, prompt="Be brief")
        h.add(Message("a", "1"))
        h.clear()
        assert h.log == []
        assert h.prompt == "Be brief"

    def test_set_prompt_reports_change(self) -> None:
        h = History(id=SID)
        assert h.set_prompt("Be brief") is True
        assert h.set_prompt("Be brief") is False
        assert h.prompt == "Be brief"

    def test_clone_is_independent(self) -> None:
        h = History(id=SID, prompt="p")
        h.add(Message("a", "1"))
        clone = h.clone()
        clone.add(Message("b", "2"))
        clone.prompt = "changed"
        assert len(h.log) == 1
        assert h.log[0] == Message("a", "1")
        assert h.prompt == "p"

    def test_clone_survives_original_clear(self) -> None:
        h = History(id=SID)
        h.add(Message("a", "1"))
        clone = h.clone()
        h.clear()
        assert clone.log == [Message("a", "1")]

    def test_from_dict_tolerates_missing_fields(self) -> None:
        h = History.from_dict({"id": SID.to_dict()})
        assert h.prompt == ""
        assert h.log == []
