"""
tests/test_dispatcher.py — Command Dispatcher Tests
====================================================
End-to-end through the dispatcher: name resolution against a refreshed
presence snapshot and the activity log, ledger writes on the shared
in-memory SQLite engine.
"""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from starledger.engine.commands import ChatUser
from starledger.engine.dispatcher import CommandDispatcher
from starledger.engine.results import StarResult, TemplateKey
from starledger.services import ledger_service
from starledger.services.activity_log import ActivityLog
from starledger.services.membership_service import MembershipTracker

CHANNEL = "somestreamer"

MOD = ChatUser(name="Mod", is_moderator=True)
BROADCASTER = ChatUser(name="Streamer", badges=frozenset({"broadcaster"}))
VIEWER = ChatUser(name="Viewer")


# Helper to run async tests without pytest-asyncio
def run_async(coro):
    """Run an async coroutine in a new event loop."""
    return asyncio.run(coro)


@pytest.fixture
def activity_log() -> ActivityLog:
    return ActivityLog([CHANNEL])


@pytest.fixture
def dispatcher(db_engine, activity_log) -> CommandDispatcher:
    """Dispatcher whose channel currently shows bob and bobby chatting."""
    payload = {
        "chatters": {
            "broadcaster": ["streamer"],
            "moderators": ["mod"],
            "vips": [],
            "staff": [],
            "admins": [],
            "viewers": ["bob", "carolyn"],
        },
    }
    tracker = MembershipTracker(
        db_engine,
        activity_log,
        lambda channel: f"https://chatters.test/{channel}",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)),
    )
    assert run_async(tracker.refresh(CHANNEL)) is True
    return CommandDispatcher(db_engine, tracker)


def _handle(dispatcher, text: str, user: ChatUser) -> StarResult | None:
    command, *params = text.split()
    return run_async(dispatcher.handle(command, params, user, CHANNEL))


def _stars(engine, name: str) -> dict[str, int] | None:
    record = ledger_service.get_record(engine, name, CHANNEL)
    return record.stars if record else None


# ---------------------------------------------------------------------------
# goldstar / greenstar / brownstar
# ---------------------------------------------------------------------------
class TestGiveStar:
    def test_moderator_gives_bulk_gold(self, dispatcher, db_engine):
        result = _handle(dispatcher, "goldstar bob 5", MOD)
        assert result.template == TemplateKey.GIVE_STAR
        assert result.user == "bob"
        assert result.active == "gold"
        assert result.amount == 5
        assert result.stars == {"gold": 5, "brown": 0, "green": 0, "silver": 0}
        assert _stars(db_engine, "bob")["gold"] == 5

    def test_viewer_gets_no_reply(self, dispatcher, db_engine):
        assert _handle(dispatcher, "goldstar bob 5", VIEWER) is None
        assert _stars(db_engine, "bob")["gold"] == 0

    def test_broadcaster_may_give(self, dispatcher):
        result = _handle(dispatcher, "greenstar bob", BROADCASTER)
        assert result.template == TemplateKey.GIVE_STAR
        assert result.active == "green"
        assert result.amount == 1

    def test_missing_target_says_no_star_even_to_viewers(self, dispatcher):
        assert _handle(dispatcher, "brownstar", VIEWER).template == TemplateKey.NO_STAR
        assert _handle(dispatcher, "brownstar", MOD).template == TemplateKey.NO_STAR

    def test_target_punctuation_stripped(self, dispatcher):
        result = _handle(dispatcher, "goldstar @bob,", MOD)
        assert result.user == "bob"

    def test_fuzzy_target(self, dispatcher, db_engine):
        result = _handle(dispatcher, "brownstar carolin", MOD)
        assert result.user == "carolyn"
        assert _stars(db_engine, "carolyn")["brown"] == 1

    def test_recent_talker_is_a_valid_target(self, dispatcher, activity_log, db_engine):
        activity_log.record_activity(CHANNEL, "Lurker")
        result = _handle(dispatcher, "goldstar lurker", MOD)
        assert result.template == TemplateKey.GIVE_STAR
        assert _stars(db_engine, "lurker")["gold"] == 1

    def test_ledger_known_user_is_a_valid_target(self, dispatcher, db_engine):
        ledger_service.increment(db_engine, "oldtimer", CHANNEL, "green", 2)
        result = _handle(dispatcher, "greenstar OldTimer", MOD)
        assert result.template == TemplateKey.GIVE_STAR
        assert result.user == "oldtimer"
        assert result.stars["green"] == 3

    def test_unknown_target_is_absent(self, dispatcher, db_engine):
        result = _handle(dispatcher, "goldstar zzzqqq", MOD)
        assert result.template == TemplateKey.ABSENT_USER
        assert result.user == "zzzqqq"
        assert _stars(db_engine, "zzzqqq") is None

    @pytest.mark.parametrize("amount", ["lots", "0", "2.5", "1_000", "\u0663"])
    def test_unusable_amount_gives_one(self, dispatcher, amount):
        result = _handle(dispatcher, f"goldstar bob {amount}", MOD)
        assert result.amount == 1
        assert result.stars["gold"] == 1

    def test_negative_amount_is_dropped(self, dispatcher, db_engine):
        assert _handle(dispatcher, "goldstar bob -3", MOD) is None
        assert _stars(db_engine, "bob")["gold"] == 0

    def test_store_failure_means_no_reply(self, dispatcher):
        with patch.object(ledger_service, "increment", side_effect=OperationalError("x", {}, None)):
            assert _handle(dispatcher, "goldstar bob", MOD) is None


# ---------------------------------------------------------------------------
# stars
# ---------------------------------------------------------------------------
class TestListStars:
    def test_never_seen_invoker_has_no_stars(self, dispatcher):
        result = _handle(dispatcher, "stars", ChatUser(name="alice"))
        assert result.template == TemplateKey.NO_USER

    def test_defaults_to_invoker(self, dispatcher, db_engine):
        ledger_service.increment(db_engine, "alice", CHANNEL, "silver", 2)
        result = _handle(dispatcher, "stars", ChatUser(name="Alice"))
        assert result.template == TemplateKey.LIST_STARS
        assert result.user == "alice"
        assert result.stars["silver"] == 2

    def test_fuzzy_target(self, dispatcher, db_engine):
        ledger_service.increment(db_engine, "carolyn", CHANNEL, "gold", 4)
        result = _handle(dispatcher, "stars caroline", VIEWER)
        assert result.user == "carolyn"
        assert result.stars["gold"] == 4

    def test_falls_back_to_literal_name(self, dispatcher, db_engine):
        ledger_service.increment(db_engine, "xavier", CHANNEL, "brown", 1)
        result = _handle(dispatcher, "stars xavier", VIEWER)
        assert result.template == TemplateKey.LIST_STARS
        assert result.user == "xavier"

    def test_present_user_with_empty_record(self, dispatcher):
        result = _handle(dispatcher, "stars bob", VIEWER)
        assert result.template == TemplateKey.LIST_STARS
        assert result.stars == {"gold": 0, "brown": 0, "green": 0, "silver": 0}


# ---------------------------------------------------------------------------
# reset
# ---------------------------------------------------------------------------
class TestReset:
    def test_reset_everything(self, dispatcher, db_engine):
        ledger_service.increment(db_engine, "bob", CHANNEL, "gold", 3)
        result = _handle(dispatcher, "reset bob", MOD)
        assert result.template == TemplateKey.RESET_SUCCESS
        assert result.active is None
        assert _stars(db_engine, "bob")["gold"] == 0

    def test_reset_single_color(self, dispatcher, db_engine):
        ledger_service.increment(db_engine, "bob", CHANNEL, "gold", 3)
        ledger_service.increment(db_engine, "bob", CHANNEL, "green", 1)
        result = _handle(dispatcher, "reset bob green", MOD)
        assert result.template == TemplateKey.RESET_SUCCESS
        assert result.active == "green"
        assert _stars(db_engine, "bob") == {"gold": 3, "brown": 0, "green": 0, "silver": 0}

    def test_nothing_to_reset(self, dispatcher):
        result = _handle(dispatcher, "reset bob", MOD)
        assert result.template == TemplateKey.RESET_FAIL
        assert result.user == "bob"

    @pytest.mark.parametrize("text", ["reset bob purple", "reset bob silver"])
    def test_invalid_color_is_silent(self, dispatcher, text):
        assert _handle(dispatcher, text, MOD) is None

    def test_viewer_is_silent(self, dispatcher, db_engine):
        ledger_service.increment(db_engine, "bob", CHANNEL, "gold", 3)
        assert _handle(dispatcher, "reset bob", VIEWER) is None
        assert _stars(db_engine, "bob")["gold"] == 3

    def test_missing_target_is_silent(self, dispatcher):
        assert _handle(dispatcher, "reset", MOD) is None

    def test_store_failure_reports_fail(self, dispatcher):
        with patch.object(
            ledger_service, "reset_category", side_effect=OperationalError("x", {}, None),
        ):
            assert _handle(dispatcher, "reset bob", MOD).template == TemplateKey.RESET_FAIL


# ---------------------------------------------------------------------------
# set
# ---------------------------------------------------------------------------
class TestSet:
    def test_set_existing_user(self, dispatcher, db_engine):
        result = _handle(dispatcher, "set bob gold 7", MOD)
        assert result.template == TemplateKey.SET_STARS
        assert result.user == "bob"
        assert result.active == "gold"
        assert result.stars == {"gold": 7}
        assert _stars(db_engine, "bob")["gold"] == 7

    def test_invalid_color_is_usage_hint_without_mutation(self, dispatcher, db_engine):
        with patch.object(ledger_service, "set_absolute") as set_absolute:
            result = _handle(dispatcher, "set bob purple 5", MOD)
        assert result.template == TemplateKey.SET_SYNTAX
        set_absolute.assert_not_called()
        assert _stars(db_engine, "bob") == {"gold": 0, "brown": 0, "green": 0, "silver": 0}

    @pytest.mark.parametrize(
        "text",
        [
            "set",
            "set bob",
            "set bob gold",
            "set bob gold -1",
            "set bob gold many",
            "set bob gold 1_000",
            "set bob gold \u0663",
        ],
    )
    def test_bad_arguments_are_usage_hint(self, dispatcher, text):
        assert _handle(dispatcher, text, MOD).template == TemplateKey.SET_SYNTAX

    def test_unknown_user_is_usage_hint_and_not_created(self, dispatcher, db_engine):
        result = _handle(dispatcher, "set nobody gold 3", MOD)
        assert result.template == TemplateKey.SET_SYNTAX
        assert _stars(db_engine, "nobody") is None

    def test_viewer_is_silent(self, dispatcher, db_engine):
        assert _handle(dispatcher, "set bob gold 7", VIEWER) is None
        assert _handle(dispatcher, "set bob purple 7", VIEWER) is None
        assert _stars(db_engine, "bob")["gold"] == 0


class TestUnknownCommand:
    def test_unknown_command_is_silent(self, dispatcher):
        assert _handle(dispatcher, "dance bob", MOD) is None
