"""Tests for intervention counters, category labels and listing filters."""

from datetime import datetime, timedelta, timezone

import pytest

from modconsole.datatypes.message_datatypes import Message, SenderChannel
from modconsole.interventions.intervention_summary import (
    category_label,
    filter_interventions,
    summarize_interventions,
)
from modconsole.interventions.message_filters import SenderFilter, filter_messages, paginate_messages

NOW = datetime(2024, 6, 15, 10, 0, tzinfo=timezone.utc)


def flagged(mid, when, category="spam", intervened=True, body="buy now", pid="p1", group="g1"):
    return Message(
        message_id=mid,
        community_id="c1",
        group_id=group,
        participant_id=pid,
        sender_channel=SenderChannel.MEMBER,
        body=body,
        created_at=when,
        intervention_category=category,
        intervened=intervened,
    )


class TestSummary:

    def test_counts_and_success_rate(self):
        messages = [
            flagged("1", NOW - timedelta(hours=1)),
            flagged("2", NOW - timedelta(days=2), category="profanity", intervened=False),
            flagged("3", NOW - timedelta(days=20)),
            flagged("4", NOW - timedelta(minutes=5), category=None),
        ]

        summary = summarize_interventions(messages, NOW)

        assert summary.total == 3
        assert summary.categories == {"profanity": 1, "spam": 2}
        assert summary.today_count == 1
        assert summary.week_count == 2
        assert summary.success_rate == 67

    def test_naive_now_is_read_as_utc(self):
        messages = [flagged("1", NOW - timedelta(hours=1)), flagged("2", NOW - timedelta(days=2))]

        summary = summarize_interventions(messages, NOW.replace(tzinfo=None))

        assert summary.today_count == 1
        assert summary.week_count == 2

    def test_empty_summary(self):
        summary = summarize_interventions([], NOW)

        assert summary.total == 0
        assert summary.categories == {}
        assert summary.success_rate == 0

    def test_category_labels(self):
        assert category_label("hate_speech") == "Hate Speech"
        assert category_label("medical_verification") == "Medical Verification"
        assert category_label("off_topic_rant") == "Off Topic Rant"
        assert category_label(None) == "Helpful Response"

    def test_filter_by_category_and_search(self):
        messages = [
            flagged("1", NOW - timedelta(hours=3), body="cheap pills"),
            flagged("2", NOW - timedelta(hours=2), category="profanity", body="darn"),
            flagged("3", NOW - timedelta(hours=1), body="hello", pid="p2"),
        ]

        assert [m.message_id for m in filter_interventions(messages, "spam")] == ["3", "1"]
        assert [m.message_id for m in filter_interventions(messages, "all", search="PILLS")] == ["1"]
        assert [
            m.message_id
            for m in filter_interventions(messages, search="maria", participant_names={"p2": "Maria"})
        ] == ["3"]


class TestMessageListing:

    def _messages(self):
        return [
            flagged("m1", NOW - timedelta(minutes=3), category=None, body="hi all", group="g1"),
            Message(
                message_id="b1",
                community_id="c1",
                group_id="g2",
                participant_id=None,
                sender_channel=SenderChannel.COMMUNITY_BOT,
                body="welcome",
                created_at=NOW - timedelta(minutes=2),
            ),
            flagged("m2", NOW - timedelta(minutes=1), category=None, body="morning", group="g2"),
        ]

    def test_sender_filter(self):
        messages = self._messages()

        assert [m.message_id for m in filter_messages(messages, SenderFilter.MEMBERS)] == ["m2", "m1"]
        assert [m.message_id for m in filter_messages(messages, SenderFilter.BOTS)] == ["b1"]
        assert len(filter_messages(messages)) == 3

    def test_search_matches_group_name(self):
        found = filter_messages(self._messages(), search="garden", group_names={"g2": "Garden Club"})

        assert [m.message_id for m in found] == ["m2", "b1"]

    def test_pagination(self):
        page = paginate_messages(self._messages(), page=2, per_page=2)

        assert [m.message_id for m in page.items] == ["m1"]
        assert page.total == 3
        assert page.page_count == 2

    def test_page_below_one_and_past_end(self):
        messages = self._messages()

        assert paginate_messages(messages, page=0, per_page=2).page == 1
        past_end = paginate_messages(messages, page=5, per_page=2)
        assert past_end.items == ()
        assert past_end.total == 3

    def test_invalid_page_size(self):
        with pytest.raises(ValueError):
            paginate_messages([], per_page=0)
