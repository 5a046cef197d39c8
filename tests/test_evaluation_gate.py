"""Tests for the evaluation threshold and reward-event policy."""
from datetime import timedelta

import pytest

from socratix.graph.evaluation_gate import (
    challenge_events,
    evaluation_events,
    session_created_events,
    session_points,
    should_evaluate,
)
from socratix.models.conversation import Session, Turn
from socratix.models.evaluation import Evaluation
from socratix.models.rewards import RewardEvent


def _turns(user: int, ai: int):
    turns = []
    sequence = 1
    for sender, count in (("user", user), ("ai", ai)):
        for _ in range(count):
            turns.append(Turn(
                id=str(sequence),
                session_id="s1",
                content="...",
                sender=sender,
                kind="answer" if sender == "user" else "question",
                sequence=sequence,
            ))
            sequence += 1
    return turns


def _session(**overrides):
    values = {"id": "s1", "user_id": "u1", "topic": "Photosynthesis"}
    values.update(overrides)
    return Session(**values)


def _evaluation(score: int, completed: bool = True):
    return Evaluation(completed=completed, confidence_score=score, summary="Summary")


def _ids(events):
    return [(e.kind, e.reward_id) for e in events if e.kind != "points"]


class TestShouldEvaluate:
    @pytest.mark.parametrize("user, ai, expected", [
        (0, 0, False),
        (4, 0, False),
        (4, 20, False),
        (5, 0, True),
        (5, 6, True),
        (7, 1, True),
    ])
    def test_only_user_turns_count(self, user, ai, expected):
        assert should_evaluate(_turns(user, ai)) is expected


class TestEvaluationEvents:
    def test_high_score_awards_badge_and_mastery(self):
        session = _session(created_at=_session().created_at - timedelta(hours=1))
        events = evaluation_events(session, _evaluation(85), completed_topics=["Photosynthesis"])
        assert ("badge", "deep_learner") in _ids(events)
        assert ("achievement", "topic_mastery") in _ids(events)
        mastery = next(e for e in events if e.reward_id == "topic_mastery")
        assert mastery.topic == "Photosynthesis"

    def test_score_below_eighty_awards_neither(self):
        events = evaluation_events(_session(), _evaluation(79), completed_topics=[])
        assert ("badge", "deep_learner") not in _ids(events)
        assert ("achievement", "topic_mastery") not in _ids(events)

    @pytest.mark.parametrize("score, points", [(0, 10), (79, 17), (85, 18), (100, 20)])
    def test_points_always_awarded(self, score, points):
        events = evaluation_events(_session(), _evaluation(score, completed=False), completed_topics=[])
        assert events[-1] == RewardEvent.award_points(points)
        assert session_points(score) == points

    def test_knowledge_seeker_needs_three_distinct_topics(self):
        session = _session()
        two = evaluation_events(session, _evaluation(50), ["A", "B", "B"])
        three = evaluation_events(session, _evaluation(50), ["A", "B", "C"])
        assert ("badge", "knowledge_seeker") not in _ids(two)
        assert ("badge", "knowledge_seeker") in _ids(three)

    def test_quick_study_for_sessions_completed_within_five_minutes(self):
        session = _session()
        quick = evaluation_events(session, _evaluation(60), [], now=session.created_at + timedelta(minutes=4))
        slow = evaluation_events(session, _evaluation(60), [], now=session.created_at + timedelta(minutes=6))
        assert ("badge", "quick_study") in _ids(quick)
        assert ("badge", "quick_study") not in _ids(slow)


def test_first_session_badge_only_for_first_session():
    assert session_created_events(1) == [RewardEvent.badge("first_session")]
    assert session_created_events(2) == []


def test_challenge_events():
    assert challenge_events(70) == [RewardEvent.award_points(70)]
    assert challenge_events(90) == [RewardEvent.award_points(90), RewardEvent.badge("quiz_master")]


class TestEvaluationGate:
    async def test_apply_persists_evaluation_and_issues_rewards(self, store, gate, ledger):
        session = await store.create_session("u1", "Photosynthesis")
        evaluation = Evaluation(completed=True, confidence_score=85, summary="Good", feedback="More depth")

        updated = await gate.apply(session, evaluation)

        assert updated.completed is True
        assert updated.confidence_score == 85
        assert updated.summary == "Good"
        assert updated.feedback == "More depth"
        assert (await store.get_session(session.id)).confidence_score == 85
        assert "deep_learner" in [b.id for b in await ledger.get_badges("u1")]
        assert [a.topic for a in await ledger.get_achievements("u1")] == ["Photosynthesis"]
        assert await ledger.get_points("u1") == 18

    async def test_knowledge_seeker_after_third_completed_topic(self, store, gate, ledger):
        for topic in ("Algebra", "Gravity", "Photosynthesis"):
            session = await store.create_session("u1", topic)
            await gate.apply(session, Evaluation(completed=True, confidence_score=40, summary="ok"))
        assert "knowledge_seeker" in [b.id for b in await ledger.get_badges("u1")]

    async def test_reward_failure_does_not_undo_evaluation(self, store, gate, ledger, monkeypatch):
        async def broken(*args, **kwargs):
            raise RuntimeError("kv down")

        monkeypatch.setattr(ledger, "apply", broken)
        session = await store.create_session("u1", "Gravity")
        updated = await gate.apply(session, Evaluation(completed=True, confidence_score=90, summary="ok"))
        assert updated.completed is True
        assert (await store.get_session(session.id)).completed is True

    async def test_first_session_badge(self, store, gate, ledger):
        first = await store.create_session("u1", "Algebra")
        await gate.on_session_created(first)
        second = await store.create_session("u1", "Gravity")
        await gate.on_session_created(second)
        assert [b.id for b in await ledger.get_badges("u1")] == ["first_session"]
