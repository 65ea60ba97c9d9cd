from __future__ import annotations

from typing import Any

from hrconsensus.core import (
    CandidateInfo,
    ComparisonReportGenerator,
    ConsensusEngine,
    CriteriaRegistry,
    DecisionHistoryLog,
    FeedbackStore,
    StaticCandidateDirectory,
    VoteStore,
)


class BrokenDirectory:
    def lookup(self, candidate_id: str) -> CandidateInfo | None:
        raise ConnectionError("directory offline")


def build_generator(directory: Any = None):
    criteria = CriteriaRegistry()
    feedback = FeedbackStore()
    votes = VoteStore()
    decisions = DecisionHistoryLog()
    engine = ConsensusEngine(criteria=criteria, feedback=feedback, votes=votes)
    generator = ComparisonReportGenerator(
        engine=engine,
        feedback=feedback,
        votes=votes,
        decisions=decisions,
        directory=directory,
    )
    return generator, feedback, votes, decisions


def submit(feedback: FeedbackStore, candidate_id: str, score: float) -> None:
    feedback.submit(
        {
            "candidate_id": candidate_id,
            "reviewer_id": "r1",
            "overall_score": score,
            "recommendation": "hire",
            "confidence": 3,
        }
    )


def test_compare_preserves_input_order_and_gathers_records():
    directory = StaticCandidateDirectory(
        {"c1": {"name": "Ada Lovelace", "job_title": "Backend Engineer"}}
    )
    generator, feedback, votes, decisions = build_generator(directory)
    submit(feedback, "c1", 90)
    submit(feedback, "c2", 60)
    votes.cast_vote({"candidate_id": "c2", "voter_id": "v1", "decision": "no-hire"})
    decisions.append({"candidate_id": "c1", "decided_by": "hm", "outcome": "moved to offer"})

    report = generator.compare(["c2", "c1"])

    assert [item.candidate_id for item in report] == ["c2", "c1"]
    c2, c1 = report
    assert c1.candidate_name == "Ada Lovelace"
    assert c1.job_title == "Backend Engineer"
    assert c1.consensus_metrics.average_score == 90
    assert [entry.outcome for entry in c1.decision_history] == ["moved to offer"]
    assert c2.candidate_name == "Candidate c2"
    assert c2.job_title == "Position"
    assert [vote.decision for vote in c2.votes] == ["no-hire"]
    assert len(c2.feedback) == 1


def test_missing_directory_uses_placeholder():
    generator, *_ = build_generator()

    (item,) = generator.compare(["x9"])

    assert item.candidate_name == "Candidate x9"
    assert item.consensus_metrics.total_feedbacks == 0


def test_failing_directory_does_not_fail_report():
    generator, feedback, *_ = build_generator(BrokenDirectory())
    submit(feedback, "c1", 75)

    report = generator.compare(["c1", "c2"])

    assert [item.candidate_name for item in report] == ["Candidate c1", "Candidate c2"]
    assert report[0].consensus_metrics.average_score == 75
