"""Dependency injection container for the consensus engine."""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import (
    ComparisonReportGenerator,
    ConsensusEngine,
    CriteriaRegistry,
    DecisionHistoryLog,
    FeedbackStore,
    StaticCandidateDirectory,
    VoteStore,
)
from .storage import open_journal


class ConsensusContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    criteria_journal = providers.Singleton(
        open_journal, config.storage.data_dir, "criteria"
    )
    feedback_journal = providers.Singleton(
        open_journal, config.storage.data_dir, "feedback"
    )
    votes_journal = providers.Singleton(
        open_journal, config.storage.data_dir, "votes"
    )
    decisions_journal = providers.Singleton(
        open_journal, config.storage.data_dir, "decisions"
    )

    criteria = providers.Singleton(CriteriaRegistry, journal=criteria_journal)
    feedback = providers.Singleton(FeedbackStore, journal=feedback_journal)
    votes = providers.Singleton(VoteStore, journal=votes_journal)
    decisions = providers.Singleton(DecisionHistoryLog, journal=decisions_journal)

    directory = providers.Singleton(
        StaticCandidateDirectory, entries=config.candidates
    )

    engine = providers.Singleton(
        ConsensusEngine,
        criteria=criteria,
        feedback=feedback,
        votes=votes,
        top_comments=config.consensus.top_comments.as_int(),
        comment_key_length=config.consensus.comment_key_length.as_int(),
    )

    comparison = providers.Factory(
        ComparisonReportGenerator,
        engine=engine,
        feedback=feedback,
        votes=votes,
        decisions=decisions,
        directory=directory,
    )


DEFAULT_SETTINGS: dict = {
    "consensus": {"top_comments": 5, "comment_key_length": 50},
}


def create_container(*, settings: dict | None = None, seed: bool = True) -> ConsensusContainer:
    """Instantiate container with optional overrides.

    When ``seed`` is set, a criteria registry whose journal has never been
    written is populated from the ``criteria`` setting or the built-in defaults.
    """

    container = ConsensusContainer()
    container.config.from_dict(DEFAULT_SETTINGS)

    if isinstance(settings, dict) and settings:
        overrides = {key: value for key, value in settings.items() if key != "criteria"}
        if overrides:
            container.config.from_dict(overrides)

    if seed:
        criteria_seed = settings.get("criteria") if isinstance(settings, dict) else None
        container.criteria().seed(criteria_seed)

    return container
