from __future__ import annotations

import pytest

from rollcall.domain.attendance.matching import (
    find_best_match,
    levenshtein,
    match_participants,
    name_similarity,
    normalized_query_matches,
    status_for_score,
)
from rollcall.domain.model import (
    AssociationStatus,
    AutoMatchedAssociation,
    MatchReason,
    PendingAssociation,
    RegistrationCandidate,
    SuggestedAssociation,
)
from tests.helpers.attendance import at, make_participant


@pytest.mark.parametrize(
    ("left", "right", "expected"),
    [("kitten", "sitting", 3), ("", "abc", 3), ("abc", "abc", 0), ("flaw", "lawn", 2)],
)
def test_levenshtein(left: str, right: str, expected: int) -> None:
    assert levenshtein(left, right) == expected
    assert levenshtein(right, left) == expected


@pytest.mark.parametrize(
    ("left", "right", "expected"),
    [
        ("João Pereira", "João Pereira", 100),
        ("João Pereira", "joao PEREIRA", 100),
        ("Maria Silva Santos", "Maria Santos", 95),
        ("Maria Silva", "Maria S.", 85),
        ("Maria Silva", "Maria Oliveira", 70),
        ("Li", "Li Wang", 29),
    ],
)
def test_name_similarity(left: str, right: str, expected: int) -> None:
    assert name_similarity(left, right) == expected


def test_name_similarity_is_low_for_unrelated_names() -> None:
    assert name_similarity("Ana", "Bruno") < 60


@pytest.mark.parametrize(
    ("left", "right"),
    [("\U0001f600", "..."), ("\U0001f4f1", "Ana Souza"), ("Ana Souza", "--"), ("", "")],
)
def test_name_similarity_is_zero_without_letters(left: str, right: str) -> None:
    assert name_similarity(left, right) == 0


def test_symbol_only_name_stays_pending() -> None:
    noise = RegistrationCandidate(id=20, display_name="...")
    participants = [make_participant("\U0001f600", [(at(19, 0), at(20, 0))])]

    match = find_best_match(participants[0], [noise])
    associations = match_participants(participants, [noise])

    assert match.candidate is None
    assert isinstance(associations["\U0001f600"], PendingAssociation)


@pytest.mark.parametrize(
    ("score", "expected"),
    [
        (100, AssociationStatus.AUTO_MATCHED),
        (90, AssociationStatus.AUTO_MATCHED),
        (89, AssociationStatus.SUGGESTED),
        (60, AssociationStatus.SUGGESTED),
        (59, AssociationStatus.PENDING),
    ],
)
def test_status_for_score(score: int, expected: AssociationStatus) -> None:
    assert status_for_score(score) is expected


def test_find_best_match_prefers_identical_email(
    candidates: list[RegistrationCandidate],
) -> None:
    participant = make_participant(
        "Cadu",
        [(at(19, 0), at(20, 0))],
        email=" CARLOS@example.com",
    )

    match = find_best_match(participant, candidates)

    assert match.candidate is not None
    assert match.candidate.id == 3
    assert match.score == 100
    assert match.reason is MatchReason.IDENTICAL_EMAIL


def test_find_best_match_without_candidates() -> None:
    participant = make_participant("Ana", [(at(19, 0), at(20, 0))])

    match = find_best_match(participant, [])

    assert match.candidate is None
    assert match.score == 0


def test_match_participants_classifies_by_score(
    candidates: list[RegistrationCandidate],
) -> None:
    participants = [
        make_participant("Zzz Unknown", [(at(19, 0), at(20, 0))]),
        make_participant("joão pereira", [(at(19, 0), at(20, 0))]),
        make_participant("Maria S.", [(at(19, 0), at(20, 0))]),
    ]

    associations = match_participants(participants, candidates)

    joao = associations["joão pereira"]
    assert isinstance(joao, AutoMatchedAssociation)
    assert joao.candidate.id == 1
    assert joao.reason is MatchReason.IDENTICAL_NAME

    maria = associations["Maria S."]
    assert isinstance(maria, SuggestedAssociation)
    assert maria.candidate.id == 2
    assert maria.score == 85

    assert isinstance(associations["Zzz Unknown"], PendingAssociation)


@pytest.mark.parametrize("reverse", [False, True])
def test_conflict_goes_to_higher_score(reverse: bool) -> None:
    contested = RegistrationCandidate(id=10, display_name="Maria Silva Santos")
    fallback = RegistrationCandidate(id=11, display_name="Maria Souza Lima")
    participants = [
        make_participant("Maria Santos", [(at(19, 0), at(20, 0))]),
        make_participant("Maria Souza", [(at(19, 0), at(20, 0))]),
    ]
    if reverse:
        participants.reverse()

    associations = match_participants(participants, [contested, fallback])

    winner = associations["Maria Santos"]
    assert isinstance(winner, AutoMatchedAssociation)
    assert winner.candidate.id == 10
    assert winner.score == 95

    runner_up = associations["Maria Souza"]
    assert isinstance(runner_up, SuggestedAssociation)
    assert runner_up.candidate.id == 11
    assert runner_up.score == 70


def test_conflict_without_fallback_leaves_pending() -> None:
    contested = RegistrationCandidate(id=10, display_name="Maria Silva Santos")
    participants = [
        make_participant("Maria Santos", [(at(19, 0), at(20, 0))]),
        make_participant("Maria Souza", [(at(19, 0), at(20, 0))]),
    ]

    associations = match_participants(participants, [contested])

    assert isinstance(associations["Maria Souza"], PendingAssociation)


def test_every_registration_is_claimed_at_most_once(
    candidates: list[RegistrationCandidate],
) -> None:
    participants = [
        make_participant(name, [(at(19, 0), at(20, 0))])
        for name in ("João Pereira", "Joao Pereira", "João P.", "Maria Silva")
    ]

    associations = match_participants(participants, candidates)

    claimed = [
        association.candidate.id
        for association in associations.values()
        if isinstance(association, AutoMatchedAssociation | SuggestedAssociation)
    ]
    assert len(claimed) == len(set(claimed))


@pytest.mark.parametrize(
    ("query", "expected"),
    [("joao", True), ("PEREIRA", True), ("99990001", True), ("xyz", False)],
)
def test_normalized_query_matches(
    candidates: list[RegistrationCandidate],
    query: str,
    expected: bool,
) -> None:
    assert normalized_query_matches(candidates[0], query) is expected
