from __future__ import annotations

import pytest

from adaptive_interview.scoring import (
    aggregate_numeric,
    evaluate_answer,
    feedback_text,
    round_half_up,
)

KEYWORDS = ["scope", "hoisting", "block"]


def _words(n: int) -> str:
    return " ".join(["word"] * n)


def test_round_half_up_rounds_halves_away_from_even():
    assert round_half_up(55.5) == 56
    assert round_half_up(54.5) == 55
    assert round_half_up(38.4) == 38
    assert round_half_up(0) == 0


def test_two_of_three_keywords_short_single_sentence():
    result = evaluate_answer("Hoisting moves a function scoped variable to the top", KEYWORDS)

    assert result.matched_keywords == ("scope", "hoisting")
    assert result.missed_keywords == ("block",)
    assert result.keyword_score == 67
    assert result.word_count == 9
    # round(0.5*67 + 0.3*40 + 0.2*50) = round(55.5)
    assert result.score == 56
    assert result.evaluation_method == "rules"


def test_keyword_match_is_plain_substring():
    # "scoped" covers "scope", but "hoisted" does not cover "hoisting"
    result = evaluate_answer("It's a function scoped variable that gets hoisted", KEYWORDS)

    assert result.matched_keywords == ("scope",)
    assert set(result.missed_keywords) == {"hoisting", "block"}
    assert result.keyword_score == 33
    assert result.word_count == 8
    # round(0.5*33 + 0.3*40 + 0.2*50) = round(38.5)
    assert result.score == 39


def test_keywords_are_case_insensitive():
    result = evaluate_answer("BLOCK SCOPE and Hoisting.", ["Scope", "HOISTING", "block"])
    assert result.keyword_score == 100
    assert result.missed_keywords == ()


def test_empty_answer_gets_floor_score():
    result = evaluate_answer("", KEYWORDS)
    assert result.word_count == 0
    assert result.keyword_score == 0
    assert result.matched_keywords == ()
    assert result.missed_keywords == tuple(KEYWORDS)
    # only the unstructured half credit remains
    assert result.score == 10
    assert "needs significant improvement" in result.feedback


def test_none_answer_is_treated_as_empty():
    assert evaluate_answer(None, KEYWORDS) == evaluate_answer("", KEYWORDS)


def test_no_expected_keywords_scores_zero_coverage():
    result = evaluate_answer("A perfectly fine answer. With two sentences.", [])
    assert result.keyword_score == 0
    assert result.matched_keywords == () and result.missed_keywords == ()


def test_blank_keywords_are_ignored():
    result = evaluate_answer("block scope", ["", "  ", "block"])
    assert result.keyword_score == 100


@pytest.mark.parametrize(
    "n_words, expected_length",
    [(0, 0), (4, 0), (5, 40), (14, 40), (15, 60), (29, 60), (30, 100), (500, 100), (501, 70)],
)
def test_length_bands(n_words, expected_length):
    result = evaluate_answer(_words(n_words), [])
    # no keywords, no punctuation: score is 0.3*length + 10
    assert result.score == round_half_up((3 * expected_length + 100) / 10)


def test_full_marks_for_complete_structured_answer():
    answer = (
        "Hoisting moves declarations to the top of their scope before execution. "
        "Variables declared with let are block scoped and sit in a temporal dead zone "
        "until the declaration runs, so reading them early throws an error instead of undefined!"
    )
    result = evaluate_answer(answer, KEYWORDS)
    assert result.word_count >= 30
    assert result.score == 100
    assert result.strengths == (
        "Good coverage of key concepts",
        "Answer has good depth and detail",
        "Well-structured response",
    )
    assert result.weaknesses == ()
    assert result.suggestions == ()
    assert result.feedback.startswith("Excellent answer!")


def test_short_unstructured_answer_gets_suggestions():
    result = evaluate_answer("no idea", KEYWORDS)
    assert "Many key concepts were not addressed" in result.weaknesses
    assert "Answer could be more detailed" in result.weaknesses
    assert "Consider structuring your answer with multiple points" in result.weaknesses
    assert result.suggestions == (
        "Consider discussing: scope, hoisting, block",
        "Provide more examples and explanations",
        "Break your answer into clear points or steps",
    )


def test_overlong_answer_is_asked_to_be_concise():
    answer = ". ".join(_words(10) for _ in range(60)) + "."
    result = evaluate_answer(answer, [])
    assert result.word_count == 600
    assert "Answer could be more concise" in result.weaknesses
    assert "Trim the answer to the most relevant points" in result.suggestions


def test_missed_keyword_suggestion_lists_at_most_three():
    result = evaluate_answer("nothing relevant", ["a1", "b2", "c3", "d4"])
    assert result.suggestions[0] == "Consider discussing: a1, b2, c3"


ANSWERS = [
    "",
    "scope",
    "Block scope! Hoisting? Yes.",
    "SCOPE and BLOCK",
    "x " * 700,
    "Hoisting moves a function scoped variable to the top",
]


@pytest.mark.parametrize("answer", ANSWERS)
def test_score_bounds_and_keyword_partition(answer):
    result = evaluate_answer(answer, ["Scope", "hoisting", "Block"])
    assert 0 <= result.score <= 100
    assert 0 <= result.keyword_score <= 100
    matched = set(result.matched_keywords)
    missed = set(result.missed_keywords)
    assert matched.isdisjoint(missed)
    assert matched | missed == {"scope", "hoisting", "block"}


@pytest.mark.parametrize("answer", ANSWERS)
def test_evaluation_is_deterministic(answer):
    assert evaluate_answer(answer, KEYWORDS) == evaluate_answer(answer, KEYWORDS)


def test_adding_a_keyword_never_lowers_keyword_score():
    base = "functions have their own scope"
    before = evaluate_answer(base, KEYWORDS)
    after = evaluate_answer(base + " and block", KEYWORDS)
    assert after.keyword_score >= before.keyword_score
    assert after.keyword_score > before.keyword_score


@pytest.mark.parametrize(
    "score, opener",
    [
        (80, "Excellent answer!"),
        (60, "Good answer with room for improvement."),
        (40, "Decent attempt, but needs more depth."),
        (39, "This answer needs significant improvement."),
    ],
)
def test_feedback_text_bands(score, opener):
    text = feedback_text(score, ["Well-structured response"], ["Answer could be more detailed"])
    assert text.startswith(opener)
    assert "Strengths: Well-structured response." in text
    assert text.endswith("Areas to improve: Answer could be more detailed.")


def test_aggregate_numeric_skips_missing_values():
    rows = [{"score": 80}, {"score": None}, {"score": 40.0}, {}]
    assert aggregate_numeric(rows, "score") == pytest.approx(60.0)
    assert aggregate_numeric([{"score": None}], "score") is None
