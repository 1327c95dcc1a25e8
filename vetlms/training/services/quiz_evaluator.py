"""
Quiz scoring. Pure functions: no database access, no side effects.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from courses.quiz import ANSWERS_PER_QUESTION
from training.exceptions import QuizValidationError, UnansweredQuestionsError

UNANSWERED = -1


@dataclass(frozen=True)
class QuizEvaluation:
    correct_count: int
    total_questions: int
    score: int
    passed: bool

    def to_dict(self):
        return {
            'correct': self.correct_count,
            'total': self.total_questions,
            'score': self.score,
            'passed': self.passed,
        }


def round_half_up(value):
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def percentage(correct, total):
    """Whole-number percentage, halves rounded up (2 of 3 -> 67, 1 of 8 -> 13)"""
    return int((Decimal(100) * correct / Decimal(total)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def evaluate_quiz(selected_answers, questions, pass_percentage):
    """
    Score a quiz submission.

    Args:
        selected_answers: one selected answer index per question, in question order;
            UNANSWERED or None marks a skipped question
        questions: sequence of QuizQuestion
        pass_percentage: minimum score to pass

    Raises:
        UnansweredQuestionsError: some question has no selection; nothing is scored
        QuizValidationError: selection count or an index is out of range
    """
    total = len(questions)
    if total == 0:
        raise QuizValidationError('Quiz has no questions')

    selected = list(selected_answers or [])
    if len(selected) != total:
        raise QuizValidationError(f'Expected {total} answers, got {len(selected)}')
    if any(answer is None or answer == UNANSWERED for answer in selected):
        raise UnansweredQuestionsError()

    correct = 0
    for question, answer in zip(questions, selected):
        if isinstance(answer, bool) or not isinstance(answer, int) or not 0 <= answer < ANSWERS_PER_QUESTION:
            raise QuizValidationError(f'Answer index {answer!r} is out of range')
        if answer == question.correct_answer_index:
            correct += 1

    score = percentage(correct, total)
    return QuizEvaluation(
        correct_count=correct,
        total_questions=total,
        score=score,
        passed=score >= pass_percentage,
    )
