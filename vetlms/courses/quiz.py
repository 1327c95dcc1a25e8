"""
Course quiz definitions.

A course stores its quiz as a JSON list on `courses.quiz_questions`; this module
turns that list into immutable `QuizQuestion`/`Quiz` values. There is no
separate quizzes table, so every reader goes through `Quiz.from_course`.
"""
from dataclasses import dataclass
import hashlib
import json

ANSWERS_PER_QUESTION = 4


@dataclass(frozen=True)
class QuizQuestion:
    prompt: str
    answers: tuple
    correct_answer_index: int

    @classmethod
    def from_dict(cls, data):
        """
        Build a question from its stored JSON form.

        Accepts both the stored snake_case keys and the camelCase keys the
        course editor posts (`question`, `answers`, `correctAnswerIndex`).

        Raises:
            ValueError: when the question is malformed
        """
        if not isinstance(data, dict):
            raise ValueError('Each quiz question must be an object')

        prompt = data.get('prompt', data.get('question'))
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValueError('Quiz question text is required')

        answers = data.get('answers')
        if not isinstance(answers, (list, tuple)) or len(answers) != ANSWERS_PER_QUESTION:
            raise ValueError(f'Each quiz question needs exactly {ANSWERS_PER_QUESTION} answers')
        if any(not isinstance(answer, str) or not answer.strip() for answer in answers):
            raise ValueError('Quiz answers must be non-empty strings')

        index = data.get('correct_answer_index', data.get('correctAnswerIndex'))
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < ANSWERS_PER_QUESTION:
            raise ValueError(f'correct_answer_index must be between 0 and {ANSWERS_PER_QUESTION - 1}')

        return cls(prompt=prompt.strip(), answers=tuple(a.strip() for a in answers), correct_answer_index=index)

    def to_dict(self, include_answer_key=True):
        data = {'prompt': self.prompt, 'answers': list(self.answers)}
        if include_answer_key:
            data['correct_answer_index'] = self.correct_answer_index
        return data


def parse_questions(raw):
    """Validate a raw JSON question list and return a list of QuizQuestion."""
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise ValueError('quiz_questions must be a list')

    questions = []
    for position, item in enumerate(raw, start=1):
        try:
            questions.append(QuizQuestion.from_dict(item))
        except ValueError as e:
            raise ValueError(f'Question {position}: {e}') from e
    return questions


@dataclass(frozen=True)
class Quiz:
    course_id: str
    questions: tuple
    pass_percentage: int

    def __post_init__(self):
        if not self.questions:
            raise ValueError('A quiz needs at least one question')

    @classmethod
    def from_course(cls, course):
        """Materialize the course's quiz, or None when the course has no questions."""
        questions = parse_questions(course.quiz_questions)
        if not questions:
            return None
        return cls(
            course_id=str(course.pk),
            questions=tuple(questions),
            pass_percentage=course.pass_percentage,
        )

    @property
    def version(self):
        """Fingerprint of the question set, stored on every attempt scored against it"""
        canonical = json.dumps([q.to_dict() for q in self.questions], sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(canonical.encode('utf-8')).hexdigest()[:16]

    def __len__(self):
        return len(self.questions)

    def to_learner_payload(self):
        """Questions without the answer key, for the training flow"""
        return [q.to_dict(include_answer_key=False) for q in self.questions]
