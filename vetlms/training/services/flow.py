"""
Training flow controller.

Drives one learner through one assignment: content viewing, the quiz and the
completion signature. A `TrainingFlow` is a plain state machine with no thread
and no I/O of its own; the caller feeds it user actions and receives a
`CompletionEvent` through `on_complete` when the learner signs.

Content progress for non-video material (or video without a URL) is synthetic:
it grows with wall-clock time up to the capped course duration. Video with a URL
reports real playback position instead.
"""
from dataclasses import dataclass, field
import logging
import math
import time
from typing import Callable, Optional

from courses.quiz import ANSWERS_PER_QUESTION, Quiz
from training.conf import flow_setting, required_viewing_seconds
from training.exceptions import FlowTransitionError, QuizValidationError, SignatureValidationError, UnansweredQuestionsError
from training.services.quiz_evaluator import UNANSWERED, evaluate_quiz, round_half_up
from training.services.signatures import render_strokes, typed_signature

logger = logging.getLogger(__name__)

STAGE_CONTENT = 'content'
STAGE_QUIZ = 'quiz'
STAGE_SIGNATURE = 'signature'
STAGE_COMPLETED = 'completed'
STAGE_CLOSED = 'closed'

PLAYBACK_COMPLETE_PERCENT = 99


class ContentProgressTimer:
    """Synthetic viewing progress computed from a monotonic clock"""

    def __init__(self, duration_minutes=None, clock=time.monotonic):
        self.duration_seconds = required_viewing_seconds(duration_minutes)
        self._clock = clock
        self._started_at = None
        self._final_progress = 0

    @property
    def running(self):
        return self._started_at is not None

    def start(self):
        self._started_at = self._clock()
        self._final_progress = 0

    def progress(self):
        if self._started_at is None:
            return self._final_progress
        elapsed = self._clock() - self._started_at
        # floored so 100 is only reached once the whole duration has passed
        return min(100, math.floor(elapsed / self.duration_seconds * 100))

    def cancel(self):
        """Stop the timer, keeping the progress it had reached"""
        if self._started_at is not None:
            self._final_progress = self.progress()
            self._started_at = None


@dataclass(frozen=True)
class FlowAssignment:
    enrollment_id: str
    course_id: str
    title: str
    content_type: str
    content_url: Optional[str]
    duration_minutes: Optional[int]
    pass_percentage: int
    questions: tuple = ()
    quiz: Optional[Quiz] = None

    @classmethod
    def from_enrollment(cls, enrollment, language='en'):
        """Build from an Enrollment row; keeps the answer key so the quiz can be scored locally"""
        course = enrollment.course
        quiz = course.quiz
        return cls(
            enrollment_id=str(enrollment.pk),
            course_id=str(course.pk),
            title=course.title,
            content_type=course.content_type,
            content_url=course.content_url_for(language),
            duration_minutes=course.duration_minutes,
            pass_percentage=course.pass_percentage,
            questions=tuple(quiz.to_learner_payload()) if quiz else (),
            quiz=quiz,
        )

    @classmethod
    def from_payload(cls, data):
        """Build from the enrollments API payload; no answer key, so scoring must be remote"""
        course = data['course']
        quiz = course.get('quiz') or {}
        return cls(
            enrollment_id=str(data['id']),
            course_id=str(course['id']),
            title=course.get('title', ''),
            content_type=course.get('content_type', 'other'),
            content_url=course.get('content_url'),
            duration_minutes=course.get('duration_minutes'),
            pass_percentage=course.get('pass_percentage', 80),
            questions=tuple(quiz.get('questions') or ()),
        )

    @property
    def question_count(self):
        return len(self.questions)

    @property
    def uses_playback(self):
        return self.content_type == 'video' and bool(self.content_url)


@dataclass(frozen=True)
class CompletionEvent:
    enrollment_id: str
    course_id: str
    quiz_score: int
    pass_percentage: int
    employee_signature: str
    duration_minutes: int
    answers: list = field(default_factory=list)
    attempt_count: int = 0
    time_taken_seconds: Optional[int] = None
    viewing_token: Optional[str] = None

    def to_payload(self):
        """Body for POST /api/training-records/"""
        payload = {
            'courseId': self.course_id,
            'enrollmentId': self.enrollment_id,
            'quizScore': self.quiz_score,
            'passPercentage': self.pass_percentage,
            'employeeSignature': self.employee_signature,
            'durationMinutes': self.duration_minutes,
        }
        if self.answers:
            payload['answers'] = list(self.answers)
        if self.time_taken_seconds is not None:
            payload['timeTakenSeconds'] = self.time_taken_seconds
        if self.viewing_token:
            payload['viewingToken'] = self.viewing_token
        return payload


class TrainingFlow:
    """
    content -> quiz -> signature -> completed, or closed from any stage.

    Args:
        assignment: FlowAssignment being trained
        on_complete: called with the CompletionEvent when the learner signs
        clock: monotonic clock, injectable for tests
        viewing_gate: optional callable(assignment) -> token, asked for proof of
            viewing before the quiz opens
        evaluator: optional callable(selected_answers) -> QuizEvaluation; defaults
            to scoring locally against the assignment's answer key
    """

    def __init__(self, assignment, on_complete: Callable, clock=time.monotonic,
                 viewing_gate: Optional[Callable] = None, evaluator: Optional[Callable] = None):
        if evaluator is None and assignment.question_count and assignment.quiz is None:
            raise ValueError('An evaluator is required when the answer key is not available')
        self.assignment = assignment
        self._on_complete = on_complete
        self._clock = clock
        self._viewing_gate = viewing_gate
        self._evaluator = evaluator or self._evaluate_locally
        self._timer = None
        self.stage = STAGE_CLOSED
        self._reset()

    def _reset(self):
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._playback_progress = 0
        self.content_complete = False
        self.viewing_token = None
        self.selected_answers = [UNANSWERED] * self.assignment.question_count
        self.quiz_score = None
        self.quiz_submitted = False
        self.quiz_error = None
        self.last_evaluation = None
        self.attempt_count = 0
        self.signature = None
        self._opened_at = None

    def _evaluate_locally(self, selected_answers):
        return evaluate_quiz(selected_answers, self.assignment.quiz.questions, self.assignment.pass_percentage)

    def _require_stage(self, stage, action):
        if self.stage != stage:
            raise FlowTransitionError(f'Cannot {action} during the {self.stage} stage')

    # Lifecycle

    def open(self):
        """Start (or restart) the flow from the content stage with all state cleared"""
        self._reset()
        self.stage = STAGE_CONTENT
        self._opened_at = self._clock()
        if not self.assignment.uses_playback:
            self._timer = ContentProgressTimer(self.assignment.duration_minutes, clock=self._clock)
            self._timer.start()
        logger.debug(f'Training flow opened for enrollment {self.assignment.enrollment_id}')
        return self

    def close(self):
        """Discard the flow at any stage; nothing is persisted"""
        self._reset()
        self.stage = STAGE_CLOSED

    def next_step(self):
        if self.stage == STAGE_CONTENT:
            return self.advance_to_quiz()
        if self.stage == STAGE_QUIZ:
            return self.advance_to_signature()
        if self.stage == STAGE_SIGNATURE:
            return self.submit_signature()
        raise FlowTransitionError(f'No next step from the {self.stage} stage')

    # Content

    @property
    def content_progress(self):
        if self.content_complete:
            return 100
        if self._timer is not None:
            return self._timer.progress()
        return self._playback_progress

    def _content_done(self):
        if not self.content_complete and self._timer is not None and self._timer.progress() >= 100:
            self.content_complete = True
        return self.content_complete

    def report_playback(self, current_time, duration):
        """Record the video position; the content counts as viewed from 99%"""
        self._require_stage(STAGE_CONTENT, 'report playback')
        if not self.assignment.uses_playback:
            raise FlowTransitionError('This content does not report playback')
        if not duration or math.isnan(duration) or duration <= 0:
            return self.content_progress
        self._playback_progress = min(100, round_half_up(current_time / duration * 100))
        if self._playback_progress >= PLAYBACK_COMPLETE_PERCENT:
            self.content_complete = True
        return self.content_progress

    def finish_playback(self):
        self._require_stage(STAGE_CONTENT, 'finish playback')
        if not self.assignment.uses_playback:
            raise FlowTransitionError('This content does not report playback')
        self._playback_progress = 100
        self.content_complete = True

    def advance_to_quiz(self):
        self._require_stage(STAGE_CONTENT, 'open the quiz')
        if not self._content_done():
            raise FlowTransitionError('Finish this step to unlock the quiz.')
        if self._viewing_gate is not None:
            self.viewing_token = self._viewing_gate(self.assignment)
        if self._timer is not None:
            self._timer.cancel()
        self.stage = STAGE_QUIZ
        if self.assignment.question_count == 0:
            # nothing to answer
            self.quiz_score = 100
            self.quiz_submitted = True

    # Quiz

    def select_answer(self, question_index, answer_index):
        self._require_stage(STAGE_QUIZ, 'answer questions')
        if not 0 <= question_index < self.assignment.question_count:
            raise QuizValidationError(f'Question {question_index} does not exist')
        if not 0 <= answer_index < ANSWERS_PER_QUESTION:
            raise QuizValidationError(f'Answer {answer_index} does not exist')
        if self.selected_answers[question_index] == answer_index:
            return
        self.selected_answers[question_index] = answer_index
        # a changed selection invalidates the last score until the quiz is resubmitted
        self.quiz_submitted = False
        self.quiz_score = None
        self.last_evaluation = None

    def submit_quiz(self):
        """
        Score the current selections. Resubmitting is always allowed and replaces the score.

        Raises:
            UnansweredQuestionsError: some question has no answer; the last score is kept
        """
        self._require_stage(STAGE_QUIZ, 'submit the quiz')
        try:
            evaluation = self._evaluator(list(self.selected_answers))
        except UnansweredQuestionsError as e:
            self.quiz_error = str(e)
            raise

        self.last_evaluation = evaluation
        self.quiz_score = evaluation.score
        self.quiz_submitted = True
        self.attempt_count += 1
        if evaluation.passed:
            self.quiz_error = None
        else:
            self.quiz_error = f'You need {self.assignment.pass_percentage}% to pass. Please review and try again.'
        return evaluation

    @property
    def quiz_step_complete(self):
        return (
            self.quiz_submitted
            and self.quiz_score is not None
            and self.quiz_score >= self.assignment.pass_percentage
        )

    def advance_to_signature(self):
        self._require_stage(STAGE_QUIZ, 'sign')
        if not self.quiz_step_complete:
            raise FlowTransitionError(f'A score of {self.assignment.pass_percentage}% is required to continue.')
        self.stage = STAGE_SIGNATURE

    # Signature

    def sign_typed(self, text):
        self._require_stage(STAGE_SIGNATURE, 'sign')
        self.signature = typed_signature(text)
        return self.signature

    def sign_drawn(self, strokes):
        self._require_stage(STAGE_SIGNATURE, 'sign')
        self.signature = render_strokes(strokes)
        return self.signature

    def clear_signature(self):
        self._require_stage(STAGE_SIGNATURE, 'clear the signature')
        self.signature = None

    def submit_signature(self):
        """
        Finish the training: hand the CompletionEvent to `on_complete`, then discard all state.

        If `on_complete` raises, the flow stays on the signature stage so the
        submission can be retried.
        """
        self._require_stage(STAGE_SIGNATURE, 'submit')
        if not self.signature:
            raise SignatureValidationError('Please sign before submitting')

        event = CompletionEvent(
            enrollment_id=self.assignment.enrollment_id,
            course_id=self.assignment.course_id,
            quiz_score=self.quiz_score,
            pass_percentage=self.assignment.pass_percentage,
            employee_signature=self.signature,
            duration_minutes=self.assignment.duration_minutes or flow_setting('DEFAULT_CONTENT_MINUTES'),
            answers=list(self.selected_answers) if self.assignment.question_count else [],
            attempt_count=self.attempt_count,
            time_taken_seconds=int(self._clock() - self._opened_at),
            viewing_token=self.viewing_token,
        )
        self._on_complete(event)

        self._reset()
        self.stage = STAGE_COMPLETED
        logger.info(f'Training flow completed for enrollment {event.enrollment_id} with score {event.quiz_score}')
        return event

    @property
    def overall_progress(self):
        if self.stage == STAGE_COMPLETED:
            return 100
        if self.stage == STAGE_CLOSED:
            return 0
        content_done = self._content_done()
        completed = int(content_done) + int(self.quiz_step_complete) + int(bool(self.signature))
        active = 0 if content_done else self.content_progress / 100 * (100 / 3)
        return min(100, round_half_up(completed * (100 / 3) + active))
