"""
Training flow state machine, driven with a fake clock
"""
from django.test import SimpleTestCase, override_settings

from courses.factories import correct_answers, make_questions
from courses.quiz import Quiz, parse_questions
from training.exceptions import (
    FlowTransitionError,
    QuizValidationError,
    SignatureValidationError,
    UnansweredQuestionsError,
    ViewingTokenError,
)
from training.services.flow import (
    STAGE_CLOSED,
    STAGE_COMPLETED,
    STAGE_CONTENT,
    STAGE_QUIZ,
    STAGE_SIGNATURE,
    ContentProgressTimer,
    FlowAssignment,
    TrainingFlow,
)

FLOW_SETTINGS = {'SECONDS_PER_MINUTE': 60, 'MAX_CONTENT_MINUTES': 5, 'DEFAULT_CONTENT_MINUTES': 5}


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_assignment(question_count=4, **overrides):
    quiz = None
    questions = ()
    if question_count:
        quiz = Quiz(course_id='course-1', questions=tuple(parse_questions(make_questions(question_count))), pass_percentage=80)
        questions = tuple(quiz.to_learner_payload())
    fields = {
        'enrollment_id': 'enrollment-1',
        'course_id': 'course-1',
        'title': 'Safe Handling of Cats',
        'content_type': 'pdf',
        'content_url': 'https://cdn.example.com/cats.pdf',
        'duration_minutes': 2,
        'pass_percentage': 80,
        'questions': questions,
        'quiz': quiz,
    }
    fields.update(overrides)
    return FlowAssignment(**fields)


@override_settings(TRAINING_FLOW=FLOW_SETTINGS)
class ContentProgressTimerTest(SimpleTestCase):

    def test_duration_is_capped_and_defaulted(self):
        self.assertEqual(ContentProgressTimer(2).duration_seconds, 120)
        self.assertEqual(ContentProgressTimer(30).duration_seconds, 300)
        self.assertEqual(ContentProgressTimer(None).duration_seconds, 300)
        self.assertEqual(ContentProgressTimer(0.5).duration_seconds, 60)

    def test_progress_follows_clock(self):
        clock = FakeClock()
        timer = ContentProgressTimer(2, clock=clock)
        timer.start()
        self.assertEqual(timer.progress(), 0)
        clock.advance(60)
        self.assertEqual(timer.progress(), 50)
        clock.advance(1000)
        self.assertEqual(timer.progress(), 100)

    def test_full_duration_is_required_for_completion(self):
        clock = FakeClock()
        timer = ContentProgressTimer(5, clock=clock)
        timer.start()
        clock.now = 298.5
        self.assertEqual(timer.progress(), 99)
        clock.now = 299.9
        self.assertEqual(timer.progress(), 99)
        clock.now = 300
        self.assertEqual(timer.progress(), 100)

    def test_cancel_freezes_progress(self):
        clock = FakeClock()
        timer = ContentProgressTimer(2, clock=clock)
        timer.start()
        clock.advance(30)
        timer.cancel()
        clock.advance(500)
        self.assertFalse(timer.running)
        self.assertEqual(timer.progress(), 25)


@override_settings(TRAINING_FLOW=FLOW_SETTINGS)
class TrainingFlowTest(SimpleTestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.events = []
        self.flow = TrainingFlow(make_assignment(), on_complete=self.events.append, clock=self.clock).open()

    def _finish_content(self):
        self.clock.advance(120)
        self.flow.advance_to_quiz()

    def _answer(self, answers):
        for index, answer in enumerate(answers):
            self.flow.select_answer(index, answer)

    def _pass_quiz(self):
        self._finish_content()
        self._answer(correct_answers(4))
        self.flow.submit_quiz()
        self.flow.advance_to_signature()

    def test_quiz_locked_until_content_is_viewed(self):
        self.assertEqual(self.flow.stage, STAGE_CONTENT)
        self.clock.advance(119)
        with self.assertRaises(FlowTransitionError):
            self.flow.advance_to_quiz()
        self.assertEqual(self.flow.stage, STAGE_CONTENT)

        self.clock.advance(1)
        self.flow.advance_to_quiz()
        self.assertEqual(self.flow.stage, STAGE_QUIZ)
        self.assertEqual(self.flow.content_progress, 100)

    def test_unanswered_submission_keeps_previous_score(self):
        self._finish_content()
        self._answer([0, 1, 2])
        with self.assertRaises(UnansweredQuestionsError):
            self.flow.submit_quiz()
        self.assertEqual(self.flow.quiz_error, 'Please answer all questions before submitting.')
        self.assertIsNone(self.flow.quiz_score)
        self.assertEqual(self.flow.attempt_count, 0)

    def test_signature_locked_until_passing_score(self):
        self._finish_content()
        answers = correct_answers(4)
        answers[0] = 3
        self._answer(answers)
        result = self.flow.submit_quiz()
        self.assertEqual(result.score, 75)
        self.assertEqual(self.flow.quiz_error, 'You need 80% to pass. Please review and try again.')
        with self.assertRaises(FlowTransitionError):
            self.flow.advance_to_signature()

        # resubmitting overwrites the score
        self.flow.select_answer(0, 0)
        self.assertEqual(self.flow.submit_quiz().score, 100)
        self.assertIsNone(self.flow.quiz_error)
        self.assertEqual(self.flow.attempt_count, 2)
        self.flow.advance_to_signature()
        self.assertEqual(self.flow.stage, STAGE_SIGNATURE)

    def test_changing_an_answer_after_passing_requires_resubmission(self):
        self._finish_content()
        self._answer(correct_answers(4))
        self.assertTrue(self.flow.submit_quiz().passed)

        # reselecting the same answer keeps the score
        self.flow.select_answer(1, 1)
        self.assertEqual(self.flow.quiz_score, 100)

        self.flow.select_answer(0, 3)
        self.assertIsNone(self.flow.quiz_score)
        self.assertFalse(self.flow.quiz_step_complete)
        with self.assertRaises(FlowTransitionError):
            self.flow.advance_to_signature()

        self.assertEqual(self.flow.submit_quiz().score, 75)
        with self.assertRaises(FlowTransitionError):
            self.flow.advance_to_signature()

        self.flow.select_answer(0, 0)
        self.assertEqual(self.flow.submit_quiz().score, 100)
        self.flow.advance_to_signature()
        self.flow.sign_typed('Alice Smith')
        event = self.flow.submit_signature()
        self.assertEqual(event.answers, correct_answers(4))
        self.assertEqual(event.quiz_score, 100)

    def test_select_answer_validates_indices(self):
        self._finish_content()
        with self.assertRaises(QuizValidationError):
            self.flow.select_answer(4, 0)
        with self.assertRaises(QuizValidationError):
            self.flow.select_answer(0, 4)

    def test_typed_signature_minimum(self):
        self._pass_quiz()
        with self.assertRaises(SignatureValidationError):
            self.flow.sign_typed('  Al ')
        with self.assertRaises(SignatureValidationError):
            self.flow.submit_signature()
        self.assertEqual(self.flow.sign_typed(' Alice Smith '), 'Alice Smith')

    def test_drawn_signature_is_rendered(self):
        self._pass_quiz()
        with self.assertRaises(SignatureValidationError):
            self.flow.sign_drawn([[]])
        signature = self.flow.sign_drawn([[(10, 10), (60, 40), (120, 20)], [{'x': 150, 'y': 30}]])
        self.assertTrue(signature.startswith('data:image/png;base64,'))

    def test_submit_emits_completion_and_discards_state(self):
        self._pass_quiz()
        self.flow.sign_typed('Alice Smith')
        self.clock.advance(30)
        event = self.flow.submit_signature()

        self.assertEqual(self.events, [event])
        self.assertEqual(event.quiz_score, 100)
        self.assertEqual(event.employee_signature, 'Alice Smith')
        self.assertEqual(event.answers, correct_answers(4))
        self.assertEqual(event.attempt_count, 1)
        self.assertEqual(event.time_taken_seconds, 150)
        self.assertEqual(event.duration_minutes, 2)

        self.assertEqual(self.flow.stage, STAGE_COMPLETED)
        self.assertIsNone(self.flow.quiz_score)
        self.assertIsNone(self.flow.signature)
        self.assertEqual(self.flow.overall_progress, 100)
        with self.assertRaises(FlowTransitionError):
            self.flow.submit_signature()

    def test_payload_uses_api_keys(self):
        self._pass_quiz()
        self.flow.sign_typed('Alice Smith')
        payload = self.flow.submit_signature().to_payload()
        self.assertEqual(payload['enrollmentId'], 'enrollment-1')
        self.assertEqual(payload['courseId'], 'course-1')
        self.assertEqual(payload['quizScore'], 100)
        self.assertEqual(payload['passPercentage'], 80)
        self.assertEqual(payload['employeeSignature'], 'Alice Smith')
        self.assertEqual(payload['answers'], correct_answers(4))
        self.assertNotIn('viewingToken', payload)

    def test_failed_submission_can_be_retried(self):
        def fail(event):
            raise ConnectionError('offline')

        flow = TrainingFlow(make_assignment(), on_complete=fail, clock=self.clock).open()
        self.clock.advance(120)
        flow.advance_to_quiz()
        for index, answer in enumerate(correct_answers(4)):
            flow.select_answer(index, answer)
        flow.submit_quiz()
        flow.advance_to_signature()
        flow.sign_typed('Alice Smith')
        with self.assertRaises(ConnectionError):
            flow.submit_signature()
        self.assertEqual(flow.stage, STAGE_SIGNATURE)
        self.assertEqual(flow.signature, 'Alice Smith')

    def test_out_of_order_calls_are_rejected(self):
        with self.assertRaises(FlowTransitionError):
            self.flow.select_answer(0, 0)
        with self.assertRaises(FlowTransitionError):
            self.flow.submit_quiz()
        with self.assertRaises(FlowTransitionError):
            self.flow.advance_to_signature()
        with self.assertRaises(FlowTransitionError):
            self.flow.sign_typed('Alice Smith')
        with self.assertRaises(FlowTransitionError):
            self.flow.submit_signature()

    def test_close_discards_everything(self):
        self._finish_content()
        self._answer(correct_answers(4))
        self.flow.submit_quiz()
        self.flow.close()
        self.assertEqual(self.flow.stage, STAGE_CLOSED)
        self.assertIsNone(self.flow.quiz_score)
        self.assertEqual(self.events, [])
        with self.assertRaises(FlowTransitionError):
            self.flow.next_step()

    def test_reopening_resets_all_stages(self):
        self._pass_quiz()
        self.flow.open()
        self.assertEqual(self.flow.stage, STAGE_CONTENT)
        self.assertEqual(self.flow.content_progress, 0)
        self.assertEqual(self.flow.selected_answers, [-1, -1, -1, -1])
        self.assertEqual(self.flow.attempt_count, 0)
        with self.assertRaises(FlowTransitionError):
            self.flow.advance_to_quiz()

    def test_next_step_walks_the_stages(self):
        self.clock.advance(120)
        self.flow.next_step()
        self._answer(correct_answers(4))
        self.flow.submit_quiz()
        self.flow.next_step()
        self.flow.sign_typed('Alice Smith')
        event = self.flow.next_step()
        self.assertEqual(event.quiz_score, 100)

    def test_overall_progress(self):
        self.assertEqual(self.flow.overall_progress, 0)
        self.clock.advance(60)
        self.assertEqual(self.flow.overall_progress, 17)
        self.clock.advance(60)
        self.assertEqual(self.flow.overall_progress, 33)
        self.flow.advance_to_quiz()
        self._answer(correct_answers(4))
        self.flow.submit_quiz()
        self.assertEqual(self.flow.overall_progress, 67)
        self.flow.advance_to_signature()
        self.flow.sign_typed('Alice Smith')
        self.assertEqual(self.flow.overall_progress, 100)


@override_settings(TRAINING_FLOW=FLOW_SETTINGS)
class TrainingFlowVariantsTest(SimpleTestCase):

    def setUp(self):
        self.clock = FakeClock()

    def test_video_uses_playback_instead_of_timer(self):
        flow = TrainingFlow(make_assignment(content_type='video', content_url='https://cdn.example.com/v.mp4'),
                            on_complete=lambda e: None, clock=self.clock).open()
        self.clock.advance(10000)
        self.assertEqual(flow.content_progress, 0)
        self.assertEqual(flow.report_playback(50, 100), 50)
        with self.assertRaises(FlowTransitionError):
            flow.advance_to_quiz()
        flow.report_playback(99, 100)
        self.assertTrue(flow.content_complete)
        flow.advance_to_quiz()
        self.assertEqual(flow.stage, STAGE_QUIZ)

    def test_finish_playback(self):
        flow = TrainingFlow(make_assignment(content_type='video', content_url='https://cdn.example.com/v.mp4'),
                            on_complete=lambda e: None, clock=self.clock).open()
        flow.report_playback(5, float('nan'))
        flow.finish_playback()
        flow.advance_to_quiz()

    def test_video_without_url_is_timed(self):
        flow = TrainingFlow(make_assignment(content_type='video', content_url=None),
                            on_complete=lambda e: None, clock=self.clock).open()
        with self.assertRaises(FlowTransitionError):
            flow.report_playback(1, 2)
        self.clock.advance(120)
        flow.advance_to_quiz()

    def test_viewing_gate_token_is_carried(self):
        gate_calls = []

        def gate(assignment):
            gate_calls.append(assignment.enrollment_id)
            return 'signed-token'

        events = []
        flow = TrainingFlow(make_assignment(), on_complete=events.append, clock=self.clock, viewing_gate=gate).open()
        self.clock.advance(120)
        flow.advance_to_quiz()
        for index, answer in enumerate(correct_answers(4)):
            flow.select_answer(index, answer)
        flow.submit_quiz()
        flow.advance_to_signature()
        flow.sign_typed('Alice Smith')
        flow.submit_signature()
        self.assertEqual(gate_calls, ['enrollment-1'])
        self.assertEqual(events[0].viewing_token, 'signed-token')
        self.assertEqual(events[0].to_payload()['viewingToken'], 'signed-token')

    def test_refused_viewing_gate_keeps_content_stage(self):
        def gate(assignment):
            raise ViewingTokenError()

        flow = TrainingFlow(make_assignment(), on_complete=lambda e: None, clock=self.clock, viewing_gate=gate).open()
        self.clock.advance(120)
        with self.assertRaises(ViewingTokenError):
            flow.advance_to_quiz()
        self.assertEqual(flow.stage, STAGE_CONTENT)

    def test_course_without_quiz(self):
        events = []
        flow = TrainingFlow(make_assignment(question_count=0), on_complete=events.append, clock=self.clock).open()
        self.clock.advance(120)
        flow.advance_to_quiz()
        flow.advance_to_signature()
        flow.sign_typed('Alice Smith')
        flow.submit_signature()
        self.assertEqual(events[0].quiz_score, 100)
        self.assertNotIn('answers', events[0].to_payload())

    def test_remote_evaluator_required_without_answer_key(self):
        assignment = make_assignment()
        keyless = FlowAssignment(**{**assignment.__dict__, 'quiz': None})
        with self.assertRaises(ValueError):
            TrainingFlow(keyless, on_complete=lambda e: None)
