"""
HTTP client for the training API.

Wraps the enrollment and training-record endpoints with `requests` and can
wire a `TrainingFlow` to them: quiz scoring goes to the server (the learner
payload carries no answer key), the viewing gate asks the server for a
viewing token, and the completion event is posted as a training record.
"""
import logging

import requests

from training.exceptions import QuizValidationError, UnansweredQuestionsError
from training.services.flow import FlowAssignment, TrainingFlow
from training.services.quiz_evaluator import QuizEvaluation

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = 'http://127.0.0.1:8000/api'


class TrainingApiError(Exception):
    def __init__(self, status_code, message, payload=None):
        super().__init__(f'{status_code}: {message}')
        self.status_code = status_code
        self.message = message
        self.payload = payload


class TrainingApiClient:
    def __init__(self, api_base=DEFAULT_API_BASE, token=None, session=None, timeout=30):
        self.api_base = api_base.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        if token:
            self.set_token(token)

    def set_token(self, token):
        self.session.headers['Authorization'] = f'Token {token}'

    def _request(self, method, path, **kwargs):
        url = f"{self.api_base}/{path.lstrip('/')}"
        r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        try:
            payload = r.json()
        except ValueError:
            payload = None
        if r.status_code >= 400:
            message = r.text
            if isinstance(payload, dict):
                message = payload.get('error') or payload.get('message') or payload.get('detail') or message
            logger.warning(f'{method} {url} failed with {r.status_code}: {message}')
            raise TrainingApiError(r.status_code, message, payload)
        return payload

    def login(self, username, password):
        data = self._request('POST', 'auth/token/', json={'username': username, 'password': password})
        self.set_token(data['token'])
        return data['token']

    # Enrollments

    def list_enrollments(self, lang='en'):
        return self._request('GET', 'enrollments/', params={'lang': lang})

    def get_enrollment(self, enrollment_id, lang='en'):
        return self._request('GET', f'enrollments/{enrollment_id}/', params={'lang': lang})

    def start(self, enrollment_id):
        return self._request('POST', f'enrollments/{enrollment_id}/start/')

    def content_viewed(self, enrollment_id):
        return self._request('POST', f'enrollments/{enrollment_id}/content-viewed/')['viewingToken']

    def evaluate_quiz(self, enrollment_id, answers):
        """
        Score answers on the server.

        Raises:
            UnansweredQuestionsError / QuizValidationError: the server rejected the answers
        """
        try:
            data = self._request('POST', f'enrollments/{enrollment_id}/evaluate-quiz/', json={'answers': list(answers)})
        except TrainingApiError as e:
            if e.status_code == 422:
                if e.message == UnansweredQuestionsError.default_message:
                    raise UnansweredQuestionsError() from e
                raise QuizValidationError(e.message) from e
            raise
        return QuizEvaluation(
            correct_count=data['correct'],
            total_questions=data['total'],
            score=data['score'],
            passed=data['passed'],
        )

    # Training records

    def submit_completion(self, event):
        return self._request('POST', 'training-records/', json=event.to_payload())

    def pending_approvals(self):
        return self._request('GET', 'training-records/pending-approvals/')

    def approve(self, record_id, supervisor_signature):
        return self._request('PATCH', f'training-records/{record_id}/approve/',
                             json={'supervisorSignature': supervisor_signature})

    def deny(self, record_id, reason=None):
        return self._request('PATCH', f'training-records/{record_id}/deny/', json={'reason': reason})

    # Flow wiring

    def build_flow(self, enrollment, on_complete=None, **kwargs):
        """
        Create a TrainingFlow for an enrollment payload from `list_enrollments`.

        The flow scores its quiz through the API, fetches a viewing token before
        the quiz opens and posts the completion event when the learner signs.
        Extra keyword arguments (e.g. `clock`) go to TrainingFlow.
        """
        assignment = FlowAssignment.from_payload(enrollment)

        def complete(event):
            record = self.submit_completion(event)
            if on_complete is not None:
                on_complete(event, record)

        return TrainingFlow(
            assignment,
            on_complete=complete,
            viewing_gate=lambda a: self.content_viewed(a.enrollment_id),
            evaluator=lambda answers: self.evaluate_quiz(assignment.enrollment_id, answers),
            **kwargs
        )
