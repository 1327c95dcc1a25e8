"""
Training domain errors. Each carries the HTTP status the API answers with.
"""
from rest_framework import status


class TrainingError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Unable to process training request'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class QuizValidationError(TrainingError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = 'Invalid quiz submission'


class UnansweredQuestionsError(QuizValidationError):
    default_message = 'Please answer all questions before submitting.'


class FlowTransitionError(TrainingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'That step is not available yet'


class SignatureValidationError(TrainingError):
    default_message = 'Signature is required'


class EnrollmentNotFound(TrainingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Enrollment not found'


class TrainingRecordNotFound(TrainingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Training record not found'


class QuizAttemptNotFound(TrainingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Quiz attempt not found'


class CompletionConflict(TrainingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'This training has already been completed'


class ApprovalStateError(TrainingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Approved training records cannot be denied'


class ViewingTokenError(TrainingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Content has not been viewed for the required time'
