"""
Server-minted proof that an enrollment's content was open long enough.

`start` stamps `Enrollment.started_date`; once the required viewing time has
passed, `issue_viewing_token` signs the enrollment id with a timestamp. The
completion endpoint can then insist on a token it issued itself instead of
trusting the client's timer.
"""
import logging
import math

from django.core import signing
from django.utils import timezone

from training.conf import flow_setting, required_viewing_seconds
from training.exceptions import ViewingTokenError

logger = logging.getLogger(__name__)

SALT = 'training.content-viewed'


def seconds_remaining(enrollment, now=None):
    if enrollment.started_date is None:
        return required_viewing_seconds(enrollment.course.duration_minutes)
    now = now or timezone.now()
    elapsed = (now - enrollment.started_date).total_seconds()
    return max(0, required_viewing_seconds(enrollment.course.duration_minutes) - elapsed)


def issue_viewing_token(enrollment, now=None):
    """
    Raises:
        ViewingTokenError: the enrollment was never started or not enough time has passed
    """
    if enrollment.started_date is None:
        raise ViewingTokenError('Training has not been started')
    remaining = seconds_remaining(enrollment, now=now)
    if remaining > 0:
        raise ViewingTokenError(f'Content must be viewed for another {math.ceil(remaining)} seconds')
    return signing.TimestampSigner(salt=SALT).sign(str(enrollment.pk))


def verify_viewing_token(token, enrollment_id):
    """Check signature, age and enrollment binding of a viewing token"""
    if not token:
        raise ViewingTokenError('Viewing token is required')
    signer = signing.TimestampSigner(salt=SALT)
    try:
        value = signer.unsign(token, max_age=flow_setting('VIEWING_TOKEN_MAX_AGE'))
    except signing.SignatureExpired:
        raise ViewingTokenError('Viewing token has expired')
    except signing.BadSignature:
        logger.warning(f'Rejected viewing token for enrollment {enrollment_id}')
        raise ViewingTokenError('Invalid viewing token')
    if value != str(enrollment_id):
        raise ViewingTokenError('Viewing token does not match this enrollment')
    return True
