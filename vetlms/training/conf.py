from django.conf import settings

DEFAULTS = {
    'SECONDS_PER_MINUTE': 60,
    'MAX_CONTENT_MINUTES': 5,
    'DEFAULT_CONTENT_MINUTES': 5,
    'REQUIRE_VIEWING_TOKEN': False,
    'VIEWING_TOKEN_MAX_AGE': 60 * 60 * 24,
}


def flow_setting(name):
    """Read a TRAINING_FLOW setting, falling back to the project default"""
    return getattr(settings, 'TRAINING_FLOW', {}).get(name, DEFAULTS[name])


def required_viewing_seconds(duration_minutes):
    """Seconds of content viewing a course demands before its quiz opens"""
    minutes = duration_minutes or flow_setting('DEFAULT_CONTENT_MINUTES')
    minutes = max(1, min(minutes, flow_setting('MAX_CONTENT_MINUTES')))
    return minutes * flow_setting('SECONDS_PER_MINUTE')
