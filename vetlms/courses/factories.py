from .models import Course


def make_questions(count=4):
    """`count` questions whose correct answer is index i % 4"""
    return [
        {
            'prompt': f'Question {i + 1}',
            'answers': ['A', 'B', 'C', 'D'],
            'correct_answer_index': i % 4,
        }
        for i in range(count)
    ]


def correct_answers(count=4):
    return [i % 4 for i in range(count)]


def make_course(location, title='Safe Handling of Cats', created_by=None, **fields):
    fields.setdefault('content_type', Course.CONTENT_PDF)
    fields.setdefault('is_published', True)
    fields.setdefault('duration_minutes', 3)
    fields.setdefault('quiz_questions', make_questions())
    return Course.objects.create(
        organization=location.organization,
        location=location,
        title=title,
        created_by=created_by,
        **fields
    )
