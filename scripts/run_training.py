import os
import sys
import time

# Make the Django project importable when run from the repository root
proj_root = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'vetlms')
if proj_root not in sys.path:
    sys.path.insert(0, proj_root)

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'vetlms.settings')

from training.client import DEFAULT_API_BASE, TrainingApiClient


def run(enrollment_id, username, password, signature, answers, api_base=DEFAULT_API_BASE):
    client = TrainingApiClient(api_base)
    client.login(username, password)

    client.start(enrollment_id)
    enrollment = client.get_enrollment(enrollment_id)
    flow = client.build_flow(enrollment, on_complete=lambda event, record: print('submitted', record['id']))
    flow.open()

    print('viewing', enrollment['course']['title'])
    if flow.assignment.uses_playback:
        input(f'Watch {flow.assignment.content_url} then press Enter')
        flow.finish_playback()
    while flow.content_progress < 100:
        time.sleep(1)
        print('content', f'{flow.content_progress}%')
    flow.advance_to_quiz()

    for index, answer in enumerate(answers):
        flow.select_answer(index, answer)
    if flow.assignment.question_count:
        evaluation = flow.submit_quiz()
        print('quiz', evaluation.to_dict())
        if not evaluation.passed:
            print(flow.quiz_error)
            flow.close()
            return 1

    flow.advance_to_signature()
    flow.sign_typed(signature)
    flow.submit_signature()
    return 0


if __name__ == '__main__':
    if len(sys.argv) < 5:
        print('Usage: python run_training.py ENROLLMENT_ID USERNAME PASSWORD "Signature Name" [answers e.g. 0,2,1] [api_base]')
        sys.exit(1)
    answers = [int(a) for a in sys.argv[5].split(',')] if len(sys.argv) > 5 and sys.argv[5] else []
    api = sys.argv[6] if len(sys.argv) > 6 else DEFAULT_API_BASE
    sys.exit(run(sys.argv[1], sys.argv[2], sys.argv[3], sys.argv[4], answers, api))
