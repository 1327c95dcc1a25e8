from rest_framework import status


class CourseError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Unable to process course request'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class CourseNotFound(CourseError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Course not found'
