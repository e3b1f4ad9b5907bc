import logging
from dataclasses import dataclass, fields
from functools import wraps

from flask import jsonify, request

logger = logging.getLogger(__name__)

MISSING_DATA_MESSAGE = 'Missing or invalid request data.'


@dataclass
class QuestionBody:
    title: str
    description: str
    category: str


@dataclass
class AnswerBody:
    content: str


def edit_question_message(field):
    return f'Bad Request: Could not find your {field}, please complete filling your information.'


# Request body decorator
def validate_body(body_type, message=MISSING_DATA_MESSAGE):
    """
    Presence check on the JSON body before the view runs.

    Logic:
    1. Read the JSON body (absent or non-object bodies count as empty)
    2. Check every field of body_type for truthiness, in declaration order
    3. Reject the first missing field with 400, the view is never called
    4. Otherwise pass the typed body to the view as the `body` keyword

    `message` is either a fixed string or a callable taking the field name.
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            data = request.get_json(silent=True)
            logger.debug('%s %s body: %r', request.method, request.path, data)
            if not isinstance(data, dict):
                data = {}

            values = {}
            for field in fields(body_type):
                value = data.get(field.name)
                if not value:
                    text = message(field.name) if callable(message) else message
                    return jsonify({'message': text}), 400
                values[field.name] = value

            return f(*args, body=body_type(**values), **kwargs)

        return decorated

    return decorator
