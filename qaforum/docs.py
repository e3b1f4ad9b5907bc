"""
API documentation generated by flasgger from the YAML block of each view's docstring.

GET /api-docs/              Swagger UI
GET /api-docs/openapi.json  the OpenAPI 3 document
"""
from flasgger import Swagger

from qaforum import __version__

SWAGGER_CONFIG = {
    'title': 'Q&A Forum API',
    'openapi': '3.0.2',
    'specs': [
        {
            'endpoint': 'openapi',
            'route': '/api-docs/openapi.json',
            'rule_filter': lambda rule: True,
            'model_filter': lambda tag: True,
        }
    ],
    'specs_route': '/api-docs/',
}


def _object(**properties):
    return {'type': 'object', 'properties': properties}


def _envelope(data):
    return _object(message={'type': 'string'}, data=data)


def _ref(name):
    return {'$ref': f'#/components/schemas/{name}'}


QUESTION_FIELDS = {
    'id': {'type': 'integer', 'example': 1},
    'title': {'type': 'string', 'example': 'What is OpenAPI?'},
    'description': {'type': 'string', 'example': 'OpenAPI is a specification for...'},
    'category': {'type': 'string', 'example': 'Technology'},
    'created_at': {'type': 'string', 'format': 'date-time'},
    'updated_at': {'type': 'string', 'format': 'date-time'},
}

ANSWER_FIELDS = {
    'id': {'type': 'integer', 'example': 1},
    'question_id': {'type': 'integer', 'example': 1},
    'content': {'type': 'string', 'example': 'This is an answer to the question.'},
}

VOTE_FIELDS = {
    'upvotes': {'type': 'integer', 'example': 1},
    'downvotes': {'type': 'integer', 'example': 0},
}

# Shared schemas referenced from the view docstrings
TEMPLATE = {
    'info': {
        'title': 'Q&A Forum API',
        'version': __version__,
        'description': 'Questions, answers and votes',
    },
    'components': {
        'schemas': {
            'Question': _object(**QUESTION_FIELDS),
            'QuestionInput': {
                'type': 'object',
                'required': ['title', 'description', 'category'],
                'properties': {k: QUESTION_FIELDS[k] for k in ('title', 'description', 'category')},
            },
            'QuestionEnvelope': _envelope(_ref('Question')),
            'QuestionList': _envelope({'type': 'array', 'items': _ref('Question')}),
            'QuestionVoteEnvelope': _envelope(_object(**QUESTION_FIELDS, **VOTE_FIELDS)),
            'Answer': _object(**ANSWER_FIELDS),
            'AnswerInput': {
                'type': 'object',
                'required': ['content'],
                'properties': {'content': ANSWER_FIELDS['content']},
            },
            'AnswerEnvelope': _envelope(_ref('Answer')),
            'AnswerList': _envelope({'type': 'array', 'items': _ref('Answer')}),
            'AnswerVoteEnvelope': _envelope(_object(**ANSWER_FIELDS, **VOTE_FIELDS)),
        }
    },
}


def init_docs(app):
    return Swagger(app, config=SWAGGER_CONFIG, template=TEMPLATE, merge=True)
