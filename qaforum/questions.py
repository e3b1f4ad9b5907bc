import logging
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request

from qaforum.db import get_db
from qaforum.errors import DatabaseError
from qaforum.validation import (
    AnswerBody,
    QuestionBody,
    edit_question_message,
    validate_body,
)
from qaforum.votes import DOWNVOTE, UPVOTE, cast_question_vote, merge_summary

logger = logging.getLogger(__name__)

questions_bp = Blueprint('questions', __name__, url_prefix='/questions')

QUESTION_NOT_FOUND = 'Question not found'


def _find_question(cursor, question_id):
    cursor.execute("SELECT * FROM questions WHERE id = %s", (question_id,))
    return cursor.fetchone()


# ===========================================
# SEARCH & LISTING
# ===========================================

@questions_bp.route('/search', methods=['GET'])
def search_questions():
    """
    Search questions by title or category
    Logic:
    1. Turn each filter into a substring pattern (%value%)
    2. Match rows where title LIKE the title pattern OR category LIKE the
       category pattern (case-sensitive)
    3. 404 when nothing matches

    An omitted filter is bound as NULL and matches nothing, so
    ?title=Open only returns questions whose title contains "Open".
    Older clients saw the literal pattern %undefined% for an omitted
    filter; NULL keeps the "matches nothing" outcome without that pattern.
    A present but empty filter (?title=) matches every question.
    ---
    tags: [Questions]
    parameters:
      - in: query
        name: title
        schema: {type: string}
      - in: query
        name: category
        schema: {type: string}
    responses:
      200:
        description: Successfully retrieved the search results.
        content:
          application/json:
            schema: {$ref: '#/components/schemas/QuestionList'}
      404:
        description: Search not found. Please check your parameter.
      500:
        description: Cannot get questions due to database connection.
    """
    title = request.args.get('title')
    category = request.args.get('category')
    title_pattern = f'%{title}%' if title is not None else None
    category_pattern = f'%{category}%' if category is not None else None

    try:
        with get_db().cursor() as cursor:
            cursor.execute("""
                SELECT * FROM questions
                WHERE title LIKE %s
                   OR category LIKE %s
            """, (title_pattern, category_pattern))
            questions = cursor.fetchall()
    except DatabaseError:
        logger.exception('Question search failed')
        return jsonify({'message': 'Cannot get questions due to database connection.'}), 500

    if not questions:
        return jsonify({'message': 'Search not found. Please check your parameter.'}), 404

    return jsonify({
        'message': 'Successfully retrieved the search results.',
        'data': questions
    }), 200


@questions_bp.route('', methods=['GET'])
def list_questions():
    """
    Get all questions
    ---
    tags: [Questions]
    responses:
      200:
        description: Successfully retrieved the list of questions
        content:
          application/json:
            schema: {$ref: '#/components/schemas/QuestionList'}
      500:
        description: Cannot retrieve questions due to database connection.
    """
    try:
        with get_db().cursor() as cursor:
            cursor.execute("SELECT * FROM questions")
            questions = cursor.fetchall()
    except DatabaseError:
        logger.exception('Listing questions failed')
        return jsonify({'message': 'Cannot retrieve questions due to database connection.'}), 500

    return jsonify({
        'message': 'Successfully retrieved the list of questions',
        'data': questions
    }), 200


@questions_bp.route('/<int:question_id>', methods=['GET'])
def get_question(question_id):
    """
    Get a question by ID
    ---
    tags: [Questions]
    parameters:
      - in: path
        name: question_id
        required: true
        schema: {type: integer}
    responses:
      200:
        description: Successfully retrieved the question
        content:
          application/json:
            schema: {$ref: '#/components/schemas/QuestionEnvelope'}
      404:
        description: Question not found
      500:
        description: Cannot retrieve question due to database connection.
    """
    try:
        with get_db().cursor() as cursor:
            question = _find_question(cursor, question_id)
    except DatabaseError:
        logger.exception('Reading question %s failed', question_id)
        return jsonify({'message': 'Cannot retrieve question due to database connection.'}), 500

    if not question:
        return jsonify({'message': QUESTION_NOT_FOUND}), 404

    return jsonify({
        'message': 'Successfully retrieved the question',
        'data': question
    }), 200


# ===========================================
# CREATE / UPDATE / DELETE
# ===========================================

@questions_bp.route('', methods=['POST'])
@validate_body(QuestionBody)
def create_question(body):
    """
    Create a new question
    Logic:
    1. Body is validated by validate_body (title, description, category)
    2. Stamp created_at and updated_at with the same instant
    3. Insert the question, the new row is not echoed back
    ---
    tags: [Questions]
    requestBody:
      required: true
      content:
        application/json:
          schema: {$ref: '#/components/schemas/QuestionInput'}
    responses:
      201:
        description: Question created successfully.
      400:
        description: Missing or invalid request data.
      500:
        description: Cannot create a new question due to database connection.
    """
    now = datetime.now(timezone.utc)

    try:
        with get_db().cursor() as cursor:
            cursor.execute("""
                INSERT INTO questions (title, description, category, created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s)
            """, (body.title, body.description, body.category, now, now))
    except DatabaseError:
        logger.exception('Creating question failed')
        return jsonify({'message': 'Cannot create a new question due to database connection.'}), 500

    return jsonify({'message': 'Question created successfully.'}), 201


@questions_bp.route('/<int:question_id>', methods=['PUT'])
@validate_body(QuestionBody, message=edit_question_message)
def update_question(question_id, body):
    """
    Replace title, description and category of an existing question
    ---
    tags: [Questions]
    parameters:
      - in: path
        name: question_id
        required: true
        schema: {type: integer}
    requestBody:
      required: true
      content:
        application/json:
          schema: {$ref: '#/components/schemas/QuestionInput'}
    responses:
      200:
        description: Successfully updated the question.
      400:
        description: "Bad Request: Could not find your <field>, please complete filling your information."
      404:
        description: Question not found
      500:
        description: Cannot update question due to database connection.
    """
    try:
        with get_db().cursor() as cursor:
            if not _find_question(cursor, question_id):
                return jsonify({'message': QUESTION_NOT_FOUND}), 404

            cursor.execute("""
                UPDATE questions
                SET title = %s,
                    description = %s,
                    category = %s,
                    updated_at = %s
                WHERE id = %s
            """, (body.title, body.description, body.category, datetime.now(timezone.utc), question_id))
    except DatabaseError:
        logger.exception('Updating question %s failed', question_id)
        return jsonify({'message': 'Cannot update question due to database connection.'}), 500

    return jsonify({'message': 'Successfully updated the question.'}), 200


@questions_bp.route('/<int:question_id>', methods=['DELETE'])
def delete_question(question_id):
    """
    Delete a question together with all of its answers, in one statement
    ---
    tags: [Questions]
    parameters:
      - in: path
        name: question_id
        required: true
        schema: {type: integer}
    responses:
      200:
        description: Question and its answers deleted successfully.
      404:
        description: Question not found
      500:
        description: Cannot delete question due to database connection.
    """
    try:
        with get_db().cursor() as cursor:
            if not _find_question(cursor, question_id):
                return jsonify({'message': QUESTION_NOT_FOUND}), 404

            cursor.execute("""
                WITH deleted_answers AS (
                    DELETE FROM answers WHERE question_id = %s
                )
                DELETE FROM questions WHERE id = %s
            """, (question_id, question_id))
    except DatabaseError:
        logger.exception('Deleting question %s failed', question_id)
        return jsonify({'message': 'Cannot delete question due to database connection.'}), 500

    return jsonify({'message': 'Question and its answers deleted successfully.'}), 200


# ===========================================
# ANSWERS OF A QUESTION
# ===========================================

@questions_bp.route('/<int:question_id>/answers', methods=['POST'])
@validate_body(AnswerBody)
def create_answer(question_id, body):
    """
    Post an answer to a question
    Logic:
    1. Body is validated by validate_body (content)
    2. A missing question is reported as 400, like a bad body
    3. Insert the answer
    4. Re-read the question's answers and return the last one
    ---
    tags: [Questions]
    parameters:
      - in: path
        name: question_id
        required: true
        schema: {type: integer}
    requestBody:
      required: true
      content:
        application/json:
          schema: {$ref: '#/components/schemas/AnswerInput'}
    responses:
      201:
        description: Answer created successfully.
        content:
          application/json:
            schema: {$ref: '#/components/schemas/AnswerEnvelope'}
      400:
        description: Missing or invalid request data.
      500:
        description: Server could not post an answer because database connection.
    """
    try:
        with get_db().cursor() as cursor:
            if not _find_question(cursor, question_id):
                return jsonify({'message': 'Missing or invalid request data.'}), 400

            cursor.execute(
                "INSERT INTO answers (question_id, content) VALUES (%s, %s)",
                (question_id, body.content),
            )
            cursor.execute(
                "SELECT * FROM answers WHERE question_id = %s ORDER BY id",
                (question_id,),
            )
            answers = cursor.fetchall()
    except DatabaseError:
        logger.exception('Posting answer to question %s failed', question_id)
        return jsonify({'message': 'Server could not post an answer because database connection.'}), 500

    return jsonify({
        'message': 'Answer created successfully.',
        'data': answers[-1] if answers else None
    }), 201


@questions_bp.route('/<int:question_id>/answers', methods=['GET'])
def list_answers(question_id):
    """
    Get answers for a question
    ---
    tags: [Questions]
    parameters:
      - in: path
        name: question_id
        required: true
        schema: {type: integer}
    responses:
      200:
        description: Successfully retrieved the answers.
        content:
          application/json:
            schema: {$ref: '#/components/schemas/AnswerList'}
      404:
        description: Answers not found.
      500:
        description: There is a problem with database connection.
    """
    try:
        with get_db().cursor() as cursor:
            cursor.execute("SELECT * FROM answers WHERE question_id = %s", (question_id,))
            answers = cursor.fetchall()
    except DatabaseError:
        logger.exception('Listing answers of question %s failed', question_id)
        return jsonify({'message': 'There is a problem with database connection.'}), 500

    if not answers:
        return jsonify({'message': 'Answers not found.'}), 404

    return jsonify({
        'message': 'Successfully retrieved the answers.',
        'data': answers
    }), 200


# ===========================================
# VOTING
# ===========================================

def _vote_question(question_id, vote, message):
    try:
        with get_db().cursor() as cursor:
            question = _find_question(cursor, question_id)
            if not question:
                return jsonify({'message': QUESTION_NOT_FOUND}), 404

            tally = cast_question_vote(cursor, question_id, vote)
    except DatabaseError:
        logger.exception('Voting on question %s failed', question_id)
        return jsonify({'message': "There's a problem with database connection"}), 500

    return jsonify({
        'message': message,
        'data': merge_summary(question, tally, 'question_id')
    }), 200


@questions_bp.route('/<int:question_id>/upvote', methods=['POST'])
def upvote_question(question_id):
    """
    Upvote a question by ID
    ---
    tags: [Questions]
    parameters:
      - in: path
        name: question_id
        required: true
        schema: {type: integer}
    responses:
      200:
        description: Successfully upvoted the question.
        content:
          application/json:
            schema: {$ref: '#/components/schemas/QuestionVoteEnvelope'}
      404:
        description: Question not found
      500:
        description: "There's a problem with database connection"
    """
    return _vote_question(question_id, UPVOTE, 'Successfully upvoted the question.')


@questions_bp.route('/<int:question_id>/downvote', methods=['POST'])
def downvote_question(question_id):
    """
    Downvote a question by ID
    The downvotes field is the signed sum of the downvotes (-N for N votes).
    ---
    tags: [Questions]
    parameters:
      - in: path
        name: question_id
        required: true
        schema: {type: integer}
    responses:
      200:
        description: Successfully downvoted the question.
        content:
          application/json:
            schema: {$ref: '#/components/schemas/QuestionVoteEnvelope'}
      404:
        description: Question not found
      500:
        description: "There's a problem with database connection"
    """
    return _vote_question(question_id, DOWNVOTE, 'Successfully downvoted the question.')
