import logging

from flask import Blueprint, jsonify

from qaforum.db import get_db
from qaforum.errors import DatabaseError
from qaforum.votes import DOWNVOTE, UPVOTE, cast_answer_vote, merge_summary

logger = logging.getLogger(__name__)

answers_bp = Blueprint('answers', __name__, url_prefix='/answers')


def _vote_answer(answer_id, vote, message):
    """
    Answer voting

    Logic:
    1. 404 when the answer does not exist
    2. Append the vote to answer_votes
    3. Recount upvotes and downvotes over the whole log
    4. Return the answer row merged with its tally
    """
    try:
        with get_db().cursor() as cursor:
            cursor.execute("SELECT * FROM answers WHERE id = %s", (answer_id,))
            answer = cursor.fetchone()
            if not answer:
                return jsonify({'message': 'Answer not found'}), 404

            tally = cast_answer_vote(cursor, answer_id, vote)
    except DatabaseError:
        logger.exception('Voting on answer %s failed', answer_id)
        return jsonify({'message': "There's a problem with database connection"}), 500

    return jsonify({
        'message': message,
        'data': merge_summary(answer, tally, 'answer_id')
    }), 200


@answers_bp.route('/<int:answer_id>/upvote', methods=['POST'])
def upvote_answer(answer_id):
    """
    Upvote an answer by ID
    ---
    tags: [Answers]
    parameters:
      - in: path
        name: answer_id
        required: true
        schema: {type: integer}
    responses:
      200:
        description: Successfully upvoted the answer.
        content:
          application/json:
            schema: {$ref: '#/components/schemas/AnswerVoteEnvelope'}
      404:
        description: Answer not found
      500:
        description: "There's a problem with database connection"
    """
    return _vote_answer(answer_id, UPVOTE, 'Successfully upvoted the answer.')


@answers_bp.route('/<int:answer_id>/downvote', methods=['POST'])
def downvote_answer(answer_id):
    """
    Downvote an answer by ID
    ---
    tags: [Answers]
    parameters:
      - in: path
        name: answer_id
        required: true
        schema: {type: integer}
    responses:
      200:
        description: Successfully downvoted the answer.
        content:
          application/json:
            schema: {$ref: '#/components/schemas/AnswerVoteEnvelope'}
      404:
        description: Answer not found
      500:
        description: "There's a problem with database connection"
    """
    return _vote_answer(answer_id, DOWNVOTE, 'Successfully downvoted the answer.')
