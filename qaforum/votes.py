"""
Vote log helpers shared by the question and answer blueprints.

Votes are append-only rows of +1 / -1. Tallies are never stored on the
question or answer itself, they are recomputed from the whole log with a
single aggregate query every time a vote is cast.
"""

UPVOTE = 1
DOWNVOTE = -1

# The question tally reports downvotes as a signed sum (-N for N downvotes),
# the answer tally as a plain count. Clients rely on both shapes.
QUESTION_TALLY_SQL = """
    WITH votes_summary AS (
        SELECT
            question_id,
            SUM(CASE WHEN vote = 1 THEN 1 ELSE 0 END) AS upvotes,
            SUM(CASE WHEN vote = -1 THEN -1 ELSE 0 END) AS downvotes
        FROM question_votes
        WHERE question_id = %s
        GROUP BY question_id
    )
    SELECT question_id, upvotes, downvotes
    FROM votes_summary
"""

ANSWER_TALLY_SQL = """
    WITH votes_summary AS (
        SELECT
            answer_id,
            SUM(CASE WHEN vote = 1 THEN 1 ELSE 0 END) AS upvotes,
            SUM(CASE WHEN vote = -1 THEN 1 ELSE 0 END) AS downvotes
        FROM answer_votes
        WHERE answer_id = %s
        GROUP BY answer_id
    )
    SELECT answer_id, upvotes, downvotes
    FROM votes_summary
"""


def cast_question_vote(cursor, question_id, vote):
    """Append a vote for the question and return its fresh tally row."""
    cursor.execute(
        "INSERT INTO question_votes (question_id, vote) VALUES (%s, %s)",
        (question_id, vote),
    )
    cursor.execute(QUESTION_TALLY_SQL, (question_id,))
    return cursor.fetchone()


def cast_answer_vote(cursor, answer_id, vote):
    """Append a vote for the answer and return its fresh tally row."""
    cursor.execute(
        "INSERT INTO answer_votes (answer_id, vote) VALUES (%s, %s)",
        (answer_id, vote),
    )
    cursor.execute(ANSWER_TALLY_SQL, (answer_id,))
    return cursor.fetchone()


def merge_summary(row, tally, join_key):
    summary = dict(row)
    summary.update(tally or {})
    summary.pop(join_key, None)
    return summary
