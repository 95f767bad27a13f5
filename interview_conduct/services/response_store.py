from typing import Dict, Iterator, List, Optional

from interview_conduct.schemas.session import QuestionResponse
from interview_conduct.schemas.template import Question, Template


def question_key(question: Question, index: int) -> str:
    """
    Stable join key between a template question and its response.

    Uses the question's order when it has one, else its 1-based position.
    Editing a template's question list after responses exist can shift keys.
    """
    order = question.order or (index + 1)
    return f"question-{order}"


def empty_response(question_id: str) -> QuestionResponse:
    return QuestionResponse(question_id=question_id)


class ResponseStore:
    """
    Immutable collection of per-question responses.

    upsert() returns a new store; an entry for a question id is replaced,
    never duplicated.
    """

    def __init__(self, responses: Optional[Dict[str, QuestionResponse]] = None):
        self._responses: Dict[str, QuestionResponse] = dict(responses or {})

    def __len__(self) -> int:
        return len(self._responses)

    def __iter__(self) -> Iterator[QuestionResponse]:
        return iter(self._responses.values())

    def __contains__(self, question_id: str) -> bool:
        return question_id in self._responses

    def get(self, question_id: str) -> Optional[QuestionResponse]:
        return self._responses.get(question_id)

    def get_or_empty(self, question_id: str) -> QuestionResponse:
        return self._responses.get(question_id) or empty_response(question_id)

    def upsert(self, response: QuestionResponse) -> "ResponseStore":
        responses = dict(self._responses)
        responses[response.question_id] = response
        return ResponseStore(responses)

    def snapshot_all(self, template: Template) -> List[QuestionResponse]:
        # One entry per template question, answered or not
        return [
            self.get_or_empty(question_key(question, index))
            for index, question in enumerate(template.questions)
        ]

    def non_empty(self, template: Template) -> List[QuestionResponse]:
        return [r for r in self.snapshot_all(template) if not r.is_empty()]
