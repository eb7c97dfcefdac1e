"""Google Forms API client."""
import logging
from dataclasses import dataclass, field
from functools import cached_property

from google.oauth2.credentials import Credentials

from event_manager.google.client import build_service, upstream_call

logger = logging.getLogger(__name__)


@dataclass
class Question:
    """A form question. A question with ``options`` is a single-choice radio."""

    title: str
    required: bool = True
    paragraph: bool = False
    options: list[str] = field(default_factory=list)


@dataclass
class FormHandle:
    form_id: str
    url: str


def public_form_url(form_id: str) -> str:
    return f"https://docs.google.com/forms/d/{form_id}/viewform"


def _question_item(question: Question) -> dict:
    if question.options:
        body = {
            "choiceQuestion": {
                "type": "RADIO",
                "options": [{"value": option} for option in question.options],
            }
        }
    else:
        body = {"textQuestion": {"paragraph": question.paragraph}}
    return {
        "title": question.title,
        "questionItem": {"question": {"required": question.required, **body}},
    }


class FormsBackend:
    """Form creation on behalf of one organizer."""

    def __init__(self, credentials: Credentials):
        self.credentials = credentials

    @cached_property
    def service(self):
        return build_service("forms", "v1", self.credentials)

    def create_form(self, title: str, description: str, questions: list[Question]) -> FormHandle:
        """
        Create a form with a description and the given questions, in order.

        The Forms API only accepts a title on creation; description and
        items are added with a single batchUpdate.
        """
        requests = [
            {
                "updateFormInfo": {
                    "info": {"title": title, "description": description},
                    "updateMask": "title,description",
                }
            }
        ]
        for index, question in enumerate(questions):
            requests.append(
                {
                    "createItem": {
                        "item": _question_item(question),
                        "location": {"index": index},
                    }
                }
            )

        with upstream_call("create attendance form"):
            form = (
                self.service.forms()
                .create(body={"info": {"title": title, "documentTitle": title}})
                .execute()
            )
            form_id = form["formId"]
            self.service.forms().batchUpdate(formId=form_id, body={"requests": requests}).execute()

        url = form.get("responderUri") or public_form_url(form_id)
        logger.info(f"Created form {form_id}: {title}")
        return FormHandle(form_id=form_id, url=url)
