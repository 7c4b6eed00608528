"""Reply interpretation for the image-request sentinel.

The persona instruction asks the model to answer image requests with
``GENERATING_IMAGE: <prompt>``. Matching is an exact, case-sensitive
substring test with no escaping.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from .config import EMPTY_REPLY_FALLBACK, IMAGE_SENTINEL


class ReplyKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class InterpretedReply(BaseModel):
    """Branch decision for one model reply.

    For TEXT replies ``content`` is what gets stored; for IMAGE replies
    ``image_prompt`` is what gets sent to the image model.
    """

    model_config = ConfigDict(frozen=True)

    kind: ReplyKind
    content: str = ""
    image_prompt: str | None = None


def interpret_reply(text: str | None) -> InterpretedReply:
    """Decide between a text reply and an image request.

    Args:
        text: Raw text returned by the text model

    Returns:
        An IMAGE reply carrying the trimmed segment after the first marker
        (anything before it is dropped), otherwise a TEXT reply carrying the
        text verbatim, or the fallback line when the text is empty
    """
    if text and IMAGE_SENTINEL in text:
        prompt = text.split(IMAGE_SENTINEL)[1].strip()
        return InterpretedReply(kind=ReplyKind.IMAGE, image_prompt=prompt)

    return InterpretedReply(kind=ReplyKind.TEXT, content=text or EMPTY_REPLY_FALLBACK)
