"""
Role based redaction of conversation data.

viewer and member never receive what end users typed: user transcript
messages and conversation previews are masked, raw analysis payloads are
dropped. Applied at the API boundary before data is serialised.
"""

import json
import re
from typing import Any, Dict, List, Optional, Union

from notsoai.core.session import Role

_REDACTION_POLICY = {
    Role.OWNER: False,
    Role.ADMIN: False,
    Role.MEMBER: True,
    Role.VIEWER: True,
}

_unmapped = set(Role) - set(_REDACTION_POLICY)
if _unmapped:
    raise RuntimeError(
        f"Redaction policy is missing roles: {sorted(r.value for r in _unmapped)}"
    )

_NON_WHITESPACE = re.compile(r"\S")


def should_redact_role(role: Union[Role, str, None]) -> bool:
    if role is None or role == "":
        return False
    try:
        return _REDACTION_POLICY[Role(role)]
    except ValueError:
        # not a known role: treat as least privileged
        return True


def mask_text(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    return _NON_WHITESPACE.sub("*", value)


def _is_user_author(entry: Dict[str, Any]) -> bool:
    return str(entry.get("author") or "").lower() == "user"


def _redact_transcript_entry(entry: Any) -> Any:
    if not isinstance(entry, dict) or not _is_user_author(entry):
        return entry
    message = entry.get("message")
    if not isinstance(message, str):
        return entry
    return {**entry, "message": mask_text(message)}


def redact_transcript(transcript: Optional[List[Any]]) -> Optional[List[Any]]:
    if transcript is None:
        return None
    return [_redact_transcript_entry(entry) for entry in transcript]


def redact_transcript_text(value: Optional[str]) -> Optional[str]:
    """Transcript stored as JSON text. Anything that is not a JSON list is masked whole."""
    if not value:
        return value
    try:
        parsed = json.loads(value)
    except ValueError:
        return mask_text(value)

    if isinstance(parsed, list):
        return json.dumps(redact_transcript(parsed))
    return mask_text(value)


def redact_chat_session(session: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if session is None:
        return None

    redacted = dict(session)

    if "full_transcript" in session:
        transcript = session["full_transcript"]
        if isinstance(transcript, str):
            redacted["full_transcript"] = redact_transcript_text(transcript)
        elif isinstance(transcript, list):
            redacted["full_transcript"] = redact_transcript(transcript)

    analysis = session.get("analysis")
    if isinstance(analysis, dict):
        redacted["analysis"] = {**analysis, "raw_response": None}

    return redacted


def redact_chat_sessions(sessions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [redact_chat_session(session) for session in sessions]


def redact_conversations(conversations: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    redacted = []
    for conversation in conversations:
        conversation = dict(conversation)
        if "preview" in conversation:
            conversation["preview"] = mask_text(conversation["preview"])
        redacted.append(conversation)
    return redacted


def redact_messages(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    redacted = []
    for message in messages:
        if message.get("sender") == "user" and isinstance(message.get("content"), str):
            message = {**message, "content": mask_text(message["content"])}
        redacted.append(message)
    return redacted


def _redact_questions(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{**row, "question": mask_text(row.get("question"))} for row in rows]


def redact_report(report: Dict[str, Any]) -> Dict[str, Any]:
    # visitor questions are user-authored text
    redacted = dict(report)
    for key in ("questions", "unansweredQuestions"):
        if key in report:
            redacted[key] = _redact_questions(report[key])
    return redacted
