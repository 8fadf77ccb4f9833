"""
CloudFormation notification decoding.

CloudFormation publishes stack events to SNS as newline separated
Key='Value' pairs rather than JSON. Values can span lines (ResourceProperties
carries a JSON document), so a line only starts a new field once the previous
value has been closed by its trailing quote.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from app.schemas.onboarding import StackStatusEvent
from app.shared.core.exceptions import DecodeError

_FIELD_START = re.compile(r"^(?P<key>[A-Za-z][A-Za-z0-9]*)='(?P<value>.*)$")

REQUIRED_FIELDS = ("StackId", "StackName", "ResourceType", "ResourceStatus")


def parse_notification_fields(message: str) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    key: Optional[str] = None
    value: List[str] = []

    def is_open() -> bool:
        return key is not None and not "\n".join(value).endswith("'")

    for line in message.splitlines():
        if is_open():
            value.append(line)
            continue
        if key is not None:
            fields[key] = "\n".join(value)[:-1]
            key, value = None, []
        if not line.strip():
            continue
        match = _FIELD_START.match(line)
        if match is None:
            raise DecodeError(
                "Malformed CloudFormation notification line",
                details={"line": line[:200]},
            )
        key, value = match.group("key"), [match.group("value")]

    if key is not None:
        if is_open():
            raise DecodeError(
                "Unterminated value in CloudFormation notification",
                details={"field": key},
            )
        fields[key] = "\n".join(value)[:-1]
    return fields


def _optional(fields: Dict[str, str], key: str) -> Optional[str]:
    value = fields.get(key)
    if value is None or value in ("", "null"):
        return None
    return value


def _parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    if raw is None:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as e:
        raise DecodeError(
            "Invalid Timestamp in CloudFormation notification",
            details={"timestamp": raw},
        ) from e


def decode_stack_event(raw: Union[str, bytes]) -> StackStatusEvent:
    """Decode one CloudFormation SNS message into a StackStatusEvent."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError("Notification payload is not valid UTF-8") from e
    if not isinstance(raw, str) or not raw.strip():
        raise DecodeError("Empty notification payload")

    fields = parse_notification_fields(raw)
    missing = [name for name in REQUIRED_FIELDS if not fields.get(name)]
    if missing:
        raise DecodeError(
            f"CloudFormation notification missing required fields: {', '.join(missing)}",
            details={"missing": missing},
        )

    try:
        return StackStatusEvent(
            stack_id=fields["StackId"],
            stack_name=fields["StackName"],
            resource_type=fields["ResourceType"],
            resource_status=fields["ResourceStatus"],
            timestamp=_parse_timestamp(_optional(fields, "Timestamp")),
            logical_resource_id=_optional(fields, "LogicalResourceId"),
            physical_resource_id=_optional(fields, "PhysicalResourceId"),
            status_reason=_optional(fields, "ResourceStatusReason"),
        )
    except ValidationError as e:
        raise DecodeError("Invalid CloudFormation notification", details={"errors": e.errors()}) from e


def sns_messages(event: Any) -> List[str]:
    """
    Pull the message bodies out of an SNS-triggered Lambda event, in delivery order.
    """
    records = event.get("Records") if isinstance(event, dict) else None
    if not isinstance(records, list) or not records:
        raise DecodeError("SNS event contains no Records")

    messages: List[str] = []
    for index, record in enumerate(records):
        sns = record.get("Sns") if isinstance(record, dict) else None
        message = sns.get("Message") if isinstance(sns, dict) else None
        if not isinstance(message, str):
            raise DecodeError("SNS record has no Message", details={"record_index": index})
        messages.append(message)
    return messages
