"""AWS Lambda entry point for SQS batches of S3 event notifications."""

from typing import Any, Dict, List, Optional

from .core import BatchIntakeLoop, ChangeBatchMessage, get_logger
from .core.factories import ProcessingPipelineFactory

_batch_loop: Optional[BatchIntakeLoop] = None


def get_batch_loop() -> BatchIntakeLoop:
    """Build the intake loop once per process; settings are read at that point."""
    global _batch_loop
    if _batch_loop is None:
        _batch_loop = ProcessingPipelineFactory.create_pipeline()
    return _batch_loop


def messages_from_event(event: Dict[str, Any]) -> List[ChangeBatchMessage]:
    """Convert the SQS records of a Lambda event into batch messages."""
    logger = get_logger("image-variants.handler")
    messages = []
    for record in event.get("Records", []) or []:
        message_id = record.get("messageId")
        if not message_id:
            # Without an identifier the failure could not be reported back
            logger.error(f"Skipping SQS record without messageId: {record!r:.200}")
            continue
        messages.append(
            ChangeBatchMessage(message_id=message_id, body=record.get("body") or "")
        )
    return messages


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, List[Dict[str, str]]]:
    """
    Process an SQS event and report partial batch failures.

    Returns:
        ``{"batchItemFailures": [{"itemIdentifier": <messageId>}, ...]}``
    """
    messages = messages_from_event(event)
    result = get_batch_loop().process_batch(messages)
    return result.to_batch_response()
