"""
Order Consumer - SQS triggered Lambda running the payment pipeline.

Records are processed one by one with Powertools batch processing. Failed
records are reported back as partial batch failures so SQS redelivers only
those; successful records are deleted by the event source mapping.
"""

from typing import Any, Dict

from aws_lambda_powertools.utilities.batch import BatchProcessor, EventType, process_partial_response
from aws_lambda_powertools.utilities.data_classes.sqs_event import SQSRecord
from aws_lambda_powertools.utilities.typing import LambdaContext

from cloudmart.handlers.utils.dependencies import get_order_processor
from cloudmart.handlers.utils.observability import logger, metrics, tracer

processor = BatchProcessor(event_type=EventType.SQS)


@tracer.capture_method
def record_handler(record: SQSRecord) -> None:
    logger.debug("Received order message", extra={"message_id": record.message_id})
    get_order_processor().process_message(record.body, message_id=record.message_id)


@logger.inject_lambda_context(clear_state=True)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return process_partial_response(
        event=event,
        record_handler=record_handler,
        processor=processor,
        context=context,
    )
