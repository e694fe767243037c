"""
HTTP Request Worker

Consumes queue deliveries that each describe a deferred HTTP request, issues
the POST, and classifies the outcome as accepted, dropped or retry-eligible
for the queue's acknowledgement layer.
"""

__version__ = '0.1.0'

# Re-export key classes for convenience
from .models import Delivery, Disposition, MessageFields, RequestDescriptor
from .parser import parse_delivery
from .dispatcher import classify_status, post_request
from .outcome import OutcomeQueue, OutcomeSink
from .worker import make_outcome_queue, process_delivery
from .config import WorkerConfig, get_config
from .logging import (
    configure_logging,
    get_logger,
    logging_context,
)
from .errors import (
    HttpWorkerError,
    ParseError,
    DecodeError,
    ValidationError,
    DispatchError,
    ConstructionError,
    TransportError,
    StatusError,
    ClientStatusError,
    ServerStatusError,
    OutcomeAlreadyRecordedError,
)

__all__ = [
    # Version
    '__version__',
    # Models
    'Delivery',
    'Disposition',
    'MessageFields',
    'RequestDescriptor',
    # Core
    'parse_delivery',
    'post_request',
    'classify_status',
    'OutcomeQueue',
    'OutcomeSink',
    'process_delivery',
    'make_outcome_queue',
    # Config
    'WorkerConfig',
    'get_config',
    # Logging
    'configure_logging',
    'get_logger',
    'logging_context',
    # Errors
    'HttpWorkerError',
    'ParseError',
    'DecodeError',
    'ValidationError',
    'DispatchError',
    'ConstructionError',
    'TransportError',
    'StatusError',
    'ClientStatusError',
    'ServerStatusError',
    'OutcomeAlreadyRecordedError',
]
