# EvaluationBridge.py
"""
Request/response protocol with the evaluator device.

Pipeline
--------
1) Normalize:  trim and lower-case the expression (the device is case-insensitive).
2) Open:       acquire a fresh transport on the configured port and baud rate.
3) Write:      the expression plus a single '\\n'.
4) Read:       up to RESPONSE_BUDGET bytes within the transport timeout.
               A short (or empty) read is the normal end of a reply.
5) Close:      always, once the open succeeded.
6) Classify:   'nan' anywhere in the reply means the device rejected the expression.
7) Format:     integral values without decimals, everything else with six.
               Replies that are not numbers ('ovf', 'inf', ...) pass through as text.

State per call: Idle -> Opening -> Writing -> Reading -> Closing -> Succeeded | Failed
"""
import logging
import re
import sys
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from enum import Enum
from typing import NamedTuple, Optional

from . import error as E
from .Transport import SerialTransport, SerialTimeouts, DEFAULT_BAUDRATE

logger = logging.getLogger(__name__)

RESPONSE_BUDGET = 200  # bytes
LINE_TERMINATOR = "\n"
SENTINEL = "nan"

_SENTINEL_PATTERN = re.compile(re.escape(SENTINEL), re.IGNORECASE)

# Largest magnitude the device can report as a number (IEEE double)
MAX_VALUE = Decimal(sys.float_info.max)


class State(Enum):
    IDLE = "idle"
    OPENING = "opening"
    WRITING = "writing"
    READING = "reading"
    CLOSING = "closing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class NormalizedValue(NamedTuple):
    text: str
    # None when the device sent a non-numeric token that is shown as-is
    value: Optional[Decimal]


def decode_response(raw):
    """Bytes from the device -> text. Anything after a NUL byte is not part of the reply."""
    return raw.split(b"\x00", 1)[0].decode("latin-1")


def format_value(value):
    if value == value.to_integral_value(rounding=ROUND_FLOOR):
        return format(value, ".0f")
    return format(value, ".6f")


def normalize_response(response, expression=None):
    """Turn a raw device reply into a NormalizedValue.

    Raises ExpressionSyntaxError if the reply contains the 'nan' sentinel.
    """
    if SENTINEL in response.lower():
        details = _SENTINEL_PATTERN.sub("", response).strip()
        raise E.ExpressionSyntaxError(E.ERROR_MESSAGES["3000"], expression=expression, details=details)

    final_response = response.strip()
    # Decimal() accepts digit separators, the device never sends them
    if "_" in final_response:
        return NormalizedValue(final_response, None)

    try:
        value = Decimal(final_response)
    except InvalidOperation:
        return NormalizedValue(final_response, None)

    # 'inf' / 'infinity' parse as Decimal but are device sentinels for display,
    # and so is anything a double cannot hold
    if not value.is_finite() or abs(value) > MAX_VALUE:
        return NormalizedValue(final_response, None)

    return NormalizedValue(format_value(value), value)


class EvaluationBridge:
    """Sends one expression per call to the device and returns the normalized answer.

    Holds no state between calls apart from the transport factory and its timeouts.
    """

    def __init__(self, transport_factory=SerialTransport, timeouts=None):
        self.transport_factory = transport_factory
        self.timeouts = timeouts or SerialTimeouts()

    def _enter(self, state, request):
        logger.debug("[%s] %r", state.value, request)

    def evaluate(self, expression, port, baudrate=DEFAULT_BAUDRATE):
        request = expression.strip().lower()
        self._enter(State.IDLE, request)

        transport = self.transport_factory(self.timeouts)

        self._enter(State.OPENING, request)
        try:
            transport.open(port, baudrate)
        except E.ChannelUnavailableError as e:
            # Nothing was opened, nothing to close
            e.expression = request
            self._enter(State.FAILED, request)
            raise

        failure = None
        try:
            self._enter(State.WRITING, request)
            transport.write((request + LINE_TERMINATOR).encode("utf-8"))

            self._enter(State.READING, request)
            raw = transport.read(RESPONSE_BUDGET)
        except E.WriteFailedError as e:
            e.expression = request
            failure = e
        finally:
            self._enter(State.CLOSING, request)
            transport.close()

        if failure is not None:
            self._enter(State.FAILED, request)
            raise failure

        response = decode_response(raw)
        logger.info("Device replied %r to %r", response, request)

        try:
            result = normalize_response(response, expression=request)
        except E.ExpressionSyntaxError:
            self._enter(State.FAILED, request)
            raise

        self._enter(State.SUCCEEDED, request)
        return result
