# error.py
"""
Error types and error code tables for the Bifrost calculator.

Every failure that can reach the UI carries a four digit code. The UI looks the
code up in ERROR_MESSAGES to build its error dialog.
"""


class BifrostError(Exception):
    def __init__(self, message, code="9999", expression=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.expression = expression


class EvalError(BifrostError):
    """Base class for everything EvaluationBridge can raise."""
    pass


class ChannelUnavailableError(EvalError):
    def __init__(self, message, code="6000", expression=None, port=None):
        super().__init__(message, code=code, expression=expression)
        self.port = port


class WriteFailedError(EvalError):
    def __init__(self, message, code="6001", expression=None):
        super().__init__(message, code=code, expression=expression)


class ExpressionSyntaxError(EvalError):
    """The device answered with the 'nan' sentinel.

    `details` is the device response with the sentinel removed, for display.
    """

    def __init__(self, message, code="3000", expression=None, details=""):
        super().__init__(message, code=code, expression=expression)
        self.details = details


class EvaluationBusyError(EvalError):
    def __init__(self, message, code="4002", expression=None):
        super().__init__(message, code=code, expression=expression)


Error_Dictionary = {

    "1": "Missing Files",
    "3": "Device Error",
    "4": "UI Error",
    "5": "Configuration Error",
    "6": "Communication Error",
    "9": "Runtime Error"

}

# Error Messages are structured in:
# 1. Digit: Main Error
# 2. Digit: Specification
# 3. and 4. Digit: Error Number


ERROR_MESSAGES = {
    "1000": "Required file missing: ",  # + file name

    "3000": "SYNTAX ERROR: The microcontroller couldn't manage that expression.",

    "4002": "Calculation already Running!",
    "4101": "Caret less than 0: ",  # + requested position
    "4102": "History entry does not exist: ",  # + index

    "5001": "Invalid baud rate, falling back to 9600: ",  # + given value
    "5002": "Settings could not be saved.",

    "6000": "Failed to open serial port: ",  # + port
    "6001": "Failed to write to serial port.",
    "6002": "Failed to read from serial port, treating response as empty.",

    "9999": "Unexpected Error: "  # + error
}


def describe(code):
    """Return the category and message for an error code."""
    category = Error_Dictionary.get(str(code)[:1], "Unknown")
    return category, ERROR_MESSAGES.get(str(code), "Unknown error")
