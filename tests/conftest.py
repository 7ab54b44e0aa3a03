import pytest

from Bifrost import error as E
from Bifrost.Transport import Transport
from Bifrost.EvaluationBridge import EvaluationBridge
from Bifrost.Session import CalculatorSession, Calculator


class FakeTransport(Transport):
    """Records every call instead of talking to a serial port."""

    def __init__(self, response=b"", fail_open=False, fail_write=False, read_error=None):
        self.response = response
        self.fail_open = fail_open
        self.fail_write = fail_write
        self.read_error = read_error
        self.calls = []
        self._open = False

    @property
    def is_open(self):
        return self._open

    def open(self, port, baudrate=9600):
        self.calls.append(("open", port, baudrate))
        if self.fail_open:
            raise E.ChannelUnavailableError(f"{E.ERROR_MESSAGES['6000']}{port}", port=port)
        self._open = True

    def write(self, data):
        self.calls.append(("write", data))
        if self.fail_write:
            raise E.WriteFailedError(E.ERROR_MESSAGES["6001"])
        return len(data)

    def read(self, size):
        self.calls.append(("read", size))
        if self.read_error is not None:
            raise self.read_error
        return self.response[:size]

    def close(self):
        self.calls.append(("close",))
        self._open = False

    @property
    def call_names(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def make_bridge():
    def factory(**kwargs):
        transport = FakeTransport(**kwargs)
        bridge = EvaluationBridge(transport_factory=lambda timeouts: transport)
        return bridge, transport
    return factory


@pytest.fixture
def session():
    return CalculatorSession()


@pytest.fixture
def make_calculator(make_bridge):
    def factory(**kwargs):
        bridge, transport = make_bridge(**kwargs)
        return Calculator(bridge=bridge), transport
    return factory


@pytest.fixture
def fake_transport_class():
    return FakeTransport
