"""
Tests for the fault taxonomy and serve result types.
"""

import pytest

from assets_manager.faults import (
    CacheWriteFault,
    ConfigInvalidFault,
    Escalate,
    Fault,
    FaultDomain,
    FilesystemFault,
    ResponseStreamError,
    Served,
    Severity,
)


class TestFault:

    def test_requires_code_message_domain(self):
        with pytest.raises(TypeError):
            Fault(code="X")

    def test_domain_defaults(self):
        fault = Fault(code="X", message="boom", domain=FaultDomain.IO)
        assert fault.severity == Severity.WARN
        assert fault.retryable is True
        assert str(fault) == "[X] boom"

    def test_to_dict(self):
        fault = ConfigInvalidFault("assets.yaml", "bad indent")
        data = fault.to_dict()
        assert data["code"] == "CONFIG_INVALID"
        assert data["domain"] == "config"
        assert data["severity"] == "fatal"
        assert data["metadata"] == {"source": "assets.yaml", "reason": "bad indent"}


class TestConcreteFaults:

    def test_cache_write_fault(self):
        fault = CacheWriteFault("/public/a.css", "disk full")
        assert isinstance(fault, FilesystemFault)
        assert fault.code == "CACHE_WRITE_FAILED"
        assert fault.domain == FaultDomain.IO
        assert "disk full" in fault.message
        assert fault.metadata["operation"] == "write"

    def test_response_stream_error_class_defaults(self):
        fault = ResponseStreamError()
        assert fault.code == "RESPONSE_STREAM_ERROR"
        assert fault.domain == FaultDomain.RESPONSE
        assert fault.severity == Severity.ERROR
        assert fault.message == "Response body is not writable"


class TestResults:

    def test_escalate_default_has_no_fault(self):
        assert Escalate().fault is None

    def test_served_carries_response(self):
        marker = object()
        assert Served(marker).response is marker
