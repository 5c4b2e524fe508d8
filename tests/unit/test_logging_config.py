import logging
import logging.handlers
import pytest

from transport_admin.core import logging_config
from transport_admin.core.logging_config import setup_logging

WORKFLOW_LOGGERS = ("transport_admin.services.session", "transport_admin.services.precheck")


@pytest.fixture
def restore_logging():
    names = ("",) + WORKFLOW_LOGGERS
    saved = {
        name: (logging.getLogger(name).handlers[:], logging.getLogger(name).level, logging.getLogger(name).propagate)
        for name in names
    }
    yield
    for name, (handlers, level, propagate) in saved.items():
        log = logging.getLogger(name)
        for handler in log.handlers:
            if handler not in handlers:
                handler.close()
        log.handlers = handlers
        log.setLevel(level)
        log.propagate = propagate


class TestSetupLogging:
    def test_workflow_loggers_write_to_workflow_file(self, tmp_path, monkeypatch, restore_logging):
        monkeypatch.setattr(logging_config.settings, "LOG_DIR", str(tmp_path))

        setup_logging()

        for name in WORKFLOW_LOGGERS:
            files = [
                h.baseFilename for h in logging.getLogger(name).handlers
                if isinstance(h, logging.handlers.RotatingFileHandler)
            ]
            assert any(f.startswith(str(tmp_path / "workflow")) for f in files)

        logging.getLogger("transport_admin.services.session.workflow_registry").info("workflow swept")
        written = "".join(p.read_text() for p in (tmp_path / "workflow").glob("*.log"))
        assert "workflow swept" in written
