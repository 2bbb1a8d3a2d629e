import logging
import os
import tempfile

from romtracker.monitor import LOGGER_NAME, log_event, monitor_action, setup_monitoring


def test_monitor_writes_event_to_file():
    with tempfile.TemporaryDirectory() as tmp:
        logfile = os.path.join(tmp, 'events.log')

        logger = setup_monitoring(log_file=logfile, echo=False)
        log_event('test.event', 'monitor alive')
        monitor_action('button pressed')
        logging.getLogger('romtracker.orchestrator').info('child logger reaches the file')

        for h in logger.handlers:
            h.flush()

        with open(logfile, 'r', encoding='utf-8') as f:
            content = f.read()

        # release the file before the directory goes away
        setup_monitoring(log_file=None, echo=False)

    assert logger.name == LOGGER_NAME
    assert 'test.event: monitor alive' in content
    assert 'action: button pressed' in content
    assert 'child logger reaches the file' in content
    assert ' | INFO | ' in content


def test_setup_monitoring_replaces_handlers():
    logger = setup_monitoring(log_file=None, echo=True)
    assert len(logger.handlers) == 1
    logger = setup_monitoring(log_file=None, echo=False)
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.NullHandler)
