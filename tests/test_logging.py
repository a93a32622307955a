import logging

import structlog

from protools_chat.logging import QUIET_LOGGERS, configure_logging, get_logger


def test_loggers_carry_their_module_name():
    configure_logging("INFO")

    processors = structlog.get_config()["processors"]

    assert structlog.stdlib.add_logger_name in processors
    assert isinstance(processors[-1], structlog.processors.JSONRenderer)


def test_http_client_chatter_is_quieted():
    configure_logging("DEBUG")

    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


def test_get_logger_binds_the_given_name():
    configure_logging("INFO")
    logger = get_logger("protools_chat.dispatcher")

    assert logger.bind().name == "protools_chat.dispatcher"
