import io
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from pizza_order_client.infrastructure.logging_config import configure_logging, parse_level


@pytest.mark.parametrize("name,level", [
    ("Information", logging.INFO),
    ("Trace", logging.DEBUG),
    ("warning", logging.WARNING),
    ("Error", logging.ERROR),
    ("bogus", logging.WARNING),
    (None, logging.WARNING),
])
def test_parse_level(name, level):
    assert parse_level(name) == level


def test_configure_logging_is_idempotent_and_writes_to_console():
    buffer = io.StringIO()
    configure_logging("Information")
    configure_logging("Information", console=Console(file=buffer, width=200))

    package_logger = logging.getLogger("pizza_order_client")
    rich_handlers = [h for h in package_logger.handlers if isinstance(h, RichHandler)]
    assert len(rich_handlers) == 1
    assert package_logger.level == logging.INFO

    logging.getLogger("pizza_order_client.infrastructure.tools").info("Registered 3 tools")
    assert "Registered 3 tools" in buffer.getvalue()

    configure_logging("None", console=Console(file=io.StringIO()))
    assert not package_logger.isEnabledFor(logging.CRITICAL)
