"""Structured logging for the function.

The Powertools logger serves only as a JSON formatter and sink. None of its
Lambda specific features are used.
"""

import logging
from typing import Optional

from aibs_informatics_core.utils.logging import get_all_handlers
from aws_lambda_powertools.logging import Logger

from oci_backup_replicator.common.base import HandlerMixins

SERVICE_NAME = "oci-backup-replicator"


class LoggingMixins(HandlerMixins):
    """Gives a component a logger that its owner can replace.

    A handler builds one logger and assigns it to the resolver, the dispatcher
    and the executors, so every record of an invocation carries the same keys.
    Components used on their own create a logger named after their class.
    """

    @property
    def log(self) -> Logger:
        return self.logger

    @log.setter
    def log(self, value: Logger):
        self.logger = value

    @property
    def logger(self) -> Logger:
        try:
            return self._logger
        except AttributeError:
            self.logger = self.get_logger(self.service_name())
        return self.logger

    @logger.setter
    def logger(self, value: Logger):
        self._logger = value

    @classmethod
    def get_logger(cls, service: Optional[str] = None) -> Logger:
        return get_service_logger(service=service)

    def add_logger_to_root(self):
        """Route records of other libraries (the ``oci`` SDK) through this logger's handler."""
        add_handler_to_logger(self.logger)


def get_service_logger(service: Optional[str] = None) -> Logger:
    """Powertools logger for ``service``, or for the function when no service is given."""
    return Logger(service=service or SERVICE_NAME)


def add_handler_to_logger(source_logger: Logger):
    """Attach the handler of ``source_logger`` to the root logger once.

    The root level is lowered to the source logger's level when that is more verbose.
    """
    handler = source_logger.registered_handler
    root_logger = logging.getLogger()
    root_logger.setLevel(min(source_logger.log_level, root_logger.getEffectiveLevel()))

    if handler not in get_all_handlers(root_logger):
        root_logger.addHandler(handler)
