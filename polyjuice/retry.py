import logging
import time
from dataclasses import dataclass

from .config import HOME_ATTEMPTS, HOME_INTERVAL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = HOME_ATTEMPTS
    interval: float = HOME_INTERVAL

    def wait_for(self, predicate, *, description="condition", sleep=time.sleep):
        attempts = 0
        while attempts < self.attempts:
            if predicate():
                return True
            attempts += 1
            if attempts < self.attempts:
                sleep(self.interval)
        logger.warning(f"gave up waiting for {description} after {self.attempts} attempts")
        return False
