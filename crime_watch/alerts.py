"""Hand-off of detected anomalies to a notification channel."""

import math
from abc import ABC, abstractmethod
from typing import List, Sequence

from crime_watch.models import Alert
from crime_watch.utils.crime_taxonomy import category_group, category_label
from crime_watch.utils.logger_config import setup_logger

logger = setup_logger(__name__)


def format_alert(alert: Alert) -> str:
    """e.g. 'Shoplifting (Property): +53.2% vs baseline'"""
    if math.isinf(alert.deviation_percent):
        change = 'new activity (zero baseline)'
    else:
        change = f'{alert.deviation_percent:+.1f}% vs baseline'
    return f'{category_label(alert.category)} ({category_group(alert.category)}): {change}'


class AlertSink(ABC):

    @abstractmethod
    def send(self, alerts: Sequence[Alert]) -> None:
        """Deliver a batch of alerts. Delivery semantics are up to the sink."""


class LoggingAlertSink(AlertSink):
    """Writes one warning line per alert to the crime_watch log."""

    def send(self, alerts: Sequence[Alert]) -> None:
        if not alerts:
            logger.info('No categories crossed the threshold')
            return
        for alert in alerts:
            logger.warning(f'ALERT {format_alert(alert)}')


class CollectingAlertSink(AlertSink):
    """Keeps alerts in memory, for callers that want to route them themselves."""

    def __init__(self) -> None:
        self.alerts: List[Alert] = []

    def send(self, alerts: Sequence[Alert]) -> None:
        self.alerts.extend(alerts)
