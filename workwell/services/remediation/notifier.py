"""Notification fan-out for newly identified psychosocial risks.

Two steps: resolve the users holding a role in the tenant, then send one
message per recipient. Delivery goes to a Kinesis stream consumed by the
platform's notification service.

Failure Handling:
    - Dispatch failures never raise to the caller
    - Persisted risks and measures are never rolled back because of them
    - Failures are logged at ERROR level for alerting
"""
import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

import boto3

from workwell.shared.database import TenantDirectory
from workwell.shared.models import TenantRole, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """Immutable in-app notification for one recipient."""
    event_id: str
    tenant_id: str
    recipient_id: str
    role_group: TenantRole
    title: str
    message: str
    link: str
    event_type: str = "wellbeing.risk.identified"
    timestamp: datetime = field(default_factory=utc_now)

    def to_kinesis_payload(self) -> dict:
        """Convert to Kinesis record payload."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "timestamp": self.timestamp.isoformat(),
            "source": "remediation-service",
            "data": {
                "tenant_id": self.tenant_id,
                "recipient_id": self.recipient_id,
                "role_group": self.role_group.value,
                "title": self.title,
                "message": self.message,
                "link": self.link,
            }
        }


class NotificationSink(ABC):
    """Delivers a single notification. Returns False instead of raising."""

    @abstractmethod
    def send(self, notification: Notification) -> bool:
        pass


class KinesisNotificationPublisher(NotificationSink):
    """Publishes notifications to a Kinesis stream."""

    def __init__(
        self,
        stream_name: str = "workwell-notifications",
        enabled: bool = True,
        region: Optional[str] = None,
    ):
        """Initialize publisher.

        Args:
            stream_name: Kinesis stream name
            enabled: Whether publishing is enabled (disable for local dev)
            region: AWS region (defaults to AWS_REGION env var)
        """
        self.stream_name = stream_name
        self.enabled = enabled
        self.region = region or os.getenv("AWS_REGION", "eu-north-1")
        self._kinesis_client = None

        logger.info(
            "NOTIFICATION_PUBLISHER_INITIALIZED",
            extra={"stream_name": stream_name, "enabled": enabled, "region": self.region}
        )

    @classmethod
    def from_env(cls) -> "KinesisNotificationPublisher":
        return cls(
            stream_name=os.getenv("NOTIFICATION_STREAM_NAME", "workwell-notifications"),
            enabled=os.getenv("NOTIFICATION_PUBLISHING_ENABLED", "true").lower() == "true",
        )

    @property
    def kinesis_client(self):
        """Lazy initialization of Kinesis client."""
        if self._kinesis_client is None and self.enabled:
            try:
                self._kinesis_client = boto3.client("kinesis", region_name=self.region)
            except Exception as e:
                logger.error("KINESIS_CLIENT_INIT_FAILED", extra={"error": str(e)})
        return self._kinesis_client

    def send(self, notification: Notification) -> bool:
        if not self.enabled:
            logger.info(
                "NOTIFICATION_PUBLISH_SKIPPED",
                extra={"event_id": notification.event_id, "reason": "disabled"}
            )
            return False

        payload = notification.to_kinesis_payload()

        try:
            if self.kinesis_client is None:
                logger.warning(
                    "NOTIFICATION_FALLBACK_LOG",
                    extra={"event_id": notification.event_id, "payload": json.dumps(payload)}
                )
                return False

            response = self.kinesis_client.put_record(
                StreamName=self.stream_name,
                Data=json.dumps(payload),
                PartitionKey=notification.tenant_id,
            )

            logger.info(
                "NOTIFICATION_PUBLISHED",
                extra={
                    "event_id": notification.event_id,
                    "tenant_id": notification.tenant_id,
                    "role_group": notification.role_group.value,
                    "shard_id": response.get("ShardId"),
                }
            )
            return True

        except Exception as e:
            logger.error(
                "NOTIFICATION_PUBLISH_FAILED",
                extra={
                    "event_id": notification.event_id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            return False


class NotificationDispatcher:
    """Resolves role groups to recipients and sends to each of them."""

    def __init__(self, directory: TenantDirectory, sink: NotificationSink):
        self.directory = directory
        self.sink = sink

    def resolve_recipients(self, tenant_id: str, role_group: TenantRole) -> List[str]:
        try:
            return self.directory.find_users_with_role(tenant_id, role_group)
        except Exception as e:
            logger.error(
                "NOTIFICATION_RECIPIENTS_LOOKUP_FAILED",
                extra={
                    "tenant_id": tenant_id,
                    "role_group": role_group.value,
                    "error": str(e),
                }
            )
            return []

    def notify_role(
        self,
        tenant_id: str,
        role_group: TenantRole,
        title: str,
        message: str,
        link: str,
    ) -> int:
        """Send to every member of a role group.

        Returns:
            Number of notifications delivered
        """
        delivered = 0
        for recipient_id in self.resolve_recipients(tenant_id, role_group):
            notification = Notification(
                event_id=f"evt_{uuid.uuid4().hex[:12]}",
                tenant_id=tenant_id,
                recipient_id=recipient_id,
                role_group=role_group,
                title=title,
                message=message,
                link=link,
            )
            try:
                if self.sink.send(notification):
                    delivered += 1
            except Exception as e:
                logger.error(
                    "NOTIFICATION_DISPATCH_FAILED",
                    extra={
                        "event_id": notification.event_id,
                        "tenant_id": tenant_id,
                        "error": str(e),
                    }
                )
        return delivered

    def notify_roles(
        self,
        tenant_id: str,
        role_groups: Sequence[TenantRole],
        title: str,
        message: str,
        link: str,
    ) -> int:
        return sum(
            self.notify_role(tenant_id, role_group, title, message, link)
            for role_group in role_groups
        )
