"""
IOBeat - MQTT Sink

Publishes each tick's batch as a single JSON array message to an MQTT broker.
"""

import platform
from typing import Optional, Sequence

import paho.mqtt.client as mqtt
import structlog

from ..diskstats import DeviceIOStats
from ..exceptions import SinkFailure
from .base import JSONSink

logger = structlog.get_logger(__name__)

DEFAULT_TOPIC = "iobeat/{hostname}/iostats"


class MQTTSink(JSONSink):
    """MQTT output using paho's background network loop."""

    name = "mqtt"

    def __init__(
        self,
        host: str = "localhost",
        port: int = 1883,
        topic: Optional[str] = None,
        qos: int = 0,
        username: Optional[str] = None,
        password: Optional[str] = None,
        password_file: Optional[str] = None,
        client_id: str = "iobeat",
        keepalive: int = 60,
        hostname: Optional[str] = None,
    ):
        super().__init__(hostname)
        self._host = host
        self._port = port
        self._qos = qos
        self._username = username
        self._password = self._load_password(password, password_file)
        self._client_id = client_id
        self._keepalive = keepalive
        self.topic = (topic or DEFAULT_TOPIC).format(hostname=hostname or platform.node())

        self._client: Optional[mqtt.Client] = None
        self._connected = False

    @staticmethod
    def _load_password(password: Optional[str], password_file: Optional[str]) -> Optional[str]:
        """Load MQTT password from file or config."""
        if password_file:
            try:
                with open(password_file, "r") as f:
                    return f.read().strip()
            except FileNotFoundError:
                logger.warning("MQTT password file not found", path=password_file)
        return password

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def start(self) -> None:
        """Start MQTT connection."""
        self._client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=self._client_id)
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect

        if self._username:
            self._client.username_pw_set(self._username, self._password)

        self._client.connect_async(self._host, self._port, keepalive=self._keepalive)
        self._client.loop_start()
        logger.info("MQTT sink starting", host=self._host, port=self._port, topic=self.topic)

    async def close(self) -> None:
        """Stop MQTT connection."""
        if self._client:
            self._client.loop_stop()
            self._client.disconnect()
            self._client = None
        self._connected = False
        logger.info("MQTT sink stopped")

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        if reason_code.is_failure:
            logger.error("MQTT connection failed", reason=str(reason_code))
            return
        self._connected = True
        logger.info("MQTT connected", host=self._host)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties):
        self._connected = False
        if reason_code.is_failure:
            logger.warning("MQTT disconnected unexpectedly", reason=str(reason_code))
        else:
            logger.info("MQTT disconnected")

    async def publish(self, records: Sequence[DeviceIOStats]) -> None:
        if not self._connected or not self._client:
            raise SinkFailure("MQTT not connected")

        result = self._client.publish(self.topic, self.encode(records), qos=self._qos)
        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            raise SinkFailure(f"MQTT publish failed: {mqtt.error_string(result.rc)}")
