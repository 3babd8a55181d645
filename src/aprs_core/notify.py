# File: src/aprs_core/notify.py
"""
消息通知接收端 (Notification Sinks)

Core 在收到发给本地呼号的消息后，以 (from_call, text) 调用通知接收端。
接收端返回 False 或抛出异常时，Core 回复 rej；否则回复 ack。
实际的消息通道 (如 MQTT) 由上层注入，本库不直接依赖。

命令行入口只使用 LogNotifier。需要推送到显示设备时，由调用方自行构造
DisplayNotifier 并传给 AprsIsClient，例如:

    notifier = DisplayNotifier(mqtt_client.publish, "public/esp32_test/0/in")
    client = AprsIsClient(config, message_handler=notifier)
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

# 定义通知接收端类型别名：支持同步或异步函数
MessageHandler = Callable[[str, str], Any | Awaitable[Any]]

# 发布函数：publish(topic, payload)
PublishFunc = Callable[[str, str], Awaitable[Any]]


class LogNotifier:
    """仅记录日志的通知接收端，总是成功。"""

    def __call__(self, from_call: str, text: str) -> bool:
        logger.info(f"[{from_call}] {text}")
        return True


def build_display_payloads(from_call: str, text: str) -> list[str]:
    """构建 OLED 显示设备的指令序列：清屏、发送方、正文。"""
    return [
        "(oled:clear)",
        f"(oled:text 0 30 {from_call}:)",
        f"(oled:text 0 20 {text})",
    ]


class DisplayNotifier:
    """将消息转发到显示设备的通知接收端。

    每条消息依次发布三条显示指令到同一主题。任一发布失败都会向上抛出，
    由 Core 转换为 rej 应答。
    """

    def __init__(self, publish: PublishFunc, topic: str) -> None:
        """初始化显示通知接收端。

        Args:
            publish: 异步发布函数，签名为 publish(topic, payload)。
            topic: 显示设备订阅的主题。
        """
        self.publish = publish
        self.topic = topic

    async def __call__(self, from_call: str, text: str) -> bool:
        for payload in build_display_payloads(from_call, text):
            await self.publish(self.topic, payload)
        logger.debug(f"已推送到显示设备: {self.topic}")
        return True
